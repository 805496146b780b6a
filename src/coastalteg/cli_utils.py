"""Shared CLI helpers to avoid circular imports."""
from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import yaml

from coastalteg.core.config import (
    ConfigError,
    DEFAULT_CONSTANTS,
    SimulationConfig,
    SimulationConstants,
    SweepSpec,
    _load_raw,
    load_config,
)
from coastalteg.core.models import SimulationInputs


def config_to_dict(
    inputs: SimulationInputs,
    constants: Optional[SimulationConstants] = None,
    sweep: Optional[SweepSpec] = None,
) -> dict:
    data: dict[str, Any] = {"inputs": inputs.to_dict()}
    if constants is not None:
        data["constants"] = asdict(constants)
    if sweep is not None:
        data["sweep"] = asdict(sweep)
    return data


def write_config(
    path: Path,
    inputs: SimulationInputs,
    constants: Optional[SimulationConstants] = None,
    sweep: Optional[SweepSpec] = None,
) -> None:
    """Persist inputs while preserving any unrelated keys already in the file."""

    data = config_to_dict(inputs, constants, sweep)
    base: dict[str, Any] = {}
    if path.exists():
        try:
            raw = _load_raw(path)
            if isinstance(raw, dict):
                base = raw
        except (ConfigError, ValueError, yaml.YAMLError):
            base = {}
    base.update(data)

    if path.suffix.lower() in {".yaml", ".yml", ""}:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(base, sort_keys=False))
    elif path.suffix.lower() == ".json":
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(base, indent=2, sort_keys=False))
    else:
        raise ConfigError(f"Unsupported config extension: {path.suffix}")


def load_existing(path: Optional[Path]) -> SimulationConfig:
    """Config at ``path`` or the defaults when no file is given or present."""
    if path is None or not path.exists():
        return SimulationConfig(inputs=SimulationInputs(), constants=DEFAULT_CONSTANTS)
    return load_config(path)


__all__ = ["config_to_dict", "write_config", "load_existing"]
