"""Configuration loader and simulation-wide constants.

Supports YAML and JSON files with an ``inputs`` mapping, an optional
``constants`` mapping overriding :class:`SimulationConstants` and an optional
``sweep`` mapping used by the CLI.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import yaml
except ModuleNotFoundError as exc:  # pragma: no cover - defensive import
    raise ImportError("PyYAML is required to load YAML configs") from exc

from .models import SimulationInputs, ValidationError


class ConfigError(ValueError):
    """Raised when configuration cannot be parsed into domain models."""


@dataclass(frozen=True)
class SimulationConstants:
    """Physical and economic constants shared by every simulation run."""

    r_internal_ohm: float = 2.0
    r_load_ohm: float = 2.0
    device_area_m2: float = 0.04  # 20 cm x 20 cm module
    electricity_rate: float = 1444.0  # currency per kWh
    temp_floor_c: float = 20.0
    days_per_year: int = 365
    co2_kg_per_kwh: float = 0.85
    break_even_years: int = 15

    def __post_init__(self):
        for f in fields(self):
            try:
                value = float(getattr(self, f.name))
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"{f.name} must be numeric") from exc
            object.__setattr__(self, f.name, value)
        for name in ("days_per_year", "break_even_years"):
            object.__setattr__(self, name, int(getattr(self, name)))
        if self.r_internal_ohm + self.r_load_ohm <= 0:
            raise ValidationError("Total circuit resistance must be positive")
        if self.device_area_m2 <= 0:
            raise ValidationError("device_area_m2 must be positive")
        if self.break_even_years < 0:
            raise ValidationError("break_even_years must be non-negative")


DEFAULT_CONSTANTS = SimulationConstants()


@dataclass(frozen=True)
class SweepSpec:
    variable: str = "sand_temp_peak"
    start: float = 50.0
    end: float = 100.0
    step: float = 5.0


@dataclass(frozen=True)
class SimulationConfig:
    inputs: SimulationInputs
    constants: SimulationConstants = DEFAULT_CONSTANTS
    sweep: Optional[SweepSpec] = None


_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def normalize_key(key: str) -> str:
    """Map ``sandTempPeak`` style keys onto ``sand_temp_peak``."""
    return _CAMEL_RE.sub("_", str(key).strip()).lower()


def _load_raw(path: Path) -> Dict[str, Any]:
    text = path.read_text()
    if path.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text) or {}
    if path.suffix.lower() == ".json":
        return json.loads(text)
    raise ConfigError(f"Unsupported config extension: {path.suffix}")


def _normalized(raw: Any, section: str, allowed: set) -> Dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{section}' must be a mapping")
    out = {normalize_key(k): v for k, v in raw.items()}
    unknown = set(out) - allowed
    if unknown:
        raise ConfigError(f"Unknown {section} fields: {sorted(unknown)}")
    return out


def parse_inputs(raw: Any, base: SimulationInputs | None = None) -> SimulationInputs:
    """Build inputs from a (partial) mapping, filling gaps from ``base``."""
    allowed = {f.name for f in fields(SimulationInputs)}
    values = _normalized(raw, "inputs", allowed)
    base = base or SimulationInputs()
    merged = {**base.to_dict(), **values}
    try:
        return SimulationInputs(**merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid inputs: {exc}") from exc


def parse_constants(raw: Any) -> SimulationConstants:
    allowed = {f.name for f in fields(SimulationConstants)}
    values = _normalized(raw, "constants", allowed)
    try:
        return SimulationConstants(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid constants: {exc}") from exc


def parse_sweep(raw: Any) -> Optional[SweepSpec]:
    if raw is None:
        return None
    allowed = {f.name for f in fields(SweepSpec)}
    values = _normalized(raw, "sweep", allowed)
    if "variable" in values:
        values["variable"] = normalize_key(values["variable"])
    try:
        for name in ("start", "end", "step"):
            if name in values:
                values[name] = float(values[name])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid sweep range: {exc}") from exc
    return SweepSpec(**values)


def load_config(path: str | Path) -> SimulationConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    raw = _load_raw(path)
    if not isinstance(raw, dict):
        raise ConfigError("Config must be a mapping")
    return SimulationConfig(
        inputs=parse_inputs(raw.get("inputs")),
        constants=parse_constants(raw.get("constants")),
        sweep=parse_sweep(raw.get("sweep")),
    )


__all__ = [
    "ConfigError",
    "SimulationConstants",
    "DEFAULT_CONSTANTS",
    "SweepSpec",
    "SimulationConfig",
    "normalize_key",
    "parse_inputs",
    "parse_constants",
    "parse_sweep",
    "load_config",
]
