"""Deterministic debug collectors for structured JSON events."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import numpy as np


class DebugCollector(Protocol):
    def emit(self, stage: str, payload: Dict[str, Any], *, ts: Any, location: Optional[str] = None, label: Optional[str] = None) -> None:
        ...


def _json_safe_scalar(val: Any) -> Any:
    """Convert numpy scalars and enums to plain JSON values."""
    if isinstance(val, np.generic):
        return val.item()
    if isinstance(val, np.ndarray):
        return [_json_safe_scalar(v) for v in val.tolist()]
    if hasattr(val, "value") and hasattr(val, "name"):
        return val.value
    return val


def _ordered(obj: Any) -> Any:
    """Recursively order mappings for deterministic JSON dumps."""
    if isinstance(obj, dict):
        return {k: _ordered(obj[k]) for k in sorted(obj)}
    if isinstance(obj, (list, tuple)):
        return [_ordered(v) for v in obj]
    return _json_safe_scalar(obj)


def _event(stage: str, payload: Dict[str, Any], ts: Any, location: Optional[str], label: Optional[str]) -> Dict[str, Any]:
    return {
        "stage": stage,
        "ts": _json_safe_scalar(ts),
        "location": location,
        "label": label,
        "payload": _ordered(payload),
    }


class NullDebugCollector:
    def emit(self, stage: str, payload: Dict[str, Any], *, ts: Any, location: Optional[str] = None, label: Optional[str] = None) -> None:  # noqa: D401
        """Discard events (no-op)."""
        return


@dataclass
class ListDebugCollector:
    events: List[Dict[str, Any]] = field(default_factory=list)

    def emit(self, stage: str, payload: Dict[str, Any], *, ts: Any, location: Optional[str] = None, label: Optional[str] = None) -> None:
        self.events.append(_event(stage, payload, ts, location, label))

    def stages(self) -> List[str]:
        return [e["stage"] for e in self.events]


class JsonlDebugWriter:
    """Append engine and sweep events to a JSON Lines file as they happen.

    Each event is flushed immediately, so a long ``coastalteg sweep`` can be
    followed with ``tail -f``.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", encoding="utf-8")

    def emit(self, stage: str, payload: Dict[str, Any], *, ts: Any, location: Optional[str] = None, label: Optional[str] = None) -> None:
        json.dump(_event(stage, payload, ts, location, label), self._fh, sort_keys=True)
        self._fh.write("\n")
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()

    def __enter__(self) -> "JsonlDebugWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class JsonDebugWriter:
    """Buffer the events of one simulated day, then dump them as a JSON array.

    Picked for ``--debug`` paths ending in ``.json``. Nothing reaches disk
    until :meth:`close`; later calls to ``close`` are no-ops.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._events: List[Dict[str, Any]] = []
        self._written = False

    def emit(self, stage: str, payload: Dict[str, Any], *, ts: Any, location: Optional[str] = None, label: Optional[str] = None) -> None:
        self._events.append(_event(stage, payload, ts, location, label))

    def close(self) -> None:
        if self._written:
            return
        self.path.write_text(json.dumps(self._events, indent=2, sort_keys=True), encoding="utf-8")
        self._written = True

    def __enter__(self) -> "JsonDebugWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def build_debug_collector(path: str | Path) -> DebugCollector:
    """``.json`` paths get a buffered array writer, anything else JSON Lines."""
    if str(path).lower().endswith(".json"):
        return JsonDebugWriter(path)
    return JsonlDebugWriter(path)


class ScopedDebugCollector:
    """Wrapper that injects fixed location/label context into every emit."""

    def __init__(self, inner: DebugCollector, *, location: Optional[str] = None, label: Optional[str] = None):
        self.inner = inner
        self.location = location
        self.label = label

    def emit(self, stage: str, payload: Dict[str, Any], *, ts: Any, location: Optional[str] = None, label: Optional[str] = None) -> None:
        # Prefer explicit overrides, otherwise fall back to scoped defaults.
        eff_location = location if location is not None else self.location
        eff_label = label if label is not None else self.label
        self.inner.emit(stage, payload, ts=ts, location=eff_location, label=eff_label)


__all__ = [
    "DebugCollector",
    "NullDebugCollector",
    "ListDebugCollector",
    "JsonlDebugWriter",
    "JsonDebugWriter",
    "ScopedDebugCollector",
    "build_debug_collector",
]
