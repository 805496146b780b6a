"""Domain models for the coastal thermoelectric simulator.

Provides data structures with validation for the input parameter vector,
the hourly samples produced by the engine and the daily aggregates.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from decimal import ROUND_HALF_UP, Context, Decimal
from enum import Enum
from typing import Any, List, Tuple

import pandas as pd


class ValidationError(ValueError):
    """Raised when model inputs violate constraints."""


# Wide enough to quantize any finite double to a few decimals.
_ROUNDING_CONTEXT = Context(prec=400)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals with exact halves going away from zero.

    Works on the exact binary value of ``value``: ``round_half_up(2.25, 1)``
    is ``2.3`` (where ``round`` gives ``2.2``), while ``round_half_up(1.005, 2)``
    is ``1.0`` because 1.005 is stored just below the half.
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT))


class Location(str, Enum):
    """Ambient cooling profile of the installation site."""

    STANDARD = "Standard"
    HIGH_WIND = "HighWind"

    @classmethod
    def parse(cls, raw: Any) -> "Location":
        if isinstance(raw, Location):
            return raw
        key = str(raw).strip().lower().replace(" ", "").replace("_", "").replace("-", "")
        try:
            return _LOCATION_ALIASES[key]
        except KeyError as exc:
            choices = [loc.value for loc in cls]
            raise ValidationError(f"Unknown location '{raw}'; choose from {choices}") from exc


# Place names used by the original beach profiles are accepted as aliases.
_LOCATION_ALIASES = {
    "standard": Location.STANDARD,
    "kuta": Location.STANDARD,
    "highwind": Location.HIGH_WIND,
    "tanahlot": Location.HIGH_WIND,
}

# Nominal operating ranges; values outside are simulated but reported.
DOMAINS = {
    "sand_temp_peak": (50.0, 100.0),
    "seebeck_coefficient": (0.01, 0.1),
}

INTEGER_FIELDS = {"lifetime", "module_count"}


def _as_number(name: str, raw: Any) -> float:
    if isinstance(raw, bool):
        raise ValidationError(f"{name} must be numeric, got boolean")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be numeric, got {raw!r}") from exc
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite")
    return value


@dataclass(frozen=True)
class SimulationInputs:
    location: Location = Location.STANDARD
    sand_temp_peak: float = 70.0
    seebeck_coefficient: float = 0.05
    conductivity: float = 1.5
    system_cost: float = 15_000_000.0
    discount_rate: float = 5.0
    lifetime: int = 10
    module_count: int = 2000

    def __post_init__(self):
        object.__setattr__(self, "location", Location.parse(self.location))
        for f in fields(self):
            if f.name == "location":
                continue
            value = _as_number(f.name, getattr(self, f.name))
            # Keep counts as ints when they are whole so exports stay clean.
            if f.name in INTEGER_FIELDS and value.is_integer():
                value = int(value)
            object.__setattr__(self, f.name, value)

    @classmethod
    def numeric_fields(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.name != "location"]

    def to_dict(self) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["location"] = self.location.value
        return data


def domain_violations(inputs: SimulationInputs) -> List[str]:
    """Describe every field lying outside its nominal domain.

    The engine accepts these values; callers use the list to warn.
    """

    problems = []
    for name, (low, high) in DOMAINS.items():
        value = getattr(inputs, name)
        if not (low <= value <= high):
            problems.append(f"{name}={value} outside [{low}, {high}]")
    if inputs.conductivity <= 0:
        problems.append(f"conductivity={inputs.conductivity} must be > 0")
    if inputs.system_cost < 0:
        problems.append(f"system_cost={inputs.system_cost} must be >= 0")
    for name in ("lifetime", "module_count"):
        value = getattr(inputs, name)
        if value <= 0 or float(value) != int(value):
            problems.append(f"{name}={value} must be a positive integer")
    return problems


@dataclass(frozen=True)
class SimulationDataPoint:
    time: int
    temp_sand: float
    temp_air: float
    voltage: float
    power: float

    @property
    def delta_t(self) -> float:
        return round_half_up(self.temp_sand - self.temp_air, 1)


@dataclass(frozen=True)
class SimulationResults:
    total_energy: float
    average_efficiency: float
    total_savings: float
    lcoe: float
    roi: float

    @classmethod
    def zero(cls) -> "SimulationResults":
        return cls(total_energy=0.0, average_efficiency=0.0, total_savings=0.0, lcoe=0.0, roi=0.0)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SimulationOutput:
    data_points: Tuple[SimulationDataPoint, ...] = field(default_factory=tuple)
    results: SimulationResults = field(default_factory=SimulationResults.zero)

    def to_frame(self) -> pd.DataFrame:
        """Hourly samples as a DataFrame indexed by hour."""
        columns = ["time", "temp_sand", "temp_air", "voltage", "power"]
        rows = [[getattr(p, c) for c in columns] for p in self.data_points]
        return pd.DataFrame(rows, columns=columns).set_index("time")


__all__ = [
    "ValidationError",
    "Location",
    "SimulationInputs",
    "SimulationDataPoint",
    "SimulationResults",
    "SimulationOutput",
    "domain_violations",
    "round_half_up",
]
