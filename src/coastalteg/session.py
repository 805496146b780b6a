"""Interactive simulation session.

Holds the current inputs, the last engine output and a time-of-day cursor
for live views. Every input mutation recomputes synchronously, so readers
always see ``data_points`` and ``results`` from the same run. The session
owns no timer: an external driver calls :meth:`SimulationSession.advance_time`
at whatever cadence it animates with.
"""
from __future__ import annotations

import math
from dataclasses import fields, replace
from typing import Any, Mapping, Optional, Tuple

import pandas as pd

from coastalteg.core.config import DEFAULT_CONSTANTS, SimulationConstants, normalize_key
from coastalteg.core.debug import DebugCollector, NullDebugCollector
from coastalteg.core.models import (
    SimulationDataPoint,
    SimulationInputs,
    SimulationOutput,
    SimulationResults,
)
from coastalteg.engine import economics
from coastalteg.engine.simulate import simulate

HOURS_PER_DAY = 24.0
DEFAULT_TOLERANCE_H = 0.5
DEFAULT_START_TIME = 12.0


class SimulationSession:
    def __init__(
        self,
        inputs: SimulationInputs | None = None,
        constants: SimulationConstants = DEFAULT_CONSTANTS,
        debug: DebugCollector | None = None,
        time_of_day: float = DEFAULT_START_TIME,
        auto_run: bool = True,
    ):
        self._inputs = inputs or SimulationInputs()
        self.constants = constants
        self.debug = debug or NullDebugCollector()
        self._output = SimulationOutput()
        self._time_of_day = 0.0
        self.set_time_of_day(time_of_day)
        if auto_run:
            self.run_simulation()

    @property
    def inputs(self) -> SimulationInputs:
        return self._inputs

    @property
    def data_points(self) -> Tuple[SimulationDataPoint, ...]:
        return self._output.data_points

    @property
    def results(self) -> SimulationResults:
        return self._output.results

    @property
    def output(self) -> SimulationOutput:
        return self._output

    @property
    def time_of_day(self) -> float:
        return self._time_of_day

    def set_inputs(self, changes: Optional[Mapping[str, Any]] = None, **kwargs) -> SimulationOutput:
        """Merge a partial set of inputs, then recompute.

        Accepts snake_case or camelCase names. Unknown names and invalid values
        raise before any state changes.
        """

        merged = {normalize_key(k): v for k, v in dict(changes or {}, **kwargs).items()}
        known = {f.name for f in fields(SimulationInputs)}
        unknown = set(merged) - known
        if unknown:
            raise TypeError(f"Unknown input fields: {sorted(unknown)}")
        new_inputs = replace(self._inputs, **merged)
        self._inputs = new_inputs
        return self.run_simulation()

    def run_simulation(self) -> SimulationOutput:
        # Single assignment swaps samples and aggregates together.
        self._output = simulate(self._inputs, self.constants, debug=self.debug)
        return self._output

    def set_time_of_day(self, value: float) -> float:
        value = float(value)
        if not math.isfinite(value):
            raise ValueError("time_of_day must be finite")
        # [0, 24): anything at or past midnight pins just below the day end.
        self._time_of_day = min(max(value, 0.0), math.nextafter(HOURS_PER_DAY, 0.0))
        return self._time_of_day

    def advance_time(self, delta: float) -> float:
        """Move the cursor forward, restarting the day at 0 once it hits 24."""
        value = self._time_of_day + float(delta)
        if not math.isfinite(value):
            raise ValueError("advance_time delta must be finite")
        if value < 0:
            # -1e-17 % 24 rounds up to exactly 24.0
            value = value % HOURS_PER_DAY
        if value >= HOURS_PER_DAY:
            value = 0.0
        self._time_of_day = value
        return value

    def get_current_data(self, tolerance: float = DEFAULT_TOLERANCE_H) -> Optional[SimulationDataPoint]:
        """Sample nearest the cursor, or ``None`` outside the tolerance window.

        The window is open (``|time - cursor| < tolerance``) and samples are
        scanned in ascending hour order, so an exact tie goes to the earlier
        hour and a cursor exactly half-way between hours matches nothing.
        """

        for point in self._output.data_points:
            if abs(point.time - self._time_of_day) < tolerance:
                return point
        return None

    @property
    def peak_voltage(self) -> float:
        if not self._output.data_points:
            return 0.0
        return max(p.voltage for p in self._output.data_points)

    @property
    def co2_avoided_kg(self) -> float:
        return economics.co2_avoided_kg(self.results, self.constants)

    def break_even_timeline(self, years: int | None = None) -> pd.DataFrame:
        return economics.break_even_timeline(self.results, self._inputs.system_cost, years, self.constants)


__all__ = ["SimulationSession", "HOURS_PER_DAY", "DEFAULT_TOLERANCE_H"]
