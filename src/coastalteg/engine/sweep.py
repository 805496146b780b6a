"""Parameter sweeps for sensitivity analysis."""
from __future__ import annotations

import math
from dataclasses import replace

import pandas as pd

from coastalteg.core.config import DEFAULT_CONSTANTS, SimulationConstants, normalize_key
from coastalteg.core.debug import DebugCollector, NullDebugCollector, ScopedDebugCollector
from coastalteg.core.models import SimulationInputs, round_half_up
from coastalteg.engine.simulate import simulate

SWEEP_COLUMNS = ["value", "efficiency", "energy", "savings"]
MAX_SWEEP_ROWS = 10_000


def sweep(
    inputs: SimulationInputs,
    variable: str,
    start: float,
    end: float,
    step: float,
    constants: SimulationConstants = DEFAULT_CONSTANTS,
    debug: DebugCollector | None = None,
    max_rows: int = MAX_SWEEP_ROWS,
) -> pd.DataFrame:
    """Re-run the engine with ``variable`` stepped from ``start`` to ``end``.

    The range is inclusive and walked by repeated addition, so float drift
    can drop the end point for steps such as 0.1. A non-positive step yields
    an empty frame. A range needing more than ``max_rows`` runs raises
    ``ValueError``, and the walk stops once ``step`` no longer moves the
    value (e.g. a step of 1 at 1e17).
    """

    debug = debug or NullDebugCollector()
    name = normalize_key(variable)
    if name not in SimulationInputs.numeric_fields():
        raise ValueError(f"Cannot sweep '{variable}'; choose from {SimulationInputs.numeric_fields()}")

    rows = []
    if not (math.isfinite(step) and step > 0 and math.isfinite(start) and math.isfinite(end)):
        debug.emit("sweep.skip", {"variable": name, "start": start, "end": end, "step": step}, ts=None)
        return pd.DataFrame(rows, columns=SWEEP_COLUMNS)

    # Number of steps between the bounds; inf when the division overflows.
    span = (end - start) / step
    if span >= max_rows:
        debug.emit(
            "sweep.skip",
            {"variable": name, "start": start, "end": end, "step": step, "max_rows": max_rows},
            ts=None,
        )
        raise ValueError(f"Sweep of '{name}' from {start} to {end} by {step} exceeds {max_rows} runs")

    scoped = ScopedDebugCollector(debug, label=f"sweep:{name}")
    current = float(start)
    while current <= end:
        output = simulate(replace(inputs, **{name: current}), constants, debug=scoped)
        rows.append(
            {
                "value": round_half_up(current, 2),
                "efficiency": output.results.average_efficiency,
                "energy": output.results.total_energy,
                "savings": output.results.total_savings,
            }
        )
        following = current + step
        if following == current:
            scoped.emit("sweep.stalled", {"variable": name, "value": current, "step": step}, ts=None)
            break
        current = following

    scoped.emit("sweep.done", {"variable": name, "iterations": len(rows)}, ts=None)
    return pd.DataFrame(rows, columns=SWEEP_COLUMNS)


__all__ = ["MAX_SWEEP_ROWS", "SWEEP_COLUMNS", "sweep"]
