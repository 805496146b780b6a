"""CSV/JSON export of simulation samples and sweep tables."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pandas as pd

from coastalteg.core.models import SimulationInputs, SimulationOutput

SIMULATION_HEADER = {
    "time": "Time",
    "temp_sand": "SandTemp",
    "temp_air": "AirTemp",
    "voltage": "Voltage(mV)",
    "power": "Power(mW)",
}

SWEEP_HEADER = {
    "value": "Value",
    "efficiency": "Efficiency (%)",
    "energy": "Energy (Wh)",
    "savings": "Savings",
}


def simulation_frame(output: SimulationOutput) -> pd.DataFrame:
    """Hourly samples with the export column headers."""
    frame = output.to_frame().reset_index()
    return frame[list(SIMULATION_HEADER)].rename(columns=SIMULATION_HEADER)


def simulation_csv(output: SimulationOutput, path: Optional[Path] = None) -> str:
    """Render (and optionally write) the hourly samples as CSV."""
    text = simulation_frame(output).to_csv(index=False, lineterminator="\n")
    if path is not None:
        Path(path).write_text(text)
    return text


def sweep_csv(table: pd.DataFrame, path: Optional[Path] = None) -> str:
    frame = table[list(SWEEP_HEADER)].rename(columns=SWEEP_HEADER)
    text = frame.to_csv(index=False, lineterminator="\n")
    if path is not None:
        Path(path).write_text(text)
    return text


def simulation_payload(inputs: SimulationInputs, output: SimulationOutput) -> dict:
    frame = output.to_frame().reset_index()
    return {
        "inputs": inputs.to_dict(),
        "results": output.results.to_dict(),
        "data": json.loads(frame.to_json(orient="records")),
    }


def write_json(payload, path: Path) -> None:
    Path(path).write_text(json.dumps(payload, indent=2))


__all__ = [
    "SIMULATION_HEADER",
    "SWEEP_HEADER",
    "simulation_frame",
    "simulation_csv",
    "sweep_csv",
    "simulation_payload",
    "write_json",
]
