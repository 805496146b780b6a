"""Closed-form diurnal simulation of a sand/air thermoelectric generator."""
from __future__ import annotations

import numpy as np
import pandas as pd

from coastalteg.core.config import DEFAULT_CONSTANTS, SimulationConstants
from coastalteg.core.debug import DebugCollector, NullDebugCollector, ScopedDebugCollector
from coastalteg.core.models import (
    Location,
    SimulationDataPoint,
    SimulationInputs,
    SimulationOutput,
    round_half_up,
)
from coastalteg.engine.economics import energy_balance, to_results

HOURS = np.arange(0, 25)

SAND_AMPLITUDE_C = 15.0
SAND_PHASE_H = 14.0
AIR_BASE_C = 28.0
AIR_AMPLITUDE_C = 5.0
AIR_PHASE_H = 15.0
NIGHT_COOLING_C = 2.0


def sand_temperature(hours: np.ndarray, sand_temp_peak: float) -> np.ndarray:
    """Unclamped sand surface temperature (heat source)."""
    hours = np.asarray(hours, dtype=float)
    return (sand_temp_peak - SAND_AMPLITUDE_C) + SAND_AMPLITUDE_C * np.sin((hours - SAND_PHASE_H) * np.pi / 12)


def air_temperature(hours: np.ndarray, location: Location = Location.STANDARD) -> np.ndarray:
    """Unclamped air temperature (heat sink) including the location profile.

    Windy sites lose an extra 2 °C before 06:00 and after 18:00 through
    stronger convective cooling.
    """

    hours = np.asarray(hours, dtype=float)
    temp = AIR_BASE_C + AIR_AMPLITUDE_C * np.sin((hours - AIR_PHASE_H) * np.pi / 12)
    if Location.parse(location) is Location.HIGH_WIND:
        night = (hours < 6) | (hours > 18)
        temp = np.where(night, temp - NIGHT_COOLING_C, temp)
    return temp


def hourly_profile(inputs: SimulationInputs, constants: SimulationConstants = DEFAULT_CONSTANTS) -> pd.DataFrame:
    """Full-precision hourly electrical profile indexed by hour.

    Nothing here is rounded; :func:`simulate` rounds only when it builds the
    published data points.
    """

    floor = constants.temp_floor_c
    temp_sand = np.maximum(sand_temperature(HOURS, inputs.sand_temp_peak), floor)
    temp_air = np.maximum(air_temperature(HOURS, inputs.location), floor)
    delta_t = temp_sand - temp_air

    # Device treated as non-polar: reverse gradients still deliver power.
    voltage_v = np.abs(inputs.seebeck_coefficient * delta_t)
    current_a = voltage_v / (constants.r_internal_ohm + constants.r_load_ohm)
    power_w = current_a**2 * constants.r_load_ohm

    heat_flow = inputs.conductivity * constants.device_area_m2 * np.abs(delta_t)
    efficiency = np.zeros_like(power_w)
    np.divide(power_w, heat_flow, out=efficiency, where=(delta_t != 0) & (heat_flow != 0))

    return pd.DataFrame(
        {
            "temp_sand": temp_sand,
            "temp_air": temp_air,
            "delta_t": delta_t,
            "voltage_v": voltage_v,
            "current_a": current_a,
            "power_w": power_w,
            "power_mw": power_w * 1000.0,
            "efficiency_pct": efficiency * 100.0,
        },
        index=pd.Index(HOURS, name="time"),
    )


def _data_points(profile: pd.DataFrame) -> tuple:
    return tuple(
        SimulationDataPoint(
            time=int(hour),
            temp_sand=round_half_up(float(row.temp_sand), 1),
            temp_air=round_half_up(float(row.temp_air), 1),
            voltage=round_half_up(float(row.voltage_v) * 1000.0, 1),
            power=round_half_up(float(row.power_mw), 1),
        )
        for hour, row in zip(profile.index, profile.itertuples(index=False))
    )


def simulate(
    inputs: SimulationInputs,
    constants: SimulationConstants = DEFAULT_CONSTANTS,
    debug: DebugCollector | None = None,
) -> SimulationOutput:
    """Run one diurnal cycle and aggregate the daily economics.

    Total for any constructible inputs: degenerate values (zero lifetime,
    module count or conductivity, no temperature gradient) come back as zero
    figures rather than errors.
    """

    debug = debug or NullDebugCollector()
    scoped = ScopedDebugCollector(debug, location=inputs.location.value)
    scoped.emit("engine.inputs", inputs.to_dict(), ts=0)

    profile = hourly_profile(inputs, constants)
    scoped.emit(
        "engine.hourly",
        {
            "rows": len(profile),
            "temp_sand_max": float(profile["temp_sand"].max()),
            "temp_air_min": float(profile["temp_air"].min()),
            "delta_t_max": float(profile["delta_t"].abs().max()),
            "power_mw_max": float(profile["power_mw"].max()),
        },
        ts=0,
    )

    total_power_mw = float(profile["power_mw"].sum())
    total_efficiency = float(profile["efficiency_pct"].sum())
    balance = energy_balance(total_power_mw, total_efficiency, len(profile), inputs, constants)
    results = to_results(balance)
    scoped.emit(
        "engine.results",
        {
            "total_power_mw": total_power_mw,
            "total_efficiency_pct": total_efficiency,
            "lifetime_energy_kwh": balance.lifetime_energy_kwh,
            "annual_savings": balance.annual_savings,
            **results.to_dict(),
        },
        ts=24,
    )

    return SimulationOutput(data_points=_data_points(profile), results=results)


__all__ = [
    "HOURS",
    "sand_temperature",
    "air_temperature",
    "hourly_profile",
    "simulate",
]
