"""Economic aggregation of a simulated day.

Turns the unrounded hourly power/efficiency sums into system-scale energy,
savings, LCOE and payback figures. Also hosts the derived dashboard views
(CO2 avoided and the cumulative break-even timeline).
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from coastalteg.core.config import DEFAULT_CONSTANTS, SimulationConstants
from coastalteg.core.models import SimulationInputs, SimulationResults, round_half_up


@dataclass(frozen=True)
class EnergyBalance:
    """Full-precision intermediate figures behind :class:`SimulationResults`."""

    module_energy_wh: float
    system_energy_wh: float
    annual_energy_wh: float
    daily_savings: float
    annual_savings: float
    lifetime_energy_kwh: float
    lcoe: float
    roi: float
    average_efficiency: float


def energy_balance(
    total_power_mw: float,
    total_efficiency: float,
    samples: int,
    inputs: SimulationInputs,
    constants: SimulationConstants = DEFAULT_CONSTANTS,
) -> EnergyBalance:
    # Each hourly mW sample stands for one hour of output.
    module_energy_wh = total_power_mw / 1000.0
    system_energy_wh = module_energy_wh * inputs.module_count
    annual_energy_wh = system_energy_wh * constants.days_per_year
    rate = constants.electricity_rate

    daily_savings = (system_energy_wh / 1000.0) * rate
    annual_savings = (annual_energy_wh / 1000.0) * rate
    lifetime_energy_kwh = (annual_energy_wh / 1000.0) * inputs.lifetime

    lcoe = inputs.system_cost / lifetime_energy_kwh if lifetime_energy_kwh > 0 else 0.0
    roi = inputs.system_cost / annual_savings if annual_savings > 0 else 0.0
    average_efficiency = total_efficiency / samples if samples else 0.0

    return EnergyBalance(
        module_energy_wh=module_energy_wh,
        system_energy_wh=system_energy_wh,
        annual_energy_wh=annual_energy_wh,
        daily_savings=daily_savings,
        annual_savings=annual_savings,
        lifetime_energy_kwh=lifetime_energy_kwh,
        lcoe=lcoe,
        roi=roi,
        average_efficiency=average_efficiency,
    )


def to_results(balance: EnergyBalance) -> SimulationResults:
    """Round the balance to the published precision of each field."""
    return SimulationResults(
        total_energy=round_half_up(balance.system_energy_wh, 2),
        average_efficiency=round_half_up(balance.average_efficiency, 2),
        total_savings=round_half_up(balance.daily_savings, 2),
        lcoe=round_half_up(balance.lcoe),
        roi=round_half_up(balance.roi, 1),
    )


def co2_avoided_kg(results: SimulationResults, constants: SimulationConstants = DEFAULT_CONSTANTS) -> float:
    """Daily CO2 avoided by the system output, in kg."""
    return round_half_up((results.total_energy / 1000.0) * constants.co2_kg_per_kwh, 3)


def break_even_timeline(
    results: SimulationResults,
    system_cost: float,
    years: int | None = None,
    constants: SimulationConstants = DEFAULT_CONSTANTS,
) -> pd.DataFrame:
    """Cumulative savings against the capital cost, one row per year.

    Year 0 carries no savings; every later year adds a full year of the daily
    savings. ``net`` turns positive once the array has paid for itself.
    """

    years = constants.break_even_years if years is None else int(years)
    year_idx = np.arange(max(years, 0) + 1)
    annual_savings = results.total_savings * constants.days_per_year
    cumulative = year_idx * annual_savings
    return pd.DataFrame(
        {
            "year": year_idx,
            "savings": cumulative,
            "cost": float(system_cost),
            "net": cumulative - float(system_cost),
        }
    )


def break_even_year(timeline: pd.DataFrame):
    """First year whose cumulative net is non-negative, or ``None``."""
    paid = timeline.loc[(timeline["net"] >= 0) & (timeline["year"] > 0), "year"]
    if paid.empty:
        return None
    return int(paid.iloc[0])


__all__ = [
    "EnergyBalance",
    "energy_balance",
    "to_results",
    "co2_avoided_kg",
    "break_even_timeline",
    "break_even_year",
]
