"""Command line entrypoint for coastalteg.

Implements four commands:

* ``run``: simulate one day from a config file and/or option overrides.
* ``sweep``: vary one input over a range and tabulate the daily figures.
* ``animate``: step the session's time cursor and print the live sample.
* ``config``: interactive helper to build/edit a config file.

The CLI is intentionally lightweight and depends only on Typer (Click).
"""
from __future__ import annotations

import time
from dataclasses import fields
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
import typer

from coastalteg.cli_utils import load_existing, write_config
from coastalteg.core.config import ConfigError, SimulationConfig, SweepSpec, parse_inputs
from coastalteg.core.debug import NullDebugCollector, build_debug_collector
from coastalteg.core.models import Location, SimulationInputs, ValidationError, domain_violations
from coastalteg.engine import economics
from coastalteg.engine.sweep import sweep as run_sweep
from coastalteg.export import simulation_csv, simulation_payload, sweep_csv, write_json
from coastalteg.session import SimulationSession

__version__ = "0.1.0"

app = typer.Typer(add_completion=False, help="Coastal thermoelectric generator simulator")

# Milliseconds between 0.1 h animation ticks.
SPEEDS = {"1x": 200, "2x": 100, "4x": 50}


def _exit_with_error(msg: str) -> None:
    typer.echo(f"Error: {msg}", err=True)
    raise typer.Exit(code=1)


def _load(config: Optional[Path]) -> SimulationConfig:
    try:
        return load_existing(config)
    except ConfigError as exc:
        _exit_with_error(str(exc))


def _apply_overrides(inputs: SimulationInputs, overrides: Dict[str, object]) -> SimulationInputs:
    changes = {k: v for k, v in overrides.items() if v is not None}
    if not changes:
        return inputs
    try:
        return parse_inputs(changes, base=inputs)
    except ConfigError as exc:
        _exit_with_error(str(exc))


def _warn_domain(inputs: SimulationInputs) -> None:
    for problem in domain_violations(inputs):
        typer.echo(f"Warning: {problem}", err=True)


def _open_debug(debug: Optional[Path]):
    return build_debug_collector(debug) if debug else NullDebugCollector()


def _close_debug(collector) -> None:
    close = getattr(collector, "close", None)
    if close is not None:
        close()


@app.command()
def run(
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, help="Config YAML/JSON file"),
    location: Optional[str] = typer.Option(None, help="Location profile: Standard or HighWind"),
    sand_temp_peak: Optional[float] = typer.Option(None, help="Peak sand temperature (°C)"),
    seebeck_coefficient: Optional[float] = typer.Option(None, "--seebeck", help="Seebeck coefficient (V/K)"),
    conductivity: Optional[float] = typer.Option(None, help="Thermal conductivity (W/m·K)"),
    system_cost: Optional[float] = typer.Option(None, help="Capital cost of the full array"),
    discount_rate: Optional[float] = typer.Option(None, help="Discount rate in percent, carried into exports"),
    lifetime: Optional[int] = typer.Option(None, help="Amortization horizon (years)"),
    module_count: Optional[int] = typer.Option(None, help="Number of modules in the array"),
    debug: Optional[Path] = typer.Option(None, help="Write debug events to this path (.json or .jsonl)"),
    format: str = typer.Option("json", "--format", "-f", help="Output format: json or csv"),
    output: Optional[Path] = typer.Option(None, help="Output file path; defaults to results.<format>"),
):
    """Simulate one diurnal cycle and write the hourly samples."""

    cfg = _load(config)
    inputs = _apply_overrides(
        cfg.inputs,
        {
            "location": location,
            "sand_temp_peak": sand_temp_peak,
            "seebeck_coefficient": seebeck_coefficient,
            "conductivity": conductivity,
            "system_cost": system_cost,
            "discount_rate": discount_rate,
            "lifetime": lifetime,
            "module_count": module_count,
        },
    )
    _warn_domain(inputs)

    fmt = format.lower()
    if fmt not in {"json", "csv"}:
        _exit_with_error("format must be json or csv")
    output_path = output or Path(f"results.{fmt}")

    debug_collector = _open_debug(debug)
    try:
        session = SimulationSession(inputs, constants=cfg.constants, debug=debug_collector)
    finally:
        _close_debug(debug_collector)

    if fmt == "json":
        payload = simulation_payload(session.inputs, session.output)
        payload["co2_avoided_kg"] = session.co2_avoided_kg
        payload["break_even_year"] = economics.break_even_year(session.break_even_timeline())
        write_json(payload, output_path)
    else:
        simulation_csv(session.output, output_path)

    results = session.results
    typer.echo(pd.DataFrame([results.to_dict()]).to_string(index=False))
    typer.echo(f"Peak voltage: {session.peak_voltage:.1f} mV")
    typer.echo(f"CO2 avoided: {session.co2_avoided_kg:.3f} kg/day")
    typer.echo(f"Wrote results to {output_path}")
    if debug:
        typer.echo(f"Debug events -> {debug}")


@app.command()
def sweep(
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, help="Config YAML/JSON file"),
    variable: Optional[str] = typer.Option(None, help="Input field to vary, e.g. sand_temp_peak"),
    start: Optional[float] = typer.Option(None, help="First value"),
    end: Optional[float] = typer.Option(None, help="Last value (inclusive)"),
    step: Optional[float] = typer.Option(None, help="Increment; non-positive runs nothing"),
    debug: Optional[Path] = typer.Option(None, help="Write debug events to this path (.json or .jsonl)"),
    output: Optional[Path] = typer.Option(None, help="Output .csv or .json; defaults to sweep_<variable>.csv"),
):
    """Sensitivity sweep of one input across a range."""

    cfg = _load(config)
    preset = cfg.sweep or SweepSpec()
    variable = variable or preset.variable
    start = preset.start if start is None else start
    end = preset.end if end is None else end
    step = preset.step if step is None else step

    debug_collector = _open_debug(debug)
    try:
        table = run_sweep(cfg.inputs, variable, start, end, step, constants=cfg.constants, debug=debug_collector)
    except ValueError as exc:
        _exit_with_error(str(exc))
    finally:
        _close_debug(debug_collector)

    if table.empty:
        typer.echo("Sweep produced no rows (check the range and step)", err=True)

    output_path = output or Path(f"sweep_{variable}.csv")
    suffix = output_path.suffix.lower()
    if suffix == ".csv":
        sweep_csv(table, output_path)
    elif suffix == ".json":
        write_json(table.to_dict(orient="records"), output_path)
    else:
        _exit_with_error("output path must end with .csv or .json")

    if not table.empty:
        typer.echo(table.to_string(index=False))
    typer.echo(f"Wrote {len(table)} rows to {output_path}")


@app.command()
def animate(
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, help="Config YAML/JSON file"),
    start_time: float = typer.Option(12.0, help="Initial time of day (hours)"),
    speed: str = typer.Option("2x", help="Playback speed: 1x, 2x or 4x"),
    delta: float = typer.Option(0.1, help="Hours advanced per tick"),
    ticks: int = typer.Option(240, help="Number of ticks to play"),
):
    """Play the day back, printing the sample under the time cursor."""

    if speed not in SPEEDS:
        _exit_with_error(f"speed must be one of {sorted(SPEEDS)}")
    cfg = _load(config)
    try:
        session = SimulationSession(cfg.inputs, constants=cfg.constants, time_of_day=start_time)
    except ValueError as exc:
        _exit_with_error(str(exc))

    interval_s = SPEEDS[speed] / 1000.0
    last_hour = None
    for _ in range(max(ticks, 0)):
        point = session.get_current_data()
        if point is not None and point.time != last_hour:
            typer.echo(
                f"{point.time:02d}:00 sand={point.temp_sand:.1f}C air={point.temp_air:.1f}C "
                f"dT={point.delta_t:.1f}C V={point.voltage:.1f}mV P={point.power:.1f}mW"
            )
            last_hour = point.time
        time.sleep(interval_s)
        session.advance_time(delta)


def _prompt_inputs(existing: SimulationInputs) -> SimulationInputs:
    values = {}
    for f in fields(SimulationInputs):
        current = getattr(existing, f.name)
        if f.name == "location":
            choices = "/".join(loc.value for loc in Location)
            values[f.name] = typer.prompt(f"location ({choices})", default=current.value)
        else:
            values[f.name] = typer.prompt(f.name, default=str(current))
    try:
        return parse_inputs(values)
    except ConfigError as exc:
        _exit_with_error(str(exc))


@app.command()
def config(
    path: Path = typer.Argument(..., help="Path to save config YAML/JSON"),
    defaults: bool = typer.Option(False, "--defaults", help="Write defaults without prompting"),
):
    """Interactive config builder/editor."""

    try:
        existing = load_existing(path)
    except ConfigError as exc:
        typer.echo(f"Could not load existing config: {exc}", err=True)
        existing = load_existing(None)

    inputs = existing.inputs if defaults else _prompt_inputs(existing.inputs)
    _warn_domain(inputs)
    try:
        write_config(path, inputs, existing.constants, existing.sweep)
    except (ConfigError, ValidationError) as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Saved config to {path}")


@app.callback(invoke_without_command=True)
def version_callback(
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    if version:
        typer.echo(__version__)
        raise typer.Exit()


def main() -> None:  # pragma: no cover - thin wrapper for console_script
    app()


__all__ = ["app", "main"]


if __name__ == "__main__":  # pragma: no cover
    main()
