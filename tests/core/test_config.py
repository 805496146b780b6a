from pathlib import Path

import pytest

from coastalteg.core.config import (
    DEFAULT_CONSTANTS,
    ConfigError,
    SimulationConstants,
    load_config,
    normalize_key,
    parse_inputs,
)
from coastalteg.core.models import Location, SimulationInputs, ValidationError


def test_default_constants():
    assert DEFAULT_CONSTANTS.r_internal_ohm == 2.0
    assert DEFAULT_CONSTANTS.r_load_ohm == 2.0
    assert DEFAULT_CONSTANTS.device_area_m2 == 0.04
    assert DEFAULT_CONSTANTS.electricity_rate == 1444.0
    assert DEFAULT_CONSTANTS.days_per_year == 365


def test_constants_validation():
    with pytest.raises(ValidationError):
        SimulationConstants(r_internal_ohm=0, r_load_ohm=0)
    with pytest.raises(ValidationError):
        SimulationConstants(device_area_m2=0)


def test_normalize_key():
    assert normalize_key("sandTempPeak") == "sand_temp_peak"
    assert normalize_key("moduleCount") == "module_count"
    assert normalize_key("lifetime") == "lifetime"


def test_load_yaml_with_camel_case_inputs(tmp_path: Path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "inputs:\n"
        "  location: HighWind\n"
        "  sandTempPeak: 85\n"
        "  moduleCount: 100\n"
        "constants:\n"
        "  electricity_rate: 2000\n"
        "sweep:\n"
        "  variable: seebeckCoefficient\n"
        "  start: 0.01\n"
        "  end: 0.1\n"
        "  step: 0.01\n"
    )

    loaded = load_config(cfg)
    assert loaded.inputs.location is Location.HIGH_WIND
    assert loaded.inputs.sand_temp_peak == 85
    assert loaded.inputs.module_count == 100
    # untouched fields keep their defaults
    assert loaded.inputs.lifetime == 10
    assert loaded.constants.electricity_rate == 2000
    assert loaded.constants.r_load_ohm == 2.0
    assert loaded.sweep.variable == "seebeck_coefficient"
    assert loaded.sweep.step == 0.01


def test_load_json(tmp_path: Path):
    cfg = tmp_path / "config.json"
    cfg.write_text('{"inputs": {"conductivity": 2.5}}')
    loaded = load_config(cfg)
    assert loaded.inputs.conductivity == 2.5
    assert loaded.sweep is None


def test_unknown_input_key_rejected(tmp_path: Path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("inputs:\n  wind_speed: 3\n")
    with pytest.raises(ConfigError):
        load_config(cfg)


def test_invalid_value_wrapped(tmp_path: Path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("inputs:\n  location: Mars\n")
    with pytest.raises(ConfigError):
        load_config(cfg)


def test_missing_and_unsupported_files(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")
    bad = tmp_path / "config.toml"
    bad.write_text("x = 1\n")
    with pytest.raises(ConfigError):
        load_config(bad)


def test_parse_inputs_merges_onto_base():
    base = SimulationInputs(module_count=10)
    merged = parse_inputs({"lifetime": 3}, base=base)
    assert merged.module_count == 10
    assert merged.lifetime == 3
