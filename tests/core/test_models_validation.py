import math

import pytest

from coastalteg.core.models import (
    Location,
    SimulationInputs,
    SimulationOutput,
    SimulationResults,
    ValidationError,
    domain_violations,
    round_half_up,
)


def test_defaults_match_initial_session_state():
    inputs = SimulationInputs()
    assert inputs.location is Location.STANDARD
    assert inputs.sand_temp_peak == 70
    assert inputs.seebeck_coefficient == 0.05
    assert inputs.conductivity == 1.5
    assert inputs.system_cost == 15_000_000
    assert inputs.discount_rate == 5
    assert inputs.lifetime == 10
    assert inputs.module_count == 2000
    assert domain_violations(inputs) == []


def test_location_parse_accepts_values_and_place_aliases():
    assert Location.parse("HighWind") is Location.HIGH_WIND
    assert Location.parse("high_wind") is Location.HIGH_WIND
    assert Location.parse("Tanah Lot") is Location.HIGH_WIND
    assert Location.parse("kuta") is Location.STANDARD
    assert Location.parse(Location.STANDARD) is Location.STANDARD
    with pytest.raises(ValidationError):
        Location.parse("Sahara")


def test_inputs_coerce_numbers_and_counts():
    inputs = SimulationInputs(location="HighWind", sand_temp_peak="80", lifetime=12.0, module_count="500")
    assert inputs.location is Location.HIGH_WIND
    assert inputs.sand_temp_peak == 80.0
    assert isinstance(inputs.lifetime, int) and inputs.lifetime == 12
    assert isinstance(inputs.module_count, int) and inputs.module_count == 500


@pytest.mark.parametrize("field", ["sand_temp_peak", "conductivity", "system_cost", "lifetime"])
def test_inputs_reject_non_finite(field):
    with pytest.raises(ValidationError):
        SimulationInputs(**{field: math.nan})
    with pytest.raises(ValidationError):
        SimulationInputs(**{field: math.inf})


def test_inputs_reject_non_numeric():
    with pytest.raises(ValidationError):
        SimulationInputs(seebeck_coefficient="abc")
    with pytest.raises(ValidationError):
        SimulationInputs(module_count=True)


def test_out_of_domain_values_are_accepted_but_reported():
    inputs = SimulationInputs(sand_temp_peak=120, seebeck_coefficient=0.5, conductivity=0, lifetime=0, module_count=-3)
    problems = domain_violations(inputs)
    joined = " ".join(problems)
    assert "sand_temp_peak" in joined
    assert "seebeck_coefficient" in joined
    assert "conductivity" in joined
    assert "lifetime" in joined
    assert "module_count" in joined


def test_to_dict_uses_location_value():
    data = SimulationInputs(location=Location.HIGH_WIND).to_dict()
    assert data["location"] == "HighWind"
    assert SimulationInputs(**data).location is Location.HIGH_WIND


def test_empty_output_frame():
    out = SimulationOutput()
    assert out.results == SimulationResults.zero()
    frame = out.to_frame()
    assert frame.empty
    assert list(frame.columns) == ["temp_sand", "temp_air", "voltage", "power"]


@pytest.mark.parametrize(
    "value,digits,expected",
    [
        (2.25, 1, 2.3),
        (-2.25, 1, -2.3),
        (0.125, 2, 0.13),
        (1.005, 2, 1.0),
        (2.5, 0, 3.0),
        (1234567.4, 0, 1234567.0),
    ],
)
def test_round_half_up_breaks_ties_away_from_zero(value, digits, expected):
    assert round_half_up(value, digits) == expected


def test_round_half_up_handles_extremes():
    assert round_half_up(1e300, 2) == 1e300
    assert math.isinf(round_half_up(float("inf"), 1))
