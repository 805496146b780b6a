import math

import pytest

from coastalteg.core.debug import ListDebugCollector
from coastalteg.core.models import Location, SimulationInputs, SimulationResults, ValidationError, round_half_up
from coastalteg.engine.simulate import simulate
from coastalteg.session import SimulationSession


def test_session_starts_with_defaults_and_results():
    session = SimulationSession()
    assert session.inputs == SimulationInputs()
    assert session.time_of_day == 12.0
    assert len(session.data_points) == 25
    assert session.results == simulate(SimulationInputs()).results


def test_session_without_auto_run_is_empty():
    session = SimulationSession(auto_run=False)
    assert session.data_points == ()
    assert session.results == SimulationResults.zero()
    assert session.get_current_data() is None
    assert session.peak_voltage == 0.0


def test_set_inputs_merges_and_recomputes():
    session = SimulationSession()
    before = session.results
    session.set_inputs(moduleCount=4000)
    assert session.inputs.module_count == 4000
    assert session.inputs.sand_temp_peak == 70
    assert session.results.total_energy == pytest.approx(2 * before.total_energy, abs=0.011)
    assert session.output == simulate(session.inputs)


def test_set_inputs_accepts_mapping_and_location_names():
    session = SimulationSession()
    session.set_inputs({"location": "Tanah Lot"}, sand_temp_peak=90)
    assert session.inputs.location is Location.HIGH_WIND
    assert session.inputs.sand_temp_peak == 90


def test_set_inputs_rejects_unknown_field_without_side_effects():
    session = SimulationSession()
    snapshot = (session.inputs, session.output)
    with pytest.raises(TypeError):
        session.set_inputs(wind_speed=3, module_count=1)
    with pytest.raises(ValidationError):
        session.set_inputs(conductivity=math.nan)
    assert (session.inputs, session.output) == snapshot


def test_run_simulation_is_idempotent():
    debug = ListDebugCollector()
    session = SimulationSession(debug=debug)
    first = session.output
    assert session.run_simulation() == first
    assert debug.stages().count("engine.results") == 2


def test_set_time_of_day_clamps_without_recompute():
    debug = ListDebugCollector()
    session = SimulationSession(debug=debug)
    runs = len(debug.events)
    session.set_time_of_day(5.5)
    assert session.time_of_day == 5.5
    session.set_time_of_day(-3)
    assert session.time_of_day == 0.0
    session.set_time_of_day(24)
    assert 23.99 < session.time_of_day < 24
    assert len(debug.events) == runs
    with pytest.raises(ValueError):
        session.set_time_of_day(float("nan"))


def test_advance_time_wraps_to_start_of_day():
    session = SimulationSession(time_of_day=23.95)
    assert session.advance_time(0.1) == 0
    assert session.time_of_day == 0
    session.advance_time(0.1)
    assert session.time_of_day == pytest.approx(0.1)


def test_advance_time_backwards_wraps_modulo():
    session = SimulationSession(time_of_day=0.5)
    session.advance_time(-1.0)
    assert session.time_of_day == pytest.approx(23.5)


@pytest.mark.parametrize("delta", [-1e-17, -24.0, -48.0])
def test_advance_time_backwards_stays_within_day(delta):
    session = SimulationSession(time_of_day=0.0)
    session.advance_time(delta)
    assert 0.0 <= session.time_of_day < 24.0
    assert session.time_of_day == 0.0


@pytest.mark.parametrize("delta", [float("nan"), float("inf")])
def test_advance_time_rejects_non_finite(delta):
    session = SimulationSession(time_of_day=6.0)
    with pytest.raises(ValueError):
        session.advance_time(delta)
    assert session.time_of_day == 6.0


def test_current_data_within_half_hour():
    session = SimulationSession()
    session.set_time_of_day(12.3)
    assert session.get_current_data().time == 12
    session.set_time_of_day(12.6)
    assert session.get_current_data().time == 13
    session.set_time_of_day(11.7)
    assert session.get_current_data().time == 12


def test_current_data_half_hour_boundary_is_excluded():
    session = SimulationSession()
    session.set_time_of_day(12.5)
    assert session.get_current_data() is None
    # a wider window makes 12 and 13 equidistant; the earlier hour wins
    assert session.get_current_data(tolerance=0.6).time == 12


def test_current_data_tracks_recompute():
    session = SimulationSession(time_of_day=14)
    before = session.get_current_data()
    session.set_inputs(sand_temp_peak=95)
    after = session.get_current_data()
    assert after.time == before.time == 14
    assert after.temp_sand > before.temp_sand


def test_dashboard_views():
    session = SimulationSession()
    assert session.peak_voltage == max(p.voltage for p in session.data_points)
    assert session.co2_avoided_kg == round_half_up(session.results.total_energy / 1000 * 0.85, 3)
    timeline = session.break_even_timeline(years=3)
    assert list(timeline["cost"]) == [15_000_000] * 4
