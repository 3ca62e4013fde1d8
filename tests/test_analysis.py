import numpy as np
import pytest

from descentlab.components import DeploymentState, Skydiver
from descentlab.core.analysis import (
    altitude_table,
    analyze_terminal_velocity,
    freefall_time,
    landing_speed,
    predict_terminal_velocity,
    reference_descent,
)
from descentlab.core.simulation import World
from descentlab.models.atmosphere import AtmosphereModel


def make_analysis(speed=0.0, altitude=0.0):
    return analyze_terminal_velocity(
        mass=80.0, gravity=9.81, air_density=1.225, area=0.7,
        drag_coefficient=0.7, state=DeploymentState.FREEFALL,
        current_speed=speed, altitude=altitude,
    )


def test_terminal_velocity_flags():
    vt = make_analysis().value
    at = make_analysis(speed=vt)
    assert at.velocity_ratio == pytest.approx(1.0)
    assert at.at_terminal and at.approaching_terminal
    assert not at.exceeding_terminal

    assert make_analysis(speed=0.5 * vt).below_terminal
    assert make_analysis(speed=1.2 * vt).exceeding_terminal


def test_altitude_table():
    rows = altitude_table(mass=80.0)
    assert len(rows) == 11
    assert rows[0].altitude == 0.0 and rows[-1].altitude == 10000.0
    densities = [r.air_density for r in rows]
    assert np.all(np.diff(densities) < 0.0)
    assert all(r.canopy_terminal < r.freefall_terminal for r in rows)
    assert rows[-1].freefall_terminal > rows[0].freefall_terminal


def test_prediction_above_current_altitude():
    current = analyze_terminal_velocity(
        mass=80.0, gravity=9.81,
        air_density=AtmosphereModel(pressure_model="isa").density(1000.0),
        area=0.7, drag_coefficient=0.7, state=DeploymentState.FREEFALL,
        altitude=1000.0,
    )
    pred = predict_terminal_velocity(current)
    assert np.allclose(pred.altitudes, [1000.0, 1500.0, 2000.0, 3000.0])
    assert pred.change_from_current[0] == pytest.approx(0.0, abs=1e-9)
    assert np.all(np.diff(pred.predicted_terminal) > 0.0)
    assert pred.altitude_effect == "minimal"


def test_prediction_skips_altitudes_beyond_model_range():
    pred = predict_terminal_velocity(make_analysis(altitude=9000.0))
    assert np.allclose(pred.altitudes, [9000.0, 9500.0, 10000.0])
    assert pred.altitude_effect == "significant"


def test_vacuum_fall_helpers():
    assert freefall_time(455.0, 1.0) == pytest.approx(np.sqrt(2 * 454.0 / 9.81))
    assert landing_speed(455.0, 1.0) == pytest.approx(np.sqrt(2 * 9.81 * 454.0))
    assert freefall_time(1.0, 5.0) == 0.0


def test_reference_descent_without_drag_matches_vacuum_fall():
    pred = reference_descent(altitude=455.0, vertical_velocity=0.0, mass=80.0,
                             area=0.0, drag_coefficient=0.7, ground_level=1.0)
    assert pred.touchdown_time == pytest.approx(freefall_time(455.0, 1.0), rel=1e-6)
    assert pred.touchdown_speed == pytest.approx(landing_speed(455.0, 1.0), rel=1e-6)


def test_reference_descent_reaches_canopy_terminal_velocity():
    pred = reference_descent(altitude=455.0, vertical_velocity=0.0, mass=80.0,
                             area=50.0, drag_coefficient=1.75, ground_level=1.0)
    assert pred.touchdown_speed == pytest.approx(
        np.sqrt(2 * 80.0 * 9.81 / (AtmosphereModel().density(1.0) * 50.0 * 1.75)),
        rel=1e-2,
    )


def test_reference_descent_no_touchdown_within_horizon():
    pred = reference_descent(altitude=455.0, vertical_velocity=0.0, mass=80.0,
                             area=50.0, drag_coefficient=1.75, t_max=5.0)
    assert pred.touchdown_time is None
    assert pred.touchdown_speed is None


def test_frame_stepper_agrees_with_reference_descent():
    world = World(sub_steps=4)
    jumper = Skydiver("jumper")
    world.add_component(jumper)
    jumper.deploy_canopy()
    t_land = world.run(duration=300.0, dt=1.0 / 60.0, log_interval=0)

    pred = reference_descent(
        altitude=455.0, vertical_velocity=0.0, mass=80.0, area=50.0,
        drag_coefficient=1.75, ground_level=1.0, air_resistance=0.02,
    )
    assert t_land == pytest.approx(pred.touchdown_time, rel=0.02)
