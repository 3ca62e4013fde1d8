import numpy as np
import pytest

from descentlab import Scenario
from descentlab.utils.io import load_simulation_history


@pytest.fixture
def hop_and_pop():
    return (
        Scenario("hop_and_pop")
        .add_skydiver("jumper", canopy="rectangular")
        .deploy_at(300.0)
        .configure_steps("smooth")
    )


def test_scenario_runs_to_landing(hop_and_pop):
    hop_and_pop.run(duration=300.0, log_interval=0)
    df = hop_and_pop.history

    assert set(df["state"]) == {"FREEFALL", "OPENING", "DEPLOYED"}
    first_open = df[df["state"] == "OPENING"].iloc[0]
    assert first_open["altitude"] <= 300.0
    assert first_open["altitude"] > 280.0
    assert bool(df["on_ground"].iloc[-1])
    assert (df["altitude"] >= 1.0).all()
    assert hop_and_pop.world.sub_steps == 4


def test_history_round_trip(hop_and_pop, tmp_path):
    hop_and_pop.run(duration=2.0, log_interval=0)
    path = hop_and_pop.save_history(tmp_path / "history.csv")
    loaded = load_simulation_history(path)
    assert loaded.shape == hop_and_pop.history.shape
    assert list(loaded.columns) == list(hop_and_pop.history.columns)


def test_initial_state_and_wind():
    sc = (
        Scenario("windy")
        .add_skydiver("jumper", mass=90.0, position=[0.0, 455.0, 0.0])
        .set_initial_state(altitude=800.0, velocity=[0.0, -10.0, 0.0])
        .set_wind(8.0, 0.0)
        .deploy_at(700.0)
    )
    jumper = sc.current
    assert jumper.body.mass == 90.0
    assert jumper.altitude == 800.0
    sc.run(duration=20.0, log_interval=0)
    assert jumper.body.p[0] > 0.0
    jumper.reset_to_initial()
    assert jumper.altitude == 800.0


def test_predict_landing(hop_and_pop):
    pred = hop_and_pop.configure_solver("fast").predict()
    assert pred.touchdown_time is not None
    assert pred.touchdown_time > 0.0
    assert pred.altitude[0] == pytest.approx(455.0)


def test_unknown_canopy_preset():
    with pytest.raises(ValueError):
        Scenario("bad").add_skydiver(canopy="triangular")


def test_run_without_skydivers():
    with pytest.raises(RuntimeError):
        Scenario("empty").run(duration=1.0)


def test_invalid_step_configuration():
    with pytest.raises(ValueError):
        Scenario("bad").configure_steps(frame_rate=0.0)


def test_logged_scenario_saves_plots(tmp_path):
    sc = (
        Scenario("logged", output_dir=tmp_path, log=True)
        .add_skydiver("jumper")
        .enable_plotting(show=False)
    )
    sc.run(duration=1.0, log_interval=0)
    plots = sc.world.output_path / "plots"
    assert (plots / "jumper_descent.png").exists()
    assert np.isfinite(sc.history["altitude"]).all()
