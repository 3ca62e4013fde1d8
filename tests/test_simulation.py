import csv

import numpy as np
import pytest

from descentlab import Skydiver, World
from descentlab.dynamics.body import RigidBody

DT = 1.0 / 60.0


def drag_free(name="b", y=400.0):
    return RigidBody(name, mass=80.0, position=np.array([0.0, y, 0.0]), air_resistance=0.0)


def test_invalid_sub_steps():
    with pytest.raises(ValueError):
        World(sub_steps=0)


def test_add_body_is_idempotent():
    world = World()
    b = drag_free()
    assert world.add_body(b) == 0
    assert world.add_body(b) == 0
    assert len(world.bodies) == 1


def test_remove_body():
    world = World()
    jumper = Skydiver("jumper")
    world.add_component(jumper)
    world.remove_body(drag_free("stranger"))  # absent: no-op
    assert len(world.bodies) == 1
    world.remove_body(jumper.body)
    assert world.bodies == []
    assert world.components == []


def test_bodies_integrated_in_insertion_order():
    order = []

    class RecordingBody(RigidBody):
        def integrate(self, dt):
            order.append(self.name)
            super().integrate(dt)

    world = World(sub_steps=2)
    for name in ("c", "a", "b"):
        world.add_body(RecordingBody(name, position=np.array([0.0, 400.0, 0.0])))
    world.step(DT)
    assert order == ["c", "a", "b", "c", "a", "b"]


def test_non_positive_step_is_ignored():
    world = World()
    b = drag_free()
    world.add_body(b)
    with pytest.warns(RuntimeWarning):
        world.step(0.0)
    with pytest.warns(RuntimeWarning):
        world.step(-0.1)
    assert world.time == 0.0
    assert b.p[1] == 400.0


def test_large_step_warns():
    world = World()
    world.add_body(drag_free())
    with pytest.warns(RuntimeWarning, match="Large timestep"):
        world.step(2.0)
    assert world.time == pytest.approx(2.0)


def test_sub_steps_match_smaller_frames():
    w1, w4 = World(sub_steps=1), World(sub_steps=4)
    b1, b4 = drag_free(), drag_free()
    w1.add_body(b1)
    w4.add_body(b4)
    for _ in range(30):
        for _ in range(4):
            w1.step(DT / 4)
        w4.step(DT)
    assert w4.time == pytest.approx(w1.time)
    assert np.allclose(b1.p, b4.p)
    assert np.allclose(b1.v, b4.v)


def test_stats():
    world = World()
    a, b = drag_free("a"), drag_free("b")
    world.add_body(a)
    world.add_body(b)
    b.sleep()
    world.step(DT)
    stats = world.stats()
    assert stats.body_count == 2
    assert stats.active_bodies == 1
    assert stats.time == pytest.approx(DT)
    assert b.p[1] == 400.0


def test_gravity_accessors():
    world = World()
    assert np.allclose(world.get_gravity(), [0.0, -9.81, 0.0])
    world.set_gravity([0.0, -1.62, 0.0])
    g = world.get_gravity()
    g[1] = 0.0
    assert world.get_gravity()[1] == pytest.approx(-1.62)


def test_gravity_broadcast_to_bodies():
    world = World(gravity=(0.0, -1.62, 0.0), broadcast_gravity=True)
    b = drag_free()
    world.add_body(b)
    world.step(DT)
    assert b.gravity == pytest.approx(1.62)
    assert b.v[1] == pytest.approx(-1.62 * DT)


def test_gravity_broadcast_reaches_skydiver_environment():
    world = World(gravity=(0.0, -1.62, 0.0), broadcast_gravity=True)
    jumper = Skydiver("jumper")
    world.add_component(jumper)
    world.step(DT)
    assert jumper.environment.gravity == pytest.approx(1.62)
    assert jumper.body.gravity == pytest.approx(1.62)


def test_per_body_gravity_kept_without_broadcast():
    world = World(gravity=(0.0, -1.62, 0.0))
    b = drag_free()
    world.add_body(b)
    world.step(DT)
    assert b.gravity == pytest.approx(9.81)


def test_run_stops_on_landing():
    world = World(sub_steps=2)
    b = drag_free(y=20.0)
    world.add_body(b)
    t = world.run(duration=30.0, dt=DT, log_interval=0)
    assert t < 3.0
    assert b.on_ground
    assert b.p[1] >= 1.0


def test_run_with_termination_callback():
    world = World()
    world.add_body(drag_free())
    world.set_termination_callback(lambda w: w.time >= 0.5)
    t = world.run(duration=10.0, dt=0.1, log_interval=0)
    assert t == pytest.approx(0.5)


def test_energy_summary():
    world = World()
    b = drag_free()
    world.add_body(b)
    e = world.get_energy()
    assert e["kinetic"] == 0.0
    assert e["potential"] == pytest.approx(80.0 * 9.81 * 400.0)
    assert e["total"] == pytest.approx(e["kinetic"] + e["potential"])


def test_logging_writes_csv_and_plots(tmp_path):
    world = World.with_logging("drop", output_dir=tmp_path)
    jumper = Skydiver("jumper")
    world.add_component(jumper)
    jumper.deploy_canopy()
    world.run(duration=1.0, dt=DT, log_interval=0)
    world.save_plots()

    csv_path = world.output_path / "logs" / "simulation.csv"
    with open(csv_path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][0] == "t"
    assert "jumper.p_y" in rows[0]
    assert "jumper.state" in rows[0]
    assert len(rows) > 60
    assert (world.output_path / "plots" / "jumper_descent.png").exists()
    assert (world.output_path / "plots" / "jumper_forces.png").exists()
    world.disable_logging()
    assert world.logger is None


def test_save_plots_requires_logging():
    with pytest.raises(RuntimeError):
        World().save_plots()


def test_enable_logging_requires_name(tmp_path):
    world = World(output_dir=tmp_path)
    with pytest.raises(ValueError):
        world.enable_logging()
