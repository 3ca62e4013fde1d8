import numpy as np
import pytest

from descentlab.components import DeploymentState, DeployResult, Skydiver
from descentlab.core.simulation import World
from descentlab.dynamics.body import RigidBody
from descentlab.dynamics.forces import terminal_velocity

DT = 1.0 / 60.0


def run_frames(world, n, dt=DT):
    for _ in range(n):
        world.step(dt)


@pytest.fixture
def world_with_jumper(jumper):
    world = World()
    world.add_component(jumper)
    return world, jumper


def test_default_jumper(jumper):
    assert jumper.altitude == pytest.approx(455.0)
    assert jumper.state is DeploymentState.FREEFALL
    assert jumper.body.mass == 80.0
    assert jumper.can_deploy()
    assert jumper.deploy_reason() == "Ready to deploy"


def test_deploy_command(jumper):
    assert jumper.deploy_canopy() is DeployResult.ACCEPTED
    assert jumper.state is DeploymentState.OPENING
    assert jumper.deploy_canopy() is DeployResult.ALREADY_DEPLOYED
    assert not jumper.can_deploy()


def test_deploy_rejected_near_ground(jumper):
    jumper.set_position([0.0, 3.0, 0.0])
    assert jumper.deploy_canopy() is DeployResult.TOO_CLOSE_TO_GROUND
    assert jumper.state is DeploymentState.FREEFALL
    assert jumper.deploy_reason() == "Too close to ground"


def test_canopy_fully_deploys_in_simulation_time(world_with_jumper):
    world, jumper = world_with_jumper
    jumper.deploy_canopy()
    run_frames(world, 100)
    assert jumper.state is DeploymentState.OPENING
    run_frames(world, 30)
    assert jumper.state is DeploymentState.DEPLOYED


def test_canopy_slows_descent(world_with_jumper):
    world, jumper = world_with_jumper
    jumper.deploy_canopy()
    run_frames(world, 600)
    assert jumper.state is DeploymentState.DEPLOYED
    assert 2.0 < -jumper.body.v[1] < 6.0
    assert jumper.altitude > 1.0


def test_reset_mid_fall_restores_spawn():
    body = RigidBody("jumper", position=np.array([0.0, 500.0, 0.0]))
    jumper = Skydiver("jumper", body=body)
    world = World(sub_steps=2)
    world.add_component(jumper)
    run_frames(world, 120)
    jumper.deploy_canopy()
    run_frames(world, 60)
    jumper.reset_to_initial()
    assert np.array_equal(jumper.body.p, [0.0, 500.0, 0.0])
    assert np.array_equal(jumper.body.v, np.zeros(3))
    assert jumper.state is DeploymentState.FREEFALL
    assert jumper.deployment.canopy_area == 0.0


def test_wind_drifts_open_canopy(world_with_jumper):
    world, jumper = world_with_jumper
    jumper.set_wind(10.0, 0.0)
    jumper.deploy_canopy()
    run_frames(world, 120)
    assert jumper.body.v[0] > 0.0
    assert jumper.body.p[0] > 0.0


def test_wind_ignored_in_freefall(world_with_jumper):
    world, jumper = world_with_jumper
    jumper.set_wind(10.0, 0.0)
    run_frames(world, 60)
    assert jumper.body.v[0] == 0.0


def test_tension_reported_but_not_applied(world_with_jumper):
    world, jumper = world_with_jumper
    jumper.deploy_canopy()
    run_frames(world, 1)
    f = jumper.last_forces
    assert 0.8 * 784.8 <= f.tension[1] <= 784.8
    assert np.allclose(f.total, f.drag + f.wind)


def test_terminal_velocity_uses_state_parameters(jumper):
    tv = jumper.terminal_velocity()
    rho = jumper.environment_info().density
    assert tv.value == pytest.approx(terminal_velocity(80.0, 9.81, rho, 0.7, 0.7))
    assert tv.state is DeploymentState.FREEFALL
    assert tv.below_terminal

    jumper.deploy_canopy()
    open_tv = jumper.terminal_velocity()
    assert open_tv.value == pytest.approx(terminal_velocity(80.0, 9.81, rho, 50.0, 1.75))
    assert open_tv.value < tv.value


def test_parameter_setters(jumper):
    with pytest.warns(RuntimeWarning):
        assert jumper.set_mass(0.0) is False
    assert jumper.set_mass(95.0)
    assert jumper.body.mass == 95.0
    assert jumper.set_canopy_area(40.0)
    assert jumper.set_drag_coefficients(0.8, 1.0)


def test_telemetry_record(jumper):
    tel = jumper.telemetry()
    assert tel.state is DeploymentState.FREEFALL
    assert tel.altitude == pytest.approx(455.0)
    assert tel.position.shape == (3,)
    assert tel.air_density < 1.225
    assert tel.total_energy == pytest.approx(tel.kinetic_energy + tel.potential_energy)
    assert not tel.canopy_open


def test_snapshot_quaternion_is_identity(jumper):
    snap = jumper.snapshot()
    assert np.allclose(snap.quaternion, [0.0, 0.0, 0.0, 1.0])


def test_canopy_deployed_after_exact_opening_duration(world_with_jumper):
    world, jumper = world_with_jumper
    jumper.deploy_canopy()
    run_frames(world, 120)
    assert jumper.state is DeploymentState.DEPLOYED


@pytest.mark.parametrize("sub_steps", [1, 4])
def test_deploy_stamped_with_world_clock(jumper, sub_steps):
    world = World(sub_steps=sub_steps)
    world.add_component(jumper)
    run_frames(world, 60)
    jumper.deploy_canopy()
    assert jumper.deployment.deployment_time == world.time
    assert jumper.telemetry().time == world.time


def test_body_follows_environment_gravity(world_with_jumper):
    world, jumper = world_with_jumper
    jumper.environment.gravity = 3.71
    world.step(DT)
    assert jumper.body.gravity == 3.71
    assert jumper.body.v[1] == pytest.approx(-3.71 * DT)
    assert jumper.body.potential_energy() == pytest.approx(80.0 * 3.71 * jumper.altitude)


def test_set_gravity_updates_environment_and_body(jumper):
    jumper.set_gravity(1.62)
    assert jumper.environment.gravity == 1.62
    assert jumper.body.gravity == 1.62
    assert jumper.terminal_velocity().value == pytest.approx(
        terminal_velocity(80.0, 1.62, jumper.environment_info().density, 0.7, 0.7)
    )
