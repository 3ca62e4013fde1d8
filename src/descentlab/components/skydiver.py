"""
Skydiver component: a jumper body with a deployable canopy.

Couples a RigidBody to the atmosphere, the canopy deployment state machine
and the canopy force model. This is the surface a renderer, UI or input
layer talks to: it reads snapshots and telemetry, and issues commands
(deploy, reset, wind, parameter changes).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from descentlab.components.base import Component
from descentlab.components.canopy import (
    DeploymentState,
    DeploymentStateMachine,
    DeployResult,
)
from descentlab.config import CanopyConfig
from descentlab.core.analysis import (
    TerminalVelocityAnalysis,
    TerminalVelocityPrediction,
    analyze_terminal_velocity,
    predict_terminal_velocity,
)
from descentlab.dynamics.body import BodySnapshot, RigidBody
from descentlab.dynamics.forces import ForceBreakdown, ForceModel
from descentlab.models.atmosphere import AtmosphereModel, AtmosphericSample
from descentlab.models.environment import Environment


@dataclass(frozen=True)
class SkydiverState:
    """Fixed-shape telemetry record for one skydiver."""

    time: float
    state: DeploymentState
    altitude: float
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    acceleration: NDArray[np.float64]
    terminal_velocity: float
    air_density: float
    temperature: float
    pressure: float
    canopy_open: bool
    on_ground: bool
    is_active: bool
    kinetic_energy: float
    potential_energy: float
    total_energy: float


class Skydiver(Component):
    """
    Jumper with canopy, driven by the World each sub-step.

    Parameters
    ----------
    name : str
        Component name (also used for the body)
    body : RigidBody | None
        Jumper body. A default 80 kg body at the spawn point is created if None.
    environment : Environment | None
        Shared environment. A default calm environment is created if None.
    canopy : CanopyConfig | None
        Canopy parameters. Round canopy by default.
    force_model : ForceModel | None
        Canopy force model. ``ForceModel()`` by default, which applies drag
        and wind but only reports line tension. Pass
        ``ForceModel(include_tension=True)`` to apply tension as well.
    pressure_model : str
        Atmosphere pressure law, 'barometric' or 'isa'

    Attributes
    ----------
    deployment : DeploymentStateMachine
        Canopy state
    atmosphere_sample : AtmosphericSample
        Atmosphere at the altitude of the last update
    last_forces : ForceBreakdown
        Force contributions of the last step

    Examples
    --------
    >>> env = Environment()
    >>> jumper = Skydiver("jumper", environment=env)
    >>> world = World()
    >>> world.add_component(jumper)
    >>> world.step(1 / 60)
    >>> jumper.deploy_canopy()
    <DeployResult.ACCEPTED: 1>
    """

    def __init__(
        self,
        name: str = "skydiver",
        body: RigidBody | None = None,
        environment: Environment | None = None,
        canopy: CanopyConfig | None = None,
        force_model: ForceModel | None = None,
        pressure_model: str = "barometric",
    ):
        self.environment = environment if environment is not None else Environment()
        if body is None:
            body = RigidBody(name=name, gravity=self.environment.gravity)
        super().__init__(name, body)

        self.deployment = DeploymentStateMachine(canopy)
        self.force_model = force_model if force_model is not None else ForceModel()
        self.pressure_model = pressure_model
        self.time = 0.0
        self.last_forces = ForceBreakdown()
        self.atmosphere_sample = self.atmosphere.sample(self.altitude)

    # ------------------------------------------------------------------
    # Component interface
    # ------------------------------------------------------------------

    @property
    def atmosphere(self) -> AtmosphereModel:
        """Atmosphere bound to the current environment settings."""
        return self.environment.atmosphere(self.pressure_model)

    def update_state(self, t: float, dt: float) -> None:
        """
        Resample the atmosphere and advance the canopy state machine.

        The body's gravity follows the environment, and ``self.time`` ends at
        the close of the sub-step so commands issued between frames are
        stamped with the World clock.

        Parameters
        ----------
        t : float
            Current simulation time [s]
        dt : float
            Time step [s]
        """
        self.body.gravity = self.environment.gravity
        self.atmosphere_sample = self.atmosphere.sample(self.altitude)
        was_opening = self.deployment.is_opening
        self.deployment.update(dt)
        self.time = t + dt
        if was_opening and self.deployment.is_deployed:
            print(f"[{self.name}] Canopy fully deployed at t={self.time:.3f}s")

    def apply_forces(self, t: float) -> None:
        """Compute canopy forces and accumulate them into the body."""
        self.last_forces = self.force_model.compute(
            self.body.v,
            self.altitude,
            self.body.mass,
            self.atmosphere_sample.density,
            self.deployment,
            self.environment,
        )
        if self.body.is_active:
            self.body.apply_force(self.last_forces.total)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def deploy_canopy(self) -> DeployResult:
        """
        Deploy the canopy at the current altitude.

        Returns
        -------
        DeployResult
            ACCEPTED, ALREADY_DEPLOYED or TOO_CLOSE_TO_GROUND. Rejections
            leave the state unchanged.
        """
        result = self.deployment.deploy(self.altitude, self.time)
        if result.accepted:
            print(
                f"[{self.name}] Deployment initiated at t={self.time:.3f}s, "
                f"alt={self.altitude:.1f}m, vel={self.body.speed:.1f}m/s"
            )
        elif result is DeployResult.TOO_CLOSE_TO_GROUND:
            print(f"[{self.name}] Cannot deploy canopy: too close to the ground")
        return result

    def reset_to_initial(self) -> None:
        """Back to the spawn point at rest, canopy packed, FREEFALL."""
        self.body.reset()
        self.deployment.reset()
        self.last_forces = ForceBreakdown()
        self.atmosphere_sample = self.atmosphere.sample(self.altitude)
        print(f"[{self.name}] Reset to freefall state")

    def set_wind(self, strength: float, direction: float) -> None:
        self.environment.set_wind(strength, direction)

    def disable_wind(self) -> None:
        self.environment.disable_wind()

    def set_gravity(self, gravity: float) -> None:
        """Set gravity on the environment and keep the body in step with it."""
        self.environment.set_gravity(gravity)
        self.body.gravity = self.environment.gravity

    def set_mass(self, mass: float) -> bool:
        return self.body.set_mass(mass)

    def set_canopy_area(self, area: float) -> bool:
        return self.deployment.set_canopy_area(area)

    def set_drag_coefficients(self, vertical: float, horizontal: float) -> bool:
        return self.deployment.set_drag_coefficients(vertical, horizontal)

    def apply_force(self, force: ArrayLike) -> None:
        self.body.apply_force(force)

    def apply_impulse(self, impulse: ArrayLike) -> None:
        self.body.apply_impulse(impulse)

    def set_velocity(self, velocity: ArrayLike) -> None:
        self.body.set_velocity(velocity)

    def set_position(self, position: ArrayLike) -> None:
        self.body.set_position(position)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def altitude(self) -> float:
        """Current altitude (y-position) [m]."""
        return float(self.body.p[1])

    @property
    def speed(self) -> float:
        return self.body.speed

    @property
    def state(self) -> DeploymentState:
        return self.deployment.state

    def can_deploy(self) -> bool:
        return self.deployment.check_deploy(self.altitude).accepted

    def deploy_reason(self) -> str:
        """Why a deploy command would currently be accepted or rejected."""
        return self.deployment.check_deploy(self.altitude).reason

    def environment_info(self) -> AtmosphericSample:
        """Atmosphere at the current altitude, freshly computed."""
        return self.atmosphere.sample(self.altitude)

    def terminal_velocity(self) -> TerminalVelocityAnalysis:
        """
        Terminal-velocity estimate for the current deployment state.

        Uses the state's drag area and vertical coefficient with the density
        at the current altitude. Diagnostic only.
        """
        sample = self.environment_info()
        return analyze_terminal_velocity(
            mass=self.body.mass,
            gravity=self.environment.gravity,
            air_density=sample.density,
            area=self.deployment.drag_area,
            drag_coefficient=self.deployment.cd_vertical,
            state=self.deployment.state,
            current_speed=self.body.speed,
            altitude=self.altitude,
        )

    def terminal_velocity_prediction(self) -> TerminalVelocityPrediction:
        return predict_terminal_velocity(self.terminal_velocity(), self.atmosphere)

    def snapshot(self) -> BodySnapshot:
        return self.body.snapshot()

    def telemetry(self) -> SkydiverState:
        """Fixed-shape state record for telemetry and UI readouts."""
        sample = self.environment_info()
        return SkydiverState(
            time=self.time,
            state=self.deployment.state,
            altitude=self.altitude,
            position=self.body.p.copy(),
            velocity=self.body.v.copy(),
            acceleration=self.body.a.copy(),
            terminal_velocity=self.terminal_velocity().value,
            air_density=sample.density,
            temperature=sample.temperature,
            pressure=sample.pressure,
            canopy_open=self.deployment.is_open,
            on_ground=self.body.on_ground,
            is_active=self.body.is_active,
            kinetic_energy=self.body.kinetic_energy(),
            potential_energy=self.body.potential_energy(),
            total_energy=self.body.total_energy(),
        )
