"""
Force models for a falling jumper with an optional canopy.

Each contributor is an independent pure function of body state and
environment returning a force vector; ``ForceModel`` sums the contributors
that apply in the current deployment state.

Physical units:
- Forces: Newtons [N]
- Velocities: meters per second [m/s]
- Areas: square meters [m²]
- Densities: kilograms per cubic meter [kg/m³]
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from descentlab.config import WIND_ALTITUDE_THRESHOLD
from descentlab.models.environment import Environment

if TYPE_CHECKING:
    from descentlab.components.canopy import DeploymentStateMachine

EPSILON_VELOCITY = 1e-12  # Minimum speed for drag direction


def _zero() -> NDArray[np.float64]:
    return np.zeros(3, dtype=np.float64)


def gravity_force(mass: float, g: float) -> NDArray[np.float64]:
    """Weight F = (0, -m*g, 0) [N]."""
    return np.array([0.0, -mass * g, 0.0], dtype=np.float64)


def drag_force(
    velocity: NDArray[np.float64],
    area: float,
    cd: float,
    rho: float,
) -> NDArray[np.float64]:
    """
    Quadratic aerodynamic drag opposing ``velocity``.

    F = -0.5 * Cd * A * rho * |v| * v

    Parameters
    ----------
    velocity : NDArray[np.float64]
        Velocity of the body relative to the air [m/s] (3,)
    area : float
        Reference area [m²]
    cd : float
        Drag coefficient [-]
    rho : float
        Air density [kg/m³]

    Returns
    -------
    NDArray[np.float64]
        Drag force [N] (3,). Zero vector for a (near-)stationary body.
    """
    v = np.asarray(velocity, dtype=np.float64)
    speed = float(np.linalg.norm(v))
    if speed < EPSILON_VELOCITY:
        return _zero()
    return -0.5 * cd * area * rho * speed * v


def wind_force(
    velocity: NDArray[np.float64],
    wind_velocity: NDArray[np.float64],
    area: float,
    cd_horizontal: float,
    rho: float,
) -> NDArray[np.float64]:
    """
    Force of the wind on an open canopy.

    Drag is computed on the horizontal air velocity relative to the body,
    w - v, and acts along it, so a body at rest is pushed downwind and a body
    moving with the wind feels no force.

    Returns
    -------
    NDArray[np.float64]
        Wind force [N] (3,). The vertical component is always zero.
    """
    relative = np.asarray(wind_velocity, dtype=np.float64) - np.asarray(velocity, dtype=np.float64)
    relative[1] = 0.0
    # Air moving past the body at +u acts like the body moving at -u
    return drag_force(-relative, area, cd_horizontal, rho)


def tension_force(
    mass: float,
    g: float,
    opening_progress: float,
    deployed: bool,
    initial_fraction: float,
) -> NDArray[np.float64]:
    """
    Upward suspension-line load of an inflating canopy.

    During opening the load ramps linearly from ``initial_fraction`` of the
    body weight to the full weight as progress goes 0 -> 1. Once deployed it
    is the full weight.

    Parameters
    ----------
    mass : float
        Body mass [kg]
    g : float
        Gravitational acceleration [m/s²]
    opening_progress : float
        Elapsed opening time over opening duration, clamped to [0, 1]
    deployed : bool
        True once opening has completed
    initial_fraction : float
        Load fraction at the start of opening [-]
    """
    weight = mass * g
    if deployed:
        return np.array([0.0, weight, 0.0], dtype=np.float64)
    s = min(max(float(opening_progress), 0.0), 1.0)
    factor = initial_fraction + (1.0 - initial_fraction) * s
    return np.array([0.0, weight * factor, 0.0], dtype=np.float64)


def terminal_velocity(mass: float, g: float, rho: float, area: float, cd: float) -> float:
    """
    Speed at which drag balances weight.

    Vt = sqrt(2*m*g / (rho*A*Cd))

    Returns ``inf`` when there is no drag (rho*A*Cd == 0).
    """
    denom = rho * area * cd
    if denom <= 0.0:
        return float("inf")
    return float(np.sqrt(2.0 * mass * g / denom))


@dataclass(frozen=True)
class ForceBreakdown:
    """
    Individual force contributions of one step [N].

    ``total`` is what the force model hands to the integrator. Gravity is
    listed for telemetry only; the integrator applies it itself.
    """

    gravity: NDArray[np.float64] = field(default_factory=_zero)
    drag: NDArray[np.float64] = field(default_factory=_zero)
    wind: NDArray[np.float64] = field(default_factory=_zero)
    tension: NDArray[np.float64] = field(default_factory=_zero)
    total: NDArray[np.float64] = field(default_factory=_zero)

    def as_dict(self) -> dict[str, NDArray[np.float64]]:
        return {
            "gravity": self.gravity,
            "drag": self.drag,
            "wind": self.wind,
            "tension": self.tension,
            "total": self.total,
        }


class ForceModel:
    """
    Combined canopy force model.

    Gravity is always reported but applied by the integrator. Drag, wind and
    (optionally) line tension are applied only while airborne with the canopy
    open. Wind additionally requires altitude above 5 m.

    Parameters
    ----------
    include_tension : bool
        Add the suspension-line load to the applied total. Off by default: the
        canopy drag already carries the jumper, and adding a weight-sized
        upward load on top cancels gravity entirely. The tension is computed
        and reported in the breakdown either way.
    wind_altitude_threshold : float
        Wind acts only above this altitude [m].

    Examples
    --------
    >>> model = ForceModel()
    >>> breakdown = model.compute(body_velocity, altitude, 80.0, rho, canopy, env)
    >>> body.apply_force(breakdown.total)
    """

    def __init__(
        self,
        include_tension: bool = False,
        wind_altitude_threshold: float = WIND_ALTITUDE_THRESHOLD,
    ) -> None:
        self.include_tension = bool(include_tension)
        self.wind_altitude_threshold = float(wind_altitude_threshold)

    def compute(
        self,
        velocity: NDArray[np.float64],
        altitude: float,
        mass: float,
        rho: float,
        canopy: DeploymentStateMachine,
        environment: Environment,
    ) -> ForceBreakdown:
        """
        Evaluate every contributor for the current body state.

        Parameters
        ----------
        velocity : NDArray[np.float64]
            Body velocity [m/s] (3,)
        altitude : float
            Body altitude [m]
        mass : float
            Body mass [kg]
        rho : float
            Air density at ``altitude`` [kg/m³]
        canopy : DeploymentStateMachine
            Deployment state supplying area and drag coefficients
        environment : Environment
            Gravity and wind settings

        Returns
        -------
        ForceBreakdown
        """
        g = environment.gravity
        weight = gravity_force(mass, g)

        if not canopy.is_open:
            return ForceBreakdown(gravity=weight)

        tension = tension_force(
            mass, g, canopy.opening_progress, canopy.is_deployed,
            canopy.config.initial_tension_fraction,
        )

        # Canopy forces only while airborne
        if altitude <= self.wind_altitude_threshold:
            return ForceBreakdown(gravity=weight, tension=tension)

        drag = drag_force(velocity, canopy.drag_area, canopy.cd_vertical, rho)
        wind = wind_force(
            velocity, environment.wind_velocity(), canopy.drag_area,
            canopy.cd_horizontal, rho,
        )

        total = drag + wind
        if self.include_tension:
            total = total + tension
        return ForceBreakdown(
            gravity=weight, drag=drag, wind=wind, tension=tension, total=total,
        )

    def __repr__(self) -> str:
        return f"ForceModel(include_tension={self.include_tension})"
