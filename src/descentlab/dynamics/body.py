"""
Translation-only rigid body with ground and boundary collision handling.

The body keeps a fixed orientation; only its center of mass moves. Gravity is
applied by the integrator itself so a body falls even with no force model
attached.

All physical quantities use SI units:
- Position: meters [m]
- Velocity: meters per second [m/s]
- Acceleration: meters per second squared [m/s²]
- Force: Newtons [N]
- Mass: kilograms [kg]
"""
from __future__ import annotations

import warnings
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from descentlab.config import (
    DEFAULT_AIR_RESISTANCE,
    GRAVITY,
    JUMPER_MASS,
    CollisionConfig,
    spawn_position,
)
from descentlab.utils.validation import validate_non_negative, validate_positive

# Speeds below this skip the air-resistance term (avoids normalizing ~0 vectors)
AIR_RESISTANCE_MIN_SPEED = 0.1  # m/s
IDENTITY_QUATERNION = (0.0, 0.0, 0.0, 1.0)


def as_vector(value: ArrayLike, name: str = "vector") -> NDArray[np.float64]:
    """Convert to a float64 (3,) array, rejecting other shapes."""
    v = np.array(value, dtype=np.float64)
    if v.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {v.shape}")
    return v


@dataclass(frozen=True)
class BodySnapshot:
    """Per-frame render snapshot: position, velocity and orientation."""

    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    quaternion: NDArray[np.float64]


@dataclass(frozen=True)
class BodyState:
    """Full physics state of a body for telemetry."""

    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    acceleration: NDArray[np.float64]
    force: NDArray[np.float64]
    mass: float
    is_active: bool
    on_ground: bool


class RigidBody:
    """
    Point-mass rigid body in world frame (y up) with fixed orientation.

    State Variables
    ---------------
    - p : NDArray[np.float64]
        Position [m] (3,). p[1] is altitude.
    - v : NDArray[np.float64]
        Velocity [m/s] (3,)
    - a : NDArray[np.float64]
        Acceleration computed on the last integration step [m/s²] (3,)
    - f : NDArray[np.float64]
        Force accumulator [N] (3,), cleared at the end of every step
    - q : NDArray[np.float64]
        Orientation quaternion, scalar-last, always identity

    Parameters
    ----------
    name : str
        Identifier used in logs
    mass : float
        Body mass [kg]. Must be positive.
    position : ArrayLike | None
        Initial position [m]. Defaults to the standard spawn point.
    velocity : ArrayLike | None
        Initial velocity [m/s]. Defaults to zero.
    gravity : float
        Gravitational acceleration applied by the integrator [m/s²]
    air_resistance : float
        Baseline quadratic air-resistance coefficient k [N·s²/m²],
        F = -k*|v|²*v_hat. Set to 0 for a drag-free body.
    collision : CollisionConfig | None
        Ground and boundary geometry. Defaults to ``CollisionConfig()``.

    Raises
    ------
    ValueError
        If mass is not positive or air resistance is negative.

    Notes
    -----
    Per-step order in ``integrate``: net force -> acceleration -> velocity ->
    position -> ground collision -> boundary collisions -> rest clamp ->
    ground-contact flag -> force accumulator reset.
    """
    __slots__ = (
        "name", "p", "v", "a", "f", "q",
        "mass", "gravity", "air_resistance", "collision",
        "is_active", "on_ground", "last_ground_time", "time",
        "initial_position", "last_force",
    )

    def __init__(
        self,
        name: str = "body",
        mass: float = JUMPER_MASS,
        position: ArrayLike | None = None,
        velocity: ArrayLike | None = None,
        gravity: float = GRAVITY,
        air_resistance: float = DEFAULT_AIR_RESISTANCE,
        collision: CollisionConfig | None = None,
    ) -> None:
        validate_positive(mass, "Mass")
        validate_non_negative(air_resistance, "Air resistance")

        self.name = name
        self.mass = float(mass)
        self.gravity = float(gravity)
        self.air_resistance = float(air_resistance)
        self.collision = collision if collision is not None else CollisionConfig()

        self.p = spawn_position() if position is None else as_vector(position, "position")
        self.v = (np.zeros(3, dtype=np.float64) if velocity is None
                  else as_vector(velocity, "velocity"))
        self.a = np.zeros(3, dtype=np.float64)
        self.f = np.zeros(3, dtype=np.float64)
        self.q = np.array(IDENTITY_QUATERNION, dtype=np.float64)
        self.last_force = np.zeros(3, dtype=np.float64)

        self.initial_position = self.p.copy()
        self.is_active = True
        self.on_ground = False
        self.last_ground_time = 0.0
        self.time = 0.0

    # ------------------------------------------------------------------
    # Force accumulation
    # ------------------------------------------------------------------

    def apply_force(self, f: ArrayLike) -> None:
        """Accumulate a force at the center of mass until the next step [N]."""
        self.f += as_vector(f, "force")

    def apply_impulse(self, impulse: ArrayLike) -> None:
        """Instantaneous velocity change dv = J / m for impulse J [N·s]."""
        self.v += as_vector(impulse, "impulse") / self.mass

    def clear_forces(self) -> None:
        """Reset the force accumulator to zero."""
        self.f.fill(0.0)

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def net_force(self) -> NDArray[np.float64]:
        """
        Total force acting this step [N].

        Sum of the accumulated external forces, gravity (0, -m*g, 0) and the
        baseline air resistance -k*|v|²*v_hat.
        """
        total = self.f.copy()
        total[1] -= self.mass * self.gravity

        speed = float(np.linalg.norm(self.v))
        if speed > AIR_RESISTANCE_MIN_SPEED and self.air_resistance > 0.0:
            total += -self.air_resistance * speed * self.v
        return total

    def integrate(self, dt: float) -> None:
        """
        Advance the body by one step of ``dt`` seconds.

        Parameters
        ----------
        dt : float
            Time step [s]

        Notes
        -----
        Velocity is updated first, then position with the updated velocity
        plus the constant-acceleration term:

            v_{n+1} = v_n + a dt
            p_{n+1} = p_n + v_{n+1} dt + 0.5 a dt²

        A sleeping body is left untouched.
        """
        if not self.is_active:
            return

        force = self.net_force()
        self.last_force = force
        self.a = force / self.mass

        self.v += self.a * dt
        self.p += self.v * dt + 0.5 * self.a * dt * dt
        self.time += dt

        self.resolve_collisions()
        self.update_ground_contact()
        self.clear_forces()

    def resolve_collisions(self) -> None:
        """
        Clamp the body against the ground plane and the world boundaries.

        Ground is resolved before the side boundaries. A grounded body whose
        speed falls below ``collision.rest_speed`` is brought to rest.
        """
        c = self.collision

        if self.p[1] < c.ground_level:
            self.p[1] = c.ground_level
            if self.v[1] < 0.0:
                self.v[1] = -self.v[1] * c.restitution
            if self.on_ground:
                self.v[0] *= c.friction
                self.v[2] *= c.friction

        if abs(self.p[0]) > c.boundary_x:
            self.p[0] = np.sign(self.p[0]) * c.boundary_x
            self.v[0] = -self.v[0] * c.restitution

        if abs(self.p[2]) > c.boundary_z:
            self.p[2] = np.sign(self.p[2]) * c.boundary_z
            self.v[2] = -self.v[2] * c.restitution

        # Rest clamp only near the ground; in the air a slow body must keep accelerating
        near_ground = self.p[1] - c.ground_level <= c.contact_threshold
        if near_ground and np.linalg.norm(self.v) < c.rest_speed:
            self.v.fill(0.0)

    def update_ground_contact(self) -> None:
        """Refresh ``on_ground`` and record the simulation time of contact."""
        distance = self.p[1] - self.collision.ground_level
        self.on_ground = bool(distance <= self.collision.contact_threshold)
        if self.on_ground:
            self.last_ground_time = self.time

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_mass(self, mass: float) -> bool:
        """
        Change the body mass.

        Returns
        -------
        bool
            False (state unchanged, RuntimeWarning issued) if mass <= 0.
        """
        if not mass > 0:
            warnings.warn(
                f"Rejected mass {mass} kg for '{self.name}': mass must be positive.",
                RuntimeWarning,
                stacklevel=2,
            )
            return False
        self.mass = float(mass)
        return True

    def set_velocity(self, velocity: ArrayLike) -> None:
        self.v = as_vector(velocity, "velocity")

    def set_position(self, position: ArrayLike) -> None:
        self.p = as_vector(position, "position")

    def sleep(self) -> None:
        """Deactivate the body; ``integrate`` becomes a no-op."""
        self.is_active = False

    def wake_up(self) -> None:
        self.is_active = True

    @property
    def sleep_state(self) -> int:
        """0 = awake, 1 = sleeping."""
        return 0 if self.is_active else 1

    def reset(self) -> None:
        """Return to the initial position at rest, awake and airborne."""
        self.p = self.initial_position.copy()
        self.v = np.zeros(3, dtype=np.float64)
        self.a = np.zeros(3, dtype=np.float64)
        self.f = np.zeros(3, dtype=np.float64)
        self.last_force = np.zeros(3, dtype=np.float64)
        self.q = np.array(IDENTITY_QUATERNION, dtype=np.float64)
        self.is_active = True
        self.on_ground = False
        self.last_ground_time = 0.0
        self.time = 0.0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def altitude(self) -> float:
        """Height of the center of mass [m]."""
        return float(self.p[1])

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.v))

    def kinetic_energy(self) -> float:
        """Kinetic energy 0.5*m*|v|² [J]."""
        return float(0.5 * self.mass * np.dot(self.v, self.v))

    def potential_energy(self) -> float:
        """Gravitational potential energy m*g*altitude [J]."""
        return float(self.mass * self.gravity * self.p[1])

    def total_energy(self) -> float:
        """Total mechanical energy [J]."""
        return self.kinetic_energy() + self.potential_energy()

    def snapshot(self) -> BodySnapshot:
        """Copy of the state a renderer needs for one frame."""
        return BodySnapshot(
            position=self.p.copy(),
            velocity=self.v.copy(),
            quaternion=self.q.copy(),
        )

    def state(self) -> BodyState:
        return BodyState(
            position=self.p.copy(),
            velocity=self.v.copy(),
            acceleration=self.a.copy(),
            force=self.f.copy(),
            mass=self.mass,
            is_active=self.is_active,
            on_ground=self.on_ground,
        )

    def __repr__(self) -> str:
        return (
            f"RigidBody(name='{self.name}', mass={self.mass}, "
            f"p={np.array2string(self.p, precision=2)})"
        )
