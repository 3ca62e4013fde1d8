from .body import BodySnapshot, BodyState, RigidBody
from .forces import (
    ForceBreakdown,
    ForceModel,
    drag_force,
    gravity_force,
    tension_force,
    terminal_velocity,
    wind_force,
)
