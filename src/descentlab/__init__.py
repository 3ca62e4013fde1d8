"""
descentlab - Skydiving descent physics: freefall, canopy deployment and landing.

Core Components
---------------
World : Sub-stepped simulation orchestrator
RigidBody : Translation-only body with ground and boundary collisions
Environment : Gravity, wind and sea-level atmosphere settings
AtmosphereModel : Temperature, pressure and density versus altitude

Component Architecture
----------------------
Component : Base class for bodies with domain behavior
Skydiver : Jumper with a deployable canopy
DeploymentState : FREEFALL -> OPENING -> DEPLOYED

Examples
--------
>>> from descentlab import World, Skydiver
>>> world = World(sub_steps=4)
>>> jumper = Skydiver("jumper")
>>> world.add_component(jumper)
>>> world.run(duration=10.0)
"""

__version__ = "0.1.0"

from descentlab.components import (
    Component,
    DeploymentState,
    DeploymentStateMachine,
    DeployResult,
    Skydiver,
    SkydiverState,
)
from descentlab.config import CanopyConfig, CollisionConfig
from descentlab.core.analysis import reference_descent
from descentlab.core.simulation import World, WorldStats
from descentlab.dynamics.body import RigidBody
from descentlab.dynamics.forces import ForceBreakdown, ForceModel, terminal_velocity

# Logging
from descentlab.logger import CSVLogger
from descentlab.models import AtmosphereModel, AtmosphericSample, Environment
from descentlab.api.scenario import Scenario

__all__ = [
    # Version
    "__version__",
    # Core
    "World",
    "WorldStats",
    "RigidBody",
    "CollisionConfig",
    # Environment
    "Environment",
    "AtmosphereModel",
    "AtmosphericSample",
    # Forces
    "ForceModel",
    "ForceBreakdown",
    "terminal_velocity",
    "reference_descent",
    # Components
    "Component",
    "Skydiver",
    "SkydiverState",
    "CanopyConfig",
    "DeploymentState",
    "DeploymentStateMachine",
    "DeployResult",
    # Logging
    "CSVLogger",
    # API
    "Scenario",
]
