"""
descentlab component architecture.

Components wrap a RigidBody with domain-specific behavior using composition.

Example
-------
>>> from descentlab.components import Skydiver
>>> jumper = Skydiver("jumper")
>>> world.add_component(jumper)
"""

from .base import Component
from .canopy import DeploymentState, DeploymentStateMachine, DeployResult
from .skydiver import Skydiver, SkydiverState

__all__ = [
    "Component",
    "DeploymentState",
    "DeploymentStateMachine",
    "DeployResult",
    "Skydiver",
    "SkydiverState",
]
