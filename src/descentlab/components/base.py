"""
Base component abstraction for descent simulations.

Components wrap a RigidBody with domain-specific behavior and force
management. Composition: a Component HAS-A RigidBody.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

from descentlab.dynamics.body import RigidBody


class Component(ABC):
    """
    Base class for simulation components.

    The World calls ``update_state(t, dt)`` and then ``apply_forces(t)`` on
    every component before integrating its body.

    Parameters
    ----------
    name : str
        Unique component identifier
    body : RigidBody
        Underlying rigid body

    Examples
    --------
    >>> class Ballast(Component):
    ...     def update_state(self, t: float, dt: float) -> None:
    ...         pass
    ...     def apply_forces(self, t: float) -> None:
    ...         pass
    """

    def __init__(self, name: str, body: RigidBody):
        self.name = name
        self.body = body

    @abstractmethod
    def update_state(self, t: float, dt: float) -> None:
        """
        Update component-specific state.

        Parameters
        ----------
        t : float
            Current simulation time [s]
        dt : float
            Time step [s]
        """

    @abstractmethod
    def apply_forces(self, t: float) -> None:
        """Accumulate this step's forces into ``self.body``."""

    def set_gravity(self, gravity: float) -> None:
        """Set the gravity magnitude [m/s²] acting on this component's body."""
        self.body.gravity = float(gravity)

    @property
    def position(self) -> NDArray[np.float64]:
        """Component position in world frame [m]."""
        return self.body.p

    @property
    def velocity(self) -> NDArray[np.float64]:
        """Component velocity in world frame [m/s]."""
        return self.body.v

    @property
    def mass(self) -> float:
        """Component mass [kg]."""
        return self.body.mass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', body='{self.body.name}')"
