"""
Simulation environment: gravity, wind and sea-level reference conditions.

The environment is an explicit value handed to the force model and the
atmosphere model, never ambient global state. It is mutated only through its
setters.
"""
from __future__ import annotations

import math
import warnings
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from descentlab.config import (
    CALM_WIND_SPEED,
    GRAVITY,
    SEA_LEVEL_PRESSURE,
    SEA_LEVEL_TEMPERATURE,
)
from descentlab.models.atmosphere import AtmosphereModel


@dataclass
class Environment:
    """
    Process-wide environmental settings.

    Attributes
    ----------
    gravity : float
        Gravitational acceleration magnitude [m/s²]
    wind_strength : float
        Wind speed [m/s], always >= 0
    wind_direction : float
        Wind heading in the horizontal x-z plane [rad]. 0 blows toward +x,
        pi/2 toward +z.
    sea_level_temperature : float
        [°C]
    sea_level_pressure : float
        [Pa]
    """

    gravity: float = GRAVITY
    wind_strength: float = 0.0
    wind_direction: float = 0.0
    sea_level_temperature: float = SEA_LEVEL_TEMPERATURE
    sea_level_pressure: float = SEA_LEVEL_PRESSURE

    def __post_init__(self) -> None:
        if not self.gravity >= 0:
            raise ValueError(f"Gravity magnitude must be non-negative, got {self.gravity}")
        self.set_wind(self.wind_strength, self.wind_direction, verbose=False)

    def set_gravity(self, gravity: float) -> bool:
        """
        Set the gravitational acceleration magnitude [m/s²].

        Returns
        -------
        bool
            False (unchanged, RuntimeWarning issued) for negative or NaN values.
        """
        if not gravity >= 0:
            warnings.warn(
                f"Rejected gravity {gravity} m/s²: magnitude must be non-negative.",
                RuntimeWarning,
                stacklevel=2,
            )
            return False
        self.gravity = float(gravity)
        return True

    def set_wind(self, strength: float, direction: float, verbose: bool = True) -> None:
        """
        Set wind conditions.

        Parameters
        ----------
        strength : float
            Wind speed [m/s]. Negative values are clamped to 0; speeds below
            0.5 m/s are treated as calm.
        direction : float
            Wind heading [rad]
        verbose : bool
            Print the resulting wind setting.
        """
        s = max(0.0, float(strength))
        if s < CALM_WIND_SPEED:
            s = 0.0
        self.wind_strength = s
        self.wind_direction = float(direction)
        if verbose:
            print(
                f"[Environment] Wind set to {self.wind_strength:.1f} m/s at "
                f"{math.degrees(self.wind_direction):.1f} deg"
            )

    def disable_wind(self) -> None:
        """Calm air: zero strength and heading."""
        self.wind_strength = 0.0
        self.wind_direction = 0.0
        print("[Environment] Wind disabled")

    def wind_velocity(self) -> NDArray[np.float64]:
        """Wind velocity vector in world frame [m/s] (3,). Horizontal only."""
        return np.array([
            math.cos(self.wind_direction) * self.wind_strength,
            0.0,
            math.sin(self.wind_direction) * self.wind_strength,
        ], dtype=np.float64)

    def atmosphere(self, pressure_model: str = "barometric") -> AtmosphereModel:
        """Atmosphere model bound to this environment's reference conditions."""
        return AtmosphereModel(
            sea_level_temperature=self.sea_level_temperature,
            sea_level_pressure=self.sea_level_pressure,
            gravity=self.gravity,
            pressure_model=pressure_model,
        )
