"""
Configuration constants and parameter sets for descent simulations.

All physical quantities use SI units unless noted otherwise:
- Temperature: degrees Celsius [°C]
- Pressure: pascal [Pa]
- Areas: square meters [m²]
- Time: seconds [s]

Parameter sets are plain dataclasses. Invalid values are rejected in
``__post_init__`` with ``ValueError``.
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# Environmental constants
GRAVITY = 9.81                    # m/s²
STANDARD_GRAVITY = 9.80665        # m/s², used by the ISA pressure law
SEA_LEVEL_TEMPERATURE = 15.0      # °C
SEA_LEVEL_PRESSURE = 101325.0     # Pa
TEMPERATURE_LAPSE_RATE = 0.0065   # °C/m
AIR_MOLAR_MASS = 0.0289644        # kg/mol
GAS_CONSTANT = 8.3144598          # J/(mol·K)
KELVIN_OFFSET = 273.15

# Validity range of the atmosphere model
MAX_ALTITUDE = 10000.0            # m
MIN_TEMPERATURE = -60.0           # °C
MAX_TEMPERATURE = 50.0            # °C

# Aerodynamic coefficients [-]
DRAG_COEFF_VERTICAL_FREEFALL = 0.7
DRAG_COEFF_VERTICAL_CANOPY = 1.75
DRAG_COEFF_HORIZONTAL_FREEFALL = 1.0
DRAG_COEFF_HORIZONTAL_CANOPY = 1.2

# Typical jumper and canopy values
JUMPER_MASS = 80.0                # kg
JUMPER_AREA = 0.7                 # m²
CANOPY_AREA_ROUND = 50.0          # m²
CANOPY_AREA_RECTANGULAR = 25.0    # m²

# Rigid body defaults
DEFAULT_AIR_RESISTANCE = 0.02     # N·s²/m²
DEFAULT_SPAWN_POSITION = (0.0, 455.0, 185.0)

# Deployment
OPENING_DURATION = 2.0            # s
MIN_DEPLOY_ALTITUDE = 5.0         # m
INITIAL_TENSION_FRACTION = 0.8    # fraction of body weight at line stretch
WIND_ALTITUDE_THRESHOLD = 5.0     # m
CALM_WIND_SPEED = 0.5             # m/s, weaker wind is treated as calm


@dataclass
class CollisionConfig:
    """
    Static collision geometry and contact response.

    Attributes
    ----------
    ground_level : float
        Lowest admissible body altitude [m].
    boundary_x : float
        Half-width of the world along x [m]. Position is clamped to ±boundary_x.
    boundary_z : float
        Half-depth of the world along z [m].
    restitution : float
        Fraction of normal velocity retained (and reversed) on impact [-].
        Small values give near-inelastic landings.
    friction : float
        Horizontal velocity scale applied per step while resting on ground [-].
    contact_threshold : float
        Height above ground still counted as ground contact [m].
    rest_speed : float
        Speed below which a grounded body is brought to rest [m/s].
    """

    ground_level: float = 1.0
    boundary_x: float = 100.0
    boundary_z: float = 200.0
    restitution: float = 0.1
    friction: float = 0.8
    contact_threshold: float = 0.1
    rest_speed: float = 0.1

    def __post_init__(self) -> None:
        if self.boundary_x <= 0 or self.boundary_z <= 0:
            raise ValueError(
                f"World boundaries must be positive, got "
                f"x={self.boundary_x}, z={self.boundary_z}"
            )
        if not 0.0 <= self.restitution <= 1.0:
            raise ValueError(f"Restitution must be in [0, 1], got {self.restitution}")
        if not 0.0 <= self.friction <= 1.0:
            raise ValueError(f"Friction must be in [0, 1], got {self.friction}")
        if self.contact_threshold < 0 or self.rest_speed < 0:
            raise ValueError("Contact threshold and rest speed must be non-negative")


@dataclass
class CanopyConfig:
    """
    Aerodynamic and timing parameters of a jumper with a canopy.

    Attributes
    ----------
    area : float
        Canopy reference area once deployment begins [m²].
    cd_vertical : float
        Vertical drag coefficient under canopy [-].
    cd_horizontal : float
        Horizontal drag coefficient under canopy [-].
    freefall_area : float
        Jumper frontal area before deployment [m²].
    freefall_cd_vertical : float
        Vertical drag coefficient in freefall [-].
    freefall_cd_horizontal : float
        Horizontal drag coefficient in freefall [-].
    opening_duration : float
        Time from deploy command to fully inflated canopy [s].
    min_deploy_altitude : float
        Deploy commands at or below this altitude are rejected [m].
    initial_tension_fraction : float
        Line tension at the start of opening, as a fraction of body weight [-].
    """

    area: float = CANOPY_AREA_ROUND
    cd_vertical: float = DRAG_COEFF_VERTICAL_CANOPY
    cd_horizontal: float = DRAG_COEFF_HORIZONTAL_CANOPY
    freefall_area: float = JUMPER_AREA
    freefall_cd_vertical: float = DRAG_COEFF_VERTICAL_FREEFALL
    freefall_cd_horizontal: float = DRAG_COEFF_HORIZONTAL_FREEFALL
    opening_duration: float = OPENING_DURATION
    min_deploy_altitude: float = MIN_DEPLOY_ALTITUDE
    initial_tension_fraction: float = INITIAL_TENSION_FRACTION

    def __post_init__(self) -> None:
        for name in ("area", "freefall_area"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        for name in ("cd_vertical", "cd_horizontal",
                     "freefall_cd_vertical", "freefall_cd_horizontal"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.opening_duration <= 0:
            raise ValueError(
                f"Opening duration must be positive, got {self.opening_duration}"
            )
        if not 0.0 <= self.initial_tension_fraction <= 1.0:
            raise ValueError(
                "Initial tension fraction must be in [0, 1], "
                f"got {self.initial_tension_fraction}"
            )

    @classmethod
    def round(cls, **overrides) -> CanopyConfig:
        """Round canopy (50 m²)."""
        return cls(area=CANOPY_AREA_ROUND, **overrides)

    @classmethod
    def rectangular(cls, **overrides) -> CanopyConfig:
        """Rectangular ram-air canopy (25 m²)."""
        return cls(area=CANOPY_AREA_RECTANGULAR, **overrides)


CANOPY_PRESETS = {
    "round": CanopyConfig.round,
    "rectangular": CanopyConfig.rectangular,
}


def spawn_position() -> np.ndarray:
    """Default spawn point of a jumper [m]."""
    return np.array(DEFAULT_SPAWN_POSITION, dtype=np.float64)
