"""
Altitude-dependent atmosphere model (ISA-style troposphere approximation).

Temperature follows a linear lapse rate, pressure the barometric formula and
density the ideal-gas law. Altitude and temperature are clamped to the model's
validity range before use, so extreme or negative altitudes never extrapolate
the exponential pressure law.

Units:
- Altitude: meters [m]
- Temperature: degrees Celsius [°C]
- Pressure: pascal [Pa]
- Density: kilograms per cubic meter [kg/m³]

References
----------
.. [1] ISO 2533:1975, Standard Atmosphere.
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from descentlab.config import (
    AIR_MOLAR_MASS,
    GAS_CONSTANT,
    GRAVITY,
    KELVIN_OFFSET,
    MAX_ALTITUDE,
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
    SEA_LEVEL_PRESSURE,
    SEA_LEVEL_TEMPERATURE,
    STANDARD_GRAVITY,
    TEMPERATURE_LAPSE_RATE,
)

PRESSURE_MODELS = ("barometric", "isa")

# Imperial conversion factors
PA_PER_PSI = 6894.76
LB_FT3_PER_KG_M3 = 0.062428


def clamp_altitude(altitude: float, max_altitude: float = MAX_ALTITUDE) -> float:
    """Clamp altitude to the modeled range [0, max_altitude]."""
    return float(min(max(altitude, 0.0), max_altitude))


def temperature(
    altitude: float,
    sea_level_temperature: float = SEA_LEVEL_TEMPERATURE,
    lapse_rate: float = TEMPERATURE_LAPSE_RATE,
) -> float:
    """
    Air temperature at altitude.

    T = T0 - L*h, with h clamped to [0, MAX_ALTITUDE] and the result clamped
    to [MIN_TEMPERATURE, MAX_TEMPERATURE].

    Parameters
    ----------
    altitude : float
        Altitude above sea level [m]
    sea_level_temperature : float
        T0 [°C]
    lapse_rate : float
        L [°C/m]

    Returns
    -------
    float
        Temperature [°C]
    """
    h = clamp_altitude(altitude)
    t = sea_level_temperature - lapse_rate * h
    return float(min(max(t, MIN_TEMPERATURE), MAX_TEMPERATURE))


def pressure(
    altitude: float,
    temperature_c: float,
    sea_level_pressure: float = SEA_LEVEL_PRESSURE,
    gravity: float = GRAVITY,
) -> float:
    """
    Barometric pressure at altitude.

    P = P0 * exp(-M*g*h / (R*T)), with T the (already clamped) temperature
    in kelvin.

    Parameters
    ----------
    altitude : float
        Altitude [m]. Clamped to [0, MAX_ALTITUDE].
    temperature_c : float
        Temperature at that altitude [°C]
    sea_level_pressure : float
        P0 [Pa]
    gravity : float
        Gravitational acceleration [m/s²]

    Returns
    -------
    float
        Pressure [Pa]. Always finite and non-negative for finite inputs.
    """
    h = clamp_altitude(altitude)
    t_kelvin = temperature_c + KELVIN_OFFSET
    exponent = -AIR_MOLAR_MASS * gravity * h / (GAS_CONSTANT * t_kelvin)
    return float(sea_level_pressure * np.exp(exponent))


def pressure_isa(
    altitude: float,
    sea_level_pressure: float = SEA_LEVEL_PRESSURE,
) -> float:
    """
    ISA troposphere power law.

    P = P0 * (1 - L*h/T0)^(g*M/(R*L)) with T0 = 288.15 K and standard gravity.
    """
    h = clamp_altitude(altitude)
    t0 = SEA_LEVEL_TEMPERATURE + KELVIN_OFFSET
    L = TEMPERATURE_LAPSE_RATE
    exponent = (STANDARD_GRAVITY * AIR_MOLAR_MASS) / (GAS_CONSTANT * L)
    return float(sea_level_pressure * (1.0 - L * h / t0) ** exponent)


def density(pressure_pa: float, temperature_c: float) -> float:
    """
    Air density from the ideal-gas law: rho = P*M / (R*T).

    Parameters
    ----------
    pressure_pa : float
        Pressure [Pa]
    temperature_c : float
        Temperature [°C]

    Returns
    -------
    float
        Density [kg/m³]
    """
    t_kelvin = temperature_c + KELVIN_OFFSET
    return float(pressure_pa * AIR_MOLAR_MASS / (GAS_CONSTANT * t_kelvin))


@dataclass(frozen=True)
class AtmosphericSample:
    """Atmospheric state at one altitude. Recomputed every step, never cached."""

    altitude: float
    temperature: float
    pressure: float
    density: float

    @property
    def temperature_fahrenheit(self) -> float:
        return self.temperature * 9.0 / 5.0 + 32.0

    @property
    def pressure_psi(self) -> float:
        return self.pressure / PA_PER_PSI

    @property
    def density_lb_ft3(self) -> float:
        return self.density * LB_FT3_PER_KG_M3

    def imperial(self) -> dict[str, float]:
        """Readout in imperial units (°F, psi, lb/ft³)."""
        return {
            "altitude": self.altitude,
            "temperature_f": self.temperature_fahrenheit,
            "pressure_psi": self.pressure_psi,
            "density_lb_ft3": self.density_lb_ft3,
        }


class AtmosphereModel:
    """
    Altitude -> (temperature, pressure, density) mapping.

    Parameters
    ----------
    sea_level_temperature : float
        T0 [°C]. Default 15 °C.
    sea_level_pressure : float
        P0 [Pa]. Default 101325 Pa.
    gravity : float
        Gravitational acceleration used in the barometric exponent [m/s²]
    pressure_model : str
        'barometric' (default) or 'isa' (power-law troposphere)

    Examples
    --------
    >>> atm = AtmosphereModel()
    >>> sample = atm.sample(1500.0)
    >>> round(sample.temperature, 2)
    5.25
    """

    def __init__(
        self,
        sea_level_temperature: float = SEA_LEVEL_TEMPERATURE,
        sea_level_pressure: float = SEA_LEVEL_PRESSURE,
        gravity: float = GRAVITY,
        pressure_model: str = "barometric",
    ) -> None:
        if pressure_model not in PRESSURE_MODELS:
            raise ValueError(
                f"Pressure model must be one of {PRESSURE_MODELS}, got '{pressure_model}'"
            )
        if sea_level_pressure <= 0:
            raise ValueError(f"Sea level pressure must be positive, got {sea_level_pressure}")
        self.sea_level_temperature = float(sea_level_temperature)
        self.sea_level_pressure = float(sea_level_pressure)
        self.gravity = float(gravity)
        self.pressure_model = pressure_model

    def temperature(self, altitude: float) -> float:
        return temperature(altitude, self.sea_level_temperature)

    def pressure(self, altitude: float) -> float:
        if self.pressure_model == "isa":
            return pressure_isa(altitude, self.sea_level_pressure)
        return pressure(
            altitude, self.temperature(altitude), self.sea_level_pressure, self.gravity
        )

    def density(self, altitude: float) -> float:
        return density(self.pressure(altitude), self.temperature(altitude))

    def sample(self, altitude: float) -> AtmosphericSample:
        """Full atmospheric state at ``altitude``."""
        t = self.temperature(altitude)
        if self.pressure_model == "isa":
            p = pressure_isa(altitude, self.sea_level_pressure)
        else:
            p = pressure(altitude, t, self.sea_level_pressure, self.gravity)
        return AtmosphericSample(
            altitude=float(altitude),
            temperature=t,
            pressure=p,
            density=density(p, t),
        )

    def profile(self, altitudes: ArrayLike) -> dict[str, NDArray[np.float64]]:
        """
        Evaluate the model over an array of altitudes.

        Returns
        -------
        dict[str, NDArray[np.float64]]
            Keys 'altitude', 'temperature', 'pressure', 'density'.
        """
        h = np.asarray(altitudes, dtype=np.float64).ravel()
        samples = [self.sample(float(a)) for a in h]
        return {
            "altitude": h,
            "temperature": np.array([s.temperature for s in samples]),
            "pressure": np.array([s.pressure for s in samples]),
            "density": np.array([s.density for s in samples]),
        }

    def __repr__(self) -> str:
        return (
            f"AtmosphereModel(T0={self.sea_level_temperature}, "
            f"P0={self.sea_level_pressure}, model='{self.pressure_model}')"
        )
