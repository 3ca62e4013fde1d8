"""
Descent analysis: terminal-velocity diagnostics and reference integration.

Nothing here feeds back into the frame integrator. The terminal-velocity
estimate, the altitude tables and the ``solve_ivp`` reference descent are for
telemetry, validation and landing prediction only.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from scipy.integrate import solve_ivp

from descentlab.config import (
    CANOPY_AREA_ROUND,
    DRAG_COEFF_VERTICAL_CANOPY,
    DRAG_COEFF_VERTICAL_FREEFALL,
    GRAVITY,
    JUMPER_AREA,
    MAX_ALTITUDE,
)
from descentlab.dynamics.forces import terminal_velocity
from descentlab.models.atmosphere import AtmosphereModel

if TYPE_CHECKING:
    from descentlab.components.canopy import DeploymentState

# Speed-ratio bands used to classify the approach to terminal velocity
APPROACHING_BAND = (0.8, 1.1)
AT_TERMINAL_BAND = (0.95, 1.05)

TABLE_ALTITUDES = tuple(float(h) for h in range(0, 10001, 1000))
PREDICTION_OFFSETS = (0.0, 500.0, 1000.0, 2000.0)


@dataclass(frozen=True)
class TerminalVelocityAnalysis:
    """
    Terminal-velocity estimate for the current state.

    Attributes
    ----------
    value : float
        Terminal speed Vt [m/s]
    area, drag_coefficient : float
        Area [m²] and vertical drag coefficient [-] used for Vt
    air_density : float
        [kg/m³]
    mass, gravity : float
        [kg], [m/s²]
    state : DeploymentState
    current_speed : float
        |v| [m/s]
    velocity_ratio : float
        current_speed / value
    altitude : float
        [m]
    """

    value: float
    area: float
    drag_coefficient: float
    air_density: float
    mass: float
    gravity: float
    state: DeploymentState
    current_speed: float
    velocity_ratio: float
    altitude: float

    @property
    def approaching_terminal(self) -> bool:
        lo, hi = APPROACHING_BAND
        return lo <= self.velocity_ratio <= hi

    @property
    def at_terminal(self) -> bool:
        lo, hi = AT_TERMINAL_BAND
        return lo <= self.velocity_ratio <= hi

    @property
    def exceeding_terminal(self) -> bool:
        return self.velocity_ratio > APPROACHING_BAND[1]

    @property
    def below_terminal(self) -> bool:
        return self.velocity_ratio < APPROACHING_BAND[0]


def analyze_terminal_velocity(
    mass: float,
    gravity: float,
    air_density: float,
    area: float,
    drag_coefficient: float,
    state: DeploymentState,
    current_speed: float = 0.0,
    altitude: float = 0.0,
) -> TerminalVelocityAnalysis:
    """Build a ``TerminalVelocityAnalysis`` from the given parameters."""
    vt = terminal_velocity(mass, gravity, air_density, area, drag_coefficient)
    ratio = current_speed / vt if np.isfinite(vt) and vt > 0 else 0.0
    return TerminalVelocityAnalysis(
        value=vt,
        area=float(area),
        drag_coefficient=float(drag_coefficient),
        air_density=float(air_density),
        mass=float(mass),
        gravity=float(gravity),
        state=state,
        current_speed=float(current_speed),
        velocity_ratio=float(ratio),
        altitude=float(altitude),
    )


@dataclass(frozen=True)
class AltitudeRow:
    """One line of the altitude table."""

    altitude: float
    temperature: float
    pressure: float
    air_density: float
    freefall_terminal: float
    canopy_terminal: float


def altitude_table(
    mass: float,
    atmosphere: AtmosphereModel | None = None,
    canopy_area: float = CANOPY_AREA_ROUND,
    gravity: float = GRAVITY,
    altitudes: tuple[float, ...] = TABLE_ALTITUDES,
) -> list[AltitudeRow]:
    """
    Atmosphere and terminal velocities at a ladder of altitudes.

    Uses the ISA pressure law unless another model is passed in.
    """
    atm = atmosphere if atmosphere is not None else AtmosphereModel(pressure_model="isa")
    area = canopy_area or CANOPY_AREA_ROUND
    rows = []
    for h in altitudes:
        s = atm.sample(h)
        rows.append(AltitudeRow(
            altitude=float(h),
            temperature=s.temperature,
            pressure=s.pressure,
            air_density=s.density,
            freefall_terminal=terminal_velocity(
                mass, gravity, s.density, JUMPER_AREA, DRAG_COEFF_VERTICAL_FREEFALL),
            canopy_terminal=terminal_velocity(
                mass, gravity, s.density, area, DRAG_COEFF_VERTICAL_CANOPY),
        ))
    return rows


@dataclass(frozen=True)
class TerminalVelocityPrediction:
    """Terminal velocity at altitudes above the current one."""

    current: TerminalVelocityAnalysis
    altitudes: NDArray[np.float64]
    air_density: NDArray[np.float64]
    predicted_terminal: NDArray[np.float64]
    change_from_current: NDArray[np.float64]
    air_density_trend: str
    altitude_effect: str


def predict_terminal_velocity(
    current: TerminalVelocityAnalysis,
    atmosphere: AtmosphereModel | None = None,
) -> TerminalVelocityPrediction:
    """
    Predict Vt at the current altitude +0, +500, +1000 and +2000 m.

    Altitudes above ``MAX_ALTITUDE`` are skipped.
    """
    atm = atmosphere if atmosphere is not None else AtmosphereModel(pressure_model="isa")
    alts = np.array(
        [current.altitude + dh for dh in PREDICTION_OFFSETS
         if current.altitude + dh <= MAX_ALTITUDE],
        dtype=np.float64,
    )
    rho = np.array([atm.density(h) for h in alts], dtype=np.float64)
    vt = np.array([
        terminal_velocity(current.mass, current.gravity, r,
                          current.area, current.drag_coefficient)
        for r in rho
    ], dtype=np.float64)

    if current.air_density < 1.0:
        trend = "decreasing"
    elif current.air_density > 1.3:
        trend = "increasing"
    else:
        trend = "stable"

    if current.altitude > 5000:
        effect = "significant"
    elif current.altitude > 2000:
        effect = "moderate"
    else:
        effect = "minimal"

    return TerminalVelocityPrediction(
        current=current,
        altitudes=alts,
        air_density=rho,
        predicted_terminal=vt,
        change_from_current=vt - current.value,
        air_density_trend=trend,
        altitude_effect=effect,
    )


def freefall_time(initial_height: float, final_height: float = 0.0,
                  gravity: float = GRAVITY) -> float:
    """Vacuum fall time sqrt(2h/g) [s]."""
    h = max(initial_height - final_height, 0.0)
    return float(np.sqrt(2.0 * h / gravity))


def landing_speed(initial_height: float, final_height: float = 0.0,
                  gravity: float = GRAVITY) -> float:
    """Vacuum impact speed sqrt(2gh) [m/s]."""
    h = max(initial_height - final_height, 0.0)
    return float(np.sqrt(2.0 * gravity * h))


@dataclass(frozen=True)
class DescentPrediction:
    """Result of a reference descent integration."""

    t: NDArray[np.float64]
    altitude: NDArray[np.float64]
    vertical_velocity: NDArray[np.float64]
    touchdown_time: float | None
    touchdown_speed: float | None


def reference_descent(
    altitude: float,
    vertical_velocity: float,
    mass: float,
    area: float,
    drag_coefficient: float,
    ground_level: float = 0.0,
    gravity: float = GRAVITY,
    atmosphere: AtmosphereModel | None = None,
    air_resistance: float = 0.0,
    t_max: float = 600.0,
    method: str = "RK45",
    rtol: float = 1e-8,
    atol: float = 1e-10,
) -> DescentPrediction:
    """
    Integrate the 1-D vertical descent with an adaptive ODE solver.

    State y = [h, v]; dv/dt = -g - (0.5*rho(h)*Cd*A + k)*|v|*v/m.
    Integration stops at the ground (terminal event, direction -1).

    Parameters
    ----------
    altitude : float
        Initial altitude [m]
    vertical_velocity : float
        Initial vertical velocity [m/s] (negative is downward)
    mass : float
        [kg]
    area, drag_coefficient : float
        Drag reference area [m²] and coefficient [-]
    ground_level : float
        Touchdown altitude [m]
    atmosphere : AtmosphereModel | None
        Density source. Defaults to the barometric model.
    air_resistance : float
        Extra quadratic resistance coefficient [N·s²/m²]
    t_max : float
        Integration horizon [s]

    Returns
    -------
    DescentPrediction
    """
    atm = atmosphere if atmosphere is not None else AtmosphereModel()

    def rhs(t: float, y: np.ndarray) -> np.ndarray:
        h, v = y
        c = 0.5 * atm.density(h) * drag_coefficient * area + air_resistance
        return np.array([v, -gravity - c * abs(v) * v / mass])

    def touchdown_event(t: float, y: np.ndarray) -> float:
        return float(y[0] - ground_level)
    touchdown_event.terminal = True   # type: ignore[attr-defined]
    touchdown_event.direction = -1.0  # type: ignore[attr-defined]

    sol = solve_ivp(
        rhs,
        t_span=(0.0, t_max),
        y0=np.array([altitude, vertical_velocity], dtype=np.float64),
        method=method,
        rtol=rtol,
        atol=atol,
        events=touchdown_event,
    )

    if len(sol.t_events[0]):
        t_td = float(sol.t_events[0][0])
        v_td = float(abs(sol.y_events[0][0][1]))
    else:
        t_td, v_td = None, None

    return DescentPrediction(
        t=sol.t,
        altitude=sol.y[0],
        vertical_velocity=sol.y[1],
        touchdown_time=t_td,
        touchdown_speed=v_td,
    )
