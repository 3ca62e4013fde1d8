"""
Canopy deployment state machine.

Manages:
- Deployment state transitions (FREEFALL -> OPENING -> DEPLOYED)
- Deploy guards (state and minimum ground clearance)
- Aerodynamic parameters that follow the state (area, drag coefficients)
- Opening progress measured in accumulated simulation time
"""

from __future__ import annotations

import warnings
from enum import Enum, auto

from descentlab.config import CanopyConfig

# Slack on the opening-duration comparison for accumulated float time
OPENING_TIME_TOLERANCE = 1e-9


class DeploymentState(Enum):
    """
    Canopy deployment states.

    State Machine:
        FREEFALL -> OPENING -> DEPLOYED
            ^__________________|  (reset only)
    """

    FREEFALL = auto()  # Canopy packed, jumper drag only
    OPENING = auto()   # Inflation in progress
    DEPLOYED = auto()  # Fully inflated


class DeployResult(Enum):
    """Outcome of a deploy command."""

    ACCEPTED = auto()
    ALREADY_DEPLOYED = auto()
    TOO_CLOSE_TO_GROUND = auto()

    @property
    def accepted(self) -> bool:
        return self is DeployResult.ACCEPTED

    @property
    def reason(self) -> str:
        return _DEPLOY_REASONS[self]


_DEPLOY_REASONS = {
    DeployResult.ACCEPTED: "Ready to deploy",
    DeployResult.ALREADY_DEPLOYED: "Already deployed or opening",
    DeployResult.TOO_CLOSE_TO_GROUND: "Too close to ground",
}


class DeploymentStateMachine:
    """
    Deployment state of one jumper's canopy.

    Parameters
    ----------
    config : CanopyConfig | None
        Areas, coefficients and timing. Defaults to a round canopy.

    Attributes
    ----------
    state : DeploymentState
        Current state
    canopy_area : float
        Open canopy area [m²]; 0 until deployment begins
    cd_vertical : float
        Current vertical drag coefficient [-]
    cd_horizontal : float
        Current horizontal drag coefficient [-]
    deployment_time : float | None
        Simulation time of the accepted deploy command [s]
    elapsed : float
        Simulation time accumulated since deployment [s]

    Notes
    -----
    OPENING -> DEPLOYED happens automatically in ``update`` once
    ``elapsed >= opening_duration``, within ``OPENING_TIME_TOLERANCE``.
    Progress is the sum of the ``dt`` values passed to ``update``, so pausing
    or changing the frame rate does not distort the opening time.

    Examples
    --------
    >>> sm = DeploymentStateMachine()
    >>> sm.deploy(altitude=300.0, t=12.0)
    <DeployResult.ACCEPTED: 1>
    >>> sm.update(2.0)
    >>> sm.state
    <DeploymentState.DEPLOYED: 3>
    """

    def __init__(self, config: CanopyConfig | None = None) -> None:
        self.config = config if config is not None else CanopyConfig()
        self.deployed_area = self.config.area
        self.reset()

    def reset(self) -> None:
        """Return to FREEFALL with packed canopy and freefall coefficients."""
        self.state = DeploymentState.FREEFALL
        self.canopy_area = 0.0
        self.cd_vertical = self.config.freefall_cd_vertical
        self.cd_horizontal = self.config.freefall_cd_horizontal
        self.deployment_time: float | None = None
        self.elapsed = 0.0

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def check_deploy(self, altitude: float) -> DeployResult:
        """Evaluate the deploy guards without changing state."""
        if self.state is not DeploymentState.FREEFALL:
            return DeployResult.ALREADY_DEPLOYED
        if altitude <= self.config.min_deploy_altitude:
            return DeployResult.TOO_CLOSE_TO_GROUND
        return DeployResult.ACCEPTED

    def deploy(self, altitude: float, t: float = 0.0) -> DeployResult:
        """
        Request canopy deployment.

        Parameters
        ----------
        altitude : float
            Current altitude [m]
        t : float
            Current simulation time [s], recorded as the deployment timestamp

        Returns
        -------
        DeployResult
            ACCEPTED on FREEFALL -> OPENING. A rejected command leaves the
            state untouched.
        """
        result = self.check_deploy(altitude)
        if not result.accepted:
            return result

        self.state = DeploymentState.OPENING
        self.deployment_time = float(t)
        self.elapsed = 0.0
        self.canopy_area = self.deployed_area
        self.cd_vertical = self.config.cd_vertical
        self.cd_horizontal = self.config.cd_horizontal
        return result

    def update(self, dt: float) -> None:
        """Advance opening progress by ``dt`` seconds of simulation time."""
        if self.state is DeploymentState.FREEFALL:
            return
        self.elapsed += dt
        if (
            self.state is DeploymentState.OPENING
            and self.elapsed >= self.config.opening_duration - OPENING_TIME_TOLERANCE
        ):
            self.state = DeploymentState.DEPLOYED

    # ------------------------------------------------------------------
    # Parameter setters
    # ------------------------------------------------------------------

    def set_canopy_area(self, area: float) -> bool:
        """
        Set the canopy area used when open [m²].

        Applies immediately if the canopy is already open. Negative or NaN
        areas are rejected with a RuntimeWarning.
        """
        if not area >= 0:
            warnings.warn(
                f"Rejected canopy area {area} m²: area must be non-negative.",
                RuntimeWarning,
                stacklevel=2,
            )
            return False
        self.deployed_area = float(area)
        if self.is_open:
            self.canopy_area = self.deployed_area
        return True

    def set_drag_coefficients(self, vertical: float, horizontal: float) -> bool:
        """Override the current drag coefficients. Negative or NaN values are rejected."""
        if not (vertical >= 0 and horizontal >= 0):
            warnings.warn(
                f"Rejected drag coefficients ({vertical}, {horizontal}): "
                "coefficients must be non-negative.",
                RuntimeWarning,
                stacklevel=2,
            )
            return False
        self.cd_vertical = float(vertical)
        self.cd_horizontal = float(horizontal)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        """True from the start of OPENING onward."""
        return self.state is not DeploymentState.FREEFALL

    @property
    def is_opening(self) -> bool:
        return self.state is DeploymentState.OPENING

    @property
    def is_deployed(self) -> bool:
        return self.state is DeploymentState.DEPLOYED

    @property
    def opening_progress(self) -> float:
        """Opening fraction in [0, 1]; 0 in freefall, 1 once deployed."""
        if self.state is DeploymentState.FREEFALL:
            return 0.0
        if self.state is DeploymentState.DEPLOYED:
            return 1.0
        return min(max(self.elapsed / self.config.opening_duration, 0.0), 1.0)

    @property
    def drag_area(self) -> float:
        """Reference area for drag in the current state [m²]."""
        if self.is_open:
            return self.canopy_area
        return self.config.freefall_area

    def __repr__(self) -> str:
        return (
            f"DeploymentStateMachine(state={self.state.name}, "
            f"area={self.canopy_area}, progress={self.opening_progress:.2f})"
        )
