"""
World simulation orchestrator for falling bodies.

Manages bodies, components, sub-stepped time integration and optional
logging with automatic output organization.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from descentlab.config import GRAVITY
from descentlab.dynamics.body import RigidBody, as_vector
from descentlab.logger import CSVLogger
from descentlab.utils.validation import validate_positive, validate_timestep

if TYPE_CHECKING:
    from descentlab.components.base import Component

DEFAULT_OUTPUT_DIR = Path("output")


@dataclass(frozen=True)
class WorldStats:
    """Diagnostic counters of a World."""

    body_count: int
    active_bodies: int
    time: float


class World:
    """
    Container and orchestrator for falling-body simulation.

    Parameters
    ----------
    sub_steps : int
        Number of equal sub-steps each ``step(dt)`` is divided into.
    gravity : ArrayLike
        World gravity vector [m/s²] (3,). Default (0, -9.81, 0).
    broadcast_gravity : bool
        If True, every body's gravity is overwritten with -gravity[1] before
        each sub-step, and components receive it through ``set_gravity``
        (a Skydiver forwards it to its environment). If False (default),
        each body keeps its own constant
        and ``set_gravity`` only changes the value reported by
        ``get_gravity``.
    simulation_name : str | None
        Name for this simulation. Used to organize output files. If None,
        logging is disabled until ``enable_logging()`` is called.
    output_dir : Path | str | None
        Base directory for all simulation outputs. Defaults to "./output".
    auto_timestamp : bool
        Append a timestamp to the output folder name.

    Attributes
    ----------
    bodies : list[RigidBody]
        Registered bodies in insertion order, no duplicates
    components : list[Component]
        Components whose state and forces are updated each sub-step
    time : float
        Elapsed simulation time [s]
    logger : CSVLogger | None
        Data logger instance, or None if logging disabled

    Notes
    -----
    Per sub-step, in registry order:
    1. ``component.update_state(t, sub_dt)``
    2. ``component.apply_forces(t)``
    3. ``body.integrate(sub_dt)``

    Examples
    --------
    >>> world = World(sub_steps=4)
    >>> jumper = Skydiver("jumper")
    >>> world.add_component(jumper)
    >>> for _ in range(600):
    ...     world.step(1 / 60)
    """

    def __init__(
        self,
        sub_steps: int = 1,
        gravity: ArrayLike = (0.0, -GRAVITY, 0.0),
        broadcast_gravity: bool = False,
        simulation_name: str | None = None,
        output_dir: Path | str | None = None,
        auto_timestamp: bool = True,
    ) -> None:
        validate_positive(sub_steps, "sub_steps")
        self.sub_steps = int(sub_steps)
        self.gravity = as_vector(gravity, "gravity")
        self.broadcast_gravity = bool(broadcast_gravity)
        self.bodies: list[RigidBody] = []
        self.components: list[Component] = []
        self.time = 0.0
        self.termination_callback: Callable[[World], bool] | None = None

        self._simulation_name = simulation_name
        self._output_dir = Path(output_dir) if output_dir else DEFAULT_OUTPUT_DIR
        self._auto_timestamp = auto_timestamp
        self.output_path: Path | None = None
        self.logger: CSVLogger | None = None

        if simulation_name is not None:
            self.enable_logging(simulation_name)

    @classmethod
    def with_logging(
        cls,
        name: str,
        sub_steps: int = 1,
        output_dir: Path | str | None = None,
    ) -> World:
        """
        Create a World with logging pre-enabled.

        Parameters
        ----------
        name : str
            Simulation name (required)
        sub_steps : int
            Sub-steps per frame
        output_dir : Path | str | None
            Base output directory
        """
        return cls(
            sub_steps=sub_steps,
            simulation_name=name,
            output_dir=output_dir,
            auto_timestamp=True,
        )

    # --- Logging ---

    def enable_logging(self, name: str | None = None) -> Path:
        """
        Enable data logging with automatic output organization.

        Creates ``output_dir/<name>[_timestamp]/logs/simulation.csv`` and a
        sibling ``plots/`` directory.

        Returns
        -------
        Path
            Path to the created output directory

        Raises
        ------
        ValueError
            If no simulation name available
        """
        if name is not None:
            self._simulation_name = name

        if self._simulation_name is None:
            raise ValueError(
                "Simulation name required for logging. "
                "Either pass name to __init__ or to enable_logging()."
            )

        if self._auto_timestamp:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            folder_name = f"{self._simulation_name}_{timestamp}"
        else:
            folder_name = self._simulation_name

        self.output_path = self._output_dir / folder_name
        logs_dir = self.output_path / "logs"
        plots_dir = self.output_path / "plots"
        logs_dir.mkdir(parents=True, exist_ok=True)
        plots_dir.mkdir(parents=True, exist_ok=True)

        self.logger = CSVLogger(str(logs_dir / "simulation.csv"))

        print(f"[World] Logging enabled: {self.output_path}")
        return self.output_path

    def disable_logging(self) -> None:
        """Disable logging and close any open log file."""
        if self.logger is not None:
            self.logger.close()
            self.logger = None
            print("[World] Logging disabled")

    # --- Registry ---

    def add_body(self, body: RigidBody) -> int:
        """
        Register a body. Adding an already registered body is a no-op.

        Returns
        -------
        int
            Index of the body in the registry
        """
        for i, b in enumerate(self.bodies):
            if b is body:
                return i
        self.bodies.append(body)
        return len(self.bodies) - 1

    def remove_body(self, body: RigidBody) -> None:
        """Unregister a body and any component wrapping it. Absent bodies are ignored."""
        self.bodies = [b for b in self.bodies if b is not body]
        self.components = [c for c in self.components if c.body is not body]

    def add_component(self, component: Component) -> int:
        """
        Register a component and its body.

        Returns
        -------
        int
            Index of the component's body in the body registry
        """
        if not any(c is component for c in self.components):
            self.components.append(component)
        return self.add_body(component.body)

    def remove_component(self, component: Component) -> None:
        self.remove_body(component.body)

    def set_termination_callback(self, fn: Callable[[World], bool] | None) -> None:
        """
        Set the stop condition used by ``run``.

        Parameters
        ----------
        fn : Callable[[World], bool] | None
            Called after each step; return True to stop. None restores the
            default (every body has landed).
        """
        self.termination_callback = fn

    # --- Gravity ---

    def set_gravity(self, gravity: ArrayLike) -> None:
        self.gravity = as_vector(gravity, "gravity")

    def get_gravity(self) -> NDArray[np.float64]:
        return self.gravity.copy()

    # --- Time integration ---

    def step(self, dt: float) -> None:
        """
        Advance the simulation by ``dt`` seconds.

        ``dt`` is split into ``sub_steps`` equal slices; every component and
        body is updated on every slice.

        Parameters
        ----------
        dt : float
            Frame time [s]. Non-positive values are ignored.
        """
        if not validate_timestep(dt, strict=False):
            return

        sub_dt = dt / self.sub_steps
        for _ in range(self.sub_steps):
            if self.broadcast_gravity:
                g = float(-self.gravity[1])
                for b in self.bodies:
                    b.gravity = g
                for comp in self.components:
                    comp.set_gravity(g)

            for comp in self.components:
                comp.update_state(self.time, sub_dt)
            for comp in self.components:
                comp.apply_forces(self.time)
            for b in self.bodies:
                b.integrate(sub_dt)

            self.time += sub_dt

        if self.logger is not None:
            self.logger.log(self)

    def is_finished(self) -> bool:
        """Run stop condition: the callback if set, else all bodies landed."""
        if self.termination_callback is not None:
            return bool(self.termination_callback(self))
        return bool(self.bodies) and all(b.on_ground for b in self.bodies)

    def run(
        self,
        duration: float,
        dt: float = 1.0 / 60.0,
        log_interval: float = 1.0,
    ) -> float:
        """
        Step at a fixed frame time until ``duration`` elapses or the stop
        condition is met.

        Parameters
        ----------
        duration : float
            Simulation duration [s]
        dt : float
            Frame time [s]
        log_interval : float
            Interval [s] for printing progress. Set to <= 0 to disable.

        Returns
        -------
        float
            Simulation time at exit [s]
        """
        t_end = self.time + float(duration)
        last_log_time = self.time

        if self.logger is not None:
            self.logger.log(self)

        print(f"[World] Starting simulation: {duration}s duration, dt={dt}s, "
              f"{self.sub_steps} sub-step(s)")
        try:
            while self.time < t_end - 1e-12:
                self.step(dt)
                if self.is_finished():
                    print(f"[World] Simulation terminated at t={self.time:.3f}s")
                    break

                if log_interval > 0 and (self.time - last_log_time) >= log_interval:
                    for b in self.bodies:
                        print(f"[World] t={self.time:6.2f}s | {b.name} "
                              f"y={b.p[1]:8.2f}m, vy={b.v[1]:6.2f}m/s")
                    last_log_time = self.time
        finally:
            if self.logger is not None:
                self.logger.flush()

        return self.time

    # --- Diagnostics ---

    def stats(self) -> WorldStats:
        return WorldStats(
            body_count=len(self.bodies),
            active_bodies=sum(1 for b in self.bodies if b.is_active),
            time=self.time,
        )

    def get_energy(self) -> dict[str, float]:
        """
        Total kinetic, potential and mechanical energy of all bodies [J].

        Potential energy uses each body's own gravity constant.
        """
        ke = sum(b.kinetic_energy() for b in self.bodies)
        pe = sum(b.potential_energy() for b in self.bodies)
        return {"kinetic": ke, "potential": pe, "total": ke + pe}

    def save_plots(self, bodies: list[str] | None = None, show: bool = False) -> None:
        """
        Generate descent plots from the logged CSV.

        Raises
        ------
        RuntimeError
            If logging is not enabled or nothing has been logged yet
        """
        if self.logger is None or self.output_path is None:
            raise RuntimeError(
                "Logging must be enabled to save plots. "
                "Call enable_logging() or use World.with_logging()."
            )

        from descentlab.visualization.plotting import plot_descent, plot_forces

        self.logger.flush()
        csv_path = self.output_path / "logs" / "simulation.csv"
        plots_dir = self.output_path / "plots"
        if not csv_path.exists():
            raise RuntimeError(
                f"No log file found at {csv_path}. Has the simulation been run yet?"
            )

        if bodies is None:
            bodies = [b.name for b in self.bodies]

        for name in bodies:
            plot_descent(str(csv_path), name,
                         save_path=str(plots_dir / f"{name}_descent.png"), show=show)
            plot_forces(str(csv_path), name,
                        save_path=str(plots_dir / f"{name}_forces.png"), show=show)
        print(f"[World] Plots saved to: {plots_dir}")

    def __repr__(self) -> str:
        return (f"World(bodies={len(self.bodies)}, components={len(self.components)}, "
                f"t={self.time:.3f})")
