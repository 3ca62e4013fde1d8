"""
Scenario API: Fluent interface for defining and running descents.
"""
from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from descentlab.components.canopy import DeploymentState
from descentlab.components.skydiver import Skydiver
from descentlab.config import CANOPY_PRESETS, CanopyConfig
from descentlab.core.analysis import DescentPrediction, reference_descent
from descentlab.core.simulation import World
from descentlab.dynamics.body import RigidBody
from descentlab.models.environment import Environment
from descentlab.utils.io import history_to_frame, save_simulation_history

SOLVER_PRESETS = {
    "default": {"method": "RK45", "rtol": 1e-8, "atol": 1e-10},
    "fast": {"method": "RK45", "rtol": 1e-3, "atol": 1e-6},
    "accurate": {"method": "DOP853", "rtol": 1e-10, "atol": 1e-12},
    "stiff": {"method": "Radau", "rtol": 1e-6, "atol": 1e-8},
}

STEP_PRESETS = {
    "realtime": {"frame_rate": 60.0, "sub_steps": 1},
    "smooth": {"frame_rate": 60.0, "sub_steps": 4},
    "fine": {"frame_rate": 240.0, "sub_steps": 4},
}


class Scenario:
    """
    Build a descent from skydivers, wind and deployment triggers, then run
    it at a fixed frame rate while recording a per-frame history.

    Examples
    --------
    >>> sc = (Scenario("hop_and_pop")
    ...       .add_skydiver("jumper", canopy="rectangular")
    ...       .set_initial_state(altitude=455.0)
    ...       .set_wind(4.0, np.pi / 2)
    ...       .deploy_at(300.0)
    ...       .run(duration=120.0))
    >>> sc.history.tail()
    """

    def __init__(self, name: str, output_dir: str | Path = "output", log: bool = False):
        self.name = name
        self.output_dir = Path(output_dir)
        if log:
            self.world = World.with_logging(name=name, output_dir=self.output_dir)
        else:
            self.world = World()
        self.environment = Environment()
        self.skydivers: list[Skydiver] = []
        self.current: Skydiver | None = None
        self._deploy_altitudes: dict[str, float] = {}
        self._step_params = STEP_PRESETS["realtime"].copy()
        self._solver_params = SOLVER_PRESETS["default"].copy()
        self._show_plots: bool | None = None
        self._records: list[dict] = []

    # --- Building ---

    def add_skydiver(
        self,
        name: str = "jumper",
        mass: float | None = None,
        canopy: str | CanopyConfig = "round",
        position: list[float] | None = None,
    ) -> Scenario:
        """
        Add a skydiver sharing the scenario environment.

        ``canopy`` is a preset name ('round', 'rectangular') or a CanopyConfig.
        """
        if isinstance(canopy, str):
            if canopy not in CANOPY_PRESETS:
                raise ValueError(
                    f"Unknown canopy preset '{canopy}'. Options: {sorted(CANOPY_PRESETS)}"
                )
            canopy = CANOPY_PRESETS[canopy]()

        body_kwargs = {"name": name, "gravity": self.environment.gravity, "position": position}
        if mass is not None:
            body_kwargs["mass"] = mass
        body = RigidBody(**body_kwargs)

        diver = Skydiver(name, body=body, environment=self.environment, canopy=canopy)
        self.skydivers.append(diver)
        self.current = diver
        self.world.add_component(diver)
        return self

    def set_initial_state(self, altitude: float | None = None,
                          velocity: list[float] | None = None) -> Scenario:
        """
        Move the current skydiver to ``altitude`` and/or set its velocity.

        The new position becomes the reset point.
        """
        if self.current is None:
            print("[Scenario] Warning: No skydiver to update. Call add_skydiver() first.")
            return self

        body = self.current.body
        if altitude is not None:
            body.p[1] = float(altitude)
            body.initial_position = body.p.copy()
        if velocity is not None:
            body.set_velocity(velocity)
        return self

    def set_wind(self, strength: float, direction: float) -> Scenario:
        self.environment.set_wind(strength, direction)
        return self

    def deploy_at(self, altitude: float, skydiver: str | None = None) -> Scenario:
        """
        Deploy the canopy once the skydiver descends through ``altitude``.

        Applies to the current skydiver unless ``skydiver`` names another.
        """
        target = skydiver if skydiver is not None else (self.current.name if self.current else None)
        if target is None:
            raise RuntimeError("No skydiver. Call add_skydiver() first.")
        self._deploy_altitudes[target] = float(altitude)
        return self

    def configure_steps(self, preset: str = "realtime", **kwargs) -> Scenario:
        """
        Configure the frame stepping with a preset or custom overrides.

        Presets: 'realtime', 'smooth', 'fine'
        Kwargs: frame_rate, sub_steps
        """
        if preset in STEP_PRESETS:
            self._step_params = STEP_PRESETS[preset].copy()
        self._step_params.update(kwargs)
        if self._step_params["frame_rate"] <= 0:
            raise ValueError(f"frame_rate must be positive, got {self._step_params['frame_rate']}")
        if int(self._step_params["sub_steps"]) < 1:
            raise ValueError(f"sub_steps must be >= 1, got {self._step_params['sub_steps']}")
        self.world.sub_steps = int(self._step_params["sub_steps"])
        return self

    def configure_solver(self, preset: str = "default", **kwargs) -> Scenario:
        """
        Configure the reference ODE solver used by ``predict``.

        Presets: 'default', 'fast', 'accurate', 'stiff'
        Kwargs: method, rtol, atol
        """
        if preset in SOLVER_PRESETS:
            self._solver_params = SOLVER_PRESETS[preset].copy()
        self._solver_params.update(kwargs)
        return self

    def enable_plotting(self, show: bool = False) -> Scenario:
        """Generate plots at the end of ``run`` (requires logging)."""
        self._show_plots = show
        return self

    # --- Running ---

    def _trigger_deployments(self) -> None:
        for diver in self.skydivers:
            trigger = self._deploy_altitudes.get(diver.name)
            if trigger is None or diver.state is not DeploymentState.FREEFALL:
                continue
            if diver.altitude <= trigger:
                diver.deploy_canopy()
                # A rejected trigger is not retried
                del self._deploy_altitudes[diver.name]

    def _record(self) -> None:
        for diver in self.skydivers:
            tel = diver.telemetry()
            self._records.append({
                "time": self.world.time,
                "skydiver": diver.name,
                "state": tel.state.name,
                "altitude": tel.altitude,
                "x": tel.position[0],
                "z": tel.position[2],
                "vx": tel.velocity[0],
                "vy": tel.velocity[1],
                "vz": tel.velocity[2],
                "speed": float(np.linalg.norm(tel.velocity)),
                "air_density": tel.air_density,
                "terminal_velocity": tel.terminal_velocity,
                "on_ground": tel.on_ground,
                "total_energy": tel.total_energy,
            })

    def run(self, duration: float = 120.0, log_interval: float = 5.0) -> Scenario:
        """
        Step the world frame by frame until ``duration`` elapses or every
        skydiver has landed.
        """
        if not self.skydivers:
            raise RuntimeError("Scenario has no skydivers. Call add_skydiver() first.")

        dt = 1.0 / float(self._step_params["frame_rate"])
        t_end = self.world.time + float(duration)
        last_print = self.world.time

        print(f"Running Scenario: {self.name}")
        print(f"[Scenario] Frame rate: {self._step_params['frame_rate']:.0f} Hz, "
              f"sub-steps: {self.world.sub_steps}")

        self._records = []
        self._record()
        if self.world.logger is not None:
            self.world.logger.log(self.world)

        while self.world.time < t_end - 1e-12:
            self._trigger_deployments()
            self.world.step(dt)
            self._record()

            if self.world.is_finished():
                print(f"[Scenario] All skydivers landed at t={self.world.time:.2f}s")
                break
            if log_interval > 0 and self.world.time - last_print >= log_interval:
                for diver in self.skydivers:
                    print(f"[Scenario] t={self.world.time:6.2f}s | {diver.name} "
                          f"alt={diver.altitude:7.1f}m, |v|={diver.speed:5.1f}m/s, "
                          f"{diver.state.name}")
                last_print = self.world.time

        if self.world.logger is not None:
            self.world.logger.flush()
            if self._show_plots is not None:
                print("[Scenario] Generating plots...")
                self.world.save_plots(show=self._show_plots)

        return self

    @property
    def history(self) -> pd.DataFrame:
        """Per-frame records of the last run, one row per skydiver and frame."""
        return history_to_frame(self._records)

    def save_history(self, filepath: str | Path | None = None) -> Path:
        """Write the recorded history to CSV (default: <output_dir>/<name>_history.csv)."""
        path = Path(filepath) if filepath is not None else self.output_dir / f"{self.name}_history.csv"
        return save_simulation_history(self._records, path)

    def predict(self, skydiver: str | None = None) -> DescentPrediction:
        """
        Reference landing prediction from the skydiver's current state.

        Integrates the vertical descent with the configured ODE solver, using
        the drag area of the current deployment state.
        """
        diver = self._find(skydiver)
        dep = diver.deployment
        return reference_descent(
            altitude=diver.altitude,
            vertical_velocity=float(diver.body.v[1]),
            mass=diver.body.mass,
            area=dep.drag_area,
            drag_coefficient=dep.cd_vertical,
            ground_level=diver.body.collision.ground_level,
            gravity=diver.body.gravity,
            atmosphere=diver.atmosphere,
            air_resistance=diver.body.air_resistance,
            **self._solver_params,
        )

    def _find(self, name: str | None) -> Skydiver:
        if name is None:
            if self.current is None:
                raise RuntimeError("No skydiver. Call add_skydiver() first.")
            return self.current
        for diver in self.skydivers:
            if diver.name == name:
                return diver
        raise KeyError(f"No skydiver named '{name}'")
