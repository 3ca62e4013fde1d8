from __future__ import annotations

import csv
import os

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure
from numpy.typing import ArrayLike

from descentlab.models.atmosphere import AtmosphereModel

# Deployment state codes written by CSVLogger
STATE_LABELS = {1: "freefall", 2: "opening", 3: "deployed"}


def _load_csv(filepath: str) -> tuple[np.ndarray, dict[str, np.ndarray], list[str]]:
    """
    Load a CSV produced by CSVLogger.

    Returns
    -------
    t : (N,) array
        Time vector.
    cols : dict[str, np.ndarray]
        Mapping column_name -> (N,) array.
    headers : list[str]
        Column headers in order (first one should be 't').
    """
    with open(filepath, "r", newline="") as f:
        reader = csv.reader(f)
        headers = next(reader)
    if headers[0] != "t":
        raise ValueError("First column must be time 't'.")
    data = np.loadtxt(filepath, delimiter=",", skiprows=1, dtype=float, ndmin=2)
    cols = {name: data[:, j] for j, name in enumerate(headers)}
    return cols["t"], cols, headers


def _get_columns(cols: dict[str, np.ndarray], names: list[str]) -> list[np.ndarray]:
    out = []
    for name in names:
        if name not in cols:
            raise KeyError(f"Column '{name}' not found in CSV.")
        out.append(cols[name])
    return out


def _vector(cols: dict[str, np.ndarray], body_name: str, field: str) -> np.ndarray:
    names = [f"{body_name}.{field}_{axis}" for axis in ("x", "y", "z")]
    return np.column_stack(_get_columns(cols, names))


def _shade_states(ax, t: np.ndarray, states: np.ndarray) -> None:
    """Shade the OPENING and DEPLOYED intervals behind a time plot."""
    colors = {2: "#fbbc05", 3: "#34a853"}
    for code, color in colors.items():
        mask = states == code
        if not np.any(mask):
            continue
        idx = np.flatnonzero(mask)
        ax.axvspan(t[idx[0]], t[idx[-1]], color=color, alpha=0.12,
                   label=STATE_LABELS[code])


def _finish(fig: Figure, save_path: str | None, show: bool) -> Figure:
    fig.tight_layout()
    if save_path:
        os.makedirs(os.path.dirname(save_path) or ".", exist_ok=True)
        fig.savefig(save_path, dpi=180, bbox_inches="tight")
    if show:
        plt.show()
    return fig


def plot_descent(
    csv_path: str,
    body_name: str,
    save_path: str | None = None,
    show: bool = True,
) -> Figure:
    """
    Plot altitude, vertical velocity and speed of one body over time.

    If the CSV carries component columns for ``body_name`` the canopy
    opening and deployed intervals are shaded, and the terminal-velocity
    estimate is drawn against the speed.

    Parameters
    ----------
    csv_path : str
        Path to logger CSV.
    body_name : str
        The 'name' used when creating the body (e.g., 'jumper').
    save_path : str | None
        If given, save the figure to this path (png/svg).
    show : bool
        Whether to call plt.show().

    Returns
    -------
    fig : Figure
    """
    t, cols, _ = _load_csv(csv_path)
    p = _vector(cols, body_name, "p")
    v = _vector(cols, body_name, "v")
    speed = np.linalg.norm(v, axis=1)
    states = cols.get(f"{body_name}.state")
    vt = cols.get(f"{body_name}.vt")

    fig, axes = plt.subplots(2, 1, figsize=(10, 7), sharex=True)

    axes[0].plot(t, p[:, 1], color="#1a73e8", lw=2)
    if states is not None:
        _shade_states(axes[0], t, states)
        axes[0].legend(loc="best")
    axes[0].set_ylabel("altitude [m]")
    axes[0].grid(True, alpha=0.3)
    axes[0].set_title(f"Descent - {body_name}")

    axes[1].plot(t, v[:, 1], label="v_y", color="#34a853")
    axes[1].plot(t, speed, label="|v|", color="#ea4335", lw=2.0, alpha=0.8)
    if vt is not None:
        finite = np.isfinite(vt)
        axes[1].plot(t[finite], vt[finite], label="V_t", color="k", ls="--", lw=1.2)
    axes[1].set_xlabel("t [s]")
    axes[1].set_ylabel("velocity [m/s]")
    axes[1].grid(True, alpha=0.3)
    axes[1].legend(loc="best")

    return _finish(fig, save_path, show)


def plot_forces(
    csv_path: str,
    body_name: str,
    save_path: str | None = None,
    show: bool = True,
) -> Figure:
    """
    Plot the net force of each step and the resulting acceleration.

    Returns
    -------
    fig : Figure
    """
    t, cols, _ = _load_csv(csv_path)
    f = _vector(cols, body_name, "f")
    a = _vector(cols, body_name, "a")

    fig, axes = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
    for k, (axis, color) in enumerate(zip("xyz", ("#1a73e8", "#34a853", "#fbbc05"))):
        axes[0].plot(t, f[:, k], label=f"F_{axis}", color=color)
        axes[1].plot(t, a[:, k], label=f"a_{axis}", color=color)
    axes[0].plot(t, np.linalg.norm(f, axis=1), label="|F|", color="#ea4335", lw=2.0, alpha=0.8)

    axes[0].set_ylabel("net force [N]")
    axes[0].set_title(f"Forces - {body_name}")
    axes[1].set_xlabel("t [s]")
    axes[1].set_ylabel("accel [m/s²]")
    for ax in axes:
        ax.grid(True, alpha=0.3)
        ax.legend(loc="best")

    return _finish(fig, save_path, show)


def plot_atmosphere_profile(
    altitudes: ArrayLike | None = None,
    atmosphere: AtmosphereModel | None = None,
    save_path: str | None = None,
    show: bool = True,
) -> Figure:
    """
    Plot temperature, pressure and density against altitude.

    Parameters
    ----------
    altitudes : ArrayLike | None
        Altitudes [m]. Default 0..10000 m.
    atmosphere : AtmosphereModel | None
        Model to evaluate. Barometric model by default.
    """
    h = np.linspace(0.0, 10000.0, 101) if altitudes is None else altitudes
    atm = atmosphere if atmosphere is not None else AtmosphereModel()
    prof = atm.profile(h)

    fig, axes = plt.subplots(1, 3, figsize=(12, 5), sharey=True)
    axes[0].plot(prof["temperature"], prof["altitude"], color="#ea4335")
    axes[0].set_xlabel("temperature [°C]")
    axes[0].set_ylabel("altitude [m]")
    axes[1].plot(prof["pressure"] / 1000.0, prof["altitude"], color="#1a73e8")
    axes[1].set_xlabel("pressure [kPa]")
    axes[2].plot(prof["density"], prof["altitude"], color="#34a853")
    axes[2].set_xlabel("density [kg/m³]")
    for ax in axes:
        ax.grid(True, alpha=0.3)
    fig.suptitle(f"Atmosphere ({atm.pressure_model})")

    return _finish(fig, save_path, show)
