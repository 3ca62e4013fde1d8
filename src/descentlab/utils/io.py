"""Tabular persistence of recorded descent histories."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd


def history_to_frame(history: list[dict[str, Any]]) -> pd.DataFrame:
    """
    Convert a list of per-frame records into a DataFrame.

    Raises
    ------
    ValueError
        If the history is empty
    """
    if not history:
        raise ValueError("Simulation history is empty. Nothing to save.")
    return pd.DataFrame(history)


def save_simulation_history(history: list[dict[str, Any]] | pd.DataFrame,
                            filepath: str | Path) -> Path:
    """
    Saves a recorded history to a CSV file.

    Args:
        history: List of dicts, e.g. [{'time': 0.1, 'altitude': 450.0}, ...],
            or a DataFrame already built from one.
        filepath: Destination path (e.g. 'results/run1.csv')

    Returns:
        The path written.
    """
    df = history if isinstance(history, pd.DataFrame) else history_to_frame(history)
    if df.empty:
        raise ValueError("Simulation history is empty. Nothing to save.")

    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    df.to_csv(path, index=False)
    print(f"Simulation results saved to {path.absolute()}")
    return path


def load_simulation_history(filepath: str | Path) -> pd.DataFrame:
    """Load a history written by ``save_simulation_history``."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"No history file at {path}")
    return pd.read_csv(path)
