"""Utility functions for descentlab simulations."""

from .io import history_to_frame, load_simulation_history, save_simulation_history
from .validation import validate_non_negative, validate_positive, validate_timestep

__all__ = [
    "history_to_frame",
    "save_simulation_history",
    "load_simulation_history",
    "validate_positive",
    "validate_non_negative",
    "validate_timestep",
]
