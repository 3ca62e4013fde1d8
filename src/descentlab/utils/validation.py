"""
Validation utilities for physical parameters and time steps.

Constructors validate strictly and raise ``ValueError``; runtime paths such
as the frame loop validate leniently and issue a ``RuntimeWarning`` instead.
"""
from __future__ import annotations

import warnings


def validate_positive(value: float, name: str, strict: bool = True) -> bool:
    """
    Validate that a scalar value is positive.

    Parameters
    ----------
    value : float
        Value to validate
    name : str
        Parameter name for error messages
    strict : bool
        If True, raise ValueError. If False, issue warning.

    Returns
    -------
    bool
        True if the value is valid

    Raises
    ------
    ValueError
        If strict=True and value <= 0
    """
    if not value > 0:
        msg = f"{name} must be positive, got {value}"
        if strict:
            raise ValueError(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=3)
        return False
    return True


def validate_non_negative(value: float, name: str, strict: bool = True) -> bool:
    """Validate that a value is non-negative."""
    if value < 0:
        msg = f"{name} must be non-negative, got {value}"
        if strict:
            raise ValueError(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=3)
        return False
    return True


def validate_timestep(dt: float, max_dt: float = 1.0, strict: bool = True) -> bool:
    """
    Validate timestep is positive and reasonable.

    Parameters
    ----------
    dt : float
        Time step [s]
    max_dt : float
        Maximum reasonable timestep [s]
    strict : bool
        If True, a non-positive step raises. If False, it warns and
        returns False so the caller can skip the step.

    Returns
    -------
    bool
        False if the step should be skipped

    Raises
    ------
    ValueError
        If strict=True and dt <= 0
    """
    if not dt > 0:
        msg = f"Timestep must be positive, got {dt}"
        if strict:
            raise ValueError(msg)
        warnings.warn(msg + "; step ignored.", RuntimeWarning, stacklevel=3)
        return False
    if dt > max_dt:
        warnings.warn(
            f"Large timestep {dt}s may cause instability. "
            f"Consider using dt < {max_dt}s.",
            RuntimeWarning,
            stacklevel=3,
        )
    return True
