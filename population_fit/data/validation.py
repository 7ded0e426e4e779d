"""Validation of raw observations before histogramming."""

from __future__ import annotations

import numpy as np

from population_fit.exceptions import InvalidInputError


def validate_counts(values) -> np.ndarray:
    """Return the observations as an integer array.

    Cluster sizes must be non-negative whole numbers. Float input is accepted as long
    as every value is integral.
    """

    arr = np.asarray(values)
    if arr.ndim != 1:
        arr = arr.ravel()
    if arr.size == 0:
        return arr.astype(np.int64)
    if arr.dtype.kind not in "iuf":
        raise InvalidInputError(f"Input data must be numeric, got dtype {arr.dtype}")
    if arr.dtype.kind == "f":
        if not np.all(np.isfinite(arr)):
            raise InvalidInputError("Input data must be finite")
        if np.any(arr != np.floor(arr)):
            raise InvalidInputError("Input data must be integers")
    if np.any(arr < 0):
        raise InvalidInputError("Input data must be positive")
    return arr.astype(np.int64)


def validate_distances(values) -> np.ndarray:
    """Return the observations as a float array of non-negative, finite values."""

    try:
        arr = np.asarray(values, dtype=float).ravel()
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Jump distances must be numeric: {exc}") from exc
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError("Jump distances must be finite")
    if np.any(arr < 0):
        raise InvalidInputError("Jump distances must be positive")
    return arr


__all__ = ["validate_counts", "validate_distances"]
