"""Information criteria helpers (AIC and its least-squares forms)."""

from __future__ import annotations

import numpy as np


def aic(log_likelihood: float, k: int) -> float:
    return float(2 * k - 2 * log_likelihood)


def log_likelihood_from_residuals(sum_of_squares: float, n: int) -> float:
    """Gaussian log-likelihood of n residuals at the maximum-likelihood variance SS/n."""
    if sum_of_squares <= 0:
        return float("inf")
    return float(0.5 * (-n * (np.log(2 * np.pi) + 1 - np.log(n) + np.log(sum_of_squares))))


def aic_from_residuals(sum_of_squares: float, n: int, k: int) -> float:
    return aic(log_likelihood_from_residuals(sum_of_squares, n), k)


def information_criterion(sum_of_squares: float, n: int, k: int) -> float:
    """Bias-corrected AIC (AICc) from a residual sum of squares.

    A perfect fit scores -inf. With too few points for the correction
    (n - k - 1 <= 0) the order cannot be judged and scores +inf.
    """

    if sum_of_squares <= 0:
        return float("-inf")
    dof = n - k - 1
    if dof <= 0:
        return float("inf")
    return aic_from_residuals(sum_of_squares, n, k) + 2.0 * k * (k + 1) / dof


__all__ = [
    "aic",
    "aic_from_residuals",
    "information_criterion",
    "log_likelihood_from_residuals",
]
