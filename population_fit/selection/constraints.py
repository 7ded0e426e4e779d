"""Identifiability checks for fitted mixtures."""

from __future__ import annotations

import numpy as np

from population_fit.interfaces.fit_logger import FitLogger, NullFitLogger


def mixture_is_identifiable(
    coefficients,
    fractions,
    min_fraction: float,
    min_difference: float,
    fit_logger: FitLogger | None = None,
) -> bool:
    """Check a mixture sorted by descending coefficient.

    Every fraction must reach min_fraction and every adjacent coefficient ratio
    ``c[i] / c[i + 1]`` must reach min_difference.
    """

    fit_logger = fit_logger or NullFitLogger()
    coefficients = np.asarray(coefficients, dtype=float)
    fractions = np.asarray(fractions, dtype=float)
    for i, fraction in enumerate(fractions):
        if fraction < min_fraction:
            fit_logger.debug(
                "Fraction is less than the minimum fraction: %s < %s", f"{fraction:.4g}", f"{min_fraction:.4g}"
            )
            return False
        if i + 1 < len(coefficients):
            with np.errstate(divide="ignore", invalid="ignore"):
                ratio = coefficients[i] / coefficients[i + 1]
            if not ratio >= min_difference:
                fit_logger.debug(
                    "Coefficients are not different: %s / %s = %s < %s",
                    f"{coefficients[i]:.4g}",
                    f"{coefficients[i + 1]:.4g}",
                    f"{ratio:.4g}",
                    f"{min_difference:.4g}",
                )
                return False
    return True


__all__ = ["mixture_is_identifiable"]
