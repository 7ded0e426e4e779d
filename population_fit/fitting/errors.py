"""Convergence failure helpers for the optimizer stages."""

from __future__ import annotations

from population_fit.fitting.models import FitOutcome, OptimizerStatus
from population_fit.interfaces.fit_logger import FitLogger


def record_convergence_failure(
    stage: str,
    *,
    error: Exception | str,
    fit_logger: FitLogger,
    order: int | None = None,
    evaluations: int = 0,
    status: OptimizerStatus = "failed",
) -> FitOutcome:
    """Log a failed optimizer attempt and return a placeholder FitOutcome."""

    message = str(error) or error.__class__.__name__
    if order is None:
        fit_logger.debug("Failed to %s : %s", stage, message)
    else:
        fit_logger.debug("Failed to %s (N=%d) : %s", stage, order, message)
    return FitOutcome(
        params=None,
        value=float("inf"),
        status=status,
        evaluations=evaluations,
        message=message,
        warnings=[f"{stage}_{status}: {message}"],
    )


__all__ = ["record_convergence_failure"]
