"""Levenberg-Marquardt polish of a global optimum."""

from __future__ import annotations

import numpy as np
from scipy.optimize import least_squares

from population_fit.fitting.errors import record_convergence_failure
from population_fit.fitting.models import FitOutcome
from population_fit.interfaces.fit_logger import FitLogger, NullFitLogger
from population_fit.interfaces.model import Model
from population_fit.schema.fit_config import OptimizerConfig


def refine(
    model: Model,
    start,
    config: OptimizerConfig,
    fit_logger: FitLogger | None = None,
    order: int | None = None,
) -> FitOutcome:
    """Minimise the model residuals from start with an unbounded LM solver.

    Returns status ``"skipped"`` when there are not more fitted points than
    parameters; solver errors come back as ``"failed"`` outcomes.
    """

    fit_logger = fit_logger or NullFitLogger()
    if model.fitted_points <= model.n_params:
        return FitOutcome(
            params=None,
            value=float("inf"),
            status="skipped",
            message=f"{model.fitted_points} points for {model.n_params} parameters",
        )

    try:
        with np.errstate(all="ignore"):
            result = least_squares(
                model.residuals,
                np.asarray(start, dtype=float),
                jac=model.jacobian,
                method="lm",
                max_nfev=config.local_max_evaluations,
            )
    except (ValueError, ArithmeticError, np.linalg.LinAlgError) as exc:
        return record_convergence_failure("re-fit", error=exc, fit_logger=fit_logger, order=order)

    if result.status == 0:
        return record_convergence_failure(
            "re-fit",
            error=result.message,
            fit_logger=fit_logger,
            order=order,
            evaluations=int(result.nfev),
            status="max_evaluations",
        )
    if not result.success or not np.all(np.isfinite(result.x)):
        return record_convergence_failure(
            "re-fit", error=result.message, fit_logger=fit_logger, order=order, evaluations=int(result.nfev)
        )

    ss = model.sum_of_squares(result.x)
    return FitOutcome(
        params=np.asarray(result.x, dtype=float),
        value=ss,
        status="converged",
        sum_of_squares=ss,
        evaluations=int(result.nfev),
    )


def accept_refinement(model: Model, current: FitOutcome, refined: FitOutcome) -> bool:
    """True when the refined fit has a strictly lower SS and valid parameters."""
    if not refined.ok:
        return False
    if not refined.sum_of_squares < current.sum_of_squares:
        return False
    return model.is_valid(refined.params)


__all__ = ["accept_refinement", "refine"]
