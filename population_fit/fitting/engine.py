"""Two-stage fit of a single model: CMA-ES search, then LM refinement."""

from __future__ import annotations

import dataclasses

import numpy as np

from population_fit.fitting.global_optimizer import optimize_with_restarts
from population_fit.fitting.local_refiner import accept_refinement, refine
from population_fit.fitting.models import FitOutcome
from population_fit.interfaces.fit_logger import FitLogger, NullFitLogger
from population_fit.interfaces.model import Model
from population_fit.schema.fit_config import OptimizerConfig


def fit_model(
    model: Model,
    *,
    population: int,
    restarts: int,
    config: OptimizerConfig,
    rng: np.random.Generator,
    fit_logger: FitLogger | None = None,
    order: int = 1,
    refine_fit: bool = True,
) -> FitOutcome:
    """Fit model and return the outcome with its sum of squares filled in.

    Refinement only runs for least-squares models; maximum-likelihood fits keep the
    global optimum.
    """

    fit_logger = fit_logger or NullFitLogger()
    result = optimize_with_restarts(
        model,
        population=population,
        restarts=restarts,
        config=config,
        rng=rng,
        fit_logger=fit_logger,
        order=order,
    )
    if not result.ok:
        return result

    ss = model.sum_of_squares(result.params)
    result = dataclasses.replace(result, sum_of_squares=ss)
    if not refine_fit or model.mode != "least_squares":
        return result

    refined = refine(model, result.params, config, fit_logger=fit_logger, order=order)
    if accept_refinement(model, result, refined):
        fit_logger.info(
            "Re-fitting %s (N=%d) improved the SS from %s to %s (-%s%%)",
            model.name,
            order,
            f"{ss:.4g}",
            f"{refined.sum_of_squares:.4g}",
            f"{100 * (ss - refined.sum_of_squares) / ss:.4g}" if ss > 0 else "0",
        )
        result = dataclasses.replace(
            result,
            params=refined.params,
            value=refined.value,
            sum_of_squares=refined.sum_of_squares,
            evaluations=result.evaluations + refined.evaluations,
        )
    elif refined.status == "converged":
        fit_logger.debug("Re-fitting %s (N=%d) did not improve the fit", model.name, order)
    return result


__all__ = ["fit_model"]
