"""Bounded CMA-ES search with restarts.

Each search runs until successive generation bests agree within the configured
relative/absolute tolerance or pycma's own stopping rules fire. Hitting the
iteration or evaluation cap is reported as ``"max_evaluations"`` and the result is
discarded, so the restart loop simply moves on.
"""

from __future__ import annotations

import dataclasses
from typing import Callable

import cma
import numpy as np

from population_fit.fitting.errors import record_convergence_failure
from population_fit.fitting.models import FitOutcome
from population_fit.interfaces.fit_logger import FitLogger, NullFitLogger
from population_fit.interfaces.model import Model
from population_fit.schema.fit_config import OptimizerConfig

_CAP_STOPS = {"maxiter", "maxfevals"}
_MAX_SEED = 2**31 - 1


def population_size(k: int) -> int:
    """4 + floor(3 ln k)."""
    return int(4 + np.floor(3 * np.log(max(int(k), 1))))


def search_sigma(lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """Per-parameter search radius: one third of the box width."""
    return (np.asarray(upper, dtype=float) - np.asarray(lower, dtype=float)) / 3


def value_converged(previous: float, current: float, relative: float, absolute: float) -> bool:
    difference = abs(previous - current)
    size = max(abs(previous), abs(current))
    return difference <= size * relative or difference <= absolute


def next_seed(rng: np.random.Generator) -> int:
    return int(rng.integers(1, _MAX_SEED))


def cmaes_minimize(
    objective: Callable[[np.ndarray], float],
    x0,
    lower,
    upper,
    *,
    population: int,
    config: OptimizerConfig,
    seed: int,
    fit_logger: FitLogger | None = None,
) -> FitOutcome:
    """Minimise objective inside [lower, upper] starting from x0.

    All sampling is drawn from a generator seeded with ``seed``, so numpy's global
    random state is never read or reseeded.
    """

    fit_logger = fit_logger or NullFitLogger()
    run_rng = np.random.default_rng(seed)
    x0 = np.asarray(x0, dtype=float)
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    n = len(x0)

    if n == 1:
        # pycma does not search one-dimensional spaces; add a coordinate the objective ignores.
        x0 = np.append(x0, 0.5)
        lower = np.append(lower, 0.0)
        upper = np.append(upper, 1.0)

    def f(x) -> float:
        return float(objective(np.asarray(x, dtype=float)[:n]))

    stds = search_sigma(lower, upper)
    if np.any(~np.isfinite(stds)) or np.any(stds <= 0):
        return record_convergence_failure("search", error="empty search box", fit_logger=fit_logger)

    options = {
        "bounds": [lower.tolist(), upper.tolist()],
        "CMA_stds": stds.tolist(),
        "popsize": population,
        # samples come from run_rng; nan leaves numpy's global RNG unseeded
        "seed": np.nan,
        "randn": lambda *shape: run_rng.standard_normal(shape),
        "maxiter": config.max_iterations,
        "maxfevals": config.evaluation_limit,
        "CMA_diagonal": config.diagonal_only,
        "CMA_active": config.active_cma,
        "verbose": -9,
        "verb_disp": 0,
        "verb_log": 0,
    }

    best_x = None
    best_f = float("inf")
    converged = False
    try:
        es = cma.CMAEvolutionStrategy(np.clip(x0, lower, upper).tolist(), 1.0, options)
        previous = None
        while not es.stop():
            solutions = es.ask()
            values = [f(s) for s in solutions]
            es.tell(solutions, values)
            i = int(np.argmin(values))
            current = values[i]
            if current < best_f:
                best_f, best_x = current, np.asarray(solutions[i], dtype=float)[:n]
            if previous is not None and value_converged(
                previous, current, config.relative_tolerance, config.absolute_tolerance
            ):
                converged = True
                break
            previous = current
        evaluations = int(es.countevals)
        stop = dict(es.stop())
    except Exception as exc:  # noqa: BLE001
        return record_convergence_failure("search", error=exc, fit_logger=fit_logger)

    if not converged and _CAP_STOPS & set(stop):
        return record_convergence_failure(
            "search",
            error=f"Too many evaluations ({evaluations})",
            fit_logger=fit_logger,
            evaluations=evaluations,
            status="max_evaluations",
        )
    if best_x is None or not np.isfinite(best_f):
        return record_convergence_failure(
            "search", error="no finite objective value", fit_logger=fit_logger, evaluations=evaluations
        )
    return FitOutcome(params=best_x, value=best_f, status="converged", evaluations=evaluations)


def optimize_with_restarts(
    model: Model,
    *,
    population: int,
    restarts: int,
    config: OptimizerConfig,
    rng: np.random.Generator,
    fit_logger: FitLogger | None = None,
    order: int = 1,
) -> FitOutcome:
    """Search from the model guess and again from the best optimum, restarts + 1 times.

    The best result over all attempts is kept, so each restart can only improve it.
    """

    fit_logger = fit_logger or NullFitLogger()
    guess = model.guess()
    lower = model.lower_bounds()
    upper = model.upper_bounds()
    best: FitOutcome | None = None
    evaluations = 0
    last_failure: FitOutcome | None = None

    def attempt(start, label: str) -> None:
        nonlocal best, evaluations, last_failure
        result = cmaes_minimize(
            model.evaluate_scalar,
            start,
            lower,
            upper,
            population=population,
            config=config,
            seed=next_seed(rng),
            fit_logger=fit_logger,
        )
        evaluations += result.evaluations
        if not result.ok:
            last_failure = result
        elif result.improves_on(best):
            best = result
            fit_logger.debug(
                "[%s] Fit %s (N=%d) : value = %g (%d evaluations)",
                label,
                model.name,
                order,
                result.value,
                result.evaluations,
            )

    for i in range(restarts + 1):
        attempt(guess, f"{i}a")
        if best is None:
            continue
        attempt(best.params, f"{i}b")

    if best is None:
        if last_failure is None:
            return FitOutcome(params=None, value=float("inf"), status="failed", evaluations=evaluations)
        return dataclasses.replace(last_failure, evaluations=evaluations)
    return dataclasses.replace(best, evaluations=evaluations)


__all__ = [
    "cmaes_minimize",
    "next_seed",
    "optimize_with_restarts",
    "population_size",
    "search_sigma",
    "value_converged",
]
