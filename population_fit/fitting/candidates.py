"""Turn optimizer outcomes into scored candidates for the order search."""

from __future__ import annotations

import numpy as np

from population_fit.fitting.global_optimizer import population_size
from population_fit.fitting.models import FitCandidate, FitOutcome, MixtureFit
from population_fit.interfaces.model import Model
from population_fit.metrics.information_criteria import information_criterion
from population_fit.models.mixture import MixtureModel
from population_fit.schema.fit_config import MixtureSearchConfig


def single_candidate(model: Model, outcome: FitOutcome, order: int = 1) -> FitCandidate:
    params = np.asarray(outcome.params, dtype=float)
    return FitCandidate(
        order=order,
        params=params,
        value=outcome.value,
        sum_of_squares=outcome.sum_of_squares,
        information_criterion=information_criterion(outcome.sum_of_squares, model.fitted_points, model.n_params),
        coefficients=params.copy(),
        fractions=np.ones(1),
        evaluations=outcome.evaluations,
    )


def mixture_candidate(model: MixtureModel, outcome: FitOutcome) -> FitCandidate:
    # The fractions sum to one so they carry one fewer degree of freedom.
    coefficients, fractions = model.sorted_components(outcome.params)
    return FitCandidate(
        order=model.order,
        params=np.asarray(outcome.params, dtype=float),
        value=outcome.value,
        sum_of_squares=outcome.sum_of_squares,
        information_criterion=information_criterion(
            outcome.sum_of_squares, model.fitted_points, model.n_params - 1
        ),
        coefficients=coefficients,
        fractions=fractions,
        evaluations=outcome.evaluations,
    )


def mixture_population(config: MixtureSearchConfig, histogram_length: int, n_params: int) -> int:
    k = histogram_length if config.population_size_basis == "data" else n_params
    return population_size(k)


def to_mixture_fit(candidate: FitCandidate) -> MixtureFit:
    return MixtureFit(
        coefficients=candidate.coefficients,
        fractions=candidate.fractions,
        order=candidate.order,
        sum_of_squares=candidate.sum_of_squares,
        information_criterion=candidate.information_criterion,
    )


def format_values(values) -> str:
    return ", ".join(f"{v:.4g}" for v in values)


__all__ = ["format_values", "mixture_candidate", "mixture_population", "single_candidate", "to_mixture_fit"]
