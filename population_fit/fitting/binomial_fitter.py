"""Fit binomial cluster-size distributions.

``fit_binomial`` scans the trial count N upwards, fitting p for each N, and keeps
the N with the lowest sum of squares. ``fit_binomial_mixture`` keeps N fixed and
instead grows the number of binomial populations.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from population_fit.data.histogram import (
    Histogram,
    histogram_mean,
    integer_histogram,
    pad_histogram,
    to_non_cumulative,
    zero_truncate,
)
from population_fit.exceptions import InvalidInputError
from population_fit.fitting.candidates import (
    format_values,
    mixture_candidate,
    mixture_population,
    single_candidate,
    to_mixture_fit,
)
from population_fit.fitting.engine import fit_model
from population_fit.fitting.global_optimizer import population_size
from population_fit.fitting.models import BinomialFit, FitCandidate, FitOutcome, MixtureFit
from population_fit.interfaces.fit_logger import FitLogger, NullFitLogger
from population_fit.models.binomial import BinomialModel, MixedBinomialModel
from population_fit.schema.fit_config import BinomialFitConfig, MixtureSearchConfig
from population_fit.selection.model_selector import select_mixture_order, select_trial_count

# The trial-count search always has one free parameter; its population is sized as for two.
TRIAL_SEARCH_POPULATION_BASIS = 2


class BinomialFitter:
    def __init__(
        self,
        config: BinomialFitConfig | None = None,
        fit_logger: FitLogger | None = None,
        mixture_config: MixtureSearchConfig | None = None,
    ) -> None:
        self.config = config or BinomialFitConfig()
        self.mixture_config = mixture_config or MixtureSearchConfig()
        self.fit_logger = fit_logger or NullFitLogger()

    def _name(self, zero_truncated: bool) -> str:
        return "Zero-truncated Binomial distribution" if zero_truncated else "Binomial distribution"

    def fit_binomial(
        self, data, min_n: int = 1, max_n: int = 0, zero_truncated: bool = False
    ) -> Optional[BinomialFit]:
        """Fit Binomial(N, p) to non-negative integer observations.

        Every N from min_n is tried up to the largest observation, or up to max_n when
        it is positive (the histogram is padded with empty buckets if max_n is larger).
        Returns None when there is nothing to fit.
        """

        histogram = integer_histogram(data)
        n_max = len(histogram) - 1
        if max_n > 0:
            if n_max > max_n:
                n_max = max_n
            elif n_max < max_n:
                histogram = pad_histogram(histogram, max_n)
                n_max = max_n
        if n_max < 1:
            self.fit_logger.info("No trial counts to fit: largest observation is %d", n_max)
            return None
        min_n = min(max(min_n, 1), n_max)

        if zero_truncated:
            histogram = zero_truncate(histogram)
        mean = histogram_mean(histogram)
        name = self._name(zero_truncated)
        self.fit_logger.info("Mean cluster size = %s", f"{mean:.4g}")
        self.fit_logger.info("Fitting %s", name)

        rng = np.random.default_rng(self.config.seed)

        def fit_order(n: int) -> Optional[FitCandidate]:
            candidate = self._fit_trials(histogram, n, zero_truncated, mean, rng)
            if candidate is not None:
                self.fit_logger.info(
                    "Fitted %s : N=%d, p=%s. SS=%g", name, n, f"{candidate.params[0]:.4g}", candidate.sum_of_squares
                )
            return candidate

        best = select_trial_count(
            fit_order, range(min_n, n_max + 1), worse_limit=self.config.worse_limit, fit_logger=self.fit_logger
        )
        if best is None:
            return None
        return BinomialFit(
            n_trials=best.order,
            p=float(best.params[0]),
            sum_of_squares=best.sum_of_squares,
            information_criterion=best.information_criterion,
        )

    def fit_binomial_histogram(
        self, histogram: Histogram, n: int, zero_truncated: bool = False, mean: float | None = None
    ) -> Optional[FitCandidate]:
        """Fit p for a fixed trial count n.

        The candidate's ``sum_of_squares`` is reported even for maximum-likelihood fits
        so that different n can be compared.
        """

        histogram = to_non_cumulative(histogram)
        if zero_truncated:
            histogram = zero_truncate(histogram)
        if mean is None:
            mean = histogram_mean(histogram)
        return self._fit_trials(histogram, n, zero_truncated, mean, np.random.default_rng(self.config.seed))

    def _fit_trials(
        self,
        histogram: Histogram,
        n: int,
        zero_truncated: bool,
        mean: float,
        rng: np.random.Generator,
    ) -> Optional[FitCandidate]:
        mode = "maximum_likelihood" if self.config.maximum_likelihood else "least_squares"
        model = BinomialModel(histogram, n, zero_truncated=zero_truncated, mode=mode, mean=mean)
        if model.fitted_points < 1:
            self.fit_logger.debug(
                "No points to fit (%d): Histogram.length = %d, n = %d, zero-truncated = %s",
                model.fitted_points,
                len(histogram),
                n,
                zero_truncated,
            )
            return None

        if n == 1 and zero_truncated:
            # Only x=1 is observable, so p=1 fits exactly.
            params = np.ones(1)
            ss = model.sum_of_squares(params)
            outcome = FitOutcome(params=params, value=ss, status="converged", sum_of_squares=ss)
        else:
            outcome = fit_model(
                model,
                population=population_size(TRIAL_SEARCH_POPULATION_BASIS),
                restarts=self.config.fit_restarts,
                config=self.config.optimizer,
                rng=rng,
                fit_logger=self.fit_logger,
                order=n,
            )
            if not outcome.ok:
                self.fit_logger.debug("Failed to fit N=%d: %s", n, outcome.message or outcome.status)
                return None
        return single_candidate(model, outcome, order=n)

    def fit_binomial_mixture(self, data, n_trials: int, zero_truncated: bool = False) -> Optional[MixtureFit]:
        """Fit a mixture of Binomial(n_trials, p_i) populations of increasing order.

        Returns the success probabilities sorted descending with their fractions, or
        None when not even a single population could be fitted.
        """

        if n_trials < 1:
            raise InvalidInputError("n_trials must be >= 1")
        config = self.mixture_config
        histogram = integer_histogram(data)
        if len(histogram) - 1 > n_trials:
            raise InvalidInputError(f"Observations exceed the number of trials ({n_trials})")
        histogram = pad_histogram(histogram, n_trials)
        if zero_truncated:
            histogram = zero_truncate(histogram)
        mean = histogram_mean(histogram)
        rng = np.random.default_rng(config.seed)
        name = self._name(zero_truncated)
        self.fit_logger.info("Mean cluster size = %s", f"{mean:.4g}")

        single_model = BinomialModel(histogram, n_trials, zero_truncated=zero_truncated, mean=mean)
        single: Optional[FitCandidate] = None
        outcome = fit_model(
            single_model,
            population=mixture_population(config, len(histogram), single_model.n_params),
            restarts=config.fit_restarts,
            config=config.optimizer,
            rng=rng,
            fit_logger=self.fit_logger,
            order=1,
        )
        if outcome.ok:
            single = single_candidate(single_model, outcome)
            self.fit_logger.info(
                "Fit %s (N=1) : p = %s, SS = %g, IC = %s (%d evaluations)",
                name,
                f"{single.params[0]:.4g}",
                single.sum_of_squares,
                f"{single.information_criterion:.4g}",
                single.evaluations,
            )
        else:
            self.fit_logger.info("Failed to fit N=1 : %s", outcome.message or outcome.status)

        def fit_order(order: int) -> Optional[FitCandidate]:
            model = MixedBinomialModel(
                histogram,
                n_trials,
                order,
                zero_truncated=zero_truncated,
                fraction_upper=config.fraction_upper,
                rate_decay=config.rate_decay,
                mean=mean,
            )
            result = fit_model(
                model,
                population=mixture_population(config, len(histogram), model.n_params),
                restarts=config.fit_restarts,
                config=config.optimizer,
                rng=rng,
                fit_logger=self.fit_logger,
                order=order,
            )
            if not result.ok:
                return None
            candidate = mixture_candidate(model, result)
            self.fit_logger.info(
                "Fit %s (N=%d) : p = %s (%s), SS = %g, IC = %s (%d evaluations)",
                name,
                order,
                format_values(candidate.coefficients),
                format_values(candidate.fractions),
                candidate.sum_of_squares,
                f"{candidate.information_criterion:.4g}",
                candidate.evaluations,
            )
            return candidate

        selection = select_mixture_order(
            single,
            fit_order,
            max_order=config.max_order,
            min_fraction=config.min_fraction,
            min_difference=config.min_difference,
            fit_logger=self.fit_logger,
        )
        if selection.best is None:
            return None
        best = selection.best
        self.fit_logger.info(
            "Best fit achieved using %d population%s: p = %s, Fractions = %s",
            best.order,
            "" if best.order == 1 else "s",
            format_values(best.coefficients),
            format_values(best.fractions),
        )
        return to_mixture_fit(best)


__all__ = ["BinomialFitter"]
