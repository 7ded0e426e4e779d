"""Diffusion populations from squared jump distances.

The cumulative jump-distance histogram is fitted with one population by
Levenberg-Marquardt, then with mixtures of 2, 3, ... populations by CMA-ES plus
Levenberg-Marquardt. Coefficients are returned sorted descending with their
fractions.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from population_fit.data.histogram import Histogram, cumulative_histogram
from population_fit.data.validation import validate_distances
from population_fit.fitting.candidates import (
    format_values,
    mixture_candidate,
    mixture_population,
    single_candidate,
    to_mixture_fit,
)
from population_fit.fitting.engine import fit_model
from population_fit.fitting.local_refiner import refine
from population_fit.fitting.models import FitCandidate, MixtureFit
from population_fit.interfaces.curve_logger import CurveLogger
from population_fit.interfaces.fit_logger import FitLogger, NullFitLogger
from population_fit.interfaces.model import Model
from population_fit.models.curves import sample_curve
from population_fit.models.jump_distance import JumpDistanceModel, MixedJumpDistanceModel
from population_fit.schema.fit_config import MixtureSearchConfig
from population_fit.selection.model_selector import select_mixture_order


class JumpDistanceAnalysis:
    def __init__(
        self,
        config: MixtureSearchConfig | None = None,
        fit_logger: FitLogger | None = None,
        curve_logger: CurveLogger | None = None,
    ) -> None:
        self.config = config or MixtureSearchConfig()
        self.fit_logger = fit_logger or NullFitLogger()
        self.curve_logger = curve_logger

    def fit_jump_distances(self, values) -> Optional[MixtureFit]:
        """Fit mean squared jump distances (um^2/s). Returns None for empty input."""

        distances = validate_distances(values)
        if distances.size == 0:
            return None
        mean_jump_distance = float(distances.mean())
        return self.fit_jump_distance_histogram(mean_jump_distance, cumulative_histogram(distances))

    def fit_jump_distance_histogram(self, mean_jump_distance: float, histogram: Histogram) -> Optional[MixtureFit]:
        """Fit a cumulative jump-distance histogram (x in um^2/s, y rising to 1)."""

        if len(histogram) == 0 or not mean_jump_distance > 0:
            self.fit_logger.info("Cannot fit: mean jump distance %s over %d points", mean_jump_distance, len(histogram))
            return None

        config = self.config
        estimated_d = mean_jump_distance / 4
        self.fit_logger.info("Estimated D = %s um^2/s", f"{estimated_d:.4g}")
        rng = np.random.default_rng(config.seed)

        single = self._fit_single(histogram, estimated_d)

        def fit_order(order: int) -> Optional[FitCandidate]:
            model = self._mixed_model(histogram, estimated_d, order)
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
                "Fit Jump distance (N=%d) : D = %s um^2/s (%s), SS = %g, IC = %s (%d evaluations)",
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

        if selection.best_multi is not None:
            best_multi = selection.best_multi
            self._save_curve(self._mixed_model(histogram, estimated_d, best_multi.order), best_multi.params, mixed=True)

        if selection.best is None:
            return None
        best = selection.best
        self.fit_logger.info(
            "Best fit achieved using %d population%s: D = %s um^2/s, Fractions = %s",
            best.order,
            "" if best.order == 1 else "s",
            format_values(best.coefficients),
            format_values(best.fractions),
        )
        return to_mixture_fit(best)

    def _fit_single(self, histogram: Histogram, estimated_d: float) -> Optional[FitCandidate]:
        model = JumpDistanceModel(histogram, estimated_d, rate_upper_multiplier=self.config.rate_upper_multiplier)
        outcome = refine(model, model.guess(), self.config.optimizer, fit_logger=self.fit_logger, order=1)
        if not outcome.ok or not model.is_valid(outcome.params):
            self.fit_logger.info("Failed to fit : %s", outcome.message or outcome.status)
            return None
        candidate = single_candidate(model, outcome)
        self.fit_logger.info(
            "Fit Jump distance (N=1) : D = %s um^2/s, SS = %g, IC = %s (%d evaluations)",
            f"{candidate.params[0]:.4g}",
            candidate.sum_of_squares,
            f"{candidate.information_criterion:.4g}",
            candidate.evaluations,
        )
        self._save_curve(model, candidate.params, mixed=False)
        return candidate

    def _mixed_model(self, histogram: Histogram, estimated_d: float, order: int) -> MixedJumpDistanceModel:
        return MixedJumpDistanceModel(
            histogram,
            estimated_d,
            order,
            fraction_upper=self.config.fraction_upper,
            rate_upper_multiplier=self.config.rate_upper_multiplier,
            rate_decay=self.config.rate_decay,
        )

    def _save_curve(self, model: Model, params, mixed: bool) -> None:
        if self.curve_logger is None:
            return
        curve = sample_curve(model, params, self.curve_logger.number_of_curve_points)
        if curve is None:
            return
        if mixed:
            self.curve_logger.save_mixed_population_curve(curve)
        else:
            self.curve_logger.save_single_population_curve(curve)


__all__ = ["JumpDistanceAnalysis"]
