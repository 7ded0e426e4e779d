"""Weighted mixtures of single-population models.

Parameters are stored as ``[f_1, r_1, f_2, r_2, ...]`` where ``f_i`` is an
unnormalised fraction and ``r_i`` the component's rate (a diffusion coefficient or
a success probability). Fractions are divided by their sum on every evaluation.
"""

from __future__ import annotations

from abc import abstractmethod

import numpy as np

from population_fit.interfaces.model import Model

FRACTION_GUESS = 1.0


class MixtureModel(Model):
    def __init__(
        self,
        x,
        y,
        order: int,
        rate_guess: float,
        rate_upper: float,
        *,
        fraction_upper: float = 10.0,
        rate_decay: float = 0.1,
        rate_limit: float | None = None,
    ) -> None:
        super().__init__(x, y, mode="least_squares")
        if order < 1:
            raise ValueError("mixture order must be >= 1")
        self.order = order
        self.rate_guess = float(rate_guess)
        self.rate_upper = float(rate_upper)
        self.fraction_upper = float(fraction_upper)
        self.rate_decay = float(rate_decay)
        # Refined rates above this are rejected (probabilities cannot exceed 1).
        self.rate_limit = rate_limit

    @property
    def n_params(self) -> int:
        return 2 * self.order

    @abstractmethod
    def component_values(self, x: np.ndarray, rates: np.ndarray) -> np.ndarray:
        """Matrix of shape (order, len(x)) with each component's value at x."""

    def split(self, params) -> tuple[np.ndarray, np.ndarray]:
        """Normalised fractions and rates from a parameter vector."""
        params = np.asarray(params, dtype=float)
        raw = params[0::2]
        rates = params[1::2]
        total = raw.sum()
        if total > 0:
            fractions = raw / total
        else:
            fractions = np.full(len(raw), 1.0 / len(raw))
        return fractions, rates

    def evaluate_at(self, x, params) -> np.ndarray:
        fractions, rates = self.split(params)
        return fractions @ self.component_values(np.asarray(x, dtype=float), rates)

    def guess(self) -> np.ndarray:
        guess = np.empty(self.n_params)
        guess[0::2] = FRACTION_GUESS
        guess[1::2] = self.rate_guess * self.rate_decay ** np.arange(self.order)
        return guess

    def lower_bounds(self) -> np.ndarray:
        return np.zeros(self.n_params)

    def upper_bounds(self) -> np.ndarray:
        upper = np.empty(self.n_params)
        upper[0::2] = self.fraction_upper
        upper[1::2] = self.rate_upper
        return upper

    def is_valid(self, params) -> bool:
        params = np.asarray(params, dtype=float)
        if not np.all(np.isfinite(params)) or np.min(params) <= 0:
            return False
        if self.rate_limit is not None and np.max(params[1::2]) > self.rate_limit:
            return False
        return True

    def sorted_components(self, params) -> tuple[np.ndarray, np.ndarray]:
        """Rates sorted descending with their normalised fractions."""
        fractions, rates = self.split(params)
        order = np.argsort(-rates, kind="stable")
        return rates[order], fractions[order]


__all__ = ["FRACTION_GUESS", "MixtureModel"]
