"""Cumulative jump-distance models for one or more diffusing populations.

For a population with diffusion coefficient D the cumulative probability of a
squared jump distance x is ``F(x) = 1 - exp(-x / 4D)``. A mixture of n
populations is the fraction-weighted sum of these curves.
"""

from __future__ import annotations

import numpy as np

from population_fit.data.histogram import Histogram
from population_fit.interfaces.model import Model
from population_fit.models.mixture import MixtureModel

_TINY = np.finfo(float).tiny


def _decay(x: np.ndarray, d: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return (exp(b), b) with b = -x / 4D, broadcasting d over rows."""
    b = -x / (4 * np.maximum(d, _TINY))
    return np.exp(b), b


class JumpDistanceModel(Model):
    name = "jump_distance"

    def __init__(self, histogram: Histogram, estimated_d: float, rate_upper_multiplier: float = 10.0) -> None:
        super().__init__(histogram.x, histogram.y, mode="least_squares")
        self.estimated_d = float(estimated_d)
        self.rate_upper_multiplier = rate_upper_multiplier

    @property
    def n_params(self) -> int:
        return 1

    def evaluate_at(self, x, params) -> np.ndarray:
        e, _ = _decay(np.asarray(x, dtype=float), np.asarray(params[0], dtype=float))
        return 1 - e

    def jacobian(self, params) -> np.ndarray:
        # dF/dD = exp(b) * b / D
        d = float(params[0])
        e, b = _decay(self.x, np.asarray(d))
        return (e * b / max(d, _TINY))[:, None]

    def guess(self) -> np.ndarray:
        return np.array([self.estimated_d])

    def lower_bounds(self) -> np.ndarray:
        return np.zeros(1)

    def upper_bounds(self) -> np.ndarray:
        return np.array([self.estimated_d * self.rate_upper_multiplier])

    def is_valid(self, params) -> bool:
        return bool(np.isfinite(params[0]) and params[0] > 0)


class MixedJumpDistanceModel(MixtureModel):
    name = "mixed_jump_distance"

    def __init__(
        self,
        histogram: Histogram,
        estimated_d: float,
        order: int,
        *,
        fraction_upper: float = 10.0,
        rate_upper_multiplier: float = 10.0,
        rate_decay: float = 0.1,
    ) -> None:
        super().__init__(
            histogram.x,
            histogram.y,
            order,
            rate_guess=estimated_d,
            rate_upper=estimated_d * rate_upper_multiplier,
            fraction_upper=fraction_upper,
            rate_decay=rate_decay,
        )
        self.estimated_d = float(estimated_d)

    def component_values(self, x, rates) -> np.ndarray:
        e, _ = _decay(x[None, :], np.asarray(rates)[:, None])
        return 1 - e

    def jacobian(self, params) -> np.ndarray:
        # F = 1 - sum_j (f_j / T) e_j with T = sum(f), e_j = exp(b_j), b_j = -x / 4D_j
        #   dF/df_k = (S - e_k) / T where S = sum_j (f_j / T) e_j  (quotient rule)
        #   dF/dD_k = (f_k / T) e_k b_k / D_k
        params = np.asarray(params, dtype=float)
        raw = params[0::2]
        rates = params[1::2]
        total = raw.sum()
        if total <= 0:
            return super().jacobian(params)
        fractions = raw / total
        e, b = _decay(self.x[None, :], rates[:, None])
        s = fractions @ e
        jac = np.empty((len(self.x), self.n_params))
        jac[:, 0::2] = ((s[None, :] - e) / total).T
        jac[:, 1::2] = (fractions[:, None] * e * b / np.maximum(rates, _TINY)[:, None]).T
        return jac


__all__ = ["JumpDistanceModel", "MixedJumpDistanceModel"]
