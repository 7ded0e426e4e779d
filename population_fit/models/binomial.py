"""Binomial cluster-size models.

The histogram index k is the cluster size and the model value is the binomial
probability of k successes in N trials. When zero-truncated the k=0 outcome is
unobservable and all k >= 1 are rescaled by ``1 / (1 - P(X=0))``.
"""

from __future__ import annotations

import numpy as np
from scipy.special import comb

from population_fit.data.histogram import Histogram, histogram_mean
from population_fit.interfaces.model import FitMode, Model
from population_fit.models.mixture import MixtureModel

_TINY = np.finfo(float).tiny


def _pmf_terms(n_trials: int, p: float) -> tuple[np.ndarray, np.ndarray]:
    """PMF and its derivative with respect to p for k = 0..n_trials.

    Written as the polynomial nCk p^k (1-p)^(n-k) so it is defined (and smooth) for
    any p, which the unbounded local solver relies on.
    """

    k = np.arange(n_trials + 1)
    n_k = n_trials - k
    c = comb(n_trials, k)
    q = 1.0 - p
    pk = p ** k
    qnk = q ** n_k
    g = c * pk * qnk
    # Exponents are clamped at zero where the leading factor k or (n - k) is zero anyway.
    dg = c * (k * p ** np.maximum(k - 1, 0) * qnk - pk * n_k * q ** np.maximum(n_k - 1, 0))
    return g, dg


def binomial_pmf(n_trials: int, p: float, zero_truncated: bool = False) -> np.ndarray:
    g, _ = _pmf_terms(n_trials, p)
    if zero_truncated:
        g = g.copy()
        g[0] = 0.0
        g[1:] /= max(1.0 - (1.0 - p) ** n_trials, _TINY)
    return g


def _on_grid(values: np.ndarray, x: np.ndarray) -> np.ndarray:
    """Place values defined on 0..N onto integer x, zero outside the support."""
    idx = np.asarray(x, dtype=int)
    out = np.zeros(len(idx))
    inside = (idx >= 0) & (idx < len(values))
    out[inside] = values[idx[inside]]
    return out


class BinomialModel(Model):
    """Binomial(N, p) with fixed N fitted for p."""

    name = "binomial"

    def __init__(
        self,
        histogram: Histogram,
        n_trials: int,
        zero_truncated: bool = False,
        mode: FitMode = "least_squares",
        mean: float | None = None,
    ) -> None:
        super().__init__(histogram.x, histogram.y, mode=mode)
        if n_trials < 1:
            raise ValueError("n_trials must be >= 1")
        self.n_trials = int(n_trials)
        self.zero_truncated = zero_truncated
        self.start = 1 if zero_truncated else 0
        self.mean = histogram_mean(histogram) if mean is None else float(mean)

    @property
    def n_params(self) -> int:
        return 1

    @property
    def fitted_points(self) -> int:
        return min(len(self.x), self.n_trials + 1) - self.start

    def evaluate_at(self, x, params) -> np.ndarray:
        return _on_grid(binomial_pmf(self.n_trials, float(params[0]), self.zero_truncated), x)

    def sum_of_squares(self, params) -> float:
        r = self.residuals(params)[self.start :]
        return float(r @ r)

    def negative_log_likelihood(self, params) -> float:
        # No likelihood exists beyond N, so only observations up to N contribute.
        limit = min(len(self.y), self.n_trials + 1)
        observed = self.y[self.start : limit]
        expected = self.evaluate_vector(params)[self.start : limit]
        return float(-(observed @ np.log(np.maximum(expected, _TINY))))

    def jacobian(self, params) -> np.ndarray:
        p = float(params[0])
        n = self.n_trials
        g, dg = _pmf_terms(n, p)
        if self.zero_truncated:
            # Product rule on the truncation factor f = 1 / (1 - (1-p)^n):
            #   (f.g)' = f'.g + f.g'  with  f' = -n (1-p)^(n-1) / (1 - (1-p)^n)^2
            denom = max(1.0 - (1.0 - p) ** n, _TINY)
            f = 1.0 / denom
            df = -n * (1.0 - p) ** (n - 1) / denom**2
            dg = df * g + f * dg
            dg[0] = 0.0
        return _on_grid(dg, self.x)[:, None]

    def guess(self) -> np.ndarray:
        # n.p = mean
        p = self.mean / self.n_trials if np.isfinite(self.mean) else 0.5
        return np.array([min(max(p, 0.0), 1.0)])

    def lower_bounds(self) -> np.ndarray:
        return np.zeros(1)

    def upper_bounds(self) -> np.ndarray:
        return np.ones(1)

    def is_valid(self, params) -> bool:
        p = float(params[0])
        return bool(np.isfinite(p) and 0.0 <= p <= 1.0)


class MixedBinomialModel(MixtureModel):
    """Fraction-weighted sum of Binomial(N, p_i) components sharing N.

    Uses the finite-difference Jacobian.
    """

    name = "mixed_binomial"

    def __init__(
        self,
        histogram: Histogram,
        n_trials: int,
        order: int,
        zero_truncated: bool = False,
        *,
        fraction_upper: float = 10.0,
        rate_decay: float = 0.1,
        mean: float | None = None,
    ) -> None:
        mean = histogram_mean(histogram) if mean is None else float(mean)
        p_guess = min(max(mean / n_trials, 0.0), 1.0) if np.isfinite(mean) else 0.5
        super().__init__(
            histogram.x,
            histogram.y,
            order,
            rate_guess=p_guess,
            rate_upper=1.0,
            fraction_upper=fraction_upper,
            rate_decay=rate_decay,
            rate_limit=1.0,
        )
        self.n_trials = int(n_trials)
        self.zero_truncated = zero_truncated
        self.start = 1 if zero_truncated else 0

    @property
    def fitted_points(self) -> int:
        return min(len(self.x), self.n_trials + 1) - self.start

    def component_values(self, x, rates) -> np.ndarray:
        return np.vstack([_on_grid(binomial_pmf(self.n_trials, float(p), self.zero_truncated), x) for p in rates])

    def sum_of_squares(self, params) -> float:
        r = self.residuals(params)[self.start :]
        return float(r @ r)


__all__ = ["BinomialModel", "MixedBinomialModel", "binomial_pmf"]
