"""Shared result models for the fitting engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

import numpy as np

# "max_evaluations" and "failed" are the non-convergence outcomes; the search treats
# them as "no improvement" rather than errors.
OptimizerStatus = Literal["converged", "max_evaluations", "failed", "skipped"]


@dataclass
class FitOutcome:
    """Result of one optimizer stage for one model."""

    params: Optional[np.ndarray]
    value: float
    status: OptimizerStatus
    sum_of_squares: float = float("nan")
    evaluations: int = 0
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "converged" and self.params is not None

    def improves_on(self, other: "FitOutcome | None") -> bool:
        return self.ok and (other is None or not other.ok or self.value < other.value)


@dataclass(frozen=True, eq=False)
class FitCandidate:
    """A successfully fitted model order."""

    order: int
    params: np.ndarray
    value: float
    sum_of_squares: float
    information_criterion: float
    coefficients: np.ndarray
    fractions: np.ndarray
    evaluations: int = 0


@dataclass(frozen=True)
class BinomialFit:
    n_trials: int
    p: float
    sum_of_squares: float
    information_criterion: float

    def as_tuple(self) -> tuple[int, float]:
        return self.n_trials, self.p


@dataclass(frozen=True, eq=False)
class MixtureFit:
    """Best mixture: rates sorted descending with fractions summing to 1."""

    coefficients: np.ndarray
    fractions: np.ndarray
    order: int
    sum_of_squares: float
    information_criterion: float

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        return self.coefficients, self.fractions

    def to_dict(self) -> dict:
        return {
            "order": self.order,
            "coefficients": [float(v) for v in self.coefficients],
            "fractions": [float(v) for v in self.fractions],
            "sum_of_squares": float(self.sum_of_squares),
            "information_criterion": float(self.information_criterion),
        }


__all__ = ["BinomialFit", "FitCandidate", "FitOutcome", "MixtureFit", "OptimizerStatus"]
