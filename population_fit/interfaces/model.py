"""Model interface shared by the global optimizer and the local refiner."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

import numpy as np

FitMode = Literal["least_squares", "maximum_likelihood"]

# Relative step for the finite-difference Jacobian; zero-valued parameters use it as an absolute step.
FD_RELATIVE_STEP = 1e-3


class Model(ABC):
    """A parametric model of a histogram.

    Subclasses predict the histogram's y values at its x values. The optimizers only
    see three views of the model:

    - ``evaluate_scalar``: objective to minimise (sum of squares or negative log-likelihood)
    - ``evaluate_vector``: predicted values, used for least-squares residuals
    - ``jacobian``: derivative of ``evaluate_vector`` with respect to the parameters

    The default Jacobian is a central finite difference; subclasses override it with
    a closed form where one is available.
    """

    name: str = "model"

    def __init__(self, x, y, mode: FitMode = "least_squares") -> None:
        if mode not in ("least_squares", "maximum_likelihood"):
            raise ValueError(f"unknown fit mode: {mode}")
        self.x = np.asarray(x, dtype=float)
        self.y = np.asarray(y, dtype=float)
        self.mode: FitMode = mode

    @property
    @abstractmethod
    def n_params(self) -> int:
        """Number of free parameters."""

    @property
    def fitted_points(self) -> int:
        """Number of independently fitted data points."""
        return len(self.x)

    @abstractmethod
    def evaluate_at(self, x: np.ndarray, params: np.ndarray) -> np.ndarray:
        """Model values at arbitrary x."""

    @abstractmethod
    def guess(self) -> np.ndarray:
        """Initial parameter estimate."""

    @abstractmethod
    def lower_bounds(self) -> np.ndarray:
        ...

    @abstractmethod
    def upper_bounds(self) -> np.ndarray:
        ...

    def evaluate_vector(self, params) -> np.ndarray:
        return self.evaluate_at(self.x, np.asarray(params, dtype=float))

    def residuals(self, params) -> np.ndarray:
        return self.evaluate_vector(params) - self.y

    def sum_of_squares(self, params) -> float:
        r = self.residuals(params)
        return float(r @ r)

    def negative_log_likelihood(self, params) -> float:
        raise NotImplementedError(f"{self.name} does not support maximum likelihood fitting")

    def evaluate_scalar(self, params) -> float:
        if self.mode == "maximum_likelihood":
            return self.negative_log_likelihood(params)
        return self.sum_of_squares(params)

    def jacobian(self, params) -> np.ndarray:
        params = np.asarray(params, dtype=float)
        steps = FD_RELATIVE_STEP * np.abs(params)
        steps[steps == 0] = FD_RELATIVE_STEP
        jac = np.empty((len(self.x), len(params)))
        for j, h in enumerate(steps):
            upper = params.copy()
            lower = params.copy()
            upper[j] += h
            lower[j] -= h
            jac[:, j] = (self.evaluate_vector(upper) - self.evaluate_vector(lower)) / (2 * h)
        return jac

    def is_valid(self, params) -> bool:
        """True when the parameters are physically meaningful for this model."""
        params = np.asarray(params, dtype=float)
        return bool(np.all(np.isfinite(params)) and np.all(params >= self.lower_bounds()))


__all__ = ["FD_RELATIVE_STEP", "FitMode", "Model"]
