"""Callback receiving sampled best-fit curves for external plotting."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class CurveLogger(ABC):
    """Receives the best single- and mixed-population curves of a fit.

    Each curve is a ``(2, number_of_curve_points + 1)`` array of x and y values,
    sampled on equal intervals from zero up to and including the histogram maximum.
    """

    @property
    @abstractmethod
    def number_of_curve_points(self) -> int:
        """Number of intervals between zero and the maximum; curves with fewer than 2 are not sampled."""

    @abstractmethod
    def save_single_population_curve(self, curve: np.ndarray) -> None:
        """Called with the best fit curve using a single population."""

    @abstractmethod
    def save_mixed_population_curve(self, curve: np.ndarray) -> None:
        """Called with the best fit curve using a mixed population."""


__all__ = ["CurveLogger"]
