"""Normalised histograms of cluster sizes and jump distances."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from population_fit.data.validation import validate_counts, validate_distances
from population_fit.exceptions import DegenerateInputError


@dataclass(frozen=True, eq=False)
class Histogram:
    """Ordered (x, y) pairs.

    Non-cumulative histograms hold probability mass summing to 1; cumulative
    histograms are non-decreasing and end at 1. The arrays are read-only.
    """

    x: np.ndarray
    y: np.ndarray
    cumulative: bool = False

    def __post_init__(self) -> None:
        x = np.array(self.x, dtype=float)
        y = np.array(self.y, dtype=float)
        if x.shape != y.shape or x.ndim != 1:
            raise ValueError(f"x and y must be 1D arrays of equal length, got {x.shape} and {y.shape}")
        x.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    def __len__(self) -> int:
        return len(self.x)

    @property
    def max_x(self) -> float:
        return float(self.x[-1]) if len(self.x) else 0.0


def integer_histogram(values, cumulative: bool = False) -> Histogram:
    """Histogram of non-negative integer counts indexed densely from 0 to max(values).

    Values missing from the middle of the range get zero mass. An empty input gives
    all mass at zero.
    """

    counts = validate_counts(values)
    if counts.size == 0:
        return Histogram(x=np.zeros(1), y=np.ones(1), cumulative=cumulative)
    freq = np.bincount(counts) / counts.size
    if cumulative:
        y = np.cumsum(freq)
        y[-1] = 1.0
    else:
        y = freq
    return Histogram(x=np.arange(len(freq)), y=y, cumulative=cumulative)


def cumulative_histogram(values) -> Histogram:
    """Step CDF over the distinct sorted values: fraction of observations <= x."""

    data = validate_distances(values)
    if data.size == 0:
        return Histogram(x=np.zeros(0), y=np.zeros(0), cumulative=True)
    distinct, counts = np.unique(data, return_counts=True)
    y = np.cumsum(counts) / data.size
    y[-1] = 1.0
    return Histogram(x=distinct, y=y, cumulative=True)


def to_non_cumulative(histogram: Histogram) -> Histogram:
    """First difference of a cumulative histogram; the first bucket is kept as-is."""

    if not histogram.cumulative:
        return histogram
    y = np.diff(histogram.y, prepend=0.0)
    return Histogram(x=histogram.x, y=y, cumulative=False)


def zero_truncate(histogram: Histogram) -> Histogram:
    """Remove the mass at x=0 and renormalise the remaining buckets to sum to 1.

    Raises DegenerateInputError when nothing remains after removing x=0.
    """

    if histogram.cumulative:
        histogram = to_non_cumulative(histogram)
    if len(histogram) == 0 or histogram.y[0] == 0:
        return histogram
    remainder = float(histogram.y[1:].sum())
    if remainder <= 0:
        raise DegenerateInputError("Fitting zero-truncated histogram but there are no non-zero values")
    y = histogram.y.copy()
    y[0] = 0.0
    y[1:] /= remainder
    return Histogram(x=histogram.x, y=y, cumulative=False)


def pad_histogram(histogram: Histogram, max_x: int) -> Histogram:
    """Extend an integer histogram with empty buckets up to max_x inclusive."""

    if histogram.cumulative:
        raise ValueError("only non-cumulative histograms can be padded")
    missing = int(max_x) + 1 - len(histogram)
    if missing <= 0:
        return histogram
    return Histogram(
        x=np.arange(int(max_x) + 1),
        y=np.concatenate([histogram.y, np.zeros(missing)]),
        cumulative=False,
    )


def histogram_mean(histogram: Histogram) -> float:
    """Mean x weighted by the (non-cumulative) mass."""

    h = to_non_cumulative(histogram)
    total = float(h.y.sum())
    if total <= 0:
        return float("nan")
    return float(h.x @ h.y) / total


__all__ = [
    "Histogram",
    "cumulative_histogram",
    "histogram_mean",
    "integer_histogram",
    "pad_histogram",
    "to_non_cumulative",
    "zero_truncate",
]
