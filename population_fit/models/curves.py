"""Sampling of fitted model curves."""

from __future__ import annotations

import numpy as np

from population_fit.interfaces.model import Model


def sample_curve(model: Model, params, n_points: int) -> np.ndarray | None:
    """Evaluate a model on n_points equal intervals from 0 to the largest histogram x.

    Returns a (2, n_points + 1) array of x and y, or None when fewer than two points
    were requested or the histogram is empty.
    """

    if n_points <= 1 or len(model.x) == 0:
        return None
    max_x = float(model.x[-1])
    x = np.arange(n_points + 1) * (max_x / n_points)
    x[-1] = max_x
    y = model.evaluate_at(x, np.asarray(params, dtype=float))
    return np.vstack([x, y])


__all__ = ["sample_curve"]
