from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from population_fit.data.histogram import cumulative_histogram
from population_fit.exceptions import InvalidInputError
from population_fit.fitting import jump_distance_analysis
from population_fit.fitting.jump_distance_analysis import JumpDistanceAnalysis
from population_fit.fitting.models import FitOutcome
from population_fit.interfaces.curve_logger import CurveLogger
from population_fit.schema.fit_config import MixtureSearchConfig


class RecordingCurveLogger(CurveLogger):
    def __init__(self, points=20):
        self._points = points
        self.single = []
        self.mixed = []

    @property
    def number_of_curve_points(self):
        return self._points

    def save_single_population_curve(self, curve):
        self.single.append(curve)

    def save_mixed_population_curve(self, curve):
        self.mixed.append(curve)


def _single_population(d=0.5, size=1500, seed=4):
    rng = np.random.default_rng(seed)
    return rng.exponential(4 * d, size=size)


def test_empty_or_zero_input_gives_no_fit():
    analysis = JumpDistanceAnalysis()
    assert analysis.fit_jump_distances([]) is None
    assert analysis.fit_jump_distances([0.0, 0.0]) is None


def test_negative_input_is_rejected():
    with pytest.raises(InvalidInputError):
        JumpDistanceAnalysis().fit_jump_distances([0.1, -0.1])


def test_order_two_worse_than_order_one_stops_the_search(monkeypatch):
    orders = []

    def fake_fit_model(model, **kwargs):
        orders.append(model.order)
        params = np.array([1.0, 0.9, 1.0, 0.09])
        # Far worse than the exact single-population fit.
        return FitOutcome(params=params, value=1.0, status="converged", sum_of_squares=1.0)

    monkeypatch.setattr(jump_distance_analysis, "fit_model", fake_fit_model)
    fit = JumpDistanceAnalysis(MixtureSearchConfig(seed=1)).fit_jump_distances(_single_population())
    assert orders == [2]
    assert fit.order == 1
    assert fit.coefficients[0] == pytest.approx(0.5, rel=0.1)
    np.testing.assert_allclose(fit.fractions, [1.0])


def test_curves_are_sampled_for_single_and_best_mixed_fit(monkeypatch):
    def fake_fit_model(model, **kwargs):
        params = np.array([1.0, 0.9, 1.0, 0.09])
        return FitOutcome(params=params, value=1.0, status="converged", sum_of_squares=1.0)

    monkeypatch.setattr(jump_distance_analysis, "fit_model", fake_fit_model)
    curves = RecordingCurveLogger(points=20)
    values = _single_population()
    JumpDistanceAnalysis(MixtureSearchConfig(seed=1), curve_logger=curves).fit_jump_distances(values)
    assert len(curves.single) == 1
    assert len(curves.mixed) == 1
    assert curves.single[0].shape == (2, 21)
    assert curves.single[0][0, -1] == pytest.approx(values.max())


def test_single_population_only_when_max_order_is_one():
    values = _single_population(d=0.2, size=800, seed=9)
    config = MixtureSearchConfig(seed=2, max_order=1)
    fit = JumpDistanceAnalysis(config).fit_jump_distance_histogram(values.mean(), cumulative_histogram(values))
    assert fit.order == 1
    assert fit.coefficients[0] == pytest.approx(0.2, rel=0.15)
    assert fit.fractions.sum() == pytest.approx(1.0)
    assert fit.to_dict()["order"] == fit.order


def test_histogram_entry_point_needs_positive_mean():
    h = cumulative_histogram([0.1, 0.2])
    assert JumpDistanceAnalysis().fit_jump_distance_histogram(0.0, h) is None


def _two_populations(seed=6, size=1200):
    rng = np.random.default_rng(seed)
    counts = rng.multinomial(size, [0.5, 0.5])
    return np.concatenate([rng.exponential(4.0, size=counts[0]), rng.exponential(0.4, size=counts[1])])


def test_seeded_fits_are_identical_sequentially_and_in_threads():
    values = _two_populations()
    seeds = [5, 5, 11, 11]

    def run(seed):
        config = MixtureSearchConfig(seed=seed, fit_restarts=0, max_order=2)
        fit = JumpDistanceAnalysis(config).fit_jump_distances(values)
        return None if fit is None else fit.to_dict()

    sequential = [run(seed) for seed in seeds]
    with ThreadPoolExecutor(max_workers=4) as pool:
        threaded = list(pool.map(run, seeds))

    assert threaded == sequential
    assert sequential[0] == sequential[1]


def test_fit_leaves_global_numpy_random_state_untouched():
    np.random.seed(123)
    expected = np.random.rand()
    np.random.seed(123)
    JumpDistanceAnalysis(MixtureSearchConfig(seed=1, fit_restarts=0, max_order=2)).fit_jump_distances(
        _two_populations()
    )
    assert np.random.rand() == expected
