import numpy as np
import pytest

from population_fit.data.histogram import cumulative_histogram
from population_fit.interfaces.model import Model
from population_fit.models.curves import sample_curve
from population_fit.models.jump_distance import JumpDistanceModel, MixedJumpDistanceModel


def _histogram(seed=3, size=200):
    rng = np.random.default_rng(seed)
    return cumulative_histogram(rng.exponential(2.0, size=size))


def test_single_population_curve():
    h = _histogram()
    model = JumpDistanceModel(h, estimated_d=0.5)
    np.testing.assert_allclose(model.evaluate_vector([0.5]), 1 - np.exp(-h.x / 2.0))


def test_single_population_bounds_and_guess():
    model = JumpDistanceModel(_histogram(), estimated_d=0.4)
    np.testing.assert_allclose(model.guess(), [0.4])
    np.testing.assert_allclose(model.lower_bounds(), [0.0])
    np.testing.assert_allclose(model.upper_bounds(), [4.0])
    assert not model.is_valid([0.0])


def test_single_population_jacobian_matches_finite_difference():
    model = JumpDistanceModel(_histogram(), estimated_d=0.5)
    np.testing.assert_allclose(model.jacobian([0.7]), Model.jacobian(model, [0.7]), rtol=1e-4, atol=1e-8)


def test_mixed_jacobian_matches_finite_difference():
    model = MixedJumpDistanceModel(_histogram(), estimated_d=0.5, order=3)
    params = np.array([1.0, 0.9, 2.5, 0.2, 0.5, 0.02])
    np.testing.assert_allclose(model.jacobian(params), Model.jacobian(model, params), rtol=1e-4, atol=1e-8)


def test_mixture_with_identical_components_equals_single_population():
    h = _histogram()
    single = JumpDistanceModel(h, estimated_d=0.5)
    mixed = MixedJumpDistanceModel(h, estimated_d=0.5, order=2)
    np.testing.assert_allclose(mixed.evaluate_vector([2.0, 0.3, 5.0, 0.3]), single.evaluate_vector([0.3]))


def test_mixed_guess_scales_rates_down_and_bounds_fractions():
    model = MixedJumpDistanceModel(_histogram(), estimated_d=0.5, order=3)
    np.testing.assert_allclose(model.guess(), [1.0, 0.5, 1.0, 0.05, 1.0, 0.005])
    np.testing.assert_allclose(model.upper_bounds(), [10.0, 5.0, 10.0, 5.0, 10.0, 5.0])
    np.testing.assert_allclose(model.lower_bounds(), np.zeros(6))


def test_sorted_components_orders_rates_descending_with_normalised_fractions():
    model = MixedJumpDistanceModel(_histogram(), estimated_d=0.5, order=3)
    rates, fractions = model.sorted_components([1.0, 0.1, 2.0, 0.9, 1.0, 0.4])
    np.testing.assert_allclose(rates, [0.9, 0.4, 0.1])
    np.testing.assert_allclose(fractions, [0.5, 0.25, 0.25])


def test_sample_curve_spans_zero_to_histogram_maximum():
    h = _histogram()
    model = JumpDistanceModel(h, estimated_d=0.5)
    curve = sample_curve(model, [0.5], 50)
    assert curve.shape == (2, 51)
    assert curve[0, 0] == 0.0
    assert curve[0, -1] == pytest.approx(h.max_x)
    assert curve[1, 0] == pytest.approx(0.0)
    assert np.all(np.diff(curve[1]) >= 0)


def test_sample_curve_needs_two_points():
    model = JumpDistanceModel(_histogram(), estimated_d=0.5)
    assert sample_curve(model, [0.5], 1) is None
