import numpy as np
import pytest
from scipy.stats import binom

from population_fit.data.histogram import integer_histogram, zero_truncate
from population_fit.models.binomial import BinomialModel, MixedBinomialModel, binomial_pmf


def _histogram():
    return integer_histogram([0, 1, 1, 2, 2, 2, 3, 4, 6])


def test_pmf_matches_scipy():
    np.testing.assert_allclose(binomial_pmf(6, 0.35), binom.pmf(np.arange(7), 6, 0.35), rtol=1e-12)


def test_zero_truncated_pmf_excludes_zero_and_sums_to_one():
    pmf = binomial_pmf(5, 0.2, zero_truncated=True)
    assert pmf[0] == 0.0
    assert pmf.sum() == pytest.approx(1.0)
    np.testing.assert_allclose(pmf[1:], binom.pmf(np.arange(1, 6), 5, 0.2) / (1 - 0.8**5))


def test_model_is_zero_beyond_trial_count():
    model = BinomialModel(_histogram(), 3)
    values = model.evaluate_vector([0.5])
    assert len(values) == 7
    np.testing.assert_allclose(values[4:], 0.0)


@pytest.mark.parametrize("zero_truncated", [False, True])
@pytest.mark.parametrize("p", [0.15, 0.5, 0.8])
def test_analytic_jacobian_matches_finite_difference(zero_truncated, p):
    h = _histogram()
    if zero_truncated:
        h = zero_truncate(h)
    model = BinomialModel(h, 5, zero_truncated=zero_truncated)
    analytic = model.jacobian([p])
    step = 1e-6
    numeric = (model.evaluate_vector([p + step]) - model.evaluate_vector([p - step])) / (2 * step)
    assert analytic.shape == (len(h), 1)
    np.testing.assert_allclose(analytic[:, 0], numeric, rtol=1e-5, atol=1e-8)


def test_negative_log_likelihood_uses_observations_up_to_n():
    h = _histogram()
    model = BinomialModel(h, 4, mode="maximum_likelihood")
    p = 0.4
    expected = -np.sum(h.y[:5] * binom.logpmf(np.arange(5), 4, p))
    assert model.evaluate_scalar([p]) == pytest.approx(expected)


def test_least_squares_objective_skips_zero_when_truncated():
    h = zero_truncate(_histogram())
    model = BinomialModel(h, 4, zero_truncated=True)
    residuals = model.residuals([0.4])
    assert model.evaluate_scalar([0.4]) == pytest.approx(float(residuals[1:] @ residuals[1:]))


def test_fitted_points_and_guess():
    h = _histogram()
    model = BinomialModel(h, 4)
    assert model.fitted_points == 5
    assert BinomialModel(zero_truncate(h), 4, zero_truncated=True).fitted_points == 4
    assert BinomialModel(h, 20).fitted_points == len(h)
    assert model.guess()[0] == pytest.approx(model.mean / 4)
    assert BinomialModel(h, 1).guess()[0] == 1.0


def test_validity_is_the_unit_interval():
    model = BinomialModel(_histogram(), 3)
    assert model.is_valid([0.0])
    assert model.is_valid([1.0])
    assert not model.is_valid([1.01])
    assert not model.is_valid([-0.01])


def test_mixed_binomial_is_weighted_pmf_sum():
    h = _histogram()
    model = MixedBinomialModel(h, 6, 2)
    values = model.evaluate_vector([1.0, 0.7, 3.0, 0.2])
    expected = 0.25 * binom.pmf(h.x, 6, 0.7) + 0.75 * binom.pmf(h.x, 6, 0.2)
    np.testing.assert_allclose(values, expected)
    assert model.n_params == 4
    np.testing.assert_allclose(model.upper_bounds(), [10, 1, 10, 1])
    assert not model.is_valid([1.0, 1.2, 1.0, 0.2])
