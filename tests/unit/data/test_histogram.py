import numpy as np
import pytest

from population_fit.data.histogram import (
    Histogram,
    cumulative_histogram,
    histogram_mean,
    integer_histogram,
    pad_histogram,
    to_non_cumulative,
    zero_truncate,
)
from population_fit.exceptions import DegenerateInputError, InvalidInputError


def test_integer_histogram_is_dense_from_zero():
    h = integer_histogram([0, 1, 1, 3])
    np.testing.assert_array_equal(h.x, [0, 1, 2, 3])
    np.testing.assert_allclose(h.y, [0.25, 0.5, 0.0, 0.25])
    assert not h.cumulative


def test_cumulative_then_non_cumulative_matches_histogram():
    rng = np.random.default_rng(7)
    for _ in range(5):
        values = rng.integers(0, 12, size=rng.integers(1, 200))
        expected = integer_histogram(values)
        round_trip = to_non_cumulative(integer_histogram(values, cumulative=True))
        np.testing.assert_allclose(round_trip.y, expected.y, atol=1e-12)


def test_cumulative_integer_histogram_ends_at_one():
    h = integer_histogram([2, 5, 5, 1], cumulative=True)
    assert h.y[-1] == 1.0
    assert np.all(np.diff(h.y) >= 0)


def test_empty_counts_put_all_mass_at_zero():
    h = integer_histogram([])
    np.testing.assert_array_equal(h.x, [0])
    np.testing.assert_array_equal(h.y, [1.0])


@pytest.mark.parametrize("values", [[1, -1], [0.5, 2], [1, np.nan], ["a", "b"]])
def test_integer_histogram_rejects_bad_counts(values):
    with pytest.raises(InvalidInputError):
        integer_histogram(values)


def test_integral_floats_are_accepted():
    h = integer_histogram([1.0, 2.0, 2.0])
    np.testing.assert_allclose(h.y, [0.0, 1 / 3, 2 / 3])


def test_cumulative_histogram_is_step_cdf_over_distinct_values():
    h = cumulative_histogram([0.3, 0.1, 0.3, 0.7])
    np.testing.assert_allclose(h.x, [0.1, 0.3, 0.7])
    np.testing.assert_allclose(h.y, [0.25, 0.75, 1.0])
    assert h.cumulative


def test_cumulative_histogram_rejects_negative_and_non_finite():
    with pytest.raises(InvalidInputError):
        cumulative_histogram([0.1, -0.2])
    with pytest.raises(InvalidInputError):
        cumulative_histogram([0.1, np.inf])


def test_zero_truncation_renormalises_remaining_mass():
    h = zero_truncate(integer_histogram([0, 0, 0, 1, 2, 2, 5]))
    assert h.y[0] == 0.0
    assert h.y[1:].sum() == pytest.approx(1.0, abs=1e-9)
    np.testing.assert_allclose(h.y[1:3], [0.25, 0.5])


def test_zero_truncation_returns_a_new_histogram():
    original = integer_histogram([0, 1, 2])
    truncated = zero_truncate(original)
    assert truncated is not original
    assert original.y[0] == pytest.approx(1 / 3)


def test_zero_truncation_without_other_mass_is_degenerate():
    h = pad_histogram(integer_histogram([0, 0, 0]), 3)
    with pytest.raises(DegenerateInputError):
        zero_truncate(h)


def test_histogram_arrays_are_read_only():
    h = integer_histogram([1, 2])
    with pytest.raises(ValueError):
        h.y[0] = 1.0


def test_pad_histogram_appends_empty_buckets():
    h = pad_histogram(integer_histogram([1, 1]), 4)
    np.testing.assert_array_equal(h.x, [0, 1, 2, 3, 4])
    np.testing.assert_allclose(h.y, [0, 1, 0, 0, 0])
    assert pad_histogram(h, 2) is h


def test_histogram_mean():
    assert histogram_mean(integer_histogram([1, 2, 3, 6])) == pytest.approx(3.0)
    assert histogram_mean(Histogram(x=[0.0, 1.0], y=[0.5, 1.0], cumulative=True)) == pytest.approx(0.5)
