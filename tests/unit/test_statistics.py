"""
Unit tests for statistics.py module.

Moments and order statistics are cross-checked against NumPy / SciPy.
"""

import numpy as np
import pandas as pd
import pytest
from scipy import stats as sps

from finrisk.exceptions import ValidationError
from finrisk.statistics import (
    CorrelationMatrix,
    correlation_matrix,
    descriptive_stats,
    excess_kurtosis,
    expected_shortfall,
    mean,
    median,
    parametric_value_at_risk,
    pearson_correlation,
    percentile,
    proportion_confidence_interval,
    proportion_standard_error,
    simple_linear_regression,
    skewness,
    std_dev,
    value_at_risk,
    variance,
)


@pytest.fixture
def skewed_sample(rng):
    """Lognormal sample with a long right tail."""
    return rng.lognormal(mean=0.0, sigma=0.6, size=501)


@pytest.fixture
def pnl_sample(rng):
    """Profit-and-loss like sample centred slightly above zero."""
    return rng.normal(loc=50.0, scale=400.0, size=2_000)


# ============================================================================
# MOMENTS
# ============================================================================

class TestMoments:
    """Test mean, variance, std_dev, skewness, excess_kurtosis."""

    def test_mean_variance(self, skewed_sample):
        assert mean(skewed_sample) == pytest.approx(np.mean(skewed_sample))
        assert variance(skewed_sample) == pytest.approx(np.var(skewed_sample, ddof=1))
        assert std_dev(skewed_sample) == pytest.approx(np.std(skewed_sample, ddof=1))

    def test_small_samples(self):
        assert mean([]) == 0.0
        assert variance([3.0]) == 0.0
        assert std_dev([]) == 0.0
        assert skewness([1.0, 2.0]) == 0.0
        assert excess_kurtosis([1.0, 2.0, 3.0]) == 0.0

    def test_constant_sample(self):
        x = [4.0] * 10
        assert skewness(x) == 0.0
        assert excess_kurtosis(x) == 0.0

    def test_skewness_matches_scipy(self, skewed_sample):
        """Population third moment standardized by the sample std."""
        n = skewed_sample.size
        expected = sps.skew(skewed_sample, bias=True) * ((n - 1) / n) ** 1.5
        assert skewness(skewed_sample) == pytest.approx(expected, rel=1e-9)
        assert skewness(skewed_sample) > 0

    def test_kurtosis_matches_scipy(self, skewed_sample):
        n = skewed_sample.size
        expected = (sps.kurtosis(skewed_sample, fisher=True, bias=True) + 3.0) * ((n - 1) / n) ** 2 - 3.0
        assert excess_kurtosis(skewed_sample) == pytest.approx(expected, rel=1e-9)

    def test_input_not_mutated(self):
        x = [3.0, 1.0, 2.0]
        median(x)
        percentile(x, 30)
        descriptive_stats(x)
        assert x == [3.0, 1.0, 2.0]

    def test_rejects_2d(self):
        with pytest.raises(ValidationError):
            mean(np.ones((2, 2)))


# ============================================================================
# ORDER STATISTICS
# ============================================================================

class TestOrderStatistics:
    """Test median and percentile."""

    def test_median_odd_even(self):
        assert median([5, 1, 3]) == 3.0
        assert median([4, 1, 3, 2]) == 2.5
        assert median([]) == 0.0

    @pytest.mark.parametrize("p", [0, 5, 25, 50, 75, 95, 100])
    def test_percentile_matches_numpy_linear(self, skewed_sample, p):
        assert percentile(skewed_sample, p) == pytest.approx(np.percentile(skewed_sample, p))

    def test_percentile_50_is_median(self, skewed_sample, pnl_sample):
        for x in (skewed_sample, pnl_sample, [1.0, 2.0], [7.0]):
            assert percentile(x, 50) == pytest.approx(median(x))

    def test_percentile_examples(self):
        assert percentile([1, 2, 3, 4], 50) == 2.5
        assert percentile([10, 20], 25) == 12.5
        assert percentile([], 50) == 0.0

    def test_percentile_already_sorted(self):
        x = np.array([1.0, 2.0, 10.0])
        assert percentile(x, 75, already_sorted=True) == pytest.approx(6.0)

    @pytest.mark.parametrize("p", [-1, 100.5])
    def test_percentile_out_of_range(self, p):
        with pytest.raises(ValidationError, match="p must be"):
            percentile([1.0, 2.0], p)


# ============================================================================
# DESCRIPTIVE STATS
# ============================================================================

class TestDescriptiveStats:
    """Test descriptive_stats."""

    def test_empty(self):
        assert descriptive_stats([]) is None

    def test_fields(self, skewed_sample):
        s = descriptive_stats(skewed_sample)

        assert s.n == skewed_sample.size
        assert s.mean == pytest.approx(skewed_sample.mean())
        assert s.median == pytest.approx(np.median(skewed_sample))
        assert s.min == skewed_sample.min()
        assert s.max == skewed_sample.max()
        assert s.p5 <= s.p25 <= s.median <= s.p75 <= s.p95
        assert s.skewness == pytest.approx(skewness(skewed_sample))

    def test_to_series(self):
        series = descriptive_stats([1.0, 2.0, 3.0, 4.0]).to_series()
        assert isinstance(series, pd.Series)
        assert series["mean"] == 2.5
        assert "kurtosis" in series.index


# ============================================================================
# TAIL RISK
# ============================================================================

class TestTailRisk:
    """Test VaR and expected shortfall."""

    def test_var_is_negated_percentile(self, pnl_sample):
        for alpha in (0.9, 0.95, 0.99):
            assert value_at_risk(pnl_sample, alpha) == -percentile(pnl_sample, (1 - alpha) * 100)

    def test_var_example(self):
        assert value_at_risk([-300, -100, 0, 100, 200], alpha=0.75) == 100.0

    def test_var_positive_for_loss_tail(self, pnl_sample):
        assert np.percentile(pnl_sample, 5) < 0
        assert value_at_risk(pnl_sample, 0.95) > 0

    def test_cvar_at_least_var(self, pnl_sample, skewed_sample):
        for x in (pnl_sample, -skewed_sample):
            for alpha in (0.9, 0.95, 0.99):
                assert expected_shortfall(x, alpha) >= value_at_risk(x, alpha)

    def test_cvar_is_tail_mean(self):
        x = np.arange(1, 101, dtype=float) - 50.0   # -49 … 50
        cutoff = np.percentile(x, 10)
        expected = -x[x <= cutoff].mean()
        assert expected_shortfall(x, 0.9) == pytest.approx(expected)

    def test_empty_sample(self):
        assert value_at_risk([], 0.95) == 0.0
        assert expected_shortfall([], 0.95) == 0.0

    @pytest.mark.parametrize("alpha", [0.0, 1.0, 1.5])
    def test_alpha_validation(self, alpha):
        with pytest.raises(ValidationError, match="alpha"):
            value_at_risk([1.0, 2.0], alpha)

    def test_parametric_var(self, rng):
        x = rng.normal(100.0, 20.0, size=50_000)
        expected = -(100.0 + 20.0 * sps.norm.ppf(0.05))
        assert parametric_value_at_risk(x, 0.95) == pytest.approx(expected, rel=0.02)


# ============================================================================
# DEPENDENCE
# ============================================================================

class TestCorrelation:
    """Test pearson_correlation and correlation_matrix."""

    def test_self_correlation(self, skewed_sample):
        assert pearson_correlation(skewed_sample, skewed_sample) == pytest.approx(1.0)

    def test_matches_scipy(self, rng):
        x = rng.normal(size=300)
        y = 0.5 * x + rng.normal(size=300)
        assert pearson_correlation(x, y) == pytest.approx(sps.pearsonr(x, y)[0])

    def test_degenerate(self):
        assert pearson_correlation([1.0], [2.0]) == 0.0
        assert pearson_correlation([1.0, 1.0, 1.0], [1.0, 2.0, 3.0]) == 0.0

    def test_uses_shorter_length(self):
        assert pearson_correlation([1, 2, 3, 100], [2, 4, 6]) == pytest.approx(1.0)

    def test_matrix(self, rng):
        a = rng.normal(size=200)
        cm = correlation_matrix({"a": a, "b": -a, "c": rng.normal(size=200)})

        assert isinstance(cm, CorrelationMatrix)
        assert cm.labels == ("a", "b", "c")
        np.testing.assert_array_equal(np.diag(cm.matrix), [1.0, 1.0, 1.0])
        np.testing.assert_allclose(cm.matrix, cm.matrix.T)
        assert cm["a", "b"] == pytest.approx(-1.0)

    def test_matrix_diagonal_for_constant_series(self):
        cm = correlation_matrix({"flat": [1.0, 1.0, 1.0], "x": [1.0, 2.0, 3.0]})
        assert cm["flat", "flat"] == 1.0
        assert cm["flat", "x"] == 0.0

    def test_to_frame(self):
        df = correlation_matrix({"x": [1, 2, 3], "y": [3, 2, 1]}).to_frame()
        assert list(df.columns) == ["x", "y"]
        assert df.loc["x", "y"] == pytest.approx(-1.0)

    def test_matrix_equality(self):
        a = correlation_matrix({"x": [1, 2, 3], "y": [3, 1, 2]})
        b = correlation_matrix({"x": [1, 2, 3], "y": [3, 1, 2]})
        c = correlation_matrix({"y": [3, 1, 2], "x": [1, 2, 3]})
        assert a == b
        assert a != c


class TestRegression:
    """Test simple_linear_regression."""

    def test_recovers_line(self):
        x = np.linspace(-5, 20, 40)
        fit = simple_linear_regression(x, 3.0 * x + 7.0)

        assert fit.slope == pytest.approx(3.0)
        assert fit.intercept == pytest.approx(7.0)
        assert fit.r_squared == pytest.approx(1.0)

    def test_matches_scipy(self, rng):
        x = rng.uniform(0, 10, size=200)
        y = 2.0 * x + rng.normal(scale=3.0, size=200)
        ref = sps.linregress(x, y)
        fit = simple_linear_regression(x, y)

        assert fit.slope == pytest.approx(ref.slope)
        assert fit.intercept == pytest.approx(ref.intercept)
        assert fit.r_squared == pytest.approx(ref.rvalue ** 2)

    def test_predict(self):
        fit = simple_linear_regression([0, 1, 2], [7, 10, 13])
        np.testing.assert_allclose(fit.predict([3, 4]), [16.0, 19.0])

    def test_constant_x(self):
        fit = simple_linear_regression([2.0, 2.0, 2.0], [1.0, 2.0, 3.0])
        assert fit.slope == 0.0
        assert fit.intercept == pytest.approx(2.0)

    def test_empty(self):
        fit = simple_linear_regression([], [])
        assert (fit.slope, fit.intercept, fit.r_squared) == (0.0, 0.0, 0.0)


# ============================================================================
# MONTE CARLO ERROR
# ============================================================================

class TestProportionError:
    """Test proportion_standard_error and proportion_confidence_interval."""

    def test_standard_error(self):
        assert proportion_standard_error(0.5, 100) == pytest.approx(0.05)
        assert proportion_standard_error(0.0, 100) == 0.0
        assert proportion_standard_error(0.3, 0) == 0.0

    def test_shrinks_with_runs(self):
        assert proportion_standard_error(0.2, 5000) < proportion_standard_error(0.2, 500)

    def test_interval(self):
        lo, hi = proportion_confidence_interval(0.5, 100, level=0.95)
        assert lo == pytest.approx(0.5 - 1.959964 * 0.05, rel=1e-5)
        assert hi == pytest.approx(0.5 + 1.959964 * 0.05, rel=1e-5)

    def test_interval_clipped(self):
        lo, hi = proportion_confidence_interval(0.01, 10)
        assert lo == 0.0
        assert hi <= 1.0
