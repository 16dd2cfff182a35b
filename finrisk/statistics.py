"""Statistical estimators for FinRisk

Pure functions over numeric sequences. None of them mutate their input;
sequences are copied into float NumPy arrays before sorting.

Contents
--------
- Moments: mean, variance, std_dev, skewness, excess_kurtosis
- Order statistics: median, percentile (linear interpolation)
- Summary: descriptive_stats -> DescriptiveStats
- Tail risk: value_at_risk, expected_shortfall, parametric_value_at_risk
- Dependence: pearson_correlation, simple_linear_regression, correlation_matrix
- Monte Carlo error: proportion_standard_error, proportion_confidence_interval

Conventions
-----------
- Empty samples yield neutral defaults (0.0, or None for descriptive_stats)
- variance uses the sample divisor (n - 1)
- skewness / kurtosis use population moments (divisor n) standardized by
  the sample standard deviation
- VaR/CVaR are reported as positive numbers when the tail is a loss
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from .constants import DEFAULT_VAR_ALPHA
from .exceptions import ValidationError

__all__ = [
    "mean",
    "variance",
    "std_dev",
    "median",
    "skewness",
    "excess_kurtosis",
    "percentile",
    "DescriptiveStats",
    "descriptive_stats",
    "value_at_risk",
    "expected_shortfall",
    "parametric_value_at_risk",
    "pearson_correlation",
    "RegressionResult",
    "simple_linear_regression",
    "CorrelationMatrix",
    "correlation_matrix",
    "proportion_standard_error",
    "proportion_confidence_interval",
]

ArrayLike = Sequence[float] | np.ndarray | pd.Series


def _as_array(sample: ArrayLike, *, name: str = "sample") -> np.ndarray:
    """Copy *sample* into a 1-D float array."""
    arr = np.array(sample, dtype=float, copy=True)
    if arr.ndim != 1:
        raise ValidationError(f"{name} must be 1-D, got shape {arr.shape}.")
    return arr


# ---------------------------------------------------------------------------
# Moments
# ---------------------------------------------------------------------------

def mean(sample: ArrayLike) -> float:
    x = _as_array(sample)
    if x.size == 0:
        return 0.0
    return float(x.sum() / x.size)


def variance(sample: ArrayLike) -> float:
    """Sample variance (divisor n - 1); 0 for fewer than two values."""
    x = _as_array(sample)
    if x.size < 2:
        return 0.0
    return float(np.var(x, ddof=1))


def std_dev(sample: ArrayLike) -> float:
    return float(np.sqrt(variance(sample)))


def _standardized_moment(x: np.ndarray, order: int) -> float:
    s = std_dev(x)
    if s == 0:
        return 0.0
    z = (x - x.mean()) / s
    return float(np.sum(z ** order) / x.size)


def skewness(sample: ArrayLike) -> float:
    """Fisher-Pearson skewness. Positive means a longer right tail.

    Returns 0 for fewer than three values or a constant sample.
    """
    x = _as_array(sample)
    if x.size < 3:
        return 0.0
    return _standardized_moment(x, 3)


def excess_kurtosis(sample: ArrayLike) -> float:
    """Fourth standardized moment minus 3 (a normal sample gives ~0).

    Returns 0 for fewer than four values or a constant sample.
    """
    x = _as_array(sample)
    if x.size < 4:
        return 0.0
    s = std_dev(x)
    if s == 0:
        return 0.0
    return _standardized_moment(x, 4) - 3.0


# ---------------------------------------------------------------------------
# Order statistics
# ---------------------------------------------------------------------------

def median(sample: ArrayLike) -> float:
    x = _as_array(sample)
    if x.size == 0:
        return 0.0
    x.sort()
    mid = x.size // 2
    if x.size % 2:
        return float(x[mid])
    return float((x[mid - 1] + x[mid]) / 2.0)


def percentile(sample: ArrayLike, p: float, already_sorted: bool = False) -> float:
    """
    Percentile with linear interpolation between the two nearest ranks.

    Parameters
    ----------
    sample : array-like
        Values (any order unless ``already_sorted``).
    p : float
        Percentile in [0, 100].
    already_sorted : bool, default False
        Skip sorting when the caller guarantees ascending order.

    Returns
    -------
    float
        Value at index ``p/100 * (n - 1)``; 0.0 for an empty sample.

    Examples
    --------
    >>> percentile([1, 2, 3, 4], 50)
    2.5
    >>> percentile([10, 20], 25)
    12.5
    """
    if not 0 <= p <= 100:
        raise ValidationError(f"p must be in [0, 100], got {p}.")
    x = _as_array(sample)
    if x.size == 0:
        return 0.0
    if not already_sorted:
        x.sort()
    idx = (p / 100.0) * (x.size - 1)
    lo = int(np.floor(idx))
    hi = int(np.ceil(idx))
    if lo == hi:
        return float(x[lo])
    return float(x[lo] + (x[hi] - x[lo]) * (idx - lo))


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DescriptiveStats:
    n: int
    mean: float
    median: float
    std_dev: float
    skewness: float
    kurtosis: float
    min: float
    max: float
    p5: float
    p25: float
    p75: float
    p95: float

    def to_series(self) -> pd.Series:
        """Return the summary as a labeled Series."""
        return pd.Series(self.__dict__, name="value")


def descriptive_stats(sample: ArrayLike) -> Optional[DescriptiveStats]:
    """Full distribution summary; None when the sample is empty."""
    x = _as_array(sample)
    if x.size == 0:
        return None
    ordered = np.sort(x)
    return DescriptiveStats(
        n=int(x.size),
        mean=mean(x),
        median=median(x),
        std_dev=std_dev(x),
        skewness=skewness(x),
        kurtosis=excess_kurtosis(x),
        min=float(ordered[0]),
        max=float(ordered[-1]),
        p5=percentile(ordered, 5, already_sorted=True),
        p25=percentile(ordered, 25, already_sorted=True),
        p75=percentile(ordered, 75, already_sorted=True),
        p95=percentile(ordered, 95, already_sorted=True),
    )


# ---------------------------------------------------------------------------
# Tail risk
# ---------------------------------------------------------------------------

def _check_alpha(alpha: float) -> None:
    if not 0 < alpha < 1:
        raise ValidationError(f"alpha must be in (0, 1), got {alpha}.")


def value_at_risk(sample: ArrayLike, alpha: float = DEFAULT_VAR_ALPHA) -> float:
    """
    Historical (non-parametric) value-at-risk.

    VaR_α = -percentile(sample, (1 - α)·100). Positive when the lower tail of
    the outcome distribution is a loss.

    Examples
    --------
    >>> value_at_risk([-300, -100, 0, 100, 200], alpha=0.75)
    100.0
    """
    _check_alpha(alpha)
    return -percentile(sample, (1.0 - alpha) * 100.0)


def expected_shortfall(sample: ArrayLike, alpha: float = DEFAULT_VAR_ALPHA) -> float:
    """
    Expected shortfall (CVaR): negated mean of outcomes at or below the VaR cutoff.

    Returns 0 when the tail is empty (only possible for an empty sample).
    """
    _check_alpha(alpha)
    x = np.sort(_as_array(sample))
    if x.size == 0:
        return 0.0
    cutoff = percentile(x, (1.0 - alpha) * 100.0, already_sorted=True)
    tail = x[x <= cutoff]
    if tail.size == 0:
        return 0.0
    return -float(tail.mean())


def parametric_value_at_risk(sample: ArrayLike, alpha: float = DEFAULT_VAR_ALPHA) -> float:
    """Gaussian VaR: -(μ + σ·Φ⁻¹(1 - α)) from the sample mean and std."""
    _check_alpha(alpha)
    x = _as_array(sample)
    if x.size == 0:
        return 0.0
    z = float(stats.norm.ppf(1.0 - alpha))
    return -(mean(x) + std_dev(x) * z)


# ---------------------------------------------------------------------------
# Dependence
# ---------------------------------------------------------------------------

def pearson_correlation(x: ArrayLike, y: ArrayLike) -> float:
    """
    Pearson correlation over the first ``min(len(x), len(y))`` pairs.

    Returns 0 for fewer than two pairs or when either series is constant.
    """
    a = _as_array(x, name="x")
    b = _as_array(y, name="y")
    n = min(a.size, b.size)
    if n < 2:
        return 0.0
    dx = a[:n] - a[:n].mean()
    dy = b[:n] - b[:n].mean()
    denom = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if denom == 0:
        return 0.0
    return float(np.sum(dx * dy) / denom)


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    r_squared: float

    def predict(self, x: ArrayLike) -> np.ndarray:
        return self.intercept + self.slope * np.asarray(x, dtype=float)


def simple_linear_regression(x: ArrayLike, y: ArrayLike) -> RegressionResult:
    """
    Ordinary least squares fit ``y = slope * x + intercept``.

    R² is the squared Pearson correlation. A constant ``x`` yields a zero
    slope and ``intercept = mean(y)``.

    Examples
    --------
    >>> fit = simple_linear_regression([0, 1, 2], [7, 10, 13])
    >>> fit.slope, fit.intercept, fit.r_squared
    (3.0, 7.0, 1.0)
    """
    a = _as_array(x, name="x")
    b = _as_array(y, name="y")
    n = min(a.size, b.size)
    a, b = a[:n], b[:n]
    if n == 0:
        return RegressionResult(slope=0.0, intercept=0.0, r_squared=0.0)
    mx, my = a.mean(), b.mean()
    sxx = float(np.sum((a - mx) ** 2))
    sxy = float(np.sum((a - mx) * (b - my)))
    slope = 0.0 if sxx == 0 else sxy / sxx
    intercept = float(my - slope * mx)
    r = pearson_correlation(a, b)
    return RegressionResult(slope=slope, intercept=intercept, r_squared=r * r)


@dataclass(frozen=True, eq=False)
class CorrelationMatrix:
    labels: Tuple[str, ...]
    matrix: np.ndarray

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CorrelationMatrix):
            return NotImplemented
        return self.labels == other.labels and np.array_equal(self.matrix, other.matrix)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.matrix, index=list(self.labels), columns=list(self.labels))

    def __getitem__(self, key: Tuple[str, str]) -> float:
        row, col = key
        return float(self.matrix[self.labels.index(row), self.labels.index(col)])


def correlation_matrix(named_series: Mapping[str, ArrayLike]) -> CorrelationMatrix:
    """
    Pairwise Pearson correlations for a mapping of label → series.

    The result is symmetric with a diagonal of exactly 1, in the mapping's
    key order.
    """
    labels = tuple(named_series.keys())
    arrays: Dict[str, np.ndarray] = {k: _as_array(v, name=k) for k, v in named_series.items()}
    k = len(labels)
    matrix = np.eye(k, dtype=float)
    for i in range(k):
        for j in range(i + 1, k):
            r = pearson_correlation(arrays[labels[i]], arrays[labels[j]])
            matrix[i, j] = matrix[j, i] = r
    return CorrelationMatrix(labels=labels, matrix=matrix)


# ---------------------------------------------------------------------------
# Monte Carlo error
# ---------------------------------------------------------------------------

def proportion_standard_error(p: float, n: int) -> float:
    """Binomial standard error sqrt(p(1-p)/n) of an estimated probability."""
    if n <= 0:
        return 0.0
    p = min(max(float(p), 0.0), 1.0)
    return float(np.sqrt(p * (1.0 - p) / n))


def proportion_confidence_interval(p: float, n: int, level: float = 0.95) -> Tuple[float, float]:
    """Normal-approximation interval for a probability, clipped to [0, 1]."""
    _check_alpha(level)
    z = float(stats.norm.ppf(0.5 + level / 2.0))
    half = z * proportion_standard_error(p, n)
    return (max(0.0, p - half), min(1.0, p + half))
