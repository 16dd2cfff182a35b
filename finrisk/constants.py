"""
Global constants for FinRisk.

Purpose
-------
Centralizes default values and model coefficients used throughout the
FinRisk codebase. Using constants instead of hardcoded values keeps the
cash-flow model, the aggregator and the charts consistent.

Usage
-----
>>> from finrisk.constants import DEFAULT_RUNS, DEFAULT_FIGSIZE
>>>
>>> results = run_monte_carlo(params, runs=DEFAULT_RUNS)
>>> fig, ax = plt.subplots(figsize=DEFAULT_FIGSIZE)

Categories
----------
- Simulation: run counts, seeds, trajectory retention
- Household model: expense floor, payment multiplier, return volatility
- Risk: VaR confidence levels, confidence band quantiles
- Plotting: figure sizes, colors, transparency values
"""

from typing import Dict, Tuple

__all__ = [
    # Simulation
    "DEFAULT_RUNS",
    "MAX_SAMPLED_TRAJECTORIES",
    "DEFAULT_PROGRESS_INTERVAL",
    "MONTHS_PER_YEAR",
    # Household model
    "VARIABLE_EXPENSE_FLOOR",
    "AGGRESSIVE_PAYMENT_MULTIPLIER",
    "INVESTING_SURPLUS_FRACTION",
    "RETURN_VOLATILITY_SCALE",
    "RETURN_VOLATILITY_FLOOR",
    "FORM_EXPENSE_STD_RATIO",
    # Risk
    "DEFAULT_VAR_ALPHA",
    "TAIL_VAR_ALPHA",
    "BAND_QUANTILES",
    # Plotting
    "DEFAULT_FIGSIZE",
    "DEFAULT_FIGSIZE_WIDE",
    "DEFAULT_ALPHA_BANDS",
    "DEFAULT_HISTOGRAM_BINS",
    "DEFAULT_LINEWIDTH",
    "DEFAULT_LINEWIDTH_THICK",
    "STRATEGY_COLORS",
    "STRATEGY_LABELS",
]


# =============================================================================
# Simulation Defaults
# =============================================================================

DEFAULT_RUNS: int = 5000
"""Default number of Monte Carlo trajectories per strategy."""

MAX_SAMPLED_TRAJECTORIES: int = 200
"""Target number of full trajectories retained per strategy.

Every k-th run is kept with k = max(1, runs // MAX_SAMPLED_TRAJECTORIES).
"""

DEFAULT_PROGRESS_INTERVAL: int = 500
"""Completed trajectories between progress callback invocations."""

MONTHS_PER_YEAR: int = 12
"""Number of months in a year (horizon sizing and rate conversions)."""


# =============================================================================
# Household Cash-Flow Model
# =============================================================================

VARIABLE_EXPENSE_FLOOR: float = 0.2
"""Variable expenses never drop below this fraction of their mean."""

AGGRESSIVE_PAYMENT_MULTIPLIER: float = 2.5
"""Aggressive payoff pays this multiple of the minimum debt payment."""

INVESTING_SURPLUS_FRACTION: float = 0.10
"""Share of monthly income diverted to investments once debt is retired."""

RETURN_VOLATILITY_SCALE: float = 0.4
"""Monthly return volatility as a fraction of |expected monthly return|."""

RETURN_VOLATILITY_FLOOR: float = 0.005
"""Volatility added on top of the scaled component (0.5% per month)."""

FORM_EXPENSE_STD_RATIO: float = 0.25
"""Variable-expense standard deviation used by household input forms."""


# =============================================================================
# Risk Measures
# =============================================================================

DEFAULT_VAR_ALPHA: float = 0.95
"""Default confidence level for VaR and expected shortfall."""

TAIL_VAR_ALPHA: float = 0.99
"""Stricter confidence level reported alongside the default."""

BAND_QUANTILES: Tuple[float, float, float] = (0.05, 0.50, 0.95)
"""Quantiles of the net-worth confidence band (p5, p50, p95)."""


# =============================================================================
# Plotting Defaults
# =============================================================================

DEFAULT_FIGSIZE: Tuple[int, int] = (12, 7)
"""Default figure size (width, height) in inches."""

DEFAULT_FIGSIZE_WIDE: Tuple[int, int] = (14, 6)
"""Figure size for time series (confidence bands)."""

DEFAULT_ALPHA_BANDS: float = 0.2
"""Default alpha for confidence band fills."""

DEFAULT_HISTOGRAM_BINS: int = 40
"""Number of bins for ending net-worth histograms."""

DEFAULT_LINEWIDTH: float = 1.0
"""Default line width for standard plot lines."""

DEFAULT_LINEWIDTH_THICK: float = 2.0
"""Line width for emphasized lines (medians, VaR markers)."""

STRATEGY_COLORS: Dict[str, str] = {
    "minimum": "#e6455f",
    "aggressive": "#2fbf7f",
    "investing": "#8a5cf0",
}
"""Line/fill color per strategy value."""

STRATEGY_LABELS: Dict[str, str] = {
    "minimum": "Minimum Payment",
    "aggressive": "Aggressive Payoff",
    "investing": "Invest Surplus",
}
"""Human-readable strategy names for tables and legends."""
