"""Derived risk views over Monte Carlo results

Summaries consumed by the CLI, the charts and notebook users. Everything
here is a read-only function of a StrategyResult, a collection of sampled
trajectories or the household parameters.

Contents
--------
- distribution_stats : stats of one final-month field across trajectories
- risk_summary       : VaR 95/99, CVaR 95, Gaussian VaR 95 and stats of ending net worth
- median_trajectory / net_worth_trend : median path and its linear trend
- terminal_correlation : correlations of final net worth, cash, savings, debt
- monthly_surplus / debt_to_income : deterministic household ratios
- strategy_comparison : side-by-side table for all strategies
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .bands import net_worth_matrix
from .config import SimulationParameters
from .constants import DEFAULT_VAR_ALPHA, TAIL_VAR_ALPHA
from .montecarlo import SimulationResults, StrategyResult
from .simulation import Trajectory
from .statistics import (
    CorrelationMatrix,
    DescriptiveStats,
    RegressionResult,
    correlation_matrix,
    descriptive_stats,
    expected_shortfall,
    parametric_value_at_risk,
    percentile,
    proportion_confidence_interval,
    simple_linear_regression,
    value_at_risk,
)

__all__ = [
    "DistributionStats",
    "RiskSummary",
    "distribution_stats",
    "risk_summary",
    "median_trajectory",
    "net_worth_trend",
    "terminal_correlation",
    "monthly_surplus",
    "debt_to_income",
    "strategy_comparison",
]

_TERMINAL_FIELDS = {
    "Net Worth": "net_worth",
    "Cash": "cash",
    "Savings": "savings",
    "Debt": "debt",
}

# Correlations over four or fewer final states are not shown
_MIN_TRAJECTORIES_FOR_CORRELATION = 5


@dataclass(frozen=True)
class DistributionStats:
    stats: DescriptiveStats
    var95: float
    var99: float
    cvar95: float


@dataclass(frozen=True)
class RiskSummary:
    strategy: str
    stats: Optional[DescriptiveStats]
    var95: float
    var99: float
    cvar95: float
    parametric_var95: float


def _final_values(trajectories: Sequence[Trajectory], field: str) -> np.ndarray:
    return np.array(
        [getattr(t.terminal, field) if len(t) else 0.0 for t in trajectories],
        dtype=float,
    )


def distribution_stats(
    trajectories: Sequence[Trajectory], field: str = "net_worth"
) -> Optional[DistributionStats]:
    """
    Distribution of one MonthState field in the final month.

    Parameters
    ----------
    trajectories : sequence of Trajectory
    field : {"net_worth", "cash", "savings", "debt"}

    Returns
    -------
    DistributionStats or None
        None when no trajectories are given.
    """
    if field not in _TERMINAL_FIELDS.values():
        raise ValueError(f"Unknown field {field!r}; expected one of {sorted(_TERMINAL_FIELDS.values())}")
    if not trajectories:
        return None
    values = _final_values(trajectories, field)
    return DistributionStats(
        stats=descriptive_stats(values),
        var95=value_at_risk(values, DEFAULT_VAR_ALPHA),
        var99=value_at_risk(values, TAIL_VAR_ALPHA),
        cvar95=expected_shortfall(values, DEFAULT_VAR_ALPHA),
    )


def risk_summary(result: StrategyResult) -> RiskSummary:
    """Tail-risk figures over every run's ending net worth."""
    nw = result.ending_net_worths
    return RiskSummary(
        strategy=result.strategy.value,
        stats=descriptive_stats(nw),
        var95=value_at_risk(nw, DEFAULT_VAR_ALPHA),
        var99=value_at_risk(nw, TAIL_VAR_ALPHA),
        cvar95=expected_shortfall(nw, DEFAULT_VAR_ALPHA),
        parametric_var95=parametric_value_at_risk(nw, DEFAULT_VAR_ALPHA),
    )


def median_trajectory(trajectories: Sequence[Trajectory]) -> np.ndarray:
    """Per-month upper-median net worth (element floor(n/2) of the sorted values)."""
    values = net_worth_matrix(trajectories)
    if values.size == 0:
        return np.zeros(0, dtype=float)
    values.sort(axis=0)
    return values[values.shape[0] // 2, :]


def net_worth_trend(trajectories: Sequence[Trajectory]) -> Optional[RegressionResult]:
    """OLS trend of the median net-worth path against month index.

    The slope reads as expected net-worth growth per month.
    """
    med = median_trajectory(trajectories)
    if med.size == 0:
        return None
    return simple_linear_regression(np.arange(med.size, dtype=float), med)


def terminal_correlation(trajectories: Sequence[Trajectory]) -> Optional[CorrelationMatrix]:
    """Correlation of final Net Worth, Cash, Savings and Debt across trajectories."""
    if len(trajectories) < _MIN_TRAJECTORIES_FOR_CORRELATION:
        return None
    return correlation_matrix(
        {label: _final_values(trajectories, field) for label, field in _TERMINAL_FIELDS.items()}
    )


def monthly_surplus(params: SimulationParameters) -> float:
    """Expected income left after expenses and the minimum debt payment."""
    return (
        params.monthly_income
        - params.monthly_fixed_expenses
        - params.monthly_variable_expenses
        - params.minimum_debt_payment
    )


def debt_to_income(params: SimulationParameters) -> float:
    """Minimum debt payment as a fraction of income (0 without income)."""
    if params.monthly_income <= 0:
        return 0.0
    return params.minimum_debt_payment / params.monthly_income


def strategy_comparison(results: SimulationResults) -> pd.DataFrame:
    """
    One row per strategy: median / p5 / p95 ending net worth, probabilities,
    a 95% interval on the ruin probability, median debt-free month and
    tail risk.
    """
    rows = []
    for strategy, res in results.items():
        nw = res.ending_net_worths
        ruin_low, ruin_high = proportion_confidence_interval(res.ruin_probability, res.runs)
        rows.append(
            {
                "strategy": strategy.value,
                "label": strategy.label,
                "median_net_worth": res.median_ending_net_worth,
                "p5_net_worth": percentile(nw, 5, already_sorted=True),
                "p95_net_worth": percentile(nw, 95, already_sorted=True),
                "ruin_probability": res.ruin_probability,
                "ruin_ci_low": ruin_low,
                "ruin_ci_high": ruin_high,
                "goal_probability": res.goal_probability,
                "debt_free_probability": res.debt_free_probability,
                "median_debt_free_month": res.median_debt_free_month,
                "var95": value_at_risk(nw, DEFAULT_VAR_ALPHA),
                "cvar95": expected_shortfall(nw, DEFAULT_VAR_ALPHA),
                "parametric_var95": parametric_value_at_risk(nw, DEFAULT_VAR_ALPHA),
            }
        )
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).set_index("strategy")
