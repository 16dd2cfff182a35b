"""
Plotting utilities for FinRisk Monte Carlo results.

Purpose
-------
Charts for the views derived from a simulation run. Plotting is kept out
of the simulation and statistics modules; every function here only reads
results and draws.

Available charts
----------------
- plot_histogram           : ending net-worth distributions, one per strategy
- plot_confidence_bands    : p5 / p50 / p95 fan for one strategy
- plot_strategy_comparison : median paths with bands for all strategies
- plot_var                 : ending net-worth histogram with VaR 95 / VaR 99 / CVaR markers
- plot_scenario_bar        : median ending net worth per strategy with ruin and goal odds
- plot_correlation_heatmap : correlation matrix of final balances

Every function accepts an optional ``ax`` (draws into a new figure when
None) and ``save_path``, and returns ``(fig, ax)``.

Examples
--------
>>> results = run_monte_carlo(SAMPLE_PARAMETERS, runs=2000, seed=42)
>>> fig, ax = plot_strategy_comparison(results, save_path="fan.png")
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.ticker import FuncFormatter

from .bands import ConfidenceBands, build_confidence_bands
from .constants import (
    DEFAULT_ALPHA_BANDS,
    DEFAULT_FIGSIZE,
    DEFAULT_FIGSIZE_WIDE,
    DEFAULT_HISTOGRAM_BINS,
    DEFAULT_LINEWIDTH,
    DEFAULT_LINEWIDTH_THICK,
    DEFAULT_VAR_ALPHA,
    MONTHS_PER_YEAR,
    STRATEGY_COLORS,
    STRATEGY_LABELS,
    TAIL_VAR_ALPHA,
)
from .montecarlo import StrategyResult
from .statistics import CorrelationMatrix, expected_shortfall, value_at_risk
from .strategy import Strategy
from .utils import ensure_1d, format_money, format_pct, thousands_formatter

__all__ = [
    "plot_histogram",
    "plot_confidence_bands",
    "plot_strategy_comparison",
    "plot_var",
    "plot_scenario_bar",
    "plot_correlation_heatmap",
]


def _get_ax(ax, figsize):
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure
    return fig, ax


def _finish(fig, ax, title: Optional[str], save_path: Optional[str]):
    if title:
        ax.set_title(title, fontsize=12, fontweight='bold')
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, bbox_inches='tight', dpi=150)
    return fig, ax


def _style(strategy: Union[Strategy, str]) -> Tuple[str, str]:
    key = Strategy.parse(strategy).value
    return STRATEGY_COLORS[key], STRATEGY_LABELS[key]


# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------

def plot_histogram(
    results: Mapping[Strategy, StrategyResult],
    *,
    bins: int = DEFAULT_HISTOGRAM_BINS,
    ax=None,
    figsize: Tuple[float, float] = DEFAULT_FIGSIZE,
    title: Optional[str] = "Ending Net Worth Distribution",
    save_path: Optional[str] = None,
):
    """
    Overlaid histograms of ending net worth, one per strategy.

    Parameters
    ----------
    results : SimulationResults or mapping Strategy -> StrategyResult
    bins : int, default 40
        Shared bin count; edges span the pooled range of all strategies.
    """
    fig, ax = _get_ax(ax, figsize)
    if not results:
        return _finish(fig, ax, title, save_path)

    pooled = np.concatenate([r.ending_net_worths for r in results.values()])
    edges = np.histogram_bin_edges(pooled, bins=bins)

    for strategy, res in results.items():
        color, label = _style(strategy)
        ax.hist(
            res.ending_net_worths,
            bins=edges,
            alpha=0.45,
            color=color,
            label=f"{label} (median {format_money(res.median_ending_net_worth)})",
        )

    ax.axvline(0.0, color='black', linewidth=DEFAULT_LINEWIDTH, linestyle=':')
    ax.xaxis.set_major_formatter(FuncFormatter(thousands_formatter))
    ax.set_xlabel("Ending Net Worth", fontsize=11)
    ax.set_ylabel("Runs", fontsize=11)
    ax.legend(loc='best', fontsize=10)
    ax.grid(True, alpha=0.3, axis='y')
    return _finish(fig, ax, title, save_path)


def plot_var(
    result: StrategyResult,
    *,
    alpha: float = DEFAULT_VAR_ALPHA,
    tail_alpha: Optional[float] = TAIL_VAR_ALPHA,
    bins: int = DEFAULT_HISTOGRAM_BINS,
    ax=None,
    figsize: Tuple[float, float] = DEFAULT_FIGSIZE,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
):
    """
    Ending net-worth histogram with the VaR and CVaR thresholds marked.

    VaR and CVaR are losses, so the markers sit at ``-VaR`` and ``-CVaR``
    on the net-worth axis.

    Parameters
    ----------
    result : StrategyResult
    alpha : float, default 0.95
        Confidence level of the VaR and CVaR markers.
    tail_alpha : float or None, default 0.99
        Confidence level of a second, deeper VaR marker. None skips it.
    """
    values = ensure_1d(result.ending_net_worths, name="ending_net_worths")
    color, label = _style(result.strategy)
    fig, ax = _get_ax(ax, figsize)

    var = value_at_risk(values, alpha)
    cvar = expected_shortfall(values, alpha)

    ax.hist(values, bins=bins, color=color, alpha=0.6)
    ax.axvline(-var, color='black', linewidth=DEFAULT_LINEWIDTH_THICK,
               linestyle='--', label=f"VaR {alpha:.0%}: {format_money(var)}")
    if tail_alpha is not None:
        tail_var = value_at_risk(values, tail_alpha)
        ax.axvline(-tail_var, color='crimson', linewidth=DEFAULT_LINEWIDTH_THICK,
                   linestyle='-.', label=f"VaR {tail_alpha:.0%}: {format_money(tail_var)}")
    ax.axvline(-cvar, color='darkred', linewidth=DEFAULT_LINEWIDTH_THICK,
               linestyle=':', label=f"CVaR {alpha:.0%}: {format_money(cvar)}")

    ax.xaxis.set_major_formatter(FuncFormatter(thousands_formatter))
    ax.set_xlabel("Ending Net Worth", fontsize=11)
    ax.set_ylabel("Runs", fontsize=11)
    ax.legend(loc='best', fontsize=10)
    ax.grid(True, alpha=0.3, axis='y')
    return _finish(fig, ax, title or f"Tail Risk: {label}", save_path)


def plot_scenario_bar(
    results: Mapping[Strategy, StrategyResult],
    *,
    ax=None,
    figsize: Tuple[float, float] = DEFAULT_FIGSIZE,
    title: Optional[str] = "Scenario Comparison",
    save_path: Optional[str] = None,
):
    """
    Median ending net worth per strategy.

    Each bar is annotated with the strategy's ruin and goal probabilities.
    """
    fig, ax = _get_ax(ax, figsize)
    if not results:
        return _finish(fig, ax, title, save_path)

    styles = [_style(s) for s in results]
    medians = [res.median_ending_net_worth for res in results.values()]
    bars = ax.bar(
        range(len(medians)),
        medians,
        color=[c for c, _ in styles],
        edgecolor='black',
        linewidth=DEFAULT_LINEWIDTH,
    )
    ax.bar_label(
        bars,
        labels=[
            f"ruin {format_pct(res.ruin_probability)}\ngoal {format_pct(res.goal_probability)}"
            for res in results.values()
        ],
        fontsize=9,
        padding=3,
    )

    ax.set_xticks(range(len(medians)))
    ax.set_xticklabels([label for _, label in styles])
    ax.axhline(0.0, color='black', linewidth=DEFAULT_LINEWIDTH)
    ax.yaxis.set_major_formatter(FuncFormatter(thousands_formatter))
    ax.set_ylabel("Median Net Worth", fontsize=11)
    ax.grid(True, alpha=0.3, axis='y')
    return _finish(fig, ax, title, save_path)


# ---------------------------------------------------------------------------
# Trajectory bands
# ---------------------------------------------------------------------------

def plot_confidence_bands(
    bands: ConfidenceBands,
    *,
    strategy: Union[Strategy, str, None] = None,
    goal: Optional[float] = None,
    ax=None,
    figsize: Tuple[float, float] = DEFAULT_FIGSIZE,
    title: Optional[str] = "Net Worth Projection",
    save_path: Optional[str] = None,
):
    """
    Fan chart of one strategy's net worth over time.

    Parameters
    ----------
    bands : ConfidenceBands
    strategy : Strategy or str, optional
        Selects color and legend label.
    goal : float, optional
        Draws the savings goal as a horizontal line.
    """
    if strategy is not None:
        color, label = _style(strategy)
    else:
        color, label = 'tab:blue', "Median"
    fig, ax = _get_ax(ax, figsize)

    years = bands.months / MONTHS_PER_YEAR
    ax.fill_between(years, bands.p5, bands.p95, color=color,
                    alpha=DEFAULT_ALPHA_BANDS, label=f"{label} 5-95%")
    ax.plot(years, bands.p50, color=color, linewidth=DEFAULT_LINEWIDTH_THICK, label=label)

    if goal is not None:
        ax.axhline(goal, color='gray', linewidth=DEFAULT_LINEWIDTH, linestyle='--',
                   label=f"Goal {format_money(goal)}")

    ax.yaxis.set_major_formatter(FuncFormatter(thousands_formatter))
    ax.set_xlabel("Years", fontsize=11)
    ax.set_ylabel("Net Worth", fontsize=11)
    ax.legend(loc='upper left', fontsize=10)
    ax.grid(True, alpha=0.3)
    return _finish(fig, ax, title, save_path)


def plot_strategy_comparison(
    results: Mapping[Strategy, StrategyResult],
    *,
    strategies: Optional[Sequence[Union[Strategy, str]]] = None,
    goal: Optional[float] = None,
    ax=None,
    figsize: Tuple[float, float] = DEFAULT_FIGSIZE_WIDE,
    title: Optional[str] = "Strategy Comparison: Net Worth",
    save_path: Optional[str] = None,
):
    """
    Median net-worth paths with p5-p95 bands for each strategy.

    Bands are built from each strategy's sampled trajectories.
    """
    fig, ax = _get_ax(ax, figsize)
    selected = list(results) if strategies is None else [Strategy.parse(s) for s in strategies]

    for strategy in selected:
        bands = build_confidence_bands(results[strategy].sampled_trajectories)
        plot_confidence_bands(bands, strategy=strategy, ax=ax, title=None)

    if goal is not None:
        ax.axhline(goal, color='gray', linewidth=DEFAULT_LINEWIDTH, linestyle='--',
                   label=f"Goal {format_money(goal)}")
        ax.legend(loc='upper left', fontsize=10)
    return _finish(fig, ax, title, save_path)


# ---------------------------------------------------------------------------
# Correlations
# ---------------------------------------------------------------------------

def plot_correlation_heatmap(
    corr: CorrelationMatrix,
    *,
    ax=None,
    figsize: Tuple[float, float] = (6, 5),
    title: Optional[str] = "Final Balance Correlations",
    save_path: Optional[str] = None,
):
    """Annotated heatmap of a correlation matrix on a [-1, 1] color scale."""
    fig, ax = _get_ax(ax, figsize)
    im = ax.imshow(corr.matrix, cmap='RdBu_r', vmin=-1.0, vmax=1.0)
    fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)

    n = len(corr.labels)
    ax.set_xticks(range(n))
    ax.set_yticks(range(n))
    ax.set_xticklabels(corr.labels, rotation=45, ha='right')
    ax.set_yticklabels(corr.labels)
    for i in range(n):
        for j in range(n):
            v = corr.matrix[i, j]
            ax.text(j, i, f"{v:.2f}", ha='center', va='center',
                    color='white' if abs(v) > 0.6 else 'black', fontsize=9)
    return _finish(fig, ax, title, save_path)
