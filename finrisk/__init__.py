"""
FinRisk - Household Financial Risk Simulator

Monte Carlo projection of a household's monthly cash, savings and debt
under competing debt-repayment / investing strategies, with ruin, goal and
debt-free probabilities and tail-risk statistics.

Modules
-------
- sampler     : Box-Muller normal sampler and independent seeded streams
- simulation  : Single-household monthly trajectory simulator
- strategy    : Minimum / aggressive / investing policies
- montecarlo  : Per-strategy Monte Carlo aggregation
- statistics  : Descriptive stats, percentiles, VaR/CVaR, correlation, OLS
- bands       : p5 / p50 / p95 net-worth confidence bands
- analytics   : Derived risk views over results
- config      : Parameter models and application settings

"""

from .config import (
    SAMPLE_PARAMETERS,
    AppSettings,
    MonteCarloConfig,
    SimulationParameters,
)
from .sampler import BoxMullerSampler, ConstantSampler, NormalSampler, spawn_samplers
from .strategy import Strategy
from .simulation import MonthState, Trajectory, simulate_once
from .montecarlo import (
    MonteCarloEngine,
    SimulationResults,
    StrategyResult,
    run_monte_carlo,
)
from .statistics import (
    correlation_matrix,
    descriptive_stats,
    expected_shortfall,
    percentile,
    simple_linear_regression,
    value_at_risk,
)
from .bands import ConfidenceBands, build_confidence_bands
from .exceptions import (
    ConfigurationError,
    FinRiskError,
    InvalidParameterError,
    SimulationCancelledError,
    ValidationError,
)
from . import analytics, utils

__version__ = "0.1.0"

__all__ = [
    # Parameters
    "SimulationParameters",
    "MonteCarloConfig",
    "AppSettings",
    "SAMPLE_PARAMETERS",
    # Sampling
    "NormalSampler",
    "BoxMullerSampler",
    "ConstantSampler",
    "spawn_samplers",
    # Simulation
    "Strategy",
    "MonthState",
    "Trajectory",
    "simulate_once",
    "MonteCarloEngine",
    "StrategyResult",
    "SimulationResults",
    "run_monte_carlo",
    # Statistics
    "descriptive_stats",
    "percentile",
    "value_at_risk",
    "expected_shortfall",
    "simple_linear_regression",
    "correlation_matrix",
    "ConfidenceBands",
    "build_confidence_bands",
    # Errors
    "FinRiskError",
    "ConfigurationError",
    "ValidationError",
    "InvalidParameterError",
    "SimulationCancelledError",
    # Submodules
    "analytics",
    "utils",
]
