"""
Pytest configuration and fixtures for FinRisk test suite.

Households here are small (short horizons, few runs) so the Monte Carlo
tests stay fast; deterministic scenarios use zero volatility or a
ConstantSampler.
"""

import numpy as np
import pytest

from finrisk.config import SAMPLE_PARAMETERS, SimulationParameters
from finrisk.montecarlo import run_monte_carlo
from finrisk.sampler import BoxMullerSampler, ConstantSampler


# ---------------------------------------------------------------------------
# Run Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def seed() -> int:
    """Standard random seed for reproducibility."""
    return 42


@pytest.fixture
def runs() -> int:
    """Standard number of Monte Carlo runs for tests."""
    return 400


# ---------------------------------------------------------------------------
# Households
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_params() -> SimulationParameters:
    """Pre-filled sample household (15 years, $38k debt)."""
    return SAMPLE_PARAMETERS


@pytest.fixture
def short_params() -> SimulationParameters:
    """
    Sample household shortened to 3 years.

    Income 7,500 ± 600, debt 38,000 at 6.5% APR, minimum payment 750.
    """
    return SAMPLE_PARAMETERS.model_copy(update={"horizon_years": 3})


@pytest.fixture
def debt_free_params() -> SimulationParameters:
    """
    No debt and no income/expense volatility.

    Monthly flow is 6,000 - 2,000 - 1,000 = 3,000 on 1,000 starting cash,
    so net worth after 2 years is exactly 73,000 under MINIMUM.
    """
    return SimulationParameters(
        monthly_income=6_000,
        income_std=0,
        monthly_fixed_expenses=2_000,
        monthly_variable_expenses=1_000,
        expense_std=0,
        initial_cash=1_000,
        initial_investments=0,
        total_debt=0,
        debt_apr=0,
        minimum_debt_payment=0,
        savings_return_rate=5,
        inflation_rate=0,
        horizon_years=2,
        savings_goal=50_000,
    )


@pytest.fixture
def broke_params() -> SimulationParameters:
    """No income, no cash, no savings, 1,000 monthly fixed costs."""
    return SimulationParameters(
        monthly_income=0,
        monthly_fixed_expenses=1_000,
        initial_cash=0,
        initial_investments=0,
        horizon_years=1,
        savings_goal=10_000,
    )


@pytest.fixture
def small_debt_params() -> SimulationParameters:
    """
    1,000 of debt at 12% APR (1% monthly), minimum payment 300.

    With every draw at its mean: MINIMUM retires the debt in month 3,
    AGGRESSIVE (pays up to 750) in month 1.
    """
    return SimulationParameters(
        monthly_income=4_000,
        monthly_fixed_expenses=1_000,
        monthly_variable_expenses=500,
        initial_cash=500,
        initial_investments=1_000,
        total_debt=1_000,
        debt_apr=12,
        minimum_debt_payment=300,
        savings_return_rate=6,
        inflation_rate=2,
        horizon_years=1,
        savings_goal=20_000,
    )


# ---------------------------------------------------------------------------
# Samplers
# ---------------------------------------------------------------------------

@pytest.fixture
def constant_sampler() -> ConstantSampler:
    """Every draw equals its mean."""
    return ConstantSampler()


@pytest.fixture
def box_muller(seed) -> BoxMullerSampler:
    return BoxMullerSampler(seed=seed)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@pytest.fixture
def short_results(short_params, runs, seed):
    """Seeded Monte Carlo results for the 3-year sample household."""
    return run_monte_carlo(short_params, runs, seed=seed)


@pytest.fixture
def rng(seed) -> np.random.Generator:
    return np.random.default_rng(seed)
