"""
Unit tests for simulation.py module.

Uses ConstantSampler for exact month-by-month expectations.
"""

import math

import numpy as np
import pandas as pd
import pytest

from finrisk.config import SimulationParameters
from finrisk.exceptions import InvalidParameterError
from finrisk.sampler import BoxMullerSampler, ConstantSampler
from finrisk.simulation import MonthState, Trajectory, simulate_once
from finrisk.strategy import ALL_STRATEGIES, Strategy


# ============================================================================
# STRUCTURE
# ============================================================================

class TestTrajectoryShape:
    """Test the Trajectory returned by simulate_once."""

    def test_length_is_months(self, sample_params, box_muller):
        traj = simulate_once(sample_params, Strategy.MINIMUM, box_muller)
        assert isinstance(traj, Trajectory)
        assert len(traj) == sample_params.months == 180

    def test_default_sampler(self, short_params):
        traj = simulate_once(short_params, "aggressive")
        assert len(traj) == 36

    def test_to_frame(self, short_params, constant_sampler):
        df = simulate_once(short_params, Strategy.INVESTING, constant_sampler).to_frame()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["cash", "savings", "debt", "net_worth"]
        assert df.index.name == "month"
        assert len(df) == 36

    def test_field_series(self, short_params, constant_sampler):
        traj = simulate_once(short_params, Strategy.MINIMUM, constant_sampler)
        np.testing.assert_array_equal(traj.net_worth, traj.field("net_worth"))
        assert traj.terminal is traj[-1]
        assert traj.terminal_net_worth == traj[-1].net_worth


class TestNetWorthIdentity:
    """Every MonthState satisfies net_worth == cash + savings - debt."""

    @pytest.mark.parametrize("strategy", ALL_STRATEGIES)
    def test_identity_random(self, sample_params, strategy):
        traj = simulate_once(sample_params, strategy, BoxMullerSampler(seed=5))
        for s in traj.months:
            assert s.net_worth == s.cash + s.savings - s.debt

    def test_values_rounded_to_cents(self, sample_params):
        traj = simulate_once(sample_params, Strategy.INVESTING, BoxMullerSampler(seed=8))
        for s in traj.months[:24]:
            for v in (s.cash, s.savings, s.debt):
                assert round(v, 2) == v

    def test_rounded_constructor(self):
        s = MonthState.rounded(10.004, 5.0061, 2.001)
        assert (s.cash, s.savings, s.debt) == (10.0, 5.01, 2.0)
        assert s.net_worth == 10.0 + 5.01 - 2.0


# ============================================================================
# DETERMINISTIC DYNAMICS
# ============================================================================

class TestDeterministicDynamics:
    """Exact month-by-month behavior with every draw at its mean."""

    def test_constant_sampler_reproducible(self, sample_params):
        a = simulate_once(sample_params, Strategy.INVESTING, ConstantSampler())
        b = simulate_once(sample_params, Strategy.INVESTING, ConstantSampler())
        assert a == b

    def test_debt_free_household_minimum(self, debt_free_params, constant_sampler):
        traj = simulate_once(debt_free_params, Strategy.MINIMUM, constant_sampler)

        for m, s in enumerate(traj.months):
            assert s.cash == pytest.approx(1_000 + 3_000 * (m + 1))
            assert s.savings == 0.0
            assert s.debt == 0.0
        assert traj.terminal_net_worth == pytest.approx(73_000)
        assert traj.debt_free_month == 0
        assert traj.goal_hit
        assert not traj.ruined

    def test_debt_free_household_investing(self, debt_free_params, constant_sampler):
        """10% of income moves to savings every month once debt is zero."""
        traj = simulate_once(debt_free_params, Strategy.INVESTING, constant_sampler)

        r = debt_free_params.monthly_return
        savings = 0.0
        for s in traj.months:
            savings = savings * (1 + r) + 600.0
            assert s.savings == pytest.approx(savings, abs=0.01)
        assert traj.terminal.cash == pytest.approx(1_000 + 2_400 * 24)

    def test_variable_expenses_inflate(self, debt_free_params, constant_sampler):
        """With 12% inflation, month 1 spends 1,000 * 1.01 on variable costs."""
        params = debt_free_params.model_copy(
            update={"monthly_fixed_expenses": 0, "inflation_rate": 12}
        )
        traj = simulate_once(params, Strategy.MINIMUM, constant_sampler)

        assert traj[0].cash == pytest.approx(6_000.0)               # 1000 + 6000 - 1000
        assert traj[1].cash - traj[0].cash == pytest.approx(4_990.0)  # 6000 - 1010

    def test_goal_met_exactly(self, debt_free_params, constant_sampler):
        """Reaching the goal to the cent counts as hitting it."""
        at_goal = debt_free_params.model_copy(update={"savings_goal": 73_000})
        above_goal = debt_free_params.model_copy(update={"savings_goal": 73_000.01})

        assert simulate_once(at_goal, Strategy.MINIMUM, constant_sampler).goal_hit
        assert not simulate_once(above_goal, Strategy.MINIMUM, constant_sampler).goal_hit

    def test_first_month_minimum(self, small_debt_params, constant_sampler):
        s0 = simulate_once(small_debt_params, Strategy.MINIMUM, constant_sampler)[0]

        assert s0.debt == pytest.approx(710.0)          # 1000 * 1.01 - 300
        assert s0.savings == pytest.approx(1_005.0)     # 1000 * (1 + 0.5%)
        assert s0.cash == pytest.approx(2_700.0)        # 500 + 4000 - 1000 - 500 - 300
        assert s0.net_worth == pytest.approx(2_995.0)

    def test_debt_free_month_minimum(self, small_debt_params, constant_sampler):
        traj = simulate_once(small_debt_params, Strategy.MINIMUM, constant_sampler)
        assert traj.debt_free_month == 3
        assert traj[2].debt > 0
        assert traj[3].debt == 0.0

    def test_debt_free_month_aggressive(self, small_debt_params, constant_sampler):
        traj = simulate_once(small_debt_params, Strategy.AGGRESSIVE, constant_sampler)
        assert traj[0].debt == pytest.approx(260.0)     # 1010 - 750
        assert traj.debt_free_month == 1

    def test_debt_stays_retired(self, small_debt_params, constant_sampler):
        traj = simulate_once(small_debt_params, Strategy.MINIMUM, constant_sampler)
        assert all(s.debt == 0.0 for s in traj.months[3:])

    def test_never_debt_free(self, constant_sampler):
        params = SimulationParameters(
            monthly_income=3_000,
            monthly_fixed_expenses=1_000,
            total_debt=50_000,
            debt_apr=10,
            minimum_debt_payment=500,
            horizon_years=1,
        )
        traj = simulate_once(params, Strategy.MINIMUM, constant_sampler)
        assert traj.debt_free_month is None

    def test_fixed_expenses_inflate(self, constant_sampler):
        params = SimulationParameters(
            monthly_income=2_000,
            monthly_fixed_expenses=1_000,
            inflation_rate=12,
            horizon_years=1,
        )
        traj = simulate_once(params, Strategy.MINIMUM, constant_sampler)
        # month 0 is uninflated, month 1 pays 1% more
        assert traj[0].cash == pytest.approx(1_000.0)
        assert traj[1].cash - traj[0].cash == pytest.approx(2_000 - 1_010, abs=0.01)


# ============================================================================
# CLAMPS AND LATCHES
# ============================================================================

class TestClampsAndLatches:
    """Test floors, savings draw and latched flags."""

    def test_zero_income_ruins(self, broke_params, constant_sampler):
        traj = simulate_once(broke_params, Strategy.MINIMUM, constant_sampler)
        assert traj.ruined
        assert traj[0].cash == -1_000.0

    def test_savings_cover_shortfall(self, constant_sampler):
        """Negative cash is refilled from savings until savings run out."""
        params = SimulationParameters(
            monthly_income=0,
            monthly_fixed_expenses=1_000,
            initial_investments=5_000,
            horizon_years=1,
        )
        traj = simulate_once(params, Strategy.MINIMUM, constant_sampler)

        assert traj[0].cash == 0.0
        assert traj[0].savings == pytest.approx(4_000.0)
        assert traj[4].savings == pytest.approx(0.0)
        assert traj[5].cash == pytest.approx(-1_000.0)
        assert traj.ruined

    def test_goal_latches(self, constant_sampler):
        """Goal stays hit after net worth falls back below it."""
        params = SimulationParameters(
            monthly_income=0,
            monthly_fixed_expenses=1_000,
            initial_cash=20_000,
            horizon_years=1,
            savings_goal=15_000,
        )
        traj = simulate_once(params, Strategy.MINIMUM, constant_sampler)
        assert traj.goal_hit
        assert traj.terminal_net_worth < 15_000

    def test_income_floored_at_zero(self):
        """A very negative draw cannot produce negative income."""
        params = SimulationParameters(
            monthly_income=1_000,
            income_std=100,
            monthly_fixed_expenses=0,
            initial_cash=0,
            horizon_years=1,
        )
        traj = simulate_once(params, Strategy.MINIMUM, ConstantSampler(z=-50.0))
        assert all(s.cash == 0.0 for s in traj.months)

    def test_variable_expense_floor(self):
        """Variable spending never drops below 20% of its mean."""
        params = SimulationParameters(
            monthly_income=1_000,
            income_std=100,
            monthly_fixed_expenses=0,
            monthly_variable_expenses=500,
            expense_std=100,
            horizon_years=1,
        )
        traj = simulate_once(params, Strategy.MINIMUM, ConstantSampler(z=-50.0))
        # income floors to 0, spending floors to 100
        assert traj[0].cash == pytest.approx(-100.0)

    def test_savings_never_negative(self, sample_params):
        traj = simulate_once(sample_params, Strategy.AGGRESSIVE, ConstantSampler(z=-400.0))
        assert all(s.savings >= 0 for s in traj.months)


# ============================================================================
# VALIDATION
# ============================================================================

class TestValidation:
    """Test fail-fast parameter validation."""

    def test_mapping_accepted(self, short_params, constant_sampler):
        traj = simulate_once(short_params.model_dump(), "minimum", constant_sampler)
        assert len(traj) == 36

    def test_invalid_mapping(self, short_params):
        data = short_params.model_dump()
        data["horizon_years"] = 0
        with pytest.raises(InvalidParameterError):
            simulate_once(data, Strategy.MINIMUM)

    def test_non_finite_constructed_model(self, short_params):
        data = short_params.model_dump()
        data["monthly_income"] = math.nan
        bad = SimulationParameters.model_construct(**data)
        with pytest.raises(InvalidParameterError, match="finite"):
            simulate_once(bad, Strategy.MINIMUM)

    def test_unknown_strategy(self, short_params):
        with pytest.raises(InvalidParameterError):
            simulate_once(short_params, "snowball")
