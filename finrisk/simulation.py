"""Single-household trajectory simulator for FinRisk

Advances one household's monthly state (cash, savings, debt) under a
chosen strategy across the full horizon, applying the stochastic shocks
drawn from an injected sampler and the deterministic rules for interest,
inflation and debt payments.

Monthly step (m = 0 … months-1)
-------------------------------
1. income   = max(0, N(μ_income, σ_income))
2. var_exp  = max(0.2·μ_var, N(μ_var, σ_var))
3. infl     = (1 + i_m)^m ;  fixed_exp = fixed · infl
4. debt    += debt · apr_m ;  pay per strategy ; record first debt-free month
5. savings  = max(0, savings · (1 + N(r_m, |r_m|·0.4 + 0.005)))
6. extra    = 10% of income (INVESTING, debt already retired)
7. cash    += income - fixed_exp - var_exp·infl - payment - extra
8. cash < 0 → draw min(-cash, savings) from savings
9. savings += extra
10. latch ruin (cash < 0) and goal (net worth ≥ goal)

Each month depends only on the previous month's state and its own draws.

Typical usage
-------------
>>> from finrisk.config import SAMPLE_PARAMETERS
>>> from finrisk.sampler import BoxMullerSampler
>>> traj = simulate_once(SAMPLE_PARAMETERS, Strategy.MINIMUM, BoxMullerSampler(seed=1))
>>> len(traj)
180
>>> traj.to_frame().tail()
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd

from .config import SimulationParameters, coerce_parameters
from .constants import (
    RETURN_VOLATILITY_FLOOR,
    RETURN_VOLATILITY_SCALE,
    VARIABLE_EXPENSE_FLOOR,
)
from .sampler import BoxMullerSampler, NormalSampler
from .strategy import Strategy

__all__ = [
    "MonthState",
    "Trajectory",
    "simulate_once",
]


# ---------------------------------------------------------------------------
# State and results
# ---------------------------------------------------------------------------

def _cents(value: float) -> float:
    return round(value, 2) + 0.0


@dataclass(frozen=True)
class MonthState:
    cash: float
    savings: float
    debt: float
    net_worth: float

    @classmethod
    def rounded(cls, cash: float, savings: float, debt: float) -> "MonthState":
        """Round balances to cents; net worth is derived from the rounded values."""
        c, s, d = _cents(cash), _cents(savings), _cents(debt)
        return cls(cash=c, savings=s, debt=d, net_worth=c + s - d)


@dataclass(frozen=True)
class Trajectory:
    """
    One simulated household path.

    Attributes
    ----------
    months : tuple of MonthState
        End-of-month snapshots, length ``horizon_years * 12``.
    ruined : bool
        Cash went negative after the savings draw in at least one month.
    goal_hit : bool
        Net worth reached the goal in at least one month.
    debt_free_month : int or None
        Zero-based month in which debt reached zero (0 when the household
        started debt-free); None if debt was never retired.
    """

    months: Tuple[MonthState, ...]
    ruined: bool
    goal_hit: bool
    debt_free_month: Optional[int]

    def __len__(self) -> int:
        return len(self.months)

    def __getitem__(self, m: int) -> MonthState:
        return self.months[m]

    @property
    def terminal(self) -> MonthState:
        return self.months[-1]

    @property
    def terminal_net_worth(self) -> float:
        return self.months[-1].net_worth

    def field(self, name: str) -> np.ndarray:
        """Monthly series of one MonthState field as an array."""
        return np.array([getattr(s, name) for s in self.months], dtype=float)

    @property
    def net_worth(self) -> np.ndarray:
        return self.field("net_worth")

    def to_frame(self) -> pd.DataFrame:
        """Monthly states as a DataFrame indexed by zero-based month."""
        df = pd.DataFrame(
            [(s.cash, s.savings, s.debt, s.net_worth) for s in self.months],
            columns=["cash", "savings", "debt", "net_worth"],
        )
        df.index.name = "month"
        return df


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------

def simulate_once(
    params: SimulationParameters,
    strategy: Union[Strategy, str],
    sampler: Optional[NormalSampler] = None,
    *,
    validate: bool = True,
) -> Trajectory:
    """
    Simulate one household trajectory.

    Parameters
    ----------
    params : SimulationParameters
        Household record (validated; non-finite values raise
        InvalidParameterError).
    strategy : Strategy or str
        "minimum", "aggressive" or "investing".
    sampler : NormalSampler, optional
        Source of normal variates. Defaults to a fresh, unseeded
        BoxMullerSampler.
    validate : bool, default True
        Re-check the parameter record. The aggregator validates once and
        passes False for every run.

    Returns
    -------
    Trajectory
    """
    p = coerce_parameters(params) if validate else params
    strategy = Strategy.parse(strategy)
    if sampler is None:
        sampler = BoxMullerSampler()

    monthly_return = p.monthly_return
    return_std = abs(monthly_return) * RETURN_VOLATILITY_SCALE + RETURN_VOLATILITY_FLOOR
    inflation_base = 1.0 + p.monthly_inflation
    debt_rate = p.monthly_debt_rate
    var_floor = p.monthly_variable_expenses * VARIABLE_EXPENSE_FLOOR

    cash = float(p.initial_cash)
    savings = float(p.initial_investments)
    debt = float(p.total_debt)
    ruined = False
    goal_hit = False
    debt_free_month: Optional[int] = 0 if debt <= 0 else None

    states = []
    for m in range(p.months):
        income = max(0.0, sampler.normal(p.monthly_income, p.income_std))
        var_exp = max(var_floor, sampler.normal(p.monthly_variable_expenses, p.expense_std))

        infl = inflation_base ** m
        fixed_exp = p.monthly_fixed_expenses * infl

        payment = 0.0
        if debt > 0:
            debt += debt * debt_rate
            payment = strategy.debt_payment(p, debt)
            debt = max(0.0, debt - payment)
            if debt == 0 and debt_free_month is None:
                debt_free_month = m

        r = sampler.normal(monthly_return, return_std)
        savings = max(0.0, savings * (1.0 + r))

        extra_invest = strategy.extra_investment(income, debt)

        cash += income - fixed_exp - var_exp * infl - payment - extra_invest

        if cash < 0 and savings > 0:
            draw = min(-cash, savings)
            savings -= draw
            cash += draw

        savings += extra_invest

        if cash < 0:
            ruined = True

        if not goal_hit and cash + savings - debt >= p.savings_goal:
            goal_hit = True

        states.append(MonthState.rounded(cash, savings, debt))

    return Trajectory(
        months=tuple(states),
        ruined=ruined,
        goal_hit=goal_hit,
        debt_free_month=debt_free_month,
    )
