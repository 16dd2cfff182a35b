"""
Debt/savings strategies for FinRisk.

Each strategy is a member of the ``Strategy`` enum and carries its own
payment policy, so dispatch is a method call instead of string comparison.

Payment policies (applied after interest has accrued)
-----------------------------------------------------
- MINIMUM    : pay min(minimum_debt_payment, debt)
- AGGRESSIVE : pay min(debt, minimum_debt_payment × 2.5)
- INVESTING  : pay min(minimum_debt_payment, debt); once debt is retired,
               10% of each month's income is moved into investments

The aggressive payment is a fixed multiple of the minimum payment; it does
not look at the month's available surplus.

Examples
--------
>>> Strategy.parse("aggressive") is Strategy.AGGRESSIVE
True
>>> Strategy.AGGRESSIVE.label
'Aggressive Payoff'
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Tuple, Union

from .constants import (
    AGGRESSIVE_PAYMENT_MULTIPLIER,
    INVESTING_SURPLUS_FRACTION,
    STRATEGY_LABELS,
)
from .exceptions import InvalidParameterError

if TYPE_CHECKING:
    from .config import SimulationParameters

__all__ = ["Strategy", "ALL_STRATEGIES"]


class Strategy(str, Enum):
    MINIMUM = "minimum"
    AGGRESSIVE = "aggressive"
    INVESTING = "investing"

    @classmethod
    def parse(cls, value: Union["Strategy", str]) -> "Strategy":
        """Accept a Strategy or its string value (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise InvalidParameterError(
                f"Unknown strategy {value!r}. Expected one of: {valid}."
            ) from None

    @property
    def label(self) -> str:
        return STRATEGY_LABELS[self.value]

    def debt_payment(self, params: SimulationParameters, debt: float) -> float:
        """Payment for a month whose balance (interest included) is ``debt``."""
        if debt <= 0:
            return 0.0
        if self is Strategy.AGGRESSIVE:
            return min(debt, params.minimum_debt_payment * AGGRESSIVE_PAYMENT_MULTIPLIER)
        # MINIMUM and INVESTING service the debt identically
        return min(params.minimum_debt_payment, debt)

    def extra_investment(self, income: float, debt: float) -> float:
        """Income diverted to investments this month (INVESTING, debt-free only)."""
        if self is Strategy.INVESTING and debt == 0:
            return income * INVESTING_SURPLUS_FRACTION
        return 0.0

    def __str__(self) -> str:
        return self.value


ALL_STRATEGIES: Tuple[Strategy, ...] = (
    Strategy.MINIMUM,
    Strategy.AGGRESSIVE,
    Strategy.INVESTING,
)
