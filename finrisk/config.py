"""
Configuration management module for FinRisk.

Purpose
-------
Centralized configuration using Pydantic models for type-safe parameter
management, validation, and serialization. Supports environment variables,
JSON parameter files, and programmatic defaults.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Fail-fast: Non-finite values and empty horizons are rejected up front
- Environment-aware: Supports .env files for application settings

Example
-------
>>> from finrisk.config import SimulationParameters, MonteCarloConfig
>>> params = SimulationParameters(
...     monthly_income=7500, income_std=600,
...     monthly_fixed_expenses=2800, monthly_variable_expenses=1500,
...     expense_std=375, initial_cash=12_000, initial_investments=25_000,
...     total_debt=38_000, debt_apr=6.5, minimum_debt_payment=750,
...     savings_return_rate=7, inflation_rate=3, horizon_years=15,
...     savings_goal=500_000,
... )
>>> params.months
180
>>> cfg = MonteCarloConfig(runs=2000, seed=42)
>>>
>>> # Serialize to dict/JSON
>>> params.model_dump_json()
"""

from __future__ import annotations
from typing import Any, Literal, Mapping, Optional, Union
import math

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_RUNS,
    FORM_EXPENSE_STD_RATIO,
    MONTHS_PER_YEAR,
)
from .exceptions import InvalidParameterError

__all__ = [
    "SimulationParameters",
    "MonteCarloConfig",
    "AppSettings",
    "SAMPLE_PARAMETERS",
    "coerce_parameters",
]


# ---------------------------------------------------------------------------
# Household parameters
# ---------------------------------------------------------------------------

class SimulationParameters(BaseModel):
    """
    Immutable household record driving every simulated trajectory.

    Rates are expressed in percent (``debt_apr=6.5`` means 6.5% APR),
    monetary amounts per month unless noted otherwise.

    Attributes
    ----------
    monthly_income : float
        Mean after-tax monthly income.
    income_std : float
        Standard deviation of monthly income.
    monthly_fixed_expenses : float
        Deterministic monthly fixed costs (inflated every month).
    monthly_variable_expenses : float
        Mean monthly variable spending.
    expense_std : float
        Standard deviation of variable spending.
    initial_cash : float
        Liquid cash on hand at month 0.
    initial_investments : float
        Investment/savings balance at month 0.
    total_debt : float
        Outstanding debt principal.
    debt_apr : float
        Weighted average annual percentage rate of the debt (%).
    minimum_debt_payment : float
        Minimum monthly debt payment.
    savings_return_rate : float
        Expected annual return of the investment balance (%).
    inflation_rate : float
        Annual inflation rate (%), compounded monthly.
    horizon_years : int
        Simulation horizon in years (1-100).
    savings_goal : float
        Net-worth target.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    monthly_income: float = Field(ge=0, description="Mean monthly income")
    income_std: float = Field(default=0.0, ge=0, description="Monthly income std dev")
    monthly_fixed_expenses: float = Field(ge=0, description="Monthly fixed costs")
    monthly_variable_expenses: float = Field(
        default=0.0, ge=0, description="Mean monthly variable spending"
    )
    expense_std: float = Field(default=0.0, ge=0, description="Variable spending std dev")
    initial_cash: float = Field(default=0.0, description="Liquid cash on hand")
    initial_investments: float = Field(default=0.0, ge=0, description="Investment balance")
    total_debt: float = Field(default=0.0, ge=0, description="Outstanding debt principal")
    debt_apr: float = Field(default=0.0, ge=0, description="Debt APR (%)")
    minimum_debt_payment: float = Field(default=0.0, ge=0, description="Minimum monthly payment")
    savings_return_rate: float = Field(default=0.0, description="Annual investment return (%)")
    inflation_rate: float = Field(default=0.0, gt=-100, description="Annual inflation (%)")
    horizon_years: int = Field(ge=1, le=100, description="Horizon in years")
    savings_goal: float = Field(default=0.0, description="Net-worth target")

    @field_validator("horizon_years", mode="before")
    @classmethod
    def validate_horizon_integral(cls, v):
        """Reject booleans and fractional horizons instead of coercing them."""
        if isinstance(v, bool):
            raise ValueError(f"horizon_years must be a whole number of years, got {v!r}")
        if isinstance(v, float) and not v.is_integer():
            raise ValueError(f"horizon_years must be a whole number of years, got {v}")
        return v

    # ------------------------------------------------------------------
    # Derived monthly quantities
    # ------------------------------------------------------------------
    @property
    def months(self) -> int:
        """Number of simulated months."""
        return self.horizon_years * MONTHS_PER_YEAR

    @property
    def monthly_return(self) -> float:
        """Expected monthly return as a fraction (simple division of the annual %)."""
        return self.savings_return_rate / 100.0 / MONTHS_PER_YEAR

    @property
    def monthly_inflation(self) -> float:
        return self.inflation_rate / 100.0 / MONTHS_PER_YEAR

    @property
    def monthly_debt_rate(self) -> float:
        return self.debt_apr / 100.0 / MONTHS_PER_YEAR

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def build(cls, **fields: Any) -> "SimulationParameters":
        """Construct parameters, raising InvalidParameterError on bad input."""
        return coerce_parameters(fields)

    @classmethod
    def from_household_inputs(
        cls,
        *,
        income: float,
        income_volatility: float,
        fixed_expenses: float,
        variable_expenses: float,
        initial_cash: float,
        initial_investments: float,
        total_debt: float,
        debt_apr: float,
        minimum_debt_payment: float,
        return_rate: float,
        inflation_rate: float,
        horizon_years: int,
        savings_goal: float,
    ) -> "SimulationParameters":
        """
        Build parameters from household-form style inputs.

        Income volatility is given as a percent of income, and the
        variable-expense standard deviation is fixed at 25% of the mean
        variable spending.

        Examples
        --------
        >>> p = SimulationParameters.from_household_inputs(
        ...     income=7500, income_volatility=8, fixed_expenses=2800,
        ...     variable_expenses=1500, initial_cash=12_000,
        ...     initial_investments=25_000, total_debt=38_000, debt_apr=6.5,
        ...     minimum_debt_payment=750, return_rate=7, inflation_rate=3,
        ...     horizon_years=15, savings_goal=500_000,
        ... )
        >>> p.income_std
        600.0
        """
        return cls.build(
            monthly_income=income,
            income_std=income * (income_volatility / 100.0),
            monthly_fixed_expenses=fixed_expenses,
            monthly_variable_expenses=variable_expenses,
            expense_std=variable_expenses * FORM_EXPENSE_STD_RATIO,
            initial_cash=initial_cash,
            initial_investments=initial_investments,
            total_debt=total_debt,
            debt_apr=debt_apr,
            minimum_debt_payment=minimum_debt_payment,
            savings_return_rate=return_rate,
            inflation_rate=inflation_rate,
            horizon_years=horizon_years,
            savings_goal=savings_goal,
        )


def coerce_parameters(
    params: Union[SimulationParameters, Mapping[str, Any]],
) -> SimulationParameters:
    """
    Return validated SimulationParameters from a model or a plain mapping.

    Pydantic validation errors are re-raised as InvalidParameterError so the
    simulator exposes a single fail-fast error type. Already-built models are
    re-checked for finiteness, which catches instances created with
    ``model_construct``.
    """
    if isinstance(params, SimulationParameters):
        for name, value in params.model_dump().items():
            if isinstance(value, float) and not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be finite, got {value}.")
        if params.horizon_years < 1:
            raise InvalidParameterError(
                f"horizon_years must be >= 1, got {params.horizon_years}."
            )
        return params
    try:
        return SimulationParameters.model_validate(dict(params))
    except ValidationError as e:
        raise InvalidParameterError(f"Invalid simulation parameters: {e}") from e


SAMPLE_PARAMETERS = SimulationParameters.from_household_inputs(
    income=7500,
    income_volatility=8,
    fixed_expenses=2800,
    variable_expenses=1500,
    initial_cash=12_000,
    initial_investments=25_000,
    total_debt=38_000,
    debt_apr=6.5,
    minimum_debt_payment=750,
    return_rate=7,
    inflation_rate=3,
    horizon_years=15,
    savings_goal=500_000,
)
"""Sample household pre-filled by the interactive form."""


# ---------------------------------------------------------------------------
# Monte Carlo Configuration
# ---------------------------------------------------------------------------

class MonteCarloConfig(BaseModel):
    """
    Configuration for Monte Carlo execution.

    Attributes
    ----------
    runs : int
        Trajectories per strategy (1-1,000,000).
    seed : int, optional
        Root seed; each strategy receives an independent child stream.
        If None, uses fresh OS entropy.
    progress_interval : int
        Completed trajectories between progress callbacks.

    Examples
    --------
    >>> config = MonteCarloConfig(runs=500, seed=42)
    >>> config.runs
    500
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    runs: int = Field(
        default=DEFAULT_RUNS,
        ge=1,
        le=1_000_000,
        description="Trajectories per strategy"
    )
    seed: Optional[int] = Field(
        default=None,
        ge=0,
        description="Root random seed for reproducibility"
    )
    progress_interval: int = Field(
        default=DEFAULT_PROGRESS_INTERVAL,
        ge=1,
        description="Trajectories between progress callbacks"
    )


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    are prefixed with FINRISK_ (e.g., FINRISK_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode (forces DEBUG logging).
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR".
    default_runs : int
        Run count used by the CLI when --runs is not given.
    default_seed : int, optional
        Seed used by the CLI when --seed is not given.

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.log_level
    'WARNING'
    """

    model_config = SettingsConfigDict(
        env_prefix="FINRISK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    default_runs: int = Field(
        default=DEFAULT_RUNS,
        ge=1,
        le=1_000_000,
        description="Default Monte Carlo runs per strategy"
    )
    default_seed: Optional[int] = Field(
        default=None,
        ge=0,
        description="Default root seed"
    )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level
