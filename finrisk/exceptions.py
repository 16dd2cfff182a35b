"""
Custom exceptions for FinRisk.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all FinRisk modules. All exceptions inherit from FinRiskError,
enabling catch-all handling when needed.

Exception Hierarchy
-------------------
FinRiskError (base)
├── ConfigurationError - Invalid settings or parameter files
├── ValidationError - Data validation failures
│   └── InvalidParameterError - Simulation parameter contract violations
└── SimulationCancelledError - Cooperative cancellation between runs

Usage
-----
>>> from finrisk.exceptions import InvalidParameterError
>>>
>>> raise InvalidParameterError("horizon_years must be >= 1, got 0")
>>>
>>> # Catch all FinRisk exceptions
>>> try:
...     results = run_monte_carlo(params, runs=5000)
... except FinRiskError as e:
...     print(f"FinRisk error: {e}")
"""

__all__ = [
    "FinRiskError",
    "ConfigurationError",
    "ValidationError",
    "InvalidParameterError",
    "SimulationCancelledError",
]


class FinRiskError(Exception):
    """
    Base exception for all FinRisk errors.

    Examples
    --------
    >>> try:
    ...     run_monte_carlo(params)
    ... except FinRiskError as e:
    ...     logger.error("Simulation failed: %s", e)
    """
    pass


class ConfigurationError(FinRiskError):
    """
    Invalid configuration or parameter file.

    Raised when:
    - A parameter file cannot be parsed
    - Required sections are missing from a parameter file
    - Application settings are inconsistent

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Parameter file params.json has no 'parameters' section."
    ... )
    """
    pass


class ValidationError(FinRiskError):
    """
    Data validation failures.

    Raised when input data fails validation checks, such as:
    - Non-numeric or non-finite samples
    - Invalid array shapes

    Examples
    --------
    >>> raise ValidationError("sample must be 1-D, got shape (2, 3).")
    """
    pass


class InvalidParameterError(ValidationError, ValueError):
    """
    Simulation parameters violate the model contract.

    Raised by top-level validation before any trajectory is simulated:
    - Non-finite monetary or rate fields
    - Non-positive horizon
    - Negative standard deviations
    - Run count below 1

    Also a ``ValueError`` so callers validating generic user input can
    catch it without importing FinRisk.

    Examples
    --------
    >>> raise InvalidParameterError(
    ...     f"runs must be a positive integer, got {runs}."
    ... )
    """
    pass


class SimulationCancelledError(FinRiskError):
    """
    Monte Carlo run stopped because cancellation was requested.

    The cancellation flag is polled once per completed trajectory, so the
    worst-case latency is a single simulated household path.

    Attributes
    ----------
    strategy : str or None
        Strategy being simulated when the request was observed.
    completed : int
        Trajectories finished for that strategy before stopping.
    """

    def __init__(self, message: str, *, strategy=None, completed: int = 0):
        super().__init__(message)
        self.strategy = strategy
        self.completed = completed
