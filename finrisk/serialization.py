"""
Serialization module for FinRisk parameter files.

Purpose
-------
Persists household parameter records as JSON so scenarios can be saved,
shared and re-run from the command line. Simulation results are derived
data and are not written to disk.

File layout
-----------
{
  "schema_version": "0.1.0",
  "parameters": { "monthly_income": 7500.0, ... }
}

A file whose ``schema_version`` differs from the current one still loads
but raises a UserWarning.

Example
-------
>>> from pathlib import Path
>>> from finrisk.config import SAMPLE_PARAMETERS
>>> save_parameters(SAMPLE_PARAMETERS, Path("household.json"))
>>> params = load_parameters(Path("household.json"))
"""

from __future__ import annotations
from typing import Any, Dict, Mapping, Union
from pathlib import Path
import json
import warnings

from .config import SimulationParameters, coerce_parameters
from .exceptions import ConfigurationError

__all__ = [
    "SCHEMA_VERSION",
    "parameters_to_dict",
    "parameters_from_dict",
    "save_parameters",
    "load_parameters",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Parameter Serialization
# ---------------------------------------------------------------------------

def parameters_to_dict(params: SimulationParameters) -> Dict[str, Any]:
    """
    Convert SimulationParameters to a versioned dictionary.

    Returns
    -------
    dict
        ``{"schema_version": ..., "parameters": {...}}``
    """
    return {
        "schema_version": SCHEMA_VERSION,
        "parameters": params.model_dump(),
    }


def parameters_from_dict(data: Mapping[str, Any]) -> SimulationParameters:
    """
    Rebuild SimulationParameters from :func:`parameters_to_dict` output.

    A bare mapping of parameter fields (no ``parameters`` key) is accepted
    as well.

    Raises
    ------
    ConfigurationError
        Document is not a mapping or has no parameter block.
    InvalidParameterError
        Parameter values fail validation.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(
            f"Parameter document must be a JSON object, got {type(data).__name__}."
        )

    schema_version = data.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Parameter file schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )

    fields = data.get("parameters", None)
    if fields is None:
        fields = {k: v for k, v in data.items() if k != "schema_version"}
    if not isinstance(fields, Mapping) or not fields:
        raise ConfigurationError("Parameter document has no 'parameters' object.")

    return coerce_parameters(fields)


def save_parameters(
    params: Union[SimulationParameters, Mapping[str, Any]],
    path: Path,
) -> None:
    """
    Save a parameter record to a JSON file.

    Parent directories are created as needed.

    Examples
    --------
    >>> save_parameters(SAMPLE_PARAMETERS, Path("household.json"))
    """
    params = coerce_parameters(params)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(parameters_to_dict(params), f, indent=2)


def load_parameters(path: Path) -> SimulationParameters:
    """
    Load a parameter record from a JSON file.

    Raises
    ------
    ConfigurationError
        File is missing, not UTF-8 text or not valid JSON.
    InvalidParameterError
        Parameter values fail validation.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Parameter file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Parameter file {path} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Parameter file {path} is not UTF-8 text: {e}") from e

    return parameters_from_dict(data)
