"""
Unit tests for serialization.py module.

Tests parameter file persistence and schema version handling.
"""

import json
import warnings

import pytest

from finrisk.config import SAMPLE_PARAMETERS
from finrisk.exceptions import ConfigurationError, InvalidParameterError
from finrisk.serialization import (
    SCHEMA_VERSION,
    load_parameters,
    parameters_from_dict,
    parameters_to_dict,
    save_parameters,
)


class TestParameterDicts:
    """Test parameters_to_dict / parameters_from_dict."""

    def test_to_dict_layout(self):
        data = parameters_to_dict(SAMPLE_PARAMETERS)
        assert data["schema_version"] == SCHEMA_VERSION
        assert data["parameters"]["monthly_income"] == 7_500
        assert data["parameters"]["horizon_years"] == 15

    def test_from_dict(self):
        data = parameters_to_dict(SAMPLE_PARAMETERS)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert parameters_from_dict(data) == SAMPLE_PARAMETERS

    def test_bare_fields_accepted(self):
        data = dict(parameters_to_dict(SAMPLE_PARAMETERS)["parameters"])
        data["schema_version"] = SCHEMA_VERSION
        assert parameters_from_dict(data) == SAMPLE_PARAMETERS

    def test_version_mismatch_warns(self):
        data = parameters_to_dict(SAMPLE_PARAMETERS)
        data["schema_version"] = "0.0.1"
        with pytest.warns(UserWarning, match="schema version"):
            params = parameters_from_dict(data)
        assert params == SAMPLE_PARAMETERS

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError, match="JSON object"):
            parameters_from_dict([1, 2, 3])

    def test_missing_parameters(self):
        with pytest.raises(ConfigurationError, match="parameters"):
            parameters_from_dict({"schema_version": SCHEMA_VERSION})

    def test_invalid_values(self):
        data = parameters_to_dict(SAMPLE_PARAMETERS)
        data["parameters"]["horizon_years"] = -3
        with pytest.raises(InvalidParameterError):
            parameters_from_dict(data)

    def test_unknown_field(self):
        data = parameters_to_dict(SAMPLE_PARAMETERS)
        data["parameters"]["pets"] = 2
        with pytest.raises(InvalidParameterError):
            parameters_from_dict(data)


class TestParameterFiles:
    """Test save_parameters / load_parameters."""

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "household.json"
        save_parameters(SAMPLE_PARAMETERS, path)

        assert path.exists()
        with open(path) as f:
            assert json.load(f)["schema_version"] == SCHEMA_VERSION
        assert load_parameters(path) == SAMPLE_PARAMETERS

    def test_save_mapping(self, tmp_path):
        path = tmp_path / "household.json"
        save_parameters(SAMPLE_PARAMETERS.model_dump(), path)
        assert load_parameters(path) == SAMPLE_PARAMETERS

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_parameters(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_parameters(path)

    def test_binary_file(self, tmp_path):
        path = tmp_path / "household.json"
        path.write_bytes(b"\xff\xfe\x00{\x80")
        with pytest.raises(ConfigurationError, match="not UTF-8"):
            load_parameters(path)
