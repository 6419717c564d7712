"""Tests for the tenant validation-config client."""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock, patch

import requests

from repro_planner.services import settings_store
from repro_planner.services.settings_store import (
    ConfigFetch,
    fetch_validation_config,
    load_validation_config,
    save_validation_config,
    settings_url,
)
from repro_planner.validation import DEFAULT_VALIDATION_CONFIG, DateValidationConfig


def _response(status: int = 200, body: Any = None) -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.content = b"" if body is None else b"{}"
    resp.json.return_value = body
    return resp


class TestSettingsUrl:
    def test_url_from_settings(self) -> None:
        assert settings_url(42) == "https://api.test/api/v1/tenants/42/settings/date-validation"

    def test_url_quotes_ids(self) -> None:
        assert "/tenants/a%2Fb/" in settings_url("a/b", base_url="https://x")


class TestConfigFetch:
    def test_unwrap_or(self) -> None:
        config = DateValidationConfig(enable_biology_warnings=False)
        assert ConfigFetch(config=config).unwrap_or(DEFAULT_VALIDATION_CONFIG) is config
        assert ConfigFetch(error="boom").unwrap_or(DEFAULT_VALIDATION_CONFIG) is DEFAULT_VALIDATION_CONFIG

    def test_ok(self) -> None:
        assert ConfigFetch().ok
        assert not ConfigFetch(error="boom").ok


class TestFetchValidationConfig:
    """Fetching never raises; failures carry an error."""

    @patch.object(settings_store, "session")
    def test_merges_partial_config(self, mock_session: Mock) -> None:
        mock_session.get.return_value = _response(body={"data": {"enableBusinessWarnings": False}})

        result = fetch_validation_config(7)

        assert result.ok
        assert result.config is not None
        assert result.config.enable_business_warnings is False
        assert result.config.enable_biology_warnings is True
        url = mock_session.get.call_args.args[0]
        assert url.endswith("/tenants/7/settings/date-validation")
        assert mock_session.get.call_args.kwargs["headers"]["x-tenant-id"] == "7"

    @patch.object(settings_store, "session")
    def test_unwrapped_body(self, mock_session: Mock) -> None:
        mock_session.get.return_value = _response(body={"enableSequenceValidation": False})
        result = fetch_validation_config(7)
        assert result.config is not None
        assert result.config.enable_sequence_validation is False

    @patch.object(settings_store, "session")
    def test_404_means_not_configured(self, mock_session: Mock) -> None:
        mock_session.get.return_value = _response(status=404)
        result = fetch_validation_config(7)
        assert result.ok
        assert result.config is None

    @patch.object(settings_store, "session")
    def test_empty_body(self, mock_session: Mock) -> None:
        mock_session.get.return_value = _response(body=None)
        assert fetch_validation_config(7) == ConfigFetch()

    @patch.object(settings_store, "session")
    def test_server_error(self, mock_session: Mock) -> None:
        mock_session.get.return_value = _response(status=500, body={})
        result = fetch_validation_config(7)
        assert result.error == "HTTP 500"

    @patch.object(settings_store, "session")
    def test_transport_error(self, mock_session: Mock) -> None:
        mock_session.get.side_effect = requests.ConnectionError("down")
        result = fetch_validation_config(7)
        assert not result.ok
        assert "down" in (result.error or "")

    @patch.object(settings_store, "session")
    def test_malformed_config(self, mock_session: Mock) -> None:
        mock_session.get.return_value = _response(body={"nonOverridableWarnings": ["BOGUS"]})
        result = fetch_validation_config(7)
        assert not result.ok
        assert result.config is None

    @patch.object(settings_store, "session")
    def test_load_falls_back_to_defaults(self, mock_session: Mock) -> None:
        mock_session.get.side_effect = requests.Timeout("slow")
        assert load_validation_config(7) == DEFAULT_VALIDATION_CONFIG


class TestSaveValidationConfig:
    @patch.object(settings_store, "session")
    def test_put_camel_case_body(self, mock_session: Mock) -> None:
        mock_session.put.return_value = _response(status=200)

        assert save_validation_config(7, DateValidationConfig(enable_biology_warnings=False)) is True

        body = mock_session.put.call_args.kwargs["json"]
        assert body["enableBiologyWarnings"] is False
        assert body["sequenceRules"]["enforceSequenceOrder"] is True

    @patch.object(settings_store, "session")
    def test_failure_returns_false(self, mock_session: Mock) -> None:
        mock_session.put.return_value = _response(status=503)
        assert save_validation_config(7, DEFAULT_VALIDATION_CONFIG) is False

    @patch.object(settings_store, "session")
    def test_transport_error_returns_false(self, mock_session: Mock) -> None:
        mock_session.put.side_effect = requests.ConnectionError("down")
        assert save_validation_config(7, DEFAULT_VALIDATION_CONFIG) is False
