"""
Unit tests for shared configuration, errors and logging helpers.
"""

import pytest
import structlog
from pydantic import ValidationError

from modelsignature.shared.config import ClientSettings, get_settings, resolve_client_config
from modelsignature.shared.errors import (
    ErrorResponse,
    HTTPError,
    InvalidFormatError,
    InvalidResponseError,
    ModelSignatureError,
    PolicyViolationError,
    RequestFailedError,
)
from modelsignature.shared.logging import (
    add_correlation_context,
    add_sdk_context,
    clear_context,
    configure_logging,
    set_request_id,
    set_token_context,
    token_fingerprint,
)


class TestSettings:
    """Test cases for ClientSettings."""

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MODELSIGNATURE_API_BASE_URL", "https://staging.example.com/")
        monkeypatch.setenv("MODELSIGNATURE_TIMEOUT", "2.5")
        monkeypatch.setenv("MODELSIGNATURE_RETRIES", "0")
        monkeypatch.setenv("MODELSIGNATURE_API_KEY", "env-key")

        config = resolve_client_config(get_settings())

        assert config.api_base_url == "https://staging.example.com"
        assert config.timeout == 2.5
        assert config.retries == 0
        assert config.api_key == "env-key"

    def test_explicit_values_beat_environment(self, monkeypatch):
        monkeypatch.setenv("MODELSIGNATURE_RETRIES", "5")

        config = resolve_client_config(get_settings(), retries=1, timeout=None)

        assert config.retries == 1
        assert config.timeout == 10.0

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            ClientSettings(retries=-1)

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValidationError):
            resolve_client_config(ClientSettings(), timeout=0)

    def test_env_variable_ignored(self, monkeypatch):
        monkeypatch.setenv("MODELSIGNATURE_ENV", "staging")

        settings = ClientSettings()

        assert "env" not in ClientSettings.model_fields
        assert not hasattr(settings, "env")


class TestErrors:
    """Test cases for the error hierarchy."""

    def test_codes(self):
        assert InvalidFormatError().code == "INVALID_FORMAT"
        assert InvalidResponseError().code == "INVALID_RESPONSE"
        assert HTTPError("x", status_code=400).code == "HTTP_ERROR"
        assert RequestFailedError(4, "x").code == "REQUEST_FAILED"
        assert PolicyViolationError(["x"]).code == "POLICY_VIOLATION"

    def test_all_errors_share_base(self):
        for error in (InvalidFormatError(), HTTPError("x", 500), RequestFailedError(1, "x"), PolicyViolationError([])):
            assert isinstance(error, ModelSignatureError)

    def test_http_error_retryable(self):
        assert HTTPError("x", status_code=500).retryable is True
        assert HTTPError("x", status_code=499).retryable is False

    def test_policy_violation_keeps_order(self):
        error = PolicyViolationError(["b", "a"])

        assert error.violations == ("b", "a")
        assert error.message == "Policy violation: b, a"

    def test_to_response(self):
        response = HTTPError("Invalid token", status_code=400, details={"endpoint": "jwt_verify"}).to_response()

        assert isinstance(response, ErrorResponse)
        assert response.code == "HTTP_ERROR"
        assert response.message == "Invalid token"
        assert response.status_code == 400
        assert response.details == {"endpoint": "jwt_verify"}


class TestLoggingContext:
    """Test cases for logging processors and context."""

    def teardown_method(self):
        clear_context()

    def test_token_fingerprint_is_short_and_stable(self):
        fingerprint = token_fingerprint("a.b.c")

        assert len(fingerprint) == 8
        assert fingerprint == token_fingerprint("a.b.c")
        assert "a.b.c" not in fingerprint

    def test_correlation_context(self):
        request_id = set_request_id("req-1")
        token_id = set_token_context("a.b.c")

        event = add_correlation_context(None, "info", {"event": "x"})

        assert request_id == "req-1"
        assert event["request_id"] == "req-1"
        assert event["token_id"] == token_id

    def test_non_string_token_context(self):
        assert set_token_context(None) is None
        assert set_token_context(123) is None

    def test_cleared_context(self):
        set_request_id()
        clear_context()

        assert add_correlation_context(None, "info", {}) == {}

    def test_sdk_context(self):
        event = add_sdk_context(None, "info", {"logger": "modelsignature.policy"})

        assert event["component"] == "policy"


class TestConfigureLogging:
    """Test cases for configure_logging."""

    def teardown_method(self):
        structlog.reset_defaults()

    def test_single_iso_timestamp(self):
        configure_logging("debug")

        processors = structlog.get_config()["processors"]
        stampers = [p for p in processors if isinstance(p, structlog.processors.TimeStamper)]
        event = stampers[0](None, "info", {"event": "x"})
        for processor in (add_sdk_context, add_correlation_context):
            event = processor(None, "info", event)

        assert len(stampers) == 1
        assert isinstance(event["timestamp"], str)
        assert "T" in event["timestamp"]
