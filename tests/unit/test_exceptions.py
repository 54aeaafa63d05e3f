"""Tests for custom exceptions."""

import pytest

from promptgate.exceptions import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    ConfigurationError,
    InvalidOptionError,
    PresetNotFoundError,
    PromptGateError,
    ProviderError,
    RateLimitError,
    ServiceUnavailableError,
    map_http_status_to_error,
)


class TestPromptGateError:
    """Test base exception class."""

    def test_basic_error(self):
        error = PromptGateError("Test error")
        assert str(error) == "promptgate_error: Test error"
        assert error.message == "Test error"
        assert error.body == {}

    def test_error_with_code(self):
        error = PromptGateError("Test error", type="custom", code="E1")
        assert str(error) == "[E1] custom: Test error"


class TestConfigurationErrors:
    def test_preset_not_found(self):
        error = PresetNotFoundError("missing")
        assert isinstance(error, ConfigurationError)
        assert error.preset == "missing"
        assert "missing" in error.message

    def test_invalid_option(self):
        error = InvalidOptionError("temperature", "too hot")
        assert isinstance(error, ConfigurationError)
        assert error.option == "temperature"
        assert error.type == "invalid_option"


class TestProviderErrors:
    def test_status_code_becomes_code(self):
        error = ProviderError("bad gateway", status_code=502, provider="openai")
        assert error.code == "502"
        assert error.provider == "openai"

    def test_timeout_is_connection_error(self):
        error = APITimeoutError()
        assert isinstance(error, APIConnectionError)
        assert error.type == "timeout_error"

    def test_rate_limit_retry_after(self):
        error = RateLimitError("slow down", retry_after=30)
        assert error.status_code == 429
        assert error.retry_after == 30


class TestMapHttpStatus:
    """Test HTTP status mapping."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            (400, BadRequestError),
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, BadRequestError),
            (422, BadRequestError),
            (429, RateLimitError),
            (503, ServiceUnavailableError),
            (529, ServiceUnavailableError),
        ],
    )
    def test_mapping(self, status, expected):
        error = map_http_status_to_error(status, "message", provider="claude")
        assert type(error) is expected
        assert error.status_code == status
        assert error.provider == "claude"

    def test_unknown_status_is_provider_error(self):
        error = map_http_status_to_error(500, "oops")
        assert type(error) is ProviderError
        assert error.status_code == 500

    def test_retry_after_passed_through(self):
        error = map_http_status_to_error(429, "slow", retry_after=7)
        assert error.retry_after == 7
