"""Custom exceptions for promptgate."""

from typing import Any, Optional


class PromptGateError(Exception):
    """Base exception for all promptgate errors."""

    def __init__(
        self,
        message: str,
        *,
        type: Optional[str] = None,
        code: Optional[str] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.type = type or "promptgate_error"
        self.code = code
        self.body = body or {}

    def __str__(self) -> str:
        msg = self.message
        if self.type:
            msg = f"{self.type}: {msg}"
        if self.code:
            msg = f"[{self.code}] {msg}"
        return msg


class ConfigurationError(PromptGateError):
    """Unknown provider, missing credential or otherwise unusable settings."""

    def __init__(self, message: str = "Invalid configuration", **kwargs: Any) -> None:
        kwargs.setdefault("type", "configuration_error")
        super().__init__(message, **kwargs)


class PresetNotFoundError(ConfigurationError):
    """A preset was named explicitly but does not exist."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(f"Preset '{name}' not found", type="preset_not_found", **kwargs)
        self.preset = name


class InvalidOptionError(ConfigurationError):
    """A request option is out of range."""

    def __init__(self, option: str, message: str, **kwargs: Any) -> None:
        super().__init__(message, type="invalid_option", **kwargs)
        self.option = option


class ProviderError(PromptGateError):
    """The vendor returned something other than a usable response."""

    def __init__(
        self,
        message: str = "Provider error",
        *,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("type", "provider_error")
        if status_code is not None:
            kwargs.setdefault("code", str(status_code))
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.provider = provider


class AuthenticationError(ProviderError):
    """Authentication failed (invalid API key, etc.)."""

    def __init__(self, message: str = "Authentication failed", **kwargs: Any) -> None:
        kwargs.setdefault("status_code", 401)
        super().__init__(message, type="authentication_error", **kwargs)


class BadRequestError(ProviderError):
    """The vendor rejected the request payload."""

    def __init__(self, message: str = "Bad request", **kwargs: Any) -> None:
        kwargs.setdefault("status_code", 400)
        super().__init__(message, type="invalid_request_error", **kwargs)


class RateLimitError(ProviderError):
    """Rate limit exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("status_code", 429)
        super().__init__(message, type="rate_limit_error", **kwargs)
        self.retry_after = retry_after


class ServiceUnavailableError(ProviderError):
    """Vendor overloaded or temporarily unavailable."""

    def __init__(self, message: str = "Service unavailable", **kwargs: Any) -> None:
        kwargs.setdefault("status_code", 503)
        super().__init__(message, type="service_unavailable", **kwargs)


class APIConnectionError(ProviderError):
    """Failed to connect to the vendor API."""

    def __init__(self, message: str = "Connection error", **kwargs: Any) -> None:
        kwargs.setdefault("type", "api_connection_error")
        super().__init__(message, **kwargs)


class APITimeoutError(APIConnectionError):
    """Request to the vendor timed out."""

    def __init__(self, message: str = "Request timed out", **kwargs: Any) -> None:
        super().__init__(message, type="timeout_error", **kwargs)


def map_http_status_to_error(
    status_code: int,
    message: str,
    body: Optional[dict[str, Any]] = None,
    provider: Optional[str] = None,
    retry_after: Optional[int] = None,
) -> ProviderError:
    """Map an HTTP status code to the matching exception.

    Args:
        status_code: HTTP status code
        message: Error message
        body: Decoded response body, if any
        provider: Provider that produced the error
        retry_after: Seconds to wait, for 429 responses

    Returns:
        Exception instance (not raised)
    """
    kwargs: dict[str, Any] = {"body": body, "provider": provider, "status_code": status_code}

    if status_code in (401, 403):
        return AuthenticationError(message, **kwargs)
    if status_code == 429:
        return RateLimitError(message, retry_after=retry_after, **kwargs)
    if status_code in (400, 404, 413, 422):
        return BadRequestError(message, **kwargs)
    if status_code in (502, 503, 504, 529):
        return ServiceUnavailableError(message, **kwargs)
    return ProviderError(message, **kwargs)
