"""HTTP transport used to reach vendor APIs."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from promptgate.exceptions import (
    APIConnectionError,
    APITimeoutError,
    ProviderError,
    map_http_status_to_error,
)

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Raw vendor response.

    Attributes:
        status_code: HTTP status code
        text: Undecoded response body
        headers: Response headers, lower-cased
    """
    status_code: int
    text: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body, raising ValueError on malformed JSON."""
        return json.loads(self.text) if self.text else None


class HttpTransport(ABC):
    """Abstract transport.

    Implementations send one request and return the raw response. They
    raise :class:`APITimeoutError` or :class:`APIConnectionError` for
    network failures and never interpret the status code.
    """

    @abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        pass

    async def close(self) -> None:
        pass


class HttpxTransport(HttpTransport):
    """Transport backed by a shared ``httpx.AsyncClient``."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0) -> None:
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        client = self._get_client()
        try:
            response = await client.request(
                method,
                url,
                headers=headers,
                json=json,
                params=params,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.TimeoutException as e:
            raise APITimeoutError(str(e) or f"Request to {url} timed out")
        except httpx.TransportError as e:
            raise APIConnectionError(str(e) or f"Could not connect to {url}")

        return TransportResponse(
            status_code=response.status_code,
            text=response.text,
            headers={k.lower(): v for k, v in response.headers.items()},
        )

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def _error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    return fallback


def raise_for_status(response: TransportResponse, provider: Optional[str] = None) -> None:
    """Raise the matching :class:`ProviderError` for a non-2xx response."""
    if response.is_success:
        return

    try:
        body = response.json()
    except ValueError:
        body = None
    message = _error_message(body, response.text[:500] or f"HTTP {response.status_code}")

    retry_after = None
    if response.status_code == 429:
        raw = response.headers.get("retry-after")
        if raw and raw.strip().isdigit():
            retry_after = int(raw.strip())

    raise map_http_status_to_error(
        response.status_code,
        message,
        body if isinstance(body, dict) else None,
        provider=provider,
        retry_after=retry_after,
    )


def decode_body(response: TransportResponse, provider: Optional[str] = None) -> dict[str, Any]:
    """Decode a successful response into a JSON object.

    Raises:
        ProviderError: Body is not JSON or not an object
    """
    try:
        body = response.json()
    except ValueError as e:
        raise ProviderError(
            f"Malformed JSON from {provider or 'provider'}: {e}",
            status_code=response.status_code,
            provider=provider,
        )
    if not isinstance(body, dict):
        raise ProviderError(
            f"Unexpected response body from {provider or 'provider'}: expected an object",
            status_code=response.status_code,
            provider=provider,
        )
    return body
