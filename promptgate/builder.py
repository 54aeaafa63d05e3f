"""Chainable request builder.

Every setter returns a new builder, so partially configured builders can be
kept and branched::

    base = gateway.builder().preset("analyze").vars({"lang": "en"})
    short = base.max_tokens(200)
    answer = await short.prompt("Summarize {{topic}}").vars({"topic": "caching"}).ask()
"""

import asyncio
from typing import TYPE_CHECKING, Any, Optional

from promptgate.exceptions import ConfigurationError
from promptgate.types import CanonicalRequest, CanonicalResponse, ResolvedRequest

if TYPE_CHECKING:
    from promptgate.gateway import Gateway


class RequestBuilder:
    """Immutable builder over :class:`CanonicalRequest`."""

    __slots__ = ("_gateway", "_request")

    def __init__(self, gateway: Optional["Gateway"] = None, request: Optional[CanonicalRequest] = None) -> None:
        self._gateway = gateway
        self._request = request or CanonicalRequest()

    def __repr__(self) -> str:
        return f"RequestBuilder({self._request!r})"

    def _with(self, **changes: Any) -> "RequestBuilder":
        return RequestBuilder(self._gateway, self._request.model_copy(update=changes))

    # -- setters ----------------------------------------------------------

    def prompt(self, text: str) -> "RequestBuilder":
        return self._with(prompt=text)

    def system_prompt(self, text: Optional[str]) -> "RequestBuilder":
        return self._with(system_prompt=text)

    def model(self, name: str) -> "RequestBuilder":
        return self._with(model=name)

    def provider(self, name: str) -> "RequestBuilder":
        return self._with(provider=name)

    def preset(self, name: str) -> "RequestBuilder":
        return self._with(preset=name)

    def options(self, options: dict[str, Any]) -> "RequestBuilder":
        """Merge options into those already set."""
        return self._with(options={**self._request.options, **options})

    def vars(self, variables: dict[str, Any]) -> "RequestBuilder":
        """Merge template variables into those already set."""
        merged = dict(self._request.vars)
        merged.update({k: str(v) for k, v in variables.items()})
        return self._with(vars=merged)

    def stream(self, enabled: bool = True) -> "RequestBuilder":
        return self._with(stream=enabled)

    def temperature(self, value: float) -> "RequestBuilder":
        return self.options({"temperature": value})

    def max_tokens(self, value: int) -> "RequestBuilder":
        return self.options({"max_tokens": value})

    # -- terminals ----------------------------------------------------------

    def to_request(self) -> CanonicalRequest:
        return self._request

    def is_empty(self) -> bool:
        return not self._request.prompt

    def _require_gateway(self) -> "Gateway":
        if self._gateway is None:
            raise ConfigurationError("Builder is not bound to a gateway")
        return self._gateway

    def resolve(self) -> ResolvedRequest:
        return self._require_gateway().resolve(self._request)

    async def request(self) -> CanonicalResponse:
        """Resolve and execute the request."""
        return await self._require_gateway().request(self._request)

    async def ask(self) -> str:
        """Execute the request and return only the generated text."""
        response = await self.request()
        return response.content

    def request_sync(self) -> CanonicalResponse:
        """Synchronous version of :meth:`request`."""
        return asyncio.run(self.request())

    def ask_sync(self) -> str:
        return asyncio.run(self.ask())
