"""Log sink interface for completed requests."""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from promptgate.types import CanonicalResponse, ResolvedRequest

logger = logging.getLogger(__name__)


class RequestStatus(Enum):
    STARTED = "started"
    SUCCESS = "success"
    CACHED = "cached"
    ERROR = "error"


@dataclass
class RequestLog:
    """One request as seen by the log sinks.

    Created by :meth:`start` before dispatch and filled in by either
    :meth:`complete` or :meth:`fail`. Token counts and cost stay at zero for
    failed requests; ``cached_tokens`` counts vendor prompt-cache reads, while
    ``cache_hit`` marks replies served from the gateway's own response cache.
    """
    request_id: str
    timestamp: datetime
    provider: str
    model: str
    prompt: str = ""
    system_prompt: Optional[str] = None
    preset: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cached_tokens: int = 0
    cost: float = 0.0
    latency_ms: int = 0
    status: RequestStatus = RequestStatus.STARTED
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    cache_hit: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def start(cls, request: ResolvedRequest) -> "RequestLog":
        return cls(
            request_id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc),
            provider=request.provider,
            model=request.model,
            prompt=request.prompt,
            system_prompt=request.system_prompt,
            preset=request.preset,
        )

    def complete(self, response: CanonicalResponse) -> None:
        """Fill in the outcome of a finished request."""
        self.input_tokens = response.input_tokens
        self.output_tokens = response.output_tokens
        self.total_tokens = response.total_tokens
        self.cached_tokens = response.usage.get("cached_tokens", 0)
        self.cost = response.cost
        self.latency_ms = response.response_time_ms
        self.cache_hit = response.cached
        if response.error:
            self.status = RequestStatus.ERROR
            self.error_type = "response_error"
            self.error_message = response.error
        else:
            self.status = RequestStatus.CACHED if response.cached else RequestStatus.SUCCESS

    def fail(self, error: Exception, latency_ms: int) -> None:
        self.status = RequestStatus.ERROR
        self.error_type = getattr(error, "type", None) or type(error).__name__
        self.error_message = str(error)
        self.latency_ms = latency_ms


class Callback(ABC):
    """Base class for request log sinks."""

    async def on_request_start(self, log: RequestLog) -> None:
        """Called before dispatch. Optional."""
        pass

    @abstractmethod
    async def on_request_end(self, log: RequestLog, response: Optional[CanonicalResponse] = None) -> None:
        """Called when a request completes, cache hits included.

        Args:
            log: Request log entry
            response: Canonical response
        """
        pass

    @abstractmethod
    async def on_request_error(self, log: RequestLog, error: Exception) -> None:
        """Called when a request fails.

        Args:
            log: Request log entry
            error: Exception that occurred
        """
        pass

    def close(self) -> None:
        """Release files or connections held by the sink."""


class CallbackManager:
    """Fan a request log out to every registered callback.

    A failing callback is logged and skipped; it never fails the request.
    """

    def __init__(self, callbacks: Optional[list[Callback]] = None) -> None:
        self._sinks: list[Callback] = list(callbacks or [])

    def __len__(self) -> int:
        return len(self._sinks)

    def register(self, callback: Callback) -> None:
        self._sinks.append(callback)

    def unregister(self, callback: Callback) -> None:
        if callback in self._sinks:
            self._sinks.remove(callback)

    async def _fan_out(self, hook: str, *args: Any) -> None:
        for sink in list(self._sinks):
            try:
                await getattr(sink, hook)(*args)
            except Exception as e:
                logger.warning("Log sink %s failed in %s: %s", type(sink).__name__, hook, e)

    async def on_request_start(self, log: RequestLog) -> None:
        await self._fan_out("on_request_start", log)

    async def on_request_end(self, log: RequestLog, response: Optional[CanonicalResponse] = None) -> None:
        await self._fan_out("on_request_end", log, response)

    async def on_request_error(self, log: RequestLog, error: Exception) -> None:
        await self._fan_out("on_request_error", log, error)

    def close(self) -> None:
        for sink in self._sinks:
            try:
                sink.close()
            except Exception as e:
                logger.warning("Log sink %s failed to close: %s", type(sink).__name__, e)
