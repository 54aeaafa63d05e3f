"""Concurrent dispatch of many resolved requests."""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

from promptgate.types import CanonicalResponse, ResolvedRequest

logger = logging.getLogger(__name__)

Executor = Callable[[ResolvedRequest], Awaitable[CanonicalResponse]]


class AsyncDispatcher:
    """Run one task per request and collect the results in input order.

    A request that raises becomes an error response at its own index; the
    other requests are neither cancelled nor delayed.
    """

    def __init__(self, execute: Executor, max_concurrency: Optional[int] = None) -> None:
        """Initialize the dispatcher.

        Args:
            execute: Coroutine function handling a single request
            max_concurrency: Upper bound on in-flight requests (None for no bound)
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._execute = execute
        self.max_concurrency = max_concurrency

    async def dispatch(self, requests: Sequence[ResolvedRequest]) -> list[CanonicalResponse]:
        if not requests:
            return []
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def run(index: int, request: ResolvedRequest) -> CanonicalResponse:
            started = time.perf_counter()
            try:
                if semaphore is None:
                    return await self._execute(request)
                async with semaphore:
                    return await self._execute(request)
            except Exception as e:
                elapsed_ms = int((time.perf_counter() - started) * 1000)
                logger.warning(
                    "Request %d (%s/%s) failed: %s", index, request.provider, request.model, e
                )
                return CanonicalResponse.error_response(str(e), elapsed_ms)

        results = await asyncio.gather(*(run(i, r) for i, r in enumerate(requests)))
        return list(results)
