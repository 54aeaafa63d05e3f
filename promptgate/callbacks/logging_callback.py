"""Structured logging sink for requests."""

import json
from pathlib import Path
from typing import Any, Optional, TextIO

import structlog

from promptgate.callbacks.base import Callback, RequestLog
from promptgate.types import CanonicalResponse

logger = structlog.get_logger()

TRUNCATION_MARK = "... [truncated]"


class LoggingCallback(Callback):
    """Emit one structlog event per request and optionally append JSON lines to a file.

    Example:
        ```python
        gateway = Gateway(config, callbacks=CallbackManager([
            LoggingCallback(file_path="logs/requests.jsonl", max_prompt_length=200),
        ]))
        ```
    """

    def __init__(
        self,
        *,
        file_path: Optional[str | Path] = None,
        console: bool = True,
        max_prompt_length: int = 1000,
    ) -> None:
        """Initialize the sink.

        Args:
            file_path: JSON lines file to append to (optional)
            console: Whether to emit structlog events
            max_prompt_length: Prompts longer than this are truncated in records
        """
        self.file_path = Path(file_path) if file_path else None
        self.console = console
        self.max_prompt_length = max_prompt_length
        self._stream: Optional[TextIO] = None

        if self.file_path is not None:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = self.file_path.open("a", encoding="utf-8")

    def _clip(self, text: Optional[str]) -> Optional[str]:
        if text is None or len(text) <= self.max_prompt_length:
            return text
        return text[: self.max_prompt_length] + TRUNCATION_MARK

    def _record(self, log: RequestLog, event: str) -> dict[str, Any]:
        record: dict[str, Any] = {
            "event": event,
            "request_id": log.request_id,
            "timestamp": log.timestamp.isoformat(),
            "provider": log.provider,
            "model": log.model,
            "preset": log.preset,
            "status": log.status.value,
            "input_tokens": log.input_tokens,
            "output_tokens": log.output_tokens,
            "total_tokens": log.total_tokens,
            "cached_tokens": log.cached_tokens,
            "cost": log.cost,
            "latency_ms": log.latency_ms,
            "cache_hit": log.cache_hit,
            "prompt": self._clip(log.prompt),
            "system_prompt": self._clip(log.system_prompt),
            "error_type": log.error_type,
            "error_message": log.error_message,
            "metadata": log.metadata or None,
        }
        # keep the file compact
        return {key: value for key, value in record.items() if value is not None}

    def _append(self, record: dict[str, Any]) -> None:
        if self._stream is None:
            return
        self._stream.write(json.dumps(record, default=str) + "\n")
        self._stream.flush()

    async def on_request_end(self, log: RequestLog, response: Optional[CanonicalResponse] = None) -> None:
        if self.console:
            logger.info(
                "request_completed",
                request_id=log.request_id,
                provider=log.provider,
                model=log.model,
                status=log.status.value,
                tokens=log.total_tokens,
                cost=log.cost,
                latency_ms=log.latency_ms,
                cache_hit=log.cache_hit,
            )
        self._append(self._record(log, "request_end"))

    async def on_request_error(self, log: RequestLog, error: Exception) -> None:
        if self.console:
            logger.error(
                "request_failed",
                request_id=log.request_id,
                provider=log.provider,
                model=log.model,
                error=log.error_type,
                detail=log.error_message,
                latency_ms=log.latency_ms,
            )
        self._append(self._record(log, "request_error"))

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __del__(self) -> None:
        self.close()
