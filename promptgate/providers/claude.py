"""Anthropic Claude messages adapter."""

from typing import Any

from promptgate.config import ProviderSettings
from promptgate.types import CanonicalResponse, ResolvedRequest, build_usage

from .base import (
    PreparedRequest,
    ProviderAdapter,
    as_dict,
    as_int,
    pick_options,
    stop_list,
    vendor_error,
)
from .registry import register_adapter


ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 4096

CLAUDE_OPTIONS = ("temperature", "top_p", "top_k")


def transform_options(options: dict[str, Any]) -> dict[str, Any]:
    """Map canonical options to messages API parameters.

    ``max_tokens`` is mandatory for this API and is always present.
    """
    params = pick_options(options, CLAUDE_OPTIONS)
    max_tokens = options.get("max_tokens") or options.get("max_completion_tokens")
    params["max_tokens"] = int(max_tokens) if max_tokens else DEFAULT_MAX_TOKENS
    stop = stop_list(options)
    if stop:
        params["stop_sequences"] = stop
    return params


def prepare_messages(request: ResolvedRequest, settings: ProviderSettings) -> PreparedRequest:
    payload: dict[str, Any] = {
        "model": request.model,
        "messages": [{"role": "user", "content": request.prompt}],
    }
    if request.system_prompt:
        payload["system"] = request.system_prompt
    payload.update(transform_options(request.options))

    headers = {
        "x-api-key": settings.api_key or "",
        "anthropic-version": ANTHROPIC_VERSION,
        "Content-Type": "application/json",
    }
    headers.update(settings.headers)

    return PreparedRequest(
        url=settings.endpoint("messages"),
        headers=headers,
        payload=payload,
    )


def parse_messages(raw: dict[str, Any], model_id: str, elapsed_ms: int) -> CanonicalResponse:
    """Normalize a messages API body.

    Cache reads and cache writes are billed as input, so both are folded
    into ``input_tokens`` to line up with OpenAI's prompt token count.
    """
    error = vendor_error(raw)
    content = ""

    blocks = raw.get("content")
    if error is None:
        if not isinstance(blocks, list):
            error = "Response missing 'content'"
        else:
            texts = [
                block["text"]
                for block in blocks
                if isinstance(block, dict) and block.get("type", "text") == "text"
                and isinstance(block.get("text"), str)
            ]
            if texts:
                content = "".join(texts)
            elif raw.get("stop_reason") != "tool_use":
                error = "Response contained no text content"

    usage = as_dict(raw.get("usage"))
    cache_read = as_int(usage.get("cache_read_input_tokens"))
    cache_write = as_int(usage.get("cache_creation_input_tokens"))

    return CanonicalResponse(
        content=content,
        usage=build_usage(
            as_int(usage.get("input_tokens")) + cache_read + cache_write,
            as_int(usage.get("output_tokens")),
            cached_tokens=cache_read,
        ),
        meta=raw,
        response_time_ms=max(0, int(elapsed_ms)),
        error=error,
    )


CLAUDE_ADAPTER = register_adapter(
    ProviderAdapter(
        name="claude",
        prepare=prepare_messages,
        parse=parse_messages,
        default_base_url="https://api.anthropic.com/v1",
    )
)
