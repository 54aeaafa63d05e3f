"""OpenAI chat completions adapter."""

from typing import Any

from promptgate.config import ProviderSettings
from promptgate.types import CanonicalResponse, ResolvedRequest, build_usage

from .base import (
    PreparedRequest,
    ProviderAdapter,
    as_dict,
    as_int,
    pick_options,
    vendor_error,
)
from .registry import register_adapter


OPENAI_OPTIONS = (
    "temperature",
    "max_tokens",
    "max_completion_tokens",
    "top_p",
    "frequency_penalty",
    "presence_penalty",
    "stop",
    "seed",
    "response_format",
)


def build_messages(request: ResolvedRequest) -> list[dict[str, str]]:
    messages = []
    if request.system_prompt:
        messages.append({"role": "system", "content": request.system_prompt})
    messages.append({"role": "user", "content": request.prompt})
    return messages


def transform_options(options: dict[str, Any]) -> dict[str, Any]:
    """Map canonical options to chat completion parameters."""
    return pick_options(options, OPENAI_OPTIONS)


def prepare_chat_completion(request: ResolvedRequest, settings: ProviderSettings) -> PreparedRequest:
    """Build a ``POST /chat/completions`` request.

    Shared by every OpenAI compatible vendor.
    """
    payload: dict[str, Any] = {
        "model": request.model,
        "messages": build_messages(request),
    }
    payload.update(transform_options(request.options))

    headers = {
        "Authorization": f"Bearer {settings.api_key}",
        "Content-Type": "application/json",
    }
    headers.update(settings.headers)

    return PreparedRequest(
        url=settings.endpoint("chat/completions"),
        headers=headers,
        payload=payload,
    )


def parse_chat_completion(raw: dict[str, Any], model_id: str, elapsed_ms: int) -> CanonicalResponse:
    """Normalize a chat completion body.

    Missing fields never raise; they yield empty content and an ``error``
    annotation.
    """
    error = vendor_error(raw)
    content = ""

    choices = raw.get("choices")
    if error is None:
        if not isinstance(choices, list) or not choices:
            error = "Response missing 'choices'"
        else:
            message = as_dict(as_dict(choices[0]).get("message"))
            text = message.get("content")
            if isinstance(text, str):
                content = text
            elif message.get("refusal"):
                error = f"Refused: {message['refusal']}"
            elif not message.get("tool_calls"):
                error = "Response missing message content"

    usage = as_dict(raw.get("usage"))
    prompt_details = as_dict(usage.get("prompt_tokens_details"))
    completion_details = as_dict(usage.get("completion_tokens_details"))
    total = usage.get("total_tokens")

    return CanonicalResponse(
        content=content,
        usage=build_usage(
            as_int(usage.get("prompt_tokens")),
            as_int(usage.get("completion_tokens")),
            cached_tokens=as_int(prompt_details.get("cached_tokens")),
            reasoning_tokens=as_int(completion_details.get("reasoning_tokens")),
            total_tokens=as_int(total) if total is not None else None,
        ),
        meta=raw,
        response_time_ms=max(0, int(elapsed_ms)),
        error=error,
    )


OPENAI_ADAPTER = register_adapter(
    ProviderAdapter(
        name="openai",
        prepare=prepare_chat_completion,
        parse=parse_chat_completion,
        default_base_url="https://api.openai.com/v1",
    )
)
