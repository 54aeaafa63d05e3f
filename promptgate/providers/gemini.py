"""Google Gemini generateContent adapter."""

from typing import Any

from promptgate.config import ProviderSettings
from promptgate.types import CanonicalResponse, ResolvedRequest, build_usage

from .base import PreparedRequest, ProviderAdapter, as_dict, as_int, stop_list, vendor_error
from .registry import register_adapter


# canonical option -> generationConfig key
GENERATION_CONFIG_MAP = {
    "temperature": "temperature",
    "top_p": "topP",
    "top_k": "topK",
    "candidate_count": "candidateCount",
}

BLOCKING_FINISH_REASONS = {"SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"}


def transform_options(options: dict[str, Any]) -> dict[str, Any]:
    """Build the ``generationConfig`` object."""
    config: dict[str, Any] = {}
    for key, target in GENERATION_CONFIG_MAP.items():
        if options.get(key) is not None:
            config[target] = options[key]
    max_tokens = options.get("max_tokens") or options.get("max_completion_tokens")
    if max_tokens:
        config["maxOutputTokens"] = int(max_tokens)
    stop = stop_list(options)
    if stop:
        config["stopSequences"] = stop
    return config


def _model_path(model: str) -> str:
    return model[len("models/"):] if model.startswith("models/") else model


def prepare_generate_content(request: ResolvedRequest, settings: ProviderSettings) -> PreparedRequest:
    payload: dict[str, Any] = {
        "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
    }
    if request.system_prompt:
        payload["systemInstruction"] = {"parts": [{"text": request.system_prompt}]}
    generation_config = transform_options(request.options)
    if generation_config:
        payload["generationConfig"] = generation_config

    headers = {"Content-Type": "application/json"}
    headers.update(settings.headers)

    return PreparedRequest(
        url=settings.endpoint(f"models/{_model_path(request.model)}:generateContent"),
        headers=headers,
        payload=payload,
        params={"key": settings.api_key or ""},
    )


def parse_generate_content(raw: dict[str, Any], model_id: str, elapsed_ms: int) -> CanonicalResponse:
    """Normalize a generateContent body."""
    error = vendor_error(raw)
    content = ""

    candidates = raw.get("candidates")
    if error is None:
        feedback = as_dict(raw.get("promptFeedback"))
        if not isinstance(candidates, list) or not candidates:
            if feedback.get("blockReason"):
                error = f"Prompt blocked: {feedback['blockReason']}"
            else:
                error = "Response missing 'candidates'"
        else:
            candidate = as_dict(candidates[0])
            parts = as_dict(candidate.get("content")).get("parts")
            texts = []
            if isinstance(parts, list):
                texts = [
                    part["text"]
                    for part in parts
                    if isinstance(part, dict) and isinstance(part.get("text"), str)
                    and not part.get("thought")
                ]
            if texts:
                content = "".join(texts)
            elif candidate.get("finishReason") in BLOCKING_FINISH_REASONS:
                error = f"Response blocked: {candidate['finishReason']}"
            else:
                error = "Response contained no text parts"

    usage = as_dict(raw.get("usageMetadata"))
    thoughts = as_int(usage.get("thoughtsTokenCount"))
    total = usage.get("totalTokenCount")

    return CanonicalResponse(
        content=content,
        usage=build_usage(
            as_int(usage.get("promptTokenCount")),
            as_int(usage.get("candidatesTokenCount")) + thoughts,
            cached_tokens=as_int(usage.get("cachedContentTokenCount")),
            reasoning_tokens=thoughts,
            total_tokens=as_int(total) if total is not None else None,
        ),
        meta=raw,
        response_time_ms=max(0, int(elapsed_ms)),
        error=error,
    )


GEMINI_ADAPTER = register_adapter(
    ProviderAdapter(
        name="gemini",
        prepare=prepare_generate_content,
        parse=parse_generate_content,
        default_base_url="https://generativelanguage.googleapis.com/v1beta",
    )
)
