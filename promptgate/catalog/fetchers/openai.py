"""OpenAI model listing fetcher."""

from typing import Any

from promptgate.types import ModelInfo

from .base import BaseFetcher, collect_features, first_match, split_version


MODEL_TYPES = [
    (("dall-e", "image"), "image"),
    (("whisper", "tts"), "audio"),
    (("embedding",), "embedding"),
]

FEATURES = [
    (("gpt-4", "gpt-3.5"), ["function_calling", "system_message"]),
    (("gpt-4o", "gpt-4.1"), ["vision", "structured_output"]),
    (("o1", "o3", "o4"), ["reasoning"]),
]

# Capability sets that replace the default for non-chat models
EXCLUSIVE_FEATURES = [
    (("dall-e",), ["image_generation"]),
    (("whisper",), ["transcription"]),
    (("tts",), ["text_to_speech"]),
]

MAX_TOKENS = [
    (("gpt-4.1", "gpt-4o"), 16384),
    (("o3",), 100000),
    (("o4-mini",), 65536),
    (("gpt-4",), 8192),
    (("gpt-3.5",), 4096),
]

CONTEXT_WINDOWS = [
    (("gpt-4.1", "gpt-4o"), 1000000),
    (("o3",), 200000),
    (("o4-mini",), 128000),
    (("gpt-4",), 128000),
    (("gpt-3.5-turbo-16k",), 16384),
    (("gpt-3.5",), 4096),
]

DESCRIPTIONS = [
    (("gpt-4.1",), "Latest GPT-4.1 model with enhanced capabilities"),
    (("gpt-4o",), "GPT-4 Omni model with multimodal capabilities"),
    (("o3",), "Advanced reasoning model"),
    (("dall-e-3",), "Latest image generation model"),
    (("whisper",), "Speech-to-text model"),
    (("tts",), "Text-to-speech model"),
]


class OpenAIFetcher(BaseFetcher):
    """Fetch ``GET /models`` from OpenAI."""

    provider_name = "openai"

    def _headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.settings.api_key}"}
        headers.update(self.settings.headers)
        return headers

    def infer_features(self, model_id: str) -> list[str]:
        exclusive = first_match(model_id, EXCLUSIVE_FEATURES, None)
        if exclusive is not None:
            return list(exclusive)
        return collect_features(model_id, FEATURES)

    def parse_model(self, data: dict[str, Any]) -> ModelInfo:
        model_id = data["id"]
        base_model_id, version = split_version(model_id)
        return ModelInfo(
            id=model_id,
            name=model_id,
            provider=self.provider_name,
            type=first_match(model_id, MODEL_TYPES, "text"),
            features=data.get("features") or self.infer_features(model_id),
            max_tokens=data.get("max_tokens") or first_match(model_id, MAX_TOKENS, None),
            context_window=first_match(model_id, CONTEXT_WINDOWS, None),
            description=first_match(model_id, DESCRIPTIONS, "OpenAI language model"),
            created_at=data.get("created"),
            supported_methods=data.get("supported_methods") or ["chat.completions"],
            base_model_id=base_model_id,
            version=version,
        )
