"""Google Gemini model listing fetcher."""

import re
from typing import Any, Optional

from promptgate.types import ModelInfo

from .base import BaseFetcher, collect_features, first_match, split_version


FEATURES = [
    (("2.5", "2.0"), ["vision", "grounding"]),
    (("pro",), ["reasoning"]),
]

CONTEXT_WINDOWS = [
    (("2.5", "2.0", "1.5"), 1000000),
]

DESCRIPTIONS = [
    (("2.5-pro",), "Most capable Gemini model with advanced reasoning"),
    (("2.5-flash",), "Fast Gemini model optimized for speed and efficiency"),
    (("2.0-flash",), "Gemini 2.0 Flash model with multimodal capabilities"),
    (("pro",), "Professional-grade Gemini model"),
    (("flash",), "Fast Gemini model"),
]

NUMERIC_VERSION = re.compile(r"(\d+\.\d+)")


def strip_models_prefix(name: str) -> str:
    return name[len("models/"):] if name.startswith("models/") else name


class GeminiFetcher(BaseFetcher):
    """Fetch ``GET /models`` from the Gemini API.

    The listing reports real token limits, so heuristics only fill in what
    the response leaves out.
    """

    provider_name = "gemini"
    list_key = "models"

    def _params(self) -> dict[str, str]:
        return {"key": self.settings.api_key or ""}

    def infer_features(self, model_id: str, methods: list[str]) -> list[str]:
        features = collect_features(
            model_id, FEATURES, base=["streaming", "function_calling", "structured_output"]
        )
        if "generateContent" in methods:
            features.append("content_generation")
        return features

    @staticmethod
    def _version(model_id: str) -> Optional[str]:
        _, version = split_version(model_id)
        if version:
            return version
        match = NUMERIC_VERSION.search(model_id)
        return match.group(1) if match else None

    async def fetch_model(self, model_id: str) -> Optional[ModelInfo]:
        return await super().fetch_model(strip_models_prefix(model_id))

    def parse_model(self, data: dict[str, Any]) -> ModelInfo:
        model_id = strip_models_prefix(data["name"])
        if not model_id:
            raise ValueError("model entry has no name")
        methods = list(data.get("supportedGenerationMethods") or ["generateContent"])
        base_model_id, _ = split_version(model_id)
        return ModelInfo(
            id=model_id,
            name=data.get("displayName") or model_id,
            provider=self.provider_name,
            type="vision" if ("vision" in model_id or "image" in model_id) else "text",
            features=self.infer_features(model_id, methods),
            max_tokens=data.get("outputTokenLimit") or 8192,
            context_window=data.get("inputTokenLimit") or first_match(model_id, CONTEXT_WINDOWS, 32000),
            description=data.get("description") or first_match(model_id, DESCRIPTIONS, "Google Gemini language model"),
            supported_methods=methods,
            base_model_id=data.get("baseModelId") or base_model_id,
            version=data.get("version") or self._version(model_id),
        )
