"""Anthropic model listing fetcher."""

from datetime import datetime
from typing import Any, Optional

from promptgate.providers.claude import ANTHROPIC_VERSION
from promptgate.types import ModelInfo

from .base import COMPACT_DATE_SUFFIX, BaseFetcher, collect_features, first_match, split_version


GENERATION_FEATURES = [
    (("claude-4", "sonnet-4", "opus-4"), ["vision", "function_calling", "structured_output", "reasoning"]),
    (("3-5", "3.5"), ["vision", "function_calling", "structured_output"]),
    (("claude-3",), ["vision", "function_calling"]),
]

TIER_FEATURES = [
    (("sonnet", "opus"), ["advanced_reasoning"]),
    (("haiku",), ["fast_response"]),
]

MAX_TOKENS = [
    (("sonnet-4",), 64000),
    (("opus-4",), 32000),
    (("3-5", "3.5"), 8192),
]

DESCRIPTIONS = [
    (("opus-4",), "Most capable Claude 4 model with superior reasoning capabilities"),
    (("sonnet-4",), "High-performance Claude 4 model with exceptional reasoning and efficiency"),
    (("sonnet-3-7",), "High-performance Claude model with early extended thinking"),
    (("sonnet-3-5",), "Intelligent Claude model with high capability"),
    (("haiku-3-5",), "Fast Claude model optimized for speed"),
    (("opus-3",), "Most capable Claude 3 model for complex tasks"),
    (("sonnet-3",), "Balanced Claude 3 model for general use"),
    (("haiku-3",), "Fast and compact Claude 3 model"),
]

CONTEXT_WINDOW = 200000


def _timestamp(value: Any) -> Optional[int]:
    if not value:
        return None
    try:
        return int(datetime.fromisoformat(str(value).replace("Z", "+00:00")).timestamp())
    except ValueError:
        return None


class ClaudeFetcher(BaseFetcher):
    """Fetch ``GET /models`` from Anthropic."""

    provider_name = "claude"

    def _headers(self) -> dict[str, str]:
        headers = {
            "x-api-key": self.settings.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        headers.update(self.settings.headers)
        return headers

    def infer_features(self, model_id: str) -> list[str]:
        # only the newest matching generation contributes
        generation = first_match(model_id, GENERATION_FEATURES, [])
        return collect_features(model_id, TIER_FEATURES, base=["streaming", *generation])

    def parse_model(self, data: dict[str, Any]) -> ModelInfo:
        model_id = data["id"]
        base_model_id, version = split_version(model_id, COMPACT_DATE_SUFFIX)
        return ModelInfo(
            id=model_id,
            name=data.get("display_name") or model_id,
            provider=self.provider_name,
            type="text",
            features=self.infer_features(model_id),
            max_tokens=first_match(model_id, MAX_TOKENS, 4096),
            context_window=CONTEXT_WINDOW,
            description=first_match(model_id, DESCRIPTIONS, "Anthropic Claude language model"),
            created_at=_timestamp(data.get("created_at")),
            supported_methods=["messages"],
            base_model_id=base_model_id,
            version=version,
        )
