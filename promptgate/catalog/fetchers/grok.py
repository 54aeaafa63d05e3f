"""xAI Grok model listing fetcher."""

from typing import Any, Optional

from promptgate.types import ModelInfo

from .base import BaseFetcher, collect_features, first_match, split_version


FEATURES = [
    (("grok-3", "grok-beta"), ["function_calling"]),
    (("beta",), ["real_time_data", "x_platform_integration"]),
    (("vision",), ["vision"]),
]

DESCRIPTIONS = [
    (("grok-beta",), "Grok Beta model with real-time data access and X platform integration"),
    (("grok-3-mini-fast",), "Fastest Grok 3 mini model optimized for speed"),
    (("grok-3-mini",), "Compact Grok 3 model with reasoning capabilities"),
    (("grok-3-fast",), "Fast Grok 3 model optimized for quick responses"),
    (("grok-3",), "Advanced Grok 3 model with reasoning capabilities"),
    (("grok-2",), "Grok 2 model with enhanced capabilities"),
    (("vision",), "Grok model with vision capabilities"),
]

DEFAULT_TOKENS = 131072


def _is_full_grok3(model_id: str) -> bool:
    return "grok-3" in model_id and "fast" not in model_id and "mini" not in model_id


class GrokFetcher(BaseFetcher):
    """Fetch ``GET /models`` from xAI."""

    provider_name = "grok"

    def _headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.settings.api_key}"}
        headers.update(self.settings.headers)
        return headers

    def infer_features(self, model_id: str) -> list[str]:
        features = collect_features(model_id, FEATURES)
        if "grok-3" in model_id and "fast" not in model_id:
            features.append("reasoning")
        return features

    @staticmethod
    def _version(model_id: str) -> Optional[str]:
        _, version = split_version(model_id)
        if version is None and "beta" in model_id:
            return "beta"
        return version

    def parse_model(self, data: dict[str, Any]) -> ModelInfo:
        model_id = data["id"]
        base_model_id, _ = split_version(model_id)
        return ModelInfo(
            id=model_id,
            name=model_id,
            provider=self.provider_name,
            type="vision" if "vision" in model_id else "text",
            features=self.infer_features(model_id),
            max_tokens=DEFAULT_TOKENS,
            context_window=1000000 if _is_full_grok3(model_id) else DEFAULT_TOKENS,
            description=first_match(model_id, DESCRIPTIONS, "xAI Grok language model"),
            created_at=data.get("created"),
            supported_methods=["chat.completions"],
            base_model_id=base_model_id,
            version=self._version(model_id),
        )
