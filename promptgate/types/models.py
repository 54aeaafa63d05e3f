"""Model catalog and preset type definitions."""

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class ModelPricing(BaseModel):
    """Pricing in USD per 1M tokens."""

    input: float = Field(ge=0)
    output: float = Field(ge=0)
    cached_input: Optional[float] = Field(default=None, ge=0)

    @property
    def effective_cached_input(self) -> float:
        """Rate applied to cached tokens; no discount when unset."""
        return self.input if self.cached_input is None else self.cached_input

    def to_dict(self) -> dict[str, float]:
        data = {"input": self.input, "output": self.output}
        if self.cached_input is not None:
            data["cached_input"] = self.cached_input
        return data


class ModelInfo(BaseModel):
    """Catalog entry describing a single model."""

    id: str
    provider: str
    name: Optional[str] = None
    type: str = "text"
    features: frozenset[str] = frozenset()
    max_tokens: Optional[int] = Field(default=None, ge=0)
    context_window: Optional[int] = Field(default=None, ge=0)
    pricing: Optional[ModelPricing] = None
    limits: dict[str, int] = Field(default_factory=dict)
    supported_methods: list[str] = Field(default_factory=list)
    base_model_id: Optional[str] = None
    version: Optional[str] = None
    created_at: Optional[int] = None
    description: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("features", mode="before")
    @classmethod
    def _coerce_features(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, (list, tuple, set)):
            return frozenset(str(v) for v in value)
        return value

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:
        # unquoted YAML dates load as datetime.date
        return None if value is None else str(value)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def has_feature(self, feature: str) -> bool:
        return feature in self.features

    @classmethod
    def from_dict(cls, provider: str, model_id: str, data: dict[str, Any]) -> "ModelInfo":
        """Build from a catalog YAML entry.

        Args:
            provider: Provider section the entry lives under
            model_id: Key of the entry within the section
            data: Entry body

        Returns:
            ModelInfo instance
        """
        limits = dict(data.get("limits") or {})
        pricing = data.get("pricing")
        return cls(
            id=model_id,
            provider=data.get("provider") or provider,
            name=data.get("name"),
            type=data.get("type") or "text",
            features=data.get("features") or [],
            max_tokens=data.get("max_tokens", limits.get("max_tokens")),
            context_window=data.get("context_window", limits.get("context_window")),
            pricing=ModelPricing(**pricing) if pricing else None,
            limits=limits,
            supported_methods=list(data.get("supported_methods") or []),
            base_model_id=data.get("base_model_id"),
            version=data.get("version"),
            created_at=data.get("created_at"),
            description=data.get("description"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Render as a catalog YAML entry."""
        limits = dict(self.limits)
        if self.max_tokens is not None:
            limits["max_tokens"] = self.max_tokens
        if self.context_window is not None:
            limits["context_window"] = self.context_window

        data: dict[str, Any] = {
            "provider": self.provider,
            "model": self.id,
            "type": self.type,
            "features": sorted(self.features),
        }
        if self.name:
            data["name"] = self.name
        if self.pricing is not None:
            data["pricing"] = self.pricing.to_dict()
        if limits:
            data["limits"] = limits
        if self.supported_methods:
            data["supported_methods"] = list(self.supported_methods)
        for key in ("base_model_id", "version", "created_at", "description"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    def summary(self) -> str:
        parts = [f"{self.provider}/{self.id}", self.type]
        if self.context_window:
            parts.append(f"ctx={self.context_window}")
        if self.pricing:
            parts.append(f"${self.pricing.input}/${self.pricing.output} per 1M")
        return " ".join(parts)


class Preset(BaseModel):
    """Named bundle of provider, model, system prompt and options."""

    name: str
    provider: Optional[str] = None
    model: Optional[str] = None
    system_prompt: Optional[str] = None
    options: dict[str, Any] = Field(default_factory=dict)
    version: int = Field(default=1, ge=1)
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
