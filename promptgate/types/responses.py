"""Response type definitions."""

from typing import Any, Optional
from pydantic import BaseModel, Field


USAGE_KEYS = (
    "input_tokens",
    "output_tokens",
    "total_tokens",
    "cached_tokens",
    "reasoning_tokens",
)


def build_usage(
    input_tokens: int = 0,
    output_tokens: int = 0,
    *,
    cached_tokens: int = 0,
    reasoning_tokens: int = 0,
    total_tokens: Optional[int] = None,
) -> dict[str, int]:
    """Build a normalized usage mapping.

    The OpenAI style ``prompt_tokens``/``completion_tokens`` aliases are
    included so callers can read either vocabulary.
    """
    input_tokens = int(input_tokens or 0)
    output_tokens = int(output_tokens or 0)
    if total_tokens is None:
        total_tokens = input_tokens + output_tokens
    return {
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": int(total_tokens),
        "cached_tokens": int(cached_tokens or 0),
        "reasoning_tokens": int(reasoning_tokens or 0),
        "prompt_tokens": input_tokens,
        "completion_tokens": output_tokens,
    }


class CanonicalResponse(BaseModel):
    """Provider-neutral response."""

    content: str = ""
    usage: dict[str, int] = Field(default_factory=build_usage)
    cost: float = Field(default=0.0, ge=0)
    meta: dict[str, Any] = Field(default_factory=dict)
    cached: bool = False
    response_time_ms: int = Field(default=0, ge=0)
    error: Optional[str] = None

    @classmethod
    def error_response(cls, message: str, elapsed_ms: int = 0) -> "CanonicalResponse":
        """Create a response carrying only an error."""
        return cls(content="", cost=0.0, response_time_ms=max(0, int(elapsed_ms)), error=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def input_tokens(self) -> int:
        return self.usage.get("input_tokens", 0)

    @property
    def output_tokens(self) -> int:
        return self.usage.get("output_tokens", 0)

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", self.input_tokens + self.output_tokens)

    def to_external(self) -> dict[str, Any]:
        """Render the canonical JSON shape."""
        data: dict[str, Any] = {
            "content": self.content,
            "usage": dict(self.usage),
            "cost": self.cost,
            "meta": self.meta,
            "cached": self.cached,
            "responseTimeMs": self.response_time_ms,
        }
        if self.error is not None:
            data["error"] = self.error
        return data
