"""Request type definitions."""

from typing import Any, Optional
from pydantic import BaseModel, Field


class CanonicalRequest(BaseModel):
    """Provider-neutral request as assembled by the builder.

    Everything except ``prompt`` is optional; missing values are filled in
    from the preset and the global defaults during resolution.
    """

    prompt: str = ""
    system_prompt: Optional[str] = None
    model: Optional[str] = None
    provider: Optional[str] = None
    preset: Optional[str] = None
    options: dict[str, Any] = Field(default_factory=dict)
    vars: dict[str, str] = Field(default_factory=dict)
    stream: bool = False

    model_config = {"frozen": True}

    def to_external(self) -> dict[str, Any]:
        """Render the canonical JSON shape."""
        data: dict[str, Any] = {"prompt": self.prompt}
        if self.system_prompt is not None:
            data["systemPrompt"] = self.system_prompt
        if self.model is not None:
            data["model"] = self.model
        if self.provider is not None:
            data["provider"] = self.provider
        data["options"] = dict(self.options)
        data["vars"] = dict(self.vars)
        data["stream"] = self.stream
        return data


class ResolvedRequest(BaseModel):
    """Fully resolved request, ready for dispatch.

    Produced by :class:`promptgate.resolver.RequestResolver`; provider and
    model are always set and variables have already been substituted into
    the prompt and system prompt.
    """

    provider: str
    model: str
    prompt: str
    system_prompt: Optional[str] = None
    options: dict[str, Any] = Field(default_factory=dict)
    vars: dict[str, str] = Field(default_factory=dict)
    stream: bool = False
    preset: Optional[str] = None

    model_config = {"frozen": True}
