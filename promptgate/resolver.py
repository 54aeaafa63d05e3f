"""Resolve builder requests into dispatchable requests.

Field precedence is explicit request value, then preset, then global
defaults. Options are merged key by key in the same order.
"""

import logging
import re
from typing import Any, Optional

from promptgate.config import GatewayConfig
from promptgate.exceptions import ConfigurationError, InvalidOptionError
from promptgate.presets import PresetRepository
from promptgate.types import CanonicalRequest, Preset, ResolvedRequest
from promptgate.utils.templating import substitute

logger = logging.getLogger(__name__)

# OpenAI o-series reasoning models
REASONING_MODEL = re.compile(r"^o\d")
REASONING_UNSUPPORTED = ("temperature", "top_p", "presence_penalty", "frequency_penalty")

# option -> (minimum, maximum)
OPTION_RANGES: dict[str, tuple[float, float]] = {
    "temperature": (0.0, 2.0),
    "top_p": (0.0, 1.0),
    "presence_penalty": (-2.0, 2.0),
    "frequency_penalty": (-2.0, 2.0),
}
POSITIVE_INT_OPTIONS = ("max_tokens", "max_completion_tokens", "top_k")


def is_reasoning_model(provider: str, model: str) -> bool:
    return provider == "openai" and bool(REASONING_MODEL.match(model))


def adjust_options_for_model(provider: str, model: str, options: dict[str, Any]) -> dict[str, Any]:
    """Rewrite options a model family does not accept.

    Reasoning models take ``max_completion_tokens`` instead of
    ``max_tokens`` and reject sampling parameters.
    """
    if not is_reasoning_model(provider, model):
        return options
    adjusted = dict(options)
    if "max_tokens" in adjusted:
        max_tokens = adjusted.pop("max_tokens")
        adjusted.setdefault("max_completion_tokens", max_tokens)
    for key in REASONING_UNSUPPORTED:
        adjusted.pop(key, None)
    return adjusted


def validate_options(options: dict[str, Any]) -> None:
    """Check option ranges.

    Raises:
        InvalidOptionError: If an option is out of range or mistyped
    """
    for key, (low, high) in OPTION_RANGES.items():
        value = options.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidOptionError(key, f"{key} must be a number, got {value!r}")
        if not low <= value <= high:
            raise InvalidOptionError(key, f"{key} must be between {low} and {high}, got {value}")

    for key in POSITIVE_INT_OPTIONS:
        value = options.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidOptionError(key, f"{key} must be a positive integer, got {value!r}")


class RequestResolver:
    """Merge a :class:`CanonicalRequest` with its preset and the defaults."""

    def __init__(self, config: GatewayConfig, presets: Optional[PresetRepository] = None) -> None:
        self.config = config
        self.presets = presets

    def _preset_for(self, request: CanonicalRequest) -> Optional[Preset]:
        if request.preset:
            if self.presets is None:
                raise ConfigurationError(f"Preset '{request.preset}' requested but no preset storage is configured")
            return self.presets.get(request.preset)

        default_name = self.config.defaults.preset
        if default_name and self.presets is not None:
            return self.presets.find(default_name)
        return None

    def resolve(self, request: CanonicalRequest) -> ResolvedRequest:
        """Resolve a request.

        Args:
            request: Request as built by the caller

        Returns:
            ResolvedRequest with provider, model, merged options and
            substituted prompts

        Raises:
            PresetNotFoundError: The named preset does not exist
            InvalidOptionError: A merged option is out of range
            ConfigurationError: The prompt is empty
        """
        if not request.prompt:
            raise ConfigurationError("A prompt is required")

        defaults = self.config.defaults
        preset = self._preset_for(request)

        provider = request.provider or (preset.provider if preset else None) or defaults.provider
        model = request.model or (preset.model if preset else None) or defaults.model
        system_prompt = request.system_prompt
        if system_prompt is None and preset is not None:
            system_prompt = preset.system_prompt

        options: dict[str, Any] = dict(defaults.options)
        if preset is not None:
            options.update(preset.options)
        options.update(request.options)
        options = {k: v for k, v in options.items() if v is not None}

        options = adjust_options_for_model(provider, model, options)
        validate_options(options)

        return ResolvedRequest(
            provider=provider,
            model=model,
            prompt=substitute(request.prompt, request.vars),
            system_prompt=substitute(system_prompt, request.vars),
            options=options,
            vars=dict(request.vars),
            stream=request.stream,
            preset=preset.name if preset else None,
        )
