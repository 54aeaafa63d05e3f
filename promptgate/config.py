"""Configuration management for promptgate."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


DEFAULT_OPTIONS: dict[str, Any] = {
    "temperature": 0.7,
    "top_p": 0.95,
    "max_tokens": 2000,
    "presence_penalty": 0,
    "frequency_penalty": 0,
}

# provider -> (base_url, env vars checked in order)
_PROVIDER_DEFAULTS: dict[str, tuple[str, tuple[str, ...]]] = {
    "openai": ("https://api.openai.com/v1", ("OPENAI_API_KEY",)),
    "claude": ("https://api.anthropic.com/v1", ("CLAUDE_API_KEY", "ANTHROPIC_API_KEY")),
    "gemini": (
        "https://generativelanguage.googleapis.com/v1beta",
        ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    ),
    "grok": ("https://api.x.ai/v1", ("GROK_API_KEY", "XAI_API_KEY")),
}

_PROVIDER_HEADERS: dict[str, dict[str, str]] = {
    "claude": {"anthropic-version": "2023-06-01"},
}


@dataclass
class ProviderSettings:
    """Connection settings for one vendor."""
    name: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    models_endpoint: Optional[str] = "/models"
    timeout: Optional[float] = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and bool(self.base_url)

    def endpoint(self, path: str) -> str:
        return f"{(self.base_url or '').rstrip('/')}/{path.lstrip('/')}"


@dataclass
class DefaultsSettings:
    """Values used when neither the request nor the preset sets them."""
    provider: str = "openai"
    model: str = "gpt-4.1-mini"
    preset: str = "default"
    timeout: float = 30.0
    options: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_OPTIONS))


@dataclass
class CacheSettings:
    """Response cache configuration."""
    enabled: bool = True
    ttl: int = 3600
    backend: str = "memory"  # memory, redis
    redis_url: Optional[str] = None
    prefix: str = "genai_cache"
    max_size: Optional[int] = None


@dataclass
class PricingSettings:
    """Currency conversion and rounding for cost figures."""
    currency: str = "USD"
    exchange_rate: float = 1.0
    decimal_places: int = 6


@dataclass
class LoggingSettings:
    """Request log sink configuration."""
    enabled: bool = True
    level: str = "INFO"
    file_path: Optional[str] = None
    max_prompt_length: int = 1000


@dataclass
class PathsSettings:
    """Locations of presets and the model catalog."""
    root: str = "."
    presets_dir: str = "presets"
    models_file: str = "models.yaml"


@dataclass
class GatewayConfig:
    """Full gateway configuration."""
    defaults: DefaultsSettings = field(default_factory=DefaultsSettings)
    providers: dict[str, ProviderSettings] = field(default_factory=dict)
    cache: CacheSettings = field(default_factory=CacheSettings)
    pricing: PricingSettings = field(default_factory=PricingSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    paths: PathsSettings = field(default_factory=PathsSettings)

    def provider(self, name: str) -> Optional[ProviderSettings]:
        return self.providers.get(name)

    def timeout_for(self, name: str) -> float:
        """Request timeout for a provider, falling back to ``defaults.timeout``."""
        settings = self.providers.get(name)
        if settings and settings.timeout:
            return float(settings.timeout)
        return float(self.defaults.timeout)


def _resolve_env_vars(value: Any) -> Any:
    """Resolve environment variables in configuration values.

    Supports format: os.environ/VAR_NAME or ${VAR_NAME}

    Args:
        value: Configuration value

    Returns:
        Resolved value
    """
    if isinstance(value, str):
        if value.startswith("os.environ/"):
            return os.environ.get(value[len("os.environ/"):])
        elif value.startswith("${") and value.endswith("}"):
            return os.environ.get(value[2:-1])
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(v) for v in value]
    return value


def _env_key(names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


def default_providers() -> dict[str, ProviderSettings]:
    """Built-in provider settings, with API keys read from the environment."""
    providers = {}
    for name, (base_url, env_names) in _PROVIDER_DEFAULTS.items():
        providers[name] = ProviderSettings(
            name=name,
            api_key=_env_key(env_names),
            base_url=base_url,
            headers=dict(_PROVIDER_HEADERS.get(name, {})),
        )
    return providers


def _parse_provider(name: str, data: dict[str, Any], base: Optional[ProviderSettings]) -> ProviderSettings:
    settings = base or ProviderSettings(name=name, base_url=None)
    headers = dict(settings.headers)
    headers.update(data.get("headers") or {})
    return ProviderSettings(
        name=name,
        api_key=data.get("api_key", settings.api_key),
        base_url=data.get("base_url", settings.base_url),
        models_endpoint=data.get("models_endpoint", settings.models_endpoint),
        timeout=data.get("timeout", settings.timeout),
        headers=headers,
    )


def config_from_dict(data: Optional[dict[str, Any]]) -> GatewayConfig:
    """Build a configuration from a decoded mapping.

    Sections that are absent keep their defaults. Provider entries are
    merged over the built-in provider settings.
    """
    config = GatewayConfig(providers=default_providers())
    if not data:
        return config
    data = _resolve_env_vars(data)

    if "defaults" in data:
        defaults = data["defaults"] or {}
        options = dict(DEFAULT_OPTIONS)
        options.update(defaults.get("options") or {})
        config.defaults = DefaultsSettings(
            provider=defaults.get("provider", "openai"),
            model=defaults.get("model", "gpt-4.1-mini"),
            preset=defaults.get("preset", "default"),
            timeout=defaults.get("timeout", 30.0),
            options=options,
        )

    for name, provider_data in (data.get("providers") or {}).items():
        config.providers[name] = _parse_provider(
            name, provider_data or {}, config.providers.get(name)
        )

    if "cache" in data:
        cache = data["cache"] or {}
        config.cache = CacheSettings(
            enabled=cache.get("enabled", True),
            ttl=cache.get("ttl", 3600),
            backend=cache.get("backend", "memory"),
            redis_url=cache.get("redis_url"),
            prefix=cache.get("prefix", "genai_cache"),
            max_size=cache.get("max_size"),
        )

    if "pricing" in data:
        pricing = data["pricing"] or {}
        config.pricing = PricingSettings(
            currency=pricing.get("currency", "USD"),
            exchange_rate=pricing.get("exchange_rate", 1.0),
            decimal_places=pricing.get("decimal_places", 6),
        )

    if "logging" in data:
        log = data["logging"] or {}
        config.logging = LoggingSettings(
            enabled=log.get("enabled", True),
            level=log.get("level", "INFO"),
            file_path=log.get("file_path"),
            max_prompt_length=log.get("max_prompt_length", 1000),
        )

    if "paths" in data:
        paths = data["paths"] or {}
        config.paths = PathsSettings(
            root=paths.get("root", "."),
            presets_dir=paths.get("presets_dir", "presets"),
            models_file=paths.get("models_file", "models.yaml"),
        )

    return config


def load_config(config_path: Optional[str | Path] = None) -> GatewayConfig:
    """Load configuration from file.

    Args:
        config_path: Path to configuration file. If None, uses default locations.

    Returns:
        Gateway configuration
    """
    if config_path is None:
        search_paths = [
            "promptgate.yaml",
            "config/promptgate.yaml",
        ]
        for path in search_paths:
            if os.path.exists(path):
                config_path = path
                break

    data = None
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)

    return config_from_dict(data)
