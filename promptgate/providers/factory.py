"""Provider factory: pairs a registered adapter with its settings."""

from dataclasses import replace
from typing import Optional

from promptgate.config import GatewayConfig, ProviderSettings
from promptgate.exceptions import ConfigurationError

from .base import ProviderAdapter
from .registry import AdapterRegistry


class ProviderFactory:
    """Resolve provider names to ``(adapter, settings)`` pairs."""

    def __init__(self, config: GatewayConfig) -> None:
        self.config = config

    def settings_for(self, name: str) -> Optional[ProviderSettings]:
        """Settings for a provider, with the adapter's base URL filled in."""
        settings = self.config.providers.get(name)
        adapter = AdapterRegistry.find(name)
        if settings is None:
            return None
        if not settings.base_url and adapter is not None and adapter.default_base_url:
            settings = replace(settings, base_url=adapter.default_base_url)
        if settings.timeout is None:
            settings = replace(settings, timeout=self.config.timeout_for(name))
        return settings

    def is_available(self, name: str) -> bool:
        """True when the provider is registered and has credentials and a base URL."""
        if AdapterRegistry.find(name) is None:
            return False
        settings = self.settings_for(name)
        return settings is not None and settings.is_configured

    def available_providers(self) -> list[str]:
        return [name for name in AdapterRegistry.list_providers() if self.is_available(name)]

    def resolve(self, name: str) -> tuple[ProviderAdapter, ProviderSettings]:
        """Resolve a provider.

        Args:
            name: Provider identifier

        Returns:
            Tuple of adapter and settings

        Raises:
            ConfigurationError: Unknown provider or missing credentials
        """
        adapter = AdapterRegistry.find(name)
        if adapter is None:
            known = ", ".join(sorted(AdapterRegistry.list_providers())) or "none"
            raise ConfigurationError(f"Unknown provider '{name}' (registered: {known})")

        settings = self.settings_for(name)
        if settings is None:
            raise ConfigurationError(f"Provider '{name}' is not configured")
        if not settings.api_key:
            raise ConfigurationError(f"Provider '{name}' has no API key configured")
        if not settings.base_url:
            raise ConfigurationError(f"Provider '{name}' has no base URL configured")
        return adapter, settings
