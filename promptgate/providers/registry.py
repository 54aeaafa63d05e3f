"""Registry of provider adapters."""

from typing import Optional

from .base import ProviderAdapter


class AdapterRegistry:
    """Registry for provider adapters."""

    _adapters: dict[str, ProviderAdapter] = {}

    @classmethod
    def register(cls, adapter: ProviderAdapter) -> ProviderAdapter:
        """Register an adapter under its name.

        Args:
            adapter: The adapter variant

        Returns:
            The same adapter, so modules can register at definition time
        """
        cls._adapters[adapter.name] = adapter
        return adapter

    @classmethod
    def get(cls, provider_name: str) -> ProviderAdapter:
        """Get an adapter by name.

        Raises:
            KeyError: If the provider is not registered
        """
        if provider_name not in cls._adapters:
            raise KeyError(f"Provider '{provider_name}' is not registered")
        return cls._adapters[provider_name]

    @classmethod
    def find(cls, provider_name: str) -> Optional[ProviderAdapter]:
        return cls._adapters.get(provider_name)

    @classmethod
    def list_providers(cls) -> list[str]:
        return list(cls._adapters.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registered adapters (mainly for testing)."""
        cls._adapters.clear()


def register_adapter(adapter: ProviderAdapter) -> ProviderAdapter:
    return AdapterRegistry.register(adapter)


def get_adapter(provider_name: str) -> ProviderAdapter:
    return AdapterRegistry.get(provider_name)
