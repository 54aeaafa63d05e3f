"""Per-vendor model listing fetchers."""

from typing import Type

from promptgate.config import ProviderSettings
from promptgate.exceptions import ConfigurationError
from promptgate.transport import HttpTransport

from .base import BaseFetcher
from .openai import OpenAIFetcher
from .claude import ClaudeFetcher
from .gemini import GeminiFetcher
from .grok import GrokFetcher

FETCHERS: dict[str, Type[BaseFetcher]] = {
    "openai": OpenAIFetcher,
    "claude": ClaudeFetcher,
    "gemini": GeminiFetcher,
    "grok": GrokFetcher,
}


def get_fetcher(name: str, settings: ProviderSettings, transport: HttpTransport) -> BaseFetcher:
    """Create the fetcher for a provider.

    Raises:
        ConfigurationError: If no fetcher exists for the provider
    """
    if name not in FETCHERS:
        raise ConfigurationError(f"No model fetcher for provider '{name}'")
    return FETCHERS[name](settings, transport)


__all__ = [
    "BaseFetcher",
    "OpenAIFetcher",
    "ClaudeFetcher",
    "GeminiFetcher",
    "GrokFetcher",
    "FETCHERS",
    "get_fetcher",
]
