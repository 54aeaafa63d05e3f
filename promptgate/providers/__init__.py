"""Provider adapters for promptgate."""

from .base import PreparedRequest, ProviderAdapter
from .registry import AdapterRegistry, register_adapter, get_adapter
from .factory import ProviderFactory

# Import adapters to auto-register them
from .openai import OPENAI_ADAPTER
from .claude import CLAUDE_ADAPTER
from .gemini import GEMINI_ADAPTER
from .grok import GROK_ADAPTER

__all__ = [
    "PreparedRequest",
    "ProviderAdapter",
    "AdapterRegistry",
    "register_adapter",
    "get_adapter",
    "ProviderFactory",
    # Adapters
    "OPENAI_ADAPTER",
    "CLAUDE_ADAPTER",
    "GEMINI_ADAPTER",
    "GROK_ADAPTER",
]
