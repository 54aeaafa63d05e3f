"""promptgate - Provider-agnostic generative AI gateway with presets, caching and cost tracking."""

__version__ = "0.1.0"

from promptgate.gateway import Gateway
from promptgate.builder import RequestBuilder
from promptgate.dispatcher import AsyncDispatcher
from promptgate.config import GatewayConfig, load_config
from promptgate.types import (
    CanonicalRequest,
    CanonicalResponse,
    ResolvedRequest,
    ModelInfo,
    ModelPricing,
    Preset,
)
from promptgate.exceptions import (
    PromptGateError,
    ConfigurationError,
    PresetNotFoundError,
    InvalidOptionError,
    ProviderError,
    AuthenticationError,
    RateLimitError,
    BadRequestError,
    ServiceUnavailableError,
)

__all__ = [
    # Version
    "__version__",
    # Gateway
    "Gateway",
    "RequestBuilder",
    "AsyncDispatcher",
    # Config
    "GatewayConfig",
    "load_config",
    # Types
    "CanonicalRequest",
    "CanonicalResponse",
    "ResolvedRequest",
    "ModelInfo",
    "ModelPricing",
    "Preset",
    # Exceptions
    "PromptGateError",
    "ConfigurationError",
    "PresetNotFoundError",
    "InvalidOptionError",
    "ProviderError",
    "AuthenticationError",
    "RateLimitError",
    "BadRequestError",
    "ServiceUnavailableError",
]
