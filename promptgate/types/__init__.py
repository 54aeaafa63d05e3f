"""Type definitions for promptgate."""

from .requests import CanonicalRequest, ResolvedRequest
from .responses import CanonicalResponse, USAGE_KEYS, build_usage
from .models import ModelInfo, ModelPricing, Preset

__all__ = [
    # Requests
    "CanonicalRequest",
    "ResolvedRequest",
    # Responses
    "CanonicalResponse",
    "USAGE_KEYS",
    "build_usage",
    # Catalog
    "ModelInfo",
    "ModelPricing",
    "Preset",
]
