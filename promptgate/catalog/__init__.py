"""Model catalog: YAML repository and vendor fetchers."""

from .repository import ModelRepository, ValidationResult
from .fetchers import BaseFetcher, FETCHERS, get_fetcher

__all__ = [
    "ModelRepository",
    "ValidationResult",
    "BaseFetcher",
    "FETCHERS",
    "get_fetcher",
]
