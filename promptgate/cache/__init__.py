"""Response caching for promptgate."""

from .base import CacheBackend, CacheEntry
from .memory import InMemoryCache
from .redis_cache import RedisCache
from .manager import CacheManager, build_cache_backend, fingerprint, request_tags

__all__ = [
    "CacheBackend",
    "CacheEntry",
    "InMemoryCache",
    "RedisCache",
    "CacheManager",
    "build_cache_backend",
    "fingerprint",
    "request_tags",
]
