"""Response cache manager.

Wraps a :class:`CacheBackend` with request fingerprinting, tag based
invalidation and failure isolation: a broken backend turns into cache
misses and skipped writes, never into a failed request.
"""

import hashlib
import json
import logging
from typing import Any, Iterable, Optional

from promptgate.cache.base import CacheBackend, CacheEntry
from promptgate.cache.memory import InMemoryCache
from promptgate.cache.redis_cache import RedisCache
from promptgate.config import CacheSettings
from promptgate.types import CanonicalResponse, ResolvedRequest

logger = logging.getLogger(__name__)

# Transport-level switches that do not change the generated content.
NON_SEMANTIC_OPTIONS = frozenset({"stream", "async", "timeout"})


def fingerprint(
    provider: str,
    model: str,
    prompt: str,
    system_prompt: Optional[str] = None,
    options: Optional[dict[str, Any]] = None,
    vars: Optional[dict[str, Any]] = None,
) -> str:
    """Compute the cache fingerprint of a request.

    Map keys are sorted before hashing, so two requests that differ only in
    the order of their options or variables share a fingerprint.

    Returns:
        Hex encoded SHA-256 digest
    """
    data = {
        "provider": provider,
        "model": model,
        "prompt": prompt,
        "system_prompt": system_prompt,
        "options": {
            k: v for k, v in (options or {}).items() if k not in NON_SEMANTIC_OPTIONS
        },
        "vars": dict(vars or {}),
    }
    json_str = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(json_str.encode()).hexdigest()


def provider_tag(provider: str) -> str:
    return f"provider:{provider}"


def model_tag(model: str) -> str:
    return f"model:{model}"


def provider_model_tag(provider: str, model: str) -> str:
    return f"provider-model:{provider}:{model}"


def request_tags(provider: str, model: str) -> tuple[str, ...]:
    """Invalidation tags for a response from ``provider``/``model``.

    Tags are namespaced, so a model that shares its name with a provider
    never flushes that provider's entries.
    """
    return provider_tag(provider), model_tag(model), provider_model_tag(provider, model)


class CacheManager:
    """Fingerprint keyed response cache."""

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        settings: Optional[CacheSettings] = None,
    ) -> None:
        self.settings = settings or CacheSettings()
        if backend is None:
            backend = InMemoryCache(max_size=self.settings.max_size)
        self.backend = backend
        # tag -> fingerprints, for backends without their own index
        self._tag_index: dict[str, set[str]] = {}
        self.hits = 0
        self.misses = 0
        self.errors = 0

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    @staticmethod
    def fingerprint_for(request: ResolvedRequest) -> str:
        return fingerprint(
            request.provider,
            request.model,
            request.prompt,
            request.system_prompt,
            request.options,
            request.vars,
        )

    def _unindex(self, fp: str) -> None:
        for tag in [t for t, members in self._tag_index.items() if fp in members]:
            members = self._tag_index[tag]
            members.discard(fp)
            if not members:
                del self._tag_index[tag]

    async def get(self, fp: str) -> Optional[CanonicalResponse]:
        """Look up a cached response.

        Returns:
            A copy of the cached response with ``cached=True``, or None
        """
        if not self.enabled:
            return None
        try:
            entry = await self.backend.get(fp)
        except Exception as e:
            self.errors += 1
            self.misses += 1
            logger.warning("Cache get failed for %s: %s", fp[:12], e)
            return None

        if entry is None:
            self.misses += 1
            # evicted or expired behind our back
            self._unindex(fp)
            return None
        self.hits += 1
        return entry.value.model_copy(update={"cached": True})

    async def put(
        self,
        fp: str,
        response: CanonicalResponse,
        ttl: Optional[int] = None,
        tags: Iterable[str] = (),
    ) -> bool:
        """Store a response.

        Returns:
            True if the entry was written
        """
        if not self.enabled:
            return False

        tag_set = frozenset(t for t in tags if t)
        entry = CacheEntry(
            fingerprint=fp,
            value=response.model_copy(update={"cached": False}),
            tags=tag_set,
            ttl=int(ttl if ttl is not None else self.settings.ttl),
        )
        try:
            await self.backend.set(entry)
        except Exception as e:
            self.errors += 1
            logger.warning("Cache put failed for %s: %s", fp[:12], e)
            return False

        if not self.backend.supports_tags:
            self._unindex(fp)
            for tag in tag_set:
                self._tag_index.setdefault(tag, set()).add(fp)
        return True

    async def forget(self, fp: str) -> bool:
        """Evict a single entry.

        Returns:
            True if an entry was removed
        """
        try:
            removed = await self.backend.delete(fp)
        except Exception as e:
            self.errors += 1
            logger.warning("Cache delete failed for %s: %s", fp[:12], e)
            return False
        self._unindex(fp)
        return removed

    async def invalidate(self, tag: str) -> int:
        """Remove every entry tagged with ``tag``.

        Returns:
            Number of entries removed
        """
        try:
            if self.backend.supports_tags:
                removed = await self.backend.delete_by_tag(tag)
            else:
                removed = 0
                for fp in list(self._tag_index.get(tag, ())):
                    if await self.backend.delete(fp):
                        removed += 1
                    self._unindex(fp)
        except Exception as e:
            self.errors += 1
            logger.warning("Cache invalidation failed for tag %s: %s", tag, e)
            return 0

        logger.debug("Invalidated %d cache entries tagged %s", removed, tag)
        return removed

    async def flush_provider(self, provider: str) -> int:
        return await self.invalidate(provider_tag(provider))

    async def flush_model(self, model: str) -> int:
        return await self.invalidate(model_tag(model))

    async def flush_provider_model(self, provider: str, model: str) -> int:
        return await self.invalidate(provider_model_tag(provider, model))

    async def clear(self) -> None:
        try:
            await self.backend.clear()
        except Exception as e:
            self.errors += 1
            logger.warning("Cache clear failed: %s", e)
        self._tag_index.clear()

    async def get_stats(self) -> dict[str, Any]:
        total = self.hits + self.misses
        stats: dict[str, Any] = {
            "enabled": self.enabled,
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "hit_rate": self.hits / total if total else 0.0,
            "ttl": self.settings.ttl,
        }
        try:
            stats.update(await self.backend.get_stats())
        except Exception as e:
            logger.warning("Cache stats unavailable: %s", e)
        return stats

    async def close(self) -> None:
        await self.backend.close()


def build_cache_backend(settings: CacheSettings) -> CacheBackend:
    """Create the backend named in the settings."""
    if settings.backend == "redis":
        return RedisCache(
            redis_url=settings.redis_url or "redis://localhost:6379/0",
            key_prefix=f"{settings.prefix}:",
        )
    return InMemoryCache(max_size=settings.max_size)
