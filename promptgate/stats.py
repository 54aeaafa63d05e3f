"""Usage statistics collector."""

import threading
from dataclasses import dataclass, field
from typing import Any

from promptgate.types import CanonicalResponse


@dataclass
class ProviderUsage:
    """Counters for a single provider."""
    requests: int = 0
    errors: int = 0
    cache_hits: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "requests": self.requests,
            "errors": self.errors,
            "cache_hits": self.cache_hits,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "cost": round(self.cost, 6),
        }


@dataclass
class UsageStats:
    """Request, cache and spend counters.

    One instance is owned by each :class:`promptgate.gateway.Gateway`, or
    passed in explicitly to share counters between gateways.
    """
    requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    errors: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0
    by_provider: dict[str, ProviderUsage] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def _provider(self, name: str) -> ProviderUsage:
        if name not in self.by_provider:
            self.by_provider[name] = ProviderUsage()
        return self.by_provider[name]

    def record_response(self, provider: str, response: CanonicalResponse) -> None:
        with self._lock:
            usage = self._provider(provider)
            self.requests += 1
            usage.requests += 1
            if response.cached:
                self.cache_hits += 1
                usage.cache_hits += 1
                return
            self.cache_misses += 1
            if response.error:
                self.errors += 1
                usage.errors += 1
            self.input_tokens += response.input_tokens
            self.output_tokens += response.output_tokens
            self.cost += response.cost
            usage.input_tokens += response.input_tokens
            usage.output_tokens += response.output_tokens
            usage.cost += response.cost

    def record_error(self, provider: str) -> None:
        with self._lock:
            usage = self._provider(provider)
            self.requests += 1
            self.cache_misses += 1
            self.errors += 1
            usage.requests += 1
            usage.errors += 1

    def hit_rate(self) -> float:
        lookups = self.cache_hits + self.cache_misses
        return self.cache_hits / lookups if lookups else 0.0

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "requests": self.requests,
                "cache_hits": self.cache_hits,
                "cache_misses": self.cache_misses,
                "hit_rate": self.hit_rate(),
                "errors": self.errors,
                "input_tokens": self.input_tokens,
                "output_tokens": self.output_tokens,
                "cost": round(self.cost, 6),
                "by_provider": {name: u.to_dict() for name, u in self.by_provider.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self.requests = self.cache_hits = self.cache_misses = self.errors = 0
            self.input_tokens = self.output_tokens = 0
            self.cost = 0.0
            self.by_provider.clear()
