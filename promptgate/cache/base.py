"""Base cache backend interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from promptgate.types import CanonicalResponse


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry:
    """A cached response stored under its request fingerprint.

    ``tags`` normally holds the provider and model names so that
    :meth:`CacheManager.invalidate` can drop every entry for either one.
    ``expires_at`` defaults to ``created_at + ttl`` seconds.
    """
    fingerprint: str
    value: CanonicalResponse
    tags: frozenset[str] = frozenset()
    ttl: int = 3600
    created_at: datetime = field(default_factory=utcnow)
    expires_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.expires_at is None:
            self.expires_at = self.created_at + timedelta(seconds=self.ttl)

    def is_expired(self) -> bool:
        return utcnow() >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "value": self.value.model_dump(),
            "tags": sorted(self.tags),
            "ttl": self.ttl,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntry":
        return cls(
            fingerprint=data["fingerprint"],
            value=CanonicalResponse(**data["value"]),
            tags=frozenset(data.get("tags") or ()),
            ttl=int(data.get("ttl", 3600)),
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
        )


class CacheBackend(ABC):
    """Abstract storage for cache entries.

    Backends may raise on I/O failure; :class:`CacheManager` turns those
    failures into misses.
    """

    #: Whether the backend can delete entries by tag on its own.
    supports_tags: bool = False

    @abstractmethod
    async def get(self, key: str) -> Optional[CacheEntry]:
        """Get a live entry, or None when missing or expired."""
        pass

    @abstractmethod
    async def set(self, entry: CacheEntry) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def clear(self) -> None:
        pass

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        pass

    async def delete_by_tag(self, tag: str) -> int:
        """Delete every entry carrying ``tag``.

        Only called when :attr:`supports_tags` is true.
        """
        raise NotImplementedError(f"{type(self).__name__} does not index tags")

    async def close(self) -> None:
        """Release connections held by the backend."""
