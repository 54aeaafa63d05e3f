from __future__ import annotations

import json
from typing import Any, Callable, Optional, Union

import pytest

from promptgate.cache import CacheManager, InMemoryCache
from promptgate.callbacks import CallbackManager
from promptgate.catalog import ModelRepository
from promptgate.config import CacheSettings, GatewayConfig, config_from_dict
from promptgate.gateway import Gateway
from promptgate.presets import PresetRepository
from promptgate.providers import AdapterRegistry
from promptgate.storage import MemoryFileStore
from promptgate.transport import HttpTransport, TransportResponse


MODELS_YAML = """\
openai:
  gpt-4.1-mini:
    provider: openai
    model: gpt-4.1-mini
    type: text
    features: [function_calling, streaming]
    pricing: {input: 0.4, output: 1.6, cached_input: 0.1}
    limits: {max_tokens: 32768, context_window: 1047576}
  o4-mini:
    provider: openai
    model: o4-mini
    pricing: {input: 1.1, output: 4.4}
claude:
  claude-3-5-haiku-20241022:
    provider: claude
    model: claude-3-5-haiku-20241022
    features: [streaming, fast_response]
    pricing: {input: 0.8, output: 4.0}
    limits: {max_tokens: 8192, context_window: 200000}
"""


def json_response(body: Any, status_code: int = 200, headers: Optional[dict[str, str]] = None) -> TransportResponse:
    return TransportResponse(status_code=status_code, text=json.dumps(body), headers=headers or {})


def openai_body(content: str = "Hello!", prompt_tokens: int = 10, completion_tokens: int = 5) -> dict[str, Any]:
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "model": "gpt-4.1-mini",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
        },
    }


Reply = Union[TransportResponse, Exception]


class FakeTransport(HttpTransport):
    """Records every call and answers from a queue or a handler."""

    def __init__(self, handler: Optional[Callable[[dict[str, Any]], Reply]] = None) -> None:
        self.handler = handler
        self.queue: list[Reply] = []
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def add(self, reply: Reply) -> "FakeTransport":
        self.queue.append(reply)
        return self

    async def send(self, method, url, *, headers=None, json=None, params=None, timeout=None):
        call = {
            "method": method,
            "url": url,
            "headers": headers,
            "json": json,
            "params": params,
            "timeout": timeout,
        }
        self.calls.append(call)
        if self.handler is not None:
            reply = self.handler(call)
        elif self.queue:
            reply = self.queue.pop(0)
        else:
            raise AssertionError(f"Unexpected request: {method} {url}")
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self) -> None:
        self.closed = True


class FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.sets: dict[str, set[str]] = {}
        self.ttls: dict[str, int] = {}
        self.closed = False

    async def get(self, key: str):
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str):
        self.store[key] = value
        self.ttls[key] = ttl

    async def delete(self, *keys: str):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None or self.sets.pop(key, None) is not None:
                removed += 1
        return removed

    async def sadd(self, key: str, *members: str):
        self.sets.setdefault(key, set()).update(members)
        return len(members)

    async def smembers(self, key: str):
        return set(self.sets.get(key, set()))

    async def expire(self, key: str, ttl: int):
        self.ttls[key] = ttl
        return True

    async def scan_iter(self, match: str = "*"):
        prefix = match.rstrip("*")
        for key in list(self.store) + list(self.sets):
            if key.startswith(prefix):
                yield key

    async def aclose(self):
        self.closed = True


class FailingBackend(InMemoryCache):
    async def get(self, key):
        raise ConnectionError("cache down")

    async def set(self, entry):
        raise ConnectionError("cache down")


@pytest.fixture(autouse=True)
def restore_registry():
    saved = dict(AdapterRegistry._adapters)
    yield
    AdapterRegistry._adapters.clear()
    AdapterRegistry._adapters.update(saved)


@pytest.fixture
def config() -> GatewayConfig:
    return config_from_dict({
        "providers": {
            "openai": {"api_key": "sk-test"},
            "claude": {"api_key": "sk-ant-test"},
            "gemini": {"api_key": "gm-test"},
            "grok": {"api_key": "xai-test"},
        },
        "logging": {"enabled": False},
    })


@pytest.fixture
def store() -> MemoryFileStore:
    return MemoryFileStore({"models.yaml": MODELS_YAML})


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def gateway(config, store, transport) -> Gateway:
    return Gateway(
        config,
        transport=transport,
        store=store,
        cache=CacheManager(InMemoryCache(), CacheSettings()),
        presets=PresetRepository(store, "presets"),
        models=ModelRepository(store, "models.yaml"),
        callbacks=CallbackManager(),
    )
