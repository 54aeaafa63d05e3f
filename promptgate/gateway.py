"""Request orchestration.

The :class:`Gateway` owns every collaborator a request needs and runs the
request pipeline:

1. resolve the builder request (preset, defaults, variables)
2. look the fingerprint up in the response cache
3. on a miss, prepare the vendor request, send it and parse the reply
4. price the response and store it in the cache
5. hand the outcome to the log sink
"""

import logging
import time
from pathlib import Path
from typing import Iterable, Optional, Sequence

from promptgate.builder import RequestBuilder
from promptgate.cache import CacheManager, build_cache_backend, request_tags
from promptgate.callbacks import CallbackManager, LoggingCallback, RequestLog
from promptgate.catalog import ModelRepository, get_fetcher
from promptgate.config import GatewayConfig, config_from_dict, load_config
from promptgate.dispatcher import AsyncDispatcher
from promptgate.exceptions import ConfigurationError, PromptGateError
from promptgate.presets import PresetRepository
from promptgate.pricing import CostCalculator
from promptgate.providers import ProviderFactory
from promptgate.resolver import RequestResolver
from promptgate.stats import UsageStats
from promptgate.storage import FileStore, LocalFileStore
from promptgate.transport import HttpTransport, HttpxTransport, decode_body, raise_for_status
from promptgate.types import CanonicalRequest, CanonicalResponse, ResolvedRequest

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return max(0, int((time.perf_counter() - started) * 1000))


class Gateway:
    """Provider-agnostic entry point.

    Usage:
        gateway = Gateway.from_config("promptgate.yaml")

        answer = await gateway.builder().prompt("Hello").ask()

        responses = await gateway.dispatch([
            gateway.builder().prompt("A").resolve(),
            gateway.builder().provider("claude").model("claude-3-5-haiku-20241022").prompt("B").resolve(),
        ])
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        *,
        transport: Optional[HttpTransport] = None,
        store: Optional[FileStore] = None,
        cache: Optional[CacheManager] = None,
        presets: Optional[PresetRepository] = None,
        models: Optional[ModelRepository] = None,
        calculator: Optional[CostCalculator] = None,
        callbacks: Optional[CallbackManager] = None,
        stats: Optional[UsageStats] = None,
        max_concurrency: Optional[int] = None,
    ) -> None:
        """Initialize the gateway.

        Every collaborator is optional; missing ones are built from the
        configuration.

        Args:
            config: Gateway configuration
            transport: HTTP transport (defaults to httpx)
            store: File store for presets and the model catalog
            cache: Response cache manager
            presets: Preset repository
            models: Model catalog
            calculator: Cost calculator (defaults to catalog pricing)
            callbacks: Log sinks
            stats: Usage statistics collector
            max_concurrency: Bound on in-flight requests during dispatch
        """
        self.config = config or config_from_dict(None)
        logging.getLogger("promptgate").setLevel(self.config.logging.level.upper())
        store = store or LocalFileStore(self.config.paths.root)

        self.transport = transport or HttpxTransport(timeout=self.config.defaults.timeout)
        self.factory = ProviderFactory(self.config)
        self.cache = cache or CacheManager(build_cache_backend(self.config.cache), self.config.cache)
        self.presets = presets or PresetRepository(store, self.config.paths.presets_dir)
        self.models = models or ModelRepository(
            store, self.config.paths.models_file, ttl=self.config.cache.ttl
        )
        self._pinned_calculator = calculator
        self._calculator: Optional[CostCalculator] = None
        self._priced_generation = -1
        if callbacks is None:
            callbacks = CallbackManager()
            if self.config.logging.enabled:
                callbacks.register(
                    LoggingCallback(
                        file_path=self.config.logging.file_path,
                        max_prompt_length=self.config.logging.max_prompt_length,
                    )
                )
        self.callbacks = callbacks
        self.stats = stats or UsageStats()
        self.resolver = RequestResolver(self.config, self.presets)
        self.dispatcher = AsyncDispatcher(self.execute, max_concurrency=max_concurrency)

    @classmethod
    def from_config(cls, config_path: Optional[str | Path] = None, **kwargs) -> "Gateway":
        return cls(load_config(config_path), **kwargs)

    async def __aenter__(self) -> "Gateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the transport, the cache backend and every closable log sink."""
        await self.transport.close()
        await self.cache.close()
        self.callbacks.close()

    # -- pricing --------------------------------------------------------

    @property
    def calculator(self) -> CostCalculator:
        """Pricing snapshot, rebuilt whenever the catalog snapshot changes.

        A calculator passed to the constructor is used as is.
        """
        if self._pinned_calculator is not None:
            return self._pinned_calculator
        try:
            models = self.models.all_models()
        except (PromptGateError, OSError) as e:
            logger.warning("Model catalog unavailable, costs recorded as 0: %s", e)
            return CostCalculator((), self.config.pricing)
        if self._calculator is None or self._priced_generation != self.models.generation:
            self._calculator = CostCalculator(models, self.config.pricing)
            self._priced_generation = self.models.generation
        return self._calculator

    def reload_pricing(self) -> CostCalculator:
        """Re-read the catalog from the store and rebuild the pricing snapshot."""
        self.models.clear_cache()
        self._calculator = None
        return self.calculator

    # -- building and resolving -------------------------------------------

    def builder(self) -> RequestBuilder:
        return RequestBuilder(self)

    def prompt(self, text: str) -> RequestBuilder:
        return self.builder().prompt(text)

    def resolve(self, request: CanonicalRequest) -> ResolvedRequest:
        return self.resolver.resolve(request)

    # -- execution ------------------------------------------------------

    async def request(self, request: CanonicalRequest) -> CanonicalResponse:
        """Resolve and execute a builder request."""
        return await self.execute(self.resolve(request))

    async def execute(self, resolved: ResolvedRequest) -> CanonicalResponse:
        """Execute a resolved request.

        Raises:
            ConfigurationError: Unknown or unconfigured provider
            ProviderError: Transport failure, non-2xx status or a body that
                is not a JSON object
        """
        log = RequestLog.start(resolved)
        await self.callbacks.on_request_start(log)
        started = time.perf_counter()
        fp = self.cache.fingerprint_for(resolved)

        cached = await self.cache.get(fp)
        if cached is not None:
            cached = cached.model_copy(update={"response_time_ms": _elapsed_ms(started)})
            self.stats.record_response(resolved.provider, cached)
            log.complete(cached)
            await self.callbacks.on_request_end(log, cached)
            return cached

        try:
            response = await self._send(resolved, started)
        except Exception as e:
            log.fail(e, _elapsed_ms(started))
            self.stats.record_error(resolved.provider)
            await self.callbacks.on_request_error(log, e)
            raise

        if response.error is None:
            await self.cache.put(
                fp, response, self.config.cache.ttl, tags=request_tags(resolved.provider, resolved.model)
            )
        else:
            logger.warning(
                "%s/%s returned an unusable response: %s",
                resolved.provider, resolved.model, response.error,
            )

        self.stats.record_response(resolved.provider, response)
        log.complete(response)
        await self.callbacks.on_request_end(log, response)
        return response

    async def _send(self, resolved: ResolvedRequest, started: float) -> CanonicalResponse:
        adapter, settings = self.factory.resolve(resolved.provider)
        if resolved.stream:
            logger.debug("Streaming not supported by dispatch, sending %s/%s as one request",
                         resolved.provider, resolved.model)

        prepared = adapter.prepare(resolved, settings)
        raw = await self.transport.send(
            prepared.method,
            prepared.url,
            headers=prepared.headers,
            json=prepared.payload,
            params=prepared.params or None,
            timeout=settings.timeout,
        )
        raise_for_status(raw, resolved.provider)
        body = decode_body(raw, resolved.provider)

        response = adapter.parse(body, resolved.model, _elapsed_ms(started))
        cost = self.calculator.cost(
            resolved.model,
            response.input_tokens,
            response.output_tokens,
            response.usage.get("cached_tokens", 0),
            provider=resolved.provider,
        )
        return response.model_copy(update={"cost": cost})

    async def dispatch(self, requests: Sequence[ResolvedRequest]) -> list[CanonicalResponse]:
        """Execute many requests concurrently; see :class:`AsyncDispatcher`."""
        return await self.dispatcher.dispatch(requests)

    async def compare(
        self,
        builder: RequestBuilder,
        targets: Iterable[tuple[str, str]],
    ) -> list[CanonicalResponse]:
        """Send one prompt to several ``(provider, model)`` pairs.

        Targets that fail to resolve become error responses like any other
        failed item.
        """
        resolved: list[ResolvedRequest] = []
        failures: dict[int, str] = {}
        for index, (provider, model) in enumerate(targets):
            try:
                resolved.append(builder.provider(provider).model(model).resolve())
            except ConfigurationError as e:
                failures[index] = str(e)

        responses = iter(await self.dispatch(resolved))
        total = len(resolved) + len(failures)
        return [
            CanonicalResponse.error_response(failures[i]) if i in failures else next(responses)
            for i in range(total)
        ]

    # -- cache and catalog maintenance ------------------------------------

    async def flush_provider(self, provider: str) -> int:
        return await self.cache.flush_provider(provider)

    async def flush_model(self, model: str) -> int:
        return await self.cache.flush_model(model)

    async def flush_provider_model(self, provider: str, model: str) -> int:
        return await self.cache.flush_provider_model(provider, model)

    async def forget(self, resolved: ResolvedRequest) -> bool:
        """Evict the cached response for one resolved request."""
        return await self.cache.forget(self.cache.fingerprint_for(resolved))
    async def sync_models(self, providers: Optional[Iterable[str]] = None) -> dict[str, int]:
        """Import vendor model listings into the catalog.

        Providers without credentials are skipped. A provider whose listing
        fails is logged and reported as -1.

        Returns:
            Number of models added per provider
        """
        names = list(providers) if providers is not None else list(self.config.providers)
        added: dict[str, int] = {}
        for name in names:
            settings = self.factory.settings_for(name)
            if settings is None:
                continue
            try:
                fetcher = get_fetcher(name, settings, self.transport)
            except ConfigurationError as e:
                logger.info("Skipping model sync for %s: %s", name, e)
                continue
            if not fetcher.is_available():
                continue
            try:
                fetched = await fetcher.fetch_models()
            except PromptGateError as e:
                logger.warning("Model sync for %s failed: %s", name, e)
                added[name] = -1
                continue
            added[name] = len(self.models.import_models(fetched))

        if any(count > 0 for count in added.values()):
            self.reload_pricing()
        return added
