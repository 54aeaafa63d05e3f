"""Base class for vendor model listing fetchers."""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, TypeVar

from promptgate.config import ProviderSettings
from promptgate.exceptions import ConfigurationError, PromptGateError
from promptgate.transport import HttpTransport, decode_body, raise_for_status
from promptgate.types import ModelInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Ordered (substrings, value) rules; the first rule with a matching substring wins.
PatternTable = Sequence[tuple[tuple[str, ...], T]]

ISO_DATE_SUFFIX = re.compile(r"-(\d{4}-\d{2}-\d{2})$")
COMPACT_DATE_SUFFIX = re.compile(r"-(\d{8})$")


def first_match(model_id: str, table: PatternTable, default: T) -> T:
    """Look up a model id in an ordered pattern table."""
    name = model_id.lower()
    for patterns, value in table:
        if any(pattern in name for pattern in patterns):
            return value
    return default


def collect_features(model_id: str, table: PatternTable, base: Sequence[str] = ("streaming",)) -> list[str]:
    """Union of the feature lists of every matching rule."""
    name = model_id.lower()
    features = list(base)
    for patterns, extra in table:
        if any(pattern in name for pattern in patterns):
            features.extend(f for f in extra if f not in features)
    return features


def split_version(model_id: str, pattern: re.Pattern = ISO_DATE_SUFFIX) -> tuple[str, Optional[str]]:
    """Split a dated snapshot id into ``(base_model_id, version)``."""
    match = pattern.search(model_id)
    if not match:
        return model_id, None
    return model_id[: match.start()], match.group(1)


class BaseFetcher(ABC):
    """Fetch a vendor's model listing and fill gaps with naming heuristics."""

    provider_name: str = ""
    #: Key of the model list in the listing response
    list_key: str = "data"

    def __init__(self, settings: ProviderSettings, transport: HttpTransport) -> None:
        self.settings = settings
        self.transport = transport

    def is_available(self) -> bool:
        return bool(self.settings.api_key) and bool(self.settings.models_endpoint) and bool(self.settings.base_url)

    def _headers(self) -> dict[str, str]:
        return dict(self.settings.headers)

    def _params(self) -> dict[str, str]:
        return {}

    async def _get(self, path: str) -> dict[str, Any]:
        if not self.is_available():
            raise ConfigurationError(f"Provider {self.provider_name} is not properly configured")

        url = self.settings.endpoint(path)
        logger.info("Fetching models from %s: %s", self.provider_name, url)
        response = await self.transport.send(
            "GET",
            url,
            headers=self._headers(),
            params=self._params() or None,
            timeout=self.settings.timeout,
        )
        raise_for_status(response, self.provider_name)
        return decode_body(response, self.provider_name)

    async def fetch_models(self) -> list[ModelInfo]:
        """Fetch every model the vendor lists.

        Raises:
            ConfigurationError: Credentials or endpoint missing
            ProviderError: The listing request failed
        """
        body = await self._get(self.settings.models_endpoint or "")
        items = body.get(self.list_key)
        if not isinstance(items, list):
            return []

        models = []
        for item in items:
            try:
                models.append(self.parse_model(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unparseable %s model entry: %s", self.provider_name, e)
        return models

    async def fetch_model(self, model_id: str) -> Optional[ModelInfo]:
        """Fetch a single model, or None if the lookup fails for any reason."""
        try:
            body = await self._get(f"{(self.settings.models_endpoint or '').rstrip('/')}/{model_id}")
            return self.parse_model(body)
        except (PromptGateError, KeyError, TypeError, ValueError) as e:
            logger.info("Model %s not available from %s: %s", model_id, self.provider_name, e)
            return None

    @abstractmethod
    def parse_model(self, data: dict[str, Any]) -> ModelInfo:
        """Build a catalog entry from one listing item."""
        pass
