"""YAML backed model catalog.

Layout of the catalog file::

    openai:
      gpt-4.1-mini:
        provider: openai
        model: gpt-4.1-mini
        type: chat
        features: [function_calling, streaming, vision]
        pricing: {input: 0.4, output: 1.6, cached_input: 0.1}
        limits: {max_tokens: 32768, context_window: 1047576}

Reads are served from an in-memory snapshot that is reloaded after ``ttl``
seconds. Every write rewrites the whole file through the store's atomic
write and then swaps the snapshot, so concurrent readers always see either
the old or the new catalog.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from numbers import Number
from typing import Any, Callable, Iterable, Optional

import yaml

from promptgate.exceptions import ConfigurationError
from promptgate.storage import FileStore
from promptgate.types import ModelInfo

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of :meth:`ModelRepository.validate`."""
    valid: bool
    errors: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


class ModelRepository:
    """Model catalog stored as a single YAML file."""

    REQUIRED_FIELDS = ("provider", "model")
    MAPPING_FIELDS = ("pricing", "limits")

    def __init__(
        self,
        store: FileStore,
        path: str = "models.yaml",
        ttl: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the repository.

        Args:
            store: File store holding the catalog
            path: Catalog path within the store
            ttl: Seconds a loaded snapshot stays valid
            clock: Monotonic clock, injectable for tests
        """
        self.store = store
        self.path = path
        self.ttl = ttl
        self._clock = clock
        self._snapshot: Optional[tuple[ModelInfo, ...]] = None
        self._loaded_at = 0.0
        self._generation = 0
        self._write_lock = threading.Lock()

    # -- raw file access ------------------------------------------------

    def _load_data(self) -> dict[str, Any]:
        if not self.store.exists(self.path):
            return {}
        content = self.store.read(self.path)
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.path}: {e}")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{self.path} must contain a mapping of providers")
        return data

    def _save_data(self, data: dict[str, Any]) -> None:
        content = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
        self.store.write(self.path, content)

    @staticmethod
    def _parse(data: dict[str, Any]) -> tuple[ModelInfo, ...]:
        models = []
        for provider, section in data.items():
            if not isinstance(section, dict):
                continue
            for model_id, entry in section.items():
                try:
                    models.append(ModelInfo.from_dict(str(provider), str(model_id), entry or {}))
                except (ValueError, TypeError, AttributeError) as e:
                    logger.warning("Skipping catalog entry %s:%s: %s", provider, model_id, e)
        return tuple(models)

    def _swap(self, data: dict[str, Any]) -> None:
        self._snapshot = self._parse(data)
        self._loaded_at = self._clock()
        self._generation += 1

    @property
    def generation(self) -> int:
        """Counter bumped every time a new snapshot is loaded or written."""
        return self._generation

    # -- reads ----------------------------------------------------------

    def all_models(self) -> list[ModelInfo]:
        snapshot = self._snapshot
        if snapshot is None or self._clock() - self._loaded_at >= self.ttl:
            data = self._load_data()
            self._swap(data)
            snapshot = self._snapshot
        return list(snapshot)

    def models_by_provider(self, provider: str) -> list[ModelInfo]:
        return [m for m in self.all_models() if m.provider == provider]

    def get_model(self, model_id: str, provider: Optional[str] = None) -> Optional[ModelInfo]:
        for model in self.all_models():
            if model.id == model_id and (provider is None or model.provider == provider):
                return model
        return None

    def exists(self, model_id: str, provider: Optional[str] = None) -> bool:
        return self.get_model(model_id, provider) is not None

    def providers(self) -> list[str]:
        return sorted({m.provider for m in self.all_models()})

    # -- writes ---------------------------------------------------------

    @staticmethod
    def _in_section(section: dict[str, Any], model_id: str) -> bool:
        if model_id in section:
            return True
        return any(
            isinstance(entry, dict) and entry.get("model") == model_id
            for entry in section.values()
        )

    def add_model(self, info: ModelInfo) -> bool:
        """Add a model.

        Returns:
            False, leaving the store untouched, when ``(provider, id)``
            already exists
        """
        with self._write_lock:
            data = self._load_data()
            section = data.get(info.provider)
            if not isinstance(section, dict):
                section = data[info.provider] = {}
            if self._in_section(section, info.id):
                logger.info("Model %s/%s already in catalog", info.provider, info.id)
                return False
            section[info.id] = info.to_dict()
            self._save_data(data)
            self._swap(data)
        logger.info("Added model %s/%s", info.provider, info.id)
        return True

    def remove_model(self, provider: str, model_id: str) -> bool:
        with self._write_lock:
            data = self._load_data()
            section = data.get(provider)
            if not isinstance(section, dict) or model_id not in section:
                return False
            del section[model_id]
            if not section:
                del data[provider]
            self._save_data(data)
            self._swap(data)
        logger.info("Removed model %s/%s", provider, model_id)
        return True

    def import_models(self, models: Iterable[ModelInfo]) -> list[ModelInfo]:
        """Add every model not yet in the catalog with a single write.

        Returns:
            The models that were added
        """
        added = []
        with self._write_lock:
            data = self._load_data()
            for info in models:
                section = data.get(info.provider)
                if not isinstance(section, dict):
                    section = data[info.provider] = {}
                if self._in_section(section, info.id):
                    continue
                section[info.id] = info.to_dict()
                added.append(info)
            if added:
                self._save_data(data)
                self._swap(data)
        if added:
            logger.info("Imported %d models into catalog", len(added))
        return added

    def clear_cache(self) -> None:
        self._snapshot = None

    # -- validation -----------------------------------------------------

    def validate(self) -> ValidationResult:
        """Check the catalog file's structure.

        Returns:
            ValidationResult listing every problem found
        """
        if not self.store.exists(self.path):
            return ValidationResult(False, [f"Catalog file not found: {self.path}"])
        try:
            data = yaml.safe_load(self.store.read(self.path))
        except yaml.YAMLError as e:
            return ValidationResult(False, [f"YAML parsing error: {e}"])

        if data is None:
            data = {}
        if not isinstance(data, dict):
            return ValidationResult(False, ["Catalog must contain a mapping of providers"])

        errors: list[str] = []
        for provider, section in data.items():
            if not isinstance(provider, str):
                errors.append(f"Provider name must be a string, got: {type(provider).__name__}")
                continue
            if not isinstance(section, dict):
                errors.append(f"Provider '{provider}' must contain a mapping of models")
                continue
            for model_id, entry in section.items():
                errors.extend(self._validate_entry(provider, model_id, entry))
        return ValidationResult(not errors, errors)

    def _validate_entry(self, provider: str, model_id: Any, entry: Any) -> list[str]:
        if not isinstance(model_id, str):
            return [f"Model ID must be a string in provider '{provider}', got: {type(model_id).__name__}"]
        label = f"{provider}:{model_id}"
        if not isinstance(entry, dict):
            return [f"Model '{label}' data must be a mapping"]

        errors = []
        for name in self.REQUIRED_FIELDS:
            if not entry.get(name):
                errors.append(f"Model '{label}' missing required field: {name}")
        if entry.get("provider") and entry["provider"] != provider:
            errors.append(
                f"Model '{label}' provider mismatch: expected '{provider}', got '{entry['provider']}'"
            )

        if "features" in entry and not isinstance(entry["features"], list):
            errors.append(f"Model '{label}' field 'features' must be a list")
        for name in self.MAPPING_FIELDS:
            if name in entry and not isinstance(entry[name], dict):
                errors.append(f"Model '{label}' field '{name}' must be a mapping")

        limits = entry.get("limits")
        if isinstance(limits, dict):
            for key, value in limits.items():
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    errors.append(f"Model '{label}' limit '{key}' must be a non-negative integer")

        pricing = entry.get("pricing")
        if isinstance(pricing, dict):
            for key, value in pricing.items():
                if isinstance(value, bool) or not isinstance(value, Number) or value < 0:
                    errors.append(f"Model '{label}' price '{key}' must be a non-negative number")
        return errors
