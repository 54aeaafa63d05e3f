"""Preset storage.

A preset is one YAML file per name in the presets directory::

    # presets/analyze.yaml
    provider: claude
    model: claude-sonnet-4-20250514
    system_prompt: You are an expert data analyst...
    options:
      temperature: 0.4
      max_tokens: 3000
    version: 1
"""

import logging
import re
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from promptgate.exceptions import ConfigurationError, PresetNotFoundError
from promptgate.storage import FileStore
from promptgate.types import Preset

logger = logging.getLogger(__name__)

PRESET_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-]*$")

DEFAULT_PRESETS: dict[str, dict[str, Any]] = {
    "default": {
        "provider": "openai",
        "model": "gpt-4.1-mini",
        "system_prompt": (
            "You are a helpful and capable AI assistant. Give accurate, "
            "easy to follow answers to the user's questions and requests."
        ),
        "options": {"temperature": 0.7, "max_tokens": 2000, "top_p": 0.95},
        "description": "General purpose assistant",
    },
    "ask": {
        "provider": "openai",
        "model": "gpt-4.1-nano",
        "system_prompt": "You are an AI assistant that answers questions briefly and precisely.",
        "options": {"temperature": 0.5, "max_tokens": 1500},
        "description": "Short factual answers",
    },
    "create": {
        "provider": "openai",
        "model": "gpt-4.1",
        "system_prompt": (
            "You are an AI assistant that produces creative, original content such as "
            "blog posts, marketing copy, fiction and poetry. Favor originality and readability."
        ),
        "options": {
            "temperature": 0.9,
            "max_tokens": 4000,
            "top_p": 0.95,
            "presence_penalty": 0.1,
            "frequency_penalty": 0.1,
        },
        "description": "Creative writing",
    },
    "analyze": {
        "provider": "claude",
        "model": "claude-sonnet-4-20250514",
        "system_prompt": (
            "You are an expert data analyst. Analyze the information provided in depth, "
            "find insights and patterns, and present structured findings with clear evidence."
        ),
        "options": {"temperature": 0.4, "max_tokens": 3000},
        "description": "Structured analysis",
    },
    "think": {
        "provider": "openai",
        "model": "o4-mini",
        "system_prompt": (
            "You are a reasoning model. Work through complex problems step by step "
            "and give logical, well-supported answers."
        ),
        "options": {"temperature": 0.3, "max_tokens": 2500},
        "description": "Step by step reasoning",
    },
    "code": {
        "provider": "openai",
        "model": "gpt-4.1",
        "system_prompt": (
            "You are an experienced software engineer. Write high quality, maintainable code "
            "that follows the conventions of its language, with appropriate comments and explanation."
        ),
        "options": {"temperature": 0.3, "max_tokens": 3000, "top_p": 0.9},
        "description": "Code generation and review",
    },
}


class PresetRepository:
    """Presets stored as YAML files in a :class:`FileStore` directory."""

    def __init__(self, store: FileStore, directory: str = "presets") -> None:
        self.file_store = store
        self.directory = directory.rstrip("/")
        self._presets: Optional[dict[str, Preset]] = None

    def _path(self, name: str) -> str:
        if not PRESET_NAME.match(name):
            raise ConfigurationError(f"Invalid preset name '{name}'")
        return f"{self.directory}/{name}.yaml" if self.directory else f"{name}.yaml"

    def _load(self, name: str) -> Optional[Preset]:
        try:
            data = yaml.safe_load(self.file_store.read(self._path(name))) or {}
        except FileNotFoundError:
            return None
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in preset '{name}': {e}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Preset '{name}' must be a mapping")
        data["name"] = name
        try:
            return Preset(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid preset '{name}': {e}")

    def _warm(self) -> dict[str, Preset]:
        if self._presets is None:
            presets = {}
            for filename in self.file_store.list(self.directory, suffix=".yaml"):
                name = filename[: -len(".yaml")]
                if not PRESET_NAME.match(name):
                    continue
                try:
                    preset = self._load(name)
                except ConfigurationError as e:
                    logger.warning("Skipping preset %s: %s", name, e)
                    continue
                if preset is not None:
                    presets[name] = preset
            self._presets = presets
        return self._presets

    def _write(self, preset: Preset) -> None:
        body = preset.to_dict()
        body.pop("name", None)
        self.file_store.write(
            self._path(preset.name),
            yaml.safe_dump(body, sort_keys=False, allow_unicode=True, default_flow_style=False),
        )
        self.flush()

    def flush(self) -> None:
        """Drop the in-memory copy so the next read goes to storage."""
        self._presets = None

    def find(self, name: str) -> Optional[Preset]:
        return self._warm().get(name)

    def get(self, name: str) -> Preset:
        """Get a preset.

        Raises:
            PresetNotFoundError: If no preset has that name
        """
        preset = self.find(name)
        if preset is None:
            raise PresetNotFoundError(name)
        return preset

    def exists(self, name: str) -> bool:
        return self.find(name) is not None

    def names(self) -> list[str]:
        return sorted(self._warm())

    def store(self, preset: Preset) -> Preset:
        """Create or overwrite a preset as given."""
        self._write(preset)
        logger.info("Stored preset %s (v%d)", preset.name, preset.version)
        return preset

    def update(self, name: str, **changes: Any) -> Preset:
        """Change fields of an existing preset and bump its version.

        ``options`` are merged into the existing options; other fields are
        replaced.

        Raises:
            PresetNotFoundError: If the preset does not exist
        """
        current = self.get(name)
        changes.pop("name", None)
        changes.pop("version", None)
        if "options" in changes:
            options = dict(current.options)
            options.update(changes.pop("options") or {})
            changes["options"] = options
        try:
            updated = Preset(**{**current.model_dump(), **changes, "version": current.version + 1})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid preset '{name}': {e}")
        self._write(updated)
        logger.info("Updated preset %s to v%d", name, updated.version)
        return updated

    def delete(self, name: str) -> bool:
        removed = self.file_store.delete(self._path(name))
        self.flush()
        if removed:
            logger.info("Deleted preset %s", name)
        return removed

    def install_defaults(self, overwrite: bool = False) -> list[str]:
        """Write the bundled presets.

        Returns:
            Names of the presets written
        """
        written = []
        for name, body in DEFAULT_PRESETS.items():
            if not overwrite and self.file_store.exists(self._path(name)):
                continue
            self._write(Preset(name=name, **body))
            written.append(name)
        return written

    # defined last so the annotations above still see the builtin
    def list(self) -> "list[Preset]":
        presets = self._warm()
        return [presets[name] for name in sorted(presets)]
