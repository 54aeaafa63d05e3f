"""Tests for the YAML model catalog."""

import pytest
import yaml

from promptgate.catalog import ModelRepository
from promptgate.exceptions import ConfigurationError
from promptgate.storage import MemoryFileStore
from promptgate.types import ModelInfo, ModelPricing
from tests.conftest import MODELS_YAML


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def repository(store):
    return ModelRepository(store, "models.yaml")


class TestReads:
    """Test catalog reads."""

    def test_all_models(self, repository):
        ids = {(m.provider, m.id) for m in repository.all_models()}
        assert ids == {
            ("openai", "gpt-4.1-mini"),
            ("openai", "o4-mini"),
            ("claude", "claude-3-5-haiku-20241022"),
        }

    def test_get_model(self, repository):
        info = repository.get_model("gpt-4.1-mini")
        assert info.pricing.cached_input == 0.1
        assert info.context_window == 1047576
        assert repository.get_model("gpt-4.1-mini", provider="claude") is None
        assert repository.exists("o4-mini")

    def test_models_by_provider_and_providers(self, repository):
        assert [m.id for m in repository.models_by_provider("claude")] == ["claude-3-5-haiku-20241022"]
        assert repository.providers() == ["claude", "openai"]

    def test_missing_file_is_empty(self):
        assert ModelRepository(MemoryFileStore(), "models.yaml").all_models() == []

    def test_invalid_yaml(self):
        repository = ModelRepository(MemoryFileStore({"models.yaml": "openai: [unclosed"}), "models.yaml")
        with pytest.raises(ConfigurationError):
            repository.all_models()

    def test_bad_entry_skipped(self):
        store = MemoryFileStore({"models.yaml": "openai:\n  good: {provider: openai}\n  bad: {pricing: {input: -1, output: 1}}\n"})
        assert [m.id for m in ModelRepository(store, "models.yaml").all_models()] == ["good"]

    def test_snapshot_reloaded_after_ttl(self, store):
        clock = FakeClock()
        repository = ModelRepository(store, "models.yaml", ttl=60, clock=clock)
        assert len(repository.all_models()) == 3

        store.write("models.yaml", "openai:\n  gpt-4.1: {provider: openai}\n")
        clock.now = 30
        assert len(repository.all_models()) == 3
        clock.now = 61
        assert [m.id for m in repository.all_models()] == ["gpt-4.1"]

    def test_generation_tracks_snapshots(self, store):
        clock = FakeClock()
        repository = ModelRepository(store, "models.yaml", ttl=60, clock=clock)
        repository.all_models()
        first = repository.generation
        repository.all_models()
        assert repository.generation == first

        repository.add_model(ModelInfo(id="gpt-4.1", provider="openai"))
        assert repository.generation == first + 1
        repository.add_model(ModelInfo(id="gpt-4.1", provider="openai"))
        assert repository.generation == first + 1

        clock.now = 61
        repository.all_models()
        assert repository.generation == first + 2

    def test_clear_cache(self, repository, store):
        repository.all_models()
        store.write("models.yaml", "")
        repository.clear_cache()
        assert repository.all_models() == []


class TestWrites:
    """Test catalog writes."""

    def test_add_model(self, repository, store):
        info = ModelInfo(id="gpt-4.1", provider="openai", pricing=ModelPricing(input=2.0, output=8.0))
        assert repository.add_model(info) is True
        assert repository.get_model("gpt-4.1").pricing.output == 8.0
        data = yaml.safe_load(store.files["models.yaml"])
        assert data["openai"]["gpt-4.1"]["model"] == "gpt-4.1"

    def test_duplicate_add_leaves_store_unchanged(self, repository, store):
        before = store.files["models.yaml"]
        writes = store.writes
        duplicate = ModelInfo(id="gpt-4.1-mini", provider="openai", pricing=ModelPricing(input=9, output=9))
        assert repository.add_model(duplicate) is False
        assert store.files["models.yaml"] == before
        assert store.writes == writes

    def test_add_to_new_provider(self, repository):
        assert repository.add_model(ModelInfo(id="grok-3", provider="grok")) is True
        assert "grok" in repository.providers()

    def test_remove_model(self, repository):
        assert repository.remove_model("claude", "claude-3-5-haiku-20241022") is True
        assert repository.remove_model("claude", "claude-3-5-haiku-20241022") is False
        assert "claude" not in repository.providers()

    def test_import_models(self, repository, store):
        writes = store.writes
        added = repository.import_models([
            ModelInfo(id="gpt-4.1-mini", provider="openai"),
            ModelInfo(id="gemini-2.5-flash", provider="gemini"),
            ModelInfo(id="gemini-2.5-pro", provider="gemini"),
        ])
        assert [m.id for m in added] == ["gemini-2.5-flash", "gemini-2.5-pro"]
        assert store.writes == writes + 1
        assert len(repository.models_by_provider("gemini")) == 2


class TestValidate:
    """Test structural validation."""

    def test_valid_catalog(self, repository):
        result = repository.validate()
        assert result.valid
        assert result.errors == []

    def test_missing_file(self):
        result = ModelRepository(MemoryFileStore(), "models.yaml").validate()
        assert not result
        assert "not found" in result.errors[0]

    def test_reports_every_problem(self):
        content = """\
openai:
  gpt-x:
    model: gpt-x
    features: streaming
    pricing: {input: -1, output: 2}
  gpt-y:
    provider: claude
    model: gpt-y
    limits: {max_tokens: lots}
grok: []
"""
        result = ModelRepository(MemoryFileStore({"models.yaml": content}), "models.yaml").validate()
        assert not result.valid
        joined = "\n".join(result.errors)
        assert "missing required field: provider" in joined
        assert "'features' must be a list" in joined
        assert "price 'input' must be a non-negative number" in joined
        assert "provider mismatch" in joined
        assert "limit 'max_tokens' must be a non-negative integer" in joined
        assert "Provider 'grok' must contain a mapping of models" in joined

    def test_yaml_error(self):
        result = ModelRepository(MemoryFileStore({"models.yaml": "a: [b"}), "models.yaml").validate()
        assert not result.valid
        assert result.errors[0].startswith("YAML parsing error")


def test_fixture_catalog_is_valid():
    assert ModelRepository(MemoryFileStore({"models.yaml": MODELS_YAML}), "models.yaml").validate().valid
