"""Tests for configuration loading."""

import pytest

from promptgate.config import (
    DEFAULT_OPTIONS,
    GatewayConfig,
    ProviderSettings,
    config_from_dict,
    default_providers,
    load_config,
)


@pytest.fixture
def no_provider_keys(monkeypatch):
    for name in (
        "OPENAI_API_KEY",
        "CLAUDE_API_KEY",
        "ANTHROPIC_API_KEY",
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "GROK_API_KEY",
        "XAI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_empty_config(self, no_provider_keys):
        config = config_from_dict(None)
        assert config.defaults.provider == "openai"
        assert config.defaults.model == "gpt-4.1-mini"
        assert config.defaults.options == DEFAULT_OPTIONS
        assert config.cache.ttl == 3600
        assert config.pricing.decimal_places == 6
        assert set(config.providers) == {"openai", "claude", "gemini", "grok"}
        assert not config.providers["openai"].is_configured

    def test_claude_gets_version_header(self, no_provider_keys):
        assert default_providers()["claude"].headers == {"anthropic-version": "2023-06-01"}

    def test_keys_read_from_environment(self, no_provider_keys, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "ant-key")
        monkeypatch.setenv("XAI_API_KEY", "xai-key")
        providers = default_providers()
        assert providers["claude"].api_key == "ant-key"
        assert providers["grok"].api_key == "xai-key"

    def test_primary_env_name_wins(self, no_provider_keys, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "primary")
        monkeypatch.setenv("GOOGLE_API_KEY", "fallback")
        assert default_providers()["gemini"].api_key == "primary"


class TestConfigFromDict:
    """Test parsing of a decoded configuration mapping."""

    def test_defaults_options_merged_over_builtin(self, no_provider_keys):
        config = config_from_dict({"defaults": {"model": "gpt-4.1", "options": {"temperature": 0.2}}})
        assert config.defaults.model == "gpt-4.1"
        assert config.defaults.options["temperature"] == 0.2
        assert config.defaults.options["max_tokens"] == 2000

    def test_provider_merged_over_builtin(self, no_provider_keys):
        config = config_from_dict({"providers": {"claude": {"api_key": "k", "headers": {"x-extra": "1"}}}})
        claude = config.providers["claude"]
        assert claude.api_key == "k"
        assert claude.base_url == "https://api.anthropic.com/v1"
        assert claude.headers == {"anthropic-version": "2023-06-01", "x-extra": "1"}

    def test_custom_provider(self, no_provider_keys):
        config = config_from_dict({"providers": {"local": {"api_key": "k", "base_url": "http://localhost:8080/v1"}}})
        assert config.provider("local").is_configured

    def test_env_var_references(self, no_provider_keys, monkeypatch):
        monkeypatch.setenv("MY_KEY", "from-env")
        config = config_from_dict({"providers": {"openai": {"api_key": "os.environ/MY_KEY"}, "grok": {"api_key": "${MY_KEY}"}}})
        assert config.providers["openai"].api_key == "from-env"
        assert config.providers["grok"].api_key == "from-env"

    def test_sections(self, no_provider_keys):
        config = config_from_dict({
            "cache": {"enabled": False, "ttl": 60, "backend": "redis", "redis_url": "redis://r:6379/1"},
            "pricing": {"currency": "EUR", "exchange_rate": 0.9, "decimal_places": 4},
            "logging": {"enabled": False},
            "paths": {"root": "/srv/gateway"},
        })
        assert config.cache.enabled is False
        assert config.cache.backend == "redis"
        assert config.pricing.currency == "EUR"
        assert config.logging.enabled is False
        assert config.paths.root == "/srv/gateway"
        assert config.paths.models_file == "models.yaml"

    def test_timeout_for(self):
        config = GatewayConfig(providers={"openai": ProviderSettings(name="openai", timeout=5)})
        assert config.timeout_for("openai") == 5.0
        assert config.timeout_for("claude") == 30.0


class TestProviderSettings:
    def test_endpoint_joins_paths(self):
        settings = ProviderSettings(name="x", base_url="https://api.example.com/v1/")
        assert settings.endpoint("/chat/completions") == "https://api.example.com/v1/chat/completions"


class TestLoadConfig:
    def test_load_from_file(self, tmp_path, no_provider_keys):
        path = tmp_path / "promptgate.yaml"
        path.write_text("defaults:\n  provider: claude\n  model: claude-3-5-haiku-20241022\n")
        config = load_config(path)
        assert config.defaults.provider == "claude"

    def test_missing_file_gives_defaults(self, tmp_path, no_provider_keys):
        config = load_config(tmp_path / "absent.yaml")
        assert config.defaults.provider == "openai"
