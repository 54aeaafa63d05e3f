"""Tests for request, response and catalog types."""

import datetime

import pytest
from pydantic import ValidationError

from promptgate.types import (
    CanonicalRequest,
    CanonicalResponse,
    ModelInfo,
    ModelPricing,
    Preset,
    ResolvedRequest,
    build_usage,
)


class TestCanonicalRequest:
    """Test the builder-facing request."""

    def test_defaults(self):
        request = CanonicalRequest()
        assert request.prompt == ""
        assert request.options == {}
        assert request.vars == {}
        assert request.stream is False

    def test_is_frozen(self):
        request = CanonicalRequest(prompt="Hi")
        with pytest.raises(ValidationError):
            request.prompt = "changed"

    def test_to_external_uses_camel_case(self):
        request = CanonicalRequest(prompt="Hi", system_prompt="Be brief", model="gpt-4.1-mini")
        data = request.to_external()
        assert data["systemPrompt"] == "Be brief"
        assert data["model"] == "gpt-4.1-mini"
        assert "provider" not in data


class TestResolvedRequest:
    def test_requires_provider_and_model(self):
        with pytest.raises(ValidationError):
            ResolvedRequest(prompt="Hi")


class TestUsage:
    def test_build_usage_totals(self):
        usage = build_usage(10, 5)
        assert usage["total_tokens"] == 15
        assert usage["prompt_tokens"] == 10
        assert usage["completion_tokens"] == 5
        assert usage["cached_tokens"] == 0

    def test_explicit_total_is_kept(self):
        assert build_usage(10, 5, total_tokens=20)["total_tokens"] == 20


class TestCanonicalResponse:
    """Test the provider-neutral response."""

    def test_error_response(self):
        response = CanonicalResponse.error_response("boom", 12)
        assert response.content == ""
        assert response.cost == 0.0
        assert response.error == "boom"
        assert response.response_time_ms == 12
        assert not response.ok

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError):
            CanonicalResponse(cost=-0.1)

    def test_token_properties(self):
        response = CanonicalResponse(content="x", usage=build_usage(7, 3))
        assert response.input_tokens == 7
        assert response.output_tokens == 3
        assert response.total_tokens == 10

    def test_to_external(self):
        data = CanonicalResponse(content="x", response_time_ms=5).to_external()
        assert data["responseTimeMs"] == 5
        assert "error" not in data


class TestModelInfo:
    """Test catalog entries."""

    def test_from_dict_uses_key_as_id(self):
        info = ModelInfo.from_dict("openai", "gpt-4.1-mini", {
            "provider": "openai",
            "model": "gpt-4.1-mini",
            "features": ["streaming", "vision"],
            "pricing": {"input": 0.4, "output": 1.6},
            "limits": {"max_tokens": 32768, "context_window": 1047576},
        })
        assert info.id == "gpt-4.1-mini"
        assert info.features == frozenset({"streaming", "vision"})
        assert info.max_tokens == 32768
        assert info.context_window == 1047576
        assert info.pricing.input == 0.4

    def test_date_version_coerced_to_string(self):
        info = ModelInfo(id="m", provider="p", version=datetime.date(2024, 10, 22))
        assert info.version == "2024-10-22"

    def test_to_dict_round_trip(self):
        info = ModelInfo(
            id="claude-3-5-haiku-20241022",
            provider="claude",
            features=["streaming"],
            max_tokens=8192,
            pricing=ModelPricing(input=0.8, output=4.0),
        )
        data = info.to_dict()
        assert data["model"] == "claude-3-5-haiku-20241022"
        assert data["limits"] == {"max_tokens": 8192}
        assert ModelInfo.from_dict("claude", data["model"], data) == info.model_copy(
            update={"limits": {"max_tokens": 8192}}
        )

    def test_has_feature_and_display_name(self):
        info = ModelInfo(id="m", provider="p", features=["vision"])
        assert info.has_feature("vision")
        assert not info.has_feature("audio")
        assert info.display_name == "m"


class TestModelPricing:
    def test_cached_rate_defaults_to_input(self):
        assert ModelPricing(input=1.0, output=2.0).effective_cached_input == 1.0
        assert ModelPricing(input=1.0, output=2.0, cached_input=0.25).effective_cached_input == 0.25

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            ModelPricing(input=-1, output=1)


class TestPreset:
    def test_version_must_be_positive(self):
        with pytest.raises(ValidationError):
            Preset(name="x", version=0)

    def test_to_dict_drops_none(self):
        assert Preset(name="x", provider="openai").to_dict() == {
            "name": "x",
            "provider": "openai",
            "options": {},
            "version": 1,
        }
