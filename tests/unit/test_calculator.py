"""Tests for the cost calculator."""

import pytest

from promptgate.catalog import ModelRepository
from promptgate.config import PricingSettings
from promptgate.pricing import CostCalculator
from promptgate.types import ModelInfo, ModelPricing


@pytest.fixture
def models():
    return [
        ModelInfo(
            id="gpt-4.1-mini",
            provider="openai",
            max_tokens=32768,
            pricing=ModelPricing(input=0.40, output=1.60, cached_input=0.10),
        ),
        ModelInfo(id="shared", provider="openai", pricing=ModelPricing(input=1.0, output=1.0)),
        ModelInfo(id="shared", provider="grok", pricing=ModelPricing(input=2.0, output=2.0)),
        ModelInfo(id="free-tier", provider="gemini"),
    ]


class TestCostCalculator:
    """Test cost calculation."""

    def test_per_million_formula(self, models):
        calculator = CostCalculator(models)
        assert calculator.cost("gpt-4.1-mini", 1000, 500) == pytest.approx(0.0012)

    def test_breakdown(self, models):
        breakdown = CostCalculator(models).breakdown("gpt-4.1-mini", 1000, 500)
        assert float(breakdown.input_cost) == pytest.approx(0.0004)
        assert float(breakdown.output_cost) == pytest.approx(0.0008)
        assert breakdown.currency == "USD"
        assert breakdown.priced is True

    def test_unpriced_model_costs_zero(self, models):
        calculator = CostCalculator(models)
        assert calculator.cost("free-tier", 1000, 1000) == 0.0
        assert calculator.cost("never-heard-of-it", 1000, 1000) == 0.0
        assert calculator.unpriced_models == {"free-tier", "never-heard-of-it"}
        assert calculator.breakdown("free-tier", 1, 1).priced is False

    def test_cached_tokens_discounted(self, models):
        calculator = CostCalculator(models)
        full = calculator.cost("gpt-4.1-mini", 1_000_000, 0)
        discounted = calculator.cost("gpt-4.1-mini", 1_000_000, 0, cached_tokens=1_000_000)
        assert full == pytest.approx(0.40)
        assert discounted == pytest.approx(0.10)

    def test_never_negative(self, models):
        calculator = CostCalculator(models)
        assert calculator.cost("gpt-4.1-mini", 0, 0, cached_tokens=500) == 0.0

    def test_exchange_rate_and_rounding(self, models):
        calculator = CostCalculator(models, PricingSettings(currency="EUR", exchange_rate=0.5, decimal_places=4))
        assert calculator.currency == "EUR"
        assert calculator.cost("gpt-4.1-mini", 1000, 500) == pytest.approx(0.0006)

    def test_provider_disambiguates(self, models):
        calculator = CostCalculator(models)
        assert calculator.cost("shared", 1_000_000, 0, provider="grok") == pytest.approx(2.0)
        assert calculator.cost("shared", 1_000_000, 0, provider="openai") == pytest.approx(1.0)

    def test_estimate_uses_max_tokens(self, models):
        calculator = CostCalculator(models)
        expected = (1000 * 0.40 + 32768 * 1.60) / 1_000_000
        assert calculator.estimate_cost("gpt-4.1-mini", 1000) == pytest.approx(round(expected, 6))

    def test_lookups(self, models):
        calculator = CostCalculator(models)
        assert calculator.model_limits("gpt-4.1-mini") == {"max_tokens": 32768}
        assert calculator.model_limits("unknown") == {}
        assert {m.id for m in calculator.models_by_provider("openai")} == {"gpt-4.1-mini", "shared"}

    def test_from_repository(self, store):
        calculator = CostCalculator.from_repository(ModelRepository(store, "models.yaml"))
        assert calculator.get_pricing("claude-3-5-haiku-20241022").output == 4.0
