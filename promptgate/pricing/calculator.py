"""Cost calculator for promptgate.

Prices are published per 1M tokens. The calculator works on a snapshot of
the catalog pricing taken at construction time, so it can be shared freely
between concurrent requests.

Usage:
    calculator = CostCalculator.from_repository(repository, config.pricing)

    cost = calculator.cost("gpt-4.1-mini", input_tokens=1000, output_tokens=500)
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Iterable, Optional

from promptgate.config import PricingSettings
from promptgate.types import ModelInfo, ModelPricing

if TYPE_CHECKING:
    from promptgate.catalog.repository import ModelRepository

logger = logging.getLogger(__name__)

PER_MILLION = Decimal(1_000_000)


@dataclass(frozen=True)
class CostBreakdown:
    """Detailed cost, already converted to the display currency."""
    input_cost: Decimal
    output_cost: Decimal
    cache_savings: Decimal
    total_cost: Decimal
    currency: str = "USD"
    priced: bool = True

    def to_dict(self) -> dict:
        return {
            "input_cost": float(self.input_cost),
            "output_cost": float(self.output_cost),
            "cache_savings": float(self.cache_savings),
            "total_cost": float(self.total_cost),
            "currency": self.currency,
            "priced": self.priced,
        }


class CostCalculator:
    """Calculate request costs from catalog pricing."""

    def __init__(
        self,
        models: Iterable[ModelInfo] = (),
        settings: Optional[PricingSettings] = None,
    ) -> None:
        """Initialize calculator.

        Args:
            models: Catalog entries; their pricing is copied
            settings: Currency, exchange rate and rounding
        """
        self.settings = settings or PricingSettings()
        self._models: dict[tuple[str, str], ModelInfo] = {}
        self._by_id: dict[str, ModelInfo] = {}
        for info in models:
            self._models[(info.provider, info.id)] = info
            self._by_id.setdefault(info.id, info)
        self._quantum = Decimal(1).scaleb(-int(self.settings.decimal_places))
        self.unpriced_models: set[str] = set()

    @classmethod
    def from_repository(
        cls, repository: "ModelRepository", settings: Optional[PricingSettings] = None
    ) -> "CostCalculator":
        return cls(repository.all_models(), settings)

    @property
    def currency(self) -> str:
        return self.settings.currency

    def _lookup(self, model: str, provider: Optional[str] = None) -> Optional[ModelInfo]:
        if provider is not None and (provider, model) in self._models:
            return self._models[(provider, model)]
        return self._by_id.get(model)

    def get_pricing(self, model: str, provider: Optional[str] = None) -> Optional[ModelPricing]:
        info = self._lookup(model, provider)
        return info.pricing if info else None

    def _quantize(self, value: Decimal) -> Decimal:
        return value.quantize(self._quantum, rounding=ROUND_HALF_UP)

    def breakdown(
        self,
        model: str,
        input_tokens: int,
        output_tokens: int,
        cached_tokens: int = 0,
        *,
        provider: Optional[str] = None,
    ) -> CostBreakdown:
        """Calculate a detailed cost.

        Args:
            model: Model identifier
            input_tokens: Prompt tokens, cached ones included
            output_tokens: Completion tokens
            cached_tokens: Prompt tokens served from the vendor's prompt cache
            provider: Disambiguates model ids shared by several vendors

        Returns:
            CostBreakdown; all zero with ``priced=False`` when the model has
            no pricing
        """
        pricing = self.get_pricing(model, provider)
        zero = self._quantize(Decimal(0))
        if pricing is None:
            if model not in self.unpriced_models:
                logger.warning("No pricing for model %s, cost recorded as 0", model)
            self.unpriced_models.add(model)
            return CostBreakdown(zero, zero, zero, zero, self.currency, priced=False)

        rate = Decimal(str(self.settings.exchange_rate))
        input_rate = Decimal(str(pricing.input)) / PER_MILLION
        output_rate = Decimal(str(pricing.output)) / PER_MILLION
        cached_rate = Decimal(str(pricing.effective_cached_input)) / PER_MILLION

        input_cost = Decimal(max(0, input_tokens)) * input_rate * rate
        output_cost = Decimal(max(0, output_tokens)) * output_rate * rate
        savings = Decimal(max(0, cached_tokens)) * (input_rate - cached_rate) * rate
        total = max(Decimal(0), input_cost + output_cost - savings)

        return CostBreakdown(
            input_cost=self._quantize(input_cost),
            output_cost=self._quantize(output_cost),
            cache_savings=self._quantize(savings),
            total_cost=self._quantize(total),
            currency=self.currency,
        )

    def cost(
        self,
        model: str,
        input_tokens: int,
        output_tokens: int,
        cached_tokens: int = 0,
        *,
        provider: Optional[str] = None,
    ) -> float:
        """Total cost in the display currency. Never negative."""
        breakdown = self.breakdown(
            model, input_tokens, output_tokens, cached_tokens, provider=provider
        )
        return float(breakdown.total_cost)

    def estimate_cost(
        self,
        model: str,
        input_tokens: int,
        output_tokens: int = 0,
        *,
        provider: Optional[str] = None,
    ) -> float:
        """Estimate cost before sending.

        When ``output_tokens`` is 0 the model's ``max_tokens`` limit is
        used as the upper bound.
        """
        if not output_tokens:
            limits = self.model_limits(model, provider=provider)
            output_tokens = limits.get("max_tokens", 0)
        return self.cost(model, input_tokens, output_tokens, provider=provider)

    def model_limits(self, model: str, *, provider: Optional[str] = None) -> dict[str, int]:
        info = self._lookup(model, provider)
        if info is None:
            return {}
        limits = dict(info.limits)
        if info.max_tokens is not None:
            limits["max_tokens"] = info.max_tokens
        if info.context_window is not None:
            limits["context_window"] = info.context_window
        return limits

    def models_by_provider(self, provider: str) -> list[ModelInfo]:
        return [info for (p, _), info in self._models.items() if p == provider]

    def models_by_feature(self, feature: str) -> list[ModelInfo]:
        return [info for info in self._models.values() if info.has_feature(feature)]
