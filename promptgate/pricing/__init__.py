"""Cost calculation for promptgate."""

from .calculator import CostBreakdown, CostCalculator

__all__ = [
    "CostBreakdown",
    "CostCalculator",
]
