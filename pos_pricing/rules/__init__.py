"""Promotion matching and pack pricing rules."""

from .eligibility import EligibilityFilter
from .priority import PriorityResolver
from .pack_pricing import PackPricingCalculator

__all__ = [
    'EligibilityFilter',
    'PriorityResolver',
    'PackPricingCalculator'
]
