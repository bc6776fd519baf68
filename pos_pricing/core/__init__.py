"""Domain records, clock and exceptions of the pricing engine."""

from .clock import Clock, FixedClock, ReferenceDate, SystemClock
from .exceptions import PosPricingError, RecordParseError, SaleValidationError, ZeroTotalError
from .models import (
    Always, Channel, Combined, DateRange, DiscountType, MatchContext, PaymentMethod,
    Presentation, PricingResult, Promotion, SaleRecord, TimeScope, Weekdays
)

__all__ = [
    'Clock', 'FixedClock', 'ReferenceDate', 'SystemClock',
    'PosPricingError', 'RecordParseError', 'SaleValidationError', 'ZeroTotalError',
    'Always', 'Channel', 'Combined', 'DateRange', 'DiscountType', 'MatchContext',
    'PaymentMethod', 'Presentation', 'PricingResult', 'Promotion', 'SaleRecord',
    'TimeScope', 'Weekdays'
]
