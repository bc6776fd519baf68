"""Pricing Engine

Composes the eligibility filter, the priority resolver and the pack pricing
calculator into the single entry point used by sale registration. The engine
is a pure function of its inputs and one clock reading per call.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging

from . import PRICING_CONFIG
from .core.clock import Clock, ReferenceDate, SystemClock
from .core.exceptions import SaleValidationError, ZeroTotalError
from .core.models import (
    Channel, MatchContext, PaymentMethod, Presentation, PricingResult, Promotion, SaleRecord
)
from .rules.eligibility import EligibilityFilter
from .rules.pack_pricing import PackPricingCalculator
from .rules.priority import PriorityResolver
from .utils.validation import SaleValidator

logger = logging.getLogger(__name__)

ChannelLike = Union[Channel, str]


class PricingEngine:
    """Entry point for pricing sale lines against the promotion catalog"""

    def __init__(self, config: Optional[Dict] = None, clock: Optional[Clock] = None):
        """Initialize engine with optional configuration and clock"""
        self.config = PRICING_CONFIG.copy()
        if config:
            self.config.update(config)

        self.clock = clock or SystemClock()

        self.eligibility = EligibilityFilter()
        self.resolver = PriorityResolver(self.config['prefer_date_window'])
        self.calculator = PackPricingCalculator()
        self.validator = SaleValidator(self.config['total_tolerance'])

    def compute_price(self,
                      presentation: Optional[Presentation],
                      promotions: Sequence[Promotion],
                      quantity: int,
                      channel: ChannelLike,
                      clock: Optional[Clock] = None) -> PricingResult:
        """Price one sale line, applying at most one promotion"""
        reference = (clock or self.clock).now()
        return self._price_at(presentation, promotions, quantity, channel, reference)

    def price_lines(self,
                    lines: List[Tuple[Optional[Presentation], int, ChannelLike]],
                    promotions: Sequence[Promotion],
                    clock: Optional[Clock] = None) -> List[PricingResult]:
        """Price several lines against one shared clock reading"""
        reference = (clock or self.clock).now()
        return [
            self._price_at(presentation, promotions, quantity, channel, reference)
            for presentation, quantity, channel in lines
        ]

    def register_sale(self,
                      presentation: Presentation,
                      promotions: Sequence[Promotion],
                      quantity: int,
                      channel: ChannelLike,
                      payment_method: Optional[Union[PaymentMethod, str]] = None,
                      clock: Optional[Clock] = None) -> Tuple[SaleRecord, PricingResult]:
        """Price a line and build the validated sale record to persist"""
        if presentation is None:
            raise SaleValidationError("A product is required to register a sale")

        sale_channel = _sale_channel(channel)
        if sale_channel is None:
            raise SaleValidationError(f"Invalid channel: {channel!r}")

        try:
            method = PaymentMethod(payment_method or self.config['default_payment_method'])
        except ValueError:
            raise SaleValidationError(f"Invalid payment method: {payment_method!r}") from None

        reference = (clock or self.clock).now()
        result = self._price_at(presentation, promotions, quantity, sale_channel, reference)

        if self.config['reject_zero_total'] and result.total <= 0:
            raise ZeroTotalError(presentation.name, quantity)

        record = SaleRecord(
            type=sale_channel,
            presentation_name=presentation.name,
            price_base=result.effective_unit_price,
            quantity=quantity,
            total=int(result.total.quantize(Decimal('1'), rounding=ROUND_HALF_UP)),
            date=reference.moment,
            payment_method=method,
            promotion_id=result.applied_promotion.id if result.applied_promotion else None,
        )
        self.validator.validate_sale(record.to_row())

        logger.info(
            f"Registered {quantity} x {presentation.name} on {record.type.value} "
            f"for {record.total} ({method.value})"
        )
        return record, result

    def generate_audit_log(self, result: PricingResult,
                           presentation: Optional[Presentation] = None) -> Dict:
        """Generate audit entry for a pricing result"""
        timestamp = result.reference_date.moment if result.reference_date else datetime.now()
        product_id = presentation.id if presentation else None

        audit_log = {
            'decision_id': f"{product_id}_{timestamp.isoformat()}",
            'timestamp': timestamp.isoformat(),
            'product_id': product_id,
            'metadata': {
                'product_name': presentation.name if presentation else '',
            },
            **result.to_dict()
        }

        promo = result.applied_promotion
        if promo:
            audit_log['promotion'] = {
                'id': promo.id,
                'name': promo.name,
                'discount_type': promo.discount_type.value,
                'discount_value': float(promo.discount_value),
                'pack_size': promo.min_quantity,
                'channel': promo.channel.value,
            }

        return audit_log

    def _price_at(self,
                  presentation: Optional[Presentation],
                  promotions: Sequence[Promotion],
                  quantity: int,
                  channel: ChannelLike,
                  reference: ReferenceDate) -> PricingResult:
        # "Nothing selected yet" is a normal UI state, not an error
        sale_channel = _sale_channel(channel)
        if presentation is None or quantity < 0 or sale_channel is None:
            return PricingResult.zero()

        ctx = MatchContext(
            presentation_id=presentation.id,
            quantity=quantity,
            channel=sale_channel,
            reference_date=reference,
        )

        eligible = self.eligibility.eligible(promotions, ctx)
        promo = self.resolver.resolve(eligible)
        result = self.calculator.price(ctx, presentation, promo)

        logger.debug(
            f"Priced {quantity} x {presentation.name} ({ctx.channel.value}): "
            f"base={result.base_total} total={result.total} "
            f"promotion={promo.id if promo else None}"
        )
        return result


def _sale_channel(channel: ChannelLike) -> Optional[Channel]:
    # A line is sold on exactly one concrete channel
    try:
        parsed = Channel(channel)
    except ValueError:
        return None
    return None if parsed == Channel.ALL else parsed


def compute_price(presentation: Optional[Presentation],
                  all_promotions: Sequence[Promotion],
                  quantity: int,
                  channel: ChannelLike,
                  clock: Optional[Clock] = None) -> PricingResult:
    """Price a sale line with a default-configured engine"""
    return PricingEngine(clock=clock).compute_price(presentation, all_promotions, quantity, channel)
