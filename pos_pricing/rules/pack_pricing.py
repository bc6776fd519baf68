"""Pack/remainder arithmetic for the three discount shapes."""

from decimal import Decimal
from typing import Optional, Tuple
import logging

from ..core.models import DiscountType, MatchContext, Presentation, PricingResult, Promotion

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
HUNDRED = Decimal('100')


class PackPricingCalculator:
    """Computes base and discounted totals for a sale line.

    A promotion's min_quantity doubles as its pack size: every whole pack gets
    the discount formula, units beyond the last whole pack (the remainder) are
    charged at the full unit price. Arithmetic stays in Decimal and nothing is
    rounded per pack.
    """

    def price(self, ctx: MatchContext, presentation: Presentation,
              promo: Optional[Promotion]) -> PricingResult:
        unit_price = presentation.unit_price(ctx.channel)
        base_total = Decimal(unit_price) * ctx.quantity

        if promo is not None and promo.min_quantity < 1:
            logger.warning(
                f"Ignoring promotion {promo.id}: pack size {promo.min_quantity} is not positive"
            )
            promo = None

        if promo is None:
            total = base_total
        else:
            total = self._discounted_total(promo, unit_price, ctx.quantity)

        # Never charge a negative amount
        total = max(ZERO, total)

        return PricingResult(
            base_total=base_total,
            total=total,
            applied_promotion=promo,
            quantity=ctx.quantity,
            unit_price=unit_price,
            channel=ctx.channel,
            reference_date=ctx.reference_date,
        )

    def split_packs(self, quantity: int, pack_size: int) -> Tuple[int, int]:
        """Number of whole packs and leftover units"""
        return divmod(quantity, pack_size)

    def pack_price(self, promo: Promotion, unit_price: int) -> Decimal:
        """Price charged for one whole pack under a promotion"""
        value = Decimal(promo.discount_value)
        pack_base_price = Decimal(unit_price) * promo.min_quantity

        if promo.discount_type == DiscountType.FIXED_PRICE:
            # The discount value is the pack's price, not an amount off
            return value
        elif promo.discount_type == DiscountType.PERCENTAGE:
            return pack_base_price * (Decimal('1') - value / HUNDRED)
        elif promo.discount_type == DiscountType.AMOUNT_OFF:
            return max(ZERO, pack_base_price - value)

        logger.warning(f"Unknown discount type {promo.discount_type!r} on promotion {promo.id}")
        return pack_base_price

    def _discounted_total(self, promo: Promotion, unit_price: int, quantity: int) -> Decimal:
        num_packs, remainder = self.split_packs(quantity, promo.min_quantity)
        return num_packs * self.pack_price(promo, unit_price) + remainder * Decimal(unit_price)
