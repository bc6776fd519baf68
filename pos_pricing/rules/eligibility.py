"""Structural eligibility of promotions for a sale line."""

from typing import Iterable, List, Optional
import logging

from ..core.models import MatchContext, Promotion

logger = logging.getLogger(__name__)


class EligibilityFilter:
    """Selects the promotions whose conditions all hold for a match context."""

    def eligible(self, rules: Iterable[Promotion], ctx: MatchContext) -> List[Promotion]:
        """Return the eligible subset, preserving catalog order"""
        matched = [rule for rule in rules if self.is_eligible(rule, ctx)]

        logger.debug(
            f"{len(matched)} eligible promotions for presentation {ctx.presentation_id} "
            f"(qty={ctx.quantity}, channel={ctx.channel.value})"
        )
        return matched

    def is_eligible(self, rule: Promotion, ctx: MatchContext) -> bool:
        """Check every condition of a single rule (AND logic)."""
        reason = self.rejection_reason(rule, ctx)
        if reason:
            logger.debug(f"Promotion {rule.id} skipped: {reason}")
            return False
        return True

    def rejection_reason(self, rule: Promotion, ctx: MatchContext) -> Optional[str]:
        """Name the first failing condition, or None when the rule is eligible"""
        if rule.presentation_id != ctx.presentation_id:
            return "different presentation"

        if not rule.is_active:
            return "disabled"

        if rule.min_quantity < 1:
            return f"invalid pack size {rule.min_quantity}"

        if ctx.quantity < rule.min_quantity:
            return f"quantity {ctx.quantity} below minimum {rule.min_quantity}"

        if not rule.applies_to_channel(ctx.channel):
            return f"channel {rule.channel.value} does not cover {ctx.channel.value}"

        # Date window and weekday set are checked independently when both are stored
        if not rule.time_scope.matches(ctx.reference_date):
            return f"outside time scope on {ctx.reference_date.date.isoformat()}"

        return None
