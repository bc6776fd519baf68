"""Single-promotion selection among simultaneously eligible rules."""

from typing import List, Optional
import logging

from ..core.models import Promotion

logger = logging.getLogger(__name__)


class PriorityResolver:
    """Picks at most one promotion per sale line; promotions never stack.

    Date-bounded campaigns are preferred over standing rules. Among rules of
    equal specificity the catalog order is kept and the first one wins, an
    arbitrary but deterministic tie-break.
    """

    def __init__(self, prefer_date_window: bool = True):
        self.prefer_date_window = prefer_date_window

    def resolve(self, eligible: List[Promotion]) -> Optional[Promotion]:
        if not eligible:
            return None

        ordered = self.order(eligible)
        chosen = ordered[0]

        if len(ordered) > 1:
            logger.debug(
                f"Resolved {len(ordered)} eligible promotions to {chosen.id} ({chosen.name})"
            )
        return chosen

    def order(self, eligible: List[Promotion]) -> List[Promotion]:
        """Priority order; sorted() is stable so ties keep catalog order"""
        if not self.prefer_date_window:
            return list(eligible)
        return sorted(eligible, key=lambda p: 0 if p.has_date_window else 1)
