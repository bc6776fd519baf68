from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, FrozenSet, Optional
from enum import Enum

from .clock import ReferenceDate


class Channel(Enum):
    LOCAL = "local"
    PEDIDOS_YA = "pedidos_ya"  # delivery marketplace
    ALL = "all"  # promotions only


class DiscountType(Enum):
    FIXED_PRICE = "fixed_price"  # pack total pinned to discount_value
    PERCENTAGE = "percentage"  # percent off each pack
    AMOUNT_OFF = "amount_off"  # absolute amount off each pack


class PaymentMethod(Enum):
    CASH = "efectivo"
    MERCADO_PAGO = "mercado_pago"


class TimeScope:
    """Calendar restriction of a promotion"""

    has_date_window = False

    def matches(self, reference: ReferenceDate) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Always(TimeScope):
    """No calendar restriction"""

    def matches(self, reference: ReferenceDate) -> bool:
        return True


@dataclass(frozen=True)
class Weekdays(TimeScope):
    """Restricted to a set of weekday indices (0=Sunday..6=Saturday)"""
    days: FrozenSet[int]

    def __post_init__(self):
        object.__setattr__(self, 'days', frozenset(self.days))
        invalid = [d for d in self.days if d < 0 or d > 6]
        if invalid:
            raise ValueError(f"Weekday indices must be between 0 and 6, got {sorted(invalid)}")

    def matches(self, reference: ReferenceDate) -> bool:
        # An empty set behaves like Always
        return not self.days or reference.weekday in self.days


@dataclass(frozen=True)
class DateRange(TimeScope):
    """Inclusive calendar window; either bound may be open"""
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def has_date_window(self) -> bool:
        return self.start is not None or self.end is not None

    def matches(self, reference: ReferenceDate) -> bool:
        today = reference.date
        if self.start is not None and today < self.start:
            return False
        if self.end is not None and today > self.end:
            return False
        return True


@dataclass(frozen=True)
class Combined(TimeScope):
    """Weekday set and date window stored together; both must pass."""
    weekdays: Weekdays
    date_range: DateRange

    @property
    def has_date_window(self) -> bool:
        return self.date_range.has_date_window

    def matches(self, reference: ReferenceDate) -> bool:
        return self.date_range.matches(reference) and self.weekdays.matches(reference)


_PRICE_FIELDS = {
    Channel.LOCAL: 'price_local',
    Channel.PEDIDOS_YA: 'price_delivery',
}


@dataclass
class Presentation:
    """Sellable product configuration with one unit price per channel"""
    id: int
    name: str
    price_local: int
    price_delivery: int

    def unit_price(self, channel: Channel) -> int:
        """Look up the unit price charged on a sales channel"""
        try:
            return getattr(self, _PRICE_FIELDS[channel])
        except KeyError:
            raise ValueError(f"No unit price for channel {channel.value!r}") from None


@dataclass
class Promotion:
    """Discount rule scoped to one presentation"""
    id: int
    name: str
    presentation_id: int
    min_quantity: int  # also the pack size
    discount_type: DiscountType
    discount_value: Decimal
    time_scope: TimeScope = field(default_factory=Always)
    channel: Channel = Channel.ALL
    is_active: bool = True

    @property
    def has_date_window(self) -> bool:
        return self.time_scope.has_date_window

    def applies_to_channel(self, channel: Channel) -> bool:
        return self.channel == Channel.ALL or self.channel == channel


@dataclass(frozen=True)
class MatchContext:
    """Inputs of one eligibility check"""
    presentation_id: int
    quantity: int
    channel: Channel
    reference_date: ReferenceDate


@dataclass
class PricingResult:
    """Outcome of pricing one sale line"""
    base_total: Decimal
    total: Decimal
    applied_promotion: Optional[Promotion] = None
    quantity: int = 0
    unit_price: int = 0
    channel: Optional[Channel] = None
    reference_date: Optional[ReferenceDate] = None

    @property
    def discount(self) -> Decimal:
        return self.base_total - self.total

    @property
    def effective_unit_price(self) -> int:
        """Per-unit price persisted on the sale record, rounded half up"""
        if self.quantity <= 0:
            return 0
        per_unit = self.total / Decimal(self.quantity)
        return int(per_unit.quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    @classmethod
    def zero(cls) -> 'PricingResult':
        return cls(base_total=Decimal('0'), total=Decimal('0'))

    def to_dict(self) -> Dict[str, Any]:
        promo = self.applied_promotion
        return {
            'channel': self.channel.value if self.channel else None,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'base_total': float(self.base_total),
            'total': float(self.total),
            'discount': float(self.discount),
            'effective_unit_price': self.effective_unit_price,
            'promotion_id': promo.id if promo else None,
            'promotion_name': promo.name if promo else None,
            'reference_date': self.reference_date.moment.isoformat() if self.reference_date else None,
        }


@dataclass
class SaleRecord:
    """Sale line ready for persistence"""
    type: Channel
    presentation_name: str
    price_base: int
    quantity: int
    total: int
    date: datetime
    payment_method: PaymentMethod = PaymentMethod.CASH
    promotion_id: Optional[int] = None
    id: Optional[int] = None

    def to_row(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'presentation_name': self.presentation_name,
            'price_base': self.price_base,
            'quantity': self.quantity,
            'total': self.total,
            'date': self.date.isoformat(),
            'payment_method': self.payment_method.value,
        }
