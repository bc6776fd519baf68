"""Conversion of storage rows into domain records.

Storage transports a promotion's weekday set as a comma-separated string of
weekday digits (empty means every day) and its date bounds as YYYY-MM-DD
strings or NULL. Both are parsed here, once, into a TimeScope.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Union

from ..core.exceptions import RecordParseError
from ..core.models import (
    Always, Channel, Combined, DateRange, DiscountType, Presentation, Promotion, TimeScope, Weekdays
)

Row = Mapping[str, Any]


def parse_active_days(value: Union[None, str, Iterable[int]],
                      record_id: Optional[Any] = None) -> FrozenSet[int]:
    """Parse "2" or "1,3,5" into weekday indices; empty or NULL means every day"""
    if value is None:
        return frozenset()

    parts = value.split(',') if isinstance(value, str) else list(value)
    days = set()
    for part in parts:
        text = str(part).strip()
        if not text:
            continue
        try:
            day = int(text)
        except ValueError:
            raise RecordParseError("Invalid weekday", record_id, 'active_days', value) from None
        if day < 0 or day > 6:
            raise RecordParseError("Weekday out of range 0-6", record_id, 'active_days', value)
        days.add(day)

    return frozenset(days)


def parse_date(value: Union[None, str, date], field_name: str = 'date',
               record_id: Optional[Any] = None) -> Optional[date]:
    """Parse a YYYY-MM-DD bound; empty or NULL means unbounded"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise RecordParseError("Invalid date", record_id, field_name, value) from None


def build_time_scope(active_days: FrozenSet[int], start: Optional[date],
                     end: Optional[date]) -> TimeScope:
    """Pick the narrowest TimeScope variant for the stored restrictions"""
    has_dates = start is not None or end is not None

    if active_days and has_dates:
        return Combined(Weekdays(active_days), DateRange(start, end))
    if has_dates:
        return DateRange(start, end)
    if active_days:
        return Weekdays(active_days)
    return Always()


def _parse_flag(value: Any) -> bool:
    # Only an explicit 1/true enables a promotion
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true')
    return value is True or value == 1


def presentation_from_row(row: Row) -> Presentation:
    record_id = row.get('id')
    try:
        return Presentation(
            id=row['id'],
            name=row['name'],
            price_local=int(row['price_local']),
            price_delivery=int(row['price_delivery']),
        )
    except KeyError as e:
        raise RecordParseError("Missing column", record_id, str(e.args[0]), None) from None
    except (TypeError, ValueError) as e:
        raise RecordParseError(f"Invalid price: {e}", record_id) from None


def promotion_from_row(row: Row) -> Promotion:
    """Convert a promotions row into a Promotion"""
    record_id = row.get('id')

    try:
        discount_type = DiscountType(row.get('discount_type'))
    except ValueError:
        raise RecordParseError("Unknown discount type", record_id,
                               'discount_type', row.get('discount_type')) from None

    try:
        channel = Channel(row.get('channel') or Channel.ALL.value)
    except ValueError:
        raise RecordParseError("Unknown channel", record_id, 'channel', row.get('channel')) from None

    try:
        discount_value = Decimal(str(row.get('discount_value')))
    except InvalidOperation:
        raise RecordParseError("Invalid discount value", record_id,
                               'discount_value', row.get('discount_value')) from None
    if not discount_value.is_finite():
        raise RecordParseError("Discount value must be finite", record_id,
                               'discount_value', row.get('discount_value'))

    min_quantity = row.get('min_quantity')
    try:
        min_quantity = 1 if min_quantity is None else int(min_quantity)
    except (TypeError, ValueError):
        raise RecordParseError("Invalid minimum quantity", record_id,
                               'min_quantity', min_quantity) from None

    time_scope = build_time_scope(
        parse_active_days(row.get('active_days'), record_id),
        parse_date(row.get('start_date'), 'start_date', record_id),
        parse_date(row.get('end_date'), 'end_date', record_id),
    )

    return Promotion(
        id=record_id,
        name=row.get('name') or '',
        presentation_id=row.get('presentation_id'),
        min_quantity=min_quantity,
        discount_type=discount_type,
        discount_value=discount_value,
        time_scope=time_scope,
        channel=channel,
        is_active=_parse_flag(row.get('is_active', 1)),
    )
