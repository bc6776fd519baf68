"""Reference-instant providers for promotion eligibility checks."""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Union


@dataclass(frozen=True)
class ReferenceDate:
    """Instant captured once per pricing call"""
    moment: datetime

    @property
    def date(self) -> date:
        return self.moment.date()

    @property
    def weekday(self) -> int:
        """Weekday index with Sunday as 0 and Saturday as 6"""
        return self.moment.isoweekday() % 7

    @classmethod
    def from_value(cls, value: Union[date, datetime]) -> 'ReferenceDate':
        if isinstance(value, datetime):
            return cls(value)
        return cls(datetime.combine(value, time.min))


class Clock:
    """Supplies the reference instant used for date and weekday checks."""

    def now(self) -> ReferenceDate:
        raise NotImplementedError


class SystemClock(Clock):
    """Wall-clock time in the local timezone"""

    def now(self) -> ReferenceDate:
        return ReferenceDate(datetime.now())


class FixedClock(Clock):
    """Always returns the same instant; used for reproducible pricing."""

    def __init__(self, value: Union[date, datetime]):
        self._reference = ReferenceDate.from_value(value)

    def now(self) -> ReferenceDate:
        return self._reference
