"""Exceptions raised around the pricing engine.

The engine itself never raises for well-typed input; these cover the storage
boundary (rows that cannot be turned into domain records) and sale registration.
"""

from typing import Any, List, Optional


class PosPricingError(Exception):
    """Base exception for all POS pricing errors."""

    pass


class RecordParseError(PosPricingError, ValueError):
    """A storage row could not be parsed into a domain record."""

    def __init__(self, message: str, record_id: Optional[Any] = None,
                 field_name: Optional[str] = None, value: Optional[Any] = None):
        self.record_id = record_id
        self.field_name = field_name
        self.value = value

        if field_name:
            message = f"{message} (field '{field_name}', value {value!r})"
        if record_id is not None:
            message = f"Record {record_id}: {message}"

        super().__init__(message)


class SaleValidationError(PosPricingError, ValueError):
    """A sale record failed validation before persistence."""

    def __init__(self, message: str, violations: Optional[List[str]] = None):
        self.violations = violations or [message]
        super().__init__(message)


class ZeroTotalError(SaleValidationError):
    """The priced sale line totals 0 and cannot be registered."""

    def __init__(self, presentation_name: str, quantity: int):
        self.presentation_name = presentation_name
        self.quantity = quantity
        super().__init__(
            f"Total cannot be 0 for {quantity} x {presentation_name}"
        )
