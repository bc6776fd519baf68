from typing import Dict, List, Any, Optional, Tuple
import logging

from .. import CHANNELS, PAYMENT_METHODS
from ..core.exceptions import SaleValidationError


logger = logging.getLogger(__name__)


class SaleValidator:
    """Validation of sale records before they reach storage"""

    def __init__(self, total_tolerance: int = 10):
        # Promotions may lower the total below price_base * quantity, never raise it
        self.total_tolerance = total_tolerance
        self.validation_stats = {
            'total_validated': 0,
            'passed': 0,
            'failed': 0
        }

    def validate_number(self, value: Any, name: str,
                        allow_zero: bool = True) -> Tuple[Optional[float], Optional[str]]:
        """Coerce a numeric field, returning the value or an error message"""
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None, f"Invalid {name}: {value!r}"

        if number != number:  # NaN
            return None, f"Invalid {name}: {value!r}"
        if number < 0 or (not allow_zero and number == 0):
            return None, f"Invalid {name}: {value!r}"

        return number, None

    def check_sale(self, data: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """Collect every violation of a sale record"""
        errors = []

        if data.get('type') not in CHANNELS:
            errors.append(f"Invalid sale type: {data.get('type')!r}")

        if not data.get('presentation_name'):
            errors.append("Product is required")

        price_base, error = self.validate_number(data.get('price_base'), 'price_base')
        if error:
            errors.append(error)

        quantity, error = self.validate_number(data.get('quantity'), 'quantity', allow_zero=False)
        if error:
            errors.append(error)

        total, error = self.validate_number(data.get('total'), 'total')
        if error:
            errors.append(error)

        if None not in (price_base, quantity, total):
            # price_base is rounded per unit, so allow half a unit of drift per item
            slack = self.total_tolerance + quantity * 0.5
            if total > price_base * quantity + slack:
                errors.append(
                    f"Total {total:g} is too high for {quantity:g} x {price_base:g}"
                )

        method = data.get('payment_method')
        if method is not None and method not in PAYMENT_METHODS:
            errors.append(f"Invalid payment method: {method!r}")

        return len(errors) == 0, errors

    def validate_sale(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a sale record and return it with numeric fields normalized"""
        self.validation_stats['total_validated'] += 1

        is_valid, errors = self.check_sale(data)
        if not is_valid:
            self.validation_stats['failed'] += 1
            logger.warning(f"Rejected sale of {data.get('presentation_name')!r}: {'; '.join(errors)}")
            raise SaleValidationError(errors[0], errors)

        self.validation_stats['passed'] += 1
        return {
            **data,
            'price_base': int(float(data['price_base'])),
            'quantity': int(float(data['quantity'])),
            'total': int(float(data['total'])),
        }
