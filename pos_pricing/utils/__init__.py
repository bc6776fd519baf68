"""Pricing Engine Utilities"""

from .validation import SaleValidator
from .audit_logger import PricingAuditLogger
from .reporting import SalesReport, get_period_range

__all__ = [
    'SaleValidator',
    'PricingAuditLogger',
    'SalesReport',
    'get_period_range'
]
