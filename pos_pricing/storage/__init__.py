"""Storage read models consumed by the pricing engine."""

from .catalog import SQLiteCatalog
from .records import (
    build_time_scope, parse_active_days, parse_date, presentation_from_row, promotion_from_row
)

__all__ = [
    'SQLiteCatalog',
    'build_time_scope',
    'parse_active_days',
    'parse_date',
    'presentation_from_row',
    'promotion_from_row'
]
