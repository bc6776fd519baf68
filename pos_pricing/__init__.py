"""POS Promotion Pricing Engine - Core Module"""

from typing import Dict, Any

__version__ = "1.0.0"

# Sales channels a sale line can be registered on
CHANNELS = ('local', 'pedidos_ya')

PAYMENT_METHODS = ('efectivo', 'mercado_pago')

# Engine defaults, overridable per PricingEngine instance
PRICING_CONFIG: Dict[str, Any] = {
    'prefer_date_window': True,  # date-bounded campaigns win over standing rules
    'reject_zero_total': True,  # register_sale refuses a line that totals 0
    'total_tolerance': 10,  # slack allowed above price_base * quantity
    'default_payment_method': 'efectivo',
}
