"""Engine subpackage - core pricing logic and resolution."""
from .pricing_engine import PricingEngine, build_order, quote_order
from .tier_resolver import audit_tiers, find_tier
from .override_resolver import resolve_effective_price
from .order_calculator import calculate_order
from .order_summary import OrderSummary, recent_orders, summarize_orders
from .exceptions import InvalidInputError
from .models import (
    Client,
    ClientPriceOverride,
    Order,
    OrderQuote,
    PriceTier,
    PricingError,
    PricingErrorKind,
    ServiceType,
)

__all__ = [
    'PricingEngine', 'quote_order', 'build_order', 'find_tier', 'audit_tiers',
    'resolve_effective_price', 'calculate_order', 'summarize_orders', 'recent_orders',
    'OrderSummary', 'InvalidInputError',
    'Client', 'ClientPriceOverride', 'Order', 'OrderQuote', 'PriceTier',
    'PricingError', 'PricingErrorKind', 'ServiceType',
]
