"""
Order Calculator - Subtotal, tax and total for a unit price and quantity.

Amounts are whole currency units. Products are computed in Decimal from the
printed form of the inputs, so 0.1 m at 8000 is exactly 800.
"""
from decimal import Decimal

from .exceptions import InvalidInputError
from .models import Number, OrderBreakdown, round_half_up, to_decimal

DEFAULT_TAX_PCT = 19


def calculate_order(unit_price: Number, quantity: Number, tax_pct: Number = DEFAULT_TAX_PCT) -> OrderBreakdown:
    """
    Compute the order breakdown.

    total_amount is always subtotal + tax_amount; it is never rounded on its
    own. Service minimums are checked by the caller, not here.

    Raises:
        InvalidInputError: unit_price or quantity is not positive, tax_pct
            is negative, or the amounts exceed Decimal range.
    """
    price = to_decimal(unit_price)
    qty = to_decimal(quantity)
    pct = to_decimal(tax_pct)

    if price <= 0:
        raise InvalidInputError(f"Unit price must be positive, got {unit_price}")
    if qty <= 0:
        raise InvalidInputError(f"Quantity must be positive, got {quantity}")
    if pct < 0:
        raise InvalidInputError(f"Tax percentage cannot be negative, got {tax_pct}")

    try:
        subtotal = round_half_up(price * qty)
        tax_amount = round_half_up(Decimal(subtotal) * pct / 100)
    except ArithmeticError as e:
        raise InvalidInputError(
            f"Order of {quantity} at {unit_price} is too large to price"
        ) from e

    return OrderBreakdown(
        subtotal=subtotal,
        tax_pct=tax_pct,
        tax_amount=tax_amount,
        total_amount=subtotal + tax_amount,
    )


__all__ = ['DEFAULT_TAX_PCT', 'calculate_order', 'round_half_up']
