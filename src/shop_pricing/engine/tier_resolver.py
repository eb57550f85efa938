"""
Tier Resolver - Finds the default price tier for a service and quantity.

Tier tables come from the administrative price list and are not guaranteed
to be clean: ranges may overlap or leave gaps. Resolution is deterministic
anyway, and audit_tiers() reports what an operator should fix.
"""
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from .models import (
    Number,
    PriceTier,
    ServiceType,
    ValidationResult,
    is_per_discrete_unit,
    minimum_valid_quantity,
    to_decimal,
    unit_label,
)

logger = structlog.get_logger()


def tiers_for_service(tiers: Iterable[PriceTier], service: ServiceType) -> list[PriceTier]:
    """
    Tiers of one service in resolution order.

    Sorted by min_quantity ascending; the sort is stable so tiers sharing a
    min_quantity keep the order they had in the table.
    """
    candidates = [t for t in tiers if t.service == service]
    candidates.sort(key=lambda t: to_decimal(t.min_quantity))
    return candidates


def find_tier(tiers: Iterable[PriceTier], service: ServiceType, quantity: Number) -> Optional[PriceTier]:
    """
    Find the tier whose range contains quantity.

    When ranges overlap the tier with the smallest min_quantity wins.
    Returns None when no tier covers the quantity; a price is never made up.
    """
    qty = to_decimal(quantity)

    for tier in tiers_for_service(tiers, service):
        if tier.matches(qty):
            return tier

    logger.debug("tier_not_found", service=service.value, quantity=str(qty))
    return None


def _granularity(service: ServiceType) -> Decimal:
    return Decimal("1") if is_per_discrete_unit(service) else Decimal("0.1")


def audit_tiers(tiers: Iterable[PriceTier], service: ServiceType) -> ValidationResult:
    """
    Check that a service's tiers cover every orderable quantity exactly once.

    Overlaps and gaps are warnings: the resolver copes with them, but the
    quotes an operator sees may not be what the price list intended.
    Quantities are expected in 0.1 m (or whole unit) steps; boundaries that
    only close at that granularity are listed in notes, since a finer
    quantity between them is quoted as unpriced.
    """
    result = ValidationResult(valid=True)
    ordered = tiers_for_service(tiers, service)
    unit = unit_label(service)

    if not ordered:
        result.errors.append(f"No price tiers configured for {service.value}")
        result.valid = False
        return result

    step = _granularity(service)
    first = ordered[0]
    lowest = minimum_valid_quantity(service)
    if to_decimal(first.min_quantity) > lowest:
        result.warnings.append(
            f"Quantities from {lowest} to below {first.min_quantity} {unit} have no price"
        )

    # Upper end of the quantity range covered so far; None means unbounded
    covered_to: Optional[Decimal] = to_decimal(first.max_quantity) if first.max_quantity is not None else None
    covering = first

    for tier in ordered[1:]:
        start = to_decimal(tier.min_quantity)

        if covered_to is None or start <= covered_to:
            result.warnings.append(
                f"Tier {tier.id} ({tier.describe_range()}) overlaps tier {covering.id} "
                f"({covering.describe_range()}); tier {covering.id} wins where both apply"
            )
        elif start - covered_to > step:
            result.warnings.append(
                f"Gap between {covered_to} and {tier.min_quantity} {unit}: no tier covers it"
            )
        elif start > covered_to:
            result.notes.append(
                f"Tiers {covering.id} and {tier.id} meet at {covered_to}/{tier.min_quantity} {unit} "
                f"assuming {step} {unit} steps; {covered_to + step / 2} {unit} has no price"
            )

        if covered_to is not None:
            if tier.max_quantity is None:
                covered_to = None
                covering = tier
            elif to_decimal(tier.max_quantity) > covered_to:
                covered_to = to_decimal(tier.max_quantity)
                covering = tier

    if covered_to is not None:
        result.warnings.append(f"Quantities above {covered_to} {unit} have no price")

    return result
