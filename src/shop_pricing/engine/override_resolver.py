"""
Price Override Resolver - Applies a client's preferential price to a tier.

Overrides are keyed by tier id. An override whose tier no longer exists in the
supplied table simply never matches, so the client falls back to defaults.
"""
from typing import Iterable, Optional

import structlog

from .models import Client, EffectivePrice, Number, PriceTier, ServiceType
from .tier_resolver import find_tier

logger = structlog.get_logger()


def resolve_effective_price(
    client: Client,
    tiers: Iterable[PriceTier],
    service: ServiceType,
    quantity: Number,
) -> Optional[EffectivePrice]:
    """
    Resolve the unit price a client pays for a service and quantity.

    Returns None when no tier covers the quantity.
    """
    tier = find_tier(tiers, service, quantity)
    if tier is None:
        return None

    override = client.override_for_tier(tier.id)
    if override is not None and override.is_usable:
        logger.debug(
            "override_applied",
            client_id=client.id,
            tier_id=tier.id,
            default_price=tier.price,
            override_price=override.price,
        )
        return EffectivePrice(price=override.price, tier=tier, is_override=True)

    return EffectivePrice(price=tier.price, tier=tier, is_override=False)
