import pytest

from shop_pricing.engine.models import Client, ClientPriceOverride, ServiceType
from shop_pricing.engine.override_resolver import resolve_effective_price


def test_default_price_without_overrides(tiers, plain_client):
    resolved = resolve_effective_price(plain_client, tiers, ServiceType.UV, 150)
    assert resolved.price == 6000
    assert resolved.tier.id == 7
    assert resolved.is_override is False


def test_override_on_resolved_tier(tiers, preferred_client):
    resolved = resolve_effective_price(preferred_client, tiers, ServiceType.UV, 150)
    assert resolved.price == 5500
    assert resolved.tier.id == 7
    assert resolved.is_override is True


def test_override_on_other_tier_is_not_used(tiers, preferred_client):
    # Override is bound to the 100+ tier, 50 m resolves to the 0–99 tier
    resolved = resolve_effective_price(preferred_client, tiers, ServiceType.UV, 50)
    assert resolved.price == 8000
    assert resolved.is_override is False


def test_not_found_propagates(tiers, preferred_client):
    assert resolve_effective_price(preferred_client, tiers, ServiceType.UV, 99.5) is None
    assert resolve_effective_price(preferred_client, [], ServiceType.UV, 150) is None


@pytest.mark.parametrize("bad_price", [None, 0, -100, 0.0])
def test_non_positive_override_is_ignored(tiers, bad_price):
    client = Client(id="9", name="Cliente", prices=(ClientPriceOverride(tier_id=7, price=bad_price),))
    resolved = resolve_effective_price(client, tiers, ServiceType.UV, 150)
    assert resolved.price == 6000
    assert resolved.is_override is False


def test_dangling_override_falls_back_to_default(tiers):
    client = Client(id="9", name="Cliente", prices=(ClientPriceOverride(tier_id=404, price=1000),))
    resolved = resolve_effective_price(client, tiers, ServiceType.UV, 150)
    assert resolved.price == 6000
    assert resolved.is_override is False


def test_override_matches_by_tier_id_not_range(tiers):
    # Stale copy of the range must not matter
    override = ClientPriceOverride(
        tier_id=7, price=5200, service=ServiceType.DTF, min_quantity=0, max_quantity=1,
    )
    client = Client(id="9", name="Cliente", prices=(override,))
    resolved = resolve_effective_price(client, tiers, ServiceType.UV, 500)
    assert resolved.price == 5200
    assert resolved.is_override is True


def test_client_is_not_modified(tiers, preferred_client):
    before = preferred_client.prices
    resolve_effective_price(preferred_client, tiers, ServiceType.UV, 150)
    assert preferred_client.prices is before
