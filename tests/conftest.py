import pytest

from shop_pricing.engine.models import Client, ClientPriceOverride, PriceTier, ServiceType


@pytest.fixture
def tiers():
    """Default price list covering every service."""
    return [
        PriceTier(id=1, service=ServiceType.DTF, min_quantity=0.1, max_quantity=9.9, price=9000),
        PriceTier(id=2, service=ServiceType.DTF, min_quantity=10, max_quantity=49.9, price=8000),
        PriceTier(id=3, service=ServiceType.DTF, min_quantity=50, max_quantity=None, price=7000),
        PriceTier(id=6, service=ServiceType.UV, min_quantity=0, max_quantity=99, price=8000),
        PriceTier(id=7, service=ServiceType.UV, min_quantity=100, max_quantity=None, price=6000),
        PriceTier(id=8, service=ServiceType.TEXTURIZADO, min_quantity=1, max_quantity=9, price=12000),
        PriceTier(id=9, service=ServiceType.TEXTURIZADO, min_quantity=10, max_quantity=None, price=10500),
    ]


@pytest.fixture
def plain_client():
    return Client(id="2", name="Poleras Maipú")


@pytest.fixture
def preferred_client():
    """Client with a preferential UV price on the 100+ m tier."""
    return Client(
        id="1",
        name="Estampados del Sur",
        prices=(ClientPriceOverride(tier_id=7, price=5500),),
    )
