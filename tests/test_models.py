from datetime import datetime, timezone
from decimal import Decimal

import pytest

from shop_pricing.engine.exceptions import InvalidInputError
from shop_pricing.engine.models import (
    Client,
    ClientPriceOverride,
    Order,
    PriceTier,
    ServiceType,
    deactivate,
    is_per_discrete_unit,
    mark_paid,
    minimum_valid_quantity,
    toggle_paid,
    unit_label,
    validate_client,
    with_description,
)


def _order(**overrides) -> Order:
    defaults = {
        "id": "1",
        "client_id": "1",
        "service": ServiceType.UV,
        "quantity": 150,
        "unit_price": 5500,
        "subtotal": 825000,
        "tax_pct": 19,
        "tax_amount": 156750,
        "total_amount": 981750,
        "created_at": datetime(2026, 1, 5, tzinfo=timezone.utc),
    }
    defaults.update(overrides)
    return Order(**defaults)


class TestServiceType:
    def test_only_texturizado_is_discrete(self):
        assert is_per_discrete_unit(ServiceType.TEXTURIZADO)
        for service in (ServiceType.DTF, ServiceType.SUBLIMACION, ServiceType.UV):
            assert not is_per_discrete_unit(service)

    def test_minimum_quantity(self):
        assert minimum_valid_quantity(ServiceType.TEXTURIZADO) == 1
        assert minimum_valid_quantity(ServiceType.DTF) == Decimal("0.1")

    def test_unit_label(self):
        assert unit_label(ServiceType.TEXTURIZADO) == "paño"
        assert unit_label(ServiceType.UV) == "m"

    @pytest.mark.parametrize("raw,expected", [
        ("UV", ServiceType.UV),
        (" sublimacion ", ServiceType.SUBLIMACION),
        (ServiceType.DTF, ServiceType.DTF),
        ("", None),
        (None, None),
        ("TEXTIL", None),
    ])
    def test_parse(self, raw, expected):
        assert ServiceType.parse(raw) == expected


class TestPriceTier:
    def test_service_name_is_coerced(self):
        tier = PriceTier(id=1, service="uv", min_quantity=0, max_quantity=None, price=6000)
        assert tier.service is ServiceType.UV
        assert tier.is_unbounded

    def test_rejects_unknown_service(self):
        with pytest.raises(ValueError, match="Unknown service"):
            PriceTier(id=1, service="TEXTIL", min_quantity=0, max_quantity=None, price=6000)

    def test_rejects_negative_min(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            PriceTier(id=1, service=ServiceType.UV, min_quantity=-1, max_quantity=None, price=6000)

    def test_rejects_inverted_range(self):
        with pytest.raises(ValueError, match="below min_quantity"):
            PriceTier(id=1, service=ServiceType.UV, min_quantity=10, max_quantity=5, price=6000)

    @pytest.mark.parametrize("price", [0, -1, 99.5, True])
    def test_rejects_bad_price(self, price):
        with pytest.raises(ValueError, match="positive integer"):
            PriceTier(id=1, service=ServiceType.UV, min_quantity=0, max_quantity=None, price=price)

    def test_describe_range(self):
        bounded = PriceTier(id=1, service=ServiceType.TEXTURIZADO, min_quantity=1, max_quantity=9, price=12000)
        open_ended = PriceTier(id=2, service=ServiceType.UV, min_quantity=100, max_quantity=None, price=6000)
        assert bounded.describe_range() == "1–9 paño"
        assert open_ended.describe_range() == "100+ m"


class TestClient:
    def test_prices_become_a_tuple(self):
        client = Client(id="1", name="A", prices=[ClientPriceOverride(tier_id=1, price=100)])
        assert isinstance(client.prices, tuple)

    def test_override_for_tier(self):
        first = ClientPriceOverride(tier_id=7, price=5500)
        client = Client(id="1", name="A", prices=(first, ClientPriceOverride(tier_id=7, price=5000)))
        assert client.override_for_tier(7) is first
        assert client.override_for_tier(8) is None

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_name_is_required(self, name):
        result = validate_client(Client(id="1", name=name))
        assert not result.valid
        assert result.errors == ["Client name is required"]

    def test_validation_warnings(self):
        client = Client(id="1", name="A", prices=(
            ClientPriceOverride(tier_id=7, price=5500),
            ClientPriceOverride(tier_id=7, price=5000),
            ClientPriceOverride(tier_id=8, price=0),
        ))
        result = validate_client(client)
        assert result.valid
        assert len(result.warnings) == 2

    def test_deactivate_is_soft(self):
        client = Client(id="1", name="A", prices=(ClientPriceOverride(tier_id=7, price=5500),))
        inactive = deactivate(client)
        assert inactive.is_active is False
        assert inactive.prices == client.prices
        assert client.is_active is True


class TestOrder:
    def test_valid_order(self):
        assert _order().total_amount == 981750

    def test_rejects_subtotal_mismatch(self):
        with pytest.raises(InvalidInputError, match="subtotal"):
            _order(subtotal=800000, tax_amount=152000, total_amount=952000)

    def test_rejects_tax_mismatch(self):
        with pytest.raises(InvalidInputError, match="tax_amount"):
            _order(tax_amount=150000, total_amount=975000)

    def test_rejects_total_mismatch(self):
        with pytest.raises(InvalidInputError, match="total_amount"):
            _order(total_amount=981751)

    def test_mark_paid_sets_timestamp(self):
        paid_at = datetime(2026, 2, 1, tzinfo=timezone.utc)
        order = mark_paid(_order(), True, paid_at)
        assert order.is_paid is True
        assert order.paid_at == paid_at

    def test_unpaid_clears_timestamp(self):
        order = mark_paid(mark_paid(_order(), True), False)
        assert order.is_paid is False
        assert order.paid_at is None

    def test_toggle_paid(self):
        order = toggle_paid(_order())
        assert order.is_paid is True
        assert order.paid_at is not None
        assert toggle_paid(order).is_paid is False

    def test_payment_keeps_money_fields(self):
        original = _order()
        paid = mark_paid(original, True)
        assert (paid.unit_price, paid.subtotal, paid.total_amount) == (
            original.unit_price, original.subtotal, original.total_amount
        )
        assert original.is_paid is False

    def test_with_description(self):
        assert with_description(_order(), "  Banderas  ").description == "Banderas"
        assert with_description(_order(description="x"), "  ").description is None

    def test_order_is_frozen(self):
        with pytest.raises(AttributeError):
            _order().unit_price = 1
