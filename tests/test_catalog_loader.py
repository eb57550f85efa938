import json

import pytest

from shop_pricing.data.catalog_loader import (
    client_from_record,
    load_clients,
    load_price_tiers,
    tier_from_record,
)
from shop_pricing.engine.models import ServiceType


@pytest.fixture
def prices_csv(tmp_path):
    path = tmp_path / "default_prices.csv"
    path.write_text(
        "id,service,min_meters,max_meters,price\n"
        "1,UV,0,99,8000\n"
        "2,uv ,100,,6000\n"
        "3,TEXTIL,0,,5000\n"
        "4,DTF,10,5,9000\n"
        "5,DTF,0.1,,0\n"
        "6,DTF,0.1,,9000\n",
        encoding="utf-8",
    )
    return path


def test_load_price_tiers_skips_invalid_rows(prices_csv):
    tiers = load_price_tiers(prices_csv)
    assert [t.id for t in tiers] == [1, 2, 6]
    uv_open = tiers[1]
    assert uv_open.service is ServiceType.UV
    assert uv_open.max_quantity is None
    assert isinstance(uv_open.price, int)
    assert tiers[2].min_quantity == 0.1


def test_missing_price_list(tmp_path):
    with pytest.raises(FileNotFoundError, match="Default price list not found"):
        load_price_tiers(tmp_path / "nope.csv")


def test_missing_columns(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("id,service,price\n1,UV,100\n", encoding="utf-8")
    with pytest.raises(ValueError, match="min_meters"):
        load_price_tiers(path)


def test_tier_from_record():
    tier = tier_from_record({"id": "3", "service": "DTF", "min_meters": "50", "max_meters": "", "price": "7000"})
    assert tier.id == 3
    assert tier.min_quantity == 50
    assert tier.max_quantity is None
    assert tier.price == 7000


def test_client_from_record_api_shape():
    client = client_from_record({
        "id": 12,
        "name": "Estampados del Sur",
        "rut": None,
        "email": " compras@sur.cl ",
        "phone": "",
        "billing_addr": None,
        "is_active": True,
        "prices": [
            {"id": 1, "default_price_id": 7, "service": "UV", "min_meters": 100, "max_meters": None, "price": 5500},
        ],
        "created_at": "2025-03-02T14:10:00Z",
        "updated_at": "2025-03-02T14:10:00Z",
    })
    assert client.id == "12"
    assert client.rut is None
    assert client.email == "compras@sur.cl"
    assert client.phone is None
    override = client.prices[0]
    assert override.tier_id == 7
    assert override.price == 5500
    assert override.service is ServiceType.UV


def test_null_prices_means_no_overrides():
    client = client_from_record({"id": 2, "name": "Poleras", "is_active": True, "prices": None})
    assert client.prices == ()


def test_load_clients_accepts_both_shapes(tmp_path):
    records = [{"id": 1, "name": "A"}, {"name": "no id"}, {"id": 2, "name": "B", "is_active": False}]
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"data": records}), encoding="utf-8")
    bare = tmp_path / "bare.json"
    bare.write_text(json.dumps(records), encoding="utf-8")

    for path in (wrapped, bare):
        clients = load_clients(path)
        assert [c.id for c in clients] == ["1", "2"]
        assert clients[1].is_active is False


def test_missing_client_registry(tmp_path):
    with pytest.raises(FileNotFoundError, match="Client registry not found"):
        load_clients(tmp_path / "clients.json")


def test_bundled_sample_data():
    from shop_pricing.config.settings import Settings

    settings = Settings.load()
    tiers = load_price_tiers(settings.default_prices)
    clients = load_clients(settings.clients)
    assert {t.service for t in tiers} == set(ServiceType)
    assert any(c.prices for c in clients)
