"""
Catalog Loader - Reads the default price list and the client registry.

The price list is a CSV export of the backend's default-prices table; the
client registry is the JSON the backend returns for /clients. Both become
immutable snapshots handed to the pricing engine.
"""
import json
import math
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import structlog

from ..engine.models import Client, ClientPriceOverride, PriceTier, ServiceType

logger = structlog.get_logger()

TIER_COLUMNS = ['id', 'service', 'min_meters', 'max_meters', 'price']


def _clean_number(value) -> Optional[Union[int, float]]:
    """None for blanks/NaN; whole floats become int."""
    if value is None:
        return None
    # numpy scalars
    if hasattr(value, 'item'):
        value = value.item()
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        value = float(value)
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
    return value


def _clean_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def tier_from_record(record: dict) -> PriceTier:
    """
    Build a tier from a default-prices row.

    Raises:
        ValueError: unknown service, bad range or non-positive price.
    """
    price = _clean_number(record.get('price'))
    if not isinstance(price, int):
        raise ValueError(f"Tier {record.get('id')}: price must be a whole amount, got {record.get('price')!r}")
    min_quantity = _clean_number(record.get('min_meters'))
    return PriceTier(
        id=int(record['id']),
        service=record.get('service'),
        min_quantity=0 if min_quantity is None else min_quantity,
        max_quantity=_clean_number(record.get('max_meters')),
        price=price,
    )


def override_from_record(record: dict) -> ClientPriceOverride:
    return ClientPriceOverride(
        tier_id=int(record['default_price_id']),
        price=_clean_number(record.get('price')),
        id=None if record.get('id') is None else int(record['id']),
        service=ServiceType.parse(record.get('service')),
        min_quantity=_clean_number(record.get('min_meters')),
        max_quantity=_clean_number(record.get('max_meters')),
    )


def client_from_record(record: dict) -> Client:
    """Build a client from the backend's JSON shape (prices may be null)."""
    return Client(
        id=str(record['id']),
        name=str(record.get('name') or ''),
        rut=_clean_text(record.get('rut')),
        email=_clean_text(record.get('email')),
        phone=_clean_text(record.get('phone')),
        billing_addr=_clean_text(record.get('billing_addr')),
        is_active=bool(record.get('is_active', True)),
        prices=tuple(override_from_record(p) for p in (record.get('prices') or [])),
        created_at=record.get('created_at'),
        updated_at=record.get('updated_at'),
    )


def load_price_tiers(path: Path) -> list[PriceTier]:
    """
    Load the default price tiers from CSV.

    Rows that do not make a valid tier are skipped with a warning.
    """
    if not path.exists():
        raise FileNotFoundError(f"Default price list not found at {path}.")

    df = pd.read_csv(path, dtype={'service': str})
    missing = [c for c in TIER_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name} is missing columns: {', '.join(missing)}")

    df['service'] = df['service'].str.strip().str.upper()
    df = df.dropna(subset=['id', 'service', 'price'])

    tiers = []
    for record in df[TIER_COLUMNS].to_dict(orient='records'):
        try:
            tiers.append(tier_from_record(record))
        except (ValueError, TypeError) as e:
            logger.warning("tier_row_skipped", path=str(path), tier_id=record.get('id'), reason=str(e))

    return tiers


def load_clients(path: Path) -> list[Client]:
    """Load the client registry; accepts {"data": [...]} or a bare list."""
    if not path.exists():
        raise FileNotFoundError(f"Client registry not found at {path}.")

    with open(path, 'r', encoding='utf-8') as f:
        payload = json.load(f)

    records = payload.get('data', []) if isinstance(payload, dict) else payload

    clients = []
    for record in records:
        try:
            clients.append(client_from_record(record))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("client_record_skipped", path=str(path), client_id=record.get('id'), reason=str(e))

    return clients
