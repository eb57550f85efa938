"""
Pricing Engine - Quotes orders from a client, a service and a quantity.

Resolution order:
1. Gate the order form (client, service, quantity)
2. Resolve the default tier for service + quantity
3. Replace the tier price with the client's preferential price, if any
4. Replace the result with the operator's manual price, if one was entered
5. Compute subtotal, tax and total

quote_order() is a pure function over the snapshots it is given.
PricingEngine holds a loaded snapshot and settings for the API and scripts.
"""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union

import structlog

from ..config.settings import Settings, get_settings
from .exceptions import InvalidInputError
from .models import (
    Client,
    EffectivePrice,
    Number,
    Order,
    OrderQuote,
    PriceTier,
    PricingError,
    PricingErrorKind,
    ServiceType,
    ValidationResult,
    minimum_valid_quantity,
    unit_label,
)
from .order_calculator import DEFAULT_TAX_PCT, calculate_order
from .override_resolver import resolve_effective_price
from .tier_resolver import audit_tiers, tiers_for_service

logger = structlog.get_logger()


def parse_amount(value) -> Optional[Union[int, Decimal]]:
    """
    Read a numeric form value.

    Accepts numbers and numeric strings; returns None for blanks and anything
    that is not a finite number. Whole values come back as int.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return None
    try:
        number = Decimal(str(value)) if not isinstance(value, Decimal) else value
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    # Huge exponents stay Decimal; as int they would exceed the int/str digit limit
    if number == number.to_integral_value() and number.adjusted() < 28:
        return int(number)
    return number


def quote_order(
    client: Optional[Client],
    tiers: Iterable[PriceTier],
    service,
    quantity,
    manual_unit_price=None,
    tax_pct: Number = DEFAULT_TAX_PCT,
) -> Union[OrderQuote, PricingError]:
    """
    Quote a prospective order.

    Args:
        client: Selected client, or None if the form has none yet
        tiers: Default price tiers (at least those of the quoted service)
        service: ServiceType or its name
        quantity: Meters or units, as a number or numeric string
        manual_unit_price: Operator-entered unit price; blank means none
        tax_pct: Tax percentage applied to the subtotal

    Returns:
        OrderQuote, or a PricingError naming the form field that blocks it.
        Nothing is raised and none of the inputs are modified.
    """
    if client is None:
        return PricingError(PricingErrorKind.NO_CLIENT_SELECTED, "Select a client", "client")
    if not client.is_active:
        return PricingError(
            PricingErrorKind.CLIENT_INACTIVE,
            f"Client {client.name} is inactive",
            "client",
        )

    service_type = ServiceType.parse(service)
    if service_type is None:
        return PricingError(PricingErrorKind.NO_SERVICE_SELECTED, "Select a service", "service")

    qty = parse_amount(quantity)
    minimum = minimum_valid_quantity(service_type)
    below_minimum = PricingError(
        PricingErrorKind.QUANTITY_BELOW_MINIMUM,
        f"Minimum quantity for {service_type.value} is {minimum} {unit_label(service_type)}",
        "quantity",
    )
    if qty is None or qty <= 0:
        return below_minimum

    tiers = tuple(tiers)
    resolved: Optional[EffectivePrice] = resolve_effective_price(client, tiers, service_type, qty)

    warnings = []
    manual = None
    if manual_unit_price is not None and manual_unit_price != "":
        manual = parse_amount(manual_unit_price)
        if manual is None or manual <= 0:
            logger.debug("manual_price_rejected", client_id=client.id, value=str(manual_unit_price))
            warnings.append(PricingError(
                PricingErrorKind.INVALID_MANUAL_PRICE,
                "Manual unit price must be greater than 0; using the resolved price",
                "unit_price",
            ))
            manual = None

    if manual is None and resolved is None:
        return PricingError(
            PricingErrorKind.NO_PRICE_CONFIGURED,
            f"No price configured for {service_type.value} at {qty} {unit_label(service_type)}",
            "quantity",
        )

    # Checked after resolution: a quantity no tier covers is reported as unpriced
    if qty < minimum:
        return below_minimum

    unit_price = manual if manual is not None else resolved.price

    try:
        breakdown = calculate_order(unit_price, qty, tax_pct)
    except InvalidInputError as e:
        return PricingError(PricingErrorKind.INVALID_INPUT, str(e))

    quote = OrderQuote(
        service=service_type,
        quantity=qty,
        unit_price=unit_price,
        tier=resolved.tier if resolved else None,
        is_override=bool(resolved and resolved.is_override and manual is None),
        is_manual_override=manual is not None,
        auto_unit_price=resolved.price if resolved else None,
        subtotal=breakdown.subtotal,
        tax_pct=breakdown.tax_pct,
        tax_amount=breakdown.tax_amount,
        total_amount=breakdown.total_amount,
        warnings=warnings,
    )

    quote.add_trace("Client", f"Quoting for {client.name}", client.id)
    if resolved is None:
        quote.add_trace("Tier Lookup", f"No {service_type.value} tier covers {qty} {unit_label(service_type)}")
    else:
        quote.add_trace("Tier Lookup", f"Matched tier {resolved.tier.id} ({resolved.tier.describe_range()})",
                        str(resolved.tier.price))
        if resolved.is_override:
            quote.add_trace("Client Price", "Preferential price for this tier", str(resolved.price))
        else:
            quote.add_trace("Client Price", "No preferential price, using tier default")
    if manual is not None:
        quote.add_trace("Manual Price", "Operator override", str(manual))
        logger.debug("manual_price_applied", client_id=client.id, manual_price=str(manual),
                     auto_price=None if resolved is None else str(resolved.price))
    quote.add_trace("Extension", f"{qty} × {unit_price}", str(breakdown.subtotal))
    quote.add_trace("Tax", f"{tax_pct}% of {breakdown.subtotal}", str(breakdown.tax_amount))
    quote.add_trace("Total", "Subtotal + tax", str(breakdown.total_amount))

    return quote


def build_order(
    quote: OrderQuote,
    client_id: str,
    order_id: str,
    created_at: Optional[datetime] = None,
    description: Optional[str] = None,
) -> Order:
    """Turn a quote into an unpaid Order record; identity comes from the caller."""
    text = (description or "").strip()
    return Order(
        id=str(order_id),
        client_id=str(client_id),
        service=quote.service,
        quantity=quote.quantity,
        unit_price=quote.unit_price,
        subtotal=quote.subtotal,
        tax_pct=quote.tax_pct,
        tax_amount=quote.tax_amount,
        total_amount=quote.total_amount,
        created_at=created_at or datetime.now(timezone.utc),
        is_paid=False,
        paid_at=None,
        description=text or None,
    )


class PricingEngine:
    """
    Quoting over a loaded snapshot of the default price list and client registry.

    The snapshot is replaced as a whole on reload_data(); the tuples handed to
    quote_order() are never modified.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        tiers: Optional[Iterable[PriceTier]] = None,
        clients: Optional[Iterable[Client]] = None,
    ):
        """Initialize engine with settings and a tier/client snapshot."""
        self.settings = settings or get_settings()

        # Imported here: the loader itself imports engine.models
        from ..data.catalog_loader import load_clients, load_price_tiers

        if tiers is None:
            tiers = load_price_tiers(self.settings.default_prices)
        if clients is None:
            clients = load_clients(self.settings.clients)

        self.tiers: tuple[PriceTier, ...] = tuple(tiers)
        self.clients: dict[str, Client] = {c.id: c for c in clients}
        logger.info("pricing_snapshot_loaded", tiers=len(self.tiers), clients=len(self.clients))

    def reload_data(self):
        """Reload tiers and clients from disk."""
        self.__init__(self.settings)

    def get_client(self, client_id) -> Optional[Client]:
        if client_id is None:
            return None
        return self.clients.get(str(client_id).strip())

    def active_clients(self, search: Optional[str] = None) -> list[Client]:
        """Active clients sorted by name, optionally filtered by name/RUT/email."""
        needle = (search or "").strip().lower()
        found = []
        for client in self.clients.values():
            if not client.is_active:
                continue
            if needle:
                haystack = " ".join(filter(None, [client.name, client.rut, client.email])).lower()
                if needle not in haystack:
                    continue
            found.append(client)
        return sorted(found, key=lambda c: c.name.lower())

    def tiers_for(self, service: ServiceType) -> list[PriceTier]:
        return tiers_for_service(self.tiers, service)

    def audit(self, service: ServiceType) -> ValidationResult:
        return audit_tiers(self.tiers, service)

    def effective_price(self, client_id, service: ServiceType, quantity: Number) -> Optional[EffectivePrice]:
        client = self.get_client(client_id)
        if client is None:
            return None
        return resolve_effective_price(client, self.tiers, service, quantity)

    def quote(self, client_id, service, quantity, manual_unit_price=None) -> Union[OrderQuote, PricingError]:
        """Quote for a client of the registry, using the configured tax rate."""
        return quote_order(
            self.get_client(client_id),
            self.tiers,
            service,
            quantity,
            manual_unit_price=manual_unit_price,
            tax_pct=self.settings.tax_pct,
        )
