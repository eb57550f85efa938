"""
Data models for the pricing engine.

Uses frozen dataclasses so tier tables and client registries handed to the
engine can be shared between callers without being modified.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

from .exceptions import InvalidInputError


Number = Union[int, float, Decimal]


class ServiceType(str, Enum):
    """Finishing services offered by the shop."""
    DTF = "DTF"
    SUBLIMACION = "SUBLIMACION"
    UV = "UV"
    TEXTURIZADO = "TEXTURIZADO"

    @classmethod
    def parse(cls, value) -> Optional['ServiceType']:
        """Coerce a raw form value into a service, or None if blank/unknown."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        key = str(value).strip().upper()
        if not key:
            return None
        try:
            return cls(key)
        except ValueError:
            return None


# Services billed per cloth/panel instead of per linear meter
DISCRETE_UNIT_SERVICES = frozenset({ServiceType.TEXTURIZADO})


def is_per_discrete_unit(service: ServiceType) -> bool:
    return service in DISCRETE_UNIT_SERVICES


def minimum_valid_quantity(service: ServiceType) -> Decimal:
    """Smallest orderable quantity: one unit, or one decimal meter."""
    return Decimal("1") if is_per_discrete_unit(service) else Decimal("0.1")


def unit_label(service: ServiceType) -> str:
    return "paño" if is_per_discrete_unit(service) else "m"


def to_decimal(value: Number) -> Decimal:
    """Decimal from the printed form of a number, so 0.1 stays 0.1."""
    if isinstance(value, bool):
        raise InvalidInputError(f"Expected a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        raise InvalidInputError(f"Expected a number, got {value!r}")
    if not result.is_finite():
        raise InvalidInputError(f"Expected a finite number, got {value!r}")
    return result


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of validating a client or a tier table."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    # Findings that only matter for quantities finer than the service granularity
    notes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PriceTier:
    """Default price for one service over an inclusive quantity range."""
    id: int
    service: ServiceType
    min_quantity: Number
    max_quantity: Optional[Number]
    price: int

    def __post_init__(self):
        if not isinstance(self.service, ServiceType):
            service = ServiceType.parse(self.service)
            if service is None:
                raise ValueError(f"Unknown service {self.service!r} for tier {self.id}")
            object.__setattr__(self, 'service', service)
        if to_decimal(self.min_quantity) < 0:
            raise ValueError(f"Tier {self.id}: min_quantity cannot be negative")
        if self.max_quantity is not None and to_decimal(self.max_quantity) < to_decimal(self.min_quantity):
            raise ValueError(f"Tier {self.id}: max_quantity is below min_quantity")
        if isinstance(self.price, bool) or not isinstance(self.price, int) or self.price <= 0:
            raise ValueError(f"Tier {self.id}: price must be a positive integer")

    @property
    def is_unbounded(self) -> bool:
        return self.max_quantity is None

    def matches(self, quantity: Number) -> bool:
        qty = to_decimal(quantity)
        if qty < to_decimal(self.min_quantity):
            return False
        return self.max_quantity is None or qty <= to_decimal(self.max_quantity)

    def describe_range(self) -> str:
        unit = unit_label(self.service)
        if self.max_quantity is None:
            return f"{self.min_quantity}+ {unit}"
        return f"{self.min_quantity}–{self.max_quantity} {unit}"


@dataclass(frozen=True)
class ClientPriceOverride:
    """
    A client's preferential price bound to one specific tier.

    Only tier_id takes part in resolution; service and range are copies kept
    for display and may be stale.
    """
    tier_id: int
    price: Optional[Number]
    id: Optional[int] = None
    service: Optional[ServiceType] = None
    min_quantity: Optional[Number] = None
    max_quantity: Optional[Number] = None

    @property
    def is_usable(self) -> bool:
        """Missing, zero or negative prices never replace a default."""
        if self.price is None or isinstance(self.price, bool):
            return False
        try:
            return to_decimal(self.price) > 0
        except InvalidInputError:
            return False


@dataclass(frozen=True)
class Client:
    """A billing party with its preferential prices."""
    id: str
    name: str
    rut: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    billing_addr: Optional[str] = None
    is_active: bool = True
    prices: tuple[ClientPriceOverride, ...] = ()
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.prices, tuple):
            object.__setattr__(self, 'prices', tuple(self.prices or ()))

    def override_for_tier(self, tier_id: int) -> Optional[ClientPriceOverride]:
        for override in self.prices:
            if override.tier_id == tier_id:
                return override
        return None


def validate_client(client: Client) -> ValidationResult:
    """Check a client before it is handed to persistence."""
    result = ValidationResult(valid=True)

    if not (client.name or "").strip():
        result.errors.append("Client name is required")

    seen = set()
    for override in client.prices:
        if override.tier_id in seen:
            result.warnings.append(
                f"Multiple preferential prices for tier {override.tier_id}; the first one is used"
            )
        seen.add(override.tier_id)
        if not override.is_usable:
            result.warnings.append(
                f"Preferential price for tier {override.tier_id} is not positive and will be ignored"
            )

    result.valid = not result.errors
    return result


def deactivate(client: Client) -> Client:
    """Soft-delete: historical orders keep pointing at the client."""
    return replace(client, is_active=False)


def round_half_up(value: Number) -> int:
    """Round to the nearest whole currency unit, ties away from zero."""
    try:
        return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        # quantize fails once the result needs more digits than the context precision
        raise InvalidInputError(f"Amount {value} is too large to price") from e


@dataclass(frozen=True)
class Order:
    """
    A priced order as stored by the backend.

    The monetary fields are derived from unit_price, quantity and tax_pct and
    are checked on construction.
    """
    id: str
    client_id: str
    service: ServiceType
    quantity: Number
    unit_price: Number
    subtotal: int
    tax_pct: Number
    tax_amount: int
    total_amount: int
    created_at: datetime
    is_paid: bool = False
    paid_at: Optional[datetime] = None
    description: Optional[str] = None

    def __post_init__(self):
        expected_subtotal = round_half_up(to_decimal(self.quantity) * to_decimal(self.unit_price))
        if self.subtotal != expected_subtotal:
            raise InvalidInputError(
                f"Order {self.id}: subtotal {self.subtotal} does not match "
                f"quantity × unit_price ({expected_subtotal})"
            )
        expected_tax = round_half_up(Decimal(self.subtotal) * to_decimal(self.tax_pct) / 100)
        if self.tax_amount != expected_tax:
            raise InvalidInputError(
                f"Order {self.id}: tax_amount {self.tax_amount} does not match {expected_tax}"
            )
        if self.total_amount != self.subtotal + self.tax_amount:
            raise InvalidInputError(
                f"Order {self.id}: total_amount must equal subtotal + tax_amount"
            )

    @property
    def unit(self) -> str:
        return unit_label(self.service)


def mark_paid(order: Order, paid: bool, at: Optional[datetime] = None) -> Order:
    """Set the payment flag; paid_at follows it."""
    if paid:
        return replace(order, is_paid=True, paid_at=at or datetime.now(timezone.utc))
    return replace(order, is_paid=False, paid_at=None)


def toggle_paid(order: Order, at: Optional[datetime] = None) -> Order:
    return mark_paid(order, not order.is_paid, at)


def with_description(order: Order, description: Optional[str]) -> Order:
    text = (description or "").strip()
    return replace(order, description=text or None)


@dataclass(frozen=True)
class EffectivePrice:
    """Price a client pays for a service/quantity before any manual change."""
    price: Number
    tier: PriceTier
    is_override: bool


@dataclass(frozen=True)
class OrderBreakdown:
    subtotal: int
    tax_pct: Number
    tax_amount: int
    total_amount: int


class PricingErrorKind(str, Enum):
    NO_CLIENT_SELECTED = "NoClientSelected"
    CLIENT_INACTIVE = "ClientInactive"
    NO_SERVICE_SELECTED = "NoServiceSelected"
    QUANTITY_BELOW_MINIMUM = "QuantityBelowMinimum"
    NO_PRICE_CONFIGURED = "NoPriceConfigured"
    INVALID_MANUAL_PRICE = "InvalidManualPrice"
    INVALID_INPUT = "InvalidInput"


@dataclass(frozen=True)
class PricingError:
    """A quoting failure returned to the caller, naming the blocked form field."""
    kind: PricingErrorKind
    message: str
    field: Optional[str] = None

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message, "field": self.field}


@dataclass
class OrderQuote:
    """Complete result of quoting a prospective order."""
    service: ServiceType
    quantity: Number
    unit_price: Number
    tier: Optional[PriceTier]
    is_override: bool
    is_manual_override: bool
    auto_unit_price: Optional[Number]
    subtotal: int
    tax_pct: Number
    tax_amount: int
    total_amount: int
    warnings: list[PricingError] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: Optional[str] = None):
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "service": self.service.value,
            "quantity": float(self.quantity),
            "unit": unit_label(self.service),
            "unit_price": float(self.unit_price),
            "tier": None if self.tier is None else {
                "id": self.tier.id,
                "min_quantity": float(self.tier.min_quantity),
                "max_quantity": None if self.tier.max_quantity is None else float(self.tier.max_quantity),
                "price": self.tier.price,
            },
            "is_override": self.is_override,
            "is_manual_override": self.is_manual_override,
            "auto_unit_price": None if self.auto_unit_price is None else float(self.auto_unit_price),
            "subtotal": self.subtotal,
            "tax_pct": float(self.tax_pct),
            "tax_amount": self.tax_amount,
            "total_amount": self.total_amount,
            "warnings": [w.to_dict() for w in self.warnings],
            "trace": [{"step": t.step, "description": t.description, "value": t.value} for t in self.trace],
        }
