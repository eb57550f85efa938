"""
Pydantic models for the pricing preview API.
"""
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..engine.models import Client, PriceTier, ServiceType, unit_label


class TierResponse(BaseModel):
    """Response model for a default price tier."""
    id: int
    service: ServiceType
    min_quantity: float
    max_quantity: Optional[float]
    price: int
    unit: str

    @classmethod
    def from_tier(cls, tier: PriceTier) -> 'TierResponse':
        return cls(
            id=tier.id,
            service=tier.service,
            min_quantity=float(tier.min_quantity),
            max_quantity=None if tier.max_quantity is None else float(tier.max_quantity),
            price=tier.price,
            unit=unit_label(tier.service),
        )


class ClientPriceResponse(BaseModel):
    """A client's preferential price on one tier."""
    id: Optional[int]
    default_price_id: int
    service: Optional[ServiceType]
    min_quantity: Optional[float]
    max_quantity: Optional[float]
    price: Optional[float]


class ClientResponse(BaseModel):
    """Response model for a client."""
    id: str
    name: str
    rut: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    billing_addr: Optional[str]
    is_active: bool
    prices: list[ClientPriceResponse]

    @classmethod
    def from_client(cls, client: Client) -> 'ClientResponse':
        return cls(
            id=client.id,
            name=client.name,
            rut=client.rut,
            email=client.email,
            phone=client.phone,
            billing_addr=client.billing_addr,
            is_active=client.is_active,
            prices=[
                ClientPriceResponse(
                    id=p.id,
                    default_price_id=p.tier_id,
                    service=p.service,
                    min_quantity=None if p.min_quantity is None else float(p.min_quantity),
                    max_quantity=None if p.max_quantity is None else float(p.max_quantity),
                    price=None if p.price is None else float(p.price),
                )
                for p in client.prices
            ],
        )


class QuoteRequest(BaseModel):
    """Request model for quoting an order."""
    client_id: Optional[str] = None
    service: Optional[str] = None
    quantity: Optional[Union[float, str]] = None
    manual_unit_price: Optional[Union[float, str]] = Field(
        None, description="Operator-entered unit price; replaces the resolved price when positive"
    )


class PricingErrorResponse(BaseModel):
    kind: str
    message: str
    field: Optional[str]


class TraceStepResponse(BaseModel):
    step: str
    description: str
    value: Optional[str]


class QuoteResponse(BaseModel):
    """Response model for a quote."""
    service: ServiceType
    quantity: float
    unit: str
    unit_price: float
    tier: Optional[dict]
    is_override: bool
    is_manual_override: bool
    auto_unit_price: Optional[float]
    subtotal: int
    tax_pct: float
    tax_amount: int
    total_amount: int
    warnings: list[PricingErrorResponse]
    trace: list[TraceStepResponse]


class EffectivePriceResponse(BaseModel):
    client_id: str
    service: ServiceType
    quantity: float
    price: float
    is_override: bool
    tier: TierResponse


class AuditResponse(BaseModel):
    """Response model for a tier table audit."""
    service: ServiceType
    valid: bool
    errors: list[str]
    warnings: list[str]
    notes: list[str]
