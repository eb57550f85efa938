from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from shop_pricing import __version__
from shop_pricing.config.logging_config import configure_logging
from shop_pricing.config.settings import get_settings
from shop_pricing.engine import PricingEngine, PricingError, ServiceType
from shop_pricing.api.schemas import (
    AuditResponse,
    ClientResponse,
    EffectivePriceResponse,
    QuoteRequest,
    QuoteResponse,
    TierResponse,
)
from shop_pricing.api.state import get_engine

settings = get_settings()
configure_logging(settings.log_level, json=settings.log_json)

app = FastAPI(
    title="Shop Pricing API",
    description="Price resolution and order quoting for the print shop front-end",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _service_or_404(service: str) -> ServiceType:
    service_type = ServiceType.parse(service)
    if service_type is None:
        raise HTTPException(status_code=404, detail=f"Unknown service '{service}'")
    return service_type


@app.get("/")
async def root():
    return {"status": "online", "message": "Shop Pricing API Active"}


@app.get("/tiers", response_model=list[TierResponse])
async def list_tiers(service: Optional[str] = None, engine: PricingEngine = Depends(get_engine)):
    """List default price tiers, in resolution order when filtered by service."""
    if service:
        tiers = engine.tiers_for(_service_or_404(service))
    else:
        tiers = sorted(engine.tiers, key=lambda t: (t.service.value, t.min_quantity))
    return [TierResponse.from_tier(t) for t in tiers]


@app.get("/tiers/{service}/audit", response_model=AuditResponse)
async def audit_service_tiers(service: str, engine: PricingEngine = Depends(get_engine)):
    service_type = _service_or_404(service)
    result = engine.audit(service_type)
    return AuditResponse(
        service=service_type,
        valid=result.valid,
        errors=result.errors,
        warnings=result.warnings,
        notes=result.notes,
    )


@app.get("/clients", response_model=list[ClientResponse])
async def list_clients(search: Optional[str] = None, engine: PricingEngine = Depends(get_engine)):
    """Active clients, the ones selectable for a new order."""
    return [ClientResponse.from_client(c) for c in engine.active_clients(search)]


@app.get("/clients/{client_id}", response_model=ClientResponse)
async def get_client(client_id: str, engine: PricingEngine = Depends(get_engine)):
    client = engine.get_client(client_id)
    if client is None:
        raise HTTPException(status_code=404, detail=f"Client '{client_id}' not found")
    return ClientResponse.from_client(client)


@app.get("/clients/{client_id}/effective-price", response_model=EffectivePriceResponse)
async def get_effective_price(
    client_id: str,
    service: str,
    quantity: float,
    engine: PricingEngine = Depends(get_engine),
):
    """Price the client pays for a service and quantity, before manual changes."""
    if engine.get_client(client_id) is None:
        raise HTTPException(status_code=404, detail=f"Client '{client_id}' not found")
    if quantity <= 0:
        raise HTTPException(status_code=422, detail="Quantity must be positive")

    service_type = _service_or_404(service)
    resolved = engine.effective_price(client_id, service_type, quantity)
    if resolved is None:
        raise HTTPException(
            status_code=404,
            detail=f"No price configured for {service_type.value} at {quantity}",
        )
    return EffectivePriceResponse(
        client_id=client_id,
        service=service_type,
        quantity=quantity,
        price=float(resolved.price),
        is_override=resolved.is_override,
        tier=TierResponse.from_tier(resolved.tier),
    )


@app.post("/quote", response_model=QuoteResponse)
async def quote(req: QuoteRequest, engine: PricingEngine = Depends(get_engine)):
    if req.client_id and engine.get_client(req.client_id) is None:
        raise HTTPException(status_code=404, detail=f"Client '{req.client_id}' not found")

    result = engine.quote(req.client_id, req.service, req.quantity, req.manual_unit_price)
    if isinstance(result, PricingError):
        raise HTTPException(status_code=422, detail=result.to_dict())
    return result.to_dict()


@app.post("/system/reload")
async def reload_snapshot(engine: PricingEngine = Depends(get_engine)):
    """Re-read the price list and client registry from disk."""
    engine.reload_data()
    return {"tiers": len(engine.tiers), "clients": len(engine.clients)}


@app.get("/system/status")
async def get_status(engine: PricingEngine = Depends(get_engine)):
    return {
        "engine_active": True,
        "tiers_count": len(engine.tiers),
        "clients_count": len(engine.clients),
        "tax_pct": engine.settings.tax_pct,
        "services": [s.value for s in ServiceType],
    }
