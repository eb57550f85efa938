"""
Order Summary - Billing figures over a set of stored orders.

Feeds the dashboard: what is still owed, what has been collected, which
clients order most and how each service is doing. Works on whatever
orders the caller loaded; nothing here touches persistence.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, Optional

import structlog

from .models import Client, Order, ServiceType

logger = structlog.get_logger()

TOP_CLIENTS = 5
RECENT_ORDERS = 3
UNKNOWN_CLIENT = "Unknown client"


@dataclass(frozen=True)
class ClientActivity:
    """Orders placed by one client within the summarized set."""
    client_id: str
    name: str
    order_count: int
    total_amount: int


@dataclass(frozen=True)
class ServiceTotals:
    count: int
    total: int


@dataclass
class OrderSummary:
    """Dashboard figures; amounts are whole currency units including tax."""
    unpaid_total: int = 0
    paid_total: int = 0
    unpaid_count: int = 0
    total_orders: int = 0
    orders_today: int = 0
    active_clients: int = 0
    top_clients: list[ClientActivity] = field(default_factory=list)
    by_service: dict[ServiceType, ServiceTotals] = field(default_factory=dict)


def summarize_orders(
    orders: Iterable[Order],
    clients: Iterable[Client] = (),
    today: Optional[date] = None,
    top: int = TOP_CLIENTS,
) -> OrderSummary:
    """
    Aggregate orders into dashboard figures.

    Args:
        orders: Orders to summarize
        clients: Client registry, used for names and the active count
        today: Day counted as "today"; defaults to the current UTC date
        top: How many clients to rank

    Clients are ranked by number of orders, then by amount billed. Orders
    whose client is missing from the registry are still ranked, under a
    placeholder name.
    """
    orders = list(orders)
    clients = list(clients)
    today = today or datetime.now(timezone.utc).date()
    summary = OrderSummary(
        total_orders=len(orders),
        active_clients=sum(1 for c in clients if c.is_active),
    )

    counts: dict[str, int] = {}
    billed: dict[str, int] = {}
    service_counts: dict[ServiceType, int] = {}
    service_totals: dict[ServiceType, int] = {}

    for order in orders:
        if order.is_paid:
            summary.paid_total += order.total_amount
        else:
            summary.unpaid_total += order.total_amount
            summary.unpaid_count += 1
        if order.created_at.date() >= today:
            summary.orders_today += 1

        counts[order.client_id] = counts.get(order.client_id, 0) + 1
        billed[order.client_id] = billed.get(order.client_id, 0) + order.total_amount
        service_counts[order.service] = service_counts.get(order.service, 0) + 1
        service_totals[order.service] = service_totals.get(order.service, 0) + order.total_amount

    names = {c.id: c.name for c in clients}
    ranked = sorted(counts, key=lambda cid: (-counts[cid], -billed[cid]))
    summary.top_clients = [
        ClientActivity(
            client_id=cid,
            name=names.get(cid) or UNKNOWN_CLIENT,
            order_count=counts[cid],
            total_amount=billed[cid],
        )
        for cid in ranked[:max(top, 0)]
    ]

    # Enum order, so the dashboard lists services the same way every time
    summary.by_service = {
        service: ServiceTotals(count=service_counts[service], total=service_totals[service])
        for service in ServiceType
        if service in service_counts
    }

    logger.debug("orders_summarized", orders=summary.total_orders, unpaid=summary.unpaid_count)
    return summary


def recent_orders(orders: Iterable[Order], client_id: Optional[str], limit: int = RECENT_ORDERS) -> list[Order]:
    """A client's latest orders, newest first. No client means no orders."""
    if not client_id:
        return []
    own = [o for o in orders if o.client_id == str(client_id)]
    own.sort(key=lambda o: o.created_at, reverse=True)
    return own[:max(limit, 0)]
