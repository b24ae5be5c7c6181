"""Customer service - customer defaults and the customer directory built from orders."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from tradedesk.domain import Customer, FinalizedOrder, OrderStatus, normalize_order_status
from tradedesk.exceptions import PersistenceError
from tradedesk.services.order_service import list_orders
from tradedesk.services.totals_service import OrdersTotalsSummary, summarize_orders

logger = logging.getLogger(__name__)


def customer_from_order(order: FinalizedOrder) -> Customer:
    return Customer(
        name=order.customer_name,
        phone=order.customer_phone,
        last_known_place=order.place,
        last_known_transport=order.transport,
        last_known_driver=order.driver_name,
        last_known_payment_method=order.payment_method
    )


def customer_from_orders(orders: Iterable[FinalizedOrder], phone: str) -> Optional[Customer]:
    """Derive a customer's defaults from their most recent order."""
    matching = list_orders(orders, phone=phone)
    if not matching:
        return None
    return customer_from_order(matching[0])


def merge_customer(existing: Optional[Customer], order: FinalizedOrder) -> Customer:
    """
    Fold a submitted order's logistics into the stored customer record.

    The order is the latest thing the user confirmed, so its non-empty fields
    replace the stored ones; empty fields keep what was known before.
    """
    fresh = customer_from_order(order)
    if existing is None:
        return fresh

    return Customer(
        name=fresh.name or existing.name,
        phone=fresh.phone,
        last_known_place=fresh.last_known_place or existing.last_known_place,
        last_known_transport=(
            fresh.last_known_transport if fresh.last_known_transport is not None
            else existing.last_known_transport
        ),
        last_known_driver=fresh.last_known_driver or existing.last_known_driver,
        last_known_payment_method=fresh.last_known_payment_method or existing.last_known_payment_method
    )


def find_customer_defaults(customer_repository, orders: Iterable[FinalizedOrder], phone: str) -> Optional[Customer]:
    """Stored customer record first, else defaults derived from past orders."""
    customer = None
    try:
        customer = customer_repository.get(phone)
    except PersistenceError as e:
        # the order history still gives usable defaults
        logger.warning(f"[CUSTOMERS] Could not read customer {phone}: {e}")
    if customer is not None:
        return customer
    return customer_from_orders(orders, phone)


# ---------------------------------------------------------------------
# Customer directory
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class CustomerSummary:
    name: str
    phone: str
    orders: Tuple[FinalizedOrder, ...]
    status: OrderStatus
    totals: OrdersTotalsSummary

    def to_dict(self, with_orders: bool = False) -> Dict[str, object]:
        data = {
            'name': self.name,
            'phone': self.phone,
            'status': self.status.value,
            'order_count': len(self.orders),
            'totals': self.totals.to_dict(),
        }
        if with_orders:
            data['orders'] = [order.to_dict() for order in self.orders]
        return data


def aggregate_status(orders: Iterable[FinalizedOrder]) -> OrderStatus:
    """Any Pending order makes the customer Pending, then In Progress, else Complete."""
    statuses = {order.status for order in orders}
    if OrderStatus.PENDING in statuses:
        return OrderStatus.PENDING
    if OrderStatus.IN_PROGRESS in statuses:
        return OrderStatus.IN_PROGRESS
    return OrderStatus.COMPLETE


def group_orders_by_customer(orders: Iterable[FinalizedOrder]) -> List[CustomerSummary]:
    """
    Group orders per customer, keyed by phone (name when the phone is blank).

    Customers are returned most recently active first; each customer's orders
    are newest first.
    """
    groups: Dict[str, List[FinalizedOrder]] = {}
    for order in orders:
        if not order.customer_name:
            continue
        key = order.customer_phone or order.customer_name
        groups.setdefault(key, []).append(order)

    summaries = []
    for grouped in groups.values():
        grouped.sort(key=lambda order: order.created_at, reverse=True)
        latest = grouped[0]
        summaries.append(CustomerSummary(
            name=latest.customer_name,
            phone=latest.customer_phone,
            orders=tuple(grouped),
            status=aggregate_status(grouped),
            totals=summarize_orders(grouped)
        ))

    summaries.sort(key=lambda summary: summary.orders[0].created_at, reverse=True)
    return summaries


def search_customers(
    summaries: Iterable[CustomerSummary],
    query: str = '',
    status=None
) -> List[CustomerSummary]:
    """Match by name substring (case-insensitive) or phone substring, then by status."""
    query = (query or '').strip()
    needle = query.lower()
    wanted_status = None
    if status and str(status).lower() != 'all':
        wanted_status = normalize_order_status(status)

    results = []
    for summary in summaries:
        if needle and needle not in summary.name.lower() and query not in (summary.phone or ''):
            continue
        if wanted_status is not None and summary.status != wanted_status:
            continue
        results.append(summary)
    return results


def find_customer_summary(orders: Iterable[FinalizedOrder], phone: str) -> Optional[CustomerSummary]:
    for summary in group_orders_by_customer(orders):
        if summary.phone == phone:
            return summary
    return None
