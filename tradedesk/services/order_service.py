"""Order service - persisted order snapshot, listing and status changes."""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from tradedesk.domain import FinalizedOrder, OrderStatus, normalize_order_status
from tradedesk.exceptions import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


class OrderSnapshot:
    """
    Latest list of persisted orders received from a subscription.

    Pass `on_snapshot` as the subscription callback. A missing snapshot is an
    empty list.
    """

    def __init__(self, orders: Optional[Iterable[FinalizedOrder]] = None):
        self._orders: Tuple[FinalizedOrder, ...] = tuple(orders or ())

    def on_snapshot(self, orders: Optional[Iterable[FinalizedOrder]]) -> None:
        self._orders = tuple(orders or ())
        logger.debug(f"[ORDERS] Snapshot received: {len(self._orders)} orders")

    @property
    def orders(self) -> Tuple[FinalizedOrder, ...]:
        return self._orders

    def get(self, order_id: str) -> Optional[FinalizedOrder]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def for_phone(self, phone: str) -> List[FinalizedOrder]:
        """Orders of one customer, newest first."""
        return list_orders(self._orders, phone=phone)

    def latest_for_phone(self, phone: str) -> Optional[FinalizedOrder]:
        orders = self.for_phone(phone)
        return orders[0] if orders else None


def list_orders(
    orders: Iterable[FinalizedOrder],
    status=None,
    phone: Optional[str] = None
) -> List[FinalizedOrder]:
    """Filter orders by status and/or customer phone, newest first."""
    wanted_status = normalize_order_status(status) if status else None
    selected = [
        order for order in orders
        if (wanted_status is None or order.status == wanted_status)
        and (not phone or order.customer_phone == phone)
    ]
    return sorted(selected, key=lambda order: order.created_at, reverse=True)


def update_order_status(
    repository,
    snapshot: OrderSnapshot,
    order_id: str,
    status,
    now: Optional[datetime] = None
) -> FinalizedOrder:
    """Move an order to a new status and persist it. Totals are not recomputed."""
    order = snapshot.get(order_id)
    if order is None:
        order = repository.get(order_id)
    if order is None:
        raise NotFoundError(f'Order {order_id} not found.')

    new_status = normalize_order_status(status)
    if new_status == order.status:
        return order

    updated = order.with_status(new_status, now)
    try:
        repository.write(updated)
    except PersistenceError:
        logger.error(f"[ORDERS] Status change failed for {order_id}")
        raise
    except Exception as e:
        logger.error(f"[ORDERS] Status change failed for {order_id}: {e}", exc_info=True)
        raise PersistenceError(PersistenceError.UNKNOWN, f'Could not update order status: {e}')

    logger.info(f"[ORDERS] Order {order_id} status {order.status.value} -> {new_status.value}")
    return updated
