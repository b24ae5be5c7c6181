"""In-memory repositories, used by tests and local runs without a database."""
import logging
from typing import Dict, List, Optional

from tradedesk.domain import Customer, FinalizedOrder, SupplierCatalogEntry
from tradedesk.exceptions import NotFoundError
from tradedesk.repositories.contracts import CatalogListener, ListenerSet, OrderListener, Unsubscribe

logger = logging.getLogger(__name__)


class InMemoryStore:
    """
    Process-wide store for one account.

    Repositories built over the same store share data and subscribers.
    """

    def __init__(self):
        self.suppliers: Dict[str, SupplierCatalogEntry] = {}
        self.orders: Dict[str, FinalizedOrder] = {}
        self.customers: Dict[str, Customer] = {}
        self.catalog_listeners = ListenerSet()
        self.order_listeners = ListenerSet()

    def catalog_snapshot(self) -> List[SupplierCatalogEntry]:
        return list(self.suppliers.values())

    def order_snapshot(self) -> List[FinalizedOrder]:
        return list(self.orders.values())


class MemoryCatalogRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def load(self) -> List[SupplierCatalogEntry]:
        return self.store.catalog_snapshot()

    def subscribe(self, on_snapshot: CatalogListener) -> Unsubscribe:
        unsubscribe = self.store.catalog_listeners.add(on_snapshot)
        on_snapshot(self.store.catalog_snapshot())
        return unsubscribe

    def save_supplier(self, entry: SupplierCatalogEntry) -> None:
        self.store.suppliers[entry.name] = entry
        self.store.catalog_listeners.emit(self.store.catalog_snapshot())

    def delete_supplier(self, name: str) -> None:
        if self.store.suppliers.pop(name, None) is None:
            raise NotFoundError(f'Supplier "{name}" not found.')
        self.store.catalog_listeners.emit(self.store.catalog_snapshot())


class MemoryOrderRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def load(self) -> List[FinalizedOrder]:
        return self.store.order_snapshot()

    def write(self, order: FinalizedOrder) -> None:
        self.store.orders[order.id] = order
        logger.debug(f"[ORDERS] Stored order {order.id} in memory")
        self.store.order_listeners.emit(self.store.order_snapshot())

    def get(self, order_id: str) -> Optional[FinalizedOrder]:
        return self.store.orders.get(order_id)

    def subscribe(self, on_snapshot: OrderListener) -> Unsubscribe:
        unsubscribe = self.store.order_listeners.add(on_snapshot)
        on_snapshot(self.store.order_snapshot())
        return unsubscribe


class MemoryCustomerRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def upsert(self, customer: Customer) -> None:
        self.store.customers[customer.phone] = customer

    def get(self, phone: str) -> Optional[Customer]:
        return self.store.customers.get(phone)
