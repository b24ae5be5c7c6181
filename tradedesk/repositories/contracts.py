"""
Repository contracts used by the order core.

Subscriptions deliver the current snapshot right away and again after every
change. Writes either return or raise PersistenceError.
"""
from typing import Callable, List, Optional, Protocol

from tradedesk.domain import Customer, FinalizedOrder, SupplierCatalogEntry

Unsubscribe = Callable[[], None]
CatalogListener = Callable[[List[SupplierCatalogEntry]], None]
OrderListener = Callable[[List[FinalizedOrder]], None]


class CatalogRepository(Protocol):
    def load(self) -> List[SupplierCatalogEntry]:
        ...

    def subscribe(self, on_snapshot: CatalogListener) -> Unsubscribe:
        ...

    def save_supplier(self, entry: SupplierCatalogEntry) -> None:
        ...

    def delete_supplier(self, name: str) -> None:
        ...


class OrderRepository(Protocol):
    def load(self) -> List[FinalizedOrder]:
        ...

    def write(self, order: FinalizedOrder) -> None:
        ...

    def get(self, order_id: str) -> Optional[FinalizedOrder]:
        ...

    def subscribe(self, on_snapshot: OrderListener) -> Unsubscribe:
        ...


class CustomerRepository(Protocol):
    def upsert(self, customer: Customer) -> None:
        ...

    def get(self, phone: str) -> Optional[Customer]:
        ...


class ListenerSet:
    """Subscriber bookkeeping shared by the repository implementations."""

    def __init__(self):
        self._listeners = []

    def add(self, listener: Callable) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, snapshot) -> None:
        for listener in list(self._listeners):
            listener(snapshot)

    def __len__(self):
        return len(self._listeners)
