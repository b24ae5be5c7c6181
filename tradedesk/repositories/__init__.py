"""Repositories package - storage behind the order core."""
from tradedesk.repositories.contracts import (
    CatalogRepository, CustomerRepository, ListenerSet, OrderRepository
)
from tradedesk.repositories.memory import (
    InMemoryStore, MemoryCatalogRepository, MemoryCustomerRepository, MemoryOrderRepository
)

__all__ = [
    'CatalogRepository', 'OrderRepository', 'CustomerRepository', 'ListenerSet',
    'InMemoryStore', 'MemoryCatalogRepository', 'MemoryOrderRepository', 'MemoryCustomerRepository',
]
