"""
Workspace service - per-account collaborators for the HTTP layer.

A workspace subscribes its catalog and order snapshots to the account's
repositories and owns the account's order wizard.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, Tuple

from tradedesk.repositories.memory import (
    InMemoryStore, MemoryCatalogRepository, MemoryCustomerRepository, MemoryOrderRepository
)
from tradedesk.services.catalog_service import CatalogSnapshot
from tradedesk.services.order_service import OrderSnapshot
from tradedesk.services.order_wizard_service import OrderWizard

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[str], Tuple[object, object, object]]


def sql_repositories(account_id: str):
    from tradedesk.repositories.sql import (
        SqlCatalogRepository, SqlCustomerRepository, SqlOrderRepository
    )
    return (
        SqlCatalogRepository(account_id),
        SqlOrderRepository(account_id),
        SqlCustomerRepository(account_id),
    )


def memory_repositories(account_id: str):
    store = InMemoryStore()
    return (
        MemoryCatalogRepository(store),
        MemoryOrderRepository(store),
        MemoryCustomerRepository(store),
    )


class Workspace:
    def __init__(
        self,
        account_id: str,
        catalog_repository,
        order_repository,
        customer_repository,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.account_id = account_id
        self.catalog_repository = catalog_repository
        self.order_repository = order_repository
        self.customer_repository = customer_repository

        self.catalog = CatalogSnapshot()
        self.orders = OrderSnapshot()
        self._unsubscribers = [
            catalog_repository.subscribe(self.catalog.on_snapshot),
            order_repository.subscribe(self.orders.on_snapshot),
        ]
        self.wizard = OrderWizard(
            order_repository,
            customer_repository,
            self.catalog,
            orders=self.orders,
            clock=clock
        )

    def refresh(self) -> None:
        """Re-read both snapshots (picks up writes made by other processes)."""
        self.catalog.on_snapshot(self.catalog_repository.load())
        self.orders.on_snapshot(self.order_repository.load())

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.wizard.abandon()


class WorkspaceRegistry:
    """Thread-safe map of account id -> Workspace, created on first use."""

    def __init__(self, repository_factory: RepositoryFactory = sql_repositories):
        self.repository_factory = repository_factory
        self._workspaces: Dict[str, Workspace] = {}
        self._lock = threading.Lock()

    def get(self, account_id: str) -> Workspace:
        with self._lock:
            workspace = self._workspaces.get(account_id)
            if workspace is None:
                workspace = Workspace(account_id, *self.repository_factory(account_id))
                self._workspaces[account_id] = workspace
                logger.info(f"[WORKSPACE] Opened workspace for account {account_id}")
            return workspace

    def close(self, account_id: str) -> None:
        with self._lock:
            workspace = self._workspaces.pop(account_id, None)
        if workspace is not None:
            workspace.close()
            logger.info(f"[WORKSPACE] Closed workspace for account {account_id}")

    def __len__(self):
        return len(self._workspaces)
