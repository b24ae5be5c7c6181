"""
SQLAlchemy repositories, one instance per account.

Each repository owns its subscribers; after a successful commit the fresh
snapshot is re-read and pushed to them.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import DBAPIError, DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from tradedesk.database import get_session
from tradedesk.domain import (
    CementPricing, Customer, DiscountSpec, FinalizedOrder, LineItem, OrderTotals, SteelTier,
    SupplierCatalogEntry, normalize_item_kind, normalize_payment_method
)
from tradedesk.exceptions import NotFoundError, PersistenceError
from tradedesk.models import (
    Customer as CustomerRow, CustomerOrder, CustomerOrderLine, Supplier, SupplierSteelTier
)
from tradedesk.repositories.contracts import CatalogListener, ListenerSet, OrderListener, Unsubscribe

logger = logging.getLogger(__name__)


def to_persistence_error(error: Exception) -> PersistenceError:
    """Classify a database failure as network, permission or unknown."""
    message = str(getattr(error, 'orig', None) or error)
    if 'permission denied' in message.lower() or 'insufficient privilege' in message.lower():
        return PersistenceError(PersistenceError.PERMISSION, 'Not allowed to write to the database.')
    if isinstance(error, (OperationalError, DisconnectionError)) or (
        isinstance(error, DBAPIError) and error.connection_invalidated
    ):
        return PersistenceError(PersistenceError.NETWORK, 'Database is unreachable.')
    return PersistenceError(PersistenceError.UNKNOWN, f'Database error: {message}')


class _SqlRepository:
    def __init__(self, account_id: str, session_factory=get_session):
        if not account_id:
            raise ValueError('account_id is required')
        self.account_id = account_id
        self.session_factory = session_factory

    @property
    def session(self):
        return self.session_factory()

    def _fail(self, error: SQLAlchemyError, action: str) -> PersistenceError:
        self.session.rollback()
        persistence_error = to_persistence_error(error)
        logger.error(f"[DB] {action} failed for account {self.account_id}: "
                     f"{persistence_error.kind} ({error.__class__.__name__})")
        return persistence_error


# ---------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------

def supplier_to_entry(row: Supplier) -> SupplierCatalogEntry:
    cement = None
    if row.cement_price_per_batch is not None and row.cement_batch_quantity_bags is not None:
        cement = CementPricing(
            price_per_batch=Decimal(row.cement_price_per_batch),
            batch_quantity_bags=Decimal(row.cement_batch_quantity_bags)
        )
    return SupplierCatalogEntry(
        name=row.name,
        steel_tiers=tuple(
            SteelTier(
                diameter_label=tier.diameter_label,
                price_per_batch=Decimal(tier.price_per_batch),
                batch_quantity_kg=Decimal(tier.batch_quantity_kg)
            )
            for tier in row.steel_tiers
        ),
        cement=cement
    )


class SqlCatalogRepository(_SqlRepository):
    def __init__(self, account_id: str, session_factory=get_session):
        super().__init__(account_id, session_factory)
        self.listeners = ListenerSet()

    def load(self) -> List[SupplierCatalogEntry]:
        try:
            rows = self.session.query(Supplier).options(
                selectinload(Supplier.steel_tiers)
            ).filter(
                Supplier.account_id == self.account_id
            ).order_by(Supplier.name).all()
        except SQLAlchemyError as e:
            raise self._fail(e, 'Catalog read')
        return [supplier_to_entry(row) for row in rows]

    def subscribe(self, on_snapshot: CatalogListener) -> Unsubscribe:
        unsubscribe = self.listeners.add(on_snapshot)
        on_snapshot(self.load())
        return unsubscribe

    def _publish(self) -> None:
        if not len(self.listeners):
            return
        try:
            snapshot = self.load()
        except PersistenceError as e:
            logger.warning(f"[CATALOG] Saved, but snapshot refresh failed: {e.kind}")
            return
        self.listeners.emit(snapshot)

    def save_supplier(self, entry: SupplierCatalogEntry) -> None:
        session = self.session
        try:
            row = session.query(Supplier).filter(
                Supplier.account_id == self.account_id,
                Supplier.name == entry.name
            ).first()
            if row is None:
                row = Supplier(account_id=self.account_id, name=entry.name)
                session.add(row)

            row.cement_price_per_batch = entry.cement.price_per_batch if entry.cement else None
            row.cement_batch_quantity_bags = entry.cement.batch_quantity_bags if entry.cement else None
            row.steel_tiers = [
                SupplierSteelTier(
                    position=position,
                    diameter_label=tier.diameter_label,
                    price_per_batch=tier.price_per_batch,
                    batch_quantity_kg=tier.batch_quantity_kg
                )
                for position, tier in enumerate(entry.steel_tiers)
            ]
            session.commit()
        except SQLAlchemyError as e:
            raise self._fail(e, f'Saving supplier "{entry.name}"')

        self._publish()

    def delete_supplier(self, name: str) -> None:
        session = self.session
        try:
            row = session.query(Supplier).filter(
                Supplier.account_id == self.account_id,
                Supplier.name == name
            ).first()
            if row is None:
                raise NotFoundError(f'Supplier "{name}" not found.')
            session.delete(row)
            session.commit()
        except SQLAlchemyError as e:
            raise self._fail(e, f'Deleting supplier "{name}"')

        self._publish()


# ---------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------

def line_to_item(line: CustomerOrderLine) -> LineItem:
    return LineItem(
        id=line.item_id,
        kind=normalize_item_kind(line.kind),
        quantity=Decimal(line.quantity),
        unit_price=Decimal(line.unit_price),
        supplier_name=line.supplier_name or '',
        diameter_label=line.diameter_label or '',
        custom_label=line.custom_label or '',
        custom_unit_price=Decimal(line.custom_unit_price) if line.custom_unit_price is not None else None
    )


def row_to_order(row: CustomerOrder) -> FinalizedOrder:
    transport = Decimal(row.transport) if row.transport is not None else None
    return FinalizedOrder(
        id=row.id,
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        place=row.place,
        transport=transport,
        driver_name=row.driver_name or '',
        payment_method=normalize_payment_method(row.payment_method),
        items=tuple(line_to_item(line) for line in row.lines),
        discount=DiscountSpec(amount=Decimal(row.discount_amount), mode=row.discount_mode),
        totals=OrderTotals(
            subtotal=Decimal(row.subtotal),
            transport_cost=transport if transport is not None else Decimal('0'),
            discount_value=Decimal(row.discount_value),
            final_total=Decimal(row.final_total)
        ),
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at
    )


class SqlOrderRepository(_SqlRepository):
    def __init__(self, account_id: str, session_factory=get_session):
        super().__init__(account_id, session_factory)
        self.listeners = ListenerSet()

    def load(self) -> List[FinalizedOrder]:
        try:
            rows = self.session.query(CustomerOrder).options(
                selectinload(CustomerOrder.lines)
            ).filter(
                CustomerOrder.account_id == self.account_id
            ).order_by(CustomerOrder.created_at.desc()).all()
        except SQLAlchemyError as e:
            raise self._fail(e, 'Order read')
        return [row_to_order(row) for row in rows]

    def subscribe(self, on_snapshot: OrderListener) -> Unsubscribe:
        unsubscribe = self.listeners.add(on_snapshot)
        on_snapshot(self.load())
        return unsubscribe

    def get(self, order_id: str) -> Optional[FinalizedOrder]:
        try:
            row = self.session.query(CustomerOrder).filter(
                CustomerOrder.account_id == self.account_id,
                CustomerOrder.id == order_id
            ).first()
        except SQLAlchemyError as e:
            raise self._fail(e, f'Reading order {order_id}')
        return row_to_order(row) if row else None

    def write(self, order: FinalizedOrder) -> None:
        """Insert or overwrite the order and all of its lines in one transaction."""
        session = self.session
        try:
            row = session.query(CustomerOrder).filter(
                CustomerOrder.account_id == self.account_id,
                CustomerOrder.id == order.id
            ).first()
            if row is None:
                row = CustomerOrder(id=order.id, account_id=self.account_id)
                session.add(row)

            row.customer_name = order.customer_name
            row.customer_phone = order.customer_phone
            row.place = order.place
            row.transport = order.transport
            row.driver_name = order.driver_name or None
            row.payment_method = order.payment_method.value if order.payment_method else ''
            row.discount_amount = order.discount.amount
            row.discount_mode = order.discount.mode.value
            row.subtotal = order.totals.subtotal
            row.discount_value = order.totals.discount_value
            row.final_total = order.totals.final_total
            row.status = order.status
            row.created_at = order.created_at
            row.updated_at = order.updated_at
            row.lines = [
                CustomerOrderLine(
                    position=position,
                    item_id=item.id,
                    kind=item.kind.value,
                    supplier_name=item.supplier_name or None,
                    diameter_label=item.diameter_label or None,
                    custom_label=item.custom_label or None,
                    custom_unit_price=item.custom_unit_price,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total
                )
                for position, item in enumerate(order.items)
            ]
            session.commit()
        except SQLAlchemyError as e:
            raise self._fail(e, f'Writing order {order.id}')

        logger.debug(f"[ORDERS] Order {order.id} committed ({len(order.items)} lines)")
        self._publish()

    def _publish(self) -> None:
        if not len(self.listeners):
            return
        try:
            snapshot = self.load()
        except PersistenceError as e:
            logger.warning(f"[ORDERS] Saved, but snapshot refresh failed: {e.kind}")
            return
        self.listeners.emit(snapshot)


# ---------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------

def row_to_customer(row: CustomerRow) -> Customer:
    return Customer(
        name=row.name,
        phone=row.phone,
        last_known_place=row.last_place or '',
        last_known_transport=Decimal(row.last_transport) if row.last_transport is not None else None,
        last_known_driver=row.last_driver or '',
        last_known_payment_method=normalize_payment_method(row.last_payment_method)
    )


class SqlCustomerRepository(_SqlRepository):
    def get(self, phone: str) -> Optional[Customer]:
        try:
            row = self.session.query(CustomerRow).filter(
                CustomerRow.account_id == self.account_id,
                CustomerRow.phone == phone
            ).first()
        except SQLAlchemyError as e:
            raise self._fail(e, f'Reading customer {phone}')
        return row_to_customer(row) if row else None

    def upsert(self, customer: Customer) -> None:
        session = self.session
        try:
            row = session.query(CustomerRow).filter(
                CustomerRow.account_id == self.account_id,
                CustomerRow.phone == customer.phone
            ).first()
            if row is None:
                row = CustomerRow(account_id=self.account_id, phone=customer.phone)
                session.add(row)

            row.name = customer.name
            row.last_place = customer.last_known_place or None
            row.last_transport = customer.last_known_transport
            row.last_driver = customer.last_known_driver or None
            row.last_payment_method = (
                customer.last_known_payment_method.value if customer.last_known_payment_method else None
            )
            session.commit()
        except SQLAlchemyError as e:
            raise self._fail(e, f'Saving customer {customer.phone}')
