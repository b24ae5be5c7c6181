import pytest
from datetime import datetime
from decimal import Decimal
import os
import uuid

# Tests run against an in-memory SQLite database with tables created at startup
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['DB_CREATE_ALL'] = 'true'
os.environ.pop('DEFAULT_ACCOUNT_ID', None)

from tradedesk import create_app
from tradedesk.database import get_session
from tradedesk.domain import (
    CementPricing, DiscountSpec, FinalizedOrder, ItemKind, LineItem, OrderStatus, OrderTotals,
    PaymentMethod, SteelTier, SupplierCatalogEntry
)
from tradedesk.repositories.memory import (
    InMemoryStore, MemoryCatalogRepository, MemoryCustomerRepository, MemoryOrderRepository
)
from tradedesk.services.catalog_service import CatalogSnapshot
from tradedesk.services.order_service import OrderSnapshot
from tradedesk.services.order_wizard_service import OrderWizard


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.Config')
    app.config['TESTING'] = True
    return app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.remove()


@pytest.fixture(scope='function')
def account_id():
    """Fresh account id, so every test sees an empty catalog and order list."""
    return f'test-account-{str(uuid.uuid4())[:8]}'


@pytest.fixture(scope='function')
def account_headers(app, account_id):
    return {app.config['ACCOUNT_HEADER']: account_id}


# ---------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def steel_supplier():
    """Supplier with two steel tiers: 10mm at 0.65/kg and 12mm at 6.5/kg."""
    return SupplierCatalogEntry(
        name='Shree Steel',
        steel_tiers=(
            SteelTier('10mm', Decimal('650'), Decimal('1000')),
            SteelTier('12mm', Decimal('6500'), Decimal('1000')),
        ),
    )


@pytest.fixture
def cement_supplier():
    """Supplier selling cement only, 350 per bag."""
    return SupplierCatalogEntry(
        name='Ambuja Depot',
        cement=CementPricing(Decimal('3500'), Decimal('10')),
    )


@pytest.fixture
def catalog_entries(steel_supplier, cement_supplier):
    return [steel_supplier, cement_supplier]


@pytest.fixture
def supplier_payload():
    """Raw supplier body as sent by the supplier form."""
    return {
        'name': 'Shree Steel',
        'steel_tiers': [
            {'diameter': '10mm', 'price': '650', 'qty': '1000'},
            {'diameter': '12mm', 'price': '6,500', 'qty': '1000'},
        ],
        'cement': {'price': '3500', 'qty': '10'},
    }


# ---------------------------------------------------------------------
# In-memory repositories and wizard
# ---------------------------------------------------------------------

@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def catalog_repository(store, catalog_entries):
    repository = MemoryCatalogRepository(store)
    for entry in catalog_entries:
        repository.save_supplier(entry)
    return repository


@pytest.fixture
def order_repository(store):
    return MemoryOrderRepository(store)


@pytest.fixture
def customer_repository(store):
    return MemoryCustomerRepository(store)


@pytest.fixture
def catalog(catalog_repository):
    snapshot = CatalogSnapshot()
    catalog_repository.subscribe(snapshot.on_snapshot)
    return snapshot


@pytest.fixture
def orders(order_repository):
    snapshot = OrderSnapshot()
    order_repository.subscribe(snapshot.on_snapshot)
    return snapshot


@pytest.fixture
def clock():
    return lambda: datetime(2026, 1, 12, 15, 30)


@pytest.fixture
def wizard(order_repository, customer_repository, catalog, orders, clock):
    wizard = OrderWizard(order_repository, customer_repository, catalog, orders=orders, clock=clock)
    wizard.start_new()
    return wizard


def make_order(
    order_id=None,
    customer_name='Ravi Kumar',
    customer_phone='9876543210',
    place='Site A',
    transport=Decimal('200'),
    status=OrderStatus.PENDING,
    created_at=None,
    final_total=Decimal('1000.00')
):
    """Build a finalized order with one custom item and fixed totals."""
    item = LineItem(
        id=uuid.uuid4().hex,
        kind=ItemKind.OTHER,
        quantity=Decimal('1'),
        unit_price=final_total - transport,
        custom_label='Binding wire',
        custom_unit_price=final_total - transport,
    )
    return FinalizedOrder(
        id=order_id or uuid.uuid4().hex,
        customer_name=customer_name,
        customer_phone=customer_phone,
        place=place,
        transport=transport,
        driver_name='Mohan',
        payment_method=PaymentMethod.CASH,
        items=(item,),
        discount=DiscountSpec(),
        totals=OrderTotals(
            subtotal=final_total - transport,
            transport_cost=transport,
            discount_value=Decimal('0.00'),
            final_total=final_total,
        ),
        status=status,
        created_at=created_at or datetime(2026, 1, 10, 9, 0),
    )


@pytest.fixture
def order_factory():
    return make_order
