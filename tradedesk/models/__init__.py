"""Models package - exports all SQLAlchemy models."""
from tradedesk.models.supplier import Supplier
from tradedesk.models.supplier_steel_tier import SupplierSteelTier
from tradedesk.models.customer import Customer
from tradedesk.models.customer_order import CustomerOrder
from tradedesk.models.customer_order_line import CustomerOrderLine

__all__ = [
    'Supplier', 'SupplierSteelTier',
    'Customer',
    'CustomerOrder', 'CustomerOrderLine',
]
