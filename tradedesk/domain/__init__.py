"""Domain package - plain value types shared by services and repositories."""
from tradedesk.domain.models import (
    ItemKind, DiscountMode, PaymentMethod, OrderStatus,
    normalize_payment_method, normalize_order_status, normalize_item_kind,
    SteelTier, CementPricing, SupplierCatalogEntry,
    LineItem, LINE_ITEM_FIELDS, DiscountSpec, OrderTotals, OrderDraft, FinalizedOrder, Customer,
)

__all__ = [
    'ItemKind', 'DiscountMode', 'PaymentMethod', 'OrderStatus',
    'normalize_payment_method', 'normalize_order_status', 'normalize_item_kind',
    'SteelTier', 'CementPricing', 'SupplierCatalogEntry',
    'LineItem', 'LINE_ITEM_FIELDS', 'DiscountSpec', 'OrderTotals', 'OrderDraft', 'FinalizedOrder', 'Customer',
]
