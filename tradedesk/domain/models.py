# tradedesk/domain/models.py

import enum
import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from tradedesk.exceptions import ValidationError
from tradedesk.utils.formatters import money_str
from tradedesk.utils.number_format import to_decimal


class ItemKind(str, enum.Enum):
    """Kind of line item; drives which pricing rule applies."""
    STEEL = "Steel"
    CEMENT = "Cement"
    OTHER = "Other"


class DiscountMode(str, enum.Enum):
    PERCENT = "percent"
    FLAT = "flat"


class PaymentMethod(str, enum.Enum):
    CASH = "Cash"
    CREDIT = "Credit"
    UPI = "UPI"


class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"


_STATUS_ALIASES = {
    'pending': OrderStatus.PENDING,
    'in progress': OrderStatus.IN_PROGRESS,
    'in_progress': OrderStatus.IN_PROGRESS,
    'inprogress': OrderStatus.IN_PROGRESS,
    'complete': OrderStatus.COMPLETE,
    'completed': OrderStatus.COMPLETE,
}


def normalize_payment_method(value) -> Optional[PaymentMethod]:
    """
    Normalize a payment method to the enum.

    Args:
        value: None, blank string, PaymentMethod, or a case-insensitive name

    Returns:
        PaymentMethod, or None when nothing was chosen

    Raises:
        ValidationError: if value is not a known method
    """
    if value is None or value == '':
        return None
    if isinstance(value, PaymentMethod):
        return value
    normalized = str(value).strip().upper()
    for method in PaymentMethod:
        if method.value.upper() == normalized:
            return method
    raise ValidationError('payment_method', message=f"Invalid payment method: {value}")


def normalize_order_status(value) -> OrderStatus:
    """Normalize a status; "Completed" is accepted for Complete."""
    if isinstance(value, OrderStatus):
        return value
    status = _STATUS_ALIASES.get(str(value or '').strip().lower())
    if status is None:
        raise ValidationError('status', message=f"Invalid order status: {value}")
    return status


def normalize_item_kind(value) -> ItemKind:
    if isinstance(value, ItemKind):
        return value
    normalized = str(value or '').strip().lower()
    for kind in ItemKind:
        if kind.value.lower() == normalized:
            return kind
    raise ValidationError('kind', message=f"Invalid item kind: {value}")


# ---------------------------------------------------------------------
# Supplier catalog
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class SteelTier:
    """Price of one steel diameter: `price_per_batch` buys `batch_quantity_kg`."""
    diameter_label: str
    price_per_batch: Decimal
    batch_quantity_kg: Decimal

    def __post_init__(self):
        if not self.diameter_label:
            raise ValidationError('diameter_label')
        if self.price_per_batch is None or self.price_per_batch <= 0:
            raise ValidationError('price_per_batch', message=f"Price for {self.diameter_label} must be positive")
        if self.batch_quantity_kg is None or self.batch_quantity_kg <= 0:
            raise ValidationError('batch_quantity_kg', message=f"Quantity for {self.diameter_label} must be positive")

    @property
    def unit_price(self) -> Decimal:
        return self.price_per_batch / self.batch_quantity_kg


@dataclass(frozen=True)
class CementPricing:
    price_per_batch: Decimal
    batch_quantity_bags: Decimal

    def __post_init__(self):
        if self.price_per_batch is None or self.price_per_batch <= 0:
            raise ValidationError('cement_price', message="Cement price must be positive")
        if self.batch_quantity_bags is None or self.batch_quantity_bags <= 0:
            raise ValidationError('cement_quantity', message="Cement bag quantity must be positive")

    @property
    def unit_price(self) -> Decimal:
        return self.price_per_batch / self.batch_quantity_bags


@dataclass(frozen=True)
class SupplierCatalogEntry:
    """A supplier with its steel tiers and optional cement pricing."""
    name: str
    steel_tiers: Tuple[SteelTier, ...] = ()
    cement: Optional[CementPricing] = None

    def steel_tier(self, diameter_label: str) -> Optional[SteelTier]:
        # exact match only
        for tier in self.steel_tiers:
            if tier.diameter_label == diameter_label:
                return tier
        return None

    @property
    def offers_steel(self) -> bool:
        return len(self.steel_tiers) > 0

    @property
    def offers_cement(self) -> bool:
        return self.cement is not None

    @property
    def diameters(self) -> List[str]:
        return [tier.diameter_label for tier in self.steel_tiers]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'steel_tiers': [
                {
                    'diameter': tier.diameter_label,
                    'price': str(tier.price_per_batch),
                    'qty': str(tier.batch_quantity_kg),
                }
                for tier in self.steel_tiers
            ],
            'cement': {
                'price': str(self.cement.price_per_batch),
                'qty': str(self.cement.batch_quantity_bags),
            } if self.cement else None,
        }


# ---------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class LineItem:
    """
    One entry in an order.

    `unit_price` is None until the item has been priced. Edits never mutate an
    item; the draft swaps in a replaced copy with the same `id`.
    """
    id: str
    kind: ItemKind
    quantity: Decimal
    unit_price: Optional[Decimal] = None
    supplier_name: str = ""
    diameter_label: str = ""
    custom_label: str = ""
    custom_unit_price: Optional[Decimal] = None

    @classmethod
    def create(cls, kind, quantity, **kwargs) -> 'LineItem':
        return cls(id=uuid.uuid4().hex, kind=normalize_item_kind(kind), quantity=quantity, **kwargs)

    @property
    def is_priced(self) -> bool:
        return self.unit_price is not None

    @property
    def line_total(self) -> Decimal:
        return self.quantity * (self.unit_price or Decimal('0'))

    @property
    def display_name(self) -> str:
        if self.kind == ItemKind.OTHER:
            return self.custom_label
        return self.kind.value

    def validate(self) -> 'LineItem':
        """Report every missing field of an item-in-progress together."""
        missing = []
        if self.quantity is None or self.quantity <= 0:
            missing.append('quantity')
        if self.kind == ItemKind.OTHER:
            if not self.custom_label:
                missing.append('custom_label')
            if self.custom_unit_price is None or self.custom_unit_price < 0:
                missing.append('custom_unit_price')
        else:
            if not self.supplier_name:
                missing.append('supplier_name')
            if self.kind == ItemKind.STEEL and not self.diameter_label:
                missing.append('diameter_label')
        if missing:
            raise ValidationError(*missing)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'kind': self.kind.value,
            'quantity': str(self.quantity),
            'unit_price': str(self.unit_price) if self.unit_price is not None else None,
            'line_total': money_str(self.line_total),
            'supplier_name': self.supplier_name,
            'diameter_label': self.diameter_label,
            'custom_label': self.custom_label,
            'custom_unit_price': str(self.custom_unit_price) if self.custom_unit_price is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        custom_price = data.get('custom_unit_price')
        unit_price = data.get('unit_price')
        return cls(
            id=str(data.get('id') or uuid.uuid4().hex),
            kind=normalize_item_kind(data.get('kind')),
            quantity=to_decimal(data.get('quantity')),
            unit_price=to_decimal(unit_price) if unit_price not in (None, '') else None,
            supplier_name=data.get('supplier_name') or '',
            diameter_label=data.get('diameter_label') or '',
            custom_label=data.get('custom_label') or '',
            custom_unit_price=to_decimal(custom_price) if custom_price not in (None, '') else None,
        )


LINE_ITEM_FIELDS = frozenset(f.name for f in fields(LineItem))


@dataclass(frozen=True)
class DiscountSpec:
    amount: Decimal = Decimal('0')
    mode: DiscountMode = DiscountMode.PERCENT

    def __post_init__(self):
        if self.amount is None or self.amount < 0:
            raise ValidationError('discount', message="Discount cannot be negative")
        if not isinstance(self.mode, DiscountMode):
            try:
                object.__setattr__(self, 'mode', DiscountMode(str(self.mode).lower()))
            except ValueError:
                raise ValidationError('discount_mode', message=f"Invalid discount mode: {self.mode}")


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    transport_cost: Decimal
    discount_value: Decimal
    final_total: Decimal

    @property
    def pre_discount_total(self) -> Decimal:
        return self.subtotal + self.transport_cost

    def to_dict(self) -> Dict[str, str]:
        return {
            'subtotal': money_str(self.subtotal),
            'transport': money_str(self.transport_cost),
            'before_discount': money_str(self.pre_discount_total),
            'discount_value': money_str(self.discount_value),
            'final_total': money_str(self.final_total),
        }


@dataclass
class OrderDraft:
    """In-progress order being built across the wizard steps."""
    order_id: Optional[str] = None
    customer_name: str = ""
    customer_phone: str = ""
    place: str = ""
    transport: Optional[Decimal] = None
    driver_name: str = ""
    payment_method: Optional[PaymentMethod] = None
    items: List[LineItem] = field(default_factory=list)
    discount: DiscountSpec = field(default_factory=DiscountSpec)
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_edit(self) -> bool:
        return self.order_id is not None

    def find_item(self, item_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'order_id': self.order_id,
            'customer_name': self.customer_name,
            'customer_phone': self.customer_phone,
            'place': self.place,
            'transport': str(self.transport) if self.transport is not None else None,
            'driver_name': self.driver_name,
            'payment_method': self.payment_method.value if self.payment_method else None,
            'items': [item.to_dict() for item in self.items],
            'discount': {'amount': str(self.discount.amount), 'mode': self.discount.mode.value},
            'status': self.status.value,
            'created_at': self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class FinalizedOrder:
    """
    Immutable priced snapshot handed to the order repository.

    `transport` stays None when it was never entered; `totals.transport_cost`
    is then zero.
    """
    id: str
    customer_name: str
    customer_phone: str
    place: str
    transport: Optional[Decimal]
    driver_name: str
    payment_method: PaymentMethod
    items: Tuple[LineItem, ...]
    discount: DiscountSpec
    totals: OrderTotals
    status: OrderStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    def with_status(self, status: OrderStatus, when: Optional[datetime] = None) -> 'FinalizedOrder':
        return replace(self, status=status, updated_at=when or datetime.now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customer_name': self.customer_name,
            'customer_phone': self.customer_phone,
            'place': self.place,
            'transport': str(self.transport) if self.transport is not None else None,
            'driver_name': self.driver_name,
            'payment_method': self.payment_method.value if self.payment_method else None,
            'items': [item.to_dict() for item in self.items],
            'discount': {'amount': str(self.discount.amount), 'mode': self.discount.mode.value},
            'totals': self.totals.to_dict(),
            'status': self.status.value,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FinalizedOrder':
        """Rebuild an order from a stored record; missing keys fall back to empty values."""
        discount = data.get('discount') or {}
        totals = data.get('totals') or {}
        created_at = data.get('created_at')
        updated_at = data.get('updated_at')
        try:
            payment_method = normalize_payment_method(data.get('payment_method'))
        except ValidationError:
            payment_method = None
        try:
            status = normalize_order_status(data.get('status') or OrderStatus.PENDING)
        except ValidationError:
            status = OrderStatus.PENDING
        return cls(
            id=str(data['id']),
            customer_name=data.get('customer_name') or '',
            customer_phone=data.get('customer_phone') or '',
            place=data.get('place') or '',
            transport=to_decimal(data.get('transport'), default=None),
            driver_name=data.get('driver_name') or '',
            payment_method=payment_method,
            items=tuple(LineItem.from_dict(item) for item in data.get('items') or []),
            discount=DiscountSpec(
                amount=to_decimal(discount.get('amount')),
                mode=discount.get('mode') or DiscountMode.PERCENT,
            ),
            totals=OrderTotals(
                subtotal=to_decimal(totals.get('subtotal')),
                transport_cost=to_decimal(totals.get('transport')),
                discount_value=to_decimal(totals.get('discount_value')),
                final_total=to_decimal(totals.get('final_total')),
            ),
            status=status,
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )


@dataclass(frozen=True)
class Customer:
    """Cached customer defaults, keyed by phone."""
    name: str
    phone: str
    last_known_place: str = ""
    last_known_transport: Optional[Decimal] = None
    last_known_driver: str = ""
    last_known_payment_method: Optional[PaymentMethod] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'phone': self.phone,
            'last_known_place': self.last_known_place,
            'last_known_transport': str(self.last_known_transport) if self.last_known_transport is not None else None,
            'last_known_driver': self.last_known_driver,
            'last_known_payment_method': self.last_known_payment_method.value if self.last_known_payment_method else None,
        }
