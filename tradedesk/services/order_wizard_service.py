"""
Order Wizard Service - the multi-step order creation flow.

Steps: Items -> CustomerInfo -> Review -> Submitted. Moving back never loses
data. Only `submit()` talks to the order repository; abandoning the wizard at
any earlier step writes nothing.
"""

import enum
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from tradedesk.domain import (
    Customer, DiscountMode, FinalizedOrder, ItemKind, LineItem, OrderDraft, OrderTotals,
    normalize_item_kind
)
from tradedesk.exceptions import (
    BusinessLogicError, NotFoundError, PersistenceError, TradeDeskError, ValidationError
)
from tradedesk.services.catalog_service import CatalogSnapshot
from tradedesk.services.customer_service import find_customer_defaults, merge_customer
from tradedesk.services.order_draft_service import OrderDraftStore
from tradedesk.services.order_service import OrderSnapshot
from tradedesk.services.pricing_service import price_line_item
from tradedesk.services.totals_service import compute_order_totals

logger = logging.getLogger(__name__)

PRICING_FIELDS = frozenset({'kind', 'supplier_name', 'diameter_label', 'custom_unit_price'})
REQUIRED_CUSTOMER_FIELDS = ('customer_name', 'customer_phone', 'place', 'payment_method')


def _drop_unused_fields(item: LineItem) -> LineItem:
    """Clear the fields that do not apply to the item's kind."""
    if item.kind == ItemKind.OTHER:
        return replace(item, supplier_name="", diameter_label="")
    if item.kind == ItemKind.CEMENT:
        return replace(item, diameter_label="", custom_label="", custom_unit_price=None)
    return replace(item, custom_label="", custom_unit_price=None)


class WizardStep(str, enum.Enum):
    ITEMS = "items"
    CUSTOMER_INFO = "customer_info"
    REVIEW = "review"
    SUBMITTED = "submitted"


_NEXT_STEP = {
    WizardStep.ITEMS: WizardStep.CUSTOMER_INFO,
    WizardStep.CUSTOMER_INFO: WizardStep.REVIEW,
}

_PREVIOUS_STEP = {
    WizardStep.REVIEW: WizardStep.CUSTOMER_INFO,
    WizardStep.CUSTOMER_INFO: WizardStep.ITEMS,
}


class OrderWizard:
    """
    Drives one order from item entry to persistence.

    Collaborators are passed in: the order and customer repositories, and the
    catalog/order snapshots that the caller keeps fed from its subscriptions.
    """

    def __init__(
        self,
        order_repository,
        customer_repository,
        catalog: CatalogSnapshot,
        orders: Optional[OrderSnapshot] = None,
        draft_store: Optional[OrderDraftStore] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.order_repository = order_repository
        self.customer_repository = customer_repository
        self.catalog = catalog
        self.orders = orders or OrderSnapshot()
        self.clock = clock
        self.store = draft_store or OrderDraftStore(clock=clock)
        self.step = WizardStep.ITEMS
        self.last_submitted: Optional[FinalizedOrder] = None

    @property
    def draft(self) -> OrderDraft:
        return self.store.require_draft()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_new(self) -> OrderDraft:
        self.step = WizardStep.ITEMS
        return self.store.start_new()

    def edit(self, order: FinalizedOrder) -> OrderDraft:
        """Open an existing order for editing."""
        self.step = WizardStep.ITEMS
        logger.info(f"[ORDERS] Editing order {order.id}")
        return self.store.hydrate_from_existing_order(order)

    def abandon(self) -> None:
        """Drop the draft without writing anything."""
        if self.store.has_draft:
            logger.info("[ORDERS] Draft abandoned")
        self.store.clear()
        self.step = WizardStep.ITEMS

    # ------------------------------------------------------------------
    # Step 1: items
    # ------------------------------------------------------------------

    def _require_editable(self) -> None:
        if self.step == WizardStep.SUBMITTED:
            raise BusinessLogicError('The order was already submitted.')

    def add_item(
        self,
        kind,
        quantity: Decimal,
        supplier_name: str = "",
        diameter_label: str = "",
        custom_label: str = "",
        custom_unit_price: Optional[Decimal] = None
    ) -> LineItem:
        """Validate, price against the current catalog and append an item."""
        self._require_editable()
        self.store.require_draft()
        item = LineItem.create(
            kind,
            quantity,
            supplier_name=(supplier_name or '').strip(),
            diameter_label=(diameter_label or '').strip(),
            custom_label=(custom_label or '').strip(),
            custom_unit_price=custom_unit_price
        )
        item = _drop_unused_fields(item).validate()

        priced = price_line_item(item, self.catalog.entries)
        self.store.add_item(priced)
        logger.debug(f"[ORDERS] Item added: {priced.display_name} x {priced.quantity} @ {priced.unit_price}")
        return priced

    def update_item(self, item_id: str, **patch) -> LineItem:
        """Edit an item in place; it is re-priced when a pricing field changes."""
        self._require_editable()
        draft = self.store.require_draft()
        current = draft.find_item(item_id)
        if current is None:
            raise NotFoundError(f'Item {item_id} is not in the order.')

        if 'unit_price' in patch:
            raise ValidationError('unit_price', message='Unit price is resolved from the catalog.')

        if 'kind' in patch:
            patch['kind'] = normalize_item_kind(patch['kind'])

        updated = self.store.update_item(item_id, patch)
        try:
            updated = _drop_unused_fields(updated).validate()
            if PRICING_FIELDS & patch.keys():
                updated = price_line_item(updated, self.catalog.entries)
            self.store.replace_item(updated)
        except TradeDeskError:
            # keep the last valid version of the item
            self.store.replace_item(current)
            raise
        return updated

    def remove_item(self, item_id: str) -> bool:
        self._require_editable()
        return self.store.remove_item(item_id)

    # ------------------------------------------------------------------
    # Step 2: customer and delivery
    # ------------------------------------------------------------------

    def set_customer_info(self, **fields) -> OrderDraft:
        self._require_editable()
        return self.store.set_customer_info(**fields)

    def attach_customer(self, phone: str) -> Optional[Customer]:
        """
        Pre-fill the draft from a known customer (stored record, else their
        latest order). Returns None when the phone is unknown.
        """
        self._require_editable()
        self.store.require_draft()
        customer = find_customer_defaults(self.customer_repository, self.orders.orders, phone)
        if customer is None:
            return None
        self.store.attach_customer(customer)
        return customer

    # ------------------------------------------------------------------
    # Step 3: review
    # ------------------------------------------------------------------

    def set_discount(self, amount: Decimal, mode=DiscountMode.PERCENT):
        self._require_editable()
        return self.store.set_discount(amount, mode)

    def preview_totals(self) -> OrderTotals:
        draft = self.store.require_draft()
        return compute_order_totals(draft.items, draft.transport, draft.discount)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def validate_step(self) -> None:
        """Raise ValidationError for the current step's missing input."""
        draft = self.store.require_draft()
        if self.step == WizardStep.ITEMS:
            if not draft.items:
                raise ValidationError('no items', message='Add at least one item before proceeding.')
        elif self.step == WizardStep.CUSTOMER_INFO:
            missing = [name for name in REQUIRED_CUSTOMER_FIELDS if not getattr(draft, name)]
            if missing:
                raise ValidationError(*missing)

    def next(self) -> WizardStep:
        if self.step not in _NEXT_STEP:
            raise BusinessLogicError(f'Cannot move forward from step "{self.step.value}".')
        self.validate_step()
        self.step = _NEXT_STEP[self.step]
        return self.step

    def back(self) -> WizardStep:
        self._require_editable()
        self.step = _PREVIOUS_STEP.get(self.step, self.step)
        return self.step

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def _finalize(self, draft: OrderDraft) -> FinalizedOrder:
        items = tuple(
            item if item.is_priced else price_line_item(item, self.catalog.entries)
            for item in draft.items
        )
        totals = compute_order_totals(items, draft.transport, draft.discount)
        now = self.clock()
        return FinalizedOrder(
            id=draft.order_id or uuid.uuid4().hex,
            customer_name=draft.customer_name,
            customer_phone=draft.customer_phone,
            place=draft.place,
            transport=draft.transport,
            driver_name=draft.driver_name,
            payment_method=draft.payment_method,
            items=items,
            discount=draft.discount,
            totals=totals,
            status=draft.status,
            created_at=draft.created_at,
            updated_at=now if draft.is_edit else None
        )

    def submit(self) -> FinalizedOrder:
        """
        Price, total and persist the order.

        On a failed write the wizard stays on Review with the draft intact and
        the PersistenceError is raised to the caller.
        """
        if self.step != WizardStep.REVIEW:
            raise BusinessLogicError('Review the order before submitting it.')
        draft = self.store.require_draft()
        order = self._finalize(draft)

        try:
            self.order_repository.write(order)
        except PersistenceError as e:
            logger.error(f"[ORDERS] Write failed for order {order.id}: {e.kind}")
            raise
        except Exception as e:
            logger.error(f"[ORDERS] Write failed for order {order.id}: {e}", exc_info=True)
            raise PersistenceError(PersistenceError.UNKNOWN, f'Could not save order: {e}')

        logger.info(
            f"[ORDERS] Order {'updated' if draft.is_edit else 'created'}: {order.id} "
            f"({len(order.items)} items, total={order.totals.final_total})"
        )
        self._remember_customer(order)

        self.last_submitted = order
        self.step = WizardStep.SUBMITTED
        self.store.clear()
        return order

    def _remember_customer(self, order: FinalizedOrder) -> None:
        """Best-effort customer upsert; the order is already saved."""
        try:
            existing = self.customer_repository.get(order.customer_phone)
            self.customer_repository.upsert(merge_customer(existing, order))
        except Exception as e:
            logger.warning(f"[CUSTOMERS] Could not update customer {order.customer_phone}: {e}", exc_info=True)
