"""Order Draft Service - holds the in-progress order across the wizard steps."""

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from tradedesk.domain import (
    Customer, DiscountMode, DiscountSpec, FinalizedOrder, LineItem, LINE_ITEM_FIELDS,
    OrderDraft, normalize_payment_method
)
from tradedesk.exceptions import BusinessLogicError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_UNSET = object()


class OrderDraftStore:
    """
    Mutable holder for one in-progress order.

    At most one draft exists at a time; starting a new one discards any
    unsaved previous draft (warning the user is the caller's job).
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._draft: Optional[OrderDraft] = None

    @property
    def draft(self) -> Optional[OrderDraft]:
        return self._draft

    @property
    def has_draft(self) -> bool:
        return self._draft is not None

    def require_draft(self) -> OrderDraft:
        if self._draft is None:
            raise NotFoundError('No order in progress.')
        return self._draft

    def start_new(self) -> OrderDraft:
        """Start an empty draft, discarding any unsaved one."""
        if self._draft is not None and (self._draft.items or self._draft.customer_phone):
            logger.warning(
                f"[ORDERS] Discarding unsaved draft ({len(self._draft.items)} items, "
                f"phone={self._draft.customer_phone or '-'})"
            )
        self._draft = OrderDraft(created_at=self._clock())
        return self._draft

    def clear(self) -> None:
        self._draft = None

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item(self, item: LineItem) -> LineItem:
        draft = self.require_draft()
        if draft.find_item(item.id) is not None:
            raise BusinessLogicError(f'Item {item.id} is already in the order.')
        draft.items.append(item)
        return item

    def update_item(self, item_id: str, patch: Dict[str, Any]) -> LineItem:
        """
        Replace the item with `item_id` by a patched copy, keeping its position.

        Raises:
            NotFoundError: unknown id; nothing is created
            ValidationError: the patch touches `id` or unknown fields
        """
        draft = self.require_draft()
        bad_keys = sorted(key for key in patch if key == 'id' or key not in LINE_ITEM_FIELDS)
        if bad_keys:
            raise ValidationError(*bad_keys)

        for index, item in enumerate(draft.items):
            if item.id == item_id:
                updated = replace(item, **patch)
                draft.items[index] = updated
                return updated

        raise NotFoundError(f'Item {item_id} is not in the order.')

    def replace_item(self, item: LineItem) -> LineItem:
        """Swap in a full replacement for the item with the same id."""
        draft = self.require_draft()
        for index, existing in enumerate(draft.items):
            if existing.id == item.id:
                draft.items[index] = item
                return item
        raise NotFoundError(f'Item {item.id} is not in the order.')

    def remove_item(self, item_id: str) -> bool:
        """Remove the item with `item_id`; returns False when it was not there."""
        draft = self.require_draft()
        before = len(draft.items)
        draft.items = [item for item in draft.items if item.id != item_id]
        return len(draft.items) != before

    # ------------------------------------------------------------------
    # Customer, logistics, discount
    # ------------------------------------------------------------------

    def set_customer_info(
        self,
        customer_name=_UNSET,
        customer_phone=_UNSET,
        place=_UNSET,
        transport=_UNSET,
        driver_name=_UNSET,
        payment_method=_UNSET
    ) -> OrderDraft:
        """Record explicit user edits; arguments left out are not touched."""
        draft = self.require_draft()

        if transport is not _UNSET:
            if transport is not None and Decimal(transport) < 0:
                raise ValidationError('transport', message='Transport cost cannot be negative')
            draft.transport = Decimal(transport) if transport is not None else None
        if payment_method is not _UNSET:
            draft.payment_method = normalize_payment_method(payment_method)
        if customer_name is not _UNSET:
            draft.customer_name = (customer_name or '').strip()
        if customer_phone is not _UNSET:
            draft.customer_phone = (customer_phone or '').strip()
        if place is not _UNSET:
            draft.place = (place or '').strip()
        if driver_name is not _UNSET:
            draft.driver_name = (driver_name or '').strip()

        return draft

    def set_discount(self, amount: Decimal, mode=DiscountMode.PERCENT) -> DiscountSpec:
        draft = self.require_draft()
        draft.discount = DiscountSpec(amount=amount, mode=mode)
        return draft.discount

    def attach_customer(self, customer: Customer) -> OrderDraft:
        """
        Set name and phone from a known customer and pre-fill the logistics
        fields that are still empty. Anything the user already typed wins.
        """
        draft = self.require_draft()
        draft.customer_name = customer.name
        draft.customer_phone = customer.phone

        if not draft.place and customer.last_known_place:
            draft.place = customer.last_known_place
        if draft.transport is None and customer.last_known_transport is not None:
            draft.transport = customer.last_known_transport
        if not draft.driver_name and customer.last_known_driver:
            draft.driver_name = customer.last_known_driver
        if draft.payment_method is None and customer.last_known_payment_method is not None:
            draft.payment_method = customer.last_known_payment_method

        return draft

    def hydrate_from_existing_order(self, order: FinalizedOrder) -> OrderDraft:
        """Load a persisted order for editing, keeping its id, status and creation time."""
        self._draft = OrderDraft(
            order_id=order.id,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            place=order.place,
            transport=order.transport,
            driver_name=order.driver_name,
            payment_method=order.payment_method,
            items=list(order.items),
            discount=order.discount,
            status=order.status,
            created_at=order.created_at
        )
        return self._draft
