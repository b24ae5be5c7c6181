"""Totals service - subtotal, transport, discount and final payable amount."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, Optional

from tradedesk.domain import DiscountMode, DiscountSpec, FinalizedOrder, LineItem, OrderTotals
from tradedesk.utils.formatters import money_str

ZERO = Decimal('0.00')


def compute_order_totals(
    items: Iterable[LineItem],
    transport: Optional[Decimal],
    discount: Optional[DiscountSpec]
) -> OrderTotals:
    """
    Compute the totals of one order.

    The discount applies to subtotal + transport. A discount larger than that
    amount is clamped so the final total is never negative. Every field keeps
    full precision; amounts are rounded to cents only when displayed.
    """
    subtotal = ZERO
    for item in items:
        subtotal += item.line_total

    transport_cost = Decimal(transport) if transport is not None else ZERO
    pre_discount_total = subtotal + transport_cost

    discount = discount or DiscountSpec()
    if discount.mode == DiscountMode.PERCENT:
        discount_value = pre_discount_total * discount.amount / 100
    else:
        discount_value = discount.amount

    final_total = max(pre_discount_total - discount_value, ZERO)

    return OrderTotals(
        subtotal=subtotal,
        transport_cost=transport_cost,
        discount_value=discount_value,
        final_total=final_total
    )


@dataclass(frozen=True)
class OrdersTotalsSummary:
    """Aggregate of many orders' own totals (customer detail header)."""
    order_count: int
    subtotal: Decimal
    transport: Decimal
    discount: Decimal
    before_discount: Decimal
    final_total: Decimal

    def to_dict(self) -> Dict[str, object]:
        return {
            'order_count': self.order_count,
            'subtotal': money_str(self.subtotal),
            'transport': money_str(self.transport),
            'discount': money_str(self.discount),
            'before_discount': money_str(self.before_discount),
            'final_total': money_str(self.final_total),
        }


def summarize_orders(orders: Iterable[FinalizedOrder]) -> OrdersTotalsSummary:
    """Sum each order's stored totals; items are never re-priced across orders."""
    count = 0
    subtotal = transport = discount = before = final = ZERO
    for order in orders:
        totals = order.totals
        count += 1
        subtotal += totals.subtotal
        transport += totals.transport_cost
        discount += totals.discount_value
        before += totals.pre_discount_total
        final += totals.final_total

    return OrdersTotalsSummary(
        order_count=count,
        subtotal=subtotal,
        transport=transport,
        discount=discount,
        before_discount=before,
        final_total=final
    )
