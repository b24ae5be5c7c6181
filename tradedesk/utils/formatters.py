"""
Formatting utilities for money and dates.
Rupee amounts use Indian digit grouping (12,34,567.50).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import datetime
from typing import Union, Optional

CENT = Decimal('0.01')


def money(value: Union[int, float, Decimal, str, None]) -> Decimal:
    """
    Round an amount to 2 decimal places, half-up.

    Examples:
        money(Decimal('402.5')) -> Decimal('402.50')
        money('1.005') -> Decimal('1.01')
        money(None) -> Decimal('0.00')
    """
    if value is None or value == "":
        return Decimal('0.00')
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(value: Union[int, float, Decimal, str, None]) -> str:
    """Plain 2-decimal string used in JSON payloads ("3622.50")."""
    return f"{money(value):.2f}"


def money_inr(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Format an amount as rupees with Indian digit grouping and 2 decimals.

    The last three integer digits form one group; the rest are grouped in twos.

    Examples:
        money_inr(3622.5) -> "₹3,622.50"
        money_inr(1234567) -> "₹12,34,567.00"
        money_inr(-50) -> "-₹50.00"
        money_inr(None) -> "-"
    """
    if value is None or value == "":
        return "-"

    try:
        num = money(value)
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    sign = "-" if num < 0 else ""
    integer_part, decimal_part = f"{abs(num):.2f}".split(".")

    head, tail = integer_part[:-3], integer_part[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    groups.append(tail)

    return f"{sign}₹{','.join(groups)}.{decimal_part}"


def datetime_in(value: Optional[datetime], with_time: bool = True) -> str:
    """
    Format a datetime as DD/MM/YYYY HH:MM (or just the date).

    Examples:
        datetime_in(datetime(2026, 1, 12, 15, 30)) -> "12/01/2026 15:30"
        datetime_in(None) -> "-"
    """
    if not isinstance(value, datetime):
        return "-"

    if with_time:
        return value.strftime("%d/%m/%Y %H:%M")
    return value.strftime("%d/%m/%Y")
