"""Number parsing utilities for prices, quantities and transport costs."""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from tradedesk.exceptions import ValidationError

NUMBER_PATTERN = re.compile(r"^\d+(?:\.\d+)?$")

Number = Union[int, float, Decimal, str, None]


def parse_decimal(value: Number, field: str, allow_zero: bool = True) -> Optional[Decimal]:
    """
    Parse a user-entered number to Decimal.

    Rules:
    - Blank input (None or "") means "not entered" and returns None
    - Thousands separators (commas) and a leading rupee sign are ignored
    - No negatives
    - Zero is rejected when allow_zero is False

    Raises:
        ValidationError: naming `field` if the value is not a valid number.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        raise ValidationError(field)

    if isinstance(value, (int, float, Decimal)):
        cleaned = str(value)
    else:
        cleaned = value.strip().lstrip('₹').replace(',', '').strip()
        if not cleaned:
            return None
        if not NUMBER_PATTERN.match(cleaned):
            raise ValidationError(field)

    try:
        number = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        raise ValidationError(field)

    if not number.is_finite() or number < 0:
        raise ValidationError(field)
    if not allow_zero and number == 0:
        raise ValidationError(field)

    return number


def to_decimal(value: Number, default: Decimal = Decimal('0')) -> Decimal:
    """
    Lenient conversion for stored records: anything unparseable becomes `default`.

    Used only when reading snapshots written by older clients, never for user input.
    """
    if value is None or value == '' or isinstance(value, bool):
        return default
    try:
        number = Decimal(str(value).replace(',', ''))
    except (InvalidOperation, ValueError):
        return default
    return number if number.is_finite() else default
