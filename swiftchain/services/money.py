"""Money / rounding helpers.

Centralized so the conversion engine, fee comparison and chain lookups use
identical rounding semantics (ROUND_HALF_UP on Decimal values).
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from swiftchain.core.errors import InvalidAmount

TWO_PLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Parse user / wire input into a finite Decimal or raise InvalidAmount."""
    if isinstance(value, bool) or value is None:
        raise InvalidAmount()
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmount() from None
    if not result.is_finite():
        raise InvalidAmount()
    return result


def quantize(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
