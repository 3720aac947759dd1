"""Conversion between integer minor currency units and major-unit decimals.

Carts, checkout requests and everything sent to the remote service carry
integer minor units (cents). Only display and edit surfaces work in major
units, and they cross over through these two functions.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from ordering_client.errors import ValidationError


MINOR_UNITS_PER_MAJOR = 100

MajorAmount = Union[Decimal, int, float, str]


def to_major_units(minor: int) -> Decimal:
    """1250 -> Decimal("12.50")"""
    return (Decimal(int(minor)) / MINOR_UNITS_PER_MAJOR).quantize(Decimal("0.01"))


def to_minor_units(major: MajorAmount) -> int:
    """Decimal("12.5") -> 1250, rounding half up to the nearest minor unit."""
    try:
        # str() keeps floats like 0.29 from turning into 0.28999...
        value = Decimal(str(major))
    except InvalidOperation:
        raise ValidationError(f"Not a valid amount: {major!r}")
    if not value.is_finite():
        raise ValidationError(f"Not a valid amount: {major!r}")
    minor = (value * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(minor)


def format_price(minor: int, currency_symbol: str = "£") -> str:
    return f"{currency_symbol}{to_major_units(minor):.2f}"
