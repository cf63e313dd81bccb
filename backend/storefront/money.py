# Overview: Decimal helpers for currency amounts (2 decimal places).

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize(value) -> Decimal:
    """Round to cents, half-up."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_float(value) -> float | None:
    """JSON representation of a stored amount."""
    if value is None:
        return None
    return float(quantize(value))
