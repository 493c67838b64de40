from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

TWOPLACES = Decimal("0.01")
THREEPLACES = Decimal("0.001")
FOURPLACES = Decimal("0.0001")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def d(val) -> Decimal:
    """Coerce incoming values to Decimal safely."""
    if isinstance(val, Decimal):
        return val
    if isinstance(val, bool):
        raise InvalidOperation(f"not a number: {val!r}")
    return Decimal(str(val))


def q2(amount) -> Decimal:
    """Money: 2 dp, half-up."""
    return d(amount).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def q3(amount) -> Decimal:
    """Weights in kg: 3 dp, half-up."""
    return d(amount).quantize(THREEPLACES, rounding=ROUND_HALF_UP)


def q4(amount) -> Decimal:
    """Per-kg rates: 4 dp, half-up."""
    return d(amount).quantize(FOURPLACES, rounding=ROUND_HALF_UP)


def margin_factor(margin_percent) -> Decimal:
    return Decimal(1) + d(margin_percent) / HUNDRED
