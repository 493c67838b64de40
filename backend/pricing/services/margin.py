from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from ..dataclasses import PublishedRate
from .errors import MarginValidationError, RateValidationError
from .utils import ZERO, d, margin_factor, q2, q4

logger = logging.getLogger(__name__)

MIN_MARGIN = Decimal("0")
MAX_MARGIN = Decimal("200")


def validate_margin(margin_percent) -> Decimal:
    try:
        margin = d(margin_percent)
    except (InvalidOperation, ValueError, TypeError):
        raise MarginValidationError(f"Margem inválida: {margin_percent!r}")
    if not margin.is_finite() or margin < MIN_MARGIN or margin > MAX_MARGIN:
        raise MarginValidationError(f"Margem deve estar entre {MIN_MARGIN}% e {MAX_MARGIN}%")
    return margin


def _cost(value, name: str) -> Decimal:
    try:
        cost = d(value if value is not None else ZERO)
    except (InvalidOperation, ValueError, TypeError):
        raise RateValidationError(f"{name} inválido: {value!r}")
    if not cost.is_finite() or cost < ZERO:
        raise RateValidationError(f"{name} não pode ser negativo")
    return cost


def markup(amount, margin_percent) -> Decimal:
    """Money amount marked up by ``margin_percent``, 2 dp."""
    return q2(d(amount) * margin_factor(validate_margin(margin_percent)))


def publish_rate(cost_price_per_kg, cost_min_price, margin_percent) -> PublishedRate:
    """
    Customer-facing rate from the carrier's cost rate.

    Shared by single route create/update and every bulk import row so both
    paths round identically: per-kg at 4 dp, minimum at 2 dp.
    """
    margin = validate_margin(margin_percent)
    per_kg = _cost(cost_price_per_kg, "Custo por kg")
    minimum = _cost(cost_min_price, "Custo mínimo")
    factor = margin_factor(margin)
    return PublishedRate(
        price_per_kg=q4(per_kg * factor),
        min_price=q2(minimum * factor),
        margin_percent=margin,
    )


def quote_price(taxable_weight, price_per_kg, min_price) -> Decimal:
    weight = d(taxable_weight)
    return q2(max(weight * d(price_per_kg), d(min_price or ZERO)))
