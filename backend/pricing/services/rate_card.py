"""
Band rate card pricing for imported tables.

Flat prices apply up to 100 kg (an empty band falls back to the nearest
filled band below it); above 100 kg the per-kg rate applies. Fees are then
added and ICMS is applied on the subtotal.
"""
from __future__ import annotations

import math
from decimal import Decimal

from ..dataclasses import RateCard
from .margin import markup, quote_price
from .utils import HUNDRED, ZERO, d, q2

BANDS = (
    (Decimal("30"), "weight_0_30"),
    (Decimal("50"), "weight_31_50"),
    (Decimal("70"), "weight_51_70"),
    (Decimal("100"), "weight_71_100"),
)


def band_base_price(weight, card: RateCard, min_price, price_per_kg=None) -> Decimal:
    weight = d(weight)
    minimum = d(min_price or ZERO)
    for index, (upper, _) in enumerate(BANDS):
        if weight <= upper:
            for _, name in reversed(BANDS[:index + 1]):
                value = getattr(card, name)
                if value:
                    return d(value)
            return minimum
    per_kg = card.above_101_per_kg if card.above_101_per_kg is not None else d(price_per_kg or ZERO)
    return max(weight * per_kg, minimum)


def toll_value(weight, toll_per_100kg) -> Decimal:
    toll = d(toll_per_100kg or ZERO)
    if toll <= ZERO:
        return ZERO
    # Charged per started 100 kg, at least one block.
    blocks = math.ceil(max(d(weight), Decimal(1)) / HUNDRED)
    return toll * blocks


def card_total(card: RateCard, weight, invoice_value, min_price, price_per_kg=None) -> Decimal:
    weight = d(weight)
    invoice = d(invoice_value or ZERO)
    minimum = d(min_price or ZERO)

    subtotal = (
        band_base_price(weight, card, minimum, price_per_kg)
        + card.dispatch_fee
        + invoice * card.gris_percent / HUNDRED
        + invoice * card.insurance_percent / HUNDRED
        + toll_value(weight, card.toll_per_100kg)
    )
    total = subtotal * (1 + card.icms_percent / HUNDRED)
    return q2(max(total, minimum))


def route_cost_total(route, weight, invoice_value=ZERO) -> Decimal:
    """
    What the carrier is owed for carrying ``weight`` on ``route``.

    Routes with a rate card are priced from the card; plain routes use the
    cost per kg with the cost minimum.
    """
    if route.rate_card:
        card = RateCard.from_json(route.rate_card)
        return card_total(card, weight, invoice_value, route.cost_min_price, route.cost_price_per_kg)
    return quote_price(weight, route.cost_price_per_kg, route.cost_min_price)


def route_quote_price(route, weight, invoice_value=ZERO) -> Decimal:
    if route.rate_card:
        return markup(route_cost_total(route, weight, invoice_value), route.margin_percent)
    return quote_price(weight, route.price_per_kg, route.min_price)
