"""
Quote generation: cargo weights -> candidate routes -> customer prices.

When no route serves the CEP pair the customer still gets a generic estimate
priced from the ``fallback_*`` platform settings, flagged ``is_estimate``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.services import get_decimal, get_int
from pricing.dataclasses import CargoWeights, QuoteOffer
from pricing.services.margin import quote_price
from pricing.services.rate_card import route_cost_total, route_quote_price
from pricing.services.utils import ZERO, d, q2, q3
from rate_tables.services.resolver import NoRouteAvailable, normalize_zip, resolve_routes
from quotes.models import QuoteRequest
from .errors import QuoteBlockedError
from .repasse import split_by_margin

logger = logging.getLogger(__name__)

ESTIMATE_LABEL = 'Estimativa RotaClick'


@dataclass
class QuoteResult:
    origin_zip: str
    dest_zip: str
    taxable_weight: Decimal
    offers: List[QuoteOffer] = field(default_factory=list)
    strategy: Optional[str] = None
    used_fallback: bool = False
    request_id: Optional[int] = None

    @property
    def best_offer(self) -> Optional[QuoteOffer]:
        return self.offers[0] if self.offers else None

    def as_dict(self) -> Dict[str, Any]:
        return {
            'request_id': self.request_id,
            'origin_zip': self.origin_zip,
            'dest_zip': self.dest_zip,
            'taxable_weight': self.taxable_weight,
            'strategy': self.strategy,
            'used_fallback': self.used_fallback,
            'offers': [offer.as_dict() for offer in self.offers],
        }


def price_route(route, taxable_weight, invoice_value=ZERO) -> QuoteOffer:
    return QuoteOffer(
        carrier_name=route.carrier.display_name,
        price=route_quote_price(route, taxable_weight, invoice_value),
        cost_total=route_cost_total(route, taxable_weight, invoice_value),
        deadline_days=route.deadline_days,
        route_id=route.pk,
        carrier_id=route.carrier_id,
        margin_percent=d(route.margin_percent),
    )


def fallback_offer(taxable_weight) -> QuoteOffer:
    price = quote_price(taxable_weight, get_decimal('fallback_price_per_kg'), get_decimal('fallback_min_price'))
    margin = get_decimal('default_margin_percent')
    cost, _ = split_by_margin(price, margin)
    return QuoteOffer(
        carrier_name=ESTIMATE_LABEL,
        price=price,
        cost_total=cost,
        deadline_days=get_int('fallback_deadline_days'),
        margin_percent=margin,
        is_estimate=True,
    )


def build_quote(origin_zip, dest_zip, weights, invoice_value=ZERO, carrier_id=None, user=None) -> QuoteResult:
    """
    Prices every route serving ``origin_zip -> dest_zip`` for the cargo.

    ``weights`` is either the aggregated ``CargoWeights`` or a bare taxable
    weight. Offers come back cheapest first. Raises ``QuoteBlockedError`` for
    zero weight and ``ZipCodeError`` for malformed CEPs.
    """
    taxable = weights.taxable_weight if isinstance(weights, CargoWeights) else q3(d(weights or ZERO))
    if taxable <= ZERO:
        raise QuoteBlockedError('Informe peso ou dimensões da carga para cotar.')

    origin = normalize_zip(origin_zip)
    dest = normalize_zip(dest_zip)
    invoice = q2(d(invoice_value or ZERO))

    result = QuoteResult(origin_zip=origin, dest_zip=dest, taxable_weight=taxable)
    lookup = resolve_routes(origin, dest, carrier_id=carrier_id)
    if isinstance(lookup, NoRouteAvailable):
        logger.warning("Falling back to estimate for %s -> %s (%s kg)", origin, dest, taxable)
        result.offers = [fallback_offer(taxable)]
        result.used_fallback = True
    else:
        result.strategy = lookup.strategy
        offers = [price_route(route, taxable, invoice) for route in lookup.routes]
        result.offers = sorted(offers, key=lambda o: (o.price, o.deadline_days if o.deadline_days is not None else 9999))

    best = result.best_offer
    request = QuoteRequest.objects.create(
        user=user if user is not None and user.is_authenticated else None,
        origin_zip=origin,
        dest_zip=dest,
        taxable_weight=taxable,
        invoice_value=invoice,
        offers_count=0 if result.used_fallback else len(result.offers),
        best_price=best.price if best else None,
        used_fallback=result.used_fallback,
    )
    result.request_id = request.pk
    return result
