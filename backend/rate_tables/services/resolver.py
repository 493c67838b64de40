"""
Route lookup for a CEP pair.

Strategies are tried in order and the first that yields routes wins:
exact pair, range containment, then a shared 5-digit prefix.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

from django.db.models import Q

from carriers.models import Carrier
from rate_tables.models import FreightRoute
from .errors import ZipCodeError

logger = logging.getLogger(__name__)

PREFIX_LENGTH = 5
PREFIX_LIMIT = 50

STRATEGY_EXACT = 'exact'
STRATEGY_RANGE = 'range'
STRATEGY_PREFIX = 'prefix'


@dataclass
class RouteLookup:
    routes: List[FreightRoute]
    strategy: str


@dataclass
class NoRouteAvailable:
    origin_zip: str
    dest_zip: str
    carrier_id: Optional[int] = None
    reason: str = field(default='Nenhuma rota encontrada para o par de CEPs')


def normalize_zip(value) -> str:
    """``01000-000`` -> ``01000000``; 7 digits (spreadsheet-trimmed) get a leading zero."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    digits = re.sub(r'\D', '', str(value if value is not None else ''))
    if len(digits) == 7:
        digits = '0' + digits
    if len(digits) != 8:
        raise ZipCodeError(value)
    return digits


def format_zip(digits: str) -> str:
    return f"{digits[:5]}-{digits[5:]}" if digits and len(digits) == 8 else digits


def _candidates(carrier_id=None):
    qs = (FreightRoute.objects
          .filter(status=FreightRoute.STATUS_ACTIVE, carrier__approval_status=Carrier.STATUS_APPROVED)
          .select_related('carrier'))
    if carrier_id is not None:
        qs = qs.filter(carrier_id=carrier_id)
    return qs


def _within(field: str, zip_code: str) -> Q:
    end = f"{field}_end"
    return (Q(**{f"{end}__isnull": False, f"{field}__lte": zip_code, f"{end}__gte": zip_code})
            | Q(**{f"{end}__isnull": True, field: zip_code}))


def resolve_routes(origin_zip, dest_zip, carrier_id=None) -> Union[RouteLookup, NoRouteAvailable]:
    origin = normalize_zip(origin_zip)
    dest = normalize_zip(dest_zip)
    base = _candidates(carrier_id)

    exact = list(base.filter(origin_zip=origin, dest_zip=dest))
    if exact:
        return RouteLookup(exact, STRATEGY_EXACT)

    ranged = list(
        base.filter(Q(origin_zip_end__isnull=False) | Q(dest_zip_end__isnull=False))
            .filter(_within('origin_zip', origin), _within('dest_zip', dest))
    )
    if ranged:
        return RouteLookup(ranged, STRATEGY_RANGE)

    prefixed = list(base.filter(
        origin_zip__startswith=origin[:PREFIX_LENGTH],
        dest_zip__startswith=dest[:PREFIX_LENGTH],
    )[:PREFIX_LIMIT])
    if prefixed:
        return RouteLookup(prefixed, STRATEGY_PREFIX)

    logger.warning("No route for %s -> %s (carrier=%s)", origin, dest, carrier_id)
    return NoRouteAvailable(origin, dest, carrier_id)
