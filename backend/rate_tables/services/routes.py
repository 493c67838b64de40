"""
Single-route maintenance. Prices always go through ``publish_rate`` so a
hand-entered route and an imported one with the same costs publish the same
rates. The minimum is entered as the carrier's cost and marked up.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from django.db import IntegrityError, transaction
from django.forms.models import model_to_dict

from audit.logger import AuditLogger
from pricing.services.margin import publish_rate
from pricing.services.utils import ZERO, d, q2, q4
from rate_tables.models import FreightRoute
from .errors import RouteValidationError
from .resolver import normalize_zip

logger = logging.getLogger(__name__)

AUDITED_FIELDS = (
    'origin_zip', 'origin_zip_end', 'dest_zip', 'dest_zip_end',
    'cost_price_per_kg', 'cost_min_price', 'margin_percent',
    'price_per_kg', 'min_price', 'deadline_days', 'status',
)


def _snapshot(route: FreightRoute) -> Dict[str, Any]:
    return model_to_dict(route, fields=AUDITED_FIELDS)


def _optional_zip(value) -> Optional[str]:
    if value in (None, ''):
        return None
    return normalize_zip(value)


def _apply(route: FreightRoute, data: Mapping[str, Any]) -> None:
    if 'origin_zip' in data:
        route.origin_zip = normalize_zip(data['origin_zip'])
    if 'dest_zip' in data:
        route.dest_zip = normalize_zip(data['dest_zip'])
    if 'origin_zip_end' in data:
        route.origin_zip_end = _optional_zip(data['origin_zip_end'])
    if 'dest_zip_end' in data:
        route.dest_zip_end = _optional_zip(data['dest_zip_end'])
    if route.origin_zip_end and route.origin_zip_end < route.origin_zip:
        raise RouteValidationError('Faixa de CEP de origem invertida')
    if route.dest_zip_end and route.dest_zip_end < route.dest_zip:
        raise RouteValidationError('Faixa de CEP de destino invertida')

    if 'deadline_days' in data:
        deadline = data['deadline_days']
        if deadline is not None and int(deadline) < 0:
            raise RouteValidationError('Prazo não pode ser negativo')
        route.deadline_days = deadline

    try:
        cost_per_kg = d(data.get('cost_price_per_kg', route.cost_price_per_kg))
        cost_min = d(data.get('cost_min_price', route.cost_min_price) or ZERO)
    except (InvalidOperation, ValueError, TypeError):
        raise RouteValidationError('Custos devem ser numéricos')
    if cost_per_kg <= ZERO:
        raise RouteValidationError('Custo por kg deve ser positivo')

    published = publish_rate(cost_per_kg, cost_min, data.get('margin_percent', route.margin_percent))
    route.cost_price_per_kg = q4(cost_per_kg)
    route.cost_min_price = q2(cost_min)
    route.margin_percent = published.margin_percent
    route.price_per_kg = published.price_per_kg
    route.min_price = published.min_price


def _save(route: FreightRoute) -> None:
    try:
        with transaction.atomic():
            route.save()
    except IntegrityError:
        raise RouteValidationError('Já existe rota desta transportadora para este par de CEPs')


def create_route(carrier, data: Mapping[str, Any], user=None, ip_address: Optional[str] = None) -> FreightRoute:
    for key in ('origin_zip', 'dest_zip', 'cost_price_per_kg', 'margin_percent'):
        if data.get(key) in (None, ''):
            raise RouteValidationError(f"{key} é obrigatório")
    route = FreightRoute(carrier=carrier, cost_price_per_kg=ZERO, cost_min_price=ZERO, margin_percent=ZERO)
    _apply(route, data)
    _save(route)
    AuditLogger.log_create('freight_route', route.pk, _snapshot(route), user=user, ip_address=ip_address)
    logger.info("Route %s created for carrier %s", route.pk, carrier.pk)
    return route


def update_route(route: FreightRoute, data: Mapping[str, Any], user=None, ip_address: Optional[str] = None) -> FreightRoute:
    before = _snapshot(route)
    _apply(route, data)
    _save(route)
    AuditLogger.log_update('freight_route', route.pk, before, _snapshot(route), user=user, ip_address=ip_address)
    return route


def set_route_status(route: FreightRoute, status: str, user=None, ip_address: Optional[str] = None) -> FreightRoute:
    if status not in (FreightRoute.STATUS_ACTIVE, FreightRoute.STATUS_INACTIVE):
        raise RouteValidationError(f"Status inválido: {status}")
    if route.status == status:
        return route
    before = _snapshot(route)
    route.status = status
    route.save(update_fields=['status', 'updated_at'])
    AuditLogger.log_update('freight_route', route.pk, before, _snapshot(route), user=user, ip_address=ip_address)
    return route


def delete_route(route: FreightRoute, user=None, ip_address: Optional[str] = None) -> str:
    """Deletes ``route``, or deactivates it when freights reference it. Returns what happened."""
    if route.freights.exists():
        set_route_status(route, FreightRoute.STATUS_INACTIVE, user=user, ip_address=ip_address)
        return 'deactivated'
    snapshot, pk = _snapshot(route), route.pk
    route.delete()
    AuditLogger.log_delete('freight_route', pk, snapshot, user=user, ip_address=ip_address)
    return 'deleted'
