"""
Carrier-side profitability check for a proposed trip price.

The ANTT check compares the price against the regulatory minimum freight
floor and flags carrier registration problems. Any ``error`` alert makes the
analysis blocking.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from django.utils import timezone

from ..dataclasses import (
    AnttReference,
    CarrierCompliance,
    ComplianceAlert,
    ComplianceResult,
    CostEstimate,
    CostParameters,
    TripInput,
)
from .errors import PricingError
from .utils import HUNDRED, ZERO, d, q2

LOSS = "LOSS"
CRITICAL = "CRITICAL"
OK = "OK"
GREAT = "GREAT"

CRITICAL_MARGIN = Decimal("8")
GOOD_MARGIN = Decimal("15")

DEFAULT_AXLES = 2

TOLL_OK = "OK"
TOLL_WARNING = "WARNING"
TOLL_NOT_APPLICABLE = "NOT_APPLICABLE"

ERROR = "error"


def estimate_total_cost(trip: TripInput, params: CostParameters) -> CostEstimate:
    if trip.km <= ZERO:
        raise PricingError("KM estimado deve ser maior que zero")
    if trip.price <= ZERO:
        raise PricingError("Preço deve ser maior que zero")
    if params.avg_consumption_km_l <= ZERO or params.estimated_monthly_km <= ZERO:
        raise PricingError("Consumo médio e km mensal devem ser maiores que zero")

    fuel_per_km = params.diesel_price / params.avg_consumption_km_l
    breakdown = {
        "fuel": q2(trip.km * fuel_per_km),
        "variable": q2(trip.km * params.variable_cost_per_km),
        "fixed_alloc": q2(params.fixed_monthly_cost / params.estimated_monthly_km * trip.km),
        "tolls": q2(trip.toll),
        "time_cost": q2(trip.hours * params.waiting_cost_per_hour),
        "fees": q2(trip.price * params.admin_fee_percent / HUNDRED + params.pickup_delivery_fixed_fee),
        "empty_return": q2(trip.km * params.empty_return_factor * (fuel_per_km + params.variable_cost_per_km)),
    }
    return CostEstimate(total_cost=q2(sum(breakdown.values(), ZERO)), breakdown=breakdown)


def calculate_profit(price, total_cost):
    """Returns ``(profit, margin_percent)``; margin is -100 when price is not positive."""
    price, total_cost = d(price), d(total_cost)
    profit = price - total_cost
    margin = profit / price * HUNDRED if price > ZERO else Decimal("-100")
    return q2(profit), q2(margin)


def classify_margin(margin_percent) -> str:
    margin = d(margin_percent)
    if margin < ZERO:
        return LOSS
    if margin < CRITICAL_MARGIN:
        return CRITICAL
    if margin <= GOOD_MARGIN:
        return OK
    return GREAT


def build_suggestions(margin_percent, total_cost, current_price, floor_price: Optional[Decimal] = None) -> List[str]:
    margin = d(margin_percent)
    suggestions: List[str] = []
    if margin < ZERO:
        suggestions.append("Margem negativa detectada. Reavalie custo fixo alocado e preço final.")
    elif margin < CRITICAL_MARGIN:
        suggestions.append("Margem crítica. Considere ajustar preço para atingir pelo menos 8%.")

    min_price_for_8 = d(total_cost) / Decimal("0.92")
    if min_price_for_8 > d(current_price):
        suggestions.append(f"Preço mínimo estimado para margem 8%: R$ {q2(min_price_for_8)}.")

    if floor_price and d(current_price) < d(floor_price):
        suggestions.append(f"Preço abaixo do piso ANTT. Preço mínimo regulatório estimado: R$ {q2(floor_price)}.")
    return suggestions


def antt_floor_price(km, toll, axles: int, reference: AnttReference, operation_code: Optional[str] = None) -> Decimal:
    """((base + per_axle * axles + diesel * km) * km + toll) * operation multiplier, never below zero."""
    km, toll = d(km), d(toll or ZERO)
    per_km = reference.base_per_km + reference.per_axle_km * axles + reference.diesel_coeff * km
    floor = (per_km * km + toll) * reference.multiplier(operation_code)
    return q2(max(ZERO, floor))


def _expired(value: Optional[date], today: date) -> bool:
    return value is not None and value < today


def validate_antt_compliance(trip: TripInput, reference: AnttReference, carrier: CarrierCompliance,
                             params: CostParameters, axles: int = DEFAULT_AXLES,
                             operation_code: Optional[str] = None, vale_pedagio_included: bool = False,
                             today: Optional[date] = None) -> ComplianceResult:
    today = today or timezone.localdate()
    alerts: List[ComplianceAlert] = []

    floor = antt_floor_price(trip.km, trip.toll, axles, reference, operation_code)
    below_floor = d(trip.price) < floor
    if below_floor:
        alerts.append(ComplianceAlert(ERROR, "ANTT_FLOOR_VIOLATION",
                                      f"Preço informado abaixo do piso ANTT estimado (R$ {floor})."))

    if carrier.rntrc_status != "ACTIVE":
        alerts.append(ComplianceAlert(ERROR, "RNTRC_INVALID",
                                      f"RNTRC não está ativo (status: {carrier.rntrc_status})."))
    if _expired(carrier.rntrc_expires_at, today):
        alerts.append(ComplianceAlert(ERROR, "RNTRC_EXPIRED",
                                      "RNTRC expirado. Atualize seu cadastro para operar sem risco regulatório."))
    if carrier.antt_registration_status != "ACTIVE":
        alerts.append(ComplianceAlert(ERROR, "ANTT_REGISTRATION_INACTIVE",
                                      f"Cadastro ANTT irregular (status: {carrier.antt_registration_status})."))
    if _expired(carrier.insurance_valid_until, today):
        alerts.append(ComplianceAlert(ERROR, "INSURANCE_EXPIRED", "Seguro de responsabilidade civil vencido."))

    toll_compliance = TOLL_NOT_APPLICABLE
    if d(trip.toll or ZERO) > ZERO:
        if params.vale_pedagio_required and not vale_pedagio_included:
            toll_compliance = TOLL_WARNING
            alerts.append(ComplianceAlert(ERROR, "VALE_PEDAGIO_REQUIRED",
                                          "Rota com pedágio exige vale-pedágio informado na regra."))
        else:
            toll_compliance = TOLL_OK

    return ComplianceResult(
        antt_floor_price=floor,
        is_below_antt_floor=below_floor,
        rntrc_status=carrier.rntrc_status,
        toll_compliance=toll_compliance,
        alerts=alerts,
    )
