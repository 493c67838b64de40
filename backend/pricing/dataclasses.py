from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .services.utils import ZERO, d


@dataclass(frozen=True)
class CargoItem:
    quantity: int
    weight_kg: Decimal
    height_m: Decimal = ZERO
    width_m: Decimal = ZERO
    depth_m: Decimal = ZERO

    @property
    def volume_m3(self) -> Decimal:
        return self.height_m * self.width_m * self.depth_m


@dataclass(frozen=True)
class CargoWeights:
    real_weight: Decimal
    cubed_weight: Decimal
    taxable_weight: Decimal

    @property
    def is_quotable(self) -> bool:
        return self.taxable_weight > ZERO

    def as_dict(self) -> Dict[str, Any]:
        return {
            "real_weight": self.real_weight,
            "cubed_weight": self.cubed_weight,
            "taxable_weight": self.taxable_weight,
            "is_quotable": self.is_quotable,
        }


@dataclass(frozen=True)
class PublishedRate:
    price_per_kg: Decimal
    min_price: Decimal
    margin_percent: Decimal


@dataclass
class RateCard:
    """Cost-side band table carried by imported routes. Empty bands are ``None``."""
    weight_0_30: Optional[Decimal] = None
    weight_31_50: Optional[Decimal] = None
    weight_51_70: Optional[Decimal] = None
    weight_71_100: Optional[Decimal] = None
    above_101_per_kg: Optional[Decimal] = None
    dispatch_fee: Decimal = ZERO
    gris_percent: Decimal = ZERO
    insurance_percent: Decimal = ZERO
    toll_per_100kg: Decimal = ZERO
    icms_percent: Decimal = ZERO

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "RateCard":
        data = data or {}
        kwargs: Dict[str, Any] = {}
        for name in cls.__dataclass_fields__:
            raw = data.get(name)
            if raw in (None, ""):
                continue
            kwargs[name] = d(raw)
        return cls(**kwargs)

    def to_json(self) -> Dict[str, str]:
        return {
            name: str(getattr(self, name))
            for name in self.__dataclass_fields__
            if getattr(self, name) is not None
        }


@dataclass
class QuoteOffer:
    carrier_name: str
    price: Decimal
    cost_total: Decimal
    deadline_days: Optional[int]
    route_id: Optional[int] = None
    carrier_id: Optional[int] = None
    margin_percent: Decimal = ZERO
    is_estimate: bool = False

    @property
    def rotaclick_amount(self) -> Decimal:
        return self.price - self.cost_total

    def as_dict(self) -> Dict[str, Any]:
        return {
            "route_id": self.route_id,
            "carrier_id": self.carrier_id,
            "carrier": self.carrier_name,
            "price": self.price,
            "deadline_days": self.deadline_days,
            "is_estimate": self.is_estimate,
        }


@dataclass(frozen=True)
class RepasseBreakdown:
    price: Decimal
    carrier_amount: Decimal
    rotaclick_amount: Decimal
    payment_term_days: int
    paid_at: datetime
    due_date: date


@dataclass
class CostParameters:
    diesel_price: Decimal = Decimal("6")
    avg_consumption_km_l: Decimal = Decimal("3")
    variable_cost_per_km: Decimal = Decimal("1.2")
    fixed_monthly_cost: Decimal = Decimal("12000")
    estimated_monthly_km: Decimal = Decimal("10000")
    waiting_cost_per_hour: Decimal = Decimal("45")
    admin_fee_percent: Decimal = ZERO
    pickup_delivery_fixed_fee: Decimal = ZERO
    empty_return_factor: Decimal = ZERO
    vale_pedagio_required: bool = True


@dataclass
class TripInput:
    km: Decimal
    price: Decimal
    hours: Decimal = ZERO
    toll: Decimal = ZERO


@dataclass
class CostEstimate:
    total_cost: Decimal
    breakdown: Dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class AnttReference:
    """Coefficients of the ANTT minimum-freight floor and where they came from."""
    source_url: str = "https://www.gov.br/antt/pt-br/assuntos/cargas/piso-minimo-de-frete"
    version_tag: str = "fallback-default"
    base_per_km: Decimal = Decimal("1.4")
    per_axle_km: Decimal = Decimal("0.22")
    diesel_coeff: Decimal = Decimal("0.08")
    operation_multiplier: Dict[str, Decimal] = field(default_factory=lambda: {"default": Decimal("1")})

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AnttReference":
        data = data or {}
        kwargs: Dict[str, Any] = {}
        for name in ("source_url", "version_tag"):
            if data.get(name):
                kwargs[name] = str(data[name])
        for name in ("base_per_km", "per_axle_km", "diesel_coeff"):
            if data.get(name) not in (None, ""):
                kwargs[name] = d(data[name])
        if data.get("operation_multiplier"):
            kwargs["operation_multiplier"] = {k: d(v) for k, v in data["operation_multiplier"].items()}
        return cls(**kwargs)

    def multiplier(self, operation_code: Optional[str]) -> Decimal:
        return self.operation_multiplier.get(operation_code or "default", Decimal("1"))


@dataclass(frozen=True)
class CarrierCompliance:
    rntrc_status: str = "UNKNOWN"
    antt_registration_status: str = "PENDING"
    rntrc_expires_at: Optional[date] = None
    insurance_valid_until: Optional[date] = None

    @classmethod
    def from_carrier(cls, carrier) -> "CarrierCompliance":
        return cls(
            rntrc_status=carrier.rntrc_status,
            antt_registration_status=carrier.antt_registration_status,
            rntrc_expires_at=carrier.rntrc_expires_at,
            insurance_valid_until=carrier.insurance_valid_until,
        )


@dataclass(frozen=True)
class ComplianceAlert:
    severity: str
    code: str
    message: str


@dataclass
class ComplianceResult:
    antt_floor_price: Decimal
    is_below_antt_floor: bool
    rntrc_status: str
    toll_compliance: str
    alerts: List[ComplianceAlert] = field(default_factory=list)

    @property
    def blocking(self) -> bool:
        return any(alert.severity == "error" for alert in self.alerts)
