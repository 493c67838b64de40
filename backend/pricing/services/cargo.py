"""
Cargo dimension aggregation.

Real weight is the declared weight; cubed weight converts volume with the
road-freight factor of 300 kg/m³. Carriers charge on whichever is larger.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping

from ..dataclasses import CargoItem, CargoWeights
from .errors import CargoValidationError
from .utils import ZERO, d, q3

logger = logging.getLogger(__name__)

VOLUMETRIC_FACTOR = 300
# Per-field ceiling for quantity and measures, and for the summed weights.
MAX_ITEM_VALUE = Decimal("1000000")
MAX_TOTAL_WEIGHT = Decimal("1000000000")


def _validate(item: CargoItem, index: int) -> None:
    if item.quantity <= 0:
        raise CargoValidationError(f"Item {index}: quantidade deve ser maior que zero")
    for name in ("weight_kg", "height_m", "width_m", "depth_m"):
        value = getattr(item, name)
        if not value.is_finite() or value > MAX_ITEM_VALUE:
            raise CargoValidationError(f"Item {index}: {name} fora do limite")
        if value < ZERO:
            raise CargoValidationError(f"Item {index}: {name} não pode ser negativo")


def aggregate_cargo(items: Iterable[CargoItem]) -> CargoWeights:
    real = ZERO
    cubed = ZERO
    for index, item in enumerate(items, start=1):
        _validate(item, index)
        real += item.weight_kg * item.quantity
        cubed += item.volume_m3 * VOLUMETRIC_FACTOR * item.quantity
    if max(real, cubed) >= MAX_TOTAL_WEIGHT:
        raise CargoValidationError("Peso total da carga excede o limite")
    real, cubed = q3(real), q3(cubed)
    return CargoWeights(real_weight=real, cubed_weight=cubed, taxable_weight=max(real, cubed))


def _number(raw: Mapping[str, Any], key: str, index: int, default=None):
    value = raw.get(key, default)
    if value is None or value == "":
        if default is None:
            raise CargoValidationError(f"Item {index}: {key} é obrigatório")
        value = default
    try:
        number = d(str(value).replace(",", ".") if isinstance(value, str) else value)
    except (InvalidOperation, ValueError, TypeError):
        raise CargoValidationError(f"Item {index}: {key} inválido ({value!r})")
    if not number.is_finite():
        raise CargoValidationError(f"Item {index}: {key} inválido ({value!r})")
    if abs(number) > MAX_ITEM_VALUE:
        raise CargoValidationError(f"Item {index}: {key} fora do limite")
    return number


def parse_cargo_items(raw_items: Iterable[Mapping[str, Any]]) -> List[CargoItem]:
    """Builds ``CargoItem``s from request payload dicts (dimensions in meters)."""
    items: List[CargoItem] = []
    for index, raw in enumerate(raw_items or [], start=1):
        if not isinstance(raw, Mapping):
            raise CargoValidationError(f"Item {index}: formato inválido")
        quantity = _number(raw, "quantity", index, default=1)
        if quantity != quantity.to_integral_value():
            raise CargoValidationError(f"Item {index}: quantidade deve ser inteira")
        item = CargoItem(
            quantity=int(quantity),
            weight_kg=_number(raw, "weight", index),
            height_m=_number(raw, "height", index, default=0),
            width_m=_number(raw, "width", index, default=0),
            depth_m=_number(raw, "depth", index, default=0),
        )
        _validate(item, index)
        items.append(item)
    return items
