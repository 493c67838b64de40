from decimal import Decimal

import pytest

from pricing.dataclasses import CargoItem
from pricing.services.cargo import VOLUMETRIC_FACTOR, aggregate_cargo, parse_cargo_items
from pricing.services.errors import CargoValidationError


def _item(qty, weight, h="0", w="0", dd="0"):
    return CargoItem(quantity=qty, weight_kg=Decimal(weight), height_m=Decimal(h), width_m=Decimal(w), depth_m=Decimal(dd))


class TestAggregateCargo:

    def test_cube_beats_real_weight(self):
        weights = aggregate_cargo([_item(2, "5", "0.3", "0.3", "0.3")])
        assert weights.real_weight == Decimal("10.000")
        assert weights.cubed_weight == Decimal("16.200")
        assert weights.taxable_weight == Decimal("16.200")
        assert weights.is_quotable

    def test_real_weight_beats_cube(self):
        weights = aggregate_cargo([_item(1, "100", "0.5", "0.5", "0.5"), _item(3, "2.5")])
        assert weights.real_weight == Decimal("107.500")
        assert weights.cubed_weight == Decimal("37.500")
        assert weights.taxable_weight == weights.real_weight

    @pytest.mark.parametrize("items", [
        [],
        [_item(1, "0")],
        [_item(4, "0", "0", "1", "1")],
    ])
    def test_zero_cargo_is_not_quotable(self, items):
        weights = aggregate_cargo(items)
        assert weights.taxable_weight == Decimal("0")
        assert not weights.is_quotable

    def test_taxable_is_max_of_real_and_cubed(self):
        samples = [
            [_item(1, "1", "1", "1", "1")],
            [_item(10, "30", "0.1", "0.2", "0.3"), _item(1, "0.5", "2", "0.1", "0.1")],
            [_item(7, "0.333", "0.05", "0.05", "0.05")],
        ]
        for items in samples:
            weights = aggregate_cargo(items)
            assert weights.taxable_weight == max(weights.real_weight, weights.cubed_weight)
            assert weights.real_weight >= 0 and weights.cubed_weight >= 0

    def test_factor(self):
        assert VOLUMETRIC_FACTOR == 300

    @pytest.mark.parametrize("bad", [_item(0, "1"), _item(-1, "1"), _item(1, "-1"), _item(1, "1", "-0.1", "1", "1"),
                                     _item(1, "NaN"), _item(1, "1", "Infinity", "1", "1"), _item(1, "1e30")])
    def test_invalid_items_raise(self, bad):
        with pytest.raises(CargoValidationError):
            aggregate_cargo([bad])

    def test_total_weight_ceiling(self):
        with pytest.raises(CargoValidationError):
            aggregate_cargo([_item(1000000, "1000000")])
        with pytest.raises(CargoValidationError):
            aggregate_cargo([_item(1000, "1", "1000", "1000", "1000")])


class TestParseCargoItems:

    def test_parses_strings_and_comma_decimals(self):
        items = parse_cargo_items([{"quantity": "2", "weight": "5,5", "height": "0.3", "width": 0.3, "depth": "0,3"}])
        assert items == [CargoItem(2, Decimal("5.5"), Decimal("0.3"), Decimal("0.3"), Decimal("0.3"))]

    def test_quantity_defaults_to_one(self):
        assert parse_cargo_items([{"weight": 3}])[0].quantity == 1

    @pytest.mark.parametrize("raw", [
        {"quantity": 1},
        {"quantity": 1, "weight": "abc"},
        {"quantity": 1.5, "weight": 1},
        {"quantity": 0, "weight": 1},
        {"quantity": 1, "weight": "NaN"},
        {"quantity": 1, "weight": "-Infinity"},
        {"quantity": "Infinity", "weight": 1},
        {"quantity": 1, "weight": "1e30"},
        {"quantity": 1, "weight": 1, "height": "sNaN"},
        "not a dict",
    ])
    def test_rejects_bad_payloads(self, raw):
        with pytest.raises(CargoValidationError):
            parse_cargo_items([raw])
