import pytest

from carriers.models import Carrier
from rate_tables.models import FreightRoute
from rate_tables.services.errors import ZipCodeError
from rate_tables.services.resolver import (
    PREFIX_LIMIT,
    STRATEGY_EXACT,
    STRATEGY_PREFIX,
    STRATEGY_RANGE,
    NoRouteAvailable,
    RouteLookup,
    normalize_zip,
    resolve_routes,
)

pytestmark = pytest.mark.django_db


class TestNormalizeZip:

    @pytest.mark.parametrize("raw,expected", [
        ("01000-000", "01000000"),
        ("01000000", "01000000"),
        ("1000000", "01000000"),
        (1000000, "01000000"),
        (20040020.0, "20040020"),
        (" 20040-020 ", "20040020"),
    ])
    def test_valid(self, raw, expected):
        assert normalize_zip(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "123", "123456789", "abcde-fgh"])
    def test_invalid(self, raw):
        with pytest.raises(ZipCodeError):
            normalize_zip(raw)


def test_exact_match_wins(make_carrier, make_route):
    carrier = make_carrier()
    exact = make_route(carrier, "01000000", "20000000")
    make_route(carrier, "01000001", "20000001")

    lookup = resolve_routes("01000-000", "20000-000")
    assert isinstance(lookup, RouteLookup)
    assert lookup.strategy == STRATEGY_EXACT
    assert lookup.routes == [exact]


def test_range_containment(make_carrier, make_route):
    carrier = make_carrier()
    ranged = make_route(carrier, "01000000", "20000000", origin_zip_end="01999999", dest_zip_end="28999999")

    lookup = resolve_routes("01310100", "22041001")
    assert lookup.strategy == STRATEGY_RANGE
    assert lookup.routes == [ranged]

    miss = resolve_routes("02000000", "22041001")
    assert isinstance(miss, NoRouteAvailable)


def test_prefix_fallback_is_capped(make_carrier, make_route):
    carrier = make_carrier()
    for i in range(PREFIX_LIMIT + 5):
        make_route(carrier, f"01000{i:03d}", "20000999")

    lookup = resolve_routes("01000999", "20000000")
    assert lookup.strategy == STRATEGY_PREFIX
    assert len(lookup.routes) == PREFIX_LIMIT


def test_inactive_routes_and_unapproved_carriers_are_ignored(make_carrier, make_route):
    approved = make_carrier()
    pending = make_carrier(status=Carrier.STATUS_PENDING)
    make_route(approved, status=FreightRoute.STATUS_INACTIVE)
    make_route(pending)

    result = resolve_routes("01000000", "20000000")
    assert isinstance(result, NoRouteAvailable)
    assert result.origin_zip == "01000000"


def test_carrier_filter(make_carrier, make_route):
    a, b = make_carrier(), make_carrier()
    make_route(a)
    route_b = make_route(b)

    assert resolve_routes("01000000", "20000000", carrier_id=b.pk).routes == [route_b]
    assert len(resolve_routes("01000000", "20000000").routes) == 2
