from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest

from quotes.models import Freight
from quotes.services.repasse import record_checkout

pytestmark = pytest.mark.django_db

OLD_PAYMENT = datetime(2024, 1, 1, 15, 0, tzinfo=dt_timezone.utc)


def _checkout_payload(route, **extra):
    payload = {
        "route_id": route.pk,
        "origin_zip": "01000-000",
        "dest_zip": "20000-000",
        "items": [{"quantity": 2, "weight": "50"}],
        "checkout_session_id": "cs_test_1",
    }
    payload.update(extra)
    return payload


def test_anonymous_quote_with_items(api_client, make_carrier, make_route):
    make_route(make_carrier(name="Rápido"))
    resp = api_client().post("/api/quotes/calculate/", {
        "origin_zip": "01000-000",
        "dest_zip": "20000-000",
        "items": [{"quantity": 2, "weight": "50", "height": "0.1", "width": "0.1", "depth": "0.1"}],
    }, format="json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["taxable_weight"] == "100.000"
    assert body["offers"][0]["carrier"] == "Rápido"
    assert body["offers"][0]["price"] == "240.00"
    assert body["used_fallback"] is False


def test_quote_input_errors(api_client):
    client = api_client()
    resp = client.post("/api/quotes/calculate/", {"origin_zip": "01000000", "dest_zip": "20000000"}, format="json")
    assert resp.status_code == 400
    resp = client.post("/api/quotes/calculate/",
                       {"origin_zip": "01000000", "dest_zip": "20000000", "taxable_weight": "0"}, format="json")
    assert resp.status_code == 400
    assert "detail" in resp.json()
    resp = client.post("/api/quotes/calculate/",
                       {"origin_zip": "01000000", "dest_zip": "20000000", "items": [{"quantity": 0, "weight": "5"}]},
                       format="json")
    assert resp.status_code == 400


def test_quote_rejects_non_finite_cargo(api_client):
    for weight in ("NaN", "Infinity", "1e30"):
        resp = api_client().post("/api/quotes/calculate/", {
            "origin_zip": "01000000",
            "dest_zip": "20000000",
            "items": [{"quantity": 1, "weight": weight}],
        }, format="json")
        assert resp.status_code == 400
        assert "detail" in resp.json()


def test_quote_falls_back_to_estimate(api_client):
    resp = api_client().post("/api/quotes/calculate/",
                             {"origin_zip": "01000000", "dest_zip": "20000000", "taxable_weight": "10"}, format="json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["used_fallback"] is True
    assert body["offers"][0]["is_estimate"] is True
    assert body["offers"][0]["price"] == "80.00"


def test_checkout_recomputes_price(api_client, customer_user, make_carrier, make_route):
    route = make_route(make_carrier())
    resp = api_client(customer_user).post("/api/quotes/checkout/",
                                          _checkout_payload(route, price="1.00"), format="json")
    assert resp.status_code == 201
    assert resp.json()["price"] == "240.00"
    freight = Freight.objects.get()
    assert freight.customer == customer_user
    assert freight.carrier_amount == Decimal("200.00")

    again = api_client(customer_user).post("/api/quotes/checkout/", _checkout_payload(route), format="json")
    assert again.json()["id"] == freight.pk
    assert Freight.objects.count() == 1

    mine = api_client(customer_user).get("/api/freights/mine/")
    assert mine.json()["count"] == 1


def test_checkout_rejects_route_outside_pair(api_client, customer_user, make_carrier, make_route):
    route = make_route(make_carrier())
    resp = api_client(customer_user).post(
        "/api/quotes/checkout/", _checkout_payload(route, dest_zip="30000-000"), format="json")
    assert resp.status_code == 400
    assert Freight.objects.count() == 0


def test_checkout_permissions(api_client, make_user, make_carrier, make_route):
    route = make_route(make_carrier())
    assert api_client().post("/api/quotes/checkout/", _checkout_payload(route), format="json").status_code == 401
    carrier_user = make_user("outra", role="transportadora")
    resp = api_client(carrier_user).post("/api/quotes/checkout/", _checkout_payload(route), format="json")
    assert resp.status_code == 403


def test_admin_repasse_list_and_mark_paid(api_client, admin_user, customer_user, make_carrier, make_route):
    carrier = make_carrier()
    freight = record_checkout(customer_user, make_route(carrier), "01000000", "20000000", "100",
                              paid_at=OLD_PAYMENT)
    client = api_client(admin_user)

    overdue = client.get("/api/admin/repasses/", {"status": "overdue"}).json()
    assert overdue["count"] == 1
    assert overdue["results"][0]["is_overdue"] is True
    assert overdue["results"][0]["carrier_amount"] == "200.00"
    assert overdue["summary"]["pending_total"] == "200.00"

    resp = client.post(f"/api/admin/repasses/{freight.pk}/mark-paid/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"
    assert resp.json()["repasse_status"] == "paid"

    resp = client.post(f"/api/admin/repasses/{freight.pk}/mark-paid/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "already_paid"

    paid = client.get("/api/admin/repasses/", {"status": "paid", "carrier": carrier.pk}).json()
    assert paid["count"] == 1
    assert paid["summary"]["paid_total"] == "200.00"
    assert client.get("/api/admin/repasses/").json()["count"] == 0


def test_admin_repasse_errors(api_client, admin_user, customer_user, make_carrier, make_route):
    client = api_client(admin_user)
    assert client.get("/api/admin/repasses/", {"status": "late"}).status_code == 400
    assert client.get("/api/admin/repasses/", {"carrier": "abc"}).status_code == 400
    assert client.get("/api/admin/repasses/", {"carrier": "0"}).status_code == 400
    assert client.post("/api/admin/repasses/424242/mark-paid/").status_code == 404

    unpaid = record_checkout(customer_user, make_route(make_carrier()), "01000000", "20000000", "10",
                             payment_status=Freight.PAYMENT_PENDING)
    assert client.post(f"/api/admin/repasses/{unpaid.pk}/mark-paid/").status_code == 400
    assert api_client(customer_user).post(f"/api/admin/repasses/{unpaid.pk}/mark-paid/").status_code == 403


def test_carrier_sees_own_repasses(api_client, customer_user, make_carrier, make_route):
    mine = make_carrier()
    other = make_carrier()
    record_checkout(customer_user, make_route(mine), "01000000", "20000000", "100", paid_at=OLD_PAYMENT)
    record_checkout(customer_user, make_route(other), "01000000", "20000000", "100", paid_at=OLD_PAYMENT)

    body = api_client(mine.user).get("/api/carriers/me/repasses/").json()
    assert body["count"] == 1
    assert body["results"][0]["carrier"] == mine.pk
    assert body["summary"]["overdue_count"] == 1
