from decimal import Decimal
from io import BytesIO

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from openpyxl import load_workbook

from core.services import update_setting
from rate_tables.models import FreightRoute
from rate_tables.services.template import TEMPLATE_HEADERS, build_template

pytestmark = pytest.mark.django_db

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _upload(content=None, name="tabela.xlsx"):
    return SimpleUploadedFile(name, content or build_template(), content_type=XLSX)


def test_template_download(api_client, customer_user):
    resp = api_client(customer_user).get("/api/rate-tables/template/")
    assert resp.status_code == 200
    assert resp["Content-Type"] == XLSX
    sheet = load_workbook(BytesIO(resp.content)).active
    assert [c.value for c in sheet[1]] == [title for title, _ in TEMPLATE_HEADERS]


def test_admin_import_with_chosen_margin(api_client, admin_user, make_carrier):
    carrier = make_carrier()
    resp = api_client(admin_user).post(
        "/api/admin/rate-tables/import/",
        {"file": _upload(), "carrier_id": carrier.pk, "margin_percent": "10"},
        format="multipart",
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["imported_count"] == 1
    assert body["invalid_count"] == 0
    route = FreightRoute.objects.get(carrier=carrier)
    assert route.margin_percent == Decimal("10.00")
    assert route.price_per_kg == Decimal("1.3750")


def test_admin_import_rejects_bad_margin(api_client, admin_user, make_carrier):
    carrier = make_carrier()
    resp = api_client(admin_user).post(
        "/api/admin/rate-tables/import/",
        {"file": _upload(), "carrier_id": carrier.pk, "margin_percent": "250"},
        format="multipart",
    )
    assert resp.status_code == 400
    assert FreightRoute.objects.count() == 0


def test_admin_import_unknown_carrier(api_client, admin_user):
    resp = api_client(admin_user).post(
        "/api/admin/rate-tables/import/", {"file": _upload(), "carrier_id": 999}, format="multipart",
    )
    assert resp.status_code == 404


def test_carrier_import_uses_platform_margin(api_client, make_carrier):
    carrier = make_carrier()
    update_setting("default_margin_percent", "30")
    resp = api_client(carrier.user).post("/api/rate-tables/import/", {"file": _upload()}, format="multipart")
    assert resp.status_code == 200
    assert FreightRoute.objects.get(carrier=carrier).margin_percent == Decimal("30.00")


def test_customer_cannot_import(api_client, customer_user):
    resp = api_client(customer_user).post("/api/rate-tables/import/", {"file": _upload()}, format="multipart")
    assert resp.status_code == 403


def test_admin_route_crud(api_client, admin_user, make_carrier):
    carrier = make_carrier()
    client = api_client(admin_user)
    resp = client.post("/api/admin/routes/", {
        "carrier_id": carrier.pk, "origin_zip": "01000-000", "dest_zip": "20000-000",
        "cost_price_per_kg": "2.00", "cost_min_price": "50", "margin_percent": "20", "deadline_days": 2,
    }, format="json")
    assert resp.status_code == 201
    route_id = resp.json()["id"]
    assert resp.json()["price_per_kg"] == "2.4000"

    resp = client.patch(f"/api/admin/routes/{route_id}/", {"margin_percent": "0"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["price_per_kg"] == "2.0000"

    resp = client.post(f"/api/admin/routes/{route_id}/status/", {"status": "inactive"}, format="json")
    assert resp.json()["status"] == "inactive"

    resp = client.get("/api/admin/routes/", {"status": "inactive"})
    assert resp.json()["count"] == 1

    assert client.delete(f"/api/admin/routes/{route_id}/").status_code == 204


def test_admin_route_list_carrier_filter(api_client, admin_user, make_carrier, make_route):
    mine, other = make_carrier(), make_carrier()
    make_route(mine)
    make_route(other)
    client = api_client(admin_user)

    body = client.get("/api/admin/routes/", {"carrier": mine.pk}).json()
    assert body["count"] == 1
    assert body["results"][0]["carrier"] == mine.pk

    for bad in ("abc", "1.5", "-3", "99999999999999999999999"):
        resp = client.get("/api/admin/routes/", {"carrier": bad})
        assert resp.status_code == 400
        assert "carrier" in resp.json()
