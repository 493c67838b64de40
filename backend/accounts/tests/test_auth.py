from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from accounts.permissions import IsCarrier, IsCustomer, IsPlatformAdmin
from audit.models import AuditLog
from carriers.models import Carrier

pytestmark = pytest.mark.django_db


def test_register_then_login_returns_token_and_role():
    client = APIClient()
    resp = client.post(
        "/api/auth/register/",
        {"username": "transp", "password": "pw", "role": "transportadora"},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.json()["role"] == "transportadora"

    resp = client.post("/api/auth/login/", {"username": "transp", "password": "pw"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["token"]
    assert AuditLog.objects.filter(action=AuditLog.ACTION_LOGIN).count() == 1


def test_register_cannot_self_assign_admin():
    resp = APIClient().post(
        "/api/auth/register/",
        {"username": "sneaky", "password": "pw", "role": "admin"},
        format="json",
    )
    assert resp.status_code == 400
    assert not get_user_model().objects.filter(username="sneaky").exists()


def test_failed_login_is_audited():
    get_user_model().objects.create_user(username="ana", password="right")
    resp = APIClient().post("/api/auth/login/", {"username": "ana", "password": "wrong"}, format="json")
    assert resp.status_code == 401
    log = AuditLog.objects.get(action=AuditLog.ACTION_LOGIN_FAILED)
    assert log.metadata == {"email": "ana"}


def test_role_helpers():
    User = get_user_model()
    assert User(role=User.ROLE_ADMIN).is_platform_admin
    assert not User(role=User.ROLE_CUSTOMER).is_platform_admin
    assert User(role=User.ROLE_CARRIER).is_carrier
    assert User(role=User.ROLE_CUSTOMER).is_customer
    assert not User(role=User.ROLE_ADMIN).is_customer


@pytest.mark.parametrize("permission,role", [
    (IsPlatformAdmin, "admin"),
    (IsCarrier, "transportadora"),
    (IsCustomer, "cliente"),
])
def test_permissions_follow_role(permission, role):
    User = get_user_model()
    for other in ("admin", "transportadora", "cliente"):
        request = SimpleNamespace(user=User(role=other))
        assert permission().has_permission(request, None) is (other == role)
    assert not permission().has_permission(SimpleNamespace(user=AnonymousUser()), None)


def test_me_reports_role_and_carrier_status(api_client, make_carrier):
    carrier = make_carrier(status=Carrier.STATUS_PENDING)
    body = api_client(carrier.user).get("/api/auth/me/").json()
    assert body["role"] == "transportadora"
    assert body["carrier_id"] == carrier.pk
    assert body["carrier_status"] == "pending"

    assert api_client().get("/api/auth/me/").status_code == 401


def test_logout_revokes_token():
    user = get_user_model().objects.create_user(username="bia", password="pw")
    token = Token.objects.create(user=user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
    assert client.post("/api/auth/logout/").status_code == 200
    assert not Token.objects.filter(user=user).exists()
    assert AuditLog.objects.filter(action=AuditLog.ACTION_LOGOUT).count() == 1
