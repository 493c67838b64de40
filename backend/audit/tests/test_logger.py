from decimal import Decimal
from unittest.mock import patch

import pytest
from django.contrib.auth import get_user_model
from django.db import DatabaseError

from audit.logger import REDACTED, AuditLogger, client_ip
from audit.models import AuditLog

pytestmark = pytest.mark.django_db


def test_log_create_stores_json_safe_payload():
    user = get_user_model().objects.create_user(username="ana", password="x")
    assert AuditLogger.log_create("route", 7, {"price_per_kg": Decimal("2.4000")}, user=user)

    log = AuditLog.objects.get()
    assert log.action == AuditLog.ACTION_CREATE
    assert log.resource_id == "7"
    assert log.after_data == {"price_per_kg": "2.4000"}
    assert log.user == user


def test_log_update_records_changed_fields():
    AuditLogger.log_update(
        "carrier", 1,
        {"approval_status": "pending", "payment_term_days": None, "cnpj": "1"},
        {"approval_status": "approved", "payment_term_days": 21, "cnpj": "1"},
    )
    log = AuditLog.objects.get()
    assert log.metadata["changes"] == ["approval_status", "payment_term_days"]


def test_sensitive_keys_are_redacted():
    AuditLogger.log_create("user", 1, {"username": "ana", "password": "s3cret", "api_key_id": "k"})
    data = AuditLog.objects.get().after_data
    assert data["username"] == "ana"
    assert data["password"] == REDACTED
    assert data["api_key_id"] == REDACTED


def test_login_failure_is_logged_without_user():
    AuditLogger.log_login(False, "who@example.com", ip_address="10.0.0.1")
    log = AuditLog.objects.get()
    assert log.action == AuditLog.ACTION_LOGIN_FAILED
    assert log.user is None
    assert log.metadata == {"email": "who@example.com"}
    assert log.ip_address == "10.0.0.1"


def test_database_error_does_not_propagate():
    with patch.object(AuditLog.objects, "create", side_effect=DatabaseError("down")):
        assert AuditLogger.log_import("rate_table", 3, 1, "tabela.xlsx") is False


def test_client_ip_prefers_forwarded_header(rf):
    request = rf.get("/", HTTP_X_FORWARDED_FOR="203.0.113.9, 10.0.0.1", REMOTE_ADDR="127.0.0.1")
    assert client_ip(request) == "203.0.113.9"
    assert client_ip(rf.get("/", REMOTE_ADDR="127.0.0.1")) == "127.0.0.1"
