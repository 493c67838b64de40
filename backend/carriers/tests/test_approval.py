from unittest.mock import patch

import pytest

from audit.models import AuditLog
from carriers.models import Carrier
from carriers.services.approval import (
    AlreadyApprovedError,
    CarrierApprovalError,
    RegistrationError,
    approve_carrier,
    register_carrier,
    reject_carrier,
)
from carriers.terms import InvalidPaymentTermError, validate_payment_term
from carriers.services.tax_id import CompanyInfo

pytestmark = pytest.mark.django_db

COMPANY = CompanyInfo(
    cnpj="11222333000181",
    razao_social="TRANSPORTES ABC LTDA",
    nome_fantasia="ABC Cargas",
    cnae_principal="Transporte rodoviário de carga",
    cnae_code="4930202",
)


def test_register_creates_pending_carrier(make_user):
    user = make_user("abc", role="transportadora")
    with patch("carriers.services.approval.lookup_company", return_value=COMPANY):
        carrier = register_carrier(user, "11.222.333/0001-81", rntrc="123456")
    assert carrier.approval_status == Carrier.STATUS_PENDING
    assert carrier.razao_social == "TRANSPORTES ABC LTDA"
    assert carrier.payment_term_days is None


def test_register_requires_carrier_role(make_user):
    user = make_user("cli")
    with pytest.raises(RegistrationError):
        register_carrier(user, COMPANY.cnpj)


def test_duplicate_cnpj_rejected(make_user, make_carrier):
    existing = make_carrier()
    Carrier.objects.filter(pk=existing.pk).update(cnpj=COMPANY.cnpj)
    user = make_user("dup", role="transportadora")
    with patch("carriers.services.approval.lookup_company", return_value=COMPANY):
        with pytest.raises(RegistrationError):
            register_carrier(user, COMPANY.cnpj)


@pytest.mark.parametrize("term", [7, 21, 28])
def test_approve_with_allowed_terms(term, make_carrier, admin_user):
    carrier = make_carrier(status=Carrier.STATUS_PENDING)
    carrier = approve_carrier(carrier, term, admin_user)
    assert carrier.approval_status == Carrier.STATUS_APPROVED
    assert carrier.payment_term_days == term
    assert carrier.approved_by == admin_user
    assert AuditLog.objects.filter(action=AuditLog.ACTION_APPROVE, resource_id=str(carrier.pk)).exists()


@pytest.mark.parametrize("term", [0, 14, 30, "x", None])
def test_approve_rejects_other_terms(term, make_carrier, admin_user):
    carrier = make_carrier(status=Carrier.STATUS_PENDING)
    with pytest.raises(InvalidPaymentTermError):
        approve_carrier(carrier, term, admin_user)
    carrier.refresh_from_db()
    assert carrier.approval_status == Carrier.STATUS_PENDING


def test_reapproval_needs_flag(make_carrier, admin_user):
    carrier = make_carrier(payment_term_days=7)
    with pytest.raises(AlreadyApprovedError):
        approve_carrier(carrier, 21, admin_user)
    carrier = approve_carrier(carrier, 21, admin_user, reapprove=True)
    assert carrier.payment_term_days == 21


def test_reject_requires_reason(make_carrier, admin_user):
    carrier = make_carrier(status=Carrier.STATUS_PENDING)
    with pytest.raises(CarrierApprovalError):
        reject_carrier(carrier, "  ", admin_user)
    carrier = reject_carrier(carrier, "RNTRC vencido", admin_user)
    assert carrier.approval_status == Carrier.STATUS_REJECTED
    assert carrier.rejection_reason == "RNTRC vencido"


@pytest.mark.parametrize("raw,expected", [(7, 7), ("21", 21), (28, 28)])
def test_payment_term_accepts_allowed_days(raw, expected):
    assert validate_payment_term(raw) == expected
