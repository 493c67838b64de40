from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from audit.logger import AuditLogger
from audit.models import AuditLog
from carriers.models import Carrier
from carriers.terms import validate_payment_term
from .tax_id import lookup_company

logger = logging.getLogger(__name__)


class CarrierApprovalError(Exception):
    pass


class AlreadyApprovedError(CarrierApprovalError):
    pass


class RegistrationError(CarrierApprovalError):
    pass


def _snapshot(carrier: Carrier) -> dict:
    return {
        'approval_status': carrier.approval_status,
        'payment_term_days': carrier.payment_term_days,
        'rejection_reason': carrier.rejection_reason,
    }


def register_carrier(user, cnpj, rntrc: str = '', ip_address: Optional[str] = None) -> Carrier:
    """Validates the CNPJ and creates a pending carrier profile for ``user``."""
    if not user.is_carrier:
        raise RegistrationError('Apenas contas de transportadora podem cadastrar empresa.')
    if Carrier.objects.filter(user=user).exists():
        raise RegistrationError('Usuário já possui transportadora cadastrada.')

    company = lookup_company(cnpj)
    if Carrier.objects.filter(cnpj=company.cnpj).exists():
        raise RegistrationError('CNPJ já cadastrado.')

    carrier = Carrier.objects.create(
        user=user,
        cnpj=company.cnpj,
        razao_social=company.razao_social,
        nome_fantasia=company.nome_fantasia,
        rntrc=rntrc or '',
    )
    AuditLogger.log_create('carrier', carrier.pk, {'cnpj': carrier.cnpj, 'razao_social': carrier.razao_social},
                           description='Transportadora cadastrada', user=user, ip_address=ip_address)
    logger.info("Carrier %s registered (pending approval)", carrier.cnpj)
    return carrier


def approve_carrier(carrier: Carrier, payment_term_days, user, reapprove: bool = False,
                    ip_address: Optional[str] = None) -> Carrier:
    """
    Approves ``carrier`` with the repasse term it will be paid on.

    Changing the term of an already approved carrier needs ``reapprove``;
    freights paid before keep the term they were stamped with.
    """
    term = validate_payment_term(payment_term_days)
    with transaction.atomic():
        carrier = Carrier.objects.select_for_update().get(pk=carrier.pk)
        if carrier.is_approved and not reapprove:
            raise AlreadyApprovedError('Transportadora já aprovada.')
        before = _snapshot(carrier)
        carrier.approval_status = Carrier.STATUS_APPROVED
        carrier.payment_term_days = term
        carrier.rejection_reason = None
        carrier.approved_at = timezone.now()
        carrier.approved_by = user
        carrier.save(update_fields=['approval_status', 'payment_term_days', 'rejection_reason',
                                    'approved_at', 'approved_by', 'updated_at'])

    AuditLogger.log(
        AuditLog.ACTION_APPROVE, 'carrier',
        f"Transportadora aprovada com repasse D+{term}",
        user=user, resource_id=carrier.pk,
        before_data=before, after_data=_snapshot(carrier),
        ip_address=ip_address,
    )
    logger.info("Carrier %s approved with term %s days", carrier.cnpj, term)
    return carrier


def reject_carrier(carrier: Carrier, reason: str, user, ip_address: Optional[str] = None) -> Carrier:
    reason = (reason or '').strip()
    if not reason:
        raise CarrierApprovalError('Motivo da rejeição é obrigatório.')
    with transaction.atomic():
        carrier = Carrier.objects.select_for_update().get(pk=carrier.pk)
        before = _snapshot(carrier)
        carrier.approval_status = Carrier.STATUS_REJECTED
        carrier.rejection_reason = reason
        carrier.save(update_fields=['approval_status', 'rejection_reason', 'updated_at'])

    AuditLogger.log(
        AuditLog.ACTION_REJECT, 'carrier', f"Transportadora rejeitada: {reason}",
        user=user, resource_id=carrier.pk,
        before_data=before, after_data=_snapshot(carrier),
        ip_address=ip_address,
    )
    logger.info("Carrier %s rejected", carrier.cnpj)
    return carrier
