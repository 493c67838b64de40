"""
Carrier payouts ("repasses").

Once a freight is paid the price is split into what the carrier is owed and
what the platform keeps, and the payout is scheduled ``payment_term_days``
after the payment date. The carrier's term is the one fixed at approval and
is copied onto the freight, so later re-approvals never move past due dates.

Marking a repasse paid is a one-way ``pending -> paid`` transition done with a
conditional UPDATE: a repeated or concurrent call changes nothing and reports
``already_paid``.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone

from audit.logger import AuditLogger
from audit.models import AuditLog
from carriers.terms import validate_payment_term
from core.services import get_int
from pricing.dataclasses import RepasseBreakdown
from pricing.services.margin import validate_margin
from pricing.services.rate_card import route_cost_total, route_quote_price
from pricing.services.utils import ZERO, d, margin_factor, q2, q3
from quotes.models import Freight
from .errors import CheckoutError, FreightNotFound, InvalidRepasseStateError, RepasseError

logger = logging.getLogger(__name__)

STATUS_PAID = 'paid'
STATUS_ALREADY_PAID = 'already_paid'


def split_by_margin(price, margin_percent) -> Tuple[Decimal, Decimal]:
    """``(carrier_amount, rotaclick_amount)`` for a price that already includes the margin."""
    price = q2(d(price))
    carrier_amount = q2(price / margin_factor(validate_margin(margin_percent)))
    return carrier_amount, price - carrier_amount


def _payment_date(paid_at) -> date:
    if isinstance(paid_at, datetime):
        if timezone.is_aware(paid_at):
            return timezone.localtime(paid_at).date()
        return paid_at.date()
    return paid_at


def calculate_repasse(price, rotaclick_amount, paid_at, payment_term_days) -> RepasseBreakdown:
    term = validate_payment_term(payment_term_days)
    price = q2(d(price))
    rotaclick = q2(d(rotaclick_amount))
    if price < ZERO:
        raise RepasseError('Preço do frete não pode ser negativo')
    if rotaclick < ZERO or rotaclick > price:
        raise RepasseError(f"Margem da plataforma ({rotaclick}) fora do intervalo do preço ({price})")
    if paid_at is None:
        raise RepasseError('Frete sem data de pagamento')
    return RepasseBreakdown(
        price=price,
        carrier_amount=price - rotaclick,
        rotaclick_amount=rotaclick,
        payment_term_days=term,
        paid_at=paid_at,
        due_date=_payment_date(paid_at) + timedelta(days=term),
    )


def _carrier_term(carrier) -> int:
    return carrier.payment_term_days or get_int('default_payment_term_days')


def _stamp_payment(freight: Freight, paid_at) -> None:
    breakdown = calculate_repasse(freight.price, freight.price - freight.cost_total, paid_at,
                                  _carrier_term(freight.carrier))
    freight.payment_status = Freight.PAYMENT_PAID
    freight.paid_at = paid_at
    freight.carrier_amount = breakdown.carrier_amount
    freight.rotaclick_amount = breakdown.rotaclick_amount
    freight.payment_term_days = breakdown.payment_term_days
    freight.repasse_due_date = breakdown.due_date
    freight.repasse_status = Freight.REPASSE_PENDING


def _recorded_checkout(checkout_session_id: str) -> Optional[Freight]:
    return (Freight.objects.select_for_update()
            .select_related('carrier')
            .filter(checkout_session_id=checkout_session_id)
            .first())


def _apply_payment_status(freight: Freight, payment_status: str, paid_at) -> None:
    freight.payment_status = payment_status
    if payment_status == Freight.PAYMENT_PAID:
        _stamp_payment(freight, paid_at or timezone.now())


def record_checkout(customer, route, origin_zip: str, dest_zip: str, taxable_weight, invoice_value=ZERO,
                    checkout_session_id: Optional[str] = None, payment_status: str = Freight.PAYMENT_PAID,
                    paid_at=None, ip_address: Optional[str] = None) -> Freight:
    """
    Creates the freight for a completed checkout, or updates the one already
    recorded for ``checkout_session_id``.

    Price and carrier cost are recomputed from the route; client-supplied
    amounts are never trusted. A freight that is already paid is returned
    untouched.
    """
    if payment_status not in dict(Freight.PAYMENT_STATUS_CHOICES):
        raise CheckoutError(f"Status de pagamento inválido: {payment_status}")
    taxable = q3(d(taxable_weight))
    if taxable <= ZERO:
        raise CheckoutError('Peso taxável deve ser maior que zero')
    invoice = q2(d(invoice_value or ZERO))

    with transaction.atomic():
        freight = None
        if checkout_session_id:
            freight = _recorded_checkout(checkout_session_id)
        if freight is not None and freight.is_paid:
            logger.info("Checkout %s already recorded as paid (freight %s)", checkout_session_id, freight.pk)
            return freight

        if freight is None:
            if not route.carrier.is_approved:
                raise CheckoutError('Transportadora não está aprovada')
            price = route_quote_price(route, taxable, invoice)
            freight = Freight(
                customer=customer,
                route=route,
                carrier=route.carrier,
                origin_zip=origin_zip,
                dest_zip=dest_zip,
                taxable_weight=taxable,
                invoice_value=invoice,
                price=price,
                cost_total=route_cost_total(route, taxable, invoice),
                margin_percent=route.margin_percent,
                checkout_session_id=checkout_session_id or None,
            )

        _apply_payment_status(freight, payment_status, paid_at)
        if freight.pk is not None or not checkout_session_id:
            freight.save()
        else:
            try:
                with transaction.atomic():
                    freight.save()
            except IntegrityError:
                # Another delivery of the same session got in between the read and the insert.
                recorded = _recorded_checkout(checkout_session_id)
                if recorded is None:
                    raise
                logger.info("Checkout %s recorded concurrently (freight %s)", checkout_session_id, recorded.pk)
                if recorded.is_paid:
                    return recorded
                _apply_payment_status(recorded, payment_status, paid_at)
                recorded.save()
                freight = recorded

    if freight.is_paid:
        AuditLogger.log(
            AuditLog.ACTION_PAYMENT,
            'freight',
            f"Pagamento confirmado: frete #{freight.pk}",
            user=customer,
            resource_id=freight.pk,
            metadata={
                'price': freight.price,
                'carrier_amount': freight.carrier_amount,
                'rotaclick_amount': freight.rotaclick_amount,
                'payment_term_days': freight.payment_term_days,
                'repasse_due_date': freight.repasse_due_date,
                'checkout_session_id': freight.checkout_session_id,
            },
            ip_address=ip_address,
        )
        logger.info("Freight %s paid: price=%s carrier=%s due=%s", freight.pk, freight.price,
                    freight.carrier_amount, freight.repasse_due_date)
    return freight


def mark_repasse_paid(freight_id, user, ip_address: Optional[str] = None) -> str:
    """
    Flags the carrier payout of ``freight_id`` as done.

    Returns ``'paid'`` when this call performed the transition and
    ``'already_paid'`` when it had already happened.
    """
    freight = Freight.objects.filter(pk=freight_id).only('id', 'payment_status', 'repasse_status').first()
    if freight is None:
        raise FreightNotFound(f"Frete {freight_id} não encontrado")
    if freight.payment_status != Freight.PAYMENT_PAID:
        raise InvalidRepasseStateError('Frete ainda não foi pago pelo cliente')

    now = timezone.now()
    updated = (Freight.objects
               .filter(pk=freight_id, payment_status=Freight.PAYMENT_PAID, repasse_status=Freight.REPASSE_PENDING)
               .update(repasse_status=Freight.REPASSE_PAID, repasse_paid_at=now, repasse_paid_by=user, updated_at=now))
    if not updated:
        logger.info("Repasse for freight %s was already paid", freight_id)
        return STATUS_ALREADY_PAID

    AuditLogger.log(
        AuditLog.ACTION_PAYMENT,
        'repasse',
        f"Repasse do frete #{freight_id} marcado como pago",
        user=user,
        resource_id=freight_id,
        before_data={'repasse_status': Freight.REPASSE_PENDING},
        after_data={'repasse_status': Freight.REPASSE_PAID, 'repasse_paid_at': now},
        ip_address=ip_address,
    )
    logger.info("Repasse for freight %s marked paid by %s", freight_id, getattr(user, 'username', None))
    return STATUS_PAID


def is_overdue(freight: Freight, today: Optional[date] = None) -> bool:
    if freight.repasse_status != Freight.REPASSE_PENDING or freight.repasse_due_date is None:
        return False
    today = today or timezone.localdate()
    return today > freight.repasse_due_date


def repasse_summary(freights: Iterable[Freight], today: Optional[date] = None) -> Dict[str, Any]:
    today = today or timezone.localdate()
    summary = {
        'pending_count': 0,
        'pending_total': ZERO,
        'overdue_count': 0,
        'overdue_total': ZERO,
        'paid_count': 0,
        'paid_total': ZERO,
        'rotaclick_revenue': ZERO,
        'gross_total': ZERO,
    }
    for freight in freights:
        if not freight.is_paid:
            continue
        carrier_amount = freight.carrier_amount or ZERO
        summary['gross_total'] += freight.price
        summary['rotaclick_revenue'] += freight.rotaclick_amount or ZERO
        if freight.repasse_status == Freight.REPASSE_PAID:
            summary['paid_count'] += 1
            summary['paid_total'] += carrier_amount
        else:
            summary['pending_count'] += 1
            summary['pending_total'] += carrier_amount
            if is_overdue(freight, today):
                summary['overdue_count'] += 1
                summary['overdue_total'] += carrier_amount
    return summary
