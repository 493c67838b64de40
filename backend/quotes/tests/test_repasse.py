from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.test import SimpleTestCase

from audit.models import AuditLog
from carriers.models import Carrier
from carriers.terms import InvalidPaymentTermError
from quotes.models import Freight
from quotes.services import repasse
from quotes.services.errors import (
    CheckoutError,
    FreightNotFound,
    InvalidRepasseStateError,
    RepasseError,
)
from quotes.services.repasse import (
    calculate_repasse,
    is_overdue,
    mark_repasse_paid,
    record_checkout,
    repasse_summary,
    split_by_margin,
)

PAID_AT = datetime(2024, 1, 1, 15, 0, tzinfo=dt_timezone.utc)


class CalculateRepasseTests(SimpleTestCase):

    def test_reference_scenario(self):
        b = calculate_repasse(Decimal("100.00"), Decimal("10.00"), PAID_AT, 7)
        self.assertEqual(b.carrier_amount, Decimal("90.00"))
        self.assertEqual(b.rotaclick_amount, Decimal("10.00"))
        self.assertEqual(b.due_date, date(2024, 1, 8))

    def test_longer_terms(self):
        self.assertEqual(calculate_repasse("100", "10", PAID_AT, 21).due_date, date(2024, 1, 22))
        self.assertEqual(calculate_repasse("100", "10", PAID_AT, 28).due_date, date(2024, 1, 29))

    def test_plain_date_is_accepted(self):
        self.assertEqual(calculate_repasse("50", "5", date(2024, 2, 26), 7).due_date, date(2024, 3, 4))

    def test_term_outside_allowed_set(self):
        for term in (0, 14, 30, "abc", None):
            with self.assertRaises(InvalidPaymentTermError):
                calculate_repasse("100", "10", PAID_AT, term)

    def test_margin_larger_than_price(self):
        with self.assertRaises(RepasseError):
            calculate_repasse("100", "100.01", PAID_AT, 7)
        with self.assertRaises(RepasseError):
            calculate_repasse("100", "-1", PAID_AT, 7)

    def test_parts_always_add_up(self):
        for price, margin in (("100.00", "15"), ("99.99", "33.33"), ("0.01", "200"), ("1234.56", "0")):
            carrier, rotaclick = split_by_margin(price, margin)
            self.assertEqual(carrier + rotaclick, Decimal(price))
            b = calculate_repasse(price, rotaclick, PAID_AT, 7)
            self.assertEqual(b.carrier_amount + b.rotaclick_amount, b.price)

    def test_split_by_margin(self):
        self.assertEqual(split_by_margin(Decimal("120.00"), 20), (Decimal("100.00"), Decimal("20.00")))
        self.assertEqual(split_by_margin("100", "15"), (Decimal("86.96"), Decimal("13.04")))


@pytest.mark.django_db
class TestRecordCheckout:

    def test_paid_checkout_schedules_repasse(self, make_carrier, make_route, customer_user):
        carrier = make_carrier(payment_term_days=21)
        route = make_route(carrier)
        freight = record_checkout(customer_user, route, "01000000", "20000000", Decimal("100"),
                                  checkout_session_id="cs_1", paid_at=PAID_AT)
        assert freight.price == Decimal("240.00")
        assert freight.cost_total == Decimal("200.00")
        assert freight.carrier_amount == Decimal("200.00")
        assert freight.rotaclick_amount == Decimal("40.00")
        assert freight.carrier_amount + freight.rotaclick_amount == freight.price
        assert freight.payment_term_days == 21
        assert freight.repasse_due_date == date(2024, 1, 22)
        assert freight.repasse_status == Freight.REPASSE_PENDING
        assert AuditLog.objects.filter(action=AuditLog.ACTION_PAYMENT, resource_type="freight").count() == 1

    def test_minimum_price_applies(self, make_carrier, make_route, customer_user):
        freight = record_checkout(customer_user, make_route(make_carrier()), "01000000", "20000000", "10",
                                  paid_at=PAID_AT)
        assert freight.price == Decimal("60.00")
        assert freight.carrier_amount == Decimal("50.00")
        assert freight.rotaclick_amount == Decimal("10.00")

    def test_same_session_is_recorded_once(self, make_carrier, make_route, customer_user):
        route = make_route(make_carrier())
        first = record_checkout(customer_user, route, "01000000", "20000000", "100",
                                checkout_session_id="cs_dup", payment_status=Freight.PAYMENT_PENDING)
        assert first.paid_at is None
        assert first.carrier_amount is None

        second = record_checkout(customer_user, route, "01000000", "20000000", "100",
                                 checkout_session_id="cs_dup", paid_at=PAID_AT)
        third = record_checkout(customer_user, route, "01000000", "20000000", "999",
                                checkout_session_id="cs_dup")
        assert first.pk == second.pk == third.pk
        assert Freight.objects.count() == 1
        assert third.paid_at == PAID_AT
        assert third.price == Decimal("240.00")

    @pytest.mark.parametrize("first_status", [Freight.PAYMENT_PAID, Freight.PAYMENT_PENDING])
    def test_session_inserted_between_read_and_save(self, first_status, make_carrier, make_route, customer_user):
        route = make_route(make_carrier())
        first = record_checkout(customer_user, route, "01000000", "20000000", "100",
                                checkout_session_id="cs_race", payment_status=first_status)
        lookup = repasse._recorded_checkout
        calls = []

        def stale_first_read(session_id):
            calls.append(session_id)
            return None if len(calls) == 1 else lookup(session_id)

        with patch("quotes.services.repasse._recorded_checkout", side_effect=stale_first_read):
            second = record_checkout(customer_user, route, "01000000", "20000000", "100",
                                     checkout_session_id="cs_race", paid_at=PAID_AT)

        assert len(calls) == 2
        assert second.pk == first.pk
        assert Freight.objects.count() == 1
        assert Freight.objects.get().is_paid

    def test_default_term_when_carrier_has_none(self, make_carrier, make_route, customer_user):
        carrier = make_carrier(payment_term_days=None)
        freight = record_checkout(customer_user, make_route(carrier), "01000000", "20000000", "100",
                                  paid_at=PAID_AT)
        assert freight.payment_term_days == 7
        assert freight.repasse_due_date == date(2024, 1, 8)

    def test_reapproval_does_not_move_past_freights(self, make_carrier, make_route, customer_user):
        carrier = make_carrier(payment_term_days=7)
        freight = record_checkout(customer_user, make_route(carrier), "01000000", "20000000", "100",
                                  paid_at=PAID_AT)
        carrier.payment_term_days = 28
        carrier.save()
        freight.refresh_from_db()
        assert freight.payment_term_days == 7
        assert freight.repasse_due_date == date(2024, 1, 8)

    def test_rejects_unapproved_carrier_and_zero_weight(self, make_carrier, make_route, customer_user):
        pending = make_route(make_carrier(status=Carrier.STATUS_PENDING))
        with pytest.raises(CheckoutError):
            record_checkout(customer_user, pending, "01000000", "20000000", "100")
        with pytest.raises(CheckoutError):
            record_checkout(customer_user, make_route(make_carrier()), "01000000", "20000000", "0")


@pytest.mark.django_db
class TestMarkRepassePaid:

    def _paid_freight(self, make_carrier, make_route, customer_user):
        return record_checkout(customer_user, make_route(make_carrier()), "01000000", "20000000", "100",
                               paid_at=PAID_AT)

    def test_second_call_changes_nothing(self, make_carrier, make_route, customer_user, admin_user):
        freight = self._paid_freight(make_carrier, make_route, customer_user)

        assert mark_repasse_paid(freight.pk, admin_user) == "paid"
        freight.refresh_from_db()
        paid_at = freight.repasse_paid_at
        assert freight.repasse_status == Freight.REPASSE_PAID
        assert freight.repasse_paid_by == admin_user
        assert paid_at is not None

        assert mark_repasse_paid(freight.pk, admin_user) == "already_paid"
        freight.refresh_from_db()
        assert freight.repasse_paid_at == paid_at
        assert freight.carrier_amount == Decimal("200.00")
        assert AuditLog.objects.filter(resource_type="repasse").count() == 1

    def test_requires_paid_freight(self, make_carrier, make_route, customer_user, admin_user):
        freight = record_checkout(customer_user, make_route(make_carrier()), "01000000", "20000000", "100",
                                  payment_status=Freight.PAYMENT_PENDING)
        with pytest.raises(InvalidRepasseStateError):
            mark_repasse_paid(freight.pk, admin_user)
        with pytest.raises(FreightNotFound):
            mark_repasse_paid(987654, admin_user)

    def test_overdue_is_derived(self, make_carrier, make_route, customer_user, admin_user):
        freight = self._paid_freight(make_carrier, make_route, customer_user)
        assert not is_overdue(freight, date(2024, 1, 8))
        assert is_overdue(freight, date(2024, 1, 9))

        mark_repasse_paid(freight.pk, admin_user)
        freight.refresh_from_db()
        assert not is_overdue(freight, date(2024, 1, 9))

    def test_summary(self, make_carrier, make_route, customer_user, admin_user):
        carrier = make_carrier()
        route = make_route(carrier)
        a = record_checkout(customer_user, route, "01000000", "20000000", "100", paid_at=PAID_AT)
        record_checkout(customer_user, route, "01000000", "20000000", "10", paid_at=PAID_AT)
        record_checkout(customer_user, route, "01000000", "20000000", "10",
                        payment_status=Freight.PAYMENT_PENDING)
        mark_repasse_paid(a.pk, admin_user)

        summary = repasse_summary(Freight.objects.all(), today=date(2024, 1, 10))
        assert summary["paid_count"] == 1
        assert summary["paid_total"] == Decimal("200.00")
        assert summary["pending_count"] == 1
        assert summary["pending_total"] == Decimal("50.00")
        assert summary["overdue_count"] == 1
        assert summary["rotaclick_revenue"] == Decimal("50.00")
        assert summary["gross_total"] == Decimal("300.00")
