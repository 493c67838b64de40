from django.core.management.base import BaseCommand
from django.utils import timezone

from quotes.models import Freight
from quotes.services.repasse import is_overdue, repasse_summary


class Command(BaseCommand):
    help = "List pending carrier payouts and flag the overdue ones."

    def add_arguments(self, parser):
        parser.add_argument("--carrier", type=int, default=None, help="Only this carrier id")
        parser.add_argument("--overdue-only", action="store_true")

    def handle(self, *args, **opts):
        today = timezone.localdate()
        qs = Freight.objects.filter(payment_status=Freight.PAYMENT_PAID).select_related("carrier")
        if opts["carrier"]:
            qs = qs.filter(carrier_id=opts["carrier"])

        pending = qs.filter(repasse_status=Freight.REPASSE_PENDING).order_by("repasse_due_date", "id")
        for freight in pending:
            overdue = is_overdue(freight, today)
            if opts["overdue_only"] and not overdue:
                continue
            line = (f"#{freight.pk} {freight.carrier.display_name}: R$ {freight.carrier_amount} "
                    f"due {freight.repasse_due_date} (D+{freight.payment_term_days})")
            self.stdout.write(self.style.ERROR(line + " OVERDUE") if overdue else line)

        summary = repasse_summary(qs, today)
        self.stdout.write(self.style.SUCCESS(
            f"Pending: {summary['pending_count']} (R$ {summary['pending_total']}), "
            f"overdue: {summary['overdue_count']} (R$ {summary['overdue_total']}), "
            f"paid: {summary['paid_count']} (R$ {summary['paid_total']}), "
            f"platform revenue R$ {summary['rotaclick_revenue']}"
        ))
