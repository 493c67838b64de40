from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError

from carriers.models import Carrier
from core.services import get_decimal
from pricing.services.errors import PricingError
from rate_tables.services.errors import RateTableError
from rate_tables.services.importer import import_workbook


class Command(BaseCommand):
    help = "Import a carrier's .xlsx rate table, applying one margin to every row."

    def add_arguments(self, parser):
        parser.add_argument("path", help="Path to the .xlsx file")
        parser.add_argument("--carrier", required=True, help="Carrier id or CNPJ")
        parser.add_argument("--margin", type=Decimal, default=None,
                            help="Margin percent (0-200). Defaults to the platform setting.")

    def handle(self, *args, **opts):
        ref = str(opts["carrier"])
        digits = "".join(ch for ch in ref if ch.isdigit())
        carrier = Carrier.objects.filter(cnpj=digits).first() if len(digits) == 14 else None
        if carrier is None and ref.isdigit():
            carrier = Carrier.objects.filter(pk=int(ref)).first()
        if carrier is None:
            raise CommandError(f"Carrier '{ref}' not found")

        margin = opts["margin"] if opts["margin"] is not None else get_decimal("default_margin_percent")
        try:
            with open(opts["path"], "rb") as fh:
                result = import_workbook(fh, carrier, margin, source_file=opts["path"])
        except FileNotFoundError:
            raise CommandError(f"File not found: {opts['path']}")
        except (RateTableError, PricingError) as e:
            raise CommandError(str(e))

        for error in result.failed:
            self.stdout.write(self.style.WARNING(error.message))
        self.stdout.write(self.style.SUCCESS(
            f"Imported {result.imported_count} routes for {carrier} "
            f"({result.invalid_count} rows rejected, margin {result.margin_percent}%)"
        ))
