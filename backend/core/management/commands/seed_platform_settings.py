from django.core.management.base import BaseCommand

from core.models import PlatformSetting
from core.services import DEFAULTS, DESCRIPTIONS


class Command(BaseCommand):
    help = "Idempotently create a PlatformSetting row for every known key, keeping existing values."

    def handle(self, *args, **opts):
        created = 0
        for key, value in DEFAULTS.items():
            _, was_created = PlatformSetting.objects.get_or_create(
                key=key,
                defaults={"value": value, "description": DESCRIPTIONS.get(key, "")},
            )
            if was_created:
                created += 1
                self.stdout.write(self.style.SUCCESS(f"Created '{key}' = {value!r}"))
            else:
                self.stdout.write(f"Setting '{key}' already exists")
        self.stdout.write(self.style.SUCCESS(f"{created} settings created"))
