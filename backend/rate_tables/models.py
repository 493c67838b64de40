from django.db import models

from carriers.models import Carrier


class FreightRoute(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Ativa'),
        (STATUS_INACTIVE, 'Inativa'),
    ]

    carrier = models.ForeignKey(Carrier, on_delete=models.CASCADE, related_name='routes')
    # CEPs as 8 digits; *_end set only for range routes
    origin_zip = models.CharField(max_length=8)
    origin_zip_end = models.CharField(max_length=8, blank=True, null=True)
    dest_zip = models.CharField(max_length=8)
    dest_zip_end = models.CharField(max_length=8, blank=True, null=True)

    cost_price_per_kg = models.DecimalField(max_digits=12, decimal_places=4)
    cost_min_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    margin_percent = models.DecimalField(max_digits=6, decimal_places=2)
    price_per_kg = models.DecimalField(max_digits=12, decimal_places=4)
    min_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    deadline_days = models.PositiveIntegerField(null=True, blank=True)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    rate_card = models.JSONField(blank=True, null=True)
    source_file = models.CharField(max_length=255, blank=True, default='')
    imported_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['origin_zip', 'dest_zip', 'id']
        constraints = [
            models.UniqueConstraint(fields=['carrier', 'origin_zip', 'dest_zip'], name='uniq_route_carrier_zips'),
        ]
        indexes = [
            models.Index(fields=['origin_zip', 'dest_zip'], name='route_zip_pair_idx'),
        ]

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def __str__(self):
        return f"{self.carrier_id}: {self.origin_zip} -> {self.dest_zip}"
