from django.conf import settings
from django.db import models

from carriers.models import Carrier
from rate_tables.models import FreightRoute


class QuoteRequest(models.Model):
    """One row per quote calculation, kept for conversion reporting."""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    origin_zip = models.CharField(max_length=8)
    dest_zip = models.CharField(max_length=8)
    taxable_weight = models.DecimalField(max_digits=12, decimal_places=3)
    invoice_value = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    offers_count = models.PositiveIntegerField(default=0)
    best_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    used_fallback = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['origin_zip', 'dest_zip'], name='quote_req_zip_idx'),
        ]

    def __str__(self):
        return f"{self.origin_zip} -> {self.dest_zip} ({self.taxable_weight} kg)"


class Freight(models.Model):
    PAYMENT_PENDING = 'pending'
    PAYMENT_PAID = 'paid'
    PAYMENT_FAILED = 'failed'
    PAYMENT_CANCELED = 'canceled'
    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, 'Aguardando pagamento'),
        (PAYMENT_PAID, 'Pago'),
        (PAYMENT_FAILED, 'Falhou'),
        (PAYMENT_CANCELED, 'Cancelado'),
    ]

    REPASSE_PENDING = 'pending'
    REPASSE_PAID = 'paid'
    REPASSE_STATUS_CHOICES = [
        (REPASSE_PENDING, 'Pendente'),
        (REPASSE_PAID, 'Pago'),
    ]

    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='freights')
    route = models.ForeignKey(FreightRoute, null=True, blank=True, on_delete=models.SET_NULL, related_name='freights')
    carrier = models.ForeignKey(Carrier, on_delete=models.PROTECT, related_name='freights')
    origin_zip = models.CharField(max_length=8)
    dest_zip = models.CharField(max_length=8)
    taxable_weight = models.DecimalField(max_digits=12, decimal_places=3)
    invoice_value = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # Frozen at checkout
    price = models.DecimalField(max_digits=12, decimal_places=2)
    cost_total = models.DecimalField(max_digits=12, decimal_places=2)
    margin_percent = models.DecimalField(max_digits=6, decimal_places=2)

    payment_status = models.CharField(max_length=16, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING, db_index=True)
    checkout_session_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    # Set once payment is confirmed
    carrier_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    rotaclick_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    payment_term_days = models.PositiveSmallIntegerField(null=True, blank=True)
    repasse_due_date = models.DateField(null=True, blank=True)
    repasse_status = models.CharField(max_length=16, choices=REPASSE_STATUS_CHOICES, default=REPASSE_PENDING, db_index=True)
    repasse_paid_at = models.DateTimeField(null=True, blank=True)
    repasse_paid_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['carrier', 'repasse_status'], name='freight_repasse_idx'),
            models.Index(fields=['repasse_due_date'], name='freight_due_idx'),
        ]

    @property
    def is_paid(self) -> bool:
        return self.payment_status == self.PAYMENT_PAID

    def __str__(self):
        return f"Frete #{self.pk} {self.origin_zip} -> {self.dest_zip} ({self.price})"
