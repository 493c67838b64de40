from django.conf import settings
from django.db import models

from .terms import PAYMENT_TERMS


class Carrier(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pendente'),
        (STATUS_APPROVED, 'Aprovada'),
        (STATUS_REJECTED, 'Rejeitada'),
    ]
    PAYMENT_TERM_CHOICES = [(t, f"D+{t}") for t in PAYMENT_TERMS]

    RNTRC_UNKNOWN = 'UNKNOWN'
    RNTRC_ACTIVE = 'ACTIVE'
    RNTRC_STATUS_CHOICES = [
        (RNTRC_UNKNOWN, 'Não verificado'),
        (RNTRC_ACTIVE, 'Ativo'),
        ('INACTIVE', 'Inativo'),
        ('SUSPENDED', 'Suspenso'),
        ('EXPIRED', 'Expirado'),
    ]
    ANTT_PENDING = 'PENDING'
    ANTT_ACTIVE = 'ACTIVE'
    ANTT_STATUS_CHOICES = [
        (ANTT_PENDING, 'Pendente'),
        (ANTT_ACTIVE, 'Ativo'),
        ('INACTIVE', 'Inativo'),
        ('SUSPENDED', 'Suspenso'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='carrier')
    cnpj = models.CharField(max_length=14, unique=True)
    razao_social = models.CharField(max_length=255)
    nome_fantasia = models.CharField(max_length=255, blank=True, default='')
    rntrc = models.CharField(max_length=20, blank=True, default='')
    rntrc_status = models.CharField(max_length=16, choices=RNTRC_STATUS_CHOICES, default=RNTRC_UNKNOWN)
    rntrc_expires_at = models.DateField(null=True, blank=True)
    antt_registration_status = models.CharField(max_length=16, choices=ANTT_STATUS_CHOICES, default=ANTT_PENDING)
    insurance_valid_until = models.DateField(null=True, blank=True)
    approval_status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    rejection_reason = models.TextField(blank=True, null=True)
    # Set at approval; freights copy it at payment time.
    payment_term_days = models.PositiveSmallIntegerField(choices=PAYMENT_TERM_CHOICES, null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    @property
    def display_name(self) -> str:
        return self.nome_fantasia or self.razao_social

    @property
    def is_approved(self) -> bool:
        return self.approval_status == self.STATUS_APPROVED

    def __str__(self):
        return f"{self.display_name} ({self.cnpj})"
