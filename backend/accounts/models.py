# backend/accounts/models.py

from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    ROLE_ADMIN = 'admin'
    ROLE_CARRIER = 'transportadora'
    ROLE_CUSTOMER = 'cliente'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrador'),
        (ROLE_CARRIER, 'Transportadora'),
        (ROLE_CUSTOMER, 'Cliente'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER)

    @property
    def is_platform_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN

    @property
    def is_carrier(self) -> bool:
        return self.role == self.ROLE_CARRIER

    @property
    def is_customer(self) -> bool:
        return self.role == self.ROLE_CUSTOMER

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"
