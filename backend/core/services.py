"""
Platform settings with code defaults.

Rows in ``PlatformSetting`` override ``DEFAULTS``; a key with no row reads
its default. Only keys listed in ``DEFAULTS`` may be written.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Mapping, Optional

from django.db import transaction

from audit.logger import AuditLogger
from carriers.terms import validate_payment_term
from pricing.services.errors import PricingError
from pricing.services.margin import validate_margin
from .models import PlatformSetting

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, str] = {
    'default_margin_percent': '20',
    'fallback_price_per_kg': '3.50',
    'fallback_min_price': '80.00',
    'fallback_deadline_days': '7',
    'default_payment_term_days': '7',
    'platform_name': 'RotaClick',
    'primary_color': '#0B5FFF',
    'logo_url': '',
    'support_email': 'suporte@rotaclick.com.br',
}

DESCRIPTIONS: Dict[str, str] = {
    'default_margin_percent': 'Margem aplicada nas importações feitas pela transportadora (%)',
    'fallback_price_per_kg': 'Preço por kg da estimativa quando não há rota',
    'fallback_min_price': 'Frete mínimo da estimativa quando não há rota',
    'fallback_deadline_days': 'Prazo (dias) da estimativa quando não há rota',
    'default_payment_term_days': 'Prazo de repasse sugerido na aprovação',
    'platform_name': 'Nome exibido na plataforma',
    'primary_color': 'Cor primária',
    'logo_url': 'URL do logotipo',
    'support_email': 'E-mail de suporte',
}

PUBLIC_KEYS = ('platform_name', 'primary_color', 'logo_url', 'support_email')


class SettingsError(Exception):
    pass


class UnknownSettingError(SettingsError):
    def __init__(self, key):
        self.key = key
        super().__init__(f"Configuração desconhecida: {key}")


class InvalidSettingError(SettingsError):
    def __init__(self, key, reason):
        self.key = key
        super().__init__(f"Valor inválido para {key}: {reason}")


MAX_FALLBACK_AMOUNT = Decimal('100000000')
MAX_FALLBACK_DEADLINE_DAYS = 365


def _amount(value) -> str:
    try:
        number = Decimal(str(value).strip().replace(',', '.'))
    except (InvalidOperation, ValueError):
        raise ValueError('informe um número')
    if not number.is_finite() or number < 0 or number >= MAX_FALLBACK_AMOUNT:
        raise ValueError(f"informe um valor entre 0 e {MAX_FALLBACK_AMOUNT}")
    return str(number)


def _days(value) -> str:
    try:
        days = int(str(value).strip())
    except ValueError:
        raise ValueError('informe um número inteiro de dias')
    if days < 0 or days > MAX_FALLBACK_DEADLINE_DAYS:
        raise ValueError(f"informe entre 0 e {MAX_FALLBACK_DEADLINE_DAYS} dias")
    return str(days)


# Numeric keys are checked and normalized before they are stored.
VALIDATORS = {
    'default_margin_percent': lambda value: str(validate_margin(value)),
    'fallback_price_per_kg': _amount,
    'fallback_min_price': _amount,
    'fallback_deadline_days': _days,
    'default_payment_term_days': lambda value: str(validate_payment_term(value)),
}


def clean_setting(key: str, value) -> str:
    if key not in DEFAULTS:
        raise UnknownSettingError(key)
    value = '' if value is None else str(value)
    validator = VALIDATORS.get(key)
    if validator is None:
        return value
    try:
        return validator(value)
    except (ValueError, PricingError) as e:
        raise InvalidSettingError(key, e)


def get_settings(keys=None) -> Dict[str, str]:
    values = dict(DEFAULTS)
    values.update(PlatformSetting.objects.values_list('key', 'value'))
    if keys is not None:
        return {k: values.get(k, '') for k in keys}
    return values


def get_setting(key: str) -> str:
    row = PlatformSetting.objects.filter(key=key).values_list('value', flat=True).first()
    return row if row is not None else DEFAULTS.get(key, '')


def get_decimal(key: str) -> Decimal:
    raw = get_setting(key)
    try:
        value = Decimal(str(raw).replace(',', '.'))
    except (InvalidOperation, ValueError):
        value = None
    if value is not None and value.is_finite():
        return value
    logger.warning("Setting %s=%r is not numeric; using default %s", key, raw, DEFAULTS.get(key))
    return Decimal(DEFAULTS[key])


def get_int(key: str) -> int:
    return int(get_decimal(key))


def update_setting(key: str, value, user=None, ip_address: Optional[str] = None) -> PlatformSetting:
    value = clean_setting(key, value)
    before = get_setting(key)
    row, _ = PlatformSetting.objects.update_or_create(
        key=key,
        defaults={
            'value': value,
            'description': DESCRIPTIONS.get(key, ''),
            'updated_by': user,
        },
    )
    AuditLogger.log_update('platform_setting', key, {key: before}, {key: row.value},
                           user=user, ip_address=ip_address)
    logger.info("Platform setting %s updated by %s", key, getattr(user, 'username', None))
    return row


def update_settings_batch(values: Mapping[str, object], user=None, ip_address: Optional[str] = None) -> Dict[str, str]:
    unknown = [k for k in values if k not in DEFAULTS]
    if unknown:
        raise UnknownSettingError(', '.join(sorted(unknown)))
    for key, value in values.items():
        clean_setting(key, value)
    with transaction.atomic():
        for key, value in values.items():
            update_setting(key, value, user=user, ip_address=ip_address)
    return get_settings()
