"""
CNPJ (Brazilian company tax id) validation.

Local checks (length, check digits) run first; the company record is then
fetched from the configured lookup service and must list an allowed
road-freight CNAE as primary or secondary activity.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

# 4930-2/01..04: road freight (municipal, intercity, hazardous, removals)
ALLOWED_CNAES = ('4930201', '4930202', '4930203', '4930204')

_WEIGHTS_1 = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
_WEIGHTS_2 = (6,) + _WEIGHTS_1


class TaxIdValidationError(Exception):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class InvalidCnpjError(TaxIdValidationError):
    pass


class CnaeNotAllowedError(TaxIdValidationError):
    pass


class LookupUnavailableError(TaxIdValidationError):
    pass


@dataclass(frozen=True)
class CompanyInfo:
    cnpj: str
    razao_social: str
    nome_fantasia: str
    cnae_principal: str
    cnae_code: str


def clean_cnpj(raw) -> str:
    return re.sub(r'\D', '', str(raw or ''))


def _check_digit(digits: str, weights) -> str:
    total = sum(int(n) * w for n, w in zip(digits, weights))
    rest = total % 11
    return '0' if rest < 2 else str(11 - rest)


def has_valid_check_digits(cnpj: str) -> bool:
    if len(cnpj) != 14 or not cnpj.isdigit() or len(set(cnpj)) == 1:
        return False
    first = _check_digit(cnpj[:12], _WEIGHTS_1)
    second = _check_digit(cnpj[:12] + first, _WEIGHTS_2)
    return cnpj[12:] == first + second


def format_cnpj(cnpj: str) -> str:
    c = clean_cnpj(cnpj)
    if len(c) != 14:
        return cnpj
    return f"{c[:2]}.{c[2:5]}.{c[5:8]}/{c[8:12]}-{c[12:]}"


def _cnae_codes(data: dict) -> Iterable[str]:
    if data.get('cnae_fiscal') is not None:
        yield str(data['cnae_fiscal'])
    for item in data.get('cnaes_secundarios') or []:
        code = item.get('codigo') if isinstance(item, dict) else item
        if code is not None:
            yield str(code)


def _fetch(cnpj: str) -> dict:
    url = settings.CNPJ_LOOKUP_URL.format(cnpj=cnpj)
    headers = {"Accept": "application/json", "User-Agent": "RotaClick/1.0"}
    try:
        resp = requests.get(url, headers=headers, timeout=settings.CNPJ_LOOKUP_TIMEOUT)
        if resp.status_code == 404:
            raise InvalidCnpjError('CNPJ não encontrado na Receita Federal.')
        resp.raise_for_status()
        return resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("CNPJ lookup failed for %s: %s", cnpj, e)
        raise LookupUnavailableError('Não foi possível consultar este CNPJ no momento.') from e


def lookup_company(raw_cnpj) -> CompanyInfo:
    cnpj = clean_cnpj(raw_cnpj)
    if len(cnpj) != 14:
        raise InvalidCnpjError('CNPJ inválido. Deve conter 14 dígitos.')
    if not has_valid_check_digits(cnpj):
        raise InvalidCnpjError('CNPJ inválido. Dígitos verificadores não conferem.')

    data = _fetch(cnpj)
    codes = list(_cnae_codes(data))
    if not any(code in ALLOWED_CNAES for code in codes):
        logger.info("CNPJ %s rejected: no freight CNAE among %s", cnpj, codes)
        raise CnaeNotAllowedError('Esta empresa não possui CNAE de transporte de cargas autorizado.')

    return CompanyInfo(
        cnpj=cnpj,
        razao_social=data.get('razao_social') or '',
        nome_fantasia=data.get('nome_fantasia') or '',
        cnae_principal=data.get('cnae_fiscal_descricao') or '',
        cnae_code=str(data.get('cnae_fiscal') or ''),
    )
