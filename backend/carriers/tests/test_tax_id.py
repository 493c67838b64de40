from unittest.mock import MagicMock, patch

import pytest
import requests
from django.test import SimpleTestCase

from carriers.services.tax_id import (
    CnaeNotAllowedError,
    InvalidCnpjError,
    LookupUnavailableError,
    clean_cnpj,
    format_cnpj,
    has_valid_check_digits,
    lookup_company,
)

VALID_CNPJ = "11222333000181"


def _response(payload, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code}")
    else:
        resp.raise_for_status.return_value = None
    return resp


class TaxIdTests(SimpleTestCase):

    def test_clean_and_format(self):
        self.assertEqual(clean_cnpj("11.222.333/0001-81"), VALID_CNPJ)
        self.assertEqual(format_cnpj(VALID_CNPJ), "11.222.333/0001-81")

    def test_check_digits(self):
        self.assertTrue(has_valid_check_digits(VALID_CNPJ))
        self.assertFalse(has_valid_check_digits("11222333000182"))
        self.assertFalse(has_valid_check_digits("11111111111111"))

    def test_short_cnpj_rejected_without_http(self):
        with patch("carriers.services.tax_id.requests.get") as get:
            with self.assertRaises(InvalidCnpjError):
                lookup_company("123")
            get.assert_not_called()

    def test_primary_cnae_accepted(self):
        payload = {
            "razao_social": "TRANSPORTES ABC LTDA",
            "nome_fantasia": "ABC Cargas",
            "cnae_fiscal": 4930202,
            "cnae_fiscal_descricao": "Transporte rodoviário de carga",
        }
        with patch("carriers.services.tax_id.requests.get", return_value=_response(payload)) as get:
            info = lookup_company("11.222.333/0001-81")
        self.assertEqual(info.cnpj, VALID_CNPJ)
        self.assertEqual(info.razao_social, "TRANSPORTES ABC LTDA")
        self.assertIn(VALID_CNPJ, get.call_args[0][0])
        self.assertIn("timeout", get.call_args[1])

    def test_secondary_cnae_accepted(self):
        payload = {
            "razao_social": "MISTA LTDA",
            "cnae_fiscal": 4711302,
            "cnaes_secundarios": [{"codigo": 4930204, "descricao": "mudanças"}],
        }
        with patch("carriers.services.tax_id.requests.get", return_value=_response(payload)):
            self.assertEqual(lookup_company(VALID_CNPJ).razao_social, "MISTA LTDA")

    def test_non_freight_company_rejected(self):
        payload = {"razao_social": "PADARIA", "cnae_fiscal": 1091102, "cnaes_secundarios": []}
        with patch("carriers.services.tax_id.requests.get", return_value=_response(payload)):
            with self.assertRaises(CnaeNotAllowedError):
                lookup_company(VALID_CNPJ)

    def test_not_found_is_invalid(self):
        with patch("carriers.services.tax_id.requests.get", return_value=_response({}, 404)):
            with self.assertRaises(InvalidCnpjError):
                lookup_company(VALID_CNPJ)

    def test_network_failure_is_unavailable(self):
        with patch("carriers.services.tax_id.requests.get", side_effect=requests.ConnectionError("down")):
            with self.assertRaises(LookupUnavailableError):
                lookup_company(VALID_CNPJ)

    def test_server_error_is_unavailable(self):
        with patch("carriers.services.tax_id.requests.get", return_value=_response({}, 500)):
            with self.assertRaises(LookupUnavailableError):
                lookup_company(VALID_CNPJ)
