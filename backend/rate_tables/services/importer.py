"""
Bulk rate-table import from carrier spreadsheets.

The header row is located by content rather than position, since carriers
paste their tables under logos and notes. Every data row goes through the
same ``publish_rate`` markup as single route creation. Bad rows are collected
as ``RowError`` and skipped; only file-level problems abort the batch.
"""
from __future__ import annotations

import logging
import re
import unicodedata
import zipfile
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence, Tuple

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from audit.logger import AuditLogger
from pricing.dataclasses import RateCard
from pricing.services.errors import PricingError, RateValidationError
from pricing.services.margin import publish_rate, validate_margin
from pricing.services.utils import ZERO, q2, q4
from rate_tables.models import FreightRoute
from .errors import ImportFileError, RateTableError, ZipCodeError
from .resolver import normalize_zip

logger = logging.getLogger(__name__)

COLUMN_ALIASES: Dict[str, Tuple[str, ...]] = {
    'origin': ('origem',),
    'destination': ('destino',),
    'deadline_days': ('prazoentregadiasuteis', 'prazoentrega', 'prazo'),
    'weight_0_30': ('0a30kg', '030kg'),
    'weight_31_50': ('31a50kg', '3150kg'),
    'weight_51_70': ('51a70kg', '5170kg'),
    'weight_71_100': ('71a100kg', '71100kg'),
    'above_101_per_kg': ('acimade101kgrkg', 'acimade101kgrskg', 'acimade101kg', 'acimade101'),
    'dispatch_fee': ('taxadespacho',),
    'gris_percent': ('gris',),
    'insurance_percent': ('seguro',),
    'toll_per_100kg': ('pedagior100kgoufracao', 'pedagio'),
    'icms_percent': ('icms',),
}
REQUIRED_COLUMNS = ('origin', 'destination', 'deadline_days', 'above_101_per_kg')
CARD_COLUMNS = tuple(k for k in COLUMN_ALIASES if k not in ('origin', 'destination', 'deadline_days'))

# Footer lines some carriers leave under the table; nothing after them is data.
NOISE_MARKERS = ('calculo frete', 'pode alterar o valor da nf')

_THOUSANDS = re.compile(r'^-?\d{1,3}(\.\d{3})+$')

# Column limits of FreightRoute: 12 digits with 4 dp per kg, 2 dp for money.
MAX_PER_KG = Decimal('100000000')
MAX_AMOUNT = Decimal('10000000000')
MAX_DEADLINE_DAYS = 2147483647


@dataclass
class RowError:
    source_row: int
    message: str

    def as_dict(self) -> Dict[str, Any]:
        return {'source_row': self.source_row, 'message': self.message}


@dataclass
class ParsedRow:
    source_row: int
    origin_zip: str
    dest_zip: str
    deadline_days: int
    cost_price_per_kg: Decimal
    cost_min_price: Decimal
    rate_card: RateCard


@dataclass
class BatchResult:
    succeeded: List[FreightRoute] = field(default_factory=list)
    failed: List[RowError] = field(default_factory=list)
    margin_percent: Decimal = ZERO
    source_file: str = ''

    @property
    def imported_count(self) -> int:
        return len(self.succeeded)

    @property
    def invalid_count(self) -> int:
        return len(self.failed)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'imported_count': self.imported_count,
            'invalid_count': self.invalid_count,
            'errors': [e.as_dict() for e in self.failed],
            'margin_applied': str(self.margin_percent),
        }


def normalize_cell(value) -> str:
    return re.sub(r'[^a-z0-9]', '', _fold(str(value if value is not None else '')))


def parse_brazil_number(value) -> Optional[Decimal]:
    """
    ``R$ 1.234,56`` -> ``1234.56``. Returns ``None`` for blanks and junk.

    Numeric cells pass through. A text value with a comma is read Brazilian
    style; without one, dots are decimal points unless they group thousands.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return None
        return number if number.is_finite() else None

    raw = re.sub(r'r\$', '', str(value).strip(), flags=re.IGNORECASE)
    raw = re.sub(r'\s+', '', raw).replace('%', '')
    if not raw:
        return None
    if ',' in raw:
        raw = raw.replace('.', '').replace(',', '.', 1)
    elif _THOUSANDS.match(raw):
        raw = raw.replace('.', '')
    try:
        number = Decimal(raw)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _fold(text: str) -> str:
    text = unicodedata.normalize('NFD', text)
    return ''.join(ch for ch in text if not unicodedata.combining(ch)).lower()


def is_noise_row(row: Sequence[Any]) -> bool:
    joined = ' '.join(_fold(str(cell)) for cell in row if cell is not None)
    return any(marker in joined for marker in NOISE_MARKERS)


def _is_blank(row: Sequence[Any]) -> bool:
    return all(cell is None or str(cell).strip() == '' for cell in row)


def find_header_row(rows: Sequence[Sequence[Any]]) -> Optional[Tuple[int, List[str]]]:
    for index, row in enumerate(rows):
        normalized = [normalize_cell(cell) for cell in row]
        has_origin = any(v in COLUMN_ALIASES['origin'] for v in normalized)
        has_dest = any(v in COLUMN_ALIASES['destination'] for v in normalized)
        has_deadline = any(a in v for v in normalized for a in COLUMN_ALIASES['deadline_days'])
        if has_origin and has_dest and has_deadline:
            return index, normalized
    return None


def _column_index(normalized_header: List[str], key: str) -> int:
    aliases = COLUMN_ALIASES[key]
    if key in ('origin', 'destination'):
        matches = [i for i, v in enumerate(normalized_header) if v in aliases]
    else:
        matches = [i for i, v in enumerate(normalized_header) if v and any(a in v for a in aliases)]
    return matches[0] if matches else -1


def read_workbook(fileobj) -> List[Tuple[Any, ...]]:
    """All rows of the first worksheet, as tuples of cell values."""
    try:
        workbook = load_workbook(fileobj, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        logger.warning("Unreadable rate table upload: %s", e)
        raise ImportFileError('Arquivo inválido. Envie uma planilha .xlsx.') from e
    try:
        if not workbook.worksheets:
            raise ImportFileError('Planilha vazia')
        sheet = workbook.worksheets[0]
        limit = settings.RATE_IMPORT_MAX_ROWS
        rows: List[Tuple[Any, ...]] = []
        for row in sheet.iter_rows(values_only=True):
            rows.append(tuple(row))
            if len(rows) > limit:
                raise ImportFileError(f"Planilha excede o limite de {limit} linhas")
    finally:
        workbook.close()
    if not rows:
        raise ImportFileError('Planilha vazia')
    return rows


def _cell(row: Sequence[Any], index: int):
    if index < 0 or index >= len(row):
        return None
    return row[index]


def parse_rows(rows: Sequence[Sequence[Any]]) -> Tuple[List[ParsedRow], List[RowError]]:
    """
    Splits sheet rows into valid ``ParsedRow``s and ``RowError``s.

    Row numbers are 1-based spreadsheet rows. Raises ``ImportFileError`` when
    no header is found or a required column is missing.
    """
    header = find_header_row(rows)
    if header is None:
        raise ImportFileError('Cabeçalho da tabela de frete não encontrado no arquivo.')
    header_index, normalized = header

    columns = {key: _column_index(normalized, key) for key in COLUMN_ALIASES}
    missing = [key for key in REQUIRED_COLUMNS if columns[key] < 0]
    if missing:
        raise ImportFileError(f"Colunas obrigatórias ausentes: {', '.join(missing)}")

    parsed: List[ParsedRow] = []
    errors: List[RowError] = []

    for index in range(header_index + 1, len(rows)):
        row = rows[index]
        source_row = index + 1
        if is_noise_row(row):
            break
        if _is_blank(row):
            continue

        problems: List[str] = []
        origin_raw = _cell(row, columns['origin'])
        dest_raw = _cell(row, columns['destination'])
        origin = dest = ''
        try:
            origin = normalize_zip(origin_raw)
        except ZipCodeError:
            problems.append(f"origem inválida ({origin_raw or 'vazia'})")
        try:
            dest = normalize_zip(dest_raw)
        except ZipCodeError:
            problems.append(f"destino inválido ({dest_raw or 'vazio'})")

        deadline = parse_brazil_number(_cell(row, columns['deadline_days']))
        if deadline is None or deadline < ZERO or deadline > MAX_DEADLINE_DAYS:
            problems.append('prazo')

        cost_per_kg = parse_brazil_number(_cell(row, columns['above_101_per_kg']))
        if cost_per_kg is None or cost_per_kg <= ZERO:
            problems.append('acima 101kg (custo por kg deve ser positivo)')
        elif cost_per_kg >= MAX_PER_KG:
            problems.append('acima 101kg (valor acima do limite)')

        card_values: Dict[str, Decimal] = {}
        for key in CARD_COLUMNS:
            raw = _cell(row, columns[key])
            if raw is None or str(raw).strip() == '':
                continue
            value = parse_brazil_number(raw)
            if value is None or value < ZERO or value >= MAX_AMOUNT:
                problems.append(key)
                continue
            card_values[key] = value

        if problems:
            errors.append(RowError(source_row, f"Linha {source_row}: valores inválidos/ausentes em: {', '.join(problems)}"))
            continue

        try:
            parsed.append(ParsedRow(
                source_row=source_row,
                origin_zip=origin,
                dest_zip=dest,
                deadline_days=int(deadline.to_integral_value()),
                cost_price_per_kg=q4(cost_per_kg),
                cost_min_price=q2(card_values.get('weight_0_30', ZERO)),
                rate_card=RateCard(**card_values),
            ))
        except (InvalidOperation, ValueError, OverflowError):
            errors.append(RowError(source_row, f"Linha {source_row}: valores fora do limite"))

    return parsed, errors


def _upsert(carrier, row: ParsedRow, margin: Decimal, source_file: str, imported_at) -> FreightRoute:
    published = publish_rate(row.cost_price_per_kg, row.cost_min_price, margin)
    if published.price_per_kg >= MAX_PER_KG or published.min_price >= MAX_AMOUNT:
        raise RateValidationError('Preço com margem excede o limite da tabela')
    with transaction.atomic():
        route, _ = FreightRoute.objects.update_or_create(
            carrier=carrier,
            origin_zip=row.origin_zip,
            dest_zip=row.dest_zip,
            defaults={
                'origin_zip_end': None,
                'dest_zip_end': None,
                'cost_price_per_kg': row.cost_price_per_kg,
                'cost_min_price': row.cost_min_price,
                'margin_percent': published.margin_percent,
                'price_per_kg': published.price_per_kg,
                'min_price': published.min_price,
                'deadline_days': row.deadline_days,
                'status': FreightRoute.STATUS_ACTIVE,
                'rate_card': row.rate_card.to_json(),
                'source_file': source_file,
                'imported_at': imported_at,
            },
        )
    return route


def import_rate_table(rows, carrier, margin_percent, source_file: str = '', user=None,
                      ip_address: Optional[str] = None) -> BatchResult:
    if carrier is None:
        raise RateTableError('Selecione uma transportadora')
    margin = validate_margin(margin_percent)

    parsed, errors = parse_rows(rows)
    result = BatchResult(failed=errors, margin_percent=margin, source_file=source_file)
    imported_at = timezone.now()

    for row in parsed:
        try:
            result.succeeded.append(_upsert(carrier, row, margin, source_file, imported_at))
        except (PricingError, DatabaseError, InvalidOperation) as e:
            logger.warning("Rate import row %s skipped: %s", row.source_row, e)
            result.failed.append(RowError(row.source_row, f"Linha {row.source_row}: {e}"))

    result.failed.sort(key=lambda e: e.source_row)
    for error in result.failed:
        logger.warning("Rate import %s: %s", source_file or '-', error.message)

    AuditLogger.log_import(
        'freight_route', result.imported_count, result.invalid_count, source_file or 'planilha',
        user=user, ip_address=ip_address,
        metadata={'carrier_id': carrier.pk, 'margin_percent': str(margin)},
    )
    logger.info("Imported %d routes for carrier %s (%d rows rejected, margin %s%%)",
                result.imported_count, carrier.pk, result.invalid_count, margin)
    return result


def import_workbook(fileobj, carrier, margin_percent, source_file: str = '', user=None,
                    ip_address: Optional[str] = None) -> BatchResult:
    return import_rate_table(read_workbook(fileobj), carrier, margin_percent,
                             source_file=source_file, user=user, ip_address=ip_address)
