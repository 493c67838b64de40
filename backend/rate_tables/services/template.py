from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

TEMPLATE_FILENAME = 'modelo-tabela-frete-rotaclick.xlsx'
XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

TEMPLATE_HEADERS = [
    ('Origem', 14),
    ('Destino', 14),
    ('Prazo Entrega (Dias úteis)', 24),
    ('0 a 30kg', 12),
    ('31 a 50kg', 12),
    ('51 a 70kg', 12),
    ('71 a 100kg', 12),
    ('Acima de 101kg R$/kg', 20),
    ('Taxa Despacho', 14),
    ('GRIS', 10),
    ('Seguro', 10),
    ('Pedágio R$100kg ou fração', 24),
    ('ICMS', 10),
]

SAMPLE_ROW = ['01000-000', '20000-000', 3, 45.9, 62.4, 78.1, 95, 1.25, 12, 0.3, 0.2, 3.5, 12]


def build_template() -> bytes:
    """Blank import workbook: header row plus one example line."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = 'Modelo'
    sheet.append([title for title, _ in TEMPLATE_HEADERS])
    sheet.append(SAMPLE_ROW)
    for index, (_, width) in enumerate(TEMPLATE_HEADERS, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width
        sheet.cell(row=1, column=index).font = Font(bold=True)
    buf = BytesIO()
    workbook.save(buf)
    return buf.getvalue()
