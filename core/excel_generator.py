"""
CORE EXCEL GENERATOR - EventHub
================================

Generazione file Excel con openpyxl (header colorato, bordi, freeze panes).
"""

from io import BytesIO
from typing import List, Dict, Any, Optional
from datetime import datetime, date
from decimal import Decimal

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_COLOR = "5585b5"

THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


def _valore_cella(value):
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime("%d/%m/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, bool):
        return "Sì" if value else "No"
    return value


def scrivi_foglio(ws, data: List[Dict[str, Any]], headers: Optional[List[str]] = None):
    """Scrive headers e righe su un worksheet già creato."""
    if headers is None:
        headers = list(data[0].keys()) if data else []

    header_font = Font(bold=True, color="FFFFFF", size=12)
    header_fill = PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type="solid")
    header_alignment = Alignment(horizontal="center", vertical="center")

    for col_num, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_num, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = THIN_BORDER

    for row_num, row_data in enumerate(data, 2):
        for col_num, header in enumerate(headers, 1):
            cell = ws.cell(row=row_num, column=col_num, value=_valore_cella(row_data.get(header, "")))
            cell.alignment = Alignment(horizontal="left", vertical="center")
            cell.border = THIN_BORDER

    # Larghezza colonne in base al contenuto (max 50)
    for col_num in range(1, len(headers) + 1):
        column_letter = get_column_letter(col_num)
        max_length = max(
            (len(str(cell.value)) for cell in ws[column_letter] if cell.value is not None),
            default=0,
        )
        ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

    ws.freeze_panes = "A2"


def generate_excel_response(
    data: List[Dict[str, Any]],
    filename: str,
    sheet_name: str = "Dati",
    headers: List[str] = None,
    extra_sheets: Optional[Dict[str, List[Dict[str, Any]]]] = None,
) -> HttpResponse:
    """
    Genera un file Excel e lo ritorna come HttpResponse.

    Args:
        data: Lista di dizionari con i dati
        filename: Nome del file (senza estensione)
        sheet_name: Nome del foglio principale
        headers: Lista headers personalizzati (opzionale)
        extra_sheets: Fogli aggiuntivi {nome_foglio: righe}

    Returns:
        HttpResponse con il file Excel
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]
    scrivi_foglio(ws, data, headers)

    for nome, righe in (extra_sheets or {}).items():
        scrivi_foglio(wb.create_sheet(title=nome[:31]), righe)

    output = BytesIO()
    wb.save(output)
    output.seek(0)

    response = HttpResponse(output.read(), content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="{filename}.xlsx"'
    return response
