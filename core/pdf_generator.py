"""
CORE PDF GENERATOR - EventHub
==============================

Generazione PDF con ReportLab: report tabellari e badge partecipanti.
"""

from io import BytesIO
from typing import List, Dict, Any
from datetime import datetime, date
from decimal import Decimal

from django.http import HttpResponse
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

PRIMARY_COLOR = "#5585b5"


def _formatta(value):
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime("%d/%m/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, Decimal):
        return f"{float(value):.2f}"
    if value is None:
        return "-"
    return str(value)


def generate_pdf_response(
    data: List[Dict[str, Any]],
    filename: str,
    title: str = "Report",
    headers: List[str] = None,
) -> HttpResponse:
    """
    Genera un file PDF con tabella e lo ritorna come HttpResponse.

    Args:
        data: Lista di dizionari con i dati
        filename: Nome del file (senza estensione)
        title: Titolo del documento
        headers: Lista headers personalizzati (opzionale)
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=2 * cm,
        leftMargin=2 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "CustomTitle",
        parent=styles["Heading1"],
        fontSize=18,
        textColor=colors.HexColor(PRIMARY_COLOR),
        spaceAfter=30,
        alignment=1,
    )
    info_style = ParagraphStyle(
        "Info", parent=styles["Normal"], fontSize=9, textColor=colors.grey, alignment=2
    )

    elements = [
        Paragraph(title, title_style),
        Spacer(1, 12),
        Paragraph(f"Generato il {timezone.localtime().strftime('%d/%m/%Y alle %H:%M')}", info_style),
        Spacer(1, 20),
    ]

    if not data:
        elements.append(Paragraph("Nessun dato disponibile", styles["Normal"]))
    else:
        if headers is None:
            headers = list(data[0].keys())

        table_data = [headers]
        for row_data in data:
            table_data.append([_formatta(row_data.get(header, "")) for header in headers])

        table = Table(table_data, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(PRIMARY_COLOR)),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                    ("ALIGN", (0, 0), (-1, 0), "CENTER"),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, 0), 11),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 10),
                    ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
                    ("FONTSIZE", (0, 1), (-1, -1), 9),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("BOX", (0, 0), (-1, -1), 2, colors.HexColor(PRIMARY_COLOR)),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f8f9fa")]),
                ]
            )
        )
        elements.append(table)

    doc.build(elements)
    pdf = buffer.getvalue()
    buffer.close()

    response = HttpResponse(pdf, content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="{filename}.pdf"'
    return response


# ============================================================================
# BADGE
# ============================================================================

BADGE_WIDTH = 9 * cm
BADGE_HEIGHT = 6 * cm
BADGE_PER_COLONNA = 4


def genera_badge_pdf(badges, titolo_evento=""):
    """
    Genera un PDF A4 con badge 9x6 cm (2 colonne x 4 righe per pagina).

    Args:
        badges: lista di dict {"nome", "azienda", "ruolo", "qr"} dove "qr"
                è un BytesIO PNG (opzionale)
        titolo_evento: testo in testa a ogni badge

    Returns:
        bytes: contenuto PDF
    """
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    larghezza_pagina, altezza_pagina = A4
    margine_x = (larghezza_pagina - 2 * BADGE_WIDTH) / 2
    margine_y = (altezza_pagina - BADGE_PER_COLONNA * BADGE_HEIGHT) / 2

    for indice, badge in enumerate(badges):
        posizione = indice % (2 * BADGE_PER_COLONNA)
        if indice and posizione == 0:
            pdf.showPage()

        colonna = posizione % 2
        riga = posizione // 2
        x = margine_x + colonna * BADGE_WIDTH
        y = altezza_pagina - margine_y - (riga + 1) * BADGE_HEIGHT

        pdf.setStrokeColor(colors.HexColor(PRIMARY_COLOR))
        pdf.rect(x, y, BADGE_WIDTH, BADGE_HEIGHT)

        pdf.setFillColor(colors.HexColor(PRIMARY_COLOR))
        pdf.rect(x, y + BADGE_HEIGHT - 1 * cm, BADGE_WIDTH, 1 * cm, fill=1, stroke=0)
        pdf.setFillColor(colors.white)
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawCentredString(x + BADGE_WIDTH / 2, y + BADGE_HEIGHT - 0.65 * cm, titolo_evento[:45])

        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica-Bold", 14)
        pdf.drawString(x + 0.5 * cm, y + BADGE_HEIGHT - 2 * cm, badge.get("nome", "")[:28])
        pdf.setFont("Helvetica", 10)
        pdf.drawString(x + 0.5 * cm, y + BADGE_HEIGHT - 2.7 * cm, (badge.get("azienda") or "")[:34])
        pdf.drawString(x + 0.5 * cm, y + BADGE_HEIGHT - 3.3 * cm, (badge.get("ruolo") or "")[:34])

        if badge.get("qr"):
            badge["qr"].seek(0)
            pdf.drawImage(
                ImageReader(badge["qr"]),
                x + BADGE_WIDTH - 3.3 * cm,
                y + 0.3 * cm,
                width=3 * cm,
                height=3 * cm,
            )

    pdf.save()
    contenuto = buffer.getvalue()
    buffer.close()
    return contenuto
