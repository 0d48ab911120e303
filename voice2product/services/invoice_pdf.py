"""Invoice PDF rendering using ReportLab."""

from __future__ import annotations

import io
from decimal import Decimal
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from voice2product.config import (
    COMPANY_ADDRESS, COMPANY_EMAIL, COMPANY_NAME, COMPANY_PHONE, CURRENCY_SYMBOL, TAX_RATE,
)
from voice2product.schemas.models import LineItem
from voice2product.services.aggregator import order_total
from voice2product.utils.common import money


def invoice_totals(items: List[LineItem], tax_rate: float = TAX_RATE) -> dict:
    subtotal = money(order_total(items))
    tax = money(subtotal * Decimal(str(tax_rate)))
    return {"subtotal": subtotal, "tax": tax, "total": money(subtotal + tax)}


def _fmt(amount) -> str:
    return f"{CURRENCY_SYMBOL}{money(amount):,.2f}"


def _fmt_qty(q: Decimal) -> str:
    q = q.normalize()
    return f"{q:f}"


def _page_number(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.drawCentredString(A4[0] / 2, 10 * mm, f"Page {doc.page}")
    canvas.restoreState()


def render_invoice(
    order_id: str,
    order_date: str | None,
    status: str,
    items: List[LineItem],
    tax_rate: float = TAX_RATE,
) -> bytes:
    """Render an A4 invoice and return the PDF bytes.

    Totals are always recomputed from the line items.
    """
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=f"Invoice {order_id}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("InvoiceTitle", parent=styles["Title"], alignment=0, fontSize=20)
    small = ParagraphStyle("Small", parent=styles["Normal"], fontSize=9, leading=12)
    tiny = ParagraphStyle("Tiny", parent=styles["Normal"], fontSize=8, leading=10, textColor=colors.grey)

    story = [Paragraph("INVOICE", title_style)]

    company = [f"<b>{escape(COMPANY_NAME)}</b>"] + [escape(p) for p in COMPANY_ADDRESS.split("|") if p.strip()]
    company += [f"Phone: {escape(COMPANY_PHONE)}", f"Email: {escape(COMPANY_EMAIL)}"]
    details = [
        f"Invoice Number: {escape(order_id or '-')}",
        f"Date: {escape(order_date or '-')}",
        f"Status: {escape(status)}",
    ]
    header = Table(
        [[Paragraph("<br/>".join(company), small), Paragraph("<br/>".join(details), small)]],
        colWidths=[100 * mm, 74 * mm],
    )
    header.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    story += [header, Spacer(1, 8 * mm), Paragraph("<b>BILL TO:</b>", small), Spacer(1, 4 * mm)]

    rows = [["Product", "Quantity", "Unit Price", "Subtotal"]]
    for it in items:
        qty = _fmt_qty(it.quantity) + (f" {it.unit}" if it.unit else "")
        rows.append([Paragraph(escape(it.name), small), qty, _fmt(it.unit_price), _fmt(it.subtotal)])

    table = Table(rows, colWidths=[80 * mm, 30 * mm, 32 * mm, 32 * mm], repeatRows=1)
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f0f0f0")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LINEBELOW", (0, -1), (-1, -1), 0.5, colors.black),
    ]
    # alternating rows
    for r in range(2, len(rows), 2):
        style.append(("BACKGROUND", (0, r), (-1, r), colors.HexColor("#f9f9f9")))
    table.setStyle(TableStyle(style))
    story += [table, Spacer(1, 6 * mm)]

    totals = invoice_totals(items, tax_rate)
    totals_table = Table(
        [
            ["Subtotal:", _fmt(totals["subtotal"])],
            [f"Tax ({Decimal(str(tax_rate)) * 100:.0f}%):", _fmt(totals["tax"])],
            ["Total:", _fmt(totals["total"])],
        ],
        colWidths=[30 * mm, 32 * mm],
        hAlign="RIGHT",
    )
    totals_table.setStyle(TableStyle([
        ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
        ("FONTNAME", (0, 2), (-1, 2), "Helvetica-Bold"),
        ("FONTSIZE", (0, 2), (-1, 2), 12),
    ]))
    story += [totals_table, Spacer(1, 12 * mm)]

    story += [
        Paragraph("Thank you for your business!", small),
        Spacer(1, 2 * mm),
        Paragraph("Terms &amp; Conditions:", tiny),
        Paragraph("1. Please pay within 30 days", tiny),
        Paragraph(f"2. Make all checks payable to {escape(COMPANY_NAME)}", tiny),
    ]

    doc.build(story, onFirstPage=_page_number, onLaterPages=_page_number)
    return buf.getvalue()
