# app/domain/services/document_pdf.py
"""
Render a recomputed bill or invoice as a PDF using ReportLab.
"""

from __future__ import annotations

import io
import logging

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.domain.models.billing import PurchaseBill, SalesInvoice, TransactionType
from app.domain.services.formatting import DisplaySettings, format_currency, format_date

logger = logging.getLogger("document_pdf")

_HEADER_BG = colors.Color(0.2, 0.3, 0.5)
_LABEL_BG = colors.Color(0.95, 0.95, 0.95)
_TOTAL_ROW_BG = colors.Color(0.9, 0.95, 1.0)
_GRID_COLOR = colors.Color(0.8, 0.8, 0.8)


def _quantity(value) -> str:
    return f"{value.normalize():f}" if value == value.to_integral() else f"{value:.3f}"


def _item_rows(document: PurchaseBill | SalesInvoice, display: DisplaySettings) -> list[list[str]]:
    rows = [["#", "Item", "HSN", "Qty", "Rate", "GST %", "Taxable", "Amount"]]
    for n, item in enumerate(document.items, start=1):
        rows.append(
            [
                str(n),
                item.name or "-",
                item.code or "-",
                f"{_quantity(item.quantity)} {item.unit_label}",
                format_currency(item.unit_rate, display),
                f"{item.tax_rate_percent.normalize():f}",
                format_currency(item.taxable_amount, display),
                format_currency(item.line_total, display),
            ]
        )
    return rows


def _summary_rows(document: PurchaseBill | SalesInvoice, display: DisplaySettings) -> list[list[str]]:
    rows = [["Description", "Amount"], ["Taxable Value", format_currency(document.taxable_total, display)]]

    if document.transaction_type == TransactionType.INTER_STATE:
        rows.append(["IGST", format_currency(document.igst_total, display)])
    else:
        rows.append(["CGST", format_currency(document.cgst_total, display)])
        rows.append(["SGST", format_currency(document.sgst_total, display)])

    if isinstance(document, PurchaseBill):
        rows.append([f"Commission @ {document.commission_rate:f}%", format_currency(document.commission_amount, display)])
        rows.append(["Labour Charges", format_currency(document.labor_charges, display)])
        rows.append(["Market Fee", format_currency(document.market_fee, display)])
    else:
        for entry in document.adjustments:
            rows.append([entry.name, format_currency(entry.amount, display)])

    rows.append(["Round Off", format_currency(document.round_off, display)])
    label = "NET PAYABLE" if isinstance(document, PurchaseBill) else "GRAND TOTAL"
    rows.append([label, format_currency(document.grand_total, display)])
    return rows


def generate_document_pdf(
    document: PurchaseBill | SalesInvoice,
    display: DisplaySettings | None = None,
) -> bytes:
    """
    Build an A4 PDF for a bill or invoice. The document is expected to be
    recalculated already; nothing is recomputed here.

    Returns:
        PDF file as bytes.
    """
    display = display or DisplaySettings()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "DocumentTitle",
        parent=styles["Heading1"],
        fontSize=16,
        alignment=1,  # center
        spaceAfter=10,
    )

    is_bill = isinstance(document, PurchaseBill)
    elements = [Paragraph("PURCHASE BILL" if is_bill else "TAX INVOICE", title_style)]

    header_data = [
        ["Bill No" if is_bill else "Invoice No", document.document_number or "N/A",
         "Date", format_date(document.date, display)],
        ["Vendor" if is_bill else "Customer", document.party_name or "N/A",
         "GSTIN", document.tax_id or "N/A"],
        ["Supply", document.transaction_type.value, "Status", document.status],
    ]
    if document.address:
        header_data.append(["Address", document.address, "", ""])

    header_table = Table(header_data, colWidths=[80, 170, 60, 150])
    header_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (0, -1), _LABEL_BG),
                ("BACKGROUND", (2, 0), (2, -1), _LABEL_BG),
                ("TEXTCOLOR", (0, 0), (0, -1), colors.grey),
                ("TEXTCOLOR", (2, 0), (2, -1), colors.grey),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -1), 0.5, _GRID_COLOR),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    elements.append(header_table)
    elements.append(Spacer(1, 12))

    items_table = Table(
        _item_rows(document, display),
        colWidths=[20, 120, 50, 55, 60, 35, 60, 60],
        repeatRows=1,
    )
    items_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), _HEADER_BG),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 0.5, _GRID_COLOR),
                ("ALIGN", (3, 1), (-1, -1), "RIGHT"),
            ]
        )
    )
    elements.append(items_table)
    elements.append(Spacer(1, 12))

    summary_table = Table(_summary_rows(document, display), colWidths=[300, 160])
    summary_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), _HEADER_BG),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("BACKGROUND", (0, -1), (-1, -1), _TOTAL_ROW_BG),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("GRID", (0, 0), (-1, -1), 0.5, _GRID_COLOR),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ]
        )
    )
    elements.append(summary_table)

    doc.build(elements)
    logger.debug("Rendered %s %s", document.doc_type, document.document_number)
    return buf.getvalue()
