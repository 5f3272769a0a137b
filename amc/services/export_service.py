# amc/services/export_service.py
"""
Tabular exports: CSV and PDF.

Both renderers take the same inputs: an iterable of row dicts and a column
selection of ``(key, label)`` pairs. Column order in the output is the
selection order.
"""
import csv
import io
import logging
from datetime import date, datetime
from decimal import Decimal
from xml.sax.saxutils import escape

from django.conf import settings
from django.http import HttpResponse, StreamingHttpResponse
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A3, A4, LETTER, landscape, portrait
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from rest_framework.exceptions import ValidationError

logger = logging.getLogger(__name__)

PAPER_SIZES = {"a4": A4, "a3": A3, "letter": LETTER}
HEADER_FILL = colors.Color(66 / 255, 139 / 255, 202 / 255)
ALTERNATE_FILL = colors.Color(245 / 255, 245 / 255, 245 / 255)

RECEIPT_COLUMNS = [
    ("receiptNumber", "Receipt Number"),
    ("bookNumber", "Book Number"),
    ("date", "Date"),
    ("financialYear", "Financial Year"),
    ("traderName", "Trader Name"),
    ("payeeName", "Payee Name"),
    ("commodity", "Commodity"),
    ("transactionValue", "Transaction Value"),
    ("marketFee", "Market Fee"),
    ("natureOfReceipt", "Nature of Receipt"),
    ("collectionLocation", "Collection Location"),
    ("committeeName", "Committee Name"),
    ("committeeCode", "Committee Code"),
    ("checkpostName", "Checkpost Name"),
    ("supervisorName", "Supervisor Name"),
    ("createdAt", "Created At"),
]


def export_filename(base, extension, include_timestamp=True, today=None):
    """``receipts-export-2025-06-30.csv``; the date part is optional."""
    if include_timestamp:
        today = today or timezone.localdate()
        return f"{base}-{today.isoformat()}.{extension}"
    return f"{base}.{extension}"


def select_columns(available, requested):
    """
    Resolve a ``columns`` selection (comma separated keys) against ``available``.

    Returns ``available`` unchanged when nothing is requested.
    """
    if not requested:
        return list(available)
    if isinstance(requested, str):
        requested = [key.strip() for key in requested.split(",") if key.strip()]
    labels = dict(available)
    unknown = [key for key in requested if key not in labels]
    if unknown:
        raise ValidationError({"columns": f"Unknown columns: {', '.join(unknown)}"})
    if not requested:
        raise ValidationError({"columns": "No columns selected for export"})
    return [(key, labels[key]) for key in requested]


def format_cell(value):
    """Display form of one value: thousands separators, Yes/No, DD/MM/YYYY."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return timezone.localtime(value).strftime("%d/%m/%Y") if timezone.is_aware(value) else value.strftime("%d/%m/%Y")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, (float, Decimal)):
        text = f"{Decimal(str(value)).quantize(Decimal('0.001')):,.3f}".rstrip("0").rstrip(".")
        return text
    return str(value)


def raw_cell(value):
    """CSV form of one value: machine readable, no thousands separators."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def csv_rows(rows, columns, include_header=True, chunk_size=None):
    """
    Yield CSV text in chunks of ``chunk_size`` rows.

    Every field is quoted and embedded quotes are doubled, so values with
    commas, quotes or newlines survive a round trip through ``csv.reader``.
    """
    chunk_size = chunk_size or settings.AMC_EXPORT_CHUNK_SIZE
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    def flush():
        text = buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)
        return text

    if include_header:
        writer.writerow([label for _, label in columns])
    pending = 0
    for row in rows:
        writer.writerow([raw_cell(row.get(key)) for key, _ in columns])
        pending += 1
        if pending >= chunk_size:
            yield flush()
            pending = 0
    tail = flush()
    if tail:
        yield tail


def render_csv(rows, columns, include_header=True, chunk_size=None):
    return "".join(csv_rows(rows, columns, include_header=include_header, chunk_size=chunk_size))


def csv_response(rows, columns, filename, include_header=True, chunk_size=None):
    response = StreamingHttpResponse(
        csv_rows(rows, columns, include_header=include_header, chunk_size=chunk_size),
        content_type="text/csv; charset=utf-8",
    )
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


class NumberedCanvas(canvas.Canvas):
    """Canvas that knows the total page count when drawing footers ("Page X of Y")."""

    show_page_numbers = True
    footer_text = ""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total):
        width, _ = self._pagesize
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.grey)
        if self.footer_text:
            self.drawString(12 * mm, 8 * mm, self.footer_text)
        if self.show_page_numbers:
            self.drawRightString(width - 12 * mm, 8 * mm, f"Page {self._pageNumber} of {total}")


def render_pdf(
    rows,
    columns,
    title,
    orientation="landscape",
    paper_size="a4",
    include_page_numbers=True,
    include_footer=True,
    subtitle=None,
):
    """Render a titled table to PDF bytes."""
    page = PAPER_SIZES.get((paper_size or "a4").lower())
    if page is None:
        raise ValidationError({"paperSize": f"Unsupported paper size '{paper_size}'."})
    pagesize = landscape(page) if orientation == "landscape" else portrait(page)

    styles = getSampleStyleSheet()
    cell_style = styles["BodyText"].clone("cell", fontSize=7, leading=8.5)
    header_style = cell_style.clone("head", fontName="Helvetica-Bold", textColor=colors.white)

    data = [[Paragraph(escape(label), header_style) for _, label in columns]]
    for row in rows:
        data.append([Paragraph(escape(format_cell(row.get(key))), cell_style) for key, _ in columns])

    table = Table(data, repeatRows=1)
    table_style = [
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    for index in range(2, len(data), 2):
        table_style.append(("BACKGROUND", (0, index), (-1, index), ALTERNATE_FILL))
    table.setStyle(TableStyle(table_style))

    story = [Paragraph(escape(title), styles["Title"])]
    if subtitle:
        story.append(Paragraph(subtitle, styles["Normal"]))
    story.extend([Spacer(1, 4 * mm), table])

    now = timezone.localtime()
    footer = f"Generated on {now.strftime('%d/%m/%Y')} at {now.strftime('%H:%M:%S')}" if include_footer else ""
    page_canvas = type(
        "ExportCanvas",
        (NumberedCanvas,),
        {"show_page_numbers": include_page_numbers, "footer_text": footer},
    )

    output = io.BytesIO()
    document = SimpleDocTemplate(
        output,
        pagesize=pagesize,
        leftMargin=12 * mm,
        rightMargin=12 * mm,
        topMargin=12 * mm,
        bottomMargin=16 * mm,
        title=title,
    )
    document.build(story, canvasmaker=page_canvas)
    logger.debug("Rendered PDF '%s' with %s rows", title, len(data) - 1)
    return output.getvalue()


def pdf_response(content, filename):
    response = HttpResponse(content, content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


def receipt_export_row(receipt):
    return {
        "receiptNumber": receipt.receipt_number,
        "bookNumber": receipt.book_number,
        "date": receipt.date,
        "financialYear": receipt.financial_year,
        "traderName": receipt.trader_name,
        "payeeName": receipt.payee_name,
        "commodity": receipt.commodity,
        "transactionValue": receipt.transaction_value,
        "marketFee": receipt.market_fee,
        "natureOfReceipt": receipt.nature_of_receipt,
        "collectionLocation": receipt.collection_location,
        "committeeName": receipt.committee.name,
        "committeeCode": receipt.committee.code,
        "checkpostName": receipt.checkpost.name if receipt.checkpost_id else "",
        "supervisorName": receipt.supervisor_name or "",
        "createdAt": receipt.created_at,
    }
