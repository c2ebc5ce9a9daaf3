# FILE: clinic_app/services/pdfs/billing_invoice_export.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from typing import Any, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

from clinic_app.core.config import settings
from clinic_app.schemas.billing import DEFAULT_DOCTOR_INFO, DoctorInfo
from clinic_app.services.billing_math import format_money
from clinic_app.services.pdfs.common import (
    FontSet,
    NumberedCanvas,
    currency_for,
    _g,
    _s,
    fit_text,
    get_fonts,
    long_date,
    parse_date,
    wrap_text,
)

logger = logging.getLogger(__name__)

PAGE_W, PAGE_H = A4
MARGIN = 20 * mm
CONTENT_W = PAGE_W - 2 * MARGIN

HEADER_BAND_H = 35 * mm
TITLE_BOX_W = 75 * mm
DETAILS_TOP = 42 * mm
DETAILS_BOX_H = 40 * mm

# service table
TABLE_HEADER_H = 12 * mm
AMOUNT_COL_W = 40 * mm
CELL_PAD = 5 * mm
DESC_COL_W = CONTENT_W - AMOUNT_COL_W
DESC_TEXT_W = DESC_COL_W - 2 * CELL_PAD
MIN_ROW_HEIGHT = 20 * mm
LINE_HEIGHT = 5 * mm
BODY_SIZE = 10

FOOTER_H = 40 * mm
CONTENT_BOTTOM = PAGE_H - FOOTER_H - 5 * mm  # measured from the top

PATIENT_NAME_FALLBACK = "Patient Name"

PAYMENT_TERMS = [
    "• Payment is due within 30 days of invoice date",
    "• Late payments may be subject to additional fees",
    "• Accepted payment methods:",
    "  - Bank Transfer",
    "  - Credit/Debit Card",
    "  - Cash (in-person only)",
    "• For payment inquiries, contact us at the number above",
]

LIGHT_GRAY = colors.Color(240 / 255, 240 / 255, 240 / 255)
ROW_FILL = colors.Color(250 / 255, 250 / 255, 250 / 255)
TOTAL_FILL = colors.Color(245 / 255, 245 / 255, 245 / 255)
RULE = colors.Color(200 / 255, 200 / 255, 200 / 255)


@dataclass(frozen=True)
class ServiceRow:
    lines: List[str]
    height: float


def service_row_layout(description: str,
                       *,
                       font: str = "Helvetica",
                       size: float = BODY_SIZE,
                       width: float = DESC_TEXT_W) -> ServiceRow:
    """Wrapped description and row height = max(MIN_ROW_HEIGHT, lines * LINE_HEIGHT)."""
    lines = wrap_text(_s(description), font, size, width)
    return ServiceRow(lines=lines,
                      height=max(MIN_ROW_HEIGHT, len(lines) * LINE_HEIGHT))


def bill_to_name(invoice: Any) -> str:
    return _s(_g(invoice, "patient_name")) or PATIENT_NAME_FALLBACK


def invoice_pdf_filename(invoice: Any) -> str:
    patient = _s(_g(invoice, "patient_name"))
    patient = re.sub(r"\s+", "_", patient) if patient else "patient"
    created = _g(invoice, "created_at")
    if isinstance(created, datetime) and created.tzinfo is not None:
        created = created.astimezone(timezone.utc)
    return (f"Invoice_{_s(_g(invoice, 'invoice_number'))}_{patient}_"
            f"{parse_date(created).isoformat()}.pdf")


def _generated_stamp(generated_at: Optional[datetime]) -> str:
    try:
        tz = ZoneInfo(settings.TIMEZONE)
    except ZoneInfoNotFoundError:
        logger.warning("unknown timezone %s, stamping in UTC", settings.TIMEZONE)
        tz = timezone.utc
    dt = generated_at or datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz).strftime("%d %b %Y, %I:%M %p")


class _InvoiceLayout:
    """
    Draws top-down; ``top`` is the cursor measured from the top edge of the
    page in points.
    """

    def __init__(self, c: NumberedCanvas, fonts: FontSet, accent):
        self.c = c
        self.f = fonts
        self.accent = accent
        self.top = 0.0

    def y(self, top: float) -> float:
        return PAGE_H - top

    def new_page(self) -> None:
        self.c.showPage()
        self.top = MARGIN

    def ensure(self, needed: float) -> None:
        if self.top + needed > CONTENT_BOTTOM:
            self.new_page()

    def rect(self, x: float, top: float, w: float, h: float, **kw) -> None:
        self.c.rect(x, self.y(top + h), w, h, **kw)

    def money(self, value: Any) -> str:
        # amounts are always drawn in the bold face
        return format_money(value, symbol=currency_for(self.f.bold))

    # ---------------- 1. header band ----------------
    def header(self, invoice: Any, doctor: DoctorInfo) -> None:
        c = self.c
        c.setFillColor(self.accent)
        self.rect(0, 0, PAGE_W, HEADER_BAND_H, stroke=0, fill=1)

        text_w = PAGE_W - MARGIN - TITLE_BOX_W - 10 * mm
        c.setFillColor(colors.white)
        c.setFont(self.f.bold, 20)
        c.drawString(MARGIN, self.y(25 * mm),
                     fit_text(doctor.clinic, self.f.bold, 20, text_w))
        c.setFont(self.f.regular, 10)
        c.drawString(MARGIN, self.y(32 * mm),
                     fit_text(doctor.address, self.f.regular, 10, text_w))

        box_x = PAGE_W - TITLE_BOX_W - 5 * mm
        c.setFillColor(LIGHT_GRAY)
        self.rect(box_x, 5 * mm, TITLE_BOX_W, 25 * mm, stroke=0, fill=1)

        right = box_x + TITLE_BOX_W - 5 * mm
        c.setFillColor(colors.black)
        c.setFont(self.f.bold, 18)
        c.drawRightString(right, self.y(18 * mm), "INVOICE")
        c.setFont(self.f.regular, 10)
        c.drawRightString(right, self.y(26 * mm),
                          f"# {_s(_g(invoice, 'invoice_number'))}")

        self.top = DETAILS_TOP

    # ---------------- 2. details panel ----------------
    def details(self, invoice: Any, doctor: DoctorInfo) -> None:
        c = self.c
        top = self.top
        c.setStrokeColor(RULE)
        c.setLineWidth(0.5)
        self.rect(MARGIN, top, CONTENT_W, DETAILS_BOX_H, stroke=1, fill=0)

        left_x = MARGIN + 5 * mm
        right_x = MARGIN + CONTENT_W / 2
        col_w = CONTENT_W / 2 - 5 * mm

        c.setFillColor(colors.black)
        c.setFont(self.f.bold, 12)
        c.drawString(left_x, self.y(top + 8 * mm), "Invoice Details")

        c.setFont(self.f.regular, 10)
        c.drawString(left_x, self.y(top + 18 * mm),
                     f"Invoice Date: {long_date(_g(invoice, 'created_at'))}")
        c.drawString(left_x, self.y(top + 28 * mm),
                     f"Due Date: {long_date(_g(invoice, 'due_date'))}")

        status = _s(_g(invoice, "status")).upper()
        rows = [
            f"Status: {status}",
            f"Doctor: {doctor.name}",
            f"Phone: {doctor.phone}",
            f"Email: {doctor.email}",
        ]
        for i, txt in enumerate(rows):
            font = self.f.bold if i == 0 else self.f.regular
            c.setFont(font, 10)
            c.drawString(right_x, self.y(top + (8 + i * 8) * mm),
                         fit_text(txt, font, 10, col_w))

        self.top = top + DETAILS_BOX_H + 8 * mm

    # ---------------- 3. bill to ----------------
    def bill_to(self, invoice: Any) -> None:
        c = self.c
        top = self.top
        c.setFont(self.f.bold, 12)
        c.drawString(MARGIN, self.y(top), "Bill To:")
        c.setFont(self.f.regular, 11)
        c.drawString(MARGIN, self.y(top + 7 * mm),
                     fit_text(bill_to_name(invoice), self.f.regular, 11,
                              CONTENT_W))
        c.drawString(MARGIN, self.y(top + 13 * mm), "Patient")
        self.top = top + 20 * mm

    # ---------------- 4. service table ----------------
    def _table_header(self) -> None:
        c = self.c
        top = self.top
        c.setFillColor(self.accent)
        self.rect(MARGIN, top, CONTENT_W, TABLE_HEADER_H, stroke=0, fill=1)
        c.setFillColor(colors.white)
        c.setFont(self.f.bold, 11)
        c.drawString(MARGIN + CELL_PAD, self.y(top + 8 * mm),
                     "Service Description")
        c.drawRightString(MARGIN + CONTENT_W - CELL_PAD, self.y(top + 8 * mm),
                          "Amount")
        self.top = top + TABLE_HEADER_H

    def _row_segment(self, lines: List[str], height: float,
                     amount: Optional[str]) -> None:
        c = self.c
        top = self.top
        c.setFillColor(ROW_FILL)
        self.rect(MARGIN, top, CONTENT_W, height, stroke=0, fill=1)

        c.setFillColor(colors.black)
        c.setFont(self.f.regular, BODY_SIZE)
        for i, ln in enumerate(lines):
            c.drawString(MARGIN + CELL_PAD,
                         self.y(top + (i + 1) * LINE_HEIGHT - 1.2 * mm), ln)

        if amount is not None:
            c.setFont(self.f.bold, BODY_SIZE)
            c.drawRightString(MARGIN + CONTENT_W - CELL_PAD,
                              self.y(top + LINE_HEIGHT - 1.2 * mm), amount)

        # borders: outer box + amount column divider
        c.setStrokeColor(RULE)
        c.setLineWidth(0.5)
        self.rect(MARGIN, top, CONTENT_W, height, stroke=1, fill=0)
        div_x = MARGIN + DESC_COL_W
        c.line(div_x, self.y(top), div_x, self.y(top + height))
        self.top = top + height

    def service_table(self, invoice: Any) -> ServiceRow:
        row = service_row_layout(_g(invoice, "service_description"),
                                 font=self.f.regular)
        amount: Optional[str] = self.money(_g(invoice, "amount"))

        self.ensure(TABLE_HEADER_H + min(row.height, MIN_ROW_HEIGHT))
        self._table_header()

        if self.top + row.height <= CONTENT_BOTTOM:
            self._row_segment(row.lines, row.height, amount)
        else:
            # continue the description on following pages, header repeated
            remaining = list(row.lines)
            while remaining:
                fit = int((CONTENT_BOTTOM - self.top) // LINE_HEIGHT)
                if fit < 1:
                    self.new_page()
                    self._table_header()
                    continue
                chunk, remaining = remaining[:fit], remaining[fit:]
                self._row_segment(chunk, len(chunk) * LINE_HEIGHT, amount)
                amount = None
                if remaining:
                    self.new_page()
                    self._table_header()

        self.top += 8 * mm
        return row

    # ---------------- 5. totals ----------------
    def totals(self, invoice: Any) -> None:
        c = self.c
        box_h = 20 * mm
        self.ensure(box_h)
        top = self.top
        box_x = PAGE_W - MARGIN - TITLE_BOX_W
        c.setFillColor(TOTAL_FILL)
        self.rect(box_x, top, TITLE_BOX_W, box_h, stroke=0, fill=1)
        c.setFillColor(colors.black)
        c.setFont(self.f.bold, 12)
        c.drawString(box_x + 5 * mm, self.y(top + 8 * mm), "Total Amount:")
        c.drawString(box_x + 5 * mm, self.y(top + 16 * mm),
                     self.money(_g(invoice, "amount")))
        self.top = top + box_h + 8 * mm

    # ---------------- 6. payment terms ----------------
    def payment_terms(self) -> None:
        c = self.c
        self.ensure(7 * mm + len(PAYMENT_TERMS) * LINE_HEIGHT)
        top = self.top
        c.setFont(self.f.bold, 11)
        c.drawString(MARGIN, self.y(top), "Payment Terms & Methods")
        c.setFont(self.f.regular, 10)
        for i, term in enumerate(PAYMENT_TERMS):
            c.drawString(MARGIN, self.y(top + 7 * mm + i * LINE_HEIGHT), term)
        self.top = top + 7 * mm + len(PAYMENT_TERMS) * LINE_HEIGHT


def _footer_drawer(fonts: FontSet, stamp: str):

    def _draw(canv, page_no: int, page_count: int) -> None:
        footer_y = FOOTER_H  # canvas y, measured from the bottom edge
        canv.saveState()
        canv.setStrokeColor(RULE)
        canv.setLineWidth(0.5)
        canv.line(MARGIN, footer_y, PAGE_W - MARGIN, footer_y)

        canv.setFillColor(colors.black)
        canv.setFont(fonts.italic, 9)
        canv.drawCentredString(PAGE_W / 2, footer_y - 8 * mm,
                               "Thank you for choosing our healthcare services!")
        canv.drawCentredString(
            PAGE_W / 2, footer_y - 14 * mm,
            "For any questions regarding this invoice, please contact us.")
        canv.setFont(fonts.regular, 8)
        canv.drawCentredString(PAGE_W / 2, footer_y - 20 * mm,
                               f"Generated on {stamp}")
        canv.drawRightString(PAGE_W - MARGIN, 10 * mm,
                             f"Page {page_no} of {page_count}")
        canv.restoreState()

    return _draw


def build_invoice_pdf(
    invoice: Any,
    doctor: Optional[DoctorInfo] = None,
    *,
    generated_at: Optional[datetime] = None,
    compress: bool = True,
) -> bytes:
    """
    Render one invoice to PDF bytes.

    ``invoice`` is an ``InvoiceOut`` (or any object / dict with the same
    fields). A missing ``doctor`` is replaced by the full default identity.
    Layout errors, e.g. an unparsable date, propagate; nothing is returned
    until the whole document has been drawn.
    """
    doctor = doctor or DEFAULT_DOCTOR_INFO
    fonts = get_fonts()

    buf = BytesIO()
    c = NumberedCanvas(
        buf,
        pagesize=A4,
        pageCompression=1 if compress else 0,
        decorate_page=_footer_drawer(fonts, _generated_stamp(generated_at)),
    )
    c.setTitle(f"Invoice {_s(_g(invoice, 'invoice_number'))}")
    c.setAuthor(doctor.clinic)

    lay = _InvoiceLayout(c, fonts, colors.HexColor(settings.PDF_ACCENT_COLOR))
    lay.header(invoice, doctor)
    lay.details(invoice, doctor)
    lay.bill_to(invoice)
    lay.service_table(invoice)
    lay.totals(invoice)
    lay.payment_terms()

    c.showPage()
    c.save()
    return buf.getvalue()
