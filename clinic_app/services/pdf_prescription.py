# FILE: clinic_app/services/pdf_prescription.py
from __future__ import annotations

from io import BytesIO
from typing import Any, List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from clinic_app.services.pdfs.common import (
    _g,
    _s,
    fit_text,
    get_fonts,
    long_date,
    parse_date,
    wrap_text,
)

PAGE_W, PAGE_H = A4
LEFT = 20 * mm
BOX_W = 170 * mm
INSTRUCTION_LINE_H = 5 * mm

CLINIC_NAME = "DoctorConnect Healthcare"
DISCLAIMER = "This is a computer generated prescription"

# the signature line must stay above the disclaimer
_SIGNATURE_GAP = 30 * mm
_LAST_SIGNATURE_TOP = 265 * mm


def _cap_lines(lines: List[str], max_lines: int) -> List[str]:
    if len(lines) <= max_lines:
        return lines
    trimmed = lines[:max(1, max_lines)]
    last = trimmed[-1].rstrip()
    trimmed[-1] = (last[:-3] if len(last) > 6 else last) + "..."
    return trimmed


def prescription_pdf_filename(rx: Any) -> str:
    return (f"prescription_{_s(_g(rx, 'patient_name'))}_"
            f"{parse_date(_g(rx, 'prescribed_date')).isoformat()}.pdf")


def build_prescription_pdf(rx: Any, *, compress: bool = True) -> bytes:
    """
    Single-page prescription. ``rx`` is a ``PrescriptionDocument`` (or a
    dict with the same keys). The instructions block is drawn only when
    ``special_instructions`` has text.
    """
    f = get_fonts()
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4, pageCompression=1 if compress else 0)
    c.setTitle("Prescription")

    def Y(top_mm: float) -> float:
        return PAGE_H - top_mm * mm

    # title
    c.setFillColor(colors.black)
    c.setFont(f.bold, 20)
    c.drawCentredString(PAGE_W / 2, Y(30), "PRESCRIPTION")

    # clinic / doctor + date
    c.setFont(f.regular, 12)
    c.drawString(LEFT, Y(50), CLINIC_NAME)
    c.drawString(LEFT, Y(60),
                 fit_text(f"Dr. {_s(_g(rx, 'doctor_name'))}", f.regular, 12,
                          110 * mm))
    c.drawString(LEFT, Y(70), "Medical Practitioner")
    c.drawRightString(LEFT + BOX_W, Y(50),
                      f"Date: {long_date(_g(rx, 'prescribed_date'))}")

    # patient
    c.setFont(f.bold, 12)
    c.drawString(LEFT, Y(90), "Patient Information:")
    c.setFont(f.regular, 12)
    c.drawString(LEFT, Y(100),
                 fit_text(f"Name: {_s(_g(rx, 'patient_name'))}", f.regular, 12,
                          BOX_W))

    # medication box
    c.setFont(f.bold, 12)
    c.drawString(LEFT, Y(120), "Prescription Details:")
    c.setStrokeColor(colors.black)
    c.setLineWidth(0.6)
    c.rect(LEFT, Y(170), BOX_W, 45 * mm, stroke=1, fill=0)

    c.setFont(f.regular, 12)
    rows = [
        ("Medication", _g(rx, "medication_name")),
        ("Dosage", _g(rx, "dosage")),
        ("Frequency", _g(rx, "frequency")),
        ("Duration", _g(rx, "duration")),
    ]
    for i, (label, value) in enumerate(rows):
        c.drawString(LEFT + 5 * mm, Y(135 + i * 10),
                     fit_text(f"{label}: {_s(value)}", f.regular, 12,
                              BOX_W - 10 * mm))

    y_top = 185 * mm

    # special instructions (optional)
    instructions = _s(_g(rx, "special_instructions"))
    if instructions:
        c.setFont(f.bold, 12)
        c.drawString(LEFT, PAGE_H - y_top, "Special Instructions:")
        c.setFont(f.regular, 11)
        lines = wrap_text(instructions, f.regular, 11, BOX_W)
        room = int((_LAST_SIGNATURE_TOP - _SIGNATURE_GAP - y_top - 10 * mm)
                   // INSTRUCTION_LINE_H)
        lines = _cap_lines(lines, room)
        for i, ln in enumerate(lines):
            c.drawString(LEFT,
                         PAGE_H - (y_top + 10 * mm + i * INSTRUCTION_LINE_H),
                         ln)
        y_top += 10 * mm + len(lines) * INSTRUCTION_LINE_H

    # signature
    y_top = min(y_top + _SIGNATURE_GAP, _LAST_SIGNATURE_TOP)
    c.setFont(f.bold, 12)
    c.drawString(LEFT, PAGE_H - y_top,
                 "Doctor Signature: ____________________")

    # disclaimer
    c.setFont(f.italic, 10)
    c.drawCentredString(PAGE_W / 2, Y(280), DISCLAIMER)

    c.showPage()
    c.save()
    return buf.getvalue()
