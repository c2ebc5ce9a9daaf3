# FILE: clinic_app/services/pdfs/common.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Callable, List, Optional

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from clinic_app.core.config import settings
from clinic_app.services.billing_math import CURRENCY_SYMBOL

logger = logging.getLogger(__name__)


# ----------------------------
# fonts
# ----------------------------
@dataclass(frozen=True)
class FontSet:
    regular: str
    bold: str
    italic: str


BUILTIN_FONTS = FontSet("Helvetica", "Helvetica-Bold", "Helvetica-Oblique")


def _register(name: str, path: str) -> str:
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, path))
    return name


def get_fonts() -> FontSet:
    """
    Configured TTF fonts (needed for the rupee glyph) or the builtin
    Helvetica family. A TTF that fails to load is logged and skipped.
    """
    if not settings.PDF_FONT_PATH:
        return BUILTIN_FONTS
    try:
        regular = _register("ClinicSans", settings.PDF_FONT_PATH)
        bold = regular
        if settings.PDF_FONT_BOLD_PATH:
            bold = _register("ClinicSans-Bold", settings.PDF_FONT_BOLD_PATH)
    except Exception:
        logger.exception("PDF font registration failed path=%s",
                         settings.PDF_FONT_PATH)
        return BUILTIN_FONTS
    return FontSet(regular, bold, regular)


PLAIN_CURRENCY = "Rs."


@lru_cache(maxsize=None)
def currency_for(font_name: str) -> str:
    """
    ``CURRENCY_SYMBOL`` when ``font_name`` has a glyph for it, else 'Rs.'.
    Standard Type 1 fonts never do.
    """
    face = getattr(pdfmetrics.getFont(font_name), "face", None)
    glyphs = getattr(face, "charToGlyph", None) or {}
    if ord(CURRENCY_SYMBOL) in glyphs:
        return CURRENCY_SYMBOL
    logger.warning("font %s has no %s glyph, printing amounts with %r",
                   font_name, CURRENCY_SYMBOL, PLAIN_CURRENCY)
    return PLAIN_CURRENCY


# ----------------------------
# helpers (safe formatting)
# ----------------------------
def _g(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _s(v: Any, dash: str = "") -> str:
    if v is None:
        return dash
    s = str(v).strip()
    return s if s else dash


def parse_date(v: Any) -> date:
    """
    date / datetime / ISO string -> date. Anything else raises ValueError;
    callers treat that as a render failure.
    """
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    s = str(v or "").strip()
    if not s:
        raise ValueError("missing date")
    return datetime.fromisoformat(s.replace("Z", "+00:00")).date()


def long_date(v: Any) -> str:
    """'October 19, 2026'"""
    d = parse_date(v)
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def wrap_text(text: str, font: str, size: float, max_w: float) -> List[str]:
    s = (text or "").replace("\r", "")
    lines: List[str] = []
    for para in s.split("\n"):
        lines.extend(simpleSplit(para, font, size, max_w) or [""])
    while len(lines) > 1 and not lines[-1]:
        lines.pop()
    return lines or [""]


def fit_text(text: str, font: str, size: float, max_w: float) -> str:
    """Single line, truncated with '...' to fit max_w."""
    s = _s(text)
    if pdfmetrics.stringWidth(s, font, size) <= max_w:
        return s
    while s and pdfmetrics.stringWidth(s + "...", font, size) > max_w:
        s = s[:-1]
    return s.rstrip() + "..."


# ----------------------------
# "Page X of Y" canvas
# ----------------------------
class NumberedCanvas(canvas.Canvas):
    """
    Holds every finished page until save() so the footer can print the page
    count. Drawing code must call showPage() after each page, the last too.
    ``decorate_page(canv, page_no, page_count)`` draws the per-page footer.
    """

    def __init__(self,
                 *args,
                 decorate_page: Optional[Callable] = None,
                 **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: List[dict] = []
        self._decorate_page = decorate_page

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            if self._decorate_page:
                self._decorate_page(self, self.getPageNumber(), total)
            super().showPage()
        super().save()
