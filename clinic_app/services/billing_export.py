# clinic_app/services/billing_export.py
from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Any, Iterable, Optional

from clinic_app.services.billing_math import money2

CSV_HEADERS = [
    "Invoice #",
    "Patient",
    "Service",
    "Amount",
    "Due Date",
    "Status",
    "Created At",
]
CSV_MEDIA_TYPE = "text/csv"


def _g(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _iso_date(v: Any) -> str:
    if isinstance(v, datetime):
        return v.date().isoformat()
    if isinstance(v, date):
        return v.isoformat()
    return "" if v is None else str(v)


def invoice_csv_row(inv: Any) -> list[str]:
    return [
        str(_g(inv, "invoice_number", "") or ""),
        str(_g(inv, "patient_name", "") or ""),
        str(_g(inv, "service_description", "") or ""),
        f"{money2(_g(inv, 'amount', 0)):.2f}",
        _iso_date(_g(inv, "due_date")),
        str(_g(inv, "status", "") or ""),
        _iso_date(_g(inv, "created_at")),
    ]


def invoices_to_csv(invoices: Iterable[Any]) -> str:
    """
    Header + one row per invoice, '\\n'-separated, no trailing newline.

    Plain fields come out exactly as a comma join; a field holding a comma,
    quote or newline is quoted (RFC 4180) instead of breaking the row.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADERS)
    for inv in invoices:
        writer.writerow(invoice_csv_row(inv))
    return buf.getvalue().rstrip("\n")


def csv_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"invoices_{today.isoformat()}.csv"
