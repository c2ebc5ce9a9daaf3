# clinic_app/services/billing_filters.py
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

from clinic_app.schemas.billing import BillingTotals, InvoiceFilter
from clinic_app.services.billing_math import D, money2

# window length in days per date-range filter; age must be strictly below it
DATE_RANGE_DAYS = {"today": 1, "week": 7, "month": 30}

_SECONDS_PER_DAY = 24 * 3600


def _g(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _contains(haystack: Any, needle: str) -> bool:
    if haystack is None:
        return False
    return needle in str(haystack).lower()


def matches_search(invoice: Any, search: str) -> bool:
    term = (search or "").lower()
    if not term:
        return True
    return (_contains(_g(invoice, "invoice_number"), term)
            or _contains(_g(invoice, "patient_name"), term)
            or _contains(_g(invoice, "service_description"), term))


def matches_status(invoice: Any, status: str) -> bool:
    return status == "all" or _g(invoice, "status") == status


def age_in_days(created_at: datetime, now: datetime) -> float:
    delta = _naive_utc(now) - _naive_utc(created_at)
    return delta.total_seconds() / _SECONDS_PER_DAY


def matches_date_range(invoice: Any, date_range: str, now: datetime) -> bool:
    limit = DATE_RANGE_DAYS.get(date_range)
    if limit is None:
        return True
    return age_in_days(_g(invoice, "created_at"), now) < limit


def filter_invoices(
    invoices: Iterable[Any],
    criteria: Optional[InvoiceFilter] = None,
    *,
    now: Optional[datetime] = None,
) -> List[Any]:
    """
    Subset of ``invoices`` passing search AND status AND date-range.

    Order is preserved. ``now`` defaults to the current UTC time; naive
    datetimes are treated as UTC.
    """
    criteria = criteria or InvoiceFilter()
    now = now or datetime.utcnow()
    return [
        inv for inv in invoices
        if matches_search(inv, criteria.search)
        and matches_status(inv, criteria.status)
        and matches_date_range(inv, criteria.date_range, now)
    ]


def billing_totals(invoices: Sequence[Any]) -> BillingTotals:
    """Pending / paid sums over the full collection, whatever the active filter."""
    pending = Decimal("0")
    paid = Decimal("0")
    pending_count = 0
    paid_count = 0
    for inv in invoices:
        st = _g(inv, "status")
        if st == "pending":
            pending += D(_g(inv, "amount"))
            pending_count += 1
        elif st == "paid":
            paid += D(_g(inv, "amount"))
            paid_count += 1
    return BillingTotals(
        pending_total=money2(pending),
        paid_total=money2(paid),
        pending_count=pending_count,
        paid_count=paid_count,
    )


def filter_prescriptions(prescriptions: Iterable[Any],
                         search: str = "") -> List[Any]:
    term = (search or "").lower()
    if not term:
        return list(prescriptions)
    return [
        rx for rx in prescriptions
        if _contains(_g(rx, "medication_name"), term)
        or _contains(_g(rx, "patient_name"), term)
    ]
