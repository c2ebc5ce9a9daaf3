# clinic_app/services/billing_numbers.py
from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from clinic_app.models.billing import InvoiceNumberSeries

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV-"


def _period_key(dt: datetime) -> str:
    return dt.strftime("%Y%m")


def next_invoice_number(
    db: Session,
    *,
    user_id: int,
    now: Optional[datetime] = None,
    prefix: str = INVOICE_PREFIX,
    padding: int = 4,
) -> str:
    """Server-side series: INV-YYYYMM-0001, restarting every month per owner."""
    now = now or datetime.utcnow()
    pk = _period_key(now)

    row = (db.query(InvoiceNumberSeries).filter(
        InvoiceNumberSeries.user_id == user_id,
        InvoiceNumberSeries.prefix == prefix,
        InvoiceNumberSeries.period_key == pk,
    ).with_for_update().first())

    if not row:
        row = InvoiceNumberSeries(
            user_id=user_id,
            prefix=prefix,
            period_key=pk,
            next_number=1,
            padding=padding,
        )
        db.add(row)
        db.flush()

    n = int(row.next_number or 1)
    row.next_number = n + 1
    db.flush()

    return f"{prefix}{pk}-{str(n).zfill(int(row.padding or padding))}"


def fallback_invoice_number(now: Optional[datetime] = None,
                            rng: Optional[random.Random] = None) -> str:
    """Client-side number used when the series is unavailable: INV-YYYYMM-NNN."""
    now = now or datetime.now()
    r = rng or random
    return f"{INVOICE_PREFIX}{now.year}{now.month:02d}-{r.randrange(1000):03d}"


def generate_invoice_number(repo,
                            *,
                            now: Optional[datetime] = None,
                            rng: Optional[random.Random] = None) -> str:
    """
    Ask the repository for the next number; any failure falls back to the
    client-side pattern. The failure is logged, never raised.
    """
    try:
        number = repo.generate_number()
        if not number:
            raise ValueError("empty invoice number from series")
        return number
    except Exception:
        logger.warning("invoice number series failed, using fallback",
                       exc_info=True)
        return fallback_invoice_number(now, rng)
