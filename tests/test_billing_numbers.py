"""
Unit tests for invoice number generation.
"""
import random
import re
from datetime import datetime

from clinic_app.services.billing_numbers import (
    fallback_invoice_number,
    generate_invoice_number,
    next_invoice_number,
)
from clinic_app.services.repositories import InvoiceRepository

OCT = datetime(2026, 10, 19, 10, 0)


class _BrokenRepo:
    def generate_number(self):
        raise RuntimeError("rpc down")


class _EmptyRepo:
    def generate_number(self):
        return ""


def test_fallback_pattern():
    """Test INV-YYYYMM-NNN from the fallback generator."""
    number = fallback_invoice_number(OCT, random.Random(7))
    assert re.fullmatch(r"INV-202610-\d{3}", number)


def test_fallback_pads_small_numbers():
    """Test the random part is always three digits."""

    class _Zero:
        def randrange(self, n):
            return 5

    assert fallback_invoice_number(datetime(2026, 1, 2), _Zero()) == "INV-202601-005"


def test_series_failure_uses_fallback(caplog):
    """Test a failing series is logged and never raised."""
    number = generate_invoice_number(_BrokenRepo(), now=OCT, rng=random.Random(1))
    assert re.fullmatch(r"INV-202610-\d{3}", number)
    assert "fallback" in caplog.text


def test_empty_series_result_uses_fallback():
    """Test an empty number from the series falls back too."""
    number = generate_invoice_number(_EmptyRepo(), now=OCT)
    assert number.startswith("INV-202610-")


def test_series_increments_per_owner_and_month(db):
    """Test the server-side series counts per owner and restarts monthly."""
    assert next_invoice_number(db, user_id=1, now=OCT) == "INV-202610-0001"
    assert next_invoice_number(db, user_id=1, now=OCT) == "INV-202610-0002"
    assert next_invoice_number(db, user_id=2, now=OCT) == "INV-202610-0001"
    assert next_invoice_number(db, user_id=1, now=datetime(2026, 11, 1)) == "INV-202611-0001"


def test_repository_number_comes_from_series(db):
    """Test InvoiceRepository.generate_number through the series."""
    repo = InvoiceRepository(db, 1)
    assert re.fullmatch(r"INV-\d{6}-0001", generate_invoice_number(repo))
    assert re.fullmatch(r"INV-\d{6}-0002", generate_invoice_number(repo))
