"""
Unit tests for the invoice CSV export.
"""
import csv
import io
from datetime import date, datetime, timedelta
from decimal import Decimal

from conftest import make_invoice
from clinic_app.services.billing_export import (
    CSV_HEADERS,
    csv_filename,
    invoices_to_csv,
)

NOW = datetime(2026, 10, 19, 12, 0)


def test_two_invoices_give_three_lines():
    """Test header plus one line per invoice, columns in fixed order."""
    invoices = [
        make_invoice(invoice_number="INV-1", patient_name="Alice",
                     service_description="Consultation",
                     amount=Decimal("100"), status="pending", created_at=NOW,
                     due_date=date(2026, 11, 18)),
        make_invoice(invoice_number="INV-2", patient_name="Bob",
                     service_description="X-Ray", amount=Decimal("50.5"),
                     status="paid", created_at=NOW - timedelta(days=10),
                     due_date=date(2026, 10, 31)),
    ]
    text = invoices_to_csv(invoices)
    lines = text.split("\n")

    assert len(lines) == 3
    assert lines[0] == "Invoice #,Patient,Service,Amount,Due Date,Status,Created At"
    assert lines[1] == "INV-1,Alice,Consultation,100.00,2026-11-18,pending,2026-10-19"
    assert lines[2] == "INV-2,Bob,X-Ray,50.50,2026-10-31,paid,2026-10-09"
    assert not text.endswith("\n")


def test_empty_view_is_header_only():
    """Test export of an empty filtered view."""
    assert invoices_to_csv([]) == ",".join(CSV_HEADERS)


def test_embedded_comma_is_quoted():
    """Test that a description with a comma stays in one column."""
    inv = make_invoice(service_description='Consultation, "follow-up"')
    text = invoices_to_csv([inv])
    rows = list(csv.reader(io.StringIO(text)))

    assert len(rows) == 2
    assert len(rows[1]) == len(CSV_HEADERS)
    assert rows[1][2] == 'Consultation, "follow-up"'


def test_missing_patient_exports_empty_cell():
    """Test an orphaned invoice in the export."""
    inv = make_invoice(patient_name=None)
    row = invoices_to_csv([inv]).split("\n")[1].split(",")
    assert row[1] == ""


def test_csv_filename():
    """Test the download name uses today's ISO date."""
    assert csv_filename(date(2026, 10, 19)) == "invoices_2026-10-19.csv"
