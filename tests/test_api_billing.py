"""
API tests for invoices: CRUD, list filters, totals, CSV and PDF downloads.
"""
import re
from datetime import datetime, timedelta

from clinic_app.models import Invoice


def _create(client, headers, patient_id=None, **kw):
    body = {
        "patient_id": patient_id,
        "service_description": "General consultation",
        "amount": "100.00",
        "due_date": "2026-11-18",
    }
    body.update(kw)
    return client.post("/api/billing/invoices", json=body, headers=headers)


def test_requires_token(client):
    """Test that the invoice list needs a bearer token."""
    response = client.get("/api/billing/invoices")
    assert response.status_code == 401
    assert response.json() == {"status": False, "data": None,
                               "error": {"msg": "Missing token"}}


def test_rejects_bad_token(client):
    """Test a token signed with another secret."""
    response = client.get("/api/billing/invoices",
                          headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401


def test_create_invoice(client, auth_headers, patient):
    """Test creating an invoice numbers it and starts it pending."""
    response = _create(client, auth_headers, patient.id)
    assert response.status_code == 201
    data = response.json()["data"]
    assert re.fullmatch(r"INV-\d{6}-0001", data["invoice_number"])
    assert data["status"] == "pending"
    assert data["patient_name"] == "Jane Smith"
    assert data["amount"] == "100.00"


def test_create_invoice_validation(client, auth_headers):
    """Test a blank description is rejected."""
    response = _create(client, auth_headers, service_description="  ")
    assert response.status_code == 422
    assert response.json()["error"]["msg"] == "Validation error"


def test_create_invoice_unknown_patient(client, auth_headers):
    """Test an invoice for a patient the owner does not have."""
    assert _create(client, auth_headers, patient_id=999).status_code == 404


def test_list_filters_and_totals(client, auth_headers, patient, db):
    """Test filtered items while totals cover every invoice."""
    _create(client, auth_headers, patient.id, amount="100.00")
    second = _create(client, auth_headers, None, amount="50.00",
                     service_description="X-Ray").json()["data"]
    client.patch(f"/api/billing/invoices/{second['id']}/status",
                 json={"status": "paid"}, headers=auth_headers)

    old = db.get(Invoice, second["id"])
    old.created_at = datetime.utcnow() - timedelta(days=10)
    db.commit()

    response = client.get("/api/billing/invoices", headers=auth_headers)
    body = response.json()["data"]
    assert len(body["items"]) == 2
    assert body["totals"]["pending_total"] == "100.00"
    assert body["totals"]["paid_total"] == "50.00"

    response = client.get("/api/billing/invoices",
                          params={"date_range": "week"}, headers=auth_headers)
    body = response.json()["data"]
    assert [i["service_description"] for i in body["items"]] == ["General consultation"]
    assert body["totals"]["paid_total"] == "50.00"
    assert body["total_count"] == 2

    response = client.get("/api/billing/invoices",
                          params={"search": "JANE"}, headers=auth_headers)
    assert len(response.json()["data"]["items"]) == 1


def test_list_rejects_unknown_filter(client, auth_headers):
    """Test an unsupported status filter value."""
    response = client.get("/api/billing/invoices", params={"status": "void"},
                          headers=auth_headers)
    assert response.status_code == 422


def test_invoices_are_owner_scoped(client, auth_headers, other_headers):
    """Test another owner cannot see or change an invoice."""
    inv = _create(client, auth_headers).json()["data"]
    assert client.get("/api/billing/invoices",
                      headers=other_headers).json()["data"]["items"] == []
    assert client.delete(f"/api/billing/invoices/{inv['id']}",
                         headers=other_headers).status_code == 404


def test_update_and_status_are_permissive(client, auth_headers):
    """Test any status can follow any other and paid invoices can be deleted."""
    inv = _create(client, auth_headers).json()["data"]
    url = f"/api/billing/invoices/{inv['id']}"

    response = client.put(url, json={
        "service_description": "Follow-up",
        "amount": "80",
        "due_date": "2026-12-01",
        "status": "paid",
    }, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "paid"
    assert response.json()["data"]["amount"] == "80.00"

    response = client.patch(f"{url}/status", json={"status": "pending"},
                            headers=auth_headers)
    assert response.json()["data"]["status"] == "pending"
    client.patch(f"{url}/status", json={"status": "paid"}, headers=auth_headers)

    assert client.delete(url, headers=auth_headers).status_code == 200
    assert client.get(url, headers=auth_headers).status_code == 404


def test_csv_export(client, auth_headers, patient):
    """Test the CSV download of the filtered view."""
    _create(client, auth_headers, patient.id, service_description="Consultation, extended")
    _create(client, auth_headers, None, service_description="X-Ray")

    response = client.get("/api/billing/invoices/export.csv",
                          params={"search": "x-ray"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "invoices_" in response.headers["content-disposition"]
    lines = response.text.split("\n")
    assert len(lines) == 2
    assert lines[0].startswith("Invoice #,Patient,Service")

    response = client.get("/api/billing/invoices/export.csv", headers=auth_headers)
    assert '"Consultation, extended"' in response.text


def test_invoice_pdf_download(client, auth_headers, patient):
    """Test the PDF download and its file name."""
    inv = _create(client, auth_headers, patient.id).json()["data"]
    response = client.get(f"/api/billing/invoices/{inv['id']}/pdf",
                          headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    disposition = response.headers["content-disposition"]
    assert f"Invoice_{inv['invoice_number']}_Jane_Smith_" in disposition


def test_invoice_pdf_with_doctor_body(client, auth_headers):
    """Test the PDF endpoint that takes the doctor identity in the body."""
    inv = _create(client, auth_headers).json()["data"]
    response = client.post(f"/api/billing/invoices/{inv['id']}/pdf", json={
        "name": "Dr. Meera Rao",
        "clinic": "Rao Clinic",
        "address": "12 Lake Road",
        "phone": "044-1234",
        "email": "meera@clinic.test",
    }, headers=auth_headers)
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")


def test_invoice_pdf_render_failure(client, auth_headers, monkeypatch):
    """Test a render error becomes a short 500 message."""
    from clinic_app.api import routes_billing

    def _boom(*args, **kwargs):
        raise ValueError("bad date")

    monkeypatch.setattr(routes_billing, "build_invoice_pdf", _boom)
    inv = _create(client, auth_headers).json()["data"]
    response = client.get(f"/api/billing/invoices/{inv['id']}/pdf",
                          headers=auth_headers)
    assert response.status_code == 500
    assert response.json()["error"]["msg"] == "Failed to generate PDF"


def test_invoice_pdf_not_found(client, auth_headers):
    """Test the PDF of a missing invoice."""
    response = client.get("/api/billing/invoices/404/pdf", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"]["msg"] == "Invoice not found"


def test_summary(client, auth_headers):
    """Test the totals-only endpoint."""
    _create(client, auth_headers, amount="30.00")
    body = client.get("/api/billing/invoices/summary", headers=auth_headers).json()["data"]
    assert body["pending_total"] == "30.00"
    assert body["pending_count"] == 1
