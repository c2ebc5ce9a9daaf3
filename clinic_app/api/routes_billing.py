# FILE: clinic_app/api/routes_billing.py
from __future__ import annotations

import logging
from datetime import date
from io import BytesIO
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_app.api.deps import CurrentUser, current_user, get_db
from clinic_app.schemas.billing import (
    DateRangeFilter,
    DoctorInfo,
    InvoiceCreate,
    InvoiceFilter,
    InvoiceListOut,
    InvoiceOut,
    InvoiceStatusIn,
    InvoiceUpdate,
    StatusFilter,
)
from clinic_app.services.billing_export import (
    CSV_MEDIA_TYPE,
    csv_filename,
    invoices_to_csv,
)
from clinic_app.services.billing_filters import billing_totals, filter_invoices
from clinic_app.services.billing_numbers import generate_invoice_number
from clinic_app.services.pdfs.billing_invoice_export import (
    build_invoice_pdf,
    invoice_pdf_filename,
)
from clinic_app.services.repositories import InvoiceRepository, PatientRepository
from clinic_app.services.settings_service import (
    doctor_info_from_profile,
    get_profile,
)
from clinic_app.utils.resp import attachment_headers, ok

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/billing", tags=["Billing"])


# =========================================================
# helpers
# =========================================================
def _invoices(db: Session, user: CurrentUser) -> InvoiceRepository:
    return InvoiceRepository(db, user.id)


def _load_all(repo: InvoiceRepository) -> List[InvoiceOut]:
    try:
        return repo.list()
    except SQLAlchemyError:
        logger.exception("invoice list failed user_id=%s", repo.user_id)
        raise HTTPException(status_code=503, detail="Failed to load invoices")


def _load_one(repo: InvoiceRepository, invoice_id: int) -> InvoiceOut:
    try:
        inv = repo.get(invoice_id)
    except SQLAlchemyError:
        logger.exception("invoice load failed invoice_id=%s", invoice_id)
        raise HTTPException(status_code=503, detail="Failed to load invoice")
    if not inv:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return inv


def _check_patient(db: Session, user: CurrentUser,
                   patient_id: Optional[int]) -> None:
    if patient_id is None:
        return
    if not PatientRepository(db, user.id).get(patient_id):
        raise HTTPException(status_code=404, detail="Patient not found")


def _criteria(search: str, status: str, date_range: str) -> InvoiceFilter:
    return InvoiceFilter(search=search, status=status, date_range=date_range)


def _render_pdf(inv: InvoiceOut, doctor: Optional[DoctorInfo]) -> StreamingResponse:
    try:
        pdf = build_invoice_pdf(inv, doctor)
        filename = invoice_pdf_filename(inv)
    except Exception:
        logger.exception("invoice pdf render failed invoice_id=%s", inv.id)
        raise HTTPException(status_code=500, detail="Failed to generate PDF")

    return StreamingResponse(BytesIO(pdf),
                             media_type="application/pdf",
                             headers=attachment_headers(filename))


# =========================================================
# list / summary / export
# =========================================================
@router.get("/invoices")
def list_invoices(
        search: str = Query(""),
        status: StatusFilter = Query("all"),
        date_range: DateRangeFilter = Query("all"),
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    all_invoices = _load_all(_invoices(db, user))
    criteria = _criteria(search, status, date_range)
    items = filter_invoices(all_invoices, criteria)
    return ok(
        InvoiceListOut(
            items=items,
            totals=billing_totals(all_invoices),
            filters=criteria,
            total_count=len(all_invoices),
        ))


@router.get("/invoices/summary")
def invoice_summary(
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    return ok(billing_totals(_load_all(_invoices(db, user))))


@router.get("/invoices/export.csv")
def export_invoices_csv(
        search: str = Query(""),
        status: StatusFilter = Query("all"),
        date_range: DateRangeFilter = Query("all"),
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    items = filter_invoices(_load_all(_invoices(db, user)),
                            _criteria(search, status, date_range))
    return Response(
        content=invoices_to_csv(items),
        media_type=CSV_MEDIA_TYPE,
        headers=attachment_headers(csv_filename(date.today())),
    )


# =========================================================
# CRUD
# =========================================================
@router.post("/invoices", status_code=201)
def create_invoice(
        payload: InvoiceCreate,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    _check_patient(db, user, payload.patient_id)
    repo = _invoices(db, user)
    number = generate_invoice_number(repo)
    try:
        inv = repo.create(payload, invoice_number=number)
    except IntegrityError:
        db.rollback()
        logger.warning("duplicate invoice number %s", number)
        raise HTTPException(status_code=409,
                            detail="Invoice number already in use, please retry")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("invoice create failed user_id=%s", user.id)
        raise HTTPException(status_code=503, detail="Failed to save invoice")
    logger.info("invoice created number=%s user_id=%s", inv.invoice_number,
                user.id)
    return ok(inv, status_code=201)


@router.get("/invoices/{invoice_id}")
def get_invoice(
        invoice_id: int,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    return ok(_load_one(_invoices(db, user), invoice_id))


@router.put("/invoices/{invoice_id}")
def update_invoice(
        invoice_id: int,
        payload: InvoiceUpdate,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    _check_patient(db, user, payload.patient_id)
    try:
        inv = _invoices(db, user).update(invoice_id, payload)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("invoice update failed invoice_id=%s", invoice_id)
        raise HTTPException(status_code=503, detail="Failed to save invoice")
    if not inv:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return ok(inv)


@router.patch("/invoices/{invoice_id}/status")
def set_invoice_status(
        invoice_id: int,
        payload: InvoiceStatusIn,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    try:
        inv = _invoices(db, user).set_status(invoice_id, payload.status)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("invoice status failed invoice_id=%s", invoice_id)
        raise HTTPException(status_code=503, detail="Failed to save invoice")
    if not inv:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return ok(inv)


@router.delete("/invoices/{invoice_id}")
def delete_invoice(
        invoice_id: int,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    try:
        deleted = _invoices(db, user).delete(invoice_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("invoice delete failed invoice_id=%s", invoice_id)
        raise HTTPException(status_code=503, detail="Failed to delete invoice")
    if not deleted:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return ok({"id": invoice_id, "deleted": True})


# =========================================================
# PDF
# =========================================================
@router.get("/invoices/{invoice_id}/pdf")
def invoice_pdf(
        invoice_id: int,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    inv = _load_one(_invoices(db, user), invoice_id)
    doctor = doctor_info_from_profile(get_profile(db, user.id))
    return _render_pdf(inv, doctor)


@router.post("/invoices/{invoice_id}/pdf")
def invoice_pdf_with_doctor(
        invoice_id: int,
        doctor: Optional[DoctorInfo] = Body(None),
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    """PDF with header identity from the request (print settings dialog)."""
    inv = _load_one(_invoices(db, user), invoice_id)
    return _render_pdf(inv, doctor)
