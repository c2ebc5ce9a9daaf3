# FILE: clinic_app/api/routes_prescriptions.py
from __future__ import annotations

import logging
from io import BytesIO

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_app.api.deps import CurrentUser, current_user, get_db
from clinic_app.schemas.prescription import (
    PrescriptionCreate,
    PrescriptionDocument,
    PrescriptionOut,
    PrescriptionUpdate,
)
from clinic_app.services.billing_filters import filter_prescriptions
from clinic_app.services.pdf_prescription import (
    build_prescription_pdf,
    prescription_pdf_filename,
)
from clinic_app.services.repositories import (
    PatientRepository,
    PrescriptionRepository,
)
from clinic_app.services.settings_service import (
    doctor_display_name,
    get_profile,
)
from clinic_app.utils.resp import attachment_headers, ok

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

UNKNOWN_PATIENT = "Unknown Patient"


def _repo(db: Session, user: CurrentUser) -> PrescriptionRepository:
    return PrescriptionRepository(db, user.id)


def _load_one(repo: PrescriptionRepository, rx_id: int) -> PrescriptionOut:
    try:
        rx = repo.get(rx_id)
    except SQLAlchemyError:
        logger.exception("prescription load failed rx_id=%s", rx_id)
        raise HTTPException(status_code=503,
                            detail="Failed to load prescription")
    if not rx:
        raise HTTPException(status_code=404, detail="Prescription not found")
    return rx


def _check_patient(db: Session, user: CurrentUser, patient_id) -> None:
    if patient_id is not None and not PatientRepository(db, user.id).get(patient_id):
        raise HTTPException(status_code=404, detail="Patient not found")


def to_document(rx: PrescriptionOut, doctor_name: str) -> PrescriptionDocument:
    return PrescriptionDocument(
        patient_name=rx.patient_name or UNKNOWN_PATIENT,
        medication_name=rx.medication_name,
        dosage=rx.dosage,
        frequency=rx.frequency,
        duration=rx.duration,
        special_instructions=rx.special_instructions,
        prescribed_date=rx.prescribed_date,
        doctor_name=doctor_name,
    )


@router.get("")
def list_prescriptions(
        search: str = Query(""),
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    try:
        rows = _repo(db, user).list()
    except SQLAlchemyError:
        logger.exception("prescription list failed user_id=%s", user.id)
        raise HTTPException(status_code=503,
                            detail="Failed to load prescriptions")
    return ok(filter_prescriptions(rows, search))


@router.post("", status_code=201)
def create_prescription(
        payload: PrescriptionCreate,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    _check_patient(db, user, payload.patient_id)
    try:
        rx = _repo(db, user).create(payload)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("prescription create failed user_id=%s", user.id)
        raise HTTPException(status_code=503,
                            detail="Failed to save prescription")
    return ok(rx, status_code=201)


@router.get("/{rx_id}")
def get_prescription(
        rx_id: int,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    return ok(_load_one(_repo(db, user), rx_id))


@router.put("/{rx_id}")
def update_prescription(
        rx_id: int,
        payload: PrescriptionUpdate,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    _check_patient(db, user, payload.patient_id)
    try:
        rx = _repo(db, user).update(rx_id, payload)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("prescription update failed rx_id=%s", rx_id)
        raise HTTPException(status_code=503,
                            detail="Failed to save prescription")
    if not rx:
        raise HTTPException(status_code=404, detail="Prescription not found")
    return ok(rx)


@router.delete("/{rx_id}")
def delete_prescription(
        rx_id: int,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    try:
        deleted = _repo(db, user).delete(rx_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("prescription delete failed rx_id=%s", rx_id)
        raise HTTPException(status_code=503,
                            detail="Failed to delete prescription")
    if not deleted:
        raise HTTPException(status_code=404, detail="Prescription not found")
    return ok({"id": rx_id, "deleted": True})


@router.get("/{rx_id}/pdf")
def prescription_pdf(
        rx_id: int,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    rx = _load_one(_repo(db, user), rx_id)
    doc = to_document(rx,
                      doctor_display_name(get_profile(db, user.id), user.email))
    try:
        pdf = build_prescription_pdf(doc)
        filename = prescription_pdf_filename(doc)
    except Exception:
        logger.exception("prescription pdf render failed rx_id=%s", rx_id)
        raise HTTPException(status_code=500, detail="Failed to generate PDF")

    return StreamingResponse(BytesIO(pdf),
                             media_type="application/pdf",
                             headers=attachment_headers(filename))
