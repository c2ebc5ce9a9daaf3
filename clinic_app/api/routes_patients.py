# FILE: clinic_app/api/routes_patients.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_app.api.deps import CurrentUser, current_user, get_db
from clinic_app.schemas.patient import PatientCreate, PatientOut
from clinic_app.services.repositories import PatientRepository
from clinic_app.utils.resp import ok

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/patients", tags=["Patients"])


@router.get("")
def list_patients(
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    try:
        rows = PatientRepository(db, user.id).list()
    except SQLAlchemyError:
        logger.exception("patient list failed user_id=%s", user.id)
        raise HTTPException(status_code=503, detail="Failed to load patients")
    return ok([PatientOut.model_validate(p) for p in rows])


@router.post("", status_code=201)
def create_patient(
        payload: PatientCreate,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    try:
        p = PatientRepository(db, user.id).create(payload)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("patient create failed user_id=%s", user.id)
        raise HTTPException(status_code=503, detail="Failed to save patient")
    return ok(PatientOut.model_validate(p), status_code=201)


@router.delete("/{patient_id}")
def delete_patient(
        patient_id: int,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    """Invoices and prescriptions of the patient are kept, unlinked."""
    try:
        deleted = PatientRepository(db, user.id).delete(patient_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("patient delete failed patient_id=%s", patient_id)
        raise HTTPException(status_code=503, detail="Failed to delete patient")
    if not deleted:
        raise HTTPException(status_code=404, detail="Patient not found")
    return ok({"id": patient_id, "deleted": True})
