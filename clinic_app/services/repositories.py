# clinic_app/services/repositories.py
"""
Owner-scoped data access for the billing engine's callers.

Routes never query the ORM directly; they go through these repositories so
the engine only ever sees already-fetched ``InvoiceOut`` / ``PrescriptionOut``
collections. Every query is filtered by ``user_id``.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, joinedload

from clinic_app.models.billing import Invoice, InvoiceStatus
from clinic_app.models.patient import Patient
from clinic_app.models.prescription import Prescription
from clinic_app.schemas.billing import InvoiceCreate, InvoiceOut, InvoiceUpdate
from clinic_app.schemas.patient import PatientCreate
from clinic_app.schemas.prescription import (
    PrescriptionCreate,
    PrescriptionOut,
    PrescriptionUpdate,
)
from clinic_app.services.billing_math import money2
from clinic_app.services.billing_numbers import next_invoice_number


def _patient_name(obj) -> Optional[str]:
    p = getattr(obj, "patient", None)
    return getattr(p, "full_name", None) if p is not None else None


def invoice_to_out(inv: Invoice) -> InvoiceOut:
    return InvoiceOut(
        id=inv.id,
        invoice_number=inv.invoice_number,
        patient_id=inv.patient_id,
        patient_name=_patient_name(inv),
        service_description=inv.service_description,
        amount=money2(inv.amount),
        due_date=inv.due_date,
        status=inv.status,
        created_at=inv.created_at,
    )


def prescription_to_out(rx: Prescription) -> PrescriptionOut:
    return PrescriptionOut(
        id=rx.id,
        patient_id=rx.patient_id,
        patient_name=_patient_name(rx),
        medication_name=rx.medication_name,
        dosage=rx.dosage,
        frequency=rx.frequency,
        duration=rx.duration,
        special_instructions=rx.special_instructions,
        prescribed_date=rx.prescribed_date,
        created_at=rx.created_at,
    )


class PatientRepository:

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def _q(self):
        return self.db.query(Patient).filter(Patient.user_id == self.user_id)

    def list(self) -> List[Patient]:
        return self._q().order_by(Patient.full_name.asc()).all()

    def get(self, patient_id: int) -> Optional[Patient]:
        return self._q().filter(Patient.id == patient_id).first()

    def create(self, data: PatientCreate) -> Patient:
        p = Patient(user_id=self.user_id, **data.model_dump())
        self.db.add(p)
        self.db.commit()
        self.db.refresh(p)
        return p

    def delete(self, patient_id: int) -> bool:
        p = self.get(patient_id)
        if not p:
            return False
        # detach dependants explicitly; sqlite does not enforce ON DELETE SET NULL by default
        for model in (Invoice, Prescription):
            (self.db.query(model).filter(
                model.user_id == self.user_id,
                model.patient_id == patient_id,
            ).update({model.patient_id: None}, synchronize_session=False))
        self.db.delete(p)
        self.db.commit()
        return True

    def display_names(self, ids: Iterable[int]) -> Dict[int, str]:
        """
        Bulk id -> name lookup for callers holding bare patient ids.
        Invoice and prescription listings do not need it: their repositories
        join the patient row and fill ``patient_name`` themselves.
        """
        ids = [i for i in set(ids) if i is not None]
        if not ids:
            return {}
        rows = self._q().filter(Patient.id.in_(ids)).all()
        return {p.id: p.full_name for p in rows}


class InvoiceRepository:

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def _q(self):
        return (self.db.query(Invoice).options(joinedload(
            Invoice.patient)).filter(Invoice.user_id == self.user_id))

    def _get_row(self, invoice_id: int) -> Optional[Invoice]:
        return self._q().filter(Invoice.id == invoice_id).first()

    def list(self) -> List[InvoiceOut]:
        """Newest-created first."""
        rows = self._q().order_by(Invoice.created_at.desc(),
                                  Invoice.id.desc()).all()
        return [invoice_to_out(r) for r in rows]

    def get(self, invoice_id: int) -> Optional[InvoiceOut]:
        row = self._get_row(invoice_id)
        return invoice_to_out(row) if row else None

    def generate_number(self) -> str:
        try:
            return next_invoice_number(self.db, user_id=self.user_id)
        except Exception:
            # leave the session usable for the fallback insert
            self.db.rollback()
            raise

    def create(self, data: InvoiceCreate, *, invoice_number: str) -> InvoiceOut:
        inv = Invoice(
            user_id=self.user_id,
            invoice_number=invoice_number,
            patient_id=data.patient_id,
            service_description=data.service_description,
            amount=money2(data.amount),
            due_date=data.due_date,
            status=InvoiceStatus.PENDING.value,
            created_at=datetime.utcnow(),
        )
        self.db.add(inv)
        self.db.commit()
        self.db.refresh(inv)
        return invoice_to_out(inv)

    def update(self, invoice_id: int,
               data: InvoiceUpdate) -> Optional[InvoiceOut]:
        inv = self._get_row(invoice_id)
        if not inv:
            return None
        inv.patient_id = data.patient_id
        inv.service_description = data.service_description
        inv.amount = money2(data.amount)
        inv.due_date = data.due_date
        if data.status is not None:
            inv.status = data.status
        self.db.commit()
        self.db.refresh(inv)
        return invoice_to_out(inv)

    def set_status(self, invoice_id: int, status: str) -> Optional[InvoiceOut]:
        # any status may overwrite any other
        inv = self._get_row(invoice_id)
        if not inv:
            return None
        inv.status = status
        self.db.commit()
        self.db.refresh(inv)
        return invoice_to_out(inv)

    def delete(self, invoice_id: int) -> bool:
        inv = self._get_row(invoice_id)
        if not inv:
            return False
        self.db.delete(inv)
        self.db.commit()
        return True


class PrescriptionRepository:

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def _q(self):
        return (self.db.query(Prescription).options(
            joinedload(Prescription.patient)).filter(
                Prescription.user_id == self.user_id))

    def _get_row(self, rx_id: int) -> Optional[Prescription]:
        return self._q().filter(Prescription.id == rx_id).first()

    def list(self) -> List[PrescriptionOut]:
        rows = self._q().order_by(Prescription.created_at.desc(),
                                  Prescription.id.desc()).all()
        return [prescription_to_out(r) for r in rows]

    def get(self, rx_id: int) -> Optional[PrescriptionOut]:
        row = self._get_row(rx_id)
        return prescription_to_out(row) if row else None

    def create(self, data: PrescriptionCreate) -> PrescriptionOut:
        rx = Prescription(user_id=self.user_id, **data.model_dump())
        self.db.add(rx)
        self.db.commit()
        self.db.refresh(rx)
        return prescription_to_out(rx)

    def update(self, rx_id: int,
               data: PrescriptionUpdate) -> Optional[PrescriptionOut]:
        rx = self._get_row(rx_id)
        if not rx:
            return None
        for k, v in data.model_dump().items():
            setattr(rx, k, v)
        self.db.commit()
        self.db.refresh(rx)
        return prescription_to_out(rx)

    def delete(self, rx_id: int) -> bool:
        rx = self._get_row(rx_id)
        if not rx:
            return False
        self.db.delete(rx)
        self.db.commit()
        return True
