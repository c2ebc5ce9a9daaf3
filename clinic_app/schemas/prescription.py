# FILE: clinic_app/schemas/prescription.py
from __future__ import annotations

from typing import Optional, Literal
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, field_validator

Frequency = Literal[
    "Once daily",
    "Twice daily",
    "Three times daily",
    "Four times daily",
    "Every 8 hours",
    "Every 12 hours",
    "As needed",
]


class PrescriptionBase(BaseModel):
    patient_id: Optional[int] = None
    medication_name: str
    dosage: str
    frequency: Frequency
    duration: str
    special_instructions: Optional[str] = None
    prescribed_date: date

    @field_validator("medication_name", "dosage", "duration")
    @classmethod
    def _required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class PrescriptionCreate(PrescriptionBase):
    pass


class PrescriptionUpdate(PrescriptionBase):
    pass


class PrescriptionOut(PrescriptionBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_name: Optional[str] = None
    created_at: Optional[datetime] = None


class PrescriptionDocument(BaseModel):
    """Flattened data the prescription PDF is drawn from."""
    patient_name: str
    medication_name: str
    dosage: str
    frequency: str
    duration: str
    special_instructions: Optional[str] = None
    prescribed_date: date
    doctor_name: str
