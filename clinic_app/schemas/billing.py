# FILE: clinic_app/schemas/billing.py
from __future__ import annotations

from typing import Optional, Literal, List
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator

InvoiceStatusLiteral = Literal["pending", "paid", "overdue"]
StatusFilter = Literal["all", "pending", "paid", "overdue"]
DateRangeFilter = Literal["all", "today", "week", "month"]


class InvoiceBase(BaseModel):
    patient_id: Optional[int] = None
    service_description: str
    amount: Decimal = Field(ge=0)
    due_date: date

    @field_validator("service_description")
    @classmethod
    def _desc_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("service_description is required")
        return v


class InvoiceCreate(InvoiceBase):
    pass


class InvoiceUpdate(InvoiceBase):
    """Full-record update (PUT): every editable field is sent."""
    status: Optional[InvoiceStatusLiteral] = None


class InvoiceStatusIn(BaseModel):
    status: InvoiceStatusLiteral


class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str
    patient_id: Optional[int] = None
    # None when the patient row is missing (deleted / orphaned reference)
    patient_name: Optional[str] = None
    service_description: str
    amount: Decimal
    due_date: date
    status: str
    created_at: datetime


class InvoiceFilter(BaseModel):
    search: str = ""
    status: StatusFilter = "all"
    date_range: DateRangeFilter = "all"


class BillingTotals(BaseModel):
    pending_total: Decimal = Decimal("0.00")
    paid_total: Decimal = Decimal("0.00")
    pending_count: int = 0
    paid_count: int = 0


class InvoiceListOut(BaseModel):
    items: List[InvoiceOut]
    totals: BillingTotals
    filters: InvoiceFilter
    total_count: int


class DoctorInfo(BaseModel):
    name: str
    clinic: str
    address: str
    phone: str
    email: str


DEFAULT_DOCTOR_INFO = DoctorInfo(
    name="Dr. John Doe",
    clinic="DoctorConnect Healthcare",
    address="123 Medical Center, Healthcare City",
    phone="+1 (555) 123-4567",
    email="doctor@healthcare.com",
)
