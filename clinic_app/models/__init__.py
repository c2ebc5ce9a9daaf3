# clinic_app/models/__init__.py
from .patient import Patient
from .billing import Invoice, InvoiceNumberSeries, InvoiceStatus
from .prescription import Prescription
from .settings import UserSettings, DoctorProfile

__all__ = [
    "Patient",
    "Invoice",
    "InvoiceNumberSeries",
    "InvoiceStatus",
    "Prescription",
    "UserSettings",
    "DoctorProfile",
]
