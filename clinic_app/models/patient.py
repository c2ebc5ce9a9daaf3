# FILE: clinic_app/models/patient.py
from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
)
from sqlalchemy.orm import relationship

from clinic_app.db.base import Base


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, index=True, nullable=False)

    full_name = Column(String(200), nullable=False)
    email = Column(String(191), nullable=True)
    phone = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime,
                        default=datetime.utcnow,
                        onupdate=datetime.utcnow)

    invoices = relationship("Invoice", back_populates="patient")
    prescriptions = relationship("Prescription", back_populates="patient")
