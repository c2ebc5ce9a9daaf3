# FILE: clinic_app/models/prescription.py
from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    ForeignKey,
    Text,
)
from sqlalchemy.orm import relationship

from clinic_app.db.base import Base


class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)

    patient_id = Column(Integer,
                        ForeignKey("patients.id", ondelete="SET NULL"),
                        nullable=True,
                        index=True)

    medication_name = Column(String(200), nullable=False)
    dosage = Column(String(100), nullable=False)
    frequency = Column(String(50), nullable=False)
    duration = Column(String(100), nullable=False)
    special_instructions = Column(Text, nullable=True)
    prescribed_date = Column(Date, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime,
                        default=datetime.utcnow,
                        onupdate=datetime.utcnow)

    patient = relationship("Patient", back_populates="prescriptions")
