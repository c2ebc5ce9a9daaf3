# FILE: clinic_app/models/settings.py
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    String,
)

from clinic_app.db.base import Base


class UserSettings(Base):
    """Per-owner appearance preferences (one row per user)."""

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, unique=True, index=True, nullable=False)

    theme_mode = Column(String(16), nullable=False, default="light")
    primary_color = Column(String(32), nullable=False, default="#2563eb")

    updated_at = Column(DateTime,
                        default=datetime.utcnow,
                        onupdate=datetime.utcnow)


class DoctorProfile(Base):
    """Doctor / clinic identity used on printed invoices and prescriptions."""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, unique=True, index=True, nullable=False)

    full_name = Column(String(200), nullable=True)
    clinic_name = Column(String(255), nullable=True)
    address = Column(String(512), nullable=True)
    phone_number = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)

    updated_at = Column(DateTime,
                        default=datetime.utcnow,
                        onupdate=datetime.utcnow)
