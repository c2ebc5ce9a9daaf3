# FILE: clinic_app/models/billing.py
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    Date,
    DateTime,
    Index,
    ForeignKey,
    UniqueConstraint,
    Text,
)
from sqlalchemy.orm import relationship

from clinic_app.db.base import Base


class InvoiceStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Invoice(Base):
    """
    Single-service invoice raised by a doctor against one of their patients.

    Status is free to move between pending / paid / overdue in any direction;
    there is no workflow guard, and paid invoices can still be deleted.
    """

    __tablename__ = "invoices"
    __table_args__ = (Index("ix_invoices_owner_created", "user_id",
                            "created_at"), )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)

    invoice_number = Column(String(32), unique=True, index=True, nullable=False)

    # ON DELETE SET NULL: an invoice outlives its patient; the join then yields no name
    patient_id = Column(Integer,
                        ForeignKey("patients.id", ondelete="SET NULL"),
                        nullable=True,
                        index=True)

    service_description = Column(Text, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False, default=0)
    due_date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False,
                    default=InvoiceStatus.PENDING.value)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime,
                        default=datetime.utcnow,
                        onupdate=datetime.utcnow)

    patient = relationship("Patient", back_populates="invoices")


class InvoiceNumberSeries(Base):
    """Per-owner monthly counter behind the server-side invoice numbering."""

    __tablename__ = "invoice_number_series"
    __table_args__ = (UniqueConstraint("user_id",
                                       "prefix",
                                       "period_key",
                                       name="uq_invoice_series_period"), )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    prefix = Column(String(16), nullable=False, default="INV-")
    period_key = Column(String(8), nullable=False)  # YYYYMM
    next_number = Column(Integer, nullable=False, default=1)
    padding = Column(Integer, nullable=False, default=4)
