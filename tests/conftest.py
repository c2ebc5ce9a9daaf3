"""
Pytest configuration and fixtures for testing.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_app.api.deps import get_db
from clinic_app.core.config import settings
from clinic_app.db.base import Base, import_models
from clinic_app.main import app as fastapi_app
from clinic_app.models import Patient
from clinic_app.schemas.billing import InvoiceOut


@pytest.fixture
def engine():
    """In-memory sqlite shared by every session of one test."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import_models()
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    """A database session bound to the test engine."""
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def client(db):
    """A test client whose requests use the test database."""

    def _get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = _get_db
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


def make_token(user_id=1, email="doctor@test.com"):
    return jwt.encode({"sub": str(user_id), "email": email},
                      settings.JWT_SECRET,
                      algorithm=settings.JWT_ALG)


@pytest.fixture
def auth_headers():
    """Bearer header for owner 1."""
    return {"Authorization": f"Bearer {make_token(1)}"}


@pytest.fixture
def other_headers():
    """Bearer header for owner 2."""
    return {"Authorization": f"Bearer {make_token(2, 'other@test.com')}"}


@pytest.fixture
def patient(db):
    """Create a test patient for owner 1."""
    p = Patient(user_id=1, full_name="Jane Smith", phone="0987654321")
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def make_invoice(**kw):
    """InvoiceOut with sensible defaults; override any field."""
    data = dict(
        id=1,
        invoice_number="INV-202610-001",
        patient_id=1,
        patient_name="Alice",
        service_description="General consultation",
        amount=Decimal("100.00"),
        due_date=date(2026, 11, 18),
        status="pending",
        created_at=datetime(2026, 10, 19, 9, 30),
    )
    data.update(kw)
    return InvoiceOut(**data)
