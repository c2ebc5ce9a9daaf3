# clinic_app/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """All owner-scoped tables (patients, invoices, prescriptions, settings) inherit from this."""
    pass


def import_models() -> None:
    # Import all models so metadata is complete for create_all()
    from clinic_app.models import (  # noqa: F401
        patient,
        billing,
        prescription,
        settings,
    )
