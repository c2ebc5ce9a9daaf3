# clinic_app/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from clinic_app.core.config import settings


def _connect_args(uri: str) -> dict:
    # sqlite connections are shared with the threadpool FastAPI runs sync routes in
    if uri.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine: Engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.SQLALCHEMY_DATABASE_URI),
    future=True,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)
