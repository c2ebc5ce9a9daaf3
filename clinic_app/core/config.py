# clinic_app/core/config.py
import os
from typing import List, Optional
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def _opt(name: str) -> Optional[str]:
    v = (os.getenv(name) or "").strip()
    return v or None


class Settings(BaseModel):
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "DoctorConnect Billing")
    API_V1_STR: str = os.getenv("API_V1_STR", "/api")

    # CORS (env takes priority)
    BACKEND_CORS_ORIGINS: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ))

    # ---------- Database ----------
    SQLALCHEMY_DATABASE_URI: str = os.getenv("DATABASE_URL",
                                             "sqlite:///./clinic.db")

    # ---------- Security ----------
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-this")
    JWT_ALG: str = os.getenv("JWT_ALG", "HS256")

    # ---------- Logging ----------
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # ---------- Billing / PDF ----------
    TIMEZONE: str = os.getenv("TIMEZONE", "Asia/Kolkata")
    PDF_ACCENT_COLOR: str = os.getenv("PDF_ACCENT_COLOR", "#2980b9")

    # Standard PDF fonts have no rupee glyph and print amounts as "Rs.";
    # point these at a TTF that has it (e.g. DejaVuSans.ttf).
    PDF_FONT_PATH: Optional[str] = _opt("PDF_FONT_PATH")
    PDF_FONT_BOLD_PATH: Optional[str] = _opt("PDF_FONT_BOLD_PATH")


settings = Settings()
