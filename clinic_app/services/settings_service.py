# clinic_app/services/settings_service.py
from typing import Optional

from sqlalchemy.orm import Session

from clinic_app.models.settings import DoctorProfile, UserSettings
from clinic_app.schemas.billing import DEFAULT_DOCTOR_INFO, DoctorInfo
from clinic_app.schemas.settings import AppearanceConfig, ProfileIn


def get_user_settings(db: Session, user_id: int) -> Optional[UserSettings]:
    return db.query(UserSettings).filter(UserSettings.user_id == user_id).first()


def get_appearance(db: Session, user_id: int) -> AppearanceConfig:
    row = get_user_settings(db, user_id)
    if not row:
        return AppearanceConfig()
    return AppearanceConfig.model_validate(row)


def save_appearance(db: Session, user_id: int,
                    config: AppearanceConfig) -> AppearanceConfig:
    row = get_user_settings(db, user_id)
    if not row:
        row = UserSettings(user_id=user_id)
        db.add(row)
    row.theme_mode = config.theme_mode
    row.primary_color = config.primary_color
    db.commit()
    db.refresh(row)
    return AppearanceConfig.model_validate(row)


def get_profile(db: Session, user_id: int) -> Optional[DoctorProfile]:
    return db.query(DoctorProfile).filter(
        DoctorProfile.user_id == user_id).first()


def save_profile(db: Session, user_id: int, data: ProfileIn) -> DoctorProfile:
    row = get_profile(db, user_id)
    if not row:
        row = DoctorProfile(user_id=user_id)
        db.add(row)
    for k, v in data.model_dump().items():
        setattr(row, k, v)
    db.commit()
    db.refresh(row)
    return row


def doctor_info_from_profile(profile: Optional[DoctorProfile]) -> DoctorInfo:
    """
    Invoice header identity. A profile missing any field is replaced by the
    default as a whole; fields are never mixed between the two.
    """
    if profile is None:
        return DEFAULT_DOCTOR_INFO
    values = {
        "name": profile.full_name,
        "clinic": profile.clinic_name,
        "address": profile.address,
        "phone": profile.phone_number,
        "email": profile.email,
    }
    if not all((v or "").strip() for v in values.values()):
        return DEFAULT_DOCTOR_INFO
    return DoctorInfo(**values)


def doctor_display_name(profile: Optional[DoctorProfile],
                        email: Optional[str] = None) -> str:
    name = (getattr(profile, "full_name", None) or "").strip()
    return name or (email or "").strip() or "Unknown Doctor"
