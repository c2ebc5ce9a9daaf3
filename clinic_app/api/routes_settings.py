# FILE: clinic_app/api/routes_settings.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clinic_app.api.deps import CurrentUser, current_user, get_db
from clinic_app.schemas.settings import AppearanceConfig, AppearanceOut, ProfileIn, ProfileOut
from clinic_app.services.settings_service import (
    get_appearance,
    get_profile,
    save_appearance,
    save_profile,
)
from clinic_app.services.theme import apply_theme
from clinic_app.utils.resp import ok

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/settings", tags=["Settings"])


def _appearance_out(config: AppearanceConfig, prefers_dark: bool) -> AppearanceOut:
    return AppearanceOut(config=config,
                         theme=apply_theme(config, prefers_dark=prefers_dark))


@router.get("/appearance")
def read_appearance(
        prefers_dark: bool = Query(False),
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    return ok(_appearance_out(get_appearance(db, user.id), prefers_dark))


@router.put("/appearance")
def update_appearance(
        payload: AppearanceConfig,
        prefers_dark: bool = Query(False),
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    saved = save_appearance(db, user.id, payload)
    logger.info("appearance saved user_id=%s mode=%s", user.id, saved.theme_mode)
    return ok(_appearance_out(saved, prefers_dark))


@router.get("/profile")
def read_profile(
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    row = get_profile(db, user.id)
    return ok(ProfileOut.model_validate(row) if row else ProfileOut())


@router.put("/profile")
def update_profile(
        payload: ProfileIn,
        db: Session = Depends(get_db),
        user: CurrentUser = Depends(current_user),
):
    return ok(ProfileOut.model_validate(save_profile(db, user.id, payload)))
