# FILE: clinic_app/schemas/settings.py
from __future__ import annotations

import re
from typing import Optional, Literal, Dict, List
from pydantic import BaseModel, ConfigDict, field_validator

_HEX_RE = re.compile(r"^#?[0-9a-fA-F]{6}$")


class AppearanceConfig(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    theme_mode: Literal["light", "dark", "system"] = "light"
    primary_color: str = "#2563eb"

    @field_validator("primary_color")
    @classmethod
    def _hex(cls, v: str) -> str:
        v = (v or "").strip()
        if not _HEX_RE.match(v):
            raise ValueError("primary_color must be a #rrggbb hex colour")
        return "#" + v.lstrip("#").lower()


class ThemeScope(BaseModel):
    """Style side effects to apply on the document root."""
    root_classes: List[str]
    css_variables: Dict[str, str]


class AppearanceOut(BaseModel):
    config: AppearanceConfig
    theme: ThemeScope


class ProfileIn(BaseModel):
    full_name: Optional[str] = None
    clinic_name: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None


class ProfileOut(ProfileIn):
    model_config = ConfigDict(from_attributes=True)
