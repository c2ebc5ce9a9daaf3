"""
Unit tests for appearance settings and theme mapping.
"""
import pytest
from pydantic import ValidationError

from clinic_app.models.settings import DoctorProfile
from clinic_app.schemas.billing import DEFAULT_DOCTOR_INFO
from clinic_app.schemas.settings import AppearanceConfig, ProfileIn
from clinic_app.services.settings_service import (
    doctor_display_name,
    doctor_info_from_profile,
    get_appearance,
    save_appearance,
    save_profile,
)
from clinic_app.services.theme import apply_theme, hex_to_hsl


def test_hex_to_hsl():
    """Test a few known colours."""
    assert hex_to_hsl("#2563eb") == (221, 83, 53)
    assert hex_to_hsl("#ffffff") == (0, 0, 100)
    assert hex_to_hsl("#000000") == (0, 0, 0)
    assert hex_to_hsl("#ff0000") == (0, 100, 50)


def test_apply_theme_light_and_dark():
    """Test the root class and primary variables."""
    scope = apply_theme(AppearanceConfig(theme_mode="dark", primary_color="#2563eb"))
    assert scope.root_classes == ["dark"]
    assert scope.css_variables["--primary"] == "221 83% 53%"
    assert scope.css_variables["--primary-foreground"] == "0 0% 0%"

    scope = apply_theme(AppearanceConfig(theme_mode="light", primary_color="#1e3a8a"))
    assert scope.root_classes == ["light"]
    assert scope.css_variables["--primary-foreground"] == "0 0% 100%"


def test_system_mode_follows_preference():
    """Test 'system' resolves from the user agent preference."""
    config = AppearanceConfig(theme_mode="system")
    assert apply_theme(config).root_classes == ["light"]
    assert apply_theme(config, prefers_dark=True).root_classes == ["dark"]


def test_primary_color_validation():
    """Test hex colours are normalised and junk rejected."""
    assert AppearanceConfig(primary_color="2563EB").primary_color == "#2563eb"
    with pytest.raises(ValidationError):
        AppearanceConfig(primary_color="blue")


def test_appearance_defaults_then_saved(db):
    """Test appearance read before and after saving."""
    assert get_appearance(db, 1) == AppearanceConfig()
    save_appearance(db, 1, AppearanceConfig(theme_mode="dark", primary_color="#16a34a"))
    assert get_appearance(db, 1).theme_mode == "dark"
    assert get_appearance(db, 2).theme_mode == "light"


def test_doctor_info_falls_back_as_a_whole(db):
    """Test a partial profile is replaced by the full default."""
    assert doctor_info_from_profile(None) == DEFAULT_DOCTOR_INFO

    partial = save_profile(db, 1, ProfileIn(full_name="Dr. Meera Rao"))
    assert doctor_info_from_profile(partial) == DEFAULT_DOCTOR_INFO

    full = save_profile(db, 1, ProfileIn(full_name="Dr. Meera Rao",
                                         clinic_name="Rao Clinic",
                                         address="12 Lake Road",
                                         phone_number="044-1234",
                                         email="meera@clinic.test"))
    info = doctor_info_from_profile(full)
    assert info.name == "Dr. Meera Rao"
    assert info.clinic == "Rao Clinic"


def test_doctor_display_name():
    """Test the name printed on prescriptions."""
    assert doctor_display_name(DoctorProfile(full_name="Meera Rao")) == "Meera Rao"
    assert doctor_display_name(None, "doc@test.com") == "doc@test.com"
    assert doctor_display_name(None) == "Unknown Doctor"
