# clinic_app/services/theme.py
from __future__ import annotations

from typing import Tuple

from clinic_app.schemas.settings import AppearanceConfig, ThemeScope


def hex_to_hsl(color: str) -> Tuple[int, int, int]:
    """'#2563eb' -> (221, 83, 53): hue in degrees, saturation/lightness in percent."""
    s = color.lstrip("#")
    r, g, b = (int(s[i:i + 2], 16) / 255 for i in (0, 2, 4))

    mx = max(r, g, b)
    mn = min(r, g, b)
    h = 0.0
    sat = 0.0
    light = (mx + mn) / 2

    if mx != mn:
        d = mx - mn
        sat = d / (2 - mx - mn) if light > 0.5 else d / (mx + mn)
        if mx == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif mx == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h /= 6

    return round(h * 360), round(sat * 100), round(light * 100)


def apply_theme(config: AppearanceConfig,
                *,
                prefers_dark: bool = False) -> ThemeScope:
    """
    Pure mapping from appearance settings to the root class and CSS variables
    the UI shell should set. Called once per settings change.
    """
    mode = config.theme_mode
    if mode == "system":
        mode = "dark" if prefers_dark else "light"

    h, s, lightness = hex_to_hsl(config.primary_color)
    return ThemeScope(
        root_classes=[mode],
        css_variables={
            "--primary": f"{h} {s}% {lightness}%",
            "--primary-foreground": "0 0% 0%" if lightness > 50 else "0 0% 100%",
        },
    )
