"""
Per-tenant theme.

Each barbershop stores four seed colors (primary, secondary, background,
text). The full palette of CSS variables used by the stylesheet is derived
from them in HSL space so that lighter surfaces (cards, muted areas,
borders) follow the tenant's branding.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Dict, Optional

import streamlit as st

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")

THEME_VARIABLES = (
    "--primary",
    "--primary-foreground",
    "--background",
    "--foreground",
    "--card",
    "--card-foreground",
    "--secondary",
    "--secondary-foreground",
    "--accent",
    "--accent-foreground",
    "--muted",
    "--muted-foreground",
    "--border",
    "--ring",
    "--gold",
    "--sidebar-background",
    "--sidebar-foreground",
    "--sidebar-primary",
    "--sidebar-primary-foreground",
    "--sidebar-accent",
    "--sidebar-border",
    "--sidebar-ring",
)


class ThemeError(ValueError):
    pass


def _round(value: float) -> int:
    # half-up, not banker's rounding
    return int(math.floor(value + 0.5))


def hex_to_hsl(hex_color: str) -> str:
    """Convert ``#rrggbb`` to the ``"H S% L%"`` form used by the stylesheet."""
    match = _HEX_RE.match((hex_color or "").strip())
    if not match:
        raise ThemeError(f"Invalid hex color: {hex_color!r}")
    value = match.group(1)

    r = int(value[0:2], 16) / 255
    g = int(value[2:4], 16) / 255
    b = int(value[4:6], 16) / 255

    high = max(r, g, b)
    low = min(r, g, b)
    h = 0.0
    s = 0.0
    l = (high + low) / 2

    if high != low:
        d = high - low
        s = d / (2 - high - low) if l > 0.5 else d / (high + low)

        if high == r:
            h = ((g - b) / d + (6 if g < b else 0)) / 6
        elif high == g:
            h = ((b - r) / d + 2) / 6
        else:
            h = ((r - g) / d + 4) / 6

    return f"{_round(h * 360)} {_round(s * 100)}% {_round(l * 100)}%"


def adjust_lightness(hsl: str, amount: int) -> str:
    parts = hsl.split(" ")
    if len(parts) != 3:
        raise ThemeError(f"Invalid HSL value: {hsl!r}")
    h, s, l = parts
    new_l = max(0, min(100, int(l.rstrip("%")) + amount))
    return f"{h} {s} {new_l}%"


def build_theme_variables(barbershop) -> Dict[str, str]:
    primary = hex_to_hsl(barbershop.primary_color)
    secondary = hex_to_hsl(barbershop.secondary_color)
    background = hex_to_hsl(barbershop.background_color)
    text = hex_to_hsl(barbershop.text_color)

    surface = adjust_lightness(background, 3)
    border = adjust_lightness(secondary, 10)

    return {
        "--primary": primary,
        "--primary-foreground": background,
        "--background": background,
        "--foreground": text,
        "--card": surface,
        "--card-foreground": text,
        "--secondary": secondary,
        "--secondary-foreground": text,
        "--accent": primary,
        "--accent-foreground": background,
        "--muted": adjust_lightness(background, 8),
        "--muted-foreground": adjust_lightness(text, -30),
        "--border": border,
        "--ring": primary,
        "--gold": primary,
        # Sidebar
        "--sidebar-background": surface,
        "--sidebar-foreground": text,
        "--sidebar-primary": primary,
        "--sidebar-primary-foreground": background,
        "--sidebar-accent": secondary,
        "--sidebar-border": border,
        "--sidebar-ring": primary,
    }


def render_theme_css(variables: Dict[str, str]) -> str:
    body = "\n".join(f"    {name}: {value};" for name, value in variables.items())
    return (
        ":root {\n"
        f"{body}\n"
        "}\n"
        ".stApp { background-color: hsl(var(--background)); color: hsl(var(--foreground)); }\n"
        "[data-testid=\"stSidebar\"] { background-color: hsl(var(--sidebar-background)); }\n"
        ".stButton button { border-color: hsl(var(--border)); }\n"
        ".stButton button[kind=\"primary\"] { background-color: hsl(var(--primary)); "
        "color: hsl(var(--primary-foreground)); }\n"
    )


def apply_theme(barbershop) -> Optional[Dict[str, str]]:
    """Inject the tenant palette; with no tenant the default theme stays."""
    if barbershop is None:
        return None

    try:
        variables = build_theme_variables(barbershop)
    except ThemeError as e:
        logger.warning(f"Keeping default theme for '{barbershop.slug}': {e}")
        return None

    st.markdown(f"<style>\n{render_theme_css(variables)}</style>", unsafe_allow_html=True)
    return variables
