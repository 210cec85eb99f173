"""
Tests for the per-tenant CSS palette
"""
from unittest.mock import patch

import pytest

from barberdesk.tenant import Barbershop
from barberdesk.theme import (
    THEME_VARIABLES,
    ThemeError,
    adjust_lightness,
    apply_theme,
    build_theme_variables,
    hex_to_hsl,
    render_theme_css,
)


@pytest.fixture
def shop(shop_row):
    return Barbershop.from_row(shop_row)


@pytest.mark.parametrize("hex_color, expected", [
    ("#D4AF37", "46 65% 52%"),
    ("#FFFFFF", "0 0% 100%"),
    ("#000000", "0 0% 0%"),
    ("#121212", "0 0% 7%"),
    ("#2A2A2A", "0 0% 16%"),
    ("#ff0000", "0 100% 50%"),
    ("#00ff00", "120 100% 50%"),
    ("0000ff", "240 100% 50%"),
])
def test_hex_to_hsl(hex_color, expected):
    assert hex_to_hsl(hex_color) == expected


@pytest.mark.parametrize("bad", ["", "#12345", "zzzzzz", "#1234567", "12#3456", "##123456", None])
def test_hex_to_hsl_rejects_invalid_colors(bad):
    with pytest.raises(ThemeError):
        hex_to_hsl(bad)


def test_theme_error_is_value_error():
    assert issubclass(ThemeError, ValueError)


def test_adjust_lightness_keeps_hue_and_saturation():
    assert adjust_lightness("46 65% 52%", 3) == "46 65% 55%"
    assert adjust_lightness("0 0% 100%", -30) == "0 0% 70%"


def test_adjust_lightness_clamps():
    assert adjust_lightness("0 0% 100%", 10) == "0 0% 100%"
    assert adjust_lightness("0 0% 7%", -30) == "0 0% 0%"


def test_build_theme_variables_covers_every_variable(shop):
    variables = build_theme_variables(shop)
    assert set(variables) == set(THEME_VARIABLES)
    assert len(variables) == 22


def test_build_theme_variables_derivations(shop):
    v = build_theme_variables(shop)

    primary = "46 65% 52%"
    for name in ("--primary", "--accent", "--ring", "--gold", "--sidebar-primary", "--sidebar-ring"):
        assert v[name] == primary

    for name in ("--primary-foreground", "--accent-foreground", "--sidebar-primary-foreground", "--background"):
        assert v[name] == "0 0% 7%"

    for name in ("--foreground", "--card-foreground", "--secondary-foreground", "--sidebar-foreground"):
        assert v[name] == "0 0% 100%"

    assert v["--card"] == v["--sidebar-background"] == "0 0% 10%"
    assert v["--secondary"] == v["--sidebar-accent"] == "0 0% 16%"
    assert v["--muted"] == "0 0% 15%"
    assert v["--muted-foreground"] == "0 0% 70%"
    assert v["--border"] == v["--sidebar-border"] == "0 0% 26%"


def test_render_theme_css(shop):
    css = render_theme_css(build_theme_variables(shop))
    assert css.startswith(":root {")
    assert "--primary: 46 65% 52%;" in css
    assert "--sidebar-ring: 46 65% 52%;" in css


def test_apply_theme_without_tenant_keeps_default():
    with patch("barberdesk.theme.st") as st:
        assert apply_theme(None) is None
        st.markdown.assert_not_called()


def test_apply_theme_with_invalid_color_keeps_default(shop):
    shop.primary_color = "not-a-color"
    with patch("barberdesk.theme.st") as st:
        assert apply_theme(shop) is None
        st.markdown.assert_not_called()


def test_apply_theme_injects_style(shop):
    with patch("barberdesk.theme.st") as st:
        variables = apply_theme(shop)

    assert variables["--primary"] == "46 65% 52%"
    st.markdown.assert_called_once()
    html, = st.markdown.call_args.args
    assert html.startswith("<style>")
    assert st.markdown.call_args.kwargs == {"unsafe_allow_html": True}
