"""
Built-in chart themes, looked up by name.
"""

from typing import Any, Dict, List, Mapping, Optional

import matplotlib.colors as mcolors

from chart_errors import ChartValidationError
from chart_types import BorderStyle, Theme

THEMES: Dict[str, Theme] = {
    "default": Theme(
        text_color="#007acc",
        background_color="transparent",
        border=BorderStyle(),
    ),
    "light": Theme(
        text_color="#1f2328",
        background_color="#ffffff",
        border=BorderStyle(color="#1f232877", width=1.5, rounded=True),
    ),
    "dark": Theme(
        text_color="#f0f6fc",
        background_color="#0d1117",
        border=BorderStyle(color="#f0f6fcaa", width=1.5, rounded=True),
    ),
    "dark_high_contrast": Theme(
        text_color="#ffffff",
        background_color="#010409",
        border=BorderStyle(color="#ffffff", width=1.5, rounded=True),
    ),
    "dark_dimmed": Theme(
        text_color="#d1d7e0",
        background_color="#212830",
        border=BorderStyle(color="#d1d7e055", width=1.5, rounded=True),
    ),
}

DEFAULT_THEME = THEMES["default"]


def get_theme(name: Optional[str], default: Optional[Theme] = None) -> Theme:
    """Look up a theme by name (case-insensitive), falling back to ``default``."""
    fallback = default or DEFAULT_THEME
    if not name:
        return fallback
    return THEMES.get(name.lower(), fallback)


def get_available_themes() -> List[str]:
    """Get the names of the built-in themes."""
    return list(THEMES)


def _check_color(value: str, key: str) -> str:
    if value != "transparent" and not mcolors.is_color_like(value):
        raise ChartValidationError(f"Invalid color for '{key}': {value!r}")
    return value


def theme_from_dict(data: Mapping[str, Any]) -> Theme:
    """
    Build a theme from an inline mapping.

    Accepts both ``textColor``/``backgroundColor`` and snake_case keys, with
    an optional ``border`` object holding ``color``, ``width`` and ``rounded``.
    """
    try:
        text_color = data.get("textColor", data.get("text_color"))
        background = data.get(
            "backgroundColor", data.get("background_color", "transparent")
        )
        if not text_color:
            raise ChartValidationError("Theme is missing a text color")

        border_data = data.get("border") or {}
        border = BorderStyle(
            color=_check_color(
                str(border_data.get("color", "transparent")), "border.color"
            ),
            width=float(border_data.get("width", 0)),
            rounded=bool(border_data.get("rounded", False)),
        )
    except ChartValidationError:
        raise
    except (AttributeError, TypeError, ValueError) as e:
        raise ChartValidationError(f"Invalid theme definition: {e}") from e

    return Theme(
        text_color=_check_color(str(text_color), "textColor"),
        background_color=_check_color(str(background), "backgroundColor"),
        border=border,
    )
