"""
Text helpers for chart labels: markup escaping, emoji shortcodes, truncation
and font size parsing.
"""

import re
from typing import Union

import emoji

from chart_errors import ChartConfigurationError

_SPECIAL_CHARS = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
        "\\": "&#92;",
        "`": "&#96;",
        "{": "&#123;",
        "}": "&#125;",
    }
)

_SHORTCODE_RE = re.compile(r":\w+:")
_PX_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(px)?\s*$")
_KEBAB_RE = re.compile(r"([a-z])([A-Z])")


def escape_special_chars(text: str) -> str:
    """
    Escape characters with a meaning in SVG/XML markup.

    Single pass, so an ``&`` produced by one replacement is never escaped again.
    Callers must escape a given text only once.
    """
    return text.translate(_SPECIAL_CHARS)


def parse_emojis(text: str) -> str:
    """Expand ``:name:`` shortcodes to emoji glyphs; unknown codes are kept."""
    if not text or not _SHORTCODE_RE.search(text):
        return text
    return emoji.emojize(text, language="alias")


def truncate_text(text: str, max_chars: int, ellipsis: str = "…") -> str:
    """
    Shorten text to ``max_chars`` characters, the last one being the ellipsis.

    The cut never lands inside an escaped entity such as ``&amp;``.
    """
    if len(text) <= max_chars:
        return text
    if max_chars <= 1:
        return ellipsis

    cut = text[: max_chars - 1]
    amp = cut.rfind("&")
    if amp != -1 and ";" not in cut[amp:]:
        cut = cut[:amp]
    return cut + ellipsis


def parse_font_size(font_size: Union[int, float, str]) -> float:
    """Convert ``24``, ``24.5`` or ``"24px"`` to a pixel size."""
    if isinstance(font_size, bool):
        raise ChartConfigurationError(f"Invalid font size: {font_size!r}")
    if isinstance(font_size, (int, float)):
        size = float(font_size)
    else:
        match = _PX_RE.match(str(font_size))
        if not match:
            raise ChartConfigurationError(f"Invalid font size: {font_size!r}")
        size = float(match.group(1))

    if size <= 0:
        raise ChartConfigurationError(f"Font size must be positive, got {size}")
    return size


def to_kebab_case(name: str) -> str:
    """``fontSize`` -> ``font-size``; snake_case is converted as well."""
    return _KEBAB_RE.sub(r"\1-\2", name).replace("_", "-").lower()


def format_number(value: float) -> str:
    """Print whole numbers without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_coord(value: float) -> str:
    """Coordinates and lengths are written with at most two decimals."""
    return format_number(round(float(value), 2))


def format_value(value: float, use_percentage: bool) -> str:
    """Format an item value for the bubbles or the legend."""
    text = format_number(value)
    return f"{text}%" if use_percentage else text
