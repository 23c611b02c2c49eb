"""
Turns raw chart options into a validated ChartConfig.

Two sources are supported: flat key/value parameters (``title-size=24``,
``legend-align=left``...) and the JSON custom config format
``{"options": {...}, "data": [...]}``. Defaults are applied here; the
renderer itself never fills in missing sections.
"""

import json
import re
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from chart_errors import ChartConfigurationError, ChartFetchError, ChartValidationError
from chart_types import (
    ChartConfig,
    LegendAlign,
    LegendConfig,
    TextAnchor,
    Theme,
    TitleConfig,
    ValueDisplay,
    WeightedItem,
)
from config import CHART_CONFIG, OUTPUT_CONFIG, TITLE_CONFIG
from text_utils import parse_font_size
from themes import DEFAULT_THEME, THEMES, get_theme, theme_from_dict

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")

# Horizontal alignment keywords accepted for text anchors
ANCHOR_ALIASES = {
    "left": TextAnchor.START,
    "center": TextAnchor.MIDDLE,
    "right": TextAnchor.END,
    "start": TextAnchor.START,
    "middle": TextAnchor.MIDDLE,
    "end": TextAnchor.END,
}


class ChartOptionsParser:
    """Reads chart options from flat string parameters."""

    def __init__(self, params: Optional[Mapping[str, Any]] = None):
        self.params = dict(params or {})

    def _raw(self, key: str) -> Optional[str]:
        value = self.params.get(key)
        return None if value is None else str(value)

    def get_string(self, key: str, default: str) -> str:
        try:
            value = self._raw(key)
            return default if value is None else value
        except (TypeError, ValueError) as e:
            raise ChartValidationError("Invalid string parameter.") from e

    def get_number(self, key: str, default: int) -> int:
        """Integer prefix of the value (``"12px"`` gives 12), else ``default``."""
        try:
            value = self._raw(key)
            if value is None:
                return default
            match = _INT_PREFIX_RE.match(value)
            return int(match.group(1)) if match else default
        except (TypeError, ValueError) as e:
            raise ChartValidationError("Invalid number parameter.") from e

    def get_boolean(self, key: str, default: bool) -> bool:
        """Only the literal ``"true"`` is truthy once the key is present."""
        value = self._raw(key)
        if value is None:
            return default
        return value.strip().lower() == "true"

    def get_theme(self, key: str, default: Theme) -> Theme:
        try:
            return get_theme(self._raw(key), default)
        except (AttributeError, TypeError) as e:
            raise ChartValidationError("Invalid theme parameter.") from e

    def get_text_anchor(self, key: str, default: TextAnchor) -> TextAnchor:
        value = self.get_string(key, "").strip().lower()
        return ANCHOR_ALIASES.get(value, default)

    def get_items_count(self, default: Optional[int] = None) -> int:
        """Number of items to chart, clamped to the configured range."""
        if default is None:
            default = CHART_CONFIG["default_items_count"]
        value = self.get_number("items-count", default)
        return max(
            CHART_CONFIG["min_items_count"],
            min(CHART_CONFIG["max_items_count"], value),
        )

    def parse_title_options(self) -> TitleConfig:
        try:
            theme = self.get_theme("theme", DEFAULT_THEME)
            font_size = self.get_number("title-size", TITLE_CONFIG["default_font_size"])
            return TitleConfig(
                text=self.get_string("title", TITLE_CONFIG["default_text"]),
                font_size=f"{parse_font_size(font_size):g}px",
                font_weight=self.get_string(
                    "title-weight", TITLE_CONFIG["default_font_weight"]
                ),
                fill=self.get_string("title-color", theme.text_color),
                text_anchor=self.get_text_anchor(
                    "title-align", TextAnchor(TITLE_CONFIG["default_align"])
                ),
            )
        except ChartValidationError:
            raise
        except (ChartConfigurationError, TypeError, ValueError) as e:
            raise ChartValidationError("Invalid title options.") from e

    def parse_legend_options(self) -> LegendConfig:
        align = self.get_string("legend-align", LegendAlign.CENTER.value).strip().lower()
        try:
            return LegendConfig(
                show=self.get_boolean("legend", True),
                align=LegendAlign(align),
            )
        except ValueError as e:
            raise ChartValidationError(f"Invalid legend alignment: {align!r}") from e

    def parse_value_display(self) -> ValueDisplay:
        value = self.get_string("display-values", ValueDisplay.LEGEND.value)
        try:
            return ValueDisplay(value.strip().lower())
        except ValueError as e:
            raise ChartValidationError(f"Invalid value display mode: {value!r}") from e

    def build_chart_config(self) -> ChartConfig:
        """Complete chart configuration with every default applied."""
        return ChartConfig(
            width=self.get_number("width", CHART_CONFIG["default_width"]),
            height=self.get_number("height", CHART_CONFIG["default_height"]),
            title=self.parse_title_options(),
            legend=self.parse_legend_options(),
            theme=self.get_theme("theme", DEFAULT_THEME),
            value_display=self.parse_value_display(),
            use_percentage=self.get_boolean("percentages", True),
        )


def _resolve_theme(value: Any) -> Theme:
    if value is None:
        return DEFAULT_THEME
    if isinstance(value, Mapping):
        return theme_from_dict(value)
    if isinstance(value, str):
        theme = THEMES.get(value.lower())
        if theme is None:
            raise ChartValidationError(
                f"Unknown theme {value!r} (available: {', '.join(THEMES)})"
            )
        return theme
    raise ChartValidationError(f"Invalid theme: {value!r}")


def _positive_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ChartValidationError(f"'{name}' must be a positive number, got {value!r}")
    return value


def map_custom_options(options: Optional[Mapping[str, Any]]) -> ChartConfig:
    """
    Convert the ``options`` object of a custom config to a ChartConfig.

    Missing sections fall back to the same defaults as the flat parameters.
    A ``title`` or ``legend`` set to ``null`` disables that section.
    """
    options = options or {}
    if not isinstance(options, Mapping):
        raise ChartValidationError("'options' must be an object")

    try:
        theme = _resolve_theme(options.get("theme"))

        title_data = options.get("title", {})
        if title_data is None:
            title = TitleConfig(text="")
        else:
            align = str(title_data.get("align", TITLE_CONFIG["default_align"])).lower()
            if align not in ANCHOR_ALIASES:
                raise ChartValidationError(f"Invalid title alignment: {align!r}")
            font_size = title_data.get("fontSize", TITLE_CONFIG["default_font_size"])
            parse_font_size(font_size)
            title = TitleConfig(
                text=str(title_data.get("text", TITLE_CONFIG["default_text"])),
                font_size=font_size,
                font_weight=str(
                    title_data.get("fontWeight", TITLE_CONFIG["default_font_weight"])
                ),
                fill=title_data.get("color") or theme.text_color,
                text_anchor=ANCHOR_ALIASES[align],
            )

        legend_data = options.get("legend", {})
        if legend_data is None:
            legend = LegendConfig(show=False)
        else:
            legend = LegendConfig(
                show=bool(legend_data.get("show", True)),
                align=LegendAlign(str(legend_data.get("align", "center")).lower()),
            )

        return ChartConfig(
            width=_positive_number(
                options.get("width", CHART_CONFIG["default_width"]), "width"
            ),
            height=_positive_number(
                options.get("height", CHART_CONFIG["default_height"]), "height"
            ),
            title=title,
            legend=legend,
            theme=theme,
            value_display=ValueDisplay(
                str(options.get("displayValues", ValueDisplay.LEGEND.value)).lower()
            ),
            use_percentage=bool(options.get("usePercentages", True)),
        )
    except ChartValidationError:
        raise
    except (ChartConfigurationError, AttributeError, TypeError, ValueError) as e:
        raise ChartValidationError(f"Invalid chart options: {e}") from e


def parse_items(data: Any) -> List[WeightedItem]:
    """Build items from a list of ``{"name", "value", "color", "icon"}`` objects."""
    if isinstance(data, Mapping):
        data = data.get("data")
    if not isinstance(data, list):
        raise ChartValidationError("Chart data must be a list of items")

    items = []
    for position, entry in enumerate(data):
        if not isinstance(entry, Mapping):
            raise ChartValidationError(f"Item {position} is not an object")
        name = entry.get("name")
        value = entry.get("value")
        if not isinstance(name, str) or not name:
            raise ChartValidationError(f"Item {position} has no name")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ChartValidationError(
                f"Item {position} ({name}) has a non-numeric value: {value!r}"
            )
        items.append(
            WeightedItem(
                name=name,
                value=value,
                color=str(entry.get("color") or ""),
                icon=entry.get("icon") or None,
            )
        )
    return items


def select_top_items(items: Sequence[WeightedItem], count: int) -> List[WeightedItem]:
    """Keep the ``count`` largest items, in their original order."""
    if count >= len(items):
        return list(items)
    ranked = sorted(range(len(items)), key=lambda i: items[i].value, reverse=True)
    keep = set(ranked[:count])
    return [item for i, item in enumerate(items) if i in keep]


def _read_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ChartFetchError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ChartFetchError(f"Could not read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ChartValidationError(f"Failed to parse JSON in {path}: {e}") from e


def load_items(path: str) -> List[WeightedItem]:
    """Load a plain item list (or an object with a ``data`` key) from JSON."""
    return parse_items(_read_json(path))


def load_custom_config(path: str) -> Tuple[List[WeightedItem], ChartConfig]:
    """Load items and options from a custom config JSON file."""
    custom_config = _read_json(path)
    if not isinstance(custom_config, Mapping):
        raise ChartValidationError("Custom config must be a JSON object")

    config = map_custom_options(custom_config.get("options"))
    items = parse_items(custom_config.get("data"))
    if OUTPUT_CONFIG["verbose"]:
        print(f"Loaded {len(items)} items from {path}")
    return items, config
