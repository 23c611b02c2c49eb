"""
Tests for option parsing and custom config loading.
"""

import json
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from chart_errors import (
    ChartConfigurationError,
    ChartFetchError,
    ChartValidationError,
)
from chart_options import (
    ChartOptionsParser,
    load_custom_config,
    load_items,
    map_custom_options,
    parse_items,
    select_top_items,
)
from chart_types import LegendAlign, TextAnchor, ValueDisplay, WeightedItem
from themes import THEMES


@pytest.mark.unit
class TestChartOptionsParser:
    """Test flat parameter parsing."""

    def test_defaults(self):
        config = ChartOptionsParser({}).build_chart_config()
        assert (config.width, config.height) == (600, 400)
        assert config.title.text == "Bubble Chart"
        assert config.title.font_size == "24px"
        assert config.title.font_weight == "bold"
        assert config.title.fill == THEMES["default"].text_color
        assert config.title.text_anchor is TextAnchor.MIDDLE
        assert config.legend.show is True
        assert config.legend.align is LegendAlign.CENTER
        assert config.theme == THEMES["default"]
        assert config.value_display is ValueDisplay.LEGEND
        assert config.use_percentage is True

    def test_get_string(self):
        parser = ChartOptionsParser({"title": "Hello"})
        assert parser.get_string("title", "x") == "Hello"
        assert parser.get_string("missing", "x") == "x"

    @pytest.mark.parametrize(
        "raw,expected", [("800", 800), ("12px", 12), ("abc", 600), ("", 600), ("-5", -5)]
    )
    def test_get_number(self, raw, expected):
        assert ChartOptionsParser({"width": raw}).get_number("width", 600) == expected

    @pytest.mark.parametrize(
        "raw,expected", [("true", True), ("TRUE", True), ("false", False), ("yes", False)]
    )
    def test_get_boolean(self, raw, expected):
        assert ChartOptionsParser({"legend": raw}).get_boolean("legend", True) is expected

    def test_get_boolean_default(self):
        assert ChartOptionsParser({}).get_boolean("legend", False) is False

    def test_get_theme(self):
        parser = ChartOptionsParser({"theme": "Dark_Dimmed", "other": "nope"})
        assert parser.get_theme("theme", THEMES["default"]) == THEMES["dark_dimmed"]
        assert parser.get_theme("other", THEMES["light"]) == THEMES["light"]

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("left", TextAnchor.START),
            ("center", TextAnchor.MIDDLE),
            ("right", TextAnchor.END),
            ("diagonal", TextAnchor.MIDDLE),
        ],
    )
    def test_get_text_anchor(self, raw, expected):
        parser = ChartOptionsParser({"title-align": raw})
        assert parser.get_text_anchor("title-align", TextAnchor.MIDDLE) is expected

    @pytest.mark.parametrize(
        "raw,expected", [("0", 1), ("-3", 1), ("50", 20), ("7", 7), ("many", 10)]
    )
    def test_items_count_clamped(self, raw, expected):
        assert ChartOptionsParser({"items-count": raw}).get_items_count() == expected

    def test_title_color_follows_theme(self):
        config = ChartOptionsParser({"theme": "dark"}).parse_title_options()
        assert config.fill == THEMES["dark"].text_color

    def test_title_options(self):
        config = ChartOptionsParser(
            {
                "title": "Langs",
                "title-size": "30",
                "title-weight": "600",
                "title-color": "#ff00ff",
                "title-align": "left",
            }
        ).parse_title_options()
        assert config.text == "Langs"
        assert config.font_size == "30px"
        assert config.font_weight == "600"
        assert config.fill == "#ff00ff"
        assert config.text_anchor is TextAnchor.START

    def test_invalid_title_size(self):
        with pytest.raises(ChartValidationError):
            ChartOptionsParser({"title-size": "0"}).parse_title_options()

    def test_legend_options(self):
        legend = ChartOptionsParser(
            {"legend": "false", "legend-align": "Right"}
        ).parse_legend_options()
        assert legend.show is False
        assert legend.align is LegendAlign.RIGHT

    def test_invalid_legend_alignment(self):
        with pytest.raises(ChartValidationError):
            ChartOptionsParser({"legend-align": "top"}).parse_legend_options()

    def test_value_display(self):
        parser = ChartOptionsParser({"display-values": "all"})
        assert parser.parse_value_display() is ValueDisplay.ALL

    def test_invalid_value_display(self):
        with pytest.raises(ChartValidationError) as exc_info:
            ChartOptionsParser({"display-values": "sometimes"}).parse_value_display()
        assert isinstance(exc_info.value, ChartConfigurationError)
        assert exc_info.value.status == 400


@pytest.mark.unit
class TestCustomConfig:
    """Test the JSON custom config format."""

    def test_map_full_options(self):
        config = map_custom_options(
            {
                "width": 800,
                "height": 500,
                "displayValues": "bubbles",
                "usePercentages": False,
                "title": {
                    "text": "My Skills",
                    "fontSize": "28px",
                    "fontWeight": "600",
                    "color": "#123456",
                    "align": "start",
                },
                "legend": {"show": True, "align": "left"},
                "theme": "light",
            }
        )
        assert (config.width, config.height) == (800, 500)
        assert config.value_display is ValueDisplay.BUBBLES
        assert config.use_percentage is False
        assert config.title.text == "My Skills"
        assert config.title.font_size == "28px"
        assert config.title.fill == "#123456"
        assert config.title.text_anchor is TextAnchor.START
        assert config.legend.align is LegendAlign.LEFT
        assert config.theme == THEMES["light"]

    def test_defaults_for_missing_sections(self):
        config = map_custom_options({})
        assert config.title.text == "Bubble Chart"
        assert config.legend.show is True
        assert config.theme == THEMES["default"]

    def test_null_sections_disable_output(self):
        config = map_custom_options({"title": None, "legend": None})
        assert config.title.text == ""
        assert config.legend.show is False

    def test_inline_theme(self):
        config = map_custom_options(
            {"theme": {"textColor": "#eeeeee", "backgroundColor": "#101010"}}
        )
        assert config.theme.text_color == "#eeeeee"
        assert config.title.fill == "#eeeeee"

    @pytest.mark.parametrize(
        "options",
        [
            {"theme": "neon"},
            {"width": "wide"},
            {"height": 0},
            {"title": {"fontSize": "huge"}},
            {"title": {"align": "diagonal"}},
            {"legend": {"align": "top"}},
            {"displayValues": "sometimes"},
            {"title": "just text"},
        ],
    )
    def test_invalid_options(self, options):
        with pytest.raises(ChartValidationError):
            map_custom_options(options)

    def test_parse_items(self):
        items = parse_items(
            [
                {"name": "Python", "value": 60, "color": "#3572A5", "icon": "data:x"},
                {"name": "Go", "value": 40},
            ]
        )
        assert items == [
            WeightedItem("Python", 60, "#3572A5", "data:x"),
            WeightedItem("Go", 40, "", None),
        ]

    def test_parse_items_from_data_object(self):
        assert len(parse_items({"data": [{"name": "A", "value": 1}]})) == 1

    @pytest.mark.parametrize(
        "data",
        [
            "nope",
            [{"name": "A", "value": "ten"}],
            [{"value": 3}],
            [{"name": "A", "value": True}],
            [42],
        ],
    )
    def test_parse_items_invalid(self, data):
        with pytest.raises(ChartValidationError):
            parse_items(data)

    def test_load_custom_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "options": {"width": 500, "theme": "dark"},
                    "data": [{"name": "A", "value": 70}, {"name": "B", "value": 30}],
                }
            ),
            encoding="utf-8",
        )
        items, config = load_custom_config(str(path))
        assert [item.name for item in items] == ["A", "B"]
        assert config.width == 500
        assert config.theme == THEMES["dark"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ChartFetchError):
            load_custom_config(str(tmp_path / "missing.json"))

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ChartValidationError):
            load_custom_config(str(path))

    def test_load_items(self, tmp_path):
        path = tmp_path / "items.json"
        path.write_text(json.dumps([{"name": "A", "value": 2}]), encoding="utf-8")
        assert load_items(str(path)) == [WeightedItem("A", 2)]


@pytest.mark.unit
def test_select_top_items_keeps_order():
    items = [
        WeightedItem("a", 1),
        WeightedItem("b", 9),
        WeightedItem("c", 5),
        WeightedItem("d", 7),
    ]
    assert [item.name for item in select_top_items(items, 2)] == ["b", "d"]
    assert select_top_items(items, 10) == items
