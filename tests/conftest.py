"""
Pytest configuration and fixtures for the bubble chart tests.
Most tests use a fixed-width metrics stub so layout numbers are predictable.
"""

import pytest
import tempfile
import os
import sys
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from chart_options import ChartOptionsParser
from chart_types import WeightedItem
from config import OUTPUT_CONFIG
from text_metrics import TextMetrics
from text_utils import parse_font_size


class FixedWidthMetrics:
    """Every character is 0.6em wide and every line 1.2em tall."""

    CHAR_WIDTH = 0.6
    LINE_HEIGHT = 1.2

    def measure(self, text, font_size, font_weight="normal"):
        size = parse_font_size(font_size)
        return TextMetrics(
            width=len(text) * size * self.CHAR_WIDTH, height=size * self.LINE_HEIGHT
        )

    def measure_width(self, text, font_size, font_weight="normal"):
        return self.measure(text, font_size, font_weight).width

    def measure_height(self, text, font_size, font_weight="normal"):
        return self.measure(text, font_size, font_weight).height


@pytest.fixture(autouse=True)
def quiet_output():
    """Keep progress output out of test logs and restore the config afterwards."""
    with patch.dict(OUTPUT_CONFIG, {"verbose": False, "timing_info": False}):
        yield


@pytest.fixture
def fixed_metrics():
    return FixedWidthMetrics()


@pytest.fixture
def sample_items():
    return [
        WeightedItem("Python", 40, "#3572A5"),
        WeightedItem("TypeScript", 25, "#3178c6"),
        WeightedItem("Go", 15, "#00ADD8"),
        WeightedItem("Rust", 10, "#dea584"),
        WeightedItem("Shell", 6, "#89e051"),
        WeightedItem("C", 4, "#555555"),
    ]


@pytest.fixture
def chart_config():
    """Default chart configuration (600x400, default theme, legend shown)."""
    return ChartOptionsParser({}).build_chart_config()


@pytest.fixture
def temp_output_file():
    """Fixture that provides a temporary output file path and cleans it up after test."""
    with tempfile.NamedTemporaryFile(suffix=".svg", delete=False) as tmp_file:
        output_path = tmp_file.name

    yield output_path

    # Cleanup
    if os.path.exists(output_path):
        os.unlink(output_path)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line(
        "markers", "quality: marks tests as quality assurance tests"
    )
    config.addinivalue_line("markers", "cli: marks tests as CLI functionality tests")
