"""
Tests for the command-line interface.
"""

import json
import os
import subprocess
import sys

import pytest

# Add parent directory to path for imports
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from main import build_params, parse_arguments

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def run_cli(*args):
    env = os.environ.copy()
    env["PYTHONIOENCODING"] = "utf-8"
    return subprocess.run(
        [sys.executable, "main.py", *args],
        cwd=REPO_ROOT,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=60,
        env=env,
    )


@pytest.fixture
def items_file(tmp_path):
    path = tmp_path / "items.json"
    path.write_text(
        json.dumps(
            [
                {"name": "Python", "value": 48.5, "color": "#3572A5"},
                {"name": "Go", "value": 30, "color": "#00ADD8"},
                {"name": "Rust", "value": 21.5},
            ]
        ),
        encoding="utf-8",
    )
    return str(path)


@pytest.mark.unit
class TestArgumentMapping:
    """Test flag to parameter mapping."""

    def test_unset_flags_are_omitted(self):
        args = parse_arguments(["--input", "items.json"])
        assert build_params(args) == {}

    def test_flags_become_string_params(self):
        args = parse_arguments(
            [
                "--input",
                "items.json",
                "--width",
                "800",
                "--title",
                "Langs",
                "--title-align",
                "left",
                "--no-legend",
                "--no-percentages",
                "--display-values",
                "all",
            ]
        )
        assert build_params(args) == {
            "width": "800",
            "title": "Langs",
            "title-align": "left",
            "display-values": "all",
            "legend": "false",
            "percentages": "false",
        }


@pytest.mark.cli
@pytest.mark.integration
class TestMainCLI:
    """Run main.py as a separate process."""

    def test_renders_svg(self, items_file, temp_output_file):
        result = run_cli(
            "--input", items_file, "--output", temp_output_file, "--theme", "dark", "--quiet"
        )
        assert result.returncode == 0, f"CLI command failed: {result.stderr}"
        with open(temp_output_file, encoding="utf-8") as f:
            svg = f.read()
        assert svg.startswith("<svg")
        assert svg.count('<g class="bubble-') == 3
        assert "Bubble chart saved to" in result.stdout

    def test_items_count_limits_bubbles(self, items_file, temp_output_file):
        result = run_cli(
            "--input", items_file, "--output", temp_output_file, "--items-count", "2", "-q"
        )
        assert result.returncode == 0, f"CLI command failed: {result.stderr}"
        with open(temp_output_file, encoding="utf-8") as f:
            svg = f.read()
        assert svg.count('<g class="bubble-') == 2
        assert 'data-name="Rust"' not in svg

    def test_custom_config(self, tmp_path, temp_output_file):
        config_path = tmp_path / "custom.json"
        config_path.write_text(
            json.dumps(
                {
                    "options": {"width": 400, "height": 300, "title": None},
                    "data": [{"name": "A", "value": 2}, {"name": "B", "value": 1}],
                }
            ),
            encoding="utf-8",
        )
        result = run_cli("--config", str(config_path), "--output", temp_output_file, "-q")
        assert result.returncode == 0, f"CLI command failed: {result.stderr}"
        with open(temp_output_file, encoding="utf-8") as f:
            svg = f.read()
        assert 'width="416"' in svg
        assert "bc-title" not in svg

    def test_same_seed_same_file(self, items_file, tmp_path):
        first = tmp_path / "first.svg"
        second = tmp_path / "second.svg"
        for output in (first, second):
            result = run_cli(
                "--input", items_file, "--output", str(output), "--seed", "42", "-q"
            )
            assert result.returncode == 0, f"CLI command failed: {result.stderr}"
        assert first.read_text(encoding="utf-8") == second.read_text(encoding="utf-8")

    def test_empty_data(self, tmp_path):
        items_path = tmp_path / "empty.json"
        items_path.write_text("[]", encoding="utf-8")
        output = tmp_path / "chart.svg"
        result = run_cli("--input", str(items_path), "--output", str(output), "-q")
        assert result.returncode == 0
        assert "No data to render" in result.stdout
        assert not output.exists()

    def test_missing_input_file(self, tmp_path):
        result = run_cli("--input", str(tmp_path / "missing.json"), "-q")
        assert result.returncode == 5
        assert "Fetch Error" in result.stderr

    def test_invalid_json(self, tmp_path):
        items_path = tmp_path / "broken.json"
        items_path.write_text("[{", encoding="utf-8")
        result = run_cli("--input", str(items_path), "-q")
        assert result.returncode == 4
        assert "Validation Error" in result.stderr

    def test_no_input(self):
        result = run_cli("--quiet")
        assert result.returncode == 1
        assert "--input or --config is required" in result.stdout

    def test_list_themes(self):
        result = run_cli("--list-themes")
        assert result.returncode == 0
        assert "dark_dimmed" in result.stdout
