"""
Main entry point for the Bubble Chart renderer.
Provides both command-line interface and example usage.
"""

import argparse
import sys
import time

from bubble_chart import BubbleChart
from chart_errors import ChartError
from chart_options import (
    ChartOptionsParser,
    load_custom_config,
    load_items,
    select_top_items,
)
from chart_types import NO_CONTENT, WeightedItem
from config import CHART_CONFIG, OUTPUT_CONFIG
from text_metrics import TextMetricsProvider
from themes import get_available_themes


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Bubble Chart - Render weighted items as an animated SVG bubble chart",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render a list of {"name", "value", "color", "icon"} items
  python main.py --input languages.json --output chart.svg

  # Custom title, dark theme and values printed inside the bubbles
  python main.py --input languages.json --title "Top Languages" --theme dark --display-values bubbles

  # Keep only the 5 largest items, no legend
  python main.py --input languages.json --items-count 5 --no-legend

  # Render from a custom config file ({"options": {...}, "data": [...]})
  python main.py --config custom-config.json --output chart.svg

  # Reproducible animation timings
  python main.py --input languages.json --seed 42

  # List available themes
  python main.py --list-themes
""",
    )

    # Input options
    input_group = parser.add_argument_group("Input Options")
    input_group.add_argument(
        "--input", "-i", type=str, help="JSON file with the items to chart"
    )
    input_group.add_argument(
        "--config",
        "-c",
        type=str,
        help="Custom config JSON file holding both options and data",
    )
    input_group.add_argument(
        "--items-count",
        type=int,
        help=(
            f"Number of largest items to keep "
            f"({CHART_CONFIG['min_items_count']}-{CHART_CONFIG['max_items_count']}, "
            f"default: {CHART_CONFIG['default_items_count']})"
        ),
    )

    # Chart options
    chart_group = parser.add_argument_group("Chart Options")
    chart_group.add_argument(
        "--width",
        type=int,
        help=f"Bubble area width in px (default: {CHART_CONFIG['default_width']})",
    )
    chart_group.add_argument(
        "--height",
        type=int,
        help=f"Bubble area height in px (default: {CHART_CONFIG['default_height']})",
    )
    chart_group.add_argument("--theme", type=str, help="Theme name (default: default)")
    chart_group.add_argument(
        "--display-values",
        type=str,
        choices=["none", "bubbles", "legend", "all"],
        help="Where to print item values (default: legend)",
    )
    chart_group.add_argument(
        "--no-percentages",
        action="store_true",
        help="Print raw values instead of percentages",
    )
    chart_group.add_argument(
        "--seed", type=int, help="Seed for reproducible animation timings"
    )

    # Title options
    title_group = parser.add_argument_group("Title Options")
    title_group.add_argument("--title", type=str, help="Chart title (empty for none)")
    title_group.add_argument("--title-size", type=int, help="Title font size in px")
    title_group.add_argument("--title-weight", type=str, help="Title font weight")
    title_group.add_argument("--title-color", type=str, help="Title color")
    title_group.add_argument(
        "--title-align",
        type=str,
        choices=["left", "center", "right"],
        help="Title alignment",
    )

    # Legend options
    legend_group = parser.add_argument_group("Legend Options")
    legend_group.add_argument(
        "--legend",
        dest="legend",
        action="store_true",
        default=None,
        help="Show the legend (default)",
    )
    legend_group.add_argument(
        "--no-legend", dest="legend", action="store_false", help="Hide the legend"
    )
    legend_group.add_argument(
        "--legend-align",
        type=str,
        choices=["left", "center", "right"],
        help="Legend row alignment",
    )

    # Output options
    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "--output",
        "-o",
        type=str,
        default="bubble_chart.svg",
        help="Path of the SVG file to write (default: bubble_chart.svg)",
    )
    output_group.add_argument(
        "--quiet", "-q", action="store_true", help="Minimal output"
    )
    output_group.add_argument(
        "--list-themes", action="store_true", help="List available themes"
    )

    return parser.parse_args(argv)


def build_params(args) -> dict:
    """Map command line flags to chart option parameters."""
    params = {
        "width": args.width,
        "height": args.height,
        "theme": args.theme,
        "display-values": args.display_values,
        "title": args.title,
        "title-size": args.title_size,
        "title-weight": args.title_weight,
        "title-color": args.title_color,
        "title-align": args.title_align,
        "legend-align": args.legend_align,
        "items-count": args.items_count,
    }
    if args.legend is not None:
        params["legend"] = "true" if args.legend else "false"
    if args.no_percentages:
        params["percentages"] = "false"
    return {key: str(value) for key, value in params.items() if value is not None}


def write_svg(svg: str, output_path: str) -> None:
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(svg)


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)

    # Set quiet mode
    if args.quiet:
        OUTPUT_CONFIG["verbose"] = False
        OUTPUT_CONFIG["timing_info"] = False

    # Handle list themes option
    if args.list_themes:
        print("\nAvailable themes:")
        print("-" * 30)
        for name in get_available_themes():
            print(name)
        print("-" * 30)
        print("Usage: --theme dark")
        return

    if not args.input and not args.config:
        print("Error: --input or --config is required")
        sys.exit(1)

    start_time = time.time()

    try:
        options = ChartOptionsParser(build_params(args))
        if args.config:
            items, chart_config = load_custom_config(args.config)
        else:
            items = load_items(args.input)
            chart_config = options.build_chart_config()

        items = select_top_items(items, options.get_items_count())

        if OUTPUT_CONFIG["verbose"]:
            print(f"Rendering {len(items)} items...")

        chart = BubbleChart(TextMetricsProvider())
        svg = chart.render(items, chart_config, seed=args.seed)
        if svg is NO_CONTENT:
            print("No data to render")
            return

        write_svg(svg, args.output)
    except ChartError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(e.exit_code)
    except OSError as e:
        print(f"Error writing {args.output}: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Bubble chart saved to: {args.output}")
    if OUTPUT_CONFIG["timing_info"]:
        elapsed = round(time.time() - start_time, 2)
        print(f"Completed in {elapsed} seconds")


def example_usage():
    """Example of programmatic usage."""
    items = [
        WeightedItem("Python", 48.5, "#3572A5"),
        WeightedItem("TypeScript", 21.3, "#3178c6"),
        WeightedItem("Go", 12.7, "#00ADD8"),
        WeightedItem("Rust", 9.1, "#dea584"),
        WeightedItem("Shell", 5.2, "#89e051"),
        WeightedItem("Dockerfile", 3.2, "#384d54"),
    ]

    chart_config = ChartOptionsParser(
        {"title": "Languages :rocket:", "theme": "dark", "display-values": "all"}
    ).build_chart_config()

    print("Example: Rendering a sample chart")
    svg = BubbleChart().render(items, chart_config, seed=7)
    write_svg(svg, "example_bubble_chart.svg")
    print("Example chart saved to: example_bubble_chart.svg")


if __name__ == "__main__":
    # Check if running with arguments
    if len(sys.argv) > 1:
        main()
    else:
        # Run example if no arguments provided
        print("No arguments provided. Running example usage...\n")
        example_usage()
        print("\n\nFor command-line usage, run: python main.py --help")
