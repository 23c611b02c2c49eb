"""
Bubble Chart SVG generator.
Packs weighted items into bubbles and assembles a self-contained SVG document
with a title, a legend and CSS animation.
"""

import asyncio
import math
import numbers
import time
from contextlib import contextmanager
from typing import Dict, List, Optional, Sequence, Union

import matplotlib.colors as mcolors
import numpy as np

from bubble_layout import BubbleLayoutEngine
from chart_errors import (
    ChartConfigurationError,
    ChartError,
    ChartRenderingError,
    MetricsProviderError,
)
from chart_styles import (
    bubble_animation_style,
    common_styles,
    legend_animation_style,
    svg_defs,
)
from chart_types import (
    NO_CONTENT,
    BubbleFragment,
    ChartConfig,
    LegendAlign,
    LegendItem,
    LegendLayout,
    LegendRow,
    NoContent,
    PackedNode,
    TextAnchor,
    TextBlock,
    Theme,
    TitleConfig,
    ValueDisplay,
    WeightedItem,
)
from config import (
    BUBBLE_CONFIG,
    CHART_CONFIG,
    LEGEND_CONFIG,
    OUTPUT_CONFIG,
    TITLE_CONFIG,
)
from text_metrics import TextMetricsProvider
from text_utils import (
    escape_special_chars,
    format_coord,
    format_value,
    parse_emojis,
    to_kebab_case,
    truncate_text,
)


def alignment_position(
    anchor: Union[TextAnchor, str], width: float, padding: float = 0
) -> float:
    """X coordinate of a text anchored at start, middle or end of ``width``."""
    anchor = TextAnchor(anchor)
    if anchor is TextAnchor.START:
        return padding
    if anchor is TextAnchor.END:
        return width - padding
    return width / 2


@contextmanager
def render_stage(stage: str):
    """Re-raise unexpected failures of one chart section as ChartRenderingError."""
    try:
        yield
    except ChartError:
        raise
    except Exception as e:
        raise ChartRenderingError(f"Failed to create {stage}: {e}", stage=stage) from e


class ColorManager:
    """Resolves bubble fill colors and the overlay tint."""

    def __init__(
        self, palette: Optional[List[str]] = None, overlay: Optional[str] = None
    ):
        self.palette = palette or BUBBLE_CONFIG["palette"]
        self.overlay = overlay or BUBBLE_CONFIG["overlay_color"]

    @staticmethod
    def is_valid_color(color: Optional[str]) -> bool:
        if not color:
            return False
        return color == "transparent" or mcolors.is_color_like(color)

    def get_palette_color(self, index: int) -> str:
        """Get the fallback color for the item at ``index``."""
        return self.palette[index % len(self.palette)]

    def resolve(self, color: Optional[str], index: int) -> str:
        """Keep a usable item color, otherwise pick one from the palette."""
        if self.is_valid_color(color):
            return color
        return self.get_palette_color(index)

    def overlay_color(self, theme: Theme) -> str:
        """Overlay tint, pulled slightly toward the theme background."""
        base = np.array(mcolors.to_rgb(self.overlay))
        background = theme.background_color
        if background == "transparent" or not mcolors.is_color_like(background):
            return mcolors.to_hex(base)
        blended = base * 0.85 + np.array(mcolors.to_rgb(background)) * 0.15
        return mcolors.to_hex(np.clip(blended, 0.0, 1.0))


class LabelComposer:
    """Wraps, truncates and positions the title and bubble labels."""

    def __init__(self, metrics: TextMetricsProvider):
        self.metrics = metrics

    def wrap_text(
        self,
        text: str,
        max_width: float,
        font_size: Union[float, str],
        font_weight: str = "normal",
    ) -> List[str]:
        """
        Greedily break ``text`` on spaces so that each line stays narrower
        than ``max_width``. Single words are never broken. The text must
        already be escaped.
        """
        words = text.split(" ")
        lines = []
        current_line = words[0]
        widths: Dict[str, float] = {}

        for word in words[1:]:
            combined = f"{current_line} {word}"
            if combined not in widths:
                widths[combined] = self.metrics.measure_width(
                    combined, font_size, font_weight
                )
            if widths[combined] < max_width:
                current_line = combined
            else:
                lines.append(current_line)
                current_line = word

        lines.append(current_line)
        return lines

    def compose_title(self, config: TitleConfig, available_width: float) -> TextBlock:
        """
        Lay out the chart title within ``available_width``.

        Emoji shortcodes are expanded and the text is escaped here, once.
        Titles longer than the line cap keep their first lines and end with
        an ellipsis.
        """
        if not config.text:
            return TextBlock(lines=[], line_height=0.0)

        text = escape_special_chars(parse_emojis(config.text))
        line_height = self.metrics.measure_height(
            text, config.font_size, config.font_weight
        )
        text_width = self.metrics.measure_width(
            text, config.font_size, config.font_weight
        )
        if text_width <= available_width:
            return TextBlock(lines=[text], line_height=line_height)

        lines = self.wrap_text(
            text, available_width, config.font_size, config.font_weight
        )
        max_lines = TITLE_CONFIG["max_lines"]
        if len(lines) > max_lines:
            lines = lines[:max_lines]
            last = lines[-1]
            lines[-1] = truncate_text(last, len(last) - 3, TITLE_CONFIG["ellipsis"])

        return TextBlock(lines=lines, line_height=line_height)

    def compose_bubble_label(
        self, text: str, diameter: float, font_size: Union[float, str]
    ) -> TextBlock:
        """Wrap an (escaped) item name inside a bubble of ``diameter``."""
        lines = self.wrap_text(text, diameter, font_size)
        line_height = self.metrics.measure_height(text, font_size)
        return TextBlock(lines=lines, line_height=line_height)

    @staticmethod
    def title_style(config: TitleConfig) -> str:
        """Inline CSS built from the title's font options."""
        font_size = config.font_size
        if isinstance(font_size, numbers.Real):
            font_size = f"{format_coord(font_size)}px"

        declarations = {
            "fontSize": font_size,
            "fontWeight": config.font_weight,
            "fill": config.fill,
        }
        style = " ".join(
            f"{to_kebab_case(key)}: {value};"
            for key, value in declarations.items()
            if value is not None
        )
        return escape_special_chars(style.replace('"', "'"))

    def render_title(self, block: TextBlock, config: TitleConfig, width: float) -> str:
        """Title markup; line breaks advance by the measured title height."""
        if not block.lines:
            return ""

        x = format_coord(alignment_position(config.text_anchor, width))
        if block.line_count > 1:
            content = "".join(
                f'<tspan x="{x}" dy="{0 if i == 0 else format_coord(block.line_height)}">'
                f"{line}</tspan>"
                for i, line in enumerate(block.lines)
            )
        else:
            content = block.lines[0]

        return (
            f'<text class="bc-title" x="{x}" y="{format_coord(block.line_height)}" '
            f'text-anchor="{TextAnchor(config.text_anchor).value}" '
            f'style="{self.title_style(config)}">{content}</text>'
        )


class LegendComposer:
    """Greedy row packing of legend entries below the bubbles."""

    def __init__(self, metrics: TextMetricsProvider):
        self.metrics = metrics
        self.text_size = LEGEND_CONFIG["text_size"]
        self.item_height = LEGEND_CONFIG["item_height"]
        self.row_padding = LEGEND_CONFIG["row_padding"]
        self.item_padding = LEGEND_CONFIG["item_padding"]
        self.marker_radius = LEGEND_CONFIG["marker_radius"]

    def legend_text(
        self, item: WeightedItem, value_display: ValueDisplay, use_percentage: bool
    ) -> str:
        if ValueDisplay(value_display).shows_in_legend:
            return f"{item.name} ({format_value(item.value, use_percentage)})"
        return item.name

    def compose_legend(
        self,
        items: Sequence[WeightedItem],
        chart_width: float,
        alignment: Union[LegendAlign, str],
        value_display: Union[ValueDisplay, str],
        use_percentage: bool,
    ) -> LegendLayout:
        """
        Group legend entries into rows no wider than ``chart_width``.

        An entry wider than the chart gets a row of its own. Each row is
        offset horizontally according to ``alignment``.
        """
        alignment = LegendAlign(alignment)
        legend_items = []
        for item in items:
            text = self.legend_text(item, value_display, use_percentage)
            text_width = self.metrics.measure_width(text, self.text_size)
            legend_items.append(
                LegendItem(
                    text=text,
                    measured_width=text_width,
                    footprint=text_width + self.marker_radius * 2 + self.item_padding,
                    color=item.color,
                )
            )

        rows: List[LegendRow] = []
        current = LegendRow()
        for legend_item in legend_items:
            if current.items and current.width + legend_item.footprint > chart_width:
                rows.append(current)
                current = LegendRow()
            current.items.append(legend_item)
        if current.items:
            rows.append(current)

        row_step = self.item_height + self.row_padding
        for row_index, row in enumerate(rows):
            if alignment is LegendAlign.CENTER:
                row.x_offset = (chart_width - row.width) / 2
            elif alignment is LegendAlign.RIGHT:
                row.x_offset = chart_width - row.width
            row.y_offset = row_index * row_step

        total_height = len(rows) * row_step + CHART_CONFIG["chart_padding"]
        return LegendLayout(rows=rows, total_height=total_height)

    def render_legend(self, layout: LegendLayout, top: float) -> str:
        """Legend markup placed ``top`` pixels below the content origin."""
        step = LEGEND_CONFIG["item_delay_step"]
        markup = f'<g class="legend" transform="translate(0, {format_coord(top)})">'
        for row_index, row in enumerate(layout.rows):
            x = row.x_offset
            for item_index, item in enumerate(row.items):
                delay = row_index + item_index * step
                markup += (
                    f'<g transform="translate({format_coord(x)}, {format_coord(row.y_offset)})" '
                    f'class="legend-item" style="animation-delay: {format_coord(delay)}s;">'
                    f'<circle cx="10" cy="15" r="{self.marker_radius}" fill="{item.color}" />'
                    f'<text x="22" y="15">{item.text}</text>'
                    "</g>"
                )
                x += item.footprint
        return markup + "</g>"


class BubbleRenderer:
    """Builds the markup of a single bubble."""

    def __init__(
        self,
        label_composer: LabelComposer,
        color_manager: Optional[ColorManager] = None,
    ):
        self.label_composer = label_composer
        self.color_manager = color_manager or ColorManager()

    def render_bubble(
        self,
        node: PackedNode,
        index: int,
        config: ChartConfig,
        seed: Optional[int] = None,
    ) -> BubbleFragment:
        """
        Render one packed node.

        Args:
            node: Packed node; its item name must already be escaped
            index: Position of the node, used in CSS class names
            config: Chart configuration (value display, percentages, theme)
            seed: Animation seed; None draws fresh random values

        Returns:
            BubbleFragment with the group markup and its animation CSS
        """
        r = node.radius
        item = node.item
        color = self.color_manager.resolve(item.color, index)
        overlay = self.color_manager.overlay_color(config.theme)

        markup = (
            f'<g class="bubble-{index}" '
            f'transform="translate({format_coord(node.x)},{format_coord(node.y)})" '
            f'data-name="{item.name}">'
        )

        # Highlights
        markup += (
            f'<ellipse rx="{format_coord(r * 0.6)}" ry="{format_coord(r * 0.3)}" cx="0" '
            f'cy="{format_coord(r * -0.6)}" fill="url(#grad--spot)" '
            'transform="rotate(-45)" class="shape"></ellipse>'
            f'<ellipse rx="{format_coord(r * 0.4)}" ry="{format_coord(r * 0.2)}" cx="0" '
            f'cy="{format_coord(r * -0.7)}" fill="url(#grad--spot)" '
            'transform="rotate(-225)" class="shape"></ellipse>'
        )

        markup += (
            f'<circle r="{format_coord(r)}" cx="0" cy="0" fill="{color}" '
            'mask="url(#mask--light-bottom)" class="shape"></circle>'
            f'<circle r="{format_coord(r)}" cx="0" cy="0" fill="{overlay}" '
            'mask="url(#mask--light-top)" class="shape"></circle>'
        )

        if item.icon:
            markup += self._icon_markup(item.icon, r)
        else:
            markup += self._label_markup(item.name, r, color)

        if ValueDisplay(config.value_display).shows_in_bubbles:
            value = format_value(item.value, config.use_percentage)
            markup += (
                f'<text class="b-value" dy="3.5em" '
                f'style="font-size: {format_coord(r * BUBBLE_CONFIG["value_font_ratio"])}px;">'
                f"{value}</text>"
            )

        markup += "</g>"
        return BubbleFragment(
            markup=markup, animation_style=bubble_animation_style(node, index, seed)
        )

    @staticmethod
    def _icon_markup(icon: str, r: float) -> str:
        return (
            f'<image class="b-icon" href="{escape_special_chars(icon)}" '
            f'width="{format_coord(r)}" height="{format_coord(r)}" '
            f'x="{format_coord(-r / 2)}" y="{format_coord(-r / 2)}"></image>'
        )

    def _label_markup(self, name: str, r: float, color: str) -> str:
        font_size = r * BUBBLE_CONFIG["label_font_ratio"]
        block = self.label_composer.compose_bubble_label(name, r * 2, font_size)

        if block.line_count > 1:
            shift = r * BUBBLE_CONFIG["label_line_shift_ratio"]
            content = "".join(
                f'<tspan x="0" dy="{format_coord(-shift if i == 0 else block.line_height + shift)}">'
                f"{line}</tspan>"
                for i, line in enumerate(block.lines)
            )
        else:
            content = name

        return (
            f'<text class="b-text" dy=".3em" '
            f'style="font-size: {format_coord(font_size)}px; text-shadow: 0 0 5px {color};">'
            f"{content}</text>"
        )


class BubbleChart:
    """Creates bubble chart SVG documents from weighted items."""

    def __init__(
        self,
        metrics: Optional[TextMetricsProvider] = None,
        layout_engine: Optional[BubbleLayoutEngine] = None,
        color_manager: Optional[ColorManager] = None,
    ):
        """Initialize the chart components; ``metrics`` can be shared across charts."""
        self.metrics = metrics or TextMetricsProvider()
        self.layout_engine = layout_engine or BubbleLayoutEngine()
        self.color_manager = color_manager or ColorManager()
        self.label_composer = LabelComposer(self.metrics)
        self.legend_composer = LegendComposer(self.metrics)
        self.renderer = BubbleRenderer(self.label_composer, self.color_manager)

    @staticmethod
    def _validate_config(config: ChartConfig) -> None:
        if config is None:
            raise ChartConfigurationError("Chart configuration is missing")
        for name in ("width", "height"):
            value = getattr(config, name)
            if (
                isinstance(value, bool)
                or not isinstance(value, numbers.Real)
                or not math.isfinite(value)
            ):
                raise ChartConfigurationError(f"Invalid {name}: {value!r}")
        if config.title is None or config.legend is None:
            raise ChartConfigurationError("Title or legend options are missing")
        if config.theme is None:
            raise ChartConfigurationError("Theme is missing")

    def _prepare_items(self, items: Sequence[WeightedItem]) -> List[WeightedItem]:
        """Drop non-positive values, escape names once and resolve colors."""
        try:
            kept = [
                item
                for item in items
                if isinstance(item.value, numbers.Real) and item.value > 0
            ]
        except AttributeError as e:
            raise ChartConfigurationError("Chart items must carry a name and a value") from e
        dropped = len(items) - len(kept)
        if dropped and OUTPUT_CONFIG["verbose"]:
            print(f"Warning: skipped {dropped} item(s) without a positive value")

        return [
            WeightedItem(
                name=escape_special_chars(item.name),
                value=float(item.value),
                color=self.color_manager.resolve(item.color, index),
                icon=item.icon,
            )
            for index, item in enumerate(kept)
        ]

    def render(
        self,
        items: Optional[Sequence[WeightedItem]],
        config: ChartConfig,
        seed: Optional[int] = None,
    ) -> Union[str, NoContent]:
        """
        Render items into an SVG document.

        Args:
            items: Weighted items; order is kept in the layout
            config: Fully specified chart configuration
            seed: Animation seed for reproducible output

        Returns:
            The SVG markup, or NO_CONTENT when there is nothing to draw
        """
        if not items:
            return NO_CONTENT

        start_time = time.time()
        self._validate_config(config)
        if seed is not None and (isinstance(seed, bool) or seed < 0):
            raise ChartConfigurationError(f"Seed must be a non-negative integer, got {seed!r}")

        prepared = self._prepare_items(items)
        if not prepared:
            return NO_CONTENT

        width = config.width
        height = config.height
        chart_padding = CHART_CONFIG["chart_padding"]
        margin = CHART_CONFIG["bubble_chart_margin"]

        with render_stage("title"):
            title_block = self.label_composer.compose_title(config.title, width)
            svg_title = self.label_composer.render_title(title_block, config.title, width)
        title_height = title_block.line_height

        with render_stage("bubbles layout"):
            nodes = self.layout_engine.pack(
                prepared, width, height, CHART_CONFIG["bubble_padding"]
            )

        max_y = self.layout_engine.max_extent(nodes, margin)
        distance = title_height * title_block.line_count + margin
        full_height = max_y + distance

        bubble_markup = ""
        bubble_styles = ""
        with render_stage("bubbles"):
            for index, node in enumerate(nodes):
                fragment = self.renderer.render_bubble(node, index, config, seed)
                bubble_markup += fragment.markup
                bubble_styles += fragment.animation_style

        svg_legend = ""
        if config.legend.show:
            with render_stage("legend"):
                layout = self.legend_composer.compose_legend(
                    prepared,
                    width,
                    config.legend.align,
                    config.value_display,
                    config.use_percentage,
                )
                svg_legend = self.legend_composer.render_legend(layout, max_y + distance)
            full_height += layout.total_height

        with render_stage("styles"):
            styles = common_styles(config.theme)
            if config.legend.show:
                styles += legend_animation_style()
            styles += bubble_styles

            border = config.theme.border
            border_width = border.width or 0
            inset = border_width + chart_padding
            canvas_width = width + 2 * inset
            canvas_height = full_height + 2 * inset

            rounded = (
                f' rx="{CHART_CONFIG["border_radius"]}"' if border.rounded else ""
            )
            background = (
                f'<rect class="chart-background" x="{format_coord(border_width / 2)}" '
                f'y="{format_coord(border_width / 2)}" '
                f'width="{format_coord(canvas_width - border_width)}" '
                f'height="{format_coord(canvas_height - border_width)}"{rounded} '
                f'fill="{config.theme.background_color}" stroke="{border.color}" '
                f'stroke-width="{format_coord(border_width)}" />'
            )

        svg = (
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'width="{format_coord(canvas_width)}" height="{format_coord(canvas_height)}" '
            f'viewBox="0 0 {format_coord(canvas_width)} {format_coord(canvas_height)}">'
        )
        svg += svg_defs()
        svg += background
        svg += f'<g transform="translate({format_coord(inset)}, {format_coord(inset)})">'
        svg += svg_title
        svg += f'<g transform="translate(0, {format_coord(distance)})">'
        svg += bubble_markup
        svg += "</g>"
        svg += svg_legend
        svg += "</g>"
        svg += f"<style>{styles}</style>"
        svg += "</svg>"

        if OUTPUT_CONFIG["verbose"]:
            print(
                f"Generated {len(nodes)} bubbles "
                f"({format_coord(canvas_width)}x{format_coord(canvas_height)})"
            )
            if OUTPUT_CONFIG["timing_info"]:
                elapsed = round(time.time() - start_time, 2)
                print(f"Chart rendered in {elapsed} seconds")
        return svg

    async def render_async(
        self,
        items: Optional[Sequence[WeightedItem]],
        config: ChartConfig,
        seed: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Union[str, NoContent]:
        """Run ``render`` in a worker thread, giving up after ``timeout`` seconds."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.render, items, config, seed), timeout
            )
        except asyncio.TimeoutError as e:
            raise MetricsProviderError(
                f"Chart rendering timed out after {timeout} seconds", stage="render"
            ) from e
