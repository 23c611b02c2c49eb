"""
Configuration file for the bubble chart renderer.
Modify this file to customize layout spacing, fonts and animation.
"""

# Chart layout configuration
CHART_CONFIG = {
    "chart_padding": 8,  # Inner padding between the border and the content
    "bubble_padding": 1.5,  # Minimum gap between two packed bubbles
    "bubble_chart_margin": 20,  # Space between bubbles and title/legend
    "default_width": 600,
    "default_height": 400,
    "default_items_count": 10,
    "min_items_count": 1,
    "max_items_count": 20,
    "border_radius": 8,  # Corner radius used when the theme border is rounded
}

# Title configuration
TITLE_CONFIG = {
    "max_lines": 3,  # Wrapped titles are capped to this many lines
    "ellipsis": "…",
    "default_text": "Bubble Chart",
    "default_font_size": 24,
    "default_font_weight": "bold",
    "default_align": "middle",
}

# Legend configuration
LEGEND_CONFIG = {
    "text_size": 13,  # px
    "item_height": 20,  # Height of each legend row
    "row_padding": 10,  # Vertical padding between rows
    "item_padding": 35,  # Horizontal spacing between legend items
    "marker_radius": 8,
    "item_delay_step": 0.1,  # Seconds between two items of the same row
}

# Bubble content configuration
BUBBLE_CONFIG = {
    "label_font_ratio": 1 / 3,  # Label font size relative to the radius
    "value_font_ratio": 1 / 4,  # Value font size relative to the radius
    "label_line_shift_ratio": 1 / 5,  # Vertical shift of wrapped label lines
    "overlay_color": "lightblue",
    # Fallback colors when an item carries no usable color
    "palette": [
        "#FF6B6B",  # Red
        "#4ECDC4",  # Teal
        "#45B7D1",  # Blue
        "#96CEB4",  # Green
        "#FFEAA7",  # Yellow
        "#DDA0DD",  # Plum
        "#98D8C8",  # Mint
        "#F7DC6F",  # Light Yellow
        "#BB8FCE",  # Light Purple
        "#85C1E9",  # Light Blue
        "#F8C471",  # Orange
        "#82E0AA",  # Light Green
        "#F1948A",  # Light Red
        "#AED6F1",  # Very Light Blue
        "#D2B4DE",  # Light Lavender
        "#F5B041",  # Gold
    ],
}

# Font configuration for text measurement
FONT_CONFIG = {
    "font_candidates": [
        "DejaVuSans.ttf",
        "arial.ttf",
        "Arial.ttf",
        "LiberationSans-Regular.ttf",
        "calibri.ttf",
        "Helvetica.ttc",
    ],
    "bold_font_candidates": [
        "DejaVuSans-Bold.ttf",
        "arialbd.ttf",
        "Arial Bold.ttf",
        "LiberationSans-Bold.ttf",
        "calibrib.ttf",
    ],
    "reference_size": 100,  # Glyphs are measured at this size and scaled
    "weight_multipliers": {
        "100": 0.9,  # Thin
        "200": 0.95,  # Extra Light
        "300": 0.97,  # Light
        "400": 1.0,  # Normal
        "500": 1.03,  # Medium
        "600": 1.06,  # Semi-Bold
        "700": 1.08,  # Bold
        "800": 1.1,  # Extra Bold
        "900": 1.15,  # Black
        "normal": 1.0,
        "bold": 1.08,
        "bolder": 1.15,  # Mapped to Black
        "lighter": 0.9,  # Mapped to Thin
    },
    "bold_weights": ["600", "700", "800", "900", "bold", "bolder"],
    "font_family": (
        '-apple-system,BlinkMacSystemFont,"Segoe UI","Noto Sans",Helvetica,'
        'Arial,sans-serif,"Apple Color Emoji","Segoe UI Emoji"'
    ),
}

# Animation configuration
ANIMATION_CONFIG = {
    "min_float_duration": 8.0,  # seconds
    "max_float_duration": 13.0,
    "max_float_delay": 2.0,
    "max_float_offset": 10.0,  # px around the packed center
    "plop_delay_per_px": 0.01,  # Entrance delay per pixel of radius
    "plop_duration": 1.0,
    "legend_fade_duration": 0.3,
}

# Output configuration
OUTPUT_CONFIG = {
    "verbose": True,  # Show detailed progress information
    "timing_info": True,  # Show execution time
}
