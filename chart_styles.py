"""
CSS and <defs> markup embedded in every bubble chart.
"""

from typing import List, Optional, Tuple

import numpy as np

from chart_errors import ChartRenderingError
from chart_types import PackedNode, Theme
from config import ANIMATION_CONFIG, FONT_CONFIG
from text_utils import format_coord


def _radial_gradient(
    gradient_id: str, fx: str, fy: str, stops: List[Tuple[str, str, Optional[float]]]
) -> str:
    markup = f'<radialGradient id="{gradient_id}" fx="{fx}" fy="{fy}">'
    for offset, color, opacity in stops:
        opacity_attr = f' stop-opacity="{opacity}"' if opacity is not None else ""
        markup += f'<stop offset="{offset}" stop-color="{color}"{opacity_attr}></stop>'
    return markup + "</radialGradient>"


def _mask(mask_id: str, gradient_id: str, transform: Optional[str] = None) -> str:
    transform_attr = f' transform="{transform}"' if transform else ""
    return (
        f'<mask id="{mask_id}" maskContentUnits="objectBoundingBox">'
        f'<rect fill="url(#{gradient_id})" width="1" height="1"{transform_attr}></rect>'
        "</mask>"
    )


def svg_defs() -> str:
    """Gradients and masks referenced by the bubble shapes."""
    defs = "<defs>"
    defs += _radial_gradient(
        "grad--bw",
        "25%",
        "25%",
        [
            ("0%", "black", None),
            ("30%", "black", 0.2),
            ("97%", "white", 0.4),
            ("100%", "black", None),
        ],
    )
    defs += _radial_gradient(
        "grad--spot", "50%", "20%", [("10%", "white", 0.7), ("70%", "white", 0)]
    )
    defs += _radial_gradient(
        "grad--bw-light",
        "25%",
        "10%",
        [("60%", "black", 0), ("90%", "white", 0.25), ("100%", "black", None)],
    )
    defs += _mask("mask", "grad--bw")
    defs += _mask("mask--light-top", "grad--bw-light", "rotate(180, .5, .5)")
    defs += _mask("mask--light-bottom", "grad--bw-light")
    defs += (
        '<linearGradient id="grad" x1="0" y1="100%" x2="100%" y2="0">'
        '<stop offset="0" stop-color="dodgerblue"></stop>'
        '<stop offset="50%" stop-color="fuchsia"></stop>'
        '<stop offset="100%" stop-color="yellow"></stop>'
        "</linearGradient>"
    )
    return defs + "</defs>"


def common_styles(theme: Theme) -> str:
    """Styles shared by every chart, colored by the theme."""
    try:
        text_color = theme.text_color
        background = theme.background_color
    except AttributeError as e:
        raise ChartRenderingError("Theme is missing colors", stage="styles") from e

    return f"""
    svg {{
      font-family: {FONT_CONFIG["font_family"]};
      background: {background};
    }}
    text {{
      fill: {text_color};
    }}
    .b-value {{
      text-shadow: 0 0 1px {text_color};
    }}
    .b-icon {{
      filter: drop-shadow(0px 0px 1px {text_color});
    }}
    @keyframes plop {{
      0% {{
        scale: 0;
      }}
      100% {{
        scale: 1;
      }}
    }}
  """


def legend_animation_style() -> str:
    """Fade-in for legend items; each item sets its own animation-delay."""
    duration = ANIMATION_CONFIG["legend_fade_duration"]
    return f"""
    .legend-item {{
      opacity: 0;
      animation: fadeIn {duration}s ease-in forwards;
    }}
    @keyframes fadeIn {{
      0% {{
        opacity: 0;
      }}
      100% {{
        opacity: 1;
      }}
    }}
  """


def bubble_animation_style(
    node: PackedNode, index: int, seed: Optional[int] = None
) -> str:
    """
    Entrance and idle float animation for one bubble.

    Durations, delays and offsets are drawn from a generator seeded with
    ``(seed, index)``, so a fixed seed always yields the same stylesheet.
    With ``seed=None`` every call draws fresh values. Layout is untouched.
    """
    rng = np.random.default_rng(None if seed is None else (seed, index))
    min_duration = ANIMATION_CONFIG["min_float_duration"]
    max_duration = ANIMATION_CONFIG["max_float_duration"]
    max_offset = ANIMATION_CONFIG["max_float_offset"]

    duration = rng.uniform(min_duration, max_duration)
    delay = rng.uniform(0.0, ANIMATION_CONFIG["max_float_delay"])
    dx, dy = rng.uniform(-max_offset, max_offset, size=2)
    plop_delay = node.radius * ANIMATION_CONFIG["plop_delay_per_px"]
    plop_duration = ANIMATION_CONFIG["plop_duration"]

    x = node.x
    y = node.y

    def translate(px: float, py: float) -> str:
        return f"translate({format_coord(px)}px, {format_coord(py)}px)"

    return f"""
    .bubble-{index} {{
      scale: 0;
      animation: float-{index} {duration:.2f}s ease-in-out infinite {delay:.2f}s, plop {format_coord(plop_duration)}s ease-out forwards {format_coord(plop_delay)}s;
      transform-origin: {format_coord(x)}px {format_coord(y)}px;
    }}
    @keyframes float-{index} {{
      0% {{
        transform: {translate(x, y)};
      }}
      25% {{
        transform: {translate(x + dx, y + dy)};
      }}
      50% {{
        transform: {translate(x - dx, y - dy)};
      }}
      75% {{
        transform: {translate(x + dx / 2, y - dy / 2)};
      }}
      100% {{
        transform: {translate(x, y)};
      }}
    }}
  """
