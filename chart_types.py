"""
Data model shared by the layout, label, legend and rendering stages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class TextAnchor(str, Enum):
    START = "start"
    MIDDLE = "middle"
    END = "end"


class LegendAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class ValueDisplay(str, Enum):
    """Where item values are printed on the chart."""

    NONE = "none"
    BUBBLES = "bubbles"
    LEGEND = "legend"
    ALL = "all"

    @property
    def shows_in_bubbles(self) -> bool:
        return self in (ValueDisplay.BUBBLES, ValueDisplay.ALL)

    @property
    def shows_in_legend(self) -> bool:
        return self in (ValueDisplay.LEGEND, ValueDisplay.ALL)


@dataclass(frozen=True)
class WeightedItem:
    name: str
    value: float
    color: str = ""
    icon: Optional[str] = None


@dataclass(frozen=True)
class BorderStyle:
    color: str = "transparent"
    width: float = 0
    rounded: bool = False


@dataclass(frozen=True)
class Theme:
    text_color: str
    background_color: str
    border: BorderStyle = field(default_factory=BorderStyle)


@dataclass
class TitleConfig:
    text: str
    font_size: Union[float, str] = 24
    font_weight: str = "bold"
    fill: Optional[str] = None
    text_anchor: TextAnchor = TextAnchor.MIDDLE


@dataclass
class LegendConfig:
    show: bool = True
    align: LegendAlign = LegendAlign.CENTER


@dataclass
class ChartConfig:
    """Fully specified chart options; the renderer applies no defaults for title/legend."""

    width: float
    height: float
    title: Optional[TitleConfig]
    legend: Optional[LegendConfig]
    theme: Theme
    value_display: ValueDisplay = ValueDisplay.LEGEND
    use_percentage: bool = True


@dataclass
class PackedNode:
    item: WeightedItem
    radius: float
    x: float
    y: float


@dataclass
class TextBlock:
    lines: List[str]
    line_height: float

    @property
    def line_count(self) -> int:
        return len(self.lines)


@dataclass
class LegendItem:
    text: str
    measured_width: float
    footprint: float
    color: str


@dataclass
class LegendRow:
    items: List[LegendItem] = field(default_factory=list)
    x_offset: float = 0.0
    y_offset: float = 0.0

    @property
    def width(self) -> float:
        return sum(item.footprint for item in self.items)


@dataclass
class LegendLayout:
    rows: List[LegendRow]
    total_height: float


@dataclass
class BubbleFragment:
    markup: str
    animation_style: str


class NoContent:
    """Signal returned when there is nothing to draw; not an error."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_CONTENT"


NO_CONTENT = NoContent()
