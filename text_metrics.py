"""
Text measurement for chart layout, backed by Pillow fonts.
"""

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from PIL import ImageFont

from chart_errors import MetricsProviderError
from config import FONT_CONFIG, OUTPUT_CONFIG
from text_utils import parse_font_size


@dataclass(frozen=True)
class TextMetrics:
    width: float
    height: float


class TextMetricsProvider:
    """
    Measures rendered text width/height for a font size and weight.

    Fonts are loaded lazily on first use, exactly once, even when several
    threads render charts with the same provider.
    """

    MAX_CACHE_ENTRIES = 4096

    def __init__(
        self,
        font_candidates: Optional[List[str]] = None,
        bold_font_candidates: Optional[List[str]] = None,
        reference_size: Optional[int] = None,
    ):
        self.font_candidates = font_candidates or FONT_CONFIG["font_candidates"]
        self.bold_font_candidates = (
            bold_font_candidates or FONT_CONFIG["bold_font_candidates"]
        )
        self.reference_size = reference_size or FONT_CONFIG["reference_size"]
        self.weight_multipliers = FONT_CONFIG["weight_multipliers"]
        self.bold_weights = set(FONT_CONFIG["bold_weights"])

        self._init_lock = threading.Lock()
        self._cache_lock = threading.Lock()
        self._initialized = False
        self._regular_font = None
        self._bold_font = None
        self._cache: Dict[Tuple[str, float, str], TextMetrics] = {}

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Load the measurement fonts. Safe to call repeatedly and concurrently."""
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return

            regular = self._load_first(self.font_candidates)
            if regular is None:
                regular = self._load_default_font()
            self._regular_font = regular
            self._bold_font = self._load_first(self.bold_font_candidates)

            if OUTPUT_CONFIG["verbose"]:
                bold_info = "bold face" if self._bold_font else "synthetic bold"
                print(
                    f"Text metrics ready: {self._font_name(regular)} ({bold_info})"
                )
            self._initialized = True

    def _load_first(self, candidates: List[str]):
        for font_name in candidates:
            try:
                return ImageFont.truetype(font_name, self.reference_size)
            except (OSError, IOError):
                continue
        return None

    def _load_default_font(self):
        try:
            return ImageFont.load_default(size=self.reference_size)
        except (OSError, TypeError, ValueError) as e:
            raise MetricsProviderError(
                f"No usable font found (tried {', '.join(self.font_candidates)})",
                stage="text-metrics",
            ) from e

    @staticmethod
    def _font_name(font) -> str:
        getname = getattr(font, "getname", None)
        if getname is None:
            return "default bitmap font"
        family, style = getname()
        return f"{family} {style}".strip()

    def _font_for_weight(self, weight: str):
        """Return (font, multiplier) for a CSS font weight."""
        if weight in self.bold_weights and self._bold_font is not None:
            return self._bold_font, 1.0
        return self._regular_font, self.weight_multipliers.get(weight, 1.0)

    def measure(
        self,
        text: str,
        font_size: Union[int, float, str],
        font_weight: Union[int, str] = "normal",
    ) -> TextMetrics:
        """Measure text rendered at ``font_size`` px with ``font_weight``."""
        size = parse_font_size(font_size)
        weight = str(font_weight).strip().lower() or "normal"
        key = (text, size, weight)

        with self._cache_lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        self.initialize()
        font, multiplier = self._font_for_weight(weight)
        native_size = getattr(font, "size", self.reference_size)
        scale = size * multiplier / native_size

        try:
            raw_width = font.getlength(text) if text else 0.0
            if hasattr(font, "getmetrics"):
                ascent, descent = font.getmetrics()
                raw_height = ascent + descent
            else:
                bbox = font.getbbox("Ag")
                raw_height = bbox[3] - bbox[1]
        except Exception as e:
            raise MetricsProviderError(
                f"Failed to measure text {text[:30]!r}", stage="text-metrics"
            ) from e

        metrics = TextMetrics(width=raw_width * scale, height=raw_height * scale)
        with self._cache_lock:
            if len(self._cache) >= self.MAX_CACHE_ENTRIES:
                self._cache.clear()
            self._cache[key] = metrics
        return metrics

    def measure_width(
        self,
        text: str,
        font_size: Union[int, float, str],
        font_weight: Union[int, str] = "normal",
    ) -> float:
        return self.measure(text, font_size, font_weight).width

    def measure_height(
        self,
        text: str,
        font_size: Union[int, float, str],
        font_weight: Union[int, str] = "normal",
    ) -> float:
        return self.measure(text, font_size, font_weight).height
