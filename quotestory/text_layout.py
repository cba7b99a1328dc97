"""Greedy word wrapping and font-size fitting for the quote text."""

from dataclasses import dataclass
from typing import Callable, Optional

from PIL import ImageFont

from .config import settings
from .layout_planner import Rect
from .utils import get_logger

logger = get_logger(__name__)

# Width of ``text`` when set at ``font_size``
Measure = Callable[[str, int], float]

MAX_FONT_SIZE = 80
MIN_FONT_SIZE = 20
FONT_STEP = 2
LINE_SPACING = 1.4


def line_height(font_size: int) -> float:
    return font_size * LINE_SPACING


def wrap_text(text: str, font_size: int, max_width: float, measure: Measure) -> list[str]:
    """
    Break text into lines no wider than ``max_width`` where possible.

    Explicit newlines are hard breaks and blank paragraphs become empty
    lines. Words are never split, so a single word wider than the limit
    gets a line of its own.

    Args:
        text: Quote text, possibly multi-paragraph
        font_size: Size passed to ``measure``
        max_width: Target line width
        measure: Width function for a string at a font size

    Returns:
        Lines in reading order
    """
    paragraphs = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    lines: list[str] = []

    for paragraph in paragraphs:
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if measure(candidate, font_size) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)

    return lines


def fit_font_size(text: str, max_width: float, max_height: float, measure: Measure) -> tuple[int, list[str]]:
    """
    Find the largest font size whose wrapped text fits the box.

    Sizes are tried from 80 down in steps of 2. At the floor of 20 the
    text is returned even if it still overflows.

    Returns:
        (font_size, lines)
    """
    font_size = MAX_FONT_SIZE
    while True:
        lines = wrap_text(text, font_size, max_width, measure)
        if len(lines) * line_height(font_size) <= max_height or font_size <= MIN_FONT_SIZE:
            return font_size, lines
        font_size -= FONT_STEP


@dataclass(frozen=True)
class TextBlock:
    """Wrapped quote text positioned inside the text area."""

    lines: tuple[str, ...]
    font_size: int
    line_height: float
    center_x: float
    top: float
    width: float
    height: float

    @property
    def bounds(self) -> Rect:
        return Rect(self.center_x - self.width / 2, self.top, self.width, self.height)

    def line_y(self, index: int) -> float:
        return self.top + index * self.line_height


def layout_text(text: str, area: Rect, measure: Measure) -> TextBlock:
    """Fit and centre the quote inside ``area``."""
    font_size, lines = fit_font_size(text, area.width, area.height, measure)
    lh = line_height(font_size)
    total_height = len(lines) * lh
    widest = max((measure(line, font_size) for line in lines), default=0.0)

    block = TextBlock(
        lines=tuple(lines),
        font_size=font_size,
        line_height=lh,
        center_x=area.center_x,
        top=area.y + (area.height - total_height) / 2,
        width=widest,
        height=total_height,
    )
    logger.debug(f"Text fitted at {font_size}px: {len(lines)} line(s), block {widest:.0f}x{total_height:.0f}")
    return block


class FontLoader:
    """Loads the serif typeface at the sizes a single render needs."""

    def __init__(self, font_path: Optional[str] = None):
        self.font_path = font_path or settings.font_path
        self._cache: dict[int, ImageFont.FreeTypeFont] = {}
        self._warned = False

    def font(self, size: int) -> ImageFont.FreeTypeFont:
        if size not in self._cache:
            try:
                self._cache[size] = ImageFont.truetype(self.font_path, size)
            except OSError:
                if not self._warned:
                    logger.warning(f"Font {self.font_path!r} not found, using Pillow's default face")
                    self._warned = True
                self._cache[size] = ImageFont.load_default(size=size)
        return self._cache[size]

    def measure(self, text: str, size: int) -> float:
        return self.font(size).getlength(text)

    @property
    def name(self) -> str:
        font = self.font(MIN_FONT_SIZE)
        if not hasattr(font, "getname"):
            return "default"
        family, style = font.getname()
        return f"{family or ''} {style or ''}".strip()
