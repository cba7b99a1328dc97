"""Placement of the cover thumbnail and the quote area on the canvas."""

from dataclasses import dataclass

from .config import AspectRatio, RatioProfile, get_profile
from .utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in canvas pixels."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def intersects(self, other: "Rect") -> bool:
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )

    def within(self, width: float, height: float) -> bool:
        return self.x >= 0 and self.y >= 0 and self.right <= width and self.bottom <= height

    def rounded(self) -> tuple[int, int, int, int]:
        """Integer (x, y, width, height), each side at least one pixel."""
        return round(self.x), round(self.y), max(1, round(self.width)), max(1, round(self.height))


@dataclass(frozen=True)
class LayoutPlan:
    """Where the thumbnail and the quote go on one canvas."""

    aspect_ratio: AspectRatio
    canvas_width: int
    canvas_height: int
    thumbnail: Rect
    text_area: Rect


def _fit_within(aspect: float, max_width: float, max_height: float) -> tuple[float, float]:
    """Largest (width, height) with the given aspect that fits the box."""
    width = max_height * aspect
    if width <= max_width:
        return width, max_height
    return max_width, max_width / aspect


def _plan_corner(profile: RatioProfile, source_aspect: float) -> tuple[Rect, Rect]:
    """Thumbnail bottom-right; quote fills the space above it."""
    w, h, margin = profile.width, profile.height, profile.margin

    thumb_w, thumb_h = _fit_within(
        source_aspect,
        max_width=w - 2 * margin,
        max_height=h * profile.thumbnail_height_fraction,
    )
    thumbnail = Rect(w - thumb_w - margin, h - thumb_h - margin, thumb_w, thumb_h)

    text_bottom = thumbnail.y - margin
    text_area = Rect(margin, profile.text_top, w - 2 * margin, max(0.0, text_bottom - profile.text_top))
    return thumbnail, text_area


def _plan_column(profile: RatioProfile, source_aspect: float) -> tuple[Rect, Rect]:
    """Thumbnail centred in a right-hand column; quote fills the left."""
    w, h, margin = profile.width, profile.height, profile.margin

    column_w = w * profile.column_fraction
    column_x = w - column_w
    thumb_w, thumb_h = _fit_within(
        source_aspect,
        max_width=column_w - 2 * margin,
        max_height=h - 2 * margin,
    )
    thumbnail = Rect(
        column_x + (column_w - thumb_w) / 2,
        (h - thumb_h) / 2,
        thumb_w,
        thumb_h,
    )

    text_top = max(margin, profile.text_top)
    text_area = Rect(margin, text_top, column_x - 2 * margin, h - text_top - margin)
    return thumbnail, text_area


_RULES = {
    "corner": _plan_corner,
    "column": _plan_column,
}


def plan_layout(aspect_ratio: AspectRatio, source_width: int, source_height: int) -> LayoutPlan:
    """
    Compute thumbnail and text rectangles for a canvas.

    Args:
        aspect_ratio: Selected canvas format
        source_width: Width of the decoded cover
        source_height: Height of the decoded cover

    Returns:
        LayoutPlan with non-overlapping rectangles inside the canvas
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"Invalid source size {source_width}x{source_height}")

    profile = get_profile(aspect_ratio)
    thumbnail, text_area = _RULES[profile.thumbnail_rule](profile, source_width / source_height)

    logger.debug(
        f"Layout {aspect_ratio.value}: thumbnail={thumbnail.rounded()} text_area={text_area.rounded()}"
    )
    return LayoutPlan(
        aspect_ratio=aspect_ratio,
        canvas_width=profile.width,
        canvas_height=profile.height,
        thumbnail=thumbnail,
        text_area=text_area,
    )
