"""Translucent rounded panel behind the quote, and the quote itself."""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .color_metrics import luminance_array
from .config import RatioProfile
from .palette import RGB, PaletteResult
from .text_layout import TextBlock
from .utils import get_logger

logger = get_logger(__name__)

# Adaptive alpha: brighter backdrop -> more transparent panel
ALPHA_MIN = 0.28
ALPHA_MAX = 0.78
ALPHA_SLOPE = 0.50
FALLBACK_ALPHA = 0.65

CORNER_RADIUS = 15
MIN_PANEL_BLUR = 15

LIGHT_TINT: RGB = (255, 255, 255)
DARK_TINT: RGB = (0, 0, 0)


@dataclass(frozen=True)
class Panel:
    """Rounded rectangle behind the text, with its tint."""

    x: int
    y: int
    width: int
    height: int
    corner_radius: int
    color: RGB
    alpha: float
    blur_radius: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        return self.x, self.y, self.x + self.width, self.y + self.height

    @property
    def fill(self) -> tuple[int, int, int, int]:
        return (*self.color, round(255 * self.alpha))


def panel_geometry(block: TextBlock, padding_x: int, padding_y: int) -> tuple[int, int, int, int]:
    """(x, y, width, height) of the panel around a text block."""
    width = max(1, round(block.width + padding_x * 2))
    height = max(1, round(block.height + padding_y * 2))
    x = round(block.center_x - width / 2)
    y = round(block.top - padding_y)
    return x, y, width, height


def panel_blur_radius(width: int, height: int, cap: int) -> int:
    """Blur radius for the panel backdrop, scaled with the panel size."""
    return max(MIN_PANEL_BLUR, round(min(cap, max(width, height) / 3)))


def alpha_for_luminance(mean_luminance: float) -> float:
    """Map mean backdrop luminance onto the panel alpha range."""
    alpha = ALPHA_MAX - mean_luminance * ALPHA_SLOPE
    return min(ALPHA_MAX, max(ALPHA_MIN, alpha))


def sample_adaptive_alpha(backdrop: Image.Image, box: tuple[int, int, int, int]) -> Optional[float]:
    """
    Alpha for a panel drawn over ``box`` of the pre-overlay backdrop.

    The box is clamped to the image. Returns None when nothing is left to
    sample, so the caller can apply its own fallback.
    """
    left, top, right, bottom = box
    left, top = max(0, left), max(0, top)
    right, bottom = min(backdrop.width, right), min(backdrop.height, bottom)
    if right <= left or bottom <= top:
        return None

    region = np.asarray(backdrop.crop((left, top, right, bottom)).convert("RGB"))
    mean = float(luminance_array(region).mean())
    if not np.isfinite(mean):
        return None
    return alpha_for_luminance(mean)


def rounded_mask(width: int, height: int, radius: int = CORNER_RADIUS) -> Image.Image:
    mask = Image.new("L", (width, height), 0)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, width - 1, height - 1), radius=radius, fill=255)
    return mask


class PanelRenderer:
    """Paints the blurred panel, its tint and the quote lines onto a canvas."""

    def __init__(self, profile: RatioProfile):
        self.profile = profile

    def plan(self, backdrop: Image.Image, block: TextBlock, palette: PaletteResult) -> Panel:
        """Work out panel geometry, tint and alpha without painting anything."""
        x, y, width, height = panel_geometry(block, self.profile.panel_padding_x, self.profile.panel_padding_y)

        alpha = sample_adaptive_alpha(backdrop, (x, y, x + width, y + height))
        if alpha is None:
            logger.warning(f"Panel at ({x}, {y}) lies outside the canvas, using alpha {FALLBACK_ALPHA}")
            alpha = FALLBACK_ALPHA

        panel = Panel(
            x=x,
            y=y,
            width=width,
            height=height,
            corner_radius=CORNER_RADIUS,
            color=LIGHT_TINT if palette.prefers_light_panel else DARK_TINT,
            alpha=alpha,
            blur_radius=panel_blur_radius(width, height, self.profile.panel_blur_max),
        )
        logger.debug(f"Panel {panel.box} alpha={alpha:.3f} blur={panel.blur_radius}")
        return panel

    def render(
        self,
        canvas: Image.Image,
        backdrop: Image.Image,
        block: TextBlock,
        palette: PaletteResult,
        font: ImageFont.FreeTypeFont,
    ) -> Panel:
        """
        Paint the panel and text onto ``canvas`` in place.

        Args:
            canvas: RGBA canvas owned by the caller
            backdrop: Pre-overlay blurred background, read only
            block: Fitted text
            palette: Palette of the cover, for tint and text colour
            font: Serif face at ``block.font_size``

        Returns:
            The panel that was drawn
        """
        panel = self.plan(backdrop, block, palette)
        mask = rounded_mask(panel.width, panel.height, panel.corner_radius)

        # Stronger local blur, clipped to the rounded rectangle
        patch = backdrop.crop(panel.box).filter(ImageFilter.GaussianBlur(radius=panel.blur_radius))
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        layer.paste(patch, (panel.x, panel.y), mask)
        canvas.alpha_composite(layer)

        tint = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(tint).rounded_rectangle(
            (panel.x, panel.y, panel.x + panel.width - 1, panel.y + panel.height - 1),
            radius=panel.corner_radius,
            fill=panel.fill,
        )
        canvas.alpha_composite(tint)

        draw = ImageDraw.Draw(canvas)
        for i, line in enumerate(block.lines):
            if not line:
                continue
            draw.text((block.center_x, block.line_y(i)), line, font=font, fill=palette.text_color, anchor="ma")

        return panel
