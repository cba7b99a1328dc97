"""Blurred, darkened backdrop cut from the cover image."""

from dataclasses import dataclass

from PIL import Image, ImageFilter

from .config import RatioProfile
from .utils import get_logger

logger = get_logger(__name__)

BACKGROUND_BLUR_RADIUS = 40


@dataclass(frozen=True)
class CropBox:
    """Region of the source image that covers the canvas."""

    x: float
    y: float
    width: float
    height: float

    def as_box(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.x + self.width, self.y + self.height


def crop_to_fill(source_width: int, source_height: int, target_width: int, target_height: int) -> CropBox:
    """
    Centre crop with the target's aspect ratio.

    A source wider than the target keeps its full height and loses width
    on both sides; otherwise it keeps its full width and loses height.
    """
    source_aspect = source_width / source_height
    target_aspect = target_width / target_height

    if source_aspect > target_aspect:
        crop_height = source_height
        crop_width = source_height * target_aspect
        return CropBox((source_width - crop_width) / 2, 0, crop_width, crop_height)

    crop_width = source_width
    crop_height = source_width / target_aspect
    return CropBox(0, (source_height - crop_height) / 2, crop_width, crop_height)


@dataclass(frozen=True)
class Backdrop:
    """
    The two background buffers one render needs.

    ``blurred`` is the pre-overlay buffer that the panel samples from;
    ``darkened`` is what the canvas starts from. Neither is painted on.
    """

    blurred: Image.Image
    darkened: Image.Image

    @property
    def size(self) -> tuple[int, int]:
        return self.blurred.size


class BackgroundComposer:
    """Crops, blurs and darkens the cover into a canvas-sized backdrop."""

    def __init__(self, blur_radius: float = BACKGROUND_BLUR_RADIUS):
        self.blur_radius = blur_radius

    def compose(self, source: Image.Image, profile: RatioProfile) -> Backdrop:
        """
        Build the backdrop for one canvas.

        Args:
            source: Decoded RGB cover
            profile: Canvas size and overlay strength

        Returns:
            Backdrop with RGBA buffers of the canvas size
        """
        crop = crop_to_fill(source.width, source.height, profile.width, profile.height)
        logger.debug(
            f"Crop {source.width}x{source.height} -> box "
            f"({crop.x:.1f}, {crop.y:.1f}, {crop.width:.1f}, {crop.height:.1f})"
        )

        filled = source.convert("RGBA").resize(profile.size, Image.LANCZOS, box=crop.as_box())
        blurred = filled.filter(ImageFilter.GaussianBlur(radius=self.blur_radius))

        overlay = Image.new("RGBA", profile.size, (0, 0, 0, round(255 * profile.overlay_alpha)))
        darkened = Image.alpha_composite(blurred, overlay)
        return Backdrop(blurred=blurred, darkened=darkened)
