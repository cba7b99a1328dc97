"""End-to-end story generation: cover bytes + quote -> PNG bytes."""

from concurrent.futures import ThreadPoolExecutor
from io import BytesIO
from time import perf_counter
from typing import Optional, Union

from PIL import Image, ImageDraw, ImageFilter, ImageOps

from .background import BackgroundComposer
from .config import AspectRatio, get_profile
from .errors import MissingImageError, MissingQuoteError, StoryGenerationError, UnprocessableImageError
from .layout_planner import Rect, plan_layout
from .palette import PaletteExtractor
from .panel import PanelRenderer
from .text_layout import FontLoader, layout_text
from .utils import get_logger

logger = get_logger(__name__)

# Drop shadow under the cover thumbnail
SHADOW_ALPHA = 0.5
SHADOW_BLUR = 10
SHADOW_OFFSET = (5, 5)


def decode_image(image_bytes: bytes) -> Image.Image:
    """Decode, apply EXIF orientation and convert to RGB."""
    with Image.open(BytesIO(image_bytes)) as image:
        oriented = ImageOps.exif_transpose(image)
        return oriented.convert("RGB")


def encode_png(canvas: Image.Image) -> bytes:
    buf = BytesIO()
    canvas.convert("RGB").save(buf, format="PNG")
    return buf.getvalue()


def draw_thumbnail(canvas: Image.Image, source: Image.Image, rect: Rect) -> None:
    """Paste the cover at ``rect`` with a soft drop shadow."""
    x, y, width, height = rect.rounded()
    dx, dy = SHADOW_OFFSET

    shadow = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    ImageDraw.Draw(shadow).rectangle(
        (x + dx, y + dy, x + dx + width - 1, y + dy + height - 1),
        fill=(0, 0, 0, round(255 * SHADOW_ALPHA)),
    )
    canvas.alpha_composite(shadow.filter(ImageFilter.GaussianBlur(radius=SHADOW_BLUR)))

    thumbnail = source.resize((width, height), Image.LANCZOS)
    canvas.paste(thumbnail, (x, y))


class StoryRenderer:
    """Sequences palette, backdrop, layout, text and panel into one image."""

    def __init__(
        self,
        palette_extractor: Optional[PaletteExtractor] = None,
        background_composer: Optional[BackgroundComposer] = None,
        font_path: Optional[str] = None,
    ):
        self.palette_extractor = palette_extractor or PaletteExtractor()
        self.background_composer = background_composer or BackgroundComposer()
        self.font_path = font_path

    def render(
        self,
        image_bytes: Optional[bytes],
        quote: Optional[str],
        aspect_ratio: Union[AspectRatio, str, None] = None,
    ) -> bytes:
        """
        Generate a story image.

        Args:
            image_bytes: Encoded cover image
            quote: Quote text; must not be blank
            aspect_ratio: "9:16", "1:1" or "2:1"; anything else means 9:16

        Returns:
            PNG bytes at the canvas size of the aspect ratio

        Raises:
            MissingQuoteError: The quote is missing or blank
            MissingImageError: No image bytes were given
            UnprocessableImageError: Decoding or rendering failed
        """
        if quote is None or not quote.strip():
            raise MissingQuoteError()
        if not image_bytes:
            raise MissingImageError()

        ratio = AspectRatio.parse(aspect_ratio)
        start = perf_counter()
        try:
            result = self._render(image_bytes, quote, ratio)
        except StoryGenerationError:
            raise
        except Exception as e:
            logger.exception(f"Story generation failed ({ratio.value}): {e}")
            raise UnprocessableImageError() from e

        logger.info(f"Rendered {ratio.value} story in {perf_counter() - start:.2f}s ({len(result)} bytes)")
        return result

    def _render(self, image_bytes: bytes, quote: str, ratio: AspectRatio) -> bytes:
        source = decode_image(image_bytes)
        profile = get_profile(ratio)
        logger.info(
            f"Rendering {ratio.value} ({profile.width}x{profile.height}) "
            f"from {source.width}x{source.height} cover"
        )

        with ThreadPoolExecutor(max_workers=2) as pool:
            palette_future = pool.submit(self.palette_extractor.extract, image_bytes)
            backdrop_future = pool.submit(self.background_composer.compose, source, profile)
            backdrop = backdrop_future.result()
            palette = palette_future.result()

        plan = plan_layout(ratio, source.width, source.height)
        fonts = FontLoader(self.font_path)
        block = layout_text(quote, plan.text_area, fonts.measure)
        logger.info(f"Quote set at {block.font_size}px over {len(block.lines)} line(s)")

        canvas = backdrop.darkened.copy()
        draw_thumbnail(canvas, source, plan.thumbnail)
        PanelRenderer(profile).render(canvas, backdrop.blurred, block, palette, fonts.font(block.font_size))
        return encode_png(canvas)
