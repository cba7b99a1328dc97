"""Dominant-colour extraction for the cover image.

Implements the Vibrant swatch classification: the cover is downsampled,
quantized to a small palette with median cut, and each palette colour is
scored against six lightness/saturation targets. The story renderer only
consumes the first available of Vibrant, Muted and DarkMuted.
"""

import colorsys
from dataclasses import dataclass, field
from io import BytesIO
from typing import Optional

import numpy as np
from PIL import Image

from .color_metrics import is_light, luminance
from .utils import get_logger

logger = get_logger(__name__)

RGB = tuple[int, int, int]

# Quantizer
COLOR_COUNT = 64
QUALITY = 5

# Scoring weights
WEIGHT_SATURATION = 3.0
WEIGHT_LIGHTNESS = 6.5
WEIGHT_POPULATION = 0.5

# Fallbacks when no swatch is usable
DEFAULT_LUMINANCE = 0.2
LIGHT_TEXT: RGB = (255, 255, 255)
DARK_TEXT: RGB = (40, 40, 40)

# Swatch names consulted, in order, when picking the representative colour
SWATCH_PRIORITY = ("Vibrant", "Muted", "DarkMuted")


@dataclass(frozen=True)
class Swatch:
    """A representative colour and how many sampled pixels it stands for."""

    rgb: RGB
    population: int

    @property
    def hsl(self) -> tuple[float, float, float]:
        r, g, b = (c / 255 for c in self.rgb)
        h, l, s = colorsys.rgb_to_hls(r, g, b)
        return h, s, l

    @property
    def luminance(self) -> float:
        return luminance(*self.rgb)

    @property
    def is_light(self) -> bool:
        return is_light(*self.rgb)


@dataclass(frozen=True)
class SwatchTarget:
    """Lightness and saturation window a named swatch must fall into."""

    name: str
    min_lightness: float
    target_lightness: float
    max_lightness: float
    min_saturation: float
    target_saturation: float
    max_saturation: float

    def accepts(self, saturation: float, lightness: float) -> bool:
        return (
            self.min_saturation <= saturation <= self.max_saturation
            and self.min_lightness <= lightness <= self.max_lightness
        )

    def score(self, saturation: float, lightness: float, population: int, max_population: int) -> float:
        values = (
            (1 - abs(saturation - self.target_saturation), WEIGHT_SATURATION),
            (1 - abs(lightness - self.target_lightness), WEIGHT_LIGHTNESS),
            (population / max_population if max_population else 0.0, WEIGHT_POPULATION),
        )
        return sum(v * w for v, w in values) / sum(w for _, w in values)


# Evaluation order matters: a colour claimed by an earlier target is skipped later
TARGETS = (
    SwatchTarget("Vibrant", 0.3, 0.5, 0.7, 0.35, 1.0, 1.0),
    SwatchTarget("LightVibrant", 0.55, 0.74, 1.0, 0.35, 1.0, 1.0),
    SwatchTarget("DarkVibrant", 0.0, 0.26, 0.45, 0.35, 1.0, 1.0),
    SwatchTarget("Muted", 0.3, 0.5, 0.7, 0.0, 0.3, 0.4),
    SwatchTarget("LightMuted", 0.55, 0.74, 1.0, 0.0, 0.3, 0.4),
    SwatchTarget("DarkMuted", 0.0, 0.26, 0.45, 0.0, 0.3, 0.4),
)


@dataclass(frozen=True)
class PaletteResult:
    """Outcome of palette extraction for one request."""

    swatch: Optional[Swatch] = None
    swatches: dict[str, Optional[Swatch]] = field(default_factory=dict)

    @property
    def luminance(self) -> float:
        """Luminance of the chosen swatch, or the dark default."""
        return self.swatch.luminance if self.swatch else DEFAULT_LUMINANCE

    @property
    def text_color(self) -> RGB:
        """Near-black over light swatches, white otherwise."""
        if self.swatch and self.swatch.is_light:
            return DARK_TEXT
        return LIGHT_TEXT

    @property
    def prefers_light_panel(self) -> bool:
        return self.luminance > 0.5


def select_swatch(swatches: dict[str, Optional[Swatch]]) -> Optional[Swatch]:
    """Return the first swatch present in priority order."""
    return next((swatches[name] for name in SWATCH_PRIORITY if swatches.get(name)), None)


def quantize(image: Image.Image, color_count: int = COLOR_COUNT, quality: int = QUALITY) -> list[Swatch]:
    """
    Reduce an image to at most ``color_count`` swatches.

    Transparent and near-white pixels are ignored, as in the Vibrant quantizer.

    Args:
        image: Decoded image in any mode
        color_count: Palette size passed to median cut
        quality: Downsampling factor applied before quantizing

    Returns:
        Swatches with their pixel populations, most populous first
    """
    rgba = image.convert("RGBA")
    if quality > 1 and rgba.width >= quality and rgba.height >= quality:
        rgba = rgba.reduce(quality)

    pixels = np.asarray(rgba).reshape(-1, 4)
    keep = pixels[:, 3] >= 125
    keep &= ~((pixels[:, 0] > 250) & (pixels[:, 1] > 250) & (pixels[:, 2] > 250))
    rgb = pixels[keep, :3]
    if rgb.size == 0:
        return []

    strip = Image.fromarray(np.ascontiguousarray(rgb.reshape(1, -1, 3)))
    quantized = strip.quantize(colors=color_count, method=Image.Quantize.MEDIANCUT)
    palette = quantized.getpalette() or []
    counts = quantized.getcolors(maxcolors=color_count * 4) or []

    swatches = [
        Swatch(rgb=tuple(palette[index * 3:index * 3 + 3]), population=count)
        for count, index in counts
    ]
    swatches.sort(key=lambda s: (-s.population, s.rgb))
    return swatches


def classify(swatches: list[Swatch]) -> dict[str, Optional[Swatch]]:
    """Assign the best-scoring unused swatch to each named target."""
    max_population = max((s.population for s in swatches), default=0)
    chosen: dict[str, Optional[Swatch]] = {}
    used: set[RGB] = set()

    for target in TARGETS:
        best: Optional[Swatch] = None
        best_score = -1.0
        for swatch in swatches:
            if swatch.rgb in used:
                continue
            _, s, l = swatch.hsl
            if not target.accepts(s, l):
                continue
            score = target.score(s, l, swatch.population, max_population)
            if score > best_score:
                best, best_score = swatch, score
        chosen[target.name] = best
        if best is not None:
            used.add(best.rgb)

    _fill_vibrant(chosen)
    return chosen


def _fill_vibrant(chosen: dict[str, Optional[Swatch]]) -> None:
    """Synthesize a Vibrant swatch from its dark or light sibling when missing."""
    if chosen.get("Vibrant"):
        return
    source = chosen.get("DarkVibrant") or chosen.get("LightVibrant")
    if source is None:
        return
    h, s, _ = source.hsl
    r, g, b = colorsys.hls_to_rgb(h, 0.5, s)
    chosen["Vibrant"] = Swatch(rgb=(round(r * 255), round(g * 255), round(b * 255)), population=0)


class PaletteExtractor:
    """Derives the representative swatch of a cover image."""

    def __init__(self, color_count: int = COLOR_COUNT, quality: int = QUALITY):
        self.color_count = color_count
        self.quality = quality

    def extract(self, image_bytes: bytes) -> PaletteResult:
        """
        Extract the palette from raw image bytes.

        Never raises: any failure is logged and reported as "no swatch".

        Args:
            image_bytes: Encoded cover image

        Returns:
            PaletteResult, possibly without a swatch
        """
        try:
            with Image.open(BytesIO(image_bytes)) as image:
                swatches = quantize(image, self.color_count, self.quality)
            named = classify(swatches)
        except Exception as e:
            logger.warning(f"Palette extraction failed, using dark defaults: {e}")
            return PaletteResult()

        swatch = select_swatch(named)
        if swatch is None:
            logger.warning("No usable swatch found, using dark defaults")
        else:
            logger.debug(f"Selected swatch rgb={swatch.rgb} luminance={swatch.luminance:.3f}")
        return PaletteResult(swatch=swatch, swatches=named)
