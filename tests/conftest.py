from io import BytesIO

import numpy as np
import pytest
from PIL import Image


def encode(image: Image.Image, fmt: str = "PNG") -> bytes:
    buf = BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


def solid_image(width: int, height: int, color=(120, 60, 30)) -> Image.Image:
    return Image.new("RGB", (width, height), color)


def gradient_image(width: int, height: int) -> Image.Image:
    """Deterministic colourful test cover."""
    xs = np.linspace(0, 255, width, dtype=np.float64)
    ys = np.linspace(0, 255, height, dtype=np.float64)
    r = np.tile(xs, (height, 1))
    g = np.tile(ys[:, None], (1, width))
    b = np.full((height, width), 90.0)
    pixels = np.stack([r, g, b], axis=-1).astype(np.uint8)
    return Image.fromarray(pixels)


@pytest.fixture
def cover_bytes() -> bytes:
    return encode(gradient_image(1200, 1600))


@pytest.fixture
def char_measure():
    """Every character is half the font size wide."""
    return lambda text, size: len(text) * size * 0.5
