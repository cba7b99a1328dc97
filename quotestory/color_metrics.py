"""Relative luminance helpers (ITU-R BT.709 weights over linearized sRGB)."""

import numpy as np

_WEIGHTS = (0.2126, 0.7152, 0.0722)


def _linearize(channel: float) -> float:
    c = channel / 255
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def luminance(r: float, g: float, b: float) -> float:
    """Relative luminance of an sRGB colour, in [0, 1]."""
    return (
        _WEIGHTS[0] * _linearize(r)
        + _WEIGHTS[1] * _linearize(g)
        + _WEIGHTS[2] * _linearize(b)
    )


def is_light(r: float, g: float, b: float) -> bool:
    """True when the colour's luminance is above one half."""
    return luminance(r, g, b) > 0.5


def luminance_array(pixels: np.ndarray) -> np.ndarray:
    """
    Vectorized luminance for an (..., 3) array of 0-255 RGB values.

    Args:
        pixels: Array whose last axis holds R, G, B

    Returns:
        Array of luminances with the channel axis removed
    """
    c = pixels.astype(np.float64) / 255.0
    linear = np.where(c <= 0.03928, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)
    return linear @ np.asarray(_WEIGHTS)
