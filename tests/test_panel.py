import numpy as np
import pytest
from PIL import Image

from quotestory.config import AspectRatio, get_profile
from quotestory.palette import PaletteResult, Swatch
from quotestory.panel import (
    ALPHA_MAX,
    ALPHA_MIN,
    CORNER_RADIUS,
    DARK_TINT,
    FALLBACK_ALPHA,
    LIGHT_TINT,
    PanelRenderer,
    alpha_for_luminance,
    panel_blur_radius,
    panel_geometry,
    rounded_mask,
    sample_adaptive_alpha,
)
from quotestory.text_layout import FontLoader, TextBlock

PROFILE = get_profile(AspectRatio.SQUARE)


def backdrop(color):
    return Image.new("RGBA", PROFILE.size, (*color, 255))


def block(center_x=540, top=400, width=400, height=112, lines=("Hello world",)):
    return TextBlock(
        lines=tuple(lines), font_size=80, line_height=112,
        center_x=center_x, top=top, width=width, height=height,
    )


def test_white_region_gives_minimum_alpha():
    assert sample_adaptive_alpha(backdrop((255, 255, 255)), (100, 100, 300, 300)) == pytest.approx(ALPHA_MIN)


def test_black_region_gives_maximum_alpha():
    assert sample_adaptive_alpha(backdrop((0, 0, 0)), (100, 100, 300, 300)) == pytest.approx(ALPHA_MAX)


def test_box_is_clamped_to_image():
    image = backdrop((0, 0, 0))
    image.paste((255, 255, 255, 255), (0, 0, 50, 50))
    # only the white corner lies inside the canvas
    assert sample_adaptive_alpha(image, (-100, -100, 50, 50)) == pytest.approx(ALPHA_MIN)


def test_box_outside_image_is_unavailable():
    assert sample_adaptive_alpha(backdrop((0, 0, 0)), (2000, 2000, 2100, 2100)) is None


def test_alpha_mapping_is_linear_and_clamped():
    assert alpha_for_luminance(0.0) == pytest.approx(0.78)
    assert alpha_for_luminance(0.5) == pytest.approx(0.53)
    assert alpha_for_luminance(1.0) == pytest.approx(0.28)
    assert alpha_for_luminance(2.0) == ALPHA_MIN
    assert alpha_for_luminance(-1.0) == ALPHA_MAX


def test_panel_geometry_pads_and_centres():
    x, y, w, h = panel_geometry(block(), 60, 40)
    assert (w, h) == (520, 192)
    assert x == 540 - 260
    assert y == 400 - 40


def test_panel_geometry_never_collapses():
    assert panel_geometry(block(width=0, height=0), 0, 0)[2:] == (1, 1)


def test_blur_radius_bounds():
    assert panel_blur_radius(30, 20, 100) == 15
    assert panel_blur_radius(600, 150, 100) == 100
    assert panel_blur_radius(240, 150, 100) == 80
    assert panel_blur_radius(600, 150, 80) == 80


def test_rounded_mask_corners_are_clear():
    mask = np.asarray(rounded_mask(200, 100))
    assert mask[0, 0] == 0
    assert mask[50, 100] == 255
    assert mask[0, 100] == 255
    assert mask.shape == (100, 200)


def test_plan_uses_palette_for_tint():
    renderer = PanelRenderer(PROFILE)
    light = PaletteResult(swatch=Swatch((230, 230, 60), 10))

    assert renderer.plan(backdrop((0, 0, 0)), block(), light).color == LIGHT_TINT
    assert renderer.plan(backdrop((0, 0, 0)), block(), PaletteResult()).color == DARK_TINT


def test_plan_falls_back_when_panel_is_off_canvas():
    panel = PanelRenderer(PROFILE).plan(backdrop((0, 0, 0)), block(center_x=5000, top=5000), PaletteResult())
    assert panel.alpha == FALLBACK_ALPHA


def test_render_paints_inside_panel_only():
    canvas = backdrop((0, 0, 0))
    source = backdrop((255, 255, 255))
    font = FontLoader().font(80)

    panel = PanelRenderer(PROFILE).render(canvas, source, block(), PaletteResult(), font)

    assert panel.corner_radius == CORNER_RADIUS
    pixels = np.asarray(canvas.convert("RGB"))
    # outside untouched
    assert pixels[10, 10].tolist() == [0, 0, 0]
    # inside: white blur under a translucent black tint
    inside = pixels[panel.y + 5, panel.x + panel.width // 2 - 250]
    assert 0 < inside[0] < 255
    # source buffer is read only
    assert np.asarray(source.convert("RGB")).min() == 255
