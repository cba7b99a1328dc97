import numpy as np
import pytest

from quotestory.background import BackgroundComposer, crop_to_fill
from quotestory.config import AspectRatio, get_profile

from .conftest import gradient_image, solid_image


def test_wide_source_into_story_crops_width():
    crop = crop_to_fill(2000, 1000, 1080, 1920)

    assert crop.height == 1000
    assert crop.width == pytest.approx(1000 * 1080 / 1920)
    assert crop.x == pytest.approx((2000 - crop.width) / 2)
    assert crop.y == 0


def test_tall_source_into_square_crops_height():
    crop = crop_to_fill(1200, 1600, 1080, 1080)

    assert crop.width == 1200
    assert crop.height == pytest.approx(1200)
    assert crop.x == 0
    assert crop.y == pytest.approx(200)


def test_matching_aspect_keeps_everything():
    crop = crop_to_fill(540, 960, 1080, 1920)
    assert crop.as_box() == pytest.approx((0, 0, 540, 960))


@pytest.mark.parametrize("ratio", list(AspectRatio))
def test_compose_fills_canvas(ratio):
    profile = get_profile(ratio)
    backdrop = BackgroundComposer().compose(gradient_image(300, 400), profile)

    assert backdrop.size == profile.size
    assert backdrop.blurred.mode == "RGBA"
    assert backdrop.darkened.size == profile.size


def test_overlay_darkens_but_blurred_is_kept():
    profile = get_profile(AspectRatio.SQUARE)
    backdrop = BackgroundComposer().compose(solid_image(200, 200, (200, 200, 200)), profile)

    blurred = np.asarray(backdrop.blurred.convert("RGB"), dtype=np.float64)
    darkened = np.asarray(backdrop.darkened.convert("RGB"), dtype=np.float64)
    assert blurred.mean() == pytest.approx(200, abs=1)
    assert darkened.mean() == pytest.approx(200 * (1 - profile.overlay_alpha), abs=2)


def test_blur_smooths_edges():
    source = solid_image(200, 200, (0, 0, 0))
    source.paste((255, 255, 255), (100, 0, 200, 200))
    backdrop = BackgroundComposer().compose(source, get_profile(AspectRatio.SQUARE))

    row = np.asarray(backdrop.blurred.convert("L"))[540]
    assert 0 < row[540] < 255
