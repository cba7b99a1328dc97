from quotestory.palette import (
    DARK_TEXT,
    DEFAULT_LUMINANCE,
    LIGHT_TEXT,
    PaletteExtractor,
    PaletteResult,
    Swatch,
    classify,
    quantize,
    select_swatch,
)

from .conftest import encode, gradient_image, solid_image


def test_saturated_red_is_vibrant():
    result = PaletteExtractor().extract(encode(solid_image(200, 300, (220, 30, 30))))

    assert result.swatch is not None
    assert result.swatches["Vibrant"] is result.swatch
    r, g, b = result.swatch.rgb
    assert abs(r - 220) <= 2 and abs(g - 30) <= 2 and abs(b - 30) <= 2
    assert result.text_color == LIGHT_TEXT
    assert not result.prefers_light_panel


def test_light_swatch_gets_dark_text_and_light_panel():
    result = PaletteExtractor().extract(encode(solid_image(100, 100, (230, 230, 60))))

    assert result.swatch is not None
    assert result.swatch.is_light
    assert result.text_color == DARK_TEXT
    assert result.luminance > 0.5
    assert result.prefers_light_panel


def test_grey_cover_falls_back_to_muted():
    result = PaletteExtractor().extract(encode(solid_image(100, 100, (120, 110, 100))))

    assert result.swatches["Vibrant"] is None
    assert result.swatch is result.swatches["Muted"]


def test_white_cover_has_no_swatch():
    result = PaletteExtractor().extract(encode(solid_image(100, 100, (255, 255, 255))))

    assert result.swatch is None
    assert result.luminance == DEFAULT_LUMINANCE
    assert result.text_color == LIGHT_TEXT


def test_undecodable_bytes_degrade_instead_of_raising():
    result = PaletteExtractor().extract(b"not an image")

    assert result == PaletteResult()
    assert result.luminance == DEFAULT_LUMINANCE
    assert result.text_color == LIGHT_TEXT


def test_priority_order():
    vibrant = Swatch((200, 20, 20), 10)
    muted = Swatch((120, 100, 100), 10)
    dark = Swatch((40, 30, 30), 10)

    assert select_swatch({"Vibrant": vibrant, "Muted": muted, "DarkMuted": dark}) is vibrant
    assert select_swatch({"Vibrant": None, "Muted": muted, "DarkMuted": dark}) is muted
    assert select_swatch({"Vibrant": None, "Muted": None, "DarkMuted": dark}) is dark
    assert select_swatch({"LightVibrant": Swatch((250, 200, 200), 3)}) is None


def test_quantize_counts_cover_population():
    swatches = quantize(gradient_image(100, 100), color_count=16, quality=1)

    assert 0 < len(swatches) <= 16
    assert sum(s.population for s in swatches) == 100 * 100
    assert swatches == sorted(swatches, key=lambda s: (-s.population, s.rgb))


def test_classify_never_reuses_a_colour():
    named = classify(quantize(gradient_image(120, 80), quality=1))
    picked = [s.rgb for s in named.values() if s is not None and s.population > 0]
    assert len(picked) == len(set(picked))


def test_missing_vibrant_is_synthesized_from_dark_vibrant():
    named = classify([Swatch((90, 10, 10), 50)])

    assert named["DarkVibrant"] == Swatch((90, 10, 10), 50)
    assert named["Vibrant"] is not None
    assert named["Vibrant"].population == 0
    _, _, lightness = named["Vibrant"].hsl
    assert abs(lightness - 0.5) < 0.01
