import pytest

from render.color import harmony, hsl_to_rgb, parse_hex_color, rgb_to_hex, rgb_to_hsl


def test_parse_short_and_long_forms():
    assert parse_hex_color("#abc") == parse_hex_color("aabbcc")


@pytest.mark.parametrize("value", ["", "#12", "#12345g", "purple", None])
def test_malformed_hex_raises(value):
    with pytest.raises(ValueError):
        parse_hex_color(value)


def test_rgb_to_hsl_primary():
    assert rgb_to_hsl((1.0, 0.0, 0.0)) == pytest.approx((0.0, 1.0, 0.5))


def test_negative_hue_wraps():
    assert hsl_to_rgb((-120.0, 1.0, 0.5)) == pytest.approx((0.0, 0.0, 1.0))


def test_rgb_to_hex_clamps():
    assert rgb_to_hex((1.2, -0.1, 0.5)) == "#ff0080"


def test_harmony_of_brand_purple():
    assert harmony("#6200ee").tint == "#b988ff"


def test_harmony_of_white():
    result = harmony("#ffffff")
    assert result.tint == "#ffffff"
    assert result.shade == "#bfbfbf"


def test_achromatic_stays_gray():
    result = harmony("#000000")
    assert result.shade == "#000000"
    r, g, b = parse_hex_color(result.tint)
    assert r == g == b


@pytest.mark.parametrize("color", ["#6200ee", "#ff5722", "#3f51b5", "#00c853", "#795548"])
def test_tint_is_lighter_and_shade_darker(color):
    lightness = rgb_to_hsl(parse_hex_color(color))[2]
    result = harmony(color)
    assert rgb_to_hsl(parse_hex_color(result.tint))[2] > lightness
    assert rgb_to_hsl(parse_hex_color(result.shade))[2] < lightness
