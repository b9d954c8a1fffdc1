"""Tests for palette parsing and ink selection."""

import pytest

from photostrip.colors import (
    DEFAULT_PALETTE,
    is_near_black,
    is_near_white,
    parse_hex_color,
    pick_ink,
    resolve_color,
    to_hex,
)


class TestParseHexColor:
    def test_with_hash(self):
        assert parse_hex_color("#e11d48") == (225, 29, 72)

    def test_without_hash(self):
        assert parse_hex_color("FCE7F3") == (252, 231, 243)

    def test_bad_length_raises(self):
        with pytest.raises(ValueError, match="Invalid hex color"):
            parse_hex_color("#fff")

    def test_bad_digits_raise(self):
        with pytest.raises(ValueError, match="Invalid hex color"):
            parse_hex_color("#gg0000")

    def test_to_hex(self):
        assert to_hex((192, 132, 252)) == "#c084fc"


class TestResolveColor:
    def test_default_palette_key(self):
        assert resolve_color("purple") == (192, 132, 252)

    def test_extra_palette_key_wins(self):
        assert resolve_color("white", {"white": (250, 250, 250)}) == (250, 250, 250)

    def test_inline_hex(self):
        assert resolve_color("#123456") == (18, 52, 86)

    def test_rgb_list(self):
        assert resolve_color([1, 2, 3]) == (1, 2, 3)

    def test_rgb_out_of_range(self):
        with pytest.raises(ValueError, match="three 0-255 ints"):
            resolve_color([1, 2, 300])

    @pytest.mark.parametrize("value", [0, 255, 1.5, None])
    def test_non_string_scalar_raises(self, value):
        with pytest.raises(ValueError, match="hex string, palette key"):
            resolve_color(value)

    def test_unknown_key_raises(self):
        with pytest.raises(ValueError, match="Unknown color"):
            resolve_color("mauve-ish")

    def test_palette_has_eight_suggestions(self):
        assert len(DEFAULT_PALETTE) == 8
        assert DEFAULT_PALETTE["pink"] == parse_hex_color("#fce7f3")


class TestInk:
    def test_near_black(self):
        assert is_near_black((0, 0, 0))
        assert is_near_black(parse_hex_color("#171717"))
        assert not is_near_black(parse_hex_color("#333333"))

    def test_near_white(self):
        assert is_near_white((255, 255, 255))
        assert is_near_white((245, 250, 255))
        assert not is_near_white(parse_hex_color("#fce7f3"))

    def test_flip_on_dark(self):
        assert pick_ink((0, 0, 0), (0, 0, 0), on_dark=(255, 255, 255)) == (255, 255, 255)

    def test_flip_on_light(self):
        assert pick_ink((255, 255, 255), (255, 255, 255), on_light=(0, 0, 0)) == (0, 0, 0)

    def test_default_for_mid_colors(self):
        ink = (9, 9, 9)
        for bg in [(252, 231, 243), (192, 132, 252), (128, 128, 128)]:
            assert pick_ink(bg, ink, on_dark=(1, 1, 1), on_light=(2, 2, 2)) == ink

    def test_no_flip_without_alternative(self):
        assert pick_ink((0, 0, 0), (5, 5, 5)) == (5, 5, 5)
