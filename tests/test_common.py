"""Tests for photostrip.common utilities."""

import base64

import pytest
from PIL import Image

from photostrip.common import (
    decode_png,
    draw_text_at_baseline,
    encode_png,
    load_font,
    png_data_uri,
    resolve_path_vars,
)


class TestResolvePathVars:
    def test_single_var(self):
        result = resolve_path_vars("${media}/friend.png", {"media": "/data/booth"})
        assert result == "/data/booth/friend.png"

    def test_multiple_vars(self):
        paths = {"media": "/data/booth", "takes": "/data/takes"}
        result = resolve_path_vars("${media}/a and ${takes}/b", paths)
        assert result == "/data/booth/a and /data/takes/b"

    def test_no_vars(self):
        assert resolve_path_vars("/plain/path", {}) == "/plain/path"

    def test_unknown_var_raises(self):
        with pytest.raises(ValueError, match="Unknown path variable"):
            resolve_path_vars("${missing}/x", {})


class TestLoadFont:
    def test_returns_font_object(self):
        assert load_font(size=24) is not None

    def test_bold_and_mono(self):
        assert load_font(size=20, bold=True) is not None
        assert load_font(size=20, bold=True, mono=True) is not None


class TestDrawTextAtBaseline:
    def test_centered_text_straddles_x(self):
        img = Image.new("RGB", (400, 100), (255, 255, 255))
        left, top, right, bottom = draw_text_at_baseline(
            img, "PHOTO BOOTH", (200, 70), load_font(24), (0, 0, 0), align="center",
        )
        assert left < 200 < right
        # Baseline anchor: glyphs sit above y=70 (caps have no descenders).
        assert bottom <= 73

    def test_left_text_starts_at_x(self):
        img = Image.new("RGB", (400, 100), (255, 255, 255))
        left, _, right, _ = draw_text_at_baseline(
            img, "ABC", (30, 60), load_font(24), (0, 0, 0),
        )
        assert 28 <= left <= 34
        assert right > left

    def test_changes_pixels(self):
        img = Image.new("RGB", (200, 60), (255, 255, 255))
        draw_text_at_baseline(img, "X", (100, 40), load_font(30), (0, 0, 0), align="center")
        assert img.getextrema()[0][0] < 128


class TestPng:
    def test_encode_is_png(self):
        data = encode_png(Image.new("RGB", (8, 8), (1, 2, 3)))
        assert data[:8] == b"\x89PNG\r\n\x1a\n"

    def test_decode_is_lossless(self):
        img = Image.new("RGB", (8, 8), (1, 2, 3))
        img.putpixel((3, 4), (250, 128, 7))
        out = decode_png(encode_png(img))
        assert out.mode == "RGB"
        assert out.getpixel((3, 4)) == (250, 128, 7)
        assert out.getpixel((0, 0)) == (1, 2, 3)

    def test_decode_garbage_raises_oserror(self):
        with pytest.raises(OSError):
            decode_png(b"definitely not an image")

    def test_data_uri(self):
        data = encode_png(Image.new("RGB", (2, 2)))
        uri = png_data_uri(data)
        assert uri.startswith("data:image/png;base64,")
        assert base64.b64decode(uri.split(",", 1)[1]) == data
