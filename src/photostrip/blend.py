"""Blend passes — a flat color composited over a rectangle.

A pass is an explicit (mode, color, alpha, rect) operation rather than
ambient drawing state, so nothing leaks from one photo to the next: each
call blends exactly its rectangle and leaves normal compositing behind.

Separable and non-separable modes follow the W3C Compositing and
Blending formulas for an opaque backdrop:

    result = (1 - alpha) * Cb + alpha * B(Cb, Cs)

where Cb is the backdrop pixel, Cs the pass color and B the blend
function. All math runs in float64 on [0, 1] and is rounded back to
8-bit at the end.
"""

from dataclasses import dataclass

import numpy as np
from PIL import Image


VALID_BLEND_MODES = {"source-over", "multiply", "screen", "overlay", "color"}


@dataclass(frozen=True)
class BlendPass:
    mode: str
    color: tuple[int, int, int]
    alpha: float = 1.0

    def __post_init__(self):
        if self.mode not in VALID_BLEND_MODES:
            raise ValueError(
                f"Unknown blend mode '{self.mode}'. "
                f"Valid: {sorted(VALID_BLEND_MODES)}"
            )
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"Blend alpha must be in [0, 1], got {self.alpha!r}")


# ── Blend functions ──────────────────────────────────────────────
# cb: (h, w, 3) backdrop, cs: (3,) source. Both in [0, 1].


def _multiply(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return cb * cs


def _screen(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return cb + cs - cb * cs


def _overlay(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    """Overlay is hard-light with the layers swapped: keyed on the backdrop."""
    low = 2.0 * cb * cs
    high = _screen(2.0 * cb - 1.0, cs)
    return np.where(cb <= 0.5, low, high)


def _lum(c: np.ndarray) -> np.ndarray:
    return 0.3 * c[..., 0] + 0.59 * c[..., 1] + 0.11 * c[..., 2]


def _clip_color(c: np.ndarray) -> np.ndarray:
    lum = _lum(c)[..., None]
    n = c.min(axis=-1, keepdims=True)
    x = c.max(axis=-1, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        c = np.where(n < 0.0, lum + (c - lum) * lum / (lum - n), c)
        c = np.where(x > 1.0, lum + (c - lum) * (1.0 - lum) / (x - lum), c)
    return c


def _set_lum(c: np.ndarray, lum: np.ndarray) -> np.ndarray:
    d = lum - _lum(c)
    return _clip_color(c + d[..., None])


def _color(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    """Hue and saturation of the source, luminosity of the backdrop."""
    src = np.broadcast_to(cs, cb.shape)
    return _set_lum(src, _lum(cb))


_BLEND_FUNCS = {
    "source-over": lambda cb, cs: np.broadcast_to(cs, cb.shape),
    "multiply": _multiply,
    "screen": _screen,
    "overlay": _overlay,
    "color": _color,
}


# ── Application ──────────────────────────────────────────────────


def blend_array(backdrop: np.ndarray, blend: BlendPass) -> np.ndarray:
    """Apply a pass to an (h, w, 3) uint8 array; returns a new array."""
    cb = backdrop[..., :3].astype(np.float64) / 255.0
    cs = np.asarray(blend.color, dtype=np.float64) / 255.0
    mixed = _BLEND_FUNCS[blend.mode](cb, cs)
    out = (1.0 - blend.alpha) * cb + blend.alpha * mixed
    return np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)


def apply_blend_pass(
    img: Image.Image,
    blend: BlendPass,
    rect: tuple[int, int, int, int] | None = None,
) -> None:
    """Blend a pass into an RGB image in place, limited to rect.

    Args:
        img: Target image (mode "RGB").
        blend: The pass to apply.
        rect: (x, y, w, h) region; None means the whole image. The
            region is clipped to the image bounds.
    """
    if rect is None:
        rect = (0, 0, img.width, img.height)
    x, y, w, h = rect
    left, top = max(0, x), max(0, y)
    right, bottom = min(img.width, x + w), min(img.height, y + h)
    if right <= left or bottom <= top:
        return

    box = (left, top, right, bottom)
    region = np.asarray(img.crop(box).convert("RGB"))
    img.paste(Image.fromarray(blend_array(region, blend)), box)
