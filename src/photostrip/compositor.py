"""Frame compositor — one composited capture per shutter press.

A capture is always CAPTURE_WIDTH x CAPTURE_HEIGHT (640x480), whatever
the source resolution:

  1. The largest 4:3 rectangle centered in the source frame is cropped
     and scaled into the target.
  2. The result is mirrored horizontally so it matches the self-view
     the user saw in the preview.
  3. If an overlay is loaded, it is contain-fit into the target and
     moved/scaled by the preview transform. Preview translation is in
     preview pixels, so it is multiplied by target_w / preview_w.

Overlay transform chain (target space, c = target center):

    translate(c) → translate(t * ratio) → scale(s) → translate(-c)

which places the contain-fit box (rx, ry, rw, rh) at

    (c.x + tx*ratio + s*(rx - c.x), c.y + ty*ratio + s*(ry - c.y), s*rw, s*rh)

Frame sources are the seam to camera code: anything exposing native
dimensions and the current picture. Still images and video files
(moviepy) are provided here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps
from moviepy import VideoFileClip

from .common import decode_png, encode_png
from .errors import DecodeFailed, SourceNotReady
from .transform import IDENTITY, OverlayTransform


CAPTURE_WIDTH = 640
CAPTURE_HEIGHT = 480
CAPTURE_ASPECT = CAPTURE_WIDTH / CAPTURE_HEIGHT


# ── Frames ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Frame:
    """One captured photo, held as lossless PNG bytes."""
    data: bytes = field(repr=False)
    width: int = CAPTURE_WIDTH
    height: int = CAPTURE_HEIGHT

    @classmethod
    def from_image(cls, img: Image.Image) -> "Frame":
        return cls(encode_png(img.convert("RGB")), img.width, img.height)

    def decode(self) -> Image.Image:
        """Decode to a fresh RGB image (callers may draw on it)."""
        return decode_png(self.data)


# ── Frame sources ────────────────────────────────────────────────


class FrameSource(ABC):
    """Anything that can hand over its current picture."""

    @property
    @abstractmethod
    def native_width(self) -> int:
        ...

    @property
    @abstractmethod
    def native_height(self) -> int:
        ...

    @abstractmethod
    def read_frame(self) -> Image.Image:
        """Return the current picture at native resolution."""


class ImageFrameSource(FrameSource):
    """A still picture standing in for the live feed.

    Built without an image (or with an empty one) it reports 0x0, the
    same as a camera that has not delivered its first frame yet.
    """

    def __init__(self, image: Image.Image | np.ndarray | None = None):
        self._image = None
        if image is not None:
            self.set_image(image)

    def set_image(self, image: Image.Image | np.ndarray) -> None:
        if isinstance(image, np.ndarray):
            image = Image.fromarray(image)
        self._image = image.convert("RGB")

    @property
    def native_width(self) -> int:
        return self._image.width if self._image is not None else 0

    @property
    def native_height(self) -> int:
        return self._image.height if self._image is not None else 0

    def read_frame(self) -> Image.Image:
        return self._image.copy()

    @classmethod
    def from_file(cls, path: str | Path) -> "ImageFrameSource":
        with Image.open(path) as img:
            return cls(img.convert("RGB"))


class VideoFileFrameSource(FrameSource):
    """Reads the frame at a timestamp from a video file via moviepy."""

    def __init__(self, path: str | Path, at: float = 0.0):
        self.path = str(path)
        self.at = at
        self._clip = None

    def _open(self) -> VideoFileClip:
        if self._clip is None:
            self._clip = VideoFileClip(self.path, audio=False)
        return self._clip

    @property
    def native_width(self) -> int:
        return int(self._open().size[0])

    @property
    def native_height(self) -> int:
        return int(self._open().size[1])

    def seek(self, at: float) -> None:
        self.at = at

    def read_frame(self) -> Image.Image:
        clip = self._open()
        # Past-the-end reads fall back to the last full frame.
        last = max(0.0, clip.duration - 1.0 / clip.fps)
        t = min(max(0.0, self.at), last)
        return Image.fromarray(clip.get_frame(t).astype(np.uint8))

    def close(self) -> None:
        if self._clip is not None:
            self._clip.close()
            self._clip = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


# ── Geometry ─────────────────────────────────────────────────────


def compute_center_crop(
    src_w: int, src_h: int, aspect: float = CAPTURE_ASPECT,
) -> tuple[float, float, float, float]:
    """Largest centered rectangle of the given aspect inside the source.

    Width-first: keep the full width and trim top/bottom. If that would
    need more height than the source has, keep the full height and trim
    left/right instead.

    Returns:
        (x, y, w, h) in source pixels (floats).
    """
    crop_w = float(src_w)
    crop_h = src_w / aspect
    x, y = 0.0, (src_h - crop_h) / 2

    if crop_h > src_h:
        crop_h = float(src_h)
        crop_w = src_h * aspect
        x, y = (src_w - crop_w) / 2, 0.0

    return x, y, crop_w, crop_h


def contain_fit(
    src_w: int, src_h: int, dst_w: int, dst_h: int,
) -> tuple[float, float, float, float]:
    """Fit a src_w x src_h picture inside dst, centered, aspect kept.

    Returns:
        (x, y, w, h) of the fitted box in destination pixels.
    """
    src_ratio = src_w / src_h
    dst_ratio = dst_w / dst_h
    if src_ratio > dst_ratio:
        w = float(dst_w)
        h = w / src_ratio
    else:
        h = float(dst_h)
        w = h * src_ratio
    return (dst_w - w) / 2, (dst_h - h) / 2, w, h


def overlay_placement(
    overlay_size: tuple[int, int],
    transform: OverlayTransform,
    preview_width: float,
    target_size: tuple[int, int] = (CAPTURE_WIDTH, CAPTURE_HEIGHT),
) -> tuple[float, float, float, float]:
    """Where the overlay lands in capture space.

    Args:
        overlay_size: Native (width, height) of the overlay.
        transform: Preview-space transform snapshot.
        preview_width: Width of the preview container the transform was
            measured in.
        target_size: Capture (width, height).

    Returns:
        (x, y, w, h) of the drawn overlay in target pixels (floats).
    """
    if preview_width <= 0:
        raise ValueError(f"Preview width must be > 0, got {preview_width!r}")
    tw, th = target_size
    ratio = tw / preview_width
    cx, cy = tw / 2, th / 2

    rx, ry, rw, rh = contain_fit(overlay_size[0], overlay_size[1], tw, th)
    s = transform.scale
    x = cx + transform.translate_x * ratio + s * (rx - cx)
    y = cy + transform.translate_y * ratio + s * (ry - cy)
    return x, y, s * rw, s * rh


# ── Overlay loading ──────────────────────────────────────────────


def prepare_overlay(image: Image.Image) -> Image.Image:
    """Normalize a decoded overlay to RGBA, rejecting empty images."""
    if image.width == 0 or image.height == 0:
        raise DecodeFailed(None, "overlay has zero size")
    return image.convert("RGBA")


def load_overlay(path: str | Path) -> Image.Image:
    """Decode an overlay file (PNG with transparency works best).

    Raises:
        DecodeFailed: The file is not a readable image (frame_index None).
        FileNotFoundError: The file does not exist.
    """
    try:
        with Image.open(path) as img:
            img.load()
            return prepare_overlay(img)
    except FileNotFoundError:
        raise
    except (OSError, ValueError) as e:
        raise DecodeFailed(None, str(e)) from e


# ── Capture ──────────────────────────────────────────────────────


def _draw_overlay(
    img: Image.Image,
    overlay: Image.Image,
    box: tuple[float, float, float, float],
) -> Image.Image:
    """Alpha-composite the overlay at box; parts off-canvas are clipped."""
    x, y, w, h = box
    size = (max(1, round(w)), max(1, round(h)))
    scaled = overlay.convert("RGBA").resize(size, Image.LANCZOS)

    layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
    layer.paste(scaled, (round(x), round(y)))
    return Image.alpha_composite(img.convert("RGBA"), layer).convert("RGB")


def capture(
    source: FrameSource,
    overlay: Image.Image | None = None,
    transform: OverlayTransform = IDENTITY,
    preview_width: float | None = None,
) -> Frame:
    """Capture one composited frame from the source.

    Args:
        source: Live frame source; must report non-zero dimensions.
        overlay: Optional overlay image (never modified).
        transform: Transform snapshot taken when the capture was invoked.
        preview_width: Preview container width in pixels, used when
            an overlay is given. Defaults to the capture width.

    Returns:
        A CAPTURE_WIDTH x CAPTURE_HEIGHT Frame.

    Raises:
        SourceNotReady: The source has zero width or height.
    """
    src_w, src_h = source.native_width, source.native_height
    if src_w <= 0 or src_h <= 0:
        raise SourceNotReady(src_w, src_h)

    picture = source.read_frame().convert("RGB")
    x, y, w, h = compute_center_crop(picture.width, picture.height)
    img = picture.resize(
        (CAPTURE_WIDTH, CAPTURE_HEIGHT), Image.BILINEAR,
        box=(x, y, x + w, y + h),
    )
    img = ImageOps.mirror(img)

    if overlay is not None:
        if preview_width is None:
            preview_width = CAPTURE_WIDTH
        box = overlay_placement(overlay.size, transform, preview_width)
        img = _draw_overlay(img, overlay, box)

    return Frame.from_image(img)
