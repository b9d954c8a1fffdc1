"""photostrip.common — shared utilities for strip composition.

Contains: path variable resolution, font loading, anchored text
rendering, and lossless PNG encode/decode for frames and strips.
"""

import base64
import io
import re
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont


# ── Font paths ─────────────────────────────────────────────────────
# DejaVu carries the heart glyph the cute theme needs, so it comes
# first. Bold variants are tried before regular ones when asked for.

FONT_PATHS = [
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    Path.home() / ".local/share/fonts/Inter.ttc",
]

BOLD_FONT_PATHS = [
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
]

MONO_FONT_PATHS = [
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSansMono-Bold.ttf"),
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf"),
]


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return paths[key]
    return re.sub(r"\$\{(\w+)\}", _replace, text)


# ── Font loading ───────────────────────────────────────────────────

def load_font(
    size: int, bold: bool = False, mono: bool = False,
) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a sans (or monospace) font at the given pixel size.

    Falls through the candidate list until one opens. When no TrueType
    font is installed, Pillow's bundled default is used at the same size.
    """
    candidates = []
    if mono:
        candidates.extend(MONO_FONT_PATHS)
    if bold:
        candidates.extend(BOLD_FONT_PATHS)
    candidates.extend(FONT_PATHS)

    for font_path in candidates:
        if font_path.exists():
            try:
                return ImageFont.truetype(str(font_path), size=size, index=0)
            except (OSError, IndexError):
                continue
    # Last resort: Pillow default font.
    return ImageFont.load_default(size=size)


# ── Text rendering ─────────────────────────────────────────────────

def draw_text_at_baseline(
    img: Image.Image,
    text: str,
    position: tuple[float, float],
    font: ImageFont.FreeTypeFont,
    color: tuple[int, int, int],
    align: str = "left",
) -> tuple[int, int, int, int]:
    """Draw text whose baseline sits at position[1].

    align="center" centers the text horizontally on position[0];
    align="left" starts it there. Returns the drawn bounding box.
    """
    anchor = "ms" if align == "center" else "ls"
    draw = ImageDraw.Draw(img)
    draw.text(position, text, fill=color, font=font, anchor=anchor)
    return draw.textbbox(position, text, font=font, anchor=anchor)


# ── PNG encode / decode ────────────────────────────────────────────

def encode_png(img: Image.Image) -> bytes:
    """Encode an image as lossless PNG bytes."""
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_png(data: bytes) -> Image.Image:
    """Decode PNG (or any Pillow-readable) bytes to an RGB image.

    The image is fully loaded before returning so decode errors surface
    here rather than on first pixel access.

    Raises:
        OSError: Truncated or unrecognized image data.
        Image.DecompressionBombError: The header claims an oversized image.
    """
    img = Image.open(io.BytesIO(data))
    img.load()
    return img.convert("RGB")


def png_data_uri(data: bytes) -> str:
    """Wrap PNG bytes as a data URI suitable for a download link."""
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")
