"""Booth manifest loader — declarative photo strip sessions.

Parses YAML manifests, resolves ${path} variables, converts colors to
RGB tuples, and validates themes, captures and the overlay transform.

Booth manifest schema:
  strip:
    theme: film              # simple | cute | film
    background: "#fce7f3"    # hex, palette key, or [r, g, b]
    frames: 4                # photos per strip
  preview:
    width: 480               # container width the overlay was placed in
  paths:
    media: "/path/to/media"
  colors:                    # extra palette keys (optional)
    blush: "#fce7f3"
  overlay:                   # optional
    path: "${media}/friend.png"
    translate: [12, -30]     # preview pixels
    scale: 1.2               # clamped to [0.5, 2.0]
  captures:
    - source: "${media}/take.mp4"
      at: 1.5                # seconds into a video source
    - source: "${media}/still.jpg"
"""

from pathlib import Path

import yaml

from .colors import DEFAULT_BACKGROUND, parse_hex_color, resolve_color
from .common import resolve_path_vars
from .themes import DEFAULT_THEME, THEMES
from .transform import clamp_scale


MAX_FRAMES = 8
DEFAULT_FRAMES = 4
DEFAULT_PREVIEW_WIDTH = 640

VIDEO_EXTENSIONS = {".mp4", ".mov", ".m4v", ".webm", ".mkv", ".avi"}


def is_video_path(path: str | Path) -> bool:
    return Path(path).suffix.lower() in VIDEO_EXTENSIONS


# ── Manifest loading ──────────────────────────────────────────────


def load_booth_manifest(manifest_path: str | Path) -> dict:
    """Load, validate, and normalize a booth manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Parse colors.* into the palette, then resolve strip.background.
      3. Validate strip.theme and strip.frames.
      4. Resolve ${path} variables in overlay and capture sources.
      5. Validate overlay transform and every capture entry.

    Args:
        manifest_path: Path to the YAML booth manifest.

    Returns:
        Normalized config dict with keys strip, preview, overlay
        (None when absent) and captures.

    Raises:
        ValueError: Invalid theme, color, count, transform or capture.
        FileNotFoundError: Missing manifest file.
    """
    with open(manifest_path) as f:
        raw = yaml.safe_load(f) or {}

    paths = raw.get("paths", {})

    # Palette: parse extra hex strings to RGB tuples.
    palette = {}
    for key, value in raw.get("colors", {}).items():
        if isinstance(value, str):
            palette[key] = parse_hex_color(value)
        else:
            palette[key] = resolve_color(value)

    config = {"palette": palette}
    config["strip"] = _load_strip(raw.get("strip", {}), palette)
    config["preview"] = _load_preview(raw.get("preview", {}))

    overlay = raw.get("overlay")
    config["overlay"] = _load_overlay(overlay, paths) if overlay is not None else None

    captures = raw.get("captures", [])
    if not isinstance(captures, list):
        raise ValueError("Booth manifest: 'captures' must be a list")
    frames = config["strip"]["frames"]
    if len(captures) > frames:
        raise ValueError(
            f"Booth manifest: {len(captures)} captures but strip.frames is {frames}"
        )
    config["captures"] = [
        _load_capture(c, i, paths) for i, c in enumerate(captures)
    ]
    return config


def _load_strip(strip: dict, palette: dict) -> dict:
    theme = strip.get("theme", DEFAULT_THEME)
    if theme not in THEMES:
        raise ValueError(
            f"Booth manifest: unknown strip.theme '{theme}'. Valid: {list(THEMES)}"
        )

    background = strip.get("background")
    background = (
        DEFAULT_BACKGROUND if background is None
        else resolve_color(background, palette)
    )

    frames = strip.get("frames", DEFAULT_FRAMES)
    if not isinstance(frames, int) or isinstance(frames, bool) or not 1 <= frames <= MAX_FRAMES:
        raise ValueError(
            f"Booth manifest: strip.frames must be an int in 1..{MAX_FRAMES}, got {frames!r}"
        )
    return {"theme": theme, "background": background, "frames": frames}


def _load_preview(preview: dict) -> dict:
    width = preview.get("width", DEFAULT_PREVIEW_WIDTH)
    if not isinstance(width, (int, float)) or width <= 0:
        raise ValueError(f"Booth manifest: preview.width must be > 0, got {width!r}")
    return {"width": width}


def _load_overlay(overlay: dict, paths: dict) -> dict:
    prefix = "Overlay"
    if "path" not in overlay:
        raise ValueError(f"{prefix}: missing required field 'path'")

    translate = overlay.get("translate", [0, 0])
    if (
        not isinstance(translate, list)
        or len(translate) != 2
        or not all(isinstance(v, (int, float)) for v in translate)
    ):
        raise ValueError(f"{prefix}: 'translate' must be [x, y], got {translate!r}")

    scale = overlay.get("scale", 1.0)
    if not isinstance(scale, (int, float)):
        raise ValueError(f"{prefix}: 'scale' must be a number, got {scale!r}")

    return {
        "path": resolve_path_vars(overlay["path"], paths),
        "translate": (float(translate[0]), float(translate[1])),
        "scale": clamp_scale(scale),
    }


def _load_capture(capture: dict, index: int, paths: dict) -> dict:
    prefix = f"Capture {index}"
    if not isinstance(capture, dict) or "source" not in capture:
        raise ValueError(f"{prefix}: missing required field 'source'")

    source = resolve_path_vars(capture["source"], paths)
    at = capture.get("at")
    if at is not None:
        if not is_video_path(source):
            raise ValueError(f"{prefix}: 'at' only applies to video sources")
        if not isinstance(at, (int, float)) or at < 0:
            raise ValueError(f"{prefix}: 'at' must be >= 0, got {at!r}")
    return {"source": source, "at": float(at or 0.0), "video": is_video_path(source)}


def validate_paths(config: dict) -> None:
    """Check that the overlay and every capture source exist on disk.

    Raises:
        FileNotFoundError: Lists all missing files.
    """
    missing = []
    if config["overlay"] is not None and not Path(config["overlay"]["path"]).exists():
        missing.append(config["overlay"]["path"])
    for capture in config["captures"]:
        if not Path(capture["source"]).exists():
            missing.append(capture["source"])

    if missing:
        msg = f"Missing {len(missing)} media file(s):\n"
        for p in missing:
            msg += f"  - {p}\n"
        raise FileNotFoundError(msg)
