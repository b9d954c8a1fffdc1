#!/usr/bin/env python3
"""Generate synthetic media for the photostrip demo manifest.

Creates two stills, one short video and a transparent overlay in
examples/demo-media/. The video shows a moving bar so captures taken at
different timestamps are visibly different.

Usage:
    python examples/generate_demo_media.py
    # Then render:
    photostrip compose --manifest examples/demo-booth.yaml \
        --output examples/demo-renders/strip.png
"""

import numpy as np
from moviepy import VideoClip
from pathlib import Path
from PIL import Image, ImageDraw

OUTPUT_DIR = Path(__file__).resolve().parent / "demo-media"
VIDEO_SIZE = (640, 360)
FPS = 30
DURATION = 3.0

# Stills at different aspect ratios to exercise the center crop.
STILLS = [
    ("still-wide", (1280, 720), (220, 120, 150)),   # rose
    ("still-tall", (480, 640),  (90, 140, 210)),    # sky
]


def _bar_frame(t: float) -> np.ndarray:
    """Teal background with a white bar sweeping left to right."""
    w, h = VIDEO_SIZE
    frame = np.zeros((h, w, 3), dtype=np.uint8)
    frame[:, :] = (40, 150, 150)
    x = int((t / DURATION) * (w - 60))
    frame[:, x:x + 60] = (255, 255, 255)
    return frame


def _make_overlay() -> Image.Image:
    """Transparent canvas with a pair of sunglasses-ish shapes."""
    img = Image.new("RGBA", (400, 200), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.ellipse((20, 40, 180, 160), fill=(20, 20, 20, 230))
    draw.ellipse((220, 40, 380, 160), fill=(20, 20, 20, 230))
    draw.rectangle((170, 85, 230, 105), fill=(20, 20, 20, 255))
    return img


def main():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    for name, size, color in STILLS:
        out = OUTPUT_DIR / f"{name}.png"
        if out.exists():
            print(f"  skip {name} (exists)")
            continue
        Image.new("RGB", size, color).save(out)
        print(f"  wrote {name} {size[0]}x{size[1]}")

    video = OUTPUT_DIR / "sweep.mp4"
    if video.exists():
        print("  skip sweep (exists)")
    else:
        clip = VideoClip(_bar_frame, duration=DURATION)
        clip.write_videofile(str(video), fps=FPS, logger=None)
        print(f"  wrote sweep ({DURATION}s)")

    overlay = OUTPUT_DIR / "overlay.png"
    if not overlay.exists():
        _make_overlay().save(overlay)
        print("  wrote overlay")

    print(f"\nDone. Media in {OUTPUT_DIR}")


if __name__ == "__main__":
    main()
