"""CLI for strip composition.

Reads a booth manifest, captures one frame per capture entry (stills or
a timestamp in a video), composites the overlay with the manifest's
transform, and writes the assembled strip as PNG.

Usage:
    # Render a strip
    python -m photostrip.cli \
        --manifest booth.yaml --output /tmp/strip.png

    # Override theme / background
    python -m photostrip.cli \
        --manifest booth.yaml --output /tmp/strip.png \
        --theme film --background "#000000"

    # Validate only (no rendering)
    python -m photostrip.cli --manifest booth.yaml --validate
"""

import argparse
import time
from pathlib import Path

from .assembler import Strip, StripAssembler
from .colors import resolve_color, to_hex
from .compositor import ImageFrameSource, VideoFileFrameSource, load_overlay
from .manifest import load_booth_manifest, validate_paths
from .session import CaptureSession
from .themes import THEMES


def _open_source(capture: dict):
    if capture["video"]:
        return VideoFileFrameSource(capture["source"], at=capture["at"])
    return ImageFrameSource.from_file(capture["source"])


def _apply_overlay(session: CaptureSession, overlay: dict) -> None:
    """Load the overlay and replay its placement as a drag + scale."""
    session.set_overlay(load_overlay(overlay["path"]))
    tracker = session.tracker
    tx, ty = overlay["translate"]
    tracker.begin(0, 0)
    tracker.update(tx, ty)
    tracker.end()
    tracker.set_scale(overlay["scale"])


def compose(
    manifest_path: str,
    output_path: str,
    theme: str | None = None,
    background: str | None = None,
) -> Strip:
    """Load manifest, capture every frame, assemble and save the strip.

    Args:
        manifest_path: Path to YAML booth manifest.
        output_path: Output PNG path.
        theme: Theme id overriding strip.theme.
        background: Color overriding strip.background (hex or palette key).

    Returns:
        The saved Strip.
    """
    config = load_booth_manifest(manifest_path)
    validate_paths(config)

    strip_cfg = config["strip"]
    if theme is not None:
        strip_cfg["theme"] = theme
    if background is not None:
        strip_cfg["background"] = resolve_color(background, config["palette"])

    errors = []
    session = CaptureSession(
        ImageFrameSource(),
        target=strip_cfg["frames"],
        theme=strip_cfg["theme"],
        background=strip_cfg["background"],
        preview_width=config["preview"]["width"],
    )
    session.on_error = errors.append

    try:
        if config["overlay"] is not None:
            _apply_overlay(session, config["overlay"])
            print(f"Overlay: {config['overlay']['path']}  ({session.tracker.preview_css()})")

        for i, capture in enumerate(config["captures"]):
            source = _open_source(capture)
            session.source = source
            where = f" @ {capture['at']:.2f}s" if capture["video"] else ""
            print(f"  CAPTURE  [{i}] {capture['source']}{where}", flush=True)
            try:
                frame = session.capture_now()
            finally:
                if isinstance(source, VideoFileFrameSource):
                    source.close()
            if frame is None:
                raise errors[-1] if errors else RuntimeError(f"Capture {i} was not taken")

        n = len(session.frames)
        print(
            f"  ASSEMBLE {n} frame(s), theme={session.theme}, "
            f"background={to_hex(session.background)}",
            flush=True,
        )
        t0 = time.monotonic()
        strip = session.assemble_sync()
        if strip is None:
            raise RuntimeError("Assembly was superseded before it finished")
        elapsed = time.monotonic() - t0
    finally:
        session.close()

    strip.save(output_path)
    print(f"\nStrip: {strip.width}x{strip.height}, {elapsed:.2f}s wall")
    print(f"Done: {output_path}")
    return strip


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Photo strip compositor — render a strip from a booth manifest.",
    )
    parser.add_argument(
        "--manifest", required=True,
        help="Path to YAML booth manifest",
    )
    parser.add_argument(
        "--output",
        help="Output PNG path (required unless --validate)",
    )
    parser.add_argument(
        "--theme", choices=list(THEMES), default=None,
        help="Override strip.theme",
    )
    parser.add_argument(
        "--background", default=None,
        help="Override strip.background (hex or palette key)",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Validate manifest only — check paths, don't render",
    )
    parsed = parser.parse_args(args)

    if parsed.validate:
        config = load_booth_manifest(parsed.manifest)
        validate_paths(config)
        strip = config["strip"]
        print(
            f"Booth manifest valid: {len(config['captures'])} captures, "
            f"theme={strip['theme']}, background={to_hex(strip['background'])}"
        )
        for i, c in enumerate(config["captures"]):
            tag = f" @ {c['at']:.2f}s" if c["video"] else ""
            print(f"  {i}: {c['source']}{tag}")
        print("All paths verified.")
        return

    if not parsed.output:
        parser.error("--output is required (unless using --validate)")

    Path(parsed.output).parent.mkdir(parents=True, exist_ok=True)
    compose(
        parsed.manifest, parsed.output,
        theme=parsed.theme, background=parsed.background,
    )


if __name__ == "__main__":
    main()
