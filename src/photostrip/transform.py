"""Overlay pan/scale tracking.

The overlay on the live preview is moved by dragging and resized with a
scale slider. TransformTracker turns those pointer gestures into an
OverlayTransform:

  - translate_x / translate_y are preview pixels, measured from the
    overlay's centered position;
  - scale is clamped to [MIN_SCALE, MAX_SCALE].

Translation only means something relative to the preview container
width it was measured against, so the tracker remembers that width and
rescales the translation when the container is resized.

Every transition is synchronous. Transforms are frozen, so a capture
that took a snapshot keeps it even if a drag continues meanwhile.
"""

from dataclasses import dataclass, replace


MIN_SCALE = 0.5
MAX_SCALE = 2.0


@dataclass(frozen=True)
class OverlayTransform:
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = 1.0


IDENTITY = OverlayTransform()


@dataclass(frozen=True)
class DragSession:
    """Pointer anchor and transform captured at pointer-down."""
    anchor_x: float
    anchor_y: float
    start: OverlayTransform


def clamp_scale(value: float) -> float:
    """Clamp a requested scale into [MIN_SCALE, MAX_SCALE]."""
    return max(MIN_SCALE, min(MAX_SCALE, float(value)))


class TransformTracker:
    """State machine from drag/scale gestures to an OverlayTransform."""

    def __init__(self, container_width: float | None = None):
        self._transform = IDENTITY
        self._drag = None
        self.container_width = container_width
        self.overlay_present = False

    @property
    def transform(self) -> OverlayTransform:
        return self._transform

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    def snapshot(self) -> OverlayTransform:
        """Return the current transform (immutable, safe to hand off)."""
        return self._transform

    # ── Drag ─────────────────────────────────────────────────────

    def begin(self, pointer_x: float, pointer_y: float) -> bool:
        """Start a drag at the pointer position.

        Does nothing when no overlay is loaded. Returns True if a drag
        session was started.
        """
        if not self.overlay_present:
            return False
        self._drag = DragSession(pointer_x, pointer_y, self._transform)
        return True

    def update(self, pointer_x: float, pointer_y: float) -> None:
        """Move the overlay by the pointer delta since begin()."""
        drag = self._drag
        if drag is None:
            return
        dx = pointer_x - drag.anchor_x
        dy = pointer_y - drag.anchor_y
        self._transform = OverlayTransform(
            drag.start.translate_x + dx,
            drag.start.translate_y + dy,
            drag.start.scale,
        )

    def end(self) -> None:
        self._drag = None

    # ── Scale / container ────────────────────────────────────────

    def set_scale(self, value: float) -> float:
        """Set the overlay scale, clamped. Returns the applied scale."""
        scale = clamp_scale(value)
        self._transform = replace(self._transform, scale=scale)
        return scale

    def set_container_width(self, width: float) -> None:
        """Record a new preview container width.

        If a previous width is known, the translation is rescaled so the
        overlay keeps its relative position inside the preview.
        """
        if width <= 0:
            raise ValueError(f"Container width must be > 0, got {width!r}")
        old = self.container_width
        if old and old != width:
            ratio = width / old
            self._transform = replace(
                self._transform,
                translate_x=self._transform.translate_x * ratio,
                translate_y=self._transform.translate_y * ratio,
            )
            # A drag in progress was anchored in the old width.
            self._drag = None
        self.container_width = width

    def reset(self) -> None:
        """Return to the identity transform and drop any drag."""
        self._transform = IDENTITY
        self._drag = None

    def preview_css(self) -> str:
        """CSS transform string for the preview-side overlay element."""
        t = self._transform
        return (
            f"translate({t.translate_x:g}px, {t.translate_y:g}px) "
            f"scale({t.scale:g})"
        )
