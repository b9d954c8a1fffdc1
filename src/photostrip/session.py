"""Capture session — countdown, frame list, overlay and strip ownership.

The session is the single owner of the mutable booth state: captured
frames, the overlay image, the overlay transform (via its tracker), the
chosen theme and background, and the most recent strip. Components get
what they need from it as immutable snapshots.

Capture flow:
  start_countdown(3) → on_countdown(3) … tick … on_countdown(1) … tick
  → capture with the transform snapshot at that moment → frame appended
  → on_capture(frame, index); at the target count on_ready(frames) fires
  once.

Cancellation uses a generation counter: reset() bumps it, so a pending
tick (or a capture that was already running) finds itself outdated and
appends nothing. Strip results are checked against the assembler's own
generation the same way.
"""

import threading

from PIL import Image

from .assembler import StripAssembler, Strip
from .colors import DEFAULT_BACKGROUND
from .compositor import CAPTURE_WIDTH, Frame, FrameSource, capture, prepare_overlay
from .errors import AssemblyStale, PhotostripError
from .themes import DEFAULT_THEME, get_theme
from .transform import TransformTracker


DEFAULT_TARGET = 4
COUNTDOWN_SECONDS = 3
TICK_SECONDS = 1.0


class TimerScheduler:
    """Runs callbacks after a delay on threading.Timer threads."""

    def call_later(self, delay: float, callback) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class CaptureSession:
    """Drives one photo booth session.

    Args:
        source: Frame source (camera adapter, still image, video file).
        target: Frames per strip.
        theme: Initial theme id.
        background: Initial strip background RGB.
        preview_width: Width of the preview container the overlay is
            dragged in; defaults to the capture width.
        assembler: StripAssembler to use (a private one by default).
        scheduler: Object with call_later(delay, callback) returning a
            handle with cancel(). Defaults to TimerScheduler.
    """

    def __init__(
        self,
        source: FrameSource,
        target: int = DEFAULT_TARGET,
        theme: str = DEFAULT_THEME,
        background: tuple[int, int, int] = DEFAULT_BACKGROUND,
        preview_width: float | None = None,
        assembler: StripAssembler | None = None,
        scheduler=None,
    ):
        if target < 1:
            raise ValueError(f"Target frame count must be >= 1, got {target}")
        self.source = source
        self.target = target
        self.theme = get_theme(theme).id
        self.background = tuple(background)
        self.tracker = TransformTracker(preview_width or CAPTURE_WIDTH)
        self.assembler = assembler or StripAssembler()
        self.scheduler = scheduler or TimerScheduler()

        self.frames: list[Frame] = []
        self.overlay: Image.Image | None = None
        self.strip: Strip | None = None
        self.countdown: int | None = None

        self.on_countdown = None
        self.on_capture = None
        self.on_ready = None
        self.on_strip = None
        self.on_error = None

        self._lock = threading.RLock()
        self._generation = 0
        self._timer = None
        self._ready_signalled = False
        self._capturing = False

    # ── State queries ────────────────────────────────────────────

    @property
    def full(self) -> bool:
        return len(self.frames) >= self.target

    @property
    def counting_down(self) -> bool:
        return self.countdown is not None

    @property
    def shutter_enabled(self) -> bool:
        return not self.full and not self.counting_down and not self._capturing

    # ── Overlay / transform ──────────────────────────────────────

    def set_overlay(self, image: Image.Image) -> None:
        """Load (or replace) the overlay; the transform starts over."""
        overlay = prepare_overlay(image)
        with self._lock:
            self.overlay = overlay
            self.tracker.reset()
            self.tracker.overlay_present = True

    def clear_overlay(self) -> None:
        with self._lock:
            self.overlay = None
            self.tracker.reset()
            self.tracker.overlay_present = False

    def set_preview_width(self, width: float) -> None:
        self.tracker.set_container_width(width)

    # ── Theme / background ───────────────────────────────────────

    def set_theme(self, theme: str) -> None:
        theme = get_theme(theme).id
        with self._lock:
            if theme != self.theme:
                self.theme = theme
                self._invalidate_strip()

    def set_background(self, background: tuple[int, int, int]) -> None:
        background = tuple(background)
        with self._lock:
            if background != self.background:
                self.background = background
                self._invalidate_strip()

    def _invalidate_strip(self) -> None:
        self.strip = None
        self.assembler.invalidate()

    # ── Countdown ────────────────────────────────────────────────

    def start_countdown(self, seconds: int = COUNTDOWN_SECONDS) -> bool:
        """Count down and capture at zero.

        Returns False (and does nothing) while the shutter is disabled:
        the strip is full, another countdown is running, or a capture is
        still being taken.
        """
        with self._lock:
            if not self.shutter_enabled:
                return False
            generation = self._generation
            if seconds <= 0:
                self.countdown = None
                self._capturing = True
            else:
                self.countdown = seconds
                self._timer = self.scheduler.call_later(
                    TICK_SECONDS, lambda: self._tick(generation),
                )
        if seconds <= 0:
            self._capture(generation)
        else:
            self._emit("on_countdown", seconds)
        return True

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self.countdown is None:
                return
            self.countdown -= 1
            remaining = self.countdown
            if remaining > 0:
                self._timer = self.scheduler.call_later(
                    TICK_SECONDS, lambda: self._tick(generation),
                )
            else:
                self.countdown = None
                self._timer = None
                self._capturing = True

        if remaining > 0:
            self._emit("on_countdown", remaining)
        else:
            self._emit("on_countdown", None)
            self._capture(generation)

    # ── Capture ──────────────────────────────────────────────────

    def capture_now(self) -> Frame | None:
        """Capture immediately, bypassing the countdown.

        Returns the Frame, or None if the shutter is disabled or the
        source was not ready (reported through on_error).
        """
        with self._lock:
            if not self.shutter_enabled:
                return None
            generation = self._generation
            self._capturing = True
        return self._capture(generation)

    def _capture(self, generation: int) -> Frame | None:
        with self._lock:
            overlay = self.overlay
            transform = self.tracker.snapshot()
            preview_width = self.tracker.container_width

        try:
            frame = capture(self.source, overlay, transform, preview_width)
        except PhotostripError as e:
            self._end_capture(generation)
            self._emit("on_error", e)
            return None
        except Exception:
            self._end_capture(generation)
            raise

        with self._lock:
            if generation != self._generation:
                return None
            self._capturing = False
            if self.full:
                return None
            self.frames.append(frame)
            index = len(self.frames) - 1
            self._invalidate_strip()
            signal_ready = self.full and not self._ready_signalled
            if signal_ready:
                self._ready_signalled = True
            frames = list(self.frames)

        self._emit("on_capture", frame, index)
        if signal_ready:
            self._emit("on_ready", frames)
        return frame

    def _end_capture(self, generation: int) -> None:
        with self._lock:
            if generation == self._generation:
                self._capturing = False

    # ── Assembly ─────────────────────────────────────────────────

    def assemble(self):
        """Assemble the current frames into a strip.

        Returns the assembler's Future. When it resolves with a current
        Strip, the session keeps it in self.strip and calls on_strip.
        Stale results are dropped without notice.
        """
        with self._lock:
            frames = list(self.frames)
            theme, background = self.theme, self.background
        future = self.assembler.assemble(theme, background, frames)
        future.add_done_callback(self._on_assembled)
        return future

    def assemble_sync(self, timeout: float | None = None) -> Strip | None:
        """assemble() and wait; None if the result went stale."""
        future = self.assemble()
        try:
            return future.result(timeout=timeout)
        except AssemblyStale:
            return None

    def _on_assembled(self, future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if isinstance(exc, AssemblyStale):
            return
        if exc is not None:
            self._emit("on_error", exc)
            return
        strip = future.result()
        with self._lock:
            if not self.assembler.is_current(strip.generation):
                return
            self.strip = strip
        self._emit("on_strip", strip)

    # ── Reset ────────────────────────────────────────────────────

    def reset(self) -> None:
        """Start over: cancel any countdown, drop frames, overlay and strip.

        Theme and background stay selected.
        """
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self.countdown = None
            self.frames.clear()
            self.overlay = None
            self.tracker.reset()
            self.tracker.overlay_present = False
            self._ready_signalled = False
            self._capturing = False
            self._invalidate_strip()

    def close(self) -> None:
        self.reset()
        self.assembler.close()

    def _emit(self, name: str, *args) -> None:
        callback = getattr(self, name)
        if callback is not None:
            callback(*args)
