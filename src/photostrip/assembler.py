"""Strip assembly — N captured frames stacked into one themed image.

Strip layout (N frames):
  ┌──────────────────────────────┐
  │ ♥          header (80)       │
  │   ┌──────────────────────┐   │
  │   │       frame 0        │   │  ← 640x480 at (40, 80)
  │   └──────────────────────┘▒  │  ← drop shadow offset (5, 5)
  │            gap (20)          │
  │   ┌──────────────────────┐   │
  │   │       frame 1        │   │  ← y = 80 + i * (480 + 20)
  │   └──────────────────────┘▒  │
  │          footer (100)        │
  │         PHOTO BOOTH          │
  └──────────────────────────────┘
   padding (40) on both sides

Frames are decoded concurrently on an executor. Whichever order the
decodes finish in, each frame is drawn at the slot of its list index,
and a CompletionBarrier releases the single finalize step (PNG encode)
only after all N frames are on the canvas.

Each assemble() call bumps a generation counter. An assembly that is no
longer the current generation when it finalizes resolves with
AssemblyStale instead of a Strip; so does one whose assembler was
invalidate()d while in flight.
"""

import datetime
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from PIL import Image

from .blend import BlendPass, apply_blend_pass
from .common import encode_png, png_data_uri
from .compositor import CAPTURE_HEIGHT, CAPTURE_WIDTH, Frame
from .errors import AssemblyStale, DecodeFailed
from .themes import ThemeDecorator, get_theme


# ── Layout ───────────────────────────────────────────────────────

PHOTO_WIDTH = CAPTURE_WIDTH
PHOTO_HEIGHT = CAPTURE_HEIGHT
PADDING = 40
HEADER_HEIGHT = 80
FOOTER_HEIGHT = 100
GAP = 20
SHADOW_OFFSET = 5

SHADOW_PASS = BlendPass("source-over", (0, 0, 0), 0.1)


def strip_size(n: int) -> tuple[int, int]:
    """(width, height) of a strip holding n frames."""
    if n < 1:
        raise ValueError(f"A strip needs at least one frame, got {n}")
    width = PHOTO_WIDTH + 2 * PADDING
    height = HEADER_HEIGHT + n * PHOTO_HEIGHT + (n - 1) * GAP + FOOTER_HEIGHT
    return width, height


def photo_origin(index: int) -> tuple[int, int]:
    """Top-left corner of the photo slot for a list index."""
    return PADDING, HEADER_HEIGHT + index * (PHOTO_HEIGHT + GAP)


# ── Completion barrier ───────────────────────────────────────────


class CompletionBarrier:
    """Counts arrivals and fires on_complete once, at the total-th arrival.

    A tripped barrier (fail()) never fires. Thread-safe; on_complete runs
    on the thread of the last arrival, outside the lock.
    """

    def __init__(self, total: int, on_complete):
        if total < 1:
            raise ValueError(f"Barrier total must be >= 1, got {total}")
        self.total = total
        self._on_complete = on_complete
        self._count = 0
        self._fired = False
        self._tripped = False
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        return self._count

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def tripped(self) -> bool:
        return self._tripped

    def arrive(self) -> bool:
        """Record one completion. Returns True if this arrival fired."""
        with self._lock:
            if self._tripped or self._fired:
                return False
            self._count += 1
            if self._count < self.total:
                return False
            self._fired = True
        self._on_complete()
        return True

    def fail(self) -> bool:
        """Trip the barrier. Returns True for the first failure only."""
        with self._lock:
            if self._tripped or self._fired:
                return False
            self._tripped = True
            return True


# ── Strip ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Strip:
    """A finished strip and its PNG export."""
    image: Image.Image = field(repr=False, compare=False)
    png: bytes = field(repr=False)
    theme: str
    background: tuple[int, int, int]
    frame_count: int
    generation: int

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def to_data_uri(self) -> str:
        return png_data_uri(self.png)

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.png)
        return path


def suggested_filename(now: datetime.datetime | None = None) -> str:
    """Download name for a strip, e.g. photobooth-20260102-153000.png."""
    now = now or datetime.datetime.now()
    return f"photobooth-{now:%Y%m%d-%H%M%S}.png"


# ── Assembler ────────────────────────────────────────────────────


def _resolve(future: Future, result=None, exc: BaseException | None = None) -> None:
    """Settle a future unless the caller already cancelled it."""
    if not future.set_running_or_notify_cancel():
        return
    if exc is not None:
        future.set_exception(exc)
    else:
        future.set_result(result)


def _draw_photo(
    canvas: Image.Image,
    photo: Image.Image,
    index: int,
    passes: tuple[BlendPass, ...],
) -> None:
    """Shadow, photo, then the theme's passes over that photo only."""
    x, y = photo_origin(index)
    apply_blend_pass(
        canvas, SHADOW_PASS,
        (x + SHADOW_OFFSET, y + SHADOW_OFFSET, PHOTO_WIDTH, PHOTO_HEIGHT),
    )
    if photo.size != (PHOTO_WIDTH, PHOTO_HEIGHT):
        photo = photo.resize((PHOTO_WIDTH, PHOTO_HEIGHT), Image.BILINEAR)
    canvas.paste(photo, (x, y))
    for blend in passes:
        apply_blend_pass(canvas, blend, (x, y, PHOTO_WIDTH, PHOTO_HEIGHT))


class StripAssembler:
    """Builds strips from frames; one generation per assemble() call.

    Args:
        executor: Where frame decodes run. Defaults to a private thread
            pool (shut down by close()).
        max_workers: Thread pool size when no executor is given.
        today: Date stamped by date-showing themes (default: today).
    """

    def __init__(self, executor=None, max_workers: int | None = None,
                 today: datetime.date | None = None):
        self._own_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="photostrip-decode",
        )
        self.today = today
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def invalidate(self) -> int:
        """Make every in-flight assembly stale. Returns the new generation."""
        with self._lock:
            self._generation += 1
            return self._generation

    def close(self) -> None:
        if self._own_executor:
            self._executor.shutdown(wait=True)

    def assemble(
        self,
        theme: str,
        background: tuple[int, int, int],
        frames: list[Frame],
    ) -> Future:
        """Start assembling a strip.

        Args:
            theme: Theme id (see photostrip.themes.THEMES).
            background: Strip background RGB.
            frames: Captured frames, drawn top to bottom in list order.

        Returns:
            Future resolving to a Strip, or raising DecodeFailed(index)
            if a frame cannot be decoded, or AssemblyStale if superseded.

        Raises:
            ValueError: Unknown theme or empty frame list.
        """
        decorator = get_theme(theme)
        frames = list(frames)
        width, height = strip_size(len(frames))
        generation = self.invalidate()

        canvas = Image.new("RGB", (width, height), tuple(background))
        decorator.decorate(canvas, width, height, tuple(background), today=self.today)

        future = Future()
        draw_lock = threading.Lock()

        def finalize():
            if not self.is_current(generation):
                _resolve(future, exc=AssemblyStale(generation, self._generation))
                return
            strip = Strip(
                image=canvas,
                png=encode_png(canvas),
                theme=decorator.id,
                background=tuple(background),
                frame_count=len(frames),
                generation=generation,
            )
            if not self.is_current(generation):
                _resolve(future, exc=AssemblyStale(generation, self._generation))
                return
            _resolve(future, strip)

        barrier = CompletionBarrier(len(frames), finalize)

        for index, frame in enumerate(frames):
            task = self._executor.submit(frame.decode)
            task.add_done_callback(partial(
                self._on_decoded, index, generation, canvas, decorator, draw_lock,
                barrier, future,
            ))

        return future

    def assemble_sync(self, theme, background, frames, timeout: float | None = None) -> Strip:
        """assemble() and wait for the Strip."""
        return self.assemble(theme, background, frames).result(timeout=timeout)

    def _fail(self, generation: int, barrier: CompletionBarrier, future: Future, exc) -> None:
        """Trip the barrier and settle the future with exc, or stale if superseded.

        Only the first failure settles the future. A failure raised by
        finalize itself (barrier already fired) also settles it.
        """
        if not barrier.fail() and not barrier.fired:
            return
        if not self.is_current(generation):
            exc = AssemblyStale(generation, self._generation)
        if not future.done():
            _resolve(future, exc=exc)

    def _on_decoded(
        self,
        index: int,
        generation: int,
        canvas: Image.Image,
        decorator: ThemeDecorator,
        draw_lock: threading.Lock,
        barrier: CompletionBarrier,
        future: Future,
        task: Future,
    ) -> None:
        try:
            photo = task.result()
        except Exception as e:
            self._fail(generation, barrier, future, DecodeFailed(index, str(e)))
            return

        if barrier.tripped:
            return
        try:
            with draw_lock:
                _draw_photo(canvas, photo, index, decorator.photo_passes)
            barrier.arrive()
        except Exception as e:
            # Draw errors go to the assembly future.
            self._fail(generation, barrier, future, e)
