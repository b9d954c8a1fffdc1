"""Shared test fixtures for photostrip tests."""

import datetime
from concurrent.futures import Future

import numpy as np
import pytest
from PIL import Image


FIXED_DAY = datetime.date(2026, 1, 2)

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
YELLOW = (255, 255, 0)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def solid(size, color, mode="RGB"):
    """Solid-color image of the given (w, h)."""
    return Image.new(mode, size, color)


class DeferredExecutor:
    """Executor that only runs submitted work when told to.

    run(order) executes pending tasks in the given index order on the
    calling thread, so tests control decode completion order exactly.
    """

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run(self, order=None):
        tasks, self.pending = self.pending, []
        if order is None:
            order = range(len(tasks))
        for i in order:
            future, fn, args, kwargs = tasks[i]
            try:
                result = fn(*args, **kwargs)
            except Exception as e:
                future.set_exception(e)
            else:
                future.set_result(result)

    def shutdown(self, wait=True):
        self.pending = []


class _Handle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """call_later() stand-in; advance() fires everything that is due."""

    def __init__(self):
        self.pending = []

    def call_later(self, delay, callback):
        handle = _Handle(delay, callback)
        self.pending.append(handle)
        return handle

    def advance(self):
        """Fire all currently scheduled (uncancelled) callbacks once."""
        due, self.pending = self.pending, []
        for handle in due:
            if not handle.cancelled:
                handle.callback()

    @property
    def active(self):
        return [h for h in self.pending if not h.cancelled]


@pytest.fixture
def deferred_executor():
    return DeferredExecutor()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def red_source():
    from photostrip.compositor import ImageFrameSource
    return ImageFrameSource(solid((640, 480), RED))


@pytest.fixture
def split_image():
    """800x600 picture: green left quarter, blue elsewhere."""
    arr = np.zeros((600, 800, 3), dtype=np.uint8)
    arr[:, :] = BLUE
    arr[:, :200] = GREEN
    return Image.fromarray(arr)


@pytest.fixture
def source_video(tmp_path):
    """Create a 1-second 320x240 test video (green left half) with moviepy."""
    from moviepy import ImageClip

    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    frame[:, :] = BLUE
    frame[:, :160] = GREEN
    out = tmp_path / "take.mp4"
    ImageClip(frame).with_duration(1.0).with_fps(10).write_videofile(
        str(out), fps=10, codec="libx264", audio=False, logger=None,
    )
    return out
