"""Error conditions raised by the capture and assembly pipeline.

None of these are fatal: each is scoped to one capture or assembly
attempt and the session stays usable afterwards. Out-of-range overlay
scales are clamped, never raised.
"""


class PhotostripError(Exception):
    """Base class for pipeline conditions."""


class SourceNotReady(PhotostripError):
    """The frame source reported zero dimensions; retry once it is live."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        super().__init__(
            f"Frame source not ready: native size is {width}x{height}"
        )


class DecodeFailed(PhotostripError):
    """A frame (or the overlay, frame_index=None) could not be decoded."""

    def __init__(self, frame_index: int | None, reason: str = ""):
        self.frame_index = frame_index
        what = "overlay" if frame_index is None else f"frame {frame_index}"
        msg = f"Failed to decode {what}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class AssemblyStale(PhotostripError):
    """A reset or newer assembly superseded this one; drop the result."""

    def __init__(self, generation: int, current: int):
        self.generation = generation
        self.current = current
        super().__init__(
            f"Assembly generation {generation} superseded by {current}"
        )
