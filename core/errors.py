"""Error taxonomy for the detection runtime.

None of these escape a detection cycle: the loop catches them, logs, and moves
on to the next scheduled cycle.
"""

from __future__ import annotations


class PathsenseError(RuntimeError):
    """Base class for runtime errors raised by pathsense components."""


class ModelLoadFailure(PathsenseError):
    """The object-detection model could not be initialized."""


class FrameUnavailable(PathsenseError):
    """The frame source is not ready or returned a zero-sized frame."""


class DetectionCycleError(PathsenseError):
    """A single detection cycle failed; the loop continues with the next one."""

    def __init__(self, cycle_index: int, cause: BaseException) -> None:
        super().__init__(f"Detection cycle {cycle_index} failed: {cause}")
        self.cycle_index = cycle_index
        self.cause = cause


class OutputCapabilityUnavailable(PathsenseError):
    """A speech or vibration backend is missing or failed to start."""
