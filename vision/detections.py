"""Detection schemas shared by every detection layer.

Bounding boxes are expressed in source-frame pixels as ``(x, y, width, height)``
with ``(x, y)`` the top-left corner. Horizontal positions exposed to the rest
of the runtime are normalized to ``[0.0, 1.0]``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class DetectionType(str, Enum):
    """Kind of hazard a detection describes."""

    KNOWN_OBJECT = "known_object"
    STAIR_DOWN = "stair_down"
    STAIR_UP = "stair_up"
    CURB = "curb"
    FENCE = "fence"


class Priority(str, Enum):
    """Urgency tier, ordered ``critical > high > medium > low``."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort key where the most severe tier is ``0``."""

        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.CRITICAL: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


class Position(str, Enum):
    """Lateral bucket of a detection relative to the user."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class BoundingBox(NamedTuple):
    """Pixel rectangle ``(x, y, width, height)``."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)


@dataclass(frozen=True)
class RawPrediction:
    """One prediction as returned by the object-detection model."""

    class_name: str
    score: float
    bbox: BoundingBox


@dataclass(frozen=True)
class Detection:
    """Unified hazard record produced fresh every detection cycle."""

    type: DetectionType
    label: str
    distance: float
    position: Position
    position_x: float
    priority: Priority
    confidence: float
    bounding_box: BoundingBox | None = None

    @property
    def is_critical(self) -> bool:
        return self.priority is Priority.CRITICAL


@dataclass(frozen=True)
class LevelChangeDetection:
    """Candidate level change found by the stripe heuristic.

    ``y`` is the top pixel row of the stripe that triggered the detection.
    """

    type: DetectionType
    y: int
    confidence: float
    label: str


@dataclass(frozen=True)
class ObstacleRegion:
    """Pixel region flagged by the edge-density scan."""

    x: int
    y: int
    width: int
    height: int
    confidence: float

    def as_box(self) -> BoundingBox:
        return BoundingBox(float(self.x), float(self.y), float(self.width), float(self.height))
