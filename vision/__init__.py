"""Vision package exports."""

from vision.detections import (
    BoundingBox,
    Detection,
    DetectionType,
    LevelChangeDetection,
    ObstacleRegion,
    Position,
    Priority,
    RawPrediction,
)
from vision.pipeline import HybridDetector
from vision.ranking import detection_priority, fuse

__all__ = [
    "BoundingBox",
    "Detection",
    "DetectionType",
    "HybridDetector",
    "LevelChangeDetection",
    "ObstacleRegion",
    "Position",
    "Priority",
    "RawPrediction",
    "detection_priority",
    "fuse",
]
