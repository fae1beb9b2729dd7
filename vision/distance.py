"""Heuristic distance estimates from apparent size or vertical position."""

from __future__ import annotations

import math

from config.settings import DistanceSettings


_DEFAULT_SETTINGS = DistanceSettings()

# (relative y lower bound, distance) checked from the bottom of the frame up.
_VERTICAL_BUCKETS: tuple[tuple[float, float], ...] = (
    (0.85, 0.5),
    (0.75, 1.0),
    (0.65, 1.5),
    (0.55, 2.0),
    (0.45, 2.5),
)
_FAR_BUCKET = 3.0


def reference_height(object_class: str, settings: DistanceSettings = _DEFAULT_SETTINGS) -> float:
    heights = settings.reference_heights
    return float(heights.get(object_class, heights.get("default", 0.2)))


def estimate_distance_from_height(
    bbox_height: float,
    frame_height: float,
    object_class: str,
    settings: DistanceSettings = _DEFAULT_SETTINGS,
) -> float:
    """Estimate distance from how much of the frame height an object fills.

    ``distance = reference_height / (bbox_height / frame_height)``, rounded to one
    decimal (half up) and clamped to the configured range. A zero-height box (or a
    zero-height frame) is treated as being at maximum distance.
    """

    if bbox_height <= 0 or frame_height <= 0:
        return settings.max_distance

    normalized_height = bbox_height / frame_height
    distance = reference_height(object_class, settings) / normalized_height
    distance = math.floor(distance * 10.0 + 0.5) / 10.0
    return max(settings.min_distance, min(settings.max_distance, distance))


def estimate_distance_from_vertical_position(y: float, frame_height: float) -> float:
    """Map a stripe row to a coarse distance bucket; rows nearer the bottom are closer."""

    if frame_height <= 0:
        return _FAR_BUCKET
    relative_y = y / frame_height
    for lower_bound, distance in _VERTICAL_BUCKETS:
        if relative_y > lower_bound:
            return distance
    return _FAR_BUCKET
