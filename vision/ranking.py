"""Priority assignment and the fusion of detection layers into one ranked list."""

from __future__ import annotations

from typing import Iterable

from vision.detections import Detection, DetectionType, Priority


CRITICAL_CLASSES = frozenset({"person", "car", "truck", "bus", "motorcycle"})
SECONDARY_CLASSES = frozenset({"bicycle", "dog", "cat"})

_LEVEL_CHANGE_PRIORITIES = {
    DetectionType.STAIR_DOWN: Priority.CRITICAL,
    DetectionType.CURB: Priority.CRITICAL,
    DetectionType.STAIR_UP: Priority.HIGH,
    DetectionType.FENCE: Priority.MEDIUM,
}

MAX_FUSED_RESULTS = 5


def detection_priority(
    detection_type: DetectionType,
    class_name: str | None,
    distance: float,
) -> Priority:
    """Derive the priority tier from ``(type, class, distance)``.

    Level changes have fixed tiers. Known objects are critical under one unit,
    people and vehicles are critical under two units and high beyond that,
    animals and cyclists are always high, anything else falls through the
    generic distance ladder.
    """

    fixed = _LEVEL_CHANGE_PRIORITIES.get(detection_type)
    if fixed is not None:
        return fixed

    name = (class_name or "").lower()
    if distance < 1.0:
        return Priority.CRITICAL
    if name in CRITICAL_CLASSES and distance < 2.0:
        return Priority.CRITICAL
    if name in CRITICAL_CLASSES:
        return Priority.HIGH
    if name in SECONDARY_CLASSES:
        return Priority.HIGH
    if distance < 1.5:
        return Priority.HIGH
    if distance < 2.5:
        return Priority.MEDIUM
    return Priority.LOW


def ranking_key(detection: Detection) -> tuple[int, float]:
    return (detection.priority.rank, detection.distance)


def fuse(
    known_objects: Iterable[Detection],
    level_changes: Iterable[Detection],
    limit: int = MAX_FUSED_RESULTS,
) -> list[Detection]:
    """Merge both layers, rank by severity then distance, keep the top ``limit``.

    ``sorted`` is stable, so ties keep Layer 1 ahead of Layer 2 and preserve
    the order inside each layer.
    """

    combined = [*known_objects, *level_changes]
    return sorted(combined, key=ranking_key)[: max(0, limit)]
