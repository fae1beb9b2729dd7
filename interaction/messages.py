"""Spoken phrasing and vibration patterns for announced detections."""

from __future__ import annotations

from vision.detections import Detection, DetectionType
from vision.labels import POSITION_WORDS


SESSION_START_MESSAGE = "Detección iniciada"
SESSION_STOP_MESSAGE = "Detección detenida"
CAMERA_FAILURE_MESSAGE = "No se pudo acceder a la cámara"

# Alternating on/off durations in milliseconds, starting with "on".
STAIR_DOWN_PATTERN = (200, 100, 200, 100, 200, 100, 200)
CURB_PATTERN = (300, 100, 300)
STAIR_UP_PATTERN = (200, 100, 200)
FENCE_PATTERN = (150,)
NEAR_OBJECT_PATTERN = (100, 50, 100, 50, 100)
MID_OBJECT_PATTERN = (100, 50, 100)
FAR_OBJECT_PATTERN = (100,)


def format_distance(distance: float) -> str:
    value = f"{distance:g}"
    return f"{value} metro" if value == "1" else f"{value} metros"


def announcement_text(detection: Detection) -> str:
    """Urgent for drops, cautionary for rises and fences, plain report otherwise."""

    distance = format_distance(detection.distance)
    label = detection.label
    if detection.type is DetectionType.STAIR_DOWN:
        return f"¡Alto! {label} a {distance}"
    if detection.type is DetectionType.CURB:
        return f"Detente, {label.lower()} a {distance}"
    if detection.type in (DetectionType.STAIR_UP, DetectionType.FENCE):
        return f"Precaución, {label.lower()} a {distance}"
    return f"{label} {POSITION_WORDS[detection.position]}, {distance}"


def vibration_pattern(detection: Detection) -> tuple[int, ...]:
    if detection.type is DetectionType.STAIR_DOWN:
        return STAIR_DOWN_PATTERN
    if detection.type is DetectionType.CURB:
        return CURB_PATTERN
    if detection.type is DetectionType.STAIR_UP:
        return STAIR_UP_PATTERN
    if detection.type is DetectionType.FENCE:
        return FENCE_PATTERN
    if detection.distance < 1.0:
        return NEAR_OBJECT_PATTERN
    if detection.distance < 2.0:
        return MID_OBJECT_PATTERN
    return FAR_OBJECT_PATTERN
