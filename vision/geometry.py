"""Region-of-interest and size filters for pixel bounding boxes.

ROI bounds are inclusive on all four edges: a box whose center lies exactly on
``x_start`` or ``x_end`` (or the y equivalents) counts as inside.
"""

from __future__ import annotations

from config.settings import RegionOfInterest
from vision.detections import BoundingBox


def is_in_roi(
    box: BoundingBox,
    frame_width: float,
    frame_height: float,
    roi: RegionOfInterest,
) -> bool:
    """Return whether the center of ``box`` falls inside ``roi``."""

    if frame_width <= 0 or frame_height <= 0:
        return False
    center_x, center_y = box.center
    norm_x = center_x / frame_width
    norm_y = center_y / frame_height
    return (
        roi.x_start <= norm_x <= roi.x_end
        and roi.y_start <= norm_y <= roi.y_end
    )


def is_significant(
    box: BoundingBox,
    frame_width: float,
    frame_height: float,
    min_area_fraction: float,
) -> bool:
    """Return whether ``box`` covers at least ``min_area_fraction`` of the frame."""

    frame_area = frame_width * frame_height
    if frame_area <= 0:
        return False
    return (box.width * box.height) / frame_area >= min_area_fraction


def normalized_center_x(box: BoundingBox, frame_width: float) -> float:
    if frame_width <= 0:
        return 0.5
    return max(0.0, min(1.0, box.center[0] / frame_width))


def overlap_fraction(region: BoundingBox, other: BoundingBox) -> float:
    """Return the share of ``region``'s area covered by ``other``, in ``[0, 1]``."""

    x_overlap = max(
        0.0,
        min(region.x + region.width, other.x + other.width) - max(region.x, other.x),
    )
    y_overlap = max(
        0.0,
        min(region.y + region.height, other.y + other.height) - max(region.y, other.y),
    )
    region_area = region.width * region.height
    if region_area <= 0:
        return 0.0
    return min(1.0, (x_overlap * y_overlap) / region_area)
