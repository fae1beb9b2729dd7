"""Unclassified obstacles inside the ROI, found from edge density.

Not part of the fused ranking by default. ``overlap_fraction`` is exposed so
callers can drop regions already explained by a Layer 1 bounding box.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np

from config.settings import GenericObstacleSettings, RegionOfInterest
from vision.detections import BoundingBox, ObstacleRegion
from vision.edges import detect_edges, find_obstacle_regions, to_grayscale
from vision.geometry import overlap_fraction

__all__ = [
    "detect_generic_obstacles",
    "filter_explained_regions",
    "overlap_fraction",
]


def detect_generic_obstacles(
    frame: Any,
    roi: RegionOfInterest,
    settings: GenericObstacleSettings | None = None,
) -> list[ObstacleRegion]:
    """Return merged edge-dense regions of the ROI in absolute frame pixels."""

    settings = settings or GenericObstacleSettings()
    pixels = np.asarray(frame)
    if pixels.ndim < 2:
        return []
    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        return []

    roi_x = math.floor(roi.x_start * width)
    roi_y = math.floor(roi.y_start * height)
    roi_width = math.floor((roi.x_end - roi.x_start) * width)
    roi_height = math.floor((roi.y_end - roi.y_start) * height)
    if roi_width <= 0 or roi_height <= 0:
        return []

    crop = pixels[roi_y : roi_y + roi_height, roi_x : roi_x + roi_width]
    edges = detect_edges(to_grayscale(crop), settings.edge_threshold)
    regions = find_obstacle_regions(edges, settings.grid_size, settings.density_threshold)

    min_area = roi_width * roi_height * settings.min_area_fraction
    return [
        ObstacleRegion(
            x=region.x + roi_x,
            y=region.y + roi_y,
            width=region.width,
            height=region.height,
            confidence=region.confidence,
        )
        for region in regions
        if region.width * region.height >= min_area
    ]


def filter_explained_regions(
    regions: list[ObstacleRegion],
    known_boxes: list[BoundingBox],
    max_overlap: float = 0.5,
) -> list[ObstacleRegion]:
    """Drop regions covered by a known-object box beyond ``max_overlap``."""

    return [
        region
        for region in regions
        if all(overlap_fraction(region.as_box(), box) <= max_overlap for box in known_boxes)
    ]
