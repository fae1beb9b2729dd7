"""Sobel edge map and edge-density region finding."""

from __future__ import annotations

from typing import Any

import cv2
import numpy as np

from vision.detections import ObstacleRegion


def to_grayscale(frame: Any) -> np.ndarray:
    """Return a ``uint8`` luma image for an RGB (or already gray) frame."""

    pixels = np.asarray(frame)
    if pixels.ndim == 2:
        return pixels.astype(np.uint8, copy=False)
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"Unsupported frame shape: {pixels.shape}")
    rgb = np.ascontiguousarray(pixels[:, :, :3], dtype=np.uint8)
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)


def detect_edges(grayscale: np.ndarray, threshold: float = 50.0) -> np.ndarray:
    """Boolean edge map from the 3x3 Sobel gradient magnitude.

    Border pixels are never edges.
    """

    gray = np.asarray(grayscale, dtype=np.float32)
    if gray.ndim != 2 or gray.shape[0] < 3 or gray.shape[1] < 3:
        return np.zeros(gray.shape, dtype=bool)

    gx = cv2.Sobel(gray, cv2.CV_32F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_32F, 0, 1, ksize=3)
    edges = cv2.magnitude(gx, gy) > threshold
    edges[0, :] = edges[-1, :] = False
    edges[:, 0] = edges[:, -1] = False
    return edges


def find_obstacle_regions(
    edges: np.ndarray,
    grid_size: int = 40,
    density_threshold: float = 0.15,
) -> list[ObstacleRegion]:
    """Flag grid cells whose edge density exceeds ``density_threshold``, then merge them."""

    height, width = edges.shape
    regions: list[ObstacleRegion] = []
    for y in range(0, height, grid_size):
        for x in range(0, width, grid_size):
            cell = edges[y : y + grid_size, x : x + grid_size]
            cell_height, cell_width = cell.shape
            density = float(np.count_nonzero(cell)) / float(cell_width * cell_height)
            if density > density_threshold:
                regions.append(
                    ObstacleRegion(
                        x=x,
                        y=y,
                        width=cell_width,
                        height=cell_height,
                        confidence=min(density * 2.0, 1.0),
                    )
                )
    return merge_nearby_regions(regions, grid_size)


def merge_nearby_regions(regions: list[ObstacleRegion], threshold: float) -> list[ObstacleRegion]:
    """Single greedy pass: each unused region absorbs every later region touching it.

    Regions count as touching when any facing edge pair is within ``threshold``
    pixels on either axis.
    """

    merged: list[ObstacleRegion] = []
    used: set[int] = set()
    for i, region in enumerate(regions):
        if i in used:
            continue
        used.add(i)
        current = region
        for j in range(i + 1, len(regions)):
            if j in used:
                continue
            other = regions[j]
            if _is_adjacent(current, other, threshold):
                current = _union(current, other)
                used.add(j)
        merged.append(current)
    return merged


def _is_adjacent(a: ObstacleRegion, b: ObstacleRegion, threshold: float) -> bool:
    return (
        abs(a.x + a.width - b.x) <= threshold
        or abs(b.x + b.width - a.x) <= threshold
        or abs(a.y + a.height - b.y) <= threshold
        or abs(b.y + b.height - a.y) <= threshold
    )


def _union(a: ObstacleRegion, b: ObstacleRegion) -> ObstacleRegion:
    min_x = min(a.x, b.x)
    min_y = min(a.y, b.y)
    max_x = max(a.x + a.width, b.x + b.width)
    max_y = max(a.y + a.height, b.y + b.height)
    return ObstacleRegion(
        x=min_x,
        y=min_y,
        width=max_x - min_x,
        height=max_y - min_y,
        confidence=max(a.confidence, b.confidence),
    )
