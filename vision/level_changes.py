"""Layer 2: stairs, curbs and fences from stripe brightness and edge patterns.

The frame is cut into fixed-height horizontal stripes. For each stripe the
mean brightness and the horizontal edge density are compared against the
stripes above it:

* stair down: abrupt dark to light step in the lower half of the frame
* stair up: abrupt light to dark step below 40% of the frame height
* curb: dense edges in the lower 40% plus a horizontal edge spanning
  most columns when compared with the stripe above
* fence: dense edges plus repeated vertical discontinuities across columns

Frames are ``(height, width, 3)`` RGB or ``(height, width)`` grayscale arrays.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from config.settings import LevelDetectionSettings
from vision.detections import Detection, DetectionType, LevelChangeDetection, Position
from vision.distance import estimate_distance_from_vertical_position
from vision.labels import LEVEL_CHANGE_LABELS
from vision.ranking import detection_priority


EDGE_PIXEL_DELTA = 30.0
HISTORY_WINDOW = 3

STAIR_DOWN_MIN_DEPTH = 0.5
STAIR_UP_MIN_DEPTH = 0.4
CURB_MIN_DEPTH = 0.6

STEP_NEIGHBOR_DELTA = 35.0
STEP_AVERAGE_DELTA = 30.0
STEP_CONFIDENCE_SPAN = 80.0

CURB_EDGE_DENSITY = 0.08
CURB_ROW_DELTA = 25.0
CURB_COLUMN_SHARE = 0.3
CURB_CONFIDENCE_GAIN = 8.0

FENCE_EDGE_DENSITY = 0.10
FENCE_SAMPLE_COLUMNS = 10
FENCE_ROW_DELTA = 30.0
FENCE_EDGE_SHARE = 0.3
FENCE_COLUMN_SHARE = 0.4
FENCE_CONFIDENCE_GAIN = 6.0


def _channel_sum(frame: Any) -> np.ndarray:
    pixels = np.asarray(frame)
    if pixels.ndim == 2:
        return pixels.astype(np.float32) * 3.0
    if pixels.ndim == 3 and pixels.shape[2] >= 3:
        return pixels[:, :, :3].astype(np.float32).sum(axis=2)
    raise ValueError(f"Unsupported frame shape: {pixels.shape}")


class LevelChangeDetector:
    """Stripe heuristic over a full-frame pixel readback."""

    def __init__(self, settings: LevelDetectionSettings | None = None) -> None:
        self.settings = settings or LevelDetectionSettings()

    def detect(self, frame: Any) -> list[LevelChangeDetection]:
        """Return up to ``max_results`` deduplicated level-change candidates.

        A frame with a zero dimension yields no detections.
        """

        pixels = np.asarray(frame)
        if pixels.ndim < 2 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
            return []

        settings = self.settings
        scale = settings.threshold_scale
        stripe_height = settings.stripe_height
        sums = _channel_sum(pixels)
        height, width = sums.shape
        num_stripes = height // stripe_height
        if num_stripes == 0:
            return []

        brightness = sums / 3.0
        usable = brightness[: num_stripes * stripe_height]
        stripe_brightness = usable.reshape(num_stripes, stripe_height, width).mean(axis=(1, 2))

        edge_mask = np.abs(np.diff(usable, axis=1)) > EDGE_PIXEL_DELTA
        edge_counts = edge_mask.reshape(num_stripes, stripe_height, width - 1).sum(axis=(1, 2))
        edge_density = edge_counts / float(width * stripe_height)

        candidates: list[LevelChangeDetection] = []
        for index in range(num_stripes):
            y = index * stripe_height
            current = float(stripe_brightness[index])
            density = float(edge_density[index])

            if index > HISTORY_WINDOW - 1:
                previous = float(stripe_brightness[index - 1])
                trailing = float(stripe_brightness[index - HISTORY_WINDOW:index].mean())
                candidates.extend(
                    self._step_candidates(y, height, current, previous, trailing, scale)
                )

            if (
                y > height * CURB_MIN_DEPTH
                and y >= stripe_height
                and density > CURB_EDGE_DENSITY * scale
                and self._has_horizontal_edge(sums, y, stripe_height, scale)
            ):
                candidates.append(
                    self._candidate(DetectionType.CURB, y, density * CURB_CONFIDENCE_GAIN)
                )

            if density > FENCE_EDGE_DENSITY * scale and self._has_vertical_pattern(
                sums, y, stripe_height, scale
            ):
                candidates.append(
                    self._candidate(DetectionType.FENCE, y, density * FENCE_CONFIDENCE_GAIN)
                )

        merged = merge_nearby(candidates, settings.dedup_distance_px)
        return merged[: settings.max_results]

    def to_detections(
        self,
        level_changes: list[LevelChangeDetection],
        frame_height: int,
    ) -> list[Detection]:
        """Convert candidates above ``min_confidence`` into fused-list records."""

        detections: list[Detection] = []
        for change in level_changes:
            if change.confidence < self.settings.min_confidence:
                continue
            distance = estimate_distance_from_vertical_position(change.y, frame_height)
            detections.append(
                Detection(
                    type=change.type,
                    label=change.label,
                    distance=distance,
                    position=Position.CENTER,
                    position_x=0.5,
                    priority=detection_priority(change.type, None, distance),
                    confidence=change.confidence,
                )
            )
        return detections

    def _step_candidates(
        self,
        y: int,
        height: int,
        current: float,
        previous: float,
        trailing: float,
        scale: float,
    ) -> list[LevelChangeDetection]:
        found: list[LevelChangeDetection] = []
        neighbor_delta = STEP_NEIGHBOR_DELTA * scale
        average_delta = STEP_AVERAGE_DELTA * scale

        if (
            y > height * STAIR_DOWN_MIN_DEPTH
            and current > previous + neighbor_delta
            and current > trailing + average_delta
        ):
            found.append(
                self._candidate(
                    DetectionType.STAIR_DOWN,
                    y,
                    (current - previous) / STEP_CONFIDENCE_SPAN,
                )
            )

        if (
            y > height * STAIR_UP_MIN_DEPTH
            and current < previous - neighbor_delta
            and current < trailing - average_delta
        ):
            found.append(
                self._candidate(
                    DetectionType.STAIR_UP,
                    y,
                    (previous - current) / STEP_CONFIDENCE_SPAN,
                )
            )
        return found

    @staticmethod
    def _has_horizontal_edge(sums: np.ndarray, y: int, stripe_height: int, scale: float) -> bool:
        width = sums.shape[1]
        if width < 3:
            return False
        row = sums[y, 1 : width - 1]
        above = sums[y - stripe_height, 1 : width - 1]
        edges = int(np.count_nonzero(np.abs(row - above) > CURB_ROW_DELTA * scale))
        return edges > width * CURB_COLUMN_SHARE

    @staticmethod
    def _has_vertical_pattern(sums: np.ndarray, y: int, stripe_height: int, scale: float) -> bool:
        width = sums.shape[1]
        columns = [int(i / FENCE_SAMPLE_COLUMNS * width) for i in range(FENCE_SAMPLE_COLUMNS)]
        block = sums[y : y + stripe_height, columns]
        row_deltas = np.abs(np.diff(block, axis=0)) > FENCE_ROW_DELTA * scale
        vertical_lines = int(np.count_nonzero(row_deltas.sum(axis=0) > stripe_height * FENCE_EDGE_SHARE))
        return vertical_lines > FENCE_SAMPLE_COLUMNS * FENCE_COLUMN_SHARE

    @staticmethod
    def _candidate(detection_type: DetectionType, y: int, raw_confidence: float) -> LevelChangeDetection:
        return LevelChangeDetection(
            type=detection_type,
            y=y,
            confidence=max(0.0, min(1.0, raw_confidence)),
            label=LEVEL_CHANGE_LABELS[detection_type],
        )


def merge_nearby(
    detections: list[LevelChangeDetection],
    threshold_px: int = 30,
) -> list[LevelChangeDetection]:
    """Collapse same-type candidates closer than ``threshold_px`` rows.

    The survivor keeps the slot of the first candidate in its group and the
    payload of the most confident one.
    """

    kept: list[LevelChangeDetection] = []
    for current in detections:
        for index, existing in enumerate(kept):
            if existing.type is current.type and abs(current.y - existing.y) < threshold_px:
                if current.confidence > existing.confidence:
                    kept[index] = current
                break
        else:
            kept.append(current)
    return kept


def detect_level_changes(
    frame: Any,
    settings: LevelDetectionSettings | None = None,
) -> list[LevelChangeDetection]:
    return LevelChangeDetector(settings).detect(frame)
