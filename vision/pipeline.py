"""One hybrid detection cycle: Layer 1, Layer 2 at reduced cadence, then fusion."""

from __future__ import annotations

import asyncio
from typing import Any

import numpy as np

from config.settings import AppSettings
from core.errors import FrameUnavailable
from core.logging import logger
from vision.detections import Detection, ObstacleRegion
from vision.generic_obstacles import detect_generic_obstacles, filter_explained_regions
from vision.known_objects import DetectionModel, KnownObjectDetector
from vision.level_changes import LevelChangeDetector
from vision.ranking import fuse


class HybridDetector:
    """Runs both detection layers on a frame and returns the fused, ranked list.

    The frame counter advances once per executed cycle; Layer 2 runs on every
    ``level_detection.cadence``-th cycle. The loaded model is only read here.
    """

    def __init__(self, settings: AppSettings, model: DetectionModel | None = None) -> None:
        self.settings = settings
        self.known_objects = KnownObjectDetector(settings.detection, settings.distance, model)
        self.level_changes = LevelChangeDetector(settings.level_detection)
        self.level_detection_enabled = settings.level_detection.enabled
        self.frame_count = 0
        self.last_obstacles: list[ObstacleRegion] = []

    @property
    def model(self) -> DetectionModel | None:
        return self.known_objects.model

    @model.setter
    def model(self, value: DetectionModel | None) -> None:
        self.known_objects.model = value

    def reset(self) -> None:
        self.frame_count = 0
        self.last_obstacles = []

    def runs_level_detection(self, frame_count: int) -> bool:
        return self.level_detection_enabled and frame_count % self.settings.level_detection.cadence == 0

    async def run_cycle(self, frame: Any) -> list[Detection]:
        """Compute this cycle's detections from scratch.

        Raises ``FrameUnavailable`` for a frame with a zero dimension.
        """

        pixels = np.asarray(frame)
        if pixels.ndim < 2 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise FrameUnavailable("Frame has zero width or height")
        frame_height, frame_width = pixels.shape[:2]

        self.frame_count += 1

        known = await self.known_objects.detect_frame(pixels, frame_width, frame_height)

        level: list[Detection] = []
        if self.runs_level_detection(self.frame_count):
            candidates = await asyncio.to_thread(self.level_changes.detect, pixels)
            level = self.level_changes.to_detections(candidates, frame_height)
            if candidates:
                logger.debug(
                    "[LAYER2] cycle=%s candidates=%s kept=%s",
                    self.frame_count,
                    len(candidates),
                    len(level),
                )

        if self.settings.generic_obstacles.enabled:
            regions = await asyncio.to_thread(
                detect_generic_obstacles,
                pixels,
                self.settings.detection.roi,
                self.settings.generic_obstacles,
            )
            known_boxes = [det.bounding_box for det in known if det.bounding_box is not None]
            self.last_obstacles = filter_explained_regions(regions, known_boxes)

        return fuse(known, level)
