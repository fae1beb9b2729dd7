"""Layer 1: known-object detections from the learned detector."""

from __future__ import annotations

import asyncio
import math
from typing import Any, Iterable, Protocol

from config.settings import DetectionSettings, DistanceSettings
from core.logging import logger
from vision.detections import BoundingBox, Detection, DetectionType, RawPrediction
from vision.distance import estimate_distance_from_height
from vision.geometry import is_in_roi, is_significant, normalized_center_x
from vision.labels import position_from_x, translate_class_name
from vision.ranking import detection_priority


class DetectionModel(Protocol):
    """Object-detection capability consumed by Layer 1."""

    @property
    def is_loaded(self) -> bool: ...

    def detect(self, frame: Any) -> list[Any]: ...


_CLASS_FIELDS = ("class", "class_name", "label", "name")
_SCORE_FIELDS = ("score", "confidence")
_BBOX_FIELDS = ("bbox", "box", "rect")


class KnownObjectDetector:
    """Turn raw model predictions into ranked-ready ``Detection`` records.

    Predictions may be ``RawPrediction`` instances, mappings shaped like
    ``{"class": str, "score": float, "bbox": (x, y, w, h)}`` in pixels, or any
    object exposing the same attributes. Malformed payloads are skipped.
    """

    def __init__(
        self,
        settings: DetectionSettings,
        distance_settings: DistanceSettings | None = None,
        model: DetectionModel | None = None,
    ) -> None:
        self.settings = settings
        self.distance_settings = distance_settings or DistanceSettings()
        self.model = model
        self._priority_classes = frozenset(name.lower() for name in settings.priority_objects)

    @property
    def is_available(self) -> bool:
        return self.model is not None and bool(self.model.is_loaded)

    async def detect_frame(self, frame: Any, frame_width: int, frame_height: int) -> list[Detection]:
        """Run the model on ``frame`` and convert its output.

        Returns an empty list while the model is missing or still loading.
        """

        if not self.is_available:
            return []
        predictions = await asyncio.to_thread(self.model.detect, frame)
        return self.convert(predictions, frame_width, frame_height)

    def convert(
        self,
        predictions: Iterable[Any],
        frame_width: float,
        frame_height: float,
    ) -> list[Detection]:
        if frame_width <= 0 or frame_height <= 0:
            return []

        detections: list[Detection] = []
        for raw in predictions:
            prediction = self._to_prediction(raw)
            if prediction is None:
                continue
            detection = self._to_detection(prediction, frame_width, frame_height)
            if detection is not None:
                detections.append(detection)
        return detections

    def _to_detection(
        self,
        prediction: RawPrediction,
        frame_width: float,
        frame_height: float,
    ) -> Detection | None:
        settings = self.settings
        class_name = prediction.class_name
        if class_name.lower() not in self._priority_classes:
            return None
        if prediction.score < settings.min_confidence:
            return None

        box = prediction.bbox
        if not is_in_roi(box, frame_width, frame_height, settings.roi):
            return None
        if not is_significant(box, frame_width, frame_height, settings.min_object_size):
            return None

        distance = estimate_distance_from_height(
            box.height,
            frame_height,
            class_name,
            self.distance_settings,
        )
        if distance > settings.max_distance:
            return None

        position_x = normalized_center_x(box, frame_width)
        return Detection(
            type=DetectionType.KNOWN_OBJECT,
            label=translate_class_name(class_name),
            distance=distance,
            position=position_from_x(position_x),
            position_x=position_x,
            priority=detection_priority(DetectionType.KNOWN_OBJECT, class_name, distance),
            confidence=prediction.score,
            bounding_box=box,
        )

    def _to_prediction(self, raw: Any) -> RawPrediction | None:
        if isinstance(raw, RawPrediction):
            return raw

        payload = self._to_mapping(raw)
        if payload is None:
            return None

        class_value = next((payload[key] for key in _CLASS_FIELDS if key in payload), None)
        if class_value is None:
            return None
        class_name = str(class_value).strip()
        if not class_name:
            return None

        bbox = self._extract_bbox(payload)
        if bbox is None:
            logger.debug("[LAYER1] Skipping prediction with invalid bbox: %s", payload)
            return None

        return RawPrediction(
            class_name=class_name,
            score=self._extract_score(payload),
            bbox=bbox,
        )

    def _to_mapping(self, raw: Any) -> dict[str, Any] | None:
        if isinstance(raw, dict):
            return raw

        mapping: dict[str, Any] = {}
        for field in (*_CLASS_FIELDS, *_SCORE_FIELDS, *_BBOX_FIELDS):
            if hasattr(raw, field):
                mapping[field] = getattr(raw, field)
        return mapping or None

    def _extract_score(self, payload: dict[str, Any]) -> float:
        value = next((payload[key] for key in _SCORE_FIELDS if key in payload), 0.0)
        score = self._to_finite_float(value)
        if score is None:
            return 0.0
        return max(0.0, min(1.0, score))

    def _extract_bbox(self, payload: dict[str, Any]) -> BoundingBox | None:
        raw_bbox = next((payload[key] for key in _BBOX_FIELDS if key in payload), None)
        if not isinstance(raw_bbox, (list, tuple)) or len(raw_bbox) < 4:
            return None
        values = [self._to_finite_float(item) for item in raw_bbox[:4]]
        if any(value is None for value in values):
            return None
        x, y, width, height = values
        if width < 0 or height < 0:
            return None
        return BoundingBox(x, y, width, height)

    @staticmethod
    def _to_finite_float(value: Any) -> float | None:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(number) or math.isinf(number):
            return None
        return number
