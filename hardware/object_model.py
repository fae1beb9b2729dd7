"""Object-detection model backed by ultralytics YOLO."""

from __future__ import annotations

import asyncio
import importlib
import importlib.util
import threading
from typing import Any

from config.settings import ModelSettings
from core.errors import ModelLoadFailure
from core.logging import logger


class YoloObjectModel:
    """Loads a YOLO checkpoint off the event loop and runs single-frame inference.

    ``detect`` returns ``[{"class": str, "score": float, "bbox": (x, y, w, h)}]``
    in source-frame pixels. The loaded network is never mutated after load.
    """

    def __init__(self, settings: ModelSettings | None = None, loader: Any = None) -> None:
        self.settings = settings or ModelSettings()
        self._loader = loader
        self._model: Any = None
        self._lock = threading.Lock()
        self._loading = False

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    @property
    def is_loading(self) -> bool:
        return self._loading

    async def load(self) -> None:
        """Load the checkpoint in a worker thread.

        Raises ``ModelLoadFailure`` when ultralytics is missing or the checkpoint
        cannot be read.
        """

        if self.is_loaded:
            return
        self._loading = True
        try:
            self._model = await asyncio.to_thread(self._load_blocking)
        finally:
            self._loading = False
        logger.info("[MODEL] Loaded %s on %s", self.settings.name, self.settings.device)

    def _load_blocking(self) -> Any:
        loader = self._loader
        if loader is None:
            if importlib.util.find_spec("ultralytics") is None:
                raise ModelLoadFailure("ultralytics is required for YoloObjectModel")
            loader = importlib.import_module("ultralytics").YOLO
        logger.info("[MODEL] Loading %s", self.settings.name)
        try:
            return loader(self.settings.name)
        except Exception as exc:
            raise ModelLoadFailure(f"Failed to load {self.settings.name}: {exc}") from exc

    def detect(self, frame: Any) -> list[dict[str, Any]]:
        if self._model is None:
            return []
        # The network expects BGR input; frames arrive as RGB.
        bgr = frame[..., ::-1]
        with self._lock:
            results = self._model.predict(bgr, device=self.settings.device, verbose=False)

        names = getattr(self._model, "names", {}) or {}
        predictions: list[dict[str, Any]] = []
        for result in results:
            boxes = getattr(result, "boxes", None)
            if boxes is None:
                continue
            for i in range(len(boxes)):
                x1, y1, x2, y2 = (float(v) for v in boxes.xyxy[i].cpu().numpy())
                score = float(boxes.conf[i].cpu().numpy())
                cls = int(boxes.cls[i].cpu().numpy())
                predictions.append(
                    {
                        "class": names.get(cls, str(cls)),
                        "score": score,
                        "bbox": (x1, y1, x2 - x1, y2 - y1),
                    }
                )
        return predictions
