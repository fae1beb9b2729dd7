"""OpenCV-backed frame source (local webcam or network stream)."""

from __future__ import annotations

import asyncio
import importlib
import importlib.util
from typing import Any

from config.settings import CameraSettings
from core.errors import FrameUnavailable
from core.logging import logger


def _require_cv2() -> Any:
    if importlib.util.find_spec("cv2") is None:
        raise RuntimeError("opencv-python is required for CameraFrameSource")
    return importlib.import_module("cv2")


class CameraFrameSource:
    """Frames as RGB ``uint8`` arrays from ``cv2.VideoCapture``.

    ``open()`` raises ``RuntimeError`` when the device or stream cannot be
    opened. ``read()`` raises ``FrameUnavailable`` when no frame is ready.
    """

    def __init__(self, settings: CameraSettings | None = None, capture_factory: Any = None) -> None:
        self.settings = settings or CameraSettings()
        self._capture_factory = capture_factory
        self._cv2: Any = None
        self._capture: Any = None
        self._width = 0
        self._height = 0

    @property
    def ready(self) -> bool:
        return self._capture is not None and bool(self._capture.isOpened())

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def open(self) -> None:
        if self.ready:
            return
        self._cv2 = _require_cv2()
        factory = self._capture_factory or self._cv2.VideoCapture
        source = self.settings.url if self.settings.url else self.settings.index
        capture = factory(source)
        if not capture.isOpened():
            capture.release()
            raise RuntimeError(f"Cannot open camera (index={self.settings.index}, url={self.settings.url})")

        capture.set(self._cv2.CAP_PROP_FRAME_WIDTH, self.settings.width)
        capture.set(self._cv2.CAP_PROP_FRAME_HEIGHT, self.settings.height)
        self._capture = capture
        logger.info(
            "[CAMERA] Opened source=%s requested=%sx%s",
            source,
            self.settings.width,
            self.settings.height,
        )

    def read(self) -> Any:
        if not self.ready:
            raise FrameUnavailable("Camera is not open")
        ok, frame = self._capture.read()
        if not ok or frame is None or frame.size == 0:
            raise FrameUnavailable("Camera returned no frame")
        self._height, self._width = frame.shape[:2]
        return self._cv2.cvtColor(frame, self._cv2.COLOR_BGR2RGB)

    async def next_frame(self) -> Any:
        return await asyncio.to_thread(self.read)

    def close(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info("[CAMERA] Released")
