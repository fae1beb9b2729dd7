"""Cooperative asyncio loop that drives detection cycles and announcements."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Protocol

from config.settings import AppSettings
from core.errors import DetectionCycleError, FrameUnavailable, ModelLoadFailure
from core.logging import logger
from interaction.announcer import Announcement, AnnouncementScheduler
from vision.detections import Detection
from vision.pipeline import HybridDetector


class FrameSource(Protocol):
    @property
    def ready(self) -> bool: ...

    async def next_frame(self) -> Any: ...


class LoadableModel(Protocol):
    @property
    def is_loaded(self) -> bool: ...

    @property
    def is_loading(self) -> bool: ...

    async def load(self) -> None: ...

    def detect(self, frame: Any) -> list[Any]: ...


class DetectionLoop:
    """Single-flight detection session.

    Cycles run no more often than ``1000 / analysis_fps`` milliseconds apart,
    and never overlap. A failing cycle is logged and counted; the next one
    runs on schedule. The model loads in the background, and until it is
    ready (or if it never is) only level-change detection contributes.
    """

    def __init__(
        self,
        settings: AppSettings,
        frame_source: FrameSource,
        scheduler: AnnouncementScheduler,
        model: LoadableModel | None = None,
        detector: HybridDetector | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.frame_source = frame_source
        self.scheduler = scheduler
        self.model = model
        self.detector = detector or HybridDetector(settings, model)
        self.audio_enabled = settings.announcements.audio_enabled
        self._clock = clock
        self._sleep = sleep

        self._task: asyncio.Task[None] | None = None
        self._model_task: asyncio.Task[None] | None = None
        self._stop_requested = asyncio.Event()
        self._cycle_lock = asyncio.Lock()
        self._detections: list[Detection] = []
        self._last_status_log = float("-inf")
        self.last_announcement: Announcement | None = None

        self.cycles_run = 0
        self.cycles_failed = 0
        self.frames_skipped = 0

    @property
    def detections(self) -> list[Detection]:
        return list(self._detections)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_model_loaded(self) -> bool:
        return self.model is not None and bool(self.model.is_loaded)

    @property
    def is_loading(self) -> bool:
        return self.model is not None and bool(self.model.is_loading)

    @property
    def cycle_interval_s(self) -> float:
        return 1.0 / self.settings.detection.analysis_fps

    def set_level_detection_enabled(self, enabled: bool) -> None:
        self.detector.level_detection_enabled = enabled

    async def start(self) -> None:
        """Begin a fresh session; a running session is left untouched."""

        if self.is_running:
            return
        self.detector.reset()
        self.scheduler.reset()
        self._detections = []
        self.cycles_run = 0
        self.cycles_failed = 0
        self.frames_skipped = 0
        self._stop_requested.clear()

        if self.model is not None and not self.model.is_loaded and self._model_task is None:
            self._model_task = asyncio.create_task(self._load_model())

        self._task = asyncio.create_task(self._run())
        logger.info("[LOOP] Started at %.1f fps", self.settings.detection.analysis_fps)

    async def stop(self) -> None:
        """Cancel the pending cycle and drop all session state."""

        self._stop_requested.set()
        for task in (self._task, self._model_task):
            if task is not None and not task.done():
                task.cancel()
        for task in (self._task, self._model_task):
            if task is None:
                continue
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("[LOOP] Task ended with an error during stop")
        self._task = None
        self._model_task = None
        self.scheduler.reset()
        self._detections = []
        logger.info(
            "[LOOP] Stopped after cycles=%s failed=%s skipped=%s",
            self.cycles_run,
            self.cycles_failed,
            self.frames_skipped,
        )

    async def _load_model(self) -> None:
        try:
            await self.model.load()
        except ModelLoadFailure as exc:
            logger.warning("[MODEL] %s; continuing with level-change detection only", exc)
        except Exception as exc:
            logger.exception("[MODEL] Unexpected model load failure: %s", exc)

    async def _run(self) -> None:
        last_cycle_s = float("-inf")
        while not self._stop_requested.is_set():
            now_s = self._clock()
            wait_s = last_cycle_s + self.cycle_interval_s - now_s
            if wait_s > 0:
                await self._sleep(wait_s)
                continue
            last_cycle_s = now_s
            await self.run_cycle()
            # Yield so stop() and the model loader get a turn between cycles.
            await self._sleep(0)

    async def run_cycle(self) -> list[Detection]:
        """Execute one detection cycle and feed the announcement scheduler."""

        async with self._cycle_lock:
            cycle_index = self.cycles_run + self.cycles_failed + self.frames_skipped + 1
            try:
                if not self.frame_source.ready:
                    raise FrameUnavailable("Frame source not ready")
                frame = await self.frame_source.next_frame()
                detections = await self.detector.run_cycle(frame)
            except asyncio.CancelledError:
                raise
            except FrameUnavailable as exc:
                self.frames_skipped += 1
                self._detections = []
                logger.debug("[LOOP] Cycle %s skipped: %s", cycle_index, exc)
                return []
            except Exception as exc:
                error = DetectionCycleError(cycle_index, exc)
                self.cycles_failed += 1
                logger.exception("[LOOP] %s", error)
                return []

            self._detections = detections
            now_s = self._clock()
            try:
                announcement = self.scheduler.update(detections, now_s * 1000.0, self.audio_enabled)
                if announcement is not None:
                    self.last_announcement = announcement
                self._maybe_log_status(now_s)
            except Exception as exc:
                self.cycles_failed += 1
                logger.exception("[ANNOUNCE] Cycle %s announcement failed: %s", cycle_index, exc)
                return detections
            self.cycles_run += 1
            return detections

    def _maybe_log_status(self, now_s: float) -> None:
        period_s = self.settings.detection.status_log_period_s
        if period_s <= 0 or (now_s - self._last_status_log) < period_s:
            return
        self._last_status_log = now_s
        top = ", ".join(
            f"{det.label}:{det.priority.value}:{det.distance:g}" for det in self._detections[:3]
        )
        logger.info(
            "[LOOP] Status: cycles=%s failed=%s skipped=%s model_loaded=%s "
            "announcements=%s top=%s",
            self.cycles_run,
            self.cycles_failed,
            self.frames_skipped,
            self.is_model_loaded,
            self.scheduler.announcements_made,
            top or "none",
        )
