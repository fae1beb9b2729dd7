"""Application runtime entry points and lifecycle helpers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace

from config.settings import AppSettings
from core.logging import log_error, logger
from hardware.camera import CameraFrameSource
from hardware.haptics import HapticOutput, resolve_haptics
from hardware.object_model import YoloObjectModel
from interaction.announcer import AnnouncementScheduler
from interaction.messages import CAMERA_FAILURE_MESSAGE, SESSION_START_MESSAGE, SESSION_STOP_MESSAGE
from interaction.voice import VoiceOutput, resolve_voice
from services.detection_loop import DetectionLoop, FrameSource, LoadableModel


@dataclass(frozen=True)
class AppConfig:
    """Command-line overrides for one detection session.

    Attributes:
        camera_index: Local camera device index, overriding the config file.
        camera_url: Network stream URL, overriding the config file.
        mute: Start with spoken and haptic alerts disabled.
        level_detection: Run the stair/curb/fence heuristic.
        duration_s: Stop after this many seconds; ``None`` runs until interrupted.
    """

    camera_index: int | None = None
    camera_url: str | None = None
    mute: bool = False
    level_detection: bool = True
    duration_s: float | None = None


def apply_overrides(settings: AppSettings, config: AppConfig) -> AppSettings:
    camera = settings.camera
    if config.camera_index is not None:
        camera = replace(camera, index=config.camera_index, url=None)
    if config.camera_url:
        camera = replace(camera, url=config.camera_url)

    announcements = settings.announcements
    if config.mute:
        announcements = replace(announcements, audio_enabled=False)

    level_detection = settings.level_detection
    if not config.level_detection:
        level_detection = replace(level_detection, enabled=False)

    return replace(
        settings,
        camera=camera,
        announcements=announcements,
        level_detection=level_detection,
    )


async def run_session(
    settings: AppSettings,
    config: AppConfig,
    frame_source: FrameSource | None = None,
    model: LoadableModel | None = None,
    voice: VoiceOutput | None = None,
    haptics: HapticOutput | None = None,
) -> int:
    """Run one detection session until ``duration_s`` elapses or the task is cancelled.

    Returns:
        ``1`` when the camera cannot be opened, ``0`` otherwise.
    """

    voice = voice or resolve_voice(settings.voice)
    haptics = haptics or resolve_haptics(settings.haptics)

    camera = frame_source
    if camera is None:
        camera = CameraFrameSource(settings.camera)
        try:
            camera.open()
        except (RuntimeError, OSError) as exc:
            log_error(f"[CAMERA] {exc}")
            voice.speak(CAMERA_FAILURE_MESSAGE, priority=True)
            voice.close()
            haptics.close()
            return 1

    scheduler = AnnouncementScheduler(settings.announcements, voice, haptics)
    loop = DetectionLoop(
        settings,
        camera,
        scheduler,
        model=model if model is not None else YoloObjectModel(settings.model),
    )

    if settings.announcements.audio_enabled:
        voice.speak(SESSION_START_MESSAGE)
    await loop.start()
    try:
        if config.duration_s is not None:
            await asyncio.sleep(config.duration_s)
        else:
            await asyncio.Event().wait()
    finally:
        await loop.stop()
        try:
            if settings.announcements.audio_enabled:
                voice.speak(SESSION_STOP_MESSAGE)
        except Exception:
            logger.exception("[VOICE] Failed to speak the stop message")
        close = getattr(camera, "close", None)
        if callable(close):
            close()
        haptics.close()
        voice.close()
    return 0


def run(settings: AppSettings, config: AppConfig) -> int:
    """Run the application with the provided configuration.

    Args:
        settings: Typed settings loaded from the config files.
        config: Command-line overrides.

    Returns:
        Process exit code (0 for success).
    """

    settings = apply_overrides(settings, config)
    logger.info(
        "Starting pathsense (camera=%s, audio=%s, level_detection=%s)",
        settings.camera.url or settings.camera.index,
        settings.announcements.audio_enabled,
        settings.level_detection.enabled,
    )
    try:
        return asyncio.run(run_session(settings, config))
    except KeyboardInterrupt:
        logger.info("Detection stopped by user")
        return 0
