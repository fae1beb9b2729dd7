"""Tests for session lifecycle and command-line overrides."""

from __future__ import annotations

import asyncio

import numpy as np

from config.settings import AppSettings, CameraSettings
from core import app as app_module
from core.app import AppConfig, apply_overrides, run_session
from interaction.messages import CAMERA_FAILURE_MESSAGE, SESSION_START_MESSAGE, SESSION_STOP_MESSAGE


class _RecordingVoice:
    def __init__(self) -> None:
        self.spoken: list[tuple[str, bool]] = []
        self.closed = False

    def is_supported(self) -> bool:
        return True

    def speak(self, text: str, priority: bool = False) -> None:
        self.spoken.append((text, priority))

    def stop(self) -> None:
        return None

    def close(self) -> None:
        self.closed = True


class _RecordingHaptics:
    def __init__(self) -> None:
        self.closed = False

    def is_supported(self) -> bool:
        return False

    def vibrate(self, pattern_ms) -> None:
        return None

    def close(self) -> None:
        self.closed = True


class _StaticFrames:
    def __init__(self) -> None:
        self.ready = True
        self.closed = False

    async def next_frame(self) -> np.ndarray:
        return np.zeros((120, 160, 3), dtype=np.uint8)

    def close(self) -> None:
        self.closed = True


class _IdleModel:
    is_loaded = True
    is_loading = False

    async def load(self) -> None:
        return None

    def detect(self, frame: object) -> list[dict]:
        return []


class _ClosedCamera:
    def __init__(self, settings: CameraSettings) -> None:
        self.settings = settings

    def open(self) -> None:
        raise RuntimeError("Cannot open camera (index=0, url=None)")


def test_apply_overrides_updates_only_requested_fields() -> None:
    settings = AppSettings(camera=CameraSettings(index=0, url="http://cam/stream"))

    updated = apply_overrides(settings, AppConfig(camera_index=3, mute=True, level_detection=False))

    assert updated.camera.index == 3
    assert updated.camera.url is None
    assert not updated.announcements.audio_enabled
    assert not updated.level_detection.enabled
    assert updated.detection == settings.detection
    assert apply_overrides(settings, AppConfig()) == settings


def test_apply_overrides_camera_url() -> None:
    updated = apply_overrides(AppSettings(), AppConfig(camera_url="rtsp://cam/live"))
    assert updated.camera.url == "rtsp://cam/live"


def test_camera_failure_is_spoken_and_returns_error(monkeypatch) -> None:
    monkeypatch.setattr(app_module, "CameraFrameSource", _ClosedCamera)
    voice = _RecordingVoice()
    haptics = _RecordingHaptics()

    code = asyncio.run(run_session(AppSettings(), AppConfig(), voice=voice, haptics=haptics))

    assert code == 1
    assert voice.spoken == [(CAMERA_FAILURE_MESSAGE, True)]
    assert voice.closed and haptics.closed


def test_session_announces_start_and_stop() -> None:
    voice = _RecordingVoice()
    haptics = _RecordingHaptics()
    frames = _StaticFrames()

    code = asyncio.run(
        run_session(
            AppSettings(),
            AppConfig(duration_s=0.05),
            frame_source=frames,
            model=_IdleModel(),
            voice=voice,
            haptics=haptics,
        )
    )

    assert code == 0
    assert voice.spoken == [(SESSION_START_MESSAGE, False), (SESSION_STOP_MESSAGE, False)]
    assert frames.closed and voice.closed and haptics.closed


def test_muted_session_stays_silent() -> None:
    voice = _RecordingVoice()
    settings = apply_overrides(AppSettings(), AppConfig(mute=True))

    asyncio.run(
        run_session(
            settings,
            AppConfig(duration_s=0.02),
            frame_source=_StaticFrames(),
            model=_IdleModel(),
            voice=voice,
            haptics=_RecordingHaptics(),
        )
    )

    assert voice.spoken == []
