"""Throttled speech and vibration alerts for the ranked detection list."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Sequence

from config.settings import AnnouncementSettings, CriticalBypass
from core.logging import log_announcement, logger
from hardware.haptics import HapticOutput, NullHaptics
from interaction.messages import announcement_text, vibration_pattern
from interaction.voice import NullVoice, VoiceOutput
from vision.detections import Detection, DetectionType, Priority


AnnouncementKey = tuple[DetectionType, str, int]


def announcement_key(detection: Detection) -> AnnouncementKey:
    """``(type, label, distance rounded half up)``: what counts as "the same situation"."""

    return (detection.type, detection.label, int(math.floor(detection.distance + 0.5)))


@dataclass
class AnnouncementState:
    """Session-scoped throttling memory; cleared when detection stops."""

    last_key: AnnouncementKey | None = None
    last_timestamp_ms: float = float("-inf")
    last_was_critical: bool = False

    def reset(self) -> None:
        self.last_key = None
        self.last_timestamp_ms = float("-inf")
        self.last_was_critical = False


@dataclass(frozen=True)
class Announcement:
    key: AnnouncementKey
    text: str
    vibration_pattern: tuple[int, ...]
    priority: Priority
    timestamp_ms: float
    detection: Detection


class AnnouncementScheduler:
    """Decide once per cycle whether the top detection is worth announcing.

    The cooldown is ``critical_interval_ms`` whenever any detection in the list
    is critical, ``normal_interval_ms`` otherwise. After the cooldown, an
    unchanged key stays silent unless the critical bypass policy allows it.
    """

    def __init__(
        self,
        settings: AnnouncementSettings | None = None,
        voice: VoiceOutput | None = None,
        haptics: HapticOutput | None = None,
        state: AnnouncementState | None = None,
    ) -> None:
        self.settings = settings or AnnouncementSettings()
        self.voice = voice or NullVoice()
        self.haptics = haptics or NullHaptics()
        self.state = state or AnnouncementState()
        self.announcements_made = 0

    def reset(self) -> None:
        self.state.reset()

    def update(
        self,
        detections: Sequence[Detection],
        now_ms: float,
        audio_enabled: bool = True,
    ) -> Announcement | None:
        if not audio_enabled or not detections:
            return None

        has_critical = any(detection.is_critical for detection in detections)
        interval = self.settings.critical_interval_ms if has_critical else self.settings.normal_interval_ms
        if now_ms - self.state.last_timestamp_ms < interval:
            return None

        top = detections[0]
        key = announcement_key(top)
        if key == self.state.last_key and not self._bypasses_repeat(top):
            return None

        announcement = Announcement(
            key=key,
            text=announcement_text(top),
            vibration_pattern=vibration_pattern(top),
            priority=top.priority,
            timestamp_ms=now_ms,
            detection=top,
        )
        self._emit(announcement)
        self.state.last_key = key
        self.state.last_timestamp_ms = now_ms
        self.state.last_was_critical = top.is_critical
        self.announcements_made += 1
        return announcement

    def _bypasses_repeat(self, detection: Detection) -> bool:
        if not detection.is_critical:
            return False
        policy = self.settings.critical_bypass
        if policy is CriticalBypass.ALWAYS:
            return True
        if policy is CriticalBypass.ESCALATION:
            return not self.state.last_was_critical
        return False

    def _emit(self, announcement: Announcement) -> None:
        """Log, speak and vibrate; a failing output is logged and skipped."""

        log_announcement(announcement.priority.value, announcement.text)
        try:
            self.voice.speak(announcement.text, priority=announcement.priority is Priority.CRITICAL)
        except Exception:
            logger.exception("[VOICE] Failed to speak %r", announcement.text)
        if not self.haptics.is_supported():
            return
        try:
            self.haptics.vibrate(announcement.vibration_pattern)
        except Exception:
            logger.exception("[HAPTIC] Failed to play pattern %s", announcement.vibration_pattern)
