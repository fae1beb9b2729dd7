"""Voice output capability backed by pyttsx3, or a silent stand-in."""

from __future__ import annotations

import importlib
import importlib.util
import queue
import threading
from typing import Any, Protocol

from config.settings import VoiceSettings
from core.errors import OutputCapabilityUnavailable
from core.logging import logger


class VoiceOutput(Protocol):
    def is_supported(self) -> bool: ...

    def speak(self, text: str, priority: bool = False) -> None: ...

    def stop(self) -> None: ...

    def close(self) -> None: ...


class NullVoice:
    """Used when speech is disabled or unavailable. Every call is a no-op."""

    def is_supported(self) -> bool:
        return False

    def speak(self, text: str, priority: bool = False) -> None:
        return None

    def stop(self) -> None:
        return None

    def close(self) -> None:
        return None


def _init_pyttsx3() -> Any:
    if importlib.util.find_spec("pyttsx3") is None:
        raise OutputCapabilityUnavailable("pyttsx3 is required for Pyttsx3Voice")
    pyttsx3 = importlib.import_module("pyttsx3")
    try:
        return pyttsx3.init()
    except Exception as exc:
        raise OutputCapabilityUnavailable(f"pyttsx3 could not start a speech driver: {exc}") from exc


class Pyttsx3Voice:
    """Speak queued utterances on a worker thread.

    ``speak(..., priority=True)`` drops anything still queued and interrupts
    the utterance in progress. Completion is never reported back.
    """

    def __init__(self, settings: VoiceSettings, engine: Any = None) -> None:
        self.settings = settings
        self._engine = engine if engine is not None else _init_pyttsx3()
        self._configure_engine()

        self._q: queue.Queue[str | None] = queue.Queue(maxsize=8)
        self._stop = threading.Event()
        self._speaking = threading.Event()
        self._t = threading.Thread(target=self._worker, daemon=True)
        self._t.start()

    def _configure_engine(self) -> None:
        base_rate = self._engine.getProperty("rate") or 200
        self._engine.setProperty("rate", int(base_rate * self.settings.rate))
        self._engine.setProperty("volume", max(0.0, min(1.0, self.settings.volume)))

        voice_id = self._select_voice_id(self._engine.getProperty("voices") or [])
        if voice_id is not None:
            self._engine.setProperty("voice", voice_id)
            logger.info("[VOICE] Using voice %s", voice_id)
        else:
            logger.warning("[VOICE] No voice found for language %r; using engine default", self.settings.language)

    def _select_voice_id(self, voices: list[Any]) -> str | None:
        language = self.settings.language.lower()
        for voice in voices:
            languages = [
                item.decode("utf-8", "ignore") if isinstance(item, bytes) else str(item)
                for item in (getattr(voice, "languages", None) or [])
            ]
            haystack = " ".join(
                [*languages, str(getattr(voice, "id", "")), str(getattr(voice, "name", ""))]
            ).lower()
            if language in haystack:
                return getattr(voice, "id", None)
        return None

    def is_supported(self) -> bool:
        return True

    def speak(self, text: str, priority: bool = False) -> None:
        if not text:
            return
        if priority:
            self.stop()
        try:
            self._q.put_nowait(text)
        except queue.Full:
            logger.warning("[VOICE] Speech queue full; dropping %r", text)

    def stop(self) -> None:
        """Drop queued utterances and cut the current one short."""

        try:
            while True:
                self._q.get_nowait()
        except queue.Empty:
            pass
        if self._speaking.is_set():
            self._engine.stop()

    def _worker(self) -> None:
        try:
            while not self._stop.is_set():
                try:
                    text = self._q.get(timeout=0.1)
                except queue.Empty:
                    continue
                if text is None:
                    break
                self._speaking.set()
                try:
                    self._engine.say(text)
                    self._engine.runAndWait()
                finally:
                    self._speaking.clear()
        except Exception:
            logger.exception("[VOICE] Speech worker crashed")

    def close(self, timeout: float = 3.0) -> None:
        """Let queued utterances finish (up to ``timeout``), then stop the worker."""

        try:
            self._q.put(None, timeout=timeout)
        except queue.Full:
            pass
        self._t.join(timeout=timeout)
        self._stop.set()
        if self._t.is_alive():
            self.stop()
            logger.warning("[VOICE] Speech worker did not stop within timeout")


def resolve_voice(settings: VoiceSettings) -> VoiceOutput:
    """Pick the speech backend once at startup; fall back to ``NullVoice``."""

    if not settings.enabled:
        return NullVoice()
    try:
        return Pyttsx3Voice(settings)
    except OutputCapabilityUnavailable as exc:
        logger.warning("[VOICE] Speech unavailable: %s", exc)
        return NullVoice()
