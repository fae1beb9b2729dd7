"""Haptic output capability: vibration patterns on a PCA9685 channel, or nothing."""

from __future__ import annotations

import queue
import threading
from typing import Any, Protocol, Sequence

from config.settings import HapticSettings
from core.errors import OutputCapabilityUnavailable
from core.logging import logger
from hardware.pca9685 import PCA9685Driver


class HapticOutput(Protocol):
    def is_supported(self) -> bool: ...

    def vibrate(self, pattern_ms: Sequence[int]) -> None: ...

    def close(self) -> None: ...


class NullHaptics:
    """Stand-in used when no vibration hardware is available. Every call is a no-op."""

    def is_supported(self) -> bool:
        return False

    def vibrate(self, pattern_ms: Sequence[int]) -> None:
        return None

    def close(self) -> None:
        return None


class Pca9685VibrationMotor:
    """Play ``[on, off, on, ...]`` millisecond patterns on one PWM channel.

    Patterns play on a worker thread so callers never block. A new pattern
    interrupts the one currently playing.
    """

    def __init__(self, settings: HapticSettings, driver: Any = None) -> None:
        self.settings = settings
        self._driver = driver or PCA9685Driver(settings.i2c_bus, settings.address)
        self._driver.setPWMFreq(settings.pwm_frequency)
        self._driver.set_duty(settings.channel, 0.0)

        self._q: queue.Queue[tuple[int, ...] | None] = queue.Queue(maxsize=4)
        self._stop = threading.Event()
        self._interrupt = threading.Event()
        self._t = threading.Thread(target=self._worker, daemon=True)
        self._t.start()

    def is_supported(self) -> bool:
        return True

    def vibrate(self, pattern_ms: Sequence[int]) -> None:
        pattern = tuple(max(0, int(value)) for value in pattern_ms)
        if not pattern:
            return
        self._flush()
        self._interrupt.set()
        try:
            self._q.put_nowait(pattern)
        except queue.Full:
            logger.warning("[HAPTIC] Pattern queue full; dropping pattern")

    def _flush(self) -> None:
        try:
            while True:
                self._q.get_nowait()
        except queue.Empty:
            pass

    def _worker(self) -> None:
        try:
            while not self._stop.is_set():
                try:
                    pattern = self._q.get(timeout=0.1)
                except queue.Empty:
                    continue
                if pattern is None:
                    break
                self._interrupt.clear()
                self._play(pattern)
        except Exception:
            logger.exception("[HAPTIC] Vibration worker crashed")
        finally:
            self._driver.set_duty(self.settings.channel, 0.0)

    def _play(self, pattern: tuple[int, ...]) -> None:
        channel = self.settings.channel
        for index, duration_ms in enumerate(pattern):
            motor_on = index % 2 == 0
            self._driver.set_duty(channel, 1.0 if motor_on else 0.0)
            if self._interrupt.wait(duration_ms / 1000.0) or self._stop.is_set():
                break
        self._driver.set_duty(channel, 0.0)

    def close(self) -> None:
        self._stop.set()
        self._interrupt.set()
        try:
            self._q.put_nowait(None)
        except queue.Full:
            pass
        self._t.join(timeout=1.0)
        self._driver.close()


def resolve_haptics(settings: HapticSettings) -> HapticOutput:
    """Pick the configured backend once at startup; fall back to ``NullHaptics``."""

    if settings.backend == "none":
        return NullHaptics()
    if settings.backend != "pca9685":
        logger.warning("[HAPTIC] Unknown backend %r; vibration disabled", settings.backend)
        return NullHaptics()
    try:
        motor = Pca9685VibrationMotor(settings)
    except (OutputCapabilityUnavailable, OSError) as exc:
        logger.warning("[HAPTIC] Vibration unavailable: %s", exc)
        return NullHaptics()
    logger.info(
        "[HAPTIC] PCA9685 vibration motor on bus=%s address=0x%02X channel=%s",
        settings.i2c_bus,
        settings.address,
        settings.channel,
    )
    return motor
