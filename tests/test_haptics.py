"""Tests for the PCA9685 driver and the vibration motor worker."""

from __future__ import annotations

import time

import pytest

from config.settings import HapticSettings
from core.errors import OutputCapabilityUnavailable
from hardware import haptics as haptics_module
from hardware.haptics import NullHaptics, Pca9685VibrationMotor, resolve_haptics
from hardware.pca9685 import PCA9685Driver


class _FakeBus:
    def __init__(self) -> None:
        self.writes: list[tuple[int, int, int]] = []
        self.registers: dict[int, int] = {}
        self.closed = False

    def write_byte_data(self, address: int, reg: int, value: int) -> None:
        self.writes.append((address, reg, value))
        self.registers[reg] = value

    def read_byte_data(self, address: int, reg: int) -> int:
        return self.registers.get(reg, 0)

    def close(self) -> None:
        self.closed = True


class _FakeDriver:
    def __init__(self) -> None:
        self.duties: list[tuple[int, float]] = []
        self.frequency: float | None = None
        self.closed = False

    def setPWMFreq(self, freq: float) -> None:
        self.frequency = freq

    def set_duty(self, channel: int, duty: float) -> None:
        self.duties.append((channel, duty))

    def close(self) -> None:
        self.closed = True


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_set_duty_writes_channel_registers() -> None:
    bus = _FakeBus()
    driver = PCA9685Driver(address=0x40, bus=bus)
    bus.writes.clear()

    driver.set_duty(15, 1.0)

    base = 0x06 + 4 * 15
    assert bus.writes == [
        (0x40, base, 0),
        (0x40, base + 1, 0),
        (0x40, base + 2, 4095 & 0xFF),
        (0x40, base + 3, 4095 >> 8),
    ]


def test_set_pwm_freq_programs_prescale() -> None:
    bus = _FakeBus()
    driver = PCA9685Driver(bus=bus)

    driver.setPWMFreq(50)

    # 25 MHz / 4096 / 50 - 1 = 121.07
    assert bus.registers[0xFE] == 121


def test_driver_requires_smbus2(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("hardware.pca9685.importlib.util.find_spec", lambda name: None)

    with pytest.raises(OutputCapabilityUnavailable):
        PCA9685Driver()


def test_motor_plays_alternating_pattern_and_switches_off() -> None:
    driver = _FakeDriver()
    motor = Pca9685VibrationMotor(HapticSettings(backend="pca9685", channel=3), driver=driver)

    motor.vibrate([20, 10, 20])

    assert _wait_for(lambda: driver.duties.count((3, 1.0)) >= 2 and driver.duties[-1] == (3, 0.0))
    motor.close()

    played = [duty for _, duty in driver.duties]
    assert played[0] == 0.0
    assert played[1:4] == [1.0, 0.0, 1.0]
    assert played[-1] == 0.0
    assert driver.frequency == 500.0
    assert driver.closed


def test_resolve_haptics_defaults_to_null() -> None:
    assert isinstance(resolve_haptics(HapticSettings()), NullHaptics)
    assert isinstance(resolve_haptics(HapticSettings(backend="buzzer")), NullHaptics)
    assert not NullHaptics().is_supported()


def test_resolve_haptics_falls_back_when_bus_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    def _unavailable(settings: HapticSettings, driver: object = None) -> None:
        raise OutputCapabilityUnavailable("smbus2 is required for PCA9685Driver")

    monkeypatch.setattr(haptics_module, "Pca9685VibrationMotor", _unavailable)

    assert isinstance(resolve_haptics(HapticSettings(backend="pca9685")), NullHaptics)
