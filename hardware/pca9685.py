"""PCA9685 PWM driver used to power a vibration motor."""

from __future__ import annotations

import importlib
import importlib.util
import math
import time
from typing import Any

from core.errors import OutputCapabilityUnavailable
from core.logging import logger as LOGGER


PWM_RESOLUTION = 4096


class PCA9685Driver:
    """Low-level register access for the PCA9685 PWM driver."""

    __MODE1 = 0x00
    __PRESCALE = 0xFE
    __LED0_ON_L = 0x06
    __LED0_ON_H = 0x07
    __LED0_OFF_L = 0x08
    __LED0_OFF_H = 0x09

    def __init__(self, bus_number: int = 1, address: int = 0x40, debug: bool = False, bus: Any = None) -> None:
        if bus is None:
            if importlib.util.find_spec("smbus2") is None:
                raise OutputCapabilityUnavailable("smbus2 is required for PCA9685Driver")
            smbus2 = importlib.import_module("smbus2")
            bus = smbus2.SMBus(bus_number)
        self.bus = bus
        self.address = address
        self.debug = debug
        if self.debug:
            LOGGER.info("[HAPTIC] Resetting PCA9685")
        self.write(self.__MODE1, 0x00)

    def write(self, reg: int, value: int) -> None:
        """Write an 8-bit value to the specified register/address."""

        self.bus.write_byte_data(self.address, reg, value)
        if self.debug:
            LOGGER.info("[HAPTIC] I2C: Write 0x%02X to register 0x%02X", value, reg)

    def read(self, reg: int) -> int:
        return self.bus.read_byte_data(self.address, reg)

    def setPWMFreq(self, freq: float) -> None:
        """Set the PWM frequency."""

        prescaleval = 25000000.0
        prescaleval /= float(PWM_RESOLUTION)
        prescaleval /= float(freq)
        prescaleval -= 1.0
        prescale = math.floor(prescaleval + 0.5)
        if self.debug:
            LOGGER.info("[HAPTIC] PWM frequency %s Hz, pre-scale %s", freq, prescale)

        oldmode = self.read(self.__MODE1)
        newmode = (oldmode & 0x7F) | 0x10
        self.write(self.__MODE1, newmode)
        self.write(self.__PRESCALE, int(prescale))
        self.write(self.__MODE1, oldmode)
        time.sleep(0.005)
        self.write(self.__MODE1, oldmode | 0x80)

    def setPWM(self, channel: int, on: int, off: int) -> None:
        """Set a single PWM channel."""

        self.write(self.__LED0_ON_L + 4 * channel, on & 0xFF)
        self.write(self.__LED0_ON_H + 4 * channel, on >> 8)
        self.write(self.__LED0_OFF_L + 4 * channel, off & 0xFF)
        self.write(self.__LED0_OFF_H + 4 * channel, off >> 8)

    def set_duty(self, channel: int, duty: float) -> None:
        """Drive ``channel`` at ``duty`` in ``[0, 1]``; 0 switches it off."""

        duty = max(0.0, min(1.0, duty))
        self.setPWM(channel, 0, int(round(duty * (PWM_RESOLUTION - 1))))

    def close(self) -> None:
        close = getattr(self.bus, "close", None)
        if callable(close):
            close()
