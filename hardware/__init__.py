"""Hardware capability package."""

from hardware.camera import CameraFrameSource
from hardware.haptics import HapticOutput, NullHaptics, Pca9685VibrationMotor, resolve_haptics
from hardware.object_model import YoloObjectModel
from hardware.pca9685 import PCA9685Driver

__all__ = [
    "CameraFrameSource",
    "HapticOutput",
    "NullHaptics",
    "PCA9685Driver",
    "Pca9685VibrationMotor",
    "YoloObjectModel",
    "resolve_haptics",
]
