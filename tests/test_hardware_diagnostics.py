"""Tests for hardware diagnostics."""

from __future__ import annotations

from diagnostics.models import DiagnosticStatus
from hardware.diagnostics import HardwareProbeConfig, probe


def test_hardware_probe_warns_on_missing_backends() -> None:
    """Hardware probe should warn when only optional backends are missing."""

    result = probe(
        config=HardwareProbeConfig(require_optional=False),
        available_modules={"numpy", "cv2"},
    )
    assert result.status is DiagnosticStatus.WARN
    assert "ultralytics" in result.details


def test_hardware_probe_fails_when_optional_required() -> None:
    result = probe(
        config=HardwareProbeConfig(require_optional=True),
        available_modules={"numpy", "cv2", "pyttsx3"},
    )
    assert result.status is DiagnosticStatus.FAIL


def test_hardware_probe_fails_without_opencv() -> None:
    """Hardware probe should fail when frame processing cannot run."""

    result = probe(available_modules={"numpy"})
    assert result.status is DiagnosticStatus.FAIL
    assert "cv2" in result.details


def test_hardware_probe_passes_with_everything() -> None:
    modules = {"numpy", "cv2", "ultralytics", "pyttsx3", "smbus2"}
    assert probe(available_modules=modules).status is DiagnosticStatus.PASS
