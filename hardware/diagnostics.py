"""Diagnostics routines for camera, model and output dependencies."""

from __future__ import annotations

import importlib.util
from dataclasses import dataclass

from diagnostics.models import DiagnosticResult, DiagnosticStatus


REQUIRED_MODULES = ("numpy", "cv2")
OPTIONAL_MODULES = ("ultralytics", "pyttsx3", "smbus2")


@dataclass(frozen=True)
class HardwareProbeConfig:
    """Configuration for hardware dependency checks."""

    require_optional: bool = False


def probe(config: HardwareProbeConfig | None = None, available_modules: set[str] | None = None) -> DiagnosticResult:
    """Check that frame processing can run and report which backends are present.

    Args:
        config: Optional configuration for probe behavior.
        available_modules: Optional override set for offline testing.

    Returns:
        FAIL when a required module is missing; WARN when only optional
        backends (model, speech, vibration) are missing; PASS otherwise.
    """

    name = "hardware"
    settings = config or HardwareProbeConfig()

    def _available(module_name: str) -> bool:
        if available_modules is not None:
            return module_name in available_modules
        return importlib.util.find_spec(module_name) is not None

    missing_required = [module for module in REQUIRED_MODULES if not _available(module)]
    missing_optional = [module for module in OPTIONAL_MODULES if not _available(module)]

    if missing_required:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Missing required deps: {', '.join(missing_required)}",
        )

    if missing_optional:
        status = DiagnosticStatus.FAIL if settings.require_optional else DiagnosticStatus.WARN
        return DiagnosticResult(
            name=name,
            status=status,
            details=f"Missing optional backends: {', '.join(missing_optional)}",
        )

    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details="Camera, model and output dependencies available",
    )
