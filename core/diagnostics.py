"""Diagnostics routines for the core subsystem."""

from __future__ import annotations

import importlib.util
import logging

from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe() -> DiagnosticResult:
    """Check that the application logger can emit announcement records.

    Returns:
        FAIL without handlers, WARN when the level hides announcements,
        PASS otherwise.
    """

    name = "core"
    from core import logging as core_logging

    logger = core_logging.logger
    if not logger.handlers:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="Core logger has no handlers",
        )

    backend = "rich" if importlib.util.find_spec("rich") is not None else "plain stream"
    log_file = core_logging.file_log_path()
    destination = f"console ({backend}) and {log_file}" if log_file else f"console ({backend})"
    level = logging.getLevelName(logger.getEffectiveLevel())
    if logger.getEffectiveLevel() > logging.INFO:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"Logger level {level} hides announcements; logging to {destination}",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"Logging at {level} to {destination}",
    )
