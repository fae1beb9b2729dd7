"""Diagnostics routines for the vision heuristics."""

from __future__ import annotations

from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe() -> DiagnosticResult:
    """Run Layer 2 and the generic obstacle scan on a synthetic step frame.

    Returns:
        PASS when the step is reported as a downward stair, WARN when the
        heuristics run but miss it, FAIL when they cannot run at all.
    """

    name = "vision"
    try:
        import numpy as np

        from config.settings import GenericObstacleSettings, LevelDetectionSettings, RegionOfInterest
        from vision.detections import DetectionType
        from vision.generic_obstacles import detect_generic_obstacles
        from vision.level_changes import detect_level_changes

        frame = np.full((240, 320, 3), 40, dtype=np.uint8)
        frame[150:, :, :] = 200
        level_changes = detect_level_changes(frame, LevelDetectionSettings())
        regions = detect_generic_obstacles(frame, RegionOfInterest(), GenericObstacleSettings())
    except Exception as exc:  # noqa: BLE001 - report instead of crashing the runner
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Vision heuristics failed: {exc}",
        )

    if not any(change.type is DetectionType.STAIR_DOWN for change in level_changes):
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details="Level-change heuristic missed the synthetic step",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=(
            f"Level changes: {len(level_changes)}; "
            f"generic obstacle regions: {len(regions)}"
        ),
    )
