"""Tests for config loading, legacy key folding and typed settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from config.controller import ConfigController
from config.settings import AppSettings, CriticalBypass, LevelDetectionSettings, RegionOfInterest


def _reset_singleton() -> None:
    ConfigController._instance = None


def _write_default(config_dir: Path, lines: list[str]) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "default.yaml").write_text("\n".join(lines), encoding="utf-8")


def test_packaged_default_config_builds_settings() -> None:
    _reset_singleton()
    try:
        settings = AppSettings.from_config(ConfigController().get_config())
    finally:
        _reset_singleton()

    assert settings.detection.roi == RegionOfInterest(0.25, 0.75, 0.30, 0.85)
    assert settings.detection.max_distance == 3.0
    assert "person" in settings.detection.priority_objects
    assert settings.level_detection.cadence == 4
    assert settings.announcements.normal_interval_ms == 1800.0
    assert settings.announcements.critical_interval_ms == 1200.0
    assert settings.announcements.critical_bypass is CriticalBypass.ESCALATION


def test_legacy_upper_case_keys_fold_into_detection(tmp_path: Path) -> None:
    _write_default(
        tmp_path,
        [
            "MAX_DISTANCE: 4.5",
            "ANALYSIS_FPS: 10",
            "PRIORITY_OBJECTS: [person, dog]",
            "ROI:",
            "  xStart: 0.2",
            "  xEnd: 0.8",
            "  yStart: 0.1",
            "  yEnd: 0.9",
            "LEVEL_DETECTION:",
            "  enabled: false",
            "  sensitivity: 0.5",
        ],
    )
    _reset_singleton()
    try:
        config = ConfigController(config_dir=tmp_path).get_config()
    finally:
        _reset_singleton()

    detection = config["detection"]
    assert detection["max_distance"] == 4.5
    assert detection["analysis_fps"] == 10
    assert detection["priority_objects"] == ["person", "dog"]
    assert detection["roi"] == {"x_start": 0.2, "x_end": 0.8, "y_start": 0.1, "y_end": 0.9}
    assert config["level_detection"] == {"enabled": False, "sensitivity": 0.5}


def test_override_file_is_deep_merged(tmp_path: Path) -> None:
    _write_default(
        tmp_path,
        [
            "announcements:",
            "  normal_interval_ms: 1800",
            "  critical_interval_ms: 1200",
        ],
    )
    (tmp_path / "override.yaml").write_text(
        "announcements:\n  critical_bypass: always\n",
        encoding="utf-8",
    )
    _reset_singleton()
    try:
        settings = AppSettings.from_config(ConfigController(config_dir=tmp_path).get_config())
    finally:
        _reset_singleton()

    assert settings.announcements.normal_interval_ms == 1800.0
    assert settings.announcements.critical_bypass is CriticalBypass.ALWAYS


def test_invalid_roi_is_rejected_at_load(tmp_path: Path) -> None:
    _write_default(
        tmp_path,
        [
            "detection:",
            "  roi:",
            "    x_start: 0.8",
            "    x_end: 0.2",
        ],
    )
    _reset_singleton()
    try:
        with pytest.raises(ValueError):
            ConfigController(config_dir=tmp_path)
    finally:
        _reset_singleton()


def test_loading_leaves_config_files_untouched(tmp_path: Path) -> None:
    _write_default(tmp_path, ["logging_level: INFO"])
    (tmp_path / "override.yaml").write_text("logging_level: DEBUG\n", encoding="utf-8")
    _reset_singleton()
    try:
        controller = ConfigController(config_dir=tmp_path)
        controller.load_config()
    finally:
        _reset_singleton()

    assert controller.get_config()["logging_level"] == "DEBUG"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["default.yaml", "override.yaml"]
    assert not hasattr(controller, "set_config")


def test_unknown_critical_bypass_policy_raises() -> None:
    with pytest.raises(ValueError):
        AppSettings.from_config({"announcements": {"critical_bypass": "sometimes"}})


def test_roi_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        RegionOfInterest(x_start=0.5, x_end=0.5)


def test_sensitivity_scales_thresholds() -> None:
    assert LevelDetectionSettings(sensitivity=0.7).threshold_scale == pytest.approx(1.0)
    assert LevelDetectionSettings(sensitivity=1.0).threshold_scale == pytest.approx(0.7)
    assert LevelDetectionSettings(sensitivity=0.0).threshold_scale == pytest.approx(7.0)
