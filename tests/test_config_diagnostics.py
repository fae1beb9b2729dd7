"""Tests for config diagnostics."""

from __future__ import annotations

from diagnostics.models import DiagnosticStatus
from config.diagnostics import probe


def test_config_probe_offline(tmp_path) -> None:
    """Config probe should pass with a default config present."""

    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "default.yaml").write_text("{}", encoding="utf-8")

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.PASS


def test_config_probe_fails_without_default(tmp_path) -> None:
    (tmp_path / "config").mkdir()

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.FAIL
    assert "default.yaml" in result.details


def test_config_probe_fails_on_invalid_yaml(tmp_path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "default.yaml").write_text("detection: [unclosed", encoding="utf-8")

    assert probe(base_dir=tmp_path).status is DiagnosticStatus.FAIL


def test_packaged_config_probe_passes() -> None:
    assert probe().status is DiagnosticStatus.PASS


def test_config_probe_rejects_inverted_roi_override(tmp_path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "default.yaml").write_text("{}", encoding="utf-8")
    (config_dir / "override.yaml").write_text(
        "detection:\n  roi:\n    x_start: 0.8\n    x_end: 0.2\n",
        encoding="utf-8",
    )

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.FAIL
    assert "Invalid settings" in result.details
