"""Diagnostics routines for the configuration subsystem."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from config.settings import AppSettings
from diagnostics.models import DiagnosticResult, DiagnosticStatus


def _merged(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merged(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must hold a mapping, got {type(data).__name__}")
    return data


def probe(base_dir: Path | None = None) -> DiagnosticResult:
    """Check that the config files parse and produce valid typed settings.

    Args:
        base_dir: Optional directory holding the ``config`` folder, for offline testing.

    Returns:
        Diagnostic result indicating config readiness.
    """

    name = "config"
    config_dir = base_dir / "config" if base_dir is not None else Path(__file__).resolve().parent
    default_config = config_dir / "default.yaml"
    override_config = config_dir / "override.yaml"

    if not default_config.exists():
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Missing default config at {default_config}",
        )

    try:
        config = _read_yaml(default_config)
        if override_config.exists():
            config = _merged(config, _read_yaml(override_config))
        settings = AppSettings.from_config(config)
    except OSError as exc:
        return DiagnosticResult(name=name, status=DiagnosticStatus.FAIL, details=f"Config access failed: {exc}")
    except yaml.YAMLError as exc:
        return DiagnosticResult(name=name, status=DiagnosticStatus.FAIL, details=f"Config is not valid YAML: {exc}")
    except (TypeError, ValueError) as exc:
        return DiagnosticResult(name=name, status=DiagnosticStatus.FAIL, details=f"Invalid settings: {exc}")

    roi = settings.detection.roi
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=(
            f"Config readable at {config_dir}; "
            f"roi=({roi.x_start:g}-{roi.x_end:g}, {roi.y_start:g}-{roi.y_end:g}), "
            f"fps={settings.detection.analysis_fps:g}, "
            f"bypass={settings.announcements.critical_bypass.value}"
        ),
    )
