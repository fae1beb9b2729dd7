"""Configuration controller for YAML-based settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


_CONFIG_DIR = Path(__file__).resolve().parent

_LEGACY_DETECTION_KEYS = {
    "MAX_DISTANCE": "max_distance",
    "MIN_OBJECT_SIZE": "min_object_size",
    "ANALYSIS_FPS": "analysis_fps",
    "PRIORITY_OBJECTS": "priority_objects",
}

_ROI_KEY_ALIASES = {
    "xStart": "x_start",
    "xEnd": "x_end",
    "yStart": "y_start",
    "yEnd": "y_end",
}


@dataclass(frozen=True)
class ConfigPaths:
    """Filesystem paths for configuration files."""

    config_file: Path
    override_file: Path


class ConfigController:
    """Singleton controller for loading configuration."""

    _instance: "ConfigController | None" = None

    def __init__(
        self,
        config_file: str = "default.yaml",
        config_dir: Path | None = None,
    ) -> None:
        if ConfigController._instance is not None:
            raise RuntimeError("You cannot create another ConfigController class")

        config_dir = config_dir if config_dir is not None else _CONFIG_DIR
        self.paths = ConfigPaths(
            config_file=config_dir / config_file,
            override_file=config_dir / "override.yaml",
        )
        self.config: dict[str, Any] = {}
        self.load_config()

    @classmethod
    def get_instance(cls) -> "ConfigController":
        """Return the singleton instance of the controller."""

        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def load_config(self) -> None:
        """Load configuration from default and override YAML files."""

        with self.paths.config_file.open("r", encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}

        if self.paths.override_file.exists():
            with self.paths.override_file.open("r", encoding="utf-8") as file:
                override_config = yaml.safe_load(file) or {}
            if override_config:
                config = self._deep_merge(config, override_config)

        self.config = self._normalize_config(config)

    def get_config(self) -> dict[str, Any]:
        """Return the currently loaded configuration."""

        return dict(self.config)

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge dictionaries, overriding base values with override values."""

        merged = dict(base)
        for key, value in override.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _normalize_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Fold legacy upper-case detection keys into sections and validate the ROI.

        Raises:
            ValueError: If the configured region of interest is out of range.
        """

        normalized = dict(config)
        detection_cfg = dict(normalized.get("detection") or {})

        for legacy_key, key in _LEGACY_DETECTION_KEYS.items():
            if legacy_key in normalized:
                detection_cfg.setdefault(key, normalized.pop(legacy_key))

        roi_cfg = dict(detection_cfg.get("roi") or normalized.pop("ROI", None) or {})
        for alias, key in _ROI_KEY_ALIASES.items():
            if alias in roi_cfg:
                roi_cfg.setdefault(key, roi_cfg.pop(alias))

        roi_cfg["x_start"] = float(roi_cfg.get("x_start", 0.25))
        roi_cfg["x_end"] = float(roi_cfg.get("x_end", 0.75))
        roi_cfg["y_start"] = float(roi_cfg.get("y_start", 0.30))
        roi_cfg["y_end"] = float(roi_cfg.get("y_end", 0.85))
        self._validate_roi(roi_cfg)

        detection_cfg["roi"] = roi_cfg
        normalized["detection"] = detection_cfg

        level_cfg = dict(normalized.get("level_detection") or {})
        legacy_level = normalized.pop("LEVEL_DETECTION", None)
        if isinstance(legacy_level, dict):
            for key, value in legacy_level.items():
                level_cfg.setdefault(key, value)
        if level_cfg:
            normalized["level_detection"] = level_cfg

        return normalized

    @staticmethod
    def _validate_roi(roi_cfg: dict[str, float]) -> None:
        for axis in ("x", "y"):
            start = roi_cfg[f"{axis}_start"]
            end = roi_cfg[f"{axis}_end"]
            if not (0.0 <= start < end <= 1.0):
                raise ValueError(
                    f"Invalid ROI on {axis} axis: expected 0 <= start < end <= 1, "
                    f"got start={start} end={end}"
                )
