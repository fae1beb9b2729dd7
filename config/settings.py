"""Typed, read-only views over the raw configuration mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


def _section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = config.get(name) if isinstance(config, Mapping) else None
    return value if isinstance(value, Mapping) else {}


DEFAULT_PRIORITY_OBJECTS: tuple[str, ...] = (
    "person", "car", "truck", "bus", "motorcycle", "bicycle",
    "chair", "bench", "potted plant", "suitcase", "backpack",
    "handbag", "bottle", "cup", "umbrella",
    "stop sign", "traffic light", "fire hydrant", "parking meter",
    "dog", "cat", "bird", "horse", "sheep", "cow",
    "skateboard", "sports ball", "kite", "frisbee",
    "couch", "bed", "dining table", "tv", "laptop",
)

DEFAULT_REFERENCE_HEIGHTS: dict[str, float] = {
    "person": 0.7,
    "car": 0.4,
    "truck": 0.5,
    "bus": 0.6,
    "bicycle": 0.3,
    "motorcycle": 0.35,
    "dog": 0.15,
    "cat": 0.1,
    "chair": 0.2,
    "bench": 0.15,
    "default": 0.2,
}


@dataclass(frozen=True)
class RegionOfInterest:
    """Normalized rectangle of the frame considered directly ahead of the user."""

    x_start: float = 0.25
    x_end: float = 0.75
    y_start: float = 0.30
    y_end: float = 0.85

    def __post_init__(self) -> None:
        if not (0.0 <= self.x_start < self.x_end <= 1.0):
            raise ValueError(f"Invalid ROI x range: {self.x_start}..{self.x_end}")
        if not (0.0 <= self.y_start < self.y_end <= 1.0):
            raise ValueError(f"Invalid ROI y range: {self.y_start}..{self.y_end}")

    @classmethod
    def from_config(cls, roi_cfg: Mapping[str, Any]) -> "RegionOfInterest":
        defaults = cls()
        return cls(
            x_start=float(roi_cfg.get("x_start", defaults.x_start)),
            x_end=float(roi_cfg.get("x_end", defaults.x_end)),
            y_start=float(roi_cfg.get("y_start", defaults.y_start)),
            y_end=float(roi_cfg.get("y_end", defaults.y_end)),
        )


@dataclass(frozen=True)
class DetectionSettings:
    """Runtime settings for the known-object layer and fusion."""

    roi: RegionOfInterest = field(default_factory=RegionOfInterest)
    max_distance: float = 3.0
    min_object_size: float = 0.025
    analysis_fps: float = 15.0
    min_confidence: float = 0.45
    status_log_period_s: float = 15.0
    priority_objects: tuple[str, ...] = DEFAULT_PRIORITY_OBJECTS

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "DetectionSettings":
        detection_cfg = _section(config, "detection")
        defaults = cls()
        objects_value = detection_cfg.get("priority_objects")
        if isinstance(objects_value, (list, tuple)):
            priority_objects = tuple(str(item) for item in objects_value)
        else:
            priority_objects = defaults.priority_objects
        return cls(
            roi=RegionOfInterest.from_config(_section(detection_cfg, "roi")),
            max_distance=float(detection_cfg.get("max_distance", defaults.max_distance)),
            min_object_size=float(detection_cfg.get("min_object_size", defaults.min_object_size)),
            analysis_fps=max(1.0, float(detection_cfg.get("analysis_fps", defaults.analysis_fps))),
            min_confidence=float(detection_cfg.get("min_confidence", defaults.min_confidence)),
            status_log_period_s=float(
                detection_cfg.get("status_log_period_s", defaults.status_log_period_s)
            ),
            priority_objects=priority_objects,
        )


@dataclass(frozen=True)
class DistanceSettings:
    """Clamp range and per-class reference heights for distance estimation."""

    min_distance: float = 0.5
    max_distance: float = 10.0
    reference_heights: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_REFERENCE_HEIGHTS)
    )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "DistanceSettings":
        distance_cfg = _section(config, "distance")
        heights = dict(DEFAULT_REFERENCE_HEIGHTS)
        for key, value in _section(distance_cfg, "reference_heights").items():
            heights[str(key)] = float(value)
        return cls(
            min_distance=float(distance_cfg.get("min_distance", 0.5)),
            max_distance=float(distance_cfg.get("max_distance", 10.0)),
            reference_heights=heights,
        )


@dataclass(frozen=True)
class LevelDetectionSettings:
    """Settings for the stripe-based level-change heuristic."""

    enabled: bool = True
    sensitivity: float = 0.7
    cadence: int = 4
    min_confidence: float = 0.5
    stripe_height: int = 10
    dedup_distance_px: int = 30
    max_results: int = 3

    @property
    def threshold_scale(self) -> float:
        """Multiplier applied to every heuristic threshold (1.0 at the default sensitivity)."""

        sensitivity = max(0.1, min(1.0, self.sensitivity))
        return 0.7 / sensitivity

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "LevelDetectionSettings":
        level_cfg = _section(config, "level_detection")
        defaults = cls()
        return cls(
            enabled=bool(level_cfg.get("enabled", defaults.enabled)),
            sensitivity=float(level_cfg.get("sensitivity", defaults.sensitivity)),
            cadence=max(1, int(level_cfg.get("cadence", defaults.cadence))),
            min_confidence=float(level_cfg.get("min_confidence", defaults.min_confidence)),
            stripe_height=max(2, int(level_cfg.get("stripe_height", defaults.stripe_height))),
            dedup_distance_px=int(level_cfg.get("dedup_distance_px", defaults.dedup_distance_px)),
            max_results=max(1, int(level_cfg.get("max_results", defaults.max_results))),
        )


@dataclass(frozen=True)
class GenericObstacleSettings:
    """Settings for the Sobel edge-density obstacle finder."""

    enabled: bool = False
    grid_size: int = 30
    edge_threshold: float = 50.0
    density_threshold: float = 0.15
    min_area_fraction: float = 0.02

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "GenericObstacleSettings":
        generic_cfg = _section(config, "generic_obstacles")
        defaults = cls()
        return cls(
            enabled=bool(generic_cfg.get("enabled", defaults.enabled)),
            grid_size=max(2, int(generic_cfg.get("grid_size", defaults.grid_size))),
            edge_threshold=float(generic_cfg.get("edge_threshold", defaults.edge_threshold)),
            density_threshold=float(
                generic_cfg.get("density_threshold", defaults.density_threshold)
            ),
            min_area_fraction=float(
                generic_cfg.get("min_area_fraction", defaults.min_area_fraction)
            ),
        )


class CriticalBypass(str, Enum):
    """When a critical detection may repeat an identical announcement key."""

    ALWAYS = "always"
    ESCALATION = "escalation"
    NEVER = "never"


@dataclass(frozen=True)
class AnnouncementSettings:
    """Throttling settings for spoken and haptic alerts."""

    audio_enabled: bool = True
    normal_interval_ms: float = 1800.0
    critical_interval_ms: float = 1200.0
    critical_bypass: CriticalBypass = CriticalBypass.ESCALATION

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "AnnouncementSettings":
        announce_cfg = _section(config, "announcements")
        defaults = cls()
        bypass_raw = str(announce_cfg.get("critical_bypass", defaults.critical_bypass.value))
        try:
            bypass = CriticalBypass(bypass_raw.lower())
        except ValueError as exc:
            raise ValueError(f"Unknown critical_bypass policy: {bypass_raw}") from exc
        return cls(
            audio_enabled=bool(announce_cfg.get("audio_enabled", defaults.audio_enabled)),
            normal_interval_ms=float(
                announce_cfg.get("normal_interval_ms", defaults.normal_interval_ms)
            ),
            critical_interval_ms=float(
                announce_cfg.get("critical_interval_ms", defaults.critical_interval_ms)
            ),
            critical_bypass=bypass,
        )


@dataclass(frozen=True)
class CameraSettings:
    index: int = 0
    url: str | None = None
    width: int = 640
    height: int = 480

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "CameraSettings":
        camera_cfg = _section(config, "camera")
        url = camera_cfg.get("url")
        return cls(
            index=int(camera_cfg.get("index", 0)),
            url=str(url) if url else None,
            width=int(camera_cfg.get("width", 640)),
            height=int(camera_cfg.get("height", 480)),
        )


@dataclass(frozen=True)
class ModelSettings:
    name: str = "yolov8n.pt"
    device: str = "cpu"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ModelSettings":
        model_cfg = _section(config, "model")
        return cls(
            name=str(model_cfg.get("name", "yolov8n.pt")),
            device=str(model_cfg.get("device", "cpu")),
        )


@dataclass(frozen=True)
class VoiceSettings:
    enabled: bool = True
    language: str = "es"
    rate: float = 1.0
    volume: float = 1.0

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "VoiceSettings":
        voice_cfg = _section(config, "voice")
        return cls(
            enabled=bool(voice_cfg.get("enabled", True)),
            language=str(voice_cfg.get("language", "es")),
            rate=float(voice_cfg.get("rate", 1.0)),
            volume=float(voice_cfg.get("volume", 1.0)),
        )


@dataclass(frozen=True)
class HapticSettings:
    backend: str = "none"
    i2c_bus: int = 1
    address: int = 0x40
    channel: int = 15
    pwm_frequency: float = 500.0

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "HapticSettings":
        haptic_cfg = _section(config, "haptics")
        return cls(
            backend=str(haptic_cfg.get("backend", "none")).lower(),
            i2c_bus=int(haptic_cfg.get("i2c_bus", 1)),
            address=int(haptic_cfg.get("address", 0x40)),
            channel=int(haptic_cfg.get("channel", 15)),
            pwm_frequency=float(haptic_cfg.get("pwm_frequency", 500.0)),
        )


@dataclass(frozen=True)
class AppSettings:
    """All typed settings for one detection session."""

    detection: DetectionSettings = field(default_factory=DetectionSettings)
    distance: DistanceSettings = field(default_factory=DistanceSettings)
    level_detection: LevelDetectionSettings = field(default_factory=LevelDetectionSettings)
    generic_obstacles: GenericObstacleSettings = field(default_factory=GenericObstacleSettings)
    announcements: AnnouncementSettings = field(default_factory=AnnouncementSettings)
    camera: CameraSettings = field(default_factory=CameraSettings)
    model: ModelSettings = field(default_factory=ModelSettings)
    voice: VoiceSettings = field(default_factory=VoiceSettings)
    haptics: HapticSettings = field(default_factory=HapticSettings)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "AppSettings":
        return cls(
            detection=DetectionSettings.from_config(config),
            distance=DistanceSettings.from_config(config),
            level_detection=LevelDetectionSettings.from_config(config),
            generic_obstacles=GenericObstacleSettings.from_config(config),
            announcements=AnnouncementSettings.from_config(config),
            camera=CameraSettings.from_config(config),
            model=ModelSettings.from_config(config),
            voice=VoiceSettings.from_config(config),
            haptics=HapticSettings.from_config(config),
        )
