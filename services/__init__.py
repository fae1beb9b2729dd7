"""Long-running services."""

from services.detection_loop import DetectionLoop

__all__ = ["DetectionLoop"]
