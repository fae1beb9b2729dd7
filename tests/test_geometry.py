"""Tests for ROI and significance filters."""

from __future__ import annotations

from config.settings import RegionOfInterest
from vision.detections import BoundingBox
from vision.geometry import is_in_roi, is_significant, normalized_center_x, overlap_fraction


_ROI = RegionOfInterest(x_start=0.25, x_end=0.75, y_start=0.30, y_end=0.85)


def _box_centered_at(cx: float, cy: float, size: float = 10.0) -> BoundingBox:
    return BoundingBox(cx - size / 2, cy - size / 2, size, size)


def test_center_inside_roi() -> None:
    assert is_in_roi(_box_centered_at(320, 240), 640, 480, _ROI)


def test_center_outside_roi() -> None:
    assert not is_in_roi(_box_centered_at(50, 240), 640, 480, _ROI)
    assert not is_in_roi(_box_centered_at(320, 470), 640, 480, _ROI)


def test_roi_edges_are_inclusive() -> None:
    assert is_in_roi(_box_centered_at(160, 240), 640, 480, _ROI)
    assert is_in_roi(_box_centered_at(480, 408), 640, 480, _ROI)
    assert not is_in_roi(_box_centered_at(159.9, 240), 640, 480, _ROI)


def test_zero_sized_frame_is_never_in_roi_or_significant() -> None:
    box = _box_centered_at(5, 5)
    assert not is_in_roi(box, 0, 480, _ROI)
    assert not is_significant(box, 640, 0, 0.01)


def test_significance_threshold_is_inclusive() -> None:
    # 128 x 60 is exactly 2.5% of 640 x 480.
    assert is_significant(BoundingBox(0, 0, 128, 60), 640, 480, 0.025)
    assert not is_significant(BoundingBox(0, 0, 10, 10), 640, 480, 0.025)


def test_normalized_center_x_is_clamped() -> None:
    assert normalized_center_x(BoundingBox(600, 0, 200, 10), 640) == 1.0
    assert normalized_center_x(BoundingBox(0, 0, 64, 10), 640) == 0.05


def test_overlap_fraction() -> None:
    region = BoundingBox(0, 0, 10, 10)
    assert overlap_fraction(region, BoundingBox(5, 0, 10, 10)) == 0.5
    assert overlap_fraction(region, BoundingBox(20, 20, 5, 5)) == 0.0
    assert overlap_fraction(region, BoundingBox(-5, -5, 30, 30)) == 1.0
    assert overlap_fraction(BoundingBox(0, 0, 0, 10), region) == 0.0
