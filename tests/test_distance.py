"""Tests for distance heuristics."""

from __future__ import annotations

from config.settings import DistanceSettings
from vision.distance import (
    estimate_distance_from_height,
    estimate_distance_from_vertical_position,
    reference_height,
)


def test_distance_from_height_uses_class_reference() -> None:
    # A person filling 70% of the frame height is 1 unit away.
    assert estimate_distance_from_height(336, 480, "person") == 1.0
    assert estimate_distance_from_height(96, 480, "chair") == 1.0


def test_unknown_class_uses_default_reference() -> None:
    assert reference_height("spaceship") == 0.2
    assert estimate_distance_from_height(96, 480, "spaceship") == 1.0


def test_distance_is_rounded_to_one_decimal() -> None:
    assert estimate_distance_from_height(100, 480, "person") == 3.4


def test_distance_is_clamped_to_range() -> None:
    settings = DistanceSettings()
    for height in (0.5, 1, 5, 50, 480, 5000):
        distance = estimate_distance_from_height(height, 480, "person", settings)
        assert settings.min_distance <= distance <= settings.max_distance
    assert estimate_distance_from_height(5000, 480, "person") == 0.5
    assert estimate_distance_from_height(1, 480, "person") == 10.0


def test_zero_height_is_max_distance() -> None:
    assert estimate_distance_from_height(0, 480, "person") == 10.0
    assert estimate_distance_from_height(50, 0, "person") == 10.0


def test_vertical_position_buckets() -> None:
    assert estimate_distance_from_vertical_position(450, 480) == 0.5
    assert estimate_distance_from_vertical_position(370, 480) == 1.0
    assert estimate_distance_from_vertical_position(320, 480) == 1.5
    assert estimate_distance_from_vertical_position(270, 480) == 2.0
    assert estimate_distance_from_vertical_position(220, 480) == 2.5
    assert estimate_distance_from_vertical_position(100, 480) == 3.0
    assert estimate_distance_from_vertical_position(100, 0) == 3.0
