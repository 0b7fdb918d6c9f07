"""Tests for point normalization."""

import pytest

from tempo_map.precision.normalize import normalize_points
from tempo_map.types import DataPoint


def test_empty():
    assert normalize_points([]) == []


def test_rebases_ticks_and_converts_to_ms():
    points = normalize_points([(1440, 2.5), (2160, 3.0), (2880, 3.75)])
    assert [p.tick for p in points] == [0, 720, 1440]
    assert [p.time for p in points] == pytest.approx([0.0, 500.0, 1250.0])


def test_single_point():
    assert normalize_points([(720, 1.816077098)]) == [DataPoint(tick=0, time=0.0)]


def test_order_is_kept():
    """No sorting: a point earlier than the first goes negative."""
    points = normalize_points([(720, 1.0), (0, 0.5)])
    assert points[1].tick == -720
    assert points[1].time == pytest.approx(-500.0)


def test_accepts_any_pairs():
    points = normalize_points(iter([[0, 0.0], [720, 1.0]]))
    assert points[1] == DataPoint(tick=720, time=1000.0)
