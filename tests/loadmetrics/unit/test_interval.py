from __future__ import annotations

import pytest

from loadmetrics.interval import Interval, merge_intervals


def test_interval_rejects_reversed_bounds() -> None:
    with pytest.raises(ValueError):
        Interval(10.0, 5.0)


def test_interval_between_orders_arguments() -> None:
    interval = Interval.between(30.0, 10.0)
    assert interval == Interval(10.0, 30.0)
    assert interval.duration == 20.0


def test_interval_bounds_are_inclusive() -> None:
    interval = Interval(10.0, 20.0)
    assert interval.contains(10.0)
    assert interval.contains(20.0)
    assert not interval.contains(20.001)
    assert interval.intersects(Interval(20.0, 25.0))
    assert interval.intersection(Interval(20.0, 25.0)) == Interval(20.0, 20.0)
    assert interval.intersection(Interval(21.0, 25.0)) is None


def test_clipped_duration_handles_partial_and_disjoint_ranges() -> None:
    interval = Interval(10.0, 20.0)
    assert interval.clipped_duration(5.0, 15.0) == 5.0
    assert interval.clipped_duration(12.0, 14.0) == 2.0
    assert interval.clipped_duration(25.0, 30.0) == 0.0


def test_merge_intervals_joins_overlapping_and_touching_ranges() -> None:
    merged = merge_intervals(
        [Interval(30.0, 40.0), Interval(0.0, 10.0), Interval(10.0, 15.0), Interval(5.0, 8.0)]
    )
    assert merged == [Interval(0.0, 15.0), Interval(30.0, 40.0)]
