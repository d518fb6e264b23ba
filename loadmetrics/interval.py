"""Closed time intervals in milliseconds."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Interval:
    """Inclusive ``[start, end]`` range; touching boundaries intersect."""

    start: float
    end: float

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"interval end {self.end} precedes start {self.start}")

    @classmethod
    def between(cls, first: float, second: float) -> Interval:
        return cls(min(first, second), max(first, second))

    @property
    def duration(self) -> float:
        return self.end - self.start

    def contains(self, ts: float) -> bool:
        return self.start <= ts <= self.end

    def intersects(self, other: Interval) -> bool:
        return self.start <= other.end and other.start <= self.end

    def intersection(self, other: Interval) -> Interval | None:
        if not self.intersects(other):
            return None
        return Interval(max(self.start, other.start), min(self.end, other.end))

    def clipped_duration(self, start: float, end: float) -> float:
        """Duration of ``[start, end]`` inside this interval, 0.0 when disjoint."""
        lo = max(self.start, start)
        hi = min(self.end, end)
        return hi - lo if hi > lo else 0.0


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """Union of intervals as a sorted list of disjoint intervals."""
    ordered = sorted(intervals, key=lambda item: (item.start, item.end))
    merged: list[Interval] = []
    for interval in ordered:
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            if interval.end > last.end:
                merged[-1] = Interval(last.start, interval.end)
            continue
        merged.append(interval)
    return merged
