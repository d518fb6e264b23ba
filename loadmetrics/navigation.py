"""Per-frame index of navigation-start events."""

from __future__ import annotations

import bisect
from collections.abc import Iterable, Mapping, Sequence

from loadmetrics.model.event import TraceEvent, TraceThread
from loadmetrics.schema import CATEGORY_USER_TIMING, NAVIGATION_START


class NavigationIndex:
    """Navigation starts grouped by frame id, in arrival order."""

    def __init__(self, starts_by_frame: Mapping[str, Sequence[TraceEvent]]) -> None:
        # Stable sort: equal starts stay in arrival order, so the rightmost
        # match is the one encountered last.
        self._sorted: dict[str, tuple[list[float], tuple[TraceEvent, ...]]] = {}
        for frame_id, starts in starts_by_frame.items():
            ordered = tuple(sorted(starts, key=lambda event: event.start))
            self._sorted[frame_id] = ([event.start for event in ordered], ordered)

    @classmethod
    def from_events(cls, events: Iterable[TraceEvent]) -> NavigationIndex:
        grouped: dict[str, list[TraceEvent]] = {}
        for event in events:
            if event.frame_id is None:
                continue
            if not event.matches(CATEGORY_USER_TIMING, NAVIGATION_START):
                continue
            grouped.setdefault(event.frame_id, []).append(event)
        return cls(grouped)

    @classmethod
    def for_thread(cls, thread: TraceThread | None) -> NavigationIndex:
        if thread is None:
            return cls({})
        return cls.from_events(thread.events)

    def find_last_navigation_start_before(self, frame_id: str, ts: float) -> TraceEvent | None:
        entry = self._sorted.get(frame_id)
        if entry is None:
            return None
        starts, ordered = entry
        index = bisect.bisect_right(starts, ts) - 1
        if index < 0:
            return None
        return ordered[index]
