"""Typed trace events and per-thread event streams."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from loadmetrics.interval import Interval
from loadmetrics.schema import CATEGORY_NETLOG, RESOURCE_LOAD_TITLES

EVENT_KIND_SLICE = "slice"
EVENT_KIND_INSTANT = "instant"
EVENT_KIND_ASYNC = "async"


@dataclass(frozen=True, slots=True, eq=False)
class TraceEvent:
    """Single trace event; times are milliseconds on the trace clock.

    Events compare by identity: two navigation starts at the same timestamp
    are still different navigations.
    """

    title: str
    categories: frozenset[str]
    start: float
    duration: float = 0.0
    cpu_start: float | None = None
    cpu_duration: float | None = None
    pid: int = 0
    tid: int = 0
    kind: str = EVENT_KIND_SLICE
    frame_id: str | None = None
    args: Mapping[str, Any] = field(default_factory=dict)

    @property
    def end(self) -> float:
        return self.start + self.duration

    @property
    def cpu_end(self) -> float | None:
        if self.cpu_start is None or self.cpu_duration is None:
            return None
        return self.cpu_start + self.cpu_duration

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)

    def matches(self, category: str, title: str) -> bool:
        return self.title == title and category in self.categories

    def summary(self) -> dict[str, Any]:
        """Compact JSON-friendly view used in diagnostics exports."""
        return {
            "title": self.title,
            "categories": sorted(self.categories),
            "start": self.start,
            "duration": self.duration,
            "pid": self.pid,
            "tid": self.tid,
            "frame_id": self.frame_id,
        }


def parse_categories(raw: str) -> frozenset[str]:
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def _ordering_key(event: TraceEvent) -> tuple[float, float]:
    # Enclosing slices sort before the slices they contain.
    return (event.start, -event.duration)


class TraceThread:
    """Ordered event stream of one thread with slice nesting resolved."""

    def __init__(
        self,
        *,
        pid: int,
        tid: int,
        name: str | None = None,
        events: Iterable[TraceEvent] = (),
    ) -> None:
        self.pid = int(pid)
        self.tid = int(tid)
        self.name = name
        self._events: tuple[TraceEvent, ...] = tuple(sorted(events, key=_ordering_key))
        self._children: dict[TraceEvent, list[TraceEvent]] = {}
        self._top_level: list[TraceEvent] = []
        self._build_nesting()

    @property
    def events(self) -> tuple[TraceEvent, ...]:
        return self._events

    @property
    def top_level_slices(self) -> tuple[TraceEvent, ...]:
        return tuple(self._top_level)

    def slices(self) -> Iterator[TraceEvent]:
        return (event for event in self._events if event.kind == EVENT_KIND_SLICE)

    def children_of(self, event: TraceEvent) -> tuple[TraceEvent, ...]:
        return tuple(self._children.get(event, ()))

    def network_events(self) -> list[TraceEvent]:
        return [
            event
            for event in self._events
            if event.duration > 0.0
            and (CATEGORY_NETLOG in event.categories or event.title in RESOURCE_LOAD_TITLES)
        ]

    def bounds(self) -> Interval | None:
        if not self._events:
            return None
        return Interval(
            min(event.start for event in self._events),
            max(event.end for event in self._events),
        )

    def _build_nesting(self) -> None:
        stack: list[TraceEvent] = []
        for event in self.slices():
            while stack and not (stack[-1].start <= event.start and event.end <= stack[-1].end):
                stack.pop()
            if stack:
                self._children.setdefault(stack[-1], []).append(event)
            else:
                self._top_level.append(event)
            stack.append(event)
