"""Process-level view over threads, frame loaders and instrumentation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from loadmetrics.interval import Interval
from loadmetrics.model.event import TraceEvent, TraceThread
from loadmetrics.model.objects import FrameLoaderRecord
from loadmetrics.schema import (
    INSTRUMENTATION_TITLE_PREFIX,
    RENDERER_MAIN_THREAD_NAME,
    TRACING_UI_LABEL_PREFIX,
)


class RendererProcess:
    """One traced process and everything nested under it."""

    def __init__(
        self,
        *,
        pid: int,
        threads: Iterable[TraceThread] = (),
        frame_loaders: Iterable[FrameLoaderRecord] = (),
        name: str | None = None,
        labels: Iterable[str] = (),
    ) -> None:
        self.pid = int(pid)
        self.name = name
        self.labels: tuple[str, ...] = tuple(labels)
        self._threads: dict[int, TraceThread] = {thread.tid: thread for thread in threads}
        self._frame_loaders: tuple[FrameLoaderRecord, ...] = tuple(frame_loaders)
        self._instrumentation_ranges: tuple[Interval, ...] = tuple(
            event.interval
            for thread in self._threads.values()
            for event in thread.events
            if event.title.startswith(INSTRUMENTATION_TITLE_PREFIX)
        )

    @property
    def frame_loaders(self) -> tuple[FrameLoaderRecord, ...]:
        return self._frame_loaders

    @property
    def main_thread(self) -> TraceThread | None:
        for thread in self._threads.values():
            if thread.name == RENDERER_MAIN_THREAD_NAME:
                return thread
        return None

    @property
    def is_renderer(self) -> bool:
        return self.main_thread is not None

    @property
    def is_tracing_ui(self) -> bool:
        return any(label.startswith(TRACING_UI_LABEL_PREFIX) for label in self.labels)

    def is_internal_event(self, event: TraceEvent) -> bool:
        """True for instrumentation markers and anything they enclose."""
        if event.title.startswith(INSTRUMENTATION_TITLE_PREFIX):
            return True
        return any(
            interval.contains(event.start) and interval.contains(event.end)
            for interval in self._instrumentation_ranges
        )

    def iter_descendant_events(self) -> Iterator[TraceEvent]:
        for tid in sorted(self._threads):
            yield from self._threads[tid].events

    def network_events(self) -> list[TraceEvent]:
        out: list[TraceEvent] = []
        for tid in sorted(self._threads):
            out.extend(self._threads[tid].network_events())
        return out


@dataclass(frozen=True)
class TraceModel:
    processes: dict[int, RendererProcess] = field(default_factory=dict)
    metadata: dict[str, object] = field(default_factory=dict)

    def renderer_processes(self) -> list[RendererProcess]:
        return [self.processes[pid] for pid in sorted(self.processes) if self.processes[pid].is_renderer]
