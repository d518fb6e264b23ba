"""Time to first interactive: the first quiet window after meaningful paint."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from loadmetrics.breakdown import wall_clock_breakdown
from loadmetrics.context import RendererContext
from loadmetrics.histogram import MetricSample
from loadmetrics.interval import Interval
from loadmetrics.model.event import TraceEvent
from loadmetrics.schema import (
    DIAG_LAST_LONG_TASK,
    DIAG_NAVIGATION_INFOS,
    DIAG_START,
    breakdown_key,
)

RESPONSIVENESS_THRESHOLD_MS = 50
INTERACTIVE_WINDOW_SIZE_MS = 5000
LONG_TASK_TITLE = "TaskQueueManager::ProcessTaskFromWorkQueue"


@dataclass(frozen=True, slots=True)
class InteractiveScan:
    first_interactive: float
    last_long_task: TraceEvent | None = None

    @property
    def reached(self) -> bool:
        return math.isfinite(self.first_interactive)


def is_long_task(event: TraceEvent) -> bool:
    return event.title == LONG_TASK_TITLE and event.duration > RESPONSIVENESS_THRESHOLD_MS


def find_first_interactive(
    events: Iterable[TraceEvent],
    first_meaningful_paint: float,
) -> InteractiveScan:
    """Scan start-ordered events for a long-task-free window after FMP.

    Returns ``math.inf`` as the instant when the events run out before a
    full window is observed.
    """
    candidate = first_meaningful_paint
    last_long_task: TraceEvent | None = None
    for event in events:
        if event.start < candidate:
            continue
        if event.start - candidate >= INTERACTIVE_WINDOW_SIZE_MS:
            return InteractiveScan(candidate, last_long_task)
        if is_long_task(event):
            candidate = event.end - RESPONSIVENESS_THRESHOLD_MS
            last_long_task = event
    return InteractiveScan(math.inf, last_long_task)


def time_to_interactive_sample(
    context: RendererContext,
    *,
    navigation_start: TraceEvent,
    first_meaningful_paint: float,
    url: str,
) -> MetricSample:
    main_thread = context.main_thread
    events = main_thread.events if main_thread is not None else ()
    scan = find_first_interactive(events, first_meaningful_paint)
    breakdown_end = scan.first_interactive
    if not scan.reached:
        bounds = main_thread.bounds() if main_thread is not None else None
        breakdown_end = bounds.end if bounds is not None else first_meaningful_paint
    breakdown_range = Interval.between(navigation_start.start, breakdown_end)
    network_events = [
        event
        for event in context.process.network_events()
        if breakdown_range.intersects(event.interval)
    ]
    return MetricSample(
        value=scan.first_interactive - navigation_start.start,
        diagnostics={
            breakdown_key("Interactive"): wall_clock_breakdown(
                main_thread, network_events, breakdown_range
            ),
            DIAG_START: navigation_start,
            DIAG_LAST_LONG_TASK: scan.last_long_task,
            DIAG_NAVIGATION_INFOS: {
                "url": url,
                "pid": context.process.pid,
                "start": navigation_start.start,
                "interactive": scan.first_interactive,
            },
        },
    )
