"""First meaningful paint: last paint candidate of each navigation.

Candidates for one frame are folded through two states. ``None`` means no
navigation is tracked yet; ``PaintEpoch`` tracks a navigation start and the
latest candidate seen for it. A candidate that resolves to a different
navigation start closes the tracked epoch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from loadmetrics.breakdown import cpu_time_breakdown, cpu_time_in_range, wall_clock_breakdown
from loadmetrics.context import RendererContext
from loadmetrics.histogram import MetricSample
from loadmetrics.interactive import time_to_interactive_sample
from loadmetrics.interval import Interval
from loadmetrics.model.event import TraceEvent
from loadmetrics.navigation import NavigationIndex
from loadmetrics.schema import (
    CATEGORY_LOADING,
    DIAG_END,
    DIAG_NAVIGATION_INFOS,
    DIAG_START,
    FIRST_MEANINGFUL_PAINT_CANDIDATE,
    breakdown_key,
)

_LOG = logging.getLogger("loadmetrics.fmp")


@dataclass(frozen=True, slots=True)
class PaintEpoch:
    frame_id: str
    navigation_start: TraceEvent
    last_candidate: TraceEvent


@dataclass(frozen=True, slots=True)
class FirstMeaningfulPaintSamples:
    first_meaningful_paint: list[MetricSample] = field(default_factory=list)
    cpu_time_to_first_meaningful_paint: list[MetricSample] = field(default_factory=list)
    time_to_interactive: list[MetricSample] = field(default_factory=list)


def fold_candidate(
    state: PaintEpoch | None,
    navigation_start: TraceEvent,
    candidate: TraceEvent,
    frame_id: str,
) -> tuple[PaintEpoch, PaintEpoch | None]:
    """Advance the fold by one candidate; returns (new state, closed epoch)."""
    closed = None
    if state is not None and state.navigation_start is not navigation_start:
        closed = state
    return PaintEpoch(frame_id, navigation_start, candidate), closed


def select_paint_epochs(
    candidates: Iterable[TraceEvent],
    navigation_index: NavigationIndex,
) -> list[PaintEpoch]:
    """Group candidates by frame and keep the last one per navigation."""
    by_frame: dict[str, list[TraceEvent]] = {}
    for candidate in candidates:
        if candidate.frame_id is None:
            continue
        by_frame.setdefault(candidate.frame_id, []).append(candidate)

    epochs: list[PaintEpoch] = []
    for frame_id, frame_candidates in by_frame.items():
        state: PaintEpoch | None = None
        for candidate in frame_candidates:
            navigation_start = navigation_index.find_last_navigation_start_before(
                frame_id, candidate.start
            )
            if navigation_start is None:
                continue
            state, closed = fold_candidate(state, navigation_start, candidate, frame_id)
            if closed is not None:
                epochs.append(closed)
        if state is not None:
            epochs.append(state)
    return epochs


def paint_candidates(context: RendererContext) -> list[TraceEvent]:
    if context.main_thread is None:
        return []
    return [
        event
        for event in context.main_thread.events
        if event.matches(CATEGORY_LOADING, FIRST_MEANINGFUL_PAINT_CANDIDATE)
    ]


def _cpu_sample(
    context: RendererContext,
    epoch: PaintEpoch,
    navigation_infos: dict[str, object],
) -> MetricSample | None:
    navigation_start = epoch.navigation_start
    candidate = epoch.last_candidate
    if navigation_start.cpu_start is None or candidate.cpu_start is None:
        _LOG.debug(
            "fmp_cpu_sample_skipped pid=%s frame=%s reason=no_cpu_timing",
            context.process.pid,
            epoch.frame_id,
        )
        return None
    cpu_range = Interval.between(navigation_start.cpu_start, candidate.cpu_start)
    return MetricSample(
        value=cpu_time_in_range(context.main_thread, cpu_range),
        diagnostics={
            breakdown_key("FMP"): cpu_time_breakdown(context.main_thread, cpu_range),
            DIAG_START: navigation_start,
            DIAG_END: candidate,
            DIAG_NAVIGATION_INFOS: navigation_infos,
        },
    )


def collect_first_meaningful_paint(context: RendererContext) -> FirstMeaningfulPaintSamples:
    result = FirstMeaningfulPaintSamples()
    for epoch in select_paint_epochs(paint_candidates(context), context.navigation_index):
        navigation_start = epoch.navigation_start
        candidate = epoch.last_candidate
        resolution = context.resolve_main_frame_url(epoch.frame_id, candidate.start)
        if resolution.url is None:
            _LOG.debug(
                "fmp_epoch_dropped pid=%s frame=%s reason=%s",
                context.process.pid,
                epoch.frame_id,
                resolution.drop_reason,
            )
            continue
        url = resolution.url
        wall_range = Interval.between(navigation_start.start, candidate.start)
        network_events = [
            event
            for event in context.process.network_events()
            if wall_range.intersects(event.interval)
        ]
        navigation_infos: dict[str, object] = {
            "url": url,
            "pid": context.process.pid,
            "start": navigation_start.start,
            "fmp": candidate.start,
        }
        result.first_meaningful_paint.append(
            MetricSample(
                value=candidate.start - navigation_start.start,
                diagnostics={
                    breakdown_key("FMP"): wall_clock_breakdown(
                        context.main_thread, network_events, wall_range
                    ),
                    DIAG_START: navigation_start,
                    DIAG_END: candidate,
                    DIAG_NAVIGATION_INFOS: navigation_infos,
                },
            )
        )
        cpu_sample = _cpu_sample(context, epoch, navigation_infos)
        if cpu_sample is not None:
            result.cpu_time_to_first_meaningful_paint.append(cpu_sample)
        result.time_to_interactive.append(
            time_to_interactive_sample(
                context,
                navigation_start=navigation_start,
                first_meaningful_paint=candidate.start,
                url=url,
            )
        )
    return result
