"""Generic "time from navigation start to milestone" collection."""

from __future__ import annotations

import logging
from collections import Counter

from loadmetrics.context import (
    DROP_INTERNAL_EVENT,
    DROP_NO_FRAME,
    DROP_NO_NAVIGATION_START,
    RendererContext,
)
from loadmetrics.histogram import MetricSample
from loadmetrics.schema import DIAG_URL

_LOG = logging.getLogger("loadmetrics.time_to_event")


def collect_time_to_event(
    context: RendererContext,
    *,
    category: str,
    title: str,
) -> list[MetricSample]:
    """One sample per main-frame milestone attributable to a navigation."""
    samples: list[MetricSample] = []
    dropped: Counter[str] = Counter()
    process = context.process
    for event in process.iter_descendant_events():
        if not event.matches(category, title):
            continue
        if process.is_internal_event(event):
            dropped[DROP_INTERNAL_EVENT] += 1
            continue
        if event.frame_id is None:
            dropped[DROP_NO_FRAME] += 1
            continue
        resolution = context.resolve_main_frame_url(event.frame_id, event.start)
        if resolution.url is None:
            dropped[resolution.drop_reason or DROP_NO_FRAME] += 1
            continue
        navigation_start = context.navigation_index.find_last_navigation_start_before(
            event.frame_id, event.start
        )
        if navigation_start is None:
            dropped[DROP_NO_NAVIGATION_START] += 1
            continue
        samples.append(
            MetricSample(
                value=event.start - navigation_start.start,
                diagnostics={DIAG_URL: resolution.url},
            )
        )
    if dropped:
        _LOG.debug(
            "time_to_event_dropped pid=%s milestone=%s emitted=%d dropped=%s",
            process.pid,
            title,
            len(samples),
            dict(dropped),
        )
    return samples
