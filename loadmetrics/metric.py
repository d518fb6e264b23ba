"""Loading metric orchestration across renderer processes."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from loadmetrics.context import RendererContext
from loadmetrics.errors import FrameIdMismatchError
from loadmetrics.first_meaningful_paint import collect_first_meaningful_paint
from loadmetrics.histogram import (
    UNIT_MS_SMALLER_IS_BETTER,
    Histogram,
    HistogramSet,
    MetricSample,
    loading_bin_boundaries,
)
from loadmetrics.model.process import RendererProcess, TraceModel
from loadmetrics.schema import (
    CATEGORY_LOADING,
    CATEGORY_USER_TIMING,
    FIRST_CONTENTFUL_PAINT,
    LOAD_EVENT_START,
)
from loadmetrics.time_to_event import collect_time_to_event

_LOG = logging.getLogger("loadmetrics.metric")

TIME_TO_FIRST_CONTENTFUL_PAINT = "timeToFirstContentfulPaint"
TIME_TO_ONLOAD = "timeToOnload"
TIME_TO_FIRST_MEANINGFUL_PAINT = "timeToFirstMeaningfulPaint"
CPU_TIME_TO_FIRST_MEANINGFUL_PAINT = "cpuTimeToFirstMeaningfulPaint"
TIME_TO_FIRST_INTERACTIVE = "timeToFirstInteractive"

METRIC_DESCRIPTIONS: dict[str, str] = {
    TIME_TO_FIRST_CONTENTFUL_PAINT: "time to first contentful paint",
    TIME_TO_ONLOAD: "time to onload",
    TIME_TO_FIRST_MEANINGFUL_PAINT: "time to first meaningful paint",
    CPU_TIME_TO_FIRST_MEANINGFUL_PAINT: "CPU time to first meaningful paint",
    TIME_TO_FIRST_INTERACTIVE: "time to first interactive",
}


@dataclass(frozen=True, slots=True)
class RendererLoadingSamples:
    pid: int
    first_contentful_paint: list[MetricSample] = field(default_factory=list)
    onload: list[MetricSample] = field(default_factory=list)
    first_meaningful_paint: list[MetricSample] = field(default_factory=list)
    cpu_time_to_first_meaningful_paint: list[MetricSample] = field(default_factory=list)
    time_to_interactive: list[MetricSample] = field(default_factory=list)

    def by_metric(self) -> dict[str, list[MetricSample]]:
        return {
            TIME_TO_FIRST_CONTENTFUL_PAINT: self.first_contentful_paint,
            TIME_TO_ONLOAD: self.onload,
            TIME_TO_FIRST_MEANINGFUL_PAINT: self.first_meaningful_paint,
            CPU_TIME_TO_FIRST_MEANINGFUL_PAINT: self.cpu_time_to_first_meaningful_paint,
            TIME_TO_FIRST_INTERACTIVE: self.time_to_interactive,
        }


def collect_loading_metrics_for_renderer(process: RendererProcess) -> RendererLoadingSamples:
    """Run every collector over one renderer.

    ``FrameIdMismatchError`` propagates: a broken frame-loader record makes
    the renderer's main-frame answers meaningless.
    """
    try:
        context = RendererContext.build(process)
    except FrameIdMismatchError:
        _LOG.exception("renderer_analysis_aborted pid=%s", process.pid)
        raise
    fmp = collect_first_meaningful_paint(context)
    samples = RendererLoadingSamples(
        pid=process.pid,
        first_contentful_paint=collect_time_to_event(
            context, category=CATEGORY_LOADING, title=FIRST_CONTENTFUL_PAINT
        ),
        onload=collect_time_to_event(
            context, category=CATEGORY_USER_TIMING, title=LOAD_EVENT_START
        ),
        first_meaningful_paint=fmp.first_meaningful_paint,
        cpu_time_to_first_meaningful_paint=fmp.cpu_time_to_first_meaningful_paint,
        time_to_interactive=fmp.time_to_interactive,
    )
    _LOG.debug(
        "renderer_analyzed pid=%s counts=%s",
        process.pid,
        {name: len(values) for name, values in samples.by_metric().items()},
    )
    return samples


def analyzable_renderers(model: TraceModel) -> list[RendererProcess]:
    return [process for process in model.renderer_processes() if not process.is_tracing_ui]


def collect_loading_samples(
    model: TraceModel,
    *,
    max_workers: int = 1,
) -> list[RendererLoadingSamples]:
    """Per-renderer samples in renderer pid order."""
    renderers = analyzable_renderers(model)
    if max_workers <= 1 or len(renderers) <= 1:
        return [collect_loading_metrics_for_renderer(process) for process in renderers]
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="loadmetrics") as pool:
        return list(pool.map(collect_loading_metrics_for_renderer, renderers))


def loading_metric(
    histograms: HistogramSet,
    model: TraceModel,
    *,
    max_workers: int = 1,
) -> HistogramSet:
    """Add the five loading histograms for ``model`` to ``histograms``."""
    per_renderer = collect_loading_samples(model, max_workers=max_workers)
    merged: dict[str, list[MetricSample]] = {name: [] for name in METRIC_DESCRIPTIONS}
    for renderer_samples in per_renderer:
        for name, samples in renderer_samples.by_metric().items():
            merged[name].extend(samples)

    boundaries = loading_bin_boundaries()
    for name, description in METRIC_DESCRIPTIONS.items():
        histogram = Histogram(
            name,
            unit=UNIT_MS_SMALLER_IS_BETTER,
            description=description,
            boundaries=boundaries,
        )
        histogram.add_samples(merged[name])
        histograms.add_histogram(histogram)
    _LOG.info(
        "loading_metric_done renderers=%d samples=%s",
        len(per_renderer),
        {name: len(samples) for name, samples in merged.items()},
    )
    return histograms
