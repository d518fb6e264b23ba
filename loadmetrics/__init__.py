"""Page-load metrics extracted from browser renderer traces."""

__version__ = "0.1.0"

from loadmetrics.errors import FrameIdMismatchError, LoadingMetricsError, TraceFormatError
from loadmetrics.histogram import Histogram, HistogramSet, MetricSample, loading_bin_boundaries
from loadmetrics.interval import Interval
from loadmetrics.metric import (
    CPU_TIME_TO_FIRST_MEANINGFUL_PAINT,
    TIME_TO_FIRST_CONTENTFUL_PAINT,
    TIME_TO_FIRST_INTERACTIVE,
    TIME_TO_FIRST_MEANINGFUL_PAINT,
    TIME_TO_ONLOAD,
    collect_loading_metrics_for_renderer,
    loading_metric,
)
from loadmetrics.model import TraceModel, build_trace_model, load_trace_file

__all__ = [
    "CPU_TIME_TO_FIRST_MEANINGFUL_PAINT",
    "FrameIdMismatchError",
    "Histogram",
    "HistogramSet",
    "Interval",
    "LoadingMetricsError",
    "MetricSample",
    "TIME_TO_FIRST_CONTENTFUL_PAINT",
    "TIME_TO_FIRST_INTERACTIVE",
    "TIME_TO_FIRST_MEANINGFUL_PAINT",
    "TIME_TO_ONLOAD",
    "TraceFormatError",
    "TraceModel",
    "__version__",
    "build_trace_model",
    "collect_loading_metrics_for_renderer",
    "load_trace_file",
    "loading_metric",
]
