"""Typed in-memory trace model and its ingestion boundary."""

from loadmetrics.model.event import (
    EVENT_KIND_ASYNC,
    EVENT_KIND_INSTANT,
    EVENT_KIND_SLICE,
    TraceEvent,
    TraceThread,
    parse_categories,
)
from loadmetrics.model.loader import (
    build_trace_model,
    build_trace_model_from_events,
    extract_frame_id,
    load_trace_file,
)
from loadmetrics.model.objects import FrameLoaderRecord, FrameLoaderSnapshot
from loadmetrics.model.process import RendererProcess, TraceModel

__all__ = [
    "EVENT_KIND_ASYNC",
    "EVENT_KIND_INSTANT",
    "EVENT_KIND_SLICE",
    "FrameLoaderRecord",
    "FrameLoaderSnapshot",
    "RendererProcess",
    "TraceEvent",
    "TraceModel",
    "TraceThread",
    "build_trace_model",
    "build_trace_model_from_events",
    "extract_frame_id",
    "load_trace_file",
    "parse_categories",
]
