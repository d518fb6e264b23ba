from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from loadmetrics.model.event import (
    EVENT_KIND_ASYNC,
    EVENT_KIND_INSTANT,
    EVENT_KIND_SLICE,
    TraceEvent,
    TraceThread,
    parse_categories,
)
from loadmetrics.model.objects import FrameLoaderRecord, FrameLoaderSnapshot
from loadmetrics.model.process import RendererProcess
from loadmetrics.schema import RENDERER_MAIN_THREAD_NAME

PID = 10
MAIN_TID = 1
IO_TID = 2
FRAME = "0xf1"
URL = "https://example.test/"
TASK = "TaskQueueManager::ProcessTaskFromWorkQueue"


def event(
    title: str,
    start: float,
    *,
    category: str = "loading",
    duration: float = 0.0,
    frame_id: str | None = None,
    cpu_start: float | None = None,
    cpu_duration: float | None = None,
    kind: str | None = None,
    tid: int = MAIN_TID,
    pid: int = PID,
) -> TraceEvent:
    if kind is None:
        kind = EVENT_KIND_SLICE if duration > 0.0 else EVENT_KIND_INSTANT
    return TraceEvent(
        title=title,
        categories=parse_categories(category),
        start=float(start),
        duration=float(duration),
        cpu_start=cpu_start,
        cpu_duration=cpu_duration,
        pid=pid,
        tid=tid,
        kind=kind,
        frame_id=frame_id,
        args={"frame": frame_id} if frame_id is not None else {},
    )


def navigation_start(
    start: float, *, frame_id: str = FRAME, cpu_start: float | None = None
) -> TraceEvent:
    return event(
        "navigationStart",
        start,
        category="blink.user_timing,rail",
        frame_id=frame_id,
        cpu_start=cpu_start,
        cpu_duration=0.0 if cpu_start is not None else None,
    )


def main_frame_marker(ts: float, *, frame_id: str = FRAME) -> TraceEvent:
    return event("markAsMainFrame", ts, category="loading", frame_id=frame_id)


def first_contentful_paint(start: float, *, frame_id: str = FRAME) -> TraceEvent:
    return event("firstContentfulPaint", start, category="loading,rail", frame_id=frame_id)


def load_event_start(start: float, *, frame_id: str = FRAME) -> TraceEvent:
    return event("loadEventStart", start, category="blink.user_timing", frame_id=frame_id)


def paint_candidate(
    start: float, *, frame_id: str = FRAME, cpu_start: float | None = None
) -> TraceEvent:
    return event(
        "firstMeaningfulPaintCandidate",
        start,
        category="loading",
        frame_id=frame_id,
        cpu_start=cpu_start,
        cpu_duration=0.0 if cpu_start is not None else None,
    )


def task(
    start: float,
    duration: float,
    *,
    cpu_start: float | None = None,
    cpu_duration: float | None = None,
) -> TraceEvent:
    return event(
        TASK,
        start,
        category="toplevel",
        duration=duration,
        cpu_start=cpu_start,
        cpu_duration=cpu_duration,
    )


def network_request(start: float, duration: float, *, tid: int = IO_TID) -> TraceEvent:
    return event(
        "URLRequest",
        start,
        category="netlog",
        duration=duration,
        kind=EVENT_KIND_ASYNC,
        tid=tid,
    )


def frame_loader(
    object_id: str,
    *,
    frame_id: str = FRAME,
    url: str | None = URL,
    timestamps: Sequence[float] = (0.0, 100_000.0),
) -> FrameLoaderRecord:
    return FrameLoaderRecord(
        object_id,
        [FrameLoaderSnapshot(ts=ts, frame_id=frame_id, document_url=url) for ts in timestamps],
    )


def renderer(
    main_events: Iterable[TraceEvent],
    *,
    frame_loaders: Sequence[FrameLoaderRecord] | None = None,
    other_events: Iterable[TraceEvent] = (),
    pid: int = PID,
    labels: Sequence[str] = (),
) -> RendererProcess:
    """Renderer with a main thread, an IO thread, and one main-frame loader by default."""
    if frame_loaders is None:
        frame_loaders = [frame_loader("0xl1")]
    return RendererProcess(
        pid=pid,
        threads=[
            TraceThread(pid=pid, tid=MAIN_TID, name=RENDERER_MAIN_THREAD_NAME, events=main_events),
            TraceThread(pid=pid, tid=IO_TID, name="Chrome_ChildIOThread", events=other_events),
        ],
        frame_loaders=frame_loaders,
        labels=labels,
    )


def raw_page_load_trace(
    *,
    pid: int = PID,
    frame_id: str = FRAME,
    url: str = URL,
    origin_us: int = 1_000_000,
) -> list[dict[str, Any]]:
    """Trace Event Format events for one navigation; times in microseconds.

    Navigation start at +0 ms, FCP at +120 ms, paint candidates at +300 and
    +450 ms, onload at +900 ms, one long task from +2000 to +2300 ms and a
    trailing task at +9000 ms.
    """

    def ts(ms: float) -> int:
        return origin_us + int(ms * 1000)

    return [
        {"ph": "M", "pid": pid, "tid": 0, "name": "process_name", "args": {"name": "Renderer"}},
        {"ph": "M", "pid": pid, "tid": MAIN_TID, "name": "thread_name", "args": {"name": "CrRendererMain"}},
        {"ph": "M", "pid": pid, "tid": IO_TID, "name": "thread_name", "args": {"name": "Chrome_ChildIOThread"}},
        {
            "ph": "O",
            "pid": pid,
            "tid": MAIN_TID,
            "name": "FrameLoader",
            "id": "0x7001",
            "ts": ts(-5),
            "cat": "disabled-by-default-loading",
            "args": {"snapshot": {"frame": {"id_ref": frame_id}, "documentLoaderURL": url}},
        },
        {
            "ph": "O",
            "pid": pid,
            "tid": MAIN_TID,
            "name": "FrameLoader",
            "id": "0x7001",
            "ts": ts(20_000),
            "cat": "disabled-by-default-loading",
            "args": {"snapshot": {"frame": {"id_ref": frame_id}, "documentLoaderURL": url}},
        },
        {"ph": "R", "pid": pid, "tid": MAIN_TID, "name": "markAsMainFrame", "cat": "loading", "ts": ts(-1), "args": {"frame": frame_id}},
        {"ph": "R", "pid": pid, "tid": MAIN_TID, "name": "navigationStart", "cat": "blink.user_timing", "ts": ts(0), "tts": 500_000, "args": {"frame": frame_id}},
        {"ph": "X", "pid": pid, "tid": MAIN_TID, "name": TASK, "cat": "toplevel", "ts": ts(10), "dur": 40_000, "tts": 500_010, "tdur": 30_000},
        {"ph": "X", "pid": pid, "tid": MAIN_TID, "name": "V8.Execute", "cat": "v8", "ts": ts(15), "dur": 20_000, "tts": 500_015, "tdur": 15_000},
        {"ph": "b", "pid": pid, "tid": IO_TID, "name": "URLRequest", "cat": "netlog", "id": "0x1", "ts": ts(50)},
        {"ph": "e", "pid": pid, "tid": IO_TID, "name": "URLRequest", "cat": "netlog", "id": "0x1", "ts": ts(250)},
        {"ph": "R", "pid": pid, "tid": MAIN_TID, "name": "firstContentfulPaint", "cat": "loading,rail", "ts": ts(120), "args": {"frame": frame_id}},
        {"ph": "R", "pid": pid, "tid": MAIN_TID, "name": "firstMeaningfulPaintCandidate", "cat": "loading", "ts": ts(300), "tts": 510_000, "args": {"frame": frame_id}},
        {"ph": "R", "pid": pid, "tid": MAIN_TID, "name": "firstMeaningfulPaintCandidate", "cat": "loading", "ts": ts(450), "tts": 520_000, "args": {"frame": frame_id}},
        {"ph": "R", "pid": pid, "tid": MAIN_TID, "name": "loadEventStart", "cat": "blink.user_timing", "ts": ts(900), "args": {"frame": frame_id}},
        {"ph": "B", "pid": pid, "tid": MAIN_TID, "name": TASK, "cat": "toplevel", "ts": ts(2_000), "tts": 600_000},
        {"ph": "E", "pid": pid, "tid": MAIN_TID, "ts": ts(2_300), "tts": 600_250},
        {"ph": "X", "pid": pid, "tid": MAIN_TID, "name": TASK, "cat": "toplevel", "ts": ts(9_000), "dur": 5_000},
    ]
