"""Trace Event Format ingestion into the typed trace model.

Validation happens here so the metric algorithms never see half-formed
events: timestamps are converted to milliseconds, categories are parsed,
frame ids are pulled out of their various argument shapes, and events that
cannot be interpreted are skipped with a debug log entry.
"""

from __future__ import annotations

import gzip
import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import orjson

from loadmetrics.errors import RECOVERABLE_INGEST_ERRORS, TraceFormatError, log_recoverable
from loadmetrics.json_codec import loads
from loadmetrics.model.event import (
    EVENT_KIND_ASYNC,
    EVENT_KIND_INSTANT,
    EVENT_KIND_SLICE,
    TraceEvent,
    TraceThread,
    parse_categories,
)
from loadmetrics.model.objects import FrameLoaderRecord, FrameLoaderSnapshot
from loadmetrics.model.process import RendererProcess, TraceModel
from loadmetrics.schema import FRAME_LOADER_OBJECT

_LOG = logging.getLogger("loadmetrics.loader")

_US_PER_MS = 1000.0
_INSTANT_PHASES = frozenset({"I", "i", "R", "n"})
_ASYNC_BEGIN_PHASES = frozenset({"b", "S"})
_ASYNC_END_PHASES = frozenset({"e", "F"})


@dataclass
class _OpenSlice:
    title: str
    categories: frozenset[str]
    start: float
    cpu_start: float | None
    args: dict[str, Any]


@dataclass
class _ProcessDraft:
    name: str | None = None
    labels: list[str] = field(default_factory=list)
    thread_names: dict[int, str] = field(default_factory=dict)
    events: dict[int, list[TraceEvent]] = field(default_factory=lambda: defaultdict(list))
    snapshots: dict[str, list[FrameLoaderSnapshot]] = field(
        default_factory=lambda: defaultdict(list)
    )


def _ms(value: Any) -> float:
    return float(value) / _US_PER_MS


def _optional_ms(value: Any) -> float | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) / _US_PER_MS
    return None


def extract_frame_id(args: Mapping[str, Any]) -> str | None:
    """Frame id from ``args.frame``, ``args.frame.id_ref`` or ``args.data.frame``."""
    frame = args.get("frame")
    if isinstance(frame, str) and frame:
        return frame
    if isinstance(frame, Mapping):
        ref = frame.get("id_ref") or frame.get("id")
        if isinstance(ref, str) and ref:
            return ref
    data = args.get("data")
    if isinstance(data, Mapping):
        nested = data.get("frame")
        if isinstance(nested, str) and nested:
            return nested
    return None


class _TraceBuilder:
    def __init__(self) -> None:
        self._processes: dict[int, _ProcessDraft] = defaultdict(_ProcessDraft)
        self._open_slices: dict[tuple[int, int], list[_OpenSlice]] = defaultdict(list)
        self._open_async: dict[tuple[int, str, str, str], tuple[int, _OpenSlice]] = {}
        self.skipped = 0

    def add(self, raw: Any) -> None:
        if not isinstance(raw, Mapping):
            self.skipped += 1
            return
        try:
            self._dispatch(raw)
        except RECOVERABLE_INGEST_ERRORS:
            self.skipped += 1
            log_recoverable(_LOG, f"trace_event_skipped phase={raw.get('ph')!r} name={raw.get('name')!r}")

    def build(self, metadata: dict[str, object]) -> TraceModel:
        processes: dict[int, RendererProcess] = {}
        for pid, draft in self._processes.items():
            tids = set(draft.events) | set(draft.thread_names)
            threads = [
                TraceThread(
                    pid=pid,
                    tid=tid,
                    name=draft.thread_names.get(tid),
                    events=draft.events.get(tid, ()),
                )
                for tid in sorted(tids)
            ]
            loaders = [
                FrameLoaderRecord(object_id, snapshots)
                for object_id, snapshots in draft.snapshots.items()
            ]
            processes[pid] = RendererProcess(
                pid=pid,
                threads=threads,
                frame_loaders=loaders,
                name=draft.name,
                labels=draft.labels,
            )
        unclosed = sum(len(stack) for stack in self._open_slices.values()) + len(self._open_async)
        if unclosed:
            _LOG.debug("trace_unclosed_slices count=%d", unclosed)
        return TraceModel(processes=processes, metadata=metadata)

    def _dispatch(self, raw: Mapping[str, Any]) -> None:
        phase = str(raw["ph"])
        pid = int(raw.get("pid", 0))
        tid = int(raw.get("tid", 0))
        args = raw.get("args") or {}
        if not isinstance(args, Mapping):
            raise TypeError("args must be an object")
        if phase == "M":
            self._metadata(pid, tid, str(raw.get("name", "")), args)
            return
        if phase == "O":
            self._snapshot(pid, raw, args)
            return
        # End events usually omit the name; they close whatever is open.
        title = str(raw["name"]) if phase != "E" else str(raw.get("name", ""))
        categories = parse_categories(str(raw.get("cat", "")))
        start = _ms(raw["ts"])
        cpu_start = _optional_ms(raw.get("tts"))
        if phase == "X":
            self._append(
                pid,
                tid,
                title=title,
                categories=categories,
                start=start,
                duration=_ms(raw.get("dur", 0)),
                cpu_start=cpu_start,
                cpu_duration=_optional_ms(raw.get("tdur")),
                kind=EVENT_KIND_SLICE,
                args=dict(args),
            )
        elif phase == "B":
            self._open_slices[(pid, tid)].append(
                _OpenSlice(title, categories, start, cpu_start, dict(args))
            )
        elif phase == "E":
            stack = self._open_slices[(pid, tid)]
            if not stack:
                raise ValueError("end event without matching begin")
            opened = stack.pop()
            merged = {**opened.args, **dict(args)}
            self._append(
                pid,
                tid,
                title=opened.title,
                categories=opened.categories,
                start=opened.start,
                duration=start - opened.start,
                cpu_start=opened.cpu_start,
                cpu_duration=(
                    cpu_start - opened.cpu_start
                    if cpu_start is not None and opened.cpu_start is not None
                    else None
                ),
                kind=EVENT_KIND_SLICE,
                args=merged,
            )
        elif phase in _INSTANT_PHASES:
            self._append(
                pid,
                tid,
                title=title,
                categories=categories,
                start=start,
                duration=0.0,
                cpu_start=cpu_start,
                cpu_duration=0.0 if cpu_start is not None else None,
                kind=EVENT_KIND_INSTANT,
                args=dict(args),
            )
        elif phase in _ASYNC_BEGIN_PHASES:
            key = (pid, str(raw.get("cat", "")), self._async_id(raw), title)
            self._open_async[key] = (tid, _OpenSlice(title, categories, start, None, dict(args)))
        elif phase in _ASYNC_END_PHASES:
            key = (pid, str(raw.get("cat", "")), self._async_id(raw), title)
            begin_tid, opened = self._open_async.pop(key)
            self._append(
                pid,
                begin_tid,
                title=opened.title,
                categories=opened.categories,
                start=opened.start,
                duration=start - opened.start,
                cpu_start=None,
                cpu_duration=None,
                kind=EVENT_KIND_ASYNC,
                args={**opened.args, **dict(args)},
            )

    def _append(self, pid: int, tid: int, **fields: Any) -> None:
        if fields["duration"] < 0.0:
            raise ValueError("negative duration")
        args = fields["args"]
        self._processes[pid].events[tid].append(
            TraceEvent(pid=pid, tid=tid, frame_id=extract_frame_id(args), **fields)
        )

    def _metadata(self, pid: int, tid: int, name: str, args: Mapping[str, Any]) -> None:
        draft = self._processes[pid]
        if name == "process_name":
            draft.name = str(args.get("name", "")) or None
        elif name == "process_labels":
            raw_labels = str(args.get("labels", ""))
            draft.labels.extend(label.strip() for label in raw_labels.split(",") if label.strip())
        elif name == "thread_name":
            draft.thread_names[tid] = str(args.get("name", ""))

    def _snapshot(self, pid: int, raw: Mapping[str, Any], args: Mapping[str, Any]) -> None:
        if raw.get("name") != FRAME_LOADER_OBJECT:
            return
        snapshot = args.get("snapshot")
        if not isinstance(snapshot, Mapping):
            raise TypeError("object snapshot without snapshot payload")
        frame_id = extract_frame_id(snapshot)
        if frame_id is None:
            raise ValueError("frame loader snapshot without frame id")
        url = snapshot.get("documentLoaderURL")
        self._processes[pid].snapshots[str(raw["id"])].append(
            FrameLoaderSnapshot(
                ts=_ms(raw["ts"]),
                frame_id=frame_id,
                document_url=str(url) if url is not None else None,
            )
        )

    @staticmethod
    def _async_id(raw: Mapping[str, Any]) -> str:
        if "id" in raw:
            return str(raw["id"])
        id2 = raw.get("id2")
        if isinstance(id2, Mapping):
            return str(id2.get("local") or id2.get("global") or "")
        return ""


def build_trace_model(document: Any) -> TraceModel:
    """Build a ``TraceModel`` from a parsed trace JSON document."""
    metadata: dict[str, object] = {}
    if isinstance(document, Mapping):
        raw_events = document.get("traceEvents")
        if not isinstance(raw_events, list):
            raise TraceFormatError("trace object has no traceEvents list")
        extra = document.get("metadata")
        if isinstance(extra, Mapping):
            metadata = dict(extra)
    elif isinstance(document, list):
        raw_events = document
    else:
        raise TraceFormatError(f"unsupported trace document type: {type(document).__name__}")
    return build_trace_model_from_events(raw_events, metadata=metadata)


def build_trace_model_from_events(
    raw_events: Iterable[Any],
    *,
    metadata: dict[str, object] | None = None,
) -> TraceModel:
    builder = _TraceBuilder()
    count = 0
    for raw in raw_events:
        count += 1
        builder.add(raw)
    model = builder.build(dict(metadata or {}))
    _LOG.info(
        "trace_loaded events=%d skipped=%d processes=%d",
        count,
        builder.skipped,
        len(model.processes),
    )
    return model


def load_trace_file(path: Path) -> TraceModel:
    """Read a ``.json`` or ``.json.gz`` trace file."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise TraceFormatError(f"cannot read trace file {path}: {exc}") from exc
    if path.suffix.lower() == ".gz":
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError) as exc:
            raise TraceFormatError(f"cannot decompress trace file {path}: {exc}") from exc
    try:
        document = loads(raw)
    except orjson.JSONDecodeError as exc:
        raise TraceFormatError(f"trace file {path} is not valid JSON: {exc}") from exc
    return build_trace_model(document)
