"""Main-frame resolution over frame-loader snapshots."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from loadmetrics.interval import Interval
from loadmetrics.model.event import TraceEvent
from loadmetrics.model.objects import FrameLoaderRecord
from loadmetrics.model.process import RendererProcess
from loadmetrics.schema import CATEGORY_LOADING, MARK_AS_MAIN_FRAME, PLUGIN_PLACEHOLDER_URL

_LOG = logging.getLogger("loadmetrics.frames")


@dataclass(frozen=True, slots=True)
class MainFrameMarker:
    frame_id: str
    ts: float


@dataclass(frozen=True, slots=True)
class MainFrameLiveRange:
    frame_id: str
    interval: Interval


def collect_main_frame_markers(events: Iterable[TraceEvent]) -> list[MainFrameMarker]:
    return [
        MainFrameMarker(frame_id=event.frame_id, ts=event.start)
        for event in events
        if event.frame_id is not None and event.matches(CATEGORY_LOADING, MARK_AS_MAIN_FRAME)
    ]


class MainFrameResolver:
    """Answers "is this frame the main frame at T" and "what URL is loading".

    Built once per renderer and immutable afterwards. Construction raises
    ``FrameIdMismatchError`` if a frame-loader record reports more than one
    frame id.
    """

    def __init__(
        self,
        frame_loaders: Sequence[FrameLoaderRecord],
        markers: Sequence[MainFrameMarker],
    ) -> None:
        loaders = tuple(loader for loader in frame_loaders if loader.snapshots)
        # Latest-started loader first; ties keep record order.
        self._loaders_by_recency: tuple[FrameLoaderRecord, ...] = tuple(
            loader
            for _, loader in sorted(
                enumerate(loaders),
                key=lambda item: (-item[1].snapshots[0].ts, item[0]),
            )
        )
        self._live_ranges = tuple(self._build_live_ranges(loaders, markers))
        _LOG.debug(
            "main_frame_resolver_built loaders=%d markers=%d live_ranges=%d",
            len(loaders),
            len(markers),
            len(self._live_ranges),
        )

    @classmethod
    def for_process(cls, process: RendererProcess) -> MainFrameResolver:
        return cls(
            process.frame_loaders,
            collect_main_frame_markers(process.iter_descendant_events()),
        )

    @property
    def live_ranges(self) -> tuple[MainFrameLiveRange, ...]:
        return self._live_ranges

    def is_main_frame(self, frame_id: str, ts: float) -> bool:
        return any(
            live_range.frame_id == frame_id and live_range.interval.contains(ts)
            for live_range in self._live_ranges
        )

    def url_at(self, frame_id: str, ts: float) -> str | None:
        for loader in self._loaders_by_recency:
            if not loader.is_alive_at(ts):
                continue
            snapshot = loader.snapshot_at(ts)
            if snapshot is not None and snapshot.frame_id == frame_id:
                return snapshot.document_url
        return None

    @staticmethod
    def _build_live_ranges(
        loaders: Sequence[FrameLoaderRecord],
        markers: Sequence[MainFrameMarker],
    ) -> list[MainFrameLiveRange]:
        out: list[MainFrameLiveRange] = []
        for loader in loaders:
            frame_id = loader.frame_id
            liveness = loader.liveness
            if frame_id is None or liveness is None:
                continue
            marked = any(
                marker.frame_id == frame_id and liveness.contains(marker.ts) for marker in markers
            )
            if not marked:
                continue
            if PLUGIN_PLACEHOLDER_URL in loader.urls():
                continue
            out.append(MainFrameLiveRange(frame_id=frame_id, interval=liveness))
        return out
