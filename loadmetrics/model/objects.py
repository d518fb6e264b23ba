"""Snapshotted frame-loader objects."""

from __future__ import annotations

import bisect
from collections.abc import Iterable
from dataclasses import dataclass

from loadmetrics.errors import FrameIdMismatchError
from loadmetrics.interval import Interval


@dataclass(frozen=True, slots=True)
class FrameLoaderSnapshot:
    ts: float
    frame_id: str
    document_url: str | None = None


class FrameLoaderRecord:
    """All snapshots captured for one frame-loader object, in time order."""

    def __init__(self, object_id: str, snapshots: Iterable[FrameLoaderSnapshot]) -> None:
        self.object_id = str(object_id)
        self._snapshots: tuple[FrameLoaderSnapshot, ...] = tuple(
            sorted(snapshots, key=lambda snapshot: snapshot.ts)
        )
        self._snapshot_ts = [snapshot.ts for snapshot in self._snapshots]

    @property
    def snapshots(self) -> tuple[FrameLoaderSnapshot, ...]:
        return self._snapshots

    @property
    def liveness(self) -> Interval | None:
        if not self._snapshots:
            return None
        return Interval(self._snapshots[0].ts, self._snapshots[-1].ts)

    @property
    def frame_id(self) -> str | None:
        """Frame id shared by every snapshot.

        Raises ``FrameIdMismatchError`` when snapshots disagree.
        """
        if not self._snapshots:
            return None
        frame_ids = tuple(dict.fromkeys(snapshot.frame_id for snapshot in self._snapshots))
        if len(frame_ids) > 1:
            raise FrameIdMismatchError(self.object_id, frame_ids)
        return frame_ids[0]

    def urls(self) -> set[str]:
        return {
            snapshot.document_url
            for snapshot in self._snapshots
            if snapshot.document_url is not None
        }

    def is_alive_at(self, ts: float) -> bool:
        liveness = self.liveness
        return liveness is not None and liveness.contains(ts)

    def snapshot_at(self, ts: float) -> FrameLoaderSnapshot | None:
        index = bisect.bisect_right(self._snapshot_ts, ts) - 1
        if index < 0:
            return None
        return self._snapshots[index]
