"""Per-renderer registries shared by every metric collector."""

from __future__ import annotations

from dataclasses import dataclass

from loadmetrics.frames import MainFrameResolver
from loadmetrics.model.event import TraceThread
from loadmetrics.model.process import RendererProcess
from loadmetrics.navigation import NavigationIndex
from loadmetrics.schema import IGNORED_URLS

DROP_NO_FRAME = "no_frame"
DROP_NOT_MAIN_FRAME = "not_main_frame"
DROP_NO_URL = "no_url"
DROP_IGNORED_URL = "ignored_url"
DROP_NO_NAVIGATION_START = "no_navigation_start"
DROP_INTERNAL_EVENT = "internal_event"


@dataclass(frozen=True, slots=True)
class UrlResolution:
    url: str | None
    drop_reason: str | None = None


@dataclass(frozen=True, slots=True)
class RendererContext:
    """Immutable navigation index and frame resolver for one renderer."""

    process: RendererProcess
    main_thread: TraceThread | None
    navigation_index: NavigationIndex
    frame_resolver: MainFrameResolver

    @classmethod
    def build(cls, process: RendererProcess) -> RendererContext:
        main_thread = process.main_thread
        return cls(
            process=process,
            main_thread=main_thread,
            navigation_index=NavigationIndex.for_thread(main_thread),
            frame_resolver=MainFrameResolver.for_process(process),
        )

    def resolve_main_frame_url(self, frame_id: str, ts: float) -> UrlResolution:
        """URL loading in ``frame_id`` at ``ts`` if it is the main frame and reportable."""
        if not self.frame_resolver.is_main_frame(frame_id, ts):
            return UrlResolution(None, DROP_NOT_MAIN_FRAME)
        url = self.frame_resolver.url_at(frame_id, ts)
        if url is None:
            return UrlResolution(None, DROP_NO_URL)
        if url in IGNORED_URLS:
            return UrlResolution(None, DROP_IGNORED_URL)
        return UrlResolution(url)
