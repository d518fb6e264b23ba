"""Trace vocabulary and report schema constants."""

from __future__ import annotations

LOADMETRICS_REPORT_SCHEMA_VERSION = "loadmetrics.report.v1"

CATEGORY_LOADING = "loading"
CATEGORY_USER_TIMING = "blink.user_timing"
CATEGORY_NETLOG = "netlog"

NAVIGATION_START = "navigationStart"
FIRST_CONTENTFUL_PAINT = "firstContentfulPaint"
LOAD_EVENT_START = "loadEventStart"
FIRST_MEANINGFUL_PAINT_CANDIDATE = "firstMeaningfulPaintCandidate"
MARK_AS_MAIN_FRAME = "markAsMainFrame"

FRAME_LOADER_OBJECT = "FrameLoader"
RENDERER_MAIN_THREAD_NAME = "CrRendererMain"
TRACING_UI_LABEL_PREFIX = "chrome://tracing"
INSTRUMENTATION_TITLE_PREFIX = "telemetry.internal."
RESOURCE_LOAD_TITLES: tuple[str, ...] = ("ResourceLoad", "ResourceFetcher::requestResource")

PLUGIN_PLACEHOLDER_URL = "data:text/html,pluginplaceholderdata"
UNREACHABLE_PAGE_URL = "data:text/html,chromewebdata"
IGNORED_URLS: frozenset[str] = frozenset({"about:blank", UNREACHABLE_PAGE_URL})

# Diagnostic bundle keys consumed downstream.
DIAG_START = "Start"
DIAG_END = "End"
DIAG_LAST_LONG_TASK = "Last long task"
DIAG_NAVIGATION_INFOS = "Navigation infos"
DIAG_URL = "url"


def breakdown_key(milestone: str) -> str:
    return f"Breakdown of [navStart, {milestone}]"
