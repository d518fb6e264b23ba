"""Attribute time in a range to categories of renderer work."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from loadmetrics.interval import Interval, merge_intervals
from loadmetrics.model.event import TraceEvent, TraceThread

BreakdownTree = dict[str, float]

IDLE = "idle"
NETWORK = "network"
OTHER = "other"

_TITLE_CATEGORIES: dict[str, str] = {
    "V8.Execute": "script_execute",
    "v8.callFunction": "script_execute",
    "v8.run": "script_execute",
    "FunctionCall": "script_execute",
    "EvaluateScript": "script_execute",
    "TimerFire": "script_execute",
    "EventDispatch": "script_execute",
    "FireAnimationFrame": "script_execute",
    "v8.compile": "script_parse_and_compile",
    "v8.compileModule": "script_parse_and_compile",
    "v8.parseOnBackground": "script_parse_and_compile",
    "V8.ScriptCompiler": "script_parse_and_compile",
    "MajorGC": "garbage_collection",
    "MinorGC": "garbage_collection",
    "UpdateLayoutTree": "style",
    "Document::updateStyle": "style",
    "RecalculateStyles": "style",
    "Layout": "layout",
    "FrameView::layout": "layout",
    "UpdateLayerTree": "layout",
    "ParseHTML": "parse_html",
    "Paint": "paint",
    "PaintImage": "paint",
    "CompositeLayers": "composite",
    "UpdateLayer": "composite",
    "ResourceFetcher::requestResource": "resource_loading",
}

_PREFIX_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("V8.GC", "garbage_collection"),
    ("BlinkGC.", "garbage_collection"),
    ("HTMLDocumentParser::", "parse_html"),
    ("V8.Compile", "script_parse_and_compile"),
)


def categorize(title: str) -> str:
    category = _TITLE_CATEGORIES.get(title)
    if category is not None:
        return category
    for prefix, prefix_category in _PREFIX_CATEGORIES:
        if title.startswith(prefix):
            return prefix_category
    return OTHER


def _add(tree: BreakdownTree, key: str, value: float) -> None:
    if value > 0.0:
        tree[key] = tree.get(key, 0.0) + value


def _attribute_wall(
    thread: TraceThread, event: TraceEvent, interval: Interval, tree: BreakdownTree
) -> float:
    own = interval.clipped_duration(event.start, event.end)
    if own <= 0.0:
        return 0.0
    covered_by_children = 0.0
    for child in thread.children_of(event):
        covered_by_children += _attribute_wall(thread, child, interval, tree)
    _add(tree, categorize(event.title), own - covered_by_children)
    return own


def _attribute_cpu(
    thread: TraceThread, event: TraceEvent, interval: Interval, tree: BreakdownTree
) -> float:
    cpu_end = event.cpu_end
    if event.cpu_start is None or cpu_end is None:
        return 0.0
    own = interval.clipped_duration(event.cpu_start, cpu_end)
    if own <= 0.0:
        return 0.0
    covered_by_children = 0.0
    for child in thread.children_of(event):
        covered_by_children += _attribute_cpu(thread, child, interval, tree)
    _add(tree, categorize(event.title), own - covered_by_children)
    return own


def _uncovered(targets: Sequence[Interval], busy: Sequence[Interval]) -> float:
    """Measure of ``targets`` not overlapped by ``busy``; both merged and sorted."""
    total = 0.0
    for target in targets:
        remaining = target.duration
        for block in busy:
            if block.start > target.end:
                break
            overlap = target.intersection(block)
            if overlap is not None:
                remaining -= overlap.duration
        total += max(0.0, remaining)
    return total


def wall_clock_breakdown(
    thread: TraceThread | None,
    network_events: Iterable[TraceEvent],
    interval: Interval,
) -> BreakdownTree:
    """Self time per category, plus idle time split into network and idle."""
    tree: BreakdownTree = {}
    busy: list[Interval] = []
    if thread is not None:
        for event in thread.top_level_slices:
            clipped = interval.intersection(event.interval)
            if clipped is None:
                continue
            _attribute_wall(thread, event, interval, tree)
            busy.append(clipped)
    merged_busy = merge_intervals(busy)
    idle_total = max(0.0, interval.duration - sum(item.duration for item in merged_busy))
    network = merge_intervals(
        clipped
        for clipped in (interval.intersection(event.interval) for event in network_events)
        if clipped is not None
    )
    network_idle = min(idle_total, _uncovered(network, merged_busy))
    _add(tree, NETWORK, network_idle)
    _add(tree, IDLE, idle_total - network_idle)
    return tree


def cpu_time_breakdown(thread: TraceThread | None, cpu_interval: Interval) -> BreakdownTree:
    """Self CPU time per category inside a thread-clock interval."""
    tree: BreakdownTree = {}
    if thread is None:
        return tree
    for event in thread.top_level_slices:
        _attribute_cpu(thread, event, cpu_interval, tree)
    return tree


def cpu_time_in_range(thread: TraceThread | None, cpu_interval: Interval) -> float:
    """Sum of top-level slice CPU durations clipped to ``cpu_interval``."""
    if thread is None:
        return 0.0
    total = 0.0
    for event in thread.top_level_slices:
        cpu_end = event.cpu_end
        if event.cpu_start is None or cpu_end is None:
            continue
        total += cpu_interval.clipped_duration(event.cpu_start, cpu_end)
    return total
