from __future__ import annotations

from loadmetrics.model.event import TraceThread
from loadmetrics.navigation import NavigationIndex
from tests.loadmetrics.helpers import FRAME, MAIN_TID, PID, event, navigation_start


def test_navigation_index_groups_by_frame_and_ignores_other_categories() -> None:
    first = navigation_start(100.0)
    other = navigation_start(150.0, frame_id="0xf2")
    index = NavigationIndex.from_events(
        [first, other, event("navigationStart", 120.0, category="loading", frame_id=FRAME)]
    )
    assert index.find_last_navigation_start_before(FRAME, 200.0) is first
    assert index.find_last_navigation_start_before("0xf2", 200.0) is other
    assert index.find_last_navigation_start_before("0xmissing", 200.0) is None


def test_find_last_navigation_start_before_is_inclusive() -> None:
    first = navigation_start(100.0)
    second = navigation_start(300.0)
    index = NavigationIndex.from_events([second, first])
    assert index.find_last_navigation_start_before(FRAME, 50.0) is None
    assert index.find_last_navigation_start_before(FRAME, 100.0) is first
    assert index.find_last_navigation_start_before(FRAME, 299.0) is first
    assert index.find_last_navigation_start_before(FRAME, 300.0) is second
    assert index.find_last_navigation_start_before("0xother", 300.0) is None


def test_equal_navigation_starts_resolve_to_last_arrival() -> None:
    early = navigation_start(100.0)
    late = navigation_start(100.0)
    index = NavigationIndex.from_events([early, late])
    assert index.find_last_navigation_start_before(FRAME, 120.0) is late


def test_navigation_index_for_thread_handles_missing_thread() -> None:
    assert NavigationIndex.for_thread(None).find_last_navigation_start_before(FRAME, 10.0) is None
    thread = TraceThread(pid=PID, tid=MAIN_TID, events=[navigation_start(10.0)])
    found = NavigationIndex.for_thread(thread).find_last_navigation_start_before(FRAME, 10.0)
    assert found is not None and found.start == 10.0
