from __future__ import annotations

import pytest

from loadmetrics.errors import FrameIdMismatchError
from loadmetrics.histogram import HistogramSet
from loadmetrics.metric import (
    CPU_TIME_TO_FIRST_MEANINGFUL_PAINT,
    TIME_TO_FIRST_CONTENTFUL_PAINT,
    TIME_TO_FIRST_INTERACTIVE,
    TIME_TO_FIRST_MEANINGFUL_PAINT,
    TIME_TO_ONLOAD,
    collect_loading_metrics_for_renderer,
    loading_metric,
)
from loadmetrics.model.loader import build_trace_model
from tests.loadmetrics.helpers import FRAME, PID, URL, raw_page_load_trace

_EXPECTED = {
    TIME_TO_FIRST_CONTENTFUL_PAINT: 120.0,
    TIME_TO_ONLOAD: 900.0,
    TIME_TO_FIRST_MEANINGFUL_PAINT: 450.0,
    CPU_TIME_TO_FIRST_MEANINGFUL_PAINT: 19.99,
    TIME_TO_FIRST_INTERACTIVE: 2_250.0,
}


def _values(histograms: HistogramSet, name: str) -> list[float]:
    histogram = histograms.get(name)
    assert histogram is not None
    return histogram.values().tolist()


def test_loading_metric_fills_all_histograms_from_raw_trace() -> None:
    model = build_trace_model({"traceEvents": raw_page_load_trace()})
    histograms = loading_metric(HistogramSet(), model)

    assert sorted(histograms.names()) == sorted(_EXPECTED)
    for name, expected in _EXPECTED.items():
        assert _values(histograms, name) == pytest.approx([expected]), name

    interactive = histograms.get(TIME_TO_FIRST_INTERACTIVE)
    assert interactive is not None
    (sample,) = interactive.samples
    assert sample.diagnostics["Navigation infos"]["url"] == URL
    assert sample.diagnostics["Last long task"].duration == pytest.approx(300.0)


def test_renderer_samples_are_grouped_by_metric() -> None:
    model = build_trace_model(raw_page_load_trace())
    samples = collect_loading_metrics_for_renderer(model.processes[PID])
    counts = {name: len(values) for name, values in samples.by_metric().items()}
    assert counts == {name: 1 for name in _EXPECTED}


def test_tracing_ui_process_is_excluded() -> None:
    raw = raw_page_load_trace()
    raw.append(
        {"ph": "M", "pid": PID, "tid": 0, "name": "process_labels", "args": {"labels": "chrome://tracing"}}
    )
    histograms = loading_metric(HistogramSet(), build_trace_model(raw))
    assert len(histograms) == len(_EXPECTED)
    assert all(histogram.count == 0 for histogram in histograms)


def test_parallel_renderers_match_sequential_results() -> None:
    raw = raw_page_load_trace(pid=10) + raw_page_load_trace(pid=11, url="https://other.test/")
    sequential = loading_metric(HistogramSet(), build_trace_model(raw), max_workers=1)
    parallel = loading_metric(HistogramSet(), build_trace_model(raw), max_workers=4)

    for name, expected in _EXPECTED.items():
        assert _values(sequential, name) == pytest.approx([expected, expected])
        assert _values(parallel, name) == pytest.approx(_values(sequential, name))

    onload = parallel.get(TIME_TO_ONLOAD)
    assert onload is not None
    assert [sample.diagnostics["url"] for sample in onload.samples] == [
        URL,
        "https://other.test/",
    ]


def test_frame_id_mismatch_aborts_the_run() -> None:
    raw = raw_page_load_trace()
    raw.append(
        {
            "ph": "O",
            "pid": PID,
            "tid": 1,
            "name": "FrameLoader",
            "id": "0x7001",
            "ts": 1_500_000,
            "args": {"snapshot": {"frame": {"id_ref": FRAME + "ff"}, "documentLoaderURL": URL}},
        }
    )
    with pytest.raises(FrameIdMismatchError):
        loading_metric(HistogramSet(), build_trace_model(raw))


def test_histograms_cannot_be_registered_twice() -> None:
    model = build_trace_model(raw_page_load_trace())
    histograms = loading_metric(HistogramSet(), model)
    with pytest.raises(ValueError):
        loading_metric(histograms, model)
