"""Loading metric report generation/export."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loadmetrics.histogram import HistogramSet
from loadmetrics.json_codec import dumps_bytes
from loadmetrics.schema import LOADMETRICS_REPORT_SCHEMA_VERSION


@dataclass(frozen=True)
class LoadingReport:
    schema_version: str
    generated_at_utc: str
    trace_path: str | None
    histograms: list[dict[str, Any]]


def build_report(
    histograms: HistogramSet,
    *,
    trace_path: Path | None = None,
    include_samples: bool = False,
) -> LoadingReport:
    return LoadingReport(
        schema_version=LOADMETRICS_REPORT_SCHEMA_VERSION,
        generated_at_utc=datetime.now(tz=UTC).isoformat(timespec="milliseconds"),
        trace_path=str(trace_path) if trace_path is not None else None,
        histograms=histograms.as_dicts(include_samples=include_samples),
    )


def report_to_dict(report: LoadingReport) -> dict[str, Any]:
    return {
        "schema_version": report.schema_version,
        "generated_at_utc": report.generated_at_utc,
        "trace_path": report.trace_path,
        "histograms": list(report.histograms),
    }


def export_report(report: LoadingReport, path: Path) -> Path:
    payload = report_to_dict(report)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps_bytes(payload, pretty=True))
    return path


def _fmt(value: float) -> str:
    return f"{value:.1f}" if math.isfinite(value) else "inf"


def render_summary_table(histograms: HistogramSet) -> str:
    lines: list[str] = []
    for histogram in histograms:
        stats = histogram.stats()
        unbounded = stats.count - stats.finite_count
        line = (
            f"{histogram.name} count={stats.count} "
            f"mean={_fmt(stats.mean)} p50={_fmt(stats.p50)} "
            f"p95={_fmt(stats.p95)} max={_fmt(stats.max)}"
        )
        if unbounded:
            line += f" unbounded={unbounded}"
        lines.append(line)
    return "\n".join(lines)
