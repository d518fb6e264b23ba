from __future__ import annotations

import argparse
import logging
from pathlib import Path

from loadmetrics import __version__
from loadmetrics.config import LoadingMetricsConfig, load_loading_metrics_config
from loadmetrics.errors import FrameIdMismatchError, TraceFormatError
from loadmetrics.histogram import HistogramSet
from loadmetrics.logging import LoggingConfig, configure_logging, shutdown_logging
from loadmetrics.metric import loading_metric
from loadmetrics.model.loader import load_trace_file
from loadmetrics.report import build_report, export_report, render_summary_table

_LOG = logging.getLogger("loadmetrics.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loadmetrics",
        description="Compute page-load metrics from a browser trace.",
    )
    parser.add_argument("--version", action="store_true", help="Print tool version")
    parser.add_argument(
        "trace",
        type=Path,
        nargs="?",
        default=None,
        help="Trace Event Format JSON file (.json or .json.gz).",
    )
    parser.add_argument(
        "--report-out",
        type=Path,
        default=None,
        help="Optional output path for the metric report JSON.",
    )
    parser.add_argument(
        "--write-report",
        action="store_true",
        help="Write the report under LOADMETRICS_REPORT_DIR when --report-out is not given.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Renderer processes analysed in parallel (default from LOADMETRICS_MAX_WORKERS).",
    )
    parser.add_argument(
        "--include-samples",
        action="store_true",
        help="Embed every sample and its diagnostics in the report.",
    )
    parser.add_argument("--log-level", default=None, help="Override log level.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.version:
        print(f"loadmetrics v{__version__}")
        return 0

    config = load_loading_metrics_config()
    configure_logging(LoggingConfig.from_metrics_config(config, level_name=args.log_level))
    try:
        return _run(args, config)
    finally:
        shutdown_logging()


def _run(args: argparse.Namespace, config: LoadingMetricsConfig) -> int:
    trace_path: Path | None = args.trace
    if trace_path is None:
        print("Missing trace path. Usage: loadmetrics <trace.json> [--report-out report.json]")
        return 2
    if not trace_path.exists():
        print(f"Trace file not found: {trace_path}")
        return 2

    try:
        model = load_trace_file(trace_path)
    except TraceFormatError as exc:
        print(f"Invalid trace: {exc}")
        return 2

    workers = args.workers if args.workers is not None else config.max_workers
    _LOG.info("loadmetrics_run trace=%s workers=%s", trace_path, workers)
    try:
        histograms = loading_metric(HistogramSet(), model, max_workers=max(1, int(workers)))
    except FrameIdMismatchError as exc:
        print(f"Trace data integrity violation: {exc}")
        return 1

    print(render_summary_table(histograms))

    report_out: Path | None = args.report_out
    if report_out is None and args.write_report:
        report_out = Path(config.report_dir) / f"{trace_path.name.split('.')[0]}.loading.json"
    if report_out is not None:
        report = build_report(
            histograms,
            trace_path=trace_path,
            include_samples=bool(args.include_samples or config.include_samples),
        )
        out_path = export_report(report, report_out)
        print(f"report_written={out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
