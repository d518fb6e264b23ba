"""Loading metrics configuration from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip()
    return value if value else default


@dataclass(frozen=True, slots=True)
class LoadingMetricsConfig:
    max_workers: int = 1
    log_level: str = "INFO"
    log_format: str = "text"  # text|json
    log_file: str | None = None
    report_dir: str = "reports"
    include_samples: bool = False


def resolve_log_level_name(default: str = "INFO") -> str:
    """Resolve log level with package-prefixed override."""
    value = os.getenv("LOADMETRICS_LOG_LEVEL")
    if value is None:
        value = os.getenv("LOG_LEVEL", default)
    return value.strip().upper() or default


def load_loading_metrics_config() -> LoadingMetricsConfig:
    log_format = _str("LOADMETRICS_LOG_FORMAT", "text").lower()
    if log_format not in {"text", "json"}:
        log_format = "text"
    log_file = _str("LOADMETRICS_LOG_FILE", "")
    return LoadingMetricsConfig(
        max_workers=max(1, _int("LOADMETRICS_MAX_WORKERS", 1)),
        log_level=resolve_log_level_name(),
        log_format=log_format,
        log_file=log_file or None,
        report_dir=_str("LOADMETRICS_REPORT_DIR", "reports"),
        include_samples=_flag("LOADMETRICS_INCLUDE_SAMPLES", False),
    )
