"""CLI logging: key=value console lines and an optional JSON-lines run log.

Every logger in the package emits ``event_name key=value ...`` messages.
The JSON file formatter splits off the event name so run logs can be
filtered by event without parsing the message text.
"""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from datetime import UTC, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path

from loadmetrics.config import LoadingMetricsConfig
from loadmetrics.json_codec import dumps_text

_PACKAGE_LOGGER = "loadmetrics"
_QUEUE_LISTENER: QueueListener | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: int
    console_json: bool
    run_log: Path | None

    @classmethod
    def from_metrics_config(
        cls,
        config: LoadingMetricsConfig,
        *,
        level_name: str | None = None,
    ) -> LoggingConfig:
        """Resolve handler settings; ``level_name`` is the CLI override."""
        name = (level_name or config.log_level).strip().upper()
        level = logging.getLevelNamesMapping().get(name, logging.INFO)
        return cls(
            level=level,
            console_json=config.log_format == "json",
            run_log=Path(config.log_file) if config.log_file else None,
        )


class JsonFormatter(logging.Formatter):
    """One JSON object per record; the first message token becomes ``event``."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        event = message.partition(" ")[0]
        payload: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "event": None if "=" in event else event,
            "msg": message,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return dumps_text(payload)


def configure_logging(config: LoggingConfig) -> None:
    """Attach handlers to the ``loadmetrics`` logger.

    The run log is written from a queue listener thread so renderer worker
    threads never block on file IO.
    """
    global _QUEUE_LISTENER

    shutdown_logging()
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.setLevel(config.level)
    package_logger.propagate = False

    console = logging.StreamHandler()
    console.setFormatter(
        JsonFormatter()
        if config.console_json
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    package_logger.addHandler(console)

    if config.run_log is None:
        return
    config.run_log.parent.mkdir(parents=True, exist_ok=True)
    run_log = logging.FileHandler(config.run_log, mode="a", encoding="utf-8", delay=True)
    run_log.setFormatter(JsonFormatter())
    log_queue: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    package_logger.addHandler(QueueHandler(log_queue))
    _QUEUE_LISTENER = QueueListener(log_queue, run_log)
    _QUEUE_LISTENER.start()


def shutdown_logging() -> None:
    """Flush and stop the run-log listener if one is running."""
    global _QUEUE_LISTENER

    if _QUEUE_LISTENER is None:
        return
    _QUEUE_LISTENER.stop()
    for handler in _QUEUE_LISTENER.handlers:
        handler.close()
    _QUEUE_LISTENER = None
