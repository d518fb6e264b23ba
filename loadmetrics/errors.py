"""Exception hierarchy and tolerated-error helpers."""

from __future__ import annotations

import logging
from typing import TypeAlias


class LoadingMetricsError(RuntimeError):
    """Base class for loading metric failures."""


class TraceFormatError(LoadingMetricsError, ValueError):
    """Raised when a trace document cannot be turned into a model."""


class FrameIdMismatchError(LoadingMetricsError):
    """Raised when one frame-loader record reports more than one frame id."""

    def __init__(self, object_id: str, frame_ids: tuple[str, ...]) -> None:
        super().__init__(
            f"frame loader {object_id} changed frame id across snapshots: {', '.join(frame_ids)}"
        )
        self.object_id = object_id
        self.frame_ids = frame_ids


# Explicitly bounded set for skipping one malformed raw trace event.
RecoverableIngestErrors: TypeAlias = tuple[type[BaseException], ...]
RECOVERABLE_INGEST_ERRORS: RecoverableIngestErrors = (
    KeyError,
    TypeError,
    ValueError,
)


def log_recoverable(
    logger: logging.Logger,
    message: str,
    *,
    level: int = logging.DEBUG,
) -> None:
    """Emit structured observability for tolerated recoverable exceptions."""
    logger.log(level, message, exc_info=True)
