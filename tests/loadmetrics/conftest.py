from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from loadmetrics.logging import shutdown_logging


@pytest.fixture
def restore_package_logging() -> Iterator[logging.Logger]:
    package_logger = logging.getLogger("loadmetrics")
    original_handlers = list(package_logger.handlers)
    original_level = package_logger.level
    original_propagate = package_logger.propagate
    try:
        yield package_logger
    finally:
        shutdown_logging()
        package_logger.handlers.clear()
        package_logger.handlers.extend(original_handlers)
        package_logger.setLevel(original_level)
        package_logger.propagate = original_propagate
