"""loguru configuration for command-line runs."""

from __future__ import annotations

import sys
from typing import Any

from loguru import logger

LOG_FORMAT = "{time:HH:mm:ss} | {level: <8} | {name}:{line} - {message}"


def _stderr_sink(message: Any) -> None:
    # Resolved per message so redirected stderr (tests, pipes) is honoured.
    sys.stderr.write(str(message))


def configure_logging(level: str = "WARNING", sink: Any = None) -> int:
    """Replace the default handler with a single sink; returns the handler id."""

    logger.remove()
    return logger.add(
        sink=sink or _stderr_sink,
        level=level.upper(),
        format=LOG_FORMAT,
        diagnose=False,
        backtrace=False,
    )
