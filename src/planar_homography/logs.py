"""Loguru sink setup driven by :class:`LoggingConfig`."""

from __future__ import annotations

import sys

from loguru import logger

from planar_homography.config import LoggingConfig


def configure_logging(config: LoggingConfig) -> int:
    """Replace existing loguru sinks with the one described by ``config``.

    Returns the id of the new sink so callers can remove it again.
    """
    logger.remove()
    output = config.output.lower()
    if output == "stdout":
        sink = sys.stdout
    elif output == "stderr":
        sink = sys.stderr
    else:
        sink = config.output
    sink_id = logger.add(sink, level=config.level)
    logger.debug(f"Logging configured: level={config.level} output={config.output}")
    return sink_id
