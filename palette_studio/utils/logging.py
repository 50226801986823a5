"""
Palette Studio Logging Setup
Library modules log through the plain loguru ``logger`` and never touch its
sinks. Applications that want the structured stderr format call
``configure_logging()`` once at startup.
"""
import sys
from typing import Any, Optional

from loguru import logger

from palette_studio.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message} | {extra}"


def configure_logging(level: Optional[str] = None, sink: Any = sys.stderr,
                      serialize: bool = False, replace_handlers: bool = True) -> int:
    """
    Install the structured Palette Studio sink.

    Args:
        level: Minimum level, defaults to config.LOG_LEVEL
        sink: Any loguru sink (stream, path, callable)
        serialize: Emit JSON records instead of the text format
        replace_handlers: Remove existing sinks first, including loguru's default

    Returns:
        Handler id of the added sink, usable with ``logger.remove``
    """
    if replace_handlers:
        logger.remove()

    return logger.add(
        sink,
        format=LOG_FORMAT,
        level=level or config.LOG_LEVEL,
        serialize=serialize
    )
