"""Logging utilities for terratin."""

import logging
import json
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class StructuredLogger:
    """Logger that adds structured context to messages."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def debug(self, msg: str, **context):
        """Log debug message with structured context."""
        self._log(logging.DEBUG, msg, **context)

    def info(self, msg: str, **context):
        """Log info message with structured context."""
        self._log(logging.INFO, msg, **context)

    def warning(self, msg: str, **context):
        """Log warning message with structured context."""
        self._log(logging.WARNING, msg, **context)

    def error(self, msg: str, **context):
        """Log error message with structured context."""
        self._log(logging.ERROR, msg, **context)

    def _log(self, level: int, msg: str, **context):
        """Internal method to format and log messages."""
        if context:
            msg = f"{msg} | {json.dumps(context, default=str)}"
        self.logger.log(level, msg)


def configure_logging(level: Optional[str] = None, verbose: bool = False) -> None:
    """
    Install a stream handler on the terratin logger.

    Library modules only create loggers; applications call this once.

    Args:
        level: Level name such as "INFO"; overrides verbose
        verbose: Use DEBUG instead of the default WARNING
    """
    if level is None:
        level = "DEBUG" if verbose else "WARNING"

    root = logging.getLogger("terratin")
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # Replace a handler from an earlier call, it may hold a stale stream
    for handler in [h for h in root.handlers if getattr(h, "_terratin", False)]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    handler._terratin = True
    root.addHandler(handler)

