"""Logging setup for HARKA admin services."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Chatty third-party loggers
_QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the process.

    Safe to call repeatedly; later calls only adjust the level.
    """
    root = logging.getLogger()
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    if not any(getattr(h, "_harka", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._harka = True
        root.addHandler(handler)

    root.setLevel(numeric_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
