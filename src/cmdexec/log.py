"""Logger setup for the ``cmdexec`` package.

Engine modules log through children of the ``cmdexec`` logger and never
attach handlers themselves; the hosting application calls
:func:`configure_logging` once.

The engine rebinds descriptor 2 for every command with a ``2>``
redirection, so the handler writes to its own duplicate of the standard
error descriptor taken at configure time.  Log records therefore never
land in a command's redirect targets.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

LOGGER_NAME = "cmdexec"


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def _private_stderr() -> TextIO:
    try:
        fd = os.dup(2)
    except OSError:
        # No stderr to pin; log wherever sys.stderr points.
        return sys.stderr
    return os.fdopen(fd, "w", buffering=1, encoding="utf-8", errors="replace")


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach the package's stream handler and set its level."""
    logger = logging.getLogger(LOGGER_NAME)

    if not logger.handlers:
        handler = logging.StreamHandler(_private_stderr())
        formatter = logging.Formatter("[cmdexec] %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level.upper())
    return logger
