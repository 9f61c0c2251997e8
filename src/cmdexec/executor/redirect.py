"""
Redirection of the standard streams for one simple command.

:class:`SavedStreams` duplicates descriptors 0, 1 and 2 on entry and puts
them back on exit, whatever way the ``with`` block is left.
:func:`apply_redirections` then rebinds the live descriptors to the files
named by the command.  Python's own ``sys.stdout``/``sys.stderr`` buffers
are flushed before every rebind so text written earlier is not carried over
to the new target.
"""

from __future__ import annotations

import os
import sys
from typing import List, Optional

from ..errors import RedirectionError, StreamError
from ..log import get_logger
from ..tree import SimpleCommand
from ..words import Resolver, resolve_word

logger = get_logger("redirect")

STDIN_FILENO = 0
STDOUT_FILENO = 1
STDERR_FILENO = 2
STANDARD_FDS = (STDIN_FILENO, STDOUT_FILENO, STDERR_FILENO)

FILE_MODE = 0o644


def flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        if stream is None:
            continue
        try:
            stream.flush()
        except (OSError, ValueError):
            # Closed or broken stream; there is nothing left to lose.
            logger.debug("Could not flush %r before rebinding", stream)


class SavedStreams:
    """Context manager owning duplicates of the three standard descriptors."""

    def __init__(self) -> None:
        self._saved: List[int] = []

    def __enter__(self) -> "SavedStreams":
        flush_std_streams()
        try:
            for fd in STANDARD_FDS:
                self._saved.append(os.dup(fd))
        except OSError as exc:
            self._close_saved()
            raise StreamError("dup", exc) from exc
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.restore()
            return
        # Keep the exception already in flight (``exit`` included).
        try:
            self.restore()
        except StreamError as restore_error:
            logger.warning("Could not restore standard streams: %s", restore_error)

    def restore(self) -> None:
        """Rebind the saved descriptors and release them.  Idempotent."""
        if not self._saved:
            return
        flush_std_streams()
        failure: Optional[OSError] = None
        for fd, saved in zip(STANDARD_FDS, self._saved):
            try:
                os.dup2(saved, fd)
            except OSError as exc:
                failure = failure or exc
        self._close_saved()
        if failure is not None:
            raise StreamError("dup2", failure)

    def _close_saved(self) -> None:
        for saved in self._saved:
            os.close(saved)
        self._saved = []


def _open_and_bind(path: str, flags: int, targets: tuple) -> None:
    try:
        fd = os.open(path, flags, FILE_MODE)
    except OSError as exc:
        raise RedirectionError(path, "open", exc) from exc
    try:
        for target in targets:
            os.dup2(fd, target)
    except OSError as exc:
        raise RedirectionError(path, "dup2", exc) from exc
    finally:
        os.close(fd)


def _write_flags(append: bool) -> int:
    flags = os.O_WRONLY | os.O_CREAT
    return flags | (os.O_APPEND if append else os.O_TRUNC)


def apply_redirections(simple: SimpleCommand, resolve: Resolver = resolve_word) -> None:
    """Rebind stdin/stdout/stderr as requested by ``simple``.

    Raises
    ------
    RedirectionError
        If a target cannot be opened or bound.  Input is handled first and
        its failure leaves the output streams untouched; an output failure
        does not undo the input binding (the caller's :class:`SavedStreams`
        does).
    """
    flush_std_streams()

    if simple.input is not None:
        path = resolve(simple.input)
        logger.debug("Redirecting stdin from %s", path)
        _open_and_bind(path, os.O_RDONLY, (STDIN_FILENO,))

    if simple.merges_error:
        path = resolve(simple.output)
        logger.debug("Redirecting stdout and stderr to %s", path)
        _open_and_bind(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, (STDOUT_FILENO, STDERR_FILENO))
        return

    if simple.error is not None:
        path = resolve(simple.error)
        logger.debug("Redirecting stderr to %s (append=%s)", path, simple.append_error)
        _open_and_bind(path, _write_flags(simple.append_error), (STDERR_FILENO,))

    if simple.output is not None:
        path = resolve(simple.output)
        logger.debug("Redirecting stdout to %s (append=%s)", path, simple.append_output)
        _open_and_bind(path, _write_flags(simple.append_output), (STDOUT_FILENO,))
