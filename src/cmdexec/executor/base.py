"""
Shared helpers for the execution engine.

External programs are started with :mod:`subprocess` and inherit the
process's descriptors 0, 1 and 2 as they are at that moment, so any
redirection already applied by the caller is in effect for the child.
Exit statuses are normalised to the conventional 0-255 range: a program
killed by signal ``N`` reports ``128 + N``.

Diagnostics go straight to descriptor 2 with :func:`os.write` rather than
through ``sys.stderr``; they therefore follow the command's own stderr
redirection, as a shell's error messages do.
"""

from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass
from typing import Sequence

from ..log import get_logger
from ..tree import ExitStatus

logger = get_logger("executor")


@dataclass
class ExecutionResult:
    """Result of running a command tree in an isolated worker.

    Attributes
    ----------
    stdout: str
        Everything the tree wrote to standard output.
    stderr: str
        Everything the tree wrote to standard error, diagnostics included.
    exit_code: int
        Final status of the tree.  Zero usually indicates success.
    duration_ms: int
        Wall‑clock execution time in milliseconds.
    """

    stdout: str
    stderr: str
    exit_code: int
    duration_ms: int


def report(message: str) -> None:
    """Write a one-line diagnostic to the current standard error descriptor."""
    data = f"cmdexec: {message}\n".encode("utf-8", errors="replace")
    try:
        os.write(2, data)
    except OSError:
        logger.warning("Could not write diagnostic: %s", message)


def normalize_status(code: int) -> int:
    """Map a Popen-style return code onto an 8-bit shell status."""
    if code < 0:
        code = 128 - code
    return code & 0xFF


def decode_wait_status(status: int) -> int:
    """Turn a raw :func:`os.waitpid` status into an 8-bit shell status."""
    return normalize_status(os.waitstatus_to_exitcode(status))


def wait_for(pid: int) -> int:
    """Block until child ``pid`` terminates and return its shell status."""
    _, status = os.waitpid(pid, 0)
    return decode_wait_status(status)


def run_external(argv: Sequence[str]) -> int:
    """Run ``argv`` as an external program and wait for it.

    Returns the program's status, or :attr:`ExitStatus.COMMAND_NOT_FOUND`
    if it cannot be located or executed.
    """
    start_time = time.perf_counter()
    try:
        process = subprocess.Popen(list(argv))
    except OSError as exc:
        # Missing, not executable, bad format: all reported the same way.
        logger.debug("Cannot execute %s: %s", argv[0], exc)
        report(f"{argv[0]}: command not found")
        return ExitStatus.COMMAND_NOT_FOUND

    returncode = process.wait()
    duration = int((time.perf_counter() - start_time) * 1000)
    status = normalize_status(returncode)
    logger.debug("%s exited with %s after %sms", argv[0], status, duration)
    return status
