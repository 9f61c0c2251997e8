"""
Concurrent execution of two subtrees in forked child processes.

Each child re-enters the evaluator on its own subtree and ends with
:func:`os._exit`, using the subtree's status as its exit status; it never
returns into the parent's call stack.  The parent always reaps every child
it started before returning, so no branch outlives the operator that
launched it.

Python's stdio buffers are flushed before each fork so that pending output
is written once, by the parent, instead of once per process.
"""

from __future__ import annotations

import os
from functools import partial
from typing import Callable, List, NoReturn, Optional

from ..errors import InvalidCommandTree, SpawnError
from ..log import get_logger
from ..tree import CommandNode, ExitStatus
from .base import report, wait_for
from .redirect import STDIN_FILENO, STDOUT_FILENO, flush_std_streams

logger = get_logger("orchestrator")

Evaluate = Callable[[CommandNode], int]


def _exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return ExitStatus.SUCCESS
    if isinstance(exc.code, int):
        return exc.code
    return ExitStatus.FAILURE


def _child_main(node: CommandNode, evaluate: Evaluate, setup: Optional[Callable[[], None]]) -> NoReturn:
    status: int = ExitStatus.FAILURE
    try:
        if setup is not None:
            setup()
        status = evaluate(node)
    except SystemExit as exc:
        status = _exit_code(exc)
    except InvalidCommandTree as exc:
        report(str(exc))
        status = ExitStatus.INVALID_TREE
    except Exception as exc:
        report(f"child {os.getpid()}: {exc}")
        status = ExitStatus.FAILURE
    finally:
        flush_std_streams()
        os._exit(int(status) & 0xFF)


def spawn_branch(node: CommandNode, evaluate: Evaluate, setup: Optional[Callable[[], None]] = None) -> int:
    """Fork a child that runs ``setup`` then evaluates ``node``.

    Returns the child's pid in the parent.  Raises :class:`SpawnError` if
    the fork fails.
    """
    flush_std_streams()
    try:
        pid = os.fork()
    except OSError as exc:
        raise SpawnError("fork", exc) from exc
    if pid == 0:
        _child_main(node, evaluate, setup)
    logger.debug("Forked child %s", pid)
    return pid


def _reap(pids: List[int]) -> Optional[List[int]]:
    """Wait for every pid; ``None`` if any of them could not be waited for."""
    statuses: List[int] = []
    failed = False
    for pid in pids:
        try:
            statuses.append(wait_for(pid))
        except ChildProcessError as exc:
            logger.warning("Could not wait for child %s: %s", pid, exc)
            failed = True
    return None if failed else statuses


def _bind_pipe_end(keep: int, target: int, unused: int) -> None:
    os.close(unused)
    os.dup2(keep, target)
    os.close(keep)


def run_parallel(left: CommandNode, right: CommandNode, evaluate: Evaluate) -> int:
    """Run both subtrees at once and wait for both.

    Returns 0 when both children were started and reaped, 1 otherwise.
    The children's own statuses are not reported.
    """
    pids: List[int] = []
    try:
        for node in (left, right):
            pids.append(spawn_branch(node, evaluate))
    except SpawnError as exc:
        logger.warning("Parallel launch failed: %s", exc)
        report(str(exc))
        _reap(pids)
        return ExitStatus.FAILURE

    statuses = _reap(pids)
    if statuses is None:
        return ExitStatus.FAILURE
    logger.debug("Parallel children %s finished with %s", pids, statuses)
    return ExitStatus.SUCCESS


def run_pipe(left: CommandNode, right: CommandNode, evaluate: Evaluate) -> int:
    """Run ``left | right`` and return the status of ``right``."""
    try:
        read_fd, write_fd = os.pipe()
    except OSError as exc:
        logger.warning("Could not create pipe: %s", exc)
        report(str(SpawnError("pipe", exc)))
        return ExitStatus.FAILURE

    pids: List[int] = []
    launch_error: Optional[SpawnError] = None
    try:
        pids.append(spawn_branch(left, evaluate, partial(_bind_pipe_end, write_fd, STDOUT_FILENO, read_fd)))
        pids.append(spawn_branch(right, evaluate, partial(_bind_pipe_end, read_fd, STDIN_FILENO, write_fd)))
    except SpawnError as exc:
        launch_error = exc
    finally:
        # The reader only sees end-of-stream once every write end is closed.
        os.close(read_fd)
        os.close(write_fd)

    statuses = _reap(pids)
    if launch_error is not None:
        logger.warning("Pipeline launch failed: %s", launch_error)
        report(str(launch_error))
        return ExitStatus.FAILURE
    if statuses is None:
        return ExitStatus.FAILURE
    logger.debug("Pipeline children %s finished with %s", pids, statuses)
    return statuses[-1]
