"""
Run a command tree in a throwaway worker process.

The engine changes the working directory, the environment and the standard
descriptors of the process it runs in, and ``exit`` ends that process.  A
long-lived host (such as the HTTP service) therefore evaluates each tree in
a forked worker: the worker moves into ``work_dir``, reads standard input
from the supplied text, writes its output to capture files and evaluates
the tree.  The parent waits for it and collects the captured output into an
:class:`~cmdexec.executor.base.ExecutionResult`.
"""

from __future__ import annotations

import os
import tempfile
import time
from functools import partial
from pathlib import Path
from typing import Optional

from ..log import get_logger
from ..tree import CommandNode
from ..words import Resolver, resolve_word
from .base import ExecutionResult, wait_for
from .evaluator import evaluate
from .orchestrator import spawn_branch
from .redirect import STDERR_FILENO, STDIN_FILENO, STDOUT_FILENO

logger = get_logger("isolated")


def _prepare_worker(work_dir: Path, stdin_path: str, stdout_path: str, stderr_path: str) -> None:
    os.chdir(work_dir)
    for path, flags, target in (
        (stdin_path, os.O_RDONLY, STDIN_FILENO),
        (stdout_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, STDOUT_FILENO),
        (stderr_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, STDERR_FILENO),
    ):
        fd = os.open(path, flags, 0o600)
        os.dup2(fd, target)
        os.close(fd)


def run_isolated(
    node: CommandNode,
    work_dir: Path,
    stdin_data: Optional[str] = None,
    resolve: Resolver = resolve_word,
) -> ExecutionResult:
    """Evaluate ``node`` in a worker process rooted at ``work_dir``.

    Parameters
    ----------
    node: CommandNode
        Tree to evaluate.
    work_dir: Path
        Working directory of the worker.  Created if missing.
    stdin_data: str, optional
        Text supplied on standard input.  Standard input is empty otherwise.
    resolve: callable, optional
        Word resolver passed to the evaluator.

    Returns
    -------
    ExecutionResult
        Captured stdout and stderr, the tree's exit status and the
        wall‑clock duration.
    """
    work_dir.mkdir(parents=True, exist_ok=True)
    start_time = time.perf_counter()

    with tempfile.TemporaryDirectory(prefix="cmdexec-io-") as io_dir:
        stdin_path = os.path.join(io_dir, "stdin")
        stdout_path = os.path.join(io_dir, "stdout")
        stderr_path = os.path.join(io_dir, "stderr")
        Path(stdin_path).write_text(stdin_data or "", encoding="utf-8")
        # Present even if the worker fails before opening them.
        Path(stdout_path).touch()
        Path(stderr_path).touch()

        setup = partial(_prepare_worker, work_dir, stdin_path, stdout_path, stderr_path)
        pid = spawn_branch(node, partial(evaluate, resolve=resolve), setup)
        logger.debug("Started worker %s in %s", pid, work_dir)
        exit_code = wait_for(pid)

        duration = int((time.perf_counter() - start_time) * 1000)
        stdout = Path(stdout_path).read_text(encoding="utf-8", errors="replace")
        stderr = Path(stderr_path).read_text(encoding="utf-8", errors="replace")

    logger.debug("Worker %s finished: exit_code=%s, duration_ms=%s", pid, exit_code, duration)
    return ExecutionResult(stdout=stdout, stderr=stderr, exit_code=exit_code, duration_ms=duration)
