"""
Execution of a single :class:`~cmdexec.tree.SimpleCommand`.

The verb and arguments are resolved first, then the standard streams are
saved, the command's redirections applied and the verb dispatched:
``exit``/``quit``, ``cd``, ``NAME=VALUE`` assignment or an external
program.  The saved streams are restored on every way out, including a
failed redirection and ``exit``.  If the streams cannot be saved or
restored at all, the command fails with a diagnostic instead of taking the
shell down.
"""

from __future__ import annotations

from typing import List

from ..errors import RedirectionError, StreamError
from ..log import get_logger
from ..tree import ExitStatus, SimpleCommand
from ..words import Resolver, argv_of, resolve_word
from . import builtins
from .base import report, run_external
from .redirect import SavedStreams, apply_redirections

logger = get_logger("simple")


def _dispatch(argv: List[str]) -> int:
    verb, args = argv[0], argv[1:]

    if verb in builtins.EXIT_VERBS:
        builtins.shell_exit()

    if verb == "cd":
        return builtins.shell_cd(args)

    assignment = builtins.split_assignment(verb)
    if assignment is not None:
        return builtins.assign(*assignment)

    return run_external(argv)


def run_simple(simple: SimpleCommand, resolve: Resolver = resolve_word) -> int:
    """Run one simple command and return its exit status."""
    argv = argv_of(simple, resolve)
    verb = argv[0]
    logger.debug("Running simple command %r", argv)

    try:
        with SavedStreams() as saved:
            try:
                apply_redirections(simple, resolve)
            except RedirectionError as exc:
                # Report on the shell's own stderr, not a half-applied redirect.
                saved.restore()
                logger.warning("Redirection failed for %s: %s", verb, exc)
                report(str(exc))
                return ExitStatus.FAILURE

            status = _dispatch(argv)
    except StreamError as exc:
        logger.warning("Standard streams unavailable for %s: %s", verb, exc)
        report(f"{verb}: {exc}")
        return ExitStatus.FAILURE

    logger.debug("%s finished with status %s", verb, status)
    return status
