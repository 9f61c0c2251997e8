"""
Commands implemented inside the shell process.

``exit``/``quit`` end the shell, ``cd`` changes its working directory and
a verb of the form ``NAME=VALUE`` assigns an environment variable.  All of
them act on the calling process, which is why they cannot be spawned.
"""

from __future__ import annotations

import os
from typing import Optional, Sequence, Tuple

from ..log import get_logger
from ..tree import ExitStatus
from .base import report

logger = get_logger("builtins")

EXIT_VERBS = frozenset({"exit", "quit"})


def shell_exit() -> None:
    """Terminate the shell with status 0.  Never returns."""
    logger.debug("exit requested")
    raise SystemExit(0)


def shell_cd(args: Sequence[str]) -> int:
    """Change the working directory.

    Only a single argument is acted upon; ``cd`` with no argument or with
    several is a no-op that succeeds.
    """
    if len(args) != 1:
        logger.debug("cd with %d arguments ignored", len(args))
        return ExitStatus.SUCCESS
    try:
        os.chdir(args[0])
    except OSError as exc:
        report(f"cd: {args[0]}: {exc.strerror or exc}")
        return ExitStatus.FAILURE
    logger.debug("cwd is now %s", os.getcwd())
    return ExitStatus.SUCCESS


def split_assignment(verb: str) -> Optional[Tuple[str, str]]:
    """Return ``(name, value)`` if ``verb`` is an assignment, else ``None``."""
    name, sep, value = verb.partition("=")
    if not sep or not name:
        return None
    return name, value


def assign(name: str, value: str) -> int:
    try:
        os.environ[name] = value
    except (OSError, ValueError) as exc:
        report(f"{name}: cannot assign: {exc}")
        return ExitStatus.FAILURE
    logger.debug("set %s=%r", name, value)
    return ExitStatus.SUCCESS
