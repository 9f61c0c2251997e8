"""
Exceptions raised by the execution engine.

Resource errors are caught by the operation that owns the resource (the
simple command executor for redirections, the orchestrator for pipes and
forks) and turned into a diagnostic plus a nonzero status, so they never
abort a sibling branch.  :class:`InvalidCommandTree` is different: it
means the tree itself is malformed and ends the whole evaluation.
"""

from __future__ import annotations

from typing import Optional


class CmdExecError(Exception):
    """Base class for all engine errors."""


class ResourceError(CmdExecError):
    """A descriptor, file, pipe or process operation failed.

    Attributes
    ----------
    operation: str
        Short name of the failing operation (``open``, ``dup2``, ``fork``...).
    cause: OSError, optional
        The underlying operating system error.
    """

    def __init__(self, operation: str, cause: Optional[OSError] = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = cause.strerror if cause is not None and cause.strerror else str(cause or "failed")
        super().__init__(f"{operation}: {detail}")


class RedirectionError(ResourceError):
    """A redirect target could not be opened or bound to a standard stream."""

    def __init__(self, target: str, operation: str, cause: Optional[OSError] = None) -> None:
        super().__init__(operation, cause)
        self.target = target

    def __str__(self) -> str:
        detail = self.cause.strerror if self.cause is not None and self.cause.strerror else "failed"
        return f"{self.target}: {detail}"


class StreamError(ResourceError):
    """The standard streams could not be saved or restored."""


class SpawnError(ResourceError):
    """A pipe or child process could not be created."""


class InvalidCommandTree(CmdExecError):
    """The command tree contains a node the engine does not understand."""

    def __init__(self, node: object) -> None:
        self.node = node
        super().__init__(f"unsupported command node: {node!r}")
