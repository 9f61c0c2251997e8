"""Command execution engine package.

This package runs already-parsed shell command trees: simple commands with
redirections, built-ins, external programs, and the sequential,
conditional, parallel and pipe operators that join them.  Concurrency is
achieved with forked child processes only.

The top‑level modules include:

* ``tree`` – the immutable command tree handed over by a parser.
* ``words`` – default word resolution (literal text and ``$NAME`` parts).
* ``errors`` – the engine's exception hierarchy.
* ``executor`` – the engine itself; :func:`evaluate` is the entry point.
* ``models`` – Pydantic models describing command trees as JSON.
* ``config`` – configuration handling for environment variables.
* ``api`` – FastAPI application running trees in isolated workers.
"""

from .executor import evaluate
from .tree import CommandNode, CompositeCommand, ExitStatus, Operator, SimpleCommand, Word, WordPart

__all__ = [
    "CommandNode",
    "CompositeCommand",
    "ExitStatus",
    "Operator",
    "SimpleCommand",
    "Word",
    "WordPart",
    "evaluate",
]
