"""
Command tree handed to the execution engine.

A parser (or :mod:`cmdexec.models` for JSON input) builds the tree once;
the engine only reads it.  Leaves are :class:`SimpleCommand` instances and
internal nodes are :class:`CompositeCommand` instances joined by an
:class:`Operator`.

Redirect targets are :class:`Word` objects.  When ``output`` and ``error``
are the *same* object the command merges stderr into stdout's target;
two distinct words that happen to spell the same path are not merged.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


class Operator(str, enum.Enum):
    """Operators joining the two children of a composite command."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    CONDITIONAL_NONZERO = "conditional_nonzero"
    CONDITIONAL_ZERO = "conditional_zero"
    PIPE = "pipe"


class ExitStatus(enum.IntEnum):
    """Exit statuses with a reserved meaning."""

    SUCCESS = 0
    FAILURE = 1
    COMMAND_NOT_FOUND = 127
    INVALID_TREE = 255


@dataclass(frozen=True)
class WordPart:
    """One fragment of a word.

    Attributes
    ----------
    text: str
        Literal text, or the variable name when ``expand`` is set.
    expand: bool
        Replace the fragment with the value of environment variable
        ``text`` at resolution time.
    """

    text: str
    expand: bool = False


@dataclass(frozen=True)
class Word:
    parts: Tuple[WordPart, ...]

    @classmethod
    def literal(cls, text: str) -> "Word":
        return cls((WordPart(text),))

    @classmethod
    def variable(cls, name: str) -> "Word":
        return cls((WordPart(name, expand=True),))


@dataclass(frozen=True)
class SimpleCommand:
    """A single program invocation with optional redirections."""

    verb: Word
    args: Tuple[Word, ...] = ()
    input: Optional[Word] = None
    output: Optional[Word] = None
    error: Optional[Word] = None
    append_output: bool = False
    append_error: bool = False

    @property
    def merges_error(self) -> bool:
        """True when stderr shares stdout's redirect target."""
        return self.output is not None and self.error is self.output


@dataclass(frozen=True)
class CompositeCommand:
    operator: Operator
    left: "CommandNode"
    right: "CommandNode"


CommandNode = Union[SimpleCommand, CompositeCommand]


def command(verb: str, *args: str, **redirects) -> SimpleCommand:
    """Build a simple command from literal strings.

    ``input``, ``output`` and ``error`` keyword arguments may be strings or
    :class:`Word` objects; pass ``both="path"`` to send stdout and stderr to
    one shared target.
    """
    both = redirects.pop("both", None)
    words = {}
    for name in ("input", "output", "error"):
        value = redirects.pop(name, None)
        words[name] = Word.literal(value) if isinstance(value, str) else value
    if both is not None:
        shared = Word.literal(both) if isinstance(both, str) else both
        words["output"] = words["error"] = shared
    return SimpleCommand(
        verb=Word.literal(verb),
        args=tuple(Word.literal(arg) for arg in args),
        **words,
        **redirects,
    )


def join(operator: Operator, left: CommandNode, right: CommandNode, *rest: CommandNode) -> CompositeCommand:
    """Left-fold two or more nodes with the same operator."""
    node = CompositeCommand(operator, left, right)
    for extra in rest:
        node = CompositeCommand(operator, node, extra)
    return node
