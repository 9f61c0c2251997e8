"""Default word resolution.

Words are concatenations of literal text and environment variable
references.  Anything richer (quoting, globbing, command substitution) is
the parser's job; callers that need it pass their own ``resolve`` callable
to the engine instead of :func:`resolve_word`.
"""

from __future__ import annotations

import os
from typing import Callable, List

from .tree import SimpleCommand, Word

Resolver = Callable[[Word], str]


def resolve_word(word: Word) -> str:
    """Concatenate the parts of ``word``, expanding variable parts.

    Unset variables expand to the empty string.
    """
    pieces = []
    for part in word.parts:
        if part.expand:
            pieces.append(os.environ.get(part.text, ""))
        else:
            pieces.append(part.text)
    return "".join(pieces)


def argv_of(simple: SimpleCommand, resolve: Resolver = resolve_word) -> List[str]:
    """Resolve the verb and arguments of ``simple`` into an argument vector."""
    return [resolve(simple.verb)] + [resolve(arg) for arg in simple.args]
