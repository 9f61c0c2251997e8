"""
Recursive evaluation of a command tree.

Simple commands go to :func:`~cmdexec.executor.simple.run_simple`;
sequential and conditional operators are handled here in the current
process; parallel and pipe operators are handed to the orchestrator,
which evaluates each side in its own child process.
"""

from __future__ import annotations

from functools import partial

from ..errors import InvalidCommandTree
from ..log import get_logger
from ..tree import CommandNode, CompositeCommand, ExitStatus, Operator, SimpleCommand
from ..words import Resolver, resolve_word
from .base import report
from .orchestrator import run_parallel, run_pipe
from .simple import run_simple

logger = get_logger("evaluator")


def evaluate_node(node: CommandNode, resolve: Resolver = resolve_word) -> int:
    """Evaluate ``node`` and return its exit status.

    Raises
    ------
    InvalidCommandTree
        If the tree contains an unknown node type or operator.
    """
    if isinstance(node, SimpleCommand):
        return run_simple(node, resolve)
    if not isinstance(node, CompositeCommand):
        raise InvalidCommandTree(node)

    recurse = partial(evaluate_node, resolve=resolve)
    operator = node.operator
    logger.debug("Evaluating %s node", operator)

    if operator == Operator.SEQUENTIAL:
        recurse(node.left)
        return recurse(node.right)

    if operator == Operator.CONDITIONAL_NONZERO:
        status = recurse(node.left)
        if status != 0:
            status = recurse(node.right)
        return status

    if operator == Operator.CONDITIONAL_ZERO:
        status = recurse(node.left)
        if status == 0:
            status = recurse(node.right)
        return status

    if operator == Operator.PARALLEL:
        return run_parallel(node.left, node.right, recurse)

    if operator == Operator.PIPE:
        return run_pipe(node.left, node.right, recurse)

    raise InvalidCommandTree(operator)


def evaluate(root: CommandNode, resolve: Resolver = resolve_word) -> int:
    """Evaluate a whole command line and return its exit status.

    A malformed tree yields :attr:`ExitStatus.INVALID_TREE`.  ``exit`` and
    ``quit`` raise :class:`SystemExit`.
    """
    try:
        status = evaluate_node(root, resolve)
    except InvalidCommandTree as exc:
        logger.error("Invalid command tree: %s", exc)
        report(str(exc))
        return int(ExitStatus.INVALID_TREE)
    return int(status)
