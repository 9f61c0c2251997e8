"""
Execution engine for command trees.

The modules are layered leaves first:

* ``redirect`` – saving, rebinding and restoring the standard streams.
* ``builtins`` – ``cd``, ``exit``/``quit`` and ``NAME=VALUE`` assignment.
* ``simple`` – running one simple command (built-in or external program).
* ``orchestrator`` – forked children for parallel and piped execution.
* ``evaluator`` – the recursive walk over composite operators.
* ``isolated`` – evaluating a whole tree inside a disposable worker.
"""

from .base import ExecutionResult
from .evaluator import evaluate, evaluate_node
from .isolated import run_isolated
from .orchestrator import run_parallel, run_pipe
from .redirect import SavedStreams, apply_redirections
from .simple import run_simple

__all__ = [
    "ExecutionResult",
    "SavedStreams",
    "apply_redirections",
    "evaluate",
    "evaluate_node",
    "run_isolated",
    "run_parallel",
    "run_pipe",
    "run_simple",
]
