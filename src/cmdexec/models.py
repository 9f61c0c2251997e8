"""Pydantic models for command trees and request/response bodies.

Command trees travel as JSON objects tagged by ``kind``.  A word is either a
plain string (literal text) or a list of parts, each optionally marked for
environment expansion:

```json
{"kind": "composite", "operator": "pipe",
 "left": {"kind": "simple", "verb": "echo", "args": [[{"text": "HOME", "expand": true}]]},
 "right": {"kind": "simple", "verb": "wc", "args": ["-c"], "output": "count.txt"}}
```

JSON cannot express two fields pointing at one object, so stderr joining
stdout's target is spelled ``"merge_error": true`` and :meth:`to_node`
builds a single shared :class:`~cmdexec.tree.Word` for both streams.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from .tree import CommandNode, CompositeCommand, Operator, SimpleCommand, Word, WordPart


class WordPartSpec(BaseModel):
    """One fragment of a word."""

    text: str
    expand: bool = Field(
        default=False,
        description="Replace the fragment with the environment variable named by 'text'.",
    )


WordSpec = Union[str, List[WordPartSpec]]


def _to_word(spec: Optional[WordSpec]) -> Optional[Word]:
    if spec is None:
        return None
    if isinstance(spec, str):
        return Word.literal(spec)
    return Word(tuple(WordPart(part.text, part.expand) for part in spec))


class SimpleCommandSpec(BaseModel):
    """A single program invocation."""

    kind: Literal["simple"] = "simple"
    verb: WordSpec
    args: List[WordSpec] = Field(default_factory=list)
    input: Optional[WordSpec] = None
    output: Optional[WordSpec] = None
    error: Optional[WordSpec] = None
    append_output: bool = False
    append_error: bool = False
    merge_error: bool = Field(
        default=False,
        description="Send stderr to the same target as stdout (opened once, truncated).",
    )

    @model_validator(mode="after")
    def _check_merge(self) -> "SimpleCommandSpec":
        if self.merge_error:
            if self.output is None:
                raise ValueError("merge_error requires an output target")
            if self.error is not None:
                raise ValueError("merge_error cannot be combined with an error target")
        return self

    def to_node(self) -> SimpleCommand:
        output = _to_word(self.output)
        error = output if self.merge_error else _to_word(self.error)
        return SimpleCommand(
            verb=_to_word(self.verb),
            args=tuple(_to_word(arg) for arg in self.args),
            input=_to_word(self.input),
            output=output,
            error=error,
            append_output=self.append_output,
            append_error=self.append_error,
        )


class CompositeCommandSpec(BaseModel):
    """Two commands joined by an operator."""

    kind: Literal["composite"] = "composite"
    operator: Operator
    left: "CommandSpec"
    right: "CommandSpec"

    def to_node(self) -> CompositeCommand:
        return CompositeCommand(
            operator=self.operator,
            left=self.left.to_node(),
            right=self.right.to_node(),
        )


CommandSpec = Annotated[Union[SimpleCommandSpec, CompositeCommandSpec], Field(discriminator="kind")]

CompositeCommandSpec.model_rebuild()


def spec_from_node(node: CommandNode) -> Union[SimpleCommandSpec, CompositeCommandSpec]:
    """Describe an in-memory tree with the wire models."""

    def word(value: Optional[Word]) -> Optional[WordSpec]:
        if value is None:
            return None
        if all(not part.expand for part in value.parts):
            return "".join(part.text for part in value.parts)
        return [WordPartSpec(text=part.text, expand=part.expand) for part in value.parts]

    if isinstance(node, CompositeCommand):
        return CompositeCommandSpec(
            operator=node.operator,
            left=spec_from_node(node.left),
            right=spec_from_node(node.right),
        )
    return SimpleCommandSpec(
        verb=word(node.verb),
        args=[word(arg) for arg in node.args],
        input=word(node.input),
        output=word(node.output),
        error=None if node.merges_error else word(node.error),
        append_output=node.append_output,
        append_error=node.append_error,
        merge_error=node.merges_error,
    )


class ExecuteRequest(BaseModel):
    """Request body for running a command tree."""

    command: CommandSpec = Field(..., description="Command tree to evaluate.")
    stdin: Optional[str] = Field(
        default=None, description="Standard input to pass to the command tree."
    )


class ExecuteResponse(BaseModel):
    """Response body for command execution."""

    stdout: str
    stderr: str
    exit_code: int
    duration_ms: int
    files: List[str] = Field(default_factory=list)
