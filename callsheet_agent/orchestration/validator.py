"""
Acceptance of the model's final answer.

``accept`` is pure: it strips markdown code fences, parses JSON and leaves
conformance entirely to the target schema, so the same validator serves
every schema variant.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Union

from ..schemas import TargetSchema

# ```json ... ``` or ``` ... ```, with optional surrounding whitespace
FENCE_PATTERN = re.compile(r"^\s*```[\w+-]*[ \t]*\n?(.*?)\n?[ \t]*```\s*$", re.DOTALL)


@dataclass(frozen=True)
class Accepted:
    data: Any


@dataclass(frozen=True)
class ParseFailure:
    error: str


@dataclass(frozen=True)
class SchemaFailure:
    problems: tuple[str, ...]
    data: Any = None

    @property
    def summary(self) -> str:
        return "; ".join(self.problems)


ValidationOutcome = Union[Accepted, ParseFailure, SchemaFailure]


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, with or without a language tag."""
    stripped = text.strip()
    match = FENCE_PATTERN.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def accept(raw_text: str, schema: TargetSchema) -> ValidationOutcome:
    """
    Try to accept the model's final text as a schema-conformant object.

    Returns:
        Accepted with the parsed object, ParseFailure when the text is not
        valid JSON, or SchemaFailure listing the schema's problems.
    """
    text = strip_code_fences(raw_text)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return ParseFailure(error=str(e))

    problems = schema.check(data)
    if problems:
        return SchemaFailure(problems=tuple(problems), data=data)
    return Accepted(data=data)
