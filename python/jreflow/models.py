from dataclasses import dataclass
from typing import Tuple

from pydantic import BaseModel, Field, PositiveInt
from tree_sitter import Node

from jreflow.utils.java import java_length

DEFAULT_COLUMN_LIMIT = 100


class WrapOptions(BaseModel):
    """
    Settings for one reflow invocation.
    Validated on construction so the engine never sees a nonsensical limit.
    """

    column_limit: PositiveInt = Field(
        DEFAULT_COLUMN_LIMIT,
        description="Maximum line width in columns. Lines holding string literals past this are rewrapped.",
    )

    max_rounds: int = Field(
        2,
        ge=1,
        le=2,
        description=(
            "Rounds of detect/replace. The second round only re-settles ranges after the "
            "external formatter has touched them."
        ),
    )

    verify: bool = Field(
        True,
        description="Re-parse input and output and refuse any change to the syntax tree.",
    )


class Diagnostic(BaseModel):
    """A single parser complaint, positioned the way editors expect (1-based line, 1-based column)."""

    line: int = Field(..., ge=1)
    column: int = Field(..., ge=1)
    message: str = Field(..., description="Human readable description of the syntax problem.")


@dataclass(frozen=True)
class Word:
    """A piece of literal text that is never broken across output lines."""

    text: str
    hard_break: bool = False

    def __len__(self) -> int:
        return java_length(self.text)


@dataclass(frozen=True)
class LiteralChain:
    """
    Adjacent string literals of one concatenation, rewritten as a unit.
    starts_chain is True when the first literal is also the first operand of the expression.
    """

    literals: Tuple[Node, ...]
    starts_chain: bool


@dataclass(frozen=True)
class Replacement:
    start: int
    end: int
    text: str

    def overlaps(self, start: int, end: int) -> bool:
        return self.start < end and start < self.end
