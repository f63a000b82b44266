"""
Greedy word wrapping for string literal chains.

The packing is first-fit with a couple of width adjustments, tracked in
ColumnBudget so the algorithm can be exercised without a syntax tree:

1. The first line may use everything between the start column and the limit,
   minus two columns for its quotes.
2. Before every line, if the remaining words fit in the current width, the
   trailing slack (the `);` after the literal) is taken off the width. This
   isn't quite optimal: a line that no longer fits after the adjustment
   spills into one more line, which is checked again and may shrink again.
3. When the chain begins its expression, every line after the first gets a
   four-space continuation indent plus `+ `, six columns in total.
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List

from jreflow.models import Word

QUOTE_COLUMNS = 2
CONTINUATION_COLUMNS = 6  # four-space continuation indent and a `+ `
MIN_LINE_LENGTH = 4


@dataclass
class ColumnBudget:
    width: int
    trailing: int = 0
    continuation_pending: bool = False

    @classmethod
    def for_chain(cls, column_limit: int, start_column: int, trailing: int, starts_chain: bool) -> "ColumnBudget":
        return cls(
            width=column_limit - start_column - QUOTE_COLUMNS,
            trailing=trailing,
            continuation_pending=starts_chain,
        )

    def before_line(self, remaining: Iterable[Word]):
        """Reserve the trailing slack whenever the remaining words fit the current width."""
        if total_length_at_most(remaining, self.width):
            self.width -= self.trailing

    def after_line(self):
        if self.continuation_pending:
            self.width -= CONTINUATION_COLUMNS
            self.continuation_pending = False


def total_length_at_most(words: Iterable[Word], limit: int) -> bool:
    total = 0
    for word in words:
        total += len(word)
        if total > limit:
            return False
    return True


def pack_lines(words: Iterable[Word], budget: ColumnBudget) -> List[str]:
    """
    Packs words into lines no wider than budget.width where possible.

    A line takes words while it is still at most four columns long or the next
    word fits. The first word is always taken, so a word longer than the whole
    width gets a line to itself and a negative width still makes progress.
    A hard-break word ends its line.
    """
    remaining: Deque[Word] = deque(words)
    lines = []
    while remaining:
        budget.before_line(remaining)
        length = 0
        line = []
        while remaining and (length <= MIN_LINE_LENGTH or length + len(remaining[0]) <= budget.width):
            word = remaining.popleft()
            line.append(word.text)
            length += len(word)
            if word.hard_break:
                break
        lines.append("".join(line))
        budget.after_line()
    return lines


def reflow(
    words: List[Word],
    column_limit: int,
    start_column: int,
    trailing: int,
    starts_chain: bool,
    separator: str,
) -> str:
    """
    Rewraps the words of a literal chain into a new chain of literals.

    Args:
        words: Words of the chain, quotes and `+` already removed.
        column_limit: The number of columns to wrap at.
        start_column: Zero-based column of the chain's opening quote.
        trailing: Columns to leave free after the last line, for a `;` or `)`.
        starts_chain: True if the chain is the start of its enclosing concatenation.
        separator: Line separator of the source.

    Returns:
        Source text for the replacement, from the first opening quote to the last closing quote.
    """
    budget = ColumnBudget.for_chain(column_limit, start_column, trailing, starts_chain)
    lines = pack_lines(words, budget)
    indent = " " * max(0, start_column + (4 if starts_chain else -2))
    return '"' + f'"{separator}{indent}+ "'.join(lines) + '"'
