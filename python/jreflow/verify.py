"""
Round-trip safety check.

Both texts are parsed and rendered to a canonical outline of their syntax
trees. The outline ignores everything the reflow pass is allowed to change:

* comments and whitespace are not rendered at all;
* string literals are rendered by value, so escapes, text block indentation
  and `\\<newline>` continuations don't matter;
* `+` chains are flattened and adjacent string operands folded into one value,
  the way javac folds constant strings, so `"ab"` and `"a" + "b"` agree.

Any other difference means the pass would change the program, and the
change is refused.
"""

from typing import List, Union

import structlog
from tree_sitter import Node

from jreflow.diff import describe_changes
from jreflow.errors import AstMismatchError
from jreflow.reflow.index import PositionIndex
from jreflow.utils.java import flatten_concatenation, is_comment, is_concatenation, is_string_literal, string_literal_value

logger = structlog.get_logger(__name__)

_Item = Union[Node, str]


def render_ast(index: PositionIndex) -> str:
    lines: List[str] = []
    stack = [(index.root, 0)]
    while stack:
        item, depth = stack.pop()
        pad = "  " * depth
        if isinstance(item, str):
            lines.append(f"{pad}string {item!r}")
            continue
        node = item
        if is_comment(node):
            continue
        if is_string_literal(node):
            lines.append(f"{pad}string {string_literal_value(index.text_of(node))!r}")
            continue
        if is_concatenation(node):
            operands = fold_strings(index, flatten_concatenation(node))
            if len(operands) == 1:
                stack.append((operands[0], depth))
                continue
            lines.append(f"{pad}concat")
            stack.extend((operand, depth + 1) for operand in reversed(operands))
            continue
        if node.child_count == 0:
            lines.append(f"{pad}{node.type} {index.text_of(node)}" if node.is_named else f"{pad}{node.type}")
            continue
        lines.append(f"{pad}{node.type}")
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return "\n".join(lines)


def fold_strings(index: PositionIndex, operands: List[Node]) -> List[_Item]:
    """Replaces every run of adjacent string literal operands by its concatenated value."""
    folded: List[_Item] = []
    pending = None
    for operand in operands:
        if is_string_literal(operand):
            value = string_literal_value(index.text_of(operand))
            pending = value if pending is None else pending + value
            continue
        if pending is not None:
            folded.append(pending)
            pending = None
        folded.append(operand)
    if pending is not None:
        folded.append(pending)
    return folded


def verify_equivalent(before: str, after: str, source_name: str = "<input>"):
    """
    Raises AstMismatchError unless before and after parse to equivalent trees.
    A parse failure of either text propagates as ParseError.
    """
    expected = render_ast(PositionIndex.parse(before, source_name=source_name))
    actual = render_ast(PositionIndex.parse(after, source_name=source_name))
    if expected != actual:
        logger.error("Reflow would change the syntax tree; aborting", source=source_name)
        raise AstMismatchError(expected, actual, changes=describe_changes(before, after, source_name, "reflowed"))
