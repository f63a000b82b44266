from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Optional

import structlog
from tree_sitter import Node

from jreflow.reflow.index import PositionIndex
from jreflow.utils.java import is_string_literal, receiver_of, same_node

logger = structlog.get_logger(__name__)


class SyntaxPath(NamedTuple):
    """Immutable leaf-to-root chain. Extending a path never mutates its parent."""

    leaf: Node
    parent: Optional["SyntaxPath"] = None

    @property
    def parent_leaf(self) -> Optional[Node]:
        return self.parent.leaf if self.parent is not None else None

    def child(self, node: Node) -> "SyntaxPath":
        return SyntaxPath(node, self)


@dataclass
class Candidates:
    long_literals: List[SyntaxPath] = field(default_factory=list)
    text_blocks: List[Node] = field(default_factory=list)


def walk(root: Node) -> Iterator[SyntaxPath]:
    """Depth-first, source-ordered walk over named nodes. String literals are not descended into."""
    stack = [SyntaxPath(root)]
    while stack:
        path = stack.pop()
        yield path
        if is_string_literal(path.leaf):
            continue
        for child in reversed(path.leaf.named_children):
            stack.append(path.child(child))


def classify(index: PositionIndex, column_limit: int) -> Candidates:
    """
    Collects string literals whose line runs past column_limit, and every text block.

    A literal that is the receiver of a member access (`"...".length()`) is
    never a candidate: splitting it would make the call apply to the last piece only.
    """
    candidates = Candidates()
    for path in walk(index.root):
        node = path.leaf
        if not is_string_literal(node):
            continue
        if index.is_text_block(node):
            candidates.text_blocks.append(node)
            continue
        parent = path.parent_leaf
        if parent is not None and same_node(receiver_of(parent), node):
            continue
        # The literal may be followed by `);` or more code on the same line.
        line_end = index.line_map.line_end(index.end(node))
        if index.column(line_end) <= column_limit:
            continue
        candidates.long_literals.append(path)

    logger.debug(
        "Classified literals",
        long_literals=len(candidates.long_literals),
        text_blocks=len(candidates.text_blocks),
    )
    return candidates
