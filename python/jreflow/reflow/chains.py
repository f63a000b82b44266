import structlog
from tree_sitter import Node

from jreflow.models import LiteralChain
from jreflow.reflow.classifier import SyntaxPath
from jreflow.reflow.index import PositionIndex
from jreflow.utils.java import flatten_concatenation, is_concatenation, same_node

logger = structlog.get_logger(__name__)

# Characters allowed between two literals of the same chain. Anything else
# (in practice, a comment) ends the chain.
STRING_CONCAT_DELIMITER = frozenset('"+')


def enclosing_concatenation(path: SyntaxPath) -> SyntaxPath:
    """Walks up to the outermost `+` expression that contains the leaf without leaving the `+` tree."""
    enclosing = path
    while enclosing.parent is not None and is_concatenation(enclosing.parent.leaf):
        enclosing = enclosing.parent
    return enclosing


def no_comments(index: PositionIndex, one: Node, two: Node) -> bool:
    between = index.text[index.end(one) : index.start(two)]
    return all(ch.isspace() or ch in STRING_CONCAT_DELIMITER for ch in between)


def flatten_chain(index: PositionIndex, path: SyntaxPath) -> LiteralChain:
    """
    Flattens the concatenation around path.leaf and extracts the run of adjacent
    string literals that contains it.
    """
    enclosing = enclosing_concatenation(path)
    flat = flatten_concatenation(enclosing.leaf)

    idx = next((i for i, node in enumerate(flat) if same_node(node, path.leaf)), -1)
    if idx == -1:
        raise ValueError(f"literal at offset {index.start(path.leaf)} is not an operand of its enclosing expression")

    # walk outwards from the leaf for adjacent string literals to also reflow
    start_idx = idx
    end_idx = idx + 1
    while (
        start_idx > 0
        and index.is_plain_string(flat[start_idx - 1])
        and no_comments(index, flat[start_idx - 1], flat[start_idx])
    ):
        start_idx -= 1
    while (
        end_idx < len(flat)
        and index.is_plain_string(flat[end_idx])
        and no_comments(index, flat[end_idx - 1], flat[end_idx])
    ):
        end_idx += 1

    chain = LiteralChain(literals=tuple(flat[start_idx:end_idx]), starts_chain=start_idx == 0)
    logger.debug(
        "Flattened literal chain",
        operands=len(flat),
        literals=len(chain.literals),
        starts_chain=chain.starts_chain,
    )
    return chain
