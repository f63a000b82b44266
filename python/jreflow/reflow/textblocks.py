import structlog
from tree_sitter import Node

from jreflow.models import Replacement
from jreflow.newlines import split_lines
from jreflow.reflow.index import PositionIndex
from jreflow.utils.java import TEXT_BLOCK_DELIMITER, strip_indent

logger = structlog.get_logger(__name__)


def reindent_text_block(index: PositionIndex, node: Node, separator: str) -> Replacement:
    """
    Re-emits a text block with its incidental indentation normalized.

    The replaced range starts at the beginning of the line holding the opening
    delimiter, so the statement's own indentation is rewritten along with the body.
    """
    line_map = index.line_map
    start = line_map.line_start(line_map.line_number(index.start(node)))
    end = index.end(node)
    text = index.text[start:end]
    leading_whitespace = len(text) - len(text.lstrip())

    # The first line is always the opening delimiter and does not take part in
    # the incidental whitespace computation.
    initial_lines = split_lines(text)
    lines = split_lines(strip_indent(separator.join(initial_lines[1:])))
    if not lines:
        return Replacement(start, end, text)

    deindent = len(initial_lines[-1].rstrip()) == len(lines[-1].rstrip())
    prefix = "" if deindent else " " * leading_whitespace

    output = [prefix, initial_lines[0].lstrip()]
    for i, line in enumerate(lines):
        trimmed = line.rstrip()
        output.append(separator)
        if trimmed:
            # no incidental whitespace on empty lines
            output.append(prefix)
        if i == len(lines) - 1:
            without_delimiter = trimmed[: len(trimmed) - len(TEXT_BLOCK_DELIMITER)].rstrip()
            if without_delimiter.lstrip():
                output.extend([without_delimiter, "\\", separator, prefix])
            # Indenting a lone closing delimiter past the prefix has no effect
            # and makes javac warn that trailing white space will be removed.
            output.append(TEXT_BLOCK_DELIMITER)
        else:
            output.append(line)

    logger.debug("Reindented text block", start=start, end=end, deindent=deindent)
    return Replacement(start, end, "".join(output))
