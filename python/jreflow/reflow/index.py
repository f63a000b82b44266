from bisect import bisect_right
from typing import List, Optional

import structlog
from tree_sitter import Node, Tree

from jreflow.errors import ParseError
from jreflow.models import Diagnostic
from jreflow.newlines import LINE_TERMINATOR, iter_lines, newline_length_at
from jreflow.utils.java import TEXT_BLOCK_DELIMITER, is_string_literal, iter_syntax_errors, java_length, parse_java

logger = structlog.get_logger(__name__)


def needs_processing(text: str, column_limit: int) -> bool:
    """
    Returns True if any line is longer than column_limit, or contains a \"\"\" that
    could indicate a text block. Cheap enough to run before parsing anything.
    """
    for line in iter_lines(text):
        if java_length(line) > column_limit or TEXT_BLOCK_DELIMITER in line:
            return True
    return False


class LineMap:
    """
    Maps character offsets to (1-based line, 0-based column) and back for one
    snapshot of the text. Build a new one whenever the text changes.
    """

    def __init__(self, text: str):
        self.text = text
        self._starts: List[int] = [0]
        for match in LINE_TERMINATOR.finditer(text):
            self._starts.append(match.end())

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def line_number(self, offset: int) -> int:
        return bisect_right(self._starts, offset)

    def column(self, offset: int) -> int:
        """Zero-based column in UTF-16 code units, as javac reports it."""
        return java_length(self.text[self._starts[self.line_number(offset) - 1] : offset])

    def line_start(self, line: int) -> int:
        return self._starts[line - 1]

    def line_end(self, offset: int) -> int:
        """Offset of the first line terminator at or after offset (or the end of text)."""
        end = offset
        while end < len(self.text) and newline_length_at(self.text, end) == 0:
            end += 1
        return end


class PositionIndex:
    """
    A parsed snapshot: the text, its tree-sitter tree and a line map.

    tree-sitter reports UTF-8 byte offsets; everything outside this class works
    in character offsets, so start()/end() translate. Columns are counted in
    UTF-16 code units.
    """

    def __init__(self, text: str, tree: Tree, data: bytes):
        self.text = text
        self.tree = tree
        self.line_map = LineMap(text)
        self._char_offsets = _byte_to_char_table(text, data)

    @classmethod
    def parse(cls, text: str, source_name: str = "<input>") -> "PositionIndex":
        data = text.encode("utf-8")
        tree = parse_java(data)
        index = cls(text, tree, data)
        diagnostics = index.diagnostics()
        if diagnostics:
            logger.debug("Parse failed", source=source_name, errors=len(diagnostics))
            raise ParseError(diagnostics, source_name=source_name)
        return index

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def char_offset(self, byte_offset: int) -> int:
        if self._char_offsets is None:
            return byte_offset
        return self._char_offsets[byte_offset]

    def start(self, node: Node) -> int:
        return self.char_offset(node.start_byte)

    def end(self, node: Node) -> int:
        return self.char_offset(node.end_byte)

    def text_of(self, node: Node) -> str:
        return self.text[self.start(node) : self.end(node)]

    def column(self, offset: int) -> int:
        return self.line_map.column(offset)

    def is_text_block(self, node: Node) -> bool:
        start = self.start(node)
        return is_string_literal(node) and self.text.startswith(TEXT_BLOCK_DELIMITER, start)

    def is_plain_string(self, node: Optional[Node]) -> bool:
        return is_string_literal(node) and not self.is_text_block(node)

    def diagnostics(self) -> List[Diagnostic]:
        result = []
        for node in iter_syntax_errors(self.root):
            offset = self.start(node)
            if node.is_missing:
                message = f"missing {node.type!r}"
            else:
                snippet = self.text_of(node).strip().splitlines()
                message = f"unexpected {snippet[0][:40]!r}" if snippet else "unexpected end of input"
            result.append(
                Diagnostic(
                    line=self.line_map.line_number(offset),
                    column=self.line_map.column(offset) + 1,
                    message=message,
                )
            )
        return result


def _byte_to_char_table(text: str, data: bytes) -> Optional[List[int]]:
    if len(data) == len(text):
        return None
    table = [0] * (len(data) + 1)
    pos = 0
    for i, ch in enumerate(text):
        width = len(ch.encode("utf-8"))
        for k in range(width):
            table[pos + k] = i
        pos += width
    table[pos] = len(text)
    return table
