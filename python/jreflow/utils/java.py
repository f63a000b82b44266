"""
Java-specific helpers: tree-sitter parsing, node predicates and literal decoding.

Everything here is stateless. A fresh parser is created for every parse so
independent invocations never share a parser object.
"""

import re
from typing import Iterator, List, Optional

from tree_sitter import Node, Tree
from tree_sitter_language_pack import get_parser

from jreflow.newlines import split_lines

LANGUAGE = "java"

STRING_LITERAL = "string_literal"
# Older grammar releases give text blocks their own node type.
STRING_LITERAL_TYPES = frozenset({STRING_LITERAL, "text_block"})
BINARY_EXPRESSION = "binary_expression"
TEXT_BLOCK_DELIMITER = '"""'
CONCAT_OPERATOR = "+"

COMMENT_TYPES = frozenset({"line_comment", "block_comment", "comment"})
MEMBER_ACCESS_TYPES = frozenset({"method_invocation", "field_access", "method_reference"})

_SIMPLE_ESCAPES = {
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "f": "\f",
    "r": "\r",
    "s": " ",
    '"': '"',
    "'": "'",
    "\\": "\\",
}
_OCTAL_DIGITS = "01234567"
_HEX_QUAD = re.compile(r"[0-9a-fA-F]{4}")


def java_length(text: str) -> int:
    """Length in UTF-16 code units, which is how javac and Java tools count columns."""
    if text.isascii():
        return len(text)
    return len(text.encode("utf-16-le")) // 2


def parse_java(data: bytes) -> Tree:
    parser = get_parser(LANGUAGE)
    return parser.parse(data)


def iter_syntax_errors(root: Node) -> Iterator[Node]:
    """Yields ERROR and MISSING nodes in source order."""
    if not root.has_error:
        return
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            yield node
            continue
        if node.has_error:
            stack.extend(reversed(node.children))


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
    if a is None or b is None:
        return False
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte and a.type == b.type


def is_string_literal(node: Optional[Node]) -> bool:
    return node is not None and node.type in STRING_LITERAL_TYPES


def is_comment(node: Node) -> bool:
    return node.type in COMMENT_TYPES


def operator_of(node: Node) -> Optional[str]:
    op = node.child_by_field_name("operator")
    return op.type if op is not None else None


def is_concatenation(node: Optional[Node]) -> bool:
    """True for a `+` binary expression (string concatenation or numeric addition alike)."""
    return node is not None and node.type == BINARY_EXPRESSION and operator_of(node) == CONCAT_OPERATOR


def concat_operands(node: Node) -> List[Node]:
    return [node.child_by_field_name("left"), node.child_by_field_name("right")]


def flatten_concatenation(node: Node) -> List[Node]:
    """
    Pre-order flattening of a `+` expression tree: every concatenation node is
    split into its operands (left before right) until only non-`+` operands remain.
    """
    flat = []
    todo = [node]
    while todo:
        first = todo.pop()
        if is_concatenation(first):
            left, right = concat_operands(first)
            todo.append(right)
            todo.append(left)
        else:
            flat.append(first)
    return flat


def receiver_of(node: Node) -> Optional[Node]:
    """The expression a member access is selected from (`"x"` in `"x".length()`)."""
    if node.type not in MEMBER_ACCESS_TYPES:
        return None
    receiver = node.child_by_field_name("object")
    if receiver is None and node.type == "method_reference" and node.named_child_count:
        receiver = node.named_children[0]
    return receiver


def strip_indent(text: str) -> str:
    """
    Port of Java's String.stripIndent().

    Removes the incidental indentation shared by all non-blank lines and the
    last line (even when blank), strips trailing whitespace from every line and
    normalizes line terminators to LF.
    """
    if not text:
        return ""
    opt_out = text[-1] in "\r\n"
    lines = split_lines(text)
    outdent = 0 if opt_out else _outdent(lines)
    stripped = []
    for line in lines:
        content_end = len(line.rstrip())
        if content_end == 0:
            stripped.append("")
            continue
        first_non_whitespace = len(line) - len(line.lstrip())
        stripped.append(line[min(outdent, first_non_whitespace) : content_end])
    return "\n".join(stripped) + ("\n" if opt_out else "")


def _outdent(lines: List[str]) -> int:
    outdent = None
    for line in lines:
        leading = len(line) - len(line.lstrip())
        if leading != len(line):
            outdent = leading if outdent is None else min(outdent, leading)
    last = lines[-1]
    if not last.strip():
        outdent = len(last) if outdent is None else min(outdent, len(last))
    return outdent or 0


def decode_escapes(body: str, text_block: bool = False) -> str:
    """
    Interprets Java escape sequences in a literal body.
    In text blocks a backslash before a line terminator joins the two lines.
    Malformed escapes are kept verbatim; the parser would have rejected them anyway.
    """
    out = []
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch != "\\" or i + 1 >= n:
            out.append(ch)
            i += 1
            continue
        nxt = body[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt == "u":
            j = i + 1
            while j < n and body[j] == "u":
                j += 1
            quad = body[j : j + 4]
            if _HEX_QUAD.fullmatch(quad):
                out.append(chr(int(quad, 16)))
                i = j + 4
            else:
                out.append(ch)
                i += 1
        elif nxt in _OCTAL_DIGITS:
            max_digits = 3 if nxt in "0123" else 2
            j = i + 1
            while j < n and j - (i + 1) < max_digits and body[j] in _OCTAL_DIGITS:
                j += 1
            out.append(chr(int(body[i + 1 : j], 8)))
            i = j
        elif text_block and nxt == "\n":
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def string_literal_value(literal: str) -> str:
    """Runtime value of a string literal or text block, given its full source text."""
    if literal.startswith(TEXT_BLOCK_DELIMITER):
        return text_block_value(literal)
    return decode_escapes(literal[1:-1])


def text_block_value(literal: str) -> str:
    body = literal[len(TEXT_BLOCK_DELIMITER) : len(literal) - len(TEXT_BLOCK_DELIMITER)]
    # The opening delimiter line carries no content.
    match = re.search(r"\r\n|\r|\n", body)
    content = body[match.end() :] if match else ""
    content = re.sub(r"\r\n|\r", "\n", content)
    return decode_escapes(strip_indent(content), text_block=True)
