"""
Line separator helpers shared by the index, the reindenter and the CLI.

Java recognises three line terminators: CRLF, CR and LF. Python's
str.splitlines() splits on several more (form feed, NEL, U+2028...), which
would disagree with the parser's line numbering, so everything here goes
through the same regex.
"""

import os
import re
from typing import Iterator, List

LINE_TERMINATOR = re.compile(r"\r\n|\r|\n")


def guess_line_separator(text: str) -> str:
    """Returns the first line separator found in text, or the platform default."""
    match = LINE_TERMINATOR.search(text)
    if match:
        return match.group(0)
    return os.linesep


def newline_length_at(text: str, idx: int) -> int:
    """
    Returns the length of the line terminator starting at idx.
    Zero means there is no terminator at idx (including idx past the end).
    """
    if idx >= len(text):
        return 0
    if text.startswith("\r\n", idx):
        return 2
    if text[idx] in "\r\n":
        return 1
    return 0


def iter_lines(text: str) -> Iterator[str]:
    """Yields physical lines without their terminators."""
    start = 0
    for match in LINE_TERMINATOR.finditer(text):
        yield text[start : match.start()]
        start = match.end()
    if start < len(text):
        yield text[start:]


def split_lines(text: str) -> List[str]:
    """Same as Java's String.lines(): no trailing empty line for a final terminator."""
    return list(iter_lines(text))
