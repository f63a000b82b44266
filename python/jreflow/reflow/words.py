from typing import Iterable, List

from tree_sitter import Node

from jreflow.models import LiteralChain, Word
from jreflow.reflow.index import PositionIndex


def literal_bodies(index: PositionIndex, chain: LiteralChain) -> List[str]:
    """Source text of each literal in the chain, without the surrounding double quotes."""
    return [_body(index, node) for node in chain.literals]


def _body(index: PositionIndex, node: Node) -> str:
    return index.text[index.start(node) + 1 : index.end(node) - 1]


def escaped_newline_length(text: str, idx: int) -> int:
    """Length of an escaped `\\r`, `\\n` or `\\r\\n` sequence at idx, or 0."""
    length = 0
    if text.startswith("\\r", idx):
        length += 2
    if text.startswith("\\n", idx + length):
        length += 2
    return length


def split_words(bodies: Iterable[str]) -> List[Word]:
    """
    Splits literal bodies into words that are never broken across lines.

    A new word starts at every whitespace character and at every escaped tab.
    A run of escaped newlines stays attached to the end of the word before it,
    and that word is a hard break. Text left at the end of one literal is
    joined to the first word of the next literal when that literal has a
    boundary of its own ("ab" + "cd ef" gives "abcd", " ef"); a literal
    without any boundary is a word by itself ("ab" + "cd" gives "ab", "cd").
    """
    words: List[Word] = []
    piece = ""

    def emit(text: str, hard_break: bool):
        if text:
            words.append(Word(text, hard_break))

    for text in bodies:
        start = 0
        idx = 0
        while idx < len(text):
            ch = text[idx]
            hard_break = False
            if ch.isspace():
                boundary = idx
                idx += 1
            elif ch == "\\" and text.startswith("\\t", idx):
                boundary = idx
                idx += 2
            elif ch == "\\" and escaped_newline_length(text, idx):
                while escaped_newline_length(text, idx):
                    idx += escaped_newline_length(text, idx)
                boundary = idx
                hard_break = True
            elif ch == "\\":
                # any other escape is a single unit, so `\\t` is not an escaped tab
                idx += 2
                continue
            else:
                idx += 1
                continue
            emit(piece + text[start:boundary], hard_break)
            piece = ""
            start = boundary
        # A carried piece only joins a literal that has a boundary of its own;
        # otherwise the literal boundary ends the word.
        emit(piece, False)
        piece = text[start:]

    emit(piece, False)
    return words
