from typing import List

import structlog
from tree_sitter import Node

from jreflow.models import Replacement
from jreflow.newlines import guess_line_separator
from jreflow.reflow.chains import flatten_chain
from jreflow.reflow.classifier import SyntaxPath, classify
from jreflow.reflow.index import PositionIndex
from jreflow.reflow.replacements import ReplacementMap
from jreflow.reflow.textblocks import reindent_text_block
from jreflow.reflow.words import literal_bodies, split_words
from jreflow.reflow.wrapping import reflow

logger = structlog.get_logger(__name__)


class Reflower:
    """
    Computes the reflow replacements for one snapshot of a Java source.
    Create a new Reflower whenever the text changes; offsets are only valid for its own text.
    """

    def __init__(self, text: str, column_limit: int, source_name: str = "<input>"):
        self.text = text
        self.column_limit = column_limit
        self.separator = guess_line_separator(text)
        self.index = PositionIndex.parse(text, source_name=source_name)

    def get_replacements(self) -> ReplacementMap:
        candidates = classify(self.index, self.column_limit)
        replacements = ReplacementMap()
        self._indent_text_blocks(replacements, candidates.text_blocks)
        self._wrap_long_strings(replacements, candidates.long_literals)
        logger.debug("Computed replacements", count=len(replacements))
        return replacements

    def _indent_text_blocks(self, replacements: ReplacementMap, text_blocks: List[Node]):
        # Every text block is put, even one that is already correct, so the
        # formatter sees all text block ranges between rounds.
        for node in text_blocks:
            replacements.put(reindent_text_block(self.index, node, self.separator))

    def _wrap_long_strings(self, replacements: ReplacementMap, long_literals: List[SyntaxPath]):
        index = self.index
        for path in long_literals:
            chain = flatten_chain(index, path)
            first, last = chain.literals[0], chain.literals[-1]
            start = index.start(first)
            end = index.end(last)
            start_column = index.column(start)

            # Leave room for whatever follows the literal on its line, e.g. the `);` in `foo("...");`
            trailing = index.column(index.line_map.line_end(end)) - index.column(end)

            words = split_words(literal_bodies(index, chain))
            text = reflow(words, self.column_limit, start_column, trailing, chain.starts_chain, self.separator)
            logger.debug(
                f"Wrapping literal chain [{start}:{end}]",
                start_column=start_column,
                trailing=trailing,
                words=len(words),
            )
            replacements.put(Replacement(start, end, text))
