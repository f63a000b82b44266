"""
Top-level reflow pass: rewraps long string literals and re-indents text blocks.

Flow:
1. Fast path: nothing too long and no text block delimiter, return the input.
2. Compute replacements on the input.
3. Let the formatter settle the replaced ranges; if it changed anything,
   compute the replacements again on its output. Never more than two rounds.
4. Apply the replacements.
5. Refuse the result if it parses to a different tree than its input.
"""

from typing import Optional

import structlog

from jreflow.formatter import NoopFormatter, SourceFormatter
from jreflow.models import WrapOptions
from jreflow.reflow.engine import Reflower
from jreflow.reflow.index import needs_processing
from jreflow.verify import verify_equivalent

logger = structlog.get_logger(__name__)


def wrap(
    text: str,
    options: Optional[WrapOptions] = None,
    formatter: Optional[SourceFormatter] = None,
    source_name: str = "<input>",
) -> str:
    """
    Reflows string literals in text that extend past the column limit.

    Args:
        text: Java source, already formatted by the general-purpose formatter.
        options: Column limit and round settings. Defaults to WrapOptions().
        formatter: Re-formats the replaced ranges between rounds. Defaults to a no-op.
        source_name: Name used in diagnostics.

    Returns:
        The reflowed source. Identical to text when nothing needed wrapping.

    Raises:
        ParseError: text (or the formatter's output) is not valid Java.
        AstMismatchError: the result would not be equivalent to the input.
    """
    options = options or WrapOptions()
    formatter = formatter or NoopFormatter()

    if not needs_processing(text, options.column_limit):
        logger.info("Nothing to reflow", source=source_name)
        return text

    current = text
    for round_no in range(1, options.max_rounds + 1):
        replacements = Reflower(current, options.column_limit, source_name=source_name).get_replacements()
        if round_no == options.max_rounds or not replacements:
            break
        formatted = formatter.format_source(current, replacements.ranges())
        if formatted == current:
            break
        # The formatter moved things around; offsets must be recomputed on its output.
        logger.debug("Formatter changed replaced ranges; recomputing", source=source_name, round=round_no)
        current = formatted

    result = replacements.apply(current)

    if options.verify:
        verify_equivalent(current, result, source_name=source_name)

    logger.info("Reflowed source", source=source_name, replacements=len(replacements), changed=result != text)
    return result
