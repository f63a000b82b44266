from typing import List, Tuple

import structlog
from diff_match_patch import diff_match_patch

from jreflow.newlines import split_lines

logger = structlog.get_logger(__name__)


def line_diff(original_text: str, modified_text: str) -> List[Tuple[int, str]]:
    """
    Line-level diff of two texts as diff_match_patch (op, text) tuples.
    Each text chunk is one or more whole lines.
    """
    dmp = diff_match_patch()

    # 1. Encode every distinct line as a single character
    chars1, chars2, line_array = dmp.diff_linesToChars(original_text, modified_text)

    # 2. Diff the encoded strings
    diffs = dmp.diff_main(chars1, chars2, False)

    # 3. Decode back to lines
    dmp.diff_charsToLines(diffs, line_array)
    return diffs


def describe_changes(original_text: str, modified_text: str, from_name: str = "original", to_name: str = "reflowed") -> str:
    """
    Renders the changes between two texts as a compact unified-style listing.
    Returns an empty string when the texts are identical.
    """
    if original_text == modified_text:
        return ""

    output = [f"--- {from_name}", f"+++ {to_name}"]
    line_no = 1
    in_hunk = False

    for op, text in line_diff(original_text, modified_text):
        lines = split_lines(text)
        if op == 0:  # Equal
            line_no += len(lines)
            in_hunk = False
            continue

        if not in_hunk:
            output.append(f"@@ line {line_no} @@")
            in_hunk = True

        marker = "-" if op == -1 else "+"
        output.extend(f"{marker}{line}" for line in lines)
        if op == -1:
            line_no += len(lines)

    logger.debug("Described changes", lines=len(output))
    return "\n".join(output)
