from typing import Dict, List, Tuple

import structlog

from jreflow.models import Replacement

logger = structlog.get_logger(__name__)


class ReplacementMap:
    """
    Non-overlapping character ranges of one text snapshot, each with its new text.

    Putting the same range twice keeps the latest text (two long literals of one
    chain produce the same range). A range that partially overlaps an existing
    one is refused.
    """

    def __init__(self):
        self._entries: Dict[Tuple[int, int], Replacement] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def put(self, replacement: Replacement) -> bool:
        key = (replacement.start, replacement.end)
        if key not in self._entries:
            for existing in self._entries.values():
                if existing.overlaps(replacement.start, replacement.end):
                    logger.warning(
                        f"Skipping replacement [{replacement.start}:{replacement.end}]: "
                        f"overlaps [{existing.start}:{existing.end}]"
                    )
                    return False
        self._entries[key] = replacement
        return True

    def replacements(self) -> List[Replacement]:
        return sorted(self._entries.values(), key=lambda r: r.start)

    def ranges(self) -> List[Tuple[int, int]]:
        return [(r.start, r.end) for r in self.replacements()]

    def apply(self, text: str) -> str:
        """
        Applies every replacement to text, the snapshot the ranges were computed on.
        Works from the end backwards so earlier offsets stay valid.
        """
        result = text
        for replacement in sorted(self._entries.values(), key=lambda r: r.start, reverse=True):
            result = result[: replacement.start] + replacement.text + result[replacement.end :]
        return result
