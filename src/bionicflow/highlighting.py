from __future__ import annotations

import math
from typing import Tuple

from .errors import InvalidInputError
from .models import HighlightRange, HighlightStrategy

# Fraction of the word length where the eye fixates fastest.
ORP_FRACTION = 0.35


def optimal_recognition_index(length: int) -> int:
    """Return the focal character index for a word of the given length."""
    if length <= 1:
        return 0
    return math.ceil(length * ORP_FRACTION) - 1


def compute_highlight(word: str, strategy: HighlightStrategy) -> HighlightRange:
    """Return the highlighted span and centering index for ``word``."""
    length = len(word)
    if length == 0:
        raise InvalidInputError("Cannot highlight an empty word.")

    if strategy is HighlightStrategy.FIRST_LETTER:
        return HighlightRange(start=0, end=1, align_index=0)

    if strategy is HighlightStrategy.FIRST_TWO_LETTERS:
        end = min(2, length)
        return HighlightRange(start=0, end=end, align_index=1 if end == 2 else 0)

    if strategy is HighlightStrategy.FIRST_HALF:
        end = math.ceil(length / 2)
        return HighlightRange(start=0, end=end, align_index=(end - 1) // 2)

    if strategy is HighlightStrategy.OPTIMAL_RECOGNITION_POINT:
        idx = optimal_recognition_index(length)
        return HighlightRange(start=idx, end=idx + 1, align_index=idx)

    if strategy is HighlightStrategy.NO_HIGHLIGHT:
        return HighlightRange(start=None, end=None, align_index=length // 2)

    raise InvalidInputError(f"Unsupported highlight strategy: {strategy!r}")


def split_for_display(word: str, highlight: HighlightRange) -> Tuple[str, str, str]:
    """Split ``word`` into the text left of, at, and right of the pivot character."""
    pivot = highlight.align_index
    return word[:pivot], word[pivot : pivot + 1], word[pivot + 1 :]


def highlighted_text(word: str, highlight: HighlightRange) -> str:
    """Return the emphasized slice of ``word`` (empty when nothing is highlighted)."""
    if not highlight.has_region:
        return ""
    return word[highlight.start : highlight.end]
