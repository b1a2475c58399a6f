from __future__ import annotations

import re
from typing import List

from .errors import EmptyInputError
from .models import Token

WHITESPACE_PATTERN = re.compile(r"\s+")
TRAILING_PUNCTUATION = frozenset(".,;?!")


def tokenize_text(text: str) -> List[Token]:
    """Split text into display tokens, keeping punctuation attached to its word.

    Raises EmptyInputError when the text has no non-whitespace characters.
    """
    pieces = [piece for piece in WHITESPACE_PATTERN.split(text.strip()) if piece]
    if not pieces:
        raise EmptyInputError("Text contains no words to read.")

    tokens: List[Token] = []
    for index, piece in enumerate(pieces):
        tokens.append(
            Token(
                text=piece,
                original_index=index,
                has_trailing_punctuation=piece[-1] in TRAILING_PUNCTUATION,
            )
        )
    return tokens
