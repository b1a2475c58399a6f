from __future__ import annotations

import math
from typing import Sequence

from .highlighting import compute_highlight
from .models import HighlightStrategy, PlaybackSnapshot, Token
from .playback import PlaybackState


def progress_fraction(cursor: int, token_count: int) -> float:
    if token_count <= 0:
        return 0.0
    return min((cursor + 1) / token_count, 1.0)


def estimated_minutes_remaining(cursor: int, token_count: int, rate: int) -> int:
    """Whole minutes left at ``rate``, counting the word currently shown."""
    return math.ceil(max(0, token_count - cursor) / rate)


def build_snapshot(
    state: PlaybackState, tokens: Sequence[Token], strategy: HighlightStrategy
) -> PlaybackSnapshot:
    """Describe the current frame for a presentation layer."""
    token = tokens[state.cursor]
    return PlaybackSnapshot(
        current_token=token,
        highlight=compute_highlight(token.text, strategy),
        cursor=state.cursor,
        token_count=state.token_count,
        progress_fraction=progress_fraction(state.cursor, state.token_count),
        estimated_minutes_remaining=estimated_minutes_remaining(
            state.cursor, state.token_count, state.rate
        ),
        rate=state.rate,
        is_playing=state.is_playing,
        status=state.status.value,
    )
