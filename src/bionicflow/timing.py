from __future__ import annotations

from typing import Sequence

from .config import ReaderConfig
from .models import Token

MS_PER_MINUTE = 60000.0


def base_delay_ms(rate: int) -> float:
    """Milliseconds each word stays on screen at ``rate`` words per minute."""
    if rate <= 0:
        raise ValueError("rate must be positive.")
    return MS_PER_MINUTE / rate


def token_delay_ms(token: Token, rate: int, config: ReaderConfig) -> float:
    """Return how long ``token`` is displayed before the next one.

    Punctuation takes precedence over length; only one multiplier applies.
    """
    base = base_delay_ms(rate)
    if token.has_trailing_punctuation:
        return base * config.punctuation_multiplier
    if len(token.text) > config.long_word_threshold:
        return base * config.long_word_multiplier
    return base


def total_delay_ms(tokens: Sequence[Token], rate: int, config: ReaderConfig) -> float:
    """Scheduled presentation time for the whole sequence at a fixed rate."""
    return sum(token_delay_ms(token, rate, config) for token in tokens)
