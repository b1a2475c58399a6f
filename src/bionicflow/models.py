from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True, slots=True)
class Token:
    """A single display unit produced from one whitespace-delimited run of text."""

    text: str
    original_index: int
    has_trailing_punctuation: bool


class HighlightStrategy(str, Enum):
    """Which part of a word is emphasized while it is on screen."""

    FIRST_LETTER = "first_letter"
    FIRST_TWO_LETTERS = "first_two"
    FIRST_HALF = "first_half"
    OPTIMAL_RECOGNITION_POINT = "orp"
    NO_HIGHLIGHT = "none"

    @classmethod
    def parse(cls, value: "str | HighlightStrategy") -> "HighlightStrategy":
        """Accept either the short value (``orp``) or the member name."""
        if isinstance(value, HighlightStrategy):
            return value
        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        for strategy in cls:
            if normalized in (strategy.value, strategy.name.lower()):
                return strategy
        raise ValueError(f"Unknown highlight strategy '{value}'.")


@dataclass(frozen=True, slots=True)
class HighlightRange:
    """Highlighted span of a word plus the character the word is centered on.

    ``start``/``end`` are ``None`` when nothing is highlighted.
    """

    start: int | None
    end: int | None
    align_index: int

    @property
    def has_region(self) -> bool:
        return self.start is not None and self.end is not None

    def as_tuple(self) -> Tuple[int, int, int]:
        """Return ``(start, end, align_index)`` using ``-1`` for a missing region."""
        if not self.has_region:
            return -1, -1, self.align_index
        return self.start, self.end, self.align_index  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class ReadingSession:
    """Metrics for one completed reading session."""

    id: str
    timestamp: float
    words_read: int
    active_duration_seconds: float
    rate: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "words_read": self.words_read,
            "active_duration_seconds": self.active_duration_seconds,
            "rate": self.rate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReadingSession":
        return cls(
            id=str(data["id"]),
            timestamp=float(data["timestamp"]),
            words_read=int(data["words_read"]),
            active_duration_seconds=float(data["active_duration_seconds"]),
            rate=int(data["rate"]),
        )


@dataclass(slots=True)
class ReadingStatistics:
    """Lifetime aggregate of recorded reading sessions."""

    total_words: int = 0
    total_active_seconds: float = 0.0
    sessions: List[ReadingSession] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_words": self.total_words,
            "total_active_seconds": self.total_active_seconds,
            "sessions": [session.to_dict() for session in self.sessions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReadingStatistics":
        return cls(
            total_words=int(data.get("total_words", 0)),
            total_active_seconds=float(data.get("total_active_seconds", 0.0)),
            sessions=[ReadingSession.from_dict(item) for item in data.get("sessions", [])],
        )


@dataclass(frozen=True, slots=True)
class PlaybackSnapshot:
    """Everything a presentation layer needs to draw the current frame."""

    current_token: Token
    highlight: HighlightRange
    cursor: int
    token_count: int
    progress_fraction: float
    estimated_minutes_remaining: int
    rate: int
    is_playing: bool
    status: str
