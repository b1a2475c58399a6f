from __future__ import annotations

import logging
import time
import uuid
from dataclasses import replace
from statistics import mean
from typing import List, TypedDict

from .config import ReaderConfig
from .errors import PersistenceError
from .models import ReadingSession, ReadingStatistics
from .playback import PlaybackState
from .stats_store import StatisticsStore

logger = logging.getLogger(__name__)

RECENT_SESSION_LIMIT = 10


class SessionPayload(TypedDict):
    id: str
    timestamp: float
    words_read: int
    active_duration_seconds: float
    rate: int


class StatisticsSummary(TypedDict):
    total_words: int
    total_active_seconds: float
    session_count: int
    average_rate: int
    recent_sessions: List[SessionPayload]


def active_duration_seconds(state: PlaybackState, finish_time: float) -> float:
    """Seconds spent reading between the first play and ``finish_time``, minus pauses."""
    if state.session_start is None:
        return 0.0
    paused = state.accumulated_pause_ms
    if state.pause_start is not None:
        paused += max(0.0, finish_time - state.pause_start)
    elapsed_ms = finish_time - state.session_start - paused
    return max(0.0, elapsed_ms / 1000.0)


def build_session(
    state: PlaybackState,
    finish_time: float,
    *,
    timestamp: float | None = None,
    session_id: str | None = None,
) -> ReadingSession:
    """Compute the final metrics for a finished or abandoned session."""
    return ReadingSession(
        id=session_id or uuid.uuid4().hex,
        timestamp=time.time() if timestamp is None else timestamp,
        words_read=state.cursor + 1,
        active_duration_seconds=active_duration_seconds(state, finish_time),
        rate=state.rate,
    )


def is_significant(session: ReadingSession, config: ReaderConfig) -> bool:
    """Return True for deliberate sessions worth keeping in the statistics."""
    return (
        session.active_duration_seconds > config.min_session_seconds
        or session.words_read > config.min_session_words
    )


def record_session(stats: ReadingStatistics, session: ReadingSession) -> ReadingStatistics:
    """Return a new aggregate with ``session`` appended; past sessions are untouched."""
    return replace(
        stats,
        total_words=stats.total_words + session.words_read,
        total_active_seconds=stats.total_active_seconds + session.active_duration_seconds,
        sessions=[*stats.sessions, session],
    )


def summarize_statistics(
    stats: ReadingStatistics, recent: int = RECENT_SESSION_LIMIT
) -> StatisticsSummary:
    average_rate = round(mean(s.rate for s in stats.sessions)) if stats.sessions else 0
    recent_sessions = stats.sessions[-recent:] if recent > 0 else []
    return {
        "total_words": stats.total_words,
        "total_active_seconds": stats.total_active_seconds,
        "session_count": len(stats.sessions),
        "average_rate": average_rate,
        "recent_sessions": [_session_payload(s) for s in recent_sessions],
    }


def _session_payload(session: ReadingSession) -> SessionPayload:
    return {
        "id": session.id,
        "timestamp": session.timestamp,
        "words_read": session.words_read,
        "active_duration_seconds": session.active_duration_seconds,
        "rate": session.rate,
    }


class SessionRecorder:
    """Filters finished sessions and appends the significant ones to a store."""

    def __init__(self, store: StatisticsStore, config: ReaderConfig) -> None:
        self._store = store
        self._config = config

    def record(self, session: ReadingSession) -> bool:
        """Persist ``session`` when significant. Returns True only if it was saved."""
        if not is_significant(session, self._config):
            logger.info(
                "Discarding short session: %d words in %.1fs",
                session.words_read,
                session.active_duration_seconds,
            )
            return False

        try:
            stats = self._store.load()
        except PersistenceError as exc:
            logger.warning("Unable to load reading statistics, starting empty: %s", exc)
            stats = ReadingStatistics()
        try:
            self._store.save(record_session(stats, session))
        except PersistenceError as exc:
            logger.warning("Unable to save reading statistics: %s", exc)
            return False
        logger.info(
            "Recorded session %s: %d words at %d wpm",
            session.id,
            session.words_read,
            session.rate,
        )
        return True
