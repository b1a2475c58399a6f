"""
bionicflow package exports the presentation engine for library consumers.
"""

from __future__ import annotations

from .config import ReaderConfig, config_from_dict, config_from_yaml, load_config
from .errors import (
    BionicFlowError,
    EmptyInputError,
    ExtractionError,
    InvalidInputError,
    PersistenceError,
)
from .extraction import extract_text
from .highlighting import compute_highlight
from .models import (
    HighlightRange,
    HighlightStrategy,
    PlaybackSnapshot,
    ReadingSession,
    ReadingStatistics,
    Token,
)
from .playback import PlaybackState, PlaybackStatus
from .scheduler import PlaybackScheduler
from .session import SessionRecorder, build_session, is_significant, record_session
from .stats_store import InMemoryStatisticsStore, JsonStatisticsStore, StatisticsStore
from .timers import AsyncioTimer, TimerBackend, VirtualTimer
from .tokenization import tokenize_text

__all__ = [
    "ReaderConfig",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "BionicFlowError",
    "EmptyInputError",
    "ExtractionError",
    "InvalidInputError",
    "PersistenceError",
    "extract_text",
    "compute_highlight",
    "HighlightRange",
    "HighlightStrategy",
    "PlaybackSnapshot",
    "ReadingSession",
    "ReadingStatistics",
    "Token",
    "PlaybackState",
    "PlaybackStatus",
    "PlaybackScheduler",
    "SessionRecorder",
    "build_session",
    "is_significant",
    "record_session",
    "InMemoryStatisticsStore",
    "JsonStatisticsStore",
    "StatisticsStore",
    "AsyncioTimer",
    "TimerBackend",
    "VirtualTimer",
    "tokenize_text",
]

__version__ = "0.1.0"
