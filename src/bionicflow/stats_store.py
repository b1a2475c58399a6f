from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .errors import PersistenceError
from .models import ReadingStatistics

logger = logging.getLogger(__name__)


class StatisticsStore(ABC):
    """Persists the lifetime reading statistics aggregate."""

    @abstractmethod
    def load(self) -> ReadingStatistics:
        """Return the saved aggregate, or an empty one when nothing usable exists."""
        raise NotImplementedError

    @abstractmethod
    def save(self, stats: ReadingStatistics) -> None:
        """Replace the saved aggregate. Raises PersistenceError on failure."""
        raise NotImplementedError


class InMemoryStatisticsStore(StatisticsStore):
    def __init__(self, stats: ReadingStatistics | None = None) -> None:
        self._stats = stats or ReadingStatistics()

    def load(self) -> ReadingStatistics:
        return ReadingStatistics.from_dict(self._stats.to_dict())

    def save(self, stats: ReadingStatistics) -> None:
        self._stats = ReadingStatistics.from_dict(stats.to_dict())


class JsonStatisticsStore(StatisticsStore):
    """Stores statistics as a JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> ReadingStatistics:
        if not self.path.exists():
            return ReadingStatistics()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(payload, dict):
                raise ValueError("statistics file must contain a JSON object")
            return ReadingStatistics.from_dict(payload)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning(
                "Ignoring unreadable statistics at %s (%s); starting fresh.", self.path, exc
            )
            return ReadingStatistics()

    def save(self, stats: ReadingStatistics) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(stats.to_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Unable to write statistics to {self.path}: {exc}") from exc
