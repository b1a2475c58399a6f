from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List


class TimerBackend(ABC):
    """Clock plus one-shot timers used to drive playback.

    All values are milliseconds. Callers must use a backend from a single
    control thread or event loop.
    """

    @abstractmethod
    def now(self) -> float:
        """Return the current time in milliseconds."""
        raise NotImplementedError

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Any:
        """Run ``callback`` once after ``delay_ms`` and return a cancellable handle."""
        raise NotImplementedError

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a handle returned by ``call_later``; cancelling twice is harmless."""
        raise NotImplementedError


@dataclass(order=True, slots=True)
class _VirtualEntry:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class VirtualTimer(TimerBackend):
    """Deterministic timer whose clock only moves when told to."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)
        self._queue: List[_VirtualEntry] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _VirtualEntry:
        entry = _VirtualEntry(
            due=self._now + max(0.0, delay_ms), seq=next(self._counter), callback=callback
        )
        heapq.heappush(self._queue, entry)
        return entry

    def cancel(self, handle: Any) -> None:
        if isinstance(handle, _VirtualEntry):
            handle.cancelled = True

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that have not fired or been cancelled."""
        return sum(1 for entry in self._queue if not entry.cancelled)

    def next_due(self) -> float | None:
        self._drop_cancelled()
        return self._queue[0].due if self._queue else None

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward, firing every callback that falls due on the way."""
        target = self._now + max(0.0, delta_ms)
        fired = 0
        while True:
            self._drop_cancelled()
            if not self._queue or self._queue[0].due > target:
                break
            entry = heapq.heappop(self._queue)
            self._now = entry.due
            entry.callback()
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, max_callbacks: int = 1_000_000) -> int:
        """Fire callbacks in due order until nothing is scheduled."""
        fired = 0
        while fired < max_callbacks:
            due = self.next_due()
            if due is None:
                return fired
            fired += self.advance(due - self._now)
        raise RuntimeError("VirtualTimer did not become idle.")

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)


class AsyncioTimer(TimerBackend):
    """Timer backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(max(0.0, delay_ms) / 1000.0, callback)

    def cancel(self, handle: Any) -> None:
        if isinstance(handle, asyncio.TimerHandle):
            handle.cancel()
