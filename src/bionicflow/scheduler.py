from __future__ import annotations

import logging
from typing import Any, Callable, List, Sequence, Tuple

from .config import ReaderConfig
from .errors import InvalidInputError
from .models import HighlightStrategy, PlaybackSnapshot, ReadingSession, Token
from .playback import (
    CancelAdvance,
    FinishSession,
    PlaybackState,
    PlaybackStatus,
    ScheduleAdvance,
    Transition,
    advance_playback,
    change_rate,
    exit_playback,
    initial_state,
    pause_playback,
    seek_playback,
    start_playback,
)
from .session import build_session
from .snapshot import build_snapshot
from .timers import TimerBackend

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[PlaybackSnapshot], None]
FinishListener = Callable[[ReadingSession], None]


class PlaybackScheduler:
    """Drives the playback state machine against a timer backend.

    At most one advance is outstanding at any time. It is tagged with the
    state's generation, so an advance that fires after being superseded is
    ignored.
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        timer: TimerBackend,
        config: ReaderConfig | None = None,
        *,
        rate: int | None = None,
        strategy: HighlightStrategy | None = None,
    ) -> None:
        if not tokens:
            raise InvalidInputError("Cannot play an empty token sequence.")
        self._tokens: Tuple[Token, ...] = tuple(tokens)
        self._timer = timer
        self._config = config or ReaderConfig()
        self._strategy = strategy or self._config.strategy
        self._state = initial_state(len(self._tokens), self._config, rate)
        self._pending: Tuple[int, Any] | None = None
        self._snapshot_listeners: List[SnapshotListener] = []
        self._finish_listeners: List[FinishListener] = []
        self._session: ReadingSession | None = None

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def tokens(self) -> Tuple[Token, ...]:
        return self._tokens

    @property
    def status(self) -> PlaybackStatus:
        return self._state.status

    @property
    def current_token(self) -> Token:
        return self._tokens[self._state.cursor]

    @property
    def strategy(self) -> HighlightStrategy:
        return self._strategy

    @strategy.setter
    def strategy(self, value: HighlightStrategy) -> None:
        self._strategy = value
        self._emit_snapshot()

    @property
    def session(self) -> ReadingSession | None:
        """The finished session, once playback has ended."""
        return self._session

    @property
    def has_pending_advance(self) -> bool:
        return self._pending is not None

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call ``listener`` with a snapshot after every state change."""
        self._snapshot_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._snapshot_listeners:
                self._snapshot_listeners.remove(listener)

        return unsubscribe

    def on_finish(self, listener: FinishListener) -> None:
        self._finish_listeners.append(listener)

    def snapshot(self) -> PlaybackSnapshot:
        return build_snapshot(self._state, self._tokens, self._strategy)

    def play(self) -> None:
        self._apply(start_playback(self._state, self._timer.now(), self._tokens, self._config))

    def pause(self) -> None:
        self._apply(pause_playback(self._state, self._timer.now()))

    def toggle(self) -> None:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, delta: int) -> None:
        self._apply(seek_playback(self._state, delta, self._tokens, self._config))

    def set_rate(self, rate: int) -> None:
        self._apply(change_rate(self._state, rate, self._tokens, self._config))

    def exit(self) -> None:
        """Stop reading now and finalize the session at the current word."""
        self._apply(exit_playback(self._state, self._timer.now()))

    def faster(self) -> None:
        self.set_rate(self._state.rate + self._config.rate_step)

    def slower(self) -> None:
        self.set_rate(self._state.rate - self._config.rate_step)

    def jump_forward(self) -> None:
        self.seek(self._config.jump_size)

    def jump_back(self) -> None:
        self.seek(-self._config.jump_size)

    def step_forward(self) -> None:
        self.seek(self._config.step_size)

    def step_back(self) -> None:
        self.seek(-self._config.step_size)

    def _on_advance(self, generation: int) -> None:
        if self._pending is not None and self._pending[0] == generation:
            self._pending = None
        self._apply(
            advance_playback(
                self._state, generation, self._timer.now(), self._tokens, self._config
            )
        )

    def _apply(self, transition: Transition) -> None:
        previous = self._state
        # Cancellations happen before the new state is committed.
        for effect in transition.effects:
            if isinstance(effect, CancelAdvance):
                self._cancel_pending()
        self._state = transition.state

        for effect in transition.effects:
            if isinstance(effect, ScheduleAdvance):
                self._schedule(effect)
            elif isinstance(effect, FinishSession):
                self._finish(effect.finish_time)

        if self._state != previous:
            if self._state.status is not previous.status:
                logger.debug(
                    "Playback %s -> %s at word %d/%d",
                    previous.status.value,
                    self._state.status.value,
                    self._state.cursor + 1,
                    self._state.token_count,
                )
            self._emit_snapshot()

    def _schedule(self, effect: ScheduleAdvance) -> None:
        self._cancel_pending()
        generation = effect.generation
        handle = self._timer.call_later(
            effect.delay_ms, lambda: self._on_advance(generation)
        )
        self._pending = (generation, handle)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._timer.cancel(self._pending[1])
            self._pending = None

    def _finish(self, finish_time: float) -> None:
        self._cancel_pending()
        self._session = build_session(self._state, finish_time)
        for listener in list(self._finish_listeners):
            listener(self._session)

    def _emit_snapshot(self) -> None:
        if not self._snapshot_listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._snapshot_listeners):
            listener(snapshot)
