"""
Pure playback transitions.

Every function takes the current ``PlaybackState`` and returns a ``Transition``
holding the next state plus the timer side effects a driver must perform.
Nothing here touches a clock or a timer, so the state machine can be tested
with plain values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence, Tuple, Union

from .config import ReaderConfig
from .models import Token
from .timing import token_delay_ms


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class PlaybackState:
    """Cursor, rate and session timing owned by a single scheduler.

    Times are milliseconds on the driver's clock. ``generation`` identifies the
    only advance allowed to fire; any other generation is stale.
    """

    token_count: int
    rate: int
    cursor: int = 0
    status: PlaybackStatus = PlaybackStatus.IDLE
    session_start: float | None = None
    accumulated_pause_ms: float = 0.0
    pause_start: float | None = None
    finish_time: float | None = None
    generation: int = 0

    @property
    def is_playing(self) -> bool:
        return self.status is PlaybackStatus.PLAYING

    @property
    def is_finished(self) -> bool:
        return self.status is PlaybackStatus.FINISHED


@dataclass(frozen=True, slots=True)
class ScheduleAdvance:
    delay_ms: float
    generation: int


@dataclass(frozen=True, slots=True)
class CancelAdvance:
    generation: int


@dataclass(frozen=True, slots=True)
class FinishSession:
    finish_time: float


Effect = Union[ScheduleAdvance, CancelAdvance, FinishSession]


@dataclass(frozen=True, slots=True)
class Transition:
    state: PlaybackState
    effects: Tuple[Effect, ...] = ()


def initial_state(token_count: int, config: ReaderConfig, rate: int | None = None) -> PlaybackState:
    """Return the IDLE state for a sequence of ``token_count`` tokens."""
    start_rate = config.initial_rate if rate is None else rate
    return PlaybackState(token_count=token_count, rate=config.clamp_rate(start_rate))


def _delay_for(state: PlaybackState, tokens: Sequence[Token], config: ReaderConfig) -> float:
    return token_delay_ms(tokens[state.cursor], state.rate, config)


def _reschedule(
    state: PlaybackState, tokens: Sequence[Token], config: ReaderConfig
) -> Transition:
    """Cancel the in-flight advance of ``state``'s predecessor and schedule a fresh one."""
    generation = state.generation + 1
    next_state = replace(state, generation=generation)
    return Transition(
        next_state,
        (
            CancelAdvance(state.generation),
            ScheduleAdvance(_delay_for(next_state, tokens, config), generation),
        ),
    )


def start_playback(
    state: PlaybackState, now: float, tokens: Sequence[Token], config: ReaderConfig
) -> Transition:
    """IDLE/PAUSED -> PLAYING. Resuming restarts the full wait for the current token."""
    if state.status in (PlaybackStatus.PLAYING, PlaybackStatus.FINISHED):
        return Transition(state)

    session_start = now if state.session_start is None else state.session_start
    paused_total = state.accumulated_pause_ms
    if state.pause_start is not None:
        paused_total += max(0.0, now - state.pause_start)

    generation = state.generation + 1
    next_state = replace(
        state,
        status=PlaybackStatus.PLAYING,
        session_start=session_start,
        accumulated_pause_ms=paused_total,
        pause_start=None,
        generation=generation,
    )
    return Transition(
        next_state,
        (ScheduleAdvance(_delay_for(next_state, tokens, config), generation),),
    )


def pause_playback(state: PlaybackState, now: float) -> Transition:
    """PLAYING -> PAUSED. A no-op in every other state."""
    if state.status is not PlaybackStatus.PLAYING:
        return Transition(state)
    next_state = replace(
        state,
        status=PlaybackStatus.PAUSED,
        pause_start=now,
        generation=state.generation + 1,
    )
    return Transition(next_state, (CancelAdvance(state.generation),))


def advance_playback(
    state: PlaybackState,
    generation: int,
    now: float,
    tokens: Sequence[Token],
    config: ReaderConfig,
) -> Transition:
    """Move to the next token when the advance for ``generation`` fires."""
    if state.status is not PlaybackStatus.PLAYING or generation != state.generation:
        return Transition(state)

    next_cursor = state.cursor + 1
    if next_cursor >= state.token_count:
        finished = replace(
            state,
            status=PlaybackStatus.FINISHED,
            finish_time=now,
            generation=state.generation + 1,
        )
        return Transition(finished, (FinishSession(now),))

    next_generation = state.generation + 1
    next_state = replace(state, cursor=next_cursor, generation=next_generation)
    return Transition(
        next_state,
        (ScheduleAdvance(_delay_for(next_state, tokens, config), next_generation),),
    )


def seek_playback(
    state: PlaybackState, delta: int, tokens: Sequence[Token], config: ReaderConfig
) -> Transition:
    """Move the cursor by ``delta`` tokens, clamped to the sequence."""
    if state.is_finished:
        return Transition(state)
    target = max(0, min(state.cursor + delta, state.token_count - 1))
    if target == state.cursor:
        return Transition(state)
    moved = replace(state, cursor=target)
    if moved.is_playing:
        return _reschedule(moved, tokens, config)
    return Transition(moved)


def change_rate(
    state: PlaybackState, rate: int, tokens: Sequence[Token], config: ReaderConfig
) -> Transition:
    """Set a new clamped rate; while playing, optionally restart the current wait."""
    if state.is_finished:
        return Transition(state)
    clamped = config.clamp_rate(rate)
    if clamped == state.rate:
        return Transition(state)
    updated = replace(state, rate=clamped)
    if updated.is_playing and config.reschedule_on_rate_change:
        return _reschedule(updated, tokens, config)
    return Transition(updated)


def exit_playback(state: PlaybackState, now: float) -> Transition:
    """Abandon the session at the current cursor from any unfinished state."""
    if state.is_finished:
        return Transition(state)

    effects: Tuple[Effect, ...] = ()
    if state.is_playing:
        effects = (CancelAdvance(state.generation),)

    paused_total = state.accumulated_pause_ms
    if state.pause_start is not None:
        paused_total += max(0.0, now - state.pause_start)

    finished = replace(
        state,
        status=PlaybackStatus.FINISHED,
        accumulated_pause_ms=paused_total,
        pause_start=None,
        finish_time=now,
        generation=state.generation + 1,
    )
    return Transition(finished, effects + (FinishSession(now),))
