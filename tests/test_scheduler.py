from __future__ import annotations

from typing import List

import pytest

from bionicflow.config import ReaderConfig
from bionicflow.errors import InvalidInputError
from bionicflow.models import HighlightStrategy, PlaybackSnapshot, ReadingSession
from bionicflow.playback import PlaybackStatus
from bionicflow.scheduler import PlaybackScheduler
from bionicflow.timers import VirtualTimer
from bionicflow.tokenization import tokenize_text
from tests.utils import words


def _scheduler(text: str, rate: int = 600, **config_kwargs) -> tuple[PlaybackScheduler, VirtualTimer]:
    timer = VirtualTimer()
    config = ReaderConfig(initial_rate=rate, **config_kwargs)
    return PlaybackScheduler(tokenize_text(text), timer, config), timer


def test_empty_token_sequence_is_refused():
    with pytest.raises(InvalidInputError):
        PlaybackScheduler([], VirtualTimer())


def test_sixty_words_at_600_wpm_finish_after_six_seconds():
    scheduler, timer = _scheduler(words(60))
    finished: List[ReadingSession] = []
    scheduler.on_finish(finished.append)

    scheduler.play()
    timer.advance(5999)
    assert scheduler.status is PlaybackStatus.PLAYING
    assert scheduler.state.cursor == 59

    timer.advance(1)
    assert scheduler.status is PlaybackStatus.FINISHED
    assert len(finished) == 1
    session = finished[0]
    assert session.words_read == 60
    assert session.active_duration_seconds == pytest.approx(6.0)
    assert session.rate == 600
    assert scheduler.session is session
    assert scheduler.state.accumulated_pause_ms == 0
    assert timer.pending == 0


def test_active_duration_matches_elapsed_without_pauses():
    scheduler, timer = _scheduler(words(20))
    scheduler.play()
    timer.advance(1000)
    scheduler.exit()
    assert scheduler.state.accumulated_pause_ms == 0
    assert scheduler.session is not None
    assert scheduler.session.active_duration_seconds == pytest.approx(1.0)
    assert scheduler.session.words_read == 11


def test_pause_does_not_advance_and_accumulates_exact_duration():
    scheduler, timer = _scheduler(words(20))
    scheduler.play()
    timer.advance(250)
    assert scheduler.state.cursor == 2

    scheduler.pause()
    assert not scheduler.has_pending_advance
    timer.advance(10_000)
    assert scheduler.state.cursor == 2

    scheduler.play()
    assert scheduler.state.accumulated_pause_ms == pytest.approx(10_000)
    # Resuming restarts the full wait for the current word.
    timer.advance(99)
    assert scheduler.state.cursor == 2
    timer.advance(1)
    assert scheduler.state.cursor == 3


def test_pause_twice_equals_pause_once():
    scheduler, timer = _scheduler(words(10))
    scheduler.play()
    timer.advance(50)
    scheduler.pause()
    state = scheduler.state
    timer.advance(50)
    scheduler.pause()
    assert scheduler.state == state


def test_seek_mid_delay_never_double_advances():
    scheduler, timer = _scheduler(words(30))
    visited: List[int] = []
    scheduler.subscribe(lambda snapshot: visited.append(snapshot.cursor))

    scheduler.play()
    timer.advance(50)
    scheduler.seek(10)
    assert scheduler.state.cursor == 10
    # The stale advance would have fired at t=100.
    timer.advance(60)
    assert scheduler.state.cursor == 10
    timer.advance(40)
    assert scheduler.state.cursor == 11
    assert timer.pending == 1

    advances = visited[visited.index(10):]
    assert advances == [10, 11]


def test_seek_is_clamped_to_sequence():
    scheduler, _ = _scheduler(words(8))
    scheduler.seek(-3)
    assert scheduler.state.cursor == 0
    scheduler.seek(100)
    assert scheduler.state.cursor == 7
    assert scheduler.status is PlaybackStatus.IDLE


def test_rate_change_restarts_current_wait():
    scheduler, timer = _scheduler(words(10))
    scheduler.play()
    timer.advance(50)
    scheduler.set_rate(300)
    timer.advance(150)
    assert scheduler.state.cursor == 0
    timer.advance(50)
    assert scheduler.state.cursor == 1
    assert timer.pending == 1


def test_rate_change_can_leave_inflight_advance():
    scheduler, timer = _scheduler(words(10), reschedule_on_rate_change=False)
    scheduler.play()
    timer.advance(50)
    scheduler.set_rate(300)
    timer.advance(50)
    assert scheduler.state.cursor == 1
    timer.advance(199)
    assert scheduler.state.cursor == 1
    timer.advance(1)
    assert scheduler.state.cursor == 2


def test_control_helpers_use_configured_steps():
    scheduler, _ = _scheduler(words(40), rate=300)
    scheduler.faster()
    assert scheduler.state.rate == 350
    scheduler.slower()
    scheduler.slower()
    assert scheduler.state.rate == 250
    scheduler.jump_forward()
    assert scheduler.state.cursor == 10
    scheduler.step_forward()
    assert scheduler.state.cursor == 15
    scheduler.step_back()
    scheduler.jump_back()
    assert scheduler.state.cursor == 0


def test_rate_controls_stop_at_bounds():
    scheduler, _ = _scheduler(words(5), rate=1990)
    scheduler.faster()
    assert scheduler.state.rate == 2000
    scheduler.set_rate(120)
    scheduler.slower()
    assert scheduler.state.rate == 100


def test_toggle_switches_play_and_pause():
    scheduler, timer = _scheduler(words(5))
    scheduler.toggle()
    assert scheduler.status is PlaybackStatus.PLAYING
    timer.advance(10)
    scheduler.toggle()
    assert scheduler.status is PlaybackStatus.PAUSED
    scheduler.toggle()
    assert scheduler.status is PlaybackStatus.PLAYING


def test_finish_fires_once_and_is_terminal():
    scheduler, timer = _scheduler("one two three.")
    sessions: List[ReadingSession] = []
    scheduler.on_finish(sessions.append)
    scheduler.play()
    timer.run_until_idle()
    assert scheduler.status is PlaybackStatus.FINISHED

    scheduler.play()
    scheduler.pause()
    scheduler.exit()
    timer.run_until_idle()
    assert len(sessions) == 1
    assert scheduler.status is PlaybackStatus.FINISHED
    assert timer.pending == 0


def test_exit_while_paused_excludes_pause_from_active_time():
    scheduler, timer = _scheduler(words(20))
    scheduler.play()
    timer.advance(300)
    scheduler.pause()
    timer.advance(5000)
    scheduler.exit()
    session = scheduler.session
    assert session is not None
    assert session.active_duration_seconds == pytest.approx(0.3)
    assert session.words_read == 4


def test_exit_before_play_reports_zero_duration():
    scheduler, _ = _scheduler(words(3))
    scheduler.exit()
    assert scheduler.session is not None
    assert scheduler.session.active_duration_seconds == 0.0
    assert scheduler.session.words_read == 1


def test_punctuation_slows_the_cadence():
    scheduler, timer = _scheduler("Stop. go")
    scheduler.play()
    timer.advance(149)
    assert scheduler.state.cursor == 0
    timer.advance(1)
    assert scheduler.state.cursor == 1


def test_snapshots_describe_progress():
    scheduler, timer = _scheduler(words(4))
    snapshots: List[PlaybackSnapshot] = []
    unsubscribe = scheduler.subscribe(snapshots.append)
    scheduler.play()
    timer.advance(100)

    latest = snapshots[-1]
    assert latest.cursor == 1
    assert latest.progress_fraction == pytest.approx(0.5)
    assert latest.estimated_minutes_remaining == 1
    assert latest.is_playing
    assert latest.current_token.text == "word"
    assert latest.highlight.align_index == 1

    unsubscribe()
    timer.advance(100)
    assert snapshots[-1].cursor == 1
    assert scheduler.snapshot().cursor == 2


def test_changing_strategy_emits_snapshot():
    scheduler, _ = _scheduler("hello")
    snapshots: List[PlaybackSnapshot] = []
    scheduler.subscribe(snapshots.append)
    scheduler.strategy = HighlightStrategy.NO_HIGHLIGHT
    assert not snapshots[-1].highlight.has_region
