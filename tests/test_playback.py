from bionicflow.config import ReaderConfig
from bionicflow.playback import (
    CancelAdvance,
    FinishSession,
    PlaybackStatus,
    ScheduleAdvance,
    advance_playback,
    change_rate,
    exit_playback,
    initial_state,
    pause_playback,
    seek_playback,
    start_playback,
)
from bionicflow.tokenization import tokenize_text

CONFIG = ReaderConfig(initial_rate=600)
TOKENS = tokenize_text("alpha beta gamma delta epsilon")


def _playing(now: float = 0.0):
    return start_playback(initial_state(len(TOKENS), CONFIG), now, TOKENS, CONFIG).state


def test_initial_state_is_idle_and_clamped():
    state = initial_state(3, CONFIG, rate=5000)
    assert state.status is PlaybackStatus.IDLE
    assert state.rate == CONFIG.max_rate
    assert state.cursor == 0
    assert state.session_start is None


def test_play_records_session_start_and_schedules():
    transition = start_playback(initial_state(len(TOKENS), CONFIG), 1000.0, TOKENS, CONFIG)
    state = transition.state
    assert state.status is PlaybackStatus.PLAYING
    assert state.session_start == 1000.0
    assert transition.effects == (ScheduleAdvance(100.0, state.generation),)


def test_play_while_playing_is_noop():
    state = _playing()
    transition = start_playback(state, 50.0, TOKENS, CONFIG)
    assert transition.state == state
    assert transition.effects == ()


def test_pause_cancels_and_is_idempotent():
    state = _playing()
    paused = pause_playback(state, 40.0)
    assert paused.state.status is PlaybackStatus.PAUSED
    assert paused.state.pause_start == 40.0
    assert paused.effects == (CancelAdvance(state.generation),)

    again = pause_playback(paused.state, 90.0)
    assert again.state == paused.state
    assert again.effects == ()


def test_pause_before_play_does_nothing():
    state = initial_state(len(TOKENS), CONFIG)
    assert pause_playback(state, 10.0).state == state


def test_resume_accumulates_pause_and_keeps_session_start():
    paused = pause_playback(_playing(0.0), 40.0).state
    resumed = start_playback(paused, 540.0, TOKENS, CONFIG)
    assert resumed.state.accumulated_pause_ms == 500.0
    assert resumed.state.pause_start is None
    assert resumed.state.session_start == 0.0
    assert resumed.state.cursor == paused.cursor
    # Resuming waits the full delay for the current word again.
    assert resumed.effects == (ScheduleAdvance(100.0, resumed.state.generation),)


def test_stale_advance_is_ignored():
    state = _playing()
    stale_generation = state.generation
    moved = seek_playback(state, 2, TOKENS, CONFIG).state
    transition = advance_playback(moved, stale_generation, 100.0, TOKENS, CONFIG)
    assert transition.state == moved
    assert transition.effects == ()


def test_advance_moves_cursor_and_reschedules():
    state = _playing()
    transition = advance_playback(state, state.generation, 100.0, TOKENS, CONFIG)
    assert transition.state.cursor == 1
    assert transition.effects == (ScheduleAdvance(100.0, transition.state.generation),)
    assert transition.state.generation != state.generation


def test_advance_past_last_token_finishes():
    state = seek_playback(_playing(), 10, TOKENS, CONFIG).state
    assert state.cursor == len(TOKENS) - 1
    transition = advance_playback(state, state.generation, 900.0, TOKENS, CONFIG)
    assert transition.state.status is PlaybackStatus.FINISHED
    assert transition.state.cursor == len(TOKENS) - 1
    assert transition.state.finish_time == 900.0
    assert transition.effects == (FinishSession(900.0),)


def test_seek_clamps_and_reschedules_while_playing():
    state = _playing()
    back = seek_playback(state, -10, TOKENS, CONFIG)
    assert back.state == state  # already at the first token

    forward = seek_playback(state, 3, TOKENS, CONFIG)
    assert forward.state.cursor == 3
    assert forward.effects == (
        CancelAdvance(state.generation),
        ScheduleAdvance(100.0, forward.state.generation),
    )


def test_seek_while_paused_does_not_schedule():
    paused = pause_playback(_playing(), 10.0).state
    transition = seek_playback(paused, 2, TOKENS, CONFIG)
    assert transition.state.cursor == 2
    assert transition.state.status is PlaybackStatus.PAUSED
    assert transition.effects == ()


def test_rate_change_reschedules_when_configured():
    state = _playing()
    transition = change_rate(state, 300, TOKENS, CONFIG)
    assert transition.state.rate == 300
    assert transition.effects == (
        CancelAdvance(state.generation),
        ScheduleAdvance(200.0, transition.state.generation),
    )


def test_rate_change_without_reschedule_keeps_inflight_advance():
    config = ReaderConfig(initial_rate=600, reschedule_on_rate_change=False)
    state = start_playback(initial_state(len(TOKENS), config), 0.0, TOKENS, config).state
    transition = change_rate(state, 300, TOKENS, config)
    assert transition.state.rate == 300
    assert transition.state.generation == state.generation
    assert transition.effects == ()

    advanced = advance_playback(transition.state, state.generation, 100.0, TOKENS, config)
    assert advanced.effects == (ScheduleAdvance(200.0, advanced.state.generation),)


def test_rate_is_clamped():
    state = _playing()
    assert change_rate(state, 10, TOKENS, CONFIG).state.rate == CONFIG.min_rate
    assert change_rate(state, 99999, TOKENS, CONFIG).state.rate == CONFIG.max_rate


def test_exit_while_paused_counts_open_pause():
    paused = pause_playback(_playing(0.0), 300.0).state
    transition = exit_playback(paused, 800.0)
    assert transition.state.status is PlaybackStatus.FINISHED
    assert transition.state.accumulated_pause_ms == 500.0
    assert transition.effects == (FinishSession(800.0),)


def test_exit_while_playing_cancels_first():
    state = _playing()
    transition = exit_playback(state, 50.0)
    assert transition.effects == (CancelAdvance(state.generation), FinishSession(50.0))


def test_finished_is_terminal():
    finished = exit_playback(_playing(), 50.0).state
    for transition in (
        start_playback(finished, 60.0, TOKENS, CONFIG),
        pause_playback(finished, 60.0),
        seek_playback(finished, -1, TOKENS, CONFIG),
        change_rate(finished, 200, TOKENS, CONFIG),
        exit_playback(finished, 60.0),
    ):
        assert transition.state == finished
        assert transition.effects == ()
