"""Minimal example driving the playback scheduler on a virtual clock."""

from __future__ import annotations

from bionicflow import (
    InMemoryStatisticsStore,
    PlaybackScheduler,
    ReaderConfig,
    SessionRecorder,
    VirtualTimer,
    tokenize_text,
)
from bionicflow.render import render_frame
from bionicflow.sample import SAMPLE_TEXT


def main() -> None:
    config = ReaderConfig(initial_rate=450)
    timer = VirtualTimer()
    scheduler = PlaybackScheduler(tokenize_text(SAMPLE_TEXT), timer, config)
    scheduler.subscribe(lambda snapshot: print(render_frame(snapshot, color=False)))

    scheduler.play()
    timer.advance(3_000)
    scheduler.pause()
    timer.advance(60_000)  # paused time is not counted as reading time
    scheduler.faster()
    scheduler.play()
    timer.run_until_idle()

    session = scheduler.session
    assert session is not None
    store = InMemoryStatisticsStore()
    saved = SessionRecorder(store, config).record(session)
    print(
        f"\n{session.words_read} words in {session.active_duration_seconds:.1f}s "
        f"at {session.rate} wpm (recorded: {saved})"
    )


if __name__ == "__main__":
    main()
