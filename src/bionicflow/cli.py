from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import List, TypedDict

import typer
import yaml

from .config import ReaderConfig, load_config
from .errors import EmptyInputError, ExtractionError, InvalidInputError
from .extraction import extract_text
from .highlighting import compute_highlight, highlighted_text
from .models import HighlightStrategy, ReadingSession, Token
from .render import render_frame
from .sample import SAMPLE_TEXT
from .scheduler import PlaybackScheduler
from .session import SessionRecorder, is_significant, summarize_statistics
from .stats_store import JsonStatisticsStore
from .timers import AsyncioTimer, VirtualTimer
from .timing import total_delay_ms
from .tokenization import tokenize_text

app = typer.Typer(help="BionicFlow speed reader CLI.", no_args_is_help=True)

STRATEGY_HELP = "Highlight strategy: first_letter, first_two, first_half, orp or none."


class HighlightPayload(TypedDict):
    word: str
    start: int
    end: int
    align_index: int
    highlighted: str


class SimulationSummary(TypedDict):
    token_count: int
    words_read: int
    rate: int
    scheduled_ms: float
    active_duration_seconds: float
    significant: bool
    recorded: bool


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Read documents one word at a time with a highlighted focal point."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def read(
    input_path: Path | None = typer.Option(
        None, exists=True, readable=True, dir_okay=False, file_okay=True
    ),
    sample: bool = typer.Option(False, "--sample", help="Read the built-in sample text."),
    config: Path | None = typer.Option(None, "--config", "-c"),
    rate: int | None = typer.Option(None, "--rate", "-r", help="Words per minute."),
    strategy: str | None = typer.Option(None, "--strategy", "-s", help=STRATEGY_HELP),
    stats_path: Path | None = typer.Option(
        None, "--stats-path", help="Where reading statistics are stored."
    ),
    record: bool = typer.Option(
        True, "--record/--no-record", help="Save significant sessions to statistics."
    ),
    width: int = typer.Option(40, "--width", help="Columns used to center each word."),
    color: bool = typer.Option(True, "--color/--no-color"),
) -> None:
    """Present a document in the terminal; press Ctrl-C to stop early."""
    cfg = _load_config(config)
    _apply_overrides(cfg, rate, strategy, stats_path)
    tokens = _load_tokens(input_path, None, sample)

    # The asyncio loop is owned here so Ctrl-C can finalize the session before it closes.
    loop = asyncio.new_event_loop()
    scheduler = PlaybackScheduler(tokens, AsyncioTimer(loop), cfg)
    scheduler.subscribe(
        lambda snapshot: typer.echo(
            "\r" + render_frame(snapshot, width, color=color), nl=False
        )
    )
    try:
        loop.run_until_complete(_play_until_finished(scheduler))
    except KeyboardInterrupt:
        scheduler.exit()
    finally:
        loop.close()
    typer.echo("")

    session = scheduler.session
    if session is None:
        return
    recorded = record and SessionRecorder(
        JsonStatisticsStore(cfg.resolved_stats_path), cfg
    ).record(session)
    typer.echo(
        f"Read {session.words_read} words in {session.active_duration_seconds:.1f}s "
        f"at {session.rate} wpm" + (" (saved)" if recorded else "")
    )


@app.command()
def simulate(
    input_path: Path | None = typer.Option(
        None, exists=True, readable=True, dir_okay=False, file_okay=True
    ),
    text: str | None = typer.Option(None, "--text", help="Inline text to simulate."),
    sample: bool = typer.Option(False, "--sample", help="Use the built-in sample text."),
    config: Path | None = typer.Option(None, "--config", "-c"),
    rate: int | None = typer.Option(None, "--rate", "-r", help="Words per minute."),
    stats_path: Path | None = typer.Option(None, "--stats-path"),
    record: bool = typer.Option(
        False, "--record/--no-record", help="Save the simulated session if significant."
    ),
) -> None:
    """Play a document on a virtual clock and emit the session summary as JSON."""
    cfg = _load_config(config)
    _apply_overrides(cfg, rate, None, stats_path)
    tokens = _load_tokens(input_path, text, sample)

    timer = VirtualTimer()
    scheduler = PlaybackScheduler(tokens, timer, cfg)
    scheduler.play()
    timer.run_until_idle()
    session = scheduler.session
    if session is None:  # pragma: no cover - run_until_idle always finishes playback
        raise typer.Exit(code=1)

    recorded = record and SessionRecorder(
        JsonStatisticsStore(cfg.resolved_stats_path), cfg
    ).record(session)
    summary: SimulationSummary = {
        "token_count": len(tokens),
        "words_read": session.words_read,
        "rate": session.rate,
        "scheduled_ms": total_delay_ms(tokens, session.rate, cfg),
        "active_duration_seconds": session.active_duration_seconds,
        "significant": is_significant(session, cfg),
        "recorded": recorded,
    }
    typer.echo(json.dumps(summary, indent=2))


@app.command()
def highlight(
    words: List[str] = typer.Argument(..., help="Words to compute focal points for."),
    strategy: str = typer.Option(
        HighlightStrategy.OPTIMAL_RECOGNITION_POINT.value,
        "--strategy",
        "-s",
        help=STRATEGY_HELP,
    ),
) -> None:
    """Print the highlighted span and pivot index of each word as JSON."""
    chosen = _parse_strategy(strategy)
    payload: List[HighlightPayload] = []
    for word in words:
        try:
            result = compute_highlight(word, chosen)
        except InvalidInputError as exc:
            raise typer.BadParameter(str(exc)) from exc
        start, end, align_index = result.as_tuple()
        payload.append(
            {
                "word": word,
                "start": start,
                "end": end,
                "align_index": align_index,
                "highlighted": highlighted_text(word, result),
            }
        )
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def stats(
    config: Path | None = typer.Option(None, "--config", "-c"),
    stats_path: Path | None = typer.Option(None, "--stats-path"),
) -> None:
    """Print lifetime reading statistics as JSON."""
    cfg = _load_config(config)
    _apply_overrides(cfg, None, None, stats_path)
    store = JsonStatisticsStore(cfg.resolved_stats_path)
    typer.echo(json.dumps(summarize_statistics(store.load()), indent=2))


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = ReaderConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


def main() -> None:
    app()


async def _play_until_finished(scheduler: PlaybackScheduler) -> ReadingSession | None:
    finished = asyncio.Event()
    scheduler.on_finish(lambda _session: finished.set())
    scheduler.play()
    await finished.wait()
    return scheduler.session


def _load_config(path: Path | None) -> ReaderConfig:
    try:
        return load_config(path)
    except (ValueError, TypeError, yaml.YAMLError) as exc:
        raise typer.BadParameter(f"Invalid configuration {path}: {exc}") from exc


def _apply_overrides(
    config: ReaderConfig,
    rate: int | None,
    strategy: str | None,
    stats_path: Path | None,
) -> None:
    """Apply CLI overrides to the loaded configuration when provided."""
    if rate is not None:
        config.initial_rate = config.clamp_rate(rate)
    if strategy:
        config.highlight_strategy = _parse_strategy(strategy).value
    if stats_path:
        config.stats_path = str(stats_path)


def _parse_strategy(value: str) -> HighlightStrategy:
    try:
        return HighlightStrategy.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _load_tokens(input_path: Path | None, text: str | None, sample: bool) -> List[Token]:
    """Resolve the requested source into display tokens."""
    if input_path is not None:
        try:
            source = extract_text(input_path)
        except ExtractionError as exc:
            raise typer.BadParameter(str(exc)) from exc
    elif text is not None:
        source = text
    elif sample:
        source = SAMPLE_TEXT
    else:
        raise typer.BadParameter("Provide --input-path, --text or --sample.")

    try:
        return tokenize_text(source)
    except EmptyInputError as exc:
        raise typer.BadParameter(str(exc)) from exc


if __name__ == "__main__":
    main()
