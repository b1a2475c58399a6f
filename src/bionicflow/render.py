from __future__ import annotations

import typer

from .models import PlaybackSnapshot


def _styled(text: str, emphasized: bool, *, color: bool) -> str:
    if not color or not text:
        return text
    if emphasized:
        return typer.style(text, fg=typer.colors.RED, bold=True)
    return text


def render_word(snapshot: PlaybackSnapshot, width: int = 40, *, color: bool = True) -> str:
    """Lay out the current word so its focal character sits in column ``width // 2``."""
    word = snapshot.current_token.text
    highlight = snapshot.highlight
    pivot = highlight.align_index
    center = width // 2

    pieces = []
    for index, char in enumerate(word):
        emphasized = highlight.has_region and highlight.start <= index < highlight.end  # type: ignore[operator]
        pieces.append(_styled(char, emphasized, color=color))

    left_pad = " " * max(0, center - pivot)
    right_pad = " " * max(0, width - center - (len(word) - pivot))
    return left_pad + "".join(pieces) + right_pad


def render_status(snapshot: PlaybackSnapshot) -> str:
    percent = int(snapshot.progress_fraction * 100)
    return (
        f"{snapshot.rate} wpm  {percent:3d}%  "
        f"~{snapshot.estimated_minutes_remaining}m left"
    )


def render_frame(snapshot: PlaybackSnapshot, width: int = 40, *, color: bool = True) -> str:
    """Single terminal line: the centered word followed by progress information."""
    return f"{render_word(snapshot, width, color=color)} | {render_status(snapshot)}"
