from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from .models import HighlightStrategy


@dataclass(slots=True)
class ReaderConfig:
    """Configuration options for playback pacing, controls and session recording."""

    initial_rate: int = 300
    min_rate: int = 100
    max_rate: int = 2000
    rate_step: int = 50
    jump_size: int = 10
    step_size: int = 5
    punctuation_multiplier: float = 1.5
    long_word_multiplier: float = 1.3
    long_word_threshold: int = 10
    highlight_strategy: str = HighlightStrategy.OPTIMAL_RECOGNITION_POINT.value
    reschedule_on_rate_change: bool = True
    min_session_seconds: float = 10.0
    min_session_words: int = 50
    stats_path: str = "~/.bionicflow/stats.json"

    def __post_init__(self) -> None:
        if self.min_rate <= 0:
            raise ValueError("min_rate must be positive.")
        if self.max_rate < self.min_rate:
            raise ValueError("max_rate must be greater than or equal to min_rate.")
        HighlightStrategy.parse(self.highlight_strategy)

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the configuration."""
        return dict(asdict(self))

    def clamp_rate(self, rate: int) -> int:
        return max(self.min_rate, min(int(rate), self.max_rate))

    @property
    def strategy(self) -> HighlightStrategy:
        return HighlightStrategy.parse(self.highlight_strategy)

    @property
    def resolved_stats_path(self) -> Path:
        return Path(self.stats_path).expanduser()


def _build_kwargs(data: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {field.name for field in fields(ReaderConfig)}
    return {key: data[key] for key in data if key in allowed}


def config_from_dict(data: Mapping[str, Any] | None) -> ReaderConfig:
    """Build a ReaderConfig from a dictionary-like input."""
    if data is None:
        return ReaderConfig()
    return ReaderConfig(**_build_kwargs(data))


def config_from_yaml(path: str | Path) -> ReaderConfig:
    """Load configuration from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> ReaderConfig:
    """Load configuration from YAML when provided, otherwise return defaults."""
    if path is None:
        return ReaderConfig()
    return config_from_yaml(path)
