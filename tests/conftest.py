"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from ideareel.config import IdeaReelConfig
from ideareel.models import CharacterTiming


def _uniform_timings(text: str, step: float = 0.1) -> CharacterTiming:
    return CharacterTiming(
        characters=list(text),
        character_start_times_seconds=[i * step for i in range(len(text))],
        character_end_times_seconds=[(i + 1) * step for i in range(len(text))],
    )


@pytest.fixture
def make_timings() -> Callable[..., CharacterTiming]:
    """Factory: one character every ``step`` seconds, each lasting ``step``."""
    return _uniform_timings


@pytest.fixture
def tmp_config_path(tmp_path: Path) -> Path:
    """Return a temporary config file path."""
    return tmp_path / "config.toml"


@pytest.fixture
def default_config() -> IdeaReelConfig:
    """Return a default config instance."""
    return IdeaReelConfig()


@pytest.fixture
def llm() -> AsyncMock:
    """An LLM client whose ``complete`` is an AsyncMock."""
    client = AsyncMock()
    client.complete.return_value = ""
    return client
