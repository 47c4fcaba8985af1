"""Shared test fixtures for the Twitch companion."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.factories import RecordingSink


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def tokens_path(tmp_path: Path) -> Path:
    return tmp_path / "tokens.json"
