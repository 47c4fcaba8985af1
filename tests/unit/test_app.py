"""Tests for settings loading and application wiring."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.app import build_context
from src.utils.config import REQUIRED_VARS, Settings

ENV = {
    "TWITCH_CLIENT_ID": "client-id",
    "TWITCH_CLIENT_SECRET": "client-secret",
    "TWITCH_WEBHOOK_SECRET": "webhook-secret",
    "TWITCH_CALLBACK_URL": "https://companion.example.com/api/twitch/eventsub",
    "TWITCH_USER_ID": "12345",
    "TWITCH_USERNAME": "streamer",
}


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for name in REQUIRED_VARS:
        monkeypatch.delenv(name, raising=False)
    for name, value in ENV.items():
        monkeypatch.setenv(name, value)
    rewards = tmp_path / "rewards.json"
    rewards.write_text(json.dumps([{"id": "r1", "type": "giveaway-entry", "scene": "cam"}]))
    monkeypatch.setenv("REWARDS_PATH", str(rewards))
    monkeypatch.setenv("TWITCH_TOKENS_PATH", str(tmp_path / "tokens.json"))
    return tmp_path


class TestSettings:
    def test_from_env_with_defaults(self, env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OBS_PORT", raising=False)
        monkeypatch.delenv("WINNER_COMMAND", raising=False)

        settings = Settings.from_env()

        assert settings.client_id == "client-id"
        assert settings.tokens_path == env / "tokens.json"
        assert settings.obs_port == 4455
        assert settings.winner_command == "!winner"
        assert Settings.missing() == []

    def test_missing_lists_empty_required_vars(self, env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TWITCH_WEBHOOK_SECRET")
        monkeypatch.setenv("TWITCH_USER_ID", "   ")

        missing = Settings.missing()

        assert len(missing) == 2
        assert missing[0].startswith("TWITCH_WEBHOOK_SECRET")
        assert missing[1].startswith("TWITCH_USER_ID")


class TestBuildContext:
    def test_wires_components_from_settings(self, env: Path) -> None:
        ctx = build_context(Settings.from_env())

        assert ctx.reconciler.broadcaster_user_id == "12345"
        assert ctx.reconciler.registry is ctx.registry
        assert ctx.reconciler.token_provider is ctx.token_provider
        assert ctx.dispatcher.get_reward("r1") is not None
        assert ctx.router.dispatcher is ctx.dispatcher
        assert ctx.chat.channel == "streamer"
        assert ctx.chat.on_message == ctx.router.handle_chat
        assert ctx.chat.on_winner_command == ctx.giveaways.select_winner
        assert ctx.giveaways.sink is ctx.sink

    def test_separate_contexts_share_no_state(self, env: Path) -> None:
        first = build_context(Settings.from_env())
        second = build_context(Settings.from_env())

        assert first.giveaways is not second.giveaways
        assert first.sio is not second.sio

    def test_spotify_is_wired_only_when_fully_configured(self, env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", "spotify-id")
        monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "spotify-secret")
        monkeypatch.delenv("SPOTIFY_REFRESH_TOKEN", raising=False)
        assert build_context(Settings.from_env()).spotify is None

        monkeypatch.setenv("SPOTIFY_REFRESH_TOKEN", "refresh-me")
        ctx = build_context(Settings.from_env())

        assert ctx.spotify is not None
        assert ctx.spotify.refresh_token == "refresh-me"
