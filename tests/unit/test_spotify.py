"""Tests for the Spotify now-playing lookup and its HTTP route."""

from __future__ import annotations

import base64
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient

from src.integrations.spotify import SpotifyNowPlaying
from src.overlay.server import create_app
from tests.factories import WEBHOOK_SECRET, RecordingSink


def _track(is_playing: bool = True) -> dict[str, Any]:
    return {
        "is_playing": is_playing,
        "item": {
            "name": "Never Gonna Give You Up",
            "artists": [{"name": "Rick Astley"}, {"name": "Stock Aitken Waterman"}],
            "album": {
                "name": "Whenever You Need Somebody",
                "images": [{"url": "https://i.scdn.co/image/large"}, {"url": "https://i.scdn.co/image/small"}],
            },
            "external_urls": {"spotify": "https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT"},
        },
    }


def _spotify(player: httpx.Response, seen: list[httpx.Request] | None = None) -> SpotifyNowPlaying:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.host == "accounts.spotify.com":
            return httpx.Response(200, json={"access_token": "spotify-token", "token_type": "Bearer"})
        return player

    return SpotifyNowPlaying(
        "spotify-id", "spotify-secret", "refresh-me", transport=httpx.MockTransport(handler)
    )


class TestTokenExchange:
    @pytest.mark.asyncio
    async def test_refresh_token_grant_with_basic_auth(self) -> None:
        seen: list[httpx.Request] = []

        await _spotify(httpx.Response(204), seen).now_playing()

        token_request, player_request = seen
        assert str(token_request.url) == SpotifyNowPlaying.TOKEN_URL
        assert parse_qs(token_request.content.decode()) == {
            "grant_type": ["refresh_token"],
            "refresh_token": ["refresh-me"],
        }
        expected = base64.b64encode(b"spotify-id:spotify-secret").decode()
        assert token_request.headers["authorization"] == f"Basic {expected}"
        assert str(player_request.url) == SpotifyNowPlaying.NOW_PLAYING_URL
        assert player_request.headers["authorization"] == "Bearer spotify-token"

    @pytest.mark.asyncio
    async def test_rejected_refresh_token_reports_not_playing(self, caplog: pytest.LogCaptureFixture) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant"})

        spotify = SpotifyNowPlaying("id", "secret", "stale", transport=httpx.MockTransport(handler))

        assert await spotify.now_playing() == {"isPlaying": False}
        assert "invalid_grant" in caplog.text


class TestNowPlaying:
    @pytest.mark.asyncio
    async def test_maps_current_track(self) -> None:
        result = await _spotify(httpx.Response(200, json=_track())).now_playing()

        assert result == {
            "album": "Whenever You Need Somebody",
            "albumImageUrl": "https://i.scdn.co/image/large",
            "artist": "Rick Astley, Stock Aitken Waterman",
            "isPlaying": True,
            "songUrl": "https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT",
            "title": "Never Gonna Give You Up",
        }

    @pytest.mark.asyncio
    async def test_paused_track_keeps_details(self) -> None:
        result = await _spotify(httpx.Response(200, json=_track(is_playing=False))).now_playing()

        assert result["isPlaying"] is False
        assert result["title"] == "Never Gonna Give You Up"

    @pytest.mark.asyncio
    async def test_nothing_playing(self) -> None:
        assert await _spotify(httpx.Response(204)).now_playing() == {"isPlaying": False}

    @pytest.mark.asyncio
    async def test_error_status_reports_not_playing(self) -> None:
        assert await _spotify(httpx.Response(503)).now_playing() == {"isPlaying": False}

    @pytest.mark.asyncio
    async def test_non_track_item_reports_not_playing(self) -> None:
        body = {"is_playing": True, "currently_playing_type": "ad", "item": None}
        assert await _spotify(httpx.Response(200, json=body)).now_playing() == {"isPlaying": False}


class TestSpotifyRoute:
    def test_route_returns_now_playing(self, sink: RecordingSink) -> None:
        spotify = _spotify(httpx.Response(200, json=_track()))
        client = TestClient(create_app(None, sink, WEBHOOK_SECRET, spotify=spotify))  # type: ignore[arg-type]

        response = client.get("/api/spotify")

        assert response.status_code == 200
        assert response.json()["artist"] == "Rick Astley, Stock Aitken Waterman"

    def test_unconfigured_route_reports_not_playing(self, sink: RecordingSink) -> None:
        client = TestClient(create_app(None, sink, WEBHOOK_SECRET))  # type: ignore[arg-type]

        response = client.get("/api/spotify")

        assert response.status_code == 200
        assert response.json() == {"isPlaying": False}
