"""
Spotify 현재 재생 곡 조회 (오버레이 "지금 듣는 곡" 용)

refresh token 으로 매번 액세스 토큰을 받아 currently-playing 을 조회합니다.
참고: https://developer.spotify.com/documentation/web-api/reference/get-the-users-currently-playing-track
"""

import logging
from typing import Any, Optional

import httpx

from src.twitch.errors import AuthError

logger = logging.getLogger(__name__)

NOT_PLAYING: dict[str, Any] = {"isPlaying": False}


class SpotifyNowPlaying:
    """Spotify refresh token 기반 현재 재생 곡 조회"""

    TOKEN_URL = "https://accounts.spotify.com/api/token"
    NOW_PLAYING_URL = "https://api.spotify.com/v1/me/player/currently-playing"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self._transport = transport

    async def get_access_token(self) -> str:
        """
        refresh_token 으로 액세스 토큰 발급 (Basic 인증, 폼 인코딩).

        Raises:
            AuthError: 네트워크 오류, 2xx 가 아닌 응답, access_token 없는 응답
        """
        data = {"grant_type": "refresh_token", "refresh_token": self.refresh_token}
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.TOKEN_URL, data=data, auth=(self.client_id, self.client_secret)
                )
        except httpx.HTTPError as e:
            raise AuthError(f"Spotify 토큰 요청 실패: {e}") from e

        if not response.is_success:
            raise AuthError(f"Spotify 토큰 발급 실패 ({response.status_code}): {response.text[:200]}")
        try:
            token = response.json().get("access_token")
        except ValueError:
            token = None
        if not token:
            raise AuthError("Spotify 토큰 응답에 access_token 이 없습니다")
        return token

    async def now_playing(self) -> dict[str, Any]:
        """
        현재 재생 곡. 재생 중이 아니거나(204), 오류 응답(400 초과)이거나,
        조회에 실패하면 {"isPlaying": False}.
        """
        try:
            token = await self.get_access_token()
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    self.NOW_PLAYING_URL, headers={"Authorization": f"Bearer {token}"}
                )
        except (AuthError, httpx.HTTPError) as e:
            logger.warning(f"Spotify 조회 실패: {e}")
            return dict(NOT_PLAYING)

        if response.status_code == 204 or response.status_code > 400:
            return dict(NOT_PLAYING)

        try:
            return _track_info(response.json())
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            # 광고/팟캐스트 등 item 이 곡이 아닌 경우
            logger.debug(f"Spotify 응답에 곡 정보 없음: {e!r}")
            return dict(NOT_PLAYING)


def _track_info(song: dict[str, Any]) -> dict[str, Any]:
    item = song["item"]
    album = item["album"]
    return {
        "album": album["name"],
        "albumImageUrl": album["images"][0]["url"],
        "artist": ", ".join(artist["name"] for artist in item["artists"]),
        "isPlaying": bool(song.get("is_playing")),
        "songUrl": item["external_urls"]["spotify"],
        "title": item["name"],
    }
