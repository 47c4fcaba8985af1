"""
트위치 인증 유틸리티
앱 토큰(client credentials) 발급과 디스크에 저장된 유저 토큰(채팅용) 로드/갱신을 담당합니다.

참고: https://dev.twitch.tv/docs/authentication/getting-tokens-oauth/
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import httpx
from twitchAPI.twitch import Twitch
from twitchAPI.type import AuthScope

from .errors import AuthError

logger = logging.getLogger(__name__)

# 채팅 읽기/쓰기에 필요한 기본 스코프
DEFAULT_USER_SCOPES = [AuthScope.CHAT_READ, AuthScope.CHAT_EDIT]


@dataclass
class UserTokens:
    """디스크에 저장되는 유저 토큰 묶음 (tokens.json)"""
    access_token: str
    refresh_token: str
    scope: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserTokens":
        # 예전 포맷(camelCase)도 읽을 수 있게 둘 다 확인
        access_token = data.get("access_token") or data.get("accessToken")
        refresh_token = data.get("refresh_token") or data.get("refreshToken")
        if not access_token or not refresh_token:
            raise AuthError("토큰 파일에 access_token/refresh_token 이 없습니다")
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            scope=list(data.get("scope") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "scope": list(self.scope),
        }

    def auth_scopes(self) -> list[AuthScope]:
        """저장된 스코프 문자열 → AuthScope. 모르는 값은 건너뛰고, 비어 있으면 기본값."""
        scopes = []
        for value in self.scope:
            try:
                scopes.append(AuthScope(value))
            except ValueError:
                logger.warning(f"알 수 없는 스코프 무시: {value}")
        return scopes or list(DEFAULT_USER_SCOPES)


class TokenProvider:
    """트위치 토큰 제공자 (앱 토큰 + 갱신되는 유저 인증)"""

    TOKEN_URL = "https://id.twitch.tv/oauth2/token"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        tokens_path: Union[Path, str],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            client_id: 트위치 애플리케이션 Client ID
            client_secret: 트위치 애플리케이션 Client Secret
            tokens_path: 유저 토큰 JSON 파일 경로 (갱신 시 같은 경로에 덮어씀)
            transport: httpx 전송 계층 (테스트용 MockTransport 주입)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.tokens_path = Path(tokens_path)
        self._transport = transport

    async def get_app_token(self) -> str:
        """
        Client Credentials 로 앱 액세스 토큰 발급. 캐시하지 않음 (재조정 시마다 새로 발급).

        Raises:
            AuthError: 네트워크 오류, 2xx 가 아닌 응답, access_token 없는 응답
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "client_credentials",
        }
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                # data= 로 넘기면 application/x-www-form-urlencoded 로 인코딩됨
                response = await client.post(self.TOKEN_URL, data=data)
        except httpx.HTTPError as e:
            raise AuthError(f"앱 토큰 요청 실패: {e}") from e

        if not response.is_success:
            raise AuthError(f"앱 토큰 발급 실패 ({response.status_code}): {response.text[:200]}")

        try:
            token = response.json().get("access_token")
        except ValueError as e:
            raise AuthError("앱 토큰 응답이 JSON 이 아닙니다") from e
        if not token:
            raise AuthError("앱 토큰 응답에 access_token 이 없습니다")
        logger.info("앱 액세스 토큰 발급 성공")
        return token

    def load_user_tokens(self) -> UserTokens:
        """tokens.json 로드"""
        try:
            data = json.loads(self.tokens_path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise AuthError(f"토큰 파일이 없습니다: {self.tokens_path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise AuthError(f"토큰 파일을 읽을 수 없습니다: {e}") from e
        return UserTokens.from_dict(data)

    def save_user_tokens(self, tokens: UserTokens) -> None:
        """
        tokens.json 저장. 같은 디렉터리의 임시 파일에 쓴 뒤 os.replace 로 통째로 교체하므로
        중간에 죽어도 반쯤 쓰인 파일이 남지 않음.
        """
        self.tokens_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.tokens_path.parent), prefix=".tokens-", suffix=".json"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(tokens.to_dict(), f, indent=4)
            os.replace(tmp_path, self.tokens_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def on_user_refresh(self, access_token: str, refresh_token: str) -> None:
        """
        twitchAPI 가 유저 토큰을 갱신한 직후 호출하는 콜백.
        기존 스코프는 유지하고 토큰만 바꿔서 바로 디스크에 기록.
        """
        try:
            scope = self.load_user_tokens().scope
        except AuthError:
            scope = [s.value for s in DEFAULT_USER_SCOPES]
        self.save_user_tokens(UserTokens(access_token, refresh_token, scope))
        logger.info(f"유저 토큰 갱신 저장 완료: {self.tokens_path}")

    async def get_user_auth(self) -> Twitch:
        """
        저장된 유저 토큰으로 갱신 가능한 Twitch 인스턴스 생성

        Returns:
            유저 인증이 설정된 twitchAPI Twitch (만료 시 자동 갱신 + on_user_refresh 저장)

        Raises:
            AuthError: 토큰 파일 문제 또는 인증 실패
        """
        tokens = self.load_user_tokens()
        try:
            twitch = await Twitch(self.client_id, self.client_secret)
            twitch.user_auth_refresh_callback = self.on_user_refresh
            await twitch.set_user_authentication(
                tokens.access_token,
                tokens.auth_scopes(),
                tokens.refresh_token,
                validate=True,
            )
        except AuthError:
            raise
        except Exception as e:
            raise AuthError(f"유저 인증 실패: {e}") from e
        logger.info("유저 인증 설정 완료")
        return twitch
