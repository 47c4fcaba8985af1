"""
트위치 연동 오류 분류.
모든 오류는 발생 지점에서 잡아서 로그만 남기고 상위로 전파하지 않는다.
"""

from typing import Optional


class TwitchError(Exception):
    """트위치 연동 공통 기본 예외"""


class AuthError(TwitchError):
    """앱 토큰 발급(client credentials) 또는 유저 인증 실패"""


class ApiError(TwitchError):
    """Helix API 가 2xx 가 아닌 응답을 돌려준 경우"""

    def __init__(self, status_code: int, body: str = "", message: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Helix API 오류 {status_code}: {body[:200]}")


class ChatConnectionError(TwitchError):
    """채팅 서버 연결 실패"""


class ActionError(TwitchError):
    """리워드 부수효과(스크립트 실행, 필터 토글, 추첨 응모, 장면 전환) 실패"""
