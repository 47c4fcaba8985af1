"""
환경 변수(.env) 기반 설정.
.env 로드는 실행 스크립트에서 load_dotenv 로 먼저 해 둔다.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


# 필수 값: 환경 변수 이름 → 설명
REQUIRED_VARS = {
    "TWITCH_CLIENT_ID": "Twitch Client ID",
    "TWITCH_CLIENT_SECRET": "Twitch Client Secret",
    "TWITCH_WEBHOOK_SECRET": "EventSub 웹훅 비밀값",
    "TWITCH_CALLBACK_URL": "EventSub 웹훅 공개 URL",
    "TWITCH_USER_ID": "방송인 유저 ID",
    "TWITCH_USERNAME": "방송인 로그인(채널 이름)",
}


def _env(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str
    webhook_secret: str
    callback_url: str
    user_id: str
    username: str
    tokens_path: Path
    rewards_path: Path
    obs_host: str = "localhost"
    obs_port: int = 4455
    obs_password: str = ""
    server_host: str = "127.0.0.1"
    server_port: int = 8765
    winner_command: str = "!winner"
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_refresh_token: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        root = _project_root()
        return cls(
            client_id=_env("TWITCH_CLIENT_ID"),
            client_secret=_env("TWITCH_CLIENT_SECRET"),
            webhook_secret=_env("TWITCH_WEBHOOK_SECRET"),
            callback_url=_env("TWITCH_CALLBACK_URL"),
            user_id=_env("TWITCH_USER_ID"),
            username=_env("TWITCH_USERNAME"),
            tokens_path=Path(_env("TWITCH_TOKENS_PATH") or root / "tokens.json"),
            rewards_path=Path(_env("REWARDS_PATH") or root / "config" / "rewards.json"),
            obs_host=_env("OBS_HOST", "localhost"),
            obs_port=int(_env("OBS_PORT", "4455")),
            obs_password=_env("OBS_PASSWORD"),
            server_host=_env("SERVER_HOST", "127.0.0.1"),
            server_port=int(_env("SERVER_PORT", "8765")),
            winner_command=_env("WINNER_COMMAND", "!winner"),
            spotify_client_id=_env("SPOTIFY_CLIENT_ID"),
            spotify_client_secret=_env("SPOTIFY_CLIENT_SECRET"),
            spotify_refresh_token=_env("SPOTIFY_REFRESH_TOKEN"),
        )

    @property
    def spotify_enabled(self) -> bool:
        return bool(self.spotify_client_id and self.spotify_client_secret and self.spotify_refresh_token)

    @staticmethod
    def missing() -> list[str]:
        """비어 있는 필수 환경 변수 목록 ("이름 (설명)")"""
        return [f"{name} ({desc})" for name, desc in REQUIRED_VARS.items() if not _env(name)]
