"""
컴패니언 로깅 설정.

- 콘솔: LOG_CONSOLE_LEVEL (기본 WARNING)
- logs/app.log: INFO 이상 전체
- logs/error.log: ERROR 이상
- 영역별 파일: CATEGORY_LOGS 참고 (logger 이름 접두어로 분류, DEBUG 부터)
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

# 파일 이름 → 해당 파일로 보낼 logger 이름 접두어
CATEGORY_LOGS: dict[str, tuple[str, ...]] = {
    "chat.log": ("src.chat", "twitchAPI.chat"),
    "twitch.log": ("src.twitch", "twitchAPI.twitch", "twitchAPI.oauth"),
    "events.log": ("src.events", "src.integrations"),
    "server.log": ("src.overlay", "src.app", "uvicorn", "engineio", "socketio"),
}

# 라이브러리 자체 로그가 많은 것들 (ENGINEIO_LOG_LEVEL 로 일괄 조정)
NOISY_LOGGERS = ("engineio", "socketio", "uvicorn.access", "obsws_python", "websocket")

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class _PrefixFilter(logging.Filter):
    """logger 이름 접두어가 맞는 레코드만 통과"""

    def __init__(self, *prefixes: str):
        super().__init__()
        self._prefixes = tuple(p for p in prefixes if p)

    def filter(self, record: logging.LogRecord) -> bool:
        return (record.name or "").startswith(self._prefixes)


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


def _level(env_name: str, default: int) -> int:
    name = (os.environ.get(env_name) or "").upper()
    value = logging.getLevelName(name) if name else default
    return value if isinstance(value, int) else default


def _file_handler(path: Path, level: int, fmt: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=int(os.environ.get("LOG_MAX_MB", "10")) * 1024 * 1024,
        backupCount=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(fmt)
    return handler


def setup_logging(log_dir: Optional[Union[Path, str]] = None) -> Path:
    """
    루트 로거 핸들러를 새로 구성하고 로그 디렉터리 경로 반환.
    여러 번 호출해도 핸들러가 중복되지 않음.
    """
    log_dir = Path(log_dir) if log_dir is not None else _project_root() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler()
    console.setLevel(_level("LOG_CONSOLE_LEVEL", logging.WARNING))
    console.setFormatter(fmt)
    root.addHandler(console)

    root.addHandler(_file_handler(log_dir / "app.log", logging.INFO, fmt))
    root.addHandler(_file_handler(log_dir / "error.log", logging.ERROR, fmt))

    for filename, prefixes in CATEGORY_LOGS.items():
        handler = _file_handler(log_dir / filename, logging.DEBUG, fmt)
        handler.addFilter(_PrefixFilter(*prefixes))
        root.addHandler(handler)

    noisy_level = _level("ENGINEIO_LOG_LEVEL", logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return log_dir
