"""
오버레이/컨트롤 화면으로 이벤트를 내보내는 창구.
python-socketio AsyncServer 로 브라우저 소스(OBS)와 로컬 UI 에 emit.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

import socketio

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """(이벤트 이름, 페이로드) 를 받는 좁은 인터페이스"""

    async def emit(self, event: str, payload: Mapping[str, Any]) -> bool:
        ...


def create_socketio_server() -> socketio.AsyncServer:
    """ASGI 모드 Socket.IO 서버. CORS 는 로컬 오버레이용으로 전부 허용."""
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins="*",
        logger=False,
        engineio_logger=False,
    )


class SocketIOSink:
    """Socket.IO 로 연결된 모든 클라이언트에 브로드캐스트"""

    def __init__(self, sio: socketio.AsyncServer):
        self.sio = sio

    async def emit(self, event: str, payload: Mapping[str, Any]) -> bool:
        try:
            await self.sio.emit(event, dict(payload))
            return True
        except Exception as e:
            logger.error("Socket.IO emit 실패 (%s): %s", event, e)
            return False
