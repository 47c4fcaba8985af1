"""
채팅 클라이언트 추상 기본 클래스
채팅 세션 구현이 따라야 하는 인터페이스와 플랫폼 공통 ChatEvent
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Union
from dataclasses import dataclass
import asyncio
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatEvent:
    """채팅 메시지 하나 (UI 로 보내는 형태)"""
    channel: str
    user: str
    message: str
    broadcaster: bool = False
    moderator: bool = False


ChatCallback = Callable[[ChatEvent], Union[None, Awaitable[None]]]


class ChatClient(ABC):
    """채팅 클라이언트 추상 기본 클래스"""

    def __init__(
        self,
        channel: str,
        on_message: Optional[ChatCallback] = None,
    ):
        """
        Args:
            channel: 채널 이름(로그인)
            on_message: 메시지 수신 시 호출할 콜백 함수 (동기/비동기 모두 가능)
        """
        self.channel = channel
        self.on_message = on_message

        # 연결 상태
        self.is_connected = False
        self._running = False
        self._stopped: Optional[asyncio.Event] = None

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """플랫폼 이름 반환 (예: 'twitch')"""
        pass

    @abstractmethod
    async def connect(self):
        """플랫폼별 연결 로직 구현"""
        pass

    @abstractmethod
    async def disconnect(self):
        """플랫폼별 연결 종료 로직 구현"""
        pass

    async def listen(self):
        """메시지는 콜백으로 들어오므로 stop() 될 때까지 대기만 함"""
        self._running = True
        self._stopped = asyncio.Event()
        await self._stopped.wait()

    async def start(self):
        """
        클라이언트 시작. 첫 연결 실패는 로그만 남기고 반환 (여기서 재시작하지 않음).
        """
        try:
            await self.connect()
        except Exception as e:
            logger.error(f"[{self.platform_name}] 채팅 연결 실패: {e}")
            return
        await self.listen()

    async def stop(self):
        """클라이언트 중지"""
        self._running = False
        if self._stopped is not None:
            self._stopped.set()
        await self.disconnect()

    async def _emit(self, event: ChatEvent) -> None:
        """on_message 호출 (코루틴이면 await)"""
        if not self.on_message:
            return
        cb = self.on_message(event)
        if asyncio.iscoroutine(cb):
            await cb
