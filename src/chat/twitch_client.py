"""
트위치 채팅(IRC) 세션
twitchAPI Chat 으로 채널 하나에 접속해서 메시지를 ChatEvent 로 바꿔 전달합니다.

방송인 본인이 보낸 '!winner' 로 시작하는 메시지는 일반 전달과 별도로 추첨 당첨자 선정을 실행합니다.

참고: https://pytwitchapi.dev/en/stable/modules/twitchAPI.chat.html
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from twitchAPI.chat import Chat, ChatMessage, EventData
from twitchAPI.twitch import Twitch
from twitchAPI.type import ChatEvent as TwitchChatEvent

from src.events.results import ActionResult, log_result
from src.twitch.auth import TokenProvider
from src.twitch.errors import ChatConnectionError

from .base_client import ChatCallback, ChatClient, ChatEvent

logger = logging.getLogger(__name__)

DEFAULT_WINNER_COMMAND = "!winner"


class TwitchChatSession(ChatClient):
    """트위치 채팅 세션 (채널 하나)"""

    @property
    def platform_name(self) -> str:
        """플랫폼 이름"""
        return "twitch"

    def __init__(
        self,
        channel: str,
        token_provider: TokenProvider,
        on_message: Optional[ChatCallback] = None,
        on_winner_command: Optional[Callable[[], Awaitable[object]]] = None,
        winner_command: str = DEFAULT_WINNER_COMMAND,
    ):
        """
        Args:
            channel: 접속할 채널 로그인 (방송인 본인)
            token_provider: 유저 인증 제공자 (갱신된 토큰은 디스크에 저장됨)
            on_message: ChatEvent 수신 콜백
            on_winner_command: 방송인이 당첨 명령을 보냈을 때 호출
            winner_command: 당첨 명령 접두어
        """
        super().__init__(channel, on_message)
        self.token_provider = token_provider
        self.on_winner_command = on_winner_command
        self.winner_command = winner_command

        self.twitch: Optional[Twitch] = None
        self.chat: Optional[Chat] = None

    async def connect(self):
        """유저 인증 → Chat 생성 → 이벤트 등록 → 시작"""
        try:
            self.twitch = await self.token_provider.get_user_auth()
            # 콜백은 메인 이벤트 루프에서 돌도록 지정
            self.chat = await Chat(
                self.twitch,
                initial_channel=[self.channel],
                callback_loop=asyncio.get_running_loop(),
            )
            self.chat.register_event(TwitchChatEvent.READY, self._on_ready)
            self.chat.register_event(TwitchChatEvent.MESSAGE, self._on_chat_message)
            self.chat.start()
        except Exception as e:
            self.is_connected = False
            raise ChatConnectionError(f"채팅 연결 실패: {e}") from e

        logger.info(f"[{self.platform_name}] 채팅 시작: #{self.channel} (READY 대기)")

    async def _on_ready(self, ready_event: EventData):
        self.is_connected = True
        logger.info(f"[{self.platform_name}] 채팅 준비 완료")

    def is_owner(self, user_name: str) -> bool:
        return user_name.lower() == self.channel.lower()

    async def _on_chat_message(self, msg: ChatMessage):
        """
        채팅 메시지 수신 핸들러
        방송인의 당첨 명령이면 당첨자 선정 후, 모든 메시지를 ChatEvent 로 전달
        """
        try:
            user = msg.user.name
            text = msg.text or ""
            room = msg.room

            if text.startswith(self.winner_command) and self.is_owner(user):
                await self._run_winner_command(user)

            badges = msg.user.badges or {}
            broadcaster = "broadcaster" in badges or (
                room is not None and room.room_id is not None and room.room_id == msg.user.id
            )
            event = ChatEvent(
                channel=room.name if room is not None else self.channel,
                user=user,
                message=text,
                broadcaster=bool(broadcaster),
                moderator=bool(msg.user.mod),
            )
            await self._emit(event)

        except Exception as e:
            logger.error(f"[{self.platform_name}] 채팅 메시지 처리 오류: {e}", exc_info=True)

    async def _run_winner_command(self, user: str) -> None:
        """당첨 명령 실행. 실패해도 채팅 전달은 계속된다."""
        logger.info(f"[{self.platform_name}] 당첨 명령: {user}")
        if not self.on_winner_command:
            return
        try:
            result = await self.on_winner_command()
        except Exception as e:
            result = ActionResult.failure("giveaway-winner", e)
        if isinstance(result, ActionResult):
            log_result(result)

    async def disconnect(self):
        """채팅 종료 및 Twitch 세션 정리"""
        if self.chat:
            self.chat.stop()
            self.chat = None
        if self.twitch:
            await self.twitch.close()
            self.twitch = None
        if self.is_connected:
            self.is_connected = False
            logger.info(f"[{self.platform_name}] 채팅 종료")
