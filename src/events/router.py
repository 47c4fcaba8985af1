"""
수신 이벤트 라우터
웹훅 알림은 subscription.type 별 핸들러 표로 분기, 채팅 이벤트는 UI 로 그대로 내보낸다.

핸들러가 없는 타입은 받아만 두고 아무것도 하지 않음
(서버 쪽에서 새 구독 타입을 켜도 라우터가 죽지 않도록).
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Awaitable, Callable

from src.chat.base_client import ChatEvent
from src.overlay.sink import EventSink
from src.twitch.models import EventType, InboundEvent, RedemptionEvent

from .results import ActionResult
from .rewards import RewardDispatcher

logger = logging.getLogger(__name__)

CHAT_EVENT = "twitch-chat-event"

Handler = Callable[[InboundEvent], Awaitable[list[ActionResult]]]


class EventRouter:
    def __init__(self, dispatcher: RewardDispatcher, sink: EventSink):
        self.dispatcher = dispatcher
        self.sink = sink
        self._handlers: dict[str, Handler] = {
            EventType.REDEMPTION_ADD.value: self._on_redemption,
        }

    async def handle_event(self, event: InboundEvent) -> list[ActionResult]:
        """웹훅 이벤트 하나 처리. 예외는 밖으로 내보내지 않음."""
        handler = self._handlers.get(event.type)
        if handler is None:
            logger.debug("처리하지 않는 이벤트 타입: %s", event.type)
            return []
        try:
            return await handler(event)
        except Exception as e:
            logger.error("이벤트 처리 오류 (%s): %s", event.type, e, exc_info=True)
            return []

    async def _on_redemption(self, event: InboundEvent) -> list[ActionResult]:
        if not isinstance(event, RedemptionEvent):
            logger.warning("리워드 이벤트 형식이 아닙니다: %s", event.subscription.id)
            return []
        return await self.dispatcher.redeem(event)

    async def handle_chat(self, event: ChatEvent) -> None:
        """채팅 이벤트를 오버레이/컨트롤 화면으로 전달"""
        await self.sink.emit(CHAT_EVENT, asdict(event))
