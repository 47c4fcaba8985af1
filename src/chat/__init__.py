"""
채팅 수집 모듈
트위치 채널 채팅을 수신해 ChatEvent 로 전달
"""

from .base_client import ChatClient, ChatEvent
from .twitch_client import TwitchChatSession

__all__ = [
    "ChatClient",
    "ChatEvent",
    "TwitchChatSession",
]
