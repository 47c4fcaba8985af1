"""
이벤트 처리 모듈
웹훅/채팅 이벤트 라우팅과 채널 포인트 리워드 실행
"""

from .results import ActionResult
from .rewards import Reward, RewardDispatcher, RewardType, load_rewards
from .router import CHAT_EVENT, EventRouter

__all__ = [
    "ActionResult",
    "Reward",
    "RewardDispatcher",
    "RewardType",
    "load_rewards",
    "CHAT_EVENT",
    "EventRouter",
]
