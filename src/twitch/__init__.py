"""
트위치 연동 모듈
토큰 발급, EventSub 구독 관리/재조정, 웹훅 이벤트 모델
"""

from .auth import TokenProvider, UserTokens
from .errors import ActionError, ApiError, AuthError, ChatConnectionError, TwitchError
from .models import (
    DesiredSubscription,
    EventType,
    InboundEvent,
    RedemptionEvent,
    Subscription,
    SubscriptionStatus,
    default_desired_subscriptions,
    parse_event,
)
from .reconciler import ReconcileReport, Reconciler
from .subscriptions import SubscriptionRegistry

__all__ = [
    "TokenProvider",
    "UserTokens",
    "TwitchError",
    "AuthError",
    "ApiError",
    "ChatConnectionError",
    "ActionError",
    "EventType",
    "SubscriptionStatus",
    "Subscription",
    "DesiredSubscription",
    "default_desired_subscriptions",
    "InboundEvent",
    "RedemptionEvent",
    "parse_event",
    "Reconciler",
    "ReconcileReport",
    "SubscriptionRegistry",
]
