"""
트위치 EventSub 데이터 모델
구독(Subscription), 원하는 구독 목록(DesiredSubscription), 수신 이벤트(InboundEvent)

참고: https://dev.twitch.tv/docs/eventsub/eventsub-subscription-types/
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class EventType(str, Enum):
    """이 서비스가 구독하는 EventSub 이벤트 종류"""

    FOLLOW = "channel.follow"
    SUBSCRIBE = "channel.subscribe"
    REDEMPTION_ADD = "channel.channel_points_custom_reward_redemption.add"
    UPDATE = "channel.update"
    CHEER = "channel.cheer"
    SUBSCRIPTION_GIFT = "channel.subscription.gift"
    RAID = "channel.raid"
    HYPE_TRAIN_BEGIN = "channel.hype_train.begin"
    HYPE_TRAIN_PROGRESS = "channel.hype_train.progress"
    HYPE_TRAIN_END = "channel.hype_train.end"


class SubscriptionStatus(str, Enum):
    """Helix 가 돌려주는 구독 상태"""

    ENABLED = "enabled"
    VERIFICATION_PENDING = "webhook_callback_verification_pending"
    VERIFICATION_FAILED = "webhook_callback_verification_failed"
    FAILURES_EXCEEDED = "notification_failures_exceeded"
    REVOKED = "authorization_revoked"
    USER_REMOVED = "user_removed"


# 정상(또는 검증 대기 중)으로 보고 그대로 두는 상태
HEALTHY_STATUSES = frozenset({
    SubscriptionStatus.ENABLED.value,
    SubscriptionStatus.VERIFICATION_PENDING.value,
})


@dataclass(frozen=True)
class Subscription:
    """원격(Helix)에 등록된 EventSub 구독 하나"""
    id: str
    type: str
    status: str
    condition: dict[str, str] = field(default_factory=dict)
    transport: dict[str, Any] = field(default_factory=dict)
    version: str = "1"
    cost: int = 0
    created_at: Optional[str] = None

    @property
    def is_healthy(self) -> bool:
        return self.status in HEALTHY_STATUSES

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Subscription":
        """Helix 응답의 data[] 항목 하나를 변환. 모르는 상태 문자열도 그대로 보관."""
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            status=str(data.get("status", "")),
            condition=dict(data.get("condition") or {}),
            transport=dict(data.get("transport") or {}),
            version=str(data.get("version", "1")),
            cost=int(data.get("cost") or 0),
            created_at=data.get("created_at"),
        )


@dataclass(frozen=True)
class DesiredSubscription:
    """시작 시 맞춰야 할 구독 하나. condition 이 없으면 기본 broadcaster 필터 사용."""
    type: str
    condition: Optional[dict[str, str]] = None
    version: str = "1"

    def resolve_condition(self, broadcaster_user_id: str) -> dict[str, str]:
        if self.condition:
            return dict(self.condition)
        return {"broadcaster_user_id": broadcaster_user_id}


def default_desired_subscriptions(broadcaster_user_id: str) -> list[DesiredSubscription]:
    """기본 구독 목록 (순서 고정). 레이드는 '받는 쪽' 채널로 필터링."""
    return [
        DesiredSubscription(EventType.FOLLOW.value),
        DesiredSubscription(EventType.SUBSCRIBE.value),
        DesiredSubscription(EventType.REDEMPTION_ADD.value),
        DesiredSubscription(EventType.UPDATE.value),
        DesiredSubscription(EventType.CHEER.value),
        DesiredSubscription(EventType.SUBSCRIPTION_GIFT.value),
        DesiredSubscription(
            EventType.RAID.value,
            condition={"to_broadcaster_user_id": broadcaster_user_id},
        ),
    ]


@dataclass(frozen=True)
class SubscriptionEnvelope:
    """웹훅 페이로드의 subscription 부분"""
    id: str
    status: str
    type: str
    version: str
    created_at: str

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "SubscriptionEnvelope":
        return cls(
            id=str(data.get("id", "")),
            status=str(data.get("status", "")),
            type=str(data.get("type", "")),
            version=str(data.get("version", "")),
            created_at=str(data.get("created_at", "")),
        )


@dataclass(frozen=True)
class InboundEvent:
    """검증을 마친 웹훅 알림. event 는 타입별 원본 페이로드."""
    subscription: SubscriptionEnvelope
    event: Mapping[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> str:
        return self.subscription.type

    @classmethod
    def from_payload(cls, subscription: SubscriptionEnvelope, event: Mapping[str, Any]) -> "InboundEvent":
        return cls(subscription=subscription, event=dict(event))


@dataclass(frozen=True)
class RedemptionEvent(InboundEvent):
    """채널 포인트 리워드 사용 (channel.channel_points_custom_reward_redemption.add)"""
    redemption_id: str = ""
    user_id: str = ""
    user_login: str = ""
    user_name: str = ""
    user_input: str = ""
    status: str = ""
    redeemed_at: str = ""
    reward_id: str = ""
    reward_title: str = ""
    reward_cost: int = 0

    @classmethod
    def from_payload(cls, subscription: SubscriptionEnvelope, event: Mapping[str, Any]) -> "RedemptionEvent":
        reward = event.get("reward") or {}
        return cls(
            subscription=subscription,
            event=dict(event),
            redemption_id=str(event.get("id", "")),
            user_id=str(event.get("user_id", "")),
            user_login=str(event.get("user_login", "")),
            user_name=str(event.get("user_name", "")),
            user_input=str(event.get("user_input") or ""),
            status=str(event.get("status", "")),
            redeemed_at=str(event.get("redeemed_at", "")),
            reward_id=str(reward.get("id", "")),
            reward_title=str(reward.get("title", "")),
            reward_cost=int(reward.get("cost") or 0),
        )


# subscription.type → 이벤트 클래스. 없는 타입은 InboundEvent 그대로 사용.
EVENT_VARIANTS: dict[str, type[InboundEvent]] = {
    EventType.REDEMPTION_ADD.value: RedemptionEvent,
}


def parse_event(payload: Mapping[str, Any]) -> InboundEvent:
    """
    웹훅 본문 {subscription, event} 를 타입별 이벤트 객체로 변환

    Raises:
        ValueError: subscription.type 이 없는 경우
    """
    envelope = SubscriptionEnvelope.from_payload(payload.get("subscription") or {})
    if not envelope.type:
        raise ValueError("subscription.type 이 없는 페이로드입니다")
    variant = EVENT_VARIANTS.get(envelope.type, InboundEvent)
    return variant.from_payload(envelope, payload.get("event") or {})

