"""
EventSub 구독 재조정
원하는 구독 목록(DesiredSubscription)과 Helix 에 등록된 구독을 비교해서 맞춘다.

동작 (타입별, 정해진 순서대로 하나씩):
    1. 같은 type 의 기존 구독을 모두 찾는다 (condition 은 비교하지 않음, 타입당 condition 은 하나뿐).
    2. 그중 하나라도 enabled / 검증 대기면 건너뛴다.
    3. 아니면 같은 type 의 구독을 전부 먼저 삭제한다.
    4. 새로 생성한다 (타입별 condition 이 있으면 그것, 없으면 broadcaster_user_id 필터).

같은 타입에 대해 삭제 → 생성 순서가 지켜져야 살아 있는 구독이 중복되지 않으므로 병렬로 돌리지 않는다.
한 타입이 실패해도 다음 타입은 계속 진행한다.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import httpx

from .auth import TokenProvider
from .errors import TwitchError
from .models import DesiredSubscription, Subscription, default_desired_subscriptions
from .subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    """재조정 결과 (타입 목록)"""
    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    aborted: bool = False

    def summary(self) -> str:
        if self.aborted:
            return "재조정 중단"
        return (
            f"생성 {len(self.created)} / 삭제 {len(self.deleted)} / "
            f"유지 {len(self.skipped)} / 실패 {len(self.failed)}"
        )


class Reconciler:
    """시작 시 한 번 실행되는 구독 재조정기"""

    def __init__(
        self,
        token_provider: TokenProvider,
        registry: SubscriptionRegistry,
        broadcaster_user_id: str,
        callback_url: str,
        webhook_secret: str,
        desired: Optional[Sequence[DesiredSubscription]] = None,
    ):
        """
        Args:
            token_provider: 앱 토큰 발급용
            registry: Helix 구독 관리
            broadcaster_user_id: 방송 채널(본인) 유저 ID
            callback_url: 웹훅 수신 URL (공개 주소)
            webhook_secret: 웹훅 서명 검증용 공유 비밀값
            desired: 원하는 구독 목록 (None 이면 기본 목록)
        """
        self.token_provider = token_provider
        self.registry = registry
        self.broadcaster_user_id = broadcaster_user_id
        self.callback_url = callback_url
        self.webhook_secret = webhook_secret
        self.desired = list(desired) if desired is not None else default_desired_subscriptions(broadcaster_user_id)

    async def reconcile(self) -> ReconcileReport:
        """구독 재조정 실행. 예외를 던지지 않고 결과 리포트만 반환."""
        report = ReconcileReport()
        client_id = self.token_provider.client_id

        try:
            token = await self.token_provider.get_app_token()
            existing = await self.registry.list_subscriptions(token, client_id)
        except (TwitchError, ValueError) as e:
            logger.error(f"구독 재조정 중단: {e}")
            report.aborted = True
            return report

        for wanted in self.desired:
            try:
                await self._converge(wanted, existing, token, client_id, report)
            except (TwitchError, httpx.HTTPError) as e:
                logger.error(f"구독 재조정 실패 ({wanted.type}): {e}")
                report.failed.append(wanted.type)

        logger.info(f"구독 재조정 완료: {report.summary()}")
        return report

    async def _converge(
        self,
        wanted: DesiredSubscription,
        existing: Sequence[Subscription],
        token: str,
        client_id: str,
        report: ReconcileReport,
    ) -> None:
        same_type = [sub for sub in existing if sub.type == wanted.type]
        healthy = next((sub for sub in same_type if sub.is_healthy), None)
        if healthy is not None:
            logger.debug(f"구독 유지: {wanted.type} ({healthy.id}, {healthy.status})")
            report.skipped.append(wanted.type)
            return

        # 살아 있는 구독이 없으면 같은 타입의 비정상 구독을 모두 지우고 하나만 새로 만든다
        for stale in same_type:
            logger.info(f"비정상 구독 교체: {wanted.type} ({stale.id}, {stale.status})")
            if await self.registry.delete_subscription(token, client_id, stale.id):
                report.deleted.append(wanted.type)

        created = await self.registry.create_subscription(
            token,
            client_id,
            type=wanted.type,
            condition=wanted.resolve_condition(self.broadcaster_user_id),
            callback=self.callback_url,
            secret=self.webhook_secret,
            version=wanted.version,
        )
        if created is None:
            report.failed.append(wanted.type)
        else:
            report.created.append(wanted.type)
