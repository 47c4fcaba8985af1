"""
EventSub 구독 관리 (Helix REST)
목록 조회 / 생성 / 삭제. 재시도는 하지 않음 (프로세스 재시작 시 재조정이 곧 재시도).

참고: https://dev.twitch.tv/docs/api/reference/#get-eventsub-subscriptions
"""

import logging
from typing import Optional

import httpx

from .errors import ApiError
from .models import Subscription

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """원격 웹훅 구독 목록 관리"""

    API_BASE_URL = "https://api.twitch.tv/helix"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            transport: httpx 전송 계층 (테스트용 MockTransport 주입)
        """
        self._transport = transport

    @property
    def subscriptions_url(self) -> str:
        return f"{self.API_BASE_URL}/eventsub/subscriptions"

    @staticmethod
    def _headers(token: str, client_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Client-Id": client_id}

    async def list_subscriptions(self, token: str, client_id: str) -> list[Subscription]:
        """
        등록된 구독 전체 조회 (pagination.cursor 따라 끝까지)

        Raises:
            ApiError: 요청 실패, 2xx 가 아닌 응답, 해석할 수 없는 응답
        """
        subscriptions: list[Subscription] = []
        params: dict[str, str] = {}
        async with httpx.AsyncClient(transport=self._transport) as client:
            while True:
                try:
                    response = await client.get(
                        self.subscriptions_url,
                        headers=self._headers(token, client_id),
                        params=params,
                    )
                except httpx.HTTPError as e:
                    raise ApiError(0, message=f"구독 목록 요청 실패: {e}") from e
                if not response.is_success:
                    raise ApiError(response.status_code, response.text)

                try:
                    body = response.json()
                    subscriptions.extend(Subscription.from_api(item) for item in body.get("data") or [])
                    cursor = (body.get("pagination") or {}).get("cursor")
                except (KeyError, TypeError, ValueError, AttributeError) as e:
                    raise ApiError(
                        response.status_code, response.text, message=f"구독 목록 응답 형식 오류: {e!r}"
                    ) from e
                if not cursor:
                    break
                params = {"after": cursor}

        logger.info(f"구독 {len(subscriptions)}개 조회")
        return subscriptions

    async def create_subscription(
        self,
        token: str,
        client_id: str,
        type: str,
        condition: dict[str, str],
        callback: str,
        secret: str,
        version: str = "1",
    ) -> Optional[Subscription]:
        """
        웹훅 구독 생성. 실패해도 예외를 던지지 않고 로그만 남김
        (다음 재조정 때 다시 생성 시도됨).

        Returns:
            생성된 Subscription, 실패 시 None
        """
        body = {
            "type": type,
            "version": version,
            "condition": condition,
            "transport": {
                "method": "webhook",
                "callback": callback,
                "secret": secret,
            },
        }
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.subscriptions_url,
                    headers=self._headers(token, client_id),
                    json=body,
                )
            if not response.is_success:
                raise ApiError(response.status_code, response.text)
            data = response.json().get("data") or []
            if not data:
                logger.warning(f"구독 생성 응답에 data 가 없습니다 ({type})")
                return None
            created = Subscription.from_api(data[0])
        except (httpx.HTTPError, ApiError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"구독 생성 실패 ({type}): {e!r}")
            return None

        logger.info(f"구독 생성: {type} ({created.id}, {created.status})")
        return created

    async def delete_subscription(self, token: str, client_id: str, subscription_id: str) -> bool:
        """
        구독 삭제 (DELETE ?id=...). 결과는 로그로만 남김.

        Returns:
            성공 여부
        """
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.delete(
                    self.subscriptions_url,
                    headers=self._headers(token, client_id),
                    params={"id": subscription_id},
                )
        except httpx.HTTPError as e:
            logger.error(f"구독 삭제 요청 실패 ({subscription_id}): {e}")
            return False

        if not response.is_success:
            logger.warning(f"구독 삭제 실패 ({subscription_id}): {response.status_code}")
            return False
        logger.info(f"구독 삭제: {subscription_id}")
        return True
