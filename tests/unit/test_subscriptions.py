"""Tests for the Helix EventSub subscription registry."""

from __future__ import annotations

import json

import httpx
import pytest

from src.twitch.errors import ApiError
from src.twitch.subscriptions import SubscriptionRegistry
from tests.factories import BROADCASTER_ID, CALLBACK_URL, WEBHOOK_SECRET, make_subscription_json


def _registry(handler) -> SubscriptionRegistry:
    return SubscriptionRegistry(transport=httpx.MockTransport(handler))


class TestListSubscriptions:
    @pytest.mark.asyncio
    async def test_sends_bearer_and_client_id_headers(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": [make_subscription_json()], "pagination": {}})

        subs = await _registry(handler).list_subscriptions("app-token", "client-id")

        assert [s.id for s in subs] == ["sub-1"]
        assert seen[0].headers["authorization"] == "Bearer app-token"
        assert seen[0].headers["client-id"] == "client-id"
        assert seen[0].url.path == "/helix/eventsub/subscriptions"

    @pytest.mark.asyncio
    async def test_follows_pagination_cursor(self) -> None:
        pages = {
            None: {"data": [make_subscription_json(id="a")], "pagination": {"cursor": "next"}},
            "next": {"data": [make_subscription_json(id="b")], "pagination": {}},
        }

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=pages[request.url.params.get("after")])

        subs = await _registry(handler).list_subscriptions("t", "c")
        assert [s.id for s in subs] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_keeps_unknown_status_strings(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [make_subscription_json(status="moderator_removed")]})

        subs = await _registry(handler).list_subscriptions("t", "c")
        assert subs[0].status == "moderator_removed"
        assert subs[0].is_healthy is False

    @pytest.mark.asyncio
    async def test_non_2xx_raises_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Invalid OAuth token"})

        with pytest.raises(ApiError) as exc_info:
            await _registry(handler).list_subscriptions("t", "c")
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_item_without_id_raises_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [{"type": "channel.follow", "status": "enabled"}]})

        with pytest.raises(ApiError):
            await _registry(handler).list_subscriptions("t", "c")

    @pytest.mark.asyncio
    async def test_non_json_body_raises_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(ApiError):
            await _registry(handler).list_subscriptions("t", "c")


class TestCreateSubscription:
    @pytest.mark.asyncio
    async def test_posts_webhook_transport_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                202,
                json={"data": [make_subscription_json(id="new", status="webhook_callback_verification_pending")]},
            )

        created = await _registry(handler).create_subscription(
            "t", "c",
            type="channel.follow",
            condition={"broadcaster_user_id": BROADCASTER_ID},
            callback=CALLBACK_URL,
            secret=WEBHOOK_SECRET,
        )

        assert created is not None
        assert created.id == "new"
        assert json.loads(seen[0].content) == {
            "type": "channel.follow",
            "version": "1",
            "condition": {"broadcaster_user_id": BROADCASTER_ID},
            "transport": {"method": "webhook", "callback": CALLBACK_URL, "secret": WEBHOOK_SECRET},
        }

    @pytest.mark.asyncio
    async def test_failure_is_logged_and_swallowed(self, caplog: pytest.LogCaptureFixture) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(409, json={"message": "subscription already exists"})

        created = await _registry(handler).create_subscription(
            "t", "c", type="channel.follow", condition={}, callback=CALLBACK_URL, secret=WEBHOOK_SECRET
        )

        assert created is None
        assert "channel.follow" in caplog.text

    @pytest.mark.asyncio
    async def test_created_item_without_id_is_swallowed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(202, json={"data": [{"type": "channel.follow"}]})

        created = await _registry(handler).create_subscription(
            "t", "c", type="channel.follow", condition={}, callback=CALLBACK_URL, secret=WEBHOOK_SECRET
        )
        assert created is None

    @pytest.mark.asyncio
    async def test_network_failure_is_swallowed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        created = await _registry(handler).create_subscription(
            "t", "c", type="channel.follow", condition={}, callback=CALLBACK_URL, secret=WEBHOOK_SECRET
        )
        assert created is None


class TestDeleteSubscription:
    @pytest.mark.asyncio
    async def test_deletes_by_id_query_param(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        assert await _registry(handler).delete_subscription("t", "c", "sub-9") is True
        assert seen[0].method == "DELETE"
        assert seen[0].url.params["id"] == "sub-9"

    @pytest.mark.asyncio
    async def test_failure_returns_false(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        assert await _registry(handler).delete_subscription("t", "c", "missing") is False
