"""
컴패니언 조립 및 실행.

전역 싱글턴 없이 build_context 에서 모든 객체를 만들어 AppContext 로 묶고,
run 에서 구독 재조정 / 채팅 세션 / 웹 서버를 한 이벤트 루프에서 같이 돌린다.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import socketio
import uvicorn
from fastapi import FastAPI

from src.chat.twitch_client import TwitchChatSession
from src.events.rewards import RewardDispatcher, load_rewards
from src.events.router import EventRouter
from src.integrations.giveaways import GiveawayController
from src.integrations.launcher import launch_script
from src.integrations.obs_client import OBSController
from src.integrations.snap import SnapController
from src.integrations.spotify import SpotifyNowPlaying
from src.overlay.server import create_app, create_asgi_app
from src.overlay.sink import SocketIOSink, create_socketio_server
from src.twitch.auth import TokenProvider
from src.twitch.reconciler import ReconcileReport, Reconciler
from src.twitch.subscriptions import SubscriptionRegistry
from src.utils.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """실행에 필요한 객체 묶음"""
    settings: Settings
    token_provider: TokenProvider
    registry: SubscriptionRegistry
    reconciler: Reconciler
    sio: socketio.AsyncServer
    sink: SocketIOSink
    obs: OBSController
    snap: SnapController
    spotify: Optional[SpotifyNowPlaying]
    giveaways: GiveawayController
    dispatcher: RewardDispatcher
    router: EventRouter
    chat: TwitchChatSession
    app: FastAPI
    asgi: socketio.ASGIApp


def build_context(settings: Settings) -> AppContext:
    """설정으로 전체 객체 그래프 생성 (네트워크 연결은 하지 않음)"""
    token_provider = TokenProvider(
        settings.client_id, settings.client_secret, settings.tokens_path
    )
    registry = SubscriptionRegistry()
    reconciler = Reconciler(
        token_provider,
        registry,
        broadcaster_user_id=settings.user_id,
        callback_url=settings.callback_url,
        webhook_secret=settings.webhook_secret,
    )

    sio = create_socketio_server()
    sink = SocketIOSink(sio)

    obs_controller = OBSController(
        host=settings.obs_host, port=settings.obs_port, password=settings.obs_password
    )
    snap = SnapController(sink)
    giveaways = GiveawayController(sink)

    rewards = load_rewards(settings.rewards_path)
    dispatcher = RewardDispatcher(rewards, obs_controller, snap, giveaways, launch_script)
    router = EventRouter(dispatcher, sink)

    chat = TwitchChatSession(
        settings.username,
        token_provider,
        on_message=router.handle_chat,
        on_winner_command=giveaways.select_winner,
        winner_command=settings.winner_command,
    )

    spotify = None
    if settings.spotify_enabled:
        spotify = SpotifyNowPlaying(
            settings.spotify_client_id,
            settings.spotify_client_secret,
            settings.spotify_refresh_token,
        )

    app = create_app(router, sink, settings.webhook_secret, spotify=spotify)
    asgi = create_asgi_app(app, sio)

    return AppContext(
        settings=settings,
        token_provider=token_provider,
        registry=registry,
        reconciler=reconciler,
        sio=sio,
        sink=sink,
        obs=obs_controller,
        snap=snap,
        spotify=spotify,
        giveaways=giveaways,
        dispatcher=dispatcher,
        router=router,
        chat=chat,
        app=app,
        asgi=asgi,
    )


async def _reconcile(ctx: AppContext) -> Optional[ReconcileReport]:
    report = await ctx.reconciler.reconcile()
    if report.aborted:
        logger.warning("구독 재조정이 중단되었습니다. 웹훅 이벤트가 들어오지 않을 수 있습니다.")
    return report


async def run(ctx: AppContext) -> None:
    """
    웹 서버, 채팅 세션, 구독 재조정을 동시에 실행.
    웹 서버가 끝나면(Ctrl+C 등) 채팅과 OBS 연결을 정리한다.
    """
    config = uvicorn.Config(
        ctx.asgi,
        host=ctx.settings.server_host,
        port=ctx.settings.server_port,
        log_config=None,  # setup_logging 핸들러 그대로 사용
    )
    server = uvicorn.Server(config)

    chat_task = asyncio.create_task(ctx.chat.start(), name="twitch-chat")
    reconcile_task = asyncio.create_task(_reconcile(ctx), name="eventsub-reconcile")
    try:
        await server.serve()
    finally:
        await ctx.chat.stop()
        for task in (chat_task, reconcile_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(chat_task, reconcile_task, return_exceptions=True)
        await ctx.obs.disconnect()
        logger.info("컴패니언 종료")
