"""
컴패니언 로컬 HTTP 서버.
- POST /api/twitch/eventsub : EventSub 웹훅 수신 (서명/시각 검증 → 라우터로 전달)
- GET|POST /api/ws/{event}   : 쿼리(및 JSON 본문)를 그대로 Socket.IO 로 emit
- GET /api/spotify          : Spotify 현재 재생 곡 (미설정이면 isPlaying false)
- GET /                      : 채팅/추첨 오버레이 (OBS 브라우저 소스용)

Socket.IO 는 create_asgi_app 으로 FastAPI 앱을 감싸서 같은 포트에서 서비스.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import socketio
from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict, ValidationError

from src.events.router import EventRouter
from src.integrations.spotify import NOT_PLAYING, SpotifyNowPlaying
from src.twitch.models import parse_event

from .sink import EventSink

logger = logging.getLogger(__name__)

# EventSub 요청 헤더
MESSAGE_ID = "Twitch-Eventsub-Message-Id"
MESSAGE_TIMESTAMP = "Twitch-Eventsub-Message-Timestamp"
MESSAGE_SIGNATURE = "Twitch-Eventsub-Message-Signature"
MESSAGE_TYPE = "Twitch-Eventsub-Message-Type"

# 이보다 오래된 메시지는 재전송 공격으로 보고 거부
MAX_MESSAGE_AGE = timedelta(minutes=10)

_TIMESTAMP_RE = re.compile(r"^(.*T\d{2}:\d{2}:\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})?$")


class WebhookSubscription(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    status: str
    type: str
    version: str
    created_at: str = ""


class WebhookPayload(BaseModel):
    subscription: WebhookSubscription
    event: Optional[dict[str, Any]] = None
    challenge: Optional[str] = None


def verify_signature(secret: str, message_id: str, timestamp: str, body: bytes, signature: str) -> bool:
    """sha256=HMAC(secret, message_id + timestamp + body) 비교 (상수 시간)"""
    if not secret or not signature:
        return False
    message = message_id.encode("utf-8") + timestamp.encode("utf-8") + body
    expected = "sha256=" + hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


def parse_timestamp(value: str) -> Optional[datetime]:
    """RFC3339 (나노초 포함) → aware datetime. 형식이 틀리면 None."""
    m = _TIMESTAMP_RE.match(value.strip())
    if not m:
        return None
    base, fraction, tz = m.groups()
    if fraction:
        fraction = "." + (fraction[1:] + "000000")[:6]  # 마이크로초 6자리로 맞춤
    else:
        fraction = ""
    tz = "+00:00" if tz in (None, "Z") else tz
    try:
        return datetime.fromisoformat(f"{base}{fraction}{tz}")
    except ValueError:
        return None


def is_fresh(timestamp: str, now: Optional[datetime] = None) -> bool:
    sent_at = parse_timestamp(timestamp)
    if sent_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return abs(now - sent_at) <= MAX_MESSAGE_AGE


def create_app(
    router: EventRouter,
    sink: EventSink,
    webhook_secret: str,
    spotify: Optional[SpotifyNowPlaying] = None,
) -> FastAPI:
    """라우터/싱크를 명시적으로 받아 FastAPI 앱 생성"""
    app = FastAPI(title="Twitch Companion", docs_url=None, redoc_url=None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
    )

    @app.post("/api/twitch/eventsub")
    async def eventsub_webhook(request: Request, background_tasks: BackgroundTasks):
        """EventSub 웹훅. 검증 요청엔 challenge 를, 알림은 204 후 백그라운드에서 처리."""
        body = await request.body()
        headers = request.headers
        message_id = headers.get(MESSAGE_ID, "")
        timestamp = headers.get(MESSAGE_TIMESTAMP, "")

        if not verify_signature(webhook_secret, message_id, timestamp, body, headers.get(MESSAGE_SIGNATURE, "")):
            logger.warning("웹훅 서명 불일치: %s", message_id)
            return Response(status_code=403)
        if not is_fresh(timestamp):
            logger.warning("오래된 웹훅 메시지 거부: %s (%s)", message_id, timestamp)
            return Response(status_code=403)

        try:
            payload = WebhookPayload.model_validate_json(body)
        except ValidationError as e:
            logger.warning("웹훅 본문 형식 오류: %s", e)
            return Response(status_code=400)

        message_type = headers.get(MESSAGE_TYPE, "")
        sub = payload.subscription

        if message_type == "webhook_callback_verification":
            if not payload.challenge:
                return Response(status_code=400)
            logger.info("웹훅 콜백 검증: %s (%s)", sub.type, sub.id)
            return PlainTextResponse(payload.challenge)

        if message_type == "revocation":
            logger.warning("구독 해지됨: %s (%s, %s)", sub.type, sub.id, sub.status)
            return Response(status_code=204)

        if message_type == "notification":
            event = parse_event(payload.model_dump())
            logger.info("웹훅 알림: %s (%s)", event.type, message_id)
            background_tasks.add_task(router.handle_event, event)
            return Response(status_code=204)

        logger.warning("알 수 없는 웹훅 메시지 타입: %s", message_type)
        return Response(status_code=204)

    @app.api_route("/api/ws/{event}", methods=["GET", "POST"])
    async def emit_event(event: str, request: Request):
        """쿼리 파라미터(+ POST JSON 본문)를 event 이름으로 emit. 성공 200, 실패 500."""
        payload: dict[str, Any] = dict(request.query_params)
        if request.method == "POST":
            try:
                data = await request.json()
            except ValueError:
                data = None
            if isinstance(data, dict):
                payload.update(data)
        ok = await sink.emit(event, payload)
        return Response(status_code=200 if ok else 500)

    @app.get("/api/spotify")
    async def spotify_now_playing():
        if spotify is None:
            return dict(NOT_PLAYING)
        return await spotify.now_playing()

    @app.get("/", response_class=HTMLResponse)
    def overlay_page():
        """OBS 브라우저 소스용 채팅/추첨 오버레이"""
        return HTMLResponse(OVERLAY_HTML)

    return app


def create_asgi_app(app: FastAPI, sio: socketio.AsyncServer) -> socketio.ASGIApp:
    """Socket.IO 를 FastAPI 앞에 붙인 ASGI 앱 (/socket.io 경로)"""
    return socketio.ASGIApp(sio, other_asgi_app=app)


OVERLAY_HTML = """<!DOCTYPE html>
<html lang="ko">
<head>
  <meta charset="UTF-8">
  <title>Twitch Companion Overlay</title>
  <script src="https://cdn.socket.io/4.7.5/socket.io.min.js"></script>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: sans-serif; background: transparent; height: 100vh; padding: 15px;
           display: flex; flex-direction: column; justify-content: flex-end; overflow: hidden; }
    .row { margin-bottom: 10px; padding: 10px 14px; border-radius: 12px; font-size: 17px;
           background: rgba(40, 45, 60, 0.9); color: #f1f5f9; max-width: 90%;
           animation: slideUp 0.4s ease forwards; }
    .row .name { display: block; font-size: 13px; font-weight: bold; color: #bae6fd; margin-bottom: 4px; }
    .row.broadcaster .name { color: #fcd34d; }
    .row.moderator .name { color: #86efac; }
    .row.winner { background: rgba(226, 176, 136, 0.95); color: #1e293b; font-weight: bold; }
    @keyframes slideUp { from { opacity: 0; transform: translateY(20px); } to { opacity: 1; transform: none; } }
  </style>
</head>
<body>
  <div id="rows"></div>
  <script>
    const MAX_ROWS = 30;
    const rows = document.getElementById("rows");

    function escapeHtml(text) {
      return String(text || "").replace(/&/g, "&amp;").replace(/</g, "&lt;").replace(/>/g, "&gt;");
    }

    function addRow(cls, name, text) {
      const el = document.createElement("div");
      el.className = "row " + cls;
      el.innerHTML = '<span class="name">' + escapeHtml(name) + '</span>' + escapeHtml(text);
      rows.appendChild(el);
      while (rows.children.length > MAX_ROWS) rows.removeChild(rows.firstChild);
    }

    const socket = io();
    socket.on("twitch-chat-event", function (e) {
      const cls = e.broadcaster ? "broadcaster" : (e.moderator ? "moderator" : "");
      addRow(cls, e.user, e.message);
    });
    socket.on("giveaway-winner", function (e) {
      addRow("winner", "🎉 당첨", e.user);
    });
  </script>
</body>
</html>
"""
