"""
OBS WebSocket(v5) 클라이언트. obsws-python ReqClient 로 연결 후 장면 전환.

ReqClient 는 동기 API 라서 asyncio.to_thread 로 돌린다.
연결은 첫 호출 때 만들고, 호출이 실패하면 버려서 다음 호출 때 다시 연결한다.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import obsws_python as obs

from src.events.results import ActionResult

logger = logging.getLogger(__name__)


class OBSController:
    """OBS 장면 전환"""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 4455,
        password: str = "",
        timeout: float = 5.0,
    ):
        self.host = host
        self.port = port
        self.password = password
        self.timeout = timeout
        self._client: Optional[obs.ReqClient] = None
        self._lock = asyncio.Lock()

    def _connect(self) -> obs.ReqClient:
        return obs.ReqClient(
            host=self.host,
            port=self.port,
            password=self.password,
            timeout=self.timeout,
        )

    def _switch_scene_sync(self, scene: str) -> None:
        if self._client is None:
            self._client = self._connect()
            logger.info("OBS 연결됨: %s:%s", self.host, self.port)
        try:
            self._client.set_current_program_scene(scene)
        except Exception:
            self._client = None
            raise

    async def switch_scene(self, scene: str) -> ActionResult:
        """현재 프로그램 장면을 scene 으로 전환"""
        async with self._lock:
            try:
                await asyncio.to_thread(self._switch_scene_sync, scene)
            except Exception as e:
                logger.warning("OBS 장면 전환 실패 (%s): %s", scene, e)
                return ActionResult.failure("scene-switch", e)
        return ActionResult.success("scene-switch", scene)

    async def disconnect(self) -> None:
        async with self._lock:
            if self._client is not None:
                client, self._client = self._client, None
                await asyncio.to_thread(client.disconnect)
                logger.info("OBS 연결 해제.")
