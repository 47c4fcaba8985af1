"""
Snap Camera 필터 토글.
필터 전환은 Snap 을 띄워 둔 로컬 컨트롤 화면이 담당하고, 여기서는 토글 요청만 보낸다.
"""

import logging

from src.events.results import ActionResult
from src.overlay.sink import EventSink

logger = logging.getLogger(__name__)

SNAP_TOGGLE_EVENT = "snap-filter-toggle"


class SnapController:
    def __init__(self, sink: EventSink):
        self.sink = sink

    async def toggle_snap_filter(self, key: str) -> ActionResult:
        """key 에 해당하는 필터 토글 요청"""
        if not await self.sink.emit(SNAP_TOGGLE_EVENT, {"key": key}):
            return ActionResult.failure("snap-filter", f"토글 요청 전달 실패: {key}")
        logger.debug("Snap 필터 토글 요청: %s", key)
        return ActionResult.success("snap-filter", key)
