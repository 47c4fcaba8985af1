"""
채널 포인트 추첨(기브어웨이)
응모자는 메모리에만 보관. 당첨자 선정은 단순 무작위.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from src.events.results import ActionResult
from src.overlay.sink import EventSink

logger = logging.getLogger(__name__)


class GiveawayController:
    """추첨 응모 접수 및 당첨자 선정"""

    def __init__(self, sink: EventSink, rng: Optional[random.Random] = None):
        self.sink = sink
        self.entries: list[str] = []
        self._rng = rng or random.Random()

    async def handle_new_entry(self, user_name: str) -> ActionResult:
        """응모 추가. 같은 이름(대소문자 무시)은 한 번만."""
        name = (user_name or "").strip()
        if not name:
            return ActionResult.failure("giveaway-entry", "빈 이름")
        if any(e.lower() == name.lower() for e in self.entries):
            return ActionResult.skipped("giveaway-entry", f"이미 응모함: {name}")

        self.entries.append(name)
        logger.info("추첨 응모: %s (총 %d명)", name, len(self.entries))
        await self.sink.emit("giveaway-entry", {"user": name, "count": len(self.entries)})
        return ActionResult.success("giveaway-entry", name)

    async def select_winner(self) -> ActionResult:
        """응모자 중 한 명을 뽑아 목록에서 빼고 UI 에 알림"""
        if not self.entries:
            logger.info("추첨 응모자가 없습니다")
            return ActionResult.skipped("giveaway-winner", "응모자 없음")

        winner = self._rng.choice(self.entries)
        self.entries.remove(winner)
        logger.info("추첨 당첨: %s (남은 응모 %d명)", winner, len(self.entries))
        await self.sink.emit("giveaway-winner", {"user": winner, "remaining": len(self.entries)})
        return ActionResult.success("giveaway-winner", winner, value=winner)

    def clear(self) -> None:
        self.entries.clear()
