"""
채널 포인트 리워드 정의와 실행
config/rewards.json 의 리워드 ID → 동작(스크립트 실행 / Snap 필터 / 추첨 응모) + 선택적 장면 전환

rewards.json 예:
    [
        {"id": "<reward id>", "type": "shell", "script": "~/scripts/confetti.sh", "scene": "cam"},
        {"id": "<reward id>", "type": "snap-filter", "key": "1"},
        {"id": "<reward id>", "type": "giveaway-entry", "scene": "giveaway"}
    ]
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Union

from src.twitch.errors import ActionError
from src.twitch.models import RedemptionEvent

from .results import ActionResult, log_result

logger = logging.getLogger(__name__)


class RewardType(str, Enum):
    SHELL = "shell"
    SNAP_FILTER = "snap-filter"
    GIVEAWAY_ENTRY = "giveaway-entry"


@dataclass(frozen=True)
class Reward:
    """리워드 하나. script 는 shell, key 는 snap-filter 전용."""
    id: str
    type: RewardType
    scene: Optional[str] = None
    script: Optional[str] = None
    key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Reward":
        return cls(
            id=str(data["id"]),
            type=RewardType(data["type"]),
            scene=data.get("scene") or None,
            script=data.get("script") or None,
            key=data.get("key") or None,
        )


def load_rewards(path: Union[Path, str]) -> dict[str, Reward]:
    """rewards.json 로드. 파일이 없으면 빈 테이블, 잘못된 항목은 건너뜀."""
    p = Path(path)
    if not p.exists():
        logger.warning("리워드 설정 파일 없음: %s", p)
        return {}
    with open(p, encoding="utf-8") as f:
        items = json.load(f)

    rewards: dict[str, Reward] = {}
    for item in items:
        try:
            reward = Reward.from_dict(item)
        except (KeyError, ValueError) as e:
            logger.warning("잘못된 리워드 항목 무시: %s (%s)", item, e)
            continue
        rewards[reward.id] = reward
    logger.info("리워드 %d개 로드", len(rewards))
    return rewards


class SceneSwitcher(Protocol):
    async def switch_scene(self, scene: str) -> ActionResult: ...


class SnapFilter(Protocol):
    async def toggle_snap_filter(self, key: str) -> ActionResult: ...


class Giveaways(Protocol):
    async def handle_new_entry(self, user_name: str) -> ActionResult: ...

    async def select_winner(self) -> ActionResult: ...


Launcher = Callable[[str], Awaitable[ActionResult]]


class RewardDispatcher:
    """리워드 ID → 동작 하나 실행 → (있으면) 장면 전환"""

    def __init__(
        self,
        rewards: Mapping[str, Reward],
        obs: SceneSwitcher,
        snap: SnapFilter,
        giveaways: Giveaways,
        launcher: Launcher,
    ):
        self.rewards = dict(rewards)
        self.obs = obs
        self.snap = snap
        self.giveaways = giveaways
        self.launcher = launcher

    def get_reward(self, reward_id: str) -> Optional[Reward]:
        return self.rewards.get(reward_id)

    async def redeem(self, event: RedemptionEvent) -> list[ActionResult]:
        """
        리워드 사용 처리. 모르는 리워드면 아무것도 하지 않음 (장면 전환 포함).
        동작이 실패해도 장면 전환은 진행하고, 오류는 로그로만 남긴다.

        Returns:
            실행된 호출 결과 (동작, 장면 전환 순서)
        """
        reward = self.get_reward(event.reward_id)
        if reward is None:
            logger.debug("설정되지 않은 리워드: %s (%s)", event.reward_id, event.reward_title)
            return []

        logger.info("리워드 사용: %s → %s (%s)", event.user_name, reward.id, reward.type.value)
        results = [await self._guard(reward.type.value, self._run_action(reward, event))]

        if reward.scene:
            results.append(await self._guard("scene-switch", self.obs.switch_scene(reward.scene)))
        return [log_result(r) for r in results]

    async def _run_action(self, reward: Reward, event: RedemptionEvent) -> ActionResult:
        if reward.type is RewardType.SHELL:
            if not reward.script:
                return ActionResult.skipped("shell", "script 미설정")
            return await self.launcher(reward.script)
        if reward.type is RewardType.SNAP_FILTER:
            if not reward.key:
                return ActionResult.skipped("snap-filter", "key 미설정")
            return await self.snap.toggle_snap_filter(reward.key)
        if reward.type is RewardType.GIVEAWAY_ENTRY:
            return await self.giveaways.handle_new_entry(event.user_name)
        raise ActionError(f"지원하지 않는 리워드 타입: {reward.type}")

    @staticmethod
    async def _guard(action: str, call: Awaitable[ActionResult]) -> ActionResult:
        """협력 객체가 예외를 던져도 실패 결과로 바꿔서 돌려줌"""
        try:
            return await call
        except Exception as e:
            return ActionResult.failure(action, e)
