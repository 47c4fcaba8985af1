"""Tests for reward loading and the redemption dispatcher."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.events.results import ActionResult
from src.events.rewards import Reward, RewardDispatcher, RewardType, load_rewards
from tests.factories import make_redemption_event


def _collaborators(calls: list[tuple[str, str]]) -> dict[str, object]:
    """OBS / Snap / giveaway / launcher fakes that append to a shared call log."""

    async def switch_scene(scene: str) -> ActionResult:
        calls.append(("scene", scene))
        return ActionResult.success("scene-switch", scene)

    async def toggle_snap_filter(key: str) -> ActionResult:
        calls.append(("snap", key))
        return ActionResult.success("snap-filter", key)

    async def handle_new_entry(user_name: str) -> ActionResult:
        calls.append(("giveaway", user_name))
        return ActionResult.success("giveaway-entry", user_name)

    async def launcher(path: str) -> ActionResult:
        calls.append(("shell", path))
        return ActionResult.success("shell", path)

    obs = MagicMock()
    obs.switch_scene = AsyncMock(side_effect=switch_scene)
    snap = MagicMock()
    snap.toggle_snap_filter = AsyncMock(side_effect=toggle_snap_filter)
    giveaways = MagicMock()
    giveaways.handle_new_entry = AsyncMock(side_effect=handle_new_entry)
    return {"obs": obs, "snap": snap, "giveaways": giveaways, "launcher": AsyncMock(side_effect=launcher)}


def _dispatcher(rewards: list[Reward], calls: list[tuple[str, str]]) -> tuple[RewardDispatcher, dict]:
    collab = _collaborators(calls)
    return RewardDispatcher({r.id: r for r in rewards}, **collab), collab


class TestLoadRewards:
    def test_loads_valid_items_and_skips_bad_ones(self, tmp_path: Path) -> None:
        path = tmp_path / "rewards.json"
        path.write_text(json.dumps([
            {"id": "r1", "type": "shell", "script": "/bin/true", "scene": "cam"},
            {"id": "r2", "type": "snap-filter", "key": "2"},
            {"id": "r3", "type": "teleport"},
            {"type": "shell"},
        ]))

        rewards = load_rewards(path)

        assert set(rewards) == {"r1", "r2"}
        assert rewards["r1"] == Reward("r1", RewardType.SHELL, scene="cam", script="/bin/true")
        assert rewards["r2"].key == "2"

    def test_missing_file_gives_empty_table(self, tmp_path: Path) -> None:
        assert load_rewards(tmp_path / "nope.json") == {}


class TestRedeem:
    @pytest.mark.asyncio
    async def test_unknown_reward_does_nothing(self) -> None:
        calls: list[tuple[str, str]] = []
        dispatcher, collab = _dispatcher(
            [Reward("known", RewardType.GIVEAWAY_ENTRY, scene="cam")], calls
        )

        results = await dispatcher.redeem(make_redemption_event(reward_id="unknown"))

        assert results == []
        assert calls == []
        collab["obs"].switch_scene.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_giveaway_entry_then_scene_switch_in_order(self) -> None:
        calls: list[tuple[str, str]] = []
        dispatcher, collab = _dispatcher(
            [Reward("give", RewardType.GIVEAWAY_ENTRY, scene="cam")], calls
        )

        results = await dispatcher.redeem(make_redemption_event(reward_id="give", user_name="Alice"))

        assert calls == [("giveaway", "Alice"), ("scene", "cam")]
        collab["giveaways"].handle_new_entry.assert_awaited_once_with("Alice")
        collab["obs"].switch_scene.assert_awaited_once_with("cam")
        assert [r.action for r in results] == ["giveaway-entry", "scene-switch"]

    @pytest.mark.asyncio
    async def test_shell_reward_launches_script(self) -> None:
        calls: list[tuple[str, str]] = []
        dispatcher, _ = _dispatcher([Reward("sh", RewardType.SHELL, script="/opt/confetti.sh")], calls)

        await dispatcher.redeem(make_redemption_event(reward_id="sh"))

        assert calls == [("shell", "/opt/confetti.sh")]

    @pytest.mark.asyncio
    async def test_shell_without_script_is_a_no_op(self) -> None:
        calls: list[tuple[str, str]] = []
        dispatcher, _ = _dispatcher([Reward("sh", RewardType.SHELL, scene="cam")], calls)

        results = await dispatcher.redeem(make_redemption_event(reward_id="sh"))

        assert calls == [("scene", "cam")]
        assert results[0].ok is True
        assert results[0].detail.startswith("skipped")

    @pytest.mark.asyncio
    async def test_snap_without_key_is_a_no_op(self) -> None:
        calls: list[tuple[str, str]] = []
        dispatcher, _ = _dispatcher([Reward("snap", RewardType.SNAP_FILTER)], calls)

        await dispatcher.redeem(make_redemption_event(reward_id="snap"))

        assert calls == []

    @pytest.mark.asyncio
    async def test_snap_with_key_toggles_filter(self) -> None:
        calls: list[tuple[str, str]] = []
        dispatcher, _ = _dispatcher([Reward("snap", RewardType.SNAP_FILTER, key="7")], calls)

        await dispatcher.redeem(make_redemption_event(reward_id="snap"))

        assert calls == [("snap", "7")]

    @pytest.mark.asyncio
    async def test_failed_action_still_switches_scene(self) -> None:
        calls: list[tuple[str, str]] = []
        dispatcher, collab = _dispatcher([Reward("sh", RewardType.SHELL, script="/x", scene="cam")], calls)
        collab["launcher"].side_effect = OSError("permission denied")
        dispatcher.launcher = collab["launcher"]

        results = await dispatcher.redeem(make_redemption_event(reward_id="sh"))

        assert results[0].ok is False
        assert "permission denied" in results[0].detail
        assert results[1] == ActionResult.success("scene-switch", "cam")
        collab["obs"].switch_scene.assert_awaited_once_with("cam")

    @pytest.mark.asyncio
    async def test_failed_scene_switch_is_reported_not_raised(self) -> None:
        calls: list[tuple[str, str]] = []
        dispatcher, collab = _dispatcher([Reward("give", RewardType.GIVEAWAY_ENTRY, scene="cam")], calls)
        collab["obs"].switch_scene.side_effect = ConnectionRefusedError("obs offline")

        results = await dispatcher.redeem(make_redemption_event(reward_id="give", user_name="Bob"))

        assert results[0].ok is True
        assert results[1].ok is False
        assert results[1].action == "scene-switch"
