"""리워드용 외부 스크립트/프로그램 실행. 백그라운드로 띄우고 종료를 기다리지 않는다."""

import asyncio
import logging
from pathlib import Path

from src.events.results import ActionResult

logger = logging.getLogger(__name__)


async def launch_script(path: str) -> ActionResult:
    script = Path(path).expanduser()
    if not script.exists():
        return ActionResult.failure("shell", f"스크립트 없음: {script}")
    try:
        process = await asyncio.create_subprocess_exec(
            str(script),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        return ActionResult.failure("shell", e)
    logger.info("스크립트 실행: %s (pid=%s)", script, process.pid)
    return ActionResult.success("shell", str(script), value=process.pid)
