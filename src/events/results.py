"""부수효과 호출 결과. 호출한 쪽은 로그만 남기고 버린다."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    """협력 객체(OBS, Snap, 추첨, 프로세스 실행) 호출 하나의 결과"""
    action: str
    ok: bool
    detail: Optional[str] = None
    value: Any = None

    @classmethod
    def success(cls, action: str, detail: Optional[str] = None, value: Any = None) -> "ActionResult":
        return cls(action=action, ok=True, detail=detail, value=value)

    @classmethod
    def failure(cls, action: str, error: Any) -> "ActionResult":
        return cls(action=action, ok=False, detail=str(error))

    @classmethod
    def skipped(cls, action: str, reason: str) -> "ActionResult":
        return cls(action=action, ok=True, detail=f"skipped: {reason}")


def log_result(result: ActionResult) -> ActionResult:
    """성공은 INFO, 실패는 ERROR 로 남김"""
    if result.ok:
        logger.info("%s 완료%s", result.action, f" ({result.detail})" if result.detail else "")
    else:
        logger.error("%s 실패: %s", result.action, result.detail)
    return result
