"""
샌드박스 세션 상태

스테이징 편집 세션의 진입 여부와, 진입 시점 작업 세트의 스냅샷을
하나의 불변 객체로 묶어 관리합니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..domain.models import Pump

LIVE = "LIVE"
STAGED = "STAGED"


@dataclass(frozen=True)
class SandboxState:
    """
    샌드박스 세션 상태.

    불변식: original_snapshot은 is_sandbox가 True일 때만 None이 아닙니다.
    스토어 인스턴스당 세션은 최대 하나입니다 (중첩 없음).
    """

    is_sandbox: bool = False
    original_snapshot: Optional[List[Pump]] = None

    def __post_init__(self) -> None:
        if self.is_sandbox != (self.original_snapshot is not None):
            raise ValueError("original_snapshot must be set if and only if is_sandbox is True")

    @property
    def mode(self) -> str:
        return STAGED if self.is_sandbox else LIVE

    @classmethod
    def staged(cls, pumps: List[Pump]) -> SandboxState:
        return cls(is_sandbox=True, original_snapshot=list(pumps))
