"""
WIP 입장 정책

스테이지별 WIP 한도를 보관하고, 칸반 이동 요청이 대상 스테이지의
한도를 넘는지 판단합니다. 한도 초과는 이동 거절(작업 항목 변경 없음)로
호출자에게 전달되며, 저장되지 않고 매 이동 시도마다 다시 평가됩니다.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from ..core.config import CONFIG, WipConfig
from .models import MoveOutcome, Pump
from .normalization import normalize_stage
from .stages import STAGE_SEQUENCE, Stage, requires_serial

logger = logging.getLogger(__name__)


class WipPolicy:
    """스테이지별 WIP 한도 (None = 무제한)."""

    def __init__(self, limits: Optional[Mapping[Any, Optional[int]]] = None) -> None:
        self._limits: Dict[Stage, Optional[int]] = {stage: None for stage in STAGE_SEQUENCE}
        for key, limit in (limits or {}).items():
            self.set_limit(normalize_stage(key), limit)

    @classmethod
    def from_config(cls, config: WipConfig = CONFIG.wip) -> WipPolicy:
        return cls(config.limits)

    @property
    def limits(self) -> Dict[Stage, Optional[int]]:
        return dict(self._limits)

    def limit_for(self, stage: Stage) -> Optional[int]:
        return self._limits.get(stage)

    def set_limit(self, stage: Stage, limit: Optional[int]) -> None:
        if limit is not None:
            limit = int(limit)
            if limit < 0:
                raise ValueError(f"WIP limit for {stage.value} must be >= 0, got {limit}")
        self._limits[stage] = limit

    def can_enter(self, stage: Stage, current_count: int) -> bool:
        """현재 수량이 current_count인 스테이지에 한 건 더 들어갈 수 있는지 여부."""
        limit = self._limits.get(stage)
        if limit is None:
            return True
        return current_count < limit

    def evaluate_move(self, pump: Pump, to: Stage, current_count: int) -> MoveOutcome:
        """
        스테이지 이동 요청을 평가합니다.

        평가 순서:
        1. 같은 스테이지로의 이동은 변경 없이 허용
        2. STAGED_FOR_POWDER 이후 스테이지는 시리얼 번호 필요
        3. 대상 스테이지의 WIP 한도 확인

        Args:
            pump: 이동할 작업 항목
            to: 대상 스테이지
            current_count: 대상 스테이지에 있는 다른 작업 항목 수 (pump 제외)
        """
        if pump.stage == to:
            return MoveOutcome(accepted=True, stage=to)

        if requires_serial(to) and not pump.serial:
            logger.warning("Move of %s to %s refused: serial required", pump.id, to.value)
            return MoveOutcome(accepted=False, stage=to, reason="serial_required")

        if not self.can_enter(to, current_count):
            limit = self._limits[to]
            logger.warning(
                "Move of %s to %s refused: WIP limit reached (%d/%d)",
                pump.id,
                to.value,
                current_count,
                limit,
            )
            return MoveOutcome(
                accepted=False,
                stage=to,
                reason="wip_limit",
                limit=limit,
                current=current_count,
            )

        return MoveOutcome(accepted=True, stage=to)
