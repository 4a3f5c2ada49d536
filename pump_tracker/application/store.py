"""
작업 세트 스토어

메모리의 작업 세트(펌프 목록)와 활성 어댑터, 샌드박스 상태를 함께
관리합니다. 샌드박스 상태와 활성 어댑터를 바꾸는 것은
enter_sandbox / commit_sandbox / exit_sandbox 세 작업뿐입니다.

쓰기 작업은 어댑터에 먼저 기록한 뒤 메모리를 갱신합니다.
어댑터 쓰기가 실패하면 작업 세트는 호출 전 상태 그대로 남습니다.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from ..core.config import CONFIG, RemoteConnection
from ..data_sources.base import PersistenceAdapter
from ..data_sources.selection import Backends, select_adapter, select_real_adapter
from ..domain.intake import expand_purchase_order
from ..domain.models import MoveOutcome, PurchaseOrder, Pump, TimelineBlock
from ..domain.normalization import normalize_stage
from ..domain.stages import STAGE_SEQUENCE, Stage
from ..domain.wip import WipPolicy
from ..planning.timeline import build_stage_timeline, build_timelines
from .sandbox import SandboxState

logger = logging.getLogger(__name__)


class PumpStore:
    """
    펌프 작업 세트와 스테이징 편집 컨트롤러.

    Args:
        backends: 사용 가능한 어댑터 묶음
        connection: 원격 연결 정보 (실제 어댑터 선택에 사용)
        wip_policy: 스테이지 이동 시 적용할 WIP 정책
        require_commit_confirmation: 커밋 전 사용자 확인 필요 여부
        clock: 현재 시각 함수 (last_update 기록용)

    Examples:
        >>> store = PumpStore(Backends(local=LocalAdapter()))
        >>> store.load()
        >>> store.enter_sandbox()
        >>> store.move_stage("p1", Stage.FABRICATION)
        >>> store.exit_sandbox()  # 편집 폐기
    """

    def __init__(
        self,
        backends: Backends,
        connection: Optional[RemoteConnection] = None,
        *,
        wip_policy: Optional[WipPolicy] = None,
        require_commit_confirmation: bool = CONFIG.sandbox.require_commit_confirmation,
        clock: Callable[[], pd.Timestamp] = pd.Timestamp.now,
    ) -> None:
        self.backends = backends
        self.connection = connection or RemoteConnection()
        self.wip_policy = wip_policy or WipPolicy.from_config()
        self.require_commit_confirmation = require_commit_confirmation
        self._clock = clock

        self._pumps: List[Pump] = []
        self._sandbox = SandboxState()
        self.adapter: PersistenceAdapter = select_adapter(
            backends, self.connection, is_sandbox=False
        )

    # ========================================
    # 조회
    # ========================================

    @property
    def pumps(self) -> List[Pump]:
        return list(self._pumps)

    @property
    def sandbox(self) -> SandboxState:
        return self._sandbox

    @property
    def is_sandbox(self) -> bool:
        return self._sandbox.is_sandbox

    def get(self, pump_id: str) -> Optional[Pump]:
        for pump in self._pumps:
            if pump.id == pump_id:
                return pump
        return None

    def count_in_stage(self, stage: Stage, *, exclude_id: Optional[str] = None) -> int:
        return sum(1 for p in self._pumps if p.stage == stage and p.id != exclude_id)

    def counts_by_stage(self) -> Dict[Stage, int]:
        counts = {stage: 0 for stage in STAGE_SEQUENCE}
        for pump in self._pumps:
            counts[pump.stage] += 1
        return counts

    # ========================================
    # 작업 세트 변경
    # ========================================

    def load(self) -> List[Pump]:
        """활성 어댑터에서 작업 세트를 다시 읽습니다."""
        pumps = self.adapter.load()
        self._pumps = list(pumps)
        logger.info("Working set loaded from %s: %d pumps", self.adapter.name, len(self._pumps))
        return self.pumps

    def _store(self, updated: Pump) -> None:
        self._pumps = [updated if p.id == updated.id else p for p in self._pumps]

    def update_pump(self, pump_id: str, **changes: Any) -> Optional[Pump]:
        """
        필드를 수정하고 활성 어댑터에 저장합니다.

        Returns:
            수정된 Pump. 해당 id가 없으면 None.

        Raises:
            PersistenceError: 저장 실패 (작업 세트는 변경되지 않음)
        """
        pump = self.get(pump_id)
        if pump is None:
            logger.warning("Pump not found: %s", pump_id)
            return None

        if "stage" in changes:
            changes["stage"] = normalize_stage(changes["stage"])
        changes["last_update"] = self._clock().isoformat()

        updated = replace(pump, **changes)
        self.adapter.save(updated)
        self._store(updated)
        return updated

    def move_stage(self, pump_id: str, to: Any) -> MoveOutcome:
        """
        칸반 이동 요청. 시리얼/WIP 정책을 통과해야 적용됩니다.

        거절되면 작업 항목은 변경되지 않으며, 결과에 거절한 스테이지와
        사유가 담깁니다.
        """
        target = normalize_stage(to)
        pump = self.get(pump_id)
        if pump is None:
            logger.warning("Pump not found: %s", pump_id)
            return MoveOutcome(accepted=False, stage=target, reason="not_found")

        outcome = self.wip_policy.evaluate_move(
            pump, target, self.count_in_stage(target, exclude_id=pump.id)
        )
        if outcome.accepted and pump.stage != target:
            self.update_pump(pump_id, stage=target)
            logger.info("Moved %s: %s -> %s", pump_id, pump.stage.value, target.value)
        return outcome

    def add_purchase_order(self, order: PurchaseOrder) -> List[Pump]:
        """
        주문 라인을 QUEUE 펌프로 펼쳐 저장하고 작업 세트에 추가합니다.

        펌프마다 저장이 성공한 직후 작업 세트에 추가하므로, 중간에 저장이
        실패해도 작업 세트와 백엔드에 같은 펌프들이 남습니다.

        Raises:
            PersistenceError: 저장 실패 (이미 저장된 펌프는 작업 세트에 유지)
        """
        created = expand_purchase_order(order, now=self._clock())
        for pump in created:
            self.adapter.save(pump)
            self._pumps = self._pumps + [pump]
        logger.info("PO %s added %d pumps", order.po, len(created))
        return created

    def replace_dataset(self, pumps: Sequence[Pump]) -> None:
        """작업 세트 전체를 교체합니다 (활성 어댑터의 replace_all 호출)."""
        rows = list(pumps)
        self.adapter.replace_all(rows)
        self._pumps = rows

    # ========================================
    # 샌드박스 (스테이징 편집)
    # ========================================

    def enter_sandbox(self) -> bool:
        """
        LIVE → STAGED. 이미 STAGED면 아무것도 하지 않습니다.

        현재 작업 세트의 얕은 복사본을 스냅샷으로 보관하고,
        활성 어댑터를 메모리 전용 SandboxAdapter로 바꿉니다.
        """
        if self._sandbox.is_sandbox:
            return False

        self._sandbox = SandboxState.staged(self._pumps)
        self.backends.sandbox.reset(self._pumps)
        self.adapter = select_adapter(self.backends, self.connection, is_sandbox=True)
        logger.info("Entered sandbox with %d pumps", len(self._pumps))
        return True

    def commit_sandbox(self, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """
        STAGED → LIVE. 현재 작업 세트로 실제 백엔드를 덮어씁니다.

        require_commit_confirmation이 켜져 있으면 confirm()이 True를
        반환해야만 진행합니다. replace_all이 실패하면 예외가 전달되고
        샌드박스 세션은 그대로 유지됩니다.

        Returns:
            커밋이 수행되었으면 True
        """
        if not self._sandbox.is_sandbox:
            return False

        if self.require_commit_confirmation and (confirm is None or not confirm()):
            logger.info("Sandbox commit cancelled: not confirmed")
            return False

        real = select_real_adapter(self.backends, self.connection)
        real.replace_all(self._pumps)

        self._sandbox = SandboxState()
        self.adapter = real
        logger.info("Committed sandbox to %s: %d pumps", real.name, len(self._pumps))
        return True

    def exit_sandbox(self) -> bool:
        """
        STAGED → LIVE. 편집을 버리고 스냅샷으로 작업 세트를 복원합니다.

        실제 어댑터에는 아무것도 쓰지 않고, 이후 읽기/쓰기에만 사용합니다.
        """
        snapshot = self._sandbox.original_snapshot
        if not self._sandbox.is_sandbox or snapshot is None:
            return False

        self._pumps = list(snapshot)
        self._sandbox = SandboxState()
        self.adapter = select_real_adapter(self.backends, self.connection)
        logger.info("Exited sandbox; restored %d pumps", len(self._pumps))
        return True

    # ========================================
    # 타임라인
    # ========================================

    def timeline_for(
        self,
        pump_id: str,
        durations: Mapping[Any, Any],
        *,
        start_date: Optional[Any] = None,
    ) -> List[TimelineBlock]:
        pump = self.get(pump_id)
        if pump is None:
            return []
        return build_stage_timeline(pump, durations, start_date=start_date, now=self._clock())

    def timelines(
        self,
        lead_time_lookup: Callable[[str], Optional[Mapping[Any, Any]]],
        *,
        scheduled_only: bool = True,
    ) -> Dict[str, List[TimelineBlock]]:
        return build_timelines(
            self._pumps, lead_time_lookup, scheduled_only=scheduled_only, now=self._clock()
        )
