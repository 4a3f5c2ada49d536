"""
샌드박스 어댑터

샌드박스 세션 동안 사용하는 메모리 전용 저장소입니다.
어떤 쓰기도 실제 백엔드에 도달하지 않습니다.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..domain.models import Pump

logger = logging.getLogger(__name__)


class SandboxAdapter:
    """메모리에만 기록하는 어댑터."""

    name = "sandbox"

    def __init__(self) -> None:
        self._rows: Dict[str, Pump] = {}

    def reset(self, pumps: Sequence[Pump] = ()) -> None:
        self._rows = {p.id: p for p in pumps}

    def load(self) -> List[Pump]:
        return list(self._rows.values())

    def save(self, pump: Pump) -> None:
        logger.debug("Sandbox save of %s kept in memory", pump.id)
        self._rows[pump.id] = pump

    def replace_all(self, pumps: Sequence[Pump]) -> None:
        self.reset(pumps)
