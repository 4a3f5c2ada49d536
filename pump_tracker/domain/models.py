"""
도메인 모델: 펌프 트래커의 핵심 데이터 구조

모든 모델은 불변(frozen) 데이터클래스입니다. 작업 세트의 얕은 복사만으로도
샌드박스 스냅샷이 편집으로부터 안전하게 보호됩니다.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from .stages import Stage


# 저장소에 기록되는 컬럼 순서 (id가 항상 첫 번째)
PUMP_COLUMNS = (
    "id",
    "model",
    "po",
    "customer",
    "serial",
    "stage",
    "priority",
    "value",
    "powder_color",
    "promise_date",
    "forecast_start",
    "last_update",
)


@dataclass(frozen=True)
class Pump:
    """
    생산 파이프라인을 따라 이동하는 작업 항목.

    날짜 필드는 ISO 8601 문자열이며 None일 수 있습니다.
    stage는 항상 Stage 열거형의 멤버입니다.

    Attributes:
        id: 고유 식별자
        model: 펌프 모델명
        po: 구매 주문 번호
        customer: 고객명
        serial: 시리얼 번호 (미할당 시 None)
        stage: 현재 스테이지
        priority: 우선순위 ("Low" | "Normal" | "High" | "Rush" | "Urgent")
        value: 금액
        powder_color: 분체 도장 색상
        promise_date: 납기 약속일
        forecast_start: 예측 시작일 (없으면 타임라인은 현재 시각부터 시작)
        last_update: 마지막 수정 시각
    """

    id: str
    model: str = ""
    po: str = ""
    customer: str = ""
    serial: Optional[str] = None
    stage: Stage = Stage.QUEUE
    priority: str = "Normal"
    value: float = 0.0
    powder_color: Optional[str] = None
    promise_date: Optional[str] = None
    forecast_start: Optional[str] = None
    last_update: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        """저장소에 기록할 dict를 반환합니다 (stage는 문자열 값)."""
        record = asdict(self)
        record["stage"] = self.stage.value
        return record


@dataclass(frozen=True)
class TimelineBlock:
    """
    작업 항목이 한 스테이지에 머무는 연속 구간.

    불변식: days > 0, end == start + days
    """

    stage: Stage
    start: pd.Timestamp
    end: pd.Timestamp
    days: int

    def to_record(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value,
            "start": self.start,
            "end": self.end,
            "days": self.days,
        }


@dataclass(frozen=True)
class MoveOutcome:
    """
    스테이지 이동 요청의 결과.

    거절은 예외가 아닌 값으로 전달되며, 거절 시 작업 항목은 변경되지 않습니다.

    Attributes:
        accepted: 이동 허용 여부
        stage: 이동 대상 스테이지 (거절 시 거절한 스테이지)
        reason: 거절 사유 ("wip_limit" | "serial_required" | "not_found")
        limit: WIP 한도 (wip_limit 거절 시)
        current: 대상 스테이지의 현재 수량 (wip_limit 거절 시)
    """

    accepted: bool
    stage: Stage
    reason: Optional[str] = None
    limit: Optional[int] = None
    current: Optional[int] = None

    @property
    def message(self) -> str:
        if self.accepted:
            return f"Moved to {self.stage.label}"
        if self.reason == "wip_limit":
            return f"{self.stage.label} is at its WIP limit ({self.current}/{self.limit})"
        if self.reason == "serial_required":
            return f"Serial number required before moving to {self.stage.label}"
        return f"Move to {self.stage.label} refused: {self.reason}"


@dataclass(frozen=True)
class OrderLine:
    """구매 주문의 한 라인."""

    model: str
    quantity: int = 1
    color: Optional[str] = None
    value_each: float = 0.0
    priority: str = "Normal"
    promise_date: Optional[str] = None


@dataclass(frozen=True)
class PurchaseOrder:
    """접수된 구매 주문."""

    po: str
    customer: str
    lines: Tuple[OrderLine, ...] = field(default_factory=tuple)
    promise_date: Optional[str] = None
    date_received: Optional[str] = None
