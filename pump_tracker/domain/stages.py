"""
스테이지 모델

생산 파이프라인의 고정된 스테이지 순서와, 스테이지별 리드타임
(StageDurations) 판단 로직을 제공합니다. 순서는 프로세스 전체에서
공유되는 불변 상수입니다.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional, Tuple


class Stage(str, Enum):
    """파이프라인 스테이지. 정의 순서가 곧 진행 순서입니다."""

    QUEUE = "QUEUE"
    FABRICATION = "FABRICATION"
    STAGED_FOR_POWDER = "STAGED_FOR_POWDER"
    POWDER_COAT = "POWDER_COAT"
    ASSEMBLY = "ASSEMBLY"
    SHIP = "SHIP"
    CLOSED = "CLOSED"

    @property
    def order(self) -> int:
        return STAGE_ORDER[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Stage):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Stage):
            return NotImplemented
        return self.order <= other.order

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Stage):
            return NotImplemented
        return self.order > other.order

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Stage):
            return NotImplemented
        return self.order >= other.order

    @property
    def label(self) -> str:
        return STAGE_LABELS[self]


STAGE_SEQUENCE: Tuple[Stage, ...] = tuple(Stage)

STAGE_ORDER: Mapping[Stage, int] = {stage: idx for idx, stage in enumerate(STAGE_SEQUENCE)}

# 리드타임을 가질 수 있는 스테이지 (타임라인 블록으로 그려짐)
DURATION_STAGES: Tuple[Stage, ...] = (
    Stage.FABRICATION,
    Stage.POWDER_COAT,
    Stage.ASSEMBLY,
    Stage.SHIP,
)

# 이 스테이지 이후로 이동하려면 시리얼 번호가 필요함
SERIAL_REQUIRED_FROM = Stage.STAGED_FOR_POWDER

STAGE_LABELS: Mapping[Stage, str] = {
    Stage.QUEUE: "Queue",
    Stage.FABRICATION: "Fabrication",
    Stage.STAGED_FOR_POWDER: "Staged for Powder",
    Stage.POWDER_COAT: "Powder Coat",
    Stage.ASSEMBLY: "Assembly",
    Stage.SHIP: "Ship",
    Stage.CLOSED: "Closed",
}

# StageDurations: 스테이지 → 리드타임(일). 없는 스테이지는 0일로 취급합니다.
StageDurations = Mapping[Stage, int]


def compare_stages(a: Stage, b: Stage) -> int:
    """a가 b보다 앞이면 음수, 같으면 0, 뒤면 양수를 반환합니다."""
    return STAGE_ORDER[a] - STAGE_ORDER[b]


def is_drawable(stage: Stage, durations: StageDurations) -> bool:
    """해당 스테이지가 타임라인 블록을 가지는지 여부."""
    if stage not in DURATION_STAGES:
        return False
    return int(durations.get(stage, 0) or 0) > 0


def next_stage(stage: Stage) -> Optional[Stage]:
    """다음 스테이지. CLOSED 이후는 None."""
    idx = STAGE_ORDER[stage]
    if idx + 1 >= len(STAGE_SEQUENCE):
        return None
    return STAGE_SEQUENCE[idx + 1]


def requires_serial(stage: Stage) -> bool:
    return stage >= SERIAL_REQUIRED_FROM
