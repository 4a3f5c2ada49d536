"""
도메인 계층의 공개 API

스테이지 모델, 작업 항목, 정규화, WIP 정책, 리스크 판단을 재수출합니다.
Streamlit에 의존하지 않습니다.
"""

from .csv_io import export_filename, parse_po_csv, pumps_to_csv, pumps_to_json
from .exceptions import DataLoadError, DomainError, PersistenceError, ValidationError
from .intake import expand_purchase_order
from .models import MoveOutcome, OrderLine, Pump, PurchaseOrder, TimelineBlock
from .normalization import (
    frame_to_pumps,
    normalize_durations,
    normalize_pump_frame,
    normalize_stage,
    pumps_to_frame,
    records_to_pumps,
    to_naive_timestamp,
)
from .risk import RiskResult, calculate_risk
from .stages import (
    DURATION_STAGES,
    STAGE_SEQUENCE,
    Stage,
    StageDurations,
    compare_stages,
    is_drawable,
    next_stage,
)
from .wip import WipPolicy

__all__ = [
    # 예외
    "DomainError",
    "ValidationError",
    "DataLoadError",
    "PersistenceError",
    # 스테이지
    "Stage",
    "StageDurations",
    "STAGE_SEQUENCE",
    "DURATION_STAGES",
    "compare_stages",
    "is_drawable",
    "next_stage",
    # 모델
    "Pump",
    "TimelineBlock",
    "MoveOutcome",
    "OrderLine",
    "PurchaseOrder",
    # 정규화
    "normalize_stage",
    "to_naive_timestamp",
    "normalize_durations",
    "normalize_pump_frame",
    "frame_to_pumps",
    "records_to_pumps",
    "pumps_to_frame",
    # 정책
    "WipPolicy",
    "RiskResult",
    "calculate_risk",
    "expand_purchase_order",
    "pumps_to_csv",
    "pumps_to_json",
    "export_filename",
    "parse_po_csv",
]
