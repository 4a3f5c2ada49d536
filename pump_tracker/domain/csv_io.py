"""
CSV 입출력

작업 세트를 CSV/JSON 텍스트로 내보내고, 구매 주문 CSV를 읽어
PurchaseOrder로 변환합니다.

주문 CSV 형식 (헤더는 대소문자/공백 무관):
    필수: po, customer, model, quantity
    선택: date_received, promise_date, color, value_each, priority

한 파일에는 하나의 PO와 하나의 고객만 들어 있어야 합니다.
"""

from __future__ import annotations

import io
import logging
import math
from typing import Callable, List, Optional, Sequence

import pandas as pd

from .exceptions import ValidationError
from .models import OrderLine, Pump, PurchaseOrder
from .normalization import pumps_to_frame

logger = logging.getLogger(__name__)

PO_REQUIRED_COLUMNS = ("po", "customer", "model", "quantity")
PRIORITIES = ("Low", "Normal", "High", "Rush", "Urgent")


# ========================================
# 내보내기
# ========================================

def _export_frame(pumps: Sequence[Pump], columns: Optional[Sequence[str]]) -> pd.DataFrame:
    frame = pumps_to_frame(pumps)
    if columns:
        frame = frame[[col for col in columns if col in frame.columns]]
    return frame


def pumps_to_csv(pumps: Sequence[Pump], columns: Optional[Sequence[str]] = None) -> str:
    """
    작업 세트를 CSV 텍스트로 변환합니다.

    Args:
        pumps: 내보낼 펌프 목록
        columns: 포함할 컬럼 (없으면 전체, 알 수 없는 컬럼은 무시)
    """
    return _export_frame(pumps, columns).to_csv(index=False)


def pumps_to_json(pumps: Sequence[Pump], columns: Optional[Sequence[str]] = None) -> str:
    """작업 세트를 JSON 레코드 배열 텍스트로 변환합니다."""
    return _export_frame(pumps, columns).to_json(orient="records", force_ascii=False, indent=2)


def export_filename(extension: str, now: Optional[pd.Timestamp] = None) -> str:
    """내보내기 파일명 (예: pumptracker-export-2024-01-10T09-30-15.csv)."""
    stamp = pd.Timestamp.now() if now is None else pd.Timestamp(now)
    return f"pumptracker-export-{stamp:%Y-%m-%dT%H-%M-%S}.{extension}"


# ========================================
# 구매 주문 CSV 읽기
# ========================================

def _normalize_header(header: str) -> str:
    return "_".join(str(header).strip().lower().split())


def _parse_number(raw: str) -> Optional[float]:
    cleaned = raw.replace("$", "").replace(",", "").strip()
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _parse_quantity(raw: str, model: str) -> int:
    try:
        quantity = float(raw)
    except ValueError:
        quantity = float("nan")
    if not math.isfinite(quantity) or not quantity.is_integer() or quantity <= 0:
        raise ValidationError(f"{model}의 수량은 1 이상의 정수여야 합니다: {raw!r}")
    return int(quantity)


def _parse_priority(raw: str) -> str:
    if not raw:
        return "Normal"
    for priority in PRIORITIES:
        if priority.lower() == raw.lower():
            return priority
    raise ValidationError(f"알 수 없는 우선순위입니다: {raw!r}")


def _check_date(value: Optional[str], label: str) -> None:
    if value and pd.isna(pd.to_datetime(value, errors="coerce")):
        raise ValidationError(f"{label} 값이 올바른 날짜가 아닙니다: {value!r}")


def _distinct(rows: pd.DataFrame, column: str) -> List[str]:
    if column not in rows.columns:
        return []
    return [v for v in dict.fromkeys(rows[column]) if v]


def parse_po_csv(
    text: str,
    *,
    price_lookup: Optional[Callable[[str], Optional[float]]] = None,
) -> PurchaseOrder:
    """
    구매 주문 CSV를 PurchaseOrder로 변환합니다.

    - 모든 값이 빈 행은 무시
    - promise_date가 모든 행에서 같으면 주문 납기일로, 행마다 다르면 라인 납기일로만 사용
    - value_each가 비어 있으면 price_lookup(model), 그것도 없으면 0
    - priority는 대소문자 무관, 비어 있으면 "Normal"

    Raises:
        ValidationError: 파싱 실패, 필수 컬럼 누락, PO/고객이 여러 개,
                         수량/우선순위/날짜가 잘못된 경우
    """
    try:
        raw = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise ValidationError(f"CSV 파싱 오류: {exc}") from exc

    raw.columns = [_normalize_header(col) for col in raw.columns]
    for col in raw.columns:
        raw[col] = raw[col].str.strip()

    rows = raw[(raw != "").any(axis=1)] if not raw.empty else raw
    if rows.empty:
        raise ValidationError("CSV에 주문 행이 없습니다.")

    missing = [col for col in PO_REQUIRED_COLUMNS if col not in rows.columns]
    if missing:
        raise ValidationError(f"필수 컬럼이 없습니다: {', '.join(missing)}")

    pos = _distinct(rows, "po")
    customers = _distinct(rows, "customer")
    if len(pos) != 1 or len(customers) != 1:
        raise ValidationError("CSV에는 하나의 PO와 하나의 고객만 있어야 합니다.")

    received = _distinct(rows, "date_received")
    if len(received) > 1:
        raise ValidationError("date_received는 모든 행에서 같아야 합니다.")
    date_received = received[0] if received else None

    promises = _distinct(rows, "promise_date")
    promise_date = promises[0] if len(promises) == 1 else None

    _check_date(date_received, "date_received")
    _check_date(promise_date, "promise_date")

    lines: List[OrderLine] = []
    for row in rows.to_dict("records"):
        model = row["model"]
        if not model:
            raise ValidationError("모든 행에 model이 필요합니다.")

        value_each = _parse_number(row.get("value_each", ""))
        if value_each is None and price_lookup is not None:
            value_each = price_lookup(model)

        line_promise = row.get("promise_date") or None
        _check_date(line_promise, "promise_date")

        lines.append(
            OrderLine(
                model=model,
                quantity=_parse_quantity(row["quantity"], model),
                color=row.get("color") or None,
                value_each=float(value_each or 0.0),
                priority=_parse_priority(row.get("priority", "")),
                promise_date=line_promise,
            )
        )

    logger.info("Parsed PO %s with %d lines", pos[0], len(lines))
    return PurchaseOrder(
        po=pos[0],
        customer=customers[0],
        lines=tuple(lines),
        promise_date=promise_date,
        date_received=date_received,
    )
