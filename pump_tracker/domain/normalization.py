"""
레코드 정규화

저장소(Google Sheets, JSON 파일)에서 읽은 원시 레코드를 Pump 객체로,
Pump 객체를 다시 저장용 DataFrame으로 변환합니다. 리드타임 설정도
여기서 정리합니다.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from .exceptions import ValidationError
from .models import PUMP_COLUMNS, Pump
from .stages import DURATION_STAGES, Stage

logger = logging.getLogger(__name__)


# 원본 컬럼명 → 표준 컬럼명
COLUMN_ALIASES: Dict[str, str] = {
    "promiseDate": "promise_date",
    "forecastStart": "forecast_start",
    "scheduledStart": "forecast_start",
    "lastUpdate": "last_update",
    "powderColor": "powder_color",
}

# 레거시 스테이지 표기 → 표준 스테이지
STAGE_ALIASES: Dict[str, Stage] = {
    "POWDER COAT": Stage.POWDER_COAT,
    "STAGED FOR POWDER": Stage.STAGED_FOR_POWDER,
    "TESTING": Stage.SHIP,
    "SHIPPING": Stage.SHIP,
}

_TEXT_COLUMNS = ("id", "model", "po", "customer", "serial", "stage", "priority", "powder_color")
_DATE_COLUMNS = ("promise_date", "forecast_start", "last_update")


def normalize_stage(value: Any) -> Stage:
    """
    스테이지 값을 Stage 열거형으로 변환합니다.

    대소문자와 공백/언더스코어 차이를 허용하며, 레거시 표기
    (TESTING, SHIPPING 등)는 표준 스테이지로 병합합니다.

    Raises:
        ValidationError: 알 수 없는 스테이지 값
    """
    if isinstance(value, Stage):
        return value

    text = str(value or "").strip().upper()
    if text in STAGE_ALIASES:
        return STAGE_ALIASES[text]

    key = text.replace(" ", "_")
    try:
        return Stage(key)
    except ValueError:
        raise ValidationError(f"알 수 없는 스테이지입니다: {value!r}") from None


def normalize_durations(raw: Optional[Mapping[Any, Any]]) -> Dict[Stage, int]:
    """
    리드타임 설정을 StageDurations로 정리합니다.

    - 키는 Stage 또는 대소문자 무관 문자열 ("fabrication", "powder_coat")
    - 음수 또는 정수가 아닌 값은 설정 오류로 보고 0으로 클램프합니다
    - 리드타임을 가질 수 없는 스테이지는 무시합니다

    Examples:
        >>> normalize_durations({"fabrication": 2, "ship": -1})
        {<Stage.FABRICATION: 'FABRICATION'>: 2, <Stage.SHIP: 'SHIP'>: 0}
    """
    durations: Dict[Stage, int] = {}
    if not raw:
        return durations

    for key, value in raw.items():
        try:
            stage = normalize_stage(key)
        except ValidationError:
            logger.warning("Ignoring duration for unknown stage %r", key)
            continue

        if stage not in DURATION_STAGES:
            logger.warning("Stage %s cannot carry a duration; ignored", stage.value)
            continue

        durations[stage] = _clamp_days(stage, value)

    return durations


def _clamp_days(stage: Stage, value: Any) -> int:
    try:
        days = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid duration %r for %s; treated as 0", value, stage.value)
        return 0

    if math.isnan(days) or days < 0 or not days.is_integer():
        logger.warning("Invalid duration %r for %s; clamped to 0", value, stage.value)
        return 0
    return int(days)


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Stage):
        return value.value
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    text = str(value).strip()
    return text or None


def to_naive_timestamp(value: Any) -> pd.Timestamp:
    """
    값을 pd.Timestamp로 변환합니다.

    시간대 정보가 있으면 UTC 기준 naive 시각으로 바꿉니다. 일정 계산은
    모두 naive 시각끼리 비교합니다.

    Examples:
        >>> to_naive_timestamp("2024-01-01T09:00:00+09:00")
        Timestamp('2024-01-01 00:00:00')
    """
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts


def _clean_date(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else to_naive_timestamp(value).isoformat()
    text = _clean_text(value)
    if text is None:
        return None
    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        logger.warning("Unparseable date %r dropped", text)
        return None
    if parsed.tzinfo is not None:
        return to_naive_timestamp(parsed).isoformat()
    return text


def normalize_pump_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """
    원시 레코드 DataFrame을 표준 스키마로 정리합니다.

    처리 내용:
    1. camelCase 컬럼명을 snake_case로 변경
    2. 누락된 컬럼 추가 (None)
    3. value를 숫자로 변환 (실패 시 0)
    4. 날짜 컬럼 검증 (파싱 불가 값은 None)

    Returns:
        PUMP_COLUMNS 순서의 DataFrame (object dtype)
    """
    df = frame.copy()
    df = df.rename(columns={k: v for k, v in COLUMN_ALIASES.items() if k in df.columns})
    # 별칭과 표준 컬럼이 동시에 있으면 첫 번째 것을 사용
    df = df.loc[:, ~df.columns.duplicated()]

    for col in PUMP_COLUMNS:
        if col not in df.columns:
            df[col] = None

    df = df[list(PUMP_COLUMNS)].astype(object)

    df["value"] = pd.to_numeric(df["value"], errors="coerce").fillna(0.0).astype(float)

    for col in _TEXT_COLUMNS:
        df[col] = df[col].map(_clean_text)
    for col in _DATE_COLUMNS:
        df[col] = df[col].map(_clean_date)

    return df


def frame_to_pumps(frame: pd.DataFrame) -> List[Pump]:
    """
    DataFrame을 Pump 목록으로 변환합니다.

    Raises:
        ValidationError: id가 없거나 스테이지가 유효하지 않은 행이 있을 때
    """
    if frame is None or frame.empty:
        return []

    normalized = normalize_pump_frame(frame)
    pumps: List[Pump] = []

    for row_no, row in enumerate(normalized.to_dict("records"), start=1):
        if not row["id"]:
            raise ValidationError(f"{row_no}번째 레코드에 id가 없습니다.")

        pumps.append(
            Pump(
                id=row["id"],
                model=row["model"] or "",
                po=row["po"] or "",
                customer=row["customer"] or "",
                serial=row["serial"],
                stage=normalize_stage(row["stage"] or Stage.QUEUE),
                priority=row["priority"] or "Normal",
                value=float(row["value"]),
                powder_color=row["powder_color"],
                promise_date=row["promise_date"],
                forecast_start=row["forecast_start"],
                last_update=row["last_update"],
            )
        )

    return pumps


def records_to_pumps(records: Iterable[Mapping[str, Any]]) -> List[Pump]:
    """dict 레코드 목록을 Pump 목록으로 변환합니다."""
    rows = list(records)
    if not rows:
        return []
    return frame_to_pumps(pd.DataFrame(rows))


def pumps_to_frame(pumps: Sequence[Pump]) -> pd.DataFrame:
    """Pump 목록을 저장용 DataFrame으로 변환합니다 (PUMP_COLUMNS 순서)."""
    if not pumps:
        return pd.DataFrame(columns=list(PUMP_COLUMNS))
    return pd.DataFrame([p.to_record() for p in pumps], columns=list(PUMP_COLUMNS))
