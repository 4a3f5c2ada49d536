"""
스테이지 타임라인 빌더

작업 항목의 현재 스테이지, 스테이지별 리드타임, 시작일로부터
겹치지 않는 연속 시간 블록 목록을 만듭니다. 순수 함수이며 I/O가 없습니다.

납기일과 무관하게 "남은 작업이 시간상 어디에 놓이는가"만 계산하며,
지연 판단은 domain.risk에서 수행합니다.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from ..domain.models import Pump, TimelineBlock
from ..domain.normalization import normalize_durations, to_naive_timestamp
from ..domain.stages import STAGE_ORDER, STAGE_SEQUENCE, Stage

logger = logging.getLogger(__name__)

TIMELINE_COLUMNS = ["stage", "start", "end", "days"]


def _resolve_start(
    pump: Pump,
    start_date: Optional[Any],
    now: Optional[pd.Timestamp],
) -> pd.Timestamp:
    """
    시작일 결정: start_date → pump.forecast_start → now → 현재 시각.

    시간대가 있는 값은 naive 시각으로 바꿔 블록끼리, 그리고 뷰포트의
    view_start와 비교할 수 있게 합니다.
    """
    if start_date is not None:
        return to_naive_timestamp(start_date)

    if pump.forecast_start:
        forecast = pd.to_datetime(pump.forecast_start, errors="coerce")
        if not pd.isna(forecast):
            return to_naive_timestamp(forecast)
        logger.warning("Pump %s has unparseable forecast_start %r", pump.id, pump.forecast_start)

    return pd.Timestamp.now() if now is None else to_naive_timestamp(now)


def build_stage_timeline(
    pump: Pump,
    durations: Optional[Mapping[Any, Any]],
    *,
    start_date: Optional[Any] = None,
    now: Optional[pd.Timestamp] = None,
) -> List[TimelineBlock]:
    """
    작업 항목의 남은 스테이지를 시간 블록으로 배치합니다.

    알고리즘:
    - 커서를 시작일에 두고, 현재 스테이지부터 SHIP까지 순서대로 진행
    - 리드타임이 양수인 스테이지마다 [커서, 커서 + 일수) 블록을 만들고
      커서를 블록 끝으로 이동
    - 리드타임이 없거나 0인 스테이지는 건너뛰며 커서도 움직이지 않음
    - CLOSED 항목은 빈 목록

    Args:
        pump: 작업 항목
        durations: 스테이지별 리드타임 (Stage 또는 문자열 키).
                   음수/비정수 값은 0으로 클램프됩니다.
        start_date: 시작일. 없으면 pump.forecast_start, 그것도 없으면 현재 시각
        now: "현재 시각" 기준값 (테스트용)

    Returns:
        연속되고 서로 겹치지 않는 TimelineBlock 목록 (스테이지 순서)

    Examples:
        >>> pump = Pump(id="p1", stage=Stage.ASSEMBLY)
        >>> blocks = build_stage_timeline(
        ...     pump,
        ...     {"fabrication": 1, "powder_coat": 1, "assembly": 1, "ship": 1},
        ...     start_date="2024-01-01",
        ... )
        >>> [(b.stage.value, b.days) for b in blocks]
        [('ASSEMBLY', 1), ('SHIP', 1)]
    """
    if pump.stage == Stage.CLOSED:
        return []

    stage_days = normalize_durations(durations)
    if not stage_days:
        return []

    cursor = _resolve_start(pump, start_date, now)
    blocks: List[TimelineBlock] = []

    first = STAGE_ORDER[pump.stage]
    last = STAGE_ORDER[Stage.SHIP]

    for stage in STAGE_SEQUENCE[first : last + 1]:
        days = stage_days.get(stage, 0)
        if days <= 0:
            continue

        end = cursor + pd.Timedelta(days=days)
        blocks.append(TimelineBlock(stage=stage, start=cursor, end=end, days=days))
        cursor = end

    return blocks


def build_timelines(
    pumps: Sequence[Pump],
    lead_time_lookup: Callable[[str], Optional[Mapping[Any, Any]]],
    *,
    scheduled_only: bool = True,
    now: Optional[pd.Timestamp] = None,
) -> Dict[str, List[TimelineBlock]]:
    """
    여러 작업 항목의 타임라인을 모델별 리드타임으로 계산합니다.

    - 리드타임이 없는 모델의 항목은 제외
    - scheduled_only=True면 forecast_start가 없는 항목(백로그)은 제외
    - 빈 타임라인은 결과에 포함하지 않음

    Returns:
        pump id → TimelineBlock 목록
    """
    result: Dict[str, List[TimelineBlock]] = {}

    for pump in pumps:
        if scheduled_only and not pump.forecast_start:
            continue

        lead_times = lead_time_lookup(pump.model)
        if not lead_times:
            continue

        blocks = build_stage_timeline(pump, lead_times, now=now)
        if blocks:
            result[pump.id] = blocks

    logger.debug("Built timelines for %d of %d pumps", len(result), len(pumps))
    return result


def timeline_end(blocks: Sequence[TimelineBlock]) -> Optional[pd.Timestamp]:
    """마지막 블록의 종료 시각 (예측 완료일). 블록이 없으면 None."""
    if not blocks:
        return None
    return blocks[-1].end


def blocks_to_frame(blocks: Sequence[TimelineBlock]) -> pd.DataFrame:
    """블록 목록을 stage/start/end/days 컬럼의 DataFrame으로 변환합니다."""
    if not blocks:
        return pd.DataFrame(columns=TIMELINE_COLUMNS)
    return pd.DataFrame([b.to_record() for b in blocks], columns=TIMELINE_COLUMNS)
