"""
뷰포트 투영

절대 시각의 타임라인 블록을 유한한 일(day) 창 안의 비율 좌표로
변환합니다. 한 작업 항목 전체를 하나의 "pill"로 보고, 각 블록은
pill 내부의 offset/width 퍼센트로 표현됩니다.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from ..domain.models import TimelineBlock
from ..domain.normalization import to_naive_timestamp
from ..domain.stages import Stage

ONE_DAY = pd.Timedelta(days=1)


@dataclass(frozen=True)
class PillBounds:
    """
    작업 항목 전체의 표시 범위 (일 단위, [0, total_days]로 클램프).

    Attributes:
        start_index: 뷰 시작으로부터의 시작 오프셋
        span: 표시 폭. 0이면 전체가 창 밖에 있음
        original_start: 클램프 전 시작 오프셋
        original_end: 클램프 전 종료 오프셋
    """

    start_index: float
    span: float
    original_start: float = 0.0
    original_end: float = 0.0


@dataclass(frozen=True)
class Segment:
    """pill 내부의 스테이지 구간 (퍼센트 단위)."""

    stage: Stage
    offset_percent: float
    width_percent: float
    has_weekend: bool = False


@dataclass(frozen=True)
class WeekSegment:
    """주간 캘린더 그리드용 구간."""

    stage: Stage
    start: pd.Timestamp
    end: pd.Timestamp
    start_col: int
    span: int


def day_offset(moment: pd.Timestamp, view_start: pd.Timestamp) -> float:
    """view_start로부터 moment까지의 일수 (소수 포함). 시간대는 naive로 맞춥니다."""
    return (to_naive_timestamp(moment) - to_naive_timestamp(view_start)) / ONE_DAY


def _clamp(value: float, total_days: float) -> float:
    return min(max(value, 0.0), float(total_days))


def compute_pill_bounds(
    blocks: Sequence[TimelineBlock],
    view_start: pd.Timestamp,
    total_days: float,
) -> PillBounds:
    """
    블록 목록 전체의 표시 범위를 계산합니다.

    블록이 없거나 전부 창 밖에 있으면 span == 0을 반환합니다.
    """
    if total_days < 0:
        raise ValueError(f"total_days must be >= 0, got {total_days}")

    if not blocks:
        return PillBounds(start_index=0.0, span=0.0)

    pill_start = day_offset(blocks[0].start, view_start)
    pill_end = day_offset(blocks[-1].end, view_start)

    start_index = _clamp(pill_start, total_days)
    end_index = _clamp(pill_end, total_days)

    return PillBounds(
        start_index=start_index,
        span=max(0.0, end_index - start_index),
        original_start=pill_start,
        original_end=pill_end,
    )


def _has_weekend(view_start: pd.Timestamp, block_start: float, block_end: float) -> bool:
    first = to_naive_timestamp(view_start).normalize() + pd.Timedelta(days=math.floor(block_start))
    stop = to_naive_timestamp(view_start).normalize() + pd.Timedelta(days=math.ceil(block_end))
    current = first
    while current < stop:
        if current.weekday() >= 5:
            return True
        current += ONE_DAY
    return False


def project_segments(
    blocks: Sequence[TimelineBlock],
    view_start: pd.Timestamp,
    total_days: float,
    bounds: Optional[PillBounds] = None,
) -> List[Segment]:
    """
    각 블록을 pill 내부 비율 좌표로 투영합니다.

    - 블록 시작/끝을 [0, total_days]로 클램프
    - offset = (블록 시작 - pill 시작) / pill 폭 * 100
    - width = (블록 끝 - 블록 시작) / pill 폭 * 100
    - width <= 0 (창 밖) 구간은 제외, 나머지는 블록 순서 유지
    - pill 폭이 0이면 빈 목록 (0으로 나누지 않음)
    """
    if bounds is None:
        bounds = compute_pill_bounds(blocks, view_start, total_days)

    if bounds.span <= 0:
        return []

    segments: List[Segment] = []
    for block in blocks:
        block_start = _clamp(day_offset(block.start, view_start), total_days)
        block_end = _clamp(day_offset(block.end, view_start), total_days)

        width_percent = (block_end - block_start) / bounds.span * 100
        if width_percent <= 0:
            continue

        segments.append(
            Segment(
                stage=block.stage,
                offset_percent=(block_start - bounds.start_index) / bounds.span * 100,
                width_percent=width_percent,
                has_weekend=_has_weekend(view_start, block_start, block_end),
            )
        )

    return segments


def project_timeline(
    blocks: Sequence[TimelineBlock],
    view_start: pd.Timestamp,
    total_days: float,
) -> Tuple[PillBounds, List[Segment]]:
    """pill 범위와 구간 목록을 함께 계산합니다."""
    bounds = compute_pill_bounds(blocks, view_start, total_days)
    return bounds, project_segments(blocks, view_start, total_days, bounds)


def project_to_week(
    blocks: Sequence[TimelineBlock],
    week_start: pd.Timestamp,
    days_in_week: int = 5,
) -> List[WeekSegment]:
    """
    블록을 주간 캘린더 그리드(기본 월~금 5칸)의 열 위치로 변환합니다.

    주 범위와 겹치지 않는 블록은 제외하며, span은 최소 1칸,
    최대 (days_in_week - start_col)칸입니다.
    """
    week_start = to_naive_timestamp(week_start)
    week_end = week_start + pd.Timedelta(days=days_in_week)
    segments: List[WeekSegment] = []

    for block in blocks:
        start, end = to_naive_timestamp(block.start), to_naive_timestamp(block.end)
        if end <= week_start or start >= week_end:
            continue

        clamped_start = max(start, week_start)
        clamped_end = min(end, week_end)

        start_col = max(0, (clamped_start.normalize() - week_start.normalize()).days)
        end_col = max(start_col, (clamped_end.normalize() - week_start.normalize()).days)
        span = min(days_in_week - start_col, max(1, end_col - start_col))

        segments.append(
            WeekSegment(
                stage=block.stage,
                start=clamped_start,
                end=clamped_end,
                start_col=start_col,
                span=span,
            )
        )

    return segments
