"""
납기 리스크 판단

타임라인 빌더는 납기일과 무관하게 남은 작업의 시간 위치만 계산합니다.
지연 여부는 이 모듈이 납기일, 예측 종료일, 우선순위를 보고 판단합니다.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from ..core.config import CONFIG, RiskConfig
from .models import Pump
from .normalization import to_naive_timestamp

ON_TRACK = "on-track"
AT_RISK = "at-risk"
LATE = "late"

ESCALATED_PRIORITIES = ("Urgent", "Rush")


@dataclass(frozen=True)
class RiskResult:
    """
    리스크 판단 결과.

    Attributes:
        status: "on-track" | "at-risk" | "late"
        days_until_promise: 납기까지 남은 일수 (음수 = 지연)
        days_behind_schedule: 예측 종료일이 납기보다 늦은 일수
        reasons: 사람이 읽을 수 있는 판단 근거
    """

    status: str
    days_until_promise: Optional[int]
    days_behind_schedule: int
    reasons: List[str] = field(default_factory=list)


def _days_between(later: pd.Timestamp, earlier: pd.Timestamp) -> int:
    return math.ceil((later - earlier) / pd.Timedelta(days=1))


def calculate_risk(
    pump: Pump,
    forecast_end: Optional[pd.Timestamp] = None,
    today: Optional[pd.Timestamp] = None,
    *,
    config: RiskConfig = CONFIG.risk,
) -> RiskResult:
    """
    작업 항목의 납기 리스크를 판단합니다.

    1. 납기까지 남은 일수: 음수면 late, at_risk_days 이내면 at-risk
    2. 예측 종료일 - 납기: late_forecast_days 초과면 late, 0 초과면 at-risk
       (이미 late인 상태를 낮추지는 않음)
    3. Urgent/Rush 우선순위의 at-risk 항목에는 근거를 추가
    """
    today = pd.Timestamp.now() if today is None else to_naive_timestamp(today)
    reasons: List[str] = []
    status = ON_TRACK
    days_until_promise: Optional[int] = None
    days_behind = 0

    promise = pd.to_datetime(pump.promise_date, errors="coerce") if pump.promise_date else pd.NaT

    if not pd.isna(promise):
        promise = to_naive_timestamp(promise)
        days_until_promise = _days_between(promise, today)
        if days_until_promise < 0:
            status = LATE
            reasons.append(f"Overdue by {abs(days_until_promise)} day(s)")
        elif days_until_promise <= config.at_risk_days:
            status = AT_RISK
            reasons.append(f"Due in {days_until_promise} day(s)")

        if forecast_end is not None:
            days_behind = _days_between(to_naive_timestamp(forecast_end), promise)
            if days_behind > config.late_forecast_days:
                status = LATE
                reasons.append(f"Forecast {days_behind} day(s) behind promise")
            elif days_behind > 0 and status != LATE:
                status = AT_RISK
                reasons.append(f"Forecast {days_behind} day(s) behind promise")

    if pump.priority in ESCALATED_PRIORITIES and status == AT_RISK:
        reasons.append(f"{pump.priority} priority requires attention")

    return RiskResult(
        status=status,
        days_until_promise=days_until_promise,
        days_behind_schedule=days_behind,
        reasons=reasons,
    )
