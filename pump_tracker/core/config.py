"""Configuration and constants for the pump tracker.

스테이지 리드타임 기본값, WIP 한도, 재시도 정책, 원격 연결 정보 등
전역 설정을 제공합니다.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


# ============================================================
# 로컬 저장소 설정
# ============================================================

# 원격 연결 정보가 없을 때 사용할 JSON 파일 경로
LOCAL_STORE_PATH = os.getenv("PUMP_TRACKER_LOCAL_PATH", "pump_tracker_data.json")

# Google Sheets에서 펌프 목록을 담고 있는 워크시트 이름
PUMP_WORKSHEET = os.getenv("PUMP_TRACKER_WORKSHEET", "pump")


# ============================================================
# 스케줄 설정
# ============================================================

def _default_durations() -> Dict[str, int]:
    return {"fabrication": 3, "powder_coat": 2, "assembly": 2, "ship": 1}


@dataclass(frozen=True)
class ScheduleConfig:
    """타임라인 빌드 관련 설정"""

    # 스테이지별 기본 리드타임 (일)
    default_durations: Mapping[str, int] = field(default_factory=_default_durations)

    # 스케줄 화면 기본 표시 기간 (일)
    view_days: int = 28

    # 주간 캘린더 그리드의 근무일 수
    days_in_week: int = 5


def _default_wip_limits() -> Dict[str, Optional[int]]:
    return {
        "QUEUE": None,
        "FABRICATION": 8,
        "STAGED_FOR_POWDER": None,
        "POWDER_COAT": 6,
        "ASSEMBLY": 8,
        "SHIP": 5,
        "CLOSED": None,
    }


@dataclass(frozen=True)
class WipConfig:
    """스테이지별 WIP 한도 (None = 무제한)"""

    limits: Mapping[str, Optional[int]] = field(default_factory=_default_wip_limits)


@dataclass(frozen=True)
class RetryConfig:
    """원격 읽기 재시도 정책"""

    # 최대 시도 횟수 (최초 시도 포함)
    max_attempts: int = 3

    # 첫 재시도 전 대기 시간 (초)
    base_delay_seconds: float = 0.5

    # 재시도마다 대기 시간에 곱해지는 계수
    backoff_factor: float = 2.0


@dataclass(frozen=True)
class RiskConfig:
    """납기 리스크 판단 임계값 (일)"""

    at_risk_days: int = 3
    late_forecast_days: int = 3


@dataclass(frozen=True)
class SandboxConfig:
    """샌드박스 커밋 관련 설정"""

    # 커밋 전 사용자 확인 필요 여부
    require_commit_confirmation: bool = True


@dataclass(frozen=True)
class TrackerConfig:
    """전역 설정"""

    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    wip: WipConfig = field(default_factory=WipConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    sandbox: SandboxConfig = field(default_factory=SandboxConfig)


# ============================================================
# 전역 설정 인스턴스
# ============================================================

CONFIG = TrackerConfig()


# ============================================================
# 원격 연결 정보
# ============================================================

@dataclass(frozen=True)
class RemoteConnection:
    """Google Sheets 연결 정보.

    Attributes:
        url: 스프레드시트 URL
        key: 서비스 계정 인증 정보 (dict)
    """

    url: str = ""
    key: Optional[Mapping[str, Any]] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url) and bool(self.key)


def parse_service_account(raw: Any) -> Optional[Dict[str, Any]]:
    """서비스 계정 정보를 dict로 변환합니다.

    JSON 문자열, dict, 또는 Streamlit secrets 섹션을 받을 수 있습니다.
    private_key의 이스케이프된 개행은 실제 개행으로 복원합니다.
    """
    if raw is None or raw == "":
        return None

    if isinstance(raw, str):
        info = json.loads(raw)
    elif isinstance(raw, Mapping):
        info = dict(raw)
    else:
        info = {k: raw[k] for k in raw.keys()}

    if "private_key" in info:
        info["private_key"] = str(info["private_key"]).replace("\\n", "\n").strip()
    return info


def load_remote_connection(env: Optional[Mapping[str, str]] = None) -> RemoteConnection:
    """환경변수에서 원격 연결 정보를 읽습니다."""
    source = os.environ if env is None else env
    url = source.get("PUMP_TRACKER_SHEET_URL", "").strip()
    key = parse_service_account(source.get("PUMP_TRACKER_SERVICE_ACCOUNT_JSON", ""))
    return RemoteConnection(url=url, key=key)
