import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def pytest_configure(config):
    """테스트 수집 전에 원격 연결 환경변수를 제거합니다.

    개발 환경에 설정된 Google Sheets 연결 정보로 테스트가
    실제 스프레드시트에 접속하지 않도록 합니다.
    """
    for name in ("PUMP_TRACKER_SHEET_URL", "PUMP_TRACKER_SERVICE_ACCOUNT_JSON"):
        os.environ.pop(name, None)


from pump_tracker.domain.exceptions import DataLoadError, PersistenceError  # noqa: E402
from pump_tracker.domain.models import Pump  # noqa: E402
from pump_tracker.domain.stages import Stage  # noqa: E402


class RecordingAdapter:
    """테스트용 어댑터: 호출을 기록하고, 지정한 작업에서 실패합니다."""

    name = "recording"

    def __init__(
        self,
        pumps: Sequence[Pump] = (),
        fail_on: Sequence[str] = (),
        save_limit: Optional[int] = None,
    ) -> None:
        self.rows: List[Pump] = list(pumps)
        self.saved: List[Pump] = []
        self.replaced: List[List[Pump]] = []
        self.fail_on = set(fail_on)
        # save_limit번 저장한 뒤부터 save 실패
        self.save_limit = save_limit

    def load(self) -> List[Pump]:
        if "load" in self.fail_on:
            raise DataLoadError("load failed")
        return list(self.rows)

    def save(self, pump: Pump) -> None:
        if "save" in self.fail_on or (
            self.save_limit is not None and len(self.saved) >= self.save_limit
        ):
            raise PersistenceError("save failed")
        self.saved.append(pump)
        self.rows = [p for p in self.rows if p.id != pump.id] + [pump]

    def replace_all(self, pumps: Sequence[Pump]) -> None:
        if "replace_all" in self.fail_on:
            raise PersistenceError("replace_all failed")
        self.replaced.append(list(pumps))
        self.rows = list(pumps)


@pytest.fixture
def unit_durations():
    """모든 스테이지 1일"""
    return {"fabrication": 1, "powder_coat": 1, "assembly": 1, "ship": 1}


@pytest.fixture
def sample_pumps() -> List[Pump]:
    """테스트용 작업 세트"""
    return [
        Pump(id="p1", model="DD-4", po="PO-100", customer="Acme", stage=Stage.QUEUE, value=1200.0),
        Pump(
            id="p2",
            model="DD-4",
            po="PO-100",
            customer="Acme",
            serial="SN-002",
            stage=Stage.FABRICATION,
            value=1200.0,
            promise_date="2024-01-20",
        ),
        Pump(
            id="p3",
            model="HC-8",
            po="PO-200",
            customer="Beta",
            serial="SN-003",
            stage=Stage.ASSEMBLY,
            priority="Rush",
            value=3400.0,
        ),
    ]


@pytest.fixture
def fixed_clock():
    return lambda: pd.Timestamp("2024-01-10 09:00:00")


@pytest.fixture
def recording_adapter():
    """RecordingAdapter 생성 함수"""
    return RecordingAdapter
