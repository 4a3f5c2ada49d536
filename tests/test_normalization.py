"""
레코드 정규화 테스트
"""

from __future__ import annotations

import pandas as pd
import pytest

from pump_tracker.domain.exceptions import ValidationError
from pump_tracker.domain.models import PUMP_COLUMNS, Pump
from pump_tracker.domain.normalization import (
    normalize_durations,
    normalize_stage,
    pumps_to_frame,
    records_to_pumps,
)
from pump_tracker.domain.stages import Stage


def test_normalize_stage_aliases():
    """레거시 표기 병합"""
    assert normalize_stage("POWDER COAT") == Stage.POWDER_COAT
    assert normalize_stage("Powder Coat") == Stage.POWDER_COAT
    assert normalize_stage("TESTING") == Stage.SHIP
    assert normalize_stage("shipping") == Stage.SHIP
    assert normalize_stage("staged_for_powder") == Stage.STAGED_FOR_POWDER
    assert normalize_stage(Stage.CLOSED) is Stage.CLOSED


def test_normalize_stage_unknown():
    with pytest.raises(ValidationError):
        normalize_stage("PAINT")


def test_normalize_durations_clamps_invalid_values():
    """음수/비정수 리드타임은 0으로 클램프"""
    result = normalize_durations(
        {"fabrication": 3, "powder_coat": -2, "assembly": 1.5, "ship": "2", "queue": 4}
    )

    assert result == {
        Stage.FABRICATION: 3,
        Stage.POWDER_COAT: 0,
        Stage.ASSEMBLY: 0,
        Stage.SHIP: 2,
    }


def test_normalize_durations_empty():
    assert normalize_durations(None) == {}
    assert normalize_durations({}) == {}


def test_records_to_pumps_camel_case_and_blanks():
    """camelCase 별칭, 빈 문자열, 숫자 변환"""
    records = [
        {
            "id": "a1",
            "model": "DD-4",
            "po": 1234.0,
            "customer": "Acme",
            "serial": "",
            "stage": "POWDER COAT",
            "priority": "",
            "value": "1500.5",
            "promiseDate": "2024-02-01",
            "forecastStart": "",
            "last_update": "not a date",
        }
    ]

    [pump] = records_to_pumps(records)

    assert pump.id == "a1"
    assert pump.po == "1234"
    assert pump.serial is None
    assert pump.stage == Stage.POWDER_COAT
    assert pump.priority == "Normal"
    assert pump.value == pytest.approx(1500.5)
    assert pump.promise_date == "2024-02-01"
    assert pump.forecast_start is None
    assert pump.last_update is None


def test_records_to_pumps_missing_stage_defaults_to_queue():
    [pump] = records_to_pumps([{"id": "a2", "value": "abc"}])

    assert pump.stage == Stage.QUEUE
    assert pump.value == 0.0


def test_records_to_pumps_requires_id():
    with pytest.raises(ValidationError):
        records_to_pumps([{"id": "", "stage": "QUEUE"}])


def test_records_to_pumps_rejects_unknown_stage():
    with pytest.raises(ValidationError):
        records_to_pumps([{"id": "x", "stage": "PAINT"}])


def test_pumps_to_frame_columns():
    frame = pumps_to_frame([Pump(id="p1", stage=Stage.SHIP)])

    assert list(frame.columns) == list(PUMP_COLUMNS)
    assert frame.iloc[0]["stage"] == "SHIP"


def test_pumps_to_frame_empty():
    frame = pumps_to_frame([])

    assert frame.empty
    assert list(frame.columns) == list(PUMP_COLUMNS)


def test_timezone_aware_dates_stored_as_naive_utc():
    [pump] = records_to_pumps(
        [{"id": "a3", "forecast_start": "2024-01-01T18:00:00+09:00", "promise_date": "2024-02-01"}]
    )

    assert pump.forecast_start == "2024-01-01T09:00:00"
    assert pump.promise_date == "2024-02-01"
