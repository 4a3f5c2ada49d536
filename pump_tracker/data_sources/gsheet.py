"""
Google Sheets 어댑터 (원격 저장소)

서비스 계정으로 스프레드시트에 접속해 펌프 워크시트를 읽고 씁니다.
읽기(load)는 재시도 정책을 따르고, 쓰기(save/replace_all)는 실패 시
즉시 PersistenceError로 전달합니다.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional, Sequence

import gspread
import pandas as pd
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1

from ..common.performance import measure_time_context
from ..core.config import PUMP_WORKSHEET, RemoteConnection
from ..domain.exceptions import DataLoadError, PersistenceError
from ..domain.models import PUMP_COLUMNS, Pump
from ..domain.normalization import pumps_to_frame, records_to_pumps
from .retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

# PUMP_COLUMNS가 차지하는 마지막 열 문자 (예: "L")
LAST_COLUMN = rowcol_to_a1(1, len(PUMP_COLUMNS)).rstrip("0123456789")


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return value


class GSheetAdapter:
    """
    스프레드시트 워크시트 하나를 펌프 테이블로 사용하는 원격 어댑터.

    워크시트 1행은 헤더(PUMP_COLUMNS), 1열은 id입니다.

    Args:
        connection: 스프레드시트 URL과 서비스 계정 정보
        worksheet_name: 워크시트 이름
        policy: 읽기 재시도 정책
        sleep: 재시도 대기 함수
        worksheet: 이미 열린 워크시트 (테스트용)
    """

    name = "remote"

    def __init__(
        self,
        connection: RemoteConnection,
        *,
        worksheet_name: str = PUMP_WORKSHEET,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        worksheet: Optional[gspread.Worksheet] = None,
    ) -> None:
        self.connection = connection
        self.worksheet_name = worksheet_name
        self.policy = policy or RetryPolicy.from_config()
        self._sleep = sleep
        self._ws = worksheet

    def _worksheet(self) -> gspread.Worksheet:
        if self._ws is None:
            credentials = Credentials.from_service_account_info(
                dict(self.connection.key or {}), scopes=SCOPES
            )
            client = gspread.authorize(credentials)
            self._ws = client.open_by_url(self.connection.url).worksheet(self.worksheet_name)
        return self._ws

    def _fetch_records(self) -> List[dict]:
        with measure_time_context("Google Sheets read"):
            return self._worksheet().get_all_records(numericise_ignore=["all"])

    def load(self) -> List[Pump]:
        """
        워크시트의 모든 펌프를 읽습니다.

        Raises:
            DataLoadError: 모든 재시도가 실패한 경우 (마지막 오류가 원인으로 연결됨)
            ValidationError: 레코드 정규화 실패
        """
        logger.info("Loading pumps from Google Sheets")
        try:
            records = call_with_retry(
                self._fetch_records,
                policy=self.policy,
                sleep=self._sleep,
                label="Google Sheets load",
            )
        except Exception as exc:
            raise DataLoadError(f"Google Sheets 데이터를 불러오지 못했습니다: {exc}") from exc

        pumps = records_to_pumps(records)
        logger.info("Loaded %d pumps from Google Sheets", len(pumps))
        return pumps

    def save(self, pump: Pump) -> None:
        """id가 같은 행을 덮어쓰거나, 없으면 새 행을 추가합니다."""
        record = pump.to_record()
        row = [_cell(record[col]) for col in PUMP_COLUMNS]

        try:
            ws = self._worksheet()
            if not ws.row_values(1):
                ws.update(range_name="A1", values=[list(PUMP_COLUMNS)])

            cell = ws.find(pump.id, in_column=1)
            if cell is None:
                ws.append_row(row, value_input_option="RAW")
            else:
                ws.update(range_name=f"A{cell.row}", values=[row])
        except Exception as exc:
            logger.error("Google Sheets save of %s failed: %s", pump.id, exc)
            raise PersistenceError(f"{pump.id} 저장에 실패했습니다: {exc}") from exc

    def replace_all(self, pumps: Sequence[Pump]) -> None:
        """
        워크시트 전체를 주어진 펌프 목록으로 교체합니다 (파괴적 작업).

        새 값을 먼저 덮어쓴 뒤 그 아래에 남은 이전 행만 지웁니다.
        덮어쓰기가 실패하면 워크시트는 호출 전 내용 그대로 남습니다.
        """
        frame = pumps_to_frame(pumps).astype(object)
        values = [list(PUMP_COLUMNS)] + [
            [_cell(v) for v in row] for row in frame.itertuples(index=False, name=None)
        ]

        try:
            with measure_time_context("Google Sheets replace"):
                ws = self._worksheet()
                ws.update(range_name="A1", values=values)
                ws.batch_clear([f"A{len(values) + 1}:{LAST_COLUMN}"])
        except Exception as exc:
            logger.error("Google Sheets replace_all failed: %s", exc)
            raise PersistenceError(f"전체 교체에 실패했습니다: {exc}") from exc

        logger.info("Replaced Google Sheets data with %d pumps", len(pumps))
