"""
성능 측정 유틸리티

원격 저장소 호출처럼 오래 걸릴 수 있는 작업의 실행 시간을 로깅합니다.
"""

from __future__ import annotations

import logging
import time
from typing import Any

logger = logging.getLogger(__name__)

SLOW_THRESHOLD_SECONDS = 1.0


class PerformanceContext:
    """
    코드 블록의 실행 시간을 측정하는 컨텍스트 매니저.

    Attributes:
        operation_name: 측정할 작업의 이름
        elapsed: 경과 시간 (초)
    """

    def __init__(self, operation_name: str) -> None:
        self.operation_name = operation_name
        self.elapsed: float = 0.0
        self._start: float = 0.0

    def __enter__(self) -> PerformanceContext:
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.elapsed = time.perf_counter() - self._start

        if exc_type is not None:
            logger.debug("%s failed after %.2fs", self.operation_name, self.elapsed)
        elif self.elapsed >= SLOW_THRESHOLD_SECONDS:
            logger.warning("%s took %.2fs", self.operation_name, self.elapsed)
        else:
            logger.debug("%s completed in %.2fs", self.operation_name, self.elapsed)


def measure_time_context(operation_name: str) -> PerformanceContext:
    """
    컨텍스트 매니저로 코드 블록의 실행 시간을 측정합니다.

    Examples:
        >>> with measure_time_context("Google Sheets read"):
        ...     rows = worksheet.get_all_records()
    """
    return PerformanceContext(operation_name)
