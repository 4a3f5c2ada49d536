"""
원격 읽기 재시도

일시적인 네트워크/백엔드 오류를 지수 백오프로 재시도합니다.
최대 시도 횟수를 넘기면 마지막 오류를 그대로 호출자에게 전달하며,
빈 결과로 대체하지 않습니다. 쓰기 작업(save/replace_all)은 재시도하지 않습니다.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ..core.config import CONFIG, RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    재시도 정책.

    Attributes:
        max_attempts: 최초 시도를 포함한 최대 시도 횟수
        base_delay: 첫 재시도 전 대기 시간 (초)
        backoff_factor: 재시도마다 대기 시간에 곱해지는 계수
    """

    max_attempts: int = CONFIG.retry.max_attempts
    base_delay: float = CONFIG.retry.base_delay_seconds
    backoff_factor: float = CONFIG.retry.backoff_factor

    @classmethod
    def from_config(cls, config: RetryConfig = CONFIG.retry) -> RetryPolicy:
        return cls(
            max_attempts=config.max_attempts,
            base_delay=config.base_delay_seconds,
            backoff_factor=config.backoff_factor,
        )

    def delay_for(self, attempt: int) -> float:
        """attempt번째 시도가 실패한 뒤 기다릴 시간 (attempt는 1부터)."""
        return self.base_delay * (self.backoff_factor ** (attempt - 1))


def call_with_retry(
    operation: Callable[[], T],
    *,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "load",
) -> T:
    """
    operation을 최대 policy.max_attempts번 실행합니다.

    실패할 때마다 시도 번호와 함께 로깅하고, 마지막 시도가 아니면
    지수적으로 늘어나는 시간만큼 기다린 뒤 다시 시도합니다.

    Args:
        operation: 인자 없는 읽기 함수
        policy: 재시도 정책 (기본값: CONFIG.retry)
        sleep: 대기 함수 (테스트에서 교체)
        label: 로그에 표시할 작업 이름

    Returns:
        operation의 첫 성공 결과

    Raises:
        Exception: 모든 시도가 실패하면 마지막 시도의 예외
    """
    policy = policy or RetryPolicy.from_config()
    attempts = max(1, int(policy.max_attempts))

    attempt = 1
    while True:
        try:
            return operation()
        except Exception as exc:
            logger.warning("%s failed (attempt %d/%d): %s", label, attempt, attempts, exc)
            if attempt >= attempts:
                logger.error("%s failed after %d attempts", label, attempts)
                raise

            delay = policy.delay_for(attempt)
            logger.info("Retrying %s in %.2fs", label, delay)
            sleep(delay)
            attempt += 1
