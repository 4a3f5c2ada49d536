"""
영속성 어댑터 계층

원격(Google Sheets), 로컬(JSON 파일), 샌드박스(메모리) 어댑터와
어댑터 선택 규칙, 읽기 재시도 정책을 제공합니다.
"""

from .base import PersistenceAdapter
from .gsheet import GSheetAdapter
from .local import LocalAdapter
from .retry import RetryPolicy, call_with_retry
from .sandbox import SandboxAdapter
from .selection import Backends, build_backends, select_adapter, select_real_adapter

__all__ = [
    "PersistenceAdapter",
    "GSheetAdapter",
    "LocalAdapter",
    "SandboxAdapter",
    "RetryPolicy",
    "call_with_retry",
    "Backends",
    "build_backends",
    "select_adapter",
    "select_real_adapter",
]
