"""
영속성 어댑터 인터페이스

원격(Google Sheets), 로컬(JSON), 샌드박스(메모리) 백엔드가 공통으로
구현하는 load / save / replace_all 프로토콜입니다.
"""

from __future__ import annotations

from typing import List, Protocol, Sequence

from ..domain.models import Pump


class PersistenceAdapter(Protocol):
    """Capability set every backend implements: load, save one, replace all."""

    name: str

    def load(self) -> List[Pump]:  # pragma: no cover - interface definition
        ...

    def save(self, pump: Pump) -> None:  # pragma: no cover - interface definition
        ...

    def replace_all(self, pumps: Sequence[Pump]) -> None:  # pragma: no cover - interface definition
        ...
