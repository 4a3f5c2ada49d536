"""
로컬 어댑터

원격 연결 정보가 없을 때 사용하는 저장소입니다. path가 주어지면
JSON 파일에, 없으면 메모리에만 기록합니다.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from ..domain.exceptions import DataLoadError, PersistenceError
from ..domain.models import Pump
from ..domain.normalization import records_to_pumps

logger = logging.getLogger(__name__)


class LocalAdapter:
    """JSON 파일(또는 메모리) 기반 저장소. 레코드는 id 순서를 유지합니다."""

    name = "local"

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._memory: Dict[str, dict] = {}

    def _read(self) -> Dict[str, dict]:
        if self.path is None:
            return dict(self._memory)
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, json.JSONDecodeError) as exc:
            raise DataLoadError(f"로컬 저장소를 읽을 수 없습니다: {self.path}") from exc
        return {str(row["id"]): row for row in payload if row.get("id")}

    def _write(self, rows: Dict[str, dict]) -> None:
        if self.path is None:
            self._memory = dict(rows)
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(list(rows.values()), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            raise PersistenceError(f"로컬 저장소에 쓸 수 없습니다: {self.path}") from exc

    def load(self) -> List[Pump]:
        rows = self._read()
        logger.debug("Loaded %d pumps from local store", len(rows))
        return records_to_pumps(rows.values())

    def save(self, pump: Pump) -> None:
        rows = self._read()
        rows[pump.id] = pump.to_record()
        self._write(rows)

    def replace_all(self, pumps: Sequence[Pump]) -> None:
        self._write({p.id: p.to_record() for p in pumps})
        logger.info("Replaced local store with %d pumps", len(pumps))
