"""
어댑터 선택

활성 어댑터는 연결 정보와 샌드박스 상태만으로 결정됩니다.
- 샌드박스 중: SandboxAdapter
- 원격 연결 정보(URL + key)가 있으면: 원격 어댑터
- 그 외: LocalAdapter
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from ..core.config import LOCAL_STORE_PATH, RemoteConnection
from .base import PersistenceAdapter
from .gsheet import GSheetAdapter
from .local import LocalAdapter
from .sandbox import SandboxAdapter


@dataclass(frozen=True)
class Backends:
    """스토어가 사용할 수 있는 백엔드 묶음."""

    local: PersistenceAdapter
    sandbox: SandboxAdapter = field(default_factory=SandboxAdapter)
    remote: Optional[PersistenceAdapter] = None


def select_real_adapter(backends: Backends, connection: RemoteConnection) -> PersistenceAdapter:
    """샌드박스가 아닐 때 사용할 실제 어댑터."""
    if connection.is_configured and backends.remote is not None:
        return backends.remote
    return backends.local


def select_adapter(
    backends: Backends,
    connection: RemoteConnection,
    *,
    is_sandbox: bool,
) -> PersistenceAdapter:
    """현재 상태에서 활성화될 어댑터."""
    if is_sandbox:
        return backends.sandbox
    return select_real_adapter(backends, connection)


def build_backends(
    connection: RemoteConnection,
    *,
    local_path: Optional[Union[str, Path]] = LOCAL_STORE_PATH,
    remote_factory: Callable[[RemoteConnection], PersistenceAdapter] = GSheetAdapter,
) -> Backends:
    """연결 정보가 있을 때만 원격 어댑터를 만듭니다 (접속은 첫 사용 시)."""
    remote = remote_factory(connection) if connection.is_configured else None
    return Backends(local=LocalAdapter(local_path), remote=remote)
