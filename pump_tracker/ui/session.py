"""
세션 상태 관리

PumpStore를 Streamlit 세션 상태에 보관합니다. 스토어는 세션이
처음 열릴 때 한 번 만들어지고 이후 재실행에서도 유지됩니다.
"""

from __future__ import annotations

import logging
from typing import Optional

import streamlit as st

from pump_tracker.application.store import PumpStore
from pump_tracker.core.config import RemoteConnection, load_remote_connection, parse_service_account
from pump_tracker.data_sources.selection import build_backends

from .adapters import handle_domain_errors

logger = logging.getLogger(__name__)

STORE_SESSION_KEY = "pump_store"


def load_connection() -> RemoteConnection:
    """
    원격 연결 정보를 환경변수 → Streamlit secrets 순서로 찾습니다.

    secrets 형식:
        [pump_tracker]
        sheet_url = "https://docs.google.com/spreadsheets/d/..."
        [pump_tracker.credentials]   # 또는 credentials_json = "..."
    """
    connection = load_remote_connection()
    if connection.is_configured:
        return connection

    try:
        section = st.secrets["pump_tracker"]
    except Exception as exc:
        logger.info("No [pump_tracker] secrets section (%s); using local store", exc)
        return connection

    key = parse_service_account(section.get("credentials") or section.get("credentials_json"))
    return RemoteConnection(url=str(section.get("sheet_url", "")), key=key)


def get_store() -> Optional[PumpStore]:
    """
    세션의 PumpStore를 반환하고, 없으면 만들어 한 번 로드합니다.

    로드에 실패하면 에러를 표시하고 None을 반환합니다. 실패한 스토어는
    세션에 보관하지 않으므로 다음 재실행에서 다시 로드를 시도합니다.
    빈 작업 세트로 계속 진행하면 이후 커밋이 원격 데이터를 지울 수 있습니다.
    """
    store = st.session_state.get(STORE_SESSION_KEY)
    if isinstance(store, PumpStore):
        return store

    connection = load_connection()
    store = PumpStore(build_backends(connection), connection)

    loaded = False
    with st.spinner("펌프 데이터를 불러오는 중..."):
        with handle_domain_errors():
            store.load()
            loaded = True

    if not loaded:
        logger.error("Pump store not cached: initial load failed")
        return None

    st.session_state[STORE_SESSION_KEY] = store
    return store
