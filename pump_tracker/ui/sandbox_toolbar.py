"""
샌드박스 툴바

샌드박스 진입/커밋/폐기 버튼을 렌더링합니다. 커밋은 실제 데이터를
덮어쓰는 파괴적 작업이므로 확인 체크박스를 선택해야만 활성화됩니다.
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

from pump_tracker.application.store import PumpStore

from .adapters import handle_domain_errors


def render_sandbox_toolbar(store: PumpStore) -> Optional[str]:
    """
    툴바를 렌더링하고 수행된 동작을 반환합니다.

    Returns:
        "entered" | "committed" | "exited" | None
    """
    if not store.is_sandbox:
        st.caption(f"LIVE · {store.adapter.name}")
        if st.button("🧪 샌드박스 시작", key="sandbox_enter"):
            store.enter_sandbox()
            return "entered"
        return None

    st.warning("샌드박스 모드: 변경 사항은 커밋 전까지 메모리에만 저장됩니다.")
    confirmed = st.checkbox(
        "커밋하면 실제 데이터가 현재 내용으로 덮어써집니다.",
        key="sandbox_confirm",
    )

    col_commit, col_exit = st.columns(2)
    action: Optional[str] = None

    if col_commit.button("✅ 커밋", key="sandbox_commit", disabled=not confirmed):
        with handle_domain_errors():
            if store.commit_sandbox(confirm=lambda: bool(confirmed)):
                st.success("샌드박스 변경 사항을 저장했습니다.")
                action = "committed"

    if col_exit.button("↩️ 폐기", key="sandbox_exit"):
        if store.exit_sandbox():
            action = "exited"

    return action
