"""
Pump Tracker 메인 엔트리 포인트

실행: streamlit run pump_app.py

화면 구성:
- 사이드바: 샌드박스 툴바, WIP 현황, CSV 내보내기 / PO CSV 등록
- 칸반 이동: 펌프를 다른 스테이지로 이동 (시리얼/WIP 정책 적용)
- 일정: 스테이지 타임라인 차트와 납기 리스크 표
"""

from __future__ import annotations

import logging

import pandas as pd
import streamlit as st

# 로깅 설정
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

from pump_tracker.core.config import CONFIG
from pump_tracker.domain import (
    STAGE_SEQUENCE,
    calculate_risk,
    export_filename,
    parse_po_csv,
    pumps_to_csv,
    pumps_to_frame,
)
from pump_tracker.planning import build_stage_timeline, timeline_end
from pump_tracker.ui import (
    get_store,
    handle_domain_errors,
    render_sandbox_toolbar,
    render_timeline_chart,
)


def main() -> None:
    st.set_page_config(page_title="Pump Tracker", layout="wide")
    st.title("Pump Tracker")

    store = get_store()
    if store is None:
        st.stop()

    # ========================================
    # 사이드바: 샌드박스 + WIP 현황 + CSV 입출력
    # ========================================
    with st.sidebar:
        st.subheader("샌드박스")
        if render_sandbox_toolbar(store) is not None:
            st.rerun()

        st.subheader("WIP")
        counts = store.counts_by_stage()
        for stage in STAGE_SEQUENCE:
            limit = store.wip_policy.limit_for(stage)
            suffix = f" / {limit}" if limit is not None else ""
            st.caption(f"{stage.label}: {counts[stage]}{suffix}")

        st.subheader("데이터")
        st.download_button(
            "작업 세트 CSV 다운로드",
            data=pumps_to_csv(store.pumps).encode("utf-8-sig"),
            file_name=export_filename("csv"),
            mime="text/csv",
        )

        po_file = st.file_uploader("PO CSV 업로드 (.csv)", type=["csv"], key="po_csv")
        if po_file is not None and st.button("PO 등록", key="po_register"):
            with handle_domain_errors():
                order = parse_po_csv(po_file.getvalue().decode("utf-8-sig"))
                created = store.add_purchase_order(order)
                st.success(f"{order.po}: {len(created)}대 등록")

    pumps = store.pumps
    if not pumps:
        st.info("등록된 펌프가 없습니다.")
        return

    # ========================================
    # 칸반 이동
    # ========================================
    st.subheader("스테이지 이동")
    col_pump, col_stage, col_btn = st.columns([3, 2, 1])
    labels = {p.id: f"{p.po} · {p.model} · {p.serial or '미할당'}" for p in pumps}
    pump_id = col_pump.selectbox("펌프", options=list(labels), format_func=labels.get)
    target = col_stage.selectbox("이동할 스테이지", options=list(STAGE_SEQUENCE), format_func=lambda s: s.label)

    if col_btn.button("이동", key="move_stage"):
        with handle_domain_errors():
            outcome = store.move_stage(pump_id, target)
            if outcome.accepted:
                st.success(outcome.message)
            else:
                st.warning(outcome.message)

    # ========================================
    # 일정 (타임라인 + 리스크)
    # ========================================
    st.subheader("일정")
    today = pd.Timestamp.now().normalize()
    col_start, col_days = st.columns(2)
    view_start = pd.Timestamp(col_start.date_input("표시 시작일", value=today.date()))
    total_days = col_days.slider("표시 기간 (일)", 7, 90, CONFIG.schedule.view_days)

    durations = CONFIG.schedule.default_durations
    timelines = {p.id: build_stage_timeline(p, durations, now=today) for p in store.pumps}
    render_timeline_chart(timelines, view_start, total_days, labels=labels)

    risks = [calculate_risk(p, timeline_end(timelines[p.id]), today) for p in store.pumps]
    table = pumps_to_frame(store.pumps)
    table["forecast_end"] = [timeline_end(timelines[p.id]) for p in store.pumps]
    table["risk"] = [r.status for r in risks]
    table["risk_reasons"] = ["; ".join(r.reasons) for r in risks]
    st.dataframe(table, use_container_width=True, hide_index=True)


if __name__ == "__main__":
    main()
