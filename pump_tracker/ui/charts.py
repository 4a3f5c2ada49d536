"""
타임라인 차트

작업 항목별 pill과 스테이지 구간을 Plotly 가로 막대로 그립니다.
좌표는 planning.viewport의 투영 결과를 그대로 사용합니다.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from pump_tracker.domain.models import TimelineBlock
from pump_tracker.domain.stages import Stage
from pump_tracker.planning.viewport import project_timeline

STAGE_COLORS: Dict[Stage, str] = {
    Stage.QUEUE: "#BAB0AC",
    Stage.FABRICATION: "#4E79A7",
    Stage.STAGED_FOR_POWDER: "#EDC948",
    Stage.POWDER_COAT: "#F28E2B",
    Stage.ASSEMBLY: "#59A14F",
    Stage.SHIP: "#B07AA1",
    Stage.CLOSED: "#7F7F7F",
}


def build_timeline_figure(
    timelines: Mapping[str, Sequence[TimelineBlock]],
    view_start: pd.Timestamp,
    total_days: int,
    *,
    labels: Optional[Mapping[str, str]] = None,
) -> go.Figure:
    """
    pump id → 블록 목록을 받아 스테이지 구간 막대 차트를 만듭니다.

    창 밖에 있는 항목(pill 폭 0)은 그리지 않습니다.
    x축은 view_start로부터의 일수입니다.
    """
    fig = go.Figure()
    shown: set = set()

    for pump_id, blocks in timelines.items():
        bounds, segments = project_timeline(blocks, view_start, total_days)
        if bounds.span <= 0:
            continue

        row_label = (labels or {}).get(pump_id, pump_id)
        for seg in segments:
            start = bounds.start_index + seg.offset_percent / 100 * bounds.span
            width = seg.width_percent / 100 * bounds.span
            fig.add_trace(
                go.Bar(
                    x=[width],
                    y=[row_label],
                    base=[start],
                    orientation="h",
                    name=seg.stage.label,
                    legendgroup=seg.stage.value,
                    showlegend=seg.stage not in shown,
                    marker_color=STAGE_COLORS[seg.stage],
                    hovertemplate=f"{seg.stage.label}<br>{start:.1f}일 ~ {start + width:.1f}일<extra></extra>",
                )
            )
            shown.add(seg.stage)

    fig.update_layout(
        barmode="overlay",
        height=max(240, 28 * len(timelines) + 80),
        margin=dict(l=10, r=10, t=30, b=10),
        legend=dict(orientation="h"),
    )
    fig.update_xaxes(range=[0, total_days], title_text=f"{pd.Timestamp(view_start).date()} 기준 일수")
    fig.update_yaxes(autorange="reversed")
    return fig


def render_timeline_chart(
    timelines: Mapping[str, Sequence[TimelineBlock]],
    view_start: pd.Timestamp,
    total_days: int,
    *,
    labels: Optional[Mapping[str, str]] = None,
) -> None:
    if not timelines:
        st.info("표시할 일정이 없습니다.")
        return
    fig = build_timeline_figure(timelines, view_start, total_days, labels=labels)
    st.plotly_chart(fig, use_container_width=True)
