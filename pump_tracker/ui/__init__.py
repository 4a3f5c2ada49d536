"""
UI 레이어의 공개 API

Streamlit 기반 화면 구성 요소를 재수출합니다.
"""

from .adapters import handle_domain_errors
from .charts import build_timeline_figure, render_timeline_chart
from .sandbox_toolbar import render_sandbox_toolbar
from .session import get_store, load_connection

__all__ = (
    "handle_domain_errors",
    "build_timeline_figure",
    "render_timeline_chart",
    "render_sandbox_toolbar",
    "get_store",
    "load_connection",
)
