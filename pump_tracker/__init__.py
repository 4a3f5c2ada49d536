"""
Pump Tracker 패키지

생산 파이프라인을 따라 이동하는 펌프(작업 항목)를 추적하고
스테이지별 예측 타임라인을 계산합니다.

주요 구성:
- domain: 스테이지 모델, 작업 항목, WIP 정책, 리스크 판단
- planning: 타임라인 빌더와 뷰포트 투영
- data_sources: 영속성 어댑터 (Google Sheets / 로컬 / 샌드박스)
- application: 작업 세트와 샌드박스(스테이징 편집) 컨트롤러
- ui: Streamlit 화면 구성 요소
"""

from __future__ import annotations

__version__ = "1.0.0"
