"""
도메인 예외 → UI 에러 메시지 어댑터

도메인 계층은 Streamlit에 의존하지 않고, 이 모듈이 예외를
사용자 메시지로 변환합니다.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

import streamlit as st

from pump_tracker.domain.exceptions import DataLoadError, PersistenceError, ValidationError


@contextmanager
def handle_domain_errors() -> Generator[None, None, None]:
    """
    도메인 예외를 잡아서 Streamlit 에러 메시지로 변환하는 컨텍스트 매니저.

    Examples:
        >>> with handle_domain_errors():
        ...     store.commit_sandbox(confirm=lambda: True)
    """
    try:
        yield

    except ValidationError as e:
        st.error(f"❌ 데이터 검증 실패: {str(e)}")

    except DataLoadError as e:
        # 재시도를 모두 소진한 경우에만 여기까지 옴
        st.error(f"❌ 데이터 로드 실패: {str(e)}")

    except PersistenceError as e:
        st.error(f"❌ 저장 실패: {str(e)}")

    except Exception as e:
        st.error(f"❌ 예상치 못한 오류가 발생했습니다: {type(e).__name__}: {str(e)}")
        st.exception(e)
