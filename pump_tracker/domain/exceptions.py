"""
도메인 계층 예외 정의

UI 계층은 이 예외들을 잡아서 사용자 친화적인 메시지로 변환합니다.
WIP 한도 초과는 예외가 아니라 MoveOutcome 값으로 전달됩니다.
"""

from __future__ import annotations


class DomainError(Exception):
    """도메인 계층의 기본 예외 클래스."""

    pass


class ValidationError(DomainError):
    """
    레코드 검증 실패 시 발생하는 예외.

    예: 알 수 없는 스테이지 값, id 누락
    """

    pass


class DataLoadError(DomainError):
    """
    원격 저장소 읽기가 재시도 후에도 실패한 경우 발생하는 예외.

    마지막 시도의 원인 예외가 __cause__로 연결됩니다.
    """

    pass


class PersistenceError(DomainError):
    """
    저장(save) 또는 전체 교체(replace_all) 실패 시 발생하는 예외.

    쓰기 작업은 재시도하지 않고 즉시 호출자에게 전달됩니다.
    """

    pass
