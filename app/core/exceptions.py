"""추천 요청을 중단시키는 예외 정의."""

from __future__ import annotations


class RecoError(RuntimeError):
    """요청 전체를 실패시키는 예외의 기반 클래스."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class RecoConfigError(RecoError):
    """필수 자격 증명이 설정되지 않았을 때 발생합니다."""


class PlacesFetchError(RecoError):
    """장소 검색 제공자 호출이 실패했을 때 발생합니다.

    후보가 없으면 추천할 것이 없으므로 요청 전체를 중단한다.
    """

    status_code = 502

    def __init__(self, message: str, *, provider_status: int | None = None) -> None:
        super().__init__(message)
        self.provider_status = provider_status
