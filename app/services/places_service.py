"""Places 서비스 추상 프로토콜 정의."""

from abc import ABC, abstractmethod

from app.schemas.enums import SearchSort
from app.schemas.place import PlaceCandidate


class PlacesServiceProtocol(ABC):
    """장소 검색 제공자 호출을 위한 인터페이스를 정의합니다."""

    MAX_DISPLAY: int = 5

    @abstractmethod
    async def search(
        self,
        query: str,
        display: int | None = None,
        sort: SearchSort | str | None = None,
    ) -> list[PlaceCandidate]:
        """검색 쿼리로 장소 후보를 검색합니다.

        Args:
            query: `"{지역} {키워드}"` 형태의 검색어
            display: 한 번에 받을 결과 수 (최대 5)
            sort: 제공자 정렬 방식

        Returns:
            원본 장소 후보 목록

        Raises:
            PlacesFetchError: 제공자 호출이 실패한 경우
        """
        raise NotImplementedError
