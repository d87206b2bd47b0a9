"""네이버 지역검색 API 서비스 구현."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import requests

from app.core.config import get_settings
from app.core.exceptions import PlacesFetchError, RecoConfigError
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy
from app.schemas.enums import SearchSort
from app.schemas.place import PlaceCandidate
from app.services.http_client import http_get
from app.services.places_service import PlacesServiceProtocol

logger = get_logger(__name__)

MISSING_CREDENTIALS_MESSAGE = "NAVER_SEARCH_CLIENT_ID / NAVER_SEARCH_CLIENT_SECRET 가 필요합니다."
_ERROR_BODY_LIMIT = 400


class NaverLocalSearchService(PlacesServiceProtocol):
    """네이버 지역검색(`local.json`) 기반 Places 서비스."""

    _URL = "https://openapi.naver.com/v1/search/local.json"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        timeout_seconds: int = 10,
        display: int = 5,
        sort: SearchSort | str = SearchSort.COMMENT,
    ) -> None:
        if not client_id or not client_secret:
            raise RecoConfigError(MISSING_CREDENTIALS_MESSAGE)
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout_seconds = timeout_seconds
        self._display = self._clamp_display(display)
        self._sort = SearchSort(sort)

    @classmethod
    def from_settings(cls) -> NaverLocalSearchService:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다."""
        settings = get_settings()
        if not settings.naver_search_configured:
            logger.error("NAVER_SEARCH_CLIENT_ID / NAVER_SEARCH_CLIENT_SECRET is not configured.")
        return cls(
            client_id=settings.NAVER_SEARCH_CLIENT_ID or "",
            client_secret=settings.NAVER_SEARCH_CLIENT_SECRET or "",
            timeout_seconds=get_timeout_policy(settings).naver_search_timeout_seconds,
            display=settings.NAVER_SEARCH_DISPLAY,
            sort=settings.NAVER_SEARCH_SORT,
        )

    @classmethod
    def _clamp_display(cls, display: int | None) -> int:
        return min(cls.MAX_DISPLAY, max(1, int(display or cls.MAX_DISPLAY)))

    async def search(
        self,
        query: str,
        display: int | None = None,
        sort: SearchSort | str | None = None,
    ) -> list[PlaceCandidate]:
        """텍스트 쿼리로 장소를 검색합니다. 실패하면 `PlacesFetchError`를 던진다."""
        if not query.strip():
            return []

        params = {
            "query": query,
            "display": self._clamp_display(display) if display is not None else self._display,
            "start": 1,
            "sort": SearchSort(sort).value if sort else self._sort.value,
        }
        headers = {
            "X-Naver-Client-Id": self._client_id,
            "X-Naver-Client-Secret": self._client_secret,
        }

        try:
            response = await http_get(self._URL, params=params, headers=headers, timeout_seconds=self._timeout_seconds)
        except requests.RequestException as exc:
            logger.error("Naver local search request failed: query=%s error=%s", query, exc)
            raise PlacesFetchError(f"Naver local search failed: {exc}") from exc

        if not response.ok:
            body = (response.text or "")[:_ERROR_BODY_LIMIT]
            logger.error("Naver local search error: status=%s body=%s", response.status_code, body)
            raise PlacesFetchError(
                f"Naver local search failed ({response.status_code}): {body}",
                provider_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Naver local search response parse failed: %s", exc)
            raise PlacesFetchError(f"Naver local search response parse failed: {exc}") from exc

        items = self._map_items(data)
        logger.info("Naver local search completed: query=%s candidate_count=%d", query, len(items))
        return items

    @staticmethod
    def _map_items(data: Any) -> list[PlaceCandidate]:
        raw_items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(raw_items, list):
            return []
        return [PlaceCandidate.model_validate(item) for item in raw_items if isinstance(item, dict)]


@lru_cache(maxsize=1)
def get_naver_places_service() -> NaverLocalSearchService:
    """설정 재사용을 위한 프로세스 단위 싱글톤을 반환합니다.

    자격 증명이 없으면 `RecoConfigError`를 던지며, 이 경우는 캐싱되지 않는다.
    """
    return NaverLocalSearchService.from_settings()
