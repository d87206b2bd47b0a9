"""서울시 실시간 도시데이터 기반 혼잡도 조회 서비스."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import requests

from app.core.config import get_settings
from app.core.logger import get_logger
from app.core.payload import PayloadPath, first_resolved
from app.core.timeout_policy import get_timeout_policy
from app.services.http_client import http_get

logger = get_logger(__name__)

# 응답 버전에 따라 혼잡도 필드 위치가 다르다. 앞에서부터 시도한다.
CONGESTION_LEVEL_PATHS: tuple[PayloadPath, ...] = (
    ("CITYDATA", "AREA_CONGEST_LVL"),
    ("CITYDATA", "LIVE_PPLTN_STTS", 0, "AREA_CONGEST_LVL"),
    ("CityData", "AREA_CONGEST_LVL"),
    ("CityData", "LIVE_PPLTN_STTS", 0, "AREA_CONGEST_LVL"),
    ("SeoulRtd.citydata_ppltn", 0, "AREA_CONGEST_LVL"),
)


def _is_level(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def extract_congestion_level(payload: Any) -> str | None:
    """알려진 응답 형태 목록에서 혼잡도 문자열을 찾습니다."""
    level = first_resolved(payload, CONGESTION_LEVEL_PATHS, accept=_is_level)
    return level.strip() if level is not None else None


@dataclass(slots=True)
class CongestionFetchResult:
    level: str | None = None
    warnings: list[str] = field(default_factory=list)


class CongestionService:
    """지역명으로 실시간 혼잡도 단계를 조회합니다. 실패해도 예외를 던지지 않는다."""

    BASE_URL = "http://openapi.seoul.go.kr:8088"

    def __init__(self, api_key: str | None = None, timeout_seconds: int = 10) -> None:
        self._api_key = (api_key or "").strip()
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls) -> CongestionService:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다."""
        settings = get_settings()
        return cls(
            api_key=settings.SEOUL_DATA_KEY,
            timeout_seconds=get_timeout_policy(settings).congestion_timeout_seconds,
        )

    async def fetch(self, area: str) -> CongestionFetchResult:
        if not self._api_key:
            logger.info("SEOUL_DATA_KEY is not configured; congestion skipped.")
            return CongestionFetchResult()

        url = f"{self.BASE_URL}/{self._api_key}/json/citydata/1/1/{quote(area, safe='')}"
        try:
            response = await http_get(url, timeout_seconds=self._timeout_seconds)
            if not response.ok:
                raise ValueError(f"HTTP {response.status_code}")
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Seoul citydata fetch failed: area=%s error=%s", area, exc)
            return CongestionFetchResult(warnings=[f"혼잡도 정보를 가져오지 못했습니다({area}): {exc}"])

        level = extract_congestion_level(payload)
        logger.info("Seoul citydata fetched: area=%s level=%s", area, level)
        return CongestionFetchResult(level=level)
