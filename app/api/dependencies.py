"""API 의존성 모음."""

from app.core.config import Settings, get_settings
from app.core.exceptions import RecoConfigError
from app.services.congestion_service import CongestionService
from app.services.naver_places_service import MISSING_CREDENTIALS_MESSAGE, get_naver_places_service
from app.services.places_service import PlacesServiceProtocol
from app.services.weather_service import WeatherService


def get_app_settings() -> Settings:
    """현재 설정을 제공합니다."""
    return get_settings()


def get_places_service() -> PlacesServiceProtocol:
    """장소 검색 서비스를 제공합니다.

    네이버 자격 증명이 없으면 외부 호출 전에 `RecoConfigError`로 요청을 중단한다.
    """
    if not get_settings().naver_search_configured:
        raise RecoConfigError(MISSING_CREDENTIALS_MESSAGE)
    return get_naver_places_service()


def get_weather_service() -> WeatherService:
    """날씨 서비스를 제공합니다."""
    return WeatherService.from_settings()


def get_congestion_service() -> CongestionService:
    """혼잡도 서비스를 제공합니다."""
    return CongestionService.from_settings()
