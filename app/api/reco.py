"""장소 추천·코스 구성 API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    get_app_settings,
    get_congestion_service,
    get_places_service,
    get_weather_service,
)
from app.core.config import Settings
from app.core.logger import get_logger
from app.schemas.reco import RecoErrorResponse, RecoParams, RecoResponse
from app.services.congestion_service import CongestionService
from app.services.places_service import PlacesServiceProtocol
from app.services.reco_service import run_reco_pipeline
from app.services.weather_service import WeatherService

router = APIRouter(prefix="/api", tags=["reco"])
logger = get_logger(__name__)


@router.get(
    "/reco",
    response_model=RecoResponse,
    responses={
        500: {"model": RecoErrorResponse, "description": "필수 설정 누락"},
        502: {"model": RecoErrorResponse, "description": "장소 검색 제공자 실패"},
    },
)
async def recommend(
    lat: str | None = Query(default=None, description="사용자 위도"),
    lng: str | None = Query(default=None, description="사용자 경도"),
    area: str | None = Query(default=None, description="대상 지역명"),
    radius_m: str | None = Query(default=None, alias="radiusM", description="검색 반경(m), 300~8000"),
    course_size: str | None = Query(default=None, alias="courseSize", description="코스 장소 수, 1~5"),
    keywords: str | None = Query(default=None, description="쉼표로 구분한 검색 키워드 (최대 6개)"),
    settings: Settings = Depends(get_app_settings),  # noqa: B008
    places_service: PlacesServiceProtocol = Depends(get_places_service),  # noqa: B008
    weather_service: WeatherService = Depends(get_weather_service),  # noqa: B008
    congestion_service: CongestionService = Depends(get_congestion_service),  # noqa: B008
) -> JSONResponse:
    """현재 날씨와 혼잡도를 반영해 주변 장소를 추천하고 방문 코스를 구성한다."""
    params = RecoParams.from_query(
        settings,
        lat=lat,
        lng=lng,
        area=area,
        radius_m=radius_m,
        course_size=course_size,
        keywords=keywords,
    )
    logger.info("Reco request received: %s", params.model_dump())

    result = await run_reco_pipeline(
        params,
        places_service=places_service,
        weather_service=weather_service,
        congestion_service=congestion_service,
    )
    return JSONResponse(content=result.model_dump(mode="json", by_alias=True))
