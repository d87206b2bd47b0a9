"""날씨·혼잡도 반영 장소 추천과 코스 구성 파이프라인."""

from __future__ import annotations

import asyncio

from app.core.logger import get_logger
from app.schemas.place import PlaceCandidate
from app.schemas.reco import (
    RecoContext,
    RecoCourse,
    RecoDebug,
    RecoParams,
    RecoPolicy,
    RecoResponse,
    UserLocation,
    default_keywords,
)
from app.services.candidate_normalizer import build_candidate_pool
from app.services.congestion_service import CongestionService
from app.services.course_service import build_course
from app.services.places_service import PlacesServiceProtocol
from app.services.route_sequencer import nearest_neighbor_order
from app.services.scoring import ScoringContext, congestion_index, effective_radius, round_half_up
from app.services.weather_service import WeatherFetchResult, WeatherService

logger = get_logger(__name__)

RECOMMENDATION_LIMIT = 10
COURSE_NOTE = "직선거리 기준 최근접 이웃 순서로 정렬한 방문 코스입니다. 실제 도로 경로는 아닙니다."


async def _search_all(
    places_service: PlacesServiceProtocol,
    area: str,
    keywords: list[str],
) -> list[list[PlaceCandidate]]:
    """키워드마다 `"{area} {keyword}"`로 동시에 검색합니다. 결과는 키워드 순서를 따른다."""
    return list(await asyncio.gather(*[places_service.search(f"{area} {keyword}") for keyword in keywords]))


async def _search_after_weather(
    places_service: PlacesServiceProtocol,
    area: str,
    weather_task: asyncio.Task[WeatherFetchResult],
) -> tuple[list[str], list[list[PlaceCandidate]]]:
    weather_result = await weather_task
    keywords = default_keywords(weather_result.weather.is_rainy)
    return keywords, await _search_all(places_service, area, keywords)


async def run_reco_pipeline(
    params: RecoParams,
    *,
    places_service: PlacesServiceProtocol,
    weather_service: WeatherService,
    congestion_service: CongestionService,
) -> RecoResponse:
    """외부 신호를 모아 후보를 채점하고 코스를 구성합니다.

    날씨와 혼잡도는 실패해도 중립값으로 대체되고, 장소 검색 실패만 요청 전체를 중단한다.
    """
    weather_task = asyncio.create_task(weather_service.fetch(params.lat, params.lng))
    congestion_task = asyncio.create_task(congestion_service.fetch(params.area))

    if params.has_keyword_override:
        keywords = list(params.keywords)
        places_job = _search_all(places_service, params.area, keywords)
    else:
        places_job = _search_after_weather(places_service, params.area, weather_task)

    # 장소 검색이 실패하면 gather가 예외를 전파하고, 진행 중인 신호 조회 결과는 버려진다.
    weather_result, congestion_result, places_outcome = await asyncio.gather(
        weather_task,
        congestion_task,
        places_job,
    )

    if params.has_keyword_override:
        raw_lists = places_outcome
    else:
        keywords, raw_lists = places_outcome

    weather = weather_result.weather
    congestion_level = congestion_result.level
    warnings = [*weather_result.warnings, *congestion_result.warnings]

    congestion_idx = congestion_index(congestion_level)
    eff_radius = effective_radius(params.radius_m, congestion_idx)
    ctx = ScoringContext(
        effective_radius_m=eff_radius,
        is_rainy=weather.is_rainy,
        congestion_level=congestion_level,
        congestion_idx=congestion_idx,
    )

    pool = build_candidate_pool(raw_lists, user_lat=params.lat, user_lng=params.lng, ctx=ctx)
    ranked = pool.ranked()
    picked = build_course(ranked, params.course_size, weather.is_rainy)
    stops = nearest_neighbor_order(params.lat, params.lng, picked)

    logger.info(
        (
            "Reco pipeline completed: area=%s keywords=%s rainy=%s congestion=%s "
            "effective_radius=%.1f candidates=%d ranked=%d picked=%d warnings=%d"
        ),
        params.area,
        keywords,
        weather.is_rainy,
        congestion_level,
        eff_radius,
        len(pool),
        len(ranked),
        len(picked),
        len(warnings),
    )

    return RecoResponse(
        context=RecoContext(
            user=UserLocation(lat=params.lat, lng=params.lng),
            area=params.area,
            weather=weather,
            congestion=congestion_level,
            policy=RecoPolicy(
                keywords=keywords,
                radius_m=params.radius_m,
                effective_radius_m=round_half_up(eff_radius),
                course_size=params.course_size,
            ),
        ),
        recommendations=ranked[:RECOMMENDATION_LIMIT],
        course=RecoCourse(stops=stops, note=COURSE_NOTE),
        warnings=warnings,
        debug=RecoDebug(candidate_count=len(pool), ranked_count=len(ranked), picked_count=len(picked)),
    )
