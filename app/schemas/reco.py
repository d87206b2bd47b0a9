"""추천 API 요청 파라미터와 응답 스키마."""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.config import Settings
from app.schemas.place import CourseStop, Place
from app.schemas.weather import Weather

MIN_RADIUS_M = 300
MAX_RADIUS_M = 8000
MIN_COURSE_SIZE = 1
MAX_COURSE_SIZE = 5
MAX_KEYWORDS = 6

RAINY_DEFAULT_KEYWORDS = ("파전", "막걸리", "카페", "전시")
CLEAR_DEFAULT_KEYWORDS = ("맛집", "카페", "전시", "산책")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _clamp_int(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


def _to_float(value: str | None, default: float) -> float:
    try:
        numeric = float((value or "").strip())
    except ValueError:
        return default
    return numeric if math.isfinite(numeric) else default


def _to_int(value: str | None, default: int) -> int:
    numeric = _to_float(value, math.nan)
    return int(numeric) if math.isfinite(numeric) else default


def _to_coordinate(value: str | None, default: float, limit: float) -> float:
    numeric = _to_float(value, default)
    return numeric if -limit <= numeric <= limit else default


def split_keywords(raw: str | None) -> list[str]:
    """쉼표로 구분된 키워드를 정리해 최대 6개까지 반환합니다."""
    if not raw:
        return []
    keywords = [item.strip() for item in raw.split(",") if item.strip()]
    return keywords[:MAX_KEYWORDS]


def default_keywords(is_rainy: bool) -> list[str]:
    """날씨에 따른 기본 검색 키워드를 반환합니다."""
    return list(RAINY_DEFAULT_KEYWORDS if is_rainy else CLEAR_DEFAULT_KEYWORDS)


class RecoParams(BaseModel):
    """정규화된 추천 요청 파라미터."""

    lat: float
    lng: float
    area: str
    radius_m: int = Field(..., ge=MIN_RADIUS_M, le=MAX_RADIUS_M)
    course_size: int = Field(..., ge=MIN_COURSE_SIZE, le=MAX_COURSE_SIZE)
    keywords: list[str] = Field(default_factory=list, max_length=MAX_KEYWORDS)

    @property
    def has_keyword_override(self) -> bool:
        return bool(self.keywords)

    @classmethod
    def from_query(
        cls,
        settings: Settings,
        *,
        lat: str | None = None,
        lng: str | None = None,
        area: str | None = None,
        radius_m: str | None = None,
        course_size: str | None = None,
        keywords: str | None = None,
    ) -> RecoParams:
        """쿼리 문자열을 관대하게 파싱합니다. 해석할 수 없는 값은 기본값을 쓴다."""
        return cls(
            lat=_to_coordinate(lat, settings.RECO_DEFAULT_LAT, 90.0),
            lng=_to_coordinate(lng, settings.RECO_DEFAULT_LNG, 180.0),
            area=(area or "").strip() or settings.RECO_DEFAULT_AREA,
            radius_m=_clamp_int(_to_int(radius_m, settings.RECO_DEFAULT_RADIUS_M), MIN_RADIUS_M, MAX_RADIUS_M),
            course_size=_clamp_int(
                _to_int(course_size, settings.RECO_DEFAULT_COURSE_SIZE),
                MIN_COURSE_SIZE,
                MAX_COURSE_SIZE,
            ),
            keywords=split_keywords(keywords),
        )


class UserLocation(_CamelModel):
    lat: float
    lng: float


class RecoPolicy(_CamelModel):
    """이번 요청에 실제 적용된 검색 정책."""

    keywords: list[str]
    radius_m: int
    effective_radius_m: int
    course_size: int


class RecoContext(_CamelModel):
    user: UserLocation
    area: str
    weather: Weather
    congestion: str | None
    policy: RecoPolicy


class RecoCourse(_CamelModel):
    stops: list[CourseStop] = Field(default_factory=list, description="방문 순서대로 정렬된 코스")
    note: str = Field(..., description="코스 안내 문구")


class RecoDebug(_CamelModel):
    candidate_count: int
    ranked_count: int
    picked_count: int


class RecoResponse(_CamelModel):
    """추천 성공 응답."""

    success: Literal[True] = True
    context: RecoContext
    recommendations: list[Place] = Field(default_factory=list, max_length=10)
    course: RecoCourse
    warnings: list[str] = Field(default_factory=list)
    debug: RecoDebug


class RecoErrorResponse(BaseModel):
    """추천 실패 응답."""

    success: Literal[False] = False
    error: str
