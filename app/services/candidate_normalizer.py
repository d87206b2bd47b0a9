"""원본 검색 결과를 표준 Place로 정규화하고 중복을 제거합니다."""

from __future__ import annotations

import html
import math
import re
from typing import Iterable

from app.core.geo import haversine_m
from app.core.logger import get_logger
from app.schemas.enums import Bucket
from app.schemas.place import Place, PlaceCandidate
from app.services.scoring import ScoringContext, classify_bucket, round_half_up, score_candidate

logger = get_logger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]*>")
_MAP_COORD_SCALE = 1e7
RANKED_LIMIT = 20


def strip_html(text: str | None) -> str:
    """태그를 지우고 HTML 엔티티를 복원합니다."""
    return html.unescape(_TAG_PATTERN.sub("", text or "")).strip()


def convert_map_xy(mapx: str | None, mapy: str | None) -> tuple[float | None, float | None]:
    """네이버 `mapx`(경도), `mapy`(위도) 정수 좌표를 (lat, lng)으로 변환합니다."""
    try:
        x = float((mapx or "").strip())
        y = float((mapy or "").strip())
    except ValueError:
        return None, None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None, None
    return y / _MAP_COORD_SCALE, x / _MAP_COORD_SCALE


def bucket_of(place: Place) -> Bucket:
    return classify_bucket(place.category, place.name, place.road_address or place.address)


class CandidatePool:
    """요청 단위 중복 제거 저장소. 같은 키에서는 점수가 더 높은 후보만 남긴다."""

    def __init__(self) -> None:
        self._by_key: dict[str, Place] = {}

    def __len__(self) -> int:
        return len(self._by_key)

    def offer(self, place: Place) -> bool:
        """후보를 넣습니다. 기존 후보를 대체했거나 새로 들어가면 True."""
        key = place.identity_key
        incumbent = self._by_key.get(key)
        if incumbent is not None and incumbent.score >= place.score:
            return False
        self._by_key[key] = place
        return True

    def ranked(self, limit: int = RANKED_LIMIT) -> list[Place]:
        """점수 내림차순 상위 `limit`개. 동점은 먼저 들어온 순서를 유지한다."""
        return sorted(self._by_key.values(), key=lambda place: place.score, reverse=True)[:limit]


def normalize_candidate(
    raw: PlaceCandidate,
    *,
    user_lat: float,
    user_lng: float,
    ctx: ScoringContext,
) -> Place | None:
    """원본 항목 하나를 점수가 매겨진 Place로 변환합니다. 이름이 없으면 None."""
    name = strip_html(raw.title)
    if not name:
        return None

    lat, lng = convert_map_xy(raw.mapx, raw.mapy)
    distance_m = None
    if lat is not None and lng is not None:
        distance_m = round_half_up(haversine_m(user_lat, user_lng, lat, lng))

    bucket = classify_bucket(raw.category, name, raw.road_address or raw.address)
    result = score_candidate(ctx, distance_m=distance_m, bucket=bucket)

    return Place(
        name=name,
        category=raw.category,
        description=strip_html(raw.description),
        address=raw.address,
        road_address=raw.road_address,
        link=raw.link,
        lat=lat,
        lng=lng,
        distance_m=distance_m,
        score=result.score,
        why=result.why,
    )


def build_candidate_pool(
    raw_lists: Iterable[Iterable[PlaceCandidate]],
    *,
    user_lat: float,
    user_lng: float,
    ctx: ScoringContext,
) -> CandidatePool:
    """키워드별 검색 결과를 순서대로 정규화·채점하며 중복을 제거합니다."""
    pool = CandidatePool()
    skipped = 0
    rejected = 0
    for items in raw_lists:
        for raw in items:
            place = normalize_candidate(raw, user_lat=user_lat, user_lng=user_lng, ctx=ctx)
            if place is None:
                skipped += 1
                continue
            if not pool.offer(place):
                rejected += 1

    if skipped:
        logger.info("Skipped %d candidates without a name", skipped)
    logger.info("Candidate pool built: kept=%d duplicates_rejected=%d", len(pool), rejected)
    return pool
