"""장소 후보 점수 계산 엔진.

거리, 날씨에 따른 실내/야외 성향, 혼잡도를 합산해 점수와 근거 목록을 만든다.
입력이 비어 있어도 실패하지 않고 중립 기여로 처리한다.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from app.schemas.enums import Bucket

NEUTRAL_CONGESTION_INDEX = 0.5
CONGESTION_RADIUS_SHRINK = 0.35
MIN_DISTANCE_SCALE_M = 300

DISTANCE_WEIGHT = 60
RAIN_INDOOR_BONUS = 18
RAIN_OUTDOOR_PENALTY = -12
CLEAR_OUTDOOR_BONUS = 14
CONGESTION_PROXIMITY_WEIGHT = 10
REVIEW_RANK_BONUS = 6

# 앞에서부터 검사해 처음 일치한 버킷을 쓴다.
BUCKET_KEYWORDS: tuple[tuple[Bucket, tuple[str, ...]], ...] = (
    (Bucket.CAFE, ("카페", "디저트", "coffee", "cafe")),
    (
        Bucket.FOOD,
        ("한식", "일식", "중식", "양식", "분식", "치킨", "피자", "고기", "술집", "음식점", "restaurant"),
    ),
    (Bucket.CULTURE, ("전시", "박물관", "미술관", "문화", "공연", "갤러리")),
    (Bucket.OUTDOOR, ("공원", "산책", "서울숲", "한강", "숲", "walk")),
)

_INDOOR_BUCKETS = frozenset({Bucket.CAFE, Bucket.FOOD, Bucket.CULTURE})


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify_bucket(category: str, name: str, address: str) -> Bucket:
    """카테고리, 이름, 주소 텍스트로 버킷을 판정합니다."""
    haystacks = [(text or "").lower() for text in (category, name, address)]
    for bucket, keywords in BUCKET_KEYWORDS:
        if any(keyword in text for keyword in keywords for text in haystacks):
            return bucket
    return Bucket.OTHER


def congestion_index(level: str | None) -> float:
    """혼잡도 문자열을 [0, 1] 지수로 변환합니다."""
    text = (level or "").strip()
    if not text:
        return NEUTRAL_CONGESTION_INDEX
    if "여유" in text:
        return 0.15
    if "보통" in text:
        return 0.45
    if "약간" in text:
        return 0.65
    if "붐빔" in text and "매우" not in text:
        return 0.85
    if "매우" in text:
        return 1.0
    return NEUTRAL_CONGESTION_INDEX


def effective_radius(radius_m: float, congestion_idx: float) -> float:
    """혼잡할수록 줄어드는 실효 검색 반경."""
    return radius_m * (1 - CONGESTION_RADIUS_SHRINK * congestion_idx)


@dataclass(frozen=True, slots=True)
class ScoringContext:
    """한 요청 안에서 모든 후보에 공통으로 적용되는 점수 입력."""

    effective_radius_m: float
    is_rainy: bool
    congestion_level: str | None
    congestion_idx: float


@dataclass(frozen=True, slots=True)
class ScoreResult:
    score: int
    why: list[str]
    bucket: Bucket


def score_candidate(
    ctx: ScoringContext,
    *,
    distance_m: float | None,
    bucket: Bucket,
) -> ScoreResult:
    """후보 하나의 점수와 근거를 계산합니다."""
    why: list[str] = []
    score = 0.0
    eff_radius = ctx.effective_radius_m

    if distance_m is None:
        why.append("거리 계산 불가(좌표 없음)")
    else:
        dist_factor = _clamp(1 - distance_m / max(MIN_DISTANCE_SCALE_M, eff_radius), -1, 1)
        score += dist_factor * DISTANCE_WEIGHT
        if distance_m <= eff_radius:
            why.append(f"반경 적합({distance_m}m)")
        else:
            why.append(f"반경 외(>{round_half_up(eff_radius)}m)")

    if ctx.is_rainy:
        if bucket in _INDOOR_BUCKETS:
            score += RAIN_INDOOR_BONUS
            why.append("우천: 실내 성향 가산")
        if bucket == Bucket.OUTDOOR:
            score += RAIN_OUTDOOR_PENALTY
            why.append("우천: 야외 성향 감점")
    elif bucket == Bucket.OUTDOOR:
        score += CLEAR_OUTDOOR_BONUS
        why.append("맑음: 야외 성향 가산")

    # 붐빌수록 가까운 곳을 더 선호한다.
    if distance_m is not None and eff_radius > 0:
        proximity = _clamp((eff_radius - distance_m) / eff_radius, -1, 1)
        score += proximity * CONGESTION_PROXIMITY_WEIGHT * ctx.congestion_idx
    if ctx.congestion_level:
        why.append(f"혼잡도({ctx.congestion_level}) 반영")

    score += REVIEW_RANK_BONUS
    why.append("리뷰 기반 정렬 후보(sort=comment)")

    return ScoreResult(score=round_half_up(score), why=why, bucket=bucket)
