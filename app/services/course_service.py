"""점수 순 후보에서 다양성과 간격 조건을 만족하는 코스를 고릅니다."""

from __future__ import annotations

from app.core.geo import haversine_m
from app.schemas.enums import Bucket
from app.schemas.place import Place
from app.services.candidate_normalizer import bucket_of

MIN_SEPARATION_M = 180.0

RAINY_BUCKET_SEQUENCE: tuple[Bucket, ...] = (
    Bucket.FOOD,
    Bucket.CAFE,
    Bucket.CULTURE,
    Bucket.FOOD,
    Bucket.CAFE,
)
CLEAR_BUCKET_SEQUENCE: tuple[Bucket, ...] = (
    Bucket.OUTDOOR,
    Bucket.CAFE,
    Bucket.FOOD,
    Bucket.CULTURE,
    Bucket.CAFE,
)


def preferred_buckets(is_rainy: bool) -> tuple[Bucket, ...]:
    return RAINY_BUCKET_SEQUENCE if is_rainy else CLEAR_BUCKET_SEQUENCE


class CourseBuilder:
    """요청 단위 코스 선택 상태."""

    def __init__(self, ranked: list[Place], min_separation_m: float = MIN_SEPARATION_M) -> None:
        self._ranked = ranked
        self._buckets = [bucket_of(place) for place in ranked]
        self._min_separation_m = min_separation_m
        self._picked: list[Place] = []
        self._picked_keys: set[str] = set()

    @property
    def picked(self) -> list[Place]:
        return list(self._picked)

    def _is_far_enough(self, place: Place) -> bool:
        for other in self._picked:
            distance = haversine_m(place.lat, place.lng, other.lat, other.lng)
            if distance < self._min_separation_m:
                return False
        return True

    def pick_next(self, bucket: Bucket | None = None) -> bool:
        """조건을 통과한 첫 후보를 고릅니다. `bucket`이 None이면 모든 버킷이 대상."""
        for place, place_bucket in zip(self._ranked, self._buckets):
            if bucket is not None and place_bucket != bucket:
                continue
            if place.identity_key in self._picked_keys:
                continue
            if not place.has_coordinates:
                continue
            if not self._is_far_enough(place):
                continue

            self._picked.append(place)
            self._picked_keys.add(place.identity_key)
            return True
        return False


def build_course(ranked: list[Place], course_size: int, is_rainy: bool) -> list[Place]:
    """날씨별 버킷 선호 순서를 따라 최대 `course_size`개의 장소를 고릅니다.

    후보가 부족하거나 한곳에 몰려 있으면 요청보다 짧은 코스가 나올 수 있다.
    """
    builder = CourseBuilder(ranked)
    sequence = preferred_buckets(is_rainy)

    for index in range(course_size):
        target = sequence[index] if index < len(sequence) else None
        if not builder.pick_next(target) and not builder.pick_next():
            break

    while len(builder.picked) < course_size:
        if not builder.pick_next():
            break

    return builder.picked
