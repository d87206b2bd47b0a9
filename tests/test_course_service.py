"""코스 구성과 방문 순서 테스트."""

from __future__ import annotations

import itertools

import pytest

from app.core.geo import haversine_m
from app.schemas.place import Place
from app.services.course_service import MIN_SEPARATION_M, CourseBuilder, build_course
from app.services.route_sequencer import nearest_neighbor_order
from tests.mocks.mock_places_service import ORIGIN_LAT, ORIGIN_LNG

METERS_PER_DEGREE_LAT = 111_195


def _place(name: str, category: str, north_m: float | None, east_deg: float = 0.0, score: int = 50) -> Place:
    lat = ORIGIN_LAT + north_m / METERS_PER_DEGREE_LAT if north_m is not None else None
    lng = ORIGIN_LNG + east_deg if north_m is not None else None
    return Place(name=name, category=category, road_address=f"{name} 로", lat=lat, lng=lng, score=score)


def _spread_candidates() -> list[Place]:
    """버킷이 고르게 섞인, 서로 300m 이상 떨어진 후보 목록 (점수 내림차순)."""
    return [
        _place("화랑공원", "여행,명소>공원", 0, score=90),
        _place("한우 한식당", "한식>육류,고기요리", 300, score=80),
        _place("커피랩", "카페,디저트>카페", 600, score=70),
        _place("현대 미술관", "문화,예술>미술관", 900, score=60),
        _place("디저트 하우스", "카페,디저트>디저트카페", 1200, score=50),
        _place("화덕 피자", "양식>피자", 1500, score=40),
    ]


class TestBuildCourse:
    """코스 구성 테스트."""

    @pytest.mark.parametrize("is_rainy", [True, False])
    @pytest.mark.parametrize("course_size", [1, 3, 5])
    def test_picked_stops_are_unique_and_separated(self, course_size: int, is_rainy: bool) -> None:
        candidates = _spread_candidates() + [
            _place("커피랩 2호점", "카페", 650, score=85),
            _place("공원 매점", "여행,명소>공원", 50, score=88),
        ]

        picked = build_course(candidates, course_size, is_rainy)

        assert len(picked) <= course_size
        assert len({place.identity_key for place in picked}) == len(picked)
        for first, second in itertools.combinations(picked, 2):
            assert haversine_m(first.lat, first.lng, second.lat, second.lng) >= MIN_SEPARATION_M

    def test_rainy_course_prefers_indoor_sequence(self) -> None:
        picked = build_course(_spread_candidates(), 3, is_rainy=True)

        assert [place.name for place in picked] == ["한우 한식당", "커피랩", "현대 미술관"]

    def test_clear_course_prefers_outdoor_first(self) -> None:
        picked = build_course(_spread_candidates(), 3, is_rainy=False)

        assert [place.name for place in picked] == ["화랑공원", "커피랩", "한우 한식당"]

    def test_falls_back_to_best_remaining_when_bucket_missing(self) -> None:
        candidates = [
            _place("주차장", "생활,편의>주차장", 0, score=90),
            _place("커피랩", "카페", 500, score=40),
        ]

        picked = build_course(candidates, 2, is_rainy=True)

        assert [place.name for place in picked] == ["주차장", "커피랩"]

    def test_clustered_candidates_produce_short_course(self) -> None:
        candidates = [
            _place("카페 A", "카페", 0, score=90),
            _place("카페 B", "카페", 50, score=80),
            _place("한식 C", "한식", 100, score=70),
        ]

        picked = build_course(candidates, 3, is_rainy=False)

        assert [place.name for place in picked] == ["카페 A"]

    def test_candidates_without_coordinates_are_never_picked(self) -> None:
        candidates = [
            _place("운중천 산책로", "여행,명소>산책로", None, score=99),
            _place("화랑공원", "여행,명소>공원", 0, score=10),
        ]

        picked = build_course(candidates, 2, is_rainy=False)

        assert [place.name for place in picked] == ["화랑공원"]

    def test_empty_ranking_produces_empty_course(self) -> None:
        assert build_course([], 3, is_rainy=False) == []


def test_course_builder_skips_already_picked() -> None:
    builder = CourseBuilder([_place("커피랩", "카페", 0)])

    assert builder.pick_next() is True
    assert builder.pick_next() is False
    assert len(builder.picked) == 1


class TestNearestNeighborOrder:
    """최근접 이웃 방문 순서 테스트."""

    def test_orders_by_distance_along_a_line(self) -> None:
        stops = [
            _place("far", "카페", 1200),
            _place("near", "카페", 500),
            _place("middle", "카페", 800),
        ]

        ordered = nearest_neighbor_order(ORIGIN_LAT, ORIGIN_LNG, stops)

        assert [stop.name for stop in ordered] == ["near", "middle", "far"]
        assert [stop.visit_sequence for stop in ordered] == [1, 2, 3]

    def test_each_step_picks_nearest_from_current_stop(self) -> None:
        stops = [
            _place("east", "카페", 0, east_deg=0.02),
            _place("north", "카페", 1000),
            _place("north-far", "카페", 2000),
        ]

        ordered = nearest_neighbor_order(ORIGIN_LAT, ORIGIN_LNG, stops)

        assert [stop.name for stop in ordered] == ["north", "north-far", "east"]

    def test_keeps_place_fields(self) -> None:
        stop = _place("커피랩", "카페", 300, score=77)

        [ordered] = nearest_neighbor_order(ORIGIN_LAT, ORIGIN_LNG, [stop])

        assert ordered.score == 77
        assert ordered.road_address == "커피랩 로"
        assert ordered.model_dump(by_alias=True)["visitSequence"] == 1

    def test_drops_stops_without_coordinates(self) -> None:
        stops = [_place("unknown", "카페", None), _place("known", "카페", 300)]

        ordered = nearest_neighbor_order(ORIGIN_LAT, ORIGIN_LNG, stops)

        assert [stop.name for stop in ordered] == ["known"]
        assert ordered[0].visit_sequence == 1

    def test_empty_input(self) -> None:
        assert nearest_neighbor_order(ORIGIN_LAT, ORIGIN_LNG, []) == []
