"""최근접 이웃 방문 순서 계산."""

from __future__ import annotations

from app.core.geo import haversine_m
from app.schemas.place import CourseStop, Place


def nearest_neighbor_order(start_lat: float, start_lng: float, stops: list[Place]) -> list[CourseStop]:
    """출발점에서 가장 가까운 미방문 장소를 차례로 이어 방문 순서를 만듭니다.

    직선거리 기준 탐욕 휴리스틱이며 최단 경로를 보장하지 않는다. 좌표가 없는 장소는 제외된다.
    """
    remaining = [place for place in stops if place.has_coordinates]
    ordered: list[CourseStop] = []
    cur_lat, cur_lng = start_lat, start_lng

    while remaining:
        best_index = min(
            range(len(remaining)),
            key=lambda i: haversine_m(cur_lat, cur_lng, remaining[i].lat, remaining[i].lng),
        )
        chosen = remaining.pop(best_index)
        ordered.append(CourseStop(**chosen.model_dump(), visit_sequence=len(ordered) + 1))
        cur_lat, cur_lng = chosen.lat, chosen.lng

    return ordered
