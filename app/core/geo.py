"""대원거리 계산과 기상청 격자 변환을 위한 지리 유틸리티."""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_M = 6_371_000.0

# 기상청 동네예보 격자(DFS) 파라미터
_GRID_EARTH_RADIUS_KM = 6371.00877
_GRID_SPACING_KM = 5.0
_GRID_STANDARD_LAT1 = 30.0
_GRID_STANDARD_LAT2 = 60.0
_GRID_ORIGIN_LNG = 126.0
_GRID_ORIGIN_LAT = 38.0
_GRID_ORIGIN_X = 43
_GRID_ORIGIN_Y = 136


@dataclass(frozen=True, slots=True)
class GridCell:
    """기상청 격자 좌표."""

    nx: int
    ny: int


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """두 위경도 사이의 대원거리를 미터 단위로 반환합니다."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # 부동소수 오차로 1을 살짝 넘는 경우 asin 도메인 에러 방지
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, a)))


def lat_lng_to_grid(lat: float, lng: float) -> GridCell:
    """위경도를 Lambert 정각원추도법으로 기상청 격자(nx, ny)로 변환합니다."""
    re = _GRID_EARTH_RADIUS_KM / _GRID_SPACING_KM
    slat1 = math.radians(_GRID_STANDARD_LAT1)
    slat2 = math.radians(_GRID_STANDARD_LAT2)
    olon = math.radians(_GRID_ORIGIN_LNG)
    olat = math.radians(_GRID_ORIGIN_LAT)

    sn = math.tan(math.pi * 0.25 + slat2 * 0.5) / math.tan(math.pi * 0.25 + slat1 * 0.5)
    sn = math.log(math.cos(slat1) / math.cos(slat2)) / math.log(sn)
    sf = math.tan(math.pi * 0.25 + slat1 * 0.5)
    sf = math.pow(sf, sn) * math.cos(slat1) / sn
    ro = re * sf / math.pow(math.tan(math.pi * 0.25 + olat * 0.5), sn)
    ra = re * sf / math.pow(math.tan(math.pi * 0.25 + math.radians(lat) * 0.5), sn)

    theta = math.radians(lng) - olon
    if theta > math.pi:
        theta -= 2.0 * math.pi
    if theta < -math.pi:
        theta += 2.0 * math.pi
    theta *= sn

    nx = math.floor(ra * math.sin(theta) + _GRID_ORIGIN_X + 0.5)
    ny = math.floor(ro - ra * math.cos(theta) + _GRID_ORIGIN_Y + 0.5)
    return GridCell(nx=int(nx), ny=int(ny))
