"""추천 파이프라인에서 공유하는 열거형."""

from enum import StrEnum


class WeatherSource(StrEnum):
    """날씨 데이터 출처."""

    KMA = "data.go.kr"
    OPEN_METEO = "open-meteo"
    NONE = "none"


class Bucket(StrEnum):
    """날씨 가중치와 코스 다양성에 쓰는 장소 대분류."""

    CAFE = "cafe"
    FOOD = "food"
    CULTURE = "culture"
    OUTDOOR = "outdoor"
    OTHER = "other"


class SearchSort(StrEnum):
    """네이버 지역검색 정렬 방식."""

    COMMENT = "comment"
    RANDOM = "random"
