"""네이버 지역검색 원본 항목과 표준화된 Place 모델."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class PlaceCandidate(BaseModel):
    """네이버 지역검색이 반환하는 원본 항목.

    모든 필드는 제공자가 보낸 문자열 그대로 보관한다. `mapx`는 경도,
    `mapy`는 위도에 1e7을 곱한 정수 문자열이다.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = ""
    link: str = ""
    category: str = ""
    description: str = ""
    telephone: str = ""
    address: str = ""
    road_address: str = Field(default="", alias="roadAddress")
    mapx: str = ""
    mapy: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_to_str(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value)


class Place(BaseModel):
    """점수와 추천 근거를 포함한 표준 장소."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., description="장소 이름")
    category: str = Field(default="", description="제공자 카테고리 문자열")
    description: str = Field(default="", description="장소 설명")
    address: str = Field(default="", description="지번 주소")
    road_address: str = Field(default="", description="도로명 주소")
    link: str = Field(default="", description="외부 링크")
    lat: float | None = Field(default=None, description="위도")
    lng: float | None = Field(default=None, description="경도")
    distance_m: int | None = Field(default=None, description="사용자 위치로부터의 거리(m, 반올림)")
    score: int = Field(default=0, description="추천 점수")
    why: list[str] = Field(default_factory=list, description="점수 산정 근거")

    @property
    def identity_key(self) -> str:
        """중복 판정 키 `이름|도로명주소(없으면 지번주소)`."""
        return f"{self.name}|{self.road_address or self.address}"

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


class CourseStop(Place):
    """코스 방문 순서가 매겨진 장소."""

    visit_sequence: int = Field(..., ge=1, description="코스 내 방문 순서 (1부터 시작)")
