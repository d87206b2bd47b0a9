"""요청 단위로 생성되는 현재 날씨 모델."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.enums import WeatherSource


class Weather(BaseModel):
    """표준화된 현재 날씨. 한 번 만들어지면 변경하지 않는다."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    temperature: float | None = Field(default=None, description="기온(℃)")
    humidity: float | None = Field(default=None, description="상대습도(%)")
    precipitation: float | None = Field(default=None, description="1시간 강수량(mm)")
    weather_code: int | None = Field(default=None, description="제공자 날씨 코드")
    wind_speed: float | None = Field(default=None, description="풍속(m/s)")
    is_rainy: bool = Field(default=False, description="비가 오는지 여부")
    source: WeatherSource = Field(default=WeatherSource.NONE, description="데이터 출처")

    @classmethod
    def unknown(cls) -> Weather:
        """모든 값이 비어 있는 중립 날씨를 반환합니다."""
        return cls(source=WeatherSource.NONE, is_rainy=False)
