"""기상청 초단기실황 + Open-Meteo 폴백 날씨 서비스."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import quote

import requests

from app.core.config import get_settings
from app.core.geo import lat_lng_to_grid
from app.core.logger import get_logger
from app.core.payload import resolve_path
from app.core.timeout_policy import get_timeout_policy
from app.schemas.enums import WeatherSource
from app.schemas.weather import Weather
from app.services.http_client import http_get

logger = get_logger(__name__)

KST = timezone(timedelta(hours=9), name="KST")
# 실황 자료는 매시 40분 무렵 생성되므로 45분 이전에는 직전 시각 자료를 요청한다.
_PUBLICATION_LAG_MINUTE = 45

_KMA_RESULT_CODE_PATH = ("response", "header", "resultCode")
_KMA_RESULT_MSG_PATH = ("response", "header", "resultMsg")
_KMA_ITEMS_PATH = ("response", "body", "items", "item")
_KMA_OK_CODE = "00"

_OPEN_METEO_CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,precipitation,weather_code,wind_speed_10m"


class WeatherProviderError(RuntimeError):
    """날씨 제공자 한 곳의 조회 실패. 서비스 밖으로는 전파되지 않는다."""


@dataclass(frozen=True, slots=True)
class ObservationSlot:
    """기상청 실황 조회 기준 일시."""

    base_date: str
    base_time: str


@dataclass(slots=True)
class WeatherFetchResult:
    weather: Weather
    warnings: list[str] = field(default_factory=list)


def resolve_observation_slot(now: datetime | None = None) -> ObservationSlot:
    """KST 기준 조회 일시(YYYYMMDD, HH00)를 계산합니다."""
    current = (now or datetime.now(timezone.utc)).astimezone(KST)
    hour = current.hour
    if current.minute < _PUBLICATION_LAG_MINUTE:
        hour -= 1

    day = current.date()
    if hour < 0:
        day -= timedelta(days=1)
        hour = 23

    return ObservationSlot(base_date=day.strftime("%Y%m%d"), base_time=f"{hour:02d}00")


def build_service_key_query(service_key: str) -> str:
    """data.go.kr 서비스키 쿼리를 만듭니다. 이미 인코딩된 키는 다시 인코딩하지 않는다."""
    if "%" in service_key:
        return f"serviceKey={service_key}"
    return f"serviceKey={quote(service_key, safe='')}"


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return None


def parse_kma_items(items: list[Any]) -> Weather:
    """초단기실황 항목 목록을 Weather로 변환합니다. 모르는 카테고리와 비수치 값은 무시한다."""
    observed: dict[str, float] = {}
    for item in items:
        if not isinstance(item, dict):
            continue
        category = str(item.get("category") or "")
        raw_value = item.get("obsrValue")
        if raw_value is None:
            raw_value = item.get("fcstValue")
        value = _to_number(raw_value)
        if value is None:
            continue
        if category in {"T1H", "REH", "RN1", "WSD", "PTY", "SKY"}:
            observed[category] = value

    precipitation = observed.get("RN1")
    precipitation_type = observed.get("PTY")
    sky = observed.get("SKY")
    code = sky if sky is not None else precipitation_type

    return Weather(
        temperature=observed.get("T1H"),
        humidity=observed.get("REH"),
        precipitation=precipitation,
        weather_code=int(code) if code is not None else None,
        wind_speed=observed.get("WSD"),
        is_rainy=(precipitation or 0) > 0 or (precipitation_type or 0) > 0,
        source=WeatherSource.KMA,
    )


def parse_open_meteo_current(payload: Any) -> Weather:
    """Open-Meteo `current` 객체를 Weather로 변환합니다."""
    current = payload.get("current") if isinstance(payload, dict) else None
    if not isinstance(current, dict):
        current = {}

    def numeric(key: str) -> float | None:
        value = current.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value) if math.isfinite(value) else None

    precipitation = numeric("precipitation")
    weather_code = numeric("weather_code")
    return Weather(
        temperature=numeric("temperature_2m"),
        humidity=numeric("relative_humidity_2m"),
        precipitation=precipitation,
        weather_code=int(weather_code) if weather_code is not None else None,
        wind_speed=numeric("wind_speed_10m"),
        is_rainy=(precipitation or 0) > 0,
        source=WeatherSource.OPEN_METEO,
    )


class WeatherService:
    """현재 날씨 조회 서비스.

    기상청 키가 있으면 초단기실황을 먼저 조회하고, 실패하면 Open-Meteo로,
    그것도 실패하면 중립 날씨로 내려간다. 어떤 경우에도 예외를 던지지 않는다.
    """

    KMA_URL = "http://apis.data.go.kr/1360000/VilageFcstInfoService_2.0/getUltraSrtNcst"
    OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"

    def __init__(self, kma_service_key: str | None = None, timeout_seconds: int = 10) -> None:
        self._kma_service_key = (kma_service_key or "").strip()
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls) -> WeatherService:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다."""
        settings = get_settings()
        return cls(
            kma_service_key=settings.DATA_GO_KR_WEATHER_KEY,
            timeout_seconds=get_timeout_policy(settings).weather_timeout_seconds,
        )

    async def fetch(self, lat: float, lng: float, now: datetime | None = None) -> WeatherFetchResult:
        warnings: list[str] = []

        if self._kma_service_key:
            try:
                return WeatherFetchResult(weather=await self._fetch_kma(lat, lng, now), warnings=warnings)
            except WeatherProviderError as exc:
                logger.warning("KMA weather fetch failed, falling back to Open-Meteo: %s", exc)
                warnings.append(f"기상청 실황 조회 실패로 Open-Meteo 날씨를 사용합니다: {exc}")

        try:
            return WeatherFetchResult(weather=await self._fetch_open_meteo(lat, lng), warnings=warnings)
        except WeatherProviderError as exc:
            logger.warning("Open-Meteo weather fetch failed, using neutral weather: %s", exc)
            warnings.append(f"날씨 정보를 가져오지 못해 중립값으로 추천합니다: {exc}")

        return WeatherFetchResult(weather=Weather.unknown(), warnings=warnings)

    async def _fetch_kma(self, lat: float, lng: float, now: datetime | None) -> Weather:
        try:
            cell = lat_lng_to_grid(lat, lng)
        except (ArithmeticError, ValueError) as exc:
            # 극점이나 범위 밖 위도는 투영할 수 없다.
            raise WeatherProviderError(f"KMA grid conversion failed for ({lat}, {lng}): {exc}") from exc
        slot = resolve_observation_slot(now)
        url = f"{self.KMA_URL}?{build_service_key_query(self._kma_service_key)}"
        params = {
            "pageNo": 1,
            "numOfRows": 1000,
            "dataType": "JSON",
            "base_date": slot.base_date,
            "base_time": slot.base_time,
            "nx": cell.nx,
            "ny": cell.ny,
        }

        payload = await self._get_json(url, params, provider="KMA")

        result_code = resolve_path(payload, _KMA_RESULT_CODE_PATH)
        if result_code is not None and str(result_code) != _KMA_OK_CODE:
            message = resolve_path(payload, _KMA_RESULT_MSG_PATH) or "unknown"
            raise WeatherProviderError(f"KMA resultCode={result_code} ({message})")

        items = resolve_path(payload, _KMA_ITEMS_PATH)
        if not isinstance(items, list) or not items:
            raise WeatherProviderError("KMA response has no observation items")

        weather = parse_kma_items(items)
        logger.info(
            "KMA weather fetched: nx=%d ny=%d base=%s %s rainy=%s",
            cell.nx,
            cell.ny,
            slot.base_date,
            slot.base_time,
            weather.is_rainy,
        )
        return weather

    async def _fetch_open_meteo(self, lat: float, lng: float) -> Weather:
        params = {"latitude": lat, "longitude": lng, "current": _OPEN_METEO_CURRENT_FIELDS}
        payload = await self._get_json(self.OPEN_METEO_URL, params, provider="Open-Meteo")
        weather = parse_open_meteo_current(payload)
        logger.info("Open-Meteo weather fetched: rainy=%s", weather.is_rainy)
        return weather

    async def _get_json(self, url: str, params: dict[str, Any], *, provider: str) -> Any:
        try:
            response = await http_get(url, params=params, timeout_seconds=self._timeout_seconds)
        except requests.RequestException as exc:
            raise WeatherProviderError(f"{provider} request failed: {exc}") from exc

        if not response.ok:
            raise WeatherProviderError(f"{provider} HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise WeatherProviderError(f"{provider} response parse failed: {exc}") from exc
