"""애플리케이션 전역 설정을 관리하는 모듈."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수 기반 설정 모델."""

    NAVER_SEARCH_CLIENT_ID: str | None = None
    NAVER_SEARCH_CLIENT_SECRET: str | None = None
    NAVER_SEARCH_DISPLAY: int = 5
    NAVER_SEARCH_SORT: str = "comment"
    DATA_GO_KR_WEATHER_KEY: str | None = None
    SEOUL_DATA_KEY: str | None = None
    RECO_DEFAULT_LAT: float = 37.4003183
    RECO_DEFAULT_LNG: float = 127.1066904
    RECO_DEFAULT_AREA: str = "판교"
    RECO_DEFAULT_RADIUS_M: int = 1500
    RECO_DEFAULT_COURSE_SIZE: int = 3
    REQUEST_TIMEOUT_SECONDS: int = 60
    EXTERNAL_API_TIMEOUT_SECONDS: int = 15
    NAVER_SEARCH_TIMEOUT_SECONDS: int = 10
    WEATHER_TIMEOUT_SECONDS: int = 10
    CONGESTION_TIMEOUT_SECONDS: int = 10
    DOCS_MODE: str = "disabled"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = ""
    CORS_ALLOW_METHODS: str = "GET,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Content-Type"
    CORS_ALLOW_CREDENTIALS: bool = False
    SECURITY_HEADERS_ENABLED: bool = True
    ENABLE_HSTS: bool = False
    HSTS_MAX_AGE_SECONDS: int = 31536000
    PROXY_HEADERS_ENABLED: bool = True
    PROXY_TRUSTED_HOSTS: str = "127.0.0.1"
    TRUSTED_HOSTS: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("NAVER_SEARCH_DISPLAY", mode="before")
    @classmethod
    def _clamp_naver_search_display(cls, value: object) -> int:
        # 네이버 지역검색은 display 최대 5
        try:
            numeric = int(value) if value is not None else 5
        except (TypeError, ValueError):
            numeric = 5
        return min(5, max(1, numeric))

    @field_validator("NAVER_SEARCH_SORT", mode="before")
    @classmethod
    def _normalize_naver_search_sort(cls, value: object) -> str:
        normalized = str(value or "").strip().lower()
        return normalized if normalized in {"comment", "random"} else "comment"

    @property
    def naver_search_configured(self) -> bool:
        """네이버 검색 자격 증명이 모두 설정되었는지 반환합니다."""
        return bool(self.NAVER_SEARCH_CLIENT_ID and self.NAVER_SEARCH_CLIENT_SECRET)


@lru_cache
def get_settings() -> Settings:
    """Settings 인스턴스를 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return Settings()
