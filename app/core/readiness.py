"""외부 데이터 제공자 준비성(readiness) 체크 유틸."""

from __future__ import annotations

import asyncio
import socket

from app.core.config import Settings, get_settings
from app.core.timeout_policy import TimeoutPolicy, get_timeout_policy

ReadinessCheck = dict[str, str | bool]


def _ok(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "ok", "ok": True, "required": required, "detail": detail}


def _fail(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "fail", "ok": False, "required": required, "detail": detail}


def _skip(detail: str, *, required: bool = False) -> ReadinessCheck:
    return {"status": "skip", "ok": True, "required": required, "detail": detail}


async def _check_tcp_connectivity(
    host: str,
    port: int,
    timeout_seconds: int,
    label: str,
    *,
    required: bool = True,
) -> ReadinessCheck:
    def _connect() -> None:
        with socket.create_connection((host, port), timeout=timeout_seconds):
            return None

    try:
        await asyncio.to_thread(_connect)
        return _ok(f"{label} 연결 가능 ({host}:{port})", required=required)
    except OSError as exc:
        return _fail(f"{label} 연결 실패 ({host}:{port}): {exc}", required=required)


async def _check_naver_readiness(settings: Settings, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    if not settings.naver_search_configured:
        return _fail("NAVER_SEARCH_CLIENT_ID / NAVER_SEARCH_CLIENT_SECRET이 설정되지 않았습니다.")

    return await _check_tcp_connectivity(
        host="openapi.naver.com",
        port=443,
        timeout_seconds=timeout_policy.naver_search_timeout_seconds,
        label="Naver Search API",
    )


async def _check_kma_readiness(settings: Settings, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    if not settings.DATA_GO_KR_WEATHER_KEY:
        return _skip("DATA_GO_KR_WEATHER_KEY 미설정으로 기상청 체크를 건너뜁니다.")

    return await _check_tcp_connectivity(
        host="apis.data.go.kr",
        port=80,
        timeout_seconds=timeout_policy.weather_timeout_seconds,
        label="KMA API",
        required=False,
    )


async def _check_open_meteo_readiness(settings: Settings, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    return await _check_tcp_connectivity(
        host="api.open-meteo.com",
        port=443,
        timeout_seconds=timeout_policy.weather_timeout_seconds,
        label="Open-Meteo API",
        required=False,
    )


async def _check_seoul_readiness(settings: Settings, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    if not settings.SEOUL_DATA_KEY:
        return _skip("SEOUL_DATA_KEY 미설정으로 서울시 도시데이터 체크를 건너뜁니다.")

    return await _check_tcp_connectivity(
        host="openapi.seoul.go.kr",
        port=8088,
        timeout_seconds=timeout_policy.congestion_timeout_seconds,
        label="Seoul Open API",
        required=False,
    )


async def collect_readiness_status() -> dict[str, object]:
    """외부 데이터 제공자 준비 상태를 점검합니다. 필수 체크만 전체 상태에 반영된다."""
    settings = get_settings()
    timeout_policy = get_timeout_policy(settings)

    naver_check, kma_check, open_meteo_check, seoul_check = await asyncio.gather(
        _check_naver_readiness(settings, timeout_policy),
        _check_kma_readiness(settings, timeout_policy),
        _check_open_meteo_readiness(settings, timeout_policy),
        _check_seoul_readiness(settings, timeout_policy),
    )

    checks: dict[str, ReadinessCheck] = {
        "naver_search": naver_check,
        "kma_weather": kma_check,
        "open_meteo": open_meteo_check,
        "seoul_citydata": seoul_check,
    }
    required_checks_ok = all(bool(check["ok"]) for check in checks.values() if bool(check.get("required", True)))

    return {
        "status": "ready" if required_checks_ok else "not_ready",
        "checks": checks,
    }
