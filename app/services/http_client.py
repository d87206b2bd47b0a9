"""외부 제공자 호출용 공통 HTTP GET 헬퍼."""

from __future__ import annotations

import asyncio
from typing import Any

import requests

from app.core.timeout_policy import to_requests_timeout


async def http_get(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: int,
) -> requests.Response:
    """블로킹 requests 호출을 워커 스레드에서 실행합니다.

    상태 코드 검사는 호출자가 한다. 전송 계층 오류는 `requests.RequestException`으로 전파된다.
    """
    request_timeout = to_requests_timeout(timeout_seconds)

    def _send() -> requests.Response:
        with requests.Session() as session:
            return session.get(url, params=params, headers=headers, timeout=request_timeout)

    return await asyncio.to_thread(_send)
