"""응답 형태가 제각각인 외부 JSON 페이로드 접근 유틸."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

PayloadPath = Sequence[str | int]


def resolve_path(payload: Any, path: PayloadPath) -> Any:
    """키/인덱스 경로를 따라 값을 꺼냅니다. 중간에 끊기면 None을 반환합니다."""
    current = payload
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


def first_resolved(
    payload: Any,
    paths: Iterable[PayloadPath],
    accept: Callable[[Any], bool] = lambda value: value is not None,
) -> Any:
    """알려진 경로를 순서대로 시도해 `accept`를 통과한 첫 값을 반환합니다."""
    for path in paths:
        value = resolve_path(payload, path)
        if accept(value):
            return value
    return None
