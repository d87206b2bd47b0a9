"""애플리케이션 진입점과 추천 API 테스트."""

from __future__ import annotations

import importlib

from fastapi.testclient import TestClient

from app.api.dependencies import get_congestion_service, get_places_service, get_weather_service
from app.core.config import get_settings
from app.services.naver_places_service import MISSING_CREDENTIALS_MESSAGE, get_naver_places_service
from tests.mocks.mock_places_service import MockNaverPlacesService
from tests.mocks.mock_signal_services import RAINY_WEATHER, MockCongestionService, MockWeatherService


def _set_required_env(monkeypatch, **overrides: str) -> None:
    monkeypatch.setenv("NAVER_SEARCH_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("NAVER_SEARCH_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setenv("DOCS_MODE", "disabled")
    monkeypatch.delenv("DATA_GO_KR_WEATHER_KEY", raising=False)
    monkeypatch.delenv("SEOUL_DATA_KEY", raising=False)
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    get_naver_places_service.cache_clear()


def _load_main_module():
    import app.main as main_module

    return importlib.reload(main_module)


def _override_signals(main_module, weather: MockWeatherService | None = None) -> None:
    main_module.app.dependency_overrides[get_weather_service] = lambda: weather or MockWeatherService()
    main_module.app.dependency_overrides[get_congestion_service] = lambda: MockCongestionService(level="보통")


def test_health_check_endpoint(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    client = TestClient(main_module.app)
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "Chaero Reco Server is running"}


def test_reco_success_response_shape(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()
    places = MockNaverPlacesService()
    main_module.app.dependency_overrides[get_places_service] = lambda: places
    _override_signals(main_module)

    client = TestClient(main_module.app)
    response = client.get("/api/reco", params={"radiusM": "1500", "courseSize": "3", "area": "판교"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert set(body) == {"success", "context", "recommendations", "course", "warnings", "debug"}
    assert body["context"]["policy"] == {
        "keywords": ["맛집", "카페", "전시", "산책"],
        "radiusM": 1500,
        "effectiveRadiusM": 1264,
        "courseSize": 3,
    }
    assert body["context"]["congestion"] == "보통"
    assert body["context"]["weather"]["isRainy"] is False
    assert body["context"]["weather"]["source"] == "open-meteo"
    assert set(body["debug"]) == {"candidateCount", "rankedCount", "pickedCount"}
    first = body["recommendations"][0]
    assert {"name", "roadAddress", "distanceM", "score", "why", "lat", "lng"} <= set(first)
    stops = body["course"]["stops"]
    assert [stop["visitSequence"] for stop in stops] == list(range(1, len(stops) + 1))
    assert body["course"]["note"]
    assert len(places.queries) == 4


def test_reco_keyword_override_and_rain(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()
    places = MockNaverPlacesService()
    main_module.app.dependency_overrides[get_places_service] = lambda: places
    _override_signals(main_module, weather=MockWeatherService(RAINY_WEATHER))

    client = TestClient(main_module.app)
    response = client.get("/api/reco", params={"keywords": "카페,전시", "courseSize": "99"})

    body = response.json()
    assert response.status_code == 200
    assert body["context"]["policy"]["keywords"] == ["카페", "전시"]
    assert body["context"]["policy"]["courseSize"] == 5
    assert body["context"]["area"] == "판교"
    assert body["context"]["weather"]["isRainy"] is True
    assert sorted(places.queries) == ["판교 전시", "판교 카페"]


def test_reco_missing_credentials_returns_config_error(monkeypatch) -> None:
    _set_required_env(monkeypatch, NAVER_SEARCH_CLIENT_ID="", NAVER_SEARCH_CLIENT_SECRET="")
    main_module = _load_main_module()
    weather = MockWeatherService()
    main_module.app.dependency_overrides[get_weather_service] = lambda: weather
    main_module.app.dependency_overrides[get_congestion_service] = lambda: MockCongestionService()

    client = TestClient(main_module.app)
    response = client.get("/api/reco")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": MISSING_CREDENTIALS_MESSAGE}
    assert weather.calls == 0


def test_reco_places_failure_returns_structured_error(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()
    main_module.app.dependency_overrides[get_places_service] = lambda: MockNaverPlacesService(fail_with_status=401)
    _override_signals(main_module)

    client = TestClient(main_module.app)
    response = client.get("/api/reco")

    assert response.status_code == 502
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("Naver local search failed (401)")


def test_unexpected_error_is_hidden_by_default(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    class _BrokenPlaces(MockNaverPlacesService):
        async def search(self, query, display=None, sort=None):
            raise RuntimeError("secret internals")

    main_module.app.dependency_overrides[get_places_service] = lambda: _BrokenPlaces()
    _override_signals(main_module)

    client = TestClient(main_module.app, raise_server_exceptions=False)
    response = client.get("/api/reco")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "내부 서버 오류가 발생했습니다."}


def test_docs_disabled_by_default(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    client = TestClient(main_module.app)

    assert client.get("/docs").status_code == 404
    assert client.get("/redoc").status_code == 404
    assert client.get("/openapi.json").status_code == 404


def test_docs_public_mode_exposes_reco_schema(monkeypatch) -> None:
    _set_required_env(monkeypatch, DOCS_MODE="public")
    main_module = _load_main_module()

    client = TestClient(main_module.app)
    response = client.get("/openapi.json")

    assert response.status_code == 200
    parameters = {param["name"] for param in response.json()["paths"]["/api/reco"]["get"]["parameters"]}
    assert {"lat", "lng", "area", "radiusM", "courseSize", "keywords"} <= parameters


def test_invalid_docs_mode_falls_back_to_disabled(monkeypatch) -> None:
    _set_required_env(monkeypatch, DOCS_MODE="secret")
    main_module = _load_main_module()

    client = TestClient(main_module.app)

    assert client.get("/docs").status_code == 404


def test_security_headers_are_attached(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    client = TestClient(main_module.app)
    response = client.get("/")

    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
    assert response.headers["referrer-policy"] == "no-referrer"
    assert response.headers["cache-control"] == "no-store"
    assert "strict-transport-security" not in response.headers


def test_hsts_only_on_https(monkeypatch) -> None:
    _set_required_env(monkeypatch, ENABLE_HSTS="true", HSTS_MAX_AGE_SECONDS="600")
    main_module = _load_main_module()

    secure = TestClient(main_module.app, base_url="https://testserver").get("/")
    plain = TestClient(main_module.app).get("/")

    assert secure.headers["strict-transport-security"] == "max-age=600"
    assert "strict-transport-security" not in plain.headers


def test_cors_allowlist_from_env(monkeypatch) -> None:
    _set_required_env(monkeypatch, CORS_ALLOW_ORIGINS="https://example.com")
    main_module = _load_main_module()

    client = TestClient(main_module.app)
    response = client.get("/", headers={"Origin": "https://example.com"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://example.com"


def test_readiness_endpoint_reports_not_ready_without_credentials(monkeypatch) -> None:
    _set_required_env(monkeypatch, NAVER_SEARCH_CLIENT_ID="", NAVER_SEARCH_CLIENT_SECRET="")
    main_module = _load_main_module()

    async def _fake_tcp(*args, **kwargs):
        return {"status": "ok", "ok": True, "required": kwargs.get("required", True), "detail": "mock-ok"}

    monkeypatch.setattr("app.core.readiness._check_tcp_connectivity", _fake_tcp)

    client = TestClient(main_module.app)
    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"
    assert response.json()["checks"]["naver_search"]["status"] == "fail"
