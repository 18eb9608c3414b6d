"""Tests for the FastAPI application"""

import logging
import pytest
import pytest_asyncio
import httpx
from unittest.mock import AsyncMock, Mock

from moodtunes.api.main import app, get_discovery_service
from moodtunes.core.exceptions import AuthenticationError
from moodtunes.core.logging import RequestContextFilter
from moodtunes.core.settings import reload_settings
from moodtunes.services.discovery_service import DiscoveryService


@pytest_asyncio.fixture
async def api_client(discovery_service):
    """HTTP client bound to the app with the discovery service overridden"""
    app.dependency_overrides[get_discovery_service] = lambda: discovery_service
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


class TestMusicEndpoint:
    """Test POST /api/music"""

    @pytest.mark.asyncio
    async def test_successful_discovery(self, api_client, mock_youtube_client):
        response = await api_client.post(
            "/api/music", json={"mood": "Aku sangat senang dan bahagia hari ini", "language": "id"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 2
        assert body["data"][0] == {
            "id": "abc123",
            "title": "Happy Upbeat Song",
            "channelTitle": "Mood Channel",
            "thumbnail": "https://i.ytimg.com/vi/abc123/hqdefault.jpg",
            "publishedAt": "2024-01-15T10:00:00Z",
            "viewCount": "1500000",
            "likeCount": "42000",
        }
        assert body["mood_analysis"] == {
            "sentiment": "positive",
            "score": 0.4,
            "keywords": "upbeat viral song happy energetic",
        }
        assert "X-Process-Time" in response.headers
        mock_youtube_client.fetch_music.assert_awaited_once_with("upbeat viral song happy energetic", "ID")

    @pytest.mark.asyncio
    async def test_language_defaults_to_english(self, api_client, mock_youtube_client):
        response = await api_client.post("/api/music", json={"mood": "feeling great today"})

        assert response.status_code == 200
        assert mock_youtube_client.fetch_music.await_args.args[1] == "US"

    @pytest.mark.asyncio
    async def test_language_default_from_settings(self, api_client, mock_youtube_client, monkeypatch):
        monkeypatch.setenv("DEFAULT_LANGUAGE", "id")
        reload_settings()

        response = await api_client.post("/api/music", json={"mood": "feeling great today"})

        assert response.status_code == 200
        assert mock_youtube_client.fetch_music.await_args.args[1] == "ID"

    @pytest.mark.asyncio
    async def test_short_mood(self, api_client, mock_youtube_client):
        response = await api_client.post("/api/music", json={"mood": "ok"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION"
        assert "at least 3 characters" in body["error"]
        mock_youtube_client.fetch_music.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {},
        {"mood": 123},
        {"mood": "feeling great", "language": "fr"},
    ])
    async def test_malformed_body(self, api_client, payload):
        response = await api_client.post("/api/music", json=payload)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION"

    @pytest.mark.asyncio
    async def test_invalid_json(self, api_client):
        response = await api_client.post(
            "/api/music", content="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "OPTIONS"])
    async def test_unsupported_methods(self, api_client, method):
        response = await api_client.request(method, "/api/music")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": f"Method {method} not allowed. Use POST to submit mood data.",
            "code": "VALIDATION",
        }

    @pytest.mark.asyncio
    async def test_head_is_unsupported(self, api_client):
        response = await api_client.head("/api/music")

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_cors_preflight_still_answered(self, api_client):
        response = await api_client.options(
            "/api/music",
            headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"}
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers

    @pytest.mark.asyncio
    async def test_empty_result_is_api_error(self, api_client, mock_youtube_client):
        mock_youtube_client.fetch_music.return_value = {"items": []}

        response = await api_client.post("/api/music", json={"mood": "just a regular day"})

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "API"
        assert body["details"]["reasons"] == ["No videos found in API response"]

    @pytest.mark.asyncio
    async def test_gateway_auth_error(self, api_client, mock_youtube_client):
        mock_youtube_client.fetch_music.side_effect = AuthenticationError(
            "YouTube API access denied. Please check API configuration."
        )

        response = await api_client.post("/api/music", json={"mood": "feeling great today"})

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH"

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_server_error(self):
        broken = Mock(spec=DiscoveryService)
        broken.discover = AsyncMock(side_effect=RuntimeError("boom"))
        app.dependency_overrides[get_discovery_service] = lambda: broken

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.post("/api/music", json={"mood": "feeling great today"})
        app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["code"] == "SERVER"
        assert response.json()["error"] == "An unexpected error occurred."


class TestMoodEndpoint:
    """Test POST /api/mood"""

    @pytest.mark.asyncio
    async def test_mood_analysis(self, api_client, mock_youtube_client):
        response = await api_client.post("/api/mood", json={"mood": "so sad and lonely tonight"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["mood_analysis"]["sentiment"] == "negative"
        assert body["insights"]["confidence_level"] == "medium"
        mock_youtube_client.fetch_music.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mood_analysis_validation(self, api_client):
        response = await api_client.post("/api/mood", json={"mood": "  "})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION"


class TestServiceEndpoints:
    """Test informational endpoints"""

    @pytest.mark.asyncio
    async def test_root(self, api_client):
        response = await api_client.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["discover"] == "POST /api/music"

    @pytest.mark.asyncio
    async def test_stats(self, api_client):
        await api_client.post("/api/music", json={"mood": "ok"})
        await api_client.post("/api/music", json={"mood": "feeling great today"})

        response = await api_client.get("/api/stats")

        body = response.json()
        assert body["errors"] == {"VALIDATION": 1}
        assert body["operations"]["youtube_fetch"]["total_calls"] == 1


class RecordCollector(logging.Handler):
    """Keeps emitted records in memory"""

    def __init__(self):
        super().__init__()
        self.records = []
        self.addFilter(RequestContextFilter())

    def emit(self, record):
        self.records.append(record)


class TestRequestCorrelation:
    """Test per-request correlation ids"""

    @pytest.mark.asyncio
    async def test_request_id_header_is_unique(self, api_client):
        first = await api_client.get("/")
        second = await api_client.get("/")

        assert first.headers["X-Request-ID"]
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_pipeline_logs_carry_request_id(self, api_client):
        collector = RecordCollector()
        telemetry_logger = logging.getLogger("moodtunes.core.logging")
        previous_level = telemetry_logger.level
        telemetry_logger.addHandler(collector)
        telemetry_logger.setLevel(logging.INFO)
        try:
            response = await api_client.post("/api/music", json={"mood": "feeling great today"})
        finally:
            telemetry_logger.removeHandler(collector)
            telemetry_logger.setLevel(previous_level)

        request_id = response.headers["X-Request-ID"]
        operations = {r.operation: r.request_id for r in collector.records if hasattr(r, "operation")}
        assert set(operations) >= {"mood_validation", "sentiment_analysis", "youtube_fetch"}
        assert set(operations.values()) == {request_id}
