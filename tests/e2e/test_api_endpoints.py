"""
TabTagger v1 - API Endpoint E2E Tests

Exercises the FastAPI app in-process with TestClient. Outbound provider calls
go through httpx.MockTransport instead of the network.

Run with:
    pytest tests/e2e/test_api_endpoints.py -m e2e
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import RecordingHandler, json_response, suggestions_body

from tagging_service import __version__
from tagging_service import transport as transport_module
from tagging_service.main import app


def openai_answer(text: str) -> httpx.Response:
    return json_response({"choices": [{"message": {"content": text}}]})


@pytest.fixture
def api_client():
    """TestClient with the app lifespan running."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def provider_handler(monkeypatch):
    """Route every outbound provider request to a RecordingHandler."""
    def install(*responses) -> RecordingHandler:
        handler = RecordingHandler(*responses)
        monkeypatch.setattr(
            transport_module,
            "create_client",
            lambda timeout: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        return handler
    return install


@pytest.mark.e2e
class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_returns_200(self, api_client):
        response = api_client.get("/health")
        assert response.status_code == 200

    def test_health_returns_json(self, api_client):
        data = api_client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert "default_provider" in data


@pytest.mark.e2e
class TestAnalyzeEndpoint:
    """Tests for /analyze."""

    def test_analyze_success(self, api_client, provider_handler):
        handler = provider_handler(openai_answer(suggestions_body((1, ["python"]), (2, ["news"]))))
        response = api_client.post("/analyze", json={
            "tabs": [
                {"id": 11, "title": "Python docs", "url": "https://docs.python.org"},
                {"id": "tab-b", "title": "Hacker News"},
            ],
            "config": {"kind": "openai", "apiKey": "sk-test"},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["suggestions"] == [
            {"tabId": 11, "tags": ["python"]},
            {"tabId": "tab-b", "tags": ["news"]},
        ]
        assert handler.last_request.headers["Authorization"] == "Bearer sk-test"

    def test_provider_failure_is_200_with_error(self, api_client, provider_handler):
        provider_handler(json_response({"error": {"message": "Invalid key"}}, status_code=401))
        response = api_client.post("/analyze", json={
            "tabs": [{"id": 1, "title": "x"}],
            "config": {"kind": "openai", "api_key": "bad"},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is False
        assert data["errorKind"] == "network"
        assert "401" in data["message"]
        assert data["suggestions"] == []

    def test_unknown_provider(self, api_client, provider_handler):
        handler = provider_handler(openai_answer(suggestions_body()))
        response = api_client.post("/analyze", json={
            "tabs": [{"id": 1, "title": "x"}],
            "config": {"kind": "watsonx"},
        })

        data = response.json()
        assert data["ok"] is False
        assert data["errorKind"] == "config"
        assert handler.requests == []

    def test_missing_config_is_422(self, api_client):
        response = api_client.post("/analyze", json={"tabs": []})
        assert response.status_code == 422


@pytest.mark.e2e
class TestAnalyzeTabsEndpoint:
    """Tests for /analyze_tabs."""

    def test_special_pages_use_placeholder_content(self, api_client, provider_handler):
        handler = provider_handler(json_response({"response": suggestions_body((1, ["settings"]))}))
        response = api_client.post("/analyze_tabs", json={
            "tabs": [{"id": 5, "title": "Extensions", "url": "chrome://extensions"}],
            "config": {"kind": "ollama"},
        })

        data = response.json()
        assert data["ok"] is True
        assert data["suggestions"] == [{"tabId": 5, "tags": ["settings"]}]
        assert "Content: Special page: Extensions" in handler.last_json()["prompt"]

    def test_without_fetching(self, api_client, provider_handler):
        handler = provider_handler(json_response({"response": suggestions_body((1, ["blog"]))}))
        response = api_client.post("/analyze_tabs", json={
            "tabs": [{"id": 5, "title": "A blog", "url": "https://blog.example.com"}],
            "config": {"kind": "ollama"},
            "fetch_content": False,
        })

        assert response.json()["ok"] is True
        assert "Content:" not in handler.last_json()["prompt"]


@pytest.mark.e2e
class TestModelsEndpoint:
    """Tests for /models."""

    def test_lists_ollama_models(self, api_client, provider_handler):
        provider_handler(json_response({"models": [{"name": "qwen2.5", "size": 2_000_000_000}]}))
        response = api_client.post("/models", json={"kind": "ollama"})

        assert response.status_code == 200
        assert response.json() == [{"id": "qwen2.5", "name": "qwen2.5 (2.0GB)"}]

    def test_config_error_is_400(self, api_client, provider_handler):
        provider_handler(json_response({}))
        response = api_client.post("/models", json={"kind": "openai"})

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["errorKind"] == "config"
        assert "error_kind" not in detail
        assert "api_key" in detail["detail"]

    def test_upstream_error_is_502(self, api_client, provider_handler):
        provider_handler(httpx.Response(403))
        response = api_client.post("/models", json={"kind": "ollama"})

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["errorKind"] == "network"
        assert detail["status"] == 403
        assert "OLLAMA_ORIGINS" in detail["detail"]


@pytest.mark.e2e
class TestConnectionEndpoint:
    """Tests for /test_connection."""

    def test_connection_ok(self, api_client, provider_handler):
        handler = provider_handler(openai_answer(suggestions_body((1, ["code"]), (2, ["q&a"]))))
        response = api_client.post("/test_connection", json={"kind": "openai", "apiKey": "sk"})

        data = response.json()
        assert data["ok"] is True
        assert [s["tabId"] for s in data["suggestions"]] == [1, 2]
        assert "GitHub - Code Repository" in handler.last_json()["messages"][1]["content"]

    def test_connection_network_failure(self, api_client, provider_handler):
        provider_handler(httpx.ConnectError("connection refused"))
        response = api_client.post("/test_connection", json={"kind": "ollama"})

        data = response.json()
        assert data["ok"] is False
        assert data["errorKind"] == "network"
