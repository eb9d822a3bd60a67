"""
Shared test fixtures for the Est launcher test suite.

Provides temporary settings files on disk and httpx clients backed by
MockTransport, so no test touches the real network.
"""

import json

import httpx
import pytest
import toml

ENDPOINT = "https://est.example/"


@pytest.fixture
def endpoint():
    return ENDPOINT


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "est": {"endpoint": ENDPOINT},
        "suggestions": {"enabled": True, "timeout": 2.0, "max_workers": 1},
        "engines": {"max_completions": 5, "fuzzy_threshold": 70},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


@pytest.fixture
def mock_client():
    """Factory for an httpx.Client whose requests go to handler(request)."""
    clients = []

    def _make(handler):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def catalog_handler():
    """MockTransport handler serving a small Est engine catalog."""
    engines = ["wikipedia", "gh", "internal_", "", "wiki", "google", "github"]
    descriptions = {"wiki": "Search Wikipedia", "gh": "Search GitHub"}
    seen = []

    def handler(request):
        seen.append(request.url.path)
        if request.url.path == "/api/experimental/engines":
            return httpx.Response(200, text=json.dumps({"engines": engines}))
        if request.url.path.startswith("/api/experimental/description/"):
            engine_id = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={
                "id": engine_id,
                "description": descriptions.get(engine_id),
            })
        return httpx.Response(404)

    handler.seen = seen
    return handler
