"""API tests for the health endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from memory_server.app import create_app


@pytest.fixture()
def client(memory_backend):
    """Provide a FastAPI test client backed by the in-memory store."""
    app = create_app()
    with TestClient(app) as http_client:
        yield http_client


def test_health_reports_server_and_count(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["server"] == "mcp-memory-server"
    assert body["message_count"] == 0
    assert body["components"] == {"message_store": "healthy"}


def test_health_counts_saved_messages(client: TestClient) -> None:
    store = client.app.state.store
    store.save("remember this")
    store.save("and this")

    assert client.get("/health").json()["message_count"] == 2


def test_health_breaks_down_roles_and_agents(client: TestClient) -> None:
    store = client.app.state.store
    store.save("question", role="user", agent="A")
    store.save("answer", agent="A")
    store.save("note", agent="B")

    body = client.get("/health").json()

    assert body["roles"] == {"user": 1, "assistant": 2}
    assert body["agents"] == {"A": 2, "B": 1}


def test_liveness_and_readiness(client: TestClient) -> None:
    assert client.get("/health/live").json() == {"status": "alive"}

    ready = client.get("/health/ready").json()
    assert ready == {"ready": True, "checks": {"message_store": True}}


def test_root_lists_endpoints(client: TestClient) -> None:
    body = client.get("/").json()

    assert body["mcp"] == "/mcp"
    assert body["health"] == "/health"
    assert "X-Process-Time" in client.get("/").headers


def test_shutdown_closes_the_store(memory_backend) -> None:
    app = create_app()
    with TestClient(app):
        assert app.state.store.initialized

    assert not app.state.store.initialized
