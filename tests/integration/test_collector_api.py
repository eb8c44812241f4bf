"""
Module: test_collector_api.py
Description: Integration tests for the collector endpoints.

Exercises the FastAPI app end to end with TestClient, with a fresh
in-memory action window per test.
"""

import json

import pytest
from fastapi.testclient import TestClient

from actionlog.handlers.actions import ActionWindow, get_action_window
from actionlog.main import app


@pytest.fixture
def window():
    return ActionWindow(size=3)


@pytest.fixture
def test_client(window):
    """Create FastAPI test client with an isolated action window."""
    app.dependency_overrides[get_action_window] = lambda: window
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestCollectorApi:
    """Integration tests for collector endpoints."""

    def test_health_endpoint(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "healthy" in data["message"]

    def test_log_action(self, test_client, window):
        body = {
            "timestamp": "2024-01-15T10:30:00.000Z",
            "userIdentity": "user@example.com",
            "action": "page_visit",
            "extraInfo": json.dumps({"page": "/learning-guide"}),
        }

        response = test_client.post("/api/log-action", json=body)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert [entry.to_wire() for entry in window.recent()] == [body]

    def test_log_action_defaults(self, test_client, window):
        response = test_client.post("/api/log-action", json={"userEmail": "legacy@example.com"})

        assert response.status_code == 200
        entry = window.recent()[0]
        assert entry.user_identity == "legacy@example.com"
        assert entry.action == "unknown"

    def test_long_action_is_accepted(self, test_client, window):
        action = "a" * 201

        response = test_client.post("/api/log-action", json={"action": action})

        assert response.status_code == 200
        assert window.recent()[0].action == action

    def test_malformed_body_rejected(self, test_client, window):
        response = test_client.post(
            "/api/log-action",
            content="not json",
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422
        assert len(window) == 0

    def test_log_acceptance(self, test_client, window):
        response = test_client.post(
            "/api/log-acceptance",
            json={"userEmail": "user@example.com"},
            headers={"User-Agent": "pytest-agent"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        entry = window.recent()[0]
        assert entry.action == "responsibility_accepted"
        assert entry.timestamp == data["timestamp"]
        assert json.loads(entry.extra_info) == {
            "timestamp": data["timestamp"],
            "userAgent": "pytest-agent",
        }

    def test_logs_most_recent_first_and_bounded(self, test_client):
        for action in ["one", "two", "three", "four"]:
            test_client.post("/api/log-action", json={"action": action})

        response = test_client.get("/api/logs")

        assert response.status_code == 200
        actions = [log["action"] for log in response.json()["logs"]]
        assert actions == ["four", "three", "two"]

        limited = test_client.get("/api/logs", params={"limit": 1}).json()["logs"]
        assert [log["action"] for log in limited] == ["four"]

    def test_logs_limit_validation(self, test_client):
        response = test_client.get("/api/logs", params={"limit": 0})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == 400
