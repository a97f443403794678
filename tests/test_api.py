"""
Tests for the FastAPI sync service against the fake Freshdesk API.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from services.sync import main as sync_main
from services.sync.orchestrator import SyncService

from conftest import raw_ticket


@pytest.fixture()
def service(client, contacts, agents) -> SyncService:
    return SyncService(client, contacts, agents, updated_since="2025-01-01T00:00:00Z")


@pytest.fixture()
def api(fake, service):
    fake.pages["/api/v2/contacts"] = [[{"id": 42, "email": "sam@example.com"}]]
    fake.pages["/api/v2/agents"] = [[{"id": 7, "contact": {"full_name": "Dana Whitfield"}}]]
    fake.bodies["/api/v2/sla_policies"] = [{"sla_target": {"priority_1": {"resolve_within": 28800}}}]
    fake.bodies["/api/v2/agents/me"] = {"id": 7}
    fake.pages["/api/v2/tickets"] = [[
        raw_ticket(ticket_id=1, responder_id=7, requester_id=42, status=4,
                   updated_at="2025-01-01T02:00:00Z"),
        raw_ticket(ticket_id=2, requester_id=42, created_at="2025-01-08T00:00:00Z",
                   updated_at="2025-01-08T00:00:00Z", status=4,
                   custom_fields={"closed_at": "2025-01-09T00:00:00Z"}),
    ]]

    sync_main.app.state.sync_service = service
    sync_main.app.state.sync_on_startup = False
    with TestClient(sync_main.app) as test_client:
        yield test_client
    sync_main.app.state.sync_service = None


class TestHealth:
    def test_reports_caches_and_thresholds(self, api) -> None:
        response = api.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["freshdesk_reachable"] is True
        assert body["sla_thresholds"] == {"Low": 28800}


class TestSync:
    def test_status_before_first_sync(self, api) -> None:
        assert api.get("/sync/status").json() == {
            "busy": False,
            "started_at": None,
            "tickets": 0,
            "dropped": 0,
            "partial": False,
            "errors": [],
        }

    def test_sync_then_list(self, api) -> None:
        response = api.post("/sync")
        assert response.status_code == 202
        assert response.json()["status"] == "started"

        status = api.get("/sync/status").json()
        assert status["tickets"] == 2
        assert status["partial"] is False

        listing = api.get("/tickets").json()
        assert listing["count"] == 2
        first = listing["tickets"][0]
        assert first["agent"] == "Dana Whitfield"
        assert first["requester"] == "sam@example.com"
        assert first["status_text"] == "Closed"
        assert first["url"] == "https://acme.freshdesk.com/a/tickets/1"
        assert listing["agents"] == ["All Agents", "-", "Dana Whitfield"]

    def test_week_and_agent_filters(self, api) -> None:
        api.post("/sync")
        in_week = api.get("/tickets", params={"week": "2025-01-09"}).json()
        assert [t["id"] for t in in_week["tickets"]] == [2]

        by_agent = api.get("/tickets", params={"agent": "Dana Whitfield"}).json()
        assert [t["id"] for t in by_agent["tickets"]] == [1]

    def test_summary(self, api) -> None:
        api.post("/sync")
        summary = api.get("/summary", params={"week": "2025-01-07"}).json()
        assert summary["tickets_created"] == 1
        assert summary["tickets_closed"] == 1
        assert summary["closed_in_week"] == 1

    def test_busy_returns_conflict(self, api, monkeypatch) -> None:
        monkeypatch.setattr(SyncService, "busy", property(lambda self: True))
        assert api.post("/sync").status_code == 409
        assert api.post("/caches/agents/rebuild").status_code == 409


class TestCaches:
    def test_rebuild(self, api) -> None:
        response = api.post("/caches/agents/rebuild")
        assert response.status_code == 200
        assert response.json() == {"cache": "agents", "merged": 1, "entries": 1, "error": None}

    def test_unknown_cache(self, api) -> None:
        assert api.post("/caches/groups/rebuild").status_code == 404


class TestConversations:
    def test_proxies_thread(self, api, fake) -> None:
        fake.bodies["/api/v2/tickets/1/conversations"] = [{"id": 5, "body_text": "Fixed", "user_id": 7}]
        response = api.get("/tickets/1/conversations")
        assert response.status_code == 200
        assert response.json()[0]["body_text"] == "Fixed"


class TestLifespan:
    def test_startup_sync_settled_before_close(self, fake, service) -> None:
        fake.pages["/api/v2/tickets"] = [[raw_ticket(ticket_id=1)]]
        sync_main.app.state.sync_service = service
        sync_main.app.state.sync_on_startup = True
        try:
            with TestClient(sync_main.app) as test_client:
                assert test_client.get("/sync/status").status_code == 200
        finally:
            sync_main.app.state.sync_service = None
            sync_main.app.state.sync_on_startup = False

        assert not service.busy
        assert service.client._client is None
