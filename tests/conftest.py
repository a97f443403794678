"""
Shared fixtures: a fake Freshdesk API served through httpx.MockTransport.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import pytest

from services.ingest.cache import agent_cache, contact_cache
from services.ingest.client import FreshdeskClient
from services.ingest.storage import JsonCacheStorage
from shared.config import Credentials

DOMAIN = "https://acme.freshdesk.com"


class FakeFreshdesk:
    """
    In-memory Freshdesk: each path maps to a list of pages.

    Pages beyond the configured ones come back empty. ``failures`` maps
    (path, page) to a status code or to an exception instance to raise.
    """

    def __init__(self):
        self.pages: dict[str, list[Any]] = {}
        self.bodies: dict[str, Any] = {}
        self.failures: dict[tuple[str, int], Any] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        page = int(request.url.params.get("page", "1"))

        failure = self.failures.get((path, page))
        if isinstance(failure, Exception):
            raise failure
        if isinstance(failure, int):
            return httpx.Response(failure, json={"message": "error"})
        if isinstance(failure, str):
            return httpx.Response(200, content=failure.encode())

        if path in self.bodies:
            return httpx.Response(200, json=self.bodies[path])
        if path in self.pages:
            pages = self.pages[path]
            body = pages[page - 1] if page <= len(pages) else []
            return httpx.Response(200, json=body)
        return httpx.Response(404, json={"message": "not found"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requested_pages(self, path: str) -> list[int]:
        return [int(r.url.params["page"]) for r in self.requests if r.url.path == path]


@pytest.fixture()
def fake() -> FakeFreshdesk:
    return FakeFreshdesk()


@pytest.fixture()
def credentials() -> Credentials:
    return Credentials(api_key="secret-key", domain=DOMAIN)


@pytest.fixture()
def client(fake: FakeFreshdesk, credentials: Credentials) -> FreshdeskClient:
    return FreshdeskClient(credentials, transport=fake.transport())


@pytest.fixture()
def storage(tmp_path) -> JsonCacheStorage:
    return JsonCacheStorage(tmp_path)


@pytest.fixture()
def contacts(storage: JsonCacheStorage):
    return contact_cache(storage)


@pytest.fixture()
def agents(storage: JsonCacheStorage):
    return agent_cache(storage)


def raw_ticket(
    ticket_id: int = 1,
    priority: int = 1,
    status: int = 2,
    created_at: str = "2025-01-01T00:00:00Z",
    updated_at: str = "2025-01-01T00:00:00Z",
    custom_fields: Optional[dict] = None,
    **extra: Any,
) -> dict:
    """Wire-format ticket record"""
    record = {
        "id": ticket_id,
        "subject": f"Ticket {ticket_id}",
        "priority": priority,
        "status": status,
        "created_at": created_at,
        "updated_at": updated_at,
        "responder_id": None,
        "requester_id": None,
        "description": None,
        "custom_fields": custom_fields or {},
    }
    record.update(extra)
    return record
