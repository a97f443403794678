"""
Freshdesk API Client
Read-only access to the Freshdesk v2 REST API over httpx
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

import httpx
import structlog
from pydantic import ValidationError

from shared.config import HTTP_TIMEOUT, Credentials
from shared.errors import DecodeError, FreshdeskError, TransportError
from shared.schemas import Conversation, RawTicket, SLAPolicy

from .pagination import PageIterator

logger = structlog.get_logger()


@dataclass
class TicketFetchResult:
    """Raw ticket records plus the partial-result signal"""
    records: list[RawTicket] = field(default_factory=list)
    pages: int = 0
    error: Optional[str] = None

    @property
    def partial(self) -> bool:
        return self.error is not None


def decode_ticket_page(items: list[Any]) -> list[RawTicket]:
    """
    Validate a whole ticket page

    Raises:
        DecodeError: if any record on the page does not decode
    """
    try:
        return [RawTicket.model_validate(item) for item in items]
    except ValidationError as e:
        raise DecodeError(f"Unexpected ticket record: {e}") from e


def format_updated_since(value: Union[str, datetime]) -> str:
    """Render the cutoff as ISO-8601 in UTC with a Z suffix"""
    if isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class FreshdeskClient:
    """
    Client for the Freshdesk v2 API

    Authentication is HTTP Basic with the API key as user name and "X" as
    password. All requests are sequential; callers await each call.
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.base_url = credentials.domain.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=httpx.BasicAuth(self.credentials.api_key, "X"),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def __aenter__(self) -> "FreshdeskClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        """
        GET a path and decode the JSON body

        Raises:
            TransportError: network failure or status other than 200
            DecodeError: body is not valid JSON
        """
        try:
            response = await self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"GET {path} failed: {e}") from e

        if response.status_code != 200:
            raise TransportError(
                f"GET {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"GET {path} returned invalid JSON: {e}") from e

    async def get_list(self, path: str, params: Optional[dict] = None) -> list[Any]:
        """GET a path whose body must be a JSON array"""
        data = await self.get_json(path, params=params)
        if not isinstance(data, list):
            raise DecodeError(f"GET {path} expected a list, got {type(data).__name__}")
        return data

    def pages(
        self,
        path: str,
        params: Optional[dict] = None,
        decode: Optional[Callable[[list[Any]], list[Any]]] = None,
    ) -> PageIterator:
        """
        Page through a list endpoint until it returns an empty page

        ``decode`` is applied to each page and may raise DecodeError, which
        ends the iteration like any other failed page.
        """
        base_params = dict(params or {})

        async def fetch_page(page: int) -> list[Any]:
            items = await self.get_list(path, params={**base_params, "page": page})
            return decode(items) if decode else items

        return PageIterator(fetch_page, name=path)

    async def check_health(self) -> bool:
        """Check that the account is reachable with these credentials"""
        try:
            await self.get_json("/api/v2/agents/me")
            return True
        except FreshdeskError as e:
            logger.warning("Freshdesk health check failed", error=str(e))
            return False

    async def fetch_sla_policies(self) -> list[SLAPolicy]:
        """Fetch every SLA policy on the account"""
        data = await self.get_list("/api/v2/sla_policies")
        try:
            return [SLAPolicy.model_validate(item) for item in data]
        except ValidationError as e:
            raise DecodeError(f"Unexpected SLA policy shape: {e}") from e

    async def fetch_tickets(self, updated_since: Union[str, datetime]) -> TicketFetchResult:
        """
        Fetch every ticket updated at or after the cutoff

        Pages are requested until an empty one comes back. A failed page, or
        one holding a record that does not decode, ends the fetch; tickets
        from earlier pages are still returned.

        Args:
            updated_since: Lower bound on updated_at

        Returns:
            TicketFetchResult with decoded tickets in arrival order
        """
        since = format_updated_since(updated_since)
        logger.info("Fetching tickets", updated_since=since)

        pages = self.pages(
            "/api/v2/tickets",
            params={"updated_since": since, "include": "stats"},
            decode=decode_ticket_page,
        )
        result = TicketFetchResult()
        async for items in pages:
            result.records.extend(items)
            logger.debug("Fetched ticket page", page=pages.pages_fetched, count=len(items))

        result.pages = pages.pages_fetched
        if pages.error:
            result.error = str(pages.error)
            logger.warning("Ticket fetch incomplete", fetched=len(result.records), error=result.error)
        else:
            logger.info("Fetched tickets", count=len(result.records), pages=result.pages)
        return result

    async def fetch_conversations(self, ticket_id: int) -> list[Conversation]:
        """Fetch the conversation thread of a ticket, or [] on failure"""
        try:
            data = await self.get_list(f"/api/v2/tickets/{ticket_id}/conversations")
            return [Conversation.model_validate(item) for item in data]
        except FreshdeskError as e:
            logger.warning("Failed to fetch conversations", ticket_id=ticket_id, error=str(e))
        except ValidationError as e:
            logger.warning("Unexpected conversation shape", ticket_id=ticket_id, error=str(e))
        return []

    async def close(self):
        """Close the underlying HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None
