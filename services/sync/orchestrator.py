"""
Sync Orchestrator
Bootstraps the lookup caches, fetches tickets and enriches them in one pass.
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import structlog

from services.enrich.enricher import TicketEnricher
from services.ingest.cache import CacheState, LookupCache, agent_cache, contact_cache
from services.ingest.client import FreshdeskClient
from services.ingest.sla import SLAThresholdTable
from services.ingest.storage import JsonCacheStorage
from shared.config import HTTP_TIMEOUT, UPDATED_SINCE, Credentials
from shared.schemas import Ticket

logger = structlog.get_logger()


@dataclass
class SyncResult:
    """Outcome of one sync_all run"""
    tickets: list[Ticket] = field(default_factory=list)
    fetched: int = 0
    dropped: int = 0
    errors: list[str] = field(default_factory=list)
    started_at: Optional[datetime] = None
    elapsed_seconds: float = 0.0

    @property
    def partial(self) -> bool:
        """True when some page failed and fewer tickets than expected came back"""
        return bool(self.errors)


class SyncService:
    """
    Owns the contact cache, agent cache and SLA table for the process.

    Construct once and share; ``sync_all`` and cache rebuilds are serialized
    with an asyncio.Lock, so a refresh requested while another is running
    waits for it. Check ``busy`` to refuse instead of waiting.
    """

    def __init__(
        self,
        client: FreshdeskClient,
        contacts: LookupCache,
        agents: LookupCache,
        sla: Optional[SLAThresholdTable] = None,
        updated_since: Union[str, datetime] = UPDATED_SINCE,
    ):
        self.client = client
        self.contacts = contacts
        self.agents = agents
        self.sla = sla or SLAThresholdTable()
        self.updated_since = updated_since
        self.last_result: Optional[SyncResult] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        data_dir: Optional[Path] = None,
        updated_since: Union[str, datetime] = UPDATED_SINCE,
        timeout: float = HTTP_TIMEOUT,
    ) -> "SyncService":
        """Wire up a service with file-backed caches"""
        storage = JsonCacheStorage(data_dir)
        return cls(
            client=FreshdeskClient(credentials, timeout=timeout),
            contacts=contact_cache(storage),
            agents=agent_cache(storage),
            updated_since=updated_since,
        )

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @property
    def caches(self) -> dict[str, LookupCache]:
        return {self.contacts.name: self.contacts, self.agents.name: self.agents}

    async def startup(self):
        """Load both caches from disk and fetch SLA thresholds once"""
        for cache in self.caches.values():
            cache.load()
        if not self.sla.populated:
            await self.sla.populate(self.client)

    async def ensure_cache(self, cache: LookupCache) -> Optional[str]:
        """
        Load the cache if needed, and rebuild it if it is still empty

        Returns the rebuild error, if the rebuild stopped early
        """
        if cache.state is CacheState.UNLOADED:
            cache.load()
        if not cache.needs_rebuild:
            return None
        await cache.rebuild(self.client)
        return cache.last_error

    async def rebuild_cache(self, name: str) -> int:
        """
        Rebuild one cache on request

        Raises:
            KeyError: if name is not "contacts" or "agents"
        """
        cache = self.caches[name]
        async with self._lock:
            return await cache.rebuild(self.client)

    async def sync_all(self, now: Optional[datetime] = None) -> SyncResult:
        """
        Bootstrap caches, fetch all tickets since the cutoff and enrich them

        No step is retried. A failed ticket page still yields the tickets
        fetched before it; the failure is listed in ``errors``.

        Args:
            now: Evaluation time for open tickets (defaults to current UTC time)

        Returns:
            SyncResult with enriched tickets in arrival order
        """
        async with self._lock:
            start = time.time()
            now = now or datetime.now(timezone.utc)
            result = SyncResult(started_at=datetime.now(timezone.utc))

            for cache in (self.contacts, self.agents):
                error = await self.ensure_cache(cache)
                if error:
                    result.errors.append(f"{cache.name}: {error}")

            fetch = await self.client.fetch_tickets(self.updated_since)
            if fetch.error:
                result.errors.append(fetch.error)

            enricher = TicketEnricher(self.contacts.snapshot(), self.agents.snapshot(), self.sla)
            result.tickets = enricher.enrich_records(fetch.records, now)
            result.fetched = len(fetch.records)
            result.dropped = enricher.dropped
            result.elapsed_seconds = time.time() - start

            self.last_result = result
            logger.info(
                "Sync complete",
                tickets=len(result.tickets),
                dropped=result.dropped,
                partial=result.partial,
                elapsed=f"{result.elapsed_seconds:.2f}s",
            )
            return result

    async def close(self):
        await self.client.close()
