"""
FSS Ingest Service
Pulls tickets, contacts, agents and SLA policies from the Freshdesk API

Components:
- client.py: Freshdesk v2 REST client (httpx)
- pagination.py: PageIterator for empty-page-terminated list endpoints
- cache.py: LookupCache for contact/agent display names
- storage.py: JsonCacheStorage for persisting lookup caches
- sla.py: SLAThresholdTable built from the first SLA policy
"""

from .cache import CacheState, LookupCache, agent_cache, contact_cache
from .client import FreshdeskClient, TicketFetchResult
from .pagination import PageIterator
from .sla import FALLBACK_SECONDS, SLAThresholdTable
from .storage import JsonCacheStorage

__all__ = [
    "CacheState",
    "LookupCache",
    "agent_cache",
    "contact_cache",
    "FreshdeskClient",
    "TicketFetchResult",
    "PageIterator",
    "FALLBACK_SECONDS",
    "SLAThresholdTable",
    "JsonCacheStorage",
]
