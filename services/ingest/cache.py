"""
Lookup caches for contact and agent display names
"""

from enum import Enum
from typing import Callable, Optional

import structlog
from pydantic import BaseModel, ValidationError

from shared.config import AGENT_CACHE_FILE, CONTACT_CACHE_FILE
from shared.errors import DecodeError
from shared.schemas import Agent, Contact

from .client import FreshdeskClient
from .pagination import PageIterator
from .storage import JsonCacheStorage

logger = structlog.get_logger()


class CacheState(str, Enum):
    """Lifecycle of a lookup cache"""
    UNLOADED = "unloaded"
    LOADED_EMPTY = "loaded_empty"
    LOADED_POPULATED = "loaded_populated"


class LookupCache:
    """
    Persisted mapping from a Freshdesk id to a display string.

    The mapping is loaded once, rebuilt in full from the API when found
    empty (or on request), and saved wholesale after every rebuild.
    Rebuilds merge by id and never drop ids missing from the new pull.
    """

    def __init__(
        self,
        name: str,
        collection: str,
        filename: str,
        model: type[BaseModel],
        display: Callable[[BaseModel], str],
        storage: JsonCacheStorage,
    ):
        self.name = name
        self.collection = collection
        self.filename = filename
        self.model = model
        self.display = display
        self.storage = storage
        self.entries: dict[int, str] = {}
        self._loaded = False
        self.last_error: Optional[str] = None

    @property
    def state(self) -> CacheState:
        if not self._loaded:
            return CacheState.UNLOADED
        if self.entries:
            return CacheState.LOADED_POPULATED
        return CacheState.LOADED_EMPTY

    @property
    def needs_rebuild(self) -> bool:
        return self.state is not CacheState.LOADED_POPULATED

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: int) -> bool:
        return key in self.entries

    def get(self, key: Optional[int], default: str = "-") -> str:
        if key is None:
            return default
        return self.entries.get(key, default)

    def snapshot(self) -> dict[int, str]:
        """Copy of the current mapping"""
        return dict(self.entries)

    def load(self) -> dict[int, str]:
        """Restore the mapping from storage; never raises"""
        self.entries = self.storage.read(self.filename)
        self._loaded = True
        logger.info("Loaded lookup cache", cache=self.name, entries=len(self.entries))
        return self.entries

    def save(self) -> bool:
        """
        Persist the whole mapping, overwriting the previous file

        Returns False if the write failed; in-memory entries are kept either way.
        """
        try:
            self.storage.write(self.filename, self.entries)
        except OSError as e:
            logger.error("Failed to save lookup cache", cache=self.name, error=str(e))
            return False
        logger.info("Saved lookup cache", cache=self.name, entries=len(self.entries))
        return True

    def decode_page(self, items: list) -> list[BaseModel]:
        """
        Validate one API page against the record model

        Raises:
            DecodeError: if any item does not match the record model
        """
        try:
            return [self.model.model_validate(item) for item in items]
        except ValidationError as e:
            raise DecodeError(f"Unexpected {self.collection} record: {e}") from e

    def merge(self, records: list[BaseModel]) -> int:
        """Overwrite entries for the given records, keeping all others"""
        for record in records:
            self.entries[record.id] = self.display(record)
        return len(records)

    async def rebuild(self, client: FreshdeskClient) -> int:
        """
        Pull every page of the collection and merge it, then save

        A failed or malformed page ends the pull; pages merged before it stay.

        Returns:
            Number of records merged
        """
        logger.info("Rebuilding lookup cache", cache=self.name)
        if not self._loaded:
            self.load()
        merged = 0
        pages: PageIterator = client.pages(f"/api/v2/{self.collection}", decode=self.decode_page)

        async for records in pages:
            merged += self.merge(records)

        self.last_error = str(pages.error) if pages.partial else None
        if self.last_error:
            logger.warning("Lookup cache rebuild incomplete", cache=self.name, error=self.last_error)
        logger.info("Rebuilt lookup cache", cache=self.name, merged=merged, entries=len(self.entries))
        self.save()
        return merged


def contact_cache(storage: JsonCacheStorage) -> LookupCache:
    """Cache of requester id -> e-mail or name"""
    return LookupCache(
        name="contacts",
        collection="contacts",
        filename=CONTACT_CACHE_FILE,
        model=Contact,
        display=Contact.display_name,
        storage=storage,
    )


def agent_cache(storage: JsonCacheStorage) -> LookupCache:
    """Cache of agent id -> display name"""
    return LookupCache(
        name="agents",
        collection="agents",
        filename=AGENT_CACHE_FILE,
        model=Agent,
        display=Agent.display_name,
        storage=storage,
    )
