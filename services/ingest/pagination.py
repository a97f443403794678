"""
Sentinel-terminated page iteration

Freshdesk list endpoints are paged with ?page=N and signal the end with an
empty page. Whether page N+1 exists depends on page N, so pages are always
requested one at a time.
"""

from typing import Any, AsyncIterator, Awaitable, Callable, Optional

import structlog

from shared.errors import FreshdeskError

logger = structlog.get_logger()

PageFetcher = Callable[[int], Awaitable[list[Any]]]


def empty_page(items: list[Any]) -> bool:
    """Default termination predicate"""
    return not items


class PageIterator:
    """
    Lazy, restartable async iterator over the pages of a list endpoint.

    Each ``async for`` starts again at ``first_page``. Iteration stops on the
    first page for which ``is_last`` holds, or on the first FreshdeskError;
    in the latter case the error is kept on ``self.error`` and the pages
    already yielded stay valid.

    Usage:
        pages = PageIterator(fetch_page, name="tickets")
        async for items in pages:
            ...
        if pages.error:
            ...
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        name: str = "",
        is_last: Callable[[list[Any]], bool] = empty_page,
        first_page: int = 1,
    ):
        self.fetch_page = fetch_page
        self.name = name
        self.is_last = is_last
        self.first_page = first_page
        self.pages_fetched = 0
        self.error: Optional[FreshdeskError] = None
        self.exhausted = False

    @property
    def partial(self) -> bool:
        """True when the last run stopped on an error"""
        return self.error is not None

    def __aiter__(self) -> AsyncIterator[list[Any]]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[list[Any]]:
        self.pages_fetched = 0
        self.error = None
        self.exhausted = False
        page = self.first_page

        while True:
            try:
                items = await self.fetch_page(page)
            except FreshdeskError as e:
                self.error = e
                logger.warning(
                    "Page fetch failed, stopping pagination",
                    collection=self.name,
                    page=page,
                    error=str(e),
                )
                return

            self.pages_fetched += 1
            if self.is_last(items):
                self.exhausted = True
                logger.debug("Pagination complete", collection=self.name, pages=page - self.first_page)
                return

            yield items
            page += 1

    async def collect(self) -> list[Any]:
        """Drain every page into a single list"""
        results: list[Any] = []
        async for items in self:
            results.extend(items)
        return results
