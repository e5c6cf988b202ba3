"""
Page pool for concurrent crawling.

Design:
- Each concurrent unit borrows a page, uses it exclusively, then returns it
- At most max_pages pages exist; extra acquirers wait for a release
- Pages are created on demand through an async factory
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from serpharvest.crawler.page import PageCapability
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)

PageFactory = Callable[[], Awaitable[PageCapability]]


class PagePool:
    """Bounded pool of exclusively-borrowed pages.

    Example:
        pool = PagePool(manager.new_page, max_pages=2)
        async with pool.page() as page:
            await page.navigate(url)

    Args:
        factory: Coroutine function creating a new page.
        max_pages: Maximum number of pages alive at once.
        acquire_timeout: Timeout in seconds for acquiring a page.
    """

    def __init__(
        self,
        factory: PageFactory,
        max_pages: int = 1,
        acquire_timeout: float = 60.0,
    ) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")

        self._factory = factory
        self._max_pages = max_pages
        self._acquire_timeout = acquire_timeout

        self._semaphore = asyncio.Semaphore(max_pages)
        self._pages: list[PageCapability] = []
        self._available: asyncio.Queue[PageCapability] = asyncio.Queue()
        self._in_use: set[int] = set()
        self._lock = asyncio.Lock()
        self._closed = False

        logger.debug("PagePool initialized", max_pages=max_pages)

    async def acquire(self) -> PageCapability:
        """
        Acquire a page for exclusive use.

        Raises:
            RuntimeError: If the pool is closed.
            TimeoutError: If acquire_timeout is exceeded.
        """
        if self._closed:
            raise RuntimeError("PagePool is closed")

        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self._acquire_timeout)
        except TimeoutError as e:
            raise TimeoutError(
                f"Failed to acquire page within {self._acquire_timeout}s"
            ) from e

        try:
            page = self._available.get_nowait()
            logger.debug("Reusing existing page", pages_count=len(self._pages))
        except asyncio.QueueEmpty:
            try:
                async with self._lock:
                    page = await self._factory()
                    self._pages.append(page)
            except Exception:
                self._semaphore.release()
                raise
            logger.debug("Created new page", pages_count=len(self._pages))

        self._in_use.add(id(page))
        return page

    def release(self, page: PageCapability) -> None:
        """
        Return a page to the pool.

        Must be called after acquire(), typically in a finally block.
        """
        if id(page) not in self._in_use:
            logger.warning("Released page not acquired from this pool")
            return

        self._in_use.discard(id(page))
        if not self._closed:
            self._available.put_nowait(page)
        self._semaphore.release()

    @asynccontextmanager
    async def page(self) -> AsyncIterator[PageCapability]:
        """Borrow a page for the duration of the block."""
        page = await self.acquire()
        try:
            yield page
        finally:
            self.release(page)

    async def close(self) -> None:
        """Close all pages created by the pool."""
        self._closed = True
        for page in self._pages:
            try:
                await page.close()
            except Exception as e:
                logger.warning("Error closing page", error=str(e))
        self._pages = []
        logger.debug("PagePool closed")

    def get_stats(self) -> dict[str, Any]:
        return {
            "max_pages": self._max_pages,
            "total_pages": len(self._pages),
            "available_pages": self._available.qsize(),
            "active_pages": len(self._in_use),
        }
