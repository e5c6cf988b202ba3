"""
Search driver.

Submits a query on the search engine's home page:
navigate -> settle -> locate input (ordered fallbacks) -> type -> Enter ->
wait for results -> stabilize.

Only a missing search input is fatal. A results region that does not show
up in time is logged and the run continues, since every extractor checks
for its own region anyway.
"""

from __future__ import annotations

import asyncio
from typing import Any

from serpharvest.crawler.page import PageCapability
from serpharvest.errors import SearchInputNotFoundError
from serpharvest.search.selectors import SelectorRegistry, get_selector_registry
from serpharvest.utils.config import TimeoutsConfig, get_settings
from serpharvest.utils.logging import get_logger
from serpharvest.utils.timing import TimingCollector, timed

logger = get_logger(__name__)


class SearchDriver:
    """
    Drives query submission on one page.

    Args:
        page: Page capability.
        selectors: Selector registry. Uses the process-wide one if None.
        timeouts: Timeouts and settle delays. Uses settings if None.
        timing: Optional timing observer.
    """

    def __init__(
        self,
        page: PageCapability,
        selectors: SelectorRegistry | None = None,
        timeouts: TimeoutsConfig | None = None,
        timing: TimingCollector | None = None,
    ) -> None:
        self.page = page
        self.selectors = selectors or get_selector_registry()
        self.timeouts = timeouts or get_settings().timeouts
        self.timing = timing
        self.matched_selector: str | None = None

    async def find_search_input(self) -> Any:
        """
        Try each input selector in order; the first control found wins.

        A selector whose lookup raises counts as not found.

        Raises:
            SearchInputNotFoundError: If no selector yields a control.
        """
        for selector in self.selectors.input_selectors:
            try:
                handle = await self.page.find_control(selector)
            except Exception as e:
                logger.debug("Search input lookup failed", selector=selector, error=str(e))
                continue

            if handle is not None:
                self.matched_selector = selector
                logger.info("Found search input", selector=selector)
                return handle

        logger.error(
            "Could not find search input",
            tried=len(self.selectors.input_selectors),
        )
        raise SearchInputNotFoundError(self.selectors.input_selectors)

    async def perform_search(self, query: str) -> None:
        """
        Navigate to the engine and submit query.

        Args:
            query: Search query, submitted verbatim.

        Raises:
            SearchInputNotFoundError: If no search input is found.
        """
        async with timed(self.timing, "navigation"):
            logger.info("Navigating to search engine", url=self.selectors.engine_url)
            await self.page.navigate(
                self.selectors.engine_url,
                wait_until="networkidle",
                timeout=self.timeouts.navigation,
            )
            await asyncio.sleep(self.timeouts.settle_after_navigation)

        async with timed(self.timing, "search_submission"):
            handle = await self.find_search_input()
            await self.page.type_text(handle, query)
            await self.page.press_key("Enter")

        async with timed(self.timing, "results_wait"):
            found = await self.page.wait_for_region(
                self.selectors.region("search_results"),
                self.timeouts.search_results,
            )
            if found:
                logger.info("Search results loaded", query=query)
            else:
                logger.warning(
                    "Timeout waiting for search results, continuing",
                    timeout=self.timeouts.search_results,
                )
            await asyncio.sleep(self.timeouts.stabilization)
