"""
Search result scraper.

Orchestrates one run:
initialize browser -> submit query -> aggregate regions -> screenshot ->
optional follow-ups -> save, with the browser released in ``finally``
whatever stage fails.
"""

from __future__ import annotations

from pathlib import Path

from serpharvest.crawler.browser_manager import BrowserManager
from serpharvest.crawler.snapshot_page import SnapshotPage
from serpharvest.output.saver import ResultSaver
from serpharvest.search.aggregator import ResultAggregator
from serpharvest.search.driver import SearchDriver
from serpharvest.search.follow_up import FollowUpResolver
from serpharvest.search.schemas import (
    REGION_KEYS,
    ExtractOptions,
    FollowUpResult,
    ScraperConfig,
    SearchResults,
)
from serpharvest.search.selectors import SelectorRegistry
from serpharvest.utils.logging import LogContext, get_logger
from serpharvest.utils.timing import TimingCollector, timed

logger = get_logger(__name__)


class SearchResultScraper:
    """
    Runs a search and extracts, renders and saves its results.

    Example:
        scraper = SearchResultScraper(ScraperConfig(query="puppeteer tutorial"))
        results = await scraper.run()

    Args:
        config: Run configuration.
        browser_manager: Session manager. A new one is created if None.
        saver: Result saver. A default one is created if None.
        timing: Optional timing observer.
    """

    def __init__(
        self,
        config: ScraperConfig,
        browser_manager: BrowserManager | None = None,
        saver: ResultSaver | None = None,
        timing: TimingCollector | None = None,
    ) -> None:
        self.config = config
        self._manager = browser_manager or BrowserManager(
            headless=config.headless,
            slow_mo_ms=config.slow_mo_ms,
        )
        self._saver = saver or ResultSaver()
        self.timing = timing

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    async def run(self) -> SearchResults:
        """
        Execute the full pipeline.

        Returns:
            The aggregate result.

        Raises:
            SearchInputNotFoundError: If the query could not be submitted.
            UnsupportedFormatError: If an output format is unknown.
        """
        query = self.config.query
        with LogContext(query=query):
            try:
                page = await self._manager.initialize()

                await SearchDriver(page, timing=self.timing).perform_search(query)

                logger.info("Extracting search results")
                aggregator = ResultAggregator(page, timing=self.timing)
                results = await aggregator.run(query, self.config.extract)

                if self.config.take_screenshot:
                    async with timed(self.timing, "screenshot"):
                        await self._saver.take_screenshot(page, self.output_dir)

                if self.config.follow_up_limit and results.organic_results:
                    async with timed(self.timing, "follow_up"):
                        await FollowUpResolver(page).resolve_many(
                            results.organic_results,
                            self.config.follow_up_limit,
                            self.config.follow_up_depth,
                        )

                async with timed(self.timing, "save"):
                    self._saver.save_results(
                        results,
                        self.output_dir,
                        list(self.config.output_formats),
                    )

                return results
            finally:
                await self._manager.close()

    async def perform_follow_up_search(
        self,
        results: SearchResults,
        result_index: int,
        depth: int = 1,
    ) -> FollowUpResult | None:
        """
        Follow up on one organic result of an existing aggregate.

        Launches the browser if it is not running. The caller closes it
        with close().

        Args:
            results: Aggregate holding the organic results.
            result_index: 0-based index into organic results.
            depth: Hop budget passed to the resolver.

        Returns:
            The follow-up result, or None if skipped, out of range or failed.
        """
        organic = results.organic_results or []
        if not 0 <= result_index < len(organic):
            logger.warning(
                "Result index out of range",
                index=result_index,
                count=len(organic),
            )
            return None

        if not self._manager.is_initialized:
            await self._manager.initialize()

        resolver = FollowUpResolver(self._manager.get_page())
        return await resolver.resolve(organic[result_index], depth)

    async def close(self) -> None:
        """Release the browser."""
        await self._manager.close()


async def extract_from_html(
    html: str,
    query: str,
    extract: ExtractOptions | None = None,
    selectors: SelectorRegistry | None = None,
) -> SearchResults:
    """
    Run the region extractors over saved results-page HTML.

    No browser is launched; regions missing from the HTML come back empty.

    Args:
        html: Results page HTML.
        query: Query the page was produced for.
        extract: Categories to extract.
        selectors: Selector registry. Uses the process-wide one if None.

    Returns:
        The aggregate result.
    """
    page = SnapshotPage(html)
    aggregator = ResultAggregator(
        page,
        selectors=selectors,
        timeouts={region: 0.0 for region in REGION_KEYS},
    )
    return await aggregator.run(query, extract)
