"""
Result aggregator.

Runs the enabled region extractors one after another against a single
page and assembles one SearchResults.

Design Philosophy:
- Disabled categories stay None (not requested); enabled categories are
  lists, possibly empty
- An exception in one category is logged and that category becomes []
- The timestamp is taken once, when aggregation starts
- The page-text excerpt is always captured
"""

from __future__ import annotations

from typing import Any

from serpharvest.crawler.page import PageCapability
from serpharvest.search.extractors import create_extractor
from serpharvest.search.schemas import ExtractOptions, SearchResults, utc_timestamp
from serpharvest.search.selectors import SelectorRegistry, get_selector_registry
from serpharvest.utils.logging import get_logger
from serpharvest.utils.timing import TimingCollector, timed

logger = get_logger(__name__)


class ResultAggregator:
    """
    Builds the aggregate result for one query.

    Args:
        page: Page capability holding the results page.
        selectors: Selector registry. Uses the process-wide one if None.
        timing: Optional timing observer.
        timeouts: Optional per-region timeout overrides in seconds.
    """

    def __init__(
        self,
        page: PageCapability,
        selectors: SelectorRegistry | None = None,
        timing: TimingCollector | None = None,
        timeouts: dict[str, float] | None = None,
    ) -> None:
        self.page = page
        self.selectors = selectors or get_selector_registry()
        self.timing = timing
        self.timeouts = timeouts or {}

    async def run(self, query: str, extract: ExtractOptions | None = None) -> SearchResults:
        """
        Extract every enabled category.

        Args:
            query: Query the page was produced for, stored verbatim.
            extract: Categories to extract. Defaults to ExtractOptions().

        Returns:
            The aggregate result.
        """
        extract = extract or ExtractOptions()
        timestamp = utc_timestamp()
        values: dict[str, Any] = {}

        for region in extract.enabled_regions():
            values[region] = await self._extract_region(region)

        async with timed(self.timing, "page_text"):
            values["page_text"] = await self._read_page_text()

        results = SearchResults(query=query, timestamp=timestamp, **values)
        logger.info("Aggregated results", query=query, counts=results.region_counts())
        return results

    async def _extract_region(self, region: str) -> list[Any]:
        kwargs: dict[str, Any] = {"selectors": self.selectors}
        if region in self.timeouts:
            kwargs["timeout"] = self.timeouts[region]

        try:
            async with timed(self.timing, region):
                extractor = create_extractor(region, self.page, **kwargs)
                return await extractor.extract()
        except Exception as e:
            logger.error("Category extraction failed", region=region, error=str(e))
            return []

    async def _read_page_text(self) -> str | None:
        try:
            node = await self.page.query_one(self.selectors.region("main_content"))
            if node is None:
                return None
            return await self.page.read_text(node)
        except Exception as e:
            logger.warning("Failed to read page text", error=str(e))
            return None
