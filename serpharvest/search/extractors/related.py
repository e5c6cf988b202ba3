"""Related searches extractor."""

from __future__ import annotations

from typing import Any

from serpharvest.search.extractors.base import RegionExtractor
from serpharvest.utils.config import get_settings
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)


class RelatedSearchesExtractor(RegionExtractor[str]):
    """Extracts related search suggestions as plain strings."""

    region = "related_searches"

    async def map_node(self, node: Any, position: int) -> str | None:
        return await self.page.read_text(node)

    async def perform_related_search(self, index: int) -> bool:
        """
        Click a related search and wait for the new results page.

        Args:
            index: 0-based related search index.

        Returns:
            True if the results region appeared.
        """
        try:
            node = await self._node_at(index)
            if node is None:
                return False

            await self.page.click(node)
            found = await self.page.wait_for_region(
                self.selectors.region("search_results"),
                get_settings().timeouts.organic_results,
            )
            if not found:
                logger.warning("Related search results did not load", index=index)
            return found
        except Exception as e:
            logger.warning("Failed to perform related search", index=index, error=str(e))
            return False
