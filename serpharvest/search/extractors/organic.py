"""Organic results extractor."""

from __future__ import annotations

from typing import Any

from serpharvest.search.extractors.base import RegionExtractor
from serpharvest.search.schemas import DeepLink, OrganicResult


class OrganicResultsExtractor(RegionExtractor[OrganicResult]):
    """Extracts ranked organic results with their sitelinks."""

    region = "organic_results"
    timeout_key = "organic_results"

    async def map_node(self, node: Any, position: int) -> OrganicResult:
        deep_links = []
        for link in await self.page.query_all(
            self.selectors.field_selector("organic_deep_links"), node
        ):
            deep_links.append(
                DeepLink(
                    text=await self.page.read_text(link),
                    url=await self.page.read_attribute(link, "href"),
                )
            )

        return OrganicResult(
            position=position,
            title=await self._text(node, "organic_title"),
            url=await self._attr(node, "organic_url", "href"),
            snippet=await self._text(node, "organic_snippet"),
            deep_links=deep_links,
        )
