"""Featured snippets (answer boxes) extractor."""

from __future__ import annotations

from typing import Any

from serpharvest.search.extractors.base import RegionExtractor
from serpharvest.search.schemas import FeaturedSnippet


class FeaturedSnippetsExtractor(RegionExtractor[FeaturedSnippet]):
    """Content is cut to 100 characters plus an ellipsis by the model."""

    region = "featured_snippets"

    async def map_node(self, node: Any, position: int) -> FeaturedSnippet:
        return FeaturedSnippet(
            content=await self.page.read_text(node),
            source=await self._text(node, "featured_source"),
            url=await self._attr(node, "featured_link", "href"),
        )
