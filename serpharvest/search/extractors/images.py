"""Image results extractor."""

from __future__ import annotations

from typing import Any

from serpharvest.search.extractors.base import RegionExtractor
from serpharvest.search.schemas import ImageResult
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)


class ImageResultsExtractor(RegionExtractor[ImageResult]):
    """Extracts image grid tiles."""

    region = "images"

    async def map_node(self, node: Any, position: int) -> ImageResult:
        return ImageResult(
            src=await self._attr(node, "image_img", "src"),
            alt=await self._attr(node, "image_img", "alt"),
            title=await self._text(node, "image_title"),
            url=await self._attr(node, "image_link", "href"),
            dimensions=await self._text(node, "image_dimensions"),
        )

    async def view_full_size_image(self, index: int) -> str | None:
        """
        Open an image tile and read the full-size image source.

        Returns:
            The full-size image URL, or None.
        """
        try:
            node = await self._node_at(index)
            if node is None:
                return None

            await self.page.click(node)
            full_size = self.selectors.field_selector("image_full_size")
            if not await self.page.wait_for_region(full_size, self.timeout):
                logger.warning("Full-size image did not appear", index=index)
                return None

            image = await self.page.query_one(full_size)
            if image is None:
                return None
            return await self.page.read_attribute(image, "src")
        except Exception as e:
            logger.warning("Failed to view full-size image", index=index, error=str(e))
            return None
