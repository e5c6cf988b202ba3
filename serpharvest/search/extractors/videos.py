"""Video results extractor."""

from __future__ import annotations

from typing import Any

from serpharvest.search.extractors.base import RegionExtractor
from serpharvest.search.schemas import VideoResult
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)


class VideoResultsExtractor(RegionExtractor[VideoResult]):
    """Extracts video carousel tiles."""

    region = "videos"

    async def map_node(self, node: Any, position: int) -> VideoResult:
        return VideoResult(
            title=await self._text(node, "video_title"),
            source=await self._text(node, "video_source"),
            duration=await self._text(node, "video_duration"),
            url=await self._attr(node, "video_link", "href"),
        )

    async def play_video(self, index: int) -> bool:
        """
        Start playback of a video tile.

        Clicks the tile's play button, or the tile itself when it has none,
        then waits for a <video> element.

        Returns:
            True if a video element appeared.
        """
        try:
            node = await self._node_at(index)
            if node is None:
                return False

            button = await self.page.query_one(
                self.selectors.field_selector("video_play_button"), node
            )
            await self.page.click(button if button is not None else node)
            return await self.page.wait_for_region("video", self.timeout)
        except Exception as e:
            logger.warning("Failed to play video", index=index, error=str(e))
            return False
