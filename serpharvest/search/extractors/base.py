"""
Base region extractor.

Every result category goes through the same routine:

    IDLE -> WAITING -> FOUND -> EXTRACTING -> DONE
                |
                +--> TIMED_OUT -------------------> DONE

A region that never appears yields [] with a warning. A region that
appears but holds no matching nodes yields [] silently. Any exception
while mapping nodes is logged and the category yields []. Subclasses only
supply the region key, the timeout key and map_node().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from serpharvest.crawler.page import PageCapability
from serpharvest.search.selectors import SelectorRegistry, get_selector_registry
from serpharvest.utils.config import get_settings
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ExtractorState(str, Enum):
    """Lifecycle of one extraction pass."""

    IDLE = "idle"
    WAITING = "waiting"
    FOUND = "found"
    EXTRACTING = "extracting"
    TIMED_OUT = "timed_out"
    DONE = "done"


class RegionExtractor(ABC, Generic[T]):
    """
    Base class for the six result-category extractors.

    Args:
        page: Page capability to read from.
        selectors: Selector registry. Uses the process-wide one if None.
        timeout: Region wait timeout in seconds. Uses settings if None.
    """

    region: ClassVar[str]
    timeout_key: ClassVar[str] = "region"

    def __init__(
        self,
        page: PageCapability,
        selectors: SelectorRegistry | None = None,
        timeout: float | None = None,
    ) -> None:
        self.page = page
        self.selectors = selectors or get_selector_registry()
        if timeout is None:
            timeout = getattr(get_settings().timeouts, self.timeout_key)
        self.timeout = timeout
        self.state = ExtractorState.IDLE
        self.history: list[ExtractorState] = [ExtractorState.IDLE]

    @property
    def selector(self) -> str:
        """Selector group for this extractor's region."""
        return self.selectors.region(self.region)

    def _transition(self, state: ExtractorState) -> None:
        self.state = state
        self.history.append(state)

    async def extract(self) -> list[T]:
        """
        Wait for the region and map every node in it.

        Returns:
            Records in document order. Empty on timeout, on zero nodes,
            and on mapping errors.
        """
        self.state = ExtractorState.IDLE
        self.history = [ExtractorState.IDLE]

        self._transition(ExtractorState.WAITING)
        try:
            found = await self.page.wait_for_region(self.selector, self.timeout)
        except Exception as e:
            logger.warning("Region wait failed", region=self.region, error=str(e))
            found = False

        if not found:
            self._transition(ExtractorState.TIMED_OUT)
            self._transition(ExtractorState.DONE)
            logger.warning(
                "Region not found within timeout",
                region=self.region,
                timeout=self.timeout,
            )
            return []

        self._transition(ExtractorState.FOUND)
        self._transition(ExtractorState.EXTRACTING)

        records: list[T] = []
        try:
            nodes = await self.page.query_all(self.selector)
            for node in nodes:
                record = await self.map_node(node, len(records) + 1)
                if record is not None:
                    records.append(record)
        except Exception as e:
            logger.error("Region extraction failed", region=self.region, error=str(e))
            records = []

        self._transition(ExtractorState.DONE)

        if records:
            logger.info("Extracted region", region=self.region, count=len(records))
        else:
            logger.debug("Region present but empty", region=self.region)
        return records

    @abstractmethod
    async def map_node(self, node: Any, position: int) -> T | None:
        """
        Map one region node to a record.

        Args:
            node: Node handle from the page capability.
            position: 1-based position among records produced so far.

        Returns:
            The record, or None to skip the node.
        """

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _text(self, root: Any, field: str) -> str | None:
        """Text of the first descendant matching a field selector."""
        node = await self.page.query_one(self.selectors.field_selector(field), root)
        if node is None:
            return None
        return await self.page.read_text(node)

    async def _attr(self, root: Any, field: str, name: str) -> str | None:
        """Attribute of the first descendant matching a field selector."""
        node = await self.page.query_one(self.selectors.field_selector(field), root)
        if node is None:
            return None
        return await self.page.read_attribute(node, name)

    async def _node_at(self, index: int) -> Any | None:
        """Region node at index, None when out of range."""
        if index < 0:
            return None
        nodes = await self.page.query_all(self.selector)
        if index >= len(nodes):
            logger.warning(
                "Index out of range",
                region=self.region,
                index=index,
                count=len(nodes),
            )
            return None
        return nodes[index]
