"""
Follow-up resolver.

Visits an organic result's target page and records a short summary of it
on the entry. It is the only writer of OrganicResult.follow_up_searched.

resolve() never raises: missing url, an entry already followed up, or a
non-positive depth return None without navigating, and navigation or
extraction errors are logged and return None with the entry untouched.
"""

from __future__ import annotations

from serpharvest.crawler.page import PageCapability
from serpharvest.search.schemas import (
    FOLLOW_UP_EXCERPT_LIMIT,
    FollowUpResult,
    OrganicResult,
    truncate_text,
)
from serpharvest.search.selectors import SelectorRegistry, get_selector_registry
from serpharvest.utils.config import get_settings
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)


class FollowUpResolver:
    """
    Resolves follow-up visits for organic results.

    Args:
        page: Page capability used for navigation.
        selectors: Selector registry. Uses the process-wide one if None.
        timeout: Navigation timeout in seconds. Uses settings if None.
    """

    def __init__(
        self,
        page: PageCapability,
        selectors: SelectorRegistry | None = None,
        timeout: float | None = None,
    ) -> None:
        self.page = page
        self.selectors = selectors or get_selector_registry()
        if timeout is None:
            timeout = get_settings().timeouts.follow_up_navigation
        self.timeout = timeout

    async def resolve(self, entry: OrganicResult, max_depth: int = 1) -> FollowUpResult | None:
        """
        Follow up on one organic result.

        max_depth only gates the call: any positive value performs exactly
        one hop.

        Args:
            entry: Organic result to visit.
            max_depth: Remaining hop budget.

        Returns:
            The captured result, or None if skipped or failed.
        """
        if not entry.url or entry.follow_up_searched or max_depth <= 0:
            logger.debug(
                "Skipping follow-up",
                position=entry.position,
                has_url=bool(entry.url),
                already_searched=entry.follow_up_searched,
                max_depth=max_depth,
            )
            return None

        try:
            logger.info("Following up on result", position=entry.position, url=entry.url)
            await self.page.navigate(entry.url, wait_until="networkidle", timeout=self.timeout)

            title = await self.page.page_title()
            text = await self._read_main_text()

            result = FollowUpResult(
                title=title or None,
                excerpt=truncate_text(text, FOLLOW_UP_EXCERPT_LIMIT),
                url=entry.url,
            )
            entry.record_follow_up(result)
            return result

        except Exception as e:
            logger.warning(
                "Follow-up failed",
                position=entry.position,
                url=entry.url,
                error=str(e),
            )
            return None

    async def _read_main_text(self) -> str | None:
        """Text of <main>, falling back to <body> when main is missing or empty."""
        for field in ("follow_up_main", "follow_up_body"):
            node = await self.page.query_one(self.selectors.field_selector(field))
            if node is None:
                continue
            text = await self.page.read_text(node)
            if text:
                return text
        return None

    async def resolve_many(
        self,
        entries: list[OrganicResult],
        limit: int,
        max_depth: int = 1,
    ) -> list[FollowUpResult]:
        """
        Resolve the first ``limit`` entries one after another.

        Returns:
            Successful follow-up results in entry order.
        """
        results = []
        for entry in entries[: max(limit, 0)]:
            result = await self.resolve(entry, max_depth)
            if result is not None:
                results.append(result)
        logger.info(
            "Follow-ups complete",
            requested=min(limit, len(entries)),
            succeeded=len(results),
        )
        return results
