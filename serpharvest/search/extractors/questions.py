"""People-also-ask questions extractor."""

from __future__ import annotations

from typing import Any

from serpharvest.search.extractors.base import RegionExtractor
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)


class PeopleAlsoAskExtractor(RegionExtractor[str]):
    """Extracts related questions as plain strings. Empty ones are skipped."""

    region = "people_also_ask"

    async def map_node(self, node: Any, position: int) -> str | None:
        return await self.page.read_text(node)

    async def expand_question(self, index: int) -> str | None:
        """
        Click a question open and read its answer.

        Answers are matched to questions by index among the answer nodes
        present after the click.

        Args:
            index: 0-based question index.

        Returns:
            Answer text, or None if the question or answer is missing.
        """
        try:
            node = await self._node_at(index)
            if node is None:
                return None

            await self.page.click(node)
            answer_selector = self.selectors.field_selector("paa_answer")
            if not await self.page.wait_for_region(answer_selector, self.timeout):
                logger.warning("Answer did not appear", index=index)
                return None

            answers = await self.page.query_all(answer_selector)
            if not answers:
                return None
            answer = answers[index] if index < len(answers) else answers[0]
            return await self.page.read_text(answer)
        except Exception as e:
            logger.warning("Failed to expand question", index=index, error=str(e))
            return None
