"""
Tests for ResultAggregator and extract_from_html.
"""

from unittest.mock import patch

import pytest

from serpharvest.crawler.snapshot_page import SnapshotPage
from serpharvest.scraper import extract_from_html
from serpharvest.search.aggregator import ResultAggregator
from serpharvest.search.extractors import create_extractor
from serpharvest.search.schemas import ELLIPSIS, ExtractOptions
from serpharvest.utils.timing import TimingCollector

pytestmark = pytest.mark.unit

FIXED_TIMESTAMP = "2024-05-01T12:00:00.000Z"


class TestResultAggregator:
    """Tests for ResultAggregator.run()."""

    @pytest.mark.asyncio
    async def test_default_regions(self, serp_page: SnapshotPage) -> None:
        """
        Given: The results fixture and default extract options
        When: run() is called
        Then: Enabled regions are lists and images stays None (not requested)
        """
        results = await ResultAggregator(serp_page).run("puppeteer tutorial")

        assert results.query == "puppeteer tutorial"
        assert results.region_counts() == {
            "organic_results": 3,
            "featured_snippets": 1,
            "people_also_ask": 2,
            "related_searches": 2,
            "videos": 2,
        }
        assert results.images is None
        assert "images" not in results.to_dict()

    @pytest.mark.asyncio
    async def test_page_text_excerpt(self, serp_page: SnapshotPage) -> None:
        results = await ResultAggregator(serp_page).run("q")

        assert results.page_text is not None
        assert results.page_text.startswith("Puppeteer is a Node.js library")
        assert results.page_text.endswith(ELLIPSIS)
        assert len(results.page_text) == 101

    @pytest.mark.asyncio
    async def test_requested_but_empty_vs_absent(self, empty_page: SnapshotPage) -> None:
        """
        Given: A page without result regions, videos disabled
        When: run() is called
        Then: Enabled regions are [] while videos is absent
        """
        extract = ExtractOptions(videos=False)
        aggregator = ResultAggregator(
            empty_page, timeouts={"organic_results": 0.0, "featured_snippets": 0.0}
        )

        results = await aggregator.run("q", extract)

        data = results.to_dict()
        assert data["organicResults"] == []
        assert data["peopleAlsoAsk"] == []
        assert "videos" not in data
        assert results.page_text is None

    @pytest.mark.asyncio
    async def test_category_failure_isolated(self, serp_page: SnapshotPage) -> None:
        """
        Given: The videos extractor blows up
        When: run() is called
        Then: videos is [] and the other categories are still extracted
        """

        def flaky_create(region, page, **kwargs):
            if region == "videos":
                raise RuntimeError("extractor exploded")
            return create_extractor(region, page, **kwargs)

        with patch("serpharvest.search.aggregator.create_extractor", side_effect=flaky_create):
            results = await ResultAggregator(serp_page).run("q")

        assert results.videos == []
        assert len(results.organic_results) == 3
        assert results.related_searches == ["puppeteer npm", "puppeteer vs playwright"]

    @pytest.mark.asyncio
    async def test_timestamp_taken_once(self, serp_page: SnapshotPage) -> None:
        with patch(
            "serpharvest.search.aggregator.utc_timestamp", return_value=FIXED_TIMESTAMP
        ) as mock_timestamp:
            results = await ResultAggregator(serp_page).run("q")

        assert results.timestamp == FIXED_TIMESTAMP
        mock_timestamp.assert_called_once()

    @pytest.mark.asyncio
    async def test_timing_does_not_change_results(self, serp_html: str) -> None:
        """
        Given: The same page aggregated with and without a timing observer
        When: Both runs complete
        Then: Results are identical and the observer saw every stage
        """
        timing = TimingCollector()

        with patch(
            "serpharvest.search.aggregator.utc_timestamp", return_value=FIXED_TIMESTAMP
        ):
            plain = await ResultAggregator(SnapshotPage(serp_html)).run("q")
            observed = await ResultAggregator(SnapshotPage(serp_html), timing=timing).run("q")

        assert plain.to_dict() == observed.to_dict()
        assert set(timing.records) == {
            "organic_results",
            "featured_snippets",
            "people_also_ask",
            "related_searches",
            "videos",
            "page_text",
        }

    @pytest.mark.asyncio
    async def test_timing_records_failed_category(self, serp_page: SnapshotPage) -> None:
        timing = TimingCollector()
        extract = ExtractOptions(
            featured_snippets=False,
            people_also_ask=False,
            related_searches=False,
            videos=False,
        )

        def failing_create(region, page, **kwargs):
            raise RuntimeError("boom")

        with patch("serpharvest.search.aggregator.create_extractor", side_effect=failing_create):
            results = await ResultAggregator(serp_page, timing=timing).run("q", extract)

        assert results.organic_results == []
        assert timing.records["organic_results"].status == "error"


class TestExtractFromHtml:
    """Tests for extraction over saved HTML."""

    @pytest.mark.asyncio
    async def test_all_regions(self, serp_html: str) -> None:
        extract = ExtractOptions(images=True)

        results = await extract_from_html(serp_html, "puppeteer tutorial", extract)

        assert results.region_counts()["images"] == 1
        assert results.organic_results[0].url == "https://pptr.dev/guides/getting-started"
        assert results.featured_snippets[0].source == "pptr.dev"

    @pytest.mark.asyncio
    async def test_empty_html(self) -> None:
        results = await extract_from_html("", "q")

        assert results.organic_results == []
        assert results.images is None
        assert results.page_text is None
