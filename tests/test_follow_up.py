"""
Tests for FollowUpResolver.

## Test Perspectives Table

| Case ID | Input / Precondition | Perspective (Equivalence / Boundary) | Expected Result | Notes |
|---------|---------------------|---------------------------------------|-----------------|-------|
| TC-FU-N-01 | Reachable URL | Equivalence – normal | Title and main text recorded, flag set | - |
| TC-FU-N-02 | Entry already followed up | Equivalence – idempotence | None, no navigation | - |
| TC-FU-B-01 | Missing URL / depth 0 | Boundary – guard | None, no navigation | - |
| TC-FU-B-02 | Main text of 1500 chars | Boundary – truncation | 1000 chars + ellipsis | - |
| TC-FU-B-03 | Empty <main> | Boundary – fallback | Body text used | - |
| TC-FU-A-01 | Navigation fails | Abnormal – error | None, flag stays False | Warning logged |
"""

from unittest.mock import AsyncMock

import pytest

from serpharvest.crawler.snapshot_page import SnapshotPage
from serpharvest.search.follow_up import FollowUpResolver
from serpharvest.search.schemas import ELLIPSIS, FollowUpResult, OrganicResult

pytestmark = pytest.mark.unit

TARGET_URL = "https://pptr.dev/guides/getting-started"
TARGET_HTML = """
<html>
<head><title>Getting started | Puppeteer</title></head>
<body>
  <nav>Menu</nav>
  <main>Puppeteer runs headless by default.</main>
</body>
</html>
"""


@pytest.fixture
def target_page() -> SnapshotPage:
    return SnapshotPage(pages={TARGET_URL: TARGET_HTML})


@pytest.fixture
def entry() -> OrganicResult:
    return OrganicResult(position=1, title="Getting started", url=TARGET_URL)


class TestResolve:
    """Tests for resolve()."""

    @pytest.mark.asyncio
    async def test_success_records_result(
        self, target_page: SnapshotPage, entry: OrganicResult
    ) -> None:
        """
        Given: An organic result with a reachable URL
        When: resolve() is called
        Then: The page title and main text are recorded on the entry
        """
        resolver = FollowUpResolver(target_page, timeout=0.0)

        result = await resolver.resolve(entry)

        assert result == FollowUpResult(
            title="Getting started | Puppeteer",
            excerpt="Puppeteer runs headless by default.",
            url=TARGET_URL,
        )
        assert entry.follow_up_searched is True
        assert entry.follow_up_result == result

    @pytest.mark.asyncio
    async def test_second_call_does_not_navigate(
        self, target_page: SnapshotPage, entry: OrganicResult
    ) -> None:
        """
        Given: An entry that was already followed up
        When: resolve() is called again
        Then: None is returned without navigating and the first result stays
        """
        resolver = FollowUpResolver(target_page, timeout=0.0)
        first = await resolver.resolve(entry)

        second = await resolver.resolve(entry)

        assert second is None
        assert target_page.visited == [TARGET_URL]
        assert entry.follow_up_result == first

    @pytest.mark.asyncio
    async def test_missing_url_skipped(self, target_page: SnapshotPage) -> None:
        entry = OrganicResult(position=2, title="No link")

        assert await FollowUpResolver(target_page, timeout=0.0).resolve(entry) is None
        assert target_page.visited == []
        assert entry.follow_up_searched is False

    @pytest.mark.asyncio
    async def test_zero_depth_skipped(
        self, target_page: SnapshotPage, entry: OrganicResult
    ) -> None:
        resolver = FollowUpResolver(target_page, timeout=0.0)

        assert await resolver.resolve(entry, max_depth=0) is None
        assert target_page.visited == []

    @pytest.mark.asyncio
    async def test_navigation_failure_leaves_entry_untouched(self) -> None:
        """
        Given: A URL that cannot be loaded
        When: resolve() is called
        Then: None is returned and the flag stays False
        """
        page = SnapshotPage()
        entry = OrganicResult(position=1, url="https://unreachable.example.com")

        result = await FollowUpResolver(page, timeout=0.0).resolve(entry)

        assert result is None
        assert entry.follow_up_searched is False
        assert entry.follow_up_result is None

    @pytest.mark.asyncio
    async def test_excerpt_truncated(self, entry: OrganicResult) -> None:
        page = SnapshotPage(pages={TARGET_URL: f"<main>{'z' * 1500}</main>"})

        result = await FollowUpResolver(page, timeout=0.0).resolve(entry)

        assert result is not None
        assert result.excerpt == "z" * 1000 + ELLIPSIS

    @pytest.mark.asyncio
    async def test_body_fallback(self, entry: OrganicResult) -> None:
        """
        Given: A page whose <main> is empty
        When: resolve() is called
        Then: The excerpt falls back to the body text and a missing title is None
        """
        page = SnapshotPage(pages={TARGET_URL: "<body><main> </main>Body text</body>"})

        result = await FollowUpResolver(page, timeout=0.0).resolve(entry)

        assert result is not None
        assert result.excerpt == "Body text"
        assert result.title is None

    @pytest.mark.asyncio
    async def test_navigation_policy(self, entry: OrganicResult) -> None:
        page = AsyncMock()
        page.page_title.return_value = "Title"
        page.query_one.return_value = None

        await FollowUpResolver(page, timeout=7.0).resolve(entry)

        page.navigate.assert_awaited_once_with(TARGET_URL, wait_until="networkidle", timeout=7.0)

    def test_timeout_from_settings(self, target_page: SnapshotPage) -> None:
        assert FollowUpResolver(target_page).timeout == 30.0


class TestResolveMany:
    """Tests for resolve_many()."""

    @pytest.mark.asyncio
    async def test_limit_respected(self) -> None:
        """
        Given: Three entries and a limit of two
        When: resolve_many() is called
        Then: Only the first two are visited
        """
        urls = [f"https://example.com/{i}" for i in range(3)]
        page = SnapshotPage(pages={url: f"<main>Page {url}</main>" for url in urls})
        entries = [OrganicResult(position=i + 1, url=url) for i, url in enumerate(urls)]

        results = await FollowUpResolver(page, timeout=0.0).resolve_many(entries, 2)

        assert [r.url for r in results] == urls[:2]
        assert page.visited == urls[:2]
        assert entries[2].follow_up_searched is False

    @pytest.mark.asyncio
    async def test_failures_skipped(self) -> None:
        page = SnapshotPage(pages={"https://ok.example.com": "<main>ok</main>"})
        entries = [
            OrganicResult(position=1, url="https://down.example.com"),
            OrganicResult(position=2),
            OrganicResult(position=3, url="https://ok.example.com"),
        ]

        results = await FollowUpResolver(page, timeout=0.0).resolve_many(entries, 5)

        assert [r.url for r in results] == ["https://ok.example.com"]
        assert [e.follow_up_searched for e in entries] == [False, False, True]
