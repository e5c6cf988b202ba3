"""
Tests for BrowserManager and PlaywrightPage.

Playwright itself is mocked; no browser is launched.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from serpharvest.crawler.browser_manager import BrowserManager
from serpharvest.crawler.page import PageCapability
from serpharvest.crawler.playwright_page import PlaywrightPage
from serpharvest.crawler.snapshot_page import SnapshotPage
from serpharvest.errors import BrowserNotInitializedError
from serpharvest.utils.config import BrowserConfig

pytestmark = pytest.mark.unit


def _raw_page() -> MagicMock:
    page = MagicMock()
    page.is_closed.return_value = False
    page.close = AsyncMock()
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.query_selector = AsyncMock()
    page.query_selector_all = AsyncMock(return_value=[])
    page.screenshot = AsyncMock()
    page.title = AsyncMock(return_value="Title")
    page.content = AsyncMock(return_value="<html></html>")
    page.keyboard.press = AsyncMock()
    return page


@pytest.fixture
def playwright_stack():
    """Mocked async_playwright() -> playwright -> browser -> context -> page."""
    page = _raw_page()
    context = MagicMock()
    context.new_page = AsyncMock(side_effect=lambda: page)
    context.close = AsyncMock()
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()
    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)

    with patch("playwright.async_api.async_playwright", return_value=starter):
        yield {
            "playwright": playwright,
            "browser": browser,
            "context": context,
            "page": page,
        }


# =============================================================================
# BrowserManager
# =============================================================================


class TestBrowserManager:
    """Tests for BrowserManager lifecycle."""

    @pytest.mark.asyncio
    async def test_initialize_launches_with_config(self, playwright_stack) -> None:
        """
        Given: A manager with explicit headless and slow-motion settings
        When: initialize() is called
        Then: Chromium is launched with them and the configured viewport and user agent
        """
        config = BrowserConfig(viewport_width=1024, viewport_height=768, user_agent="UA/1.0")
        manager = BrowserManager(headless=False, slow_mo_ms=10, browser_config=config)

        page = await manager.initialize()

        assert isinstance(page, PlaywrightPage)
        assert page.page is playwright_stack["page"]
        assert manager.is_initialized is True
        playwright_stack["playwright"].chromium.launch.assert_awaited_once_with(
            headless=False,
            slow_mo=10,
            args=["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"],
        )
        playwright_stack["browser"].new_context.assert_awaited_once_with(
            viewport={"width": 1024, "height": 768},
            user_agent="UA/1.0",
        )

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, playwright_stack) -> None:
        manager = BrowserManager()

        first = await manager.initialize()
        second = await manager.initialize()

        assert first is second
        playwright_stack["playwright"].chromium.launch.assert_awaited_once()

    def test_get_page_before_initialize(self) -> None:
        with pytest.raises(BrowserNotInitializedError):
            BrowserManager().get_page()

    @pytest.mark.asyncio
    async def test_new_page_before_initialize(self) -> None:
        with pytest.raises(BrowserNotInitializedError):
            await BrowserManager().new_page()

    @pytest.mark.asyncio
    async def test_close_releases_everything(self, playwright_stack) -> None:
        manager = BrowserManager()
        await manager.initialize()
        await manager.new_page()

        await manager.close()

        assert manager.is_initialized is False
        playwright_stack["context"].close.assert_awaited_once()
        playwright_stack["browser"].close.assert_awaited_once()
        playwright_stack["playwright"].stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_survives_cleanup_error(self, playwright_stack) -> None:
        manager = BrowserManager()
        await manager.initialize()
        playwright_stack["browser"].close.side_effect = RuntimeError("already gone")

        await manager.close()

        assert manager.is_initialized is False
        with pytest.raises(BrowserNotInitializedError):
            manager.get_page()

    @pytest.mark.asyncio
    async def test_launch_failure_cleans_up(self, playwright_stack) -> None:
        """
        Given: Chromium fails to launch
        When: initialize() is called
        Then: The error propagates and Playwright is stopped
        """
        playwright_stack["playwright"].chromium.launch.side_effect = RuntimeError("no chromium")
        manager = BrowserManager()

        with pytest.raises(RuntimeError, match="no chromium"):
            await manager.initialize()

        playwright_stack["playwright"].stop.assert_awaited_once()
        assert manager.is_initialized is False

    @pytest.mark.asyncio
    async def test_async_context_manager(self, playwright_stack) -> None:
        async with BrowserManager() as manager:
            assert manager.is_initialized is True

        assert manager.is_initialized is False

    def test_defaults_from_settings(self) -> None:
        manager = BrowserManager()

        assert manager._headless is True
        assert manager._slow_mo_ms == 50


# =============================================================================
# PlaywrightPage
# =============================================================================


class TestPlaywrightPage:
    """Tests for the Playwright page capability."""

    def test_implements_protocol(self) -> None:
        assert isinstance(PlaywrightPage(_raw_page()), PageCapability)
        assert isinstance(SnapshotPage(), PageCapability)

    @pytest.mark.asyncio
    async def test_navigate_converts_seconds(self) -> None:
        raw = _raw_page()

        await PlaywrightPage(raw).navigate("https://example.com", "networkidle", 30.0)

        raw.goto.assert_awaited_once_with(
            "https://example.com", wait_until="networkidle", timeout=30000.0
        )

    @pytest.mark.asyncio
    async def test_wait_for_region(self) -> None:
        raw = _raw_page()
        page = PlaywrightPage(raw)

        assert await page.wait_for_region("#b_results", 1.5) is True
        raw.wait_for_selector.assert_awaited_once_with(
            "#b_results", state="attached", timeout=1500.0
        )

        raw.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 1500ms exceeded")
        assert await page.wait_for_region("#b_results", 1.5) is False

    @pytest.mark.asyncio
    async def test_read_text_trims(self) -> None:
        node = MagicMock()
        node.text_content = AsyncMock(side_effect=["  Title \n", "   ", None])
        page = PlaywrightPage(_raw_page())

        assert await page.read_text(node) == "Title"
        assert await page.read_text(node) is None
        assert await page.read_text(node) is None

    @pytest.mark.asyncio
    async def test_query_scoped_to_root(self) -> None:
        raw = _raw_page()
        root = MagicMock()
        root.query_selector_all = AsyncMock(return_value=["a", "b"])
        page = PlaywrightPage(raw)

        assert await page.query_all("li a", root) == ["a", "b"]
        raw.query_selector_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_press_and_screenshot(self) -> None:
        raw = _raw_page()
        page = PlaywrightPage(raw)

        await page.press_key("Enter")
        written = await page.screenshot("/tmp/shot.png")

        raw.keyboard.press.assert_awaited_once_with("Enter")
        raw.screenshot.assert_awaited_once_with(path="/tmp/shot.png", full_page=True)
        assert written is True

    @pytest.mark.asyncio
    async def test_close_skips_closed_page(self) -> None:
        raw = _raw_page()
        raw.is_closed.return_value = True

        await PlaywrightPage(raw).close()

        raw.close.assert_not_awaited()
