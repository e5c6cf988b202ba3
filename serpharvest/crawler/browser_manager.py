"""
Browser session manager.

Owns one Playwright browser, one context and the primary page for a run,
and hands out page capabilities to everything above it.

Design Philosophy:
- Lazy launch: nothing starts until initialize()
- One primary page per run; extra pages (new_page) are for callers that
  need one page per concurrent unit
- close() always releases every resource, even after partial failures
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from serpharvest.crawler.playwright_page import PlaywrightPage
from serpharvest.errors import BrowserNotInitializedError
from serpharvest.utils.config import BrowserConfig, get_settings
from serpharvest.utils.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Playwright

logger = get_logger(__name__)


class BrowserManager:
    """
    Launches Chromium through Playwright and manages pages.

    Example:
        async with BrowserManager(headless=True) as manager:
            page = manager.get_page()
            await page.navigate("https://www.bing.com/")

    Args:
        headless: Run without a visible window. Uses settings if None.
        slow_mo_ms: Delay between Playwright operations. Uses settings if None.
        browser_config: Launch settings. Uses settings if None.
    """

    def __init__(
        self,
        headless: bool | None = None,
        slow_mo_ms: int | None = None,
        browser_config: BrowserConfig | None = None,
    ) -> None:
        self._config = browser_config or get_settings().browser
        self._headless = self._config.headless if headless is None else headless
        self._slow_mo_ms = self._config.slow_mo_ms if slow_mo_ms is None else slow_mo_ms

        # Browser state (lazy initialization)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: PlaywrightPage | None = None
        self._extra_pages: list[PlaywrightPage] = []

    @property
    def is_initialized(self) -> bool:
        return self._page is not None

    async def initialize(self) -> PlaywrightPage:
        """
        Launch the browser and open the primary page.

        Calling it again on an initialized manager returns the same page.

        Returns:
            The primary page capability.
        """
        if self._page is not None:
            return self._page

        try:
            from playwright.async_api import async_playwright

            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                slow_mo=self._slow_mo_ms,
                args=list(self._config.launch_args),
            )
            self._context = await self._browser.new_context(
                viewport={
                    "width": self._config.viewport_width,
                    "height": self._config.viewport_height,
                },
                user_agent=self._config.user_agent,
            )
            self._page = PlaywrightPage(await self._context.new_page())
        except Exception as e:
            logger.error("Failed to initialize browser", error=str(e))
            await self.close()
            raise

        logger.info(
            "Browser initialized",
            headless=self._headless,
            slow_mo_ms=self._slow_mo_ms,
        )
        return self._page

    def get_page(self) -> PlaywrightPage:
        """
        Get the primary page.

        Raises:
            BrowserNotInitializedError: If initialize() has not run.
        """
        if self._page is None:
            raise BrowserNotInitializedError()
        return self._page

    async def new_page(self) -> PlaywrightPage:
        """
        Open an additional page in the same context.

        The caller owns the page exclusively. close() releases it too.

        Raises:
            BrowserNotInitializedError: If initialize() has not run.
        """
        if self._context is None:
            raise BrowserNotInitializedError()
        page = PlaywrightPage(await self._context.new_page())
        self._extra_pages.append(page)
        return page

    async def close(self) -> None:
        """Close every page, the context, the browser and Playwright."""
        try:
            for page in self._extra_pages:
                await page.close()

            if self._page is not None:
                await self._page.close()

            if self._context:
                await self._context.close()

            if self._browser:
                await self._browser.close()

            if self._playwright:
                await self._playwright.stop()

        except Exception as e:
            logger.warning("Error during browser cleanup", error=str(e))
        finally:
            self._extra_pages = []
            self._page = None
            self._context = None
            self._browser = None
            self._playwright = None

        logger.debug("Browser closed")

    async def __aenter__(self) -> BrowserManager:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
