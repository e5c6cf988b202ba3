"""
Playwright-backed page capability.

Wraps a playwright.async_api.Page. Timeouts arrive in seconds and are
converted to the milliseconds Playwright expects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from serpharvest.crawler.page import clean_text
from serpharvest.utils.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page

logger = get_logger(__name__)


def _ms(seconds: float) -> float:
    return seconds * 1000


class PlaywrightPage:
    """PageCapability implementation over a Playwright Page."""

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def page(self) -> Page:
        """Underlying Playwright page."""
        return self._page

    async def navigate(
        self,
        url: str,
        wait_until: str = "load",
        timeout: float = 30.0,
    ) -> None:
        await self._page.goto(url, wait_until=wait_until, timeout=_ms(timeout))

    async def find_control(self, selector: str) -> ElementHandle | None:
        return await self._page.query_selector(selector)

    async def type_text(self, handle: ElementHandle, text: str) -> None:
        await handle.type(text)

    async def press_key(self, key: str) -> None:
        await self._page.keyboard.press(key)

    async def wait_for_region(self, selector: str, timeout: float) -> bool:
        try:
            await self._page.wait_for_selector(
                selector,
                state="attached",
                timeout=_ms(timeout),
            )
            return True
        except PlaywrightTimeoutError:
            return False

    async def query_all(self, selector: str, root: Any | None = None) -> list[ElementHandle]:
        scope = root if root is not None else self._page
        return await scope.query_selector_all(selector)

    async def query_one(self, selector: str, root: Any | None = None) -> ElementHandle | None:
        scope = root if root is not None else self._page
        return await scope.query_selector(selector)

    async def read_text(self, node: ElementHandle) -> str | None:
        return clean_text(await node.text_content())

    async def read_attribute(self, node: ElementHandle, name: str) -> str | None:
        return await node.get_attribute(name)

    async def click(self, node: ElementHandle) -> None:
        await node.click()

    async def screenshot(self, path: str, full_page: bool = True) -> bool:
        await self._page.screenshot(path=path, full_page=full_page)
        return True

    async def page_title(self) -> str:
        return await self._page.title()

    async def content(self) -> str:
        return await self._page.content()

    async def close(self) -> None:
        if not self._page.is_closed():
            await self._page.close()
