"""
Static HTML page capability backed by BeautifulSoup.

Lets the extraction pipeline run over saved HTML (crawler output, fixtures)
without a browser. Waits resolve immediately: a region is either in the
snapshot or it never will be.
"""

from __future__ import annotations

from typing import Any

from bs4 import BeautifulSoup, Tag

from serpharvest.crawler.page import clean_text
from serpharvest.errors import CrawlError
from serpharvest.utils.logging import get_logger

logger = get_logger(__name__)


class SnapshotPage:
    """PageCapability implementation over static HTML.

    Args:
        html: Initial document.
        url: URL the initial document is treated as coming from.
        pages: Optional url -> html mapping served by navigate() and by
            clicks on links whose href is in the mapping.
    """

    def __init__(
        self,
        html: str = "",
        url: str = "about:blank",
        pages: dict[str, str] | None = None,
    ) -> None:
        self._pages = dict(pages or {})
        self.url = url
        self._soup = BeautifulSoup(html, "html.parser")
        self.visited: list[str] = []
        self.typed: list[str] = []
        self.keys: list[str] = []
        self.clicked: list[Tag] = []
        self.closed = False

    def _load(self, url: str) -> None:
        self.url = url
        self._soup = BeautifulSoup(self._pages[url], "html.parser")

    async def navigate(
        self,
        url: str,
        wait_until: str = "load",
        timeout: float = 30.0,
    ) -> None:
        self.visited.append(url)
        if url not in self._pages:
            raise CrawlError(url, "no snapshot available")
        self._load(url)

    async def find_control(self, selector: str) -> Tag | None:
        return self._soup.select_one(selector)

    async def type_text(self, handle: Tag, text: str) -> None:
        handle["value"] = text
        self.typed.append(text)

    async def press_key(self, key: str) -> None:
        self.keys.append(key)

    async def wait_for_region(self, selector: str, timeout: float) -> bool:
        return self._soup.select_one(selector) is not None

    async def query_all(self, selector: str, root: Any | None = None) -> list[Tag]:
        scope = root if root is not None else self._soup
        return scope.select(selector)

    async def query_one(self, selector: str, root: Any | None = None) -> Tag | None:
        scope = root if root is not None else self._soup
        return scope.select_one(selector)

    async def read_text(self, node: Tag) -> str | None:
        return clean_text(node.get_text())

    async def read_attribute(self, node: Tag, name: str) -> str | None:
        value = node.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    async def click(self, node: Tag) -> None:
        self.clicked.append(node)
        href = node.get("href")
        if isinstance(href, str) and href in self._pages:
            self.visited.append(href)
            self._load(href)

    async def screenshot(self, path: str, full_page: bool = True) -> bool:
        logger.warning("Static snapshot cannot be rendered, no screenshot written", path=path)
        return False

    async def page_title(self) -> str:
        if self._soup.title is None:
            return ""
        return self._soup.title.get_text().strip()

    async def content(self) -> str:
        return str(self._soup)

    async def close(self) -> None:
        self.closed = True
