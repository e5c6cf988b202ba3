"""
HTML crawler.

Downloads the rendered HTML (and optionally a screenshot) of arbitrary
URLs. crawl_multiple() processes URLs in batches; every URL in a batch
borrows its own page from a PagePool so no page is ever shared between
concurrent units.
"""

from __future__ import annotations

import asyncio
import re
import sys
from pathlib import Path
from typing import Any

from serpharvest.crawler.browser_manager import BrowserManager
from serpharvest.crawler.page import PageCapability
from serpharvest.crawler.page_pool import PagePool
from serpharvest.errors import CrawlError
from serpharvest.utils.config import get_settings
from serpharvest.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

MAX_FILENAME_LENGTH = 100


def generate_filename_from_url(url: str) -> str:
    """
    Derive a filesystem-safe base name from a URL.

    Strips the scheme and a leading ``www.``, drops one trailing slash,
    replaces ``/ ? = &`` with underscores and caps the length at 100.
    """
    filename = re.sub(r"^https?://(www\.)?", "", url)
    filename = re.sub(r"/$", "", filename)
    filename = re.sub(r"[/?=&]", "_", filename)
    return filename[:MAX_FILENAME_LENGTH]


class CrawlResult:
    """Outcome of crawling one URL."""

    def __init__(
        self,
        ok: bool,
        url: str,
        *,
        html_path: Path | None = None,
        screenshot_path: Path | None = None,
        error: str | None = None,
    ):
        self.ok = ok
        self.url = url
        self.html_path = html_path
        self.screenshot_path = screenshot_path
        self.error = error

    @classmethod
    def success(
        cls,
        url: str,
        html_path: Path,
        screenshot_path: Path | None = None,
    ) -> CrawlResult:
        return cls(True, url, html_path=html_path, screenshot_path=screenshot_path)

    @classmethod
    def failure(cls, url: str, error: str) -> CrawlResult:
        return cls(False, url, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "ok": self.ok,
            "url": self.url,
            "html_path": str(self.html_path) if self.html_path else None,
            "screenshot_path": str(self.screenshot_path) if self.screenshot_path else None,
            "error": self.error,
        }


class Crawler:
    """
    Saves the rendered HTML of URLs.

    Example:
        async with Crawler() as crawler:
            path = await crawler.crawl("https://example.com/", "out")

    Args:
        headless: Run without a visible window. Uses settings if None.
        slow_mo_ms: Delay between browser operations.
        browser_manager: Session manager to use. A new one is created if None.
    """

    def __init__(
        self,
        headless: bool | None = None,
        slow_mo_ms: int = 0,
        browser_manager: BrowserManager | None = None,
    ) -> None:
        self._settings = get_settings().crawler
        self._manager = browser_manager or BrowserManager(headless=headless, slow_mo_ms=slow_mo_ms)

    async def _primary_page(self) -> PageCapability:
        if not self._manager.is_initialized:
            await self._manager.initialize()
        return self._manager.get_page()

    async def crawl(
        self,
        url: str,
        output_folder: str | Path,
        *,
        take_screenshot: bool = False,
        wait_for_selector: str | None = None,
        timeout: float | None = None,
        filename: str | None = None,
        page: PageCapability | None = None,
    ) -> Path:
        """
        Crawl one URL and save its HTML.

        Args:
            url: URL to crawl.
            output_folder: Folder for output files, created if missing.
            take_screenshot: Also save ``<filename>.png``.
            wait_for_selector: Selector to wait for before saving; a miss
                is logged and crawling continues.
            timeout: Navigation and wait timeout in seconds.
            filename: Base file name. Derived from the URL if None.
            page: Page to use. The manager's primary page if None.

        Returns:
            Path of the saved HTML file.

        Raises:
            CrawlError: If navigation or saving fails.
        """
        timeout = timeout if timeout is not None else self._settings.timeout
        try:
            if page is None:
                page = await self._primary_page()

            logger.info("Crawling", url=url)
            await page.navigate(url, wait_until="networkidle", timeout=timeout)

            if wait_for_selector:
                if not await page.wait_for_region(wait_for_selector, timeout):
                    logger.warning(
                        "Selector not found, continuing",
                        url=url,
                        selector=wait_for_selector,
                    )

            html = await page.content()

            folder = Path(output_folder)
            folder.mkdir(parents=True, exist_ok=True)
            name = filename or generate_filename_from_url(url)

            html_path = folder / f"{name}.html"
            html_path.write_text(html, encoding="utf-8")
            logger.info("HTML saved", url=url, path=str(html_path))

            if take_screenshot:
                screenshot_path = folder / f"{name}.png"
                if await page.screenshot(str(screenshot_path), full_page=True):
                    logger.info("Screenshot saved", url=url, path=str(screenshot_path))

            return html_path

        except CrawlError:
            raise
        except Exception as e:
            logger.error("Crawl failed", url=url, error=str(e))
            raise CrawlError(url, str(e)) from e

    async def crawl_multiple(
        self,
        urls: list[str],
        output_folder: str | Path,
        *,
        concurrency: int | None = None,
        take_screenshot: bool = False,
        wait_for_selector: str | None = None,
        timeout: float | None = None,
    ) -> list[CrawlResult]:
        """
        Crawl several URLs, ``concurrency`` at a time.

        Each URL in a batch runs on its own page. Failures are captured in
        the returned results instead of aborting the batch.

        Returns:
            One CrawlResult per URL, in input order.
        """
        concurrency = concurrency or self._settings.concurrency
        if not self._manager.is_initialized:
            await self._manager.initialize()

        pool = PagePool(
            self._manager.new_page,
            max_pages=concurrency,
            acquire_timeout=self._settings.acquire_timeout,
        )

        async def crawl_one(url: str) -> CrawlResult:
            try:
                async with pool.page() as page:
                    html_path = await self.crawl(
                        url,
                        output_folder,
                        take_screenshot=take_screenshot,
                        wait_for_selector=wait_for_selector,
                        timeout=timeout,
                        page=page,
                    )
            except CrawlError as e:
                return CrawlResult.failure(url, e.message)
            except Exception as e:
                # Page acquisition failed (factory error or pool timeout)
                logger.error("Page unavailable", url=url, error=str(e))
                return CrawlResult.failure(url, str(e))

            screenshot_path = html_path.with_suffix(".png")
            if not (take_screenshot and screenshot_path.exists()):
                screenshot_path = None
            return CrawlResult.success(url, html_path, screenshot_path)

        results: list[CrawlResult] = []
        try:
            for start in range(0, len(urls), concurrency):
                batch = urls[start : start + concurrency]
                results.extend(await asyncio.gather(*(crawl_one(url) for url in batch)))
        finally:
            await pool.close()

        logger.info(
            "Crawl batch complete",
            total=len(results),
            succeeded=sum(1 for r in results if r.ok),
        )
        return results

    async def close(self) -> None:
        """Close the browser."""
        await self._manager.close()

    async def __aenter__(self) -> Crawler:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


# =============================================================================
# CLI
# =============================================================================


async def _run_crawl(url: str, output_folder: str, take_screenshot: bool) -> Path:
    async with Crawler(headless=True) as crawler:
        return await crawler.crawl(url, output_folder, take_screenshot=take_screenshot)


def cli(argv: list[str] | None = None) -> int:
    """Crawl one URL: ``serpharvest-crawl <url> <output-folder> [--screenshot]``."""
    import argparse

    parser = argparse.ArgumentParser(description="Save the rendered HTML of a URL")
    parser.add_argument("url", help="URL to crawl")
    parser.add_argument("output_folder", help="Folder to save output to")
    parser.add_argument(
        "--screenshot",
        action="store_true",
        help="Also save a full-page screenshot",
    )
    parser.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, ...)")

    args = parser.parse_args(argv)
    configure_logging(log_level=args.log_level)

    try:
        path = asyncio.run(_run_crawl(args.url, args.output_folder, args.screenshot))
    except Exception as e:
        logger.error("Crawling failed", url=args.url, error=str(e))
        return 1

    logger.info("Crawling completed", path=str(path))
    return 0


if __name__ == "__main__":
    sys.exit(cli())
