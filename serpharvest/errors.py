"""
Error definitions for serpharvest.

Errors fall into three classes:
- Fatal: abort the run and propagate to the caller (SEARCH_INPUT_NOT_FOUND,
  UNSUPPORTED_FORMAT, BROWSER_NOT_INITIALIZED)
- Degraded: logged where they happen, the run continues (region timeouts,
  follow-up failures, a single output format failing to write)
- Silent-empty: a region found with zero matching nodes is not an error
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes carried by SerpHarvestError."""

    SEARCH_INPUT_NOT_FOUND = "SEARCH_INPUT_NOT_FOUND"
    """No search input control matched any fallback selector."""

    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    """Requested output format is not one of json, text, csv, html."""

    BROWSER_NOT_INITIALIZED = "BROWSER_NOT_INITIALIZED"
    """A page was requested before the browser was launched."""

    FOLLOW_UP_ALREADY_RECORDED = "FOLLOW_UP_ALREADY_RECORDED"
    """An organic result already carries a follow-up outcome."""

    CRAWL_FAILED = "CRAWL_FAILED"
    """A crawl of a single URL failed."""


class SerpHarvestError(Exception):
    """Base exception for serpharvest errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a serializable dict."""
        result: dict[str, Any] = {
            "ok": False,
            "error_code": self.code.value,
            "error": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class SearchInputNotFoundError(SerpHarvestError):
    """Raised when no search input selector yields a control."""

    def __init__(self, selectors: list[str]):
        super().__init__(
            ErrorCode.SEARCH_INPUT_NOT_FOUND,
            "Could not find search input",
            details={"tried_selectors": list(selectors)},
        )
        self.selectors = list(selectors)


class UnsupportedFormatError(SerpHarvestError):
    """Raised when an unknown output format is requested."""

    def __init__(self, format: str):
        super().__init__(
            ErrorCode.UNSUPPORTED_FORMAT,
            f"Unsupported format: {format}",
            details={"format": format},
        )
        self.format = format

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnsupportedFormatError):
            return NotImplemented
        return self.format == other.format

    def __hash__(self) -> int:
        return hash((self.code, self.format))


class BrowserNotInitializedError(SerpHarvestError):
    """Raised when the browser is used before initialize()."""

    def __init__(self) -> None:
        super().__init__(
            ErrorCode.BROWSER_NOT_INITIALIZED,
            "Browser not initialized. Call initialize() first.",
        )


class FollowUpAlreadyRecordedError(SerpHarvestError):
    """Raised when a follow-up outcome is recorded twice on one entry."""

    def __init__(self, position: int):
        super().__init__(
            ErrorCode.FOLLOW_UP_ALREADY_RECORDED,
            f"Follow-up already recorded for result #{position}",
            details={"position": position},
        )


class CrawlError(SerpHarvestError):
    """Raised when a single URL cannot be crawled."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            ErrorCode.CRAWL_FAILED,
            f"Failed to crawl {url}: {reason}",
            details={"url": url, "reason": reason},
        )
        self.url = url
