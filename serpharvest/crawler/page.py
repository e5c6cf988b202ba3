"""
Page capability interface.

Everything above the session layer talks to a rendered document only
through this protocol, so extraction logic runs unchanged against a live
Playwright page or a static HTML snapshot.

Nodes and control handles are opaque to callers: they are whatever the
implementation returns from find_control/query_all and are only ever
passed back into the same capability. All timeouts are in seconds.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PageCapability(Protocol):
    """
    Protocol for a single browser page.

    Example implementation:
        class MyPage:
            async def navigate(self, url, wait_until="load", timeout=30.0):
                ...

            async def query_all(self, selector, root=None):
                return [...]
    """

    async def navigate(
        self,
        url: str,
        wait_until: str = "load",
        timeout: float = 30.0,
    ) -> None:
        """
        Navigate to a URL.

        Args:
            url: Target URL.
            wait_until: Wait policy (load, domcontentloaded, networkidle).
            timeout: Navigation timeout in seconds.
        """
        ...

    async def find_control(self, selector: str) -> Any | None:
        """Return a handle to the first element matching selector, or None."""
        ...

    async def type_text(self, handle: Any, text: str) -> None:
        """Type text into a control handle."""
        ...

    async def press_key(self, key: str) -> None:
        """Press a keyboard key on the page."""
        ...

    async def wait_for_region(self, selector: str, timeout: float) -> bool:
        """
        Wait until an element matching selector is attached.

        Returns:
            True if found within timeout, False on timeout.
        """
        ...

    async def query_all(self, selector: str, root: Any | None = None) -> list[Any]:
        """All nodes matching selector, in document order, under root or the page."""
        ...

    async def query_one(self, selector: str, root: Any | None = None) -> Any | None:
        """First node matching selector under root or the page."""
        ...

    async def read_text(self, node: Any) -> str | None:
        """Trimmed text content of node, None if empty."""
        ...

    async def read_attribute(self, node: Any, name: str) -> str | None:
        """Attribute value of node, None if absent."""
        ...

    async def click(self, node: Any) -> None:
        """Click a node."""
        ...

    async def screenshot(self, path: str, full_page: bool = True) -> bool:
        """Save a PNG screenshot of the page to path. False if nothing was written."""
        ...

    async def page_title(self) -> str:
        """Document title."""
        ...

    async def content(self) -> str:
        """Serialized HTML of the current document."""
        ...

    async def close(self) -> None:
        """Release the page."""
        ...


def clean_text(value: str | None) -> str | None:
    """Strip whitespace; empty strings become None."""
    if value is None:
        return None
    value = value.strip()
    return value or None
