"""Browser capability used by the scrapers.

The scrapers never talk to Playwright directly. They drive a small async
capability (navigate, query, click, read, wait) so that the page-traversal
and extraction logic can run against any driver, including the in-memory
fake used by the test-suite.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional

Element = Any

# Direct rows of a table element, skipping rows of nested layout tables.
TABLE_ROWS = ":scope > tbody > tr, :scope > tr"

Predicate = Callable[[], Awaitable[bool]]


class BrowserTimeoutError(TimeoutError):
    """Raised when a DOM condition does not hold within the wait timeout."""


class BrowserContextError(RuntimeError):
    """Raised when a secondary browsing context is opened twice."""


class BrowserCapability(ABC):
    """Async browser capability.

    Private Attributes
    ------------------
    _wait_timeout_ms : int
        Default timeout for :meth:`wait_until`.
    _poll_interval_ms : int
        Delay between two evaluations of a predicate.
    """

    def __init__(self, wait_timeout_ms: int = 30_000, poll_interval_ms: int = 250) -> None:
        self._wait_timeout_ms = wait_timeout_ms
        self._poll_interval_ms = poll_interval_ms

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load ``url`` in the active page."""

    @abstractmethod
    async def find(self, selector: str, within: Optional[Element] = None) -> Optional[Element]:
        """Return the first element matching ``selector`` or ``None``."""

    @abstractmethod
    async def find_all(self, selector: str, within: Optional[Element] = None) -> List[Element]:
        """Return every element matching ``selector`` in document order."""

    @abstractmethod
    async def click(self, element: Element) -> None:
        """Click ``element``."""

    @abstractmethod
    async def read_text(self, element: Element) -> str:
        """Return the rendered text of ``element`` (line breaks preserved)."""

    @abstractmethod
    async def read_attribute(self, element: Element, name: str) -> Optional[str]:
        """Return attribute ``name`` of ``element`` or ``None``."""

    @abstractmethod
    async def select_option(self, element: Element, value: str) -> None:
        """Select the option labelled ``value`` in a ``<select>`` element."""

    @abstractmethod
    async def fill(self, element: Element, value: str) -> None:
        """Type ``value`` into an input element."""

    @abstractmethod
    async def open_context(self, url: str) -> None:
        """Open ``url`` in a secondary browsing context and make it active."""

    @abstractmethod
    async def close_context(self) -> None:
        """Close the secondary browsing context, if any, and reactivate the primary one."""

    @abstractmethod
    async def current_url(self) -> str:
        """Return the URL of the active page."""

    async def wait_until(
        self,
        predicate: Predicate,
        timeout_ms: Optional[int] = None,
        description: str = "condition",
    ) -> None:
        """Poll ``predicate`` until it returns ``True``.

        Parameters
        ----------
        predicate : Callable[[], Awaitable[bool]]
            Async callable evaluated against the current DOM.
        timeout_ms : Optional[int], default=None
            Overrides the default wait timeout.
        description : str, default="condition"
            Human-readable condition used in the timeout message.

        Raises
        ------
        BrowserTimeoutError
            If the predicate never held within the timeout.
        """
        timeout = self._wait_timeout_ms if timeout_ms is None else timeout_ms
        deadline = time.monotonic() + timeout / 1000
        while True:
            if await predicate():
                return
            if time.monotonic() >= deadline:
                raise BrowserTimeoutError(f"Timed out after {timeout} ms waiting for {description}")
            await asyncio.sleep(self._poll_interval_ms / 1000)

    async def wait_for(self, selector: str, timeout_ms: Optional[int] = None) -> Element:
        """Wait until ``selector`` matches an element and return it."""
        found: List[Element] = []

        async def exists() -> bool:
            element = await self.find(selector)
            if element is None:
                return False
            found.append(element)
            return True

        await self.wait_until(exists, timeout_ms, description=f"element {selector!r}")
        return found[-1]


@asynccontextmanager
async def detail_context(browser: BrowserCapability, url: str) -> AsyncIterator[BrowserCapability]:
    """Open ``url`` in a secondary context and always close it on exit.

    Examples
    --------
    >>> async with detail_context(browser, "https://example.org/detail") as page:  # doctest: +SKIP
    ...     await page.wait_for("fieldset")
    """
    await browser.open_context(url)
    try:
        yield browser
    finally:
        await browser.close_context()
