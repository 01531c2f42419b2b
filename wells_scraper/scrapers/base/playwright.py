"""Playwright implementation of the browser capability and base scraper."""

from typing import List, Optional

from pydantic import BaseModel, PrivateAttr
from playwright.async_api import BrowserContext, ElementHandle, Page, Route
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from abc import ABC

from wells_scraper.configs.settings import app_config
from wells_scraper.scrapers.base.browser import BrowserCapability, BrowserContextError, BrowserTimeoutError


class PlaywrightBrowser(BrowserCapability):
    """Browser capability backed by one Playwright ``BrowserContext``.

    The primary page shows the search results. At most one secondary page
    (a detail page) is open at a time; while it is, every query targets it.

    Parameters
    ----------
    context : BrowserContext
        Context used to open secondary pages.
    page : Page
        Primary page.
    wait_timeout_ms : int, default=30000
        Default timeout of ``wait_for`` and ``wait_until``.
    poll_interval_ms : int, default=250
        Polling interval of ``wait_until``.
    """

    def __init__(
        self,
        context: BrowserContext,
        page: Page,
        wait_timeout_ms: int = 30_000,
        poll_interval_ms: int = 250,
    ) -> None:
        super().__init__(wait_timeout_ms=wait_timeout_ms, poll_interval_ms=poll_interval_ms)
        self._context = context
        self._primary = page
        self._secondary: Optional[Page] = None

    @property
    def page(self) -> Page:
        """The active page."""
        return self._secondary or self._primary

    async def navigate(self, url: str) -> None:
        await self.page.goto(url, wait_until="domcontentloaded")

    async def find(self, selector: str, within: Optional[ElementHandle] = None) -> Optional[ElementHandle]:
        root = within if within is not None else self.page
        return await root.query_selector(selector)

    async def find_all(self, selector: str, within: Optional[ElementHandle] = None) -> List[ElementHandle]:
        root = within if within is not None else self.page
        return await root.query_selector_all(selector)

    async def wait_for(self, selector: str, timeout_ms: Optional[int] = None) -> ElementHandle:
        """Wait for ``selector`` to be attached to the active page and return it.

        Raises
        ------
        BrowserTimeoutError
            If Playwright gives up waiting for the element.
        """
        timeout = self._wait_timeout_ms if timeout_ms is None else timeout_ms
        try:
            element = await self.page.wait_for_selector(selector, state="attached", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise BrowserTimeoutError(f"Timed out after {timeout} ms waiting for element {selector!r}") from e
        if element is None:
            raise BrowserTimeoutError(f"Element {selector!r} was detached while waiting for it")
        return element

    async def click(self, element: ElementHandle) -> None:
        await element.click()

    async def read_text(self, element: ElementHandle) -> str:
        return await element.inner_text()

    async def read_attribute(self, element: ElementHandle, name: str) -> Optional[str]:
        return await element.get_attribute(name)

    async def select_option(self, element: ElementHandle, value: str) -> None:
        await element.select_option(label=value)

    async def fill(self, element: ElementHandle, value: str) -> None:
        await element.fill(value)

    async def open_context(self, url: str) -> None:
        if self._secondary is not None:
            raise BrowserContextError("A secondary browsing context is already open")
        page = await self._context.new_page()
        try:
            await page.goto(url, wait_until="domcontentloaded")
        except Exception:
            await page.close()
            raise
        self._secondary = page

    async def close_context(self) -> None:
        if self._secondary is None:
            return
        page, self._secondary = self._secondary, None
        await page.close()

    async def current_url(self) -> str:
        return self.page.url


class PlaywrightBaseScraper(ABC, BaseModel):
    """Base class for Playwright scrapers."""

    _headless: bool = PrivateAttr(default_factory=lambda: app_config.HEADLESS)
    _base_url: str = PrivateAttr(...)

    @property
    def headless(self) -> bool:
        return self._headless

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_headless(self, value: bool) -> None:
        self._headless = value

    def set_base_url(self, value: str) -> None:
        self._base_url = value

    async def _configure_network_blocking(self, context: BrowserContext) -> None:
        """Block non-essential resources to reduce bandwidth usage.

        Parameters
        ----------
        context : BrowserContext
            The Playwright browser context to configure.

        Notes
        -----
        Blocks resource types: ``image``, ``media``, ``font``, ``stylesheet``.
        Documents, scripts and XHR are kept so the ASP.NET postbacks still work.
        """
        blocked_types = {"image", "media", "font", "stylesheet"}

        async def handler(route: Route):  # type: ignore[no-untyped-def]
            if route.request.resource_type in blocked_types:
                await route.abort()
            else:
                await route.continue_()

        await context.route("**/*", handler)
