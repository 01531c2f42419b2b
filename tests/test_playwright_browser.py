"""Test the Playwright browser adapter with a mocked page."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from wells_scraper.scrapers.base.browser import BrowserContextError, BrowserTimeoutError
from wells_scraper.scrapers.base.playwright import PlaywrightBrowser


def _browser(page, wait_timeout_ms=30_000):
    return PlaywrightBrowser(MagicMock(), page, wait_timeout_ms=wait_timeout_ms)


def test_wait_for_uses_wait_for_selector():
    """Element waits are delegated to Playwright with the configured timeout."""
    handle = object()
    page = MagicMock()
    page.wait_for_selector = AsyncMock(return_value=handle)

    element = asyncio.run(_browser(page, wait_timeout_ms=1234).wait_for("table#DataGrid1"))

    assert element is handle
    page.wait_for_selector.assert_awaited_once_with("table#DataGrid1", state="attached", timeout=1234)


def test_wait_for_timeout_override():
    page = MagicMock()
    page.wait_for_selector = AsyncMock(return_value=object())

    asyncio.run(_browser(page).wait_for("fieldset", timeout_ms=50))

    page.wait_for_selector.assert_awaited_once_with("fieldset", state="attached", timeout=50)


def test_wait_for_translates_playwright_timeout():
    page = MagicMock()
    page.wait_for_selector = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 30000ms exceeded."))

    with pytest.raises(BrowserTimeoutError, match="span#lblPages"):
        asyncio.run(_browser(page).wait_for("span#lblPages"))


def test_wait_for_targets_the_secondary_page():
    primary = MagicMock()
    primary.wait_for_selector = AsyncMock()
    secondary = MagicMock()
    secondary.goto = AsyncMock()
    secondary.wait_for_selector = AsyncMock(return_value=object())
    context = MagicMock()
    context.new_page = AsyncMock(return_value=secondary)
    browser = PlaywrightBrowser(context, primary)

    async def visit():
        await browser.open_context("https://x/card?id=1")
        await browser.wait_for("fieldset")

    asyncio.run(visit())

    secondary.wait_for_selector.assert_awaited_once()
    primary.wait_for_selector.assert_not_awaited()


def test_second_secondary_page_is_rejected():
    secondary = MagicMock()
    secondary.goto = AsyncMock()
    context = MagicMock()
    context.new_page = AsyncMock(return_value=secondary)
    browser = PlaywrightBrowser(context, MagicMock())

    async def visit():
        await browser.open_context("https://x/card?id=1")
        await browser.open_context("https://x/card?id=2")

    with pytest.raises(BrowserContextError):
        asyncio.run(visit())
    context.new_page.assert_awaited_once()
