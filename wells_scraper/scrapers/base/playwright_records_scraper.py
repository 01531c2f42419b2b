"""Base class for Playwright records scrapers."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import async_playwright

from wells_scraper.configs.settings import app_config
from wells_scraper.scrapers.base.context import ScrapeContext
from wells_scraper.scrapers.base.playwright import PlaywrightBaseScraper, PlaywrightBrowser
from wells_scraper.scrapers.base.records_scraper import RecordsBaseScraper
from wells_scraper.storage.fetcher import HttpxFetcher
from wells_scraper.storage.object_store import S3ObjectStore
from wells_scraper.storage.record_store import JsonRecordStore


class PlaywrightRecordsBaseScraper(RecordsBaseScraper, PlaywrightBaseScraper):
    """Base class for Playwright records scrapers.

    The default context launches Chromium and wires it to S3, an ``httpx``
    downloader and the JSON record store. Everything is closed when the run
    ends, whether it succeeded or not.
    """

    @asynccontextmanager
    async def open_default_context(self) -> AsyncIterator[ScrapeContext]:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=self._headless)
            fetcher = HttpxFetcher(timeout_s=app_config.DOWNLOAD_TIMEOUT_S)
            try:
                browser_context = await browser.new_context()
                await self._configure_network_blocking(browser_context)
                page = await browser_context.new_page()
                yield ScrapeContext(
                    browser=PlaywrightBrowser(
                        browser_context,
                        page,
                        wait_timeout_ms=app_config.WAIT_TIMEOUT_MS,
                        poll_interval_ms=app_config.POLL_INTERVAL_MS,
                    ),
                    record_store=JsonRecordStore(self._records_dir()),
                    object_store=S3ObjectStore(
                        region_name=app_config.AWS_REGION,
                        endpoint_url=app_config.S3_ENDPOINT_URL,
                    ),
                    fetcher=fetcher,
                    bucket=app_config.S3_BUCKET,
                )
            finally:
                await fetcher.aclose()
                await browser.close()
