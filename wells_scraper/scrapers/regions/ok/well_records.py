"""Oklahoma (OCC) well records scraper.

This module drives the Oklahoma Corporation Commission imaging search for
oil & gas well records scanned within a date range. The results grid only
shows ten page links at a time; the trailing ``...`` link reveals the next
ten. Every row is stored as a ``WellRecord`` and its scanned PDF is copied
to S3.

Unlike the New Mexico scraper, a PDF that cannot be downloaded does not stop
the run: the failure is logged and the next row is processed.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional
from urllib.parse import urljoin
import logging

from pydantic import BaseModel, Field, PrivateAttr

from wells_scraper.scrapers.base.artifacts import ArtifactHandler, is_pdf_link, well_artifact_filename
from wells_scraper.scrapers.base.browser import TABLE_ROWS, BrowserCapability, Element
from wells_scraper.scrapers.base.context import ScrapeContext
from wells_scraper.scrapers.base.fields import FieldMap, clean_cell, parse_record_date
from wells_scraper.scrapers.base.pagination import visit_windowed_pages
from wells_scraper.scrapers.base.playwright_records_scraper import PlaywrightRecordsBaseScraper
from wells_scraper.scrapers.base.records_scraper import ProgressCallback
from wells_scraper.schemas.records import WellRecord
from wells_scraper.schemas.run_log import RunLog


ROW_FIELDS = FieldMap(
    name="ok_well_row",
    target=WellRecord,
    mapping={
        "ID": "filing_id",
        "Form": "document_type",
        "Legal_Location": "legal_location",
        "API": "api",
        "Well_Name": "well_name",
        "Operator_#": "operator_number",
        "Eff/Test_Date": "effective_date",
        "ScanDate": "scan_date",
    },
)

WELL_TABLE = "oklahoma_well_records"

SCAN_DATE_FROM_INPUT = 'input[name="txtScanDate"]'
SCAN_DATE_TO_INPUT = 'input[name="txtScanDateTo"]'
SEARCH_BUTTON = '[name="Button1"]'
RESULTS_TABLE = "table#DataGrid1"
PAGES_LABEL = "span#lblPages"
TOTAL_DOCS_LABEL = "span#lblTotalDocs"
MORE_PAGES_TEXT = "..."


class WellRecordsScraper(PlaywrightRecordsBaseScraper):
    """Scraper for Oklahoma OCC well records.

    Private Attributes
    ------------------
    _base_url : str
        URL of the well records search form.
    _bucket_prefix : str
        Key prefix of the re-hosted well record PDFs.
    _window_size : int
        Number of page links the results grid shows at once.

    Examples
    --------
    >>> from datetime import date
    >>> scraper = WellRecordsScraper()
    >>> run_log = scraper.scrape(start_date=date(2019, 7, 8), end_date=date(2019, 7, 9))  # doctest: +SKIP
    """

    _region: str = "ok"
    _source: str = "well_records"
    _base_url: str = "http://imaging.occeweb.com/imaging/OGWellRecords.aspx"
    _bucket_prefix: str = PrivateAttr(default="well_data/WY/scraped")
    _window_size: int = PrivateAttr(default=10)

    # -------- Input schema override --------
    class Inputs(BaseModel):  # type: ignore[valid-type]
        """Inputs for the Oklahoma well records scraper."""

        start_date: date = Field(description="Scan date from (DD/MM/YYYY or YYYY-MM-DD)")
        end_date: date = Field(default_factory=date.today, description="Scan date to (DD/MM/YYYY or YYYY-MM-DD)")
        headless: bool = Field(default=True, description="Do you want to run headless?")

    @classmethod
    def get_input_schema(cls):  # type: ignore[override]
        return cls.Inputs

    async def collect(
        self,
        context: ScrapeContext,
        start_date: date,
        end_date: Optional[date] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RunLog:
        """Search the scan-date range and store every result row.

        Parameters
        ----------
        context : ScrapeContext
            Browser, stores and fetcher of the run.
        start_date : date
            Inclusive first scan date.
        end_date : Optional[date], default=None
            Inclusive last scan date; defaults to today.
        progress_callback : Optional[Callable[[int, int, Optional[int]], None]], default=None
            Called after every results page.

        Returns
        -------
        RunLog
            Counters of the run.
        """
        end_date = end_date or date.today()
        if start_date > end_date:
            raise ValueError("start_date must be on or before end_date")

        browser = context.browser
        artifacts = ArtifactHandler(context.fetcher, context.object_store, context.bucket, self._bucket_prefix)
        log = RunLog(
            region=self._region,
            source=self._source,
            start_date=start_date.strftime("%Y-%m-%d"),
            end_date=end_date.strftime("%Y-%m-%d"),
        )

        try:
            await self._goto_search_page(browser)
            await self._fill_dates(browser, start_date, end_date)
            await self._submit_form(browser)
            await browser.wait_for(RESULTS_TABLE)

            log.total_pages = await self._count_of_pages(browser)
            log.total_documents = await self._count_of_documents(browser)
            logging.info(
                "Oklahoma well records: %s documents on %s pages for %s to %s",
                log.total_documents,
                log.total_pages,
                log.start_date,
                log.end_date,
            )

            async def activate(page_number: int) -> None:
                await self._activate_page(browser, page_number)

            async def advance_window(first_page: int) -> None:
                await self._advance_window(browser, first_page)

            async def on_page(page_number: int) -> None:
                await self._collect_page(context, artifacts, log)
                log.pages_visited += 1
                self.process_progress_callback(progress_callback, 1, 0, log.total_pages)

            await visit_windowed_pages(log.total_pages, activate, advance_window, on_page, self._window_size)
        except Exception as e:
            logging.exception(
                "Oklahoma well records run failed: %s to %s after %s pages:\n%s",
                log.start_date,
                log.end_date,
                log.pages_visited,
                e,
            )
            self.process_progress_callback(progress_callback, 0, 1, log.total_pages or None)
            raise

        log.output_path = self.output_path_for(context, WELL_TABLE)
        self.persist_result(log)
        return log

    # ------------------------
    # Navigation
    # ------------------------
    async def _goto_search_page(self, browser: BrowserCapability) -> None:
        await browser.navigate(self._base_url)

    async def _fill_dates(self, browser: BrowserCapability, start_date: date, end_date: date) -> None:
        await browser.fill(await browser.wait_for(SCAN_DATE_FROM_INPUT), self._format_date(start_date))
        await browser.fill(await browser.wait_for(SCAN_DATE_TO_INPUT), self._format_date(end_date))

    async def _submit_form(self, browser: BrowserCapability) -> None:
        await browser.click(await browser.wait_for(SEARCH_BUTTON))

    @staticmethod
    def _format_date(value: date) -> str:
        return value.strftime("%m/%d/%Y")

    async def _count_of_pages(self, browser: BrowserCapability) -> int:
        label = await browser.wait_for(PAGES_LABEL)
        return int((await browser.read_text(label)).split()[-1])

    async def _count_of_documents(self, browser: BrowserCapability) -> Optional[int]:
        label = await browser.find(TOTAL_DOCS_LABEL)
        if label is None:
            return None
        return int((await browser.read_text(label)).split()[0])

    # ------------------------
    # Pagination
    # ------------------------
    async def _table_rows(self, browser: BrowserCapability) -> List[Element]:
        table = await browser.wait_for(RESULTS_TABLE)
        return await browser.find_all(TABLE_ROWS, within=table)

    async def _pager_links(self, browser: BrowserCapability, text: str) -> List[Element]:
        """Links of the top pager row whose text is ``text``."""
        pager_row = (await self._table_rows(browser))[0]
        links = []
        for link in await browser.find_all("a", within=pager_row):
            if (await browser.read_text(link)).strip() == text:
                links.append(link)
        return links

    async def _page_is_current(self, browser: BrowserCapability, page_number: int) -> bool:
        """The current page number is rendered as plain text, not as a link."""
        pager_row = (await self._table_rows(browser))[0]
        numbers = (await browser.read_text(pager_row)).split()
        if str(page_number) not in numbers:
            return False
        return not await self._pager_links(browser, str(page_number))

    async def _activate_page(self, browser: BrowserCapability, page_number: int) -> None:
        links = await self._pager_links(browser, str(page_number))
        if links:
            await browser.click(links[0])

        async def is_current() -> bool:
            return await self._page_is_current(browser, page_number)

        await browser.wait_until(is_current, description=f"page {page_number} to become current")

    async def _advance_window(self, browser: BrowserCapability, first_page: int) -> None:
        """Click the last ``...`` link and wait for the next window to show."""
        links = await self._pager_links(browser, MORE_PAGES_TEXT)
        if not links:
            raise LookupError(f"No '{MORE_PAGES_TEXT}' link to reach page {first_page}")
        await browser.click(links[-1])

        async def is_current() -> bool:
            return await self._page_is_current(browser, first_page)

        await browser.wait_until(is_current, description=f"page window starting at {first_page}")

    # ------------------------
    # Rows
    # ------------------------
    async def _headers(self, rows: List[Element], browser: BrowserCapability) -> List[str]:
        return [(await browser.read_text(td)).strip() for td in await browser.find_all("td", within=rows[1])]

    async def _well_record(
        self,
        browser: BrowserCapability,
        headers: List[str],
        row: Element,
        artifacts: ArtifactHandler,
        scrape_url: str,
    ) -> WellRecord:
        cells = await browser.find_all("td", within=row)
        texts = [clean_cell(await browser.read_text(td)) for td in cells]
        fields = ROW_FIELDS.apply(zip(headers, texts))
        fields["effective_date"] = parse_record_date(fields.get("effective_date"))
        fields["scan_date"] = parse_record_date(fields.get("scan_date"))

        location_url = ""
        link = await browser.find("a", within=cells[0]) if cells else None
        if link is not None:
            href = await browser.read_attribute(link, "href")
            location_url = urljoin(scrape_url, href) if href else ""
        fields["location_url"] = location_url

        if is_pdf_link(location_url):
            filename = well_artifact_filename(
                fields.get("api", ""), fields.get("document_type", ""), fields.get("filing_id", "")
            )
            fields["document_url"] = artifacts.uri_for(filename)
        fields["scrape_url"] = scrape_url
        return WellRecord(**fields)

    async def _collect_page(self, context: ScrapeContext, artifacts: ArtifactHandler, log: RunLog) -> None:
        browser = context.browser
        scrape_url = await browser.current_url()
        rows = await self._table_rows(browser)
        headers = await self._headers(rows, browser)

        # Row 0 is the pager, row 1 the header, the last row the bottom pager.
        for row in rows[2:-1]:
            record = await self._well_record(browser, headers, row, artifacts, scrape_url)
            await self._store_artifact(artifacts, record, log)
            context.record_store.insert(WELL_TABLE, record.model_dump(mode="json"))
            log.enriched_records += 1

    async def _store_artifact(self, artifacts: ArtifactHandler, record: WellRecord, log: RunLog) -> None:
        """Copy the row's PDF to S3; download and upload failures are both non-fatal."""
        if not is_pdf_link(record.location_url):
            return

        filename = well_artifact_filename(record.api, record.document_type, record.filing_id)
        try:
            data = await artifacts.download(record.location_url)
        except Exception as e:
            logging.warning("Skipping upload of %s, download failed: %s", filename, e)
            log.artifacts_failed += 1
            return

        if artifacts.upload(data, filename):
            log.artifacts_uploaded += 1
        else:
            log.artifacts_failed += 1
