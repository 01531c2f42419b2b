"""New Mexico (OCD) permit card records scraper.

This module drives the OCD "Permit Status" search of the New Mexico Energy,
Minerals and Natural Resources Department:

- selects every permit type and status for the status year and submits,
- walks the numbered pager of the results grid one page at a time,
- writes each result row as a ``QueryRecord``,
- opens the row's permit card in a secondary page, merges its label/value
  table with the row and re-hosts the linked PDF in S3,
- writes the merged ``CardRecord``.

A failed PDF download aborts the run: the row's ``QueryRecord`` is already
stored, its ``CardRecord`` is not. A failed upload is logged and the
``CardRecord`` is stored anyway.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin
import logging
import re

from pydantic import BaseModel, Field, PrivateAttr

from wells_scraper.scrapers.base.artifacts import ArtifactHandler, artifact_filename, is_pdf_link
from wells_scraper.scrapers.base.browser import TABLE_ROWS, BrowserCapability, Element, detail_context
from wells_scraper.scrapers.base.context import ScrapeContext
from wells_scraper.scrapers.base.fields import FieldMap, clean_cell, parse_record_date, squish
from wells_scraper.scrapers.base.pagination import visit_numbered_pages
from wells_scraper.scrapers.base.playwright_records_scraper import PlaywrightRecordsBaseScraper
from wells_scraper.scrapers.base.records_scraper import ProgressCallback
from wells_scraper.schemas.records import CardRecord, QueryRecord
from wells_scraper.schemas.run_log import RunLog


ROW_FIELDS = FieldMap(
    name="nm_query_row",
    target=QueryRecord,
    mapping={
        "Id": "filing_id",
        "Type": "document_type",
        "Description": "document_comment",
        "Status": "document_status",
        "Status Date": "scan_date",
    },
)

DETAIL_FIELDS = FieldMap(
    name="nm_card_detail",
    target=CardRecord,
    mapping={
        "Permit:": "permit_id",
        "Image Date:": "scan_date",
        "Operator:": "operator_name",
        "Current Operator:": "operator_name",
        "Well Name & Number:": "well_name_full",
        "Well Name and Number:": "well_name_full",
        "Well Info:": "well_name_full",
        "ULSTR:": "location",
        "Previous Name:": "previous_name",
        "New Name:": "new_name",
        "New Operator:": "new_name",
        "Effective Date:": "effective_date",
    },
)

QUERY_TABLE = "new_mexico_query_records"
CARD_TABLE = "new_mexico_card_records"

PERMIT_TYPE_SELECT = 'select[name="ctl00$ctl00$_main$main$ddlPermitType"]'
PERMIT_STATUS_SELECT = 'select[name="ctl00$ctl00$_main$main$ddlPermitStatus"]'
STATUS_YEAR_SELECT = 'select[name="ctl00$ctl00$_main$main$ddlStatusYear"]'
FILTER_BUTTON = '[name="ctl00$ctl00$_main$main$btnfilter"]'
RESULTS_TABLE = "table#ctl00_ctl00__main_main_gvResults"
PAGE_COUNT_LABEL = "span#ctl00_ctl00__main_main_pager_lblPageCount"
PAGINATION_LINKS = "ul.pagination a"
WELL_FILE_BUTTON = '[name="ctl00$ctl00$_main$main$btnWellFile"]'


class CardRecordsScraper(PlaywrightRecordsBaseScraper):
    """Scraper for New Mexico OCD permit card records.

    Private Attributes
    ------------------
    _headless : bool
        Whether the browser runs in headless mode. Defaults to ``True``.
    _base_url : str
        URL of the permit status search form.
    _bucket_prefix : str
        Key prefix of the re-hosted permit PDFs.

    Examples
    --------
    >>> scraper = CardRecordsScraper()
    >>> run_log = scraper.scrape()  # doctest: +SKIP
    >>> run_log.pages_visited > 0  # doctest: +SKIP
    True
    """

    _region: str = "nm"
    _source: str = "card_records"
    _base_url: str = "https://wwwapps.emnrd.state.nm.us/ocd/ocdpermitting/OperatorData/PermitStatusParameters.aspx"
    _bucket_prefix: str = PrivateAttr(default="pdocument/well_documents/nm/permit_documents/")

    # -------- Input schema override --------
    class Inputs(BaseModel):  # type: ignore[valid-type]
        """Inputs for the New Mexico card records scraper."""

        status_year: Optional[int] = Field(default=None, description="Status year (blank keeps the current year)")
        headless: bool = Field(default=True, description="Do you want to run headless?")

    @classmethod
    def get_input_schema(cls):  # type: ignore[override]
        return cls.Inputs

    async def collect(
        self,
        context: ScrapeContext,
        status_year: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RunLog:
        """Search the status year and store every result row with its permit card.

        Parameters
        ----------
        context : ScrapeContext
            Browser, stores and fetcher of the run.
        status_year : Optional[int], default=None
            Status year filter; defaults to the current year.
        progress_callback : Optional[Callable[[int, int, Optional[int]], None]], default=None
            Called after every results page.

        Returns
        -------
        RunLog
            Counters of the run.
        """
        browser = context.browser
        year = status_year or date.today().year
        artifacts = ArtifactHandler(context.fetcher, context.object_store, context.bucket, self._bucket_prefix)
        log = RunLog(
            region=self._region,
            source=self._source,
            start_date=f"{year}-01-01",
            end_date=f"{year}-12-31",
        )

        try:
            await self._goto_search_page(browser)
            await self._fill_form(browser, year)
            await self._submit_form(browser)
            await browser.wait_for(RESULTS_TABLE)

            log.total_pages = await self._count_of_pages(browser)
            logging.info("New Mexico card records: %s result pages for %s", log.total_pages, year)

            async def activate(page_number: int) -> None:
                await self._activate_page(browser, page_number)

            async def on_page(page_number: int) -> None:
                await self._collect_page(context, artifacts, log)
                log.pages_visited += 1
                self.process_progress_callback(progress_callback, 1, 0, log.total_pages)

            await visit_numbered_pages(log.total_pages, activate, on_page)
        except Exception as e:
            logging.exception(
                "New Mexico card records run failed after %s of %s pages:\n%s",
                log.pages_visited,
                log.total_pages,
                e,
            )
            self.process_progress_callback(progress_callback, 0, 1, log.total_pages or None)
            raise

        log.output_path = self.output_path_for(context, CARD_TABLE)
        self.persist_result(log)
        return log

    # ------------------------
    # Navigation
    # ------------------------
    async def _goto_search_page(self, browser: BrowserCapability) -> None:
        await browser.navigate(self._base_url)

    async def _fill_form(self, browser: BrowserCapability, year: int) -> None:
        for selector, value in (
            (PERMIT_TYPE_SELECT, "All"),
            (PERMIT_STATUS_SELECT, "All"),
            (STATUS_YEAR_SELECT, str(year)),
        ):
            element = await browser.wait_for(selector)
            await browser.select_option(element, value)

    async def _submit_form(self, browser: BrowserCapability) -> None:
        await browser.click(await browser.wait_for(FILTER_BUTTON))

    async def _count_of_pages(self, browser: BrowserCapability) -> int:
        label = await browser.wait_for(PAGE_COUNT_LABEL)
        return int((await browser.read_text(label)).split()[-1])

    # ------------------------
    # Pagination
    # ------------------------
    async def _page_link(self, browser: BrowserCapability, page_number: int) -> Optional[Element]:
        for link in await browser.find_all(PAGINATION_LINKS):
            if (await browser.read_text(link)).strip() == str(page_number):
                return link
        return None

    async def _is_active(self, browser: BrowserCapability, link: Element) -> bool:
        return "active" in (await browser.read_attribute(link, "class") or "").split()

    async def _page_is_active(self, browser: BrowserCapability, page_number: int) -> bool:
        link = await self._page_link(browser, page_number)
        return link is not None and await self._is_active(browser, link)

    async def _activate_page(self, browser: BrowserCapability, page_number: int) -> None:
        """Click the page link unless it is already active, then wait until it is."""

        async def link_exists() -> bool:
            return await self._page_link(browser, page_number) is not None

        await browser.wait_until(link_exists, description=f"pagination link {page_number}")
        link = await self._page_link(browser, page_number)
        if not await self._is_active(browser, link):
            await browser.click(link)

        async def is_active() -> bool:
            return await self._page_is_active(browser, page_number)

        await browser.wait_until(is_active, description=f"page {page_number} to become active")

    # ------------------------
    # Rows
    # ------------------------
    async def _headers(self, browser: BrowserCapability) -> List[str]:
        table = await browser.wait_for(RESULTS_TABLE)
        return [(await browser.read_text(th)).strip() for th in await browser.find_all("th", within=table)]

    async def _rows(self, browser: BrowserCapability) -> List[Element]:
        """Data rows of the results grid (header row and pager row removed)."""
        table = await browser.wait_for(RESULTS_TABLE)
        return (await browser.find_all(TABLE_ROWS, within=table))[1:-1]

    async def _cells_text_of_row(self, browser: BrowserCapability, row: Element) -> List[str]:
        return [clean_cell(await browser.read_text(td)) for td in await browser.find_all("td", within=row)]

    async def _absolute_href(self, browser: BrowserCapability, link: Optional[Element]) -> str:
        if link is None:
            return ""
        href = await browser.read_attribute(link, "href")
        if not href:
            return ""
        return urljoin(await browser.current_url(), href)

    async def _query_record(self, browser: BrowserCapability, headers: List[str], row: Element) -> QueryRecord:
        fields = ROW_FIELDS.apply(zip(headers, await self._cells_text_of_row(browser, row)))
        fields["scan_date"] = parse_record_date(fields.get("scan_date"))
        fields["well_card_url"] = await self._absolute_href(browser, await browser.find("a", within=row))
        return QueryRecord(**fields)

    async def _collect_page(self, context: ScrapeContext, artifacts: ArtifactHandler, log: RunLog) -> None:
        browser = context.browser
        headers = await self._headers(browser)
        for row in await self._rows(browser):
            query = await self._query_record(browser, headers, row)
            context.record_store.insert(QUERY_TABLE, query.model_dump(mode="json"))
            log.query_records += 1

            if not query.well_card_url:
                raise LookupError(f"Result row {query.filing_id!r} has no permit card link")

            async with detail_context(browser, query.well_card_url):
                card = await self._card_record(browser, query)
                card = await self._store_artifact(artifacts, query, card, log)
                context.record_store.insert(CARD_TABLE, card.model_dump(mode="json"))
                log.enriched_records += 1

    # ------------------------
    # Permit card
    # ------------------------
    async def _detail_pairs(self, browser: BrowserCapability) -> List[Tuple[str, str]]:
        """Label/value pairs of the first table of the permit card."""
        table = await browser.find("table")
        if table is None:
            return []
        pairs: List[Tuple[str, str]] = []
        for row in await browser.find_all(TABLE_ROWS, within=table):
            cells = [squish(await browser.read_text(td)) for td in await browser.find_all("td", within=row)]
            for i in range(0, len(cells) - 1, 2):
                pairs.append((cells[i], cells[i + 1]))
        return pairs

    async def _location_url(self, browser: BrowserCapability) -> str:
        """URL of the first document listed in the last fieldset (Forms)."""
        fieldsets = await browser.find_all("fieldset")
        if not fieldsets:
            return ""
        return await self._absolute_href(browser, await browser.find("a", within=fieldsets[-1]))

    async def _well_files_url(self, browser: BrowserCapability) -> str:
        button = await browser.find(WELL_FILE_BUTTON)
        if button is None:
            return ""
        match = re.search(r"'(.*)'", await browser.read_attribute(button, "onclick") or "")
        return match.group(1) if match else ""

    async def _card_record(self, browser: BrowserCapability, query: QueryRecord) -> CardRecord:
        """Read the permit card and merge it with its result row.

        ``permit_id`` and ``scan_date`` fall back to the row when the card
        lacks the label; every other missing label becomes ``""``.
        """
        await browser.wait_for("fieldset")
        detail: Dict[str, str] = DETAIL_FIELDS.apply(await self._detail_pairs(browser))

        fields: Dict[str, object] = {key: detail.get(key, "") for key in DETAIL_FIELDS.canonical_fields}
        fields["permit_id"] = detail.get("permit_id", query.filing_id)
        fields["scan_date"] = parse_record_date(detail["scan_date"]) if "scan_date" in detail else query.scan_date
        fields["effective_date"] = parse_record_date(detail.get("effective_date"))
        fields["location_url"] = await self._location_url(browser)
        fields["scrape_url"] = await browser.current_url()
        fields["well_files_url"] = await self._well_files_url(browser)
        return CardRecord(**fields)

    async def _store_artifact(
        self,
        artifacts: ArtifactHandler,
        query: QueryRecord,
        card: CardRecord,
        log: RunLog,
    ) -> CardRecord:
        """Re-host the card's PDF; download errors propagate, upload errors do not."""
        if not is_pdf_link(card.location_url):
            return card

        filename = artifact_filename(
            file_url=card.location_url,
            document_type=query.document_type,
            permit_id=card.permit_id,
            filing_date=query.scan_date,
        )
        card = card.model_copy(update={"document_url": artifacts.uri_for(filename)})

        data = await artifacts.download(card.location_url)
        if artifacts.upload(data, filename):
            log.artifacts_uploaded += 1
        else:
            log.artifacts_failed += 1
        return card
