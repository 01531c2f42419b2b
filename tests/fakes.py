"""In-memory stand-ins for the browser, stores and fetcher.

``FakeBrowser`` resolves selectors by exact string lookup, so the fake pages
below register their elements under the same selector constants the
scrapers use.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence, Union

from wells_scraper.scrapers.base.browser import TABLE_ROWS, BrowserCapability, BrowserContextError
from wells_scraper.scrapers.base.context import ScrapeContext
from wells_scraper.scrapers.regions.nm import card_records as nm
from wells_scraper.scrapers.regions.ok import well_records as ok
from wells_scraper.storage.fetcher import Fetcher
from wells_scraper.storage.object_store import ObjectStore
from wells_scraper.storage.record_store import RecordStore

Resolver = Union[List["FakeElement"], Callable[[], List["FakeElement"]]]


class FakeElement:
    """DOM element with text, attributes and selector-keyed children."""

    def __init__(
        self,
        text: str = "",
        attrs: Optional[Dict[str, str]] = None,
        children: Optional[Dict[str, Resolver]] = None,
        on_click: Optional[Callable[[], None]] = None,
    ) -> None:
        self.text = text
        self.attrs = dict(attrs or {})
        self.children = dict(children or {})
        self.on_click = on_click

    def query(self, selector: str) -> List["FakeElement"]:
        found = self.children.get(selector, [])
        return list(found() if callable(found) else found)


class FakePage(FakeElement):
    """Top-level document reachable at ``url``."""

    def __init__(self, url: str, children: Optional[Dict[str, Resolver]] = None) -> None:
        super().__init__(children=children)
        self.url = url


class FakeBrowser(BrowserCapability):
    """Browser capability over a dict of ``FakePage`` keyed by URL."""

    def __init__(self, pages: Dict[str, FakePage]) -> None:
        super().__init__(wait_timeout_ms=200, poll_interval_ms=1)
        self.pages = pages
        self.primary: Optional[FakePage] = None
        self.secondary: Optional[FakePage] = None
        self.opened: List[str] = []
        self.closed = 0
        self.clicks: List[FakeElement] = []
        self.filled: Dict[str, str] = {}
        self.selected: Dict[str, str] = {}

    @property
    def active(self) -> FakePage:
        return self.secondary or self.primary

    async def navigate(self, url: str) -> None:
        self.primary = self.pages[url]

    async def find(self, selector: str, within: Optional[FakeElement] = None) -> Optional[FakeElement]:
        found = await self.find_all(selector, within)
        return found[0] if found else None

    async def find_all(self, selector: str, within: Optional[FakeElement] = None) -> List[FakeElement]:
        root = within if within is not None else self.active
        return root.query(selector)

    async def click(self, element: FakeElement) -> None:
        self.clicks.append(element)
        if element.on_click is not None:
            element.on_click()

    async def read_text(self, element: FakeElement) -> str:
        return element.text

    async def read_attribute(self, element: FakeElement, name: str) -> Optional[str]:
        return element.attrs.get(name)

    async def select_option(self, element: FakeElement, value: str) -> None:
        self.selected[element.attrs["name"]] = value

    async def fill(self, element: FakeElement, value: str) -> None:
        self.filled[element.attrs["name"]] = value

    async def open_context(self, url: str) -> None:
        if self.secondary is not None:
            raise BrowserContextError("A secondary browsing context is already open")
        self.secondary = self.pages[url]
        self.opened.append(url)

    async def close_context(self) -> None:
        if self.secondary is not None:
            self.secondary = None
            self.closed += 1

    async def current_url(self) -> str:
        return self.active.url


class FakeRecordStore(RecordStore):
    def __init__(self) -> None:
        self.tables: Dict[str, List[dict]] = {}

    def insert(self, table_name: str, fields) -> str:
        rows = self.tables.setdefault(table_name, [])
        rows.append(dict(fields))
        return str(len(rows))

    def rows(self, table_name: str) -> List[dict]:
        return self.tables.get(table_name, [])


class FakeObjectStore(ObjectStore):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.objects: Dict[str, dict] = {}

    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        if self.fail:
            raise RuntimeError("S3 is unavailable")
        self.objects[key] = {"bucket": bucket, "data": data, "content_type": content_type}


class FakeFetcher(Fetcher):
    def __init__(self, fail: bool = False, body: bytes = b"%PDF-1.4 fake") -> None:
        self.fail = fail
        self.body = body
        self.requested: List[str] = []

    async def get(self, url: str) -> bytes:
        self.requested.append(url)
        if self.fail:
            raise OSError(f"Connection reset while fetching {url}")
        return self.body


def layout_row() -> FakeElement:
    """Row of a table nested inside a cell; only a descendant ``tr`` query sees it."""
    return FakeElement(children={"td": [FakeElement(text="Permit:"), FakeElement(text="999999")]})


def fake_table(rows: List[FakeElement], **children: Resolver) -> FakeElement:
    """Table whose direct rows are ``rows``; ``tr`` also returns a nested layout row."""
    return FakeElement(children={TABLE_ROWS: rows, "tr": rows + [layout_row()], **children})


def make_context(
    browser: BrowserCapability,
    upload_fails: bool = False,
    download_fails: bool = False,
) -> ScrapeContext:
    return ScrapeContext(
        browser=browser,
        record_store=FakeRecordStore(),
        object_store=FakeObjectStore(fail=upload_fails),
        fetcher=FakeFetcher(fail=download_fails),
        bucket="bucket",
    )


# ---------------------------------------------------------------------------
# New Mexico permit status portal
# ---------------------------------------------------------------------------

NM_BASE_URL = "https://wwwapps.emnrd.state.nm.us/ocd/ocdpermitting/OperatorData/PermitStatusParameters.aspx"
NM_HEADERS = ["Id", "Type", "Description", "Status", "Status Date"]
NM_PDF_URL = (
    "http://ocdimage.emnrd.state.nm.us/imaging/filestore/santafe/wf/20190716/"
    "30025053060000_07_16_2019_03_01_48.pdf"
)
NM_WELL_FILES_URL = "http://ocdimage.emnrd.state.nm.us/imaging/WellFileView.aspx?RefType=WF&RefID=30025053060000"


def nm_row(filing_id: str, detail_url: str, document_type: str = "Tubing", status_date: str = "7/16/2019") -> dict:
    return {
        "cells": [
            filing_id,
            document_type,
            "FASKEN OIL & RANCH LTD[151416]\nDENTON SWD #003\n30-025-05306",
            "APPROVED",
            status_date,
        ],
        "detail_url": detail_url,
    }


def nm_detail_page(
    url: str,
    labels: Sequence[tuple],
    document_url: Optional[str] = NM_PDF_URL,
    well_files_button: bool = True,
) -> FakePage:
    rows = [FakeElement(children={"td": [FakeElement(text=label), FakeElement(text=value)]}) for label, value in labels]
    forms = FakeElement(children={"a": [FakeElement(text="C-103", attrs={"href": document_url})] if document_url else []})
    children: Dict[str, Resolver] = {
        "table": [fake_table(rows)],
        "fieldset": [FakeElement(), forms],
    }
    if well_files_button:
        children[nm.WELL_FILE_BUTTON] = [
            FakeElement(attrs={"onclick": f"window.open('{NM_WELL_FILES_URL}');return false;"})
        ]
    return FakePage(url, children)


NM_FULL_DETAIL = [
    ("Permit:", "269757"),
    ("Image Date:", "7/16/2019"),
    ("Operator:", "FASKEN OIL &  RANCH LTD\n[151416]"),
    ("Well Name & Number:", "DENTON SWD #003"),
    ("ULSTR:", "M-12-15S-37E"),
    ("Previous Name:", ""),
    ("New Name:", ""),
    ("Effective Date:", ""),
]


class NMResultsPage(FakePage):
    """Search form and results grid; the grid shows one page of rows at a time.

    ``stuck`` pages never become active when clicked.
    """

    def __init__(self, pages: List[List[dict]], stuck: Sequence[int] = ()) -> None:
        super().__init__(NM_BASE_URL)
        self.result_pages = pages
        self.stuck = set(stuck)
        self.current = 1
        self.submitted = False
        self.children = {
            nm.PERMIT_TYPE_SELECT: [FakeElement(attrs={"name": "ctl00$ctl00$_main$main$ddlPermitType"})],
            nm.PERMIT_STATUS_SELECT: [FakeElement(attrs={"name": "ctl00$ctl00$_main$main$ddlPermitStatus"})],
            nm.STATUS_YEAR_SELECT: [FakeElement(attrs={"name": "ctl00$ctl00$_main$main$ddlStatusYear"})],
            nm.FILTER_BUTTON: [FakeElement(attrs={"name": "ctl00$ctl00$_main$main$btnfilter"}, on_click=self._submit)],
            nm.RESULTS_TABLE: lambda: [self._table()] if self.submitted else [],
            nm.PAGE_COUNT_LABEL: lambda: [FakeElement(text=f"Page {self.current} of {len(self.result_pages)}")],
            nm.PAGINATION_LINKS: self._pagination_links,
        }

    def _submit(self) -> None:
        self.submitted = True

    def _goto(self, number: int) -> None:
        if number not in self.stuck:
            self.current = number

    def _pagination_links(self) -> List[FakeElement]:
        return [
            FakeElement(
                text=str(n),
                attrs={"class": "active" if n == self.current else "", "href": "#"},
                on_click=lambda n=n: self._goto(n),
            )
            for n in range(1, len(self.result_pages) + 1)
        ]

    def _table(self) -> FakeElement:
        header = FakeElement(children={"th": [FakeElement(text=h) for h in NM_HEADERS]})
        rows = [
            FakeElement(
                children={
                    "td": [FakeElement(text=c) for c in row["cells"]],
                    "a": [FakeElement(text=row["cells"][0], attrs={"href": row["detail_url"]})],
                }
            )
            for row in self.result_pages[self.current - 1]
        ]
        pager = FakeElement(children={"td": [FakeElement(text="1 2")]})
        return fake_table([header] + rows + [pager], th=[FakeElement(text=h) for h in NM_HEADERS])


# ---------------------------------------------------------------------------
# Oklahoma well records imaging portal
# ---------------------------------------------------------------------------

OK_BASE_URL = "http://imaging.occeweb.com/imaging/OGWellRecords.aspx"
OK_HEADERS = ["ID", "Form", "Legal_Location", "API", "Well_Name", "Operator_#", "Eff/Test_Date", "ScanDate"]


def ok_row(filing_id: str, pdf_url: Optional[str] = None, scan_date: str = "7/8/2019") -> dict:
    return {
        "cells": [filing_id, "1002C", "0219N12W N2 NW NW NW", "01124028", "MAJOR 19-12-02 1H", " ", "8/5/2018", scan_date],
        "pdf_url": pdf_url or f"http://imaging.occeweb.com/OG/Well%20Records/{filing_id}.pdf",
    }


class OKResultsPage(FakePage):
    """Search form and DataGrid with a windowed pager (``window`` links at a time)."""

    def __init__(self, pages: List[List[dict]], window: int = 10, total_docs: Optional[int] = None) -> None:
        super().__init__(OK_BASE_URL)
        self.result_pages = pages
        self.window = window
        self.current = 1
        self.submitted = False
        self.advances = 0
        self.visited: List[int] = []
        total_docs = sum(len(p) for p in pages) if total_docs is None else total_docs
        self.children = {
            ok.SCAN_DATE_FROM_INPUT: [FakeElement(attrs={"name": "txtScanDate"})],
            ok.SCAN_DATE_TO_INPUT: [FakeElement(attrs={"name": "txtScanDateTo"})],
            ok.SEARCH_BUTTON: [FakeElement(attrs={"name": "Button1"}, on_click=self._submit)],
            ok.RESULTS_TABLE: lambda: [self._table()] if self.submitted else [],
            ok.PAGES_LABEL: lambda: [FakeElement(text=f"Page {self.current} of {len(self.result_pages)}")],
            ok.TOTAL_DOCS_LABEL: [FakeElement(text=f"{total_docs} documents found")],
        }

    @property
    def total(self) -> int:
        return len(self.result_pages)

    def _submit(self) -> None:
        self.submitted = True

    def _goto(self, number: int) -> None:
        self.current = number

    def _advance(self, number: int) -> None:
        self.advances += 1
        self.current = number

    def _pager_row(self) -> FakeElement:
        start = ((self.current - 1) // self.window) * self.window + 1
        end = min(start + self.window - 1, self.total)
        tokens: List[str] = []
        links: List[FakeElement] = []
        if start > 1:
            tokens.append("...")
            links.append(FakeElement(text="...", on_click=lambda: self._goto(start - 1)))
        for n in range(start, end + 1):
            tokens.append(str(n))
            if n != self.current:
                links.append(FakeElement(text=str(n), on_click=lambda n=n: self._goto(n)))
        if end < self.total:
            tokens.append("...")
            links.append(FakeElement(text="...", on_click=lambda: self._advance(end + 1)))
        return FakeElement(text=" ".join(tokens), children={"a": links})

    def _table(self) -> FakeElement:
        if not self.visited or self.visited[-1] != self.current:
            self.visited.append(self.current)
        header = FakeElement(children={"td": [FakeElement(text=h) for h in OK_HEADERS]})
        rows = []
        for row in self.result_pages[self.current - 1]:
            cells = [FakeElement(text=c) for c in row["cells"]]
            cells[0].children["a"] = [FakeElement(text=row["cells"][0], attrs={"href": row["pdf_url"]})]
            rows.append(FakeElement(children={"td": cells}))
        return fake_table([self._pager_row(), header] + rows + [self._pager_row()])
