"""Test the New Mexico card records scraper against an in-memory portal."""

from datetime import date

import pytest

from tests.fakes import (
    NM_BASE_URL,
    NM_FULL_DETAIL,
    NM_PDF_URL,
    NM_WELL_FILES_URL,
    FakeBrowser,
    NMResultsPage,
    make_context,
    nm_detail_page,
    nm_row,
)
from wells_scraper.scrapers.base.browser import BrowserTimeoutError
from wells_scraper.scrapers.regions.nm.card_records import (
    CARD_TABLE,
    QUERY_TABLE,
    STATUS_YEAR_SELECT,
    CardRecordsScraper,
)

DETAIL_URL = "https://wwwapps.emnrd.state.nm.us/ocd/ocdpermitting/Data/WellCard.aspx?id=269757"
S3_URI = (
    "s3://bucket/pdocument/well_documents/nm/permit_documents/"
    "30025053060000_07_16_2019_03_01_48_Tubing_269757_20190716.pdf"
)


def _portal(result_pages, details, stuck=()):
    results = NMResultsPage(result_pages, stuck=stuck)
    pages = {NM_BASE_URL: results}
    pages.update({page.url: page for page in details})
    return FakeBrowser(pages), results


@pytest.fixture
def scraper(tmp_path):
    scraper = CardRecordsScraper()
    scraper.set_data_dir(tmp_path)
    return scraper


def test_single_row_writes_query_and_card_records(scraper):
    """The row and its permit card are merged into one card record."""
    browser, _ = _portal([[nm_row("269757", DETAIL_URL)]], [nm_detail_page(DETAIL_URL, NM_FULL_DETAIL)])
    ctx = make_context(browser)

    log = scraper.scrape(status_year=2019, context=ctx)

    assert browser.selected == {
        "ctl00$ctl00$_main$main$ddlPermitType": "All",
        "ctl00$ctl00$_main$main$ddlPermitStatus": "All",
        "ctl00$ctl00$_main$main$ddlStatusYear": "2019",
    }
    assert ctx.record_store.rows(QUERY_TABLE) == [
        {
            "filing_id": "269757",
            "document_type": "Tubing",
            "document_comment": "FASKEN OIL & RANCH LTD[151416]\nDENTON SWD #003\n30-025-05306",
            "document_status": "APPROVED",
            "scan_date": "2019-07-16",
            "well_card_url": DETAIL_URL,
        }
    ]
    assert ctx.record_store.rows(CARD_TABLE) == [
        {
            "permit_id": "269757",
            "scan_date": "2019-07-16",
            "operator_name": "FASKEN OIL & RANCH LTD [151416]",
            "well_name_full": "DENTON SWD #003",
            "location": "M-12-15S-37E",
            "previous_name": "",
            "new_name": "",
            "effective_date": "",
            "location_url": NM_PDF_URL,
            "document_url": S3_URI,
            "scrape_url": DETAIL_URL,
            "well_files_url": NM_WELL_FILES_URL,
        }
    ]
    assert ctx.fetcher.requested == [NM_PDF_URL]
    assert list(ctx.object_store.objects) == [S3_URI[len("s3://bucket/"):]]
    assert (log.total_pages, log.pages_visited) == (1, 1)
    assert (log.query_records, log.enriched_records) == (1, 1)
    assert (log.artifacts_uploaded, log.artifacts_failed) == (1, 0)
    assert (log.start_date, log.end_date) == ("2019-01-01", "2019-12-31")


def test_every_page_is_visited_and_contexts_are_closed(scraper):
    rows = [
        [nm_row("1", "https://x/card?id=1"), nm_row("2", "https://x/card?id=2")],
        [nm_row("3", "https://x/card?id=3")],
        [nm_row("4", "https://x/card?id=4")],
    ]
    details = [nm_detail_page(f"https://x/card?id={i}", NM_FULL_DETAIL[2:]) for i in range(1, 5)]
    browser, results = _portal(rows, details)
    ctx = make_context(browser)
    progress = []

    log = scraper.scrape(status_year=2019, context=ctx, progress_callback=lambda s, f, t: progress.append((s, f, t)))

    assert [r["filing_id"] for r in ctx.record_store.rows(QUERY_TABLE)] == ["1", "2", "3", "4"]
    assert [r["permit_id"] for r in ctx.record_store.rows(CARD_TABLE)] == ["1", "2", "3", "4"]
    assert browser.opened == [f"https://x/card?id={i}" for i in range(1, 5)]
    assert browser.closed == 4
    assert browser.secondary is None
    assert results.current == 3
    assert log.pages_visited == 3
    assert progress == [(1, 0, 3)] * 3


def test_missing_card_labels_fall_back_to_the_row(scraper):
    """Permit id and scan date come from the row when the card lacks them."""
    labels = [("Operator:", "ACME"), ("Effective Date:", "3/1/2020")]
    browser, _ = _portal(
        [[nm_row("555", DETAIL_URL, status_date="1/2/2020")]],
        [nm_detail_page(DETAIL_URL, labels, document_url=None, well_files_button=False)],
    )
    ctx = make_context(browser)

    log = scraper.scrape(status_year=2020, context=ctx)

    card = ctx.record_store.rows(CARD_TABLE)[0]
    assert card["permit_id"] == "555"
    assert card["scan_date"] == "2020-01-02"
    assert card["effective_date"] == "2020-03-01"
    assert card["well_name_full"] == ""
    assert card["location_url"] == ""
    assert card["document_url"] == ""
    assert card["well_files_url"] == ""
    assert ctx.fetcher.requested == []
    assert log.artifacts_uploaded == log.artifacts_failed == 0


def test_labels_of_nested_tables_are_ignored(scraper):
    """A ``Permit:`` row inside a nested layout table is not a card label."""
    browser, _ = _portal([[nm_row("269757", DETAIL_URL)]], [nm_detail_page(DETAIL_URL, NM_FULL_DETAIL[1:])])
    ctx = make_context(browser)

    scraper.scrape(status_year=2019, context=ctx)

    assert ctx.record_store.rows(CARD_TABLE)[0]["permit_id"] == "269757"


def test_non_pdf_document_is_not_fetched(scraper):
    browser, _ = _portal(
        [[nm_row("269757", DETAIL_URL)]],
        [nm_detail_page(DETAIL_URL, NM_FULL_DETAIL, document_url="http://host/WellFileView.aspx?RefID=1")],
    )
    ctx = make_context(browser)

    scraper.scrape(status_year=2019, context=ctx)

    card = ctx.record_store.rows(CARD_TABLE)[0]
    assert card["location_url"] == "http://host/WellFileView.aspx?RefID=1"
    assert card["document_url"] == ""
    assert ctx.fetcher.requested == []


def test_upload_failure_still_stores_the_card(scraper):
    browser, _ = _portal([[nm_row("269757", DETAIL_URL)]], [nm_detail_page(DETAIL_URL, NM_FULL_DETAIL)])
    ctx = make_context(browser, upload_fails=True)

    log = scraper.scrape(status_year=2019, context=ctx)

    card = ctx.record_store.rows(CARD_TABLE)[0]
    assert card["document_url"] == S3_URI
    assert ctx.object_store.objects == {}
    assert (log.artifacts_uploaded, log.artifacts_failed) == (0, 1)


def test_download_failure_aborts_after_the_query_record(scraper):
    """The query record of the failing row is kept; its card record is not."""
    browser, _ = _portal(
        [[nm_row("1", DETAIL_URL), nm_row("2", "https://x/card?id=2")]],
        [nm_detail_page(DETAIL_URL, NM_FULL_DETAIL), nm_detail_page("https://x/card?id=2", NM_FULL_DETAIL)],
    )
    ctx = make_context(browser, download_fails=True)
    progress = []

    with pytest.raises(OSError):
        scraper.scrape(status_year=2019, context=ctx, progress_callback=lambda s, f, t: progress.append((s, f, t)))

    assert [r["filing_id"] for r in ctx.record_store.rows(QUERY_TABLE)] == ["1"]
    assert ctx.record_store.rows(CARD_TABLE) == []
    assert browser.closed == 1
    assert browser.secondary is None
    assert progress == [(0, 1, 1)]


def test_row_without_card_link_is_an_error(scraper):
    row = nm_row("9", "")
    browser, _ = _portal([[row]], [])
    ctx = make_context(browser)

    with pytest.raises(LookupError, match="'9'"):
        scraper.scrape(status_year=2019, context=ctx)

    assert [r["filing_id"] for r in ctx.record_store.rows(QUERY_TABLE)] == ["9"]
    assert browser.opened == []


def test_page_that_never_becomes_active_times_out(scraper):
    browser, _ = _portal([[nm_row("1", DETAIL_URL)], [nm_row("2", DETAIL_URL)]], [nm_detail_page(DETAIL_URL, [])], stuck=[2])
    ctx = make_context(browser)

    with pytest.raises(BrowserTimeoutError, match="page 2"):
        scraper.scrape(status_year=2019, context=ctx)

    assert len(ctx.record_store.rows(QUERY_TABLE)) == 1


def test_run_log_is_persisted(scraper, tmp_path):
    browser, _ = _portal([[nm_row("269757", DETAIL_URL)]], [nm_detail_page(DETAIL_URL, NM_FULL_DETAIL)])

    scraper.scrape(status_year=2019, context=make_context(browser))

    path = tmp_path / "runs" / "nm" / "card_records" / "2019-01-01_2019-12-31.json"
    assert path.exists()
    assert '"enriched_records": 1' in path.read_text(encoding="utf-8")


def test_status_year_defaults_to_current_year(scraper):
    browser, _ = _portal([[]], [])

    log = scraper.scrape(context=make_context(browser))

    assert browser.selected[STATUS_YEAR_SELECT.split('"')[1]] == str(date.today().year)
    assert log.start_date == f"{date.today().year}-01-01"
    assert log.query_records == 0
