"""Scraper runner with a page progress bar."""

from __future__ import annotations

from typing import Optional
import logging

from pydantic import BaseModel
from tqdm import tqdm

from wells_scraper.scrapers.base.playwright import PlaywrightBaseScraper
from wells_scraper.scrapers.base.records_scraper import RecordsBaseScraper
from wells_scraper.schemas.run_log import RunLog
from wells_scraper.ui.utils import BOLD, GREEN, RED, RESET


def run_scraper(scraper: RecordsBaseScraper, inputs: BaseModel) -> Optional[RunLog]:
    """Run ``scraper`` with ``inputs`` and report progress page by page.

    Parameters
    ----------
    scraper : RecordsBaseScraper
        Scraper returned by the registry.
    inputs : BaseModel
        Instance of the scraper's input schema.

    Returns
    -------
    Optional[RunLog]
        The run summary, or ``None`` when the run failed.
    """
    headless = getattr(inputs, "headless", None)
    if headless is False and isinstance(scraper, PlaywrightBaseScraper):
        scraper.set_headless(False)

    bar = tqdm(total=0, desc=f"{scraper.region}/{scraper.source} pages", leave=True)
    succeeded = 0
    failed = 0

    def on_progress(success_inc: int, failed_inc: int, total: Optional[int] = None) -> None:
        nonlocal succeeded, failed
        succeeded += success_inc
        failed += failed_inc
        if total is not None and bar.total != total:
            bar.total = total
            bar.refresh()
        bar.update(success_inc + failed_inc)
        bar.set_postfix(success=succeeded, failed=failed)

    try:
        result = scraper.scrape_with_inputs(inputs, progress_callback=on_progress)
    except Exception as e:
        logging.exception("Scraper run failed: %s/%s", scraper.region, scraper.source)
        print(f"\n{RED}Scrape failed after {succeeded} pages: {e}{RESET}")
        return None
    finally:
        bar.close()

    print(
        f"\n{GREEN}Pages scraped: {result.pages_visited}/{result.total_pages}{RESET} | "
        f"Records: {BOLD}{result.query_records + result.enriched_records}{RESET} | "
        f"PDFs uploaded: {result.artifacts_uploaded} | {RED}PDFs failed: {result.artifacts_failed}{RESET}"
    )
    if result.output_path:
        print(f"Records written to: {BOLD}{result.output_path}{RESET}")
    return result
