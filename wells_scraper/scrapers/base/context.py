"""Collaborators shared by every stage of a scraper run."""

from pydantic import BaseModel, ConfigDict

from wells_scraper.scrapers.base.browser import BrowserCapability
from wells_scraper.storage.fetcher import Fetcher
from wells_scraper.storage.object_store import ObjectStore
from wells_scraper.storage.record_store import RecordStore


class ScrapeContext(BaseModel):
    """Handles owned by a single run and passed into each pipeline stage.

    Parameters
    ----------
    browser : BrowserCapability
        Driver of the portal pages.
    record_store : RecordStore
        Destination of query/card/well records.
    object_store : ObjectStore
        Destination of the re-hosted PDFs.
    fetcher : Fetcher
        Downloader of the source PDFs.
    bucket : str
        Bucket receiving the PDFs.
    """

    browser: BrowserCapability
    record_store: RecordStore
    object_store: ObjectStore
    fetcher: Fetcher
    bucket: str = "bucket"

    model_config = ConfigDict(arbitrary_types_allowed=True)
