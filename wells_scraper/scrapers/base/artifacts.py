"""PDF artifacts: naming, download and upload to object storage.

Downloads and uploads fail differently on purpose. :meth:`ArtifactHandler.download`
logs and re-raises so each scraper decides whether a missing source document
stops the run. :meth:`ArtifactHandler.upload` logs and reports ``False``
instead of raising, so the already extracted record is still persisted.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Union
from urllib.parse import urlparse

from wells_scraper.scrapers.base.fields import format_filing_date
from wells_scraper.storage.fetcher import Fetcher
from wells_scraper.storage.object_store import ObjectStore

PDF_CONTENT_TYPE = "application/pdf"


def is_pdf_link(url: str) -> bool:
    """Return ``True`` when the path of ``url`` ends with ``.pdf`` (case-sensitive)."""
    if not url:
        return False
    return urlparse(url).path.endswith(".pdf")


def artifact_filename(
    file_url: str,
    document_type: str,
    permit_id: str,
    filing_date: Union[date, str],
) -> str:
    """Derive the stored name of a permit document.

    The last path segment of ``file_url`` loses its ``.pdf`` extension and
    is suffixed with the document type, permit id and ``YYYYMMDD`` filing date.

    Examples
    --------
    >>> artifact_filename(
    ...     "http://x/y/30025053060000_07_16_2019_03_01_48.pdf", "Tubing", "269757", "2019-07-16"
    ... )
    '30025053060000_07_16_2019_03_01_48_Tubing_269757_20190716.pdf'
    """
    basename = urlparse(file_url).path.split("/")[-1][:-4]
    return f"{basename}_{document_type}_{permit_id}_{format_filing_date(filing_date)}.pdf"


def well_artifact_filename(api: str, document_type: str, filing_id: str) -> str:
    """Derive the stored name of a well record document: ``<api>_<form>_<id>.pdf``."""
    return f"{api}_{document_type}_{filing_id}.pdf"


def storage_key(prefix: str, filename: str) -> str:
    """Join ``prefix`` and ``filename`` with exactly one ``/``."""
    return f"{prefix.rstrip('/')}/{filename}"


class ArtifactHandler:
    """Re-host PDF documents under a fixed key prefix.

    Parameters
    ----------
    fetcher : Fetcher
        Downloads the source PDFs.
    object_store : ObjectStore
        Receives the PDFs.
    bucket : str
        Destination bucket.
    prefix : str
        Fixed key prefix of the source.
    """

    def __init__(self, fetcher: Fetcher, object_store: ObjectStore, bucket: str, prefix: str) -> None:
        self.fetcher = fetcher
        self.object_store = object_store
        self.bucket = bucket
        self.prefix = prefix

    def key_for(self, filename: str) -> str:
        return storage_key(self.prefix, filename)

    def uri_for(self, filename: str) -> str:
        """Return the ``s3://`` URI recorded next to the structured record."""
        return f"s3://{self.bucket}/{self.key_for(filename)}"

    async def download(self, url: str) -> bytes:
        """Fetch ``url``; errors are logged and re-raised."""
        try:
            return await self.fetcher.get(url)
        except Exception as e:
            logging.exception("Download failed - %s:\n%s", url, e)
            raise

    def upload(self, data: bytes, filename: str) -> bool:
        """Store ``data`` under the prefix; errors are logged and swallowed.

        Returns
        -------
        bool
            ``True`` when the object was written.
        """
        key = self.key_for(filename)
        logging.info("Uploading to S3 - %s", key)
        try:
            self.object_store.put(self.bucket, key, data, PDF_CONTENT_TYPE)
            return True
        except Exception as e:
            logging.exception("Upload failed - %s:\n%s", key, e)
            return False
