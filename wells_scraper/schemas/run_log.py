"""Run log schemas.

This module defines the Pydantic model summarising a single scraper run.
"""

from typing import Optional

from pydantic import BaseModel, Field


class RunLog(BaseModel):
    """Summary of a scraper run.

    Parameters
    ----------
    region : str
        Region token of the scraper (e.g. ``"nm"``).
    source : str
        Source token of the scraper (e.g. ``"card_records"``).
    start_date : Optional[str], default=None
        Inclusive start of the searched date range, ``YYYY-MM-DD``.
    end_date : Optional[str], default=None
        Inclusive end of the searched date range, ``YYYY-MM-DD``.
    total_pages : int, default=0
        Number of result pages reported by the portal.
    total_documents : Optional[int], default=None
        Number of documents reported by the portal, when it shows one.
    pages_visited : int, default=0
        Number of result pages processed.
    query_records : int, default=0
        Row-level records written.
    enriched_records : int, default=0
        Enriched (card/well) records written.
    artifacts_uploaded : int, default=0
        PDFs stored in object storage.
    artifacts_failed : int, default=0
        PDFs whose download or upload failed without aborting the run.
    output_path : Optional[str], default=None
        Directory holding the enriched records.

    Examples
    --------
    >>> RunLog(region="ok", source="well_records", pages_visited=2)
    RunLog(region='ok', source='well_records', start_date=None, end_date=None, total_pages=0, total_documents=None, pages_visited=2, query_records=0, enriched_records=0, artifacts_uploaded=0, artifacts_failed=0, output_path=None)
    """

    region: str = Field(description="Region token")
    source: str = Field(description="Source token")
    start_date: Optional[str] = Field(default=None, description="Start date")
    end_date: Optional[str] = Field(default=None, description="End date")
    total_pages: int = Field(default=0, description="Pages reported by the portal")
    total_documents: Optional[int] = Field(default=None, description="Documents reported by the portal")
    pages_visited: int = Field(default=0, description="Pages processed")
    query_records: int = Field(default=0, description="Row-level records written")
    enriched_records: int = Field(default=0, description="Enriched records written")
    artifacts_uploaded: int = Field(default=0, description="PDFs uploaded")
    artifacts_failed: int = Field(default=0, description="PDFs not stored")
    output_path: Optional[str] = Field(default=None, description="Output path")
