"""Record schemas for scraped well and permit data.

This module defines Pydantic models for the records written to the record
store. Each model is created once per scraped row and is never updated.

Notes
-----
A Source A run writes two records per row: the row-level ``QueryRecord``
immediately after the results table is read, then the enriched
``CardRecord`` once the detail page and its PDF have been handled. The two
writes are not transactional. A run that aborts between them (for example
because the PDF download failed) leaves a ``QueryRecord`` without a matching
``CardRecord``; the pair is matched by ``QueryRecord.filing_id`` ==
``CardRecord.permit_id`` unless the detail page overrides the permit id.
"""

from datetime import date
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


DateOrEmpty = Union[date, Literal[""]]
"""A calendar date, or ``""`` when the source cell was blank."""


class QueryRecord(BaseModel):
    """Row of the New Mexico permit status results table.

    Parameters
    ----------
    filing_id : str
        Permit/filing identifier from the ``Id`` column.
    document_type : str
        Permit type from the ``Type`` column.
    document_comment : str
        Free text from the ``Description`` column; line breaks are kept.
    document_status : str
        Status from the ``Status`` column.
    scan_date : DateOrEmpty
        Parsed ``Status Date`` column.
    well_card_url : str
        Absolute URL of the row's detail page.

    Examples
    --------
    >>> QueryRecord(filing_id="269757", document_type="Tubing", document_status="APPROVED")
    QueryRecord(filing_id='269757', document_type='Tubing', document_comment='', document_status='APPROVED', scan_date='', well_card_url='')
    """

    filing_id: str = Field(default="", description="Filing identifier")
    document_type: str = Field(default="", description="Document type")
    document_comment: str = Field(default="", description="Free-text description")
    document_status: str = Field(default="", description="Document status")
    scan_date: DateOrEmpty = Field(default="", description="Status date")
    well_card_url: str = Field(default="", description="Detail page URL")

    model_config = ConfigDict(frozen=True)


class CardRecord(BaseModel):
    """Enriched New Mexico permit record (row data merged with its detail page).

    Parameters
    ----------
    permit_id : str
        ``Permit:`` label, falling back to the row's ``filing_id``.
    scan_date : DateOrEmpty
        ``Image Date:`` label, falling back to the row's ``scan_date``.
    operator_name : str
        ``Operator:`` or ``Current Operator:`` label.
    well_name_full : str
        Well name and number.
    location : str
        ``ULSTR:`` location descriptor.
    previous_name, new_name : str
        Name-change fields; empty for permits that are not name changes.
    effective_date : DateOrEmpty
        ``Effective Date:`` label.
    location_url : str
        First document link of the detail page.
    document_url : str
        ``s3://`` URI of the re-hosted PDF; empty when ``location_url`` is not a PDF.
        The object may be missing if its upload failed.
    scrape_url : str
        URL of the detail page the data was read from.
    well_files_url : str
        URL behind the "Well Files" button, or ``""`` when there is no button.
    """

    permit_id: str = Field(default="", description="Permit identifier")
    scan_date: DateOrEmpty = Field(default="", description="Image date")
    operator_name: str = Field(default="", description="Operator name")
    well_name_full: str = Field(default="", description="Well name and number")
    location: str = Field(default="", description="ULSTR location")
    previous_name: str = Field(default="", description="Previous name")
    new_name: str = Field(default="", description="New operator/name")
    effective_date: DateOrEmpty = Field(default="", description="Effective date")
    location_url: str = Field(default="", description="Source document URL")
    document_url: str = Field(default="", description="Stored document URI")
    scrape_url: str = Field(default="", description="Scraped page URL")
    well_files_url: str = Field(default="", description="Well files URL")

    model_config = ConfigDict(frozen=True)


class WellRecord(BaseModel):
    """Row of the Oklahoma well records imaging table.

    Parameters
    ----------
    filing_id : str
        ``ID`` column.
    document_type : str
        ``Form`` column.
    legal_location : str
        ``Legal_Location`` column.
    api : str
        ``API`` well number.
    well_name : str
        ``Well_Name`` column.
    operator_number : str
        ``Operator_#`` column; frequently blank.
    effective_date : DateOrEmpty
        ``Eff/Test_Date`` column.
    scan_date : DateOrEmpty
        ``ScanDate`` column.
    location_url : str
        Link of the first cell (the scanned PDF).
    document_url : str
        ``s3://`` URI of the re-hosted PDF; empty when ``location_url`` is not a PDF.
        The object may be missing if its download or upload failed.
    scrape_url : str
        URL of the results page the row was read from.
    """

    filing_id: str = Field(default="", description="Filing identifier")
    document_type: str = Field(default="", description="Form")
    legal_location: str = Field(default="", description="Legal location")
    api: str = Field(default="", description="API number")
    well_name: str = Field(default="", description="Well name")
    operator_number: str = Field(default="", description="Operator number")
    effective_date: DateOrEmpty = Field(default="", description="Effective/test date")
    scan_date: DateOrEmpty = Field(default="", description="Scan date")
    location_url: str = Field(default="", description="Source document URL")
    document_url: str = Field(default="", description="Stored document URI")
    scrape_url: str = Field(default="", description="Scraped page URL")

    model_config = ConfigDict(frozen=True)
