"""Configuration module for the Wells Scraper.

This module defines application settings using Pydantic's settings management.
It loads environment variables via ``python-dotenv`` to simplify local development.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv


load_dotenv(override=True)


class Settings(BaseSettings):
    """
    Settings class for the Wells Scraper.

    Parameters
    ----------
    HEADLESS : bool, default=True
        Run the Chromium browser without a window.
    WAIT_TIMEOUT_MS : int, default=30000
        Upper bound for every wait-until-condition on the DOM.
    POLL_INTERVAL_MS : int, default=250
        Interval between two evaluations of a DOM predicate.
    DOWNLOAD_TIMEOUT_S : float, default=60.0
        Timeout for a single PDF download.
    S3_BUCKET : str, default="bucket"
        Bucket receiving the scraped PDF documents.
    AWS_REGION : Optional[str], default=None
        Region passed to the S3 client.
    S3_ENDPOINT_URL : Optional[str], default=None
        Custom S3 endpoint (e.g. MinIO); ``None`` uses AWS.
    DATA_DIR : Path
        Root directory for stored records and run logs.

    Returns
    -------
    Settings
        A validated settings object.

    See Also
    --------
    BaseSettings : Pydantic settings base class for environment variable loading.

    Examples
    --------
    >>> from wells_scraper.configs.settings import Settings
    >>> settings = Settings()
    >>> settings.S3_BUCKET
    'bucket'
    """

    HEADLESS: bool = Field(default=True, description="Run the browser headless")
    WAIT_TIMEOUT_MS: int = Field(default=30_000, description="Timeout for DOM wait conditions")
    POLL_INTERVAL_MS: int = Field(default=250, description="Polling interval for DOM wait conditions")
    DOWNLOAD_TIMEOUT_S: float = Field(default=60.0, description="Timeout for PDF downloads")
    S3_BUCKET: str = Field(default="bucket", description="Bucket receiving scraped documents")
    AWS_REGION: Optional[str] = Field(default=None, description="Region of the S3 bucket")
    S3_ENDPOINT_URL: Optional[str] = Field(default=None, description="Custom S3 endpoint URL")
    DATA_DIR: Path = Field(
        default=Path(__file__).resolve().parents[1] / "data",
        description="Root directory for stored records and run logs",
    )


# Create a global instance of the settings
app_config = Settings()
