"""Schema package for the wells scraper.

Exposes commonly used models for convenient imports.
"""

from .records import CardRecord, DateOrEmpty, QueryRecord, WellRecord
from .run_log import RunLog

__all__ = [
    "CardRecord",
    "DateOrEmpty",
    "QueryRecord",
    "RunLog",
    "WellRecord",
]
