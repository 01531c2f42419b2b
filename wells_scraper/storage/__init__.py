"""Storage collaborators: record store, object store and HTTP fetcher.

Exposes commonly used classes for convenient imports.
"""

from .fetcher import Fetcher, HttpxFetcher
from .object_store import ObjectStore, S3ObjectStore
from .record_store import JsonRecordStore, RecordStore

__all__ = [
    "Fetcher",
    "HttpxFetcher",
    "JsonRecordStore",
    "ObjectStore",
    "RecordStore",
    "S3ObjectStore",
]
