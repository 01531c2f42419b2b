"""Object storage for scraped PDF documents."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import boto3


class ObjectStore(ABC):
    """Put-only object storage."""

    @abstractmethod
    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        """Write ``data`` to ``bucket``/``key``."""


class S3ObjectStore(ObjectStore):
    """Amazon S3 (or S3-compatible) object store.

    Parameters
    ----------
    client : Optional[Any], default=None
        Pre-built ``boto3`` S3 client. A new one is created when omitted.
    region_name : Optional[str], default=None
        Region for the new client.
    endpoint_url : Optional[str], default=None
        Custom endpoint for the new client (e.g. MinIO).
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self._client = client or boto3.client("s3", region_name=region_name, endpoint_url=endpoint_url)

    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        self._client.put_object(Bucket=bucket, Key=key, Body=data, ContentType=content_type)
