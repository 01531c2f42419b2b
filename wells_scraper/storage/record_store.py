"""Record stores.

The scrapers only need create/insert semantics: every record is written once
and never updated or deleted.
"""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping
from uuid import uuid4
import logging


class RecordStore(ABC):
    """Append-only store of flat records grouped by table name."""

    @abstractmethod
    def insert(self, table_name: str, fields: Mapping[str, Any]) -> str:
        """Persist ``fields`` into ``table_name`` and return the new record id."""


class JsonRecordStore(RecordStore):
    """Store each record as one JSON file under ``<root>/<table_name>/<id>.json``.

    Parameters
    ----------
    root : Path
        Directory holding one sub-directory per table.

    Notes
    -----
    Files are written to a temporary name in the same directory and then
    atomically replaced, so a crash never leaves a half-written record.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def table_dir(self, table_name: str) -> Path:
        """Return (and create) the directory of ``table_name``."""
        out_dir = self.root / table_name
        out_dir.mkdir(parents=True, exist_ok=True)
        return out_dir

    def insert(self, table_name: str, fields: Mapping[str, Any]) -> str:
        record_id = uuid4().hex
        out_dir = self.table_dir(table_name)

        payload = json.dumps(dict(fields), ensure_ascii=False, sort_keys=True, indent=2, default=str)

        tmp_path = out_dir / f".{record_id}.tmp"
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, out_dir / f"{record_id}.json")

        logging.debug("Inserted %s record %s", table_name, record_id)
        return record_id
