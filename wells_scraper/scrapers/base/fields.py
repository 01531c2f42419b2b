"""Field normalization: rename tables and date parsing.

Each portal labels its columns differently. A :class:`FieldMap` renames the
raw labels of one table onto the canonical fields of a record model and
drops everything it does not know about.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Iterable, Optional, Tuple, Type, Union

from pydantic import BaseModel, Field, model_validator

from wells_scraper.schemas.records import DateOrEmpty


class FieldMap(BaseModel):
    """Rename table from raw labels to canonical record fields.

    Parameters
    ----------
    name : str
        Name used in error messages.
    target : Type[BaseModel]
        Record model whose fields the canonical names must belong to.
    mapping : Dict[str, str]
        Raw label -> canonical field. Several labels may share a field.

    Raises
    ------
    ValueError
        If a canonical field does not exist on ``target``.

    Examples
    --------
    >>> from wells_scraper.schemas import QueryRecord
    >>> fm = FieldMap(name="demo", target=QueryRecord, mapping={"Id": "filing_id"})
    >>> fm.apply([("Id", "1"), ("Unknown", "x")])
    {'filing_id': '1'}
    """

    name: str
    target: Type[BaseModel]
    mapping: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_canonical_fields(self) -> "FieldMap":
        known = set(self.target.model_fields)
        unknown = sorted({v for v in self.mapping.values() if v not in known})
        if unknown:
            raise ValueError(
                f"Field map {self.name!r} targets unknown {self.target.__name__} fields: {unknown}"
            )
        return self

    @property
    def canonical_fields(self) -> Tuple[str, ...]:
        """Canonical fields in first-appearance order, without duplicates."""
        return tuple(dict.fromkeys(self.mapping.values()))

    def apply(self, pairs: Iterable[Tuple[str, str]]) -> Dict[str, str]:
        """Rename ``(label, value)`` pairs; unknown labels are dropped, last one wins."""
        out: Dict[str, str] = {}
        for label, value in pairs:
            key = self.mapping.get(label)
            if key is not None:
                out[key] = value
        return out


def clean_cell(value: Optional[str]) -> str:
    """Strip surrounding whitespace, keeping embedded line breaks."""
    if value is None:
        return ""
    return value.strip()


def squish(value: Optional[str]) -> str:
    """Collapse every whitespace run to a single space and strip."""
    if value is None:
        return ""
    return " ".join(value.split())


def parse_record_date(value: Optional[str]) -> DateOrEmpty:
    """Parse a portal date (``MM/DD/YYYY``, e.g. ``7/16/2019``).

    Parameters
    ----------
    value : Optional[str]
        Raw cell text.

    Returns
    -------
    DateOrEmpty
        The parsed date, or ``""`` for blank input.

    Raises
    ------
    ValueError
        If ``value`` is not blank and not a valid ``MM/DD/YYYY`` date.
    """
    if value is None or not value.strip():
        return ""
    try:
        return datetime.strptime(value.strip(), "%m/%d/%Y").date()
    except ValueError as exc:
        raise ValueError(f"Unsupported date format: {value!r} (expected MM/DD/YYYY)") from exc


def format_filing_date(value: Union[date, str, None]) -> str:
    """Format a filing date as ``YYYYMMDD`` for artifact filenames.

    Examples
    --------
    >>> format_filing_date(date(2019, 7, 16))
    '20190716'
    >>> format_filing_date("2019-07-16")
    '20190716'
    >>> format_filing_date("")
    ''
    """
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return value.strftime("%Y%m%d")
